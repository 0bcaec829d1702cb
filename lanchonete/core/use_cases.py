# lanchonete/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.

Padrão de cada operação: busca -> valida -> persiste -> loga.
NotFound e erros de regra de negócio sobem sem alteração; o restante é
logado com um código de erro e relançado.
"""
import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

# Entidades e Exceções
from lanchonete.core.entities import (
    Categoria, Produto, Cliente, Pedido, ItemPedido, ItemPedidoSolicitado,
    StatusPedido, StatusPagamento, Gatilho, TRANSICOES
)
from lanchonete.core.exceptions import (
    ItemNaoEncontradoError,
    CategoriaNaoEncontradaError,
    ProdutoNaoEncontradoError,
    ClienteNaoEncontradoError,
    PedidoNaoEncontradoError,
    DadosInvalidosError,
    ProdutoInativoError,
    CategoriaDuplicadaError,
    CategoriaVinculadaError,
    CpfDuplicadoError,
    ProdutoVinculadoAPedidoError,
    PedidoNaoPagoError,
)
from lanchonete.core.contexto import (
    ContextoLog, CATEGORIA_NEGOCIO, CATEGORIA_INTEGRACAO, contexto_ou_novo, operacao
)

# Portas (Interfaces) - Importadas do lanchonete/core/ports.py
from lanchonete.core.ports import (
    ICategoriaRepository,
    IProdutoRepository,
    IClienteRepository,
    IPedidoRepository,
    IGatewayPagamento,
    IProvedorIdentidade,
    IExecutorPosCommit,
)

logger = logging.getLogger(__name__)


def _duracao_ms(inicio: float) -> int:
    return int((time.monotonic() - inicio) * 1000)


# ====================================================================
# 1. CASOS DE USO DO CATÁLOGO
# ====================================================================

class CategoriaUseCase:
    """Cadastro de categorias do cardápio."""

    def __init__(self, categoria_repo: ICategoriaRepository, produto_repo: IProdutoRepository):
        self.categoria_repo = categoria_repo
        self.produto_repo = produto_repo

    def criar(self, nome: str, contexto: Optional[ContextoLog] = None) -> Categoria:
        log = contexto_ou_novo(contexto).para_operacao("CreateCategory", nome_categoria=nome).logger(logger)
        with operacao(log, "CATEGORY_CREATION_FAILED", "Failed to create category: name=%s", nome):
            log.info("Category creation started: name=%s", nome)

            if self.categoria_repo.existe_por_nome(nome):
                log.warning("Category creation failed - name already exists: name=%s", nome)
                raise CategoriaDuplicadaError(nome)

            categoria = self.categoria_repo.salvar(Categoria(nome=nome))
            log.info("Category created successfully: categoryId=%s, name=%s", categoria.id, nome)
            return categoria

    def atualizar(self, categoria_id: UUID, nome: str, contexto: Optional[ContextoLog] = None) -> Categoria:
        log = contexto_ou_novo(contexto).para_operacao(
            "UpdateCategory", categoria_id=categoria_id, nome_categoria=nome
        ).logger(logger)
        with operacao(log, "CATEGORY_UPDATE_FAILED", "Failed to update category: categoryId=%s", categoria_id):
            log.info("Category update started: categoryId=%s, newName=%s", categoria_id, nome)

            if not nome or not nome.strip():
                log.warning("Category update failed - name is blank: categoryId=%s", categoria_id)
                raise DadosInvalidosError("Category name cannot be blank.")

            categoria = self.categoria_repo.buscar_por_id(categoria_id)
            if not categoria:
                log.warning("Category update failed - not found: categoryId=%s", categoria_id)
                raise CategoriaNaoEncontradaError()

            if categoria.nome != nome and self.categoria_repo.existe_por_nome(nome):
                log.warning("Category update failed - name already exists: categoryId=%s, name=%s",
                            categoria_id, nome)
                raise CategoriaDuplicadaError(nome)

            categoria.nome = nome
            categoria = self.categoria_repo.salvar(categoria)
            log.info("Category updated successfully: categoryId=%s, name=%s", categoria_id, nome)
            return categoria

    def buscar_por_id(self, categoria_id: UUID, contexto: Optional[ContextoLog] = None) -> Categoria:
        log = contexto_ou_novo(contexto).para_operacao("FindCategoryById", categoria_id=categoria_id).logger(logger)
        with operacao(log, "CATEGORY_FIND_FAILED", "Failed to find category: categoryId=%s", categoria_id):
            categoria = self.categoria_repo.buscar_por_id(categoria_id)
            if not categoria:
                log.warning("Category not found: categoryId=%s", categoria_id)
                raise CategoriaNaoEncontradaError()

            log.info("Category found: categoryId=%s, name=%s", categoria_id, categoria.nome)
            return categoria

    def listar_todas(self, contexto: Optional[ContextoLog] = None) -> List[Categoria]:
        log = contexto_ou_novo(contexto).para_operacao("FindAllCategories").logger(logger)
        with operacao(log, "CATEGORY_LIST_FAILED", "Failed to list categories"):
            categorias = self.categoria_repo.listar_todas()
            log.info("Categories listed: count=%d", len(categorias))
            return categorias

    def deletar(self, categoria_id: UUID, contexto: Optional[ContextoLog] = None) -> None:
        log = contexto_ou_novo(contexto).para_operacao("DeleteCategory", categoria_id=categoria_id).logger(logger)
        with operacao(log, "CATEGORY_DELETION_FAILED", "Failed to delete category: categoryId=%s", categoria_id):
            log.info("Category deletion started: categoryId=%s", categoria_id)

            if not self.categoria_repo.buscar_por_id(categoria_id):
                log.warning("Category deletion failed - not found: categoryId=%s", categoria_id)
                raise CategoriaNaoEncontradaError()

            produtos = self.produto_repo.buscar_por_categoria(categoria_id)
            if produtos:
                log.warning("Category deletion failed - linked to products: categoryId=%s, productsCount=%d",
                            categoria_id, len(produtos))
                raise CategoriaVinculadaError()

            self.categoria_repo.deletar_por_id(categoria_id)
            log.info("Category deleted successfully: categoryId=%s", categoria_id)


class ProdutoUseCase:
    """Cadastro de produtos. Produtos já vendidos não podem ser removidos."""

    def __init__(
        self,
        produto_repo: IProdutoRepository,
        categoria_repo: ICategoriaRepository,
        pedido_repo: IPedidoRepository,
    ):
        self.produto_repo = produto_repo
        self.categoria_repo = categoria_repo
        self.pedido_repo = pedido_repo

    def criar(
        self,
        nome: str,
        descricao: str,
        preco: Decimal,
        categoria_id: UUID,
        contexto: Optional[ContextoLog] = None,
    ) -> Produto:
        log = contexto_ou_novo(contexto).para_operacao(
            "CreateProduct", categoria_id=categoria_id, nome_produto=nome
        ).logger(logger)
        with operacao(log, "PRODUCT_CREATION_FAILED", "Failed to create product: name=%s", nome):
            log.info("Product creation started: name=%s, categoryId=%s, price=%s", nome, categoria_id, preco)

            categoria = self.categoria_repo.buscar_por_id(categoria_id)
            if not categoria:
                log.warning("Product creation failed - category not found: categoryId=%s", categoria_id)
                raise CategoriaNaoEncontradaError()

            produto = self.produto_repo.salvar(
                Produto(nome=nome, descricao=descricao, preco=preco, categoria=categoria, ativo=True)
            )
            log.info("Product created successfully: productId=%s, name=%s", produto.id, nome,
                     extra={"produto_id": str(produto.id)})
            return produto

    def buscar_por_id(self, produto_id: UUID, contexto: Optional[ContextoLog] = None) -> Produto:
        log = contexto_ou_novo(contexto).para_operacao("FindProductById", produto_id=produto_id).logger(logger)
        with operacao(log, "PRODUCT_FIND_FAILED", "Failed to find product: productId=%s", produto_id):
            produto = self.produto_repo.buscar_por_id(produto_id)
            if not produto:
                log.warning("Product not found: productId=%s", produto_id)
                raise ProdutoNaoEncontradoError("Record not found")

            log.info("Product found: productId=%s, name=%s", produto_id, produto.nome)
            return produto

    def buscar_por_nome(self, nome: str, contexto: Optional[ContextoLog] = None) -> List[Produto]:
        log = contexto_ou_novo(contexto).para_operacao("FindProductsByName").logger(logger)
        with operacao(log, "PRODUCT_SEARCH_FAILED", "Failed to find products by name: name=%s", nome):
            produtos = self.produto_repo.buscar_por_nome(nome)
            log.info("Products found by name: name=%s, count=%d", nome, len(produtos))
            return produtos

    def listar_todos(self, contexto: Optional[ContextoLog] = None) -> List[Produto]:
        log = contexto_ou_novo(contexto).para_operacao("FindAllProducts").logger(logger)
        with operacao(log, "PRODUCT_LIST_FAILED", "Failed to list all products"):
            produtos = self.produto_repo.listar_todos()
            log.info("All products listed: count=%d", len(produtos))
            return produtos

    def buscar_por_categoria(self, categoria_id: UUID, contexto: Optional[ContextoLog] = None) -> List[Produto]:
        log = contexto_ou_novo(contexto).para_operacao(
            "FindProductsByCategory", categoria_id=categoria_id
        ).logger(logger)
        with operacao(log, "PRODUCT_SEARCH_FAILED", "Failed to find products by category: categoryId=%s",
                      categoria_id):
            produtos = self.produto_repo.buscar_por_categoria(categoria_id)
            log.info("Products found by category: categoryId=%s, count=%d", categoria_id, len(produtos))
            return produtos

    def atualizar(
        self,
        produto_id: UUID,
        nome: Optional[str] = None,
        descricao: Optional[str] = None,
        preco: Optional[Decimal] = None,
        categoria_id: Optional[UUID] = None,
        ativo: Optional[bool] = None,
        contexto: Optional[ContextoLog] = None,
    ) -> Produto:
        """Atualização parcial: apenas os campos informados são alterados."""
        log = contexto_ou_novo(contexto).para_operacao("UpdateProduct", produto_id=produto_id).logger(logger)
        with operacao(log, "PRODUCT_UPDATE_FAILED", "Failed to update product: productId=%s", produto_id):
            log.info("Product update started: productId=%s", produto_id)

            produto = self.produto_repo.buscar_por_id(produto_id)
            if not produto:
                log.warning("Product update failed - not found: productId=%s", produto_id)
                raise ProdutoNaoEncontradoError("Record not found")

            categoria = None
            if categoria_id is not None:
                categoria = self.categoria_repo.buscar_por_id(categoria_id)
                if not categoria:
                    log.warning("Product update failed - category not found: categoryId=%s", categoria_id)
                    raise CategoriaNaoEncontradaError("Record not found")

            produto.atualizar(nome=nome, descricao=descricao, preco=preco, categoria=categoria, ativo=ativo)
            produto = self.produto_repo.salvar(produto)
            log.info("Product updated successfully: productId=%s, name=%s", produto_id, produto.nome)
            return produto

    def deletar(self, produto_id: UUID, contexto: Optional[ContextoLog] = None) -> None:
        log = contexto_ou_novo(contexto).para_operacao("DeleteProduct", produto_id=produto_id).logger(logger)
        with operacao(log, "PRODUCT_DELETION_FAILED", "Failed to delete product: productId=%s", produto_id):
            log.info("Product deletion started: productId=%s", produto_id)

            if not self.produto_repo.buscar_por_id(produto_id):
                log.warning("Product deletion failed - not found: productId=%s", produto_id)
                raise ProdutoNaoEncontradoError("Record not found")

            if self.pedido_repo.existe_por_produto(produto_id):
                log.warning("Product deletion failed - linked to orders: productId=%s", produto_id)
                raise ProdutoVinculadoAPedidoError()

            self.produto_repo.deletar_por_id(produto_id)
            log.info("Product deleted successfully: productId=%s", produto_id)


# ====================================================================
# 2. CASO DE USO DE CLIENTES
# ====================================================================

class ClienteUseCase:
    """
    Cadastro de clientes.

    O registro no banco é a fonte da verdade. O usuário no provedor de
    identidade é criado por uma tarefa pós-commit: se ela falhar, o cliente
    continua cadastrado e a falha fica apenas no log.
    """

    def __init__(
        self,
        cliente_repo: IClienteRepository,
        provedor_identidade: IProvedorIdentidade,
        executor_pos_commit: IExecutorPosCommit,
    ):
        self.cliente_repo = cliente_repo
        self.provedor_identidade = provedor_identidade
        self.executor_pos_commit = executor_pos_commit

    def registrar(self, nome: str, email: str, cpf: str, contexto: Optional[ContextoLog] = None) -> Cliente:
        inicio = time.monotonic()
        contexto = contexto_ou_novo(contexto).para_operacao("RegisterCustomer", cpf=cpf, email=email)
        log = contexto.logger(logger)
        with operacao(log, "CUSTOMER_REGISTRATION_FAILED", "Failed to register customer: cpf=%s, email=%s",
                      cpf, email):
            log.info("Customer registration started: cpf=%s, email=%s", cpf, email)

            if self.cliente_repo.existe_por_cpf(cpf):
                log.warning("Customer registration failed - CPF already exists: cpf=%s", cpf)
                raise CpfDuplicadoError(cpf)

            cliente = self.cliente_repo.salvar(Cliente(nome=nome, email=email, cpf=cpf))
            contexto = contexto.com(cliente_id=cliente.id)

            self.executor_pos_commit.agendar(
                "provisionar_usuario_identidade",
                lambda: self.provedor_identidade.criar_usuario(cpf, email, nome),
                contexto,
            )

            contexto.logger(logger).info(
                "Customer registered successfully: customerId=%s, cpf=%s", cliente.id, cpf,
                extra={"duracao_ms": _duracao_ms(inicio)},
            )
            return cliente

    def buscar_por_cpf(self, cpf: str, contexto: Optional[ContextoLog] = None) -> Cliente:
        log = contexto_ou_novo(contexto).para_operacao("FindCustomerByCpf", cpf=cpf).logger(logger)
        with operacao(log, "CUSTOMER_FIND_FAILED", "Failed to find customer by CPF: cpf=%s", cpf):
            cliente = self.cliente_repo.buscar_por_cpf(cpf)
            if not cliente:
                log.warning("Customer not found by CPF: cpf=%s", cpf)
                raise ClienteNaoEncontradoError("Record not found")

            log.info("Customer found by CPF: customerId=%s, cpf=%s", cliente.id, cpf)
            return cliente

    def buscar_por_id(self, cliente_id: UUID, contexto: Optional[ContextoLog] = None) -> Cliente:
        log = contexto_ou_novo(contexto).para_operacao("FindCustomerById", cliente_id=cliente_id).logger(logger)
        with operacao(log, "CUSTOMER_FIND_FAILED", "Failed to find customer by ID: customerId=%s", cliente_id):
            cliente = self.cliente_repo.buscar_por_id(cliente_id)
            if not cliente:
                log.warning("Customer not found by ID: customerId=%s", cliente_id)
                raise ClienteNaoEncontradoError("Record not found")

            log.info("Customer found by ID: customerId=%s", cliente_id)
            return cliente

    def listar_todos(self, contexto: Optional[ContextoLog] = None) -> List[Cliente]:
        log = contexto_ou_novo(contexto).para_operacao("FindAllCustomers").logger(logger)
        with operacao(log, "CUSTOMER_LIST_FAILED", "Failed to list customers"):
            clientes = self.cliente_repo.listar_todos()
            log.info("Customers listed: count=%d", len(clientes))
            return clientes


# ====================================================================
# 3. CASOS DE USO DE PEDIDO E PAGAMENTO
# ====================================================================

DESCRICAO_PAGAMENTO = "Pagamento para o pedido"
METODO_PAGAMENTO = "pix"
PARCELAS_PAGAMENTO = 1
TIPO_IDENTIFICACAO = "CPF"


def aplicar_transicao(
    pedido: Pedido,
    gatilho: Gatilho,
    novo_status: Optional[StatusPedido] = None,
    novo_status_pagamento: Optional[StatusPagamento] = None,
) -> Pedido:
    """Aplica ao pedido a regra da tabela TRANSICOES para o gatilho informado."""
    regra = TRANSICOES[gatilho]

    if regra.exige_pagamento_aprovado and pedido.status_pagamento != StatusPagamento.APROVADO:
        raise PedidoNaoPagoError()

    if novo_status_pagamento is not None:
        pedido.status_pagamento = novo_status_pagamento
    pedido.status = regra.status_destino or novo_status
    pedido.atualizado_em = datetime.now()
    return pedido


class PedidoUseCase:
    """
    Caso de Uso que coordena o ciclo de vida do pedido:
    validação dos itens, snapshot de preços, ordem de pagamento e status.
    """

    def __init__(
        self,
        pedido_repo: IPedidoRepository,
        cliente_repo: IClienteRepository,
        produto_repo: IProdutoRepository,
        pagamento_gateway: IGatewayPagamento,
    ):
        self.pedido_repo = pedido_repo
        self.cliente_repo = cliente_repo
        self.produto_repo = produto_repo
        self.pagamento_gateway = pagamento_gateway

    def criar(
        self,
        cliente_id: Optional[UUID],
        itens: List[ItemPedidoSolicitado],
        contexto: Optional[ContextoLog] = None,
    ) -> Pedido:
        """Cria o pedido. Nada é persistido se a validação ou o pagamento falharem."""
        inicio = time.monotonic()
        contexto = contexto_ou_novo(contexto).para_operacao("CreateOrder", cliente_id=cliente_id)
        log = contexto.logger(logger)
        try:
            with operacao(log, "ORDER_CREATION_FAILED", "Failed to create order"):
                log.info("Order creation started: items=%d", len(itens))

                cliente = self._buscar_cliente(cliente_id)
                itens_pedido = self._validar_itens(itens)

                pedido = Pedido.criar(cliente, itens_pedido)
                pedido.status = StatusPedido.RECEIVED
                pedido.status_pagamento = StatusPagamento.AGUARDANDO_PAGAMENTO
                pedido.id_pagamento_externo = self._criar_ordem_pagamento(pedido, cliente)

                pedido = self.pedido_repo.salvar(pedido)
        except ItemNaoEncontradoError as e:
            log.warning("Order creation failed - resource not found: %s", e)
            raise
        except DadosInvalidosError as e:
            log.warning("Order creation failed - validation error: %s", e)
            raise
        except ProdutoInativoError as e:
            log.warning("Order creation failed - validation error: %s", e)
            raise

        log.info(
            "Order created successfully: orderId=%s, totalAmount=%s, items=%d",
            pedido.id, pedido.valor_total, len(pedido.itens),
            extra={"pedido_id": str(pedido.id), "valor_total": str(pedido.valor_total),
                   "duracao_ms": _duracao_ms(inicio)},
        )
        return pedido

    def _buscar_cliente(self, cliente_id: Optional[UUID]) -> Optional[Cliente]:
        if cliente_id is None:
            return None
        cliente = self.cliente_repo.buscar_por_id(cliente_id)
        if not cliente:
            raise ClienteNaoEncontradoError()
        return cliente

    def _validar_itens(self, itens: List[ItemPedidoSolicitado]) -> List[ItemPedido]:
        itens_pedido = []
        for solicitado in itens:
            if solicitado.quantidade is None or solicitado.quantidade <= 0:
                raise DadosInvalidosError("Quantity must be greater than zero")

            produto = self.produto_repo.buscar_por_id(solicitado.produto_id)
            if not produto:
                raise ProdutoNaoEncontradoError()
            if not produto.ativo:
                raise ProdutoInativoError(produto.nome)

            itens_pedido.append(ItemPedido.criar(produto, solicitado.quantidade))
        return itens_pedido

    def _criar_ordem_pagamento(self, pedido: Pedido, cliente: Optional[Cliente]) -> int:
        return self.pagamento_gateway.criar_ordem_pagamento(
            valor=pedido.valor_total,
            descricao=DESCRICAO_PAGAMENTO,
            metodo=METODO_PAGAMENTO,
            parcelas=PARCELAS_PAGAMENTO,
            email=cliente.email if cliente else None,
            tipo_identificacao=TIPO_IDENTIFICACAO,
            cpf=cliente.cpf if cliente else None,
        )

    def buscar_por_id(self, pedido_id: int, contexto: Optional[ContextoLog] = None) -> Pedido:
        log = contexto_ou_novo(contexto).para_operacao("FindOrderById", pedido_id=pedido_id).logger(logger)
        with operacao(log, "ORDER_FIND_FAILED", "Failed to find order: orderId=%s", pedido_id):
            pedido = self.pedido_repo.buscar_por_id(pedido_id)
            if not pedido:
                log.warning("Order not found: orderId=%s", pedido_id)
                raise PedidoNaoEncontradoError()

            log.info("Order found: orderId=%s, status=%s", pedido_id, pedido.status.value)
            return pedido

    def listar(self, status: Optional[StatusPedido] = None, contexto: Optional[ContextoLog] = None) -> List[Pedido]:
        log = contexto_ou_novo(contexto).para_operacao(
            "FindOrdersByStatus", status=status.value if status else None
        ).logger(logger)
        with operacao(log, "ORDER_LIST_FAILED", "Failed to list orders by status: status=%s", status):
            pedidos = self.pedido_repo.listar(status)
            log.info("Orders found: status=%s, count=%d", status.value if status else None, len(pedidos))
            return pedidos

    def atualizar_status(
        self, pedido_id: int, novo_status: StatusPedido, contexto: Optional[ContextoLog] = None
    ) -> Pedido:
        """Mudança manual de status: só é permitida para pedidos com pagamento aprovado."""
        log = contexto_ou_novo(contexto).para_operacao(
            "UpdateOrderStatus", pedido_id=pedido_id, novo_status=novo_status.value
        ).logger(logger)
        with operacao(log, "ORDER_STATUS_UPDATE_FAILED", "Failed to update order status: orderId=%s, newStatus=%s",
                      pedido_id, novo_status.value):
            pedido = self.pedido_repo.buscar_por_id(pedido_id)
            if not pedido:
                log.warning("Order not found for status update: orderId=%s", pedido_id)
                raise PedidoNaoEncontradoError()

            status_anterior = pedido.status
            try:
                aplicar_transicao(pedido, Gatilho.MANUAL, novo_status=novo_status)
            except PedidoNaoPagoError:
                log.warning("Order status update failed - payment not approved: orderId=%s, paymentStatus=%s",
                            pedido_id, pedido.status_pagamento.value)
                raise

            pedido = self.pedido_repo.salvar(pedido)
            log.info("Order status updated: orderId=%s, oldStatus=%s, newStatus=%s",
                     pedido_id, status_anterior.value, novo_status.value)
            return pedido

    def enviar_para_preparo(self, pedido_id: int, contexto: Optional[ContextoLog] = None) -> Pedido:
        """Transição administrativa para IN_PREPARATION, sem checar o pagamento."""
        log = contexto_ou_novo(contexto).para_operacao(
            "UpdateOrderToInPreparation", pedido_id=pedido_id
        ).logger(logger)
        with operacao(log, "ORDER_STATUS_UPDATE_FAILED", "Failed to update order to preparation: orderId=%s",
                      pedido_id):
            pedido = self.pedido_repo.buscar_por_id(pedido_id)
            if not pedido:
                log.warning("Order not found for status update: orderId=%s", pedido_id)
                raise PedidoNaoEncontradoError()

            status_anterior = pedido.status
            aplicar_transicao(pedido, Gatilho.ENVIO_PARA_PREPARO)
            pedido = self.pedido_repo.salvar(pedido)
            log.info("Order moved to preparation: orderId=%s, oldStatus=%s", pedido_id, status_anterior.value)
            return pedido

    def atualizar_status_pagamento(
        self,
        id_pagamento_externo: int,
        novo_status_pagamento: StatusPagamento,
        contexto: Optional[ContextoLog] = None,
        categoria_log: str = CATEGORIA_NEGOCIO,
    ) -> Pedido:
        """
        Atualiza o pagamento pelo id externo e leva o pedido para IN_PREPARATION.

        `categoria_log` permite que a notificação de pagamento mantenha os
        registros marcados como INTEGRATION.
        """
        log = contexto_ou_novo(contexto).para_operacao(
            "UpdateOrderPaymentStatus",
            categoria_log,
            pagamento_id=id_pagamento_externo,
            status_pagamento=novo_status_pagamento.value,
        ).logger(logger)
        with operacao(log, "ORDER_PAYMENT_UPDATE_FAILED",
                      "Failed to update order payment status: paymentId=%s, paymentStatus=%s",
                      id_pagamento_externo, novo_status_pagamento.value):
            pedido = self.pedido_repo.buscar_por_id_pagamento(id_pagamento_externo)
            if not pedido:
                log.warning("Order not found for payment update: paymentId=%s", id_pagamento_externo)
                raise PedidoNaoEncontradoError()

            status_pagamento_anterior = pedido.status_pagamento
            aplicar_transicao(pedido, Gatilho.PAGAMENTO, novo_status_pagamento=novo_status_pagamento)
            pedido = self.pedido_repo.salvar(pedido)
            log.info(
                "Order payment status updated: paymentId=%s, orderId=%s, oldPaymentStatus=%s, newPaymentStatus=%s",
                id_pagamento_externo, pedido.id, status_pagamento_anterior.value, novo_status_pagamento.value,
            )
            return pedido


class NotificacaoPagamentoUseCase:
    """
    Use Case para a notificação de pagamento aprovado (Webhook/IPN).

    Quem chama é externo e espera apenas a confirmação de recebimento:
    nenhuma exceção é propagada.
    """

    def __init__(self, pedido_use_case: PedidoUseCase):
        self.pedido_use_case = pedido_use_case

    def processar(self, id_pagamento_externo: int, contexto: Optional[ContextoLog] = None) -> None:
        contexto = contexto_ou_novo(contexto).para_operacao(
            "HandlePaymentNotification", CATEGORIA_INTEGRACAO, pagamento_id=id_pagamento_externo
        )
        log = contexto.logger(logger)
        try:
            log.info("Payment notification received: paymentId=%s", id_pagamento_externo)
            self.pedido_use_case.atualizar_status_pagamento(
                id_pagamento_externo, StatusPagamento.APROVADO, contexto,
                categoria_log=CATEGORIA_INTEGRACAO,
            )
            log.info("Payment notification processed successfully: paymentId=%s", id_pagamento_externo)
        except Exception as e:
            log.error("Failed to process payment notification: paymentId=%s", id_pagamento_externo,
                      exc_info=True,
                      extra={"erro_codigo": "PAYMENT_NOTIFICATION_FAILED", "erro_mensagem": str(e)})
