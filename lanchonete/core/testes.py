# lanchonete/core/testes.py

import logging
import unittest
from unittest.mock import Mock
from decimal import Decimal
import uuid

# Importamos as classes que queremos testar
from lanchonete.core.use_cases import (
    CategoriaUseCase, ProdutoUseCase, ClienteUseCase, PedidoUseCase,
    NotificacaoPagamentoUseCase, aplicar_transicao
)
from lanchonete.core.entities import (
    Categoria, Produto, Cliente, Pedido, ItemPedido, ItemPedidoSolicitado,
    StatusPedido, StatusPagamento, Gatilho
)
from lanchonete.core.exceptions import (
    ItemNaoEncontradoError, RegraNegocioError, ConflitoError,
    CategoriaNaoEncontradaError, ProdutoNaoEncontradoError, ClienteNaoEncontradoError,
    PedidoNaoEncontradoError, DadosInvalidosError, ProdutoInativoError,
    CategoriaDuplicadaError, CategoriaVinculadaError, CpfDuplicadoError,
    ProdutoVinculadoAPedidoError, PedidoNaoPagoError, PagamentoFalhouError,
    ProvedorIdentidadeError
)
from lanchonete.core.contexto import ContextoLog, operacao
from lanchonete.core.tarefas import ExecutorPosCommitImediato, executar_isolado


def _devolve(entidade):
    return entidade


# ====================================================================
# CATEGORIAS
# ====================================================================
class TestCategoriaUseCase(unittest.TestCase):

    def setUp(self):
        self.categoria_repo_mock = Mock()
        self.produto_repo_mock = Mock()
        self.categoria_repo_mock.salvar.side_effect = _devolve

        self.use_case = CategoriaUseCase(
            categoria_repo=self.categoria_repo_mock,
            produto_repo=self.produto_repo_mock
        )
        self.lanche = Categoria(nome='Lanche')

    def test_criar_categoria_com_sucesso(self):
        """
        Cenário: nome novo é salvo e devolvido com um UUID.
        """
        # ARRANGE
        self.categoria_repo_mock.existe_por_nome.return_value = False

        # ACT
        categoria = self.use_case.criar('Bebida')

        # ASSERT
        self.assertEqual(categoria.nome, 'Bebida')
        self.assertIsInstance(categoria.id, uuid.UUID)
        self.categoria_repo_mock.salvar.assert_called_once_with(categoria)

    def test_criar_categoria_com_nome_duplicado_falha(self):
        self.categoria_repo_mock.existe_por_nome.return_value = True

        with self.assertRaises(CategoriaDuplicadaError) as ctx:
            self.use_case.criar('Lanche')

        self.assertEqual(str(ctx.exception), 'Category with name Lanche already exists')
        self.assertIsInstance(ctx.exception, ConflitoError)
        self.categoria_repo_mock.salvar.assert_not_called()

    def test_deletar_categoria_vinculada_a_produto_falha(self):
        """
        Cenário: categoria com pelo menos um produto não pode ser removida.
        """
        self.categoria_repo_mock.buscar_por_id.return_value = self.lanche
        self.produto_repo_mock.buscar_por_categoria.return_value = [
            Produto(nome='X-Burger', descricao='', preco=Decimal('20.00'), categoria=self.lanche)
        ]

        with self.assertRaises(CategoriaVinculadaError):
            self.use_case.deletar(self.lanche.id)

        self.categoria_repo_mock.deletar_por_id.assert_not_called()

    def test_deletar_categoria_sem_produtos(self):
        self.categoria_repo_mock.buscar_por_id.return_value = self.lanche
        self.produto_repo_mock.buscar_por_categoria.return_value = []

        self.use_case.deletar(self.lanche.id)

        self.categoria_repo_mock.deletar_por_id.assert_called_once_with(self.lanche.id)

    def test_deletar_categoria_inexistente_falha(self):
        self.categoria_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(CategoriaNaoEncontradaError):
            self.use_case.deletar(uuid.uuid4())

    def test_buscar_categoria_inexistente_falha(self):
        self.categoria_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(ItemNaoEncontradoError):
            self.use_case.buscar_por_id(uuid.uuid4())

    def test_atualizar_categoria_com_nome_em_branco_falha(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.atualizar(self.lanche.id, '   ')

        self.categoria_repo_mock.salvar.assert_not_called()

    def test_atualizar_categoria(self):
        self.categoria_repo_mock.buscar_por_id.return_value = self.lanche
        self.categoria_repo_mock.existe_por_nome.return_value = False

        categoria = self.use_case.atualizar(self.lanche.id, 'Lanches')

        self.assertEqual(categoria.nome, 'Lanches')
        self.assertEqual(categoria.id, self.lanche.id)

    def test_atualizar_categoria_para_nome_de_outra_falha(self):
        """
        Cenário: 'Lanche' já existe; renomear 'Bebida' para 'Lanche' é conflito.
        """
        self.categoria_repo_mock.buscar_por_id.return_value = Categoria(nome='Bebida')
        self.categoria_repo_mock.existe_por_nome.return_value = True

        with self.assertRaises(CategoriaDuplicadaError):
            self.use_case.atualizar(uuid.uuid4(), 'Lanche')

        self.categoria_repo_mock.salvar.assert_not_called()

    def test_atualizar_categoria_com_o_proprio_nome(self):
        self.categoria_repo_mock.buscar_por_id.return_value = self.lanche
        self.categoria_repo_mock.existe_por_nome.return_value = True

        categoria = self.use_case.atualizar(self.lanche.id, 'Lanche')

        self.assertEqual(categoria.nome, 'Lanche')
        self.categoria_repo_mock.salvar.assert_called_once_with(self.lanche)

    def test_listar_categorias_vazio_nao_falha(self):
        self.categoria_repo_mock.listar_todas.return_value = []

        self.assertEqual(self.use_case.listar_todas(), [])


# ====================================================================
# PRODUTOS
# ====================================================================
class TestProdutoUseCase(unittest.TestCase):

    def setUp(self):
        self.produto_repo_mock = Mock()
        self.categoria_repo_mock = Mock()
        self.pedido_repo_mock = Mock()
        self.produto_repo_mock.salvar.side_effect = _devolve

        self.use_case = ProdutoUseCase(
            produto_repo=self.produto_repo_mock,
            categoria_repo=self.categoria_repo_mock,
            pedido_repo=self.pedido_repo_mock
        )
        self.lanche = Categoria(nome='Lanche')
        self.bebida = Categoria(nome='Bebida')
        self.produto = Produto(
            nome='X-Salada', descricao='Pão, carne e salada',
            preco=Decimal('22.50'), categoria=self.lanche
        )

    def test_criar_produto_ativo(self):
        self.categoria_repo_mock.buscar_por_id.return_value = self.lanche

        produto = self.use_case.criar('X-Bacon', 'Com bacon', Decimal('25.00'), self.lanche.id)

        self.assertTrue(produto.ativo)
        self.assertEqual(produto.categoria, self.lanche)
        self.produto_repo_mock.salvar.assert_called_once()

    def test_criar_produto_com_categoria_inexistente_falha(self):
        self.categoria_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(CategoriaNaoEncontradaError):
            self.use_case.criar('X-Bacon', 'Com bacon', Decimal('25.00'), uuid.uuid4())

        self.produto_repo_mock.salvar.assert_not_called()

    def test_buscar_produto_inexistente_falha(self):
        self.produto_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.buscar_por_id(uuid.uuid4())

    def test_atualizacao_parcial_mantem_campos_nao_informados(self):
        """
        Cenário: só o preço e o status 'ativo' são enviados.
        """
        self.produto_repo_mock.buscar_por_id.return_value = self.produto

        produto = self.use_case.atualizar(self.produto.id, preco=Decimal('24.00'), ativo=False)

        self.assertEqual(produto.preco, Decimal('24.00'))
        self.assertFalse(produto.ativo)
        self.assertEqual(produto.nome, 'X-Salada')
        self.assertEqual(produto.categoria, self.lanche)
        self.categoria_repo_mock.buscar_por_id.assert_not_called()

    def test_atualizar_troca_categoria(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.categoria_repo_mock.buscar_por_id.return_value = self.bebida

        produto = self.use_case.atualizar(self.produto.id, categoria_id=self.bebida.id)

        self.assertEqual(produto.categoria, self.bebida)

    def test_atualizar_com_categoria_inexistente_falha(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.categoria_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(CategoriaNaoEncontradaError):
            self.use_case.atualizar(self.produto.id, categoria_id=uuid.uuid4())

        self.produto_repo_mock.salvar.assert_not_called()

    def test_deletar_produto_vinculado_a_pedido_falha(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.pedido_repo_mock.existe_por_produto.return_value = True

        with self.assertRaises(ProdutoVinculadoAPedidoError):
            self.use_case.deletar(self.produto.id)

        self.produto_repo_mock.deletar_por_id.assert_not_called()

    def test_deletar_produto_sem_pedidos(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.pedido_repo_mock.existe_por_produto.return_value = False

        self.use_case.deletar(self.produto.id)

        self.produto_repo_mock.deletar_por_id.assert_called_once_with(self.produto.id)

    def test_erro_inesperado_e_relancado_com_o_tipo_original(self):
        self.produto_repo_mock.listar_todos.side_effect = RuntimeError('banco fora do ar')

        with self.assertLogs('lanchonete.core.use_cases', level='ERROR') as logs:
            with self.assertRaises(RuntimeError):
                self.use_case.listar_todos()

        self.assertEqual(logs.records[0].erro_codigo, 'PRODUCT_LIST_FAILED')
        self.assertEqual(logs.records[0].operacao, 'FindAllProducts')


# ====================================================================
# CLIENTES
# ====================================================================
class TestClienteUseCase(unittest.TestCase):

    def setUp(self):
        self.cliente_repo_mock = Mock()
        self.provedor_mock = Mock()
        self.cliente_repo_mock.salvar.side_effect = _devolve

        self.use_case = ClienteUseCase(
            cliente_repo=self.cliente_repo_mock,
            provedor_identidade=self.provedor_mock,
            executor_pos_commit=ExecutorPosCommitImediato()
        )

    def test_registrar_cliente_provisiona_identidade(self):
        self.cliente_repo_mock.existe_por_cpf.return_value = False

        cliente = self.use_case.registrar('Maria', 'maria@example.com', '12345678900')

        self.assertEqual(cliente.cpf, '12345678900')
        self.provedor_mock.criar_usuario.assert_called_once_with('12345678900', 'maria@example.com', 'Maria')

    def test_falha_no_provedor_nao_desfaz_o_cadastro(self):
        """
        Cenário: o provedor de identidade falha depois que o cliente foi salvo.
        """
        self.cliente_repo_mock.existe_por_cpf.return_value = False
        self.provedor_mock.criar_usuario.side_effect = ProvedorIdentidadeError('fora do ar')

        with self.assertLogs('lanchonete.core.tarefas', level='ERROR') as logs:
            cliente = self.use_case.registrar('Maria', 'maria@example.com', '12345678900')

        self.assertEqual(cliente.nome, 'Maria')
        self.cliente_repo_mock.salvar.assert_called_once()
        self.assertEqual(logs.records[0].erro_codigo, 'POST_COMMIT_TASK_FAILED')
        self.assertEqual(logs.records[0].cliente_id, str(cliente.id))

    def test_cpf_duplicado_falha_sem_chamar_o_provedor(self):
        self.cliente_repo_mock.existe_por_cpf.return_value = True

        with self.assertRaises(CpfDuplicadoError) as ctx:
            self.use_case.registrar('Maria', 'maria@example.com', '12345678900')

        self.assertEqual(str(ctx.exception), 'Customer with CPF 12345678900 already exists')
        self.cliente_repo_mock.salvar.assert_not_called()
        self.provedor_mock.criar_usuario.assert_not_called()

    def test_registro_agenda_tarefa_pos_commit(self):
        executor_mock = Mock()
        use_case = ClienteUseCase(self.cliente_repo_mock, self.provedor_mock, executor_mock)
        self.cliente_repo_mock.existe_por_cpf.return_value = False

        use_case.registrar('João', 'joao@example.com', '98765432100')

        executor_mock.agendar.assert_called_once()
        nome, tarefa, contexto = executor_mock.agendar.call_args[0]
        self.assertEqual(nome, 'provisionar_usuario_identidade')
        # Só é executada pelo executor
        self.provedor_mock.criar_usuario.assert_not_called()
        tarefa()
        self.provedor_mock.criar_usuario.assert_called_once_with('98765432100', 'joao@example.com', 'João')

    def test_buscar_por_cpf_inexistente_falha(self):
        self.cliente_repo_mock.buscar_por_cpf.return_value = None

        with self.assertRaises(ClienteNaoEncontradoError):
            self.use_case.buscar_por_cpf('00000000000')

    def test_listar_clientes_vazio(self):
        self.cliente_repo_mock.listar_todos.return_value = []

        self.assertEqual(self.use_case.listar_todos(), [])


# ====================================================================
# PEDIDOS
# ====================================================================
class TestPedidoUseCase(unittest.TestCase):

    def setUp(self):
        self.pedido_repo_mock = Mock()
        self.cliente_repo_mock = Mock()
        self.produto_repo_mock = Mock()
        self.pagamento_gateway_mock = Mock()

        def salvar(pedido):
            if pedido.id is None:
                pedido.id = 1
            return pedido
        self.pedido_repo_mock.salvar.side_effect = salvar
        self.pagamento_gateway_mock.criar_ordem_pagamento.return_value = 987654321

        self.use_case = PedidoUseCase(
            pedido_repo=self.pedido_repo_mock,
            cliente_repo=self.cliente_repo_mock,
            produto_repo=self.produto_repo_mock,
            pagamento_gateway=self.pagamento_gateway_mock
        )

        lanche = Categoria(nome='Lanche')
        self.produto_a = Produto(nome='X-Burger', descricao='', preco=Decimal('10.00'), categoria=lanche)
        self.produto_b = Produto(nome='Batata', descricao='', preco=Decimal('5.00'), categoria=lanche)
        self.produto_inativo = Produto(nome='X-Tudo', descricao='', preco=Decimal('30.00'),
                                       categoria=lanche, ativo=False)
        produtos = {p.id: p for p in (self.produto_a, self.produto_b, self.produto_inativo)}
        self.produto_repo_mock.buscar_por_id.side_effect = produtos.get

        self.cliente = Cliente(nome='Maria', email='maria@example.com', cpf='12345678900')

    def _pedido(self, status_pagamento=StatusPagamento.AGUARDANDO_PAGAMENTO):
        pedido = Pedido.criar(None, [ItemPedido.criar(self.produto_a, 1)])
        pedido.id = 7
        pedido.id_pagamento_externo = 555
        pedido.status_pagamento = status_pagamento
        return pedido

    def test_criar_pedido_calcula_o_total(self):
        """
        Cenário: {A: 2 x 10.00}, {B: 1 x 5.00} => 25.00
        """
        self.cliente_repo_mock.buscar_por_id.return_value = self.cliente

        pedido = self.use_case.criar(self.cliente.id, [
            ItemPedidoSolicitado(self.produto_a.id, 2),
            ItemPedidoSolicitado(self.produto_b.id, 1),
        ])

        self.assertEqual(pedido.valor_total, Decimal('25.00'))
        self.assertEqual(pedido.status, StatusPedido.RECEIVED)
        self.assertEqual(pedido.status_pagamento, StatusPagamento.AGUARDANDO_PAGAMENTO)
        self.assertEqual(pedido.id_pagamento_externo, 987654321)
        self.assertEqual([i.preco_unitario for i in pedido.itens], [Decimal('10.00'), Decimal('5.00')])
        self.pagamento_gateway_mock.criar_ordem_pagamento.assert_called_once_with(
            valor=Decimal('25.00'),
            descricao='Pagamento para o pedido',
            metodo='pix',
            parcelas=1,
            email='maria@example.com',
            tipo_identificacao='CPF',
            cpf='12345678900',
        )

    def test_pedido_sem_cliente_nao_envia_email_nem_cpf(self):
        pedido = self.use_case.criar(None, [ItemPedidoSolicitado(self.produto_b.id, 3)])

        self.assertIsNone(pedido.cliente)
        kwargs = self.pagamento_gateway_mock.criar_ordem_pagamento.call_args.kwargs
        self.assertIsNone(kwargs['email'])
        self.assertIsNone(kwargs['cpf'])
        self.cliente_repo_mock.buscar_por_id.assert_not_called()

    def test_preco_e_congelado_no_pedido(self):
        pedido = self.use_case.criar(None, [ItemPedidoSolicitado(self.produto_a.id, 1)])

        self.produto_a.preco = Decimal('99.00')

        self.assertEqual(pedido.valor_total, Decimal('10.00'))
        self.assertEqual(pedido.itens[0].preco_unitario, Decimal('10.00'))

    def test_quantidade_zero_falha_sem_persistir(self):
        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.criar(None, [ItemPedidoSolicitado(self.produto_a.id, 0)])

        self.assertEqual(str(ctx.exception), 'Quantity must be greater than zero')
        self.pagamento_gateway_mock.criar_ordem_pagamento.assert_not_called()
        self.pedido_repo_mock.salvar.assert_not_called()

    def test_produto_inativo_falha(self):
        with self.assertRaises(ProdutoInativoError) as ctx:
            self.use_case.criar(None, [ItemPedidoSolicitado(self.produto_inativo.id, 1)])

        self.assertIsInstance(ctx.exception, RegraNegocioError)
        self.assertEqual(str(ctx.exception), 'Product is not active: X-Tudo')
        self.pedido_repo_mock.salvar.assert_not_called()

    def test_produto_inexistente_falha(self):
        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.criar(None, [ItemPedidoSolicitado(uuid.uuid4(), 1)])

        self.pedido_repo_mock.salvar.assert_not_called()

    def test_cliente_inexistente_falha(self):
        self.cliente_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(ClienteNaoEncontradoError):
            self.use_case.criar(uuid.uuid4(), [ItemPedidoSolicitado(self.produto_a.id, 1)])

        self.pagamento_gateway_mock.criar_ordem_pagamento.assert_not_called()

    def test_falha_no_pagamento_aborta_antes_de_persistir(self):
        self.pagamento_gateway_mock.criar_ordem_pagamento.side_effect = PagamentoFalhouError('timeout')

        with self.assertLogs('lanchonete.core.use_cases', level='ERROR') as logs:
            with self.assertRaises(PagamentoFalhouError):
                self.use_case.criar(None, [ItemPedidoSolicitado(self.produto_a.id, 1)])

        self.pedido_repo_mock.salvar.assert_not_called()
        self.assertEqual(logs.records[0].erro_codigo, 'ORDER_CREATION_FAILED')

    def test_atualizar_status_sem_pagamento_aprovado_falha(self):
        self.pedido_repo_mock.buscar_por_id.return_value = self._pedido()

        with self.assertRaises(PedidoNaoPagoError) as ctx:
            self.use_case.atualizar_status(7, StatusPedido.IN_PREPARATION)

        self.assertEqual(str(ctx.exception), 'The order is not paid')
        self.pedido_repo_mock.salvar.assert_not_called()

    def test_atualizar_status_com_pagamento_aprovado(self):
        self.pedido_repo_mock.buscar_por_id.return_value = self._pedido(StatusPagamento.APROVADO)

        pedido = self.use_case.atualizar_status(7, StatusPedido.READY)

        self.assertEqual(pedido.status, StatusPedido.READY)
        self.pedido_repo_mock.salvar.assert_called_once()

    def test_atualizar_status_de_pedido_inexistente_falha(self):
        self.pedido_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(PedidoNaoEncontradoError):
            self.use_case.atualizar_status(99, StatusPedido.READY)

    def test_enviar_para_preparo_ignora_pagamento(self):
        self.pedido_repo_mock.buscar_por_id.return_value = self._pedido()

        pedido = self.use_case.enviar_para_preparo(7)

        self.assertEqual(pedido.status, StatusPedido.IN_PREPARATION)
        self.assertEqual(pedido.status_pagamento, StatusPagamento.AGUARDANDO_PAGAMENTO)

    def test_atualizar_status_pagamento_de_id_desconhecido_falha(self):
        self.pedido_repo_mock.buscar_por_id_pagamento.return_value = None

        with self.assertRaises(PedidoNaoEncontradoError):
            self.use_case.atualizar_status_pagamento(123, StatusPagamento.APROVADO)

    def test_pagamento_aprovado_leva_pedido_para_preparo(self):
        """
        Cenário: pedido RECEIVED recebe a aprovação do pagamento.
        """
        pedido = self._pedido()
        self.assertEqual(pedido.status, StatusPedido.RECEIVED)
        self.pedido_repo_mock.buscar_por_id_pagamento.return_value = pedido

        atualizado = self.use_case.atualizar_status_pagamento(555, StatusPagamento.APROVADO)

        self.assertEqual(atualizado.status_pagamento, StatusPagamento.APROVADO)
        self.assertEqual(atualizado.status, StatusPedido.IN_PREPARATION)
        self.pedido_repo_mock.buscar_por_id_pagamento.assert_called_once_with(555)

    def test_listar_repassa_o_filtro_de_status(self):
        self.pedido_repo_mock.listar.return_value = []

        self.assertEqual(self.use_case.listar(StatusPedido.READY), [])
        self.pedido_repo_mock.listar.assert_called_once_with(StatusPedido.READY)

    def test_buscar_pedido_inexistente_falha(self):
        self.pedido_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(PedidoNaoEncontradoError):
            self.use_case.buscar_por_id(1)


class TestTabelaDeTransicoes(unittest.TestCase):

    def test_gatilho_manual_exige_pagamento(self):
        pedido = Pedido(itens=[], valor_total=Decimal('0.00'))

        with self.assertRaises(PedidoNaoPagoError):
            aplicar_transicao(pedido, Gatilho.MANUAL, novo_status=StatusPedido.FINISHED)

        self.assertEqual(pedido.status, StatusPedido.RECEIVED)

    def test_gatilho_de_pagamento_atualiza_os_dois_status(self):
        pedido = Pedido(itens=[], valor_total=Decimal('0.00'))

        aplicar_transicao(pedido, Gatilho.PAGAMENTO, novo_status_pagamento=StatusPagamento.APROVADO)

        self.assertEqual(pedido.status, StatusPedido.IN_PREPARATION)
        self.assertEqual(pedido.status_pagamento, StatusPagamento.APROVADO)


# ====================================================================
# NOTIFICAÇÃO DE PAGAMENTO (WEBHOOK)
# ====================================================================
class TestNotificacaoPagamentoUseCase(unittest.TestCase):

    def setUp(self):
        self.pedido_use_case_mock = Mock()
        self.use_case = NotificacaoPagamentoUseCase(self.pedido_use_case_mock)

    def test_delegacao_com_status_aprovado(self):
        self.use_case.processar(555)

        args = self.pedido_use_case_mock.atualizar_status_pagamento.call_args[0]
        self.assertEqual(args[0], 555)
        self.assertEqual(args[1], StatusPagamento.APROVADO)

    def test_pedido_desconhecido_nao_propaga_erro(self):
        self.pedido_use_case_mock.atualizar_status_pagamento.side_effect = PedidoNaoEncontradoError()

        with self.assertLogs('lanchonete.core.use_cases', level='ERROR') as logs:
            self.assertIsNone(self.use_case.processar(999))

        self.assertEqual(logs.records[0].erro_codigo, 'PAYMENT_NOTIFICATION_FAILED')

    def test_erro_inesperado_nao_propaga(self):
        self.pedido_use_case_mock.atualizar_status_pagamento.side_effect = RuntimeError('boom')

        with self.assertLogs('lanchonete.core.use_cases', level='ERROR'):
            self.use_case.processar(1)

    def test_registros_da_notificacao_sao_de_integracao(self):
        """
        Cenário: a atualização do pagamento disparada pelo webhook mantém a
        categoria INTEGRATION em todos os registros.
        """
        pedido_repo_mock = Mock()
        pedido_repo_mock.salvar.side_effect = _devolve
        pedido = Pedido.criar(None, [])
        pedido.id = 3
        pedido.id_pagamento_externo = 555
        pedido_repo_mock.buscar_por_id_pagamento.return_value = pedido
        use_case = NotificacaoPagamentoUseCase(PedidoUseCase(pedido_repo_mock, Mock(), Mock(), Mock()))

        with self.assertLogs('lanchonete.core.use_cases', level='INFO') as logs:
            use_case.processar(555)

        self.assertEqual(pedido.status_pagamento, StatusPagamento.APROVADO)
        self.assertIn('UpdateOrderPaymentStatus', [r.operacao for r in logs.records])
        self.assertEqual({r.categoria_log for r in logs.records}, {'INTEGRATION'})


# ====================================================================
# CONTEXTO DE LOG E TAREFAS PÓS-COMMIT
# ====================================================================
class TestContextoLog(unittest.TestCase):

    def test_com_ignora_none_e_nao_altera_o_original(self):
        base = ContextoLog(correlation_id='abc')

        derivado = base.com(pedido_id=10, cliente_id=None)

        self.assertEqual(derivado.campos, {'pedido_id': '10'})
        self.assertEqual(base.campos, {})
        self.assertEqual(derivado.correlation_id, 'abc')

    def test_logger_injeta_campos_no_registro(self):
        contexto = ContextoLog(correlation_id='abc', usuario_id='u-1').para_operacao('CreateOrder')
        base = logging.getLogger('lanchonete.testes')

        with self.assertLogs('lanchonete.testes', level='INFO') as logs:
            contexto.logger(base).info('ok', extra={'duracao_ms': 3})

        registro = logs.records[0]
        self.assertEqual(registro.correlation_id, 'abc')
        self.assertEqual(registro.usuario_id, 'u-1')
        self.assertEqual(registro.operacao, 'CreateOrder')
        self.assertEqual(registro.categoria_log, 'BUSINESS')
        self.assertEqual(registro.duracao_ms, 3)

    def test_operacao_nao_loga_erros_de_negocio(self):
        log = Mock()

        with self.assertRaises(CpfDuplicadoError):
            with operacao(log, 'X', 'falhou'):
                raise CpfDuplicadoError('1')

        log.error.assert_not_called()


class TestExecutarIsolado(unittest.TestCase):

    def test_sucesso(self):
        tarefa = Mock()

        self.assertTrue(executar_isolado('t', tarefa))
        tarefa.assert_called_once_with()

    def test_falha_fica_isolada(self):
        tarefa = Mock(side_effect=ValueError('erro'))

        with self.assertLogs('lanchonete.core.tarefas', level='ERROR') as logs:
            self.assertFalse(executar_isolado('provisionar', tarefa, ContextoLog(correlation_id='c-1')))

        self.assertEqual(tarefa.call_count, 1)
        self.assertEqual(logs.records[0].tarefa, 'provisionar')
        self.assertEqual(logs.records[0].correlation_id, 'c-1')
