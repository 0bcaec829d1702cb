"""
Camada de Infraestrutura: Implementação dos Repositórios.

Esta camada traduz as operações abstratas definidas nas Portas do Core
em chamadas concretas ao Django ORM. Ausência de registros é devolvida como
None ou lista vazia; nenhum repositório levanta erro de "não encontrado".
"""
from typing import List, Optional
from uuid import UUID

from django.apps import apps
from django.db import transaction
from django.db.models import Prefetch

# Importações da Camada CORE (ENTIDADES e PORTAS)
from lanchonete.core.entities import Categoria, Produto, Cliente, Pedido, StatusPedido
from lanchonete.core.ports import (
    ICategoriaRepository,
    IProdutoRepository,
    IClienteRepository,
    IPedidoRepository,
)

from .mappers import (
    CategoriaMapper, ProdutoMapper, ClienteMapper, ItemPedidoMapper, PedidoMapper
)


# Helper para Lazy Loading
def get_model(app_label, model_name):
    """Busca o modelo Django de forma segura (Lazy Loading)."""
    return apps.get_model(app_label, model_name)


# ====================================================================
# 1. CATÁLOGO
# ====================================================================

class CategoriaRepositoryDjango(ICategoriaRepository):
    """Implementação do CategoriaRepository usando o Django ORM."""

    @property
    def CategoriaModel(self):
        return get_model('catalogo', 'Categoria')

    def existe_por_nome(self, nome: str) -> bool:
        return self.CategoriaModel.objects.filter(nome=nome).exists()

    def buscar_por_id(self, categoria_id: UUID) -> Optional[Categoria]:
        try:
            return CategoriaMapper.to_entity(self.CategoriaModel.objects.get(pk=categoria_id))
        except self.CategoriaModel.DoesNotExist:
            return None

    def listar_todas(self) -> List[Categoria]:
        return [CategoriaMapper.to_entity(model) for model in self.CategoriaModel.objects.all()]

    def salvar(self, categoria: Categoria) -> Categoria:
        model = self.CategoriaModel.objects.filter(pk=categoria.id).first()
        model = CategoriaMapper.to_model(categoria, model)
        model.save()
        return CategoriaMapper.to_entity(model)

    def deletar_por_id(self, categoria_id: UUID) -> None:
        self.CategoriaModel.objects.filter(pk=categoria_id).delete()


class ProdutoRepositoryDjango(IProdutoRepository):
    """Implementação do ProdutoRepository usando o Django ORM."""

    @property
    def ProdutoModel(self):
        return get_model('catalogo', 'Produto')

    def _queryset(self):
        return self.ProdutoModel.objects.select_related('categoria')

    def buscar_por_id(self, produto_id: UUID) -> Optional[Produto]:
        try:
            return ProdutoMapper.to_entity(self._queryset().get(pk=produto_id))
        except self.ProdutoModel.DoesNotExist:
            return None

    def listar_todos(self) -> List[Produto]:
        return [ProdutoMapper.to_entity(model) for model in self._queryset()]

    def buscar_por_nome(self, nome: str) -> List[Produto]:
        qs = self._queryset().filter(nome__icontains=nome)
        return [ProdutoMapper.to_entity(model) for model in qs]

    def buscar_por_categoria(self, categoria_id: UUID) -> List[Produto]:
        qs = self._queryset().filter(categoria_id=categoria_id)
        return [ProdutoMapper.to_entity(model) for model in qs]

    def salvar(self, produto: Produto) -> Produto:
        model = self.ProdutoModel.objects.filter(pk=produto.id).first()
        model = ProdutoMapper.to_model(produto, model)
        model.save()
        return self.buscar_por_id(model.id)

    def deletar_por_id(self, produto_id: UUID) -> None:
        self.ProdutoModel.objects.filter(pk=produto_id).delete()


# ====================================================================
# 2. CLIENTES
# ====================================================================

class ClienteRepositoryDjango(IClienteRepository):
    """Implementação do ClienteRepository usando o Django ORM."""

    @property
    def ClienteModel(self):
        return get_model('clientes', 'Cliente')

    def existe_por_cpf(self, cpf: str) -> bool:
        return self.ClienteModel.objects.filter(cpf=cpf).exists()

    def buscar_por_id(self, cliente_id: UUID) -> Optional[Cliente]:
        try:
            return ClienteMapper.to_entity(self.ClienteModel.objects.get(pk=cliente_id))
        except self.ClienteModel.DoesNotExist:
            return None

    def buscar_por_cpf(self, cpf: str) -> Optional[Cliente]:
        try:
            return ClienteMapper.to_entity(self.ClienteModel.objects.get(cpf=cpf))
        except self.ClienteModel.DoesNotExist:
            return None

    def listar_todos(self) -> List[Cliente]:
        return [ClienteMapper.to_entity(model) for model in self.ClienteModel.objects.all()]

    def salvar(self, cliente: Cliente) -> Cliente:
        model = self.ClienteModel.objects.filter(pk=cliente.id).first()
        model = ClienteMapper.to_model(cliente, model)
        model.save()
        return ClienteMapper.to_entity(model)


# ====================================================================
# 3. PEDIDOS
# ====================================================================

class PedidoRepositoryDjango(IPedidoRepository):
    """Implementação do PedidoRepository usando o Django ORM."""

    @property
    def PedidoModel(self):
        return get_model('pedidos', 'Pedido')

    @property
    def ItemPedidoModel(self):
        return get_model('pedidos', 'ItemPedido')

    def _queryset(self):
        # Pré-carrega cliente e itens (com produto e categoria) para o mapeamento completo
        return self.PedidoModel.objects.select_related('cliente').prefetch_related(
            Prefetch('itens', queryset=self.ItemPedidoModel.objects.select_related('produto__categoria'))
        )

    def buscar_por_id(self, pedido_id: int) -> Optional[Pedido]:
        try:
            return PedidoMapper.to_entity(self._queryset().get(pk=pedido_id))
        except self.PedidoModel.DoesNotExist:
            return None

    def buscar_por_id_pagamento(self, id_pagamento_externo: int) -> Optional[Pedido]:
        model = self._queryset().filter(id_pagamento_externo=id_pagamento_externo).first()
        return PedidoMapper.to_entity(model)

    def listar(self, status: Optional[StatusPedido] = None) -> List[Pedido]:
        qs = self._queryset()
        if status:
            qs = qs.filter(status=status.value)
        return [PedidoMapper.to_entity(model) for model in qs.order_by('criado_em', 'id')]

    def existe_por_produto(self, produto_id: UUID) -> bool:
        return self.ItemPedidoModel.objects.filter(produto_id=produto_id).exists()

    @transaction.atomic
    def salvar(self, pedido: Pedido) -> Pedido:
        """
        Cria ou atualiza o pedido.
        Na criação, pedido e itens são gravados na mesma transação.
        """
        model = None
        if pedido.id is not None:
            model = self.PedidoModel.objects.filter(pk=pedido.id).first()

        novo = model is None
        model = PedidoMapper.to_model(pedido, model)
        model.save()

        if novo:
            self.ItemPedidoModel.objects.bulk_create(
                [ItemPedidoMapper.to_model(item, pedido_id=model.id) for item in pedido.itens]
            )

        return self.buscar_por_id(model.id)
