"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (lanchonete.core.entities)
"""
from typing import Any, Optional, Type

from django.apps import apps
from django.db import models

# Importa as entidades do Core
from lanchonete.core.entities import (
    Categoria as CategoriaEntity,
    Produto as ProdutoEntity,
    Cliente as ClienteEntity,
    Pedido as PedidoEntity,
    ItemPedido as ItemPedidoEntity,
    StatusPedido,
    StatusPagamento,
)


# ====================================================================
# Uso de apps.get_model para evitar dependências circulares
# ====================================================================

def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


# ====================================================================
# MAPPERS DO CATÁLOGO
# ====================================================================

class CategoriaMapper:
    """Mapeador para Categoria."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalogo', 'Categoria')

    @staticmethod
    def to_entity(model: Any) -> Optional[CategoriaEntity]:
        if not model: return None
        return CategoriaEntity(id=model.id, nome=model.nome)

    @classmethod
    def to_model(cls, entity: CategoriaEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)
        model.nome = entity.nome
        return model


class ProdutoMapper:
    """Mapeador para Produto."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalogo', 'Produto')

    @staticmethod
    def to_entity(model: Any) -> Optional[ProdutoEntity]:
        """Converte Produto Model para Produto Entity (com a categoria)."""
        if not model: return None
        return ProdutoEntity(
            id=model.id,
            nome=model.nome,
            descricao=model.descricao,
            preco=model.preco,
            ativo=model.ativo,
            categoria=CategoriaMapper.to_entity(model.categoria),
        )

    @classmethod
    def to_model(cls, entity: ProdutoEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(id=entity.id)
        model.nome = entity.nome
        model.descricao = entity.descricao
        model.preco = entity.preco
        model.ativo = entity.ativo
        model.categoria_id = entity.categoria.id
        return model


# ====================================================================
# MAPPER DE CLIENTE
# ====================================================================

class ClienteMapper:
    """Mapeador para Cliente."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('clientes', 'Cliente')

    @staticmethod
    def to_entity(model: Any) -> Optional[ClienteEntity]:
        if not model: return None
        return ClienteEntity(id=model.id, nome=model.nome, email=model.email, cpf=model.cpf)

    @classmethod
    def to_model(cls, entity: ClienteEntity, model: Optional[Any] = None) -> Any:
        if not model:
            # CPF é imutável: só é gravado na criação
            model = cls.model_class()(id=entity.id, cpf=entity.cpf)
        model.nome = entity.nome
        model.email = entity.email
        return model


# ====================================================================
# MAPPERS DE PEDIDO
# ====================================================================

class ItemPedidoMapper:
    """Mapeador para ItemPedido."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('pedidos', 'ItemPedido')

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemPedidoEntity]:
        if not model: return None
        return ItemPedidoEntity(
            produto=ProdutoMapper.to_entity(model.produto),
            quantidade=model.quantidade,
            preco_unitario=model.preco_unitario,
        )

    @classmethod
    def to_model(cls, entity: ItemPedidoEntity, pedido_id: int) -> Any:
        # Snapshot do preço: não acompanha alterações futuras do produto
        return cls.model_class()(
            pedido_id=pedido_id,
            produto_id=entity.produto.id,
            quantidade=entity.quantidade,
            preco_unitario=entity.preco_unitario,
        )


class PedidoMapper:
    """Mapeador para Pedido."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('pedidos', 'Pedido')

    @staticmethod
    def to_entity(model: Any) -> Optional[PedidoEntity]:
        """Converte Pedido Model para Pedido Entity, incluindo itens e cliente."""
        if not model: return None

        itens_entity = [ItemPedidoMapper.to_entity(item) for item in model.itens.all()]

        return PedidoEntity(
            id=model.id,
            cliente=ClienteMapper.to_entity(model.cliente),
            itens=itens_entity,
            valor_total=model.valor_total,
            status=StatusPedido(model.status),
            status_pagamento=StatusPagamento(model.status_pagamento),
            id_pagamento_externo=model.id_pagamento_externo,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @classmethod
    def to_model(cls, entity: PedidoEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()()
        model.cliente_id = entity.cliente.id if entity.cliente else None
        model.valor_total = entity.valor_total
        model.status = entity.status.value
        model.status_pagamento = entity.status_pagamento.value
        model.id_pagamento_externo = entity.id_pagamento_externo
        return model
