from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros.
# ====================================================================


class StatusPedido(str, Enum):
    """Status de preparo do pedido na cozinha."""
    RECEIVED = "RECEIVED"
    IN_PREPARATION = "IN_PREPARATION"
    READY = "READY"
    FINISHED = "FINISHED"


class StatusPagamento(str, Enum):
    """Status do pagamento informado pelo gateway."""
    AGUARDANDO_PAGAMENTO = "AGUARDANDO_PAGAMENTO"
    APROVADO = "APROVADO"


@dataclass
class Categoria:
    """Entidade de Categoria do cardápio (Ex: Lanche, Bebida)."""
    nome: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class Produto:
    """Entidade do Produto vendido pela lanchonete."""
    nome: str
    descricao: str
    preco: Decimal
    categoria: Categoria
    ativo: bool = True
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def atualizar(
        self,
        nome: Optional[str] = None,
        descricao: Optional[str] = None,
        preco: Optional[Decimal] = None,
        categoria: Optional[Categoria] = None,
        ativo: Optional[bool] = None,
    ) -> "Produto":
        """Aplica uma atualização parcial: campos None mantêm o valor atual."""
        if nome is not None:
            self.nome = nome
        if descricao is not None:
            self.descricao = descricao
        if preco is not None:
            self.preco = preco
        if categoria is not None:
            self.categoria = categoria
        if ativo is not None:
            self.ativo = ativo
        return self


@dataclass
class Cliente:
    """Entidade do Cliente. O CPF é imutável e serve de login no provedor de identidade."""
    nome: str
    email: str
    cpf: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class ItemPedidoSolicitado:
    """Item como chega na requisição, antes de ser validado contra o catálogo."""
    produto_id: uuid.UUID
    quantidade: int


@dataclass
class ItemPedido:
    """Snapshot de um item no momento da compra (preço congelado)."""
    produto: Produto
    quantidade: int
    preco_unitario: Decimal

    @classmethod
    def criar(cls, produto: Produto, quantidade: int) -> "ItemPedido":
        return cls(produto=produto, quantidade=quantidade, preco_unitario=produto.preco)

    @property
    def subtotal(self) -> Decimal:
        return self.preco_unitario * self.quantidade


@dataclass
class Pedido:
    """Entidade do Pedido. O id numérico é atribuído pelo repositório ao salvar."""
    itens: List[ItemPedido]
    valor_total: Decimal
    cliente: Optional[Cliente] = None
    status: StatusPedido = StatusPedido.RECEIVED
    status_pagamento: StatusPagamento = StatusPagamento.AGUARDANDO_PAGAMENTO
    id_pagamento_externo: Optional[int] = None
    id: Optional[int] = None
    criado_em: datetime = field(default_factory=datetime.now)
    atualizado_em: datetime = field(default_factory=datetime.now)

    @classmethod
    def criar(cls, cliente: Optional[Cliente], itens: List[ItemPedido]) -> "Pedido":
        """Monta um pedido novo com o total calculado a partir dos itens."""
        total = sum((item.subtotal for item in itens), Decimal("0.00"))
        return cls(itens=list(itens), valor_total=total, cliente=cliente)

    def contem_produto(self, produto_id: uuid.UUID) -> bool:
        return any(item.produto.id == produto_id for item in self.itens)


# ====================================================================
# MÁQUINA DE ESTADOS DO PEDIDO
# Uma única tabela {gatilho -> regra} concentra as três formas de
# mudar o status de um pedido.
# ====================================================================


class Gatilho(str, Enum):
    MANUAL = "MANUAL"
    ENVIO_PARA_PREPARO = "ENVIO_PARA_PREPARO"
    PAGAMENTO = "PAGAMENTO"


@dataclass(frozen=True)
class RegraTransicao:
    exige_pagamento_aprovado: bool
    status_destino: Optional[StatusPedido]  # None = status informado na chamada


TRANSICOES = {
    Gatilho.MANUAL: RegraTransicao(exige_pagamento_aprovado=True, status_destino=None),
    Gatilho.ENVIO_PARA_PREPARO: RegraTransicao(
        exige_pagamento_aprovado=False, status_destino=StatusPedido.IN_PREPARATION
    ),
    Gatilho.PAGAMENTO: RegraTransicao(
        exige_pagamento_aprovado=False, status_destino=StatusPedido.IN_PREPARATION
    ),
}
