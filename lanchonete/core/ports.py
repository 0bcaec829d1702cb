# lanchonete/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositorios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from typing import Callable, List, Optional, Protocol
from abc import abstractmethod
from decimal import Decimal
from uuid import UUID

from lanchonete.core.entities import (
    Categoria, Produto, Cliente, Pedido, StatusPedido
)
from lanchonete.core.contexto import ContextoLog


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# Ausência é sinalizada com None ou lista vazia, nunca com exceção.
# ====================================================================

class ICategoriaRepository(Protocol):
    """Protocolo para a persistência e busca de Categorias."""

    @abstractmethod
    def existe_por_nome(self, nome: str) -> bool: ...

    @abstractmethod
    def buscar_por_id(self, categoria_id: UUID) -> Optional[Categoria]: ...

    @abstractmethod
    def listar_todas(self) -> List[Categoria]: ...

    @abstractmethod
    def salvar(self, categoria: Categoria) -> Categoria: ...

    @abstractmethod
    def deletar_por_id(self, categoria_id: UUID) -> None: ...


class IProdutoRepository(Protocol):
    """Protocolo para a persistência e busca de Produtos."""

    @abstractmethod
    def buscar_por_id(self, produto_id: UUID) -> Optional[Produto]: ...

    @abstractmethod
    def listar_todos(self) -> List[Produto]: ...

    @abstractmethod
    def buscar_por_nome(self, nome: str) -> List[Produto]: ...

    @abstractmethod
    def buscar_por_categoria(self, categoria_id: UUID) -> List[Produto]: ...

    @abstractmethod
    def salvar(self, produto: Produto) -> Produto: ...

    @abstractmethod
    def deletar_por_id(self, produto_id: UUID) -> None: ...


class IClienteRepository(Protocol):
    """Protocolo para a persistência de Clientes."""

    @abstractmethod
    def existe_por_cpf(self, cpf: str) -> bool: ...

    @abstractmethod
    def buscar_por_id(self, cliente_id: UUID) -> Optional[Cliente]: ...

    @abstractmethod
    def buscar_por_cpf(self, cpf: str) -> Optional[Cliente]: ...

    @abstractmethod
    def listar_todos(self) -> List[Cliente]: ...

    @abstractmethod
    def salvar(self, cliente: Cliente) -> Cliente: ...


class IPedidoRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def buscar_por_id(self, pedido_id: int) -> Optional[Pedido]: ...

    @abstractmethod
    def buscar_por_id_pagamento(self, id_pagamento_externo: int) -> Optional[Pedido]: ...

    @abstractmethod
    def listar(self, status: Optional[StatusPedido] = None) -> List[Pedido]: ...

    @abstractmethod
    def existe_por_produto(self, produto_id: UUID) -> bool: ...

    @abstractmethod
    def salvar(self, pedido: Pedido) -> Pedido:
        """Cria ou atualiza o pedido; na criação o repositório atribui o id numérico."""
        ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IGatewayPagamento(Protocol):
    """Protocolo para o serviço externo que emite as ordens de pagamento."""

    @abstractmethod
    def criar_ordem_pagamento(
        self,
        valor: Decimal,
        descricao: str,
        metodo: str,
        parcelas: int,
        email: Optional[str],
        tipo_identificacao: str,
        cpf: Optional[str],
    ) -> int:
        """Retorna o identificador externo do pagamento."""
        ...


class IProvedorIdentidade(Protocol):
    """Protocolo para o provedor de identidade (login dos clientes)."""

    @abstractmethod
    def criar_usuario(self, cpf: str, email: str, nome: str) -> None:
        """Usuário já existente é sucesso; outras falhas levantam ProvedorIdentidadeError."""
        ...


class IExecutorPosCommit(Protocol):
    """Executa efeitos colaterais no máximo uma vez, depois da escrita principal."""

    @abstractmethod
    def agendar(self, nome: str, tarefa: Callable[[], None], contexto: Optional[ContextoLog] = None) -> None: ...
