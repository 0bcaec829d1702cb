# lanchonete/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.
"""
from lanchonete.infrastructure.repositories import (
    CategoriaRepositoryDjango,
    ProdutoRepositoryDjango,
    ClienteRepositoryDjango,
    PedidoRepositoryDjango,
)
from lanchonete.infrastructure.gateways import MercadoPagoGateway, ProvedorIdentidadeGateway
from lanchonete.infrastructure.tarefas import ExecutorPosCommitDjango
from .use_cases import (
    CategoriaUseCase,
    ProdutoUseCase,
    ClienteUseCase,
    PedidoUseCase,
    NotificacaoPagamentoUseCase,
)

# Repositórios concretos (sem estado; os modelos são carregados de forma lazy)
categoria_repo = CategoriaRepositoryDjango()
produto_repo = ProdutoRepositoryDjango()
cliente_repo = ClienteRepositoryDjango()
pedido_repo = PedidoRepositoryDjango()
executor_pos_commit = ExecutorPosCommitDjango()

# ====================================================================
# Use Cases do Catálogo
# ====================================================================

def get_categoria_use_case() -> CategoriaUseCase:
    return CategoriaUseCase(categoria_repo, produto_repo)

def get_produto_use_case() -> ProdutoUseCase:
    return ProdutoUseCase(produto_repo, categoria_repo, pedido_repo)


# ====================================================================
# Use Cases de Clientes e Pedidos
# ====================================================================

# Gateways leem as settings na criação, por isso são instanciados a cada chamada
def get_cliente_use_case() -> ClienteUseCase:
    return ClienteUseCase(
        cliente_repo=cliente_repo,
        provedor_identidade=ProvedorIdentidadeGateway(),
        executor_pos_commit=executor_pos_commit
    )

def get_pedido_use_case() -> PedidoUseCase:
    return PedidoUseCase(
        pedido_repo=pedido_repo,
        cliente_repo=cliente_repo,
        produto_repo=produto_repo,
        pagamento_gateway=MercadoPagoGateway()
    )

def get_notificacao_pagamento_use_case() -> NotificacaoPagamentoUseCase:
    return NotificacaoPagamentoUseCase(get_pedido_use_case())
