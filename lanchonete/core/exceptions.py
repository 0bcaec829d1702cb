class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    pass

# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE (NotFound)
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um registro (genérico) não é encontrado."""
    def __init__(self, message="Record not found"):
        self.message = message
        super().__init__(self.message)

class CategoriaNaoEncontradaError(ItemNaoEncontradoError):
    """Erro específico para Categorias não encontradas."""
    def __init__(self, message="Category Record not found"):
        super().__init__(message)

class ProdutoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Produtos não encontrados."""
    def __init__(self, message="Product not found"):
        super().__init__(message)

class ClienteNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Clientes não encontrados."""
    def __init__(self, message="Customer not found"):
        super().__init__(message)

class PedidoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Pedidos não encontrados."""
    pass

# ===============================================
# ERROS DE REGRA DE NEGÓCIO (DomainError / Conflict)
# ===============================================

class RegraNegocioError(BaseErroCore):
    """Violação de uma regra de negócio."""
    def __init__(self, message="Regra de negócio violada."):
        self.message = message
        super().__init__(self.message)

class DadosInvalidosError(RegraNegocioError):
    """Erro levantado quando dados inválidos são fornecidos."""
    def __init__(self, message="Os dados fornecidos são inválidos."):
        super().__init__(message)

class ProdutoInativoError(RegraNegocioError):
    """Produto desativado não pode entrar em um pedido."""
    def __init__(self, nome_produto: str):
        self.nome_produto = nome_produto
        super().__init__(f"Product is not active: {nome_produto}")

class ConflitoError(RegraNegocioError):
    """Operação conflita com o estado atual dos registros."""
    pass

class CategoriaDuplicadaError(ConflitoError):
    def __init__(self, nome: str):
        self.nome = nome
        super().__init__(f"Category with name {nome} already exists")

class CategoriaVinculadaError(ConflitoError):
    def __init__(self, message="Não é possível deletar a categoria pois ela está vinculada a um ou mais produtos"):
        super().__init__(message)

class CpfDuplicadoError(ConflitoError):
    def __init__(self, cpf: str):
        self.cpf = cpf
        super().__init__(f"Customer with CPF {cpf} already exists")

class ProdutoVinculadoAPedidoError(ConflitoError):
    def __init__(self, message="Product is already linked to an order and cannot be deleted"):
        super().__init__(message)

class PedidoNaoPagoError(ConflitoError):
    def __init__(self, message="The order is not paid"):
        super().__init__(message)

# ===============================================
# ERROS DE INTEGRAÇÃO
# ===============================================

class PagamentoFalhouError(BaseErroCore):
    """Erro levantado quando o Gateway de Pagamento rejeita ou não responde."""
    def __init__(self, message="A criação da ordem de pagamento falhou."):
        self.message = message
        super().__init__(self.message)

class ProvedorIdentidadeError(BaseErroCore):
    """Falha ao provisionar o usuário no provedor de identidade."""
    def __init__(self, message="Erro ao criar usuário no provedor de identidade."):
        self.message = message
        super().__init__(self.message)
