import uuid

from django.db import models

# ====================================================================
# 1. Categoria
# ====================================================================

class Categoria(models.Model):
    """Agrupa os produtos do cardápio (Ex: Lanche, Bebida)."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    nome = models.CharField(max_length=100, unique=True, verbose_name="Nome da Categoria")

    class Meta:
        verbose_name = "Categoria"
        verbose_name_plural = "Categorias"
        db_table = 'catalogo_categoria'
        ordering = ['nome']

    def __str__(self):
        return self.nome

# ====================================================================
# 2. Produto
# ====================================================================

class Produto(models.Model):
    """Item vendido pela lanchonete. Produtos inativos não podem ser pedidos."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # A exclusão de categorias com produtos é bloqueada no caso de uso;
    # PROTECT garante o mesmo no banco.
    categoria = models.ForeignKey(Categoria, on_delete=models.PROTECT, related_name='produtos')

    nome = models.CharField(max_length=255, verbose_name="Nome do Produto")
    descricao = models.TextField(blank=True, verbose_name="Descrição")
    preco = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço")
    ativo = models.BooleanField(default=True, verbose_name="Disponível para venda")

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        db_table = 'catalogo_produto'
        ordering = ['nome']

    def __str__(self):
        return self.nome
