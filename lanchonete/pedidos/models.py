from decimal import Decimal

from django.db import models


class Pedido(models.Model):
    """
    Pedido feito no balcão/totem. O cliente é opcional (pedido anônimo).
    """
    STATUS_CHOICES = [
        ('RECEIVED', 'Recebido'),
        ('IN_PREPARATION', 'Em Preparação'),
        ('READY', 'Pronto'),
        ('FINISHED', 'Finalizado'),
    ]

    STATUS_PAGAMENTO_CHOICES = [
        ('AGUARDANDO_PAGAMENTO', 'Aguardando Pagamento'),
        ('APROVADO', 'Aprovado'),
    ]

    # Relacionamentos
    cliente = models.ForeignKey(
        'clientes.Cliente', on_delete=models.PROTECT, null=True, blank=True, related_name='pedidos'
    )

    # Valores e Status
    valor_total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='RECEIVED')
    status_pagamento = models.CharField(
        max_length=25, choices=STATUS_PAGAMENTO_CHOICES, default='AGUARDANDO_PAGAMENTO'
    )

    # Referência devolvida pelo gateway; usada para localizar o pedido no webhook
    id_pagamento_externo = models.BigIntegerField(null=True, blank=True, db_index=True)

    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Pedido'
        verbose_name_plural = 'Pedidos'
        db_table = 'pedidos_pedido'
        ordering = ['criado_em', 'id']

    def __str__(self):
        return f"Pedido #{self.id} - {self.status}"


class ItemPedido(models.Model):
    """
    Item de um pedido.
    O preço unitário é um snapshot do preço do produto no momento da compra.
    """
    pedido = models.ForeignKey(Pedido, related_name='itens', on_delete=models.CASCADE)
    produto = models.ForeignKey('catalogo.Produto', on_delete=models.PROTECT, related_name='itens_pedido')
    quantidade = models.PositiveIntegerField()
    preco_unitario = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        verbose_name = 'Item do Pedido'
        verbose_name_plural = 'Itens do Pedido'
        db_table = 'pedidos_item'
        ordering = ['id']

    def __str__(self):
        return f"{self.quantidade}x {self.produto_id}"

    @property
    def subtotal(self):
        return self.preco_unitario * self.quantidade
