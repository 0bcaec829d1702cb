from django.contrib import admin

from .models import Pedido, ItemPedido


class ItemPedidoInline(admin.TabularInline):
    model = ItemPedido
    extra = 0
    readonly_fields = ('produto', 'quantidade', 'preco_unitario')


@admin.register(Pedido)
class PedidoAdmin(admin.ModelAdmin):
    """Somente leitura: o status muda pela API, onde a regra de pagamento é aplicada."""
    list_display = ('id', 'cliente', 'valor_total', 'status', 'status_pagamento', 'criado_em')
    list_filter = ('status', 'status_pagamento')
    readonly_fields = ('cliente', 'valor_total', 'status', 'status_pagamento', 'id_pagamento_externo')
    inlines = [ItemPedidoInline]
