from django.apps import AppConfig


class PedidosConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'lanchonete.pedidos'
    verbose_name = 'Pedidos'
