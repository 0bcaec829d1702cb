from django.apps import AppConfig


class CatalogoConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'lanchonete.catalogo'
    verbose_name = 'Cardápio'
