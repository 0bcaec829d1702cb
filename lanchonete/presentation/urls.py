"""
Define as rotas da API REST da lanchonete.
"""
from django.urls import path

from . import views


urlpatterns = [
    path('health', views.HealthView.as_view(), name='health'),

    # ====================================================================
    # 1. ROTAS DO CATÁLOGO
    # ====================================================================
    path('api/categorias/', views.CategoriaListView.as_view(), name='categorias'),
    path('api/categorias/<uuid:pk>/', views.CategoriaDetailView.as_view(), name='categoria_detalhe'),
    path('api/produtos/', views.ProdutoListView.as_view(), name='produtos'),
    path('api/produtos/<uuid:pk>/', views.ProdutoDetailView.as_view(), name='produto_detalhe'),

    # ====================================================================
    # 2. ROTAS DE CLIENTES
    # ====================================================================
    path('api/clientes/', views.ClienteListView.as_view(), name='clientes'),
    path('api/clientes/<uuid:pk>/', views.ClienteDetailView.as_view(), name='cliente_detalhe'),
    path('api/clientes/cpf/<str:cpf>/', views.ClienteCpfView.as_view(), name='cliente_por_cpf'),

    # ====================================================================
    # 3. ROTAS DE PEDIDOS
    # ====================================================================
    path('api/pedidos/', views.PedidoListView.as_view(), name='pedidos'),
    path('api/pedidos/<int:pk>/', views.PedidoDetailView.as_view(), name='pedido_detalhe'),
    path('api/pedidos/<int:pk>/status/', views.PedidoStatusView.as_view(), name='pedido_status'),
    path('api/pedidos/<int:pk>/preparo/', views.PedidoPreparoView.as_view(), name='pedido_preparo'),

    # Webhook do Mercado Pago (Rota externa, não requer autenticação)
    path('api/webhooks/pagamentos/', views.WebhookPagamentoView.as_view(), name='webhook_pagamentos'),
]
