from rest_framework import serializers

from lanchonete.core.entities import StatusPedido


# ====================================================================
# SERIALIZERS DO CATÁLOGO
# Serializam as Entidades do Core (não os Models do Django).
# ====================================================================

class CategoriaSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    nome = serializers.CharField(max_length=100)


class ProdutoSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    nome = serializers.CharField(max_length=255)
    descricao = serializers.CharField(allow_blank=True, required=False, default='')
    preco = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    ativo = serializers.BooleanField(read_only=True)
    categoria = CategoriaSerializer(read_only=True)
    categoria_id = serializers.UUIDField(write_only=True)


class ProdutoAtualizacaoSerializer(serializers.Serializer):
    """Atualização parcial: todos os campos são opcionais."""
    nome = serializers.CharField(max_length=255, required=False)
    descricao = serializers.CharField(allow_blank=True, required=False)
    preco = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    categoria_id = serializers.UUIDField(required=False)
    ativo = serializers.BooleanField(required=False)


# ====================================================================
# SERIALIZERS DE CLIENTES
# ====================================================================

class ClienteSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    nome = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    cpf = serializers.RegexField(r'^\d{11}$', help_text="Somente os 11 dígitos do CPF")


# ====================================================================
# SERIALIZERS DE PEDIDOS
# ====================================================================

class ItemPedidoSerializer(serializers.Serializer):
    produto_id = serializers.UUIDField(source='produto.id')
    nome_produto = serializers.CharField(source='produto.nome')
    quantidade = serializers.IntegerField()
    preco_unitario = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)


class PedidoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    cliente = ClienteSerializer(allow_null=True)
    itens = ItemPedidoSerializer(many=True)
    valor_total = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.CharField(source='status.value')
    status_pagamento = serializers.CharField(source='status_pagamento.value')
    id_pagamento_externo = serializers.IntegerField(allow_null=True)
    criado_em = serializers.DateTimeField()
    atualizado_em = serializers.DateTimeField()


class ItemSolicitadoSerializer(serializers.Serializer):
    produto_id = serializers.UUIDField()
    # A regra "quantidade > 0" é validada no caso de uso
    quantidade = serializers.IntegerField()


class CriarPedidoSerializer(serializers.Serializer):
    cliente_id = serializers.UUIDField(required=False, allow_null=True)
    itens = ItemSolicitadoSerializer(many=True)


class AtualizarStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s.value for s in StatusPedido])
