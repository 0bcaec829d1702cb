# lanchonete/presentation/views.py
"""
Camada de apresentação (API REST).

As views apenas validam a entrada, chamam o Use Case com o ContextoLog da
requisição e serializam a Entidade devolvida. Os erros do Core são
convertidos em respostas HTTP por `tratar_excecoes`.
"""
import uuid

from rest_framework import status
from rest_framework.permissions import BasePermission, SAFE_METHODS
from rest_framework.response import Response
from rest_framework.views import APIView, exception_handler

from lanchonete.core.contexto import ContextoLog
from lanchonete.core.entities import ItemPedidoSolicitado, StatusPedido
from lanchonete.core.exceptions import (
    ItemNaoEncontradoError,
    RegraNegocioError,
    PagamentoFalhouError,
)
from lanchonete.core.dependency_injection import (
    get_categoria_use_case,
    get_produto_use_case,
    get_cliente_use_case,
    get_pedido_use_case,
    get_notificacao_pagamento_use_case,
)

from .serializers import (
    CategoriaSerializer,
    ProdutoSerializer,
    ProdutoAtualizacaoSerializer,
    ClienteSerializer,
    PedidoSerializer,
    CriarPedidoSerializer,
    AtualizarStatusSerializer,
)


# ====================================================================
# TRATAMENTO DE ERROS E PERMISSÕES
# ====================================================================

def tratar_excecoes(exc, context):
    """NotFound -> 404, regra de negócio -> 409, gateway de pagamento -> 502."""
    if isinstance(exc, ItemNaoEncontradoError):
        return Response({'message': exc.message}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, RegraNegocioError):
        return Response({'message': exc.message}, status=status.HTTP_409_CONFLICT)
    if isinstance(exc, PagamentoFalhouError):
        return Response({'message': exc.message}, status=status.HTTP_502_BAD_GATEWAY)
    return exception_handler(exc, context)


class EscritaSomenteEquipe(BasePermission):
    """Leitura liberada; escrita apenas para usuários da equipe (is_staff)."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_staff)


class LeituraSomenteEquipe(BasePermission):
    """Criação liberada (totem); leituras que expõem CPF e e-mail apenas para a equipe."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_staff)
        return True


def contexto_da_requisicao(request) -> ContextoLog:
    # Requisições que não passaram pelo middleware recebem um contexto novo
    return getattr(request, 'contexto_log', None) or ContextoLog()


class HealthView(APIView):
    authentication_classes = []

    def get(self, request):
        return Response({'status': 'UP'})


# ====================================================================
# 1. CATÁLOGO
# ====================================================================

class CategoriaListView(APIView):
    permission_classes = [EscritaSomenteEquipe]

    def get(self, request):
        categorias = get_categoria_use_case().listar_todas(contexto_da_requisicao(request))
        return Response(CategoriaSerializer(categorias, many=True).data)

    def post(self, request):
        serializer = CategoriaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        categoria = get_categoria_use_case().criar(
            serializer.validated_data['nome'], contexto_da_requisicao(request)
        )
        return Response(CategoriaSerializer(categoria).data, status=status.HTTP_201_CREATED)


class CategoriaDetailView(APIView):
    permission_classes = [EscritaSomenteEquipe]

    def get(self, request, pk):
        categoria = get_categoria_use_case().buscar_por_id(pk, contexto_da_requisicao(request))
        return Response(CategoriaSerializer(categoria).data)

    def put(self, request, pk):
        # Nome em branco é regra do caso de uso (DadosInvalidosError)
        nome = request.data.get('nome') or ''
        categoria = get_categoria_use_case().atualizar(pk, nome, contexto_da_requisicao(request))
        return Response(CategoriaSerializer(categoria).data)

    def delete(self, request, pk):
        get_categoria_use_case().deletar(pk, contexto_da_requisicao(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProdutoListView(APIView):
    """Lista produtos; aceita os filtros ?nome= e ?categoria=<uuid>."""
    permission_classes = [EscritaSomenteEquipe]

    def get(self, request):
        use_case = get_produto_use_case()
        contexto = contexto_da_requisicao(request)
        nome = request.query_params.get('nome')
        categoria = request.query_params.get('categoria')

        if categoria:
            try:
                categoria_id = uuid.UUID(categoria)
            except ValueError:
                return Response({'message': f'Categoria inválida: {categoria}'}, status=status.HTTP_400_BAD_REQUEST)
            produtos = use_case.buscar_por_categoria(categoria_id, contexto)
        elif nome:
            produtos = use_case.buscar_por_nome(nome, contexto)
        else:
            produtos = use_case.listar_todos(contexto)
        return Response(ProdutoSerializer(produtos, many=True).data)

    def post(self, request):
        serializer = ProdutoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dados = serializer.validated_data
        produto = get_produto_use_case().criar(
            nome=dados['nome'],
            descricao=dados['descricao'],
            preco=dados['preco'],
            categoria_id=dados['categoria_id'],
            contexto=contexto_da_requisicao(request),
        )
        return Response(ProdutoSerializer(produto).data, status=status.HTTP_201_CREATED)


class ProdutoDetailView(APIView):
    permission_classes = [EscritaSomenteEquipe]

    def get(self, request, pk):
        produto = get_produto_use_case().buscar_por_id(pk, contexto_da_requisicao(request))
        return Response(ProdutoSerializer(produto).data)

    def patch(self, request, pk):
        serializer = ProdutoAtualizacaoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        produto = get_produto_use_case().atualizar(
            pk, contexto=contexto_da_requisicao(request), **serializer.validated_data
        )
        return Response(ProdutoSerializer(produto).data)

    def delete(self, request, pk):
        get_produto_use_case().deletar(pk, contexto_da_requisicao(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


# ====================================================================
# 2. CLIENTES
# ====================================================================

class ClienteListView(APIView):
    permission_classes = [LeituraSomenteEquipe]

    def get(self, request):
        clientes = get_cliente_use_case().listar_todos(contexto_da_requisicao(request))
        return Response(ClienteSerializer(clientes, many=True).data)

    def post(self, request):
        serializer = ClienteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dados = serializer.validated_data
        cliente = get_cliente_use_case().registrar(
            dados['nome'], dados['email'], dados['cpf'], contexto_da_requisicao(request)
        )
        return Response(ClienteSerializer(cliente).data, status=status.HTTP_201_CREATED)


class ClienteDetailView(APIView):

    def get(self, request, pk):
        cliente = get_cliente_use_case().buscar_por_id(pk, contexto_da_requisicao(request))
        return Response(ClienteSerializer(cliente).data)


class ClienteCpfView(APIView):

    def get(self, request, cpf):
        cliente = get_cliente_use_case().buscar_por_cpf(cpf, contexto_da_requisicao(request))
        return Response(ClienteSerializer(cliente).data)


# ====================================================================
# 3. PEDIDOS
# ====================================================================

class PedidoListView(APIView):
    permission_classes = [LeituraSomenteEquipe]

    def get(self, request):
        filtro = request.query_params.get('status')
        if filtro and filtro not in StatusPedido.__members__:
            return Response({'message': f'Status inválido: {filtro}'}, status=status.HTTP_400_BAD_REQUEST)

        pedidos = get_pedido_use_case().listar(
            StatusPedido(filtro) if filtro else None, contexto_da_requisicao(request)
        )
        return Response(PedidoSerializer(pedidos, many=True).data)

    def post(self, request):
        serializer = CriarPedidoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dados = serializer.validated_data
        itens = [ItemPedidoSolicitado(item['produto_id'], item['quantidade']) for item in dados['itens']]

        pedido = get_pedido_use_case().criar(dados.get('cliente_id'), itens, contexto_da_requisicao(request))
        return Response(PedidoSerializer(pedido).data, status=status.HTTP_201_CREATED)


class PedidoDetailView(APIView):
    permission_classes = [LeituraSomenteEquipe]

    def get(self, request, pk):
        pedido = get_pedido_use_case().buscar_por_id(pk, contexto_da_requisicao(request))
        return Response(PedidoSerializer(pedido).data)


class PedidoStatusView(APIView):
    """Mudança manual de status (cozinha). Exige pagamento aprovado."""
    permission_classes = [EscritaSomenteEquipe]

    def patch(self, request, pk):
        serializer = AtualizarStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pedido = get_pedido_use_case().atualizar_status(
            pk, StatusPedido(serializer.validated_data['status']), contexto_da_requisicao(request)
        )
        return Response(PedidoSerializer(pedido).data)


class PedidoPreparoView(APIView):
    permission_classes = [EscritaSomenteEquipe]

    def post(self, request, pk):
        pedido = get_pedido_use_case().enviar_para_preparo(pk, contexto_da_requisicao(request))
        return Response(PedidoSerializer(pedido).data)


# ====================================================================
# 4. WEBHOOK DE PAGAMENTO
# ====================================================================

def _extrair_id_pagamento(request):
    """O Mercado Pago envia o id em `data.id` (webhook) ou em `resource`/`id` (IPN)."""
    dados = request.data if isinstance(request.data, dict) else {}
    candidatos = [
        (dados.get('data') or {}).get('id') if isinstance(dados.get('data'), dict) else None,
        dados.get('resource'),
        dados.get('id'),
        request.query_params.get('data.id'),
        request.query_params.get('id'),
    ]
    for candidato in candidatos:
        if candidato is None:
            continue
        valor = str(candidato).rstrip('/').rsplit('/', 1)[-1]
        # isdigit() aceita dígitos Unicode ('²') que int() recusa
        if valor.isascii() and valor.isdigit():
            return int(valor)
    return None


class WebhookPagamentoView(APIView):
    """
    Recebe as notificações do Mercado Pago. Responde 200 sempre que houver um
    id de pagamento; o resultado do processamento fica apenas no log.
    """
    authentication_classes = []

    def post(self, request):
        id_pagamento = _extrair_id_pagamento(request)
        if id_pagamento is None:
            return Response({'message': 'Id do pagamento ausente.'}, status=status.HTTP_400_BAD_REQUEST)

        get_notificacao_pagamento_use_case().processar(id_pagamento, contexto_da_requisicao(request))
        return Response(status=status.HTTP_200_OK)
