from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from lanchonete.catalogo.models import Categoria as CategoriaModel, Produto as ProdutoModel
from lanchonete.pedidos.models import Pedido as PedidoModel
from lanchonete.core.exceptions import PagamentoFalhouError


class ApiTestCase(TestCase):
    """
    Base dos testes da API: cliente anônimo, cliente da equipe e gateways simulados.
    """

    def setUp(self):
        self.client = APIClient()
        self.equipe = APIClient()
        usuario = get_user_model().objects.create_user(username='cozinha', password='senha', is_staff=True)
        self.equipe.force_authenticate(user=usuario)

        patcher_pagamento = patch('lanchonete.core.dependency_injection.MercadoPagoGateway')
        patcher_identidade = patch('lanchonete.core.dependency_injection.ProvedorIdentidadeGateway')
        self.gateway_pagamento = patcher_pagamento.start().return_value
        self.provedor_identidade = patcher_identidade.start().return_value
        self.addCleanup(patcher_pagamento.stop)
        self.addCleanup(patcher_identidade.stop)
        self.gateway_pagamento.criar_ordem_pagamento.return_value = 4242

    def _criar_categoria(self, nome='Lanche'):
        return CategoriaModel.objects.create(nome=nome)

    def _criar_produto(self, categoria, nome='X-Burger', preco='10.00', ativo=True):
        return ProdutoModel.objects.create(
            categoria=categoria, nome=nome, descricao='', preco=Decimal(preco), ativo=ativo
        )


class HealthTestCase(ApiTestCase):

    def test_health(self):
        resposta = self.client.get('/health')

        self.assertEqual(resposta.status_code, 200)
        self.assertEqual(resposta.json(), {'status': 'UP'})
        self.assertTrue(resposta['X-Correlation-ID'])

    def test_correlation_id_informado_e_devolvido(self):
        resposta = self.client.get('/health', HTTP_X_CORRELATION_ID='req-123')

        self.assertEqual(resposta['X-Correlation-ID'], 'req-123')


# ====================================================================
# CATÁLOGO
# ====================================================================
class CatalogoApiTestCase(ApiTestCase):

    def test_escrita_exige_equipe(self):
        resposta = self.client.post('/api/categorias/', {'nome': 'Lanche'}, format='json')

        self.assertIn(resposta.status_code, (401, 403))
        self.assertFalse(CategoriaModel.objects.exists())

    def test_criar_e_listar_categoria(self):
        resposta = self.equipe.post('/api/categorias/', {'nome': 'Bebida'}, format='json')
        self.assertEqual(resposta.status_code, 201)

        lista = self.client.get('/api/categorias/').json()
        self.assertEqual([c['nome'] for c in lista], ['Bebida'])
        self.assertEqual(lista[0]['id'], resposta.json()['id'])

    def test_categoria_duplicada_retorna_409(self):
        self._criar_categoria('Lanche')

        resposta = self.equipe.post('/api/categorias/', {'nome': 'Lanche'}, format='json')

        self.assertEqual(resposta.status_code, 409)
        self.assertEqual(resposta.json()['message'], 'Category with name Lanche already exists')

    def test_renomear_categoria_com_nome_em_branco_retorna_409(self):
        categoria = self._criar_categoria()

        resposta = self.equipe.put(f'/api/categorias/{categoria.id}/', {'nome': ''}, format='json')

        self.assertEqual(resposta.status_code, 409)

    def test_renomear_categoria_para_nome_existente_retorna_409(self):
        self._criar_categoria('Lanche')
        bebida = self._criar_categoria('Bebida')

        resposta = self.equipe.put(f'/api/categorias/{bebida.id}/', {'nome': 'Lanche'}, format='json')

        self.assertEqual(resposta.status_code, 409)
        self.assertEqual(resposta.json()['message'], 'Category with name Lanche already exists')
        self.assertEqual(CategoriaModel.objects.get(pk=bebida.id).nome, 'Bebida')

    def test_renomear_categoria_mantendo_o_nome(self):
        categoria = self._criar_categoria('Lanche')

        resposta = self.equipe.put(f'/api/categorias/{categoria.id}/', {'nome': 'Lanche'}, format='json')

        self.assertEqual(resposta.status_code, 200)

    def test_deletar_categoria_com_produtos_retorna_409(self):
        categoria = self._criar_categoria()
        self._criar_produto(categoria)

        resposta = self.equipe.delete(f'/api/categorias/{categoria.id}/')

        self.assertEqual(resposta.status_code, 409)
        self.assertTrue(CategoriaModel.objects.filter(pk=categoria.id).exists())

    def test_categoria_inexistente_retorna_404(self):
        resposta = self.client.get('/api/categorias/00000000-0000-0000-0000-000000000000/')

        self.assertEqual(resposta.status_code, 404)
        self.assertEqual(resposta.json()['message'], 'Category Record not found')

    def test_criar_produto_e_filtrar(self):
        categoria = self._criar_categoria()
        self._criar_produto(categoria, nome='Batata Frita', preco='9.90')

        resposta = self.equipe.post('/api/produtos/', {
            'nome': 'X-Salada', 'descricao': 'Com salada', 'preco': '21.90', 'categoria_id': str(categoria.id)
        }, format='json')

        self.assertEqual(resposta.status_code, 201)
        self.assertTrue(resposta.json()['ativo'])
        self.assertEqual(resposta.json()['categoria']['nome'], 'Lanche')

        por_nome = self.client.get('/api/produtos/', {'nome': 'salada'}).json()
        self.assertEqual([p['nome'] for p in por_nome], ['X-Salada'])

        por_categoria = self.client.get('/api/produtos/', {'categoria': str(categoria.id)}).json()
        self.assertEqual(len(por_categoria), 2)

    def test_filtro_de_categoria_invalido_retorna_400(self):
        resposta = self.client.get('/api/produtos/', {'categoria': 'lanche'})

        self.assertEqual(resposta.status_code, 400)

    def test_desativar_produto(self):
        produto = self._criar_produto(self._criar_categoria())

        resposta = self.equipe.patch(f'/api/produtos/{produto.id}/', {'ativo': False}, format='json')

        self.assertEqual(resposta.status_code, 200)
        self.assertFalse(resposta.json()['ativo'])
        self.assertEqual(resposta.json()['nome'], 'X-Burger')


# ====================================================================
# CLIENTES
# ====================================================================
class ClienteApiTestCase(ApiTestCase):

    dados = {'nome': 'Maria', 'email': 'maria@example.com', 'cpf': '12345678900'}

    def test_registro_provisiona_identidade_depois_do_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            resposta = self.client.post('/api/clientes/', self.dados, format='json')

        self.assertEqual(resposta.status_code, 201)
        self.provedor_identidade.criar_usuario.assert_called_once_with(
            '12345678900', 'maria@example.com', 'Maria'
        )

    def test_cpf_duplicado_retorna_409(self):
        self.client.post('/api/clientes/', self.dados, format='json')

        resposta = self.client.post('/api/clientes/', self.dados, format='json')

        self.assertEqual(resposta.status_code, 409)

    def test_cpf_invalido_retorna_400(self):
        resposta = self.client.post('/api/clientes/', {**self.dados, 'cpf': '123'}, format='json')

        self.assertEqual(resposta.status_code, 400)

    def test_listagem_de_clientes_exige_equipe(self):
        self.client.post('/api/clientes/', self.dados, format='json')

        anonimo = self.client.get('/api/clientes/')
        equipe = self.equipe.get('/api/clientes/')

        self.assertIn(anonimo.status_code, (401, 403))
        self.assertNotIn('12345678900', anonimo.content.decode())
        self.assertEqual(equipe.status_code, 200)
        self.assertEqual([c['cpf'] for c in equipe.json()], ['12345678900'])

    def test_busca_por_cpf(self):
        self.client.post('/api/clientes/', self.dados, format='json')

        encontrado = self.client.get('/api/clientes/cpf/12345678900/')
        ausente = self.client.get('/api/clientes/cpf/00000000000/')

        self.assertEqual(encontrado.status_code, 200)
        self.assertEqual(encontrado.json()['nome'], 'Maria')
        self.assertEqual(ausente.status_code, 404)


# ====================================================================
# PEDIDOS E WEBHOOK
# ====================================================================
class PedidoApiTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        categoria = self._criar_categoria()
        self.burger = self._criar_produto(categoria, nome='X-Burger', preco='10.00')
        self.batata = self._criar_produto(categoria, nome='Batata', preco='5.00')
        self.inativo = self._criar_produto(categoria, nome='X-Tudo', preco='30.00', ativo=False)

    def _criar_pedido(self, itens):
        return self.client.post('/api/pedidos/', {
            'itens': [{'produto_id': str(p.id), 'quantidade': q} for p, q in itens]
        }, format='json')

    def test_criar_pedido(self):
        resposta = self._criar_pedido([(self.burger, 2), (self.batata, 1)])

        self.assertEqual(resposta.status_code, 201)
        corpo = resposta.json()
        self.assertEqual(corpo['valor_total'], '25.00')
        self.assertEqual(corpo['status'], 'RECEIVED')
        self.assertEqual(corpo['status_pagamento'], 'AGUARDANDO_PAGAMENTO')
        self.assertEqual(corpo['id_pagamento_externo'], 4242)
        self.assertIsNone(corpo['cliente'])

    def test_quantidade_zero_retorna_409_sem_persistir(self):
        resposta = self._criar_pedido([(self.burger, 0)])

        self.assertEqual(resposta.status_code, 409)
        self.assertEqual(resposta.json()['message'], 'Quantity must be greater than zero')
        self.assertFalse(PedidoModel.objects.exists())

    def test_produto_inativo_retorna_409(self):
        resposta = self._criar_pedido([(self.inativo, 1)])

        self.assertEqual(resposta.status_code, 409)
        self.assertEqual(resposta.json()['message'], 'Product is not active: X-Tudo')

    def test_falha_no_pagamento_retorna_502(self):
        self.gateway_pagamento.criar_ordem_pagamento.side_effect = PagamentoFalhouError('fora do ar')

        resposta = self._criar_pedido([(self.burger, 1)])

        self.assertEqual(resposta.status_code, 502)
        self.assertFalse(PedidoModel.objects.exists())

    def test_fluxo_de_pagamento_pelo_webhook(self):
        pedido_id = self._criar_pedido([(self.burger, 1)]).json()['id']

        nao_pago = self.equipe.patch(f'/api/pedidos/{pedido_id}/status/', {'status': 'READY'}, format='json')
        self.assertEqual(nao_pago.status_code, 409)
        self.assertEqual(nao_pago.json()['message'], 'The order is not paid')

        webhook = self.client.post('/api/webhooks/pagamentos/', {'type': 'payment', 'data': {'id': '4242'}},
                                   format='json')
        self.assertEqual(webhook.status_code, 200)

        pedido = self.equipe.get(f'/api/pedidos/{pedido_id}/').json()
        self.assertEqual(pedido['status'], 'IN_PREPARATION')
        self.assertEqual(pedido['status_pagamento'], 'APROVADO')

        pronto = self.equipe.patch(f'/api/pedidos/{pedido_id}/status/', {'status': 'READY'}, format='json')
        self.assertEqual(pronto.status_code, 200)
        self.assertEqual(pronto.json()['status'], 'READY')

        prontos = self.equipe.get('/api/pedidos/', {'status': 'READY'}).json()
        self.assertEqual([p['id'] for p in prontos], [pedido_id])

    def test_webhook_de_pagamento_desconhecido_e_confirmado(self):
        resposta = self.client.post('/api/webhooks/pagamentos/', {'resource': '999'}, format='json')

        self.assertEqual(resposta.status_code, 200)

    def test_webhook_sem_id_retorna_400(self):
        resposta = self.client.post('/api/webhooks/pagamentos/', {'type': 'payment'}, format='json')

        self.assertEqual(resposta.status_code, 400)

    def test_webhook_com_digito_unicode_retorna_400(self):
        resposta = self.client.post('/api/webhooks/pagamentos/', {'data': {'id': '²'}}, format='json')

        self.assertEqual(resposta.status_code, 400)

    def test_leitura_de_pedidos_exige_equipe(self):
        pedido_id = self._criar_pedido([(self.burger, 1)]).json()['id']

        self.assertIn(self.client.get('/api/pedidos/').status_code, (401, 403))
        self.assertIn(self.client.get(f'/api/pedidos/{pedido_id}/').status_code, (401, 403))

    def test_enviar_para_preparo_sem_pagamento(self):
        pedido_id = self._criar_pedido([(self.batata, 1)]).json()['id']

        resposta = self.equipe.post(f'/api/pedidos/{pedido_id}/preparo/')

        self.assertEqual(resposta.status_code, 200)
        self.assertEqual(resposta.json()['status'], 'IN_PREPARATION')
        self.assertEqual(resposta.json()['status_pagamento'], 'AGUARDANDO_PAGAMENTO')

    def test_pedido_inexistente_retorna_404(self):
        self.assertEqual(self.equipe.get('/api/pedidos/999/').status_code, 404)

    def test_filtro_de_status_invalido_retorna_400(self):
        self.assertEqual(self.equipe.get('/api/pedidos/', {'status': 'PAGO'}).status_code, 400)

    def test_deletar_produto_em_pedido_retorna_409(self):
        self._criar_pedido([(self.burger, 1)])

        resposta = self.equipe.delete(f'/api/produtos/{self.burger.id}/')

        self.assertEqual(resposta.status_code, 409)
