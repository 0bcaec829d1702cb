import json
import logging
import sys
import uuid
from decimal import Decimal
from io import StringIO
from unittest.mock import Mock, patch

import requests
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase

# Importamos as classes que queremos testar
from lanchonete.catalogo.models import Categoria as CategoriaModel, Produto as ProdutoModel
from lanchonete.clientes.models import Cliente as ClienteModel
from lanchonete.pedidos.models import Pedido as PedidoModel, ItemPedido as ItemPedidoModel
from lanchonete.core.entities import (
    Categoria, Produto, Cliente, Pedido, ItemPedido, ItemPedidoSolicitado,
    StatusPedido, StatusPagamento
)
from lanchonete.core.exceptions import (
    DadosInvalidosError, PagamentoFalhouError, ProvedorIdentidadeError, PedidoNaoPagoError,
    ProdutoVinculadoAPedidoError
)
from lanchonete.core.contexto import ContextoLog
from lanchonete.core.use_cases import PedidoUseCase, ProdutoUseCase
from lanchonete.infrastructure.repositories import (
    CategoriaRepositoryDjango, ProdutoRepositoryDjango, ClienteRepositoryDjango, PedidoRepositoryDjango
)
from lanchonete.infrastructure.gateways import MercadoPagoGateway, ProvedorIdentidadeGateway
from lanchonete.infrastructure.tarefas import ExecutorPosCommitDjango
from lanchonete.infrastructure.formatters import JsonFormatter


# ====================================================================
# REPOSITÓRIOS (Django ORM)
# ====================================================================
class CatalogoRepositoryTestCase(TestCase):

    def setUp(self):
        """
        Cria uma categoria e um produto reais no banco de dados de teste.
        """
        self.categoria_repo = CategoriaRepositoryDjango()
        self.produto_repo = ProdutoRepositoryDjango()
        self.lanche = self.categoria_repo.salvar(Categoria(nome='Lanche'))
        self.produto = self.produto_repo.salvar(Produto(
            nome='X-Burger', descricao='Pão e carne', preco=Decimal('18.90'), categoria=self.lanche
        ))

    def test_categoria_salva_e_recuperada(self):
        encontrada = self.categoria_repo.buscar_por_id(self.lanche.id)

        self.assertEqual(encontrada, self.lanche)
        self.assertTrue(self.categoria_repo.existe_por_nome('Lanche'))
        self.assertFalse(self.categoria_repo.existe_por_nome('Bebida'))

    def test_salvar_categoria_existente_atualiza(self):
        self.lanche.nome = 'Lanches'
        self.categoria_repo.salvar(self.lanche)

        self.assertEqual(CategoriaModel.objects.count(), 1)
        self.assertEqual(CategoriaModel.objects.get().nome, 'Lanches')

    def test_buscar_por_id_nao_encontrado_devolve_none(self):
        """
        Cenário: ausência é sinalizada com None, nunca com exceção.
        """
        self.assertIsNone(self.categoria_repo.buscar_por_id(uuid.uuid4()))
        self.assertIsNone(self.produto_repo.buscar_por_id(uuid.uuid4()))

    def test_produto_mapeado_com_categoria(self):
        produto = self.produto_repo.buscar_por_id(self.produto.id)

        self.assertEqual(produto.categoria, self.lanche)
        self.assertEqual(produto.preco, Decimal('18.90'))
        self.assertTrue(produto.ativo)

    def test_buscar_por_nome_ignora_maiusculas(self):
        self.assertEqual(len(self.produto_repo.buscar_por_nome('burger')), 1)
        self.assertEqual(self.produto_repo.buscar_por_nome('pizza'), [])

    def test_buscar_por_categoria(self):
        bebida = self.categoria_repo.salvar(Categoria(nome='Bebida'))

        self.assertEqual([p.id for p in self.produto_repo.buscar_por_categoria(self.lanche.id)], [self.produto.id])
        self.assertEqual(self.produto_repo.buscar_por_categoria(bebida.id), [])

    def test_deletar_produto(self):
        self.produto_repo.deletar_por_id(self.produto.id)

        self.assertFalse(ProdutoModel.objects.exists())


class ClienteRepositoryTestCase(TestCase):

    def setUp(self):
        self.repo = ClienteRepositoryDjango()
        self.cliente = self.repo.salvar(Cliente(nome='Maria', email='maria@example.com', cpf='12345678900'))

    def test_busca_por_cpf_e_id(self):
        self.assertEqual(self.repo.buscar_por_cpf('12345678900'), self.cliente)
        self.assertEqual(self.repo.buscar_por_id(self.cliente.id), self.cliente)
        self.assertIsNone(self.repo.buscar_por_cpf('00000000000'))

    def test_existe_por_cpf(self):
        self.assertTrue(self.repo.existe_por_cpf('12345678900'))
        self.assertFalse(self.repo.existe_por_cpf('98765432100'))

    def test_cpf_nao_e_alterado_na_atualizacao(self):
        self.cliente.email = 'novo@example.com'
        self.cliente.cpf = '11111111111'
        self.repo.salvar(self.cliente)

        model = ClienteModel.objects.get(pk=self.cliente.id)
        self.assertEqual(model.email, 'novo@example.com')
        self.assertEqual(model.cpf, '12345678900')


class PedidoRepositoryTestCase(TestCase):

    def setUp(self):
        categoria = CategoriaRepositoryDjango().salvar(Categoria(nome='Lanche'))
        self.produto_repo = ProdutoRepositoryDjango()
        self.produto = self.produto_repo.salvar(
            Produto(nome='X-Burger', descricao='', preco=Decimal('10.00'), categoria=categoria)
        )
        self.cliente = ClienteRepositoryDjango().salvar(
            Cliente(nome='Maria', email='maria@example.com', cpf='12345678900')
        )
        self.repo = PedidoRepositoryDjango()

    def _novo_pedido(self, cliente=None, id_pagamento=555):
        pedido = Pedido.criar(cliente, [ItemPedido.criar(self.produto, 2)])
        pedido.id_pagamento_externo = id_pagamento
        return self.repo.salvar(pedido)

    def test_salvar_atribui_id_e_grava_itens(self):
        pedido = self._novo_pedido(self.cliente)

        self.assertIsNotNone(pedido.id)
        self.assertEqual(pedido.valor_total, Decimal('20.00'))
        self.assertEqual(pedido.cliente, self.cliente)
        self.assertEqual(len(pedido.itens), 1)
        self.assertEqual(pedido.itens[0].preco_unitario, Decimal('10.00'))
        self.assertEqual(ItemPedidoModel.objects.count(), 1)

    def test_atualizacao_nao_duplica_itens(self):
        pedido = self._novo_pedido()
        pedido.status = StatusPedido.IN_PREPARATION
        pedido.status_pagamento = StatusPagamento.APROVADO

        atualizado = self.repo.salvar(pedido)

        self.assertEqual(atualizado.status, StatusPedido.IN_PREPARATION)
        self.assertEqual(atualizado.status_pagamento, StatusPagamento.APROVADO)
        self.assertEqual(PedidoModel.objects.count(), 1)
        self.assertEqual(ItemPedidoModel.objects.count(), 1)

    def test_preco_do_item_nao_acompanha_o_produto(self):
        pedido = self._novo_pedido()
        self.produto.preco = Decimal('99.00')
        self.produto_repo.salvar(self.produto)

        recarregado = self.repo.buscar_por_id(pedido.id)

        self.assertEqual(recarregado.itens[0].preco_unitario, Decimal('10.00'))
        self.assertEqual(recarregado.valor_total, Decimal('20.00'))

    def test_buscar_por_id_pagamento(self):
        pedido = self._novo_pedido(id_pagamento=777)

        self.assertEqual(self.repo.buscar_por_id_pagamento(777).id, pedido.id)
        self.assertIsNone(self.repo.buscar_por_id_pagamento(1))

    def test_listar_com_e_sem_filtro(self):
        primeiro = self._novo_pedido(id_pagamento=1)
        segundo = self._novo_pedido(id_pagamento=2)
        segundo.status = StatusPedido.READY
        self.repo.salvar(segundo)

        self.assertEqual([p.id for p in self.repo.listar()], [primeiro.id, segundo.id])
        self.assertEqual([p.id for p in self.repo.listar(StatusPedido.READY)], [segundo.id])
        self.assertEqual(self.repo.listar(StatusPedido.FINISHED), [])

    def test_existe_por_produto(self):
        self.assertFalse(self.repo.existe_por_produto(self.produto.id))
        self._novo_pedido()
        self.assertTrue(self.repo.existe_por_produto(self.produto.id))


class FluxoDePedidoTestCase(TestCase):
    """
    Casos de uso ligados aos repositórios reais; apenas o gateway de pagamento é simulado.
    """

    def setUp(self):
        self.categoria_repo = CategoriaRepositoryDjango()
        self.produto_repo = ProdutoRepositoryDjango()
        self.pedido_repo = PedidoRepositoryDjango()
        self.pagamento_gateway_mock = Mock()
        self.pagamento_gateway_mock.criar_ordem_pagamento.return_value = 4242

        self.pedido_use_case = PedidoUseCase(
            self.pedido_repo, ClienteRepositoryDjango(), self.produto_repo, self.pagamento_gateway_mock
        )
        self.produto_use_case = ProdutoUseCase(self.produto_repo, self.categoria_repo, self.pedido_repo)

        lanche = self.categoria_repo.salvar(Categoria(nome='Lanche'))
        self.burger = self.produto_repo.salvar(
            Produto(nome='X-Burger', descricao='', preco=Decimal('10.00'), categoria=lanche))
        self.batata = self.produto_repo.salvar(
            Produto(nome='Batata', descricao='', preco=Decimal('5.00'), categoria=lanche))

    def test_ciclo_completo_do_pedido(self):
        pedido = self.pedido_use_case.criar(None, [
            ItemPedidoSolicitado(self.burger.id, 2),
            ItemPedidoSolicitado(self.batata.id, 1),
        ])
        self.assertEqual(pedido.valor_total, Decimal('25.00'))

        with self.assertRaises(PedidoNaoPagoError):
            self.pedido_use_case.atualizar_status(pedido.id, StatusPedido.IN_PREPARATION)

        pago = self.pedido_use_case.atualizar_status_pagamento(4242, StatusPagamento.APROVADO)
        self.assertEqual(pago.status, StatusPedido.IN_PREPARATION)

        pronto = self.pedido_use_case.atualizar_status(pedido.id, StatusPedido.READY)
        self.assertEqual(self.pedido_repo.buscar_por_id(pronto.id).status, StatusPedido.READY)

    def test_quantidade_zero_nao_persiste_pedido(self):
        with self.assertRaises(DadosInvalidosError):
            self.pedido_use_case.criar(None, [ItemPedidoSolicitado(self.burger.id, 0)])

        self.assertFalse(PedidoModel.objects.exists())

    def test_produto_em_pedido_nao_pode_ser_deletado(self):
        self.pedido_use_case.criar(None, [ItemPedidoSolicitado(self.burger.id, 1)])

        with self.assertRaises(ProdutoVinculadoAPedidoError):
            self.produto_use_case.deletar(self.burger.id)

        self.produto_use_case.deletar(self.batata.id)
        self.assertFalse(ProdutoModel.objects.filter(pk=self.batata.id).exists())


# ====================================================================
# TAREFAS PÓS-COMMIT
# ====================================================================
class ExecutorPosCommitDjangoTestCase(TestCase):

    def test_tarefa_roda_depois_do_commit(self):
        tarefa = Mock()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            ExecutorPosCommitDjango().agendar('provisionar', tarefa)
            tarefa.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        tarefa.assert_called_once_with()

    def test_falha_da_tarefa_nao_propaga(self):
        tarefa = Mock(side_effect=ProvedorIdentidadeError('fora do ar'))

        with self.assertLogs('lanchonete.core.tarefas', level='ERROR') as logs:
            with self.captureOnCommitCallbacks(execute=True):
                ExecutorPosCommitDjango().agendar('provisionar', tarefa, ContextoLog(correlation_id='c-9'))

        self.assertEqual(logs.records[0].correlation_id, 'c-9')
        self.assertEqual(logs.records[0].erro_codigo, 'POST_COMMIT_TASK_FAILED')


# ====================================================================
# GATEWAYS (requests simulado)
# ====================================================================
def _resposta(status_code=200, corpo=None):
    resposta = Mock(status_code=status_code)
    resposta.json.return_value = corpo or {}
    if status_code >= 400:
        resposta.raise_for_status.side_effect = requests.exceptions.HTTPError(f'{status_code} Error')
    return resposta


class MercadoPagoGatewayTestCase(SimpleTestCase):

    def setUp(self):
        self.gateway = MercadoPagoGateway(
            api_base_url='https://mp.example.com/v1/', access_token='TOKEN', timeout=3
        )

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_cria_pagamento_pix(self, post_mock):
        post_mock.return_value = _resposta(201, {'id': 123456, 'status': 'pending'})

        pagamento_id = self.gateway.criar_ordem_pagamento(
            Decimal('25.00'), 'Pagamento para o pedido', 'pix', 1, 'maria@example.com', 'CPF', '12345678900'
        )

        self.assertEqual(pagamento_id, 123456)
        args, kwargs = post_mock.call_args
        self.assertEqual(args[0], 'https://mp.example.com/v1/payments')
        self.assertEqual(kwargs['timeout'], 3)
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer TOKEN')
        self.assertIn('X-Idempotency-Key', kwargs['headers'])
        self.assertEqual(kwargs['json'], {
            'transaction_amount': 25.0,
            'description': 'Pagamento para o pedido',
            'payment_method_id': 'pix',
            'installments': 1,
            'payer': {
                'email': 'maria@example.com',
                'identification': {'type': 'CPF', 'number': '12345678900'},
            },
        })

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_pedido_sem_cliente_envia_payer_vazio(self, post_mock):
        post_mock.return_value = _resposta(201, {'id': 1})

        self.gateway.criar_ordem_pagamento(Decimal('5.00'), 'Pagamento para o pedido', 'pix', 1, None, 'CPF', None)

        self.assertEqual(post_mock.call_args.kwargs['json']['payer'], {})

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_erro_de_conexao_vira_pagamento_falhou(self, post_mock):
        post_mock.side_effect = requests.exceptions.ConnectionError('sem rede')

        with self.assertRaises(PagamentoFalhouError):
            self.gateway.criar_ordem_pagamento(Decimal('5.00'), 'x', 'pix', 1, None, 'CPF', None)

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_resposta_sem_id_vira_pagamento_falhou(self, post_mock):
        post_mock.return_value = _resposta(201, {'status': 'rejected'})

        with self.assertRaises(PagamentoFalhouError):
            self.gateway.criar_ordem_pagamento(Decimal('5.00'), 'x', 'pix', 1, None, 'CPF', None)

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_erro_http_vira_pagamento_falhou(self, post_mock):
        post_mock.return_value = _resposta(400)

        with self.assertRaises(PagamentoFalhouError):
            self.gateway.criar_ordem_pagamento(Decimal('5.00'), 'x', 'pix', 1, None, 'CPF', None)


class ProvedorIdentidadeGatewayTestCase(SimpleTestCase):

    def setUp(self):
        self.gateway = ProvedorIdentidadeGateway(
            api_base_url='https://idp.example.com', token='T', senha_temporaria='Senha@123', timeout=2
        )

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_cria_usuario_com_cpf_como_username(self, post_mock):
        post_mock.return_value = _resposta(201)

        self.gateway.criar_usuario('12345678900', 'maria@example.com', 'Maria')

        args, kwargs = post_mock.call_args
        self.assertEqual(args[0], 'https://idp.example.com/users')
        self.assertEqual(kwargs['json']['username'], '12345678900')
        self.assertEqual(kwargs['json']['attributes'], {'cpf': '12345678900'})
        self.assertEqual(kwargs['json']['temporary_password'], 'Senha@123')
        self.assertTrue(kwargs['json']['permanent_password'])
        self.assertTrue(kwargs['json']['suppress_message'])

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_usuario_existente_nao_e_erro(self, post_mock):
        post_mock.return_value = _resposta(409)

        self.assertIsNone(self.gateway.criar_usuario('12345678900', 'maria@example.com', 'Maria'))

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_outros_erros_levantam_excecao(self, post_mock):
        post_mock.return_value = _resposta(500)

        with self.assertRaises(ProvedorIdentidadeError):
            self.gateway.criar_usuario('12345678900', 'maria@example.com', 'Maria')

    @patch('lanchonete.infrastructure.gateways.requests.post')
    def test_erro_de_conexao_levanta_excecao(self, post_mock):
        post_mock.side_effect = requests.exceptions.Timeout('timeout')

        with self.assertRaises(ProvedorIdentidadeError):
            self.gateway.criar_usuario('12345678900', 'maria@example.com', 'Maria')


# ====================================================================
# LOG JSON
# ====================================================================
class JsonFormatterTestCase(SimpleTestCase):

    def _registro(self, **extra):
        registro = logging.LogRecord('lanchonete.teste', logging.INFO, __file__, 10, 'Pedido %s criado', (7,), None)
        for chave, valor in extra.items():
            setattr(registro, chave, valor)
        return registro

    def test_campos_do_contexto_vao_para_o_json(self):
        saida = JsonFormatter(service_name='lanchonete-teste').format(
            self._registro(correlation_id='abc', operacao='CreateOrder', duracao_ms=12)
        )

        dados = json.loads(saida)
        self.assertEqual(dados['message'], 'Pedido 7 criado')
        self.assertEqual(dados['service'], 'lanchonete-teste')
        self.assertEqual(dados['level'], 'INFO')
        self.assertEqual(dados['correlation_id'], 'abc')
        self.assertEqual(dados['operacao'], 'CreateOrder')
        self.assertEqual(dados['duracao_ms'], 12)
        self.assertNotIn('lineno', dados)

    def test_excecao_e_serializada(self):
        try:
            raise ValueError('falhou')
        except ValueError:
            registro = self._registro()
            registro.exc_info = sys.exc_info()

        dados = json.loads(JsonFormatter().format(registro))

        self.assertEqual(dados['error']['type'], 'ValueError')
        self.assertEqual(dados['error']['message'], 'falhou')


# ====================================================================
# CARGA DO CARDÁPIO
# ====================================================================
class CarregarCardapioTestCase(TestCase):

    def test_carrega_categorias_padrao_uma_unica_vez(self):
        call_command('carregar_cardapio', stdout=StringIO())
        call_command('carregar_cardapio', stdout=StringIO())

        self.assertEqual(
            sorted(CategoriaModel.objects.values_list('nome', flat=True)),
            ['Acompanhamento', 'Bebida', 'Lanche', 'Sobremesa'],
        )
        self.assertEqual(ProdutoModel.objects.count(), 9)
        self.assertTrue(ProdutoModel.objects.filter(ativo=True).exists())
