"""
Management command que carrega o cardápio padrão (categorias e alguns produtos).
Pode ser executado mais de uma vez: o que já existe é mantido.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand

from lanchonete.core.dependency_injection import get_categoria_use_case, get_produto_use_case

CARDAPIO = {
    'Lanche': [
        ('X-Burger', 'Pão, hambúrguer e queijo', Decimal('18.90')),
        ('X-Salada', 'Pão, hambúrguer, queijo, alface e tomate', Decimal('21.90')),
        ('X-Bacon', 'Pão, hambúrguer, queijo e bacon', Decimal('24.90')),
    ],
    'Acompanhamento': [
        ('Batata Frita', 'Porção individual de batata frita', Decimal('9.90')),
        ('Onion Rings', 'Anéis de cebola empanados', Decimal('11.90')),
    ],
    'Bebida': [
        ('Refrigerante Lata', 'Lata 350ml', Decimal('6.50')),
        ('Suco Natural', 'Copo 400ml', Decimal('8.90')),
    ],
    'Sobremesa': [
        ('Sorvete', 'Casquinha de baunilha', Decimal('5.90')),
        ('Torta de Maçã', 'Fatia individual', Decimal('7.90')),
    ],
}


class Command(BaseCommand):
    help = 'Carrega as categorias e produtos padrão do cardápio'

    def handle(self, *args, **kwargs):
        self.stdout.write('Carregando cardápio...')
        categoria_use_case = get_categoria_use_case()
        produto_use_case = get_produto_use_case()

        existentes = {c.nome: c for c in categoria_use_case.listar_todas()}

        for nome_categoria, produtos in CARDAPIO.items():
            categoria = existentes.get(nome_categoria)
            if categoria:
                self.stdout.write(f'Categoria "{nome_categoria}" já existe')
                continue

            categoria = categoria_use_case.criar(nome_categoria)
            self.stdout.write(self.style.SUCCESS(f'Criada categoria "{categoria.nome}"'))

            for nome, descricao, preco in produtos:
                produto_use_case.criar(nome, descricao, preco, categoria.id)
                self.stdout.write(f'  Criado produto "{nome}"')

        self.stdout.write(self.style.SUCCESS('Cardápio carregado com sucesso!'))
