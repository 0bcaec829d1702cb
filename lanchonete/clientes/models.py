import uuid

from django.db import models


class Cliente(models.Model):
    """
    Cliente identificado pelo CPF.
    O mesmo CPF é o login do cliente no provedor de identidade.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    nome = models.CharField(max_length=255)
    email = models.EmailField()
    cpf = models.CharField(max_length=11, unique=True, verbose_name="CPF")

    class Meta:
        verbose_name = 'Cliente'
        verbose_name_plural = 'Clientes'
        db_table = 'clientes_cliente'
        ordering = ['nome']

    def __str__(self):
        return f"{self.nome} ({self.cpf})"
