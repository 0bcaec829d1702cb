import logging
import uuid
from decimal import Decimal
from typing import Optional

import requests
from django.conf import settings

# Importa as Portas e Exceções da camada Core
from lanchonete.core.ports import IGatewayPagamento, IProvedorIdentidade
from lanchonete.core.exceptions import PagamentoFalhouError, ProvedorIdentidadeError

logger = logging.getLogger(__name__)


# ====================================================================
# GATEWAYS: Implementações concretas que se comunicam com APIs externas.
# ====================================================================

class MercadoPagoGateway(IGatewayPagamento):
    """
    Gateway para a API de Pagamentos do Mercado Pago.
    Cria a ordem de pagamento e devolve o id numérico que o Mercado Pago
    envia depois na notificação (webhook).
    """

    def __init__(self, api_base_url: Optional[str] = None, access_token: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.api_base_url = (api_base_url or settings.MERCADO_PAGO_API_URL).rstrip('/')
        self.access_token = access_token or settings.MERCADO_PAGO_ACCESS_TOKEN
        self.timeout = timeout or settings.MERCADO_PAGO_TIMEOUT

        if not self.access_token:
            logger.warning("MERCADO_PAGO_ACCESS_TOKEN not configured. Payment requests will be rejected.")

    def _montar_payload(self, valor, descricao, metodo, parcelas, email, tipo_identificacao, cpf) -> dict:
        payer = {}
        if email:
            payer["email"] = email
        if cpf:
            payer["identification"] = {"type": tipo_identificacao, "number": cpf}

        return {
            "transaction_amount": float(valor),
            "description": descricao,
            "payment_method_id": metodo,
            "installments": parcelas,
            "payer": payer,
        }

    def criar_ordem_pagamento(
        self,
        valor: Decimal,
        descricao: str,
        metodo: str,
        parcelas: int,
        email: Optional[str],
        tipo_identificacao: str,
        cpf: Optional[str],
    ) -> int:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "X-Idempotency-Key": str(uuid.uuid4()),  # Para evitar duplicidade
        }
        payload = self._montar_payload(valor, descricao, metodo, parcelas, email, tipo_identificacao, cpf)

        try:
            url = f"{self.api_base_url}/payments"
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise PagamentoFalhouError(f"Erro de conexão com a API do Mercado Pago: {e}")
        except ValueError:
            raise PagamentoFalhouError("Resposta inválida da API do Mercado Pago.")

        pagamento_id = data.get("id")
        if not isinstance(pagamento_id, int) or isinstance(pagamento_id, bool):
            raise PagamentoFalhouError(f"Mercado Pago não retornou o id do pagamento. Status MP: {data.get('status')}")

        logger.info("Payment order created: paymentId=%s, amount=%s", pagamento_id, valor,
                    extra={"pagamento_id": str(pagamento_id), "categoria_log": "INTEGRATION"})
        return pagamento_id


class ProvedorIdentidadeGateway(IProvedorIdentidade):
    """
    Cria o login do cliente no provedor de identidade.

    O username é o CPF. A senha temporária já é marcada como definitiva e o
    e-mail de boas-vindas é suprimido. Usuário já existente (HTTP 409) é sucesso.
    """

    def __init__(self, api_base_url: Optional[str] = None, token: Optional[str] = None,
                 senha_temporaria: Optional[str] = None, timeout: Optional[int] = None):
        self.api_base_url = (api_base_url or settings.IDENTIDADE_API_URL).rstrip('/')
        self.token = token or settings.IDENTIDADE_API_TOKEN
        self.senha_temporaria = senha_temporaria or settings.IDENTIDADE_SENHA_TEMPORARIA
        self.timeout = timeout or settings.IDENTIDADE_TIMEOUT

    def criar_usuario(self, cpf: str, email: str, nome: str) -> None:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        payload = {
            "username": cpf,
            "email": email,
            "name": nome,
            "attributes": {"cpf": cpf},
            "temporary_password": self.senha_temporaria,
            "permanent_password": True,
            "suppress_message": True,
        }

        try:
            response = requests.post(f"{self.api_base_url}/users", json=payload, headers=headers,
                                     timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ProvedorIdentidadeError(f"Erro de conexão com o provedor de identidade: {e}")

        if response.status_code == 409:
            logger.info("Identity provider user already exists: username=%s", cpf,
                        extra={"categoria_log": "INTEGRATION"})
            return

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ProvedorIdentidadeError(f"Erro ao criar usuário no provedor de identidade: {e}")

        logger.info("Identity provider user created: username=%s", cpf,
                    extra={"categoria_log": "INTEGRATION"})
