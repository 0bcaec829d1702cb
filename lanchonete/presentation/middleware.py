"""
Middleware de correlação: monta o ContextoLog de cada requisição.
"""
import logging
import time
import uuid

from lanchonete.core.contexto import ContextoLog

logger = logging.getLogger(__name__)

HEADER_CORRELATION_ID = 'X-Correlation-ID'
HEADER_USUARIO_ID = 'X-User-ID'


class CorrelationIdMiddleware:
    """
    Lê (ou gera) o correlation id, disponibiliza o contexto em
    `request.contexto_log` e devolve o id no cabeçalho da resposta.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        inicio = time.monotonic()
        correlation_id = request.headers.get(HEADER_CORRELATION_ID) or str(uuid.uuid4())
        contexto = ContextoLog(
            correlation_id=correlation_id,
            usuario_id=request.headers.get(HEADER_USUARIO_ID) or None,
        ).com(metodo_http=request.method, caminho=request.path)
        request.contexto_log = contexto

        log = contexto.logger(logger)
        log.info("Request started: %s %s", request.method, request.path)

        response = self.get_response(request)

        log.info("Request completed: %s %s status=%s", request.method, request.path, response.status_code,
                 extra={"status_http": response.status_code,
                        "duracao_ms": int((time.monotonic() - inicio) * 1000)})
        response[HEADER_CORRELATION_ID] = correlation_id
        return response
