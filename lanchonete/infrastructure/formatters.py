"""
Formatter de log estruturado (uma linha JSON por registro).

Os campos do ContextoLog chegam ao LogRecord como atributos extras
(correlation_id, operacao, pedido_id...) e são copiados para o JSON.
"""
import json
import logging
import traceback
from datetime import datetime, timezone

# Atributos padrão de todo LogRecord; o que não estiver aqui veio via `extra`
_ATRIBUTOS_PADRAO = set(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):

    def __init__(self, service_name: str = 'lanchonete', **kwargs):
        super().__init__(**kwargs)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "@timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        for chave, valor in vars(record).items():
            if chave not in _ATRIBUTOS_PADRAO and not chave.startswith('_'):
                log_obj[chave] = valor

        if record.exc_info:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_obj, default=str, ensure_ascii=False)
