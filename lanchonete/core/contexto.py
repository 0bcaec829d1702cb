# lanchonete/core/contexto.py
"""
Contexto de log explícito.

Cada chamada de caso de uso recebe um ContextoLog imutável (correlation id,
usuário e campos estruturados) em vez de depender de estado global por thread.
Os campos chegam aos registros de log via LoggerAdapter e são renderizados
pelo formatter JSON da infraestrutura.
"""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Optional

from lanchonete.core.exceptions import ItemNaoEncontradoError, RegraNegocioError

CATEGORIA_NEGOCIO = "BUSINESS"
CATEGORIA_INTEGRACAO = "INTEGRATION"


class AdaptadorContexto(logging.LoggerAdapter):
    """LoggerAdapter que mescla os campos do contexto com o `extra` de cada chamada."""

    def process(self, msg, kwargs):
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


@dataclass(frozen=True)
class ContextoLog:
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    usuario_id: Optional[str] = None
    campos: Dict[str, str] = field(default_factory=dict)

    def com(self, **campos: Any) -> "ContextoLog":
        """Retorna um novo contexto com os campos adicionados (None é ignorado)."""
        novos = dict(self.campos)
        novos.update({chave: str(valor) for chave, valor in campos.items() if valor is not None})
        return replace(self, campos=novos)

    def para_operacao(self, operacao: str, categoria: str = CATEGORIA_NEGOCIO, **campos: Any) -> "ContextoLog":
        return self.com(operacao=operacao, categoria_log=categoria, **campos)

    def como_extra(self) -> Dict[str, str]:
        extra = {"correlation_id": self.correlation_id}
        if self.usuario_id:
            extra["usuario_id"] = self.usuario_id
        extra.update(self.campos)
        return extra

    def logger(self, base: logging.Logger) -> AdaptadorContexto:
        return AdaptadorContexto(base, self.como_extra())


def contexto_ou_novo(contexto: Optional[ContextoLog]) -> ContextoLog:
    return contexto if contexto is not None else ContextoLog()


@contextmanager
def operacao(log: logging.LoggerAdapter, codigo_erro: str, mensagem: str, *args: Any) -> Iterator[None]:
    """
    Envolve o corpo de um caso de uso.

    Erros de negócio (NotFound / DomainError) sobem sem log adicional; qualquer
    outra exceção é registrada com o código de erro e relançada com o tipo original.
    """
    try:
        yield
    except (ItemNaoEncontradoError, RegraNegocioError):
        raise
    except Exception as e:
        log.error(mensagem, *args, exc_info=True, extra={"erro_codigo": codigo_erro, "erro_mensagem": str(e)})
        raise
