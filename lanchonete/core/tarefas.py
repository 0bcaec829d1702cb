# lanchonete/core/tarefas.py
"""
Tarefas pós-commit: efeitos colaterais que rodam depois da escrita principal
e cujas falhas ficam isoladas em um canal próprio (log de erro).
"""
import logging
from typing import Callable, Optional

from lanchonete.core.contexto import ContextoLog, CATEGORIA_INTEGRACAO, contexto_ou_novo

logger = logging.getLogger(__name__)


def executar_isolado(nome: str, tarefa: Callable[[], None], contexto: Optional[ContextoLog] = None) -> bool:
    """Roda a tarefa uma única vez. Retorna False se ela falhou (a falha já foi registrada)."""
    log = contexto_ou_novo(contexto).com(categoria_log=CATEGORIA_INTEGRACAO, tarefa=nome).logger(logger)
    try:
        tarefa()
    except Exception as e:
        log.error("Post-commit task failed: task=%s", nome, exc_info=True,
                  extra={"erro_codigo": "POST_COMMIT_TASK_FAILED", "erro_mensagem": str(e)})
        return False
    log.info("Post-commit task completed: task=%s", nome)
    return True


class ExecutorPosCommitImediato:
    """Executa a tarefa na hora, na mesma chamada (sem transação envolvendo)."""

    def agendar(self, nome: str, tarefa: Callable[[], None], contexto: Optional[ContextoLog] = None) -> None:
        executar_isolado(nome, tarefa, contexto)
