from typing import Callable, Optional

from django.db import transaction

from lanchonete.core.contexto import ContextoLog
from lanchonete.core.ports import IExecutorPosCommit
from lanchonete.core.tarefas import executar_isolado


class ExecutorPosCommitDjango(IExecutorPosCommit):
    """
    Agenda a tarefa para depois do commit da transação corrente.
    Fora de um bloco atomic o Django executa na hora. Se a transação
    for desfeita, a tarefa é descartada.
    """

    def agendar(self, nome: str, tarefa: Callable[[], None], contexto: Optional[ContextoLog] = None) -> None:
        transaction.on_commit(lambda: executar_isolado(nome, tarefa, contexto))
