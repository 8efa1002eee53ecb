# apps/board/exceptions.py

from apps.core.pipelines import InvalidRoleError


class BoardError(Exception):
    """Erro base do board Kanban"""


class StorageError(BoardError):
    """Falha de leitura ou escrita no armazenamento de tarefas"""


class TaskNotFound(StorageError):
    """A tarefa não existe mais no armazenamento"""

    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f'Task {task_id} not found')


class StaleTaskError(StorageError):
    """
    A versão da tarefa mudou desde a leitura

    Outro cliente escreveu na tarefa entre o carregamento do board
    e a persistência do gesto.
    """

    def __init__(self, task_id, expected_version):
        self.task_id = task_id
        self.expected_version = expected_version
        super().__init__(f'Task {task_id} changed since version {expected_version}')


__all__ = [
    'BoardError',
    'StorageError',
    'TaskNotFound',
    'StaleTaskError',
    'InvalidRoleError',
]
