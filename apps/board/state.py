# apps/board/state.py

import copy
import logging

from .exceptions import StorageError

logger = logging.getLogger(__name__)


class BoardStateStore:
    """
    Cópia local das tarefas do role ativo

    Mantida eventualmente consistente com o armazenamento:
    carga completa na abertura e recarga completa a cada notificação
    de mudança (sem patch incremental, o volume por pipeline é pequeno).

    O snapshot pertence exclusivamente ao store enquanto o role estiver
    ativo; troca de role descarta tudo e recarrega.
    """

    def __init__(self, storage, on_error=None):
        self.storage = storage
        self.role = None
        self.on_error = on_error
        self._tasks = []
        self._subscription = None

    # === CARGA E INSCRIÇÃO ===

    def load(self, role=None):
        """
        Busca todas as tarefas do role ordenadas por posição e substitui o snapshot

        Falhas sobem como StorageError; o snapshot anterior é mantido.
        """
        role = role or self.role
        tasks = self.storage.select(role=role, order_by=('position',))
        self.role = role
        self._tasks = list(tasks)
        logger.debug(f"Board {role} carregado com {len(self._tasks)} tarefas")
        return self._tasks

    def subscribe(self, role=None):
        """Recarrega o board a cada insert/update/delete na coleção"""
        self.unsubscribe()
        if role:
            self.role = role
        self._subscription = self.storage.subscribe(self._on_change)
        return self._subscription

    def unsubscribe(self):
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    @property
    def subscribed(self):
        return self._subscription is not None and self._subscription.active

    def switch_role(self, role):
        """Troca o role ativo sem acumular inscrições duplicadas"""
        self.unsubscribe()
        self._tasks = []
        self.load(role)
        self.subscribe(role)

    def refresh(self):
        """
        Recarga disparada por notificação ou após falha de persistência

        Nunca levanta: o erro é registrado e repassado ao on_error.
        """
        if self.role is None:
            return False
        try:
            self.load(self.role)
            return True
        except StorageError as e:
            logger.warning(f"⚠️ Falha ao recarregar board {self.role}: {e}")
            if self.on_error:
                self.on_error(str(e))
            return False

    def _on_change(self, **kwargs):
        self.refresh()

    # === LEITURA ===

    @property
    def tasks(self):
        return list(self._tasks)

    def get(self, task_id):
        task_id = str(task_id)
        for task in self._tasks:
            if str(task.pk) == task_id:
                return task
        return None

    def partition(self, status):
        """Tarefas de uma etapa, na ordem visual (posição crescente)"""
        return sorted(
            (task for task in self._tasks if task.status == status),
            key=lambda task: task.position
        )

    def snapshot(self):
        """Mapa status -> tarefas ordenadas"""
        statuses = []
        for task in self._tasks:
            if task.status not in statuses:
                statuses.append(task.status)
        return {status: self.partition(status) for status in statuses}

    # === MUTAÇÃO LOCAL ===

    def apply_optimistic(self, patches):
        """
        Aplica {task_id: {campo: valor}} sem esperar o armazenamento

        Ids desconhecidos são ignorados (a tarefa pode ter sumido numa recarga).
        """
        for task_id, patch in patches.items():
            task = self.get(task_id)
            if task is None:
                continue
            for field, value in patch.items():
                setattr(task, field, value)

    def add(self, task):
        self._tasks.append(task)

    def remove(self, task_id):
        task = self.get(task_id)
        if task is not None:
            self._tasks.remove(task)
        return task

    def checkpoint(self):
        """Cópia do snapshot para rollback"""
        return [copy.copy(task) for task in self._tasks]

    def restore(self, checkpoint):
        self._tasks = [copy.copy(task) for task in checkpoint]
