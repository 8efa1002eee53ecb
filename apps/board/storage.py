# apps/board/storage.py

"""
Contrato de armazenamento de tarefas consumido pelo board

O board nunca fala com o ORM diretamente: ele recebe um TaskStorage
com select / insert / update / delete / subscribe. Isso permite trocar
o backend (ORM, fake em memória nos testes) sem tocar no reconciliador.
"""

import logging
from abc import ABC, abstractmethod

from django.db import DatabaseError
from django.db.models import F
from django.utils import timezone

from apps.core.models import Task
from apps.core.signals import tasks_changed
from .exceptions import StaleTaskError, StorageError, TaskNotFound

logger = logging.getLogger(__name__)


class Subscription:
    """
    Handle cancelável de uma inscrição em notificações de mudança

    cancel() é idempotente.
    """

    def __init__(self, on_cancel):
        self._on_cancel = on_cancel
        self.active = True

    def cancel(self):
        if not self.active:
            return
        self.active = False
        self._on_cancel()


class TaskStorage(ABC):
    """Interface do armazenamento de tarefas"""

    @abstractmethod
    def select(self, role=None, status=None, exclude_status=None, order_by=('position',)):
        """Retorna lista ordenada de tarefas que casam com os filtros"""

    @abstractmethod
    def insert(self, **fields):
        """Cria uma tarefa e retorna a instância persistida"""

    @abstractmethod
    def update(self, task_id, patch, expected_version=None):
        """
        Aplica o patch e retorna a nova versão da tarefa

        Se expected_version for informado e não bater com a versão
        armazenada, levanta StaleTaskError sem escrever nada.
        """

    @abstractmethod
    def delete(self, task_id):
        """Remove a tarefa"""

    @abstractmethod
    def subscribe(self, callback):
        """
        Registra callback(**kwargs) chamado a cada insert/update/delete

        Retorna uma Subscription.
        """


class DjangoTaskStorage(TaskStorage):
    """
    Implementação sobre o ORM do Django

    Updates usam queryset.update() (uma única query condicional na versão),
    que não dispara post_save; por isso a notificação é enviada aqui.
    """

    def select(self, role=None, status=None, exclude_status=None, order_by=('position',)):
        queryset = Task.objects.all()

        if role is not None:
            queryset = queryset.filter(role=role)
        if status is not None:
            queryset = queryset.filter(status=status)
        if exclude_status is not None:
            queryset = queryset.exclude(status=exclude_status)

        try:
            return list(queryset.order_by(*order_by, 'created_at'))
        except DatabaseError as e:
            logger.error(f"❌ Erro ao consultar tarefas (role={role}): {e}")
            raise StorageError(f'Could not load tasks: {e}') from e

    def insert(self, **fields):
        try:
            return Task.objects.create(**fields)
        except DatabaseError as e:
            logger.error(f"❌ Erro ao criar tarefa: {e}")
            raise StorageError(f'Could not create task: {e}') from e

    def update(self, task_id, patch, expected_version=None):
        queryset = Task.objects.filter(pk=task_id)
        if expected_version is not None:
            queryset = queryset.filter(version=expected_version)

        values = dict(patch)
        values['version'] = F('version') + 1
        values['updated_at'] = timezone.now()

        try:
            updated = queryset.update(**values)
            if not updated:
                if not Task.objects.filter(pk=task_id).exists():
                    raise TaskNotFound(task_id)
                raise StaleTaskError(task_id, expected_version)

            task = Task.objects.only('version', 'role').get(pk=task_id)
        except DatabaseError as e:
            logger.error(f"❌ Erro ao atualizar tarefa {task_id}: {e}")
            raise StorageError(f'Could not update task: {e}') from e

        tasks_changed.send(sender=Task, event='update', task_id=task_id, role=task.role)
        return task.version

    def delete(self, task_id):
        try:
            deleted, _ = Task.objects.filter(pk=task_id).delete()
        except DatabaseError as e:
            logger.error(f"❌ Erro ao remover tarefa {task_id}: {e}")
            raise StorageError(f'Could not delete task: {e}') from e

        if not deleted:
            raise TaskNotFound(task_id)

    def subscribe(self, callback):
        def receiver(sender, **kwargs):
            callback(**kwargs)

        tasks_changed.connect(receiver, sender=Task, weak=False)
        return Subscription(lambda: tasks_changed.disconnect(receiver, sender=Task))
