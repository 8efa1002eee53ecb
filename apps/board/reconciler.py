# apps/board/reconciler.py

"""
Reconciliação de drag-and-drop do board Kanban

Um gesto de arrastar passa por IDLE -> DRAGGING -> RESOLVED -> IDLE.
No drop, o reconciliador decide entre:

- reordenação dentro da mesma coluna: renumera 0..n-1 todas as
  tarefas da coluna, na nova ordem
- transição de etapa: um único update de status na tarefa arrastada,
  anexando-a ao final da coluna de destino

O estado local é atualizado antes da persistência (otimista). Se alguma
escrita falhar, o snapshot volta ao checkpoint anterior ao gesto.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from django.utils import timezone

from apps.core.pipelines import (
    TERMINAL_STAGE,
    first_stage,
    get_pipeline,
    is_terminal,
)
from .exceptions import StaleTaskError, StorageError, TaskNotFound

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    RESOLVED = 'resolved'


@dataclass
class DragResult:
    """Resultado da resolução de um gesto"""

    action: str  # 'noop' | 'reorder' | 'move'
    task_id: Optional[str] = None
    status: Optional[str] = None
    order: List[str] = field(default_factory=list)
    writes: int = 0
    error: Optional[str] = None
    conflict: bool = False
    missing: bool = False

    @property
    def ok(self):
        return self.error is None

    def to_dict(self):
        return {
            'success': self.ok,
            'action': self.action,
            'task_id': self.task_id,
            'status': self.status,
            'order': self.order,
            'writes': self.writes,
            'error': self.error,
            'conflict': self.conflict,
            'missing': self.missing,
        }


def move_item(items, old_index, new_index):
    """Move um elemento; os intermediários deslizam uma posição"""
    items = list(items)
    items.insert(new_index, items.pop(old_index))
    return items


class DragReconciler:
    """
    Máquina de estados do gesto de arrastar + operações de conclusão/remoção

    Trabalha sobre um BoardStateStore já carregado e persiste pelo
    storage do próprio store.
    """

    def __init__(self, store, context=None, clock=timezone.now):
        self.store = store
        self.context = context
        self.clock = clock
        self.state = DragState.IDLE
        self.active_task = None

    @property
    def storage(self):
        return self.store.storage

    @property
    def columns(self):
        return get_pipeline(self.store.role)

    # === GESTO ===

    def drag_start(self, task_id):
        """Captura a tarefa arrastada; id desconhecido ignora o gesto"""
        task = self.store.get(task_id)
        if task is None:
            self.cancel()
            return False

        self.active_task = task
        self.state = DragState.DRAGGING
        return True

    def cancel(self):
        self.active_task = None
        self.state = DragState.IDLE

    def drag_end(self, over_id):
        active = self.active_task
        if self.state is not DragState.DRAGGING or active is None:
            self.cancel()
            return DragResult(action='noop')

        self.state = DragState.RESOLVED
        try:
            # Soltou fora de qualquer área de drop
            if over_id is None or over_id == '':
                return DragResult(action='noop', task_id=str(active.pk), status=active.status)

            over_id = str(over_id)
            target_status = self._resolve_target_status(active, over_id)

            if target_status == active.status:
                return self._reorder(active, over_id)
            return self._move(active, target_status)
        finally:
            self.cancel()

    def _resolve_target_status(self, active, over_id):
        if over_id in self.columns:
            return over_id

        over_task = self.store.get(over_id)
        if over_task is not None:
            return over_task.status

        return active.status

    def _reorder(self, active, over_id):
        status = active.status
        tasks = self.store.partition(status)
        ids = [str(task.pk) for task in tasks]
        active_id = str(active.pk)

        # Drop na própria coluna (sem tarefa alvo) ou sobre si mesma
        if over_id not in ids or over_id == active_id:
            return DragResult(action='noop', task_id=active_id, status=status, order=ids)

        new_order = move_item(tasks, ids.index(active_id), ids.index(over_id))
        writes = [
            (task, {'position': index})
            for index, task in enumerate(new_order)
        ]
        result = DragResult(
            action='reorder',
            task_id=active_id,
            status=status,
            order=[str(task.pk) for task in new_order],
        )
        return self._persist(writes, result)

    def _move(self, active, target_status):
        destination = [
            task for task in self.store.partition(target_status)
            if task.pk != active.pk
        ]
        patch = {'status': target_status, 'position': len(destination)}

        if is_terminal(target_status):
            patch['completed_at'] = self.clock()
        elif active.completed_at is not None:
            patch['completed_at'] = None

        result = DragResult(action='move', task_id=str(active.pk), status=target_status)
        return self._persist([(active, patch)], result)

    def _persist(self, writes, result):
        """
        Aplica localmente e persiste cada escrita, na ordem

        Cada escrita leva a versão lida; conflito ou falha restauram o
        checkpoint e, se algo já foi gravado, recarregam do storage.
        """
        checkpoint = self.store.checkpoint()
        expected = {str(task.pk): task.version for task, _ in writes}

        self.store.apply_optimistic({task.pk: patch for task, patch in writes})

        for task, patch in writes:
            task_id = str(task.pk)
            try:
                version = self.storage.update(task_id, patch, expected_version=expected[task_id])
            except StorageError as e:
                logger.warning(
                    f"⚠️ Falha ao persistir gesto ({result.action}) na tarefa {task_id}: {e}"
                )
                result.error = self._describe_error(e)
                result.conflict = isinstance(e, StaleTaskError)
                result.missing = isinstance(e, TaskNotFound)
                self.store.restore(checkpoint)
                if result.writes or result.conflict or result.missing:
                    self.store.refresh()
                return result

            self.store.apply_optimistic({task_id: {'version': version}})
            result.writes += 1

        logger.info(
            f"✅ Gesto {result.action} resolvido em {result.status} ({result.writes} escritas)"
        )
        return result

    @staticmethod
    def _describe_error(error):
        if isinstance(error, StaleTaskError):
            return 'The board changed while you were dragging. It has been reloaded.'
        if isinstance(error, TaskNotFound):
            return 'This task no longer exists.'
        return str(error)

    # === CRIAÇÃO, CONCLUSÃO E REMOÇÃO ===

    def create_task(self, title, description='', priority='medium', assigned_to=None):
        """
        Cria tarefa na primeira etapa, no fim da coluna

        Retorna (sucesso, mensagem, tarefa).
        """
        title = (title or '').strip()
        if not title:
            return False, 'Title is required', None

        role = self.store.role
        if not get_pipeline(role):
            return False, f'The {role} role has no pipeline to add tasks to', None

        status = first_stage(role)
        try:
            task = self.storage.insert(
                title=title,
                description=description or None,
                priority=priority,
                status=status,
                role=role,
                created_by_id=self.context.user_id if self.context else None,
                assigned_to=assigned_to,
                position=len(self.store.partition(status)),
            )
        except StorageError as e:
            return False, str(e), None

        if self.store.get(task.pk) is None:
            self.store.add(task)
        return True, 'Task created successfully', task

    def complete_task(self, task_id):
        """
        Conclui a tarefa; se já estiver em DONE, remove

        Une "marcar como feito" e "arquivar" em uma única ação.
        Retorna (sucesso, mensagem).
        """
        task = self.store.get(task_id)
        if task is None:
            return False, 'Task not found'

        if is_terminal(task.status):
            return self._delete(task, 'Completed task has been removed')

        checkpoint = self.store.checkpoint()
        expected_version = task.version
        patch = {
            'status': TERMINAL_STAGE,
            'completed_at': self.clock(),
            'position': len(self.store.partition(TERMINAL_STAGE)),
        }
        self.store.apply_optimistic({task.pk: patch})

        try:
            version = self.storage.update(str(task.pk), patch, expected_version=expected_version)
        except StorageError as e:
            self.store.restore(checkpoint)
            if isinstance(e, StaleTaskError):
                self.store.refresh()
            return False, self._describe_error(e)

        self.store.apply_optimistic({task.pk: {'version': version}})
        return True, 'Task marked as done'

    def delete_task(self, task_id):
        """Remoção explícita, disponível só com privilégio de exclusão"""
        if not (self.context and self.context.can_delete):
            return False, 'Only admins can delete tasks'

        task = self.store.get(task_id)
        if task is None:
            return False, 'Task not found'

        return self._delete(task, 'Task has been permanently removed')

    def _delete(self, task, message):
        checkpoint = self.store.checkpoint()
        self.store.remove(task.pk)
        try:
            self.storage.delete(str(task.pk))
        except StorageError as e:
            self.store.restore(checkpoint)
            return False, self._describe_error(e)
        return True, message
