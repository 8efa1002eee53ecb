"""Fixtures compartilhadas dos testes do Agency Board."""

import copy
from datetime import datetime, timezone as dt_timezone

import pytest

from apps.board.exceptions import StaleTaskError, StorageError, TaskNotFound
from apps.board.state import BoardStateStore
from apps.board.storage import Subscription, TaskStorage
from apps.core.models import Task
from apps.core.permissions import BoardContext

FIXED_NOW = datetime(2024, 3, 5, 12, 0, tzinfo=dt_timezone.utc)


class MemoryTaskStorage(TaskStorage):
    """
    Armazenamento em memória que registra cada escrita

    writes: lista de ('insert' | 'update' | 'delete', task_id, patch)
    selects: lista dos filtros recebidos por select()
    fail_update_at: índice (0-based) da chamada de update que falha
    fail_select / fail_delete: força StorageError nessas operações
    """

    def __init__(self, tasks=()):
        self.tasks = {str(task.pk): copy.copy(task) for task in tasks}
        self.writes = []
        self.selects = []
        self.subscribers = []
        self.fail_update_at = None
        self.fail_select = False
        self.fail_delete = False
        self._update_calls = 0

    def select(self, role=None, status=None, exclude_status=None, order_by=('position',)):
        self.selects.append({
            'role': role,
            'status': status,
            'exclude_status': exclude_status,
            'order_by': tuple(order_by),
        })
        if self.fail_select:
            raise StorageError('Could not load tasks: connection refused')

        tasks = [
            task for task in self.tasks.values()
            if (role is None or task.role == role)
            and (status is None or task.status == status)
            and (exclude_status is None or task.status != exclude_status)
        ]
        for field in reversed(tuple(order_by) + ('created_at',)):
            reverse = field.startswith('-')
            name = field.lstrip('-')
            tasks.sort(key=lambda task: getattr(task, name), reverse=reverse)
        return [copy.copy(task) for task in tasks]

    def insert(self, **fields):
        task = Task(**fields)
        self.tasks[str(task.pk)] = copy.copy(task)
        self.writes.append(('insert', str(task.pk), fields))
        self._notify('insert', task)
        return task

    def update(self, task_id, patch, expected_version=None):
        task_id = str(task_id)
        call = self._update_calls
        self._update_calls += 1
        if self.fail_update_at is not None and call == self.fail_update_at:
            raise StorageError('Could not update task: connection reset')

        stored = self.tasks.get(task_id)
        if stored is None:
            raise TaskNotFound(task_id)
        if expected_version is not None and stored.version != expected_version:
            raise StaleTaskError(task_id, expected_version)

        for field, value in patch.items():
            setattr(stored, field, value)
        stored.version += 1
        self.writes.append(('update', task_id, dict(patch)))
        self._notify('update', stored)
        return stored.version

    def delete(self, task_id):
        task_id = str(task_id)
        if self.fail_delete:
            raise StorageError('Could not delete task: connection reset')
        task = self.tasks.pop(task_id, None)
        if task is None:
            raise TaskNotFound(task_id)
        self.writes.append(('delete', task_id, None))
        self._notify('delete', task)

    def subscribe(self, callback):
        self.subscribers.append(callback)
        return Subscription(lambda: self.subscribers.remove(callback))

    def _notify(self, event, task):
        for callback in list(self.subscribers):
            callback(event=event, task_id=task.pk, role=task.role)

    def stored(self, task):
        return self.tasks[str(task.pk)]


def make_task(title, role='designer', status='TO DO LIST', position=0, **extra):
    extra.setdefault('created_by_id', 1)
    extra.setdefault('created_at', FIXED_NOW)
    return Task(title=title, role=role, status=status, position=position, **extra)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def designer_tasks():
    """Designer: A, B, C em TO DO LIST; D em MOCKUP PENDING; PRODUCTION vazia"""
    return {
        'A': make_task('A', position=0),
        'B': make_task('B', position=1),
        'C': make_task('C', position=2),
        'D': make_task('D', status='MOCKUP PENDING', position=0),
    }


@pytest.fixture
def storage(designer_tasks):
    return MemoryTaskStorage(designer_tasks.values())


@pytest.fixture
def store(storage):
    board = BoardStateStore(storage)
    board.load('designer')
    storage.selects.clear()
    return board


@pytest.fixture
def designer_context():
    return BoardContext(user_id=2, permission_role='designer', view_role='designer')


@pytest.fixture
def admin_context():
    return BoardContext(user_id=1, permission_role='admin', view_role='designer')


def ids(tasks):
    return [task.title for task in tasks]


# === Usuários persistidos (testes com banco) ===

@pytest.fixture
def make_user(django_user_model):
    def _make(username, role):
        return django_user_model.objects.create_user(
            username=username,
            password='senha-teste-123',
            role=role,
        )
    return _make


@pytest.fixture
def admin_user_db(make_user):
    return make_user('admin', 'admin')


@pytest.fixture
def designer_user(make_user):
    return make_user('designer', 'designer')


@pytest.fixture
def operations_user(make_user):
    return make_user('operations', 'operations')


@pytest.fixture
def sem_role_user(make_user):
    return make_user('novato', '')


@pytest.fixture
def create_task(designer_user):
    """Cria tarefa persistida (default: designer / TO DO LIST)"""
    def _create(title, role='designer', status='TO DO LIST', position=0, **extra):
        extra.setdefault('created_by', designer_user)
        return Task.objects.create(title=title, role=role, status=status, position=position, **extra)
    return _create
