"""Testes do DjangoTaskStorage sobre o ORM."""

import pytest

from apps.board.exceptions import StaleTaskError, TaskNotFound
from apps.board.storage import DjangoTaskStorage
from apps.core.models import Task

pytestmark = pytest.mark.django_db


@pytest.fixture
def orm_storage():
    return DjangoTaskStorage()


class TestSelect:
    def test_filters_by_role_and_orders_by_position(self, orm_storage, create_task):
        create_task('Second', position=1)
        create_task('First', position=0)
        create_task('Operations', role='operations')

        tasks = orm_storage.select(role='designer')

        assert [task.title for task in tasks] == ['First', 'Second']

    def test_status_filters(self, orm_storage, create_task):
        create_task('Open')
        create_task('Closed', status='DONE')

        assert [t.title for t in orm_storage.select(status='DONE')] == ['Closed']
        assert [t.title for t in orm_storage.select(exclude_status='DONE')] == ['Open']

    def test_newest_first(self, orm_storage, create_task, designer_user):
        old = create_task('Old')
        new = create_task('New')
        Task.objects.filter(pk=old.pk).update(created_at=new.created_at.replace(year=2020))

        tasks = orm_storage.select(order_by=('-created_at',))

        assert [task.title for task in tasks] == ['New', 'Old']


class TestWrites:
    def test_insert(self, orm_storage, designer_user):
        task = orm_storage.insert(
            title='Flyer', role='designer', status='TO DO LIST',
            position=0, created_by_id=designer_user.pk,
        )

        assert Task.objects.get(pk=task.pk).title == 'Flyer'
        assert task.version == 0

    def test_update_bumps_version(self, orm_storage, create_task):
        task = create_task('Flyer')

        version = orm_storage.update(str(task.pk), {'position': 4}, expected_version=0)

        task.refresh_from_db()
        assert version == 1
        assert task.version == 1
        assert task.position == 4

    def test_update_with_stale_version_writes_nothing(self, orm_storage, create_task):
        task = create_task('Flyer')
        orm_storage.update(str(task.pk), {'position': 1})

        with pytest.raises(StaleTaskError):
            orm_storage.update(str(task.pk), {'position': 9}, expected_version=0)

        task.refresh_from_db()
        assert task.position == 1

    def test_update_missing_task(self, orm_storage):
        with pytest.raises(TaskNotFound):
            orm_storage.update('2b0f3b57-58a4-4a0c-8f6e-6d1f0c5f7c11', {'position': 1})

    def test_delete(self, orm_storage, create_task):
        task = create_task('Flyer')

        orm_storage.delete(str(task.pk))

        assert not Task.objects.filter(pk=task.pk).exists()

    def test_delete_missing_task(self, orm_storage):
        with pytest.raises(TaskNotFound):
            orm_storage.delete('2b0f3b57-58a4-4a0c-8f6e-6d1f0c5f7c11')


class TestSubscribe:
    def test_every_mutation_notifies(self, orm_storage, create_task):
        events = []
        subscription = orm_storage.subscribe(lambda **kwargs: events.append(kwargs['event']))

        task = create_task('Flyer')
        orm_storage.update(str(task.pk), {'position': 2})
        orm_storage.delete(str(task.pk))
        subscription.cancel()

        assert events == ['insert', 'update', 'delete']

    def test_cancel_stops_notifications(self, orm_storage, create_task):
        events = []
        subscription = orm_storage.subscribe(lambda **kwargs: events.append(kwargs))
        subscription.cancel()
        subscription.cancel()

        create_task('Flyer')

        assert events == []
