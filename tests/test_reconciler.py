"""Testes do DragReconciler: gestos, conclusão, remoção e rollback."""

import pytest

from apps.board.reconciler import DragReconciler, DragState, move_item
from conftest import FIXED_NOW, ids


@pytest.fixture
def reconciler(store, designer_context, clock):
    return DragReconciler(store, context=designer_context, clock=clock)


def drag(reconciler, task, over_id):
    assert reconciler.drag_start(task.pk)
    return reconciler.drag_end(over_id)


class TestMoveItem:
    def test_move_forward(self):
        assert move_item(['A', 'B', 'C'], 0, 2) == ['B', 'C', 'A']

    def test_move_backward(self):
        assert move_item(['A', 'B', 'C'], 2, 0) == ['C', 'A', 'B']

    def test_does_not_mutate_input(self):
        items = ['A', 'B']
        move_item(items, 0, 1)
        assert items == ['A', 'B']


class TestReorder:
    def test_drop_c_onto_a_renumbers_whole_column(self, reconciler, store, storage, designer_tasks):
        a, b, c = designer_tasks['A'], designer_tasks['B'], designer_tasks['C']

        result = drag(reconciler, c, str(a.pk))

        assert result.ok
        assert result.action == 'reorder'
        assert result.order == [str(c.pk), str(a.pk), str(b.pk)]
        assert storage.writes == [
            ('update', str(c.pk), {'position': 0}),
            ('update', str(a.pk), {'position': 1}),
            ('update', str(b.pk), {'position': 2}),
        ]
        assert ids(store.partition('TO DO LIST')) == ['C', 'A', 'B']

    def test_positions_are_dense_after_reorder(self, reconciler, store, designer_tasks):
        drag(reconciler, designer_tasks['A'], str(designer_tasks['C'].pk))

        positions = [task.position for task in store.partition('TO DO LIST')]
        assert positions == [0, 1, 2]
        assert ids(store.partition('TO DO LIST')) == ['B', 'C', 'A']

    def test_local_versions_follow_storage(self, reconciler, store, storage, designer_tasks):
        drag(reconciler, designer_tasks['C'], str(designer_tasks['A'].pk))

        for key in 'ABC':
            task = designer_tasks[key]
            assert store.get(task.pk).version == storage.stored(task).version == 1

    def test_drop_on_itself_writes_nothing(self, reconciler, storage, designer_tasks):
        a = designer_tasks['A']

        result = drag(reconciler, a, str(a.pk))

        assert result.action == 'noop'
        assert storage.writes == []

    def test_drop_outside_writes_nothing(self, reconciler, storage, designer_tasks):
        result = drag(reconciler, designer_tasks['B'], None)

        assert result.action == 'noop'
        assert result.ok
        assert storage.writes == []

    def test_drop_on_own_column_writes_nothing(self, reconciler, storage, designer_tasks):
        result = drag(reconciler, designer_tasks['B'], 'TO DO LIST')

        assert result.action == 'noop'
        assert storage.writes == []

    def test_unknown_over_id_is_treated_as_own_column(self, reconciler, storage, designer_tasks):
        result = drag(reconciler, designer_tasks['B'], 'not-a-task')

        assert result.action == 'noop'
        assert storage.writes == []


class TestMove:
    def test_drop_on_empty_column_is_a_single_write(self, reconciler, store, storage, designer_tasks):
        a = designer_tasks['A']

        result = drag(reconciler, a, 'PRODUCTION')

        assert result.ok
        assert result.action == 'move'
        assert result.status == 'PRODUCTION'
        assert storage.writes == [
            ('update', str(a.pk), {'status': 'PRODUCTION', 'position': 0}),
        ]
        assert ids(store.partition('PRODUCTION')) == ['A']

    def test_old_column_keeps_relative_order(self, reconciler, store, designer_tasks):
        drag(reconciler, designer_tasks['B'], 'PRODUCTION')

        assert ids(store.partition('TO DO LIST')) == ['A', 'C']

    def test_drop_on_task_appends_to_its_column(self, reconciler, store, storage, designer_tasks):
        a, d = designer_tasks['A'], designer_tasks['D']

        result = drag(reconciler, a, str(d.pk))

        assert result.status == 'MOCKUP PENDING'
        assert storage.writes == [
            ('update', str(a.pk), {'status': 'MOCKUP PENDING', 'position': 1}),
        ]
        assert ids(store.partition('MOCKUP PENDING')) == ['D', 'A']

    def test_move_into_done_stamps_completed_at(self, reconciler, storage, designer_tasks):
        a = designer_tasks['A']

        drag(reconciler, a, 'DONE')

        assert storage.stored(a).status == 'DONE'
        assert storage.stored(a).completed_at == FIXED_NOW

    def test_move_out_of_done_clears_completed_at(self, reconciler, store, storage, designer_tasks):
        a = designer_tasks['A']
        drag(reconciler, a, 'DONE')

        drag(reconciler, store.get(a.pk), 'PRODUCTION')

        assert storage.stored(a).completed_at is None
        assert storage.writes[-1] == (
            'update', str(a.pk), {'status': 'PRODUCTION', 'position': 0, 'completed_at': None},
        )


class TestGestureState:
    def test_drag_end_without_start_is_noop(self, reconciler, storage):
        result = reconciler.drag_end('PRODUCTION')

        assert result.action == 'noop'
        assert storage.writes == []

    def test_unknown_task_does_not_start_a_gesture(self, reconciler):
        assert reconciler.drag_start('missing') is False
        assert reconciler.state is DragState.IDLE

    def test_gesture_returns_to_idle(self, reconciler, designer_tasks):
        reconciler.drag_start(designer_tasks['A'].pk)
        assert reconciler.state is DragState.DRAGGING

        reconciler.drag_end(None)

        assert reconciler.state is DragState.IDLE
        assert reconciler.active_task is None

    def test_cancel_discards_gesture(self, reconciler, storage, designer_tasks):
        reconciler.drag_start(designer_tasks['A'].pk)
        reconciler.cancel()

        assert reconciler.drag_end('PRODUCTION').action == 'noop'
        assert storage.writes == []


class TestRollback:
    def test_failure_before_any_write_restores_snapshot(self, reconciler, store, storage, designer_tasks):
        storage.fail_update_at = 0

        result = drag(reconciler, designer_tasks['C'], str(designer_tasks['A'].pk))

        assert not result.ok
        assert result.writes == 0
        assert 'connection reset' in result.error
        assert ids(store.partition('TO DO LIST')) == ['A', 'B', 'C']
        assert [task.position for task in store.partition('TO DO LIST')] == [0, 1, 2]
        assert storage.selects == []

    def test_partial_failure_reloads_from_storage(self, reconciler, store, storage, designer_tasks):
        c = designer_tasks['C']
        storage.fail_update_at = 1

        result = drag(reconciler, c, str(designer_tasks['A'].pk))

        assert not result.ok
        assert result.writes == 1
        assert storage.selects
        assert store.get(c.pk).position == storage.stored(c).position == 0

    def test_failed_move_restores_status(self, reconciler, store, storage, designer_tasks):
        a = designer_tasks['A']
        storage.fail_update_at = 0

        result = drag(reconciler, a, 'PRODUCTION')

        assert not result.ok
        assert store.get(a.pk).status == 'TO DO LIST'
        assert store.partition('PRODUCTION') == []

    def test_stale_version_is_a_conflict(self, reconciler, store, storage, designer_tasks):
        a = designer_tasks['A']
        storage.stored(a).version = 7

        result = drag(reconciler, a, 'PRODUCTION')

        assert result.conflict
        assert storage.writes == []
        assert 'reloaded' in result.error
        assert store.get(a.pk).version == 7
        assert result.to_dict()['success'] is False

    def test_task_deleted_elsewhere_is_dropped_from_board(self, reconciler, store, storage, designer_tasks):
        a = designer_tasks['A']
        del storage.tasks[str(a.pk)]

        result = drag(reconciler, a, 'PRODUCTION')

        assert result.missing
        assert not result.conflict
        assert result.error == 'This task no longer exists.'
        assert store.get(a.pk) is None


class TestCompleteTask:
    def test_complete_moves_to_done(self, reconciler, store, storage, designer_tasks):
        b = designer_tasks['B']

        ok, message = reconciler.complete_task(b.pk)

        assert ok
        assert message == 'Task marked as done'
        assert storage.writes == [
            ('update', str(b.pk), {'status': 'DONE', 'completed_at': FIXED_NOW, 'position': 0}),
        ]
        assert ids(store.partition('DONE')) == ['B']

    def test_complete_done_task_removes_it(self, reconciler, store, storage, designer_tasks):
        b = designer_tasks['B']
        reconciler.complete_task(b.pk)

        ok, message = reconciler.complete_task(b.pk)

        assert ok
        assert message == 'Completed task has been removed'
        assert storage.writes[-1] == ('delete', str(b.pk), None)
        assert store.get(b.pk) is None

    def test_complete_failure_rolls_back(self, reconciler, store, storage, designer_tasks):
        storage.fail_update_at = 0

        ok, _ = reconciler.complete_task(designer_tasks['A'].pk)

        assert not ok
        assert store.get(designer_tasks['A'].pk).status == 'TO DO LIST'

    def test_complete_unknown_task(self, reconciler):
        assert reconciler.complete_task('missing') == (False, 'Task not found')


class TestDeleteTask:
    def test_non_admin_cannot_delete(self, reconciler, storage, designer_tasks):
        ok, message = reconciler.delete_task(designer_tasks['A'].pk)

        assert not ok
        assert message == 'Only admins can delete tasks'
        assert storage.writes == []

    def test_admin_deletes(self, store, storage, admin_context, designer_tasks):
        reconciler = DragReconciler(store, context=admin_context)

        ok, _ = reconciler.delete_task(designer_tasks['A'].pk)

        assert ok
        assert str(designer_tasks['A'].pk) not in storage.tasks
        assert store.get(designer_tasks['A'].pk) is None

    def test_delete_failure_restores_task(self, store, storage, admin_context, designer_tasks):
        storage.fail_delete = True
        reconciler = DragReconciler(store, context=admin_context)

        ok, _ = reconciler.delete_task(designer_tasks['A'].pk)

        assert not ok
        assert store.get(designer_tasks['A'].pk) is not None


class TestCreateTask:
    def test_new_task_lands_at_end_of_first_stage(self, reconciler, store, storage):
        ok, _, task = reconciler.create_task('Poster', 'A3 poster', 'high')

        assert ok
        assert task.status == 'TO DO LIST'
        assert task.role == 'designer'
        assert task.position == 3
        assert task.created_by_id == 2
        assert storage.writes[0][0] == 'insert'
        assert store.get(task.pk) is not None

    def test_blank_title_is_rejected(self, reconciler, storage):
        ok, message, task = reconciler.create_task('   ')

        assert not ok
        assert message == 'Title is required'
        assert task is None
        assert storage.writes == []

    def test_role_without_pipeline_is_rejected(self, storage, admin_context):
        from apps.board.state import BoardStateStore

        store = BoardStateStore(storage)
        store.load('admin')
        reconciler = DragReconciler(store, context=admin_context)

        ok, _, _ = reconciler.create_task('Anything')

        assert not ok
        assert storage.writes == []
