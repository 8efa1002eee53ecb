# apps/relatorios/utils.py

from typing import Iterable, List, Optional

from django.utils import timezone

from apps.core.pipelines import TERMINAL_STAGE, VIEWABLE_ROLES

CSV_HEADERS = ['Title', 'Description', 'Status', 'Priority', 'Role', 'Created At', 'Completed At']

ROLE_FILTERS = ('all',) + tuple(VIEWABLE_ROLES)
STATUS_FILTERS = ('all', 'pending', 'completed')


class FiltroInvalido(ValueError):
    """Filtro de exportação fora dos valores aceitos"""


def quote_text(value: Optional[str]) -> str:
    """Texto livre sempre entre aspas, com aspas internas duplicadas"""
    value = value or ''
    return '"' + value.replace('"', '""') + '"'


def format_date(value) -> str:
    """MM/DD/YYYY no fuso local; ausente vira N/A"""
    if value is None:
        return 'N/A'
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.strftime('%m/%d/%Y')


def task_to_csv_row(task) -> str:
    return ','.join([
        quote_text(task.title),
        quote_text(task.description),
        task.status,
        task.priority,
        task.role,
        format_date(task.created_at),
        format_date(task.completed_at),
    ])


def build_csv(tasks: Iterable) -> str:
    """Cabeçalho + uma linha por tarefa, separadas por \\n"""
    rows = [','.join(CSV_HEADERS)]
    rows.extend(task_to_csv_row(task) for task in tasks)
    return '\n'.join(rows)


def export_filename(today=None) -> str:
    today = today or timezone.localdate()
    return f'tasks-report-{today.isoformat()}.csv'


def select_tasks_for_export(storage, role: str = 'all', status: str = 'all') -> List:
    """
    Consulta as tarefas da exportação, mais recentes primeiro

    role: 'all' ou um role com pipeline
    status: 'all', 'pending' (fora de DONE) ou 'completed' (em DONE)
    """
    if role not in ROLE_FILTERS:
        raise FiltroInvalido(f'Invalid role filter: {role}')
    if status not in STATUS_FILTERS:
        raise FiltroInvalido(f'Invalid status filter: {status}')

    filters = {'order_by': ('-created_at',)}
    if role != 'all':
        filters['role'] = role
    if status == 'completed':
        filters['status'] = TERMINAL_STAGE
    elif status == 'pending':
        filters['exclude_status'] = TERMINAL_STAGE

    return storage.select(**filters)
