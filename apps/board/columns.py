# apps/board/columns.py

from dataclasses import dataclass, field
from typing import List

from apps.core.pipelines import get_pipeline, is_terminal


def serialize_task(task):
    """Representação JSON de um card"""
    return {
        'id': str(task.pk),
        'title': task.title,
        'description': task.description,
        'status': task.status,
        'priority': task.priority,
        'role': task.role,
        'position': task.position,
        'version': task.version,
        'assigned_to': task.assigned_to_id,
        'created_by': task.created_by_id,
        'created_at': task.created_at.isoformat() if task.created_at else None,
        'updated_at': task.updated_at.isoformat() if task.updated_at else None,
        'completed_at': task.completed_at.isoformat() if task.completed_at else None,
    }


@dataclass
class Column:
    """
    Projeção de uma etapa do pipeline

    Sem estado próprio: a coluna é área de drop (id = nome da etapa)
    e cada tarefa é um card arrastável (id = id da tarefa).
    """

    stage: str
    tasks: List = field(default_factory=list)

    @property
    def drop_target_id(self):
        return self.stage

    @property
    def draggable_ids(self):
        return [str(task.pk) for task in self.tasks]

    @property
    def count(self):
        return len(self.tasks)

    @property
    def is_terminal(self):
        return is_terminal(self.stage)

    def to_dict(self):
        return {
            'id': self.drop_target_id,
            'title': self.stage,
            'count': self.count,
            'is_terminal': self.is_terminal,
            'tasks': [serialize_task(task) for task in self.tasks],
        }


def build_columns(store):
    """Uma coluna por etapa do pipeline do role ativo, em ordem"""
    return [Column(stage=stage, tasks=store.partition(stage)) for stage in get_pipeline(store.role)]
