# apps/core/signals.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver
from django.utils import timezone

from .models import Task

logger = logging.getLogger(__name__)

# Notificação "algo mudou na coleção de tarefas"
# Argumentos: event ('insert' | 'update' | 'delete'), task_id, role
tasks_changed = Signal()


def tasks_group_name():
    return getattr(settings, 'AGENCY_TASKS_GROUP', 'tasks_changes')


@receiver(post_save, sender=Task)
def notificar_task_salva(sender, instance, created, **kwargs):
    """
    Saves feitos pelo ORM (admin, seed, criação de tarefa)
    também viram notificação de mudança
    """
    tasks_changed.send(
        sender=Task,
        event='insert' if created else 'update',
        task_id=instance.pk,
        role=instance.role,
    )


@receiver(post_delete, sender=Task)
def notificar_task_removida(sender, instance, **kwargs):
    tasks_changed.send(
        sender=Task,
        event='delete',
        task_id=instance.pk,
        role=instance.role,
    )


@receiver(tasks_changed)
def transmitir_mudanca(sender, event, task_id, role=None, **kwargs):
    """
    Repassa a mudança para o grupo WebSocket de todos os boards conectados

    O envio só acontece após o commit para que os clientes não
    recarreguem um estado ainda não persistido.
    """
    message = {
        'event': event,
        'task_id': str(task_id) if task_id else None,
        'role': role,
        'timestamp': timezone.now().isoformat(),
    }
    transaction.on_commit(lambda: _enviar_para_grupo(message))


def _enviar_para_grupo(message):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            tasks_group_name(),
            {
                'type': 'tasks_changed',
                'message': message,
            }
        )
    except Exception as e:
        # A escrita já foi persistida; os clientes corrigem no próximo refresh
        logger.warning(f"⚠️ Falha ao transmitir mudança de tarefa: {e}")
