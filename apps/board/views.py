# apps/board/views.py

import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.core.forms import TaskForm
from apps.core.permissions import requer_admin, requer_role
from apps.core.pipelines import get_pipeline
from apps.core.signals import tasks_group_name
from .columns import build_columns, serialize_task
from .exceptions import StorageError
from .reconciler import DragReconciler
from .state import BoardStateStore
from .storage import DjangoTaskStorage

logger = logging.getLogger(__name__)


def carregar_board(request):
    """
    Carrega o board do role exibido na sessão

    Levanta StorageError se a consulta falhar.
    """
    context = request.board_context
    store = BoardStateStore(DjangoTaskStorage())
    store.load(context.view_role)
    return store, DragReconciler(store, context=context)


def erro_storage(e):
    """Falha de leitura: reportada, sem retry automático"""
    logger.error(f"❌ Erro ao carregar board: {e}")
    return JsonResponse({'success': False, 'error': str(e)}, status=503)


def ler_json(request):
    """Corpo JSON da requisição; None se inválido ou se não for um objeto"""
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def board_payload(store, context):
    return {
        'role': store.role,
        'pipeline': list(get_pipeline(store.role)),
        'columns': [column.to_dict() for column in build_columns(store)],
        'context': context.to_dict(),
        'websocket_group': tasks_group_name(),
    }


@login_required
@require_GET
@requer_role
def board_view(request):
    """
    Board Kanban do role exibido
    Colunas na ordem do pipeline, cards na ordem de posição
    """
    try:
        store, _ = carregar_board(request)
    except StorageError as e:
        return erro_storage(e)

    return JsonResponse({'success': True, **board_payload(store, request.board_context)})


@login_required
@require_POST
@requer_role
def mover_task_ajax(request):
    """
    Resolve um gesto de drag-and-drop

    Corpo: {"active_id": <id da tarefa>, "over_id": <id de tarefa, nome de coluna ou null>}
    """
    data = ler_json(request)
    if data is None:
        return JsonResponse({'success': False, 'error': 'Invalid JSON'}, status=400)
    if not data.get('active_id'):
        return JsonResponse({'success': False, 'error': 'Invalid parameters'}, status=400)

    try:
        store, reconciler = carregar_board(request)
    except StorageError as e:
        return erro_storage(e)

    # Tarefa desconhecida: gesto ignorado
    if not reconciler.drag_start(data['active_id']):
        return JsonResponse({'success': True, 'action': 'noop', 'writes': 0})

    result = reconciler.drag_end(data.get('over_id'))

    payload = result.to_dict()
    payload['columns'] = [column.to_dict() for column in build_columns(store)]

    if result.ok:
        return JsonResponse(payload)

    if result.conflict:
        return JsonResponse(payload, status=409)
    if result.missing:
        return JsonResponse(payload, status=404)
    return JsonResponse(payload, status=503)


@login_required
@require_POST
@requer_role
def criar_task(request):
    """
    Cria tarefa na primeira etapa do pipeline exibido
    """
    data = ler_json(request) if request.content_type == 'application/json' else request.POST
    if data is None:
        return JsonResponse({'success': False, 'error': 'Invalid JSON'}, status=400)

    form = TaskForm(data)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors.get_json_data()}, status=400)

    try:
        _, reconciler = carregar_board(request)
    except StorageError as e:
        return erro_storage(e)

    sucesso, mensagem, task = reconciler.create_task(
        form.cleaned_data['title'],
        form.cleaned_data['description'],
        form.cleaned_data['priority'],
    )

    if not sucesso:
        return JsonResponse({'success': False, 'error': mensagem}, status=400)

    logger.info(f"➕ {request.user.username} criou tarefa '{task.title}' em {task.role}")
    return JsonResponse({
        'success': True,
        'message': mensagem,
        'task': serialize_task(task)
    }, status=201)


@login_required
@require_POST
@requer_role
def concluir_task(request, task_id):
    """
    Conclui a tarefa; se ela já estiver em DONE, remove
    """
    try:
        _, reconciler = carregar_board(request)
    except StorageError as e:
        return erro_storage(e)

    if reconciler.store.get(task_id) is None:
        return JsonResponse({'success': False, 'error': 'Task not found'}, status=404)

    sucesso, mensagem = reconciler.complete_task(task_id)
    return JsonResponse({'success': sucesso, 'message': mensagem}, status=200 if sucesso else 409)


@login_required
@require_POST
@requer_admin
def deletar_task(request, task_id):
    """
    Remoção permanente (apenas admin)
    """
    try:
        _, reconciler = carregar_board(request)
    except StorageError as e:
        return erro_storage(e)

    if reconciler.store.get(task_id) is None:
        return JsonResponse({'success': False, 'error': 'Task not found'}, status=404)

    sucesso, mensagem = reconciler.delete_task(task_id)
    return JsonResponse({'success': sucesso, 'message': mensagem}, status=200 if sucesso else 409)
