# apps/assistente/views.py

import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from apps.board.exceptions import StorageError
from apps.board.storage import DjangoTaskStorage
from apps.core.permissions import AgencyPermissions, requer_role
from apps.core.pipelines import VIEWABLE_ROLES
from .services import AssistantError, TaskAssistant

logger = logging.getLogger(__name__)


@login_required
@require_POST
@requer_role
def assistente_view(request):
    """
    Chat com o assistente de lembretes

    Corpo: {"message": ..., "userId": ..., "userRole": ...}
    Sem userRole, usa o role exibido na sessão. Não-admins só
    consultam o próprio role.
    """
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        data = None
    if not isinstance(data, dict):
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    message = data.get('message')
    if not isinstance(message, str) or not message.strip():
        return JsonResponse({'error': 'Message is required'}, status=400)
    message = message.strip()

    context = request.board_context
    role = data.get('userRole') or context.view_role

    if role not in VIEWABLE_ROLES:
        return JsonResponse({'error': f'Invalid role: {role}'}, status=400)
    if not AgencyPermissions.pode_ver_role(request.user, role):
        return JsonResponse({'error': 'Access denied for this role'}, status=403)

    try:
        reply = TaskAssistant(DjangoTaskStorage()).reply(message, role)
    except AssistantError as e:
        return JsonResponse({'error': e.message}, status=e.status)
    except StorageError as e:
        logger.error(f"❌ task-assistant error: {e}")
        return JsonResponse({'error': str(e)}, status=500)

    return JsonResponse({'reply': reply})
