# apps/core/views.py

import json
import logging

from django.contrib.auth.decorators import login_required
from django.core.cache import cache
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from apps import __version__
from .middleware import VIEW_ROLE_SESSION_KEY
from .models import Task
from .permissions import requer_role
from .pipelines import InvalidRoleError

logger = logging.getLogger(__name__)


@login_required
@require_GET
@requer_role
def sessao_view(request):
    """
    Contexto da sessão: role do usuário, pipeline exibido e capacidades
    """
    return JsonResponse({
        'success': True,
        'user': request.user.get_full_name() or request.user.username,
        'context': request.board_context.to_dict(),
    })


@login_required
@require_POST
@requer_role
def trocar_role(request):
    """
    Admin troca o pipeline exibido

    O role de permissão continua admin; só o role de visualização muda.
    """
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        data = None
    if not isinstance(data, dict):
        return JsonResponse({'success': False, 'error': 'Invalid JSON'}, status=400)

    try:
        context = request.board_context.switch_view(data.get('role'))
    except PermissionError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=403)
    except InvalidRoleError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    request.session[VIEW_ROLE_SESSION_KEY] = context.view_role
    request.board_context = context
    logger.info(f"🔀 {request.user.username} agora visualiza o pipeline {context.view_role}")

    return JsonResponse({
        'success': True,
        'context': context.to_dict(),
    })


def health_check(request):
    """
    Health check para monitoramento
    """
    try:
        # Verificar conexão com banco
        Task.objects.exists()

        # Verificar cache (Redis em produção)
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')

        status = {
            'status': 'healthy',
            'database': 'ok',
            'cache': 'ok',
            'timestamp': timezone.now().isoformat(),
            'version': __version__
        }

        return JsonResponse(status)

    except Exception as e:
        logger.error(f"❌ Health check falhou: {e}")
        status = {
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
            'version': __version__
        }

        return JsonResponse(status, status=500)
