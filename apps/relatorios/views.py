# apps/relatorios/views.py

import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET

from apps.board.exceptions import StorageError
from apps.board.storage import DjangoTaskStorage
from apps.core.permissions import requer_admin
from .utils import FiltroInvalido, build_csv, export_filename, select_tasks_for_export

logger = logging.getLogger(__name__)


@login_required
@require_GET
@requer_admin
def exportar_tasks_csv(request):
    """
    Exporta tarefas para CSV (apenas admin)

    Query string: role=all|estimation|designer|operations,
    status=all|pending|completed
    """
    role = request.GET.get('role') or 'all'
    status = request.GET.get('status') or 'all'

    try:
        tasks = select_tasks_for_export(DjangoTaskStorage(), role=role, status=status)
    except FiltroInvalido as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)
    except StorageError as e:
        logger.error(f"❌ Erro ao exportar tarefas: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=503)

    if not tasks:
        return JsonResponse({
            'success': False,
            'error': 'No tasks found matching the selected filters'
        }, status=404)

    response = HttpResponse(build_csv(tasks), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{export_filename()}"'

    logger.info(f"📄 {request.user.username} exportou {len(tasks)} tarefas (role={role}, status={status})")
    return response
