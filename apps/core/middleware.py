# apps/core/middleware.py

from .permissions import BoardContext

VIEW_ROLE_SESSION_KEY = 'view_role'


class BoardContextMiddleware:
    """
    Anexa o contexto do board (role de permissão x role exibido) ao request

    O role exibido de um admin fica na sessão; para os demais usuários
    é sempre o próprio role.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.board_context = None

        if hasattr(request, 'user') and request.user.is_authenticated:
            request.board_context = BoardContext.for_user(
                request.user,
                request.session.get(VIEW_ROLE_SESSION_KEY)
            )

        response = self.get_response(request)

        # Headers informativos
        context = request.board_context
        if context is not None:
            response['X-User-Role'] = context.permission_role
            response['X-View-Role'] = context.view_role

        return response
