# apps/core/permissions.py

from dataclasses import dataclass, replace
from functools import wraps

from django.conf import settings
from django.http import JsonResponse

from .pipelines import (
    ROLE_ADMIN,
    VIEWABLE_ROLES,
    InvalidRoleError,
    validate_role,
)


class AgencyPermissions:
    """
    Sistema de permissões da agência
    Baseado no role do usuário: admin, estimation, designer, operations
    """

    @staticmethod
    def has_role(user):
        """Usuário autenticado com role atribuído"""
        return user.is_authenticated and bool(user.role)

    @staticmethod
    def is_admin(user):
        """Verifica se é administrador"""
        return user.is_authenticated and user.is_admin_role

    @staticmethod
    def pode_ver_role(user, role):
        """
        Verifica se pode visualizar o pipeline de um role

        Admin vê qualquer pipeline não vazio; os demais só o próprio.
        """
        if not AgencyPermissions.has_role(user):
            return False

        if user.role == ROLE_ADMIN:
            return role in VIEWABLE_ROLES

        return user.role == role


def default_admin_view_role():
    return getattr(settings, 'AGENCY_DEFAULT_ADMIN_VIEW_ROLE', VIEWABLE_ROLES[0])


@dataclass(frozen=True)
class BoardContext:
    """
    Contexto da sessão no board

    Separa o role que define permissões (permission_role) do role cujo
    pipeline está sendo exibido (view_role). Para não-admins os dois
    são sempre iguais.
    """

    user_id: int
    permission_role: str
    view_role: str

    @property
    def is_admin(self):
        return self.permission_role == ROLE_ADMIN

    @property
    def can_delete(self):
        return self.is_admin

    @property
    def can_export(self):
        return self.is_admin

    @property
    def can_switch_role(self):
        return self.is_admin

    def switch_view(self, role):
        """
        Retorna um novo contexto exibindo outro pipeline

        Levanta PermissionError para não-admins e InvalidRoleError para
        roles desconhecidos ou sem pipeline.
        """
        if not self.can_switch_role:
            raise PermissionError('Only admins can switch pipelines')

        validate_role(role)
        if role not in VIEWABLE_ROLES:
            raise InvalidRoleError(f'The {role} role has no pipeline to view')

        return replace(self, view_role=role)

    @classmethod
    def for_user(cls, user, requested_view_role=None):
        """
        Monta o contexto de um usuário autenticado

        Retorna None se o usuário não tiver role atribuído.
        """
        if not AgencyPermissions.has_role(user):
            return None

        if not AgencyPermissions.is_admin(user):
            return cls(user_id=user.pk, permission_role=user.role, view_role=user.role)

        view_role = requested_view_role
        if view_role not in VIEWABLE_ROLES:
            view_role = default_admin_view_role()
        return cls(user_id=user.pk, permission_role=ROLE_ADMIN, view_role=view_role)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'role': self.permission_role,
            'view_role': self.view_role,
            'is_admin': self.is_admin,
            'can_delete': self.can_delete,
            'can_export': self.can_export,
            'can_switch_role': self.can_switch_role,
            'viewable_roles': list(VIEWABLE_ROLES) if self.can_switch_role else [self.view_role],
        }


# Decoradores para views JSON

def requer_role(view_func):
    """
    Decorador que requer usuário com role atribuído
    Espera que o middleware tenha anexado request.board_context
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if getattr(request, 'board_context', None) is None:
            return JsonResponse({
                'success': False,
                'error': 'No role assigned. Please contact your administrator.'
            }, status=403)
        return view_func(request, *args, **kwargs)

    return wrapped_view


def requer_admin(view_func):
    """Decorador que requer usuário admin"""

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        context = getattr(request, 'board_context', None)
        if context is None or not context.is_admin:
            return JsonResponse({
                'success': False,
                'error': 'Access denied. Admins only.'
            }, status=403)
        return view_func(request, *args, **kwargs)

    return wrapped_view
