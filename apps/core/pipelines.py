# apps/core/pipelines.py

"""
Registro de pipelines por role

Cada role da agência tem uma sequência fixa de etapas (colunas do Kanban).
A última etapa de todo pipeline é sempre DONE. O admin não tem pipeline
próprio: ele visualiza o pipeline de outro role.
"""

from typing import Tuple

ROLE_ESTIMATION = 'estimation'
ROLE_DESIGNER = 'designer'
ROLE_OPERATIONS = 'operations'
ROLE_ADMIN = 'admin'

ROLE_CHOICES = [
    (ROLE_ESTIMATION, 'Estimation'),
    (ROLE_DESIGNER, 'Designer'),
    (ROLE_OPERATIONS, 'Operations'),
    (ROLE_ADMIN, 'Admin'),
]

TERMINAL_STAGE = 'DONE'

ROLE_PIPELINES = {
    ROLE_ESTIMATION: (
        'TO DO LIST',
        'SUPPLIER QUOTES PENDING',
        'CLIENT APPROVAL PENDING',
        'QUOTATION BILL RAISED',
        'AWAITING PO',
        'FINAL INVOICE RAISED',
        TERMINAL_STAGE,
    ),
    ROLE_DESIGNER: (
        'TO DO LIST',
        'MOCKUP PENDING',
        'PRODUCTION',
        'PENDING WITH CLIENT',
        TERMINAL_STAGE,
    ),
    ROLE_OPERATIONS: (
        'TO DO LIST',
        'APPROVAL',
        'PRODUCTION',
        'DELIVERY',
        TERMINAL_STAGE,
    ),
    ROLE_ADMIN: (),
}

# Roles cujo pipeline pode ser exibido no board
VIEWABLE_ROLES = tuple(role for role, stages in ROLE_PIPELINES.items() if stages)


class InvalidRoleError(ValueError):
    """Role recebido de fora do sistema não é um dos roles conhecidos"""


def validate_role(value) -> str:
    """
    Valida um role vindo de input externo (request, websocket, querystring)

    Deve ser chamado antes de qualquer consulta ao registro.
    """
    if not isinstance(value, str) or value not in ROLE_PIPELINES:
        raise InvalidRoleError(f'Unknown role: {value!r}')
    return value


def get_pipeline(role: str) -> Tuple[str, ...]:
    """Retorna as etapas do role, em ordem"""
    return ROLE_PIPELINES[role]


def first_stage(role: str) -> str:
    return ROLE_PIPELINES[role][0]


def is_terminal(status: str) -> bool:
    return status == TERMINAL_STAGE


def is_valid_status(role: str, status: str) -> bool:
    return status in ROLE_PIPELINES.get(role, ())
