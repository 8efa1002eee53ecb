# apps/core/models.py

import uuid

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .pipelines import (
    ROLE_ADMIN,
    ROLE_CHOICES,
    TERMINAL_STAGE,
    ROLE_PIPELINES,
    is_valid_status,
)


class Usuario(AbstractUser):
    """
    Modelo de usuário customizado com role da agência

    O role define qual pipeline o usuário enxerga no board.
    Usuário sem role não acessa o board até um admin atribuir um.
    """

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        blank=True,
        db_index=True,
        help_text="Role na agência - vazio significa sem acesso ao board"
    )

    class Meta:
        db_table = 'usuario'

    @property
    def is_admin_role(self):
        return self.role == ROLE_ADMIN

    def __str__(self):
        nome_completo = self.get_full_name()
        if nome_completo:
            return f"{nome_completo} ({self.role or 'sem role'})"
        return f"{self.username} ({self.role or 'sem role'})"


class Task(models.Model):
    """
    Tarefa do board Kanban

    A posição é um rank denso (0..n-1) dentro da partição (role, status).
    O banco não garante unicidade: quem mantém a numeração é o
    DragReconciler, a cada reordenação.
    """

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=60)
    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default='medium'
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    assigned_to = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks_assigned'
    )
    created_by = models.ForeignKey(
        Usuario,
        on_delete=models.PROTECT,
        related_name='tasks_created'
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    position = models.IntegerField(default=0)

    # Token de concorrência otimista, incrementado a cada update
    version = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'tasks'
        ordering = ['position', 'created_at']
        indexes = [
            models.Index(fields=['role', 'status', 'position'], name='tasks_partition_idx'),
            models.Index(fields=['role', 'created_at'], name='tasks_role_created_idx'),
        ]

    @property
    def is_done(self):
        return self.status == TERMINAL_STAGE

    def clean(self):
        """Validação: título não vazio e status pertencente ao pipeline do role"""
        if not (self.title or '').strip():
            raise ValidationError({'title': 'Title cannot be empty'})

        if not is_valid_status(self.role, self.status):
            raise ValidationError({
                'status': f"'{self.status}' is not a stage of the {self.role} pipeline "
                          f"({', '.join(ROLE_PIPELINES.get(self.role, ())) or 'empty'})"
            })

    def __str__(self):
        return f"[{self.role}/{self.status}#{self.position}] {self.title}"
