# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import F
from django.utils import timezone
from django.utils.html import format_html

from .models import Task, Usuario
from .pipelines import is_terminal


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Admin customizado para o modelo Usuario"""

    list_display = [
        'username', 'email', 'get_full_name', 'role_badge',
        'is_active', 'date_joined'
    ]
    list_filter = ['role', 'is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    # Adicionar role ao formulário
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Agência', {
            'fields': ('role',)
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Agência', {
            'fields': ('role',)
        }),
    )

    def role_badge(self, obj):
        """Exibe o role com badge colorido"""
        cores = {
            'admin': '#EF4444',  # vermelho
            'estimation': '#F59E0B',  # amarelo
            'designer': '#8B5CF6',  # roxo
            'operations': '#3B82F6'  # azul
        }
        cor = cores.get(obj.role, '#6B7280')
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            cor, obj.get_role_display() or 'Sem role'
        )

    role_badge.short_description = 'Role'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin para tarefas"""

    list_display = [
        'title', 'role', 'status', 'position', 'prioridade_colorida',
        'assigned_to', 'created_at', 'completed_at'
    ]
    list_filter = ['role', 'status', 'priority', 'created_at']
    search_fields = ['title', 'description']
    readonly_fields = ['id', 'created_at', 'updated_at', 'version']
    ordering = ['role', 'status', 'position']

    fieldsets = (
        ('Informações Básicas', {
            'fields': ('id', 'title', 'description', 'priority')
        }),
        ('Pipeline', {
            'fields': ('role', 'status', 'position')
        }),
        ('Responsáveis', {
            'fields': ('created_by', 'assigned_to')
        }),
        ('Datas', {
            'fields': ('created_at', 'updated_at', 'completed_at', 'version'),
            'classes': ('collapse',)
        })
    )

    def prioridade_colorida(self, obj):
        """Exibe prioridade com cor"""
        cores = {
            'low': '#10B981',
            'medium': '#3B82F6',
            'high': '#F59E0B',
            'urgent': '#EF4444'
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            cores.get(obj.priority, '#6B7280'), obj.get_priority_display()
        )

    prioridade_colorida.short_description = 'Prioridade'

    def save_model(self, request, obj, form, change):
        """
        Edições pelo admin também contam como escrita concorrente:
        a versão avança e completed_at acompanha o status
        """
        if not change and obj.created_by_id is None:
            obj.created_by = request.user

        if is_terminal(obj.status) and obj.completed_at is None:
            obj.completed_at = timezone.now()
        elif not is_terminal(obj.status):
            obj.completed_at = None

        obj.updated_at = timezone.now()
        if change:
            obj.version = F('version') + 1

        super().save_model(request, obj, form, change)

        if change:
            obj.refresh_from_db(fields=['version'])
