# apps/core/management/commands/seed.py

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from apps.core.models import Task, Usuario
from apps.core.pipelines import (
    ROLE_ADMIN,
    VIEWABLE_ROLES,
    get_pipeline,
    is_terminal,
)

PRIORIDADES = ['low', 'medium', 'high', 'urgent']


class Command(BaseCommand):
    help = 'Cria usuários de demonstração (um por role) e tarefas em cada etapa dos pipelines'

    def add_arguments(self, parser):
        parser.add_argument(
            '--senha',
            default='rea12345',
            help='Senha dos usuários de demonstração'
        )
        parser.add_argument(
            '--tarefas-por-etapa',
            type=int,
            default=2,
            help='Quantidade de tarefas criadas em cada etapa'
        )
        parser.add_argument(
            '--limpar',
            action='store_true',
            help='Remove todas as tarefas antes de criar as novas'
        )

    def handle(self, *args, **options):
        if not settings.DEBUG and not options['limpar'] and Task.objects.exists():
            raise CommandError(
                'Já existem tarefas e DEBUG está desligado. Use --limpar para recriar os dados.'
            )

        self.stdout.write('🌱 Criando dados de demonstração...')

        with transaction.atomic():
            if options['limpar']:
                removidas, _ = Task.objects.all().delete()
                self.stdout.write(f'  🗑️  {removidas} tarefas removidas')

            usuarios = self._criar_usuarios(options['senha'])
            total = self._criar_tarefas(usuarios, options['tarefas_por_etapa'])

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✅ Seed concluído: {len(usuarios)} usuários, {total} tarefas\n'
                f'   Login: usuário = role (admin, estimation, designer, operations), senha {options["senha"]}\n'
            )
        )

    def _criar_usuarios(self, senha):
        """Um usuário por role; o admin também é staff/superuser"""
        usuarios = {}
        for role in (ROLE_ADMIN,) + VIEWABLE_ROLES:
            usuario, criado = Usuario.objects.get_or_create(
                username=role,
                defaults={
                    'email': f'{role}@rea.local',
                    'first_name': role.capitalize(),
                    'role': role,
                    'is_staff': role == ROLE_ADMIN,
                    'is_superuser': role == ROLE_ADMIN,
                }
            )
            if criado:
                usuario.set_password(senha)
                usuario.save()
                self.stdout.write(f'  👤 Usuário {role} criado')
            usuarios[role] = usuario
        return usuarios

    def _criar_tarefas(self, usuarios, por_etapa):
        total = 0
        for role in VIEWABLE_ROLES:
            for stage in get_pipeline(role):
                inicio = Task.objects.filter(role=role, status=stage).count()
                for i in range(por_etapa):
                    Task.objects.create(
                        title=f'{stage.title()} #{inicio + i + 1}',
                        description=f'Demo task for the {role} pipeline',
                        status=stage,
                        role=role,
                        priority=PRIORIDADES[(total + i) % len(PRIORIDADES)],
                        created_by=usuarios[ROLE_ADMIN],
                        assigned_to=usuarios[role],
                        position=inicio + i,
                        completed_at=timezone.now() if is_terminal(stage) else None,
                    )
                total += por_etapa
            self.stdout.write(f'  📋 Pipeline {role}: {len(get_pipeline(role)) * por_etapa} tarefas')
        return total
