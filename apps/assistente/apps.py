# apps/assistente/apps.py

from django.apps import AppConfig


class AssistenteConfig(AppConfig):
    """Configuração da app Assistente"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.assistente'
    verbose_name = 'Assistente - Chat'
