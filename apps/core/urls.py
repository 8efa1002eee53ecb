# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === SESSÃO ===
    path('api/sessao/', views.sessao_view, name='sessao'),
    # Admin troca o pipeline exibido
    path('api/sessao/role/', views.trocar_role, name='trocar_role'),

    # === MONITORAMENTO ===
    path('health/', views.health_check, name='health'),
]
