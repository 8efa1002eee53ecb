# config/urls.py

from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    # Admin (também é a tela de login)
    path('admin/', admin.site.urls),

    # Aplicações principais
    path('', include('apps.core.urls')),
    path('board/', include('apps.board.urls')),
    path('relatorios/', include('apps.relatorios.urls')),
    path('assistente/', include('apps.assistente.urls')),

    # Redirecionamentos úteis
    path('', RedirectView.as_view(pattern_name='board:kanban', permanent=False)),
]

# Customizar títulos do admin
admin.site.site_header = 'Agency Board Admin'
admin.site.site_title = 'Agency Board'
admin.site.index_title = 'Administração do Sistema'
