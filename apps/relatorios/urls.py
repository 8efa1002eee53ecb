# apps/relatorios/urls.py

from django.urls import path
from . import views

app_name = 'relatorios'

urlpatterns = [
    # Exportação CSV (admin)
    path('tasks.csv', views.exportar_tasks_csv, name='tasks_csv'),
]
