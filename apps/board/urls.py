# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Kanban do role exibido
    path('', views.board_view, name='kanban'),

    # AJAX - Drag-and-drop
    path('mover/', views.mover_task_ajax, name='mover_task'),

    # AJAX - Tarefas
    path('tasks/', views.criar_task, name='criar_task'),
    path('tasks/<uuid:task_id>/concluir/', views.concluir_task, name='concluir_task'),
    path('tasks/<uuid:task_id>/deletar/', views.deletar_task, name='deletar_task'),
]
