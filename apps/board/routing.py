# apps/board/routing.py

from django.urls import re_path
from . import consumers

# Rotas WebSocket para a aplicação board
websocket_urlpatterns = [
    # Board do role exibido - recarga a cada mudança de tarefa
    re_path(r'ws/board/$', consumers.BoardConsumer.as_asgi()),
]
