# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from apps.core.middleware import VIEW_ROLE_SESSION_KEY
from apps.core.permissions import BoardContext
from apps.core.pipelines import InvalidRoleError, get_pipeline
from apps.core.signals import tasks_group_name
from .columns import build_columns
from .exceptions import StorageError
from .reconciler import DragReconciler
from .state import BoardStateStore
from .storage import DjangoTaskStorage

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket do board Kanban

    Funcionalidades:
    - Sincronização inicial e recarga completa a cada mudança de tarefa
    - Resolução de gestos de drag-and-drop
    - Troca de pipeline exibido (admin)
    - Heartbeat
    """

    async def connect(self):
        """
        Conecta usuário ao grupo de mudanças de tarefas
        Verifica role antes de aceitar conexão
        """
        self.user = self.scope['user']
        self.group_name = tasks_group_name()

        # Verificar se usuário está autenticado
        if not self.user.is_authenticated:
            logger.warning("❌ Conexão WebSocket rejeitada - usuário não autenticado")
            await self.close()
            return

        self.context = await self.get_board_context()
        if self.context is None:
            logger.warning(f"❌ Conexão WebSocket rejeitada - {self.user.username} sem role")
            await self.close()
            return

        self.store = BoardStateStore(DjangoTaskStorage())

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        logger.info(f"✅ WebSocket conectado - {self.user.username} no board {self.context.view_role}")
        await self.send_board_sync()

    async def disconnect(self, close_code):
        """
        Desconecta usuário do grupo
        """
        if hasattr(self, 'store'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"🔌 WebSocket desconectado - {self.user.username}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Recebe mensagens do cliente WebSocket
        Processa diferentes tipos de eventos
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            data = None

        if not isinstance(data, dict):
            logger.error(f"❌ JSON inválido recebido via WebSocket de {self.user.username}")
            await self.send_error('Invalid JSON')
            return

        message_type = data.get('type')

        # Heartbeat/Ping
        if message_type == 'ping':
            await self.send_json({'type': 'pong', 'timestamp': self.get_timestamp()})

        # Sincronização de estado do board
        elif message_type == 'sync_board':
            await self.send_board_sync()

        elif message_type == 'drag':
            await self.handle_drag(data.get('active_id'), data.get('over_id'))

        elif message_type == 'switch_role':
            await self.handle_switch_role(data.get('role'))

        else:
            await self.send_error(f'Unknown message type: {message_type}')

    async def handle_drag(self, active_id, over_id):
        result = await self.resolve_drag(active_id, over_id)
        await self.send_json({
            'type': 'drag_result',
            'result': result,
            'board_data': await self.get_board_state(),
            'timestamp': self.get_timestamp()
        })

    async def handle_switch_role(self, role):
        try:
            self.context = self.context.switch_view(role)
        except PermissionError as e:
            await self.send_error(str(e))
            return
        except InvalidRoleError as e:
            await self.send_error(str(e))
            return

        await self.save_view_role(role)
        await self.send_board_sync()

    # === Handlers de eventos do grupo ===

    async def tasks_changed(self, event):
        """
        Mudança na coleção de tarefas: recarga completa do board
        """
        await self.send_board_sync(event=event['message'])

    # === Métodos auxiliares ===

    async def send_board_sync(self, event=None):
        try:
            board_data = await self.load_board()
        except StorageError as e:
            logger.error(f"❌ Erro ao obter estado do board: {e}")
            await self.send_error(str(e))
            return

        payload = {
            'type': 'board_sync',
            'board_data': board_data,
            'timestamp': self.get_timestamp()
        }
        if event is not None:
            payload['event'] = event
        await self.send_json(payload)

    async def send_error(self, message):
        await self.send_json({'type': 'error', 'error': message, 'timestamp': self.get_timestamp()})

    async def send_json(self, content):
        await self.send(text_data=json.dumps(content))

    @database_sync_to_async
    def get_board_context(self):
        session = self.scope.get('session')
        requested = session.get(VIEW_ROLE_SESSION_KEY) if session is not None else None
        return BoardContext.for_user(self.user, requested)

    @database_sync_to_async
    def save_view_role(self, role):
        session = self.scope.get('session')
        if session is not None:
            session[VIEW_ROLE_SESSION_KEY] = role
            session.save()

    @database_sync_to_async
    def load_board(self):
        """Recarrega o snapshot do role exibido"""
        self.store.load(self.context.view_role)
        return self.serialize_board()

    @database_sync_to_async
    def get_board_state(self):
        return self.serialize_board()

    def serialize_board(self):
        return {
            'role': self.store.role,
            'pipeline': list(get_pipeline(self.store.role)),
            'columns': [column.to_dict() for column in build_columns(self.store)],
            'context': self.context.to_dict(),
        }

    @database_sync_to_async
    def resolve_drag(self, active_id, over_id):
        """
        Resolve o gesto sobre o snapshot atual do consumer

        O snapshot é recarregado antes, para que posições e versões
        estejam atualizadas.
        """
        try:
            self.store.load(self.context.view_role)
        except StorageError as e:
            return {'success': False, 'action': 'noop', 'error': str(e), 'writes': 0}

        reconciler = DragReconciler(self.store, context=self.context)
        if not reconciler.drag_start(active_id):
            return {'success': True, 'action': 'noop', 'writes': 0}
        return reconciler.drag_end(over_id).to_dict()

    def get_timestamp(self):
        """
        Retorna timestamp atual em formato ISO
        """
        return timezone.now().isoformat()
