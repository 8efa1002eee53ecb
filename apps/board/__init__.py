# apps/board/__init__.py

"""
Board - Kanban por role

Funcionalidades:
- Colunas derivadas do pipeline do role exibido
- Reconciliação de drag-and-drop com atualização otimista e rollback
- WebSockets para recarga em tempo real
"""
