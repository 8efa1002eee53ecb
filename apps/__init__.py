# apps/__init__.py

"""
Agency Board - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: Usuários, tarefas, pipelines por role e permissões
- board: Kanban, reconciliação de drag-and-drop e WebSockets
- relatorios: Exportação CSV
- assistente: Proxy do assistente de lembretes (chat)
"""

__version__ = '0.1.0'
__author__ = 'Equipe REA'
