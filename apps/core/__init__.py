# apps/core/__init__.py

"""
Core - Usuários, tarefas e pipelines

Contém:
- Usuario com role da agência e Task com posição e versão
- Registro de pipelines por role
- Contexto de sessão (role de permissão x role exibido)
- Sinal de mudança de tarefas repassado aos WebSockets
- Comando de seed para desenvolvimento
"""
