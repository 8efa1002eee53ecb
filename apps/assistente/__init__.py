# apps/assistente/__init__.py

"""
Assistente - Lembretes de tarefas via chat

Encaminha a mensagem do usuário para uma API externa de chat completions,
com um prompt de sistema montado a partir das tarefas pendentes do role.
"""
