# apps/assistente/services.py

"""
Cliente do assistente de tarefas

A API externa segue o formato de chat completions:
POST {model, messages=[system, user]} com Authorization: Bearer <key>.
"""

import json
import logging

import requests
from django.conf import settings

from apps.core.pipelines import TERMINAL_STAGE
from apps.board.columns import serialize_task

logger = logging.getLogger(__name__)

EMPTY_REPLY = "I'm sorry, I couldn't process that."

RATE_LIMIT_MESSAGE = 'Rate limits exceeded, please try again later.'
PAYMENT_REQUIRED_MESSAGE = 'Payment required, please add funds to your AI workspace.'
GATEWAY_ERROR_MESSAGE = 'AI gateway error'


class AssistantError(Exception):
    """Falha do assistente, já classificada com o status HTTP de resposta"""

    def __init__(self, status, message):
        self.status = status
        self.message = message
        super().__init__(message)


def build_system_prompt(role, pending_tasks):
    """
    Prompt de sistema com o panorama das tarefas pendentes do role
    """
    urgent = [task for task in pending_tasks if task.priority == 'urgent']
    high = [task for task in pending_tasks if task.priority == 'high']
    tasks_data = json.dumps([serialize_task(task) for task in pending_tasks], indent=2)

    return f"""You are an AI assistant for R-EAsiness, a task management system for REA Creative Agency.

Current task overview:
- Total pending tasks: {len(pending_tasks)}
- Urgent tasks: {len(urgent)}
- High priority tasks: {len(high)}
- Role: {role}

Your role is to:
1. Provide timely reminders about pending and urgent tasks
2. Help users stay organized and on track
3. Suggest prioritization when asked
4. Give clear, actionable advice

Tasks data:
{tasks_data}

Be conversational, helpful, and proactive about reminding users of important tasks. Keep responses concise and actionable."""


class TaskAssistant:
    """
    Assistente de lembretes

    Usage:
        assistant = TaskAssistant(DjangoTaskStorage())
        reply = assistant.reply('What should I do first?', 'designer')
    """

    def __init__(self, storage, api_url=None, api_key=None, model=None, timeout=None):
        self.storage = storage
        self.api_url = api_url or settings.AGENCY_ASSISTANT_API_URL
        self.api_key = api_key if api_key is not None else settings.AGENCY_ASSISTANT_API_KEY
        self.model = model or settings.AGENCY_ASSISTANT_MODEL
        self.timeout = timeout or settings.AGENCY_ASSISTANT_TIMEOUT

    def pending_tasks(self, role):
        """Tarefas do role fora de DONE, mais recentes primeiro"""
        tasks = self.storage.select(role=role, order_by=('-created_at',))
        return [task for task in tasks if task.status != TERMINAL_STAGE]

    def reply(self, message, role):
        """
        Envia a mensagem e retorna o texto da resposta

        Levanta AssistantError com o status HTTP a devolver ao cliente.
        """
        if not self.api_key:
            raise AssistantError(500, 'AGENCY_ASSISTANT_API_KEY is not configured')

        system_prompt = build_system_prompt(role, self.pending_tasks(role))

        try:
            resp = requests.post(
                self.api_url,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                json={
                    'model': self.model,
                    'messages': [
                        {'role': 'system', 'content': system_prompt},
                        {'role': 'user', 'content': message},
                    ],
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"❌ Erro de rede no assistente: {e}")
            raise AssistantError(500, str(e)) from e

        if resp.status_code == 429:
            raise AssistantError(429, RATE_LIMIT_MESSAGE)
        if resp.status_code == 402:
            raise AssistantError(402, PAYMENT_REQUIRED_MESSAGE)
        if not resp.ok:
            logger.error(f"❌ AI gateway error: {resp.status_code} {resp.text}")
            raise AssistantError(500, GATEWAY_ERROR_MESSAGE)

        try:
            data = resp.json()
        except ValueError as e:
            raise AssistantError(500, f'Invalid response from AI gateway: {e}') from e

        try:
            content = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            content = None

        return content or EMPTY_REPLY
