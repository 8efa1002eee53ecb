# config/settings/production.py

import logging

import dj_database_url
from .base import *

# === PRODUÇÃO ===

DEBUG = False

ALLOWED_HOSTS = env('ALLOWED_HOSTS', default=[])

# Origem do frontend do board (POSTs JSON com cookie de sessão)
CSRF_TRUSTED_ORIGINS = env.list('CSRF_TRUSTED_ORIGINS', default=[])

# === SEGURANÇA ===

SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# Monitoramento bate em /health/ sem TLS
SECURE_REDIRECT_EXEMPT = [r'^health/$']

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_HSTS_SECONDS = 31536000  # 1 ano
SECURE_HSTS_INCLUDE_SUBDOMAINS = True

# === VARIÁVEIS OBRIGATÓRIAS ===

for setting in ('SECRET_KEY', 'DATABASE_URL', 'REDIS_URL', 'AGENCY_ASSISTANT_API_KEY'):
    if not env(setting, default=None):
        raise ValueError(f"Variável de ambiente {setting} é obrigatória em produção")

# === BANCO DE DADOS ===

# Conexões persistentes; cada consumer WebSocket usa o pool via database_sync_to_async
DATABASES['default'] = dj_database_url.parse(
    env('DATABASE_URL'),
    conn_max_age=600,
    conn_health_checks=True,
)

# === LOGGING ===

LOGGING['handlers']['file']['filename'] = env('LOG_FILE', default=str(BASE_DIR / 'logs' / 'agency.log'))

if env('SENTRY_DSN', default=None):
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    # Falhas de storage e do gateway de IA são logadas como ERROR
    sentry_sdk.init(
        dsn=env('SENTRY_DSN'),
        integrations=[
            DjangoIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=env.float('SENTRY_TRACES_SAMPLE_RATE', default=0.1),
        send_default_pii=False,
        environment=env('ENVIRONMENT', default='production'),
    )

# Compressão das respostas JSON e do CSV
MIDDLEWARE = ['django.middleware.gzip.GZipMiddleware'] + MIDDLEWARE
