# config/settings/development.py

from .base import *

# === DESARROLLO ===

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

# === APPS ADICIONALES PARA DEV ===

INSTALLED_APPS += ['django_extensions']

# === BASE DE DATOS ===

# PostgreSQL por defecto; DATABASE_URL si está definida
if env('DATABASE_URL', default=None):
    import dj_database_url

    DATABASES['default'] = dj_database_url.parse(env('DATABASE_URL'), conn_max_age=600)
else:
    DATABASES['default']['OPTIONS'] = {'sslmode': 'prefer'}
    DATABASES['default']['CONN_MAX_AGE'] = 60

# SQLite solo si se pide explícitamente
if env('USE_SQLITE', cast=bool, default=False):
    print("🔄 Usando SQLite para desarrollo")
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }
else:
    print(f"🐘 Usando PostgreSQL: {DATABASES['default'].get('NAME')}@{DATABASES['default'].get('HOST')}")

# === LOGGING MÁS VERBOSO ===

LOGGING['handlers']['console']['level'] = 'DEBUG'
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['apps']['level'] = 'DEBUG'

# === CACHE ===

# Cache en memoria (sin Redis obligatorio)
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'sigp-dev-cache',
    }
}

# Redis si está disponible
if env('REDIS_URL', default=None):
    try:
        import redis

        r = redis.from_url(env('REDIS_URL'))
        r.ping()

        CACHES['default'] = {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': env('REDIS_URL'),
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            }
        }
        print("🔴 Redis conectado!")
    except redis.RedisError as e:
        print(f"⚠️  Redis no disponible: {e}")
        print("📝 Usando cache en memoria local")

# Channels en memoria para desarrollo
CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# shell_plus
SHELL_PLUS_IMPORTS = [
    'from apps.core.models import *',
    'from apps.tablero.kanban import *',
    'from apps.tablero.controller import KanbanBoardController',
    'from apps.tablero.services import ServicioTableroORM',
]

print("🚀 Configuración de DESARROLLO cargada")
print(f"🔑 DEBUG: {DEBUG}")
