# apps/core/apps.py

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuración de la app Core"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core - Actividades y Tareas'

    def ready(self):
        """Conecta las señales del modelo de tareas"""
        from . import signals  # noqa: F401
