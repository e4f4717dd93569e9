# apps/tablero/apps.py

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class TableroConfig(AppConfig):
    """Configuración de la app Tablero"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.tablero'
    verbose_name = 'Tablero - Kanban'

    def ready(self):
        logger.info("🔌 Tablero inicializado - WebSockets habilitados")
