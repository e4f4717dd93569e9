# apps/informes/apps.py

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class InformesConfig(AppConfig):
    """Configuración de la app Informes"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.informes'
    verbose_name = 'Informes - PDF y Exportación'

    def ready(self):
        logger.info("Informes inicializado - ReportLab habilitado")
