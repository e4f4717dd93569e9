# apps/core/signals.py

import logging

from django.db.models.signals import pre_save
from django.dispatch import receiver
from django.utils import timezone

from .models import Tarea, ESTADO_EN_PROGRESO, ESTADO_FINALIZADO

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Tarea)
def registrar_cambio_estado(sender, instance, **kwargs):
    """
    Marca las fechas de flujo cuando la tarea cambia de columna

    fecha_inicio_progreso se fija la primera vez que entra a 'En progreso';
    fecha_completado se fija al entrar a 'Finalizado' y se limpia al salir.
    """
    estado_anterior = None
    if instance.pk:
        estado_anterior = (
            sender.objects.filter(pk=instance.pk)
            .values_list('estado', flat=True)
            .first()
        )

    if estado_anterior == instance.estado:
        return

    ahora = timezone.now()

    if instance.estado == ESTADO_EN_PROGRESO and not instance.fecha_inicio_progreso:
        instance.fecha_inicio_progreso = ahora

    if instance.estado == ESTADO_FINALIZADO:
        if not instance.fecha_inicio_progreso:
            instance.fecha_inicio_progreso = ahora
        instance.fecha_completado = ahora
        if estado_anterior is not None:
            logger.info(f"✅ Tarea {instance.codigo} finalizada")
    elif estado_anterior == ESTADO_FINALIZADO:
        instance.fecha_completado = None
        logger.info(f"↩️ Tarea {instance.codigo} reabierta ({instance.estado})")
