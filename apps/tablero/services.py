# apps/tablero/services.py

import logging
from typing import Dict, FrozenSet, Optional, Protocol

from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from apps.core.models import Actividad, Tarea
from apps.core.permissions import SigpPermissions
from apps.core.utils import calcular_metricas_actividad

from .kanban import (
    DEFAULT_WIP_LIMITS,
    ESTADOS_TAREA,
    TRANSICIONES_PERMITIDAS,
    TableroKanban,
    TareaKanban,
    construir_tablero,
)

logger = logging.getLogger(__name__)


class ErrorServicioTablero(Exception):
    """
    Rechazo del servidor al leer o modificar el tablero

    `status` es el código HTTP equivalente para las vistas JSON.
    """

    def __init__(self, motivo, status=400):
        super().__init__(motivo)
        self.motivo = motivo
        self.status = status


class ServicioTablero(Protocol):
    """Colaborador remoto que usa el controlador del tablero"""

    async def obtener_tablero(self, actividad_id) -> TableroKanban:
        ...

    async def mover_tarea(self, tarea_id, nuevo_estado: str) -> None:
        ...


# === CONFIGURACIÓN ===

def get_wip_limits() -> Dict[str, Optional[int]]:
    """Límites WIP configurados (SIGP_KANBAN_WIP_LIMITS) sobre los por defecto"""
    limites = dict(DEFAULT_WIP_LIMITS)
    limites.update(getattr(settings, 'SIGP_KANBAN_WIP_LIMITS', None) or {})
    return limites


def get_transiciones() -> Dict[str, FrozenSet[str]]:
    configuradas = getattr(settings, 'SIGP_KANBAN_TRANSICIONES', None)
    if not configuradas:
        return dict(TRANSICIONES_PERMITIDAS)
    return {estado: frozenset(destinos) for estado, destinos in configuradas.items()}


# === OPERACIONES SÍNCRONAS (ORM) ===

def leer_tablero(actividad_id, wip_limits=None) -> TableroKanban:
    """Arma el tablero de una actividad a partir de sus tareas activas"""
    try:
        actividad = Actividad.objects.get(id=actividad_id, activo=True)
    except Actividad.DoesNotExist:
        raise ErrorServicioTablero('Actividad no encontrada', status=404)

    tareas = (
        actividad.tareas_activas()
        .annotate(
            n_subtareas=Count('subtareas', filter=Q(subtareas__activo=True)),
            n_subtareas_completadas=Count(
                'subtareas',
                filter=Q(subtareas__activo=True, subtareas__estado='Finalizado')
            ),
        )
        .order_by('orden', 'id')
    )

    return construir_tablero(
        actividad.id,
        (tarea_a_kanban(t) for t in tareas),
        wip_limits if wip_limits is not None else get_wip_limits(),
        calcular_metricas_actividad(actividad),
    )


def tarea_a_kanban(tarea: Tarea) -> TareaKanban:
    return TareaKanban(
        id=tarea.id,
        codigo=tarea.codigo,
        nombre=tarea.nombre,
        estado=tarea.estado,
        prioridad=tarea.prioridad,
        asignado_a=tarea.asignado_a_id,
        descripcion=tarea.descripcion,
        horas_estimadas=float(tarea.horas_estimadas) if tarea.horas_estimadas is not None else None,
        subtareas_count=getattr(tarea, 'n_subtareas', 0),
        subtareas_completadas=getattr(tarea, 'n_subtareas_completadas', 0),
    )


def mover_tarea_en_bd(tarea_id, nuevo_estado, usuario=None, orden=None,
                      wip_limits=None, transiciones=None):
    """
    Persiste el movimiento de una tarea a otra columna

    Revalida estado, permisos, transición y límite WIP contra la base de
    datos: otro usuario pudo llenar la columna después de la última lectura.
    Sin `orden`, la tarea queda al final de la columna destino.
    Devuelve la tarea guardada y el estado que tenía antes.
    """
    if nuevo_estado not in ESTADOS_TAREA:
        raise ErrorServicioTablero(f'Estado invalido: {nuevo_estado}')

    wip_limits = wip_limits if wip_limits is not None else get_wip_limits()
    transiciones = transiciones if transiciones is not None else get_transiciones()

    with transaction.atomic():
        try:
            tarea = (
                Tarea.objects.select_for_update()
                .select_related('actividad')
                .get(id=tarea_id, activo=True)
            )
        except Tarea.DoesNotExist:
            raise ErrorServicioTablero('Tarea no encontrada', status=404)

        if usuario is not None and not SigpPermissions.puede_mover_tarea(usuario, tarea):
            raise ErrorServicioTablero('Sin permiso para mover la tarea', status=403)

        if nuevo_estado not in transiciones.get(tarea.estado, ()):
            raise ErrorServicioTablero(
                f'Transicion no permitida de "{tarea.estado}" a "{nuevo_estado}"',
                status=409
            )

        columna = Tarea.objects.filter(
            actividad_id=tarea.actividad_id, estado=nuevo_estado, activo=True
        ).exclude(id=tarea.id)

        limite = wip_limits.get(nuevo_estado)
        if limite is not None and tarea.estado != nuevo_estado and columna.count() >= limite:
            raise ErrorServicioTablero(
                f'Columna {nuevo_estado} alcanzo el limite WIP ({limite})',
                status=409
            )

        if orden is None:
            orden = (columna.aggregate(m=Max('orden'))['m'] or 0) + 1

        estado_anterior = tarea.estado
        tarea.estado = nuevo_estado
        tarea.orden = orden
        tarea.save()

    logger.info(f"📋 Tarea {tarea.codigo}: {estado_anterior} -> {nuevo_estado}")
    return tarea, estado_anterior


# === NOTIFICACIONES ===

def grupo_tablero(actividad_id):
    return f'tablero_{actividad_id}'


def mensaje_tarea_movida(tarea: Tarea, estado_anterior, usuario=None) -> Dict:
    return {
        'type': 'tarea_movida',
        'message': {
            'tarea_id': tarea.id,
            'codigo': tarea.codigo,
            'estado_anterior': estado_anterior,
            'estado': tarea.estado,
            'usuario': (usuario.get_full_name() or usuario.username) if usuario else None,
            'user_id': usuario.id if usuario else None,
            'timestamp': timezone.now().isoformat(),
        }
    }


def notificar_movimiento(tarea: Tarea, estado_anterior, usuario=None):
    """Avisa al grupo del tablero (desde código síncrono)"""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        grupo_tablero(tarea.actividad_id),
        mensaje_tarea_movida(tarea, estado_anterior, usuario)
    )


# === ADAPTADOR ASYNC ===

class ServicioTableroORM:
    """
    Implementación de ServicioTablero sobre el ORM de Django

    Pensada para vivir dentro de un consumer: cada llamada corre en el
    hilo de base de datos vía database_sync_to_async.
    """

    def __init__(self, usuario=None, wip_limits=None, transiciones=None):
        self.usuario = usuario
        self.wip_limits = wip_limits
        self.transiciones = transiciones

    async def obtener_tablero(self, actividad_id) -> TableroKanban:
        return await database_sync_to_async(leer_tablero)(actividad_id, self.wip_limits)

    async def mover_tarea(self, tarea_id, nuevo_estado: str) -> None:
        await database_sync_to_async(mover_tarea_en_bd)(
            tarea_id,
            nuevo_estado,
            usuario=self.usuario,
            wip_limits=self.wip_limits,
            transiciones=self.transiciones,
        )
