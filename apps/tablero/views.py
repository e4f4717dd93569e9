# apps/tablero/views.py

import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from apps.core.permissions import requer_acceso_actividad

from .kanban import tablero_a_dict
from .services import ErrorServicioTablero, leer_tablero, mover_tarea_en_bd, notificar_movimiento

logger = logging.getLogger(__name__)


@login_required
@require_GET
@requer_acceso_actividad
def tablero_actividad(request, actividad_id):
    """
    Tablero completo de la actividad en JSON
    Columnas por estado con sus tareas y métricas
    """
    try:
        tablero = leer_tablero(request.actividad.id)
    except ErrorServicioTablero as e:
        return JsonResponse({'success': False, 'error': e.motivo}, status=e.status)

    return JsonResponse({'success': True, 'tablero': tablero_a_dict(tablero)})


@login_required
@require_http_methods(["PATCH", "POST"])
@csrf_exempt  # Cliente JS del tablero
def mover_tarea(request, tarea_id):
    """
    Mueve una tarea a otra columna
    Body: {"estado": "...", "orden": opcional}
    """
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return JsonResponse({'success': False, 'error': 'JSON inválido'}, status=400)

    nuevo_estado = data.get('estado')
    if not nuevo_estado:
        return JsonResponse({'success': False, 'error': 'Parámetros inválidos'}, status=400)

    orden = data.get('orden')
    if orden is not None:
        try:
            orden = int(orden)
        except (TypeError, ValueError):
            return JsonResponse({'success': False, 'error': 'Orden inválido'}, status=400)

    try:
        tarea, estado_anterior = mover_tarea_en_bd(tarea_id, nuevo_estado, usuario=request.user, orden=orden)
    except ErrorServicioTablero as e:
        return JsonResponse({'success': False, 'error': e.motivo}, status=e.status)

    notificar_movimiento(tarea, estado_anterior, request.user)

    return JsonResponse({
        'success': True,
        'tarea': {
            'id': tarea.id,
            'codigo': tarea.codigo,
            'estado': tarea.estado,
            'orden': tarea.orden,
        },
        'message': f'Tarea {tarea.codigo} movida a {tarea.estado}'
    })
