# apps/core/utils.py

from datetime import timedelta
from typing import Dict, List, Optional

from django.utils import timezone

from .models import ESTADO_POR_HACER, ESTADO_EN_PROGRESO, ESTADO_FINALIZADO


def promedio(valores: List[float]) -> Optional[float]:
    """Promedio redondeado a un decimal, None si no hay valores"""
    valores = [v for v in valores if v is not None]
    if not valores:
        return None
    return round(sum(valores) / len(valores), 1)


def calcular_metricas_actividad(actividad) -> Dict:
    """
    Métricas Kanban de una actividad

    - lead_time: creación -> finalización (días, promedio)
    - cycle_time: inicio de progreso -> finalización (días, promedio)
    - throughput: tareas finalizadas en los últimos 7 días
    - wip_actual: tareas en progreso ahora
    """
    tareas = list(actividad.tareas_activas())
    finalizadas = [t for t in tareas if t.estado == ESTADO_FINALIZADO]

    hace_una_semana = timezone.now() - timedelta(days=7)
    throughput = sum(
        1 for t in finalizadas
        if t.fecha_completado and t.fecha_completado >= hace_una_semana
    )

    total = len(tareas)
    en_progreso = sum(1 for t in tareas if t.estado == ESTADO_EN_PROGRESO)

    return {
        'totalTareas': total,
        'tareasCompletadas': len(finalizadas),
        'tareasEnProgreso': en_progreso,
        'tareasPorHacer': sum(1 for t in tareas if t.estado == ESTADO_POR_HACER),
        'leadTimePromedio': promedio([t.lead_time_dias() for t in finalizadas]),
        'cycleTimePromedio': promedio([t.cycle_time_dias() for t in finalizadas]),
        'throughput': throughput,
        'wipActual': en_progreso,
        'porcentajeCompletado': round(len(finalizadas) / total * 100, 1) if total else 0,
    }
