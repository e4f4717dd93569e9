# apps/informes/utils.py

from collections import Counter
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional

from django.utils import timezone

from apps.core.models import ESTADO_EN_PROGRESO, ESTADO_FINALIZADO, ESTADO_POR_HACER
from apps.core.utils import promedio

from .plantillas import dias_atasco


def _inicio_dia(fecha):
    return timezone.make_aware(datetime.combine(fecha, time.min))


def _fin_dia(fecha):
    return timezone.make_aware(datetime.combine(fecha, time.max))


def calcular_wip_promedio(tareas, fecha_inicio, fecha_fin) -> float:
    """
    Promedio diario de tareas en progreso dentro del periodo

    Una tarea cuenta en un día si ya había empezado al cierre de ese día
    y todavía no estaba finalizada.
    """
    dias = (fecha_fin - fecha_inicio).days + 1
    if dias <= 0:
        return 0.0

    total = 0
    for i in range(dias):
        cierre = _fin_dia(fecha_inicio + timedelta(days=i))
        total += sum(
            1 for t in tareas
            if t.fecha_inicio_progreso and t.fecha_inicio_progreso <= cierre
            and (t.fecha_completado is None or t.fecha_completado > cierre)
        )
    return round(total / dias, 1)


def detectar_cuellos_de_botella(tareas, ahora=None, limite_dias=None) -> List[Dict]:
    """
    Etapas con tareas detenidas más de `limite_dias`

    Para 'Por hacer' se mide desde la creación; para 'En progreso'
    desde el inicio del trabajo.
    """
    ahora = ahora or timezone.now()
    limite_dias = dias_atasco() if limite_dias is None else limite_dias

    cuellos = []
    for etapa, campo in ((ESTADO_POR_HACER, 'creado_en'), (ESTADO_EN_PROGRESO, 'fecha_inicio_progreso')):
        edades = [
            (ahora - getattr(t, campo)).total_seconds() / 86400
            for t in tareas
            if t.estado == etapa and getattr(t, campo)
        ]
        atascadas = sum(1 for e in edades if e > limite_dias)
        if atascadas:
            cuellos.append({
                'etapa': etapa,
                'promedio_tiempo': promedio(edades),
                'tareas_atascadas': atascadas,
            })
    return cuellos


def construir_datos_informe_actividad(actividad, fecha_inicio=None, fecha_fin=None, proyecto_nombre: Optional[str] = None) -> Dict:
    """
    Datos del informe de actividad para el periodo [fecha_inicio, fecha_fin]

    Sin fechas, el periodo son los últimos 30 días.
    """
    hoy = timezone.localdate()
    fecha_fin = fecha_fin or hoy
    fecha_inicio = fecha_inicio or (fecha_fin - timedelta(days=30))

    tareas = list(actividad.tareas_activas().select_related('asignado_a'))

    completadas = [
        t for t in tareas
        if t.estado == ESTADO_FINALIZADO and t.fecha_completado
        and _inicio_dia(fecha_inicio) <= t.fecha_completado <= _fin_dia(fecha_fin)
    ]
    completadas.sort(key=lambda t: t.fecha_completado)

    semanas = max(((fecha_fin - fecha_inicio).days + 1) / 7, 1)

    lead_times = [t.lead_time_dias() for t in completadas]
    cycle_times = [t.cycle_time_dias() for t in completadas]

    en_progreso = [t for t in tareas if t.estado == ESTADO_EN_PROGRESO]

    equipo = Counter(
        t.asignado_a.get_full_name() or t.asignado_a.username
        for t in completadas if t.asignado_a
    )

    return {
        'actividad_nombre': actividad.nombre,
        'actividad_codigo': actividad.codigo,
        'proyecto_nombre': proyecto_nombre,
        'fecha_inicio': fecha_inicio,
        'fecha_fin': fecha_fin,
        'throughput': round(len(completadas) / semanas, 1),
        'lead_time': promedio(lead_times) or 0,
        'cycle_time': promedio(cycle_times) or 0,
        'wip_promedio': calcular_wip_promedio(tareas, fecha_inicio, fecha_fin),
        'tareas_completadas': [
            {
                'titulo': f'{t.codigo} - {t.nombre}',
                'lead_time': t.lead_time_dias() or 0,
                'cycle_time': t.cycle_time_dias() or 0,
            }
            for t in completadas
        ],
        'tareas_en_progreso': [
            {'titulo': f'{t.codigo} - {t.nombre}', 'dias_en_progreso': t.dias_en_progreso()}
            for t in sorted(en_progreso, key=lambda t: t.dias_en_progreso(), reverse=True)
        ],
        'cuellos_de_botella': detectar_cuellos_de_botella(tareas),
        'equipo': [
            {'nombre': nombre, 'tareas_completadas': cantidad}
            for nombre, cantidad in equipo.most_common()
        ],
    }
