# apps/informes/views.py

import csv
import json
import logging
from datetime import date
from io import BytesIO

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

# Imports para Excel
import xlsxwriter

from apps.core.permissions import requer_acceso_actividad

from .plantillas import generar_acta_reunion, generar_informe_actividad
from .utils import construir_datos_informe_actividad

logger = logging.getLogger(__name__)


def _parse_fecha(valor):
    if not valor:
        return None
    return date.fromisoformat(valor)


def _nombre_archivo(texto):
    return texto.replace(' ', '_').replace('/', '-')


def _tareas_para_exportar(actividad):
    return (
        actividad.tareas_activas()
        .select_related('asignado_a')
        .order_by('estado', 'orden', 'id')
    )


@login_required
@require_GET
@requer_acceso_actividad
def informe_actividad_pdf(request, actividad_id):
    """
    Informe de actividad en PDF
    Query string opcional: ?desde=AAAA-MM-DD&hasta=AAAA-MM-DD
    """
    actividad = request.actividad  # Inyectada por el decorador

    try:
        desde = _parse_fecha(request.GET.get('desde'))
        hasta = _parse_fecha(request.GET.get('hasta'))
    except ValueError:
        return JsonResponse({'success': False, 'error': 'Fecha inválida (use AAAA-MM-DD)'}, status=400)

    if desde and hasta and desde > hasta:
        return JsonResponse({'success': False, 'error': 'El periodo es inválido'}, status=400)

    datos = construir_datos_informe_actividad(actividad, desde, hasta)
    pdf = generar_informe_actividad(datos)
    logger.info(f"📄 Informe PDF generado para actividad {actividad.codigo}")

    response = HttpResponse(pdf, content_type='application/pdf')
    response['Content-Disposition'] = (
        f'attachment; filename="Informe_Actividad_{_nombre_archivo(actividad.codigo)}_{timezone.localdate().isoformat()}.pdf"'
    )
    return response


@login_required
@require_POST
@csrf_exempt  # Cliente JS de actas
def acta_reunion_pdf(request):
    """
    Genera el acta de reunión a partir de un JSON con sus datos
    """
    try:
        datos = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return JsonResponse({'success': False, 'error': 'JSON inválido'}, status=400)

    if not isinstance(datos, dict) or not datos.get('fecha_reunion'):
        return JsonResponse({'success': False, 'error': 'fecha_reunion es obligatoria'}, status=400)

    try:
        pdf = generar_acta_reunion(datos)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        return JsonResponse({'success': False, 'error': f'Datos de acta inválidos: {e}'}, status=400)

    codigo = datos.get('proyecto_codigo') or 'SIGP'
    response = HttpResponse(pdf, content_type='application/pdf')
    response['Content-Disposition'] = (
        f'attachment; filename="Acta_Reunion_{_nombre_archivo(codigo)}_{str(datos["fecha_reunion"])[:10]}.pdf"'
    )
    return response


@login_required
@require_GET
@requer_acceso_actividad
def exportar_tareas_csv(request, actividad_id):
    """
    Exporta las tareas de la actividad a CSV
    """
    actividad = request.actividad

    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="tareas_{_nombre_archivo(actividad.codigo)}.csv"'
    response.write('\ufeff')  # BOM para UTF-8

    writer = csv.writer(response)
    writer.writerow([
        'Codigo', 'Nombre', 'Estado', 'Prioridad', 'Asignado a',
        'Horas Estimadas', 'Horas Reales', 'Creada', 'Completada',
        'Lead Time (dias)', 'Cycle Time (dias)'
    ])

    for tarea in _tareas_para_exportar(actividad):
        writer.writerow([
            tarea.codigo,
            tarea.nombre,
            tarea.estado,
            tarea.prioridad,
            (tarea.asignado_a.get_full_name() or tarea.asignado_a.username) if tarea.asignado_a else '',
            tarea.horas_estimadas if tarea.horas_estimadas is not None else '',
            tarea.horas_reales if tarea.horas_reales is not None else '',
            timezone.localtime(tarea.creado_en).strftime('%d/%m/%Y'),
            timezone.localtime(tarea.fecha_completado).strftime('%d/%m/%Y') if tarea.fecha_completado else '',
            tarea.lead_time_dias() if tarea.lead_time_dias() is not None else '',
            tarea.cycle_time_dias() if tarea.cycle_time_dias() is not None else '',
        ])

    return response


@login_required
@require_GET
@requer_acceso_actividad
def exportar_tareas_excel(request, actividad_id):
    """
    Exporta la actividad a Excel (XLSX)
    Hoja Resumen con métricas y hoja Tareas con el detalle
    """
    actividad = request.actividad
    datos = construir_datos_informe_actividad(actividad)

    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True, 'remove_timezone': True})

    header_format = workbook.add_format({
        'bold': True,
        'font_color': 'white',
        'bg_color': '#004272',
        'border': 1
    })
    cell_format = workbook.add_format({'border': 1})
    date_format = workbook.add_format({'num_format': 'dd/mm/yyyy', 'border': 1})
    number_format = workbook.add_format({'num_format': '0.0', 'border': 1})

    # Hoja 1: Resumen
    resumen = workbook.add_worksheet('Resumen')
    resumen.write('A1', 'INFORME DE ACTIVIDAD', header_format)
    filas_resumen = [
        ('Codigo:', actividad.codigo),
        ('Nombre:', actividad.nombre),
        ('Estado:', actividad.get_estado_display()),
        ('Throughput (tareas/semana):', datos['throughput']),
        ('Lead Time promedio (dias):', datos['lead_time']),
        ('Cycle Time promedio (dias):', datos['cycle_time']),
        ('WIP promedio:', datos['wip_promedio']),
    ]
    for fila, (etiqueta, valor) in enumerate(filas_resumen, 2):
        resumen.write(fila, 0, etiqueta, header_format)
        resumen.write(fila, 1, valor, cell_format)

    # Hoja 2: Tareas
    hoja = workbook.add_worksheet('Tareas')
    encabezados = [
        'Codigo', 'Nombre', 'Estado', 'Prioridad', 'Asignado a',
        'Horas Estimadas', 'Horas Reales', 'Creada', 'Completada'
    ]
    for col, encabezado in enumerate(encabezados):
        hoja.write(0, col, encabezado, header_format)

    for row, tarea in enumerate(_tareas_para_exportar(actividad), 1):
        hoja.write(row, 0, tarea.codigo, cell_format)
        hoja.write(row, 1, tarea.nombre, cell_format)
        hoja.write(row, 2, tarea.estado, cell_format)
        hoja.write(row, 3, tarea.prioridad, cell_format)
        hoja.write(row, 4, (tarea.asignado_a.get_full_name() or tarea.asignado_a.username) if tarea.asignado_a else '', cell_format)
        hoja.write(row, 5, float(tarea.horas_estimadas) if tarea.horas_estimadas is not None else '', number_format)
        hoja.write(row, 6, float(tarea.horas_reales) if tarea.horas_reales is not None else '', number_format)
        hoja.write_datetime(row, 7, timezone.localtime(tarea.creado_en), date_format)
        if tarea.fecha_completado:
            hoja.write_datetime(row, 8, timezone.localtime(tarea.fecha_completado), date_format)
        else:
            hoja.write_blank(row, 8, None, cell_format)

    resumen.set_column('A:A', 30)
    resumen.set_column('B:B', 40)
    hoja.set_column('A:I', 16)

    workbook.close()
    output.seek(0)

    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="actividad_{_nombre_archivo(actividad.codigo)}.xlsx"'
    return response
