# apps/informes/plantillas.py

"""
Plantillas PDF del SIGP

- generar_informe_actividad: métricas Kanban de una actividad en un periodo
- generar_acta_reunion: acta con asistentes, agenda, acuerdos y firmas

Ambas reciben un dict ya armado (ver apps/informes/utils.py) y devuelven
los bytes del PDF.
"""

from typing import Dict, List

from django.conf import settings

from .pdf import (
    FUENTE_NEGRITA,
    PDF_FONTS,
    PDF_MARGINS,
    DocumentoPDF,
    agregar_caja_info,
    agregar_encabezado,
    agregar_firmas,
    agregar_lista,
    agregar_parrafo,
    agregar_seccion,
    agregar_tabla,
    formatear_fecha,
    truncar_texto,
    verificar_salto_pagina,
)


def dias_atasco():
    return getattr(settings, 'SIGP_INFORME_DIAS_ATASCO', 5)


def _num(valor):
    return float(valor or 0)


# === INFORME DE ACTIVIDAD ===

def generar_recomendaciones(datos: Dict) -> List[str]:
    """Recomendaciones a partir de las métricas del informe"""
    recomendaciones = []
    limite_atasco = dias_atasco()

    if _num(datos.get('wip_promedio')) > 5:
        recomendaciones.append('Considerar reducir el WIP limit para mejorar el flujo de trabajo.')

    if _num(datos.get('lead_time')) > _num(datos.get('cycle_time')) * 2:
        recomendaciones.append(
            'El Lead Time es alto en relacion al Cycle Time. '
            'Revisar el tiempo de espera antes de iniciar las tareas.'
        )

    cuellos = datos.get('cuellos_de_botella') or []
    if cuellos:
        peor = max(cuellos, key=lambda c: c['tareas_atascadas'])
        recomendaciones.append(
            f'Atender cuello de botella en la etapa "{peor["etapa"]}" '
            f'con {peor["tareas_atascadas"]} tareas atascadas.'
        )

    if any(t['dias_en_progreso'] > limite_atasco for t in datos.get('tareas_en_progreso') or []):
        recomendaciones.append(
            f'Revisar y priorizar las tareas que llevan mas de {limite_atasco} dias en progreso.'
        )

    if not recomendaciones:
        recomendaciones.append('El flujo de trabajo se encuentra saludable. Mantener las practicas actuales.')

    return recomendaciones


def _caja_metrica(doc, x, y, etiqueta, valor, subetiqueta, fill):
    ancho, alto = 42, 35
    doc.rect(x, y, ancho, alto, fill='#FFFFFF', stroke=fill, radio=3, grosor=0.5)
    doc.rect(x, y, ancho, 4, fill=fill)
    doc.texto(x + ancho / 2, y + 18, valor, size=PDF_FONTS['TITLE'], fuente=FUENTE_NEGRITA, fill=fill, align='center')
    doc.texto(x + ancho / 2, y + 26, etiqueta, size=PDF_FONTS['SMALL'], fuente=FUENTE_NEGRITA, align='center')
    doc.texto(x + ancho / 2, y + 32, subetiqueta, size=PDF_FONTS['TINY'], fill='TEXT_LIGHT', align='center')


def generar_informe_actividad(datos: Dict) -> bytes:
    doc = DocumentoPDF('Informe de Actividad')
    limite_atasco = dias_atasco()

    subtitulo = datos['actividad_nombre']
    if datos.get('proyecto_nombre'):
        subtitulo = f"{subtitulo} - {datos['proyecto_nombre']}"
    y = agregar_encabezado(doc, 'Informe de Actividad', subtitulo)

    # 1. Periodo
    y += 5
    y = agregar_seccion(doc, '1. PERIODO DE REPORTE', y)
    doc.rect(PDF_MARGINS['LEFT'], y, doc.ancho_util, 20, fill='#F0F9FF', stroke='SECONDARY', radio=3)
    x_etiqueta = PDF_MARGINS['LEFT'] + 5
    doc.texto(x_etiqueta, y + 8, 'Actividad:', size=PDF_FONTS['TINY'], fill='TEXT_LIGHT')
    doc.texto(x_etiqueta + 25, y + 8, truncar_texto(datos['actividad_nombre'], doc.ancho_util - 40, PDF_FONTS['BODY']),
              fuente=FUENTE_NEGRITA, fill='PRIMARY')
    doc.texto(x_etiqueta, y + 16, 'Periodo:', size=PDF_FONTS['TINY'], fill='TEXT_LIGHT')
    doc.texto(x_etiqueta + 25, y + 16,
              f"{formatear_fecha(datos.get('fecha_inicio'))} - {formatear_fecha(datos.get('fecha_fin'))}")
    y += 30

    # 2. Métricas Kanban
    y = verificar_salto_pagina(doc, y, 50)
    y = agregar_seccion(doc, '2. METRICAS KANBAN', y)
    metricas = [
        ('Throughput', str(datos.get('throughput', 0)), 'tareas/semana', 'SUCCESS'),
        ('Lead Time', f"{_num(datos.get('lead_time')):.1f}", 'dias promedio', 'SECONDARY'),
        ('Cycle Time', f"{_num(datos.get('cycle_time')):.1f}", 'dias promedio', 'PRIMARY'),
        ('WIP Prom.', f"{_num(datos.get('wip_promedio')):.1f}", 'tareas', 'WARNING'),
    ]
    x = PDF_MARGINS['LEFT']
    for etiqueta, valor, subetiqueta, fill in metricas:
        _caja_metrica(doc, x, y, etiqueta, valor, subetiqueta, fill)
        x += 42 + 5
    y += 35 + 15

    doc.rect(PDF_MARGINS['LEFT'], y, doc.ancho_util, 25, fill='#FFFBEB', stroke='WARNING', radio=2)
    explicaciones = [
        'Throughput: Cantidad de tareas completadas por unidad de tiempo.',
        'Lead Time: Tiempo desde que se solicita una tarea hasta que se completa.',
        'Cycle Time: Tiempo desde que se inicia el trabajo en una tarea hasta que se completa.',
        'WIP: Work in Progress - Cantidad de tareas en progreso simultaneamente.',
    ]
    for i, texto in enumerate(explicaciones):
        doc.texto(PDF_MARGINS['LEFT'] + 5, y + 5 + i * 5, texto, size=PDF_FONTS['TINY'])
    y += 32

    # 3. Tareas completadas
    y = verificar_salto_pagina(doc, y, 40)
    y = agregar_seccion(doc, '3. TAREAS COMPLETADAS', y)
    completadas = datos.get('tareas_completadas') or []
    if completadas:
        y = agregar_tabla(
            doc,
            [[t['titulo'], f"{_num(t['lead_time']):.1f} dias", f"{_num(t['cycle_time']):.1f} dias"] for t in completadas],
            ['Tarea', 'Lead Time', 'Cycle Time'],
            y,
            anchos=[110, 35, 35],
        )
        lead = sum(_num(t['lead_time']) for t in completadas) / len(completadas)
        cycle = sum(_num(t['cycle_time']) for t in completadas) / len(completadas)
        y += 5
        doc.texto(PDF_MARGINS['LEFT'], y,
                  f'Total: {len(completadas)} tareas | Lead Time Prom: {lead:.1f} dias | Cycle Time Prom: {cycle:.1f} dias',
                  size=PDF_FONTS['SMALL'], fuente=FUENTE_NEGRITA)
    else:
        doc.texto(PDF_MARGINS['LEFT'], y, 'No se completaron tareas en este periodo.', fill='TEXT_LIGHT')
    y += 10

    # 4. Tareas en progreso
    en_progreso = datos.get('tareas_en_progreso') or []
    if en_progreso:
        y = verificar_salto_pagina(doc, y, 35)
        y = agregar_seccion(doc, '4. TAREAS EN PROGRESO', y)
        y = agregar_tabla(
            doc,
            [[t['titulo'], f"{t['dias_en_progreso']} dias"] for t in en_progreso],
            ['Tarea', 'Dias en Progreso'],
            y,
            anchos=[140, 40],
        )

        atascadas = [t for t in en_progreso if t['dias_en_progreso'] > limite_atasco]
        if atascadas:
            y = verificar_salto_pagina(doc, y + 5, 15)
            doc.rect(PDF_MARGINS['LEFT'], y, doc.ancho_util, 10, fill='#FEE2E2', stroke='DANGER', radio=2)
            doc.texto(doc.ancho / 2, y + 7,
                      f'ALERTA: {len(atascadas)} tarea(s) con mas de {limite_atasco} dias en progreso',
                      size=PDF_FONTS['SMALL'], fuente=FUENTE_NEGRITA, fill='DANGER', align='center')
            y += 15
        y += 10

    # 5. Cuellos de botella
    cuellos = datos.get('cuellos_de_botella') or []
    if cuellos:
        y = verificar_salto_pagina(doc, y, 35)
        y = agregar_seccion(doc, '5. CUELLOS DE BOTELLA IDENTIFICADOS', y)
        y = agregar_tabla(
            doc,
            [[c['etapa'], f"{_num(c['promedio_tiempo']):.1f} dias", str(c['tareas_atascadas'])] for c in cuellos],
            ['Etapa', 'Tiempo Promedio', 'Tareas Atascadas'],
            y,
            anchos=[80, 50, 50],
        )
        y += 10

    # 6. Rendimiento del equipo
    equipo = datos.get('equipo') or []
    if equipo:
        y = verificar_salto_pagina(doc, y, 35)
        y = agregar_seccion(doc, '6. RENDIMIENTO DEL EQUIPO', y)
        ordenado = sorted(equipo, key=lambda e: e['tareas_completadas'], reverse=True)
        filas = []
        for i, miembro in enumerate(ordenado):
            puesto = f'({i + 1}) ' if i < 3 else ''
            filas.append([f"{puesto}{miembro['nombre']}", str(miembro['tareas_completadas'])])
        y = agregar_tabla(doc, filas, ['Miembro', 'Tareas Completadas'], y, anchos=[130, 50])
        y += 5
        total = sum(e['tareas_completadas'] for e in equipo)
        doc.texto(doc.ancho - PDF_MARGINS['RIGHT'], y, f'Total de tareas completadas: {total}',
                  fuente=FUENTE_NEGRITA, align='right')

    # 7. Recomendaciones
    y = verificar_salto_pagina(doc, y, 40)
    y += 10
    y = agregar_seccion(doc, '7. RECOMENDACIONES', y)
    for i, recomendacion in enumerate(generar_recomendaciones(datos), 1):
        y = verificar_salto_pagina(doc, y, 12)
        y = agregar_parrafo(doc, f'{i}. {recomendacion}', y) - 1

    return doc.cerrar()


# === ACTA DE REUNIÓN ===

def _registros(datos, clave, campo):
    """Items de una lista del acta como dicts; un texto suelto se toma como `campo`"""
    return [item if isinstance(item, dict) else {campo: str(item)} for item in datos.get(clave) or []]


def generar_acta_reunion(datos: Dict) -> bytes:
    doc = DocumentoPDF('Acta de Reunion')

    subtitulo = ' - '.join(p for p in [datos.get('proyecto_codigo'), datos.get('proyecto_nombre')] if p)
    y = agregar_encabezado(doc, 'Acta de Reunion', subtitulo or None)

    # 1. Información
    y += 5
    y = agregar_seccion(doc, '1. INFORMACION DE LA REUNION', y)
    ancho_caja = (doc.ancho_util - 5) / 2
    x_derecha = PDF_MARGINS['LEFT'] + ancho_caja + 5
    agregar_caja_info(doc, 'Tipo de reunion', datos.get('tipo_reunion') or '-', y, ancho=ancho_caja)
    agregar_caja_info(doc, 'Fase', datos.get('fase') or '-', y, ancho=ancho_caja, x=x_derecha)
    y += 16
    horario = f"{datos.get('hora_inicio') or '-'} - {datos.get('hora_fin') or '-'}"
    agregar_caja_info(doc, 'Fecha', formatear_fecha(datos.get('fecha_reunion')), y, ancho=ancho_caja)
    y = agregar_caja_info(doc, 'Horario', horario, y, ancho=ancho_caja, x=x_derecha) + 6

    # 2. Asistentes
    y = verificar_salto_pagina(doc, y, 40)
    y = agregar_seccion(doc, '2. ASISTENTES', y)
    asistentes = _registros(datos, 'asistentes', 'nombre')
    if asistentes:
        y = agregar_tabla(
            doc,
            [[a.get('nombre', ''), a.get('cargo', ''), a.get('direccion', ''), 'Si' if a.get('asistio', True) else 'No']
             for a in asistentes],
            ['Nombre', 'Cargo', 'Direccion', 'Asistio'],
            y,
            anchos=[55, 45, 50, 25],
        )
    else:
        doc.texto(PDF_MARGINS['LEFT'], y, 'No se registraron asistentes.', fill='TEXT_LIGHT')
        y += 8

    ausentes = _registros(datos, 'ausentes', 'nombre')
    if ausentes:
        y = verificar_salto_pagina(doc, y + 5, 15)
        doc.texto(PDF_MARGINS['LEFT'], y, 'Ausentes:', fuente=FUENTE_NEGRITA)
        y = agregar_lista(doc, [f"{a.get('nombre', '')} ({a.get('cargo', '')})" for a in ausentes], y + 5)
    y += 10

    # 3. Agenda
    y = verificar_salto_pagina(doc, y, 30)
    y = agregar_seccion(doc, '3. AGENDA', y)
    agenda = _registros(datos, 'agenda', 'tema')
    if agenda:
        for i, item in enumerate(agenda, 1):
            y = verificar_salto_pagina(doc, y, 12)
            doc.texto(PDF_MARGINS['LEFT'], y, truncar_texto(f"{i}. {item.get('tema', '')}", doc.ancho_util, PDF_FONTS['BODY'], FUENTE_NEGRITA),
                      fuente=FUENTE_NEGRITA, fill='PRIMARY')
            y += 6
            if item.get('descripcion'):
                y = agregar_parrafo(doc, item['descripcion'], y)
    else:
        doc.texto(PDF_MARGINS['LEFT'], y, 'No se definio agenda.', fill='TEXT_LIGHT')
        y += 8
    y += 5

    # 4-5. Requerimientos
    secciones_lista = [
        ('4. REQUERIMIENTOS FUNCIONALES', 'requerimientos_funcionales'),
        ('5. REQUERIMIENTOS NO FUNCIONALES', 'requerimientos_no_funcionales'),
    ]
    for titulo, clave in secciones_lista:
        items = [r['descripcion'] if isinstance(r, dict) else str(r) for r in datos.get(clave) or []]
        if items:
            y = verificar_salto_pagina(doc, y, 25)
            y = agregar_seccion(doc, titulo, y)
            y = agregar_lista(doc, items, y) + 5

    # 6. Entregables
    entregables = _registros(datos, 'entregables', 'descripcion')
    if entregables:
        y = verificar_salto_pagina(doc, y, 30)
        y = agregar_seccion(doc, '6. ENTREGABLES COMPROMETIDOS', y)
        y = agregar_tabla(
            doc,
            [[e.get('descripcion', ''), e.get('responsable', ''), formatear_fecha(e.get('fecha_compromiso'))]
             for e in entregables],
            ['Entregable', 'Responsable', 'Fecha Compromiso'],
            y,
            anchos=[90, 50, 40],
        )
        y += 10

    # 7. Temas pendientes
    pendientes = [t['tema'] if isinstance(t, dict) else str(t) for t in datos.get('temas_pendientes') or []]
    if pendientes:
        y = verificar_salto_pagina(doc, y, 25)
        y = agregar_seccion(doc, '7. TEMAS PENDIENTES', y)
        y = agregar_lista(doc, pendientes, y) + 5

    # 8. Próximas reuniones
    reuniones = _registros(datos, 'reuniones_programadas', 'tema')
    if reuniones:
        y = verificar_salto_pagina(doc, y, 30)
        y = agregar_seccion(doc, '8. PROXIMAS REUNIONES', y)
        y = agregar_tabla(
            doc,
            [[r.get('tema', ''), formatear_fecha(r.get('fecha')), r.get('hora_inicio', '')] for r in reuniones],
            ['Tema', 'Fecha', 'Hora'],
            y,
            anchos=[100, 50, 30],
        )
        y += 10

    # 9. Observaciones
    if datos.get('observaciones'):
        y = verificar_salto_pagina(doc, y, 25)
        y = agregar_seccion(doc, '9. OBSERVACIONES', y)
        y = agregar_parrafo(doc, datos['observaciones'], y)

    # Firmas de los que asistieron
    firmantes = [a for a in asistentes if a.get('asistio', True)]
    if firmantes:
        agregar_firmas(doc, firmantes, y + 10)

    return doc.cerrar()
