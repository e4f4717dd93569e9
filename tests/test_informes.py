"""Tests for apps.informes: capa PDF, plantillas, datos de informe y exportaciones."""

import json
import re
import zipfile
from datetime import date, datetime, timedelta
from io import BytesIO
from types import SimpleNamespace

import pytest
from django.urls import reverse
from django.utils import timezone

from apps.core.models import Tarea
from apps.informes.pdf import (
    PDF_FONTS,
    PDF_MARGINS,
    DocumentoPDF,
    agregar_parrafo,
    agregar_tabla,
    ancho_texto,
    formatear_fecha,
    formatear_numero,
    formatear_porcentaje,
    truncar_texto,
    verificar_salto_pagina,
)
from apps.informes.plantillas import generar_acta_reunion, generar_informe_actividad, generar_recomendaciones
from apps.informes.utils import calcular_wip_promedio, detectar_cuellos_de_botella


@pytest.fixture
def datos_informe():
    return {
        'actividad_nombre': 'Encuesta piloto',
        'proyecto_nombre': 'Censo 2025',
        'fecha_inicio': date(2024, 3, 1),
        'fecha_fin': date(2024, 3, 31),
        'throughput': 2.5,
        'lead_time': 6.0,
        'cycle_time': 2.0,
        'wip_promedio': 3.2,
        'tareas_completadas': [
            {'titulo': f'T-{i:02d} - Tarea {i}', 'lead_time': 5.0, 'cycle_time': 2.0}
            for i in range(1, 6)
        ],
        'tareas_en_progreso': [{'titulo': 'T-10 - Validación', 'dias_en_progreso': 9}],
        'cuellos_de_botella': [{'etapa': 'En progreso', 'promedio_tiempo': 9.0, 'tareas_atascadas': 1}],
        'equipo': [{'nombre': 'Rosa Mamani', 'tareas_completadas': 3}, {'nombre': 'Jorge Flores', 'tareas_completadas': 2}],
    }


@pytest.fixture
def datos_acta():
    return {
        'proyecto_codigo': 'PRY-01',
        'proyecto_nombre': 'Censo 2025',
        'tipo_reunion': 'Seguimiento',
        'fase': 'Ejecución',
        'fecha_reunion': '2024-03-05',
        'hora_inicio': '09:00',
        'hora_fin': '10:30',
        'asistentes': [
            {'nombre': 'Carmen Quispe', 'cargo': 'Coordinadora', 'direccion': 'DTI', 'asistio': True},
            {'nombre': 'Luis Huamán', 'cargo': 'Gestor', 'direccion': 'DTI', 'asistio': True},
            {'nombre': 'Rosa Mamani', 'cargo': 'Analista', 'direccion': 'DNCE', 'asistio': False},
        ],
        'ausentes': [{'nombre': 'Jorge Flores', 'cargo': 'Programador'}],
        'agenda': [{'tema': 'Avance del piloto', 'descripcion': 'Revisión de las tareas en progreso.'}],
        'requerimientos_funcionales': [{'descripcion': 'Exportar tareas a Excel'}],
        'requerimientos_no_funcionales': ['Respuesta menor a 2 segundos'],
        'entregables': [{'descripcion': 'Informe de piloto', 'responsable': 'Rosa Mamani', 'fecha_compromiso': '2024-03-20'}],
        'temas_pendientes': ['Presupuesto de campo'],
        'reuniones_programadas': [{'tema': 'Cierre del piloto', 'fecha': '2024-03-27', 'hora_inicio': '09:00'}],
        'observaciones': 'Sin observaciones adicionales.',
    }


class TestPrimitivasPdf:
    """Bloques de maquetación y paginación."""

    def test_truncar_texto_corto_no_cambia(self):
        assert truncar_texto('Tarea', 50) == 'Tarea'

    def test_truncar_texto_largo(self):
        texto = 'Levantamiento de requerimientos del módulo de seguimiento ' * 3
        recortado = truncar_texto(texto, 40)

        assert recortado.endswith('...')
        assert ancho_texto(recortado, PDF_FONTS['SMALL']) <= 40

    def test_salto_de_pagina(self):
        doc = DocumentoPDF('Prueba')
        y = verificar_salto_pagina(doc, doc.alto - PDF_MARGINS['BOTTOM'] - 5, 20)

        assert doc.pagina == 2
        assert y == PDF_MARGINS['TOP'] + 10

    def test_sin_salto_si_hay_espacio(self):
        doc = DocumentoPDF('Prueba')
        assert verificar_salto_pagina(doc, 50, 20) == 50
        assert doc.pagina == 1

    def test_tabla_larga_ocupa_varias_paginas(self):
        doc = DocumentoPDF('Prueba')
        filas = [[f'T-{i}', 'Por hacer'] for i in range(60)]

        agregar_tabla(doc, filas, ['Codigo', 'Estado'], 40)

        assert doc.pagina > 1
        assert doc.cerrar().startswith(b'%PDF')

    def test_parrafo_avanza_por_linea(self):
        doc = DocumentoPDF('Prueba')
        una = agregar_parrafo(doc, 'Corto', 40)
        varias = agregar_parrafo(doc, 'palabra ' * 200, 40)
        assert varias > una


class TestFormateadores:

    def test_formatear_fecha(self):
        assert formatear_fecha(date(2024, 3, 5)) == '05 de marzo de 2024'
        assert formatear_fecha('2024-03-05') == '05 de marzo de 2024'
        assert formatear_fecha(datetime(2024, 12, 1, 10, 30)) == '01 de diciembre de 2024'
        assert formatear_fecha(None) == '-'

    def test_formatear_fecha_texto_libre(self):
        assert formatear_fecha('por definir') == 'por definir'

    def test_formatear_numero(self):
        assert formatear_numero(1234567.5) == '1,234,567.5'
        assert formatear_numero(1000) == '1,000'
        assert formatear_numero(None) == '-'

    def test_formatear_porcentaje(self):
        assert formatear_porcentaje(80) == '80.0%'
        assert formatear_porcentaje(None) == '0.0%'


class TestRecomendaciones:
    """Reglas de recomendación del informe."""

    def test_flujo_saludable(self):
        recomendaciones = generar_recomendaciones({'wip_promedio': 2, 'lead_time': 3, 'cycle_time': 2})
        assert len(recomendaciones) == 1
        assert 'saludable' in recomendaciones[0]

    def test_wip_alto(self):
        recomendaciones = generar_recomendaciones({'wip_promedio': 8, 'lead_time': 3, 'cycle_time': 2})
        assert any('WIP' in r for r in recomendaciones)

    def test_lead_time_alto_frente_a_cycle_time(self):
        recomendaciones = generar_recomendaciones({'wip_promedio': 1, 'lead_time': 10, 'cycle_time': 2})
        assert any('Lead Time' in r for r in recomendaciones)

    def test_cuello_de_botella_y_tareas_atascadas(self, datos_informe):
        recomendaciones = generar_recomendaciones(datos_informe)
        assert any('"En progreso"' in r for r in recomendaciones)
        assert any('dias en progreso' in r for r in recomendaciones)


class TestPlantillas:

    def test_informe_actividad(self, datos_informe):
        pdf = generar_informe_actividad(datos_informe)
        assert pdf.startswith(b'%PDF')

    def test_informe_actividad_vacio(self):
        pdf = generar_informe_actividad({'actividad_nombre': 'Sin datos'})
        assert pdf.startswith(b'%PDF')

    def test_acta_reunion(self, datos_acta):
        pdf = generar_acta_reunion(datos_acta)
        assert pdf.startswith(b'%PDF')

    def test_acta_minima(self):
        assert generar_acta_reunion({'fecha_reunion': '2024-03-05'}).startswith(b'%PDF')


class TestDatosInforme:
    """Cálculos sobre tareas sin base de datos."""

    def test_wip_promedio(self):
        inicio = date(2024, 3, 1)
        en_marzo = timezone.make_aware(datetime(2024, 3, 1, 9, 0))
        tareas = [
            SimpleNamespace(fecha_inicio_progreso=en_marzo, fecha_completado=None),
            SimpleNamespace(fecha_inicio_progreso=en_marzo, fecha_completado=en_marzo + timedelta(days=1)),
            SimpleNamespace(fecha_inicio_progreso=None, fecha_completado=None),
        ]
        # Día 1: 2 tareas; día 2: 1 tarea (la otra terminó antes del cierre)
        assert calcular_wip_promedio(tareas, inicio, inicio + timedelta(days=1)) == 1.5

    def test_wip_promedio_periodo_invertido(self):
        assert calcular_wip_promedio([], date(2024, 3, 2), date(2024, 3, 1)) == 0.0

    def test_cuellos_de_botella(self):
        ahora = timezone.now()
        tareas = [
            SimpleNamespace(estado='En progreso', fecha_inicio_progreso=ahora - timedelta(days=10), creado_en=ahora),
            SimpleNamespace(estado='En progreso', fecha_inicio_progreso=ahora - timedelta(days=1), creado_en=ahora),
            SimpleNamespace(estado='Por hacer', fecha_inicio_progreso=None, creado_en=ahora - timedelta(days=2)),
        ]

        cuellos = detectar_cuellos_de_botella(tareas, ahora=ahora, limite_dias=5)

        assert cuellos == [{'etapa': 'En progreso', 'promedio_tiempo': 5.5, 'tareas_atascadas': 1}]


@pytest.mark.django_db
class TestVistasInformes:
    """Descargas de informes y exportaciones."""

    def test_informe_pdf(self, client, coordinador, actividad, crear_tarea):
        crear_tarea('Finalizado')
        crear_tarea('En progreso')
        client.force_login(coordinador)

        response = client.get(reverse('informes:actividad_pdf', args=[actividad.id]))

        assert response.status_code == 200
        assert response['Content-Type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')
        assert 'Informe_Actividad_ACT-001' in response['Content-Disposition']

    def test_informe_pdf_fecha_invalida(self, client, coordinador, actividad):
        client.force_login(coordinador)
        url = reverse('informes:actividad_pdf', args=[actividad.id])

        assert client.get(url, {'desde': '05/03/2024'}).status_code == 400
        assert client.get(url, {'desde': '2024-03-10', 'hasta': '2024-03-01'}).status_code == 400

    def test_informe_pdf_sin_acceso(self, client, externo, actividad):
        client.force_login(externo)
        response = client.get(reverse('informes:actividad_pdf', args=[actividad.id]))
        assert response.status_code == 403

    def test_exportar_csv(self, client, coordinador, actividad, crear_tarea):
        crear_tarea('Por hacer', nombre='Diseño del cuestionario')
        client.force_login(coordinador)

        response = client.get(reverse('informes:actividad_csv', args=[actividad.id]))
        contenido = response.content.decode('utf-8')

        assert response.status_code == 200
        assert contenido.startswith('\ufeff')
        assert 'Codigo,Nombre,Estado' in contenido
        assert 'Diseño del cuestionario' in contenido

    def test_exportar_excel(self, client, coordinador, actividad, crear_tarea):
        crear_tarea('Finalizado')
        client.force_login(coordinador)

        response = client.get(reverse('informes:actividad_excel', args=[actividad.id]))

        assert response.status_code == 200
        assert response.content.startswith(b'PK')

    def test_exportar_excel_fechas_en_hora_local(self, client, coordinador, actividad, crear_tarea):
        """Una tarea creada a las 23:30 de Lima conserva su día en la hoja Tareas."""
        tarea = crear_tarea('Por hacer')
        Tarea.objects.filter(id=tarea.id).update(creado_en=timezone.make_aware(datetime(2024, 3, 5, 23, 30)))
        client.force_login(coordinador)

        response = client.get(reverse('informes:actividad_excel', args=[actividad.id]))

        with zipfile.ZipFile(BytesIO(response.content)) as libro:
            hoja = libro.read('xl/worksheets/sheet2.xml').decode('utf-8')
        serial = float(re.search(r'<c r="H2"[^>]*><v>([^<]+)</v>', hoja).group(1))
        assert int(serial) == (date(2024, 3, 5) - date(1899, 12, 30)).days

    def test_acta_reunion(self, client, coordinador, datos_acta):
        client.force_login(coordinador)
        response = client.post(
            reverse('informes:acta_reunion_pdf'),
            data=json.dumps(datos_acta),
            content_type='application/json',
        )

        assert response.status_code == 200
        assert response.content.startswith(b'%PDF')

    def test_acta_reunion_sin_fecha(self, client, coordinador):
        client.force_login(coordinador)
        response = client.post(
            reverse('informes:acta_reunion_pdf'),
            data='{}',
            content_type='application/json',
        )
        assert response.status_code == 400

    def test_acta_reunion_con_listas_de_texto(self, client, coordinador):
        client.force_login(coordinador)
        datos = {
            'fecha_reunion': '2024-03-05',
            'asistentes': ['Carmen Quispe', 'Luis Huamán'],
            'ausentes': ['Jorge Flores'],
            'agenda': ['Avance del piloto'],
            'entregables': ['Informe de piloto'],
            'reuniones_programadas': ['Cierre del piloto'],
        }

        response = client.post(
            reverse('informes:acta_reunion_pdf'),
            data=json.dumps(datos),
            content_type='application/json',
        )

        assert response.status_code == 200
        assert response.content.startswith(b'%PDF')

    def test_acta_reunion_lista_invalida(self, client, coordinador):
        client.force_login(coordinador)
        response = client.post(
            reverse('informes:acta_reunion_pdf'),
            data=json.dumps({'fecha_reunion': '2024-03-05', 'requerimientos_funcionales': [{'prioridad': 'Alta'}]}),
            content_type='application/json',
        )
        assert response.status_code == 400
