"""Tests for apps.tablero.services, las vistas JSON del tablero y las señales de tareas."""

import json

import pytest
from django.urls import reverse

from apps.core.models import Subtarea, Tarea
from apps.tablero.services import (
    ErrorServicioTablero,
    get_transiciones,
    get_wip_limits,
    leer_tablero,
    mover_tarea_en_bd,
)

pytestmark = pytest.mark.django_db


class TestConfiguracion:

    def test_wip_limits_desde_settings(self, settings):
        settings.SIGP_KANBAN_WIP_LIMITS = {'En progreso': 2}
        limites = get_wip_limits()
        assert limites['En progreso'] == 2
        assert limites['Por hacer'] is None

    def test_transiciones_vacias_usan_grafo_completo(self, settings):
        settings.SIGP_KANBAN_TRANSICIONES = {}
        assert get_transiciones()['Finalizado'] == frozenset({'Por hacer', 'En progreso', 'Finalizado'})


class TestLeerTablero:
    """Armado del tablero desde la base de datos."""

    def test_columnas_y_subtareas(self, actividad, crear_tarea):
        t1 = crear_tarea('Por hacer')
        t2 = crear_tarea('En progreso')
        Subtarea.objects.create(tarea=t2, codigo='S-1', nombre='Revisión', estado='Finalizado')
        Subtarea.objects.create(tarea=t2, codigo='S-2', nombre='Ajustes')

        tablero = leer_tablero(actividad.id)

        assert [t.id for t in tablero.columna('Por hacer').tareas] == [t1.id]
        en_progreso = tablero.columna('En progreso').tareas[0]
        assert en_progreso.subtareas_count == 2
        assert en_progreso.subtareas_completadas == 1
        assert tablero.metricas['totalTareas'] == 2

    def test_ignora_tareas_inactivas(self, actividad, crear_tarea):
        crear_tarea('Por hacer', activo=False)
        tablero = leer_tablero(actividad.id)
        assert tablero.todas_las_tareas() == []

    def test_actividad_inexistente(self):
        with pytest.raises(ErrorServicioTablero) as excinfo:
            leer_tablero(9999)
        assert excinfo.value.status == 404


class TestMoverTareaEnBd:
    """Persistencia y revalidación de movimientos."""

    def test_mueve_al_final_de_la_columna(self, crear_tarea, coordinador):
        crear_tarea('En progreso', orden=10)
        tarea = crear_tarea('Por hacer')

        guardada, anterior = mover_tarea_en_bd(tarea.id, 'En progreso', usuario=coordinador)

        assert anterior == 'Por hacer'
        assert guardada.estado == 'En progreso'
        assert guardada.orden == 11
        assert Tarea.objects.get(id=tarea.id).estado == 'En progreso'

    def test_orden_explicito(self, crear_tarea):
        tarea = crear_tarea('Por hacer')
        guardada, _ = mover_tarea_en_bd(tarea.id, 'Finalizado', orden=3)
        assert guardada.orden == 3

    def test_limite_wip_del_servidor(self, crear_tarea):
        crear_tarea('En progreso')
        tarea = crear_tarea('Por hacer')

        with pytest.raises(ErrorServicioTablero) as excinfo:
            mover_tarea_en_bd(tarea.id, 'En progreso', wip_limits={'En progreso': 1})

        assert excinfo.value.status == 409
        assert Tarea.objects.get(id=tarea.id).estado == 'Por hacer'

    def test_reordenar_dentro_de_columna_llena(self, crear_tarea):
        """Mover dentro de la misma columna no cuenta contra el límite."""
        tarea = crear_tarea('En progreso')
        guardada, _ = mover_tarea_en_bd(tarea.id, 'En progreso', orden=0, wip_limits={'En progreso': 1})
        assert guardada.orden == 0

    def test_estado_invalido(self, crear_tarea):
        tarea = crear_tarea()
        with pytest.raises(ErrorServicioTablero) as excinfo:
            mover_tarea_en_bd(tarea.id, 'Archivada')
        assert excinfo.value.status == 400

    def test_tarea_inexistente(self):
        with pytest.raises(ErrorServicioTablero) as excinfo:
            mover_tarea_en_bd(9999, 'Finalizado')
        assert excinfo.value.status == 404

    def test_colaborador_no_mueve_tareas_ajenas(self, crear_tarea, colaborador, coordinador):
        ajena = crear_tarea(asignado_a=coordinador)
        propia = crear_tarea(asignado_a=colaborador)

        with pytest.raises(ErrorServicioTablero) as excinfo:
            mover_tarea_en_bd(ajena.id, 'En progreso', usuario=colaborador)
        assert excinfo.value.status == 403

        guardada, _ = mover_tarea_en_bd(propia.id, 'En progreso', usuario=colaborador)
        assert guardada.estado == 'En progreso'

    def test_transicion_restringida(self, crear_tarea):
        tarea = crear_tarea('Por hacer')
        transiciones = {'Por hacer': frozenset({'En progreso'})}

        with pytest.raises(ErrorServicioTablero) as excinfo:
            mover_tarea_en_bd(tarea.id, 'Finalizado', transiciones=transiciones)
        assert excinfo.value.status == 409


class TestFechasDeFlujo:
    """Señal pre_save que registra inicio y fin del trabajo."""

    def test_inicio_y_completado(self, crear_tarea):
        tarea = crear_tarea('Por hacer')
        assert tarea.fecha_inicio_progreso is None

        tarea, _ = mover_tarea_en_bd(tarea.id, 'En progreso')
        inicio = tarea.fecha_inicio_progreso
        assert inicio is not None

        tarea, _ = mover_tarea_en_bd(tarea.id, 'Finalizado')
        assert tarea.fecha_completado is not None
        assert tarea.fecha_inicio_progreso == inicio
        assert tarea.cycle_time_dias() is not None

    def test_reabrir_limpia_fecha_completado(self, crear_tarea):
        tarea = crear_tarea('Finalizado')
        assert tarea.fecha_completado is not None

        tarea, _ = mover_tarea_en_bd(tarea.id, 'En progreso')
        assert tarea.fecha_completado is None


class TestVistasTablero:
    """Endpoints JSON del tablero."""

    def test_tablero_actividad(self, client, coordinador, actividad, crear_tarea):
        crear_tarea('Por hacer')
        client.force_login(coordinador)

        response = client.get(reverse('tablero:tablero', args=[actividad.id]))

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert [c['id'] for c in data['tablero']['columnas']] == ['Por hacer', 'En progreso', 'Finalizado']

    def test_tablero_sin_acceso(self, client, externo, actividad):
        client.force_login(externo)
        response = client.get(reverse('tablero:tablero', args=[actividad.id]))
        assert response.status_code == 403

    def test_tablero_requiere_login(self, client, actividad):
        response = client.get(reverse('tablero:tablero', args=[actividad.id]))
        assert response.status_code == 302

    def test_mover_tarea(self, client, coordinador, crear_tarea):
        tarea = crear_tarea('Por hacer')
        client.force_login(coordinador)

        response = client.patch(
            reverse('tablero:mover_tarea', args=[tarea.id]),
            data=json.dumps({'estado': 'En progreso'}),
            content_type='application/json',
        )

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['tarea']['estado'] == 'En progreso'

    def test_mover_tarea_wip_excedido(self, client, coordinador, crear_tarea, settings):
        settings.SIGP_KANBAN_WIP_LIMITS = {'En progreso': 1}
        crear_tarea('En progreso')
        tarea = crear_tarea('Por hacer')
        client.force_login(coordinador)

        response = client.post(
            reverse('tablero:mover_tarea', args=[tarea.id]),
            data=json.dumps({'estado': 'En progreso'}),
            content_type='application/json',
        )

        assert response.status_code == 409
        assert 'limite WIP' in response.json()['error']

    def test_mover_tarea_json_invalido(self, client, coordinador, crear_tarea):
        tarea = crear_tarea()
        client.force_login(coordinador)

        response = client.post(
            reverse('tablero:mover_tarea', args=[tarea.id]),
            data='{no es json',
            content_type='application/json',
        )
        assert response.status_code == 400
