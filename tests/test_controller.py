"""Tests for apps.tablero.controller.KanbanBoardController."""

import asyncio

from apps.tablero.controller import MENSAJE_ERROR_CARGA, KanbanBoardController
from apps.tablero.kanban import FiltrosTarea, Ok

from .helpers import ServicioFalso, tablero_con, tarea


def controlador_cargado(tablero, **kwargs):
    servicio = ServicioFalso(tablero, error_mover=kwargs.pop('error_mover', None))
    controller = KanbanBoardController(tablero.actividad_id, servicio, **kwargs)
    asyncio.run(controller.refresh())
    return controller, servicio


class TestRefresh:
    """Lectura del tablero remoto."""

    def test_refresh_reemplaza_el_tablero(self):
        remoto = tablero_con(tarea(1, 'Por hacer'))
        servicio = ServicioFalso(remoto)
        controller = KanbanBoardController(1, servicio)

        resultado = asyncio.run(controller.refresh())

        assert isinstance(resultado, Ok)
        assert controller.tablero == remoto
        assert controller.cargando is False
        assert controller.error is None

    def test_refresh_dos_veces_deja_el_mismo_estado(self):
        """Sin cambios remotos, un segundo refresh no altera nada."""
        controller, servicio = controlador_cargado(tablero_con(tarea(1, 'Finalizado')))
        antes = controller.snapshot()

        asyncio.run(controller.refresh())

        assert controller.snapshot() == antes
        assert servicio.lecturas == 2

    def test_refresh_fallido_conserva_el_tablero_anterior(self):
        remoto = tablero_con(tarea(1, 'Por hacer'))
        controller, servicio = controlador_cargado(remoto)
        servicio.error_carga = ConnectionError('sin red')

        resultado = asyncio.run(controller.refresh())

        assert not resultado.ok
        assert resultado.tipo == 'carga'
        assert controller.error == MENSAJE_ERROR_CARGA
        assert controller.tablero == remoto
        assert controller.cargando is False

    def test_cargando_mientras_espera_al_servidor(self):
        servicio = ServicioFalso(tablero_con())
        controller = KanbanBoardController(1, servicio)
        observado = []

        original = servicio.obtener_tablero

        async def obtener_tablero(actividad_id):
            observado.append(controller.cargando)
            return await original(actividad_id)

        servicio.obtener_tablero = obtener_tablero
        asyncio.run(controller.refresh())

        assert observado == [True]
        assert controller.cargando is False


class TestLimiteWip:
    """Rechazo local por límite WIP."""

    def test_columna_llena_rechaza_sin_tocar_el_tablero(self):
        """Con 5 tareas en progreso y límite 5, mover la 42 falla."""
        remoto = tablero_con(
            *[tarea(i, 'En progreso') for i in range(1, 6)],
            tarea(42, 'Por hacer'),
        )
        controller, servicio = controlador_cargado(remoto, wip_limits={'En progreso': 5})

        assert controller.get_column_count('En progreso') == 5
        assert not controller.can_move_to_column('En progreso')

        resultado = asyncio.run(controller.move_task(42, 'En progreso'))

        assert not resultado.ok
        assert resultado.tipo == 'wip'
        assert 'En progreso' in resultado.motivo
        assert controller.error == resultado.motivo
        assert controller.get_column_count('En progreso') == 5
        assert controller.tablero == remoto
        assert servicio.movimientos == []

    def test_columna_sin_limite_siempre_acepta(self):
        remoto = tablero_con(*[tarea(i, 'Finalizado') for i in range(1, 30)], tarea(99, 'Por hacer'))
        controller, _ = controlador_cargado(remoto)

        assert controller.can_move_to_column('Finalizado')
        assert asyncio.run(controller.move_task(99, 'Finalizado')).ok


class TestMoveTask:
    """Movimiento optimista y reversión."""

    def test_movimiento_aceptado(self):
        remoto = tablero_con(tarea(1, 'Por hacer'), tarea(2, 'En progreso'))
        controller, servicio = controlador_cargado(remoto)

        resultado = asyncio.run(controller.move_task(1, 'En progreso'))

        assert resultado.ok
        assert servicio.movimientos == [(1, 'En progreso')]
        assert [t.id for t in controller.tablero.columna('En progreso').tareas] == [2, 1]
        assert controller.tablero.buscar_tarea(1).estado == 'En progreso'
        assert controller.error is None

    def test_rechazo_remoto_revierte_con_refresh(self):
        """
        El movimiento se ve de inmediato (3 en 'Por hacer') y, cuando el
        servidor lo rechaza, el tablero pasa a ser el que el servidor tiene
        en ese momento: otro usuario ya llevó la tarea 3 a 'Finalizado'.
        """
        remoto = tablero_con(tarea(1, 'Por hacer'), tarea(2, 'Por hacer'), tarea(3, 'En progreso'))
        controller, servicio = controlador_cargado(
            remoto, error_mover=RuntimeError('La tarea fue modificada por otro usuario')
        )
        actual = tablero_con(tarea(1, 'Por hacer'), tarea(2, 'Por hacer'), tarea(3, 'Finalizado'))

        async def escenario():
            servicio.en_vuelo = asyncio.Event()
            servicio.liberar = asyncio.Event()
            movimiento = asyncio.ensure_future(controller.move_task(3, 'Por hacer'))

            await servicio.en_vuelo.wait()
            optimista = controller.get_column_count('Por hacer')
            servicio.tablero = actual
            servicio.liberar.set()

            return optimista, await movimiento

        optimista, resultado = asyncio.run(escenario())

        assert optimista == 3
        assert not resultado.ok
        assert resultado.tipo == 'remoto'
        assert resultado.motivo == 'La tarea fue modificada por otro usuario'
        assert controller.error == resultado.motivo
        assert controller.tablero == actual
        assert controller.tablero.buscar_tarea(3).estado == 'Finalizado'
        assert controller.get_column_count('Por hacer') == 2
        assert controller.get_column_count('En progreso') == 0
        assert servicio.lecturas == 2

    def test_rechazo_remoto_sin_mensaje(self):
        controller, _ = controlador_cargado(
            tablero_con(tarea(1, 'Por hacer')), error_mover=RuntimeError()
        )
        resultado = asyncio.run(controller.move_task(1, 'Finalizado'))
        assert resultado.motivo == 'Error al mover la tarea'

    def test_tarea_inexistente(self):
        controller, servicio = controlador_cargado(tablero_con(tarea(1, 'Por hacer')))

        resultado = asyncio.run(controller.move_task(77, 'Finalizado'))

        assert resultado.tipo == 'no_encontrada'
        assert servicio.movimientos == []

    def test_sin_tablero_cargado(self):
        servicio = ServicioFalso(tablero_con())
        controller = KanbanBoardController(1, servicio)

        resultado = asyncio.run(controller.move_task(1, 'Finalizado'))

        assert resultado.tipo == 'sin_tablero'
        assert servicio.movimientos == []

    def test_transicion_no_permitida(self):
        transiciones = {'Por hacer': {'En progreso'}, 'En progreso': {'Finalizado'}, 'Finalizado': set()}
        remoto = tablero_con(tarea(1, 'Por hacer'))
        controller, servicio = controlador_cargado(remoto, transiciones=transiciones)

        resultado = asyncio.run(controller.move_task(1, 'Finalizado'))

        assert resultado.tipo == 'transicion'
        assert controller.tablero == remoto
        assert servicio.movimientos == []

    def test_error_previo_se_limpia_al_recargar(self):
        remoto = tablero_con(tarea(1, 'Por hacer'))
        controller, _ = controlador_cargado(remoto)
        asyncio.run(controller.move_task(99, 'Finalizado'))
        assert controller.error

        asyncio.run(controller.refresh())
        assert controller.error is None


class TestSnapshot:
    """Estado serializado para el cliente."""

    def test_snapshot_con_filtros(self):
        remoto = tablero_con(
            tarea(1, 'Por hacer', prioridad='Alta'),
            tarea(2, 'Por hacer', prioridad='Baja'),
            *[tarea(i, 'En progreso') for i in range(3, 8)],
        )
        controller, _ = controlador_cargado(remoto, wip_limits={'En progreso': 5})
        controller.set_filters(FiltrosTarea(prioridad='Alta'))

        snapshot = controller.snapshot()

        assert snapshot['conteos'] == {'Por hacer': 2, 'En progreso': 5, 'Finalizado': 0}
        filtradas = {c['id']: c['tareas'] for c in snapshot['columnasFiltradas']}
        assert [t['id'] for t in filtradas['Por hacer']] == [1]
        assert filtradas['En progreso'] == []
        assert snapshot['gargalos'][0]['columna'] == 'En progreso'
        assert snapshot['gargalos'][0]['estado'] == 'critico'
        assert len(snapshot['tablero']['columnas'][0]['tareas']) == 2

    def test_snapshot_sin_tablero(self):
        controller = KanbanBoardController(1, ServicioFalso(tablero_con()))
        snapshot = controller.snapshot()
        assert snapshot['tablero'] is None
        assert snapshot['columnasFiltradas'] == []
        assert snapshot['gargalos'] == []
