"""Tableros en memoria y servicio remoto falso para los tests del controlador."""

from apps.tablero.kanban import TareaKanban, construir_tablero


def tarea(id, estado, **kwargs):
    """TareaKanban mínima para armar tableros de prueba."""
    kwargs.setdefault('codigo', f'T-{id:02d}')
    kwargs.setdefault('nombre', f'Tarea {id}')
    return TareaKanban(id=id, estado=estado, **kwargs)


def tablero_con(*tareas, actividad_id=1, wip_limits=None):
    return construir_tablero(actividad_id, tareas, wip_limits)


class ServicioFalso:
    """
    Servicio remoto controlable desde el test

    `en_vuelo` se activa cuando llega un movimiento y `liberar` lo
    retiene hasta que el test decida responder.
    """

    def __init__(self, tablero, error_mover=None, error_carga=None):
        self.tablero = tablero
        self.error_mover = error_mover
        self.error_carga = error_carga
        self.lecturas = 0
        self.movimientos = []
        self.en_vuelo = None
        self.liberar = None

    async def obtener_tablero(self, actividad_id):
        self.lecturas += 1
        if self.error_carga is not None:
            raise self.error_carga
        return self.tablero

    async def mover_tarea(self, tarea_id, nuevo_estado):
        self.movimientos.append((tarea_id, nuevo_estado))
        if self.en_vuelo is not None:
            self.en_vuelo.set()
        if self.liberar is not None:
            await self.liberar.wait()
        if self.error_mover is not None:
            raise self.error_mover
