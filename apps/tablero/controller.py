# apps/tablero/controller.py

import logging
from typing import Dict, Mapping, Optional, Tuple

from .kanban import (
    DEFAULT_WIP_LIMITS,
    TRANSICIONES_PERMITIDAS,
    Err,
    FiltrosTarea,
    KanbanColumna,
    Ok,
    Resultado,
    TableroKanban,
    aplicar_movimiento,
    columna_a_dict,
    contar_tareas,
    filtrar_columnas,
    hay_cupo_wip,
    tablero_a_dict,
    transicion_permitida,
    verificar_gargalos_wip,
)

logger = logging.getLogger(__name__)

MENSAJE_ERROR_CARGA = 'Error al cargar el tablero'
MENSAJE_ERROR_MOVER = 'Error al mover la tarea'


class KanbanBoardController:
    """
    Estado del tablero Kanban de una actividad

    Mantiene una copia local del tablero remoto, controla los límites WIP
    y aplica los movimientos de forma optimista. Si el servidor rechaza un
    movimiento, el tablero local se descarta y se vuelve a leer completo.

    Los fallos nunca se lanzan como excepción: cada operación devuelve
    Ok/Err y deja el último mensaje en `error`.
    """

    def __init__(self, actividad_id, servicio, wip_limits: Optional[Mapping[str, Optional[int]]] = None,
                 transiciones: Optional[Mapping] = None):
        self.actividad_id = actividad_id
        self.servicio = servicio
        self.wip_limits: Dict[str, Optional[int]] = dict(
            DEFAULT_WIP_LIMITS if wip_limits is None else wip_limits
        )
        self.transiciones = dict(TRANSICIONES_PERMITIDAS if transiciones is None else transiciones)

        self._tablero: Optional[TableroKanban] = None
        self.cargando = False
        self.error: Optional[str] = None
        self.filtros = FiltrosTarea()

    # === ESTADO ===

    @property
    def tablero(self) -> Optional[TableroKanban]:
        return self._tablero

    @property
    def columnas(self) -> Tuple[KanbanColumna, ...]:
        return self._tablero.columnas if self._tablero else ()

    @property
    def filtered_columnas(self) -> Tuple[KanbanColumna, ...]:
        return filtrar_columnas(self.columnas, self.filtros)

    def set_filters(self, filtros: FiltrosTarea):
        self.filtros = filtros

    def gargalos(self):
        return verificar_gargalos_wip(self._tablero, self.wip_limits)

    # === LECTURA REMOTA ===

    async def refresh(self) -> Resultado:
        """Reemplaza el tablero local por el que devuelve el servidor"""
        self.cargando = True
        self.error = None
        try:
            tablero = await self.servicio.obtener_tablero(self.actividad_id)
        except Exception as e:
            logger.warning(f"⚠️ Error cargando tablero de actividad {self.actividad_id}: {e}")
            self.error = MENSAJE_ERROR_CARGA
            return Err(MENSAJE_ERROR_CARGA, tipo='carga')
        finally:
            self.cargando = False

        self._tablero = tablero
        return Ok(tablero)

    # === WIP ===

    def get_column_count(self, estado: str) -> int:
        return contar_tareas(self._tablero, estado)

    def can_move_to_column(self, estado: str) -> bool:
        return hay_cupo_wip(self._tablero, estado, self.wip_limits)

    # === MOVIMIENTOS ===

    async def move_task(self, tarea_id, nuevo_estado: str) -> Resultado:
        """
        Mueve una tarea a otra columna

        1. Precondiciones (sin mutar nada): tablero cargado, límite WIP,
           tarea existente y transición permitida
        2. Movimiento optimista: un único reemplazo del snapshot
        3. Confirmación remota; si falla, refresh() completo
        """
        rechazo = self._validar_movimiento(tarea_id, nuevo_estado)
        if rechazo is not None:
            self.error = rechazo.motivo
            return rechazo

        self._tablero = aplicar_movimiento(self._tablero, tarea_id, nuevo_estado)

        try:
            await self.servicio.mover_tarea(tarea_id, nuevo_estado)
        except Exception as e:
            motivo = str(e) or MENSAJE_ERROR_MOVER
            logger.warning(f"⚠️ Movimiento de tarea {tarea_id} rechazado: {motivo}")
            await self.refresh()
            self.error = motivo
            return Err(motivo, tipo='remoto')

        logger.debug(f"📋 Tarea {tarea_id} movida a {nuevo_estado}")
        return Ok(self._tablero)

    def _validar_movimiento(self, tarea_id, nuevo_estado: str) -> Optional[Err]:
        if self._tablero is None:
            return Err('El tablero aún no está cargado', tipo='sin_tablero')

        if not self.can_move_to_column(nuevo_estado):
            return Err(f'Limite WIP alcanzado en columna "{nuevo_estado}"', tipo='wip')

        tarea = self._tablero.buscar_tarea(tarea_id)
        if tarea is None:
            return Err(f'Tarea {tarea_id} no encontrada en el tablero', tipo='no_encontrada')

        if not transicion_permitida(tarea.estado, nuevo_estado, self.transiciones):
            return Err(
                f'Transicion no permitida de "{tarea.estado}" a "{nuevo_estado}"',
                tipo='transicion'
            )

        return None

    # === SERIALIZACIÓN PARA EL CLIENTE ===

    def snapshot(self) -> Dict:
        """Estado completo listo para enviarse como JSON"""
        return {
            'actividadId': self.actividad_id,
            'tablero': tablero_a_dict(self._tablero) if self._tablero else None,
            'columnasFiltradas': [columna_a_dict(c) for c in self.filtered_columnas],
            'conteos': {c.id: len(c.tareas) for c in self.columnas},
            'wipLimits': dict(self.wip_limits),
            'gargalos': self.gargalos(),
            'cargando': self.cargando,
            'error': self.error,
        }
