# apps/tablero/kanban.py

"""
Modelo del tablero Kanban en memoria

Snapshots inmutables (dataclasses congeladas con tuplas) y funciones puras
sobre ellos. No depende de Django: el controlador y el consumer WebSocket
trabajan con estos valores y el ORM solo aparece en services.py.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union


POR_HACER = 'Por hacer'
EN_PROGRESO = 'En progreso'
FINALIZADO = 'Finalizado'

ESTADOS_TAREA: Tuple[str, ...] = (POR_HACER, EN_PROGRESO, FINALIZADO)
PRIORIDADES: Tuple[str, ...] = ('Alta', 'Media', 'Baja')

TITULOS_COLUMNA = {
    POR_HACER: 'Por hacer',
    EN_PROGRESO: 'En progreso',
    FINALIZADO: 'Finalizado',
}

# None = sin límite
DEFAULT_WIP_LIMITS: Dict[str, Optional[int]] = {
    POR_HACER: None,
    EN_PROGRESO: 5,
    FINALIZADO: None,
}

# Grafo completo: cualquier columna puede pasar a cualquier otra
TRANSICIONES_PERMITIDAS: Dict[str, FrozenSet[str]] = {
    estado: frozenset(ESTADOS_TAREA) for estado in ESTADOS_TAREA
}


# === SNAPSHOTS ===

@dataclass(frozen=True)
class TareaKanban:
    """Tarea tal como la muestra el tablero"""

    id: int
    codigo: str
    nombre: str
    estado: str
    prioridad: str = 'Media'
    asignado_a: Optional[int] = None
    descripcion: str = ''
    horas_estimadas: Optional[float] = None
    subtareas_count: int = 0
    subtareas_completadas: int = 0


@dataclass(frozen=True)
class KanbanColumna:
    """Columna del tablero, identificada por el estado de sus tareas"""

    id: str
    titulo: str
    tareas: Tuple[TareaKanban, ...] = ()
    limite: Optional[int] = None

    def __len__(self):
        return len(self.tareas)


@dataclass(frozen=True)
class TableroKanban:
    actividad_id: int
    columnas: Tuple[KanbanColumna, ...]
    metricas: Mapping[str, object] = field(default_factory=dict)

    def columna(self, estado: str) -> Optional[KanbanColumna]:
        for columna in self.columnas:
            if columna.id == estado:
                return columna
        return None

    def buscar_tarea(self, tarea_id) -> Optional[TareaKanban]:
        for columna in self.columnas:
            for tarea in columna.tareas:
                if tarea.id == tarea_id:
                    return tarea
        return None

    def todas_las_tareas(self) -> List[TareaKanban]:
        return [tarea for columna in self.columnas for tarea in columna.tareas]


# === RESULTADOS ===

@dataclass(frozen=True)
class Ok:
    """Operación aceptada"""

    tablero: Optional[TableroKanban] = None

    @property
    def ok(self):
        return True


@dataclass(frozen=True)
class Err:
    """
    Operación rechazada

    tipo distingue el origen del fallo:
    'wip', 'transicion', 'no_encontrada', 'sin_tablero' (precondiciones,
    sin mutación local), 'remoto' (el servidor rechazó un movimiento ya
    aplicado) y 'carga' (falló la lectura del tablero).
    """

    motivo: str
    tipo: str = 'remoto'

    @property
    def ok(self):
        return False


Resultado = Union[Ok, Err]


# === FILTROS ===

def _como_bool(valor) -> Optional[bool]:
    """true/false del cliente (bool o texto); cualquier otro valor desactiva el filtro"""
    if isinstance(valor, bool):
        return valor
    if isinstance(valor, str):
        return {'true': True, 'false': False}.get(valor.strip().lower())
    return None


@dataclass(frozen=True)
class FiltrosTarea:
    busqueda: str = ''
    prioridad: str = 'todas'
    asignado_a: Union[str, int] = 'todos'
    con_subtareas: Optional[bool] = None

    @classmethod
    def desde_dict(cls, datos: Mapping) -> 'FiltrosTarea':
        """Construye filtros a partir de un mensaje del cliente"""
        asignado = datos.get('asignado_a', 'todos')
        if asignado not in (None, '', 'todos'):
            try:
                asignado = int(asignado)
            except (TypeError, ValueError):
                asignado = 'todos'
        else:
            asignado = 'todos'

        return cls(
            busqueda=(datos.get('busqueda') or '').strip(),
            prioridad=datos.get('prioridad') or 'todas',
            asignado_a=asignado,
            con_subtareas=_como_bool(datos.get('con_subtareas')),
        )

    def acepta(self, tarea: TareaKanban) -> bool:
        if self.busqueda:
            texto = self.busqueda.lower()
            if texto not in tarea.nombre.lower() and texto not in tarea.codigo.lower():
                return False

        if self.prioridad != 'todas' and tarea.prioridad != self.prioridad:
            return False

        if self.asignado_a != 'todos' and tarea.asignado_a != self.asignado_a:
            return False

        if self.con_subtareas is not None and (tarea.subtareas_count > 0) != self.con_subtareas:
            return False

        return True


def filtrar_columnas(columnas: Iterable[KanbanColumna], filtros: FiltrosTarea) -> Tuple[KanbanColumna, ...]:
    """Proyección de solo lectura: las columnas originales no se tocan"""
    return tuple(
        replace(columna, tareas=tuple(t for t in columna.tareas if filtros.acepta(t)))
        for columna in columnas
    )


# === MOVIMIENTOS ===

def contar_tareas(tablero: Optional[TableroKanban], estado: str) -> int:
    if tablero is None:
        return 0
    columna = tablero.columna(estado)
    return len(columna.tareas) if columna else 0


def hay_cupo_wip(tablero: Optional[TableroKanban], estado: str, wip_limits: Mapping[str, Optional[int]]) -> bool:
    """True si la columna no tiene límite o aún no lo alcanza"""
    limite = wip_limits.get(estado)
    if limite is None:
        return True
    return contar_tareas(tablero, estado) < limite


def transicion_permitida(origen: str, destino: str, transiciones: Mapping[str, Iterable[str]]) -> bool:
    return destino in transiciones.get(origen, ())


def aplicar_movimiento(tablero: TableroKanban, tarea_id, nuevo_estado: str) -> TableroKanban:
    """
    Mueve la tarea a la columna `nuevo_estado` y devuelve un tablero nuevo

    La tarea se quita de la columna donde esté y se agrega al final del
    destino con su estado actualizado. Si no existe, el tablero se
    devuelve sin cambios.
    """
    tarea = tablero.buscar_tarea(tarea_id)
    if tarea is None:
        return tablero

    movida = replace(tarea, estado=nuevo_estado)
    columnas = []
    for columna in tablero.columnas:
        tareas = tuple(t for t in columna.tareas if t.id != tarea_id)
        if columna.id == nuevo_estado:
            tareas = tareas + (movida,)
        columnas.append(replace(columna, tareas=tareas))

    return replace(tablero, columnas=tuple(columnas))


def verificar_gargalos_wip(tablero: Optional[TableroKanban], wip_limits: Mapping[str, Optional[int]]) -> List[Dict]:
    """
    Identifica columnas en el límite WIP o cerca de él
    """
    gargalos = []
    if tablero is None:
        return gargalos

    for columna in tablero.columnas:
        limite = wip_limits.get(columna.id)
        if not limite:
            continue

        total = len(columna.tareas)
        porcentaje = (total / limite) * 100

        if porcentaje >= 80:  # 80% o más ya se considera cuello de botella
            gargalos.append({
                'columna': columna.id,
                'tareas': total,
                'limite': limite,
                'porcentaje': round(porcentaje, 1),
                'estado': 'critico' if porcentaje >= 100 else 'alerta',
            })

    return gargalos


# === (DE)SERIALIZACIÓN ===

def tarea_desde_dict(datos: Mapping) -> TareaKanban:
    horas = datos.get('horasEstimadas')
    return TareaKanban(
        id=datos['id'],
        codigo=datos.get('codigo', ''),
        nombre=datos.get('nombre', ''),
        estado=datos['estado'],
        prioridad=datos.get('prioridad', 'Media'),
        asignado_a=datos.get('asignadoA'),
        descripcion=datos.get('descripcion') or '',
        horas_estimadas=float(horas) if horas is not None else None,
        subtareas_count=datos.get('subtareasCount', 0),
        subtareas_completadas=datos.get('subtareasCompletadas', 0),
    )


def tarea_a_dict(tarea: TareaKanban) -> Dict:
    return {
        'id': tarea.id,
        'codigo': tarea.codigo,
        'nombre': tarea.nombre,
        'descripcion': tarea.descripcion,
        'estado': tarea.estado,
        'prioridad': tarea.prioridad,
        'asignadoA': tarea.asignado_a,
        'horasEstimadas': tarea.horas_estimadas,
        'subtareasCount': tarea.subtareas_count,
        'subtareasCompletadas': tarea.subtareas_completadas,
    }


def construir_tablero(actividad_id, tareas: Iterable[TareaKanban],
                      wip_limits: Optional[Mapping[str, Optional[int]]] = None,
                      metricas: Optional[Mapping] = None) -> TableroKanban:
    """
    Agrupa las tareas en una columna por estado, en el orden recibido

    Las columnas cubren siempre todos los estados aunque estén vacías.
    Una tarea con estado desconocido es un error de datos.
    """
    wip_limits = DEFAULT_WIP_LIMITS if wip_limits is None else wip_limits
    por_estado: Dict[str, List[TareaKanban]] = {estado: [] for estado in ESTADOS_TAREA}

    for tarea in tareas:
        if tarea.estado not in por_estado:
            raise ValueError(f'Estado de tarea desconocido: {tarea.estado!r}')
        por_estado[tarea.estado].append(tarea)

    columnas = tuple(
        KanbanColumna(
            id=estado,
            titulo=TITULOS_COLUMNA[estado],
            tareas=tuple(por_estado[estado]),
            limite=wip_limits.get(estado),
        )
        for estado in ESTADOS_TAREA
    )
    return TableroKanban(actividad_id=actividad_id, columnas=columnas, metricas=dict(metricas or {}))


def tablero_desde_dict(datos: Mapping, wip_limits: Optional[Mapping[str, Optional[int]]] = None) -> TableroKanban:
    """
    Reconstruye un tablero a partir de su forma JSON

    Las tareas se reubican según su campo estado, de modo que una tarea
    nunca queda en una columna que no le corresponde.
    """
    tareas = [
        tarea_desde_dict(t)
        for columna in datos.get('columnas', [])
        for t in columna.get('tareas', [])
    ]
    return construir_tablero(datos['actividadId'], tareas, wip_limits, datos.get('metricas'))


def tablero_a_dict(tablero: TableroKanban) -> Dict:
    return {
        'actividadId': tablero.actividad_id,
        'columnas': [columna_a_dict(c) for c in tablero.columnas],
        'metricas': dict(tablero.metricas),
    }


def columna_a_dict(columna: KanbanColumna) -> Dict:
    return {
        'id': columna.id,
        'titulo': columna.titulo,
        'tareas': [tarea_a_dict(t) for t in columna.tareas],
        'limite': columna.limite,
    }
