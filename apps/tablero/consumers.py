# apps/tablero/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from apps.core.models import Actividad
from apps.core.permissions import SigpPermissions

from .controller import KanbanBoardController
from .kanban import FiltrosTarea
from .services import ServicioTableroORM, get_transiciones, get_wip_limits, grupo_tablero

logger = logging.getLogger(__name__)


class TableroConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket del tablero Kanban de una actividad

    Cada conexión tiene su propio KanbanBoardController. Los mensajes del
    cliente se procesan uno a la vez:
    - ping -> pong
    - sync_tablero -> refresh + tablero_sync
    - mover_tarea -> movimiento optimista + movimiento_resultado
    - filtrar -> tablero_sync con las columnas filtradas

    Cuando alguien mueve una tarea, el resto de conexiones recibe
    tarea_movida y recarga su tablero.
    """

    async def connect(self):
        """
        Conecta al grupo del tablero
        Verifica permisos antes de aceptar la conexión
        """
        self.actividad_id = int(self.scope['url_route']['kwargs']['actividad_id'])
        self.grupo = grupo_tablero(self.actividad_id)
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            logger.warning("❌ Conexión WebSocket rechazada - usuario no autenticado")
            await self.close()
            return

        if not await self.check_actividad_access():
            logger.warning(
                f"❌ Conexión WebSocket rechazada - {self.user.username} sin acceso a actividad {self.actividad_id}"
            )
            await self.close()
            return

        self.controller = KanbanBoardController(
            self.actividad_id,
            ServicioTableroORM(usuario=self.user),
            wip_limits=get_wip_limits(),
            transiciones=get_transiciones(),
        )

        await self.channel_layer.group_add(self.grupo, self.channel_name)
        await self.accept()

        await self.controller.refresh()
        await self.enviar_tablero()

        logger.info(f"✅ WebSocket conectado - {self.user.username} en tablero {self.actividad_id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'controller'):
            await self.channel_layer.group_discard(self.grupo, self.channel_name)
            logger.info(f"🔌 WebSocket desconectado - {self.user.username} del tablero {self.actividad_id}")

    async def receive(self, text_data):
        """
        Recibe mensajes del cliente WebSocket
        Un mensaje inválido se responde con 'error' sin cerrar la conexión
        """
        try:
            data = json.loads(text_data)
            message_type = data.get('type')

            # Heartbeat
            if message_type == 'ping':
                await self.send(text_data=json.dumps({
                    'type': 'pong',
                    'intervalo': getattr(settings, 'SIGP_WS_HEARTBEAT_INTERVAL', 30),
                    'timestamp': self.get_timestamp()
                }))

            elif message_type == 'sync_tablero':
                await self.controller.refresh()
                await self.enviar_tablero()

            elif message_type == 'mover_tarea':
                await self.mover_tarea(data.get('tarea_id'), data.get('estado'))

            elif message_type == 'filtrar':
                self.controller.set_filters(FiltrosTarea.desde_dict(data))
                await self.enviar_tablero()

            else:
                await self.enviar_error(f'Tipo de mensaje desconocido: {message_type}')

        except json.JSONDecodeError:
            logger.error(f"❌ JSON inválido recibido vía WebSocket de {self.user.username}")
            await self.enviar_error('JSON inválido')
        except Exception as e:
            logger.exception(f"❌ Error en WebSocket receive: {str(e)}")
            await self.enviar_error('Error interno del tablero')

    async def mover_tarea(self, tarea_id, estado):
        try:
            tarea_id = int(tarea_id)
        except (TypeError, ValueError):
            tarea_id = None

        if tarea_id is None or not estado:
            await self.enviar_error('Parámetros inválidos')
            return

        tarea = self.controller.tablero.buscar_tarea(tarea_id) if self.controller.tablero else None
        estado_anterior = tarea.estado if tarea else None

        resultado = await self.controller.move_task(tarea_id, estado)

        await self.send(text_data=json.dumps({
            'type': 'movimiento_resultado',
            'success': resultado.ok,
            'tarea_id': tarea_id,
            'estado': estado,
            'error': None if resultado.ok else resultado.motivo,
            'tipo_error': None if resultado.ok else resultado.tipo,
        }))
        await self.enviar_tablero()

        if resultado.ok:
            await self.channel_layer.group_send(self.grupo, {
                'type': 'tarea_movida',
                'message': {
                    'tarea_id': tarea_id,
                    'codigo': tarea.codigo,
                    'estado_anterior': estado_anterior,
                    'estado': estado,
                    'usuario': self.user.get_full_name() or self.user.username,
                    'user_id': self.user.id,
                    'canal': self.channel_name,
                    'timestamp': self.get_timestamp(),
                }
            })

    # === Handlers de eventos del grupo ===

    async def tarea_movida(self, event):
        """
        Otra conexión (o la vista HTTP) movió una tarea: recargar y avisar
        """
        message = event['message']
        # La conexión que hizo el movimiento ya tiene su tablero al día
        if message.get('canal') == self.channel_name:
            return

        await self.controller.refresh()
        await self.send(text_data=json.dumps({
            'type': 'tarea_movida',
            'message': message
        }))
        await self.enviar_tablero()

    # === Métodos auxiliares ===

    async def enviar_tablero(self):
        await self.send(text_data=json.dumps({
            'type': 'tablero_sync',
            'tablero': self.controller.snapshot(),
            'timestamp': self.get_timestamp()
        }))

    async def enviar_error(self, mensaje):
        await self.send(text_data=json.dumps({
            'type': 'error',
            'error': mensaje,
            'timestamp': self.get_timestamp()
        }))

    @database_sync_to_async
    def check_actividad_access(self):
        try:
            actividad = Actividad.objects.get(id=self.actividad_id, activo=True)
        except Actividad.DoesNotExist:
            return False
        return SigpPermissions.tiene_acceso_actividad(self.user, actividad)

    def get_timestamp(self):
        return timezone.now().isoformat()
