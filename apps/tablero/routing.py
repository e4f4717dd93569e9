# apps/tablero/routing.py

from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # Tablero Kanban de una actividad - actualizaciones en tiempo real
    re_path(r'ws/tablero/(?P<actividad_id>\d+)/$', consumers.TableroConsumer.as_asgi()),
]
