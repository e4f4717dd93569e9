# apps/tablero/__init__.py

"""
Tablero - Kanban de actividades del SIGP

Funcionalidades:
- Controlador del tablero con límites WIP y movimientos optimistas
- WebSocket por actividad para sincronización en tiempo real
- Endpoints JSON de lectura y movimiento de tareas
"""
