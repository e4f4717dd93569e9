# apps/__init__.py

"""
SIGP Tablero - Aplicaciones Django

Este paquete contiene las aplicaciones del sistema:
- core: Modelos de actividades y tareas, permisos y métricas
- tablero: Tablero Kanban y WebSockets
- informes: Informes PDF y exportación CSV/Excel
"""

__version__ = '0.1.0'
