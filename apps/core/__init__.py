# apps/core/__init__.py

"""
Core - Modelo de datos del SIGP

Contiene:
- Models (Usuario, Actividad, Tarea, Subtarea)
- Permisos por rol y decoradores de acceso
- Métricas Kanban (lead time, cycle time, throughput)
- Comando seed para desarrollo
"""
