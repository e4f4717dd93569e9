# apps/informes/__init__.py

"""
Informes - PDF y exportaciones del SIGP

- Informe de actividad (métricas Kanban)
- Acta de reunión
- Exportación de tareas a CSV y Excel
"""
