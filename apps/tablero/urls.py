# apps/tablero/urls.py

from django.urls import path
from . import views

app_name = 'tablero'

urlpatterns = [
    # Lectura del tablero
    path('actividades/<int:actividad_id>/tablero/', views.tablero_actividad, name='tablero'),

    # Movimiento de tareas entre columnas
    path('tareas/<int:tarea_id>/mover/', views.mover_tarea, name='mover_tarea'),
]
