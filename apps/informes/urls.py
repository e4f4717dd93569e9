# apps/informes/urls.py

from django.urls import path
from . import views

app_name = 'informes'

urlpatterns = [
    # Informes de actividad
    path('actividad/<int:actividad_id>/pdf/', views.informe_actividad_pdf, name='actividad_pdf'),
    path('actividad/<int:actividad_id>/csv/', views.exportar_tareas_csv, name='actividad_csv'),
    path('actividad/<int:actividad_id>/excel/', views.exportar_tareas_excel, name='actividad_excel'),

    # Actas
    path('acta-reunion/pdf/', views.acta_reunion_pdf, name='acta_reunion_pdf'),
]
