# config/urls.py

from django.conf import settings
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Aplicaciones
    path('tablero/', include('apps.tablero.urls')),
    path('informes/', include('apps.informes.urls')),
]

# Health checks (solo producción)
if 'health_check' in settings.INSTALLED_APPS:
    urlpatterns += [path('health/', include('health_check.urls'))]

admin.site.site_header = 'SIGP Tablero - Administración'
admin.site.site_title = 'SIGP Tablero'
admin.site.index_title = 'Actividades y tareas'
