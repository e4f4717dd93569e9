# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from apps.tablero.services import get_wip_limits

from .models import ESTADO_EN_PROGRESO, ESTADO_FINALIZADO, Actividad, Subtarea, Tarea, Usuario


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Admin personalizado para el modelo Usuario"""

    list_display = [
        'username', 'email', 'get_full_name', 'tipo_badge',
        'is_active', 'date_joined'
    ]
    list_filter = ['tipo', 'is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Información adicional', {
            'fields': ('tipo', 'telefono')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Información adicional', {
            'fields': ('tipo', 'telefono')
        }),
    )

    def tipo_badge(self, obj):
        """Rol del usuario con badge de color"""
        colores = {
            'admin': '#EF4444',  # rojo
            'coordinador': '#F59E0B',  # ámbar
            'gestor': '#8B5CF6',  # violeta
            'colaborador': '#3B82F6'  # azul
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            colores.get(obj.tipo, '#6B7280'), obj.get_tipo_display()
        )

    tipo_badge.short_description = 'Tipo'


class TareaInline(admin.TabularInline):
    model = Tarea
    extra = 0
    fields = ['codigo', 'nombre', 'estado', 'prioridad', 'asignado_a', 'orden']
    ordering = ['estado', 'orden']
    show_change_link = True


@admin.register(Actividad)
class ActividadAdmin(admin.ModelAdmin):
    """Admin de actividades con indicador WIP del tablero"""

    list_display = [
        'codigo', 'nombre', 'estado', 'coordinador', 'gestor',
        'miembros_count', 'wip_en_progreso', 'progreso', 'activo'
    ]
    list_filter = ['estado', 'activo', 'creado_en']
    search_fields = ['codigo', 'nombre', 'descripcion']
    filter_horizontal = ['miembros']
    readonly_fields = ['creado_en', 'actualizado_en']

    fieldsets = (
        ('Información básica', {
            'fields': ('codigo', 'nombre', 'descripcion', 'estado', 'activo')
        }),
        ('Equipo', {
            'fields': ('coordinador', 'gestor', 'miembros')
        }),
        ('Fechas', {
            'fields': ('fecha_inicio', 'fecha_fin', 'creado_en', 'actualizado_en'),
            'classes': ('collapse',)
        })
    )

    inlines = [TareaInline]

    def miembros_count(self, obj):
        return obj.miembros.count()

    miembros_count.short_description = 'Miembros'

    def wip_en_progreso(self, obj):
        """Tareas en progreso frente al límite WIP configurado"""
        total = obj.tareas_activas().filter(estado=ESTADO_EN_PROGRESO).count()
        limite = get_wip_limits().get(ESTADO_EN_PROGRESO)

        if limite and total >= limite:
            return format_html(
                '<span style="color: red; font-weight: bold;">{}/{}</span>',
                total, limite
            )
        elif limite:
            return f"{total}/{limite}"
        return total

    wip_en_progreso.short_description = 'WIP'

    def progreso(self, obj):
        tareas = obj.tareas_activas()
        total = tareas.count()
        if not total:
            return '-'
        completadas = tareas.filter(estado=ESTADO_FINALIZADO).count()
        return f"{round(completadas / total * 100)}%"

    progreso.short_description = 'Progreso'


class SubtareaInline(admin.TabularInline):
    model = Subtarea
    extra = 0
    fields = ['codigo', 'nombre', 'estado', 'responsable', 'horas_estimadas']


@admin.register(Tarea)
class TareaAdmin(admin.ModelAdmin):
    """Admin de tareas del tablero"""

    list_display = [
        'codigo', 'nombre', 'actividad', 'estado_badge', 'prioridad_badge',
        'asignado_a', 'horas_estimadas', 'orden'
    ]
    list_filter = ['estado', 'prioridad', 'actividad', 'activo']
    search_fields = ['codigo', 'nombre', 'descripcion', 'actividad__nombre']
    date_hierarchy = 'creado_en'

    readonly_fields = [
        'fecha_inicio_progreso', 'fecha_completado',
        'creado_por', 'creado_en', 'actualizado_en'
    ]

    fieldsets = (
        ('Información básica', {
            'fields': (
                'actividad', 'codigo', 'nombre', 'descripcion',
                'estado', 'prioridad', 'asignado_a', 'activo'
            )
        }),
        ('Esfuerzo', {
            'fields': ('horas_estimadas', 'horas_reales')
        }),
        ('Metadatos', {
            'fields': (
                'orden', 'fecha_inicio_progreso', 'fecha_completado',
                'creado_por', 'creado_en', 'actualizado_en'
            ),
            'classes': ('collapse',)
        })
    )

    inlines = [SubtareaInline]

    def save_model(self, request, obj, form, change):
        if not change and not obj.creado_por_id:
            obj.creado_por = request.user
        super().save_model(request, obj, form, change)

    def estado_badge(self, obj):
        colores = {
            'Por hacer': '#6B7280',
            'En progreso': '#3B82F6',
            'Finalizado': '#10B981',
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            colores.get(obj.estado, '#6B7280'), obj.estado
        )

    estado_badge.short_description = 'Estado'

    def prioridad_badge(self, obj):
        iconos = {
            'Baja': '🟢',
            'Media': '🟡',
            'Alta': '🔴'
        }
        return f"{iconos.get(obj.prioridad, '')} {obj.get_prioridad_display()}"

    prioridad_badge.short_description = 'Prioridad'


@admin.register(Subtarea)
class SubtareaAdmin(admin.ModelAdmin):
    list_display = ['codigo', 'nombre', 'tarea', 'estado', 'responsable']
    list_filter = ['estado', 'prioridad']
    search_fields = ['codigo', 'nombre', 'tarea__nombre']
