# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


ESTADO_POR_HACER = 'Por hacer'
ESTADO_EN_PROGRESO = 'En progreso'
ESTADO_FINALIZADO = 'Finalizado'

ESTADO_TAREA_CHOICES = [
    (ESTADO_POR_HACER, 'Por hacer'),
    (ESTADO_EN_PROGRESO, 'En progreso'),
    (ESTADO_FINALIZADO, 'Finalizado'),
]

PRIORIDAD_CHOICES = [
    ('Alta', '🔴 Alta'),
    ('Media', '🟡 Media'),
    ('Baja', '🟢 Baja'),
]


class Usuario(AbstractUser):
    """
    Usuario del sistema con rol dentro de la oficina de proyectos

    El rol decide qué actividades puede ver y si puede mover tareas
    de otros miembros.
    """

    TIPO_CHOICES = [
        ('admin', 'Administrador'),
        ('coordinador', 'Coordinador'),
        ('gestor', 'Gestor'),
        ('colaborador', 'Colaborador'),
    ]

    # === DATOS PERSONALES ===
    telefono = models.CharField(max_length=20, blank=True)
    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES, default='colaborador')

    # === METADATOS ===
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'usuario'
        indexes = [
            models.Index(fields=['tipo'], name='usuario_tipo_idx'),
        ]

    def puede_acceder_actividad(self, actividad):
        """
        Verifica si el usuario puede acceder a una actividad

        1. Administradores acceden a todo
        2. Coordinador y gestor de la actividad
        3. Miembros del equipo
        """
        if self.tipo == 'admin' or self.is_superuser:
            return True

        if self.id in (actividad.coordinador_id, actividad.gestor_id):
            return True

        return actividad.miembros.filter(id=self.id).exists()

    def get_actividades_accesibles(self):
        """Actividades visibles para el usuario según su rol"""
        if self.tipo == 'admin' or self.is_superuser:
            return Actividad.objects.filter(activo=True)

        return Actividad.objects.filter(
            models.Q(miembros=self) | models.Q(coordinador=self) | models.Q(gestor=self),
            activo=True
        ).distinct()

    def __str__(self):
        nombre_completo = self.get_full_name()
        return nombre_completo or self.username


class Actividad(models.Model):
    """Actividad del portafolio - agrupa las tareas de un tablero Kanban"""

    ESTADO_CHOICES = [
        ('Pendiente', 'Pendiente'),
        ('En ejecucion', 'En ejecución'),
        ('Finalizado', 'Finalizado'),
        ('Suspendido', 'Suspendido'),
    ]

    codigo = models.CharField(max_length=30, unique=True)
    nombre = models.CharField(max_length=200)
    descripcion = models.TextField(blank=True)
    estado = models.CharField(max_length=20, choices=ESTADO_CHOICES, default='Pendiente')
    coordinador = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='actividades_coordinadas'
    )
    gestor = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='actividades_gestionadas'
    )
    miembros = models.ManyToManyField(
        Usuario,
        blank=True,
        related_name='actividades_miembro'
    )
    fecha_inicio = models.DateField(null=True, blank=True)
    fecha_fin = models.DateField(null=True, blank=True)
    activo = models.BooleanField(default=True)
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'actividad'
        ordering = ['-creado_en']
        verbose_name_plural = 'actividades'

    def __str__(self):
        return f"{self.codigo} - {self.nombre}"

    def tareas_activas(self):
        return self.tareas.filter(activo=True)


class Tarea(models.Model):
    """
    Tarea Kanban de una actividad

    La columna del tablero es el propio estado de la tarea; el orden
    dentro de la columna lo define `orden`.
    """

    actividad = models.ForeignKey(
        Actividad,
        on_delete=models.CASCADE,
        related_name='tareas'
    )
    codigo = models.CharField(max_length=30)
    nombre = models.CharField(max_length=200)
    descripcion = models.TextField(blank=True)
    estado = models.CharField(
        max_length=20,
        choices=ESTADO_TAREA_CHOICES,
        default=ESTADO_POR_HACER,
        db_index=True
    )
    prioridad = models.CharField(max_length=10, choices=PRIORIDAD_CHOICES, default='Media')
    asignado_a = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tareas_asignadas'
    )
    horas_estimadas = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )
    horas_reales = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )
    orden = models.IntegerField(default=0)
    fecha_inicio_progreso = models.DateTimeField(null=True, blank=True)
    fecha_completado = models.DateTimeField(null=True, blank=True)
    activo = models.BooleanField(default=True)
    creado_por = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tareas_creadas'
    )
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tarea'
        ordering = ['estado', 'orden', 'id']
        unique_together = ['actividad', 'codigo']
        indexes = [
            models.Index(fields=['actividad', 'estado'], name='tarea_activid_estado_idx'),
        ]

    def __str__(self):
        return f"{self.codigo} - {self.nombre}"

    def lead_time_dias(self):
        """Días desde la creación hasta la finalización"""
        if not self.fecha_completado:
            return None
        delta = self.fecha_completado - self.creado_en
        return round(delta.total_seconds() / 86400, 1)

    def cycle_time_dias(self):
        """Días desde que empezó el trabajo hasta la finalización"""
        if not self.fecha_completado or not self.fecha_inicio_progreso:
            return None
        delta = self.fecha_completado - self.fecha_inicio_progreso
        return round(delta.total_seconds() / 86400, 1)

    def dias_en_progreso(self):
        if self.estado != ESTADO_EN_PROGRESO or not self.fecha_inicio_progreso:
            return 0
        return (timezone.now() - self.fecha_inicio_progreso).days


class Subtarea(models.Model):
    """Subtarea de una tarea Kanban"""

    tarea = models.ForeignKey(
        Tarea,
        on_delete=models.CASCADE,
        related_name='subtareas'
    )
    codigo = models.CharField(max_length=30)
    nombre = models.CharField(max_length=200)
    descripcion = models.TextField(blank=True)
    estado = models.CharField(max_length=20, choices=ESTADO_TAREA_CHOICES, default=ESTADO_POR_HACER)
    prioridad = models.CharField(max_length=10, choices=PRIORIDAD_CHOICES, default='Media')
    responsable = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subtareas_responsable'
    )
    horas_estimadas = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    horas_reales = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    activo = models.BooleanField(default=True)
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subtarea'
        ordering = ['tarea', 'codigo']

    def __str__(self):
        return f"{self.codigo} - {self.nombre}"
