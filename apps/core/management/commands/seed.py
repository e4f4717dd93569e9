# apps/core/management/commands/seed.py

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.core.models import (
    ESTADO_EN_PROGRESO, ESTADO_FINALIZADO, ESTADO_POR_HACER,
    Actividad, Subtarea, Tarea, Usuario,
)

USUARIOS_DEMO = [
    # username, nombre, apellido, tipo
    ('coordinador', 'Carmen', 'Quispe', 'coordinador'),
    ('gestor', 'Luis', 'Huamán', 'gestor'),
    ('analista', 'Rosa', 'Mamani', 'colaborador'),
    ('programador', 'Jorge', 'Flores', 'colaborador'),
]

TAREAS_DEMO = [
    # codigo, nombre, estado, prioridad, horas
    ('T-01', 'Levantamiento de requerimientos', ESTADO_FINALIZADO, 'Alta', 16),
    ('T-02', 'Diseño del cuestionario', ESTADO_FINALIZADO, 'Alta', 24),
    ('T-03', 'Validación de consistencia', ESTADO_EN_PROGRESO, 'Media', 12),
    ('T-04', 'Capacitación de encuestadores', ESTADO_EN_PROGRESO, 'Media', 8),
    ('T-05', 'Prueba piloto', ESTADO_POR_HACER, 'Alta', 20),
    ('T-06', 'Informe de resultados', ESTADO_POR_HACER, 'Baja', 10),
]


class Command(BaseCommand):
    help = 'Crea usuarios, una actividad y tareas de demostración para el tablero'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='sigp123',
            help='Contraseña de los usuarios demo'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('🌱 Creando datos de demostración...')

        usuarios = self._crear_usuarios(options['password'])
        actividad = self._crear_actividad(usuarios)
        creadas = self._crear_tareas(actividad, usuarios)

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✅ Datos demo listos!\n'
                f'  👤 Usuarios: {len(usuarios)}\n'
                f'  📁 Actividad: {actividad.codigo} (id={actividad.id})\n'
                f'  📋 Tareas nuevas: {creadas}\n'
                f'\nTablero: /tablero/actividades/{actividad.id}/tablero/'
            )
        )

    def _crear_usuarios(self, password):
        usuarios = {}
        for username, nombre, apellido, tipo in USUARIOS_DEMO:
            usuario, creado = Usuario.objects.get_or_create(
                username=username,
                defaults={
                    'first_name': nombre,
                    'last_name': apellido,
                    'email': f'{username}@sigp.local',
                    'tipo': tipo,
                }
            )
            if creado:
                usuario.set_password(password)
                usuario.save()
                self.stdout.write(f'  ✅ Usuario creado: {username} ({tipo})')
            usuarios[username] = usuario
        return usuarios

    def _crear_actividad(self, usuarios):
        hoy = timezone.localdate()
        actividad, creado = Actividad.objects.get_or_create(
            codigo='ACT-DEMO',
            defaults={
                'nombre': 'Encuesta Nacional de Hogares - Piloto',
                'descripcion': 'Actividad de demostración del tablero Kanban',
                'estado': 'En ejecucion',
                'coordinador': usuarios['coordinador'],
                'gestor': usuarios['gestor'],
                'fecha_inicio': hoy - timedelta(days=30),
                'fecha_fin': hoy + timedelta(days=60),
            }
        )
        actividad.miembros.add(usuarios['analista'], usuarios['programador'])
        if creado:
            self.stdout.write(f'  ✅ Actividad creada: {actividad}')
        return actividad

    def _crear_tareas(self, actividad, usuarios):
        responsables = [usuarios['analista'], usuarios['programador']]
        creadas = 0

        for i, (codigo, nombre, estado, prioridad, horas) in enumerate(TAREAS_DEMO):
            tarea, creado = Tarea.objects.get_or_create(
                actividad=actividad,
                codigo=codigo,
                defaults={
                    'nombre': nombre,
                    'estado': estado,
                    'prioridad': prioridad,
                    'horas_estimadas': Decimal(horas),
                    'asignado_a': responsables[i % len(responsables)],
                    'orden': i,
                    'creado_por': usuarios['coordinador'],
                }
            )
            if not creado:
                continue

            creadas += 1
            Subtarea.objects.create(
                tarea=tarea,
                codigo=f'{codigo}.1',
                nombre=f'Revisión de {nombre.lower()}',
                estado=ESTADO_FINALIZADO if estado == ESTADO_FINALIZADO else ESTADO_POR_HACER,
                responsable=tarea.asignado_a,
            )

        return creadas
