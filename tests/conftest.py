"""Fixtures compartidas por los tests del tablero y de informes."""

import pytest


@pytest.fixture
def coordinador(django_user_model):
    return django_user_model.objects.create_user(
        username='coordinador', password='clave-segura', tipo='coordinador',
        first_name='Carmen', last_name='Quispe'
    )


@pytest.fixture
def colaborador(django_user_model):
    return django_user_model.objects.create_user(
        username='analista', password='clave-segura', tipo='colaborador'
    )


@pytest.fixture
def externo(django_user_model):
    return django_user_model.objects.create_user(
        username='externo', password='clave-segura', tipo='colaborador'
    )


@pytest.fixture
def actividad(coordinador, colaborador):
    from apps.core.models import Actividad

    actividad = Actividad.objects.create(
        codigo='ACT-001',
        nombre='Encuesta piloto',
        coordinador=coordinador,
        estado='En ejecucion',
    )
    actividad.miembros.add(colaborador)
    return actividad


@pytest.fixture
def crear_tarea(actividad):
    """Fábrica de tareas de la actividad con código y orden correlativos."""
    from apps.core.models import Tarea

    contador = {'n': 0}

    def _crear(estado='Por hacer', **kwargs):
        contador['n'] += 1
        kwargs.setdefault('codigo', f'T-{contador["n"]:02d}')
        kwargs.setdefault('nombre', f'Tarea {contador["n"]}')
        kwargs.setdefault('orden', contador['n'])
        return Tarea.objects.create(actividad=actividad, estado=estado, **kwargs)

    return _crear
