# apps/core/permissions.py

from functools import wraps

from django.http import JsonResponse


class SigpPermissions:
    """
    Permisos del tablero según el tipo de usuario:
    admin, coordinador, gestor, colaborador
    """

    @staticmethod
    def is_admin(user):
        """Verifica si es administrador"""
        return user.is_authenticated and (user.tipo == 'admin' or user.is_superuser)

    @staticmethod
    def is_coordinador_o_gestor(user):
        return user.is_authenticated and user.tipo in ['admin', 'coordinador', 'gestor']

    @staticmethod
    def tiene_acceso_actividad(user, actividad):
        """Verifica si tiene acceso a la actividad"""
        if not user.is_authenticated:
            return False
        return user.puede_acceder_actividad(actividad)

    @staticmethod
    def puede_mover_tarea(user, tarea):
        """
        Verifica si puede mover una tarea entre columnas

        Coordinadores, gestores y administradores mueven cualquier tarea
        de sus actividades; un colaborador solo las que tiene asignadas
        o las que no tienen responsable.
        """
        if not SigpPermissions.tiene_acceso_actividad(user, tarea.actividad):
            return False

        if SigpPermissions.is_coordinador_o_gestor(user):
            return True

        return tarea.asignado_a_id in (None, user.id)


# Decoradores para vistas JSON

def requer_acceso_actividad(view_func):
    """
    Decorador que verifica acceso a la actividad
    Espera que la vista reciba actividad_id como parámetro
    """

    @wraps(view_func)
    def wrapped_view(request, actividad_id, *args, **kwargs):
        from .models import Actividad

        if not request.user.is_authenticated:
            return JsonResponse({'success': False, 'error': 'Autenticación requerida'}, status=401)

        try:
            actividad = Actividad.objects.get(id=actividad_id, activo=True)
        except Actividad.DoesNotExist:
            return JsonResponse({'success': False, 'error': 'Actividad no encontrada'}, status=404)

        if not SigpPermissions.tiene_acceso_actividad(request.user, actividad):
            return JsonResponse({'success': False, 'error': 'Sin acceso a esta actividad'}, status=403)

        # Deja la actividad en el request para la vista
        request.actividad = actividad
        return view_func(request, actividad_id, *args, **kwargs)

    return wrapped_view
