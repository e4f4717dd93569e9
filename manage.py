#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

SIGP Tablero - Tablero Kanban de actividades
"""

import os
import sys


def main():
    """Run administrative tasks."""

    # Configuración por defecto para desarrollo
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Comando de setup inicial
    if len(sys.argv) > 1 and sys.argv[1] == 'setup':
        print("🚀 Configurando SIGP Tablero...")

        print("📊 Aplicando migraciones...")
        if os.system(f'{sys.executable} manage.py migrate') != 0:
            print("❌ Error en las migraciones")
            return

        print("🌱 Cargando datos demo...")
        os.system(f'{sys.executable} manage.py seed')

        print("✅ Setup completado!")
        return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
