#!/usr/bin/env python
"""
Script para crear el usuario administrador inicial.

Las credenciales se toman de ADMIN_USERNAME, ADMIN_EMAIL y ADMIN_PASSWORD
(.env o entorno); la contraseña es obligatoria.
"""

import os
import sys
from pathlib import Path

import django

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from decouple import config
from django.contrib.auth.models import User

username = config('ADMIN_USERNAME', default='admin')
email = config('ADMIN_EMAIL', default='admin@axiomadocs.com')
password = config('ADMIN_PASSWORD', default='')

if User.objects.filter(username=username).exists():
    print(f"✓ El administrador '{username}' ya existe")
elif not password:
    print("✗ Defina ADMIN_PASSWORD para crear el administrador")
    sys.exit(1)
else:
    User.objects.create_superuser(
        username, email, password,
        first_name='Administrador', last_name='Sistema'
    )
    print(f"✓ Administrador '{username}' creado exitosamente")
    print(f"  Email: {email}")
