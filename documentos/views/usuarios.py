"""
Gestión de usuarios del sistema.

Alta y baja quedan reservadas a administradores; cada usuario puede editar
su propio perfil y cambiar su contraseña.
"""

import logging
import re
from datetime import timedelta

from django.contrib.auth.models import User
from django.db.models import Q
from django.http import JsonResponse
from django.utils import timezone

from ..mixins import AdminRequeridoMixin, JWTRequeridoMixin
from ..serializers import usuario_dict
from .auth import LARGO_MINIMO_PASSWORD
from .base import ApiView, error, obtener_o_404, paginar, parse_bool, texto

logger = logging.getLogger('documentos')

EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _validar_datos(data, usuario=None):
    """Validaciones comunes de alta y edición. Retorna una respuesta 400 o None."""
    username = texto(data, 'username')
    email = texto(data, 'email')

    if not EMAIL_REGEX.match(email):
        return error('El formato del email no es válido')

    password = data.get('password') or ''
    if password and len(password) < LARGO_MINIMO_PASSWORD:
        return error('La contraseña debe tener al menos 6 caracteres')

    otros = User.objects.all()
    if usuario is not None:
        otros = otros.exclude(pk=usuario.pk)
    if otros.filter(username=username).exists():
        return error('El nombre de usuario ya está en uso')
    if otros.filter(email__iexact=email).exists():
        return error('El email ya está registrado')
    return None


class UsuarioListView(AdminRequeridoMixin, ApiView):
    """Listado de usuarios (cualquier usuario autenticado) y alta (solo admin)."""
    admin_methods = ('POST',)

    def get(self, request):
        usuarios = User.objects.order_by('username')

        search = request.GET.get('search', '').strip()
        if search:
            usuarios = usuarios.filter(
                Q(username__icontains=search) |
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search)
            )

        return JsonResponse(paginar(request, usuarios, 'usuarios', usuario_dict))

    def post(self, request):
        campos = ('username', 'email', 'password', 'nombre', 'apellido')
        if not all(texto(self.data, c) for c in campos):
            return error('Todos los campos son obligatorios')

        respuesta_error = _validar_datos(self.data)
        if respuesta_error:
            return respuesta_error

        usuario = User.objects.create_user(
            username=texto(self.data, 'username'),
            email=texto(self.data, 'email'),
            password=self.data['password'],
            first_name=texto(self.data, 'nombre'),
            last_name=texto(self.data, 'apellido'),
        )
        usuario.is_active = parse_bool(self.data.get('activo'), default=True)
        usuario.is_staff = parse_bool(self.data.get('esAdmin'))
        usuario.save(update_fields=['is_active', 'is_staff'])

        logger.info("Usuario %s creado por %s", usuario.username, request.user.username)
        return JsonResponse(usuario_dict(usuario), status=201)


class UsuarioDetailView(AdminRequeridoMixin, ApiView):
    admin_methods = ('DELETE',)

    def get_object(self, pk):
        return obtener_o_404(User.objects.all(), 'Usuario no encontrado', pk=pk)

    def get(self, request, pk):
        return JsonResponse(usuario_dict(self.get_object(pk)))

    def put(self, request, pk):
        usuario = self.get_object(pk)
        if usuario.pk != request.user.pk and not self.es_admin():
            return self.respuesta_sin_permisos()

        datos = {
            'username': self.data.get('username', usuario.username),
            'email': self.data.get('email', usuario.email),
            'password': self.data.get('password'),
        }
        if not texto(datos, 'username') or not texto(datos, 'email'):
            return error('Usuario y email son obligatorios')

        respuesta_error = _validar_datos(datos, usuario)
        if respuesta_error:
            return respuesta_error

        usuario.username = texto(datos, 'username')
        usuario.email = texto(datos, 'email')
        if 'nombre' in self.data:
            usuario.first_name = texto(self.data, 'nombre')
        if 'apellido' in self.data:
            usuario.last_name = texto(self.data, 'apellido')
        if datos['password']:
            usuario.set_password(datos['password'])

        # Solo un administrador cambia permisos o activa/desactiva cuentas
        if self.es_admin():
            if 'activo' in self.data:
                usuario.is_active = parse_bool(self.data.get('activo'), default=True)
            if 'esAdmin' in self.data:
                usuario.is_staff = parse_bool(self.data.get('esAdmin'))

        usuario.save()
        return JsonResponse(usuario_dict(usuario))

    def delete(self, request, pk):
        usuario = self.get_object(pk)

        if usuario.pk == request.user.pk:
            return error('No puedes eliminarte a ti mismo')

        if usuario.is_active and User.objects.filter(is_active=True).count() <= 1:
            return error('No se puede eliminar el último usuario activo del sistema')

        logger.info("Usuario %s eliminado por %s", usuario.username, request.user.username)
        usuario.delete()
        return JsonResponse({'message': 'Usuario eliminado correctamente'})


class UsuarioStatsView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        total = User.objects.count()
        activos = User.objects.filter(is_active=True).count()
        hace_30_dias = timezone.now() - timedelta(days=30)
        return JsonResponse({
            'total': total,
            'activos': activos,
            'inactivos': total - activos,
            'registradosUltimos30Dias': User.objects.filter(date_joined__gte=hace_30_dias).count(),
        })


class UsuarioChangePasswordView(JWTRequeridoMixin, ApiView):
    """
    Cambio de contraseña.

    El propio usuario debe informar la contraseña actual; un administrador
    puede cambiar la de otro usuario solo con la nueva.
    """

    def post(self, request, pk):
        usuario = obtener_o_404(User.objects.all(), 'Usuario no encontrado', pk=pk)
        es_propio = usuario.pk == request.user.pk

        if not es_propio and not self.es_admin():
            return self.respuesta_sin_permisos()

        actual = self.data.get('currentPassword') or ''
        nueva = self.data.get('newPassword') or ''

        if not nueva:
            return error('La nueva contraseña es obligatoria')
        if len(nueva) < LARGO_MINIMO_PASSWORD:
            return error('La contraseña debe tener al menos 6 caracteres')

        if es_propio:
            if not actual:
                return error('La contraseña actual es obligatoria')
            if not usuario.check_password(actual):
                return error('La contraseña actual es incorrecta')

        usuario.set_password(nueva)
        usuario.save(update_fields=['password'])
        logger.info("Contraseña de %s cambiada por %s", usuario.username, request.user.username)
        return JsonResponse({'message': 'Contraseña actualizada correctamente'})
