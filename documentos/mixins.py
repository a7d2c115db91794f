"""
Mixins reutilizables para vistas.

Este módulo contiene los mixins de autenticación por JWT y de permisos que
se usan en todas las vistas de la API.
"""
from django.contrib.auth.models import User
from django.http import JsonResponse

from .signals import set_current_user
from .utils.tokens import decodificar_token, TokenInvalido


def obtener_token(request):
    """Extrae el token del header 'Authorization: Bearer <token>'."""
    auth_header = request.META.get('HTTP_AUTHORIZATION', '')
    partes = auth_header.split(' ')
    if len(partes) == 2 and partes[0].lower() == 'bearer' and partes[1]:
        return partes[1]
    return None


class JWTRequeridoMixin:
    """Mixin que exige un token JWT válido de un usuario activo."""

    def dispatch(self, request, *args, **kwargs):
        token = obtener_token(request)
        if not token:
            return JsonResponse({'message': 'Token de acceso requerido'}, status=401)

        try:
            payload = decodificar_token(token)
        except TokenInvalido:
            return JsonResponse({'message': 'Token inválido'}, status=403)

        usuario = User.objects.filter(pk=payload['userId']).first()
        if usuario is None or not usuario.is_active:
            return JsonResponse({'message': 'Usuario no válido o inactivo'}, status=403)

        request.user = usuario
        # Establecer usuario actual para signals
        set_current_user(usuario)

        sin_permiso = self.verificar_permisos(request)
        if sin_permiso is not None:
            return sin_permiso
        return super().dispatch(request, *args, **kwargs)

    def verificar_permisos(self, request):
        """Retorna una respuesta de error si el usuario no puede acceder, o None."""
        return None

    def es_admin(self):
        """Verifica si el usuario autenticado es administrador."""
        return self.request.user.is_staff

    def respuesta_sin_permisos(self):
        return JsonResponse({'message': 'Se requieren permisos de administrador'}, status=403)


class AdminRequeridoMixin(JWTRequeridoMixin):
    """
    Solo administradores pueden acceder.

    admin_methods limita la restricción a ciertos métodos HTTP, por ejemplo
    ('POST', 'DELETE'); None la aplica a todos.
    """
    admin_methods = None

    def verificar_permisos(self, request):
        if self.admin_methods is not None and request.method not in self.admin_methods:
            return None
        if not request.user.is_staff:
            return self.respuesta_sin_permisos()
        return None
