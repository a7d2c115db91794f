"""
Autenticación: registro, login, perfil y recuperación de contraseña.
"""

import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.db import transaction
from django.http import JsonResponse
from django.utils import timezone

from ..mixins import JWTRequeridoMixin
from ..models import PasswordResetToken
from ..ratelimit import RateLimitMixin, get_client_ip
from ..serializers import usuario_dict
from ..utils.email import enviar_confirmacion_password, enviar_recuperacion_password
from ..utils.tokens import generar_token
from .base import ApiView, error, texto

logger = logging.getLogger('documentos')

LARGO_MINIMO_PASSWORD = 6

MENSAJE_RECUPERACION = 'Si el email existe en nuestro sistema, recibirás un enlace de recuperación.'


class RegisterView(RateLimitMixin, ApiView):
    """Registra un usuario. El primer usuario del sistema queda como administrador."""
    ratelimit_key = 'auth'

    def post(self, request):
        username = texto(self.data, 'username')
        email = texto(self.data, 'email')
        password = self.data.get('password') or ''

        if not username or not email or not password:
            return error('Usuario, email y contraseña son obligatorios')
        if len(password) < LARGO_MINIMO_PASSWORD:
            return error('La contraseña debe tener al menos 6 caracteres')
        if User.objects.filter(username=username).exists():
            return error('El usuario ya existe')
        if User.objects.filter(email__iexact=email).exists():
            return error('El email ya está registrado')

        with transaction.atomic():
            es_primero = not User.objects.exists()
            usuario = User.objects.create_user(
                username=username,
                email=email,
                password=password,
                first_name=texto(self.data, 'nombre'),
                last_name=texto(self.data, 'apellido'),
            )
            if es_primero:
                usuario.is_staff = True
                usuario.save(update_fields=['is_staff'])

        logger.info("Usuario registrado: %s%s", username, " (administrador)" if es_primero else "")
        return JsonResponse({
            'message': 'Usuario registrado exitosamente',
            'token': generar_token(usuario),
            'user': usuario_dict(usuario),
        }, status=201)


class LoginView(RateLimitMixin, ApiView):
    ratelimit_key = 'auth'

    def post(self, request):
        username = texto(self.data, 'username')
        password = self.data.get('password') or ''

        usuario = User.objects.filter(username=username).first()
        if usuario is None:
            logger.warning("Login fallido para '%s' desde %s", username, get_client_ip(request))
            return error('Credenciales inválidas', status=401)
        if not usuario.is_active:
            return error('Usuario inactivo', status=401)
        if authenticate(request, username=username, password=password) is None:
            logger.warning("Login fallido para '%s' desde %s", username, get_client_ip(request))
            return error('Credenciales inválidas', status=401)

        usuario.last_login = timezone.now()
        usuario.save(update_fields=['last_login'])

        return JsonResponse({
            'message': 'Login exitoso',
            'token': generar_token(usuario),
            'user': usuario_dict(usuario),
        })


class ProfileView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        return JsonResponse({'user': usuario_dict(request.user)})


# ============================================================================
# RECUPERACIÓN DE CONTRASEÑA
# ============================================================================

class ForgotPasswordView(RateLimitMixin, ApiView):
    """
    Genera un token de recuperación y envía el enlace por email.

    La respuesta es la misma exista o no el email, para no revelar qué
    cuentas están registradas.
    """
    ratelimit_key = 'auth'

    def post(self, request):
        email = texto(self.data, 'email')
        if not email:
            return error('El email es requerido')

        usuario = User.objects.filter(email__iexact=email, is_active=True).first()
        if usuario is not None:
            reset = PasswordResetToken.generar(usuario)
            enviar_recuperacion_password(usuario, reset.token)
            logger.info("Recuperación de contraseña solicitada para %s", usuario.username)
        else:
            logger.info("Recuperación solicitada para email inexistente desde %s", get_client_ip(request))

        return JsonResponse({'message': MENSAJE_RECUPERACION})


def verificar_reset_token(valor):
    """
    Valida un token de recuperación.

    Retorna (reset_token, None) si es válido o (None, respuesta_de_error).
    """
    reset = PasswordResetToken.objects.select_related('usuario').filter(token=valor).first()
    if reset is None:
        return None, error('Token inválido', code='INVALID_TOKEN')
    if reset.usado:
        return None, error('Este enlace ya ha sido utilizado', code='TOKEN_USED')
    if reset.expirado:
        return None, error('El enlace ha expirado. Solicita uno nuevo.', code='TOKEN_EXPIRED')
    if not reset.usuario.is_active:
        return None, error('Usuario inactivo', code='USER_INACTIVE')
    return reset, None


class VerifyResetTokenView(ApiView):

    def get(self, request, token):
        reset, respuesta_error = verificar_reset_token(token)
        if respuesta_error:
            return respuesta_error

        usuario = reset.usuario
        return JsonResponse({
            'valid': True,
            'user': {
                'email': usuario.email,
                'nombre': usuario.first_name,
                'apellido': usuario.last_name,
            },
        })


class ResetPasswordView(RateLimitMixin, ApiView):
    ratelimit_key = 'auth'

    def post(self, request):
        token = texto(self.data, 'token')
        nueva = self.data.get('newPassword') or ''

        if not token or not nueva:
            return error('Token y nueva contraseña son requeridos')
        if len(nueva) < LARGO_MINIMO_PASSWORD:
            return error('La contraseña debe tener al menos 6 caracteres')

        reset, respuesta_error = verificar_reset_token(token)
        if respuesta_error:
            return respuesta_error

        usuario = reset.usuario
        with transaction.atomic():
            usuario.set_password(nueva)
            usuario.save(update_fields=['password'])
            reset.usado = True
            reset.save(update_fields=['usado'])
            PasswordResetToken.objects.filter(usuario=usuario, usado=False).update(usado=True)

        enviar_confirmacion_password(usuario)
        logger.info("Contraseña restablecida para %s", usuario.username)

        return JsonResponse({'message': 'Contraseña actualizada exitosamente'})
