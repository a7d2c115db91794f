"""
Generación y verificación de tokens JWT para la API.
"""

from datetime import timedelta

import jwt
from django.conf import settings
from django.utils import timezone

ALGORITMO = 'HS256'


class TokenInvalido(Exception):
    """El token no pudo verificarse (firma, formato o expiración)."""


def generar_token(usuario):
    """Firma un token con el id del usuario y una expiración de JWT_EXPIRATION_HOURS."""
    ahora = timezone.now()
    payload = {
        'userId': usuario.pk,
        'iat': ahora,
        'exp': ahora + timedelta(hours=settings.JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITMO)


def decodificar_token(token):
    """
    Verifica el token y retorna su payload.

    Raises:
        TokenInvalido: si la firma no coincide, el token expiró o no trae userId.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITMO])
    except jwt.ExpiredSignatureError:
        raise TokenInvalido('Token expirado')
    except jwt.InvalidTokenError:
        raise TokenInvalido('Token inválido')

    if 'userId' not in payload:
        raise TokenInvalido('Token inválido')
    return payload
