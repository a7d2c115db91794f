"""
Vista base de la API JSON y utilidades de parseo y paginación.
"""

import json
import logging
import math

from django.conf import settings
from django.core.exceptions import (
    RequestDataTooBig,
    TooManyFieldsSent,
    TooManyFilesSent,
    ValidationError,
)
from django.http import Http404, JsonResponse
from django.http.multipartparser import MultiPartParserError
from django.views import View
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger('documentos')

PAGINA_DEFAULT = 1
LIMITE_DEFAULT = 10
LIMITE_MAXIMO = 100


def error(message, status=400, **extra):
    return JsonResponse({'message': message, **extra}, status=status)


def error_validacion(exc):
    """Convierte una ValidationError en una respuesta 400."""
    if hasattr(exc, 'message_dict'):
        errores = exc.message_dict
        mensajes = [m for lista in errores.values() for m in lista]
    else:
        errores = None
        mensajes = exc.messages
    mensaje = mensajes[0] if mensajes else 'Datos inválidos'
    if errores:
        return error(mensaje, errors=errores)
    return error(mensaje)


class ApiView(View):
    """
    Vista base para endpoints JSON.

    - Parsea el cuerpo JSON (o el formulario multipart) en self.data
    - Convierte ValidationError en 400 y Http404 en 404
    - Registra cualquier otra excepción y responde 500
    """

    @classmethod
    def as_view(cls, **initkwargs):
        # La API se autentica por token, no por cookie de sesión
        return csrf_exempt(super().as_view(**initkwargs))

    def dispatch(self, request, *args, **kwargs):
        try:
            self.data = self.parse_body(request)
        except TooManyFilesSent:
            maximo = getattr(settings, 'MAX_ARCHIVOS_POR_SUBIDA', 20)
            return error(f'Se pueden subir como máximo {maximo} archivos por vez')
        except (RequestDataTooBig, TooManyFieldsSent):
            return error('El cuerpo de la petición excede el tamaño permitido')
        except MultiPartParserError:
            return error('El formulario enviado no es válido')
        except ValueError:
            return error('El cuerpo de la petición no es un JSON válido')

        try:
            return super().dispatch(request, *args, **kwargs)
        except ValidationError as e:
            return error_validacion(e)
        except Http404 as e:
            return error(str(e) or 'No encontrado', status=404)
        except Exception:
            logger.exception("Error en %s %s", request.method, request.path)
            return error('Error interno del servidor', status=500)

    def parse_body(self, request):
        if request.method in ('GET', 'HEAD', 'DELETE', 'OPTIONS'):
            return {}
        if request.content_type and request.content_type.startswith('multipart/'):
            return request.POST.dict()
        if not request.body:
            return {}
        data = json.loads(request.body)
        if not isinstance(data, dict):
            raise ValueError('Se esperaba un objeto JSON')
        return data


# ============================================================================
# PARSEO DE PARÁMETROS
# ============================================================================

def parse_int(valor, default=None):
    try:
        return int(valor)
    except (TypeError, ValueError):
        return default


def parse_bool(valor, default=False):
    if valor is None:
        return default
    if isinstance(valor, bool):
        return valor
    return str(valor).strip().lower() in ('true', '1', 'si', 'sí', 'on')


def texto(data, clave, default=''):
    valor = data.get(clave)
    if valor is None:
        return default
    return str(valor).strip()


def obtener_o_404(queryset, mensaje, **filtros):
    """Como get_object_or_404 pero con mensaje propio para la respuesta."""
    try:
        return queryset.get(**filtros)
    except (queryset.model.DoesNotExist, ValueError):
        raise Http404(mensaje)


def paginar(request, queryset, clave, serializer):
    """
    Pagina un queryset según los parámetros page y limit.

    Retorna {clave: [...], pagination: {currentPage, totalPages, totalItems, itemsPerPage}}.
    """
    page = parse_int(request.GET.get('page'), PAGINA_DEFAULT)
    limit = parse_int(request.GET.get('limit'), LIMITE_DEFAULT)
    if page < 1:
        page = PAGINA_DEFAULT
    if limit < 1:
        limit = LIMITE_DEFAULT
    limit = min(limit, LIMITE_MAXIMO)

    total = queryset.count()
    offset = (page - 1) * limit
    items = queryset[offset:offset + limit]

    return {
        clave: [serializer(obj) for obj in items],
        'pagination': {
            'currentPage': page,
            'totalPages': math.ceil(total / limit),
            'totalItems': total,
            'itemsPerPage': limit,
        },
    }
