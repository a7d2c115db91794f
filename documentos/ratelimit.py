"""
Rate limiting para endpoints sensibles de la API.

Limita la cantidad de peticiones por IP en una ventana de tiempo, usando el
cache de Django, para proteger contra:
- Fuerza bruta sobre login y recuperación de contraseña
- Subidas masivas de archivos
- Generación repetida de reportes
"""

import time

from django.core.cache import cache
from django.http import JsonResponse


# Configuración de límites por defecto
RATE_LIMITS = {
    # Login, registro y recuperación de contraseña: 10 peticiones por minuto
    'auth': {'requests': 10, 'window': 60},
    # Subida de archivos: 20 peticiones por minuto
    'upload': {'requests': 20, 'window': 60},
    # Exportación de reportes: 10 peticiones por minuto
    'export': {'requests': 10, 'window': 60},
    # API general: 120 peticiones por minuto
    'api': {'requests': 120, 'window': 60},
}


def get_client_ip(request):
    """Obtiene la IP real del cliente, considerando proxies."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


class RateLimitMixin:
    """
    Mixin para aplicar rate limiting a Class-Based Views.

    Uso:
        class LoginView(RateLimitMixin, ApiView):
            ratelimit_key = 'auth'
            ratelimit_method = 'POST'  # Opcional, default 'ALL'
    """
    ratelimit_key = 'api'
    ratelimit_method = 'ALL'
    ratelimit_rate = None  # Tupla (requests, window) o None para usar RATE_LIMITS

    def dispatch(self, request, *args, **kwargs):
        if self.ratelimit_method != 'ALL' and request.method != self.ratelimit_method:
            return super().dispatch(request, *args, **kwargs)

        if self.ratelimit_rate:
            max_requests, window = self.ratelimit_rate
        else:
            limit_config = RATE_LIMITS.get(self.ratelimit_key, RATE_LIMITS['api'])
            max_requests = limit_config['requests']
            window = limit_config['window']

        cache_key = f'ratelimit:{self.ratelimit_key}:{get_client_ip(request)}'

        request_history = cache.get(cache_key, [])
        now = time.time()
        request_history = [t for t in request_history if now - t < window]

        if len(request_history) >= max_requests:
            retry_after = max(int(window - (now - request_history[0])), 1)
            response = JsonResponse(
                {'message': f'Demasiadas peticiones. Intente de nuevo en {retry_after} segundos.'},
                status=429
            )
            response['Retry-After'] = str(retry_after)
            return response

        request_history.append(now)
        cache.set(cache_key, request_history, window)

        return super().dispatch(request, *args, **kwargs)
