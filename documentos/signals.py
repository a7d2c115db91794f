import threading

from django.db.models.signals import pre_save
from django.dispatch import receiver

from .models import ModeloAuditado

# Variable para almacenar el usuario actual (thread-local)
_thread_locals = threading.local()


def get_current_user():
    """Obtiene el usuario actual del thread local."""
    return getattr(_thread_locals, 'user', None)


def set_current_user(user):
    """Establece el usuario actual en el thread local."""
    _thread_locals.user = user


class CurrentUserMiddleware:
    """Middleware para capturar el usuario actual en cada request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        set_current_user(request.user if request.user.is_authenticated else None)
        try:
            return self.get_response(request)
        finally:
            set_current_user(None)


# ============================================================================
# SEÑALES PARA COLUMNAS DE AUDITORÍA
# ============================================================================

@receiver(pre_save)
def completar_auditoria(sender, instance, raw=False, **kwargs):
    """Completa creado_por / modificado_por con el usuario del request."""
    if raw or not isinstance(instance, ModeloAuditado):
        return

    usuario = get_current_user()
    if usuario is None or not getattr(usuario, 'pk', None):
        return

    if instance._state.adding and instance.creado_por_id is None:
        instance.creado_por = usuario
    instance.modificado_por = usuario
