from django.http import JsonResponse

from ..mixins import JWTRequeridoMixin
from ..models import ActualizacionEstados, EstadoDocumentoLog
from ..serializers import fecha, log_estado_dict
from ..services.estado_service import EstadosFaltantesError, actualizar_estados_documentos
from .base import ApiView, LIMITE_MAXIMO, error, parse_int


class ActualizarEstadosView(JWTRequeridoMixin, ApiView):
    """Ejecuta manualmente la actualización de estados."""

    def post(self, request):
        try:
            resultado = actualizar_estados_documentos(
                usuario=request.user,
                tipo_actualizacion='manual',
            )
        except EstadosFaltantesError as e:
            return error(str(e))

        return JsonResponse({
            'message': f"Actualización completada: {resultado['actualizados']} documentos actualizados",
            'resultado': resultado,
        })


class UltimaActualizacionView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        ultima = ActualizacionEstados.objects.order_by('-ejecutado_en').first()
        if ultima is None:
            return JsonResponse({
                'ultimaActualizacion': None,
                'tipoActualizacion': None,
                'actualizados': 0,
                'mensaje': 'No se han realizado actualizaciones',
            })

        return JsonResponse({
            'ultimaActualizacion': fecha(ultima.ejecutado_en),
            'tipoActualizacion': ultima.tipo_actualizacion,
            'actualizados': ultima.actualizados,
            'mensaje': f"{ultima.actualizados} documentos actualizados de {ultima.total_revisados} revisados",
        })


class LogsEstadoView(JWTRequeridoMixin, ApiView):
    """Últimos cambios de estado registrados."""

    def get(self, request):
        limit = parse_int(request.GET.get('limit'), 50)
        if limit < 1:
            limit = 50
        limit = min(limit, LIMITE_MAXIMO)

        logs = EstadoDocumentoLog.objects.select_related(
            'estado_anterior', 'estado_nuevo'
        ).order_by('-creado_en', '-pk')[:limit]
        return JsonResponse([log_estado_dict(log) for log in logs], safe=False)
