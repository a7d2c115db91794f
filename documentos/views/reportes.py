"""
Vistas de reportes.

Cada reporte responde JSON o, con ?formato=csv|excel|pdf, un archivo
generado con los exportadores compartidos.
"""

from django.http import JsonResponse
from django.utils import timezone

from ..mixins import JWTRequeridoMixin
from ..ratelimit import RateLimitMixin
from ..services import reporte_service
from ..utils.export_utils import EXPORTADORES, get_exporter
from .base import ApiView, error, parse_bool, parse_int


class ReporteView(RateLimitMixin, JWTRequeridoMixin, ApiView):
    """Base de los reportes: arma los datos y los devuelve como JSON o archivo."""
    ratelimit_key = 'export'
    titulo = 'Reporte'
    nombre_archivo = 'reporte'

    def get(self, request):
        data = self.get_data(request)

        formato = request.GET.get('formato')
        if not formato:
            return JsonResponse(data)

        exporter = get_exporter(formato, self.titulo)
        if exporter is None:
            return error(f"Formato no válido. Opciones: {', '.join(EXPORTADORES)}")

        self.exportar(data, exporter)
        filename = f"{self.nombre_archivo}_{timezone.localdate():%Y%m%d}.{exporter.extension}"
        return exporter.get_response(filename)

    def get_data(self, request):
        raise NotImplementedError

    def exportar(self, data, exporter):
        raise NotImplementedError


class DocumentacionPorEstadoView(ReporteView):
    titulo = 'Documentación por estado'
    nombre_archivo = 'documentacion_por_estado'

    def get_data(self, request):
        return reporte_service.documentacion_por_estado(
            estado_id=parse_int(request.GET.get('estadoId')),
            entidad_id=parse_int(request.GET.get('entidadId')),
        )

    def exportar(self, data, exporter):
        reporte_service.exportar_documentacion_por_estado(data, exporter)


class RecursosPorEntidadView(ReporteView):
    titulo = 'Recursos por entidad'
    nombre_archivo = 'recursos_por_entidad'

    def get_data(self, request):
        return reporte_service.recursos_por_entidad(
            entidad_id=parse_int(request.GET.get('entidadId')),
            solo_activos=parse_bool(request.GET.get('soloActivos')),
        )

    def exportar(self, data, exporter):
        reporte_service.exportar_recursos_por_entidad(data, exporter)


class DocumentosProximosVencerView(ReporteView):
    titulo = 'Documentos próximos a vencer'
    nombre_archivo = 'documentos_proximos_vencer'

    def get_data(self, request):
        dias = parse_int(request.GET.get('dias'), 30)
        if dias < 0:
            dias = 30
        return reporte_service.documentos_proximos_vencer(
            dias=dias,
            entidad_id=parse_int(request.GET.get('entidadId')),
        )

    def exportar(self, data, exporter):
        reporte_service.exportar_documentos_proximos_vencer(data, exporter)
