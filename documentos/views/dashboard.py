from django.http import JsonResponse
from django.utils import timezone

from ..mixins import JWTRequeridoMixin
from ..models import Documentacion, Entidad, Recurso
from ..serializers import entidad_resumen, estado_resumen, fecha, recurso_resumen
from ..services.estado_service import dias_hasta_vencimiento, documentos_vencidos, proximos_vencimientos
from .base import ApiView, LIMITE_MAXIMO, parse_int

MAXIMO_POR_VENCER = 20


def _documento_dashboard(obj, tipo, hoy):
    """Formato común para documentos de recurso, de entidad y universales."""
    if tipo == 'universal':
        documentacion = obj
    else:
        documentacion = obj.documentacion

    return {
        'id': obj.pk,
        'tipo': tipo,
        'fechaVencimiento': fecha(obj.fecha_vencimiento),
        'diasParaVencer': dias_hasta_vencimiento(obj.fecha_vencimiento, hoy),
        'documentacion': {
            'id': documentacion.pk,
            'codigo': documentacion.codigo,
            'descripcion': documentacion.descripcion,
        },
        'recurso': recurso_resumen(obj.recurso) if tipo == 'recurso' else None,
        'entidad': entidad_resumen(obj.entidad) if tipo == 'entidad' else None,
        'estado': estado_resumen(obj.estado),
    }


def _combinar(recursos, entidades, universales, hoy):
    documentos = [_documento_dashboard(rd, 'recurso', hoy) for rd in recursos]
    documentos += [_documento_dashboard(ed, 'entidad', hoy) for ed in entidades]
    documentos += [_documento_dashboard(doc, 'universal', hoy) for doc in universales]
    return documentos


class DashboardStatsView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        hoy = timezone.localdate()
        por_vencer = sum(qs.count() for qs in proximos_vencimientos(30, hoy))
        vencidos = sum(qs.count() for qs in documentos_vencidos(hoy))

        return JsonResponse({
            'totalRecursos': Recurso.objects.count(),
            'recursosActivos': Recurso.objects.filter(fecha_baja__isnull=True).count(),
            'totalDocumentacion': Documentacion.objects.count(),
            'totalEntidades': Entidad.objects.count(),
            'documentosPorVencer': por_vencer,
            'documentosVencidos': vencidos,
        })


class DocumentosPorVencerView(JWTRequeridoMixin, ApiView):
    """Próximos vencimientos de recursos, entidades y documentación universal."""

    def get(self, request):
        hoy = timezone.localdate()
        dias = parse_int(request.GET.get('dias'), 30)
        if dias < 0:
            dias = 30

        recursos, entidades, universales = proximos_vencimientos(dias, hoy)
        documentos = _combinar(
            recursos.order_by('fecha_vencimiento')[:MAXIMO_POR_VENCER],
            entidades.order_by('fecha_vencimiento')[:MAXIMO_POR_VENCER],
            universales.order_by('fecha_vencimiento')[:MAXIMO_POR_VENCER],
            hoy
        )
        documentos.sort(key=lambda d: d['fechaVencimiento'])
        return JsonResponse(documentos[:MAXIMO_POR_VENCER], safe=False)


class DocumentosVencidosView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        hoy = timezone.localdate()
        limit = parse_int(request.GET.get('limit'), 20)
        if limit < 1:
            limit = 20
        limit = min(limit, LIMITE_MAXIMO)

        recursos, entidades, universales = documentos_vencidos(hoy)
        documentos = _combinar(
            recursos.order_by('-fecha_vencimiento')[:limit],
            entidades.order_by('-fecha_vencimiento')[:limit],
            universales.order_by('-fecha_vencimiento')[:limit],
            hoy
        )
        documentos.sort(key=lambda d: d['fechaVencimiento'], reverse=True)
        for documento in documentos:
            documento['diasVencidos'] = -documento['diasParaVencer']
        return JsonResponse(documentos[:limit], safe=False)
