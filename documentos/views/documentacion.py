from django.db.models import Count, Q
from django.http import JsonResponse

from ..forms import DocumentacionForm
from ..mixins import JWTRequeridoMixin
from ..models import Documentacion, Estado
from ..serializers import documentacion_dict, entidad_documentacion_dict, recurso_documentacion_dict
from ..services.estado_service import sincronizar_fechas_universales
from .base import ApiView, error, obtener_o_404, paginar, parse_int


def validar_estado(data, clave='estadoId'):
    """
    Retorna (estado, None) o (None, respuesta 400) según el id recibido.
    Un id vacío significa sin estado.
    """
    valor = data.get(clave)
    if valor in (None, ''):
        return None, None
    estado = Estado.objects.filter(pk=parse_int(valor, 0)).first()
    if estado is None:
        return None, error('Estado no válido')
    return estado, None


def documentacion_item(doc):
    data = documentacion_dict(doc)
    data['cantidadRecursos'] = getattr(doc, 'cantidad_recursos', None)
    data['cantidadEntidades'] = getattr(doc, 'cantidad_entidades', None)
    return data


def _aplicar_datos(doc, datos):
    for campo, valor in datos.items():
        setattr(doc, campo, valor)


class DocumentacionListView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        documentos = Documentacion.objects.select_related('estado', 'estado_vencimiento').annotate(
            cantidad_recursos=Count('asignaciones_recurso', distinct=True),
            cantidad_entidades=Count('asignaciones_entidad', distinct=True),
        ).order_by('codigo')

        search = request.GET.get('search', '').strip()
        if search:
            documentos = documentos.filter(
                Q(codigo__icontains=search) |
                Q(descripcion__icontains=search)
            )

        return JsonResponse(paginar(request, documentos, 'documentacion', documentacion_item))

    def post(self, request):
        datos = DocumentacionForm(self.data).validar()
        if not datos.get('codigo') or not datos.get('descripcion'):
            return error('Código y descripción son obligatorios')

        estado, respuesta_error = validar_estado(self.data)
        if respuesta_error:
            return respuesta_error
        estado_vencimiento, respuesta_error = validar_estado(self.data, 'estadoVencimientoId')
        if respuesta_error:
            return respuesta_error

        if Documentacion.objects.filter(codigo__iexact=datos['codigo']).exists():
            return error('Ya existe una documentación con ese código')

        doc = Documentacion(dias_vigencia=365, dias_anticipacion=30)
        _aplicar_datos(doc, datos)
        doc.estado = estado
        doc.estado_vencimiento = estado_vencimiento
        doc.save()

        return JsonResponse(documentacion_dict(doc), status=201)


class DocumentacionDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(
            Documentacion.objects.select_related('estado', 'estado_vencimiento'),
            'Documentación no encontrada',
            pk=pk
        )

    def get(self, request, pk):
        return JsonResponse(documentacion_dict(self.get_object(pk), detalle=True))

    def put(self, request, pk):
        doc = self.get_object(pk)
        datos = DocumentacionForm(self.data).validar()
        fechas_anteriores = (doc.fecha_emision, doc.fecha_tramitacion, doc.fecha_vencimiento)
        era_universal = doc.es_universal

        if 'estadoId' in self.data:
            estado, respuesta_error = validar_estado(self.data)
            if respuesta_error:
                return respuesta_error
            doc.estado = estado
        if 'estadoVencimientoId' in self.data:
            estado_vencimiento, respuesta_error = validar_estado(self.data, 'estadoVencimientoId')
            if respuesta_error:
                return respuesta_error
            doc.estado_vencimiento = estado_vencimiento

        if 'codigo' in datos:
            if Documentacion.objects.filter(codigo__iexact=datos['codigo']).exclude(pk=doc.pk).exists():
                return error('Ya existe una documentación con ese código')

        _aplicar_datos(doc, datos)
        doc.save()

        fechas_nuevas = (doc.fecha_emision, doc.fecha_tramitacion, doc.fecha_vencimiento)
        if doc.es_universal and (fechas_nuevas != fechas_anteriores or not era_universal):
            sincronizar_fechas_universales(doc)

        return JsonResponse(documentacion_dict(doc))

    def delete(self, request, pk):
        doc = self.get_object(pk)
        doc.delete()
        return JsonResponse({'message': 'Documentación eliminada correctamente'})


class DocumentacionRecursosView(JWTRequeridoMixin, ApiView):
    """Recursos que tienen asignada la documentación."""

    def get(self, request, pk):
        doc = obtener_o_404(Documentacion.objects.all(), 'Documentación no encontrada', pk=pk)
        asignaciones = doc.asignaciones_recurso.select_related(
            'recurso', 'estado', 'documentacion'
        ).order_by('recurso__apellido', 'recurso__nombre')
        return JsonResponse([recurso_documentacion_dict(rd) for rd in asignaciones], safe=False)


class DocumentacionEntidadesView(JWTRequeridoMixin, ApiView):
    """Entidades que requieren la documentación."""

    def get(self, request, pk):
        doc = obtener_o_404(Documentacion.objects.all(), 'Documentación no encontrada', pk=pk)
        asignaciones = doc.asignaciones_entidad.select_related(
            'entidad', 'estado', 'documentacion'
        ).order_by('entidad__razon_social')
        return JsonResponse([entidad_documentacion_dict(ed) for ed in asignaciones], safe=False)
