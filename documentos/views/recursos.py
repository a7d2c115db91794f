from django.db.models import Count, Prefetch, Q
from django.http import JsonResponse

from ..forms import RecursoDocumentacionForm, RecursoForm
from ..mixins import JWTRequeridoMixin
from ..models import Documentacion, Recurso, RecursoDocumentacion
from ..serializers import estado_resumen, recurso_dict, recurso_documentacion_dict
from ..services.estado_service import estado_mas_critico, obtener_fechas_para_asignacion
from .base import ApiView, error, obtener_o_404, paginar, parse_int
from .documentacion import validar_estado


def recurso_item(recurso):
    data = recurso_dict(recurso)
    data['estadoCritico'] = estado_resumen(estado_mas_critico(recurso.documentos.all()))
    data['cantidadDocumentos'] = recurso.cantidad_documentos
    return data


def _aplicar_datos(recurso, datos):
    # Sin fecha de alta se conserva la actual (o la de hoy en un alta)
    if not datos.get('fecha_alta'):
        datos.pop('fecha_alta', None)
    for campo, valor in datos.items():
        setattr(recurso, campo, valor)


def _validar(recurso):
    if not recurso.codigo or not recurso.apellido or not recurso.nombre:
        return error('Código, apellido y nombre son obligatorios')
    if Recurso.objects.filter(codigo__iexact=recurso.codigo).exclude(pk=recurso.pk).exists():
        return error('Ya existe un recurso con ese código')
    return None


class RecursoListView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        recursos = Recurso.objects.annotate(
            cantidad_documentos=Count('documentos')
        ).prefetch_related(
            Prefetch('documentos', queryset=RecursoDocumentacion.objects.select_related('estado'))
        ).order_by('apellido', 'nombre')

        search = request.GET.get('search', '').strip()
        if search:
            recursos = recursos.filter(
                Q(codigo__icontains=search) |
                Q(nombre__icontains=search) |
                Q(apellido__icontains=search) |
                Q(cuil__icontains=search)
            )

        return JsonResponse(paginar(request, recursos, 'recursos', recurso_item))

    def post(self, request):
        recurso = Recurso()
        _aplicar_datos(recurso, RecursoForm(self.data).validar())
        respuesta_error = _validar(recurso)
        if respuesta_error:
            return respuesta_error

        recurso.save()
        return JsonResponse(recurso_dict(recurso), status=201)


class RecursoDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(Recurso.objects.all(), 'Recurso no encontrado', pk=pk)

    def get(self, request, pk):
        return JsonResponse(recurso_dict(self.get_object(pk), detalle=True))

    def put(self, request, pk):
        recurso = self.get_object(pk)
        _aplicar_datos(recurso, RecursoForm(self.data).validar())
        respuesta_error = _validar(recurso)
        if respuesta_error:
            return respuesta_error

        recurso.save()
        return JsonResponse(recurso_dict(recurso))

    def delete(self, request, pk):
        recurso = self.get_object(pk)
        recurso.delete()
        return JsonResponse({'message': 'Recurso eliminado correctamente'})


# ============================================================================
# DOCUMENTOS DEL RECURSO
# ============================================================================

class RecursoDocumentoCreateView(JWTRequeridoMixin, ApiView):
    """Asigna una documentación a un recurso."""

    def post(self, request, pk):
        recurso = obtener_o_404(Recurso.objects.all(), 'Recurso no encontrado', pk=pk)
        form = RecursoDocumentacionForm(self.data)
        datos = form.validar()

        documentacion = Documentacion.objects.filter(
            pk=parse_int(self.data.get('documentacionId'), 0)
        ).first()
        if documentacion is None:
            return error('Documentación no válida')

        estado, respuesta_error = validar_estado(self.data)
        if respuesta_error:
            return respuesta_error

        if RecursoDocumentacion.objects.filter(recurso=recurso, documentacion=documentacion).exists():
            return error('La documentación ya está asignada a este recurso')

        fechas = obtener_fechas_para_asignacion(documentacion, form.fechas(datos))
        fechas.pop('es_universal')

        asignacion = RecursoDocumentacion(
            recurso=recurso,
            documentacion=documentacion,
            estado=estado,
            observaciones=datos.get('observaciones', ''),
            **fechas
        )
        asignacion.save()
        return JsonResponse(recurso_documentacion_dict(asignacion), status=201)


class RecursoDocumentoDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(
            RecursoDocumentacion.objects.select_related('recurso', 'documentacion', 'estado'),
            'Documento no encontrado',
            pk=pk
        )

    def put(self, request, pk):
        asignacion = self.get_object(pk)
        form = RecursoDocumentacionForm(self.data)
        datos = form.validar()

        if 'estadoId' in self.data:
            estado, respuesta_error = validar_estado(self.data)
            if respuesta_error:
                return respuesta_error
            asignacion.estado = estado

        if 'observaciones' in datos:
            asignacion.observaciones = datos['observaciones']

        # Los documentos universales conservan las fechas de su documentación
        if asignacion.documentacion.es_universal:
            fechas = obtener_fechas_para_asignacion(asignacion.documentacion)
            fechas.pop('es_universal')
        else:
            fechas = form.fechas(datos)
        for campo, valor in fechas.items():
            setattr(asignacion, campo, valor)

        asignacion.save()
        return JsonResponse(recurso_documentacion_dict(asignacion))

    def delete(self, request, pk):
        asignacion = self.get_object(pk)
        asignacion.delete()
        return JsonResponse({'message': 'Documento eliminado correctamente'})
