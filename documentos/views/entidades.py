from django.db.models import Q
from django.http import JsonResponse

from ..forms import EntidadDocumentacionForm, EntidadForm, EntidadRecursoForm
from ..mixins import JWTRequeridoMixin
from ..models import Documentacion, Entidad, EntidadDocumentacion, EntidadRecurso, Recurso
from ..serializers import (
    entidad_dict,
    entidad_documentacion_dict,
    entidad_recurso_dict,
    estado_resumen,
)
from ..services.estado_service import (
    PREFETCH_ESTADO_ENTIDAD,
    estado_mas_critico_entidad,
    obtener_fechas_para_asignacion,
)
from .base import ApiView, error, obtener_o_404, paginar, parse_int
from .documentacion import validar_estado


def entidad_item(entidad):
    data = entidad_dict(entidad)
    data['estadoCritico'] = estado_resumen(estado_mas_critico_entidad(entidad))
    return data


def _aplicar_datos(entidad, datos):
    for campo, valor in datos.items():
        setattr(entidad, campo, valor)


def _validar(entidad):
    if not entidad.razon_social or not entidad.cuit:
        return error('Razón social y CUIT son obligatorios')
    if Entidad.objects.filter(cuit=entidad.cuit).exclude(pk=entidad.pk).exists():
        return error('Ya existe una entidad con ese CUIT')
    return None


class EntidadListView(JWTRequeridoMixin, ApiView):

    def get(self, request):
        entidades = Entidad.objects.prefetch_related(*PREFETCH_ESTADO_ENTIDAD).order_by('razon_social')

        search = request.GET.get('search', '').strip()
        if search:
            entidades = entidades.filter(
                Q(razon_social__icontains=search) |
                Q(cuit__icontains=search) |
                Q(localidad__icontains=search)
            )

        return JsonResponse(paginar(request, entidades, 'entidades', entidad_item))

    def post(self, request):
        entidad = Entidad()
        _aplicar_datos(entidad, EntidadForm(self.data).validar())
        respuesta_error = _validar(entidad)
        if respuesta_error:
            return respuesta_error

        entidad.save()
        return JsonResponse(entidad_dict(entidad), status=201)


class EntidadDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(Entidad.objects.all(), 'Entidad no encontrada', pk=pk)

    def get(self, request, pk):
        return JsonResponse(entidad_dict(self.get_object(pk), detalle=True))

    def put(self, request, pk):
        entidad = self.get_object(pk)
        _aplicar_datos(entidad, EntidadForm(self.data).validar())
        respuesta_error = _validar(entidad)
        if respuesta_error:
            return respuesta_error

        entidad.save()
        return JsonResponse(entidad_dict(entidad))

    def delete(self, request, pk):
        entidad = self.get_object(pk)
        entidad.delete()
        return JsonResponse({'message': 'Entidad eliminada correctamente'})


# ============================================================================
# DOCUMENTACIÓN DE LA ENTIDAD
# ============================================================================

def _aplicar_datos_documento(asignacion, data):
    form = EntidadDocumentacionForm(data)
    datos = form.validar()
    for campo in ('es_inhabilitante', 'enviar_por_mail', 'mail_destino'):
        if campo in datos:
            setattr(asignacion, campo, datos[campo])

    if asignacion.documentacion.es_universal:
        fechas = obtener_fechas_para_asignacion(asignacion.documentacion)
        fechas.pop('es_universal')
    else:
        fechas = form.fechas(datos)
    for campo, valor in fechas.items():
        setattr(asignacion, campo, valor)


class EntidadDocumentacionCreateView(JWTRequeridoMixin, ApiView):
    """Asigna una documentación requerida a una entidad."""

    def post(self, request, pk):
        entidad = obtener_o_404(Entidad.objects.all(), 'Entidad no encontrada', pk=pk)

        documentacion = Documentacion.objects.filter(
            pk=parse_int(self.data.get('documentacionId'), 0)
        ).first()
        if documentacion is None:
            return error('Documentación no válida')

        estado, respuesta_error = validar_estado(self.data)
        if respuesta_error:
            return respuesta_error

        if EntidadDocumentacion.objects.filter(entidad=entidad, documentacion=documentacion).exists():
            return error('La documentación ya está asignada a esta entidad')

        asignacion = EntidadDocumentacion(entidad=entidad, documentacion=documentacion, estado=estado)
        _aplicar_datos_documento(asignacion, self.data)
        asignacion.save()
        return JsonResponse(entidad_documentacion_dict(asignacion), status=201)


class EntidadDocumentacionDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(
            EntidadDocumentacion.objects.select_related('entidad', 'documentacion', 'estado'),
            'Documento de entidad no encontrado',
            pk=pk
        )

    def put(self, request, pk):
        asignacion = self.get_object(pk)

        if 'estadoId' in self.data:
            estado, respuesta_error = validar_estado(self.data)
            if respuesta_error:
                return respuesta_error
            asignacion.estado = estado

        _aplicar_datos_documento(asignacion, self.data)
        asignacion.save()
        return JsonResponse(entidad_documentacion_dict(asignacion))

    def delete(self, request, pk):
        asignacion = self.get_object(pk)
        asignacion.delete()
        return JsonResponse({'message': 'Documentación desasignada correctamente'})


# ============================================================================
# RECURSOS DE LA ENTIDAD
# ============================================================================

def _aplicar_datos_recurso(asignacion, datos):
    # Sin fecha de inicio se conserva la actual
    if not datos.get('fecha_inicio'):
        datos.pop('fecha_inicio', None)
    for campo, valor in datos.items():
        setattr(asignacion, campo, valor)


class EntidadRecursoCreateView(JWTRequeridoMixin, ApiView):
    """Asigna un recurso a una entidad."""

    def post(self, request, pk):
        entidad = obtener_o_404(Entidad.objects.all(), 'Entidad no encontrada', pk=pk)
        datos = EntidadRecursoForm(self.data).validar()

        recurso = Recurso.objects.filter(pk=parse_int(self.data.get('recursoId'), 0)).first()
        if recurso is None:
            return error('Recurso no válido')

        if EntidadRecurso.objects.filter(entidad=entidad, recurso=recurso, activo=True).exists():
            return error('El recurso ya está asignado a esta entidad')

        asignacion = EntidadRecurso(entidad=entidad, recurso=recurso)
        _aplicar_datos_recurso(asignacion, datos)
        asignacion.save()
        return JsonResponse(entidad_recurso_dict(asignacion), status=201)


class EntidadRecursoDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(
            EntidadRecurso.objects.select_related('entidad', 'recurso'),
            'Asignación no encontrada',
            pk=pk
        )

    def put(self, request, pk):
        asignacion = self.get_object(pk)
        _aplicar_datos_recurso(asignacion, EntidadRecursoForm(self.data).validar())
        asignacion.save()
        return JsonResponse(entidad_recurso_dict(asignacion))

    def delete(self, request, pk):
        asignacion = self.get_object(pk)
        asignacion.delete()
        return JsonResponse({'message': 'Recurso desasignado correctamente'})
