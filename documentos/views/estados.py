from django.db.models import ProtectedError
from django.http import JsonResponse

from ..forms import EstadoForm
from ..mixins import JWTRequeridoMixin
from ..models import Estado
from ..serializers import estado_dict
from .base import ApiView, error, obtener_o_404


def _aplicar_datos(estado, datos):
    for campo, valor in datos.items():
        setattr(estado, campo, valor)
    if estado.codigo:
        estado.codigo = estado.codigo.upper()
    else:
        estado.codigo = None


def _duplicado(estado):
    existentes = Estado.objects.exclude(pk=estado.pk)
    if existentes.filter(nombre__iexact=estado.nombre).exists():
        return error('Ya existe un estado con ese nombre')
    if estado.codigo and existentes.filter(codigo__iexact=estado.codigo).exists():
        return error('Ya existe un estado con ese código')
    return None


class EstadoListView(JWTRequeridoMixin, ApiView):
    """Listado (sin paginar) y alta de estados."""

    def get(self, request):
        estados = Estado.objects.order_by('nombre')
        return JsonResponse([estado_dict(e) for e in estados], safe=False)

    def post(self, request):
        datos = EstadoForm(self.data).validar()
        if not datos.get('nombre') or not datos.get('color'):
            return error('Nombre y color son obligatorios')

        estado = Estado(nivel=1)
        _aplicar_datos(estado, datos)

        duplicado = _duplicado(estado)
        if duplicado:
            return duplicado

        estado.save()
        return JsonResponse(estado_dict(estado), status=201)


class EstadoDetailView(JWTRequeridoMixin, ApiView):

    def get_object(self, pk):
        return obtener_o_404(Estado.objects.all(), 'Estado no encontrado', pk=pk)

    def get(self, request, pk):
        return JsonResponse(estado_dict(self.get_object(pk)))

    def put(self, request, pk):
        estado = self.get_object(pk)
        _aplicar_datos(estado, EstadoForm(self.data).validar())

        duplicado = _duplicado(estado)
        if duplicado:
            return duplicado

        estado.save()
        return JsonResponse(estado_dict(estado))

    def delete(self, request, pk):
        estado = self.get_object(pk)
        try:
            estado.delete()
        except ProtectedError:
            return error('No se puede eliminar el estado porque está en uso')
        return JsonResponse({'message': 'Estado eliminado correctamente'})
