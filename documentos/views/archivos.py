from django.conf import settings
from django.http import FileResponse, Http404, JsonResponse

from ..mixins import JWTRequeridoMixin
from ..models import DocumentoArchivo
from ..ratelimit import RateLimitMixin
from ..serializers import archivo_dict
from ..services import archivo_service
from .base import ApiView, error, obtener_o_404, texto


class ArchivoUploadView(RateLimitMixin, JWTRequeridoMixin, ApiView):
    """Subida de uno o varios archivos (campo multipart 'files')."""
    ratelimit_key = 'upload'
    ratelimit_method = 'POST'

    def post(self, request, tipo, pk):
        archivos = request.FILES.getlist('files')
        if not archivos:
            return error('No se proporcionaron archivos')

        maximo = getattr(settings, 'MAX_ARCHIVOS_POR_SUBIDA', 20)
        if len(archivos) > maximo:
            return error(f'Se pueden subir como máximo {maximo} archivos por vez')

        guardados = archivo_service.guardar_archivos(
            tipo, pk, archivos,
            usuario=request.user,
            descripcion=texto(self.data, 'descripcion'),
        )
        return JsonResponse({
            'message': f'{len(guardados)} archivo(s) subido(s) correctamente',
            'archivos': [archivo_dict(a) for a in guardados],
        }, status=201)


class ArchivoListView(JWTRequeridoMixin, ApiView):

    def get(self, request, tipo, pk):
        archivos = archivo_service.archivos_de(tipo, pk)
        return JsonResponse([archivo_dict(a) for a in archivos], safe=False)


class ArchivoDownloadView(JWTRequeridoMixin, ApiView):

    def get(self, request, pk):
        archivo = obtener_o_404(DocumentoArchivo.objects.all(), 'Archivo no encontrado', pk=pk)
        if not archivo_service.existe_archivo(archivo):
            raise Http404('Archivo físico no encontrado')

        return FileResponse(
            archivo.archivo.open('rb'),
            as_attachment=True,
            filename=archivo.filename,
            content_type=archivo.mime_type,
        )


class ArchivoDetailView(JWTRequeridoMixin, ApiView):

    def delete(self, request, pk):
        archivo = obtener_o_404(DocumentoArchivo.objects.all(), 'Archivo no encontrado', pk=pk)
        archivo_service.eliminar_archivo(archivo)
        return JsonResponse({'message': 'Archivo eliminado correctamente'})
