"""
Almacenamiento de archivos adjuntos.

Los archivos se guardan con el storage por defecto de Django (MEDIA_ROOT,
que apunta a UPLOAD_ROOT) en <tipo>/<id>/ con un nombre saneado y un sufijo
de timestamp. Cada subida del mismo nombre original sobre la misma
referencia incrementa la versión.
"""

import logging

from django.db import transaction
from django.http import Http404

from ..models import Documentacion, DocumentoArchivo, EntidadDocumentacion, RecursoDocumentacion
from ..validators import ArchivoValidator

logger = logging.getLogger(__name__)

# Tipo de referencia en la URL -> (modelo, campo FK en DocumentoArchivo, nombre para mensajes)
TIPOS_REFERENCIA = {
    'documentacion': (Documentacion, 'documentacion', 'Documentación'),
    'recurso-documentacion': (RecursoDocumentacion, 'recurso_documentacion', 'Documento de recurso'),
    'entidad-documentacion': (EntidadDocumentacion, 'entidad_documentacion', 'Documento de entidad'),
}


def obtener_referencia(tipo, pk):
    """Retorna (objeto, campo) de la referencia o lanza Http404."""
    if tipo not in TIPOS_REFERENCIA:
        raise Http404("Tipo de referencia no válido")
    modelo, campo, etiqueta = TIPOS_REFERENCIA[tipo]
    objeto = modelo.objects.filter(pk=pk).first()
    if objeto is None:
        raise Http404(f"{etiqueta} no encontrado/a")
    return objeto, campo


def archivos_de(tipo, pk):
    objeto, campo = obtener_referencia(tipo, pk)
    return DocumentoArchivo.objects.filter(**{campo: objeto}).order_by('filename', '-version')


def guardar_archivos(tipo, pk, archivos, usuario=None, descripcion=''):
    """
    Valida y guarda una lista de archivos subidos para una referencia.

    Todos los archivos se validan antes de escribir el primero; si alguno es
    inválido se lanza ValidationError y no se guarda ninguno.
    """
    objeto, campo = obtener_referencia(tipo, pk)

    validator = ArchivoValidator()
    mime_types = [validator(archivo) for archivo in archivos]

    guardados = []
    try:
        with transaction.atomic():
            for archivo, mime_type in zip(archivos, mime_types):
                version = DocumentoArchivo.objects.filter(
                    **{campo: objeto, 'filename': archivo.name}
                ).count() + 1

                nuevo = DocumentoArchivo(
                    filename=archivo.name,
                    archivo=archivo,
                    mime_type=mime_type,
                    size=archivo.size,
                    descripcion=descripcion or '',
                    version=version,
                    creado_por=usuario,
                    modificado_por=usuario,
                    **{campo: objeto}
                )
                nuevo.save()
                guardados.append(nuevo)
    except Exception:
        # La transacción no deshace lo escrito en el storage
        for guardado in guardados:
            guardado.archivo.delete(save=False)
        raise

    logger.info(
        "%d archivo(s) subido(s) a %s %s por %s",
        len(guardados), tipo, objeto.pk, usuario.username if usuario else 'sistema'
    )
    return guardados


def existe_archivo(archivo):
    return bool(archivo.archivo) and archivo.archivo.storage.exists(archivo.archivo.name)


def eliminar_archivo(archivo):
    """Elimina el registro y el archivo del storage (si existe)."""
    nombre = archivo.stored_filename
    archivo.archivo.delete(save=False)
    archivo.delete()
    logger.info("Archivo %s eliminado", nombre)
