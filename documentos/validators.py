"""
Validadores para archivos adjuntos de documentos.

Verifica extensión, tipo MIME real (python-magic) y tamaño de cada archivo
subido antes de guardarlo en disco.
"""

import os

import magic
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.deconstruct import deconstructible


# Extensiones permitidas para archivos de documentos
ALLOWED_ARCHIVO_EXTENSIONS = ['pdf', 'jpg', 'jpeg', 'png', 'doc', 'docx', 'xls', 'xlsx']

# Tipos MIME permitidos
ALLOWED_ARCHIVO_MIME_TYPES = [
    'application/pdf',
    'image/jpeg',
    'image/jpg',
    'image/png',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    # libmagic reporta los formatos Office sin metadatos como contenedores genéricos
    'application/zip',
    'application/x-ole-storage',
    'application/CDFV2',
]

# Tamaño máximo por archivo: 10MB
MAX_ARCHIVO_SIZE = 10 * 1024 * 1024


@deconstructible
class ArchivoValidator:
    """
    Validador completo para archivos de documentos:
    - Extensión del archivo
    - Tamaño máximo
    - Tipo MIME real (usando python-magic)
    """

    def __init__(self, allowed_extensions=None, allowed_mime_types=None, max_size=None):
        self.allowed_extensions = allowed_extensions or ALLOWED_ARCHIVO_EXTENSIONS
        self.allowed_mime_types = allowed_mime_types or ALLOWED_ARCHIVO_MIME_TYPES
        self.max_size = max_size or getattr(settings, 'MAX_ARCHIVO_SIZE', MAX_ARCHIVO_SIZE)

    def __call__(self, value):
        if not value:
            return
        self._validate_extension(value)
        self._validate_size(value)
        return self._validate_mime_type(value)

    def _validate_extension(self, value):
        ext = os.path.splitext(value.name)[1].lower().lstrip('.')
        if ext not in self.allowed_extensions:
            raise ValidationError(
                f'Extensión de archivo no permitida: .{ext}. '
                f'Tipos permitidos: {", ".join(e.upper() for e in self.allowed_extensions)}'
            )

    def _validate_size(self, value):
        if value.size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            file_mb = value.size / (1024 * 1024)
            raise ValidationError(
                f'El archivo {value.name} es demasiado grande ({file_mb:.1f}MB). '
                f'Tamaño máximo permitido: {max_mb:.0f}MB'
            )

    def _validate_mime_type(self, value):
        """Detecta el tipo real a partir del contenido, no del nombre."""
        contenido = value.read(2048)
        value.seek(0)

        mime = magic.from_buffer(contenido, mime=True)
        if mime not in self.allowed_mime_types:
            raise ValidationError(
                f'Tipo de archivo no permitido: {mime}. '
                f'Tipos permitidos: PDF, JPG, PNG, DOC, DOCX, XLS, XLSX'
            )
        return mime

    def __eq__(self, other):
        return (
            isinstance(other, ArchivoValidator) and
            self.allowed_extensions == other.allowed_extensions and
            self.allowed_mime_types == other.allowed_mime_types and
            self.max_size == other.max_size
        )
