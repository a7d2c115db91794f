import os
import re
import secrets
import time
from datetime import timedelta

from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from django.core.exceptions import ValidationError
from django.contrib.auth.models import User
from django.utils import timezone


# ============================================================================
# MODELOS BASE
# ============================================================================

class ModeloAuditado(models.Model):
    """Columnas de auditoría comunes a todos los modelos de negocio."""

    creado_por = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_creados'
    )
    modificado_por = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_modificados'
    )
    creado_en = models.DateTimeField(auto_now_add=True)
    modificado_en = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class FechasDocumentoMixin(models.Model):
    """
    Fechas de emisión, tramitación y vencimiento de un documento.

    La fecha de vencimiento se calcula a partir de la emisión y los días de
    vigencia cuando no se informa, y se recalcula si cambia la emisión.
    """

    fecha_emision = models.DateField(null=True, blank=True)
    fecha_tramitacion = models.DateField(null=True, blank=True)
    fecha_vencimiento = models.DateField(null=True, blank=True)

    class Meta:
        abstract = True

    def _fechas_guardadas(self):
        """Retorna (emision, vencimiento) tal como están en la base de datos."""
        if not self.pk:
            return None, None
        fila = type(self).objects.filter(pk=self.pk).values_list(
            'fecha_emision', 'fecha_vencimiento'
        ).first()
        return fila if fila else (None, None)

    def aplicar_vencimiento(self, dias_vigencia):
        """Completa o recalcula fecha_vencimiento según la fecha de emisión."""
        if not self.fecha_emision or not dias_vigencia:
            return
        emision_anterior, vencimiento_anterior = self._fechas_guardadas()
        cambio_emision = self.pk and emision_anterior != self.fecha_emision
        vencimiento_manual = self.pk and vencimiento_anterior != self.fecha_vencimiento
        if not self.fecha_vencimiento or (cambio_emision and not vencimiento_manual):
            self.fecha_vencimiento = self.fecha_emision + timedelta(days=dias_vigencia)

    def validar_fechas(self):
        if self.fecha_emision and self.fecha_vencimiento and self.fecha_vencimiento < self.fecha_emision:
            raise ValidationError({
                'fecha_vencimiento': 'La fecha de vencimiento no puede ser anterior a la fecha de emisión'
            })

    @property
    def dias_para_vencer(self):
        """Días restantes hasta el vencimiento (negativo si ya venció)."""
        if not self.fecha_vencimiento:
            return None
        return (self.fecha_vencimiento - timezone.localdate()).days


# ============================================================================
# CONFIGURACIÓN
# ============================================================================

class Estado(ModeloAuditado):
    """Estado de un documento (vigente, por vencer, vencido, etc.)."""

    EN_TRAMITE = 'EN_TRAMITE'
    VIGENTE = 'VIGENTE'
    POR_VENCER = 'POR_VENCER'
    VENCIDO = 'VENCIDO'

    nombre = models.CharField(max_length=100, unique=True)
    codigo = models.CharField(max_length=20, unique=True, null=True, blank=True)
    color = models.CharField(
        max_length=7,
        validators=[RegexValidator(r'^#[0-9A-Fa-f]{6}$', 'El color debe tener el formato #RRGGBB')]
    )
    nivel = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Prioridad: a mayor nivel, más crítico"
    )
    descripcion = models.TextField(blank=True)

    class Meta:
        verbose_name = "Estado"
        verbose_name_plural = "Estados"
        ordering = ['nombre']

    def clean(self):
        if self.codigo:
            self.codigo = self.codigo.strip().upper()
        else:
            self.codigo = None

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.nombre


# ============================================================================
# DOCUMENTACIÓN
# ============================================================================

class Documentacion(FechasDocumentoMixin, ModeloAuditado):
    """Tipo de documento requerido, con su vigencia y días de anticipación."""

    codigo = models.CharField(max_length=50, unique=True)
    descripcion = models.CharField(max_length=255)
    dias_vigencia = models.PositiveIntegerField(default=365, validators=[MinValueValidator(1)])
    dias_anticipacion = models.PositiveIntegerField(default=30)
    es_obligatorio = models.BooleanField(default=False)
    es_universal = models.BooleanField(
        default=False,
        help_text="Las asignaciones toman las fechas de este documento"
    )
    estado_vencimiento = models.ForeignKey(
        Estado,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='documentaciones_vencimiento'
    )
    estado = models.ForeignKey(
        Estado,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='documentaciones'
    )

    class Meta:
        verbose_name = "Documentación"
        verbose_name_plural = "Documentación"
        ordering = ['codigo']

    def clean(self):
        if self.codigo:
            self.codigo = self.codigo.strip()
        self.validar_fechas()

    def save(self, *args, **kwargs):
        self.aplicar_vencimiento(self.dias_vigencia)
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.codigo} - {self.descripcion}"


# ============================================================================
# RECURSOS Y ENTIDADES
# ============================================================================

class Recurso(ModeloAuditado):
    """Persona a la que se le asignan documentos."""

    codigo = models.CharField(max_length=50, unique=True)
    apellido = models.CharField(max_length=100)
    nombre = models.CharField(max_length=100)
    telefono = models.CharField(max_length=50, blank=True)
    cuil = models.CharField(max_length=20, blank=True)
    direccion = models.CharField(max_length=255, blank=True)
    localidad = models.CharField(max_length=100, blank=True)
    fecha_alta = models.DateField(default=timezone.localdate)
    fecha_baja = models.DateField(null=True, blank=True)

    class Meta:
        verbose_name = "Recurso"
        verbose_name_plural = "Recursos"
        ordering = ['apellido', 'nombre']

    def clean(self):
        if self.fecha_baja and self.fecha_alta and self.fecha_baja < self.fecha_alta:
            raise ValidationError({
                'fecha_baja': 'La fecha de baja no puede ser anterior a la fecha de alta'
            })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def activo(self):
        """Un recurso está activo mientras no tenga fecha de baja."""
        return self.fecha_baja is None

    @property
    def nombre_completo(self):
        return f"{self.apellido}, {self.nombre}"

    def __str__(self):
        return f"{self.codigo} - {self.nombre_completo}"


class Entidad(ModeloAuditado):
    """Organización a la que se le asignan documentos y recursos."""

    razon_social = models.CharField(max_length=200)
    cuit = models.CharField(max_length=20, unique=True)
    domicilio = models.CharField(max_length=255, blank=True)
    telefono = models.CharField(max_length=50, blank=True)
    localidad = models.CharField(max_length=100, blank=True)
    url_plataforma_documentacion = models.URLField(max_length=500, blank=True)

    class Meta:
        verbose_name = "Entidad"
        verbose_name_plural = "Entidades"
        ordering = ['razon_social']

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.razon_social} ({self.cuit})"


# ============================================================================
# ASIGNACIONES
# ============================================================================

class RecursoDocumentacion(FechasDocumentoMixin, ModeloAuditado):
    """Documento asignado a un recurso."""

    recurso = models.ForeignKey(Recurso, on_delete=models.CASCADE, related_name='documentos')
    documentacion = models.ForeignKey(
        Documentacion,
        on_delete=models.CASCADE,
        related_name='asignaciones_recurso'
    )
    estado = models.ForeignKey(
        Estado,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='recursos_documentacion'
    )
    observaciones = models.TextField(blank=True)

    class Meta:
        verbose_name = "Documento de Recurso"
        verbose_name_plural = "Documentos de Recursos"
        ordering = ['fecha_vencimiento']
        unique_together = ['recurso', 'documentacion']

    def clean(self):
        self.validar_fechas()

    def save(self, *args, **kwargs):
        if self.documentacion_id:
            self.aplicar_vencimiento(self.documentacion.dias_vigencia)
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.recurso.nombre_completo} - {self.documentacion.codigo}"


class EntidadDocumentacion(FechasDocumentoMixin, ModeloAuditado):
    """Documento requerido por una entidad."""

    entidad = models.ForeignKey(Entidad, on_delete=models.CASCADE, related_name='documentos')
    documentacion = models.ForeignKey(
        Documentacion,
        on_delete=models.CASCADE,
        related_name='asignaciones_entidad'
    )
    es_inhabilitante = models.BooleanField(default=False)
    enviar_por_mail = models.BooleanField(default=False)
    mail_destino = models.EmailField(blank=True)
    estado = models.ForeignKey(
        Estado,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='entidades_documentacion'
    )

    class Meta:
        verbose_name = "Documento de Entidad"
        verbose_name_plural = "Documentos de Entidades"
        ordering = ['fecha_vencimiento']
        unique_together = ['entidad', 'documentacion']

    def clean(self):
        self.validar_fechas()
        if self.enviar_por_mail and not self.mail_destino:
            raise ValidationError({
                'mail_destino': 'Debe indicar un mail de destino para el envío por mail'
            })

    def save(self, *args, **kwargs):
        if self.documentacion_id:
            self.aplicar_vencimiento(self.documentacion.dias_vigencia)
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.entidad.razon_social} - {self.documentacion.codigo}"


class EntidadRecurso(ModeloAuditado):
    """Recurso asignado a una entidad durante un período."""

    entidad = models.ForeignKey(Entidad, on_delete=models.CASCADE, related_name='recursos')
    recurso = models.ForeignKey(Recurso, on_delete=models.CASCADE, related_name='entidades')
    fecha_inicio = models.DateField(default=timezone.localdate)
    fecha_fin = models.DateField(null=True, blank=True)
    activo = models.BooleanField(default=True)
    observaciones = models.TextField(blank=True)

    class Meta:
        verbose_name = "Recurso de Entidad"
        verbose_name_plural = "Recursos de Entidades"
        ordering = ['-fecha_inicio']

    def clean(self):
        if self.fecha_fin and self.fecha_inicio and self.fecha_fin < self.fecha_inicio:
            raise ValidationError({
                'fecha_fin': 'La fecha de fin no puede ser anterior a la fecha de inicio'
            })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.entidad.razon_social} - {self.recurso.nombre_completo}"


# ============================================================================
# ARCHIVOS
# ============================================================================

def sanitizar_nombre(filename):
    """
    Nombre base apto para disco: solo letras, números, guiones y guiones
    bajos, espacios convertidos a '_' y como máximo 50 caracteres.
    """
    base = os.path.splitext(os.path.basename(filename))[0]
    base = re.sub(r'[^A-Za-z0-9\-_ ]', '', base)
    base = base.replace(' ', '_')[:50]
    return base or 'archivo'


def ruta_archivo(instance, filename):
    """<tipo>/<id>/<nombre saneado>_<timestamp ms><ext> dentro de UPLOAD_ROOT."""
    tipo, pk = instance.referencia
    ext = os.path.splitext(filename)[1].lower()
    return f"{tipo}/{pk}/{sanitizar_nombre(filename)}_{int(time.time() * 1000)}{ext}"


class DocumentoArchivo(ModeloAuditado):
    """Archivo adjunto a una documentación o a una asignación."""

    filename = models.CharField(max_length=255, help_text="Nombre original del archivo")
    archivo = models.FileField(upload_to=ruta_archivo, max_length=500)
    mime_type = models.CharField(max_length=100)
    size = models.PositiveIntegerField()
    descripcion = models.TextField(blank=True)
    version = models.PositiveIntegerField(default=1)
    documentacion = models.ForeignKey(
        Documentacion,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='archivos'
    )
    recurso_documentacion = models.ForeignKey(
        RecursoDocumentacion,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='archivos'
    )
    entidad_documentacion = models.ForeignKey(
        EntidadDocumentacion,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='archivos'
    )

    class Meta:
        verbose_name = "Archivo"
        verbose_name_plural = "Archivos"
        ordering = ['filename', '-version']

    def clean(self):
        referencias = [self.documentacion_id, self.recurso_documentacion_id, self.entidad_documentacion_id]
        if len([r for r in referencias if r is not None]) != 1:
            raise ValidationError(
                'Debe especificar exactamente una referencia: documentación, '
                'documento de recurso o documento de entidad'
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def referencia(self):
        """(tipo, id) de la referencia, con el tipo tal como aparece en la URL."""
        if self.documentacion_id:
            return 'documentacion', self.documentacion_id
        if self.recurso_documentacion_id:
            return 'recurso-documentacion', self.recurso_documentacion_id
        return 'entidad-documentacion', self.entidad_documentacion_id

    @property
    def stored_filename(self):
        return os.path.basename(self.archivo.name)

    def __str__(self):
        return f"{self.filename} (v{self.version})"


# ============================================================================
# AUDITORÍA DE ESTADOS
# ============================================================================

class EstadoDocumentoLog(models.Model):
    """Registro de cada cambio de estado de un documento."""

    TIPOS_DOCUMENTO = [
        ('recurso', 'Recurso'),
        ('entidad', 'Entidad'),
        ('universal', 'Universal'),
    ]

    TIPOS_ACTUALIZACION = [
        ('manual', 'Manual'),
        ('automatica', 'Automática'),
    ]

    tipo_documento = models.CharField(max_length=20, choices=TIPOS_DOCUMENTO)
    documentacion = models.ForeignKey(
        Documentacion, on_delete=models.SET_NULL, null=True, related_name='logs_estado'
    )
    recurso = models.ForeignKey(
        Recurso, on_delete=models.SET_NULL, null=True, blank=True, related_name='logs_estado'
    )
    entidad = models.ForeignKey(
        Entidad, on_delete=models.SET_NULL, null=True, blank=True, related_name='logs_estado'
    )
    estado_anterior = models.ForeignKey(
        Estado, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    estado_nuevo = models.ForeignKey(
        Estado, on_delete=models.SET_NULL, null=True, related_name='+'
    )
    razon = models.CharField(max_length=255)
    usuario = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    tipo_actualizacion = models.CharField(max_length=20, choices=TIPOS_ACTUALIZACION, default='automatica')
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Log de Estado"
        verbose_name_plural = "Logs de Estados"
        ordering = ['-creado_en']
        indexes = [
            models.Index(fields=['tipo_documento', '-creado_en'], name='doc_log_tipo_fecha_idx'),
        ]

    def __str__(self):
        return f"{self.get_tipo_documento_display()}: {self.estado_anterior} → {self.estado_nuevo}"


class ActualizacionEstados(models.Model):
    """Resultado de una ejecución del proceso de actualización de estados."""

    ejecutado_en = models.DateTimeField(auto_now_add=True)
    tipo_actualizacion = models.CharField(
        max_length=20,
        choices=EstadoDocumentoLog.TIPOS_ACTUALIZACION,
        default='automatica'
    )
    usuario = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    total_revisados = models.PositiveIntegerField(default=0)
    actualizados = models.PositiveIntegerField(default=0)
    errores = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Actualización de Estados"
        verbose_name_plural = "Actualizaciones de Estados"
        ordering = ['-ejecutado_en']
        get_latest_by = 'ejecutado_en'

    def __str__(self):
        return f"{self.ejecutado_en:%d/%m/%Y %H:%M} ({self.actualizados} actualizados)"


# ============================================================================
# RECUPERACIÓN DE CONTRASEÑA
# ============================================================================

class PasswordResetToken(models.Model):
    """Token de un solo uso para restablecer la contraseña."""

    VALIDEZ = timedelta(hours=1)

    token = models.CharField(max_length=64, unique=True)
    usuario = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reset_tokens')
    expira_en = models.DateTimeField()
    usado = models.BooleanField(default=False)
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Token de Recuperación"
        verbose_name_plural = "Tokens de Recuperación"
        ordering = ['-creado_en']

    @classmethod
    def generar(cls, usuario):
        """Invalida los tokens vigentes del usuario y crea uno nuevo."""
        cls.objects.filter(
            usuario=usuario, usado=False, expira_en__gt=timezone.now()
        ).update(usado=True)
        return cls.objects.create(
            token=secrets.token_hex(32),
            usuario=usuario,
            expira_en=timezone.now() + cls.VALIDEZ,
        )

    @property
    def expirado(self):
        return self.expira_en < timezone.now()

    def __str__(self):
        return f"Token de {self.usuario.username} ({'usado' if self.usado else 'activo'})"
