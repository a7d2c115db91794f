from django.contrib import admin
from django.utils.html import format_html

from .models import (
    ActualizacionEstados,
    Documentacion,
    DocumentoArchivo,
    Entidad,
    EntidadDocumentacion,
    EntidadRecurso,
    Estado,
    EstadoDocumentoLog,
    PasswordResetToken,
    Recurso,
    RecursoDocumentacion,
)

CAMPOS_AUDITORIA = ('creado_por', 'creado_en', 'modificado_por', 'modificado_en')


class AuditadoAdmin(admin.ModelAdmin):
    """Muestra las columnas de auditoría como solo lectura."""
    readonly_fields = CAMPOS_AUDITORIA


# ============================================================================
# CONFIGURACIÓN
# ============================================================================

@admin.register(Estado)
class EstadoAdmin(AuditadoAdmin):
    list_display = ('nombre', 'codigo', 'color_muestra', 'nivel')
    search_fields = ('nombre', 'codigo')
    ordering = ('nivel', 'nombre')

    def color_muestra(self, obj):
        return format_html(
            '<span style="background:{};padding:2px 12px;border-radius:4px;">&nbsp;</span> {}',
            obj.color, obj.color
        )
    color_muestra.short_description = 'Color'


# ============================================================================
# DOCUMENTACIÓN
# ============================================================================

class RecursoDocumentacionInline(admin.TabularInline):
    model = RecursoDocumentacion
    extra = 0
    fields = ('documentacion', 'fecha_emision', 'fecha_vencimiento', 'estado')
    autocomplete_fields = ('documentacion',)
    show_change_link = True


class EntidadDocumentacionInline(admin.TabularInline):
    model = EntidadDocumentacion
    extra = 0
    fields = ('documentacion', 'es_inhabilitante', 'fecha_vencimiento', 'estado')
    autocomplete_fields = ('documentacion',)
    show_change_link = True


@admin.register(Documentacion)
class DocumentacionAdmin(AuditadoAdmin):
    list_display = (
        'codigo', 'descripcion', 'dias_vigencia', 'dias_anticipacion',
        'es_obligatorio', 'es_universal', 'fecha_vencimiento', 'estado'
    )
    list_filter = ('es_obligatorio', 'es_universal', 'estado')
    search_fields = ('codigo', 'descripcion')
    ordering = ('codigo',)

    fieldsets = (
        ('Documento', {
            'fields': ('codigo', 'descripcion', 'es_obligatorio', 'es_universal')
        }),
        ('Vigencia', {
            'fields': ('dias_vigencia', 'dias_anticipacion', 'estado', 'estado_vencimiento')
        }),
        ('Fechas (documentos universales)', {
            'fields': ('fecha_emision', 'fecha_tramitacion', 'fecha_vencimiento'),
            'classes': ('collapse',)
        }),
        ('Auditoría', {
            'fields': CAMPOS_AUDITORIA,
            'classes': ('collapse',)
        }),
    )


# ============================================================================
# RECURSOS Y ENTIDADES
# ============================================================================

class RecursoEntidadesInline(admin.TabularInline):
    """Entidades a las que está asignado un recurso."""
    model = EntidadRecurso
    extra = 0
    fields = ('entidad', 'fecha_inicio', 'fecha_fin', 'activo')
    autocomplete_fields = ('entidad',)


class EntidadRecursosInline(admin.TabularInline):
    model = EntidadRecurso
    extra = 0
    fields = ('recurso', 'fecha_inicio', 'fecha_fin', 'activo')
    autocomplete_fields = ('recurso',)


@admin.register(Recurso)
class RecursoAdmin(AuditadoAdmin):
    list_display = ('codigo', 'apellido', 'nombre', 'cuil', 'localidad', 'fecha_alta', 'activo', 'total_documentos')
    list_filter = ('localidad',)
    search_fields = ('codigo', 'apellido', 'nombre', 'cuil')
    ordering = ('apellido', 'nombre')
    inlines = (RecursoDocumentacionInline, RecursoEntidadesInline)

    def activo(self, obj):
        return obj.activo
    activo.boolean = True
    activo.short_description = 'Activo'

    def total_documentos(self, obj):
        return obj.documentos.count()
    total_documentos.short_description = 'Documentos'


@admin.register(Entidad)
class EntidadAdmin(AuditadoAdmin):
    list_display = ('razon_social', 'cuit', 'localidad', 'telefono', 'total_recursos')
    search_fields = ('razon_social', 'cuit', 'localidad')
    ordering = ('razon_social',)
    inlines = (EntidadDocumentacionInline, EntidadRecursosInline)

    def total_recursos(self, obj):
        return obj.recursos.filter(activo=True).count()
    total_recursos.short_description = 'Recursos activos'


# ============================================================================
# ASIGNACIONES Y ARCHIVOS
# ============================================================================

@admin.register(RecursoDocumentacion)
class RecursoDocumentacionAdmin(AuditadoAdmin):
    list_display = ('recurso', 'documentacion', 'fecha_emision', 'fecha_vencimiento', 'estado')
    list_filter = ('estado', 'documentacion')
    search_fields = ('recurso__apellido', 'recurso__nombre', 'recurso__codigo', 'documentacion__codigo')
    autocomplete_fields = ('recurso', 'documentacion')
    date_hierarchy = 'fecha_vencimiento'


@admin.register(EntidadDocumentacion)
class EntidadDocumentacionAdmin(AuditadoAdmin):
    list_display = ('entidad', 'documentacion', 'es_inhabilitante', 'enviar_por_mail', 'fecha_vencimiento', 'estado')
    list_filter = ('estado', 'es_inhabilitante', 'enviar_por_mail')
    search_fields = ('entidad__razon_social', 'entidad__cuit', 'documentacion__codigo')
    autocomplete_fields = ('entidad', 'documentacion')


@admin.register(EntidadRecurso)
class EntidadRecursoAdmin(AuditadoAdmin):
    list_display = ('entidad', 'recurso', 'fecha_inicio', 'fecha_fin', 'activo')
    list_filter = ('activo', 'entidad')
    search_fields = ('entidad__razon_social', 'recurso__apellido', 'recurso__nombre')
    autocomplete_fields = ('entidad', 'recurso')


@admin.register(DocumentoArchivo)
class DocumentoArchivoAdmin(AuditadoAdmin):
    list_display = ('filename', 'version', 'mime_type', 'size', 'creado_por', 'creado_en')
    list_filter = ('mime_type',)
    search_fields = ('filename', 'archivo', 'descripcion')
    readonly_fields = CAMPOS_AUDITORIA + ('archivo', 'stored_filename', 'mime_type', 'size', 'version')


# ============================================================================
# AUDITORÍA
# ============================================================================

@admin.register(EstadoDocumentoLog)
class EstadoDocumentoLogAdmin(admin.ModelAdmin):
    list_display = ('creado_en', 'tipo_documento', 'documentacion', 'recurso', 'estado_anterior',
                    'estado_nuevo', 'tipo_actualizacion', 'usuario')
    list_filter = ('tipo_documento', 'tipo_actualizacion', 'estado_nuevo')
    search_fields = ('razon', 'documentacion__codigo', 'recurso__apellido')
    date_hierarchy = 'creado_en'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(ActualizacionEstados)
class ActualizacionEstadosAdmin(admin.ModelAdmin):
    list_display = ('ejecutado_en', 'tipo_actualizacion', 'usuario', 'total_revisados', 'actualizados', 'errores')
    list_filter = ('tipo_actualizacion',)

    def has_add_permission(self, request):
        return False


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
    list_display = ('usuario', 'creado_en', 'expira_en', 'usado')
    list_filter = ('usado',)
    search_fields = ('usuario__username', 'usuario__email')
    readonly_fields = ('token', 'usuario', 'expira_en', 'creado_en')
