"""
Conversión de modelos a diccionarios para las respuestas JSON de la API.

Las claves se exponen en camelCase, que es el formato que consume el cliente.
"""


def fecha(valor):
    """Serializa una fecha o fecha-hora en ISO 8601."""
    return valor.isoformat() if valor else None


def _auditoria(obj):
    return {
        'creadoPor': obj.creado_por_id,
        'modificadoPor': obj.modificado_por_id,
        'createdAt': fecha(obj.creado_en),
        'updatedAt': fecha(obj.modificado_en),
    }


def _fechas(obj):
    return {
        'fechaEmision': fecha(obj.fecha_emision),
        'fechaTramitacion': fecha(obj.fecha_tramitacion),
        'fechaVencimiento': fecha(obj.fecha_vencimiento),
    }


# ============================================================================
# USUARIOS Y ESTADOS
# ============================================================================

def usuario_dict(usuario):
    """Datos públicos de un usuario (nunca incluye la contraseña)."""
    return {
        'id': usuario.pk,
        'username': usuario.username,
        'email': usuario.email,
        'nombre': usuario.first_name,
        'apellido': usuario.last_name,
        'activo': usuario.is_active,
        'esAdmin': usuario.is_staff,
        'createdAt': fecha(usuario.date_joined),
        'lastLogin': fecha(usuario.last_login),
    }


def estado_resumen(estado):
    if estado is None:
        return None
    return {
        'id': estado.pk,
        'nombre': estado.nombre,
        'codigo': estado.codigo,
        'color': estado.color,
        'nivel': estado.nivel,
    }


def estado_dict(estado):
    data = estado_resumen(estado)
    data['descripcion'] = estado.descripcion
    data.update(_auditoria(estado))
    return data


# ============================================================================
# DOCUMENTACIÓN, RECURSOS Y ENTIDADES
# ============================================================================

def documentacion_resumen(doc):
    return {
        'id': doc.pk,
        'codigo': doc.codigo,
        'descripcion': doc.descripcion,
        'diasVigencia': doc.dias_vigencia,
        'diasAnticipacion': doc.dias_anticipacion,
        'esObligatorio': doc.es_obligatorio,
        'esUniversal': doc.es_universal,
    }


def documentacion_dict(doc, detalle=False):
    data = documentacion_resumen(doc)
    data.update(_fechas(doc))
    data.update({
        'estadoId': doc.estado_id,
        'estado': estado_resumen(doc.estado),
        'estadoVencimientoId': doc.estado_vencimiento_id,
        'estadoVencimiento': estado_resumen(doc.estado_vencimiento),
    })
    data.update(_auditoria(doc))

    if detalle:
        data['recursoDocumentacion'] = [
            recurso_documentacion_dict(rd, incluir_documentacion=False)
            for rd in doc.asignaciones_recurso.select_related('recurso', 'estado')
        ]
        data['entidadDocumentacion'] = [
            entidad_documentacion_dict(ed, incluir_documentacion=False)
            for ed in doc.asignaciones_entidad.select_related('entidad', 'estado')
        ]
    return data


def recurso_resumen(recurso):
    return {
        'id': recurso.pk,
        'codigo': recurso.codigo,
        'apellido': recurso.apellido,
        'nombre': recurso.nombre,
        'cuil': recurso.cuil,
        'activo': recurso.activo,
    }


def recurso_dict(recurso, detalle=False):
    data = recurso_resumen(recurso)
    data.update({
        'telefono': recurso.telefono,
        'direccion': recurso.direccion,
        'localidad': recurso.localidad,
        'fechaAlta': fecha(recurso.fecha_alta),
        'fechaBaja': fecha(recurso.fecha_baja),
    })
    data.update(_auditoria(recurso))

    if detalle:
        data['recursoDocumentacion'] = [
            recurso_documentacion_dict(rd, incluir_recurso=False)
            for rd in recurso.documentos.select_related('documentacion', 'estado')
        ]
        data['entidadRecurso'] = [
            entidad_recurso_dict(er, incluir_recurso=False)
            for er in recurso.entidades.select_related('entidad')
        ]
    return data


def entidad_resumen(entidad):
    return {
        'id': entidad.pk,
        'razonSocial': entidad.razon_social,
        'cuit': entidad.cuit,
        'localidad': entidad.localidad,
    }


def entidad_dict(entidad, detalle=False):
    data = entidad_resumen(entidad)
    data.update({
        'domicilio': entidad.domicilio,
        'telefono': entidad.telefono,
        'urlPlataformaDocumentacion': entidad.url_plataforma_documentacion,
    })
    data.update(_auditoria(entidad))

    if detalle:
        data['entidadDocumentacion'] = [
            entidad_documentacion_dict(ed, incluir_entidad=False)
            for ed in entidad.documentos.select_related('documentacion', 'estado')
        ]
        data['entidadRecurso'] = [
            entidad_recurso_dict(er, incluir_entidad=False)
            for er in entidad.recursos.select_related('recurso')
        ]
    return data


# ============================================================================
# ASIGNACIONES
# ============================================================================

def recurso_documentacion_dict(rd, incluir_recurso=True, incluir_documentacion=True):
    data = {
        'id': rd.pk,
        'recursoId': rd.recurso_id,
        'documentacionId': rd.documentacion_id,
        'estadoId': rd.estado_id,
        'estado': estado_resumen(rd.estado),
        'observaciones': rd.observaciones,
        'diasParaVencer': rd.dias_para_vencer,
    }
    data.update(_fechas(rd))
    if incluir_recurso:
        data['recurso'] = recurso_resumen(rd.recurso)
    if incluir_documentacion:
        data['documentacion'] = documentacion_resumen(rd.documentacion)
    data.update(_auditoria(rd))
    return data


def entidad_documentacion_dict(ed, incluir_entidad=True, incluir_documentacion=True):
    data = {
        'id': ed.pk,
        'entidadId': ed.entidad_id,
        'documentacionId': ed.documentacion_id,
        'esInhabilitante': ed.es_inhabilitante,
        'enviarPorMail': ed.enviar_por_mail,
        'mailDestino': ed.mail_destino,
        'estadoId': ed.estado_id,
        'estado': estado_resumen(ed.estado),
        'diasParaVencer': ed.dias_para_vencer,
    }
    data.update(_fechas(ed))
    if incluir_entidad:
        data['entidad'] = entidad_resumen(ed.entidad)
    if incluir_documentacion:
        data['documentacion'] = documentacion_resumen(ed.documentacion)
    data.update(_auditoria(ed))
    return data


def entidad_recurso_dict(er, incluir_entidad=True, incluir_recurso=True):
    data = {
        'id': er.pk,
        'entidadId': er.entidad_id,
        'recursoId': er.recurso_id,
        'fechaInicio': fecha(er.fecha_inicio),
        'fechaFin': fecha(er.fecha_fin),
        'activo': er.activo,
        'observaciones': er.observaciones,
    }
    if incluir_entidad:
        data['entidad'] = entidad_resumen(er.entidad)
    if incluir_recurso:
        data['recurso'] = recurso_resumen(er.recurso)
    data.update(_auditoria(er))
    return data


# ============================================================================
# ARCHIVOS Y LOGS
# ============================================================================

def archivo_dict(archivo):
    return {
        'id': archivo.pk,
        'filename': archivo.filename,
        'storedFilename': archivo.stored_filename,
        'mimeType': archivo.mime_type,
        'size': archivo.size,
        'descripcion': archivo.descripcion,
        'version': archivo.version,
        'documentacionId': archivo.documentacion_id,
        'recursoDocumentacionId': archivo.recurso_documentacion_id,
        'entidadDocumentacionId': archivo.entidad_documentacion_id,
        'creadoPor': archivo.creado_por_id,
        'createdAt': fecha(archivo.creado_en),
    }


def log_estado_dict(log):
    return {
        'id': log.pk,
        'tipoDocumento': log.tipo_documento,
        'documentacionId': log.documentacion_id,
        'recursoId': log.recurso_id,
        'entidadId': log.entidad_id,
        'estadoAnterior': estado_resumen(log.estado_anterior),
        'estadoNuevo': estado_resumen(log.estado_nuevo),
        'razon': log.razon,
        'usuarioId': log.usuario_id,
        'tipoActualizacion': log.tipo_actualizacion,
        'createdAt': fecha(log.creado_en),
    }
