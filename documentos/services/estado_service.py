"""
Cálculo de vencimientos y actualización automática de estados.

El proceso compara la fecha de vencimiento de cada documento con la fecha
actual más los días de anticipación de su documentación y pasa el documento
a POR_VENCER o VENCIDO cuando corresponde.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import (
    ActualizacionEstados,
    Documentacion,
    EntidadDocumentacion,
    Estado,
    EstadoDocumentoLog,
    RecursoDocumentacion,
)

logger = logging.getLogger(__name__)

PREFIJO_UNIVERSAL = '[UNIVERSAL] '


class EstadosFaltantesError(Exception):
    """No existen los estados POR_VENCER o VENCIDO."""


def dias_anticipacion_default():
    return getattr(settings, 'DIAS_ANTICIPACION_DEFAULT', 30)


# ============================================================================
# FECHAS
# ============================================================================

def calcular_fecha_vencimiento(fecha_emision, dias_vigencia):
    if not fecha_emision or not dias_vigencia:
        return None
    return fecha_emision + timedelta(days=dias_vigencia)


def dias_hasta_vencimiento(fecha_vencimiento, hoy=None):
    """Diferencia en días entre hoy y el vencimiento (negativa si venció)."""
    if not fecha_vencimiento:
        return None
    hoy = hoy or timezone.localdate()
    return (fecha_vencimiento - hoy).days


def obtener_fechas_para_asignacion(documentacion, fechas=None):
    """
    Fechas que corresponden a una asignación de la documentación.

    Si la documentación es universal, las fechas son las de la documentación;
    si no, las informadas para la asignación.

    Retorna un dict con fecha_emision, fecha_tramitacion, fecha_vencimiento
    y es_universal.
    """
    if documentacion.es_universal:
        return {
            'fecha_emision': documentacion.fecha_emision,
            'fecha_tramitacion': documentacion.fecha_tramitacion,
            'fecha_vencimiento': documentacion.fecha_vencimiento,
            'es_universal': True,
        }

    fechas = fechas or {}
    return {
        'fecha_emision': fechas.get('fecha_emision'),
        'fecha_tramitacion': fechas.get('fecha_tramitacion'),
        'fecha_vencimiento': fechas.get('fecha_vencimiento'),
        'es_universal': False,
    }


def sincronizar_fechas_universales(documentacion):
    """
    Copia las fechas de una documentación universal a todas sus asignaciones.

    Retorna la cantidad de asignaciones actualizadas.
    """
    if not documentacion.es_universal:
        return 0

    valores = {
        'fecha_emision': documentacion.fecha_emision,
        'fecha_tramitacion': documentacion.fecha_tramitacion,
        'fecha_vencimiento': documentacion.fecha_vencimiento,
        'modificado_en': timezone.now(),
    }
    actualizadas = documentacion.asignaciones_recurso.update(**valores)
    actualizadas += documentacion.asignaciones_entidad.update(**valores)
    logger.info(
        "Fechas universales de %s sincronizadas en %d asignaciones",
        documentacion.codigo, actualizadas
    )
    return actualizadas


# ============================================================================
# EVALUACIÓN DE ESTADOS
# ============================================================================

def evaluar_estado(fecha_vencimiento, dias_anticipacion=None, hoy=None):
    """
    Evalúa qué estado corresponde a un documento según su vencimiento.

    Retorna (codigo, razon) o None si el estado actual debe mantenerse.
    """
    if not fecha_vencimiento:
        return None

    if dias_anticipacion is None:
        dias_anticipacion = dias_anticipacion_default()

    dias = dias_hasta_vencimiento(fecha_vencimiento, hoy)

    if dias <= 0:
        if dias == 0:
            razon = 'Documento vence hoy'
        else:
            razon = f'Documento vencido hace {abs(dias)} días'
        return Estado.VENCIDO, razon

    if dias <= dias_anticipacion:
        return Estado.POR_VENCER, f'Documento por vencer en {dias} días'

    return None


def estado_mas_critico(asignaciones):
    """Estado de mayor nivel entre las asignaciones (None si ninguna tiene)."""
    critico = None
    for asignacion in asignaciones:
        estado = asignacion.estado
        if estado and (critico is None or estado.nivel > critico.nivel):
            critico = estado
    return critico


# prefetch_related para listar entidades con su estado crítico sin una consulta por fila
PREFETCH_ESTADO_ENTIDAD = ('documentos__estado', 'recursos__recurso__documentos__estado')


def estado_mas_critico_entidad(entidad):
    """
    Estado más crítico de una entidad: considera los documentos de todos sus
    recursos asignados y la documentación propia de la entidad.
    """
    asignaciones = list(entidad.documentos.all())
    for entidad_recurso in entidad.recursos.all():
        asignaciones.extend(entidad_recurso.recurso.documentos.all())
    return estado_mas_critico(asignaciones)


def proximos_vencimientos(dias=30, hoy=None):
    """
    Asignaciones que vencen entre hoy y hoy + dias.

    Retorna una tupla (recursos, entidades, universales) de querysets.
    """
    hoy = hoy or timezone.localdate()
    rango = (hoy, hoy + timedelta(days=dias))
    recursos = RecursoDocumentacion.objects.filter(
        fecha_vencimiento__range=rango
    ).select_related('recurso', 'documentacion', 'estado')
    entidades = EntidadDocumentacion.objects.filter(
        fecha_vencimiento__range=rango
    ).select_related('entidad', 'documentacion', 'estado')
    universales = Documentacion.objects.filter(
        es_universal=True, fecha_vencimiento__range=rango
    ).select_related('estado')
    return recursos, entidades, universales


# ============================================================================
# PROCESO DE ACTUALIZACIÓN
# ============================================================================

def _cargar_estados():
    estados = {
        e.codigo: e for e in Estado.objects.filter(codigo__in=[Estado.POR_VENCER, Estado.VENCIDO])
    }
    faltantes = [c for c in (Estado.POR_VENCER, Estado.VENCIDO) if c not in estados]
    if faltantes:
        raise EstadosFaltantesError(
            f"No se encontraron los estados necesarios: {', '.join(faltantes)}"
        )
    return estados


def actualizar_estados_documentos(usuario=None, tipo_actualizacion='automatica', dry_run=False, hoy=None):
    """
    Recalcula el estado de los documentos de recursos y de la documentación
    universal.

    Los documentos de entidades no se recalculan. Un error en un documento se
    registra y el proceso sigue con el resto. Con dry_run no se guarda nada.

    Retorna {totalRevisados, actualizados, errores, detalles}.
    """
    estados = _cargar_estados()
    hoy = hoy or timezone.localdate()

    resultado = {
        'totalRevisados': 0,
        'actualizados': 0,
        'errores': 0,
        'detalles': [],
    }

    logger.info("Iniciando actualización de estados (%s)", tipo_actualizacion)

    documentos = RecursoDocumentacion.objects.filter(
        fecha_vencimiento__isnull=False
    ).select_related('documentacion', 'estado', 'recurso')

    for documento in documentos:
        resultado['totalRevisados'] += 1
        try:
            _procesar_documento(
                documento, 'recurso', estados, resultado,
                usuario, tipo_actualizacion, dry_run, hoy
            )
        except Exception:
            resultado['errores'] += 1
            logger.exception("Error actualizando el documento de recurso %s", documento.pk)

    universales = Documentacion.objects.filter(
        es_universal=True, fecha_vencimiento__isnull=False
    ).select_related('estado')

    for documentacion in universales:
        resultado['totalRevisados'] += 1
        try:
            _procesar_documento(
                documentacion, 'universal', estados, resultado,
                usuario, tipo_actualizacion, dry_run, hoy
            )
        except Exception:
            resultado['errores'] += 1
            logger.exception("Error actualizando la documentación universal %s", documentacion.pk)

    if not dry_run:
        ActualizacionEstados.objects.create(
            tipo_actualizacion=tipo_actualizacion,
            usuario=usuario,
            total_revisados=resultado['totalRevisados'],
            actualizados=resultado['actualizados'],
            errores=resultado['errores'],
        )

    logger.info(
        "Actualización de estados finalizada: %d revisados, %d actualizados, %d errores",
        resultado['totalRevisados'], resultado['actualizados'], resultado['errores']
    )
    return resultado


def _procesar_documento(documento, tipo, estados, resultado, usuario, tipo_actualizacion, dry_run, hoy):
    if tipo == 'universal':
        dias_anticipacion = documento.dias_anticipacion
    else:
        dias_anticipacion = documento.documentacion.dias_anticipacion
    if dias_anticipacion is None:
        dias_anticipacion = dias_anticipacion_default()

    evaluacion = evaluar_estado(documento.fecha_vencimiento, dias_anticipacion, hoy)
    if evaluacion is None:
        return

    codigo, razon = evaluacion
    nuevo_estado = estados[codigo]
    if documento.estado_id == nuevo_estado.pk:
        return

    if tipo == 'universal':
        razon = PREFIJO_UNIVERSAL + razon

    estado_anterior = documento.estado

    if not dry_run:
        with transaction.atomic():
            type(documento).objects.filter(pk=documento.pk).update(
                estado=nuevo_estado, modificado_en=timezone.now()
            )
            EstadoDocumentoLog.objects.create(
                tipo_documento=tipo,
                documentacion_id=documento.pk if tipo == 'universal' else documento.documentacion_id,
                recurso_id=documento.recurso_id if tipo == 'recurso' else None,
                estado_anterior=estado_anterior,
                estado_nuevo=nuevo_estado,
                razon=razon,
                usuario=usuario,
                tipo_actualizacion=tipo_actualizacion,
            )

    resultado['actualizados'] += 1
    resultado['detalles'].append({
        'tipo': tipo,
        'documentoId': documento.pk,
        'recursoId': documento.recurso_id if tipo == 'recurso' else None,
        'estadoAnterior': estado_anterior.nombre if estado_anterior else None,
        'estadoNuevo': nuevo_estado.nombre,
        'razon': razon,
    })

    logger.info(
        "Documento %s %s: %s -> %s (%s)",
        tipo, documento.pk,
        estado_anterior.nombre if estado_anterior else 'Sin estado',
        nuevo_estado.nombre, razon
    )


def documentos_vencidos(hoy=None):
    """Asignaciones y documentación universal con vencimiento anterior a hoy."""
    hoy = hoy or timezone.localdate()
    recursos = RecursoDocumentacion.objects.filter(
        fecha_vencimiento__lt=hoy
    ).select_related('recurso', 'documentacion', 'estado')
    entidades = EntidadDocumentacion.objects.filter(
        fecha_vencimiento__lt=hoy
    ).select_related('entidad', 'documentacion', 'estado')
    universales = Documentacion.objects.filter(
        es_universal=True, fecha_vencimiento__lt=hoy
    ).select_related('estado')
    return recursos, entidades, universales
