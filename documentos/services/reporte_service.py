"""
Armado de los reportes de documentación.

Cada reporte se construye como un dict listo para JSON y tiene una función
exportar_* que vuelca el mismo contenido a un exportador (CSV, Excel o PDF).
"""

from datetime import timedelta

from django.db.models import Prefetch
from django.utils import timezone

from ..models import Entidad, EntidadRecurso, Estado, Recurso, RecursoDocumentacion
from ..serializers import estado_resumen, fecha
from ..utils.export_utils import format_boolean
from .estado_service import dias_hasta_vencimiento, estado_mas_critico


def _documento_reporte(rd):
    return {
        'id': rd.pk,
        'documento': {
            'codigo': rd.documentacion.codigo,
            'descripcion': rd.documentacion.descripcion,
            'esObligatorio': rd.documentacion.es_obligatorio,
            'diasVigencia': rd.documentacion.dias_vigencia,
        },
        'fechaEmision': fecha(rd.fecha_emision),
        'fechaTramitacion': fecha(rd.fecha_tramitacion),
        'fechaVencimiento': fecha(rd.fecha_vencimiento),
        'estado': estado_resumen(rd.estado),
        'observaciones': rd.observaciones,
    }


def _entidades_de(recurso):
    return ', '.join(er.entidad.razon_social for er in recurso.entidades.all())


# ============================================================================
# DOCUMENTACIÓN POR ESTADO
# ============================================================================

def documentacion_por_estado(estado_id=None, entidad_id=None):
    """Documentos de recursos agrupados por recurso, con totales por estado."""
    documentos = RecursoDocumentacion.objects.select_related(
        'documentacion', 'estado'
    ).order_by('fecha_vencimiento')
    if estado_id:
        documentos = documentos.filter(estado_id=estado_id)

    recursos = Recurso.objects.prefetch_related(
        Prefetch('documentos', queryset=documentos, to_attr='documentos_reporte'),
        Prefetch('entidades', queryset=EntidadRecurso.objects.select_related('entidad')),
    )
    if entidad_id:
        recursos = recursos.filter(entidades__entidad_id=entidad_id).distinct()

    reporte = []
    por_estado = {}
    total_documentos = 0
    recursos_con_documentos = 0

    for recurso in recursos:
        docs = recurso.documentos_reporte
        total_documentos += len(docs)
        if docs:
            recursos_con_documentos += 1

        for rd in docs:
            if rd.estado is None:
                continue
            grupo = por_estado.setdefault(rd.estado.nombre, {
                'estado': estado_resumen(rd.estado),
                'cantidad': 0,
                'recursos': set(),
            })
            grupo['cantidad'] += 1
            grupo['recursos'].add(recurso.pk)

        reporte.append({
            'recurso': {
                'id': recurso.pk,
                'codigo': recurso.codigo,
                'nombre': recurso.nombre_completo,
                'cuil': recurso.cuil,
                'activo': recurso.activo,
                'entidades': _entidades_de(recurso),
            },
            'documentos': [_documento_reporte(rd) for rd in docs],
        })

    estadisticas_estado = []
    for grupo in por_estado.values():
        estadisticas_estado.append({
            'estado': grupo['estado'],
            'cantidad': grupo['cantidad'],
            'recursosAfectados': len(grupo['recursos']),
        })

    return {
        'reporte': reporte,
        'estadisticas': {
            'totalRecursos': len(reporte),
            'recursosConDocumentos': recursos_con_documentos,
            'totalDocumentos': total_documentos,
            'porEstado': estadisticas_estado,
        },
        'filtros': {
            'estadoId': estado_id,
            'entidadId': entidad_id,
        },
    }


def exportar_documentacion_por_estado(data, exporter):
    exporter.add_title(
        "DOCUMENTACIÓN POR ESTADO",
        f"Recursos: {data['estadisticas']['totalRecursos']} | "
        f"Documentos: {data['estadisticas']['totalDocumentos']}"
    )
    exporter.add_headers([
        'Código', 'Recurso', 'CUIL', 'Entidades', 'Documento', 'Obligatorio',
        'Emisión', 'Vencimiento', 'Estado'
    ])
    fila = 0
    for item in data['reporte']:
        recurso = item['recurso']
        for doc in item['documentos']:
            exporter.add_row([
                recurso['codigo'],
                recurso['nombre'],
                recurso['cuil'],
                recurso['entidades'],
                doc['documento']['descripcion'],
                format_boolean(doc['documento']['esObligatorio']),
                doc['fechaEmision'] or '',
                doc['fechaVencimiento'] or '',
                doc['estado']['nombre'] if doc['estado'] else 'Sin estado',
            ], alternate=fila % 2 == 1)
            fila += 1

    resumen = {
        'Total de recursos': data['estadisticas']['totalRecursos'],
        'Recursos con documentos': data['estadisticas']['recursosConDocumentos'],
        'Total de documentos': data['estadisticas']['totalDocumentos'],
    }
    for grupo in data['estadisticas']['porEstado']:
        resumen[f"Estado {grupo['estado']['nombre']}"] = grupo['cantidad']
    exporter.add_summary(resumen)


# ============================================================================
# RECURSOS POR ENTIDAD
# ============================================================================

def _estadisticas_documentos(documentos):
    codigos = [rd.estado.codigo if rd.estado else None for rd in documentos]
    critico = estado_mas_critico(documentos)
    return {
        'total': len(documentos),
        'vigentes': codigos.count(Estado.VIGENTE),
        'vencidos': codigos.count(Estado.VENCIDO),
        'porVencer': codigos.count(Estado.POR_VENCER),
        'enTramite': codigos.count(Estado.EN_TRAMITE),
        'estadoCritico': estado_resumen(critico),
    }


def recursos_por_entidad(entidad_id=None, solo_activos=False):
    """Para cada entidad, sus recursos asignados con el estado de su documentación."""
    asignaciones = EntidadRecurso.objects.filter(activo=True).select_related('recurso').prefetch_related(
        Prefetch(
            'recurso__documentos',
            queryset=RecursoDocumentacion.objects.select_related('documentacion', 'estado'),
        )
    ).order_by('recurso__apellido', 'recurso__nombre')
    if solo_activos:
        asignaciones = asignaciones.filter(recurso__fecha_baja__isnull=True)

    entidades = Entidad.objects.prefetch_related(
        Prefetch('recursos', queryset=asignaciones, to_attr='asignaciones_reporte')
    )
    if entidad_id:
        entidades = entidades.filter(pk=entidad_id)

    reporte = []
    for entidad in entidades:
        recursos = []
        for er in entidad.asignaciones_reporte:
            recurso = er.recurso
            documentos = list(recurso.documentos.all())
            recursos.append({
                'recurso': {
                    'id': recurso.pk,
                    'codigo': recurso.codigo,
                    'nombre': recurso.nombre_completo,
                    'cuil': recurso.cuil,
                    'activo': recurso.activo,
                    'fechaInicio': fecha(er.fecha_inicio),
                    'fechaFin': fecha(er.fecha_fin),
                },
                'estadisticasDocumentacion': _estadisticas_documentos(documentos),
                'documentos': [_documento_reporte(rd) for rd in documentos],
            })

        reporte.append({
            'entidad': {
                'id': entidad.pk,
                'razonSocial': entidad.razon_social,
                'cuit': entidad.cuit,
                'localidad': entidad.localidad,
            },
            'recursos': recursos,
            'estadisticas': {
                'totalRecursos': len(recursos),
                'recursosActivos': sum(1 for r in recursos if r['recurso']['activo']),
                'totalDocumentos': sum(r['estadisticasDocumentacion']['total'] for r in recursos),
                'documentosVencidos': sum(r['estadisticasDocumentacion']['vencidos'] for r in recursos),
                'documentosPorVencer': sum(r['estadisticasDocumentacion']['porVencer'] for r in recursos),
            },
        })

    return {
        'reporte': reporte,
        'estadisticasGenerales': {
            'totalEntidades': len(reporte),
            'entidadesConRecursos': sum(1 for e in reporte if e['recursos']),
            'totalRecursos': sum(len(e['recursos']) for e in reporte),
            'totalDocumentos': sum(e['estadisticas']['totalDocumentos'] for e in reporte),
        },
        'filtros': {
            'entidadId': entidad_id,
            'soloActivos': solo_activos,
        },
    }


def exportar_recursos_por_entidad(data, exporter):
    generales = data['estadisticasGenerales']
    exporter.add_title(
        "RECURSOS POR ENTIDAD",
        f"Entidades: {generales['totalEntidades']} | Recursos: {generales['totalRecursos']}"
    )
    exporter.add_headers([
        'Entidad', 'CUIT', 'Código', 'Recurso', 'Activo', 'Documentos',
        'Vigentes', 'Por Vencer', 'Vencidos', 'En Trámite', 'Estado Crítico'
    ])
    fila = 0
    for item in data['reporte']:
        entidad = item['entidad']
        for r in item['recursos']:
            stats = r['estadisticasDocumentacion']
            exporter.add_row([
                entidad['razonSocial'],
                entidad['cuit'],
                r['recurso']['codigo'],
                r['recurso']['nombre'],
                format_boolean(r['recurso']['activo']),
                stats['total'],
                stats['vigentes'],
                stats['porVencer'],
                stats['vencidos'],
                stats['enTramite'],
                stats['estadoCritico']['nombre'] if stats['estadoCritico'] else '-',
            ], alternate=fila % 2 == 1)
            fila += 1

    exporter.add_summary({
        'Total de entidades': generales['totalEntidades'],
        'Entidades con recursos': generales['entidadesConRecursos'],
        'Total de recursos': generales['totalRecursos'],
        'Total de documentos': generales['totalDocumentos'],
    })


# ============================================================================
# DOCUMENTOS PRÓXIMOS A VENCER
# ============================================================================

def documentos_proximos_vencer(dias=30, entidad_id=None, hoy=None):
    """Documentos de recursos que vencen en los próximos `dias` días."""
    hoy = hoy or timezone.localdate()
    documentos = RecursoDocumentacion.objects.filter(
        fecha_vencimiento__gte=hoy,
        fecha_vencimiento__lte=hoy + timedelta(days=dias),
    ).select_related('recurso', 'documentacion', 'estado').prefetch_related(
        Prefetch('recurso__entidades', queryset=EntidadRecurso.objects.select_related('entidad'))
    ).order_by('fecha_vencimiento')
    if entidad_id:
        documentos = documentos.filter(recurso__entidades__entidad_id=entidad_id).distinct()

    reporte = []
    entidades_afectadas = set()
    for rd in documentos:
        recurso = rd.recurso
        entidades_afectadas.update(er.entidad_id for er in recurso.entidades.all())
        reporte.append({
            'id': rd.pk,
            'recurso': {
                'id': recurso.pk,
                'codigo': recurso.codigo,
                'nombre': recurso.nombre_completo,
                'cuil': recurso.cuil,
                'entidades': _entidades_de(recurso),
            },
            'documento': {
                'codigo': rd.documentacion.codigo,
                'descripcion': rd.documentacion.descripcion,
                'esObligatorio': rd.documentacion.es_obligatorio,
                'diasVigencia': rd.documentacion.dias_vigencia,
                'diasAnticipacion': rd.documentacion.dias_anticipacion,
            },
            'fechaEmision': fecha(rd.fecha_emision),
            'fechaTramitacion': fecha(rd.fecha_tramitacion),
            'fechaVencimiento': fecha(rd.fecha_vencimiento),
            'diasHastaVencimiento': dias_hasta_vencimiento(rd.fecha_vencimiento, hoy),
            'estado': estado_resumen(rd.estado),
            'observaciones': rd.observaciones,
            'prioridad': 'Alta' if rd.documentacion.es_obligatorio else 'Normal',
        })

    return {
        'reporte': reporte,
        'estadisticas': {
            'totalDocumentos': len(reporte),
            'documentosObligatorios': sum(1 for r in reporte if r['documento']['esObligatorio']),
            'recursosAfectados': len({r['recurso']['id'] for r in reporte}),
            'entidadesAfectadas': len(entidades_afectadas),
            'porDias': {
                'proximos7Dias': sum(1 for r in reporte if r['diasHastaVencimiento'] <= 7),
                'proximos15Dias': sum(1 for r in reporte if r['diasHastaVencimiento'] <= 15),
                'proximos30Dias': sum(1 for r in reporte if r['diasHastaVencimiento'] <= 30),
            },
        },
        'filtros': {
            'diasAnticipacion': dias,
            'entidadId': entidad_id,
        },
    }


def exportar_documentos_proximos_vencer(data, exporter):
    stats = data['estadisticas']
    exporter.add_title(
        "DOCUMENTOS PRÓXIMOS A VENCER",
        f"Próximos {data['filtros']['diasAnticipacion']} días | Documentos: {stats['totalDocumentos']}"
    )
    exporter.add_headers([
        'Código', 'Recurso', 'Entidades', 'Documento', 'Vencimiento',
        'Días', 'Prioridad', 'Estado'
    ])
    for idx, item in enumerate(data['reporte']):
        exporter.add_row([
            item['recurso']['codigo'],
            item['recurso']['nombre'],
            item['recurso']['entidades'],
            item['documento']['descripcion'],
            item['fechaVencimiento'],
            item['diasHastaVencimiento'],
            item['prioridad'],
            item['estado']['nombre'] if item['estado'] else 'Sin estado',
        ], alternate=idx % 2 == 1)

    exporter.add_summary({
        'Total de documentos': stats['totalDocumentos'],
        'Documentos obligatorios': stats['documentosObligatorios'],
        'Recursos afectados': stats['recursosAfectados'],
        'Vencen en 7 días': stats['porDias']['proximos7Dias'],
        'Vencen en 15 días': stats['porDias']['proximos15Dias'],
        'Vencen en 30 días': stats['porDias']['proximos30Dias'],
    })
