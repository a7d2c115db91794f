# -*- coding: utf-8 -*-
"""
Script para crear datos de demostración de AxiomaDocs.
Crea los estados base, documentación, recursos, entidades y sus asignaciones.
"""
import os
import sys
import django

# Configurar Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
django.setup()

from documentos.management.commands.inicializar_estados import crear_estados_base
from documentos.models import (
    Documentacion, Recurso, Entidad, RecursoDocumentacion,
    EntidadDocumentacion, EntidadRecurso, Estado
)
from documentos.services.estado_service import actualizar_estados_documentos
from django.utils import timezone
from datetime import timedelta
import random


def crear_datos():
    print("=" * 50)
    print("CREANDO DATOS DE DEMOSTRACIÓN")
    print("=" * 50)

    hoy = timezone.localdate()

    # ========== ESTADOS ==========
    crear_estados_base()
    vigente = Estado.objects.get(codigo=Estado.VIGENTE)
    en_tramite = Estado.objects.get(codigo=Estado.EN_TRAMITE)
    print(f'Estados: {Estado.objects.count()}')

    # ========== DOCUMENTACIÓN ==========
    documentacion_data = [
        ('DNI', 'Documento Nacional de Identidad', 3650, 60, True, False),
        ('ART', 'Certificado de cobertura ART', 30, 7, True, True),
        ('PSICO', 'Examen psicofísico', 365, 30, True, False),
        ('LIC', 'Licencia de conducir', 1825, 45, False, False),
        ('SEGVIDA', 'Seguro de vida obligatorio', 365, 30, True, True),
        ('CURSO-SEG', 'Curso de seguridad e higiene', 730, 30, False, False),
    ]
    documentos = {}
    for codigo, descripcion, vigencia, anticipacion, obligatorio, universal in documentacion_data:
        defaults = {
            'descripcion': descripcion,
            'dias_vigencia': vigencia,
            'dias_anticipacion': anticipacion,
            'es_obligatorio': obligatorio,
            'es_universal': universal,
            'estado': vigente,
        }
        if universal:
            defaults['fecha_emision'] = hoy - timedelta(days=vigencia - random.randint(1, 20))
        documentos[codigo], _ = Documentacion.objects.get_or_create(codigo=codigo, defaults=defaults)
    print(f'Documentación creada: {Documentacion.objects.count()}')

    # ========== RECURSOS ==========
    recursos_data = [
        ('R001', 'García', 'Juan', '20-28123456-3', 'Córdoba'),
        ('R002', 'Fernández', 'María', '27-30987654-1', 'Rosario'),
        ('R003', 'López', 'Carlos', '20-25444333-9', 'Buenos Aires'),
        ('R004', 'Martínez', 'Lucía', '27-33222111-5', 'Mendoza'),
        ('R005', 'Sosa', 'Diego', '20-31555666-7', 'Córdoba'),
    ]
    recursos = []
    for codigo, apellido, nombre, cuil, localidad in recursos_data:
        recurso, _ = Recurso.objects.get_or_create(codigo=codigo, defaults={
            'apellido': apellido,
            'nombre': nombre,
            'cuil': cuil,
            'localidad': localidad,
            'fecha_alta': hoy - timedelta(days=random.randint(100, 1000)),
        })
        recursos.append(recurso)
    print(f'Recursos creados: {Recurso.objects.count()}')

    # ========== ENTIDADES ==========
    entidades_data = [
        ('30-71234567-8', 'Constructora Del Centro S.A.', 'Córdoba', 'https://proveedores.delcentro.com.ar'),
        ('30-70987654-2', 'Logística Litoral S.R.L.', 'Rosario', ''),
        ('30-71555444-1', 'Minera Andina S.A.', 'Mendoza', 'https://portal.mineraandina.com'),
    ]
    entidades = []
    for cuit, razon_social, localidad, url in entidades_data:
        entidad, _ = Entidad.objects.get_or_create(cuit=cuit, defaults={
            'razon_social': razon_social,
            'localidad': localidad,
            'url_plataforma_documentacion': url,
        })
        entidades.append(entidad)
    print(f'Entidades creadas: {Entidad.objects.count()}')

    # ========== ASIGNACIONES ==========
    asignaciones = 0
    for recurso in recursos:
        for codigo in random.sample(list(documentos), 4):
            doc = documentos[codigo]
            if doc.es_universal:
                fechas = {
                    'fecha_emision': doc.fecha_emision,
                    'fecha_tramitacion': doc.fecha_tramitacion,
                    'fecha_vencimiento': doc.fecha_vencimiento,
                }
            else:
                # Algunas vencidas, otras por vencer y otras vigentes
                fechas = {'fecha_emision': hoy - timedelta(days=doc.dias_vigencia - random.randint(-20, 90))}
            _, created = RecursoDocumentacion.objects.get_or_create(
                recurso=recurso,
                documentacion=doc,
                defaults={'estado': random.choice([vigente, en_tramite]), **fechas}
            )
            if created:
                asignaciones += 1

    for entidad in entidades:
        for recurso in random.sample(recursos, 3):
            EntidadRecurso.objects.get_or_create(
                entidad=entidad,
                recurso=recurso,
                activo=True,
                defaults={'fecha_inicio': recurso.fecha_alta},
            )
        for codigo in ('ART', 'SEGVIDA'):
            doc = documentos[codigo]
            EntidadDocumentacion.objects.get_or_create(
                entidad=entidad,
                documentacion=doc,
                defaults={
                    'es_inhabilitante': True,
                    'estado': vigente,
                    'fecha_emision': doc.fecha_emision,
                    'fecha_vencimiento': doc.fecha_vencimiento,
                }
            )
    print(f'Documentos de recursos creados: {asignaciones}')

    # ========== ESTADOS SEGÚN VENCIMIENTO ==========
    resultado = actualizar_estados_documentos(tipo_actualizacion='manual')
    print(f"Estados actualizados: {resultado['actualizados']} de {resultado['totalRevisados']}")


if __name__ == '__main__':
    crear_datos()
