"""
Comando para crear los estados base del sistema.

Es idempotente: si un estado ya existe (por código) no se modifica.
"""

from django.core.management.base import BaseCommand

from documentos.models import Estado

ESTADOS_BASE = [
    {
        'codigo': Estado.EN_TRAMITE,
        'nombre': 'En Trámite',
        'color': '#f59e0b',
        'nivel': 3,
        'descripcion': 'Documento en proceso de tramitación',
    },
    {
        'codigo': Estado.VIGENTE,
        'nombre': 'Vigente',
        'color': '#10b981',
        'nivel': 1,
        'descripcion': 'Documento vigente y válido',
    },
    {
        'codigo': Estado.POR_VENCER,
        'nombre': 'Por Vencer',
        'color': '#eab308',
        'nivel': 5,
        'descripcion': 'Documento próximo a vencer',
    },
    {
        'codigo': Estado.VENCIDO,
        'nombre': 'Vencido',
        'color': '#ef4444',
        'nivel': 10,
        'descripcion': 'Documento vencido',
    },
]


def crear_estados_base():
    """Crea los estados que falten. Retorna la lista de estados creados."""
    creados = []
    for datos in ESTADOS_BASE:
        valores = dict(datos)
        estado, created = Estado.objects.get_or_create(codigo=valores.pop('codigo'), defaults=valores)
        if created:
            creados.append(estado)
    return creados


class Command(BaseCommand):
    help = 'Crea los estados base (En Trámite, Vigente, Por Vencer, Vencido)'

    def handle(self, *args, **options):
        creados = crear_estados_base()

        for estado in creados:
            self.stdout.write(f'  + {estado.nombre} ({estado.codigo})')

        if creados:
            self.stdout.write(self.style.SUCCESS(f'{len(creados)} estado(s) creado(s)'))
        else:
            self.stdout.write(self.style.WARNING('Los estados base ya existían, no se creó ninguno'))
