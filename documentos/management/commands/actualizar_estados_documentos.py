"""
Comando para recalcular el estado de los documentos según su vencimiento.

Pensado para ejecutarse desde el cron del sistema, por ejemplo:

    0 0 * * *   python manage.py actualizar_estados_documentos
    0 */6 * * * python manage.py actualizar_estados_documentos
"""

from django.core.management.base import BaseCommand, CommandError

from documentos.services.estado_service import EstadosFaltantesError, actualizar_estados_documentos


class Command(BaseCommand):
    help = 'Actualiza el estado de los documentos (por vencer / vencido) según su fecha de vencimiento'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Muestra los cambios sin guardarlos',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        if dry_run:
            self.stdout.write(self.style.WARNING('Modo simulación: no se guardarán cambios'))

        try:
            resultado = actualizar_estados_documentos(
                tipo_actualizacion='automatica',
                dry_run=dry_run,
            )
        except EstadosFaltantesError as e:
            raise CommandError(f'{e}. Ejecute primero: python manage.py inicializar_estados')

        for detalle in resultado['detalles']:
            self.stdout.write(
                f"  [{detalle['tipo']}] #{detalle['documentoId']}: "
                f"{detalle['estadoAnterior'] or 'Sin estado'} -> {detalle['estadoNuevo']} "
                f"({detalle['razon']})"
            )

        self.stdout.write(f"Revisados: {resultado['totalRevisados']}")
        self.stdout.write(f"Errores: {resultado['errores']}")
        self.stdout.write(self.style.SUCCESS(f"Actualizados: {resultado['actualizados']}"))
