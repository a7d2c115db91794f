from django.apps import AppConfig


class DocumentosConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'documentos'
    verbose_name = 'AxiomaDocs'

    def ready(self):
        """Importar signals cuando la app esté lista."""
        import documentos.signals  # noqa
