import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import documentos.models
from django.conf import settings
from django.db import migrations, models


def auditoria():
    """Columnas de auditoría compartidas por los modelos de negocio."""
    return [
        ('creado_en', models.DateTimeField(auto_now_add=True)),
        ('modificado_en', models.DateTimeField(auto_now=True)),
    ]


def auditoria_usuarios(modelo):
    return [
        ('creado_por', models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
            related_name=f'{modelo}_creados', to=settings.AUTH_USER_MODEL)),
        ('modificado_por', models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
            related_name=f'{modelo}_modificados', to=settings.AUTH_USER_MODEL)),
    ]


def fechas():
    return [
        ('fecha_emision', models.DateField(blank=True, null=True)),
        ('fecha_tramitacion', models.DateField(blank=True, null=True)),
        ('fecha_vencimiento', models.DateField(blank=True, null=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Estado',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                ('nombre', models.CharField(max_length=100, unique=True)),
                ('codigo', models.CharField(blank=True, max_length=20, null=True, unique=True)),
                ('color', models.CharField(max_length=7, validators=[
                    django.core.validators.RegexValidator('^#[0-9A-Fa-f]{6}$', 'El color debe tener el formato #RRGGBB')])),
                ('nivel', models.PositiveIntegerField(
                    default=1, help_text='Prioridad: a mayor nivel, más crítico',
                    validators=[django.core.validators.MinValueValidator(1)])),
                ('descripcion', models.TextField(blank=True)),
                *auditoria_usuarios('estado'),
            ],
            options={
                'verbose_name': 'Estado',
                'verbose_name_plural': 'Estados',
                'ordering': ['nombre'],
            },
        ),
        migrations.CreateModel(
            name='Documentacion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                *fechas(),
                ('codigo', models.CharField(max_length=50, unique=True)),
                ('descripcion', models.CharField(max_length=255)),
                ('dias_vigencia', models.PositiveIntegerField(
                    default=365, validators=[django.core.validators.MinValueValidator(1)])),
                ('dias_anticipacion', models.PositiveIntegerField(default=30)),
                ('es_obligatorio', models.BooleanField(default=False)),
                ('es_universal', models.BooleanField(
                    default=False, help_text='Las asignaciones toman las fechas de este documento')),
                ('estado', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='documentaciones', to='documentos.estado')),
                ('estado_vencimiento', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='documentaciones_vencimiento', to='documentos.estado')),
                *auditoria_usuarios('documentacion'),
            ],
            options={
                'verbose_name': 'Documentación',
                'verbose_name_plural': 'Documentación',
                'ordering': ['codigo'],
            },
        ),
        migrations.CreateModel(
            name='Recurso',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                ('codigo', models.CharField(max_length=50, unique=True)),
                ('apellido', models.CharField(max_length=100)),
                ('nombre', models.CharField(max_length=100)),
                ('telefono', models.CharField(blank=True, max_length=50)),
                ('cuil', models.CharField(blank=True, max_length=20)),
                ('direccion', models.CharField(blank=True, max_length=255)),
                ('localidad', models.CharField(blank=True, max_length=100)),
                ('fecha_alta', models.DateField(default=django.utils.timezone.localdate)),
                ('fecha_baja', models.DateField(blank=True, null=True)),
                *auditoria_usuarios('recurso'),
            ],
            options={
                'verbose_name': 'Recurso',
                'verbose_name_plural': 'Recursos',
                'ordering': ['apellido', 'nombre'],
            },
        ),
        migrations.CreateModel(
            name='Entidad',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                ('razon_social', models.CharField(max_length=200)),
                ('cuit', models.CharField(max_length=20, unique=True)),
                ('domicilio', models.CharField(blank=True, max_length=255)),
                ('telefono', models.CharField(blank=True, max_length=50)),
                ('localidad', models.CharField(blank=True, max_length=100)),
                ('url_plataforma_documentacion', models.URLField(blank=True, max_length=500)),
                *auditoria_usuarios('entidad'),
            ],
            options={
                'verbose_name': 'Entidad',
                'verbose_name_plural': 'Entidades',
                'ordering': ['razon_social'],
            },
        ),
        migrations.CreateModel(
            name='RecursoDocumentacion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                *fechas(),
                ('observaciones', models.TextField(blank=True)),
                ('recurso', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='documentos', to='documentos.recurso')),
                ('documentacion', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='asignaciones_recurso',
                    to='documentos.documentacion')),
                ('estado', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='recursos_documentacion', to='documentos.estado')),
                *auditoria_usuarios('recursodocumentacion'),
            ],
            options={
                'verbose_name': 'Documento de Recurso',
                'verbose_name_plural': 'Documentos de Recursos',
                'ordering': ['fecha_vencimiento'],
                'unique_together': {('recurso', 'documentacion')},
            },
        ),
        migrations.CreateModel(
            name='EntidadDocumentacion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                *fechas(),
                ('es_inhabilitante', models.BooleanField(default=False)),
                ('enviar_por_mail', models.BooleanField(default=False)),
                ('mail_destino', models.EmailField(blank=True, max_length=254)),
                ('entidad', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='documentos', to='documentos.entidad')),
                ('documentacion', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='asignaciones_entidad',
                    to='documentos.documentacion')),
                ('estado', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='entidades_documentacion', to='documentos.estado')),
                *auditoria_usuarios('entidaddocumentacion'),
            ],
            options={
                'verbose_name': 'Documento de Entidad',
                'verbose_name_plural': 'Documentos de Entidades',
                'ordering': ['fecha_vencimiento'],
                'unique_together': {('entidad', 'documentacion')},
            },
        ),
        migrations.CreateModel(
            name='EntidadRecurso',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                ('fecha_inicio', models.DateField(default=django.utils.timezone.localdate)),
                ('fecha_fin', models.DateField(blank=True, null=True)),
                ('activo', models.BooleanField(default=True)),
                ('observaciones', models.TextField(blank=True)),
                ('entidad', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='recursos', to='documentos.entidad')),
                ('recurso', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='entidades', to='documentos.recurso')),
                *auditoria_usuarios('entidadrecurso'),
            ],
            options={
                'verbose_name': 'Recurso de Entidad',
                'verbose_name_plural': 'Recursos de Entidades',
                'ordering': ['-fecha_inicio'],
            },
        ),
        migrations.CreateModel(
            name='DocumentoArchivo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *auditoria(),
                ('filename', models.CharField(help_text='Nombre original del archivo', max_length=255)),
                ('archivo', models.FileField(max_length=500, upload_to=documentos.models.ruta_archivo)),
                ('mime_type', models.CharField(max_length=100)),
                ('size', models.PositiveIntegerField()),
                ('descripcion', models.TextField(blank=True)),
                ('version', models.PositiveIntegerField(default=1)),
                ('documentacion', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.CASCADE,
                    related_name='archivos', to='documentos.documentacion')),
                ('recurso_documentacion', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.CASCADE,
                    related_name='archivos', to='documentos.recursodocumentacion')),
                ('entidad_documentacion', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.CASCADE,
                    related_name='archivos', to='documentos.entidaddocumentacion')),
                *auditoria_usuarios('documentoarchivo'),
            ],
            options={
                'verbose_name': 'Archivo',
                'verbose_name_plural': 'Archivos',
                'ordering': ['filename', '-version'],
            },
        ),
        migrations.CreateModel(
            name='EstadoDocumentoLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo_documento', models.CharField(
                    choices=[('recurso', 'Recurso'), ('entidad', 'Entidad'), ('universal', 'Universal')],
                    max_length=20)),
                ('razon', models.CharField(max_length=255)),
                ('tipo_actualizacion', models.CharField(
                    choices=[('manual', 'Manual'), ('automatica', 'Automática')],
                    default='automatica', max_length=20)),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('documentacion', models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='logs_estado', to='documentos.documentacion')),
                ('recurso', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='logs_estado', to='documentos.recurso')),
                ('entidad', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='logs_estado', to='documentos.entidad')),
                ('estado_anterior', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='+', to='documentos.estado')),
                ('estado_nuevo', models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='+', to='documentos.estado')),
                ('usuario', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Log de Estado',
                'verbose_name_plural': 'Logs de Estados',
                'ordering': ['-creado_en'],
                'indexes': [models.Index(fields=['tipo_documento', '-creado_en'], name='doc_log_tipo_fecha_idx')],
            },
        ),
        migrations.CreateModel(
            name='ActualizacionEstados',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ejecutado_en', models.DateTimeField(auto_now_add=True)),
                ('tipo_actualizacion', models.CharField(
                    choices=[('manual', 'Manual'), ('automatica', 'Automática')],
                    default='automatica', max_length=20)),
                ('total_revisados', models.PositiveIntegerField(default=0)),
                ('actualizados', models.PositiveIntegerField(default=0)),
                ('errores', models.PositiveIntegerField(default=0)),
                ('usuario', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Actualización de Estados',
                'verbose_name_plural': 'Actualizaciones de Estados',
                'ordering': ['-ejecutado_en'],
                'get_latest_by': 'ejecutado_en',
            },
        ),
        migrations.CreateModel(
            name='PasswordResetToken',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('token', models.CharField(max_length=64, unique=True)),
                ('expira_en', models.DateTimeField()),
                ('usado', models.BooleanField(default=False)),
                ('creado_en', models.DateTimeField(auto_now_add=True)),
                ('usuario', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='reset_tokens',
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Token de Recuperación',
                'verbose_name_plural': 'Tokens de Recuperación',
                'ordering': ['-creado_en'],
            },
        ),
    ]
