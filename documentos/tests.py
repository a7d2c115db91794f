"""
Pruebas automatizadas para AxiomaDocs
=====================================
Ejecutar con: python manage.py test documentos
"""

import json
import shutil
import tempfile
from datetime import date, timedelta
from io import StringIO
from pathlib import Path
from unittest import mock

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import connection
from django.test import RequestFactory, TestCase, override_settings
from django.test.utils import CaptureQueriesContext
from django.urls import reverse
from django.utils import timezone

from .management.commands.inicializar_estados import crear_estados_base
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
    ruta_archivo,
    sanitizar_nombre,
)
from .services.estado_service import (
    EstadosFaltantesError,
    actualizar_estados_documentos,
    estado_mas_critico,
    evaluar_estado,
    sincronizar_fechas_universales,
)
from .utils.email import enviar_recuperacion_password
from .utils.tokens import generar_token
from .views.usuarios import UsuarioDetailView

PDF_MINIMO = b'%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n'


class ApiTestCase(TestCase):
    """Base con estados, un administrador y un usuario común."""

    @classmethod
    def setUpTestData(cls):
        crear_estados_base()
        cls.en_tramite = Estado.objects.get(codigo=Estado.EN_TRAMITE)
        cls.vigente = Estado.objects.get(codigo=Estado.VIGENTE)
        cls.por_vencer = Estado.objects.get(codigo=Estado.POR_VENCER)
        cls.vencido = Estado.objects.get(codigo=Estado.VENCIDO)

        cls.admin = User.objects.create_user(
            username='admin', email='admin@axioma.test', password='admin123', is_staff=True
        )
        cls.usuario = User.objects.create_user(
            username='operador', email='operador@axioma.test', password='operador123',
            first_name='Ana', last_name='Pérez'
        )

    def setUp(self):
        cache.clear()
        self.hoy = timezone.localdate()

    def auth(self, usuario=None):
        return f'Bearer {generar_token(usuario or self.admin)}'

    def api(self, metodo, url, data=None, usuario=None):
        """Petición JSON autenticada."""
        funcion = getattr(self.client, metodo)
        extra = {'HTTP_AUTHORIZATION': self.auth(usuario)}
        if data is None:
            return funcion(url, **extra)
        if metodo == 'get':
            return funcion(url, data, **extra)
        return funcion(url, data, content_type='application/json', **extra)

    def crear_escenario(self):
        """
        Un recurso con un documento vencido y otro por vencer, una entidad que
        lo tiene asignado y una documentación universal que vence en 5 días.
        """
        self.doc_dni = Documentacion.objects.create(
            codigo='DNI', descripcion='Documento de identidad', es_obligatorio=True
        )
        self.doc_psico = Documentacion.objects.create(codigo='PSICO', descripcion='Examen psicofísico')
        self.doc_art = Documentacion.objects.create(
            codigo='ART', descripcion='Cobertura ART', es_universal=True,
            fecha_vencimiento=self.hoy + timedelta(days=5), estado=self.vigente
        )
        self.recurso = Recurso.objects.create(codigo='R001', apellido='García', nombre='Juan', cuil='20-1')
        self.rd_por_vencer = RecursoDocumentacion.objects.create(
            recurso=self.recurso, documentacion=self.doc_dni, estado=self.vigente,
            fecha_vencimiento=self.hoy + timedelta(days=10)
        )
        self.rd_vencido = RecursoDocumentacion.objects.create(
            recurso=self.recurso, documentacion=self.doc_psico, estado=self.vencido,
            fecha_vencimiento=self.hoy - timedelta(days=3)
        )
        self.entidad = Entidad.objects.create(razon_social='Constructora Norte', cuit='30-1')
        EntidadRecurso.objects.create(entidad=self.entidad, recurso=self.recurso)
        self.ed = EntidadDocumentacion.objects.create(
            entidad=self.entidad, documentacion=self.doc_psico, estado=self.vigente,
            fecha_vencimiento=self.hoy + timedelta(days=20)
        )


# ============================================================================
# PRUEBAS DE URLs
# ============================================================================

class URLConfigurationTests(TestCase):
    """Las URLs de la API no llevan barra final"""

    def test_urls_auth(self):
        self.assertEqual(reverse('documentos:auth-login'), '/api/auth/login')
        self.assertEqual(
            reverse('documentos:auth-verify-reset-token', kwargs={'token': 'abc'}),
            '/api/auth/verify-reset-token/abc'
        )

    def test_url_archivos(self):
        url = reverse('documentos:archivo-upload', kwargs={'tipo': 'recurso-documentacion', 'pk': 3})
        self.assertEqual(url, '/api/archivos/recurso-documentacion/3/upload')


# ============================================================================
# PRUEBAS DE MODELOS
# ============================================================================

class DocumentacionModelTests(TestCase):
    """Cálculo de vencimientos y validaciones"""

    def test_vencimiento_calculado_desde_emision(self):
        doc = Documentacion.objects.create(
            codigo='ART', descripcion='ART', dias_vigencia=30, fecha_emision=date(2024, 1, 1)
        )
        self.assertEqual(doc.fecha_vencimiento, date(2024, 1, 31))

    def test_cambio_de_emision_recalcula_vencimiento(self):
        doc = Documentacion.objects.create(
            codigo='ART', descripcion='ART', dias_vigencia=30, fecha_emision=date(2024, 1, 1)
        )
        doc.fecha_emision = date(2024, 2, 1)
        doc.save()
        self.assertEqual(doc.fecha_vencimiento, date(2024, 3, 2))

    def test_vencimiento_informado_se_respeta(self):
        doc = Documentacion.objects.create(
            codigo='ART', descripcion='ART', dias_vigencia=30,
            fecha_emision=date(2024, 1, 1), fecha_vencimiento=date(2024, 6, 30)
        )
        self.assertEqual(doc.fecha_vencimiento, date(2024, 6, 30))

    def test_vencimiento_anterior_a_emision_es_invalido(self):
        with self.assertRaises(ValidationError):
            Documentacion.objects.create(
                codigo='ART', descripcion='ART',
                fecha_emision=date(2024, 5, 1), fecha_vencimiento=date(2024, 1, 1)
            )

    def test_asignacion_usa_vigencia_de_la_documentacion(self):
        doc = Documentacion.objects.create(codigo='PSICO', descripcion='Psicofísico', dias_vigencia=10)
        recurso = Recurso.objects.create(codigo='R1', apellido='Sosa', nombre='Diego')
        rd = RecursoDocumentacion.objects.create(
            recurso=recurso, documentacion=doc, fecha_emision=date(2024, 3, 1)
        )
        self.assertEqual(rd.fecha_vencimiento, date(2024, 3, 11))


class OtrosModelosTests(TestCase):

    def test_estado_normaliza_codigo(self):
        estado = Estado.objects.create(nombre='Observado', codigo=' obs ', color='#123456')
        self.assertEqual(estado.codigo, 'OBS')

    def test_estado_color_invalido(self):
        with self.assertRaises(ValidationError):
            Estado.objects.create(nombre='Raro', color='rojo')

    def test_recurso_activo_sin_fecha_baja(self):
        recurso = Recurso.objects.create(codigo='R1', apellido='López', nombre='Carlos')
        self.assertTrue(recurso.activo)
        self.assertEqual(recurso.nombre_completo, 'López, Carlos')

    def test_envio_por_mail_requiere_destino(self):
        entidad = Entidad.objects.create(razon_social='Minera', cuit='30-9')
        doc = Documentacion.objects.create(codigo='SEG', descripcion='Seguro')
        with self.assertRaises(ValidationError):
            EntidadDocumentacion.objects.create(entidad=entidad, documentacion=doc, enviar_por_mail=True)

    def test_archivo_requiere_una_sola_referencia(self):
        doc = Documentacion.objects.create(codigo='SEG', descripcion='Seguro')
        recurso = Recurso.objects.create(codigo='R1', apellido='López', nombre='Carlos')
        rd = RecursoDocumentacion.objects.create(recurso=recurso, documentacion=doc)
        datos = dict(filename='a.pdf', archivo='x/a.pdf', mime_type='application/pdf', size=10)

        with self.assertRaises(ValidationError):
            DocumentoArchivo.objects.create(**datos)
        with self.assertRaises(ValidationError):
            DocumentoArchivo.objects.create(documentacion=doc, recurso_documentacion=rd, **datos)

    def test_sanitizar_nombre(self):
        self.assertEqual(sanitizar_nombre('../../etc/Certificado ART (2024).pdf'), 'Certificado_ART_2024')
        self.assertEqual(sanitizar_nombre('ñandú.pdf'), 'and')
        self.assertEqual(sanitizar_nombre('@@@.pdf'), 'archivo')
        self.assertEqual(len(sanitizar_nombre('x' * 80 + '.pdf')), 50)

    def test_ruta_archivo_por_referencia(self):
        recurso = Recurso.objects.create(codigo='R1', apellido='López', nombre='Carlos')
        doc = Documentacion.objects.create(codigo='SEG', descripcion='Seguro')
        rd = RecursoDocumentacion.objects.create(recurso=recurso, documentacion=doc)

        ruta = ruta_archivo(DocumentoArchivo(recurso_documentacion=rd), 'Póliza Vida.PDF')
        self.assertRegex(ruta, rf'^recurso-documentacion/{rd.pk}/Pliza_Vida_\d+\.pdf$')

    def test_generar_token_invalida_los_anteriores(self):
        usuario = User.objects.create_user('juan', 'juan@axioma.test', 'clave123')
        primero = PasswordResetToken.generar(usuario)
        segundo = PasswordResetToken.generar(usuario)
        primero.refresh_from_db()
        self.assertTrue(primero.usado)
        self.assertFalse(segundo.usado)
        self.assertFalse(segundo.expirado)


# ============================================================================
# PRUEBAS DEL SERVICIO DE ESTADOS
# ============================================================================

class EvaluarEstadoTests(TestCase):

    def setUp(self):
        self.hoy = date(2024, 6, 15)

    def test_vence_hoy(self):
        self.assertEqual(evaluar_estado(self.hoy, 30, self.hoy), (Estado.VENCIDO, 'Documento vence hoy'))

    def test_vencido(self):
        codigo, razon = evaluar_estado(self.hoy - timedelta(days=5), 30, self.hoy)
        self.assertEqual(codigo, Estado.VENCIDO)
        self.assertEqual(razon, 'Documento vencido hace 5 días')

    def test_por_vencer(self):
        codigo, razon = evaluar_estado(self.hoy + timedelta(days=10), 30, self.hoy)
        self.assertEqual(codigo, Estado.POR_VENCER)
        self.assertEqual(razon, 'Documento por vencer en 10 días')

    def test_limite_de_anticipacion(self):
        self.assertIsNotNone(evaluar_estado(self.hoy + timedelta(days=30), 30, self.hoy))
        self.assertIsNone(evaluar_estado(self.hoy + timedelta(days=31), 30, self.hoy))

    def test_sin_vencimiento(self):
        self.assertIsNone(evaluar_estado(None, 30, self.hoy))

    def test_estado_mas_critico(self):
        crear_estados_base()
        vigente = Estado.objects.get(codigo=Estado.VIGENTE)
        vencido = Estado.objects.get(codigo=Estado.VENCIDO)
        asignaciones = [
            RecursoDocumentacion(estado=vigente),
            RecursoDocumentacion(estado=None),
            RecursoDocumentacion(estado=vencido),
        ]
        self.assertEqual(estado_mas_critico(asignaciones), vencido)
        self.assertIsNone(estado_mas_critico([]))


class ActualizarEstadosTests(ApiTestCase):
    """Proceso de actualización automática de estados"""

    def setUp(self):
        super().setUp()
        self.crear_escenario()

    def test_actualiza_y_registra_logs(self):
        resultado = actualizar_estados_documentos(tipo_actualizacion='manual', usuario=self.admin)

        # 2 documentos de recurso + 1 universal
        self.assertEqual(resultado['totalRevisados'], 3)
        self.assertEqual(resultado['actualizados'], 2)
        self.assertEqual(resultado['errores'], 0)

        self.rd_por_vencer.refresh_from_db()
        self.doc_art.refresh_from_db()
        self.assertEqual(self.rd_por_vencer.estado, self.por_vencer)
        self.assertEqual(self.doc_art.estado, self.por_vencer)

        log_universal = EstadoDocumentoLog.objects.get(tipo_documento='universal')
        self.assertTrue(log_universal.razon.startswith('[UNIVERSAL] '))
        self.assertEqual(log_universal.estado_anterior, self.vigente)
        self.assertEqual(EstadoDocumentoLog.objects.count(), 2)

        actualizacion = ActualizacionEstados.objects.get()
        self.assertEqual(actualizacion.actualizados, 2)
        self.assertEqual(actualizacion.tipo_actualizacion, 'manual')

    def test_segunda_ejecucion_no_cambia_nada(self):
        actualizar_estados_documentos()
        resultado = actualizar_estados_documentos()
        self.assertEqual(resultado['actualizados'], 0)

    def test_documentos_de_entidad_no_se_recalculan(self):
        self.ed.fecha_vencimiento = self.hoy - timedelta(days=1)
        self.ed.save()
        actualizar_estados_documentos()
        self.ed.refresh_from_db()
        self.assertEqual(self.ed.estado, self.vigente)

    def test_dry_run_no_guarda(self):
        resultado = actualizar_estados_documentos(dry_run=True)
        self.assertEqual(resultado['actualizados'], 2)

        self.rd_por_vencer.refresh_from_db()
        self.assertEqual(self.rd_por_vencer.estado, self.vigente)
        self.assertFalse(EstadoDocumentoLog.objects.exists())
        self.assertFalse(ActualizacionEstados.objects.exists())

    def test_estados_faltantes(self):
        Estado.objects.filter(codigo=Estado.POR_VENCER).delete()
        with self.assertRaises(EstadosFaltantesError):
            actualizar_estados_documentos()

    def test_sincronizar_fechas_universales(self):
        rd = RecursoDocumentacion.objects.create(
            recurso=self.recurso, documentacion=self.doc_art,
            fecha_vencimiento=self.hoy + timedelta(days=5)
        )
        self.doc_art.fecha_vencimiento = self.hoy + timedelta(days=60)
        self.doc_art.save()

        self.assertEqual(sincronizar_fechas_universales(self.doc_art), 1)
        rd.refresh_from_db()
        self.assertEqual(rd.fecha_vencimiento, self.hoy + timedelta(days=60))


# ============================================================================
# PRUEBAS DE AUTENTICACIÓN
# ============================================================================

class AuthApiTests(TestCase):
    """Registro, login y perfil"""

    def setUp(self):
        cache.clear()

    def registrar(self, username, email, password='clave123'):
        return self.client.post(
            reverse('documentos:auth-register'),
            {'username': username, 'email': email, 'password': password, 'nombre': 'Test'},
            content_type='application/json'
        )

    def test_primer_usuario_es_administrador(self):
        response = self.registrar('primero', 'primero@axioma.test')
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['user']['esAdmin'])
        self.assertIn('token', response.json())

        response = self.registrar('segundo', 'segundo@axioma.test')
        self.assertFalse(response.json()['user']['esAdmin'])

    def test_registro_duplicado(self):
        self.registrar('juan', 'juan@axioma.test')
        response = self.registrar('juan', 'otro@axioma.test')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'El usuario ya existe')

        response = self.registrar('pedro', 'JUAN@axioma.test')
        self.assertEqual(response.json()['message'], 'El email ya está registrado')

    def test_registro_password_corta(self):
        response = self.registrar('juan', 'juan@axioma.test', password='123')
        self.assertEqual(response.status_code, 400)

    def test_login(self):
        User.objects.create_user('juan', 'juan@axioma.test', 'clave123')
        url = reverse('documentos:auth-login')

        response = self.client.post(url, {'username': 'juan', 'password': 'clave123'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Login exitoso')
        self.assertIsNotNone(User.objects.get(username='juan').last_login)

        response = self.client.post(url, {'username': 'juan', 'password': 'incorrecta'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['message'], 'Credenciales inválidas')

    def test_login_usuario_inactivo(self):
        User.objects.create_user('juan', 'juan@axioma.test', 'clave123', is_active=False)
        response = self.client.post(reverse('documentos:auth-login'),
                                    {'username': 'juan', 'password': 'clave123'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['message'], 'Usuario inactivo')

    def test_login_rate_limit(self):
        url = reverse('documentos:auth-login')
        for _ in range(10):
            self.client.post(url, {'username': 'x', 'password': 'y'}, content_type='application/json')
        response = self.client.post(url, {'username': 'x', 'password': 'y'}, content_type='application/json')
        self.assertEqual(response.status_code, 429)
        self.assertIn('Retry-After', response)

    def test_perfil_requiere_token(self):
        url = reverse('documentos:auth-profile')
        self.assertEqual(self.client.get(url).status_code, 401)
        response = self.client.get(url, HTTP_AUTHORIZATION='Bearer basura')
        self.assertEqual(response.status_code, 403)

    def test_perfil_con_token(self):
        usuario = User.objects.create_user('juan', 'juan@axioma.test', 'clave123')
        response = self.client.get(reverse('documentos:auth-profile'),
                                   HTTP_AUTHORIZATION=f'Bearer {generar_token(usuario)}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['user']['username'], 'juan')
        self.assertNotIn('password', response.json()['user'])

    @override_settings(JWT_EXPIRATION_HOURS=-1)
    def test_token_expirado(self):
        usuario = User.objects.create_user('juan', 'juan@axioma.test', 'clave123')
        response = self.client.get(reverse('documentos:auth-profile'),
                                   HTTP_AUTHORIZATION=f'Bearer {generar_token(usuario)}')
        self.assertEqual(response.status_code, 403)

    def test_token_de_usuario_inactivo(self):
        usuario = User.objects.create_user('juan', 'juan@axioma.test', 'clave123')
        token = generar_token(usuario)
        usuario.is_active = False
        usuario.save()
        response = self.client.get(reverse('documentos:auth-profile'), HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(response.status_code, 403)


class RecuperacionPasswordTests(TestCase):
    """Recuperación de contraseña por email"""

    @classmethod
    def setUpTestData(cls):
        cls.usuario = User.objects.create_user('juan', 'juan@axioma.test', 'clave123')

    def setUp(self):
        cache.clear()

    @mock.patch('documentos.views.auth.enviar_recuperacion_password')
    def test_forgot_password(self, enviar):
        url = reverse('documentos:auth-forgot-password')
        response = self.client.post(url, {'email': 'juan@axioma.test'}, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        enviar.assert_called_once()
        self.assertEqual(PasswordResetToken.objects.filter(usuario=self.usuario).count(), 1)

        # Email inexistente: misma respuesta, sin envío
        otra = self.client.post(url, {'email': 'nadie@axioma.test'}, content_type='application/json')
        self.assertEqual(otra.json()['message'], response.json()['message'])
        enviar.assert_called_once()

    @override_settings(RESEND_API_KEY='re_prueba')
    @mock.patch('documentos.utils.email.resend.Emails.send')
    def test_email_escapa_el_nombre(self, send):
        self.usuario.first_name = '<script>alert(1)</script>'
        self.usuario.save()

        self.assertTrue(enviar_recuperacion_password(self.usuario, 'abc123'))
        html = send.call_args.args[0]['html']
        self.assertIn('&lt;script&gt;alert(1)&lt;/script&gt;', html)
        self.assertNotIn('<script>', html)

    def test_forgot_password_sin_email(self):
        response = self.client.post(reverse('documentos:auth-forgot-password'), {},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'El email es requerido')

    def test_verificar_token(self):
        reset = PasswordResetToken.generar(self.usuario)
        response = self.client.get(reverse('documentos:auth-verify-reset-token', args=[reset.token]))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['valid'])
        self.assertEqual(response.json()['user']['email'], 'juan@axioma.test')

    def test_verificar_token_invalido_expirado_y_usado(self):
        def url(token):
            return reverse('documentos:auth-verify-reset-token', args=[token])

        self.assertEqual(self.client.get(url('noexiste')).json()['code'], 'INVALID_TOKEN')

        expirado = PasswordResetToken.objects.create(
            token='expirado', usuario=self.usuario, expira_en=timezone.now() - timedelta(minutes=1)
        )
        self.assertEqual(self.client.get(url(expirado.token)).json()['code'], 'TOKEN_EXPIRED')

        usado = PasswordResetToken.objects.create(
            token='usado', usuario=self.usuario, expira_en=timezone.now() + timedelta(hours=1), usado=True
        )
        self.assertEqual(self.client.get(url(usado.token)).json()['code'], 'TOKEN_USED')

    @mock.patch('documentos.views.auth.enviar_confirmacion_password')
    def test_reset_password(self, confirmar):
        reset = PasswordResetToken.generar(self.usuario)
        url = reverse('documentos:auth-reset-password')

        response = self.client.post(url, {'token': reset.token, 'newPassword': 'nueva123'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 200)
        confirmar.assert_called_once()

        self.usuario.refresh_from_db()
        self.assertTrue(self.usuario.check_password('nueva123'))
        reset.refresh_from_db()
        self.assertTrue(reset.usado)

        # El token es de un solo uso
        response = self.client.post(url, {'token': reset.token, 'newPassword': 'otra1234'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['code'], 'TOKEN_USED')


# ============================================================================
# PRUEBAS DE LA API: ESTADOS Y DOCUMENTACIÓN
# ============================================================================

class EstadoApiTests(ApiTestCase):

    def test_listado_ordenado_por_nombre(self):
        response = self.api('get', reverse('documentos:estado-list'))
        self.assertEqual(response.status_code, 200)
        nombres = [e['nombre'] for e in response.json()]
        self.assertEqual(nombres, ['En Trámite', 'Por Vencer', 'Vencido', 'Vigente'])

    def test_crear_estado(self):
        response = self.api('post', reverse('documentos:estado-list'),
                            {'nombre': 'Observado', 'codigo': 'obs', 'color': '#112233', 'nivel': 4})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['codigo'], 'OBS')

        estado = Estado.objects.get(nombre='Observado')
        self.assertEqual(estado.creado_por, self.admin)

    def test_crear_estado_validaciones(self):
        url = reverse('documentos:estado-list')
        response = self.api('post', url, {'nombre': 'Sin color'})
        self.assertEqual(response.json()['message'], 'Nombre y color son obligatorios')

        response = self.api('post', url, {'nombre': 'vigente', 'color': '#000000'})
        self.assertEqual(response.json()['message'], 'Ya existe un estado con ese nombre')

    def test_nivel_invalido(self):
        url = reverse('documentos:estado-list')
        response = self.api('post', url, {'nombre': 'Observado', 'color': '#112233', 'nivel': 'abc'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('nivel', response.json()['errors'])
        self.assertFalse(Estado.objects.filter(nombre='Observado').exists())

        response = self.api('put', reverse('documentos:estado-detail', args=[self.vigente.pk]), {'nivel': 0})
        self.assertEqual(response.status_code, 400)
        self.vigente.refresh_from_db()
        self.assertEqual(self.vigente.nivel, 1)

    def test_json_invalido(self):
        response = self.client.post(reverse('documentos:estado-list'), data='{malo',
                                    content_type='application/json', HTTP_AUTHORIZATION=self.auth())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'El cuerpo de la petición no es un JSON válido')

    def test_no_se_elimina_estado_en_uso(self):
        Documentacion.objects.create(codigo='DNI', descripcion='DNI', estado=self.vigente)
        response = self.api('delete', reverse('documentos:estado-detail', args=[self.vigente.pk]))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'No se puede eliminar el estado porque está en uso')

        response = self.api('delete', reverse('documentos:estado-detail', args=[self.en_tramite.pk]))
        self.assertEqual(response.status_code, 200)

    def test_estado_inexistente(self):
        response = self.api('get', reverse('documentos:estado-detail', args=[9999]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['message'], 'Estado no encontrado')


class DocumentacionApiTests(ApiTestCase):

    def test_crear_calcula_vencimiento(self):
        response = self.api('post', reverse('documentos:documentacion-list'), {
            'codigo': 'ART', 'descripcion': 'Cobertura ART', 'diasVigencia': 30,
            'fechaEmision': '2024-01-01', 'estadoId': self.vigente.pk,
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['fechaVencimiento'], '2024-01-31')
        self.assertEqual(response.json()['estado']['codigo'], Estado.VIGENTE)

    def test_crear_validaciones(self):
        url = reverse('documentos:documentacion-list')
        self.assertEqual(self.api('post', url, {'codigo': 'X'}).status_code, 400)

        Documentacion.objects.create(codigo='ART', descripcion='ART')
        response = self.api('post', url, {'codigo': 'art', 'descripcion': 'Otra'})
        self.assertEqual(response.json()['message'], 'Ya existe una documentación con ese código')

        response = self.api('post', url, {'codigo': 'NUEVO', 'descripcion': 'Otra', 'estadoId': 9999})
        self.assertEqual(response.json()['message'], 'Estado no válido')

    def test_valores_invalidos(self):
        url = reverse('documentos:documentacion-list')
        base = {'codigo': 'ART', 'descripcion': 'Cobertura ART'}
        invalidos = {
            'diasVigencia': 'abc',
            'diasAnticipacion': -1,
            'esUniversal': 'quizas',
            'fechaVencimiento': '2024-02-30',
        }
        for clave, valor in invalidos.items():
            with self.subTest(clave=clave):
                response = self.api('post', url, {**base, clave: valor})
                self.assertEqual(response.status_code, 400)
                self.assertIn(clave, response.json()['errors'])
        self.assertFalse(Documentacion.objects.exists())

    def test_valores_vacios_conservan_defaults(self):
        response = self.api('post', reverse('documentos:documentacion-list'), {
            'codigo': 'ART', 'descripcion': 'Cobertura ART', 'diasVigencia': None, 'esObligatorio': '',
        })
        self.assertEqual(response.status_code, 201)
        doc = Documentacion.objects.get(codigo='ART')
        self.assertEqual(doc.dias_vigencia, 365)
        self.assertFalse(doc.es_obligatorio)

    def test_paginacion(self):
        for i in range(15):
            Documentacion.objects.create(codigo=f'DOC{i:02d}', descripcion=f'Documento {i}')
        url = reverse('documentos:documentacion-list')

        data = self.api('get', url, {'page': 2, 'limit': 10}).json()
        self.assertEqual(len(data['documentacion']), 5)
        self.assertEqual(data['pagination'], {
            'currentPage': 2, 'totalPages': 2, 'totalItems': 15, 'itemsPerPage': 10
        })

        data = self.api('get', url, {'limit': 500}).json()
        self.assertEqual(data['pagination']['itemsPerPage'], 100)

        data = self.api('get', url, {'search': 'DOC03'}).json()
        self.assertEqual(data['pagination']['totalItems'], 1)

    def test_detalle_incluye_asignaciones(self):
        self.crear_escenario()
        response = self.api('get', reverse('documentos:documentacion-detail', args=[self.doc_psico.pk]))
        data = response.json()
        self.assertEqual(len(data['recursoDocumentacion']), 1)
        self.assertEqual(len(data['entidadDocumentacion']), 1)

        response = self.api('get', reverse('documentos:documentacion-recursos', args=[self.doc_psico.pk]))
        self.assertEqual(response.json()[0]['recurso']['codigo'], 'R001')

    def test_editar_universal_sincroniza_asignaciones(self):
        self.crear_escenario()
        rd = RecursoDocumentacion.objects.create(
            recurso=self.recurso, documentacion=self.doc_art,
            fecha_vencimiento=self.doc_art.fecha_vencimiento
        )
        nueva = self.hoy + timedelta(days=90)
        response = self.api('put', reverse('documentos:documentacion-detail', args=[self.doc_art.pk]),
                            {'fechaVencimiento': nueva.isoformat()})
        self.assertEqual(response.status_code, 200)

        rd.refresh_from_db()
        self.assertEqual(rd.fecha_vencimiento, nueva)

    def test_eliminar(self):
        doc = Documentacion.objects.create(codigo='ART', descripcion='ART')
        response = self.api('delete', reverse('documentos:documentacion-detail', args=[doc.pk]))
        self.assertEqual(response.json()['message'], 'Documentación eliminada correctamente')
        self.assertFalse(Documentacion.objects.exists())


# ============================================================================
# PRUEBAS DE LA API: RECURSOS Y ENTIDADES
# ============================================================================

class RecursoApiTests(ApiTestCase):

    def test_crear_recurso(self):
        url = reverse('documentos:recurso-list')
        response = self.api('post', url, {'codigo': 'R1', 'apellido': 'García', 'nombre': 'Juan'})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['activo'])

        response = self.api('post', url, {'codigo': 'r1', 'apellido': 'Otro', 'nombre': 'Otro'})
        self.assertEqual(response.json()['message'], 'Ya existe un recurso con ese código')

        response = self.api('post', url, {'codigo': 'R2'})
        self.assertEqual(response.json()['message'], 'Código, apellido y nombre son obligatorios')

    def test_fecha_baja_anterior_al_alta(self):
        recurso = Recurso.objects.create(codigo='R1', apellido='García', nombre='Juan')
        response = self.api('put', reverse('documentos:recurso-detail', args=[recurso.pk]),
                            {'fechaBaja': '2000-01-01'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'La fecha de baja no puede ser anterior a la fecha de alta')

    def test_fechas_invalidas(self):
        url = reverse('documentos:recurso-list')
        response = self.api('post', url, {
            'codigo': 'R1', 'apellido': 'García', 'nombre': 'Juan', 'fechaBaja': '2024-13-01'
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('fechaBaja', response.json()['errors'])
        self.assertFalse(Recurso.objects.exists())

        # Un datetime ISO se toma por su fecha
        response = self.api('post', url, {
            'codigo': 'R1', 'apellido': 'García', 'nombre': 'Juan', 'fechaAlta': '2024-03-01T00:00:00.000Z'
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['fechaAlta'], '2024-03-01')

        recurso = Recurso.objects.get(codigo='R1')
        doc = Documentacion.objects.create(codigo='PSICO', descripcion='Psicofísico')
        response = self.api('post', reverse('documentos:recurso-documento-create', args=[recurso.pk]),
                            {'documentacionId': doc.pk, 'fechaEmision': '2024-02-30'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('fechaEmision', response.json()['errors'])
        self.assertFalse(RecursoDocumentacion.objects.exists())

    def test_listado_con_estado_critico(self):
        self.crear_escenario()
        data = self.api('get', reverse('documentos:recurso-list'), {'search': 'garc'}).json()
        self.assertEqual(data['pagination']['totalItems'], 1)
        recurso = data['recursos'][0]
        self.assertEqual(recurso['estadoCritico']['codigo'], Estado.VENCIDO)
        self.assertEqual(recurso['cantidadDocumentos'], 2)

    def test_asignar_documento(self):
        recurso = Recurso.objects.create(codigo='R1', apellido='García', nombre='Juan')
        doc = Documentacion.objects.create(codigo='PSICO', descripcion='Psicofísico', dias_vigencia=30)
        url = reverse('documentos:recurso-documento-create', args=[recurso.pk])

        response = self.api('post', url, {
            'documentacionId': doc.pk, 'fechaEmision': '2024-01-01', 'estadoId': self.vigente.pk
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['fechaVencimiento'], '2024-01-31')

        response = self.api('post', url, {'documentacionId': doc.pk})
        self.assertEqual(response.json()['message'], 'La documentación ya está asignada a este recurso')

        response = self.api('post', url, {'documentacionId': 9999})
        self.assertEqual(response.json()['message'], 'Documentación no válida')

    def test_asignar_documento_universal_usa_sus_fechas(self):
        self.crear_escenario()
        otro = Recurso.objects.create(codigo='R2', apellido='Sosa', nombre='Diego')
        response = self.api('post', reverse('documentos:recurso-documento-create', args=[otro.pk]), {
            'documentacionId': self.doc_art.pk, 'fechaVencimiento': '2030-01-01'
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['fechaVencimiento'], self.doc_art.fecha_vencimiento.isoformat())

    def test_editar_y_eliminar_documento(self):
        self.crear_escenario()
        url = reverse('documentos:recurso-documento-detail', args=[self.rd_vencido.pk])

        response = self.api('put', url, {'estadoId': self.en_tramite.pk, 'observaciones': 'Renovando'})
        self.assertEqual(response.json()['estado']['codigo'], Estado.EN_TRAMITE)
        self.assertEqual(response.json()['observaciones'], 'Renovando')

        response = self.api('delete', url)
        self.assertEqual(response.json()['message'], 'Documento eliminado correctamente')
        self.assertFalse(RecursoDocumentacion.objects.filter(pk=self.rd_vencido.pk).exists())


class EntidadApiTests(ApiTestCase):

    def test_crear_entidad(self):
        url = reverse('documentos:entidad-list')
        response = self.api('post', url, {'razonSocial': 'Minera Andina', 'cuit': '30-7'})
        self.assertEqual(response.status_code, 201)

        response = self.api('post', url, {'razonSocial': 'Otra', 'cuit': '30-7'})
        self.assertEqual(response.json()['message'], 'Ya existe una entidad con ese CUIT')

        response = self.api('post', url, {'razonSocial': 'Sin CUIT'})
        self.assertEqual(response.json()['message'], 'Razón social y CUIT son obligatorios')

    def test_estado_critico_incluye_recursos(self):
        self.crear_escenario()
        data = self.api('get', reverse('documentos:entidad-list')).json()
        self.assertEqual(data['entidades'][0]['estadoCritico']['codigo'], Estado.VENCIDO)

    def test_detalle(self):
        self.crear_escenario()
        data = self.api('get', reverse('documentos:entidad-detail', args=[self.entidad.pk])).json()
        self.assertEqual(len(data['entidadDocumentacion']), 1)
        self.assertEqual(data['entidadRecurso'][0]['recurso']['codigo'], 'R001')

    def test_asignar_documentacion(self):
        self.crear_escenario()
        url = reverse('documentos:entidad-documentacion-create', args=[self.entidad.pk])
        response = self.api('post', url, {
            'documentacionId': self.doc_dni.pk, 'esInhabilitante': True,
            'enviarPorMail': True, 'mailDestino': 'rrhh@norte.test',
        })
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['esInhabilitante'])

        response = self.api('post', url, {'documentacionId': self.doc_dni.pk})
        self.assertEqual(response.json()['message'], 'La documentación ya está asignada a esta entidad')

        response = self.api('delete', reverse('documentos:entidad-documentacion-detail', args=[self.ed.pk]))
        self.assertEqual(response.json()['message'], 'Documentación desasignada correctamente')

    def test_asignar_recurso(self):
        self.crear_escenario()
        otro = Recurso.objects.create(codigo='R2', apellido='Sosa', nombre='Diego')
        url = reverse('documentos:entidad-recurso-create', args=[self.entidad.pk])

        response = self.api('post', url, {'recursoId': otro.pk, 'fechaInicio': '2024-01-01'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['fechaInicio'], '2024-01-01')

        response = self.api('post', url, {'recursoId': self.recurso.pk})
        self.assertEqual(response.json()['message'], 'El recurso ya está asignado a esta entidad')

        response = self.api('post', url, {'recursoId': 9999})
        self.assertEqual(response.json()['message'], 'Recurso no válido')

        asignacion = EntidadRecurso.objects.get(recurso=otro)
        response = self.api('put', reverse('documentos:entidad-recurso-detail', args=[asignacion.pk]),
                            {'activo': False, 'fechaFin': '2024-06-30'})
        self.assertFalse(response.json()['activo'])

    def test_valores_invalidos_en_asignaciones(self):
        self.crear_escenario()
        response = self.api('post', reverse('documentos:entidad-documentacion-create', args=[self.entidad.pk]),
                            {'documentacionId': self.doc_dni.pk, 'fechaVencimiento': '2024-13-01'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('fechaVencimiento', response.json()['errors'])
        self.assertFalse(EntidadDocumentacion.objects.filter(documentacion=self.doc_dni).exists())

        asignacion = EntidadRecurso.objects.get(entidad=self.entidad)
        url = reverse('documentos:entidad-recurso-detail', args=[asignacion.pk])
        for datos in ({'fechaFin': '2024-02-30'}, {'activo': 'quizas'}):
            with self.subTest(datos=datos):
                response = self.api('put', url, datos)
                self.assertEqual(response.status_code, 400)
        asignacion.refresh_from_db()
        self.assertTrue(asignacion.activo)
        self.assertIsNone(asignacion.fecha_fin)

    def test_listado_sin_consultas_por_fila(self):
        self.crear_escenario()
        url = reverse('documentos:entidad-list')
        with CaptureQueriesContext(connection) as una:
            self.api('get', url)

        for i in range(3):
            otra = Entidad.objects.create(razon_social=f'Obra {i}', cuit=f'30-9{i}')
            EntidadRecurso.objects.create(entidad=otra, recurso=self.recurso)
            EntidadDocumentacion.objects.create(
                entidad=otra, documentacion=self.doc_dni, estado=self.vigente,
                fecha_vencimiento=self.hoy + timedelta(days=60)
            )
        with CaptureQueriesContext(connection) as varias:
            data = self.api('get', url).json()

        self.assertEqual(len(data['entidades']), 4)
        self.assertEqual(len(varias), len(una))
        self.assertTrue(all(e['estadoCritico']['codigo'] == Estado.VENCIDO for e in data['entidades']))


# ============================================================================
# PRUEBAS DE LA API: USUARIOS
# ============================================================================

class UsuarioApiTests(ApiTestCase):

    def test_alta_solo_administradores(self):
        url = reverse('documentos:usuario-list')
        datos = {
            'username': 'nuevo', 'email': 'nuevo@axioma.test', 'password': 'clave123',
            'nombre': 'Nuevo', 'apellido': 'Usuario',
        }
        self.assertEqual(self.api('post', url, datos, usuario=self.usuario).status_code, 403)

        response = self.api('post', url, datos)
        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.json()['esAdmin'])

    def test_alta_validaciones(self):
        url = reverse('documentos:usuario-list')
        response = self.api('post', url, {'username': 'x'})
        self.assertEqual(response.json()['message'], 'Todos los campos son obligatorios')

        response = self.api('post', url, {
            'username': 'nuevo', 'email': 'no-es-email', 'password': 'clave123',
            'nombre': 'N', 'apellido': 'U',
        })
        self.assertEqual(response.json()['message'], 'El formato del email no es válido')

    def test_listado_para_cualquier_usuario(self):
        response = self.api('get', reverse('documentos:usuario-list'), usuario=self.usuario)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['pagination']['totalItems'], 2)

    def test_editar_propio_perfil_sin_cambiar_permisos(self):
        url = reverse('documentos:usuario-detail', args=[self.usuario.pk])
        response = self.api('put', url, {'nombre': 'Anita', 'esAdmin': True}, usuario=self.usuario)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['nombre'], 'Anita')
        self.assertFalse(response.json()['esAdmin'])

    def test_no_edita_a_otro_usuario(self):
        url = reverse('documentos:usuario-detail', args=[self.admin.pk])
        response = self.api('put', url, {'nombre': 'Hack'}, usuario=self.usuario)
        self.assertEqual(response.status_code, 403)

    def test_eliminar(self):
        url = reverse('documentos:usuario-detail', args=[self.usuario.pk])
        self.assertEqual(self.api('delete', url, usuario=self.usuario).status_code, 403)

        response = self.api('delete', reverse('documentos:usuario-detail', args=[self.admin.pk]))
        self.assertEqual(response.json()['message'], 'No puedes eliminarte a ti mismo')

        response = self.api('delete', url)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.filter(pk=self.usuario.pk).exists())

    def test_no_elimina_ultimo_usuario_activo(self):
        # El administrador quedó inactivo después de autenticarse
        User.objects.filter(pk=self.admin.pk).update(is_active=False)
        request = RequestFactory().delete(reverse('documentos:usuario-detail', args=[self.usuario.pk]))
        request.user = self.admin

        vista = UsuarioDetailView()
        vista.setup(request, pk=self.usuario.pk)
        response = vista.delete(request, pk=self.usuario.pk)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.content)['message'],
                         'No se puede eliminar el último usuario activo del sistema')
        self.assertTrue(User.objects.filter(pk=self.usuario.pk).exists())

    def test_cambiar_password_propia(self):
        url = reverse('documentos:usuario-change-password', args=[self.usuario.pk])

        response = self.api('post', url, {'newPassword': 'nueva123'}, usuario=self.usuario)
        self.assertEqual(response.json()['message'], 'La contraseña actual es obligatoria')

        response = self.api('post', url, {'currentPassword': 'mala', 'newPassword': 'nueva123'},
                            usuario=self.usuario)
        self.assertEqual(response.json()['message'], 'La contraseña actual es incorrecta')

        response = self.api('post', url, {'currentPassword': 'operador123', 'newPassword': 'nueva123'},
                            usuario=self.usuario)
        self.assertEqual(response.status_code, 200)
        self.usuario.refresh_from_db()
        self.assertTrue(self.usuario.check_password('nueva123'))

    def test_admin_cambia_password_ajena(self):
        url = reverse('documentos:usuario-change-password', args=[self.usuario.pk])
        response = self.api('post', url, {'newPassword': 'reset123'})
        self.assertEqual(response.status_code, 200)

    def test_estadisticas(self):
        User.objects.create_user('baja', 'baja@axioma.test', 'clave123', is_active=False)
        data = self.api('get', reverse('documentos:usuario-stats')).json()
        self.assertEqual(data['total'], 3)
        self.assertEqual(data['activos'], 2)
        self.assertEqual(data['inactivos'], 1)
        self.assertEqual(data['registradosUltimos30Dias'], 3)


# ============================================================================
# PRUEBAS DE DASHBOARD Y ESTADO DE DOCUMENTOS
# ============================================================================

class DashboardApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.crear_escenario()

    def test_estadisticas(self):
        data = self.api('get', reverse('documentos:dashboard-stats')).json()
        self.assertEqual(data['totalRecursos'], 1)
        self.assertEqual(data['totalDocumentacion'], 3)
        self.assertEqual(data['totalEntidades'], 1)
        # universal (+5), recurso (+10), entidad (+20)
        self.assertEqual(data['documentosPorVencer'], 3)
        self.assertEqual(data['documentosVencidos'], 1)

    def test_documentos_por_vencer(self):
        data = self.api('get', reverse('documentos:dashboard-por-vencer')).json()
        self.assertEqual([d['tipo'] for d in data], ['universal', 'recurso', 'entidad'])
        self.assertEqual(data[1]['diasParaVencer'], 10)
        self.assertEqual(data[1]['recurso']['codigo'], 'R001')

    def test_documentos_vencidos(self):
        data = self.api('get', reverse('documentos:dashboard-vencidos')).json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['diasVencidos'], 3)

    def test_documentos_vencidos_limite(self):
        for i in range(25):
            doc = Documentacion.objects.create(codigo=f'VENC{i:02d}', descripcion=f'Vencido {i}')
            RecursoDocumentacion.objects.create(
                recurso=self.recurso, documentacion=doc, estado=self.vencido,
                fecha_vencimiento=self.hoy - timedelta(days=10 + i)
            )
        url = reverse('documentos:dashboard-vencidos')

        data = self.api('get', url).json()
        self.assertEqual(len(data), 20)
        self.assertEqual(data[0]['diasVencidos'], 3)

        self.assertEqual(len(self.api('get', url, {'limit': 5}).json()), 5)
        self.assertEqual(len(self.api('get', url, {'limit': 500}).json()), 26)


class EstadoDocumentosApiTests(ApiTestCase):

    def test_sin_actualizaciones(self):
        data = self.api('get', reverse('documentos:estado-documentos-ultima')).json()
        self.assertIsNone(data['ultimaActualizacion'])
        self.assertEqual(data['mensaje'], 'No se han realizado actualizaciones')

    def test_actualizacion_manual(self):
        self.crear_escenario()
        response = self.api('post', reverse('documentos:estado-documentos-actualizar'), usuario=self.usuario)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Actualización completada: 2 documentos actualizados')

        data = self.api('get', reverse('documentos:estado-documentos-ultima')).json()
        self.assertEqual(data['tipoActualizacion'], 'manual')
        self.assertEqual(data['actualizados'], 2)

        logs = self.api('get', reverse('documentos:estado-documentos-logs')).json()
        self.assertEqual(len(logs), 2)
        self.assertEqual(logs[0]['usuarioId'], self.usuario.pk)

    def test_actualizacion_sin_estados(self):
        Estado.objects.filter(codigo=Estado.VENCIDO).delete()
        response = self.api('post', reverse('documentos:estado-documentos-actualizar'))
        self.assertEqual(response.status_code, 400)


# ============================================================================
# PRUEBAS DE ARCHIVOS
# ============================================================================

class ArchivoApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.upload_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.upload_dir, ignore_errors=True)
        override = override_settings(MEDIA_ROOT=self.upload_dir)
        override.enable()
        self.addCleanup(override.disable)

        self.doc = Documentacion.objects.create(codigo='DNI', descripcion='DNI')

    def subir(self, *archivos, tipo='documentacion', pk=None):
        url = reverse('documentos:archivo-upload', kwargs={'tipo': tipo, 'pk': pk or self.doc.pk})
        return self.client.post(url, {'files': list(archivos), 'descripcion': 'Escaneo'},
                                HTTP_AUTHORIZATION=self.auth())

    def pdf(self, nombre='certificado.pdf', relleno=b''):
        return SimpleUploadedFile(nombre, PDF_MINIMO + relleno, content_type='application/pdf')

    def test_subir_archivo(self):
        response = self.subir(self.pdf())
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['message'], '1 archivo(s) subido(s) correctamente')

        archivo = DocumentoArchivo.objects.get()
        self.assertEqual(archivo.mime_type, 'application/pdf')
        self.assertEqual(archivo.creado_por, self.admin)
        self.assertEqual(archivo.descripcion, 'Escaneo')
        self.assertTrue(archivo.stored_filename.startswith('certificado_'))
        self.assertTrue(archivo.archivo.name.startswith(f'documentacion/{self.doc.pk}/'))
        self.assertTrue((Path(self.upload_dir) / archivo.archivo.name).exists())
        self.assertEqual(response.json()['archivos'][0]['storedFilename'], archivo.stored_filename)

    def test_versionado(self):
        self.subir(self.pdf())
        self.subir(self.pdf())
        versiones = list(DocumentoArchivo.objects.order_by('version').values_list('version', flat=True))
        self.assertEqual(versiones, [1, 2])

    def test_nombres_repetidos_en_el_mismo_instante(self):
        with mock.patch('documentos.models.time') as reloj:
            reloj.time.return_value = 1700000000.0
            response = self.subir(self.pdf(), self.pdf())
        self.assertEqual(response.status_code, 201)

        nombres = set(DocumentoArchivo.objects.values_list('archivo', flat=True))
        self.assertEqual(len(nombres), 2)
        for nombre in nombres:
            self.assertTrue((Path(self.upload_dir) / nombre).exists())

    def test_archivo_de_asignacion(self):
        recurso = Recurso.objects.create(codigo='R1', apellido='García', nombre='Juan')
        rd = RecursoDocumentacion.objects.create(recurso=recurso, documentacion=self.doc)
        response = self.subir(self.pdf(), tipo='recurso-documentacion', pk=rd.pk)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['archivos'][0]['recursoDocumentacionId'], rd.pk)
        self.assertTrue(DocumentoArchivo.objects.get().archivo.name.startswith(f'recurso-documentacion/{rd.pk}/'))

    def test_rechaza_extension_y_contenido(self):
        response = self.subir(SimpleUploadedFile('script.exe', b'MZ\x90\x00'))
        self.assertEqual(response.status_code, 400)

        response = self.subir(SimpleUploadedFile('falso.pdf', b'esto es texto plano'))
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('Tipo de archivo no permitido'))
        self.assertFalse(DocumentoArchivo.objects.exists())

    @override_settings(MAX_ARCHIVO_SIZE=1024)
    def test_rechaza_archivo_demasiado_grande(self):
        response = self.subir(self.pdf(), self.pdf('grande.pdf', relleno=b'0' * 2048))
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('El archivo grande.pdf es demasiado grande'))
        self.assertFalse(DocumentoArchivo.objects.exists())
        self.assertEqual(list(Path(self.upload_dir).rglob('*.pdf')), [])

    def test_limite_de_archivos_por_subida(self):
        response = self.subir(*[self.pdf(f'doc{i}.pdf') for i in range(21)])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Se pueden subir como máximo 20 archivos por vez')
        self.assertFalse(DocumentoArchivo.objects.exists())

    def test_demasiados_archivos_responde_json(self):
        response = self.subir(*[self.pdf(f'doc{i}.pdf') for i in range(22)])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response['Content-Type'], 'application/json')
        self.assertEqual(response.json()['message'], 'Se pueden subir como máximo 20 archivos por vez')

    def test_sin_archivos(self):
        response = self.subir()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'No se proporcionaron archivos')

    def test_referencia_inexistente(self):
        response = self.subir(self.pdf(), pk=9999)
        self.assertEqual(response.status_code, 404)

    def test_listar_descargar_y_eliminar(self):
        self.subir(self.pdf())
        archivo = DocumentoArchivo.objects.get()

        listado = self.api('get', reverse('documentos:archivo-list',
                                          kwargs={'tipo': 'documentacion', 'pk': self.doc.pk})).json()
        self.assertEqual(listado[0]['filename'], 'certificado.pdf')

        response = self.api('get', reverse('documentos:archivo-download', args=[archivo.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertIn('certificado.pdf', response['Content-Disposition'])
        self.assertEqual(b''.join(response.streaming_content), PDF_MINIMO)
        response.close()

        ruta = Path(self.upload_dir) / archivo.archivo.name
        response = self.api('delete', reverse('documentos:archivo-detail', args=[archivo.pk]))
        self.assertEqual(response.json()['message'], 'Archivo eliminado correctamente')
        self.assertFalse(ruta.exists())
        self.assertFalse(DocumentoArchivo.objects.exists())

    def test_descarga_sin_archivo_fisico(self):
        self.subir(self.pdf())
        archivo = DocumentoArchivo.objects.get()
        archivo.archivo.storage.delete(archivo.archivo.name)

        response = self.api('get', reverse('documentos:archivo-download', args=[archivo.pk]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['message'], 'Archivo físico no encontrado')


# ============================================================================
# PRUEBAS DE REPORTES
# ============================================================================

class ReporteApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.crear_escenario()

    def test_documentacion_por_estado(self):
        url = reverse('documentos:reporte-documentacion-por-estado')
        data = self.api('get', url).json()
        self.assertEqual(data['estadisticas']['totalDocumentos'], 2)
        self.assertEqual(data['estadisticas']['recursosConDocumentos'], 1)
        self.assertEqual(len(data['estadisticas']['porEstado']), 2)
        self.assertEqual(data['reporte'][0]['recurso']['entidades'], 'Constructora Norte')

        data = self.api('get', url, {'estadoId': self.vencido.pk}).json()
        self.assertEqual(data['estadisticas']['totalDocumentos'], 1)
        self.assertEqual(data['filtros']['estadoId'], self.vencido.pk)

    def test_recursos_por_entidad(self):
        data = self.api('get', reverse('documentos:reporte-recursos-por-entidad')).json()
        stats = data['reporte'][0]['recursos'][0]['estadisticasDocumentacion']
        self.assertEqual(stats['total'], 2)
        self.assertEqual(stats['vencidos'], 1)
        self.assertEqual(stats['vigentes'], 1)
        self.assertEqual(stats['estadoCritico']['codigo'], Estado.VENCIDO)
        self.assertEqual(data['estadisticasGenerales']['totalRecursos'], 1)

    def test_documentos_proximos_vencer(self):
        data = self.api('get', reverse('documentos:reporte-documentos-proximos-vencer'), {'dias': 30}).json()
        self.assertEqual(data['estadisticas']['totalDocumentos'], 1)
        self.assertEqual(data['reporte'][0]['prioridad'], 'Alta')
        self.assertEqual(data['reporte'][0]['diasHastaVencimiento'], 10)
        self.assertEqual(data['estadisticas']['porDias'], {
            'proximos7Dias': 0, 'proximos15Dias': 1, 'proximos30Dias': 1
        })

    def test_entidades_afectadas_con_coma_en_razon_social(self):
        otra = Entidad.objects.create(razon_social='ACME, S.A.', cuit='30-2')
        EntidadRecurso.objects.create(entidad=otra, recurso=self.recurso)

        data = self.api('get', reverse('documentos:reporte-documentos-proximos-vencer'), {'dias': 30}).json()
        self.assertEqual(data['estadisticas']['entidadesAfectadas'], 2)

    def test_exportar_csv(self):
        response = self.api('get', reverse('documentos:reporte-documentacion-por-estado'), {'formato': 'csv'})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertIn('documentacion_por_estado_', response['Content-Disposition'])
        contenido = response.content.decode('utf-8')
        self.assertIn('García, Juan', contenido)

    def test_exportar_excel_y_pdf(self):
        url = reverse('documentos:reporte-recursos-por-entidad')
        response = self.api('get', url, {'formato': 'excel'})
        self.assertEqual(
            response['Content-Type'],
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        self.assertIn('.xlsx', response['Content-Disposition'])

        response = self.api('get', url, {'formato': 'pdf'})
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_formato_invalido(self):
        response = self.api('get', reverse('documentos:reporte-documentacion-por-estado'), {'formato': 'xml'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Formato no válido. Opciones: csv, excel, pdf')


# ============================================================================
# PRUEBAS DE COMANDOS Y MIDDLEWARE
# ============================================================================

class ComandosTests(TestCase):

    def test_inicializar_estados_es_idempotente(self):
        out = StringIO()
        call_command('inicializar_estados', stdout=out)
        self.assertEqual(Estado.objects.count(), 4)
        self.assertIn('4 estado(s) creado(s)', out.getvalue())

        call_command('inicializar_estados', stdout=StringIO())
        self.assertEqual(Estado.objects.count(), 4)

    def test_actualizar_estados_sin_estados(self):
        with self.assertRaises(CommandError):
            call_command('actualizar_estados_documentos', stdout=StringIO())

    def test_actualizar_estados_dry_run(self):
        crear_estados_base()
        doc = Documentacion.objects.create(codigo='DNI', descripcion='DNI')
        recurso = Recurso.objects.create(codigo='R1', apellido='García', nombre='Juan')
        rd = RecursoDocumentacion.objects.create(
            recurso=recurso, documentacion=doc, fecha_vencimiento=timezone.localdate() - timedelta(days=1)
        )

        out = StringIO()
        call_command('actualizar_estados_documentos', '--dry-run', stdout=out)
        self.assertIn('Actualizados: 1', out.getvalue())
        rd.refresh_from_db()
        self.assertIsNone(rd.estado)

        call_command('actualizar_estados_documentos', stdout=StringIO())
        rd.refresh_from_db()
        self.assertEqual(rd.estado.codigo, Estado.VENCIDO)


@override_settings(CORS_ALLOWED_ORIGINS=['http://app.test'])
class CorsTests(TestCase):

    def test_preflight(self):
        response = self.client.options(
            '/api/estados',
            HTTP_ORIGIN='http://app.test',
            HTTP_ACCESS_CONTROL_REQUEST_METHOD='PUT',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Access-Control-Allow-Origin'], 'http://app.test')
        self.assertIn('authorization', response['Access-Control-Allow-Headers'])
        self.assertIn('PUT', response['Access-Control-Allow-Methods'])

    def test_respuesta_con_origen_permitido(self):
        response = self.client.get('/api/estados', HTTP_ORIGIN='http://app.test')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response['Access-Control-Allow-Origin'], 'http://app.test')

    def test_origen_no_permitido(self):
        response = self.client.get('/api/estados', HTTP_ORIGIN='http://otro.test')
        self.assertEqual(response.status_code, 401)
        self.assertNotIn('Access-Control-Allow-Origin', response)
        self.assertEqual(json.loads(response.content)['message'], 'Token de acceso requerido')
