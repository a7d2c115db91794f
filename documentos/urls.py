from django.urls import path, re_path

from . import views

app_name = 'documentos'

TIPO_REFERENCIA = r'(?P<tipo>documentacion|recurso-documentacion|entidad-documentacion)'

urlpatterns = [
    # Autenticación
    path('auth/register', views.RegisterView.as_view(), name='auth-register'),
    path('auth/login', views.LoginView.as_view(), name='auth-login'),
    path('auth/profile', views.ProfileView.as_view(), name='auth-profile'),
    path('auth/forgot-password', views.ForgotPasswordView.as_view(), name='auth-forgot-password'),
    path('auth/verify-reset-token/<str:token>', views.VerifyResetTokenView.as_view(), name='auth-verify-reset-token'),
    path('auth/reset-password', views.ResetPasswordView.as_view(), name='auth-reset-password'),

    # Estados
    path('estados', views.EstadoListView.as_view(), name='estado-list'),
    path('estados/<int:pk>', views.EstadoDetailView.as_view(), name='estado-detail'),

    # Documentación
    path('documentacion', views.DocumentacionListView.as_view(), name='documentacion-list'),
    path('documentacion/<int:pk>', views.DocumentacionDetailView.as_view(), name='documentacion-detail'),
    path('documentacion/<int:pk>/recursos', views.DocumentacionRecursosView.as_view(), name='documentacion-recursos'),
    path('documentacion/<int:pk>/entidades', views.DocumentacionEntidadesView.as_view(), name='documentacion-entidades'),

    # Recursos
    path('recursos', views.RecursoListView.as_view(), name='recurso-list'),
    path('recursos/<int:pk>', views.RecursoDetailView.as_view(), name='recurso-detail'),
    path('recursos/<int:pk>/documentos', views.RecursoDocumentoCreateView.as_view(), name='recurso-documento-create'),
    path('recursos/documentos/<int:pk>', views.RecursoDocumentoDetailView.as_view(), name='recurso-documento-detail'),

    # Entidades
    path('entidades', views.EntidadListView.as_view(), name='entidad-list'),
    path('entidades/<int:pk>', views.EntidadDetailView.as_view(), name='entidad-detail'),
    path('entidades/<int:pk>/documentacion', views.EntidadDocumentacionCreateView.as_view(),
         name='entidad-documentacion-create'),
    path('entidades/documentacion/<int:pk>', views.EntidadDocumentacionDetailView.as_view(),
         name='entidad-documentacion-detail'),
    path('entidades/<int:pk>/recursos', views.EntidadRecursoCreateView.as_view(), name='entidad-recurso-create'),
    path('entidades/recursos/<int:pk>', views.EntidadRecursoDetailView.as_view(), name='entidad-recurso-detail'),

    # Usuarios
    path('usuarios', views.UsuarioListView.as_view(), name='usuario-list'),
    path('usuarios/stats/overview', views.UsuarioStatsView.as_view(), name='usuario-stats'),
    path('usuarios/<int:pk>', views.UsuarioDetailView.as_view(), name='usuario-detail'),
    path('usuarios/<int:pk>/change-password', views.UsuarioChangePasswordView.as_view(),
         name='usuario-change-password'),

    # Dashboard
    path('dashboard/stats', views.DashboardStatsView.as_view(), name='dashboard-stats'),
    path('dashboard/documentos-por-vencer', views.DocumentosPorVencerView.as_view(),
         name='dashboard-por-vencer'),
    path('dashboard/documentos-vencidos', views.DocumentosVencidosView.as_view(), name='dashboard-vencidos'),

    # Estado de documentos
    path('estado-documentos/actualizar', views.ActualizarEstadosView.as_view(), name='estado-documentos-actualizar'),
    path('estado-documentos/ultima-actualizacion', views.UltimaActualizacionView.as_view(),
         name='estado-documentos-ultima'),
    path('estado-documentos/logs', views.LogsEstadoView.as_view(), name='estado-documentos-logs'),

    # Archivos
    re_path(rf'^archivos/{TIPO_REFERENCIA}/(?P<pk>[0-9]+)/upload$', views.ArchivoUploadView.as_view(),
            name='archivo-upload'),
    re_path(rf'^archivos/{TIPO_REFERENCIA}/(?P<pk>[0-9]+)$', views.ArchivoListView.as_view(), name='archivo-list'),
    path('archivos/<int:pk>/download', views.ArchivoDownloadView.as_view(), name='archivo-download'),
    path('archivos/<int:pk>', views.ArchivoDetailView.as_view(), name='archivo-detail'),

    # Reportes
    path('reportes/documentacion-por-estado', views.DocumentacionPorEstadoView.as_view(),
         name='reporte-documentacion-por-estado'),
    path('reportes/recursos-por-entidad', views.RecursosPorEntidadView.as_view(),
         name='reporte-recursos-por-entidad'),
    path('reportes/documentos-proximos-vencer', views.DocumentosProximosVencerView.as_view(),
         name='reporte-documentos-proximos-vencer'),
]
