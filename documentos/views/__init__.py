"""
Vistas de la API de AxiomaDocs.

Este paquete organiza las vistas por dominio:
- auth: registro, login, perfil y recuperación de contraseña
- estados, documentacion, recursos, entidades, usuarios: CRUD
- dashboard: estadísticas y vencimientos
- estado_documentos: actualización de estados y logs
- archivos: adjuntos
- reportes: reportes y exportaciones
"""

from .archivos import ArchivoDetailView, ArchivoDownloadView, ArchivoListView, ArchivoUploadView
from .auth import (
    ForgotPasswordView,
    LoginView,
    ProfileView,
    RegisterView,
    ResetPasswordView,
    VerifyResetTokenView,
)
from .dashboard import DashboardStatsView, DocumentosPorVencerView, DocumentosVencidosView
from .documentacion import (
    DocumentacionDetailView,
    DocumentacionEntidadesView,
    DocumentacionListView,
    DocumentacionRecursosView,
)
from .entidades import (
    EntidadDetailView,
    EntidadDocumentacionCreateView,
    EntidadDocumentacionDetailView,
    EntidadListView,
    EntidadRecursoCreateView,
    EntidadRecursoDetailView,
)
from .estado_documentos import ActualizarEstadosView, LogsEstadoView, UltimaActualizacionView
from .estados import EstadoDetailView, EstadoListView
from .recursos import (
    RecursoDetailView,
    RecursoDocumentoCreateView,
    RecursoDocumentoDetailView,
    RecursoListView,
)
from .reportes import DocumentacionPorEstadoView, DocumentosProximosVencerView, RecursosPorEntidadView
from .usuarios import UsuarioChangePasswordView, UsuarioDetailView, UsuarioListView, UsuarioStatsView
