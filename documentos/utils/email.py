"""
Envío de correos de recuperación de contraseña
AxiomaDocs - Usando Resend
"""

import logging

import resend
from django.conf import settings
from django.utils.html import escape

logger = logging.getLogger(__name__)


def _enviar(destinatario, asunto, cuerpo_html):
    """Envía un correo con Resend. Retorna True si el envío fue exitoso."""
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY no configurada, no se envía el correo a %s", destinatario)
        return False

    resend.api_key = settings.RESEND_API_KEY
    params = {
        "from": settings.RESEND_FROM_EMAIL,
        "to": [destinatario],
        "subject": asunto,
        "html": cuerpo_html,
    }

    try:
        resend.Emails.send(params)
    except Exception:
        logger.exception("Error enviando correo con Resend a %s", destinatario)
        return False

    logger.info("Correo '%s' enviado a %s", asunto, destinatario)
    return True


def enviar_recuperacion_password(usuario, token):
    """
    Envía el enlace de recuperación de contraseña.

    Args:
        usuario: Instancia de User
        token: Token de recuperación (PasswordResetToken.token)

    Returns:
        bool: True si el envío fue exitoso
    """
    reset_url = escape(f"{settings.FRONTEND_URL}/reset-password?token={token}")
    nombre = escape(usuario.get_full_name() or usuario.username)

    cuerpo_html = f"""
    <html>
    <body style="font-family: Arial, sans-serif; font-size: 14px; color: #333;">
        <h2 style="color:#2563eb;">Recuperar Contraseña</h2>
        <p>Hola <strong>{nombre}</strong>,</p>

        <p>Hemos recibido una solicitud para restablecer la contraseña de tu cuenta en AxiomaDocs.</p>

        <p>Si solicitaste este cambio, haz clic en el siguiente enlace para crear una nueva contraseña:</p>

        <p style="text-align:center;">
            <a href="{reset_url}" style="background:#2563eb;color:#fff;padding:12px 24px;
               text-decoration:none;border-radius:6px;">Restablecer Contraseña</a>
        </p>

        <p><strong>Importante:</strong> este enlace expira en 1 hora y solo puede usarse una vez.
        Si no solicitaste el cambio, ignora este correo.</p>

        <p style="margin-top:20px;">
            Saludos cordiales,<br>
            <b>AxiomaDocs - Sistema de Gestión Documental</b>
        </p>
    </body>
    </html>
    """

    return _enviar(usuario.email, "Recuperar Contraseña - AxiomaDocs", cuerpo_html)


def enviar_confirmacion_password(usuario):
    """Notifica al usuario que su contraseña fue cambiada."""
    nombre = escape(usuario.get_full_name() or usuario.username)

    cuerpo_html = f"""
    <html>
    <body style="font-family: Arial, sans-serif; font-size: 14px; color: #333;">
        <h2 style="color:#10b981;">Contraseña actualizada</h2>
        <p>Hola <strong>{nombre}</strong>,</p>

        <p>Te confirmamos que la contraseña de tu cuenta en AxiomaDocs fue cambiada correctamente.</p>

        <p>Si no realizaste este cambio, comunícate de inmediato con el administrador del sistema.</p>

        <p style="margin-top:20px;">
            Saludos cordiales,<br>
            <b>AxiomaDocs - Sistema de Gestión Documental</b>
        </p>
    </body>
    </html>
    """

    return _enviar(usuario.email, "Contraseña actualizada - AxiomaDocs", cuerpo_html)
