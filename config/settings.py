"""
Django settings for axiomadocs project.
"""

import sys
from pathlib import Path
from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# `python manage.py test` (o pytest) corre sin .env sobre SQLite
TESTING = (len(sys.argv) > 1 and sys.argv[1] == 'test') or 'pytest' in sys.modules


# SECURITY WARNING: keep the secret key used in production secret!
# SECRET_KEY debe estar definida en el archivo .env - NO hay valor por defecto por seguridad
try:
    SECRET_KEY = config('SECRET_KEY')
except Exception:
    if not TESTING:
        raise ValueError(
            "La variable SECRET_KEY no está definida en el archivo .env. "
            "Genera una con: python -c 'from django.core.management.utils import get_random_secret_key; print(get_random_secret_key())'"
        )
    SECRET_KEY = 'clave-de-pruebas-no-usar-en-produccion'

# SECURITY WARNING: don't run with debug turned on in production!
# Por defecto es False para producción segura
DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Terceros
    'corsheaders',

    # Aplicaciones locales
    'documentos',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',  # Servir archivos estáticos en producción
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'documentos.signals.CurrentUserMiddleware',  # Para capturar usuario en signals
]

ROOT_URLCONF = 'config.urls'

# Las URLs de la API no llevan barra final
APPEND_SLASH = False

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# Database
# En desarrollo usa SQLite, en producción PostgreSQL

if DEBUG or TESTING:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': config('DB_NAME', default='axiomadocs'),
            'USER': config('DB_USER', default='axiomadocs_user'),
            'PASSWORD': config('DB_PASSWORD', default=''),
            'HOST': config('DB_HOST', default='localhost'),
            'PORT': config('DB_PORT', default='5432'),
        }
    }


# Cache (usado por el rate limiting)

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'axiomadocs',
    }
}


# Password validation

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {'min_length': 6},
    },
]


# Internationalization

LANGUAGE_CODE = 'es-ar'

TIME_ZONE = config('TIME_ZONE', default='America/Argentina/Buenos_Aires')

USE_I18N = True

USE_TZ = True


# Static files (admin)

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# WhiteNoise para servir archivos estáticos en producción
STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# ==============================================================================
# CONFIGURACIONES DE ARCHIVOS Y UPLOADS
# ==============================================================================

UPLOAD_ROOT = Path(config('UPLOAD_ROOT', default='') or BASE_DIR / 'uploads')

# Storage por defecto de los adjuntos; se descargan solo por la API autenticada
MEDIA_ROOT = UPLOAD_ROOT

# Límites de tamaño de archivos
MAX_ARCHIVO_SIZE = config('MAX_ARCHIVO_SIZE', default=10 * 1024 * 1024, cast=int)  # 10MB
MAX_ARCHIVOS_POR_SUBIDA = config('MAX_ARCHIVOS_POR_SUBIDA', default=20, cast=int)
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024  # 10MB
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024  # 10MB
DATA_UPLOAD_MAX_NUMBER_FILES = MAX_ARCHIVOS_POR_SUBIDA + 1
FILE_UPLOAD_PERMISSIONS = 0o644
FILE_UPLOAD_DIRECTORY_PERMISSIONS = 0o755

# ==============================================================================
# VENCIMIENTOS
# ==============================================================================

# Días de anticipación si la documentación no define los suyos
DIAS_ANTICIPACION_DEFAULT = config('DIAS_ANTICIPACION_DEFAULT', default=30, cast=int)

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ==============================================================================
# AUTENTICACIÓN JWT
# ==============================================================================
JWT_SECRET = config('JWT_SECRET', default='') or SECRET_KEY
JWT_EXPIRATION_HOURS = config('JWT_EXPIRATION_HOURS', default=24, cast=int)

# ==============================================================================
# CONFIGURACIÓN DE EMAIL (Resend)
# ==============================================================================
RESEND_API_KEY = config('RESEND_API_KEY', default='')
RESEND_FROM_EMAIL = config('RESEND_FROM_EMAIL', default='AxiomaDocs <noreply@axiomadocs.com>')
FRONTEND_URL = config('FRONTEND_URL', default='http://localhost:3000')

# ==============================================================================
# CORS
# ==============================================================================
CORS_ALLOWED_ORIGINS = config('CORS_ALLOWED_ORIGINS', default='http://localhost:3000', cast=Csv())
CORS_ALLOW_METHODS = ['DELETE', 'GET', 'OPTIONS', 'POST', 'PUT']

# Session security (solo admin de Django)
SESSION_COOKIE_AGE = 86400  # 24 horas


# ==============================================================================
# CONFIGURACIONES DE SEGURIDAD PARA PRODUCCIÓN
# ==============================================================================

if not DEBUG and not TESTING:
    # HTTPS/SSL
    SECURE_SSL_REDIRECT = config('SECURE_SSL_REDIRECT', default=True, cast=bool)
    SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

    # Cookies seguras
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

    # HSTS (HTTP Strict Transport Security)
    SECURE_HSTS_SECONDS = 31536000  # 1 año
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True

    # Otras protecciones
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = 'DENY'

    # CSRF trusted origins (para el admin detrás de proxy)
    CSRF_TRUSTED_ORIGINS = config('CSRF_TRUSTED_ORIGINS', default='', cast=Csv())


# ==============================================================================
# LOGGING
# ==============================================================================

LOGS_DIR = BASE_DIR / 'logs'
LOGS_DIR.mkdir(exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
        'audit': {
            'format': '{asctime} {levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'file': {
            'level': 'ERROR',
            'class': 'logging.FileHandler',
            'filename': LOGS_DIR / 'django_errors.log',
            'formatter': 'verbose',
        },
        'audit_file': {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOGS_DIR / 'audit.log',
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5,
            'formatter': 'audit',
        },
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'] if DEBUG else ['file', 'console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'] if DEBUG else ['file', 'console'],
            'level': 'INFO',
            'propagate': False,
        },
        'documentos': {
            'handlers': ['console', 'audit_file'] if not DEBUG else ['console'],
            'level': 'WARNING' if TESTING else 'INFO',
            'propagate': False,
        },
    },
}
