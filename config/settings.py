"""
Django settings for the Task Manager project.

All deployment-specific values come from environment variables.
"""
import os
from pathlib import Path

from .database import get_database_config


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes')


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-dev-only-change-me')
DEBUG = _env_bool('DEBUG', True)
ALLOWED_HOSTS = [h for h in os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.identity',
    'apps.tasks',
    'apps.client',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'
ASGI_APPLICATION = 'config.asgi.application'

DATABASES = {
    'default': get_database_config(BASE_DIR),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# Identity
# =============================================================================
# firebase: verify Firebase ID tokens with firebase-admin
# local:    static token table, development only

IDENTITY_BACKEND = os.getenv('IDENTITY_BACKEND', 'firebase')
FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH') or None
FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID') or None
FIREBASE_CHECK_REVOKED = _env_bool('FIREBASE_CHECK_REVOKED', False)

# "token:uid,token:uid", only read by the local backend
LOCAL_IDENTITY_TOKENS = os.getenv('LOCAL_IDENTITY_TOKENS', '')


# =============================================================================
# Tasks
# =============================================================================
# When False, update/delete key on task id only, regardless of requester.

TASKS_ENFORCE_OWNERSHIP_ON_WRITE = _env_bool('TASKS_ENFORCE_OWNERSHIP_ON_WRITE', False)


# =============================================================================
# Client
# =============================================================================

FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY', '')
TASK_API_BASE_URL = os.getenv('TASK_API_BASE_URL', 'http://localhost:8000/api')
TASK_CLIENT_SESSION_FILE = os.getenv('TASK_CLIENT_SESSION_FILE') or None
TASK_CLIENT_TIMEOUT = float(os.getenv('TASK_CLIENT_TIMEOUT', '10'))


# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
    },
}
