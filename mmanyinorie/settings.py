# mmanyinorie/settings.py

"""
Django settings for the Mmanyin Orie community registry.

All deployment-specific values come from environment variables so the same
settings module serves development, tests and production.
"""

import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Apps live in apps/ and are imported by their bare names (members, core, ...)
APPS_DIR = BASE_DIR / 'apps'
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


# =============================================================================
# CORE
# =============================================================================

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-mmanyin-orie-development-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [
    host.strip() for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third party
    'django_countries',
    'anymail',

    # Local apps
    'utils',
    'accounts',
    'core',
    'members.apps.MembersConfig',
    'contributions.apps.ContributionsConfig',
    'invitations.apps.InvitationsConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'utils.middleware.RequestContextMiddleware',
]

ROOT_URLCONF = 'mmanyinorie.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'accounts.context_processors.user_context',
                'core.context_processors.active_community',
            ],
        },
    },
]

WSGI_APPLICATION = 'mmanyinorie.wsgi.application'


# =============================================================================
# DATABASE
# =============================================================================

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('DB_USER', ''),
        'PASSWORD': os.environ.get('DB_PASSWORD', ''),
        'HOST': os.environ.get('DB_HOST', ''),
        'PORT': os.environ.get('DB_PORT', ''),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# AUTHENTICATION
# =============================================================================

# EmailAuthBackend extends ModelBackend; a second backend would bypass the lockout
AUTHENTICATION_BACKENDS = [
    'accounts.backends.EmailAuthBackend',
]

LOGIN_URL = 'accounts:login'
LOGIN_REDIRECT_URL = 'core:home'
LOGOUT_REDIRECT_URL = 'accounts:login'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LOGIN_MAX_FAILED_ATTEMPTS = env_int('LOGIN_MAX_FAILED_ATTEMPTS', 5)
LOGIN_LOCKOUT_MINUTES = env_int('LOGIN_LOCKOUT_MINUTES', 30)

# Lifetime of bearer tokens used by the avatar upload API
API_TOKEN_MAX_AGE = env_int('API_TOKEN_MAX_AGE', 60 * 60)


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('DJANGO_TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True


# =============================================================================
# STATIC & MEDIA
# =============================================================================

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STATICFILES_DIRS = [BASE_DIR / 'static']

MEDIA_URL = '/media/'
MEDIA_ROOT = Path(os.environ.get('MEDIA_ROOT', BASE_DIR / 'media'))


# =============================================================================
# EMAIL
# =============================================================================

RESEND_API_KEY = os.environ.get('RESEND_API_KEY', '')
RESEND_DOMAIN = os.environ.get('RESEND_DOMAIN', 'resend.dev')

ANYMAIL = {
    'RESEND_API_KEY': RESEND_API_KEY,
}

EMAIL_BACKEND = os.environ.get(
    'EMAIL_BACKEND',
    'anymail.backends.resend.EmailBackend' if RESEND_API_KEY
    else 'django.core.mail.backends.console.EmailBackend'
)

EMAIL_FROM_NAME = os.environ.get('EMAIL_FROM_NAME', 'Mmanyin Orie')


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================

# Origin used when building invitation links outside of a request
APP_URL = os.environ.get('APP_URL', 'http://localhost:8000')

INVITATION_TTL_DAYS = env_int('INVITATION_TTL_DAYS', 14)

COMMUNITY_DEFAULTS = {
    'tier1_age': env_int('DEFAULT_TIER1_AGE', 18),
    'tier2_age': env_int('DEFAULT_TIER2_AGE', 25),
    'currency': os.environ.get('DEFAULT_CURRENCY', '₦'),
}


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} [{levelname}] {name}: {message}',
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
        'level': 'WARNING',
    },
    'loggers': {
        'django': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
        'accounts': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'core': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'members': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'contributions': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'invitations': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'utils': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}
