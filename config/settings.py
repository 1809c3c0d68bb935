"""
Django settings for Kredika project.

For more information on this file, see
https://docs.djangoproject.com/en/4.2/topics/settings/
"""

from pathlib import Path
from decimal import Decimal
from decouple import config, Csv
import dj_database_url
import sys


# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# =============================================================================
# CORE SETTINGS
# =============================================================================

SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')
DEBUG = config('DEBUG', default=False, cast=bool)
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())


# =============================================================================
# APPLICATION DEFINITION
# =============================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Local apps
    'apps.core',
    'apps.accounts',
    'apps.catalog',
    'apps.orders',
    'apps.carts',
    'apps.wishlists',
    'apps.credit',
    'apps.payments',
    'apps.notifications',
    'apps.assets',

    # Third-party
    'rest_framework',
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
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# DATABASE
# =============================================================================

# Default to SQLite for simplicity, override with DATABASE_URL
DATABASES = {
    'default': dj_database_url.config(
        default=config('DATABASE_URL', default=f'sqlite:///{BASE_DIR / "db.sqlite3"}'),
        conn_max_age=600,
    )
}


# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = 'fr'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


# =============================================================================
# STATIC FILES
# =============================================================================

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# DEFAULT PRIMARY KEY
# =============================================================================

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = config('LOG_LEVEL', default='INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'json': {
            '()': 'apps.core.logging.KredikaJsonFormatter',
            'format': '%(timestamp)s %(level)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'stdout': {
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stdout',
            'formatter': 'json',
        },
    },
    'root': {
        'handlers': ['stdout'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['stdout'],
            'level': config('DJANGO_LOG_LEVEL', default='WARNING'),
            'propagate': False,
        },
    },
}


# =============================================================================
# KREDIKA DOMAIN SETTINGS
# =============================================================================

KREDIKA = {
    # Carts
    'CART_TTL_HOURS': config('CART_TTL_HOURS', default=72, cast=int),

    # Late penalties and defaults
    'LATE_PENALTY_GRACE_DAYS': config('LATE_PENALTY_GRACE_DAYS', default=3, cast=int),
    'LATE_PENALTY_DAILY_RATE': config('LATE_PENALTY_DAILY_RATE', default='0.001', cast=Decimal),
    'LATE_PENALTY_CAP_RATE': config('LATE_PENALTY_CAP_RATE', default='0.10', cast=Decimal),
    'DEFAULT_THRESHOLD_DAYS': config('DEFAULT_THRESHOLD_DAYS', default=90, cast=int),
    'MAX_DEFAULTS': config('MAX_DEFAULTS', default=3, cast=int),

    # Underwriting
    'CREDIT_LIMIT_CEILING': config('CREDIT_LIMIT_CEILING', default='5000000', cast=Decimal),

    # Notifications and sessions
    'NOTIFICATION_EXPIRY_DAYS': config('NOTIFICATION_EXPIRY_DAYS', default=30, cast=int),
    'SESSION_TTL_MINUTES': config('SESSION_TTL_MINUTES', default=60 * 24, cast=int),
    'SESSION_MAX_INACTIVE_MINUTES': config('SESSION_MAX_INACTIVE_MINUTES', default=60, cast=int),

    # Catalog
    'NEW_PRODUCT_DAYS': config('NEW_PRODUCT_DAYS', default=30, cast=int),

    # Addresses
    'HOME_COUNTRY': config('HOME_COUNTRY', default='FR'),
    'GEOCODER_URL': config('GEOCODER_URL', default='https://nominatim.openstreetmap.org/search'),
    'GEOCODER_USER_AGENT': config('GEOCODER_USER_AGENT', default='KredikaApp/1.0'),
    'GEOCODER_TIMEOUT': config('GEOCODER_TIMEOUT', default=5.0, cast=float),

    # Reference numbers (CMD-/PLAN-/TRX-)
    'REFERENCE_MAX_RETRIES': config('REFERENCE_MAX_RETRIES', default=10, cast=int),
}


# =============================================================================
# TESTING
# =============================================================================

if 'pytest' in sys.modules or 'test' in sys.argv:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'test_db.sqlite3',
        }
    }
