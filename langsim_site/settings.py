"""
Django settings for the langsim JSON API.

Only the pieces the simulation endpoints need are configured: no database,
no templates, no sessions. Deployment values come from the environment.
"""
import os

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'insecure-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h]

INSTALLED_APPS = [
    'langsim',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'langsim_site.urls'

WSGI_APPLICATION = 'langsim_site.wsgi.application'

# The simulators keep no state between requests
DATABASES = {}

USE_TZ = True

# Budgets applied when a request does not send its own
LANGSIM_DEFAULT_BUDGETS = {
    'pda': {'maxSteps': 100, 'maxNodes': 10000},
    'tm': {'maxSteps': 1000},
    'cfg': {'maxDepth': 20, 'maxNodes': 200000},
}

# Upper bounds for client supplied budgets, per machine kind. Every TM step
# keeps a copy of the tape and every PDA step a copy of the stack, so memory
# grows with the square of maxSteps.
LANGSIM_BUDGET_CEILINGS = {
    'pda': {'maxSteps': 2000, 'maxNodes': 20000},
    'tm': {'maxSteps': 2000},
    'cfg': {'maxDepth': 40, 'maxNodes': 500000},
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'langsim': {
            'handlers': ['console'],
            'level': os.environ.get('LANGSIM_LOG_LEVEL', 'INFO').upper(),
            'propagate': False,
        },
    },
}
