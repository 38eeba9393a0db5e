"""
Django settings for the GitHub Code Scanning connector.

All connector options are read from the environment so the same settings
module works for the management command, the test suite and deployments.

Environment variables:
    SC_GITHUB_APP_ID: GitHub App identifier
    SC_GITHUB_PRIVATE_KEY: GitHub App private key (PEM text or path to a .pem file)
    SC_GITHUB_API_URL: REST API base URL (GitHub Enterprise Server installs override this)
    SC_GITHUB_REQUEST_TIMEOUT: Per-request timeout in seconds
    SC_GITHUB_MAX_RATE_LIMIT_WAIT: Longest rate-limit wait (seconds) the client sleeps through
    SC_GITHUB_MAX_RETRIES: Rate-limit retries before giving up
    SC_LOG_LEVEL: Level for the scanconnector logger
"""

import os

SECRET_KEY = os.getenv('SC_SECRET_KEY', 'scanconnector-insecure-key')
DEBUG = os.getenv('SC_DEBUG', 'false').lower() == 'true'

INSTALLED_APPS = [
    'scanconnector',
]

# No persistence: the connector only streams objects to a handler
DATABASES = {}

USE_TZ = True
TIME_ZONE = 'UTC'

# GitHub App
SC_GITHUB_APP_ID = os.getenv('SC_GITHUB_APP_ID', '')
SC_GITHUB_PRIVATE_KEY = os.getenv('SC_GITHUB_PRIVATE_KEY', '')
SC_GITHUB_API_URL = os.getenv('SC_GITHUB_API_URL', 'https://api.github.com')

# REST client behaviour
SC_GITHUB_REQUEST_TIMEOUT = int(os.getenv('SC_GITHUB_REQUEST_TIMEOUT', '30'))
SC_GITHUB_MAX_RATE_LIMIT_WAIT = int(os.getenv('SC_GITHUB_MAX_RATE_LIMIT_WAIT', '60'))
SC_GITHUB_MAX_RETRIES = int(os.getenv('SC_GITHUB_MAX_RETRIES', '3'))

SC_LOG_LEVEL = os.getenv('SC_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[%(asctime)s] %(levelname)s [%(name)s:%(lineno)d] %(message)s',
            'datefmt': '%d/%b/%Y %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'scanconnector': {
            'handlers': ['console'],
            'level': SC_LOG_LEVEL,
            'propagate': False,
        },
    },
}
