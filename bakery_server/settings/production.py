"""
Production settings for bakery_server project.
"""

from decouple import config, Csv
from .base import *

DEBUG = False

# No insecure fallbacks in production
SECRET_KEY = config('SECRET_KEY')
SIMPLE_JWT['SIGNING_KEY'] = SECRET_KEY
ALLOWED_HOSTS = config('ALLOWED_HOSTS', cast=Csv())

SECURE_HSTS_SECONDS = config('SECURE_HSTS_SECONDS', default=31536000, cast=int)
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# Only the storefront and the staff dashboard call the API
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = config('CORS_ALLOWED_ORIGINS', cast=Csv())

# Referral invites and milestone mails go out over SMTP
EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'

# Quiet root logger; wallet, order and reward events stay at INFO
LOGGING['handlers']['console']['level'] = 'WARNING'
LOGGING['root']['level'] = 'WARNING'
for _logger in ('apps.wallet', 'apps.rewards', 'apps.referrals', 'apps.orders'):
    LOGGING['loggers'][_logger]['level'] = 'INFO'
