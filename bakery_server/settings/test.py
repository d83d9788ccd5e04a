"""
Test settings for bakery_server project.
"""

from .base import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}


# Tables are built straight from the models
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

LOGGING_CONFIG = None

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
DEFAULT_FROM_EMAIL = 'orders@bakery.test'
STOREFRONT_URL = 'https://bakery.test'

# Pin reward constants so a local .env cannot change test expectations
BAKERY_REWARDS = {
    'FREE_DELIVERY_THRESHOLD': Decimal('500'),
    'DELIVERY_CHARGE': Decimal('50'),
    'WALLET_REDEMPTION_RATE': Decimal('0.10'),
    'SCRATCH_CARD_MIN_RATE': Decimal('0.04'),
    'SCRATCH_CARD_MAX_RATE': Decimal('0.07'),
    'REFERRER_BONUS': Decimal('50'),
    'REFEREE_BONUS': Decimal('25'),
    'WELCOME_BONUS': Decimal('50'),
}
