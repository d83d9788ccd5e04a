"""
Test configuration for the bakery server.
"""
import os

import django
import pytest


def pytest_configure():
    """Configure Django settings for testing."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bakery_server.settings.test')
    django.setup()


@pytest.fixture(autouse=True)
def fresh_rewards_config():
    """Reward settings are cached per process; drop the cache around every test."""
    from apps.common.config import get_rewards_config
    get_rewards_config.cache_clear()
    yield
    get_rewards_config.cache_clear()


@pytest.fixture
def customer():
    """Create a test customer with an empty wallet."""
    from tests.factories import UserFactory
    return UserFactory()


@pytest.fixture
def funded_customer():
    """Create a test customer holding ₹200 in the wallet."""
    from tests.factories import UserFactory, fund_wallet
    user = UserFactory()
    fund_wallet(user, '200.00')
    return user


@pytest.fixture
def staff_user():
    from tests.factories import UserFactory
    return UserFactory(is_staff=True)


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()
