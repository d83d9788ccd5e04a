"""
Test factories for creating test data using factory_boy.
"""
from datetime import timedelta
from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from factory import Faker, SubFactory, LazyAttribute, LazyFunction
from django.contrib.auth import get_user_model
from django.utils import timezone

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Factory for creating test customers."""

    class Meta:
        model = User
        django_get_or_create = ('username',)

    username = factory.Sequence(lambda n: f"customer{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    first_name = Faker('first_name')
    last_name = Faker('last_name')
    phone = factory.Sequence(lambda n: f"98765{n:05d}")
    is_active = True


class OrderFactory(DjangoModelFactory):
    """Factory for orders; amounts are kept consistent with each other."""

    class Meta:
        model = 'orders.Order'

    # Kept apart from the CRM- numbers OrderService hands out
    order_number = factory.Sequence(lambda n: f"TEST-{n:06d}")
    customer = SubFactory(UserFactory)
    status = 'pending'
    subtotal = Decimal('500.00')
    promo_discount = Decimal('0.00')
    delivery_charge = Decimal('0.00')
    wallet_amount_used = Decimal('0.00')
    subtotal_after_promo = LazyAttribute(lambda o: o.subtotal - o.promo_discount)
    subtotal_after_wallet = LazyAttribute(lambda o: o.subtotal - o.promo_discount - o.wallet_amount_used)
    final_delivery_charge = LazyAttribute(lambda o: o.delivery_charge)
    total_amount = LazyAttribute(
        lambda o: o.subtotal - o.promo_discount - o.wallet_amount_used + o.delivery_charge
    )


class PromoCodeFactory(DjangoModelFactory):
    """Factory for active percentage promo codes."""

    class Meta:
        model = 'promotions.PromoCode'
        django_get_or_create = ('code',)

    code = factory.Sequence(lambda n: f"CAKE{n}")
    description = 'Test promo'
    discount_type = 'percentage'
    discount_value = Decimal('10.00')
    min_order_amount = Decimal('0.00')
    valid_from = LazyFunction(lambda: timezone.now() - timedelta(days=1))
    valid_until = LazyFunction(lambda: timezone.now() + timedelta(days=30))
    status = 'active'


class ScratchCardFactory(DjangoModelFactory):

    class Meta:
        model = 'rewards.ScratchCard'

    order = SubFactory(OrderFactory)
    customer = LazyAttribute(lambda o: o.order.customer)
    amount = 25
    status = 'pending'


class ReferralFactory(DjangoModelFactory):
    """Factory for pending referrals."""

    class Meta:
        model = 'referrals.Referral'

    referrer = SubFactory(UserFactory)
    referee = SubFactory(UserFactory)
    referral_code = LazyAttribute(lambda o: o.referrer.referral_code)
    status = 'pending'
    referrer_bonus_amount = Decimal('50.00')
    referee_bonus_amount = Decimal('25.00')


def fund_wallet(customer, amount):
    """Put money in a wallet through the ledger so balance and ledger agree."""
    from apps.common.notifications import NullNotificationSender
    from apps.wallet.services import WalletService
    return WalletService(notifier=NullNotificationSender()).credit(
        customer, Decimal(str(amount)), 'welcome_bonus', description='Test funding'
    )


def cart_lines(*prices, quantity=1):
    """One cake per price."""
    from apps.orders.services import CartLine
    return [
        CartLine(product_id=index + 1, name=f"Cake {index + 1}", unit_price=Decimal(str(price)), quantity=quantity)
        for index, price in enumerate(prices)
    ]


def create_referred_customer(referrer=None):
    """Referee linked to a referrer through a pending referral."""
    referrer = referrer or UserFactory()
    referee = UserFactory()
    referral = ReferralFactory(referrer=referrer, referee=referee)
    User.objects.filter(pk=referee.pk).update(referred_by=referrer)
    referee.refresh_from_db()
    return referrer, referee, referral
