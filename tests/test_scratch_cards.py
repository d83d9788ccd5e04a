"""
Tests for the scratch card engine
"""
import random
from decimal import Decimal

import pytest
from django.test import TestCase
from hypothesis import given, settings, strategies as st

from apps.common.exceptions import AlreadyCredited, InvalidState, NotFound, OrderNotDelivered
from apps.common.notifications import NullNotificationSender
from apps.common.utils import round_half_up
from apps.orders.models import Order
from apps.rewards.models import ScratchCard
from apps.rewards.services import ScratchCardService
from apps.wallet.models import WalletTransaction
from apps.wallet.services import WalletService
from tests.factories import OrderFactory, ScratchCardFactory, UserFactory


def make_service(seed=7):
    notifier = NullNotificationSender()
    return ScratchCardService(
        wallet=WalletService(notifier=notifier),
        notifier=notifier,
        rng=random.Random(seed),
    )


class TestScratchCardAmount:

    @given(
        total=st.decimals(min_value=Decimal('8'), max_value=Decimal('100000'), places=2),
        seed=st.integers(min_value=0, max_value=10 ** 6),
    )
    @settings(max_examples=200, deadline=None)
    def test_amount_within_cashback_range(self, total, seed):
        """The amount is a whole number between 4% and 7% of the order total, rounded half up"""
        service = ScratchCardService(rng=random.Random(seed), notifier=NullNotificationSender(), wallet=object())

        amount = service.compute_amount(total)

        assert isinstance(amount, int)
        assert max(1, round_half_up(total * Decimal('0.04'))) <= amount <= round_half_up(total * Decimal('0.07'))

    def test_small_order_still_earns_one_rupee(self):
        service = ScratchCardService(rng=random.Random(1), notifier=NullNotificationSender(), wallet=object())

        assert service.compute_amount(Decimal('5')) == 1


class ScratchCardLifecycleTest(TestCase):

    def setUp(self):
        self.service = make_service()
        self.order = OrderFactory(total_amount=Decimal('1000.00'), subtotal=Decimal('1000.00'))

    def test_create_for_order_is_idempotent(self):
        card = self.service.create_for_order(self.order)
        again = self.service.create_for_order(self.order)

        assert card.pk == again.pk
        assert card.status == ScratchCard.STATUS_PENDING
        assert 40 <= card.amount <= 70
        assert ScratchCard.objects.filter(order=self.order).count() == 1

    def test_reveal_does_not_credit(self):
        card = self.service.create_for_order(self.order)

        revealed = self.service.reveal(card.pk, customer=self.order.customer)

        assert revealed.status == ScratchCard.STATUS_REVEALED
        assert revealed.revealed_at is not None
        assert not WalletTransaction.objects.exists()

    def test_reveal_twice_raises_invalid_state(self):
        card = self.service.create_for_order(self.order)
        self.service.reveal(card.pk)

        with pytest.raises(InvalidState):
            self.service.reveal(card.pk)

    def test_reveal_someone_elses_card_not_found(self):
        card = self.service.create_for_order(self.order)

        with pytest.raises(NotFound):
            self.service.reveal(card.pk, customer=UserFactory())

    def test_credit_requires_delivery(self):
        card = self.service.create_for_order(self.order)
        self.service.reveal(card.pk)

        with pytest.raises(OrderNotDelivered):
            self.service.credit(card.pk)

    def test_credit_requires_reveal(self):
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_DELIVERED)
        card = self.service.create_for_order(self.order)

        with pytest.raises(InvalidState):
            self.service.credit(card.pk)

    def test_credit_revealed_card_once(self):
        card = self.service.create_for_order(self.order)
        self.service.reveal(card.pk)
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_DELIVERED)

        card, entry = self.service.credit(card.pk)

        assert card.status == ScratchCard.STATUS_CREDITED
        assert entry.category == 'order_cashback'
        assert entry.amount == Decimal(card.amount)
        assert entry.description == f"Cashback (Order {self.order.order_number})"
        with pytest.raises(AlreadyCredited):
            self.service.credit(card.pk)
        assert WalletTransaction.objects.filter(category='order_cashback').count() == 1

    def test_auto_credit_twice_credits_once(self):
        card = ScratchCardFactory(order=self.order, amount=55)
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_DELIVERED)
        self.order.refresh_from_db()

        first = self.service.auto_credit_for_order(self.order)
        second = self.service.auto_credit_for_order(self.order)

        assert first is not None
        assert second is None
        card.refresh_from_db()
        assert card.status == ScratchCard.STATUS_CREDITED
        customer = self.order.customer
        customer.refresh_from_db()
        assert customer.wallet_balance == Decimal('55.00')

    def test_auto_credit_rejects_undelivered_order(self):
        ScratchCardFactory(order=self.order)

        with pytest.raises(OrderNotDelivered):
            self.service.auto_credit_for_order(self.order)

    def test_expire_keeps_credited_cards(self):
        credited = ScratchCardFactory(status=ScratchCard.STATUS_CREDITED)
        revealed = ScratchCardFactory(status=ScratchCard.STATUS_REVEALED)

        assert ScratchCardService.expire_for_order(credited.order) == 0
        assert ScratchCardService.expire_for_order(revealed.order) == 1
        credited.refresh_from_db()
        revealed.refresh_from_db()
        assert credited.status == ScratchCard.STATUS_CREDITED
        assert revealed.status == ScratchCard.STATUS_EXPIRED


class ConcurrentCreditTest(TestCase):
    """Another worker claims the card between the read and the claim"""

    def setUp(self):
        notifier = NullNotificationSender()

        class CreditedAfterRead(ScratchCardService):
            def _get_card(self, card_id, customer=None):
                card = super()._get_card(card_id, customer)
                ScratchCard.objects.filter(pk=card.pk).update(status=ScratchCard.STATUS_CREDITED)
                return card

        self.service = CreditedAfterRead(wallet=WalletService(notifier=notifier), notifier=notifier)
        self.order = OrderFactory(status=Order.STATUS_DELIVERED)

    def test_stale_revealed_card_is_not_paid(self):
        card = ScratchCardFactory(order=self.order, status=ScratchCard.STATUS_REVEALED, amount=40)

        with pytest.raises(AlreadyCredited):
            self.service.credit(card.pk)

        assert not WalletTransaction.objects.filter(category='order_cashback').exists()
        customer = self.order.customer
        customer.refresh_from_db()
        assert customer.wallet_balance == Decimal('0.00')
