"""
Tests for order placement, status transitions and their reward side effects
"""
import random
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.test import TestCase

from apps.common.exceptions import InsufficientFunds, InvalidState, NotFound, ValidationError
from apps.common.notifications import NullNotificationSender
from apps.orders.models import Order, OrderItem, RewardFailure
from apps.orders.services import OrderLifecycleCoordinator, OrderService, calculate_pricing, price_order
from apps.promotions.models import PromoCode
from apps.referrals.models import Referral
from apps.referrals.services import ReferralService
from apps.rewards.models import ScratchCard
from apps.rewards.services import ScratchCardService
from apps.wallet.models import WalletTransaction
from apps.wallet.services import WalletService
from tests.factories import (
    OrderFactory, PromoCodeFactory, ScratchCardFactory, UserFactory,
    cart_lines, create_referred_customer, fund_wallet
)


class FlakyScratchCards(ScratchCardService):
    """Fails the first n auto-credits"""

    def __init__(self, failures=1, **kwargs):
        super().__init__(**kwargs)
        self.failures = failures

    def auto_credit_for_order(self, order):
        if self.failures:
            self.failures -= 1
            raise RuntimeError("cashback service unavailable")
        return super().auto_credit_for_order(order)


class LifecycleTestCase(TestCase):

    def setUp(self):
        self.notifier = NullNotificationSender()
        self.wallet = WalletService(notifier=self.notifier)
        self.scratch_cards = ScratchCardService(
            wallet=self.wallet, notifier=self.notifier, rng=random.Random(3)
        )
        self.orders = OrderService(wallet=self.wallet, scratch_cards=self.scratch_cards, notifier=self.notifier)
        self.coordinator = self.make_coordinator(self.scratch_cards)
        self.customer = UserFactory()

    def make_coordinator(self, scratch_cards):
        return OrderLifecycleCoordinator(
            wallet=self.wallet,
            scratch_cards=scratch_cards,
            referrals=ReferralService(wallet=self.wallet, notifier=self.notifier, email_sender=None),
            notifier=self.notifier,
            email_sender=None,
        )

    def place(self, *prices, customer=None, **pricing_kwargs):
        customer = customer or self.customer
        lines = cart_lines(*prices)
        pricing = price_order(lines, customer=customer, **pricing_kwargs)
        return self.orders.place_order(customer, pricing, lines)


class PlaceOrderTest(LifecycleTestCase):

    def test_place_order_persists_breakdown_and_card(self):
        order = self.place('350', '150')

        assert order.order_number == 'CRM-2427000001'
        assert order.status == Order.STATUS_PENDING
        assert order.subtotal == Decimal('500.00')
        assert order.final_delivery_charge == Decimal('0.00')
        assert order.total_amount == Decimal('500.00')
        assert OrderItem.objects.filter(order=order).count() == 2
        card = ScratchCard.objects.get(order=order)
        assert card.status == ScratchCard.STATUS_PENDING
        assert 20 <= card.amount <= 35

    def test_order_numbers_are_sequential(self):
        first = self.place('100')
        second = self.place('100')

        assert second.order_number == 'CRM-2427000002'
        assert first.order_number < second.order_number

    def test_wallet_redemption_debited_with_order(self):
        fund_wallet(self.customer, '100')

        order = self.place('600', wallet_requested=Decimal('60'))

        assert order.wallet_amount_used == Decimal('60.00')
        assert order.total_amount == Decimal('540.00')
        debit = WalletTransaction.objects.get(customer=self.customer, direction='debit')
        assert debit.category == 'order_redemption'
        assert debit.order_id == order.pk
        assert debit.description == f"Wallet used for Order {order.order_number}"
        self.customer.refresh_from_db()
        assert self.customer.wallet_balance == Decimal('40.00')

    def test_failed_wallet_debit_creates_nothing(self):
        fund_wallet(self.customer, '50')
        lines = cart_lines('600')
        pricing = price_order(lines, customer=self.customer, wallet_requested=Decimal('50'))
        # Balance spent elsewhere between pricing and placement
        self.wallet.debit(self.customer, Decimal('20'), 'order_redemption')

        with pytest.raises(InsufficientFunds):
            self.orders.place_order(self.customer, pricing, lines)

        assert not Order.objects.exists()
        assert not ScratchCard.objects.exists()

    def test_promo_code_redeemed_with_order(self):
        PromoCodeFactory(code='SWEET10', discount_value=Decimal('10'))

        order = self.place('300', promo_code='sweet10')

        assert order.promo_code == 'SWEET10'
        assert order.promo_discount == Decimal('30.00')
        assert order.total_amount == Decimal('320.00')
        assert PromoCode.objects.get(code='SWEET10').used_count == 1

    def test_exhausted_promo_rolls_back_order(self):
        promo = PromoCodeFactory(code='LAST1', usage_limit=1)
        lines = cart_lines('300')
        pricing = price_order(lines, customer=self.customer, promo_code='LAST1')
        PromoCode.objects.filter(pk=promo.pk).update(used_count=1)

        with pytest.raises(ValidationError):
            self.orders.place_order(self.customer, pricing, lines)

        assert not Order.objects.exists()

    def test_items_must_match_pricing(self):
        pricing = calculate_pricing(cart_lines('300'))

        with pytest.raises(ValidationError):
            self.orders.place_order(self.customer, pricing, cart_lines('250'))

    def test_scratch_card_failure_keeps_order(self):
        class BrokenCards(ScratchCardService):
            def create_for_order(self, order):
                raise RuntimeError("rng exploded")

        orders = OrderService(
            wallet=self.wallet,
            scratch_cards=BrokenCards(wallet=self.wallet, notifier=self.notifier),
            notifier=self.notifier,
        )
        lines = cart_lines('200')

        order = orders.place_order(self.customer, calculate_pricing(lines), lines)

        assert Order.objects.filter(pk=order.pk).exists()
        assert RewardFailure.objects.get(order=order).step == 'scratch_card_create'


class TransitionTest(LifecycleTestCase):

    def test_status_moves_forward(self):
        order = self.place('200')

        outcome = self.coordinator.transition_order_status(order.pk, Order.STATUS_CONFIRMED)

        assert outcome.changed
        assert outcome.previous_status == Order.STATUS_PENDING
        assert outcome.order.status == Order.STATUS_CONFIRMED

    def test_backwards_transition_rejected(self):
        order = OrderFactory(status=Order.STATUS_READY)

        with pytest.raises(InvalidState):
            self.coordinator.transition_order_status(order.pk, Order.STATUS_CONFIRMED)

    def test_terminal_status_is_final(self):
        order = OrderFactory(status=Order.STATUS_CANCELLED)

        with pytest.raises(InvalidState):
            self.coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

    def test_unknown_status_rejected(self):
        order = OrderFactory()

        with pytest.raises(ValidationError):
            self.coordinator.transition_order_status(order.pk, 'lost')

    def test_unknown_order(self):
        with pytest.raises(NotFound):
            self.coordinator.transition_order_status(999999, Order.STATUS_CONFIRMED)

    def test_delivery_credits_scratch_card(self):
        order = self.place('1000')
        card = ScratchCard.objects.get(order=order)

        outcome = self.coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

        assert outcome.report.ok
        assert 'scratch_card_credit' in outcome.report.succeeded
        card.refresh_from_db()
        assert card.status == ScratchCard.STATUS_CREDITED
        assert outcome.order.delivered_at is not None
        self.customer.refresh_from_db()
        assert self.customer.wallet_balance == Decimal(card.amount)

    def test_repeating_delivered_is_a_noop(self):
        order = self.place('1000')
        self.coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

        outcome = self.coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

        assert not outcome.changed
        assert outcome.report.succeeded == []
        assert WalletTransaction.objects.filter(category='order_cashback').count() == 1

    def test_referee_first_delivery_completes_referral(self):
        referrer, referee, referral = create_referred_customer()
        order = self.place('800', customer=referee)

        outcome = self.coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

        assert outcome.report.ok
        referral.refresh_from_db()
        assert referral.status == Referral.STATUS_COMPLETED
        assert referral.referrer_bonus_credited
        assert referral.referee_bonus_credited
        assert WalletTransaction.objects.filter(category='referral_bonus').count() == 2
        assert WalletTransaction.objects.filter(customer=referrer, category='milestone').count() == 1

    def test_side_effect_failure_does_not_fail_transition(self):
        coordinator = self.make_coordinator(FlakyScratchCards(wallet=self.wallet, notifier=self.notifier))
        order = self.place('1000')

        outcome = coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

        assert outcome.changed
        assert outcome.order.status == Order.STATUS_DELIVERED
        assert not outcome.report.ok
        assert [failure.step for failure in outcome.report.failures] == ['scratch_card_credit']
        assert 'referral_credit' in outcome.report.succeeded
        failure = RewardFailure.objects.get(order=order)
        assert failure.step == 'scratch_card_credit'
        assert failure.resolved_at is None

    def test_replay_resolves_failure(self):
        coordinator = self.make_coordinator(FlakyScratchCards(wallet=self.wallet, notifier=self.notifier))
        order = self.place('1000')
        coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)

        report = coordinator.replay_side_effects(order.pk)
        again = coordinator.replay_side_effects(order.pk)

        assert report.ok
        assert again.ok
        assert not coordinator.open_failures(order.pk).exists()
        assert WalletTransaction.objects.filter(category='order_cashback').count() == 1

    def test_replay_pays_referee_after_a_later_delivery(self):
        referrer, referee, referral = create_referred_customer()

        class RefereeBonusDown(WalletService):
            def credit(self, customer, amount, category, **kwargs):
                if customer.pk == referee.pk and category == 'referral_bonus':
                    raise RuntimeError("ledger unavailable")
                return super().credit(customer, amount, category, **kwargs)

        broken = OrderLifecycleCoordinator(
            wallet=self.wallet,
            scratch_cards=self.scratch_cards,
            referrals=ReferralService(
                wallet=RefereeBonusDown(notifier=self.notifier), notifier=self.notifier, email_sender=None
            ),
            notifier=self.notifier,
            email_sender=None,
        )
        first = self.place('800', customer=referee)
        second = self.place('600', customer=referee)

        outcome = broken.transition_order_status(first.pk, Order.STATUS_DELIVERED)
        self.coordinator.transition_order_status(second.pk, Order.STATUS_DELIVERED)

        assert [failure.step for failure in outcome.report.failures] == ['referral_referee_credit']
        assert self.coordinator.open_failures(first.pk).filter(step='referral_referee_credit').exists()

        report = self.coordinator.replay_side_effects(first.pk)

        assert report.ok
        referral.refresh_from_db()
        assert referral.first_order_id == first.pk
        assert referral.referee_bonus_credited
        assert WalletTransaction.objects.filter(customer=referee, category='referral_bonus').count() == 1
        assert not self.coordinator.open_failures(first.pk).exists()


class CancellationTest(LifecycleTestCase):

    def test_cancel_expires_card_and_refunds_wallet(self):
        fund_wallet(self.customer, '100')
        order = self.place('600', wallet_requested=Decimal('60'))
        card = ScratchCard.objects.get(order=order)
        self.scratch_cards.reveal(card.pk)

        outcome = self.coordinator.transition_order_status(order.pk, Order.STATUS_CANCELLED)

        assert outcome.report.ok
        card.refresh_from_db()
        assert card.status == ScratchCard.STATUS_EXPIRED
        refund = WalletTransaction.objects.get(category='order_refund')
        assert refund.amount == Decimal('60.00')
        assert refund.description == f"Wallet Refund (Order {order.order_number})"
        self.customer.refresh_from_db()
        assert self.customer.wallet_balance == Decimal('100.00')
        assert outcome.order.cancelled_at is not None

    def test_refund_happens_once(self):
        fund_wallet(self.customer, '100')
        order = self.place('600', wallet_requested=Decimal('60'))
        self.coordinator.transition_order_status(order.pk, Order.STATUS_CANCELLED)

        self.coordinator.replay_side_effects(order.pk)
        order.refresh_from_db()
        assert self.coordinator.refund_wallet(order) is None

        assert WalletTransaction.objects.filter(category='order_refund').count() == 1

    def test_cancel_without_wallet_use(self):
        order = OrderFactory()
        ScratchCardFactory(order=order)

        outcome = self.coordinator.transition_order_status(order.pk, Order.STATUS_CANCELLED)

        assert outcome.report.ok
        assert not WalletTransaction.objects.exists()


class ReplayCommandTest(LifecycleTestCase):

    def test_replay_order_rewards_command(self):
        coordinator = self.make_coordinator(FlakyScratchCards(wallet=self.wallet, notifier=self.notifier))
        order = self.place('1000')
        coordinator.transition_order_status(order.pk, Order.STATUS_DELIVERED)
        assert RewardFailure.objects.filter(resolved_at__isnull=True).count() == 1

        call_command('replay_order_rewards', verbosity=0)

        assert not RewardFailure.objects.filter(resolved_at__isnull=True).exists()
        assert ScratchCard.objects.get(order=order).status == ScratchCard.STATUS_CREDITED
