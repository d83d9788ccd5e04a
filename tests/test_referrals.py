"""
Tests for referral codes and first-order referral bonuses
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.core import mail
from django.test import TestCase
from django.utils import timezone

from apps.common.exceptions import AlreadyReferred, InvalidCode, OrderNotDelivered, SelfReferral, ValidationError
from apps.common.notifications import NullNotificationSender
from apps.orders.models import Order
from apps.referrals.models import Referral
from apps.referrals.services import ReferralService
from apps.wallet.models import WalletTransaction
from apps.wallet.services import WalletService
from tests.factories import OrderFactory, UserFactory, create_referred_customer


def make_service(email_sender=None):
    notifier = NullNotificationSender()
    return ReferralService(
        wallet=WalletService(notifier=notifier),
        notifier=notifier,
        email_sender=email_sender,
    )


class ReferralCodeTest(TestCase):

    def test_new_customer_gets_code(self):
        customer = UserFactory()

        customer.refresh_from_db()
        assert len(customer.referral_code) == 8
        assert customer.referral_code.endswith(str(customer.pk)[-4:].zfill(4))

    def test_existing_code_returned(self):
        customer = UserFactory()

        assert ReferralService.get_or_create_referral_code(customer) == customer.referral_code

    def test_validate_code_normalizes(self):
        referrer = UserFactory()

        assert make_service().validate_code(f"  {referrer.referral_code.lower()} ").pk == referrer.pk

    def test_validate_unknown_code(self):
        with pytest.raises(InvalidCode):
            make_service().validate_code('ZZZZ9999')

    def test_validate_blank_code(self):
        with pytest.raises(InvalidCode):
            make_service().validate_code('   ')


class CreateReferralTest(TestCase):

    def setUp(self):
        self.service = make_service()
        self.referrer = UserFactory()
        self.referee = UserFactory()

    def test_create_referral(self):
        referral = self.service.create_referral(self.referee, self.referrer.referral_code)

        assert referral.status == Referral.STATUS_PENDING
        assert referral.referrer_bonus_amount == Decimal('50.00')
        assert referral.referee_bonus_amount == Decimal('25.00')
        self.referee.refresh_from_db()
        assert self.referee.referred_by_id == self.referrer.pk

    def test_self_referral_rejected(self):
        with pytest.raises(SelfReferral):
            self.service.create_referral(self.referrer, self.referrer.referral_code)

    def test_second_referral_rejected(self):
        self.service.create_referral(self.referee, self.referrer.referral_code)

        with pytest.raises(AlreadyReferred):
            self.service.create_referral(self.referee, UserFactory().referral_code)
        assert Referral.objects.filter(referee=self.referee).count() == 1

    def test_send_invite_emails_friend(self):
        service = make_service(email_sender=None)
        with pytest.raises(ValidationError):
            service.send_invite(self.referrer, 'friend@example.com')

        service = ReferralService(notifier=NullNotificationSender())
        code = service.send_invite(self.referrer, 'friend@example.com')

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['friend@example.com']
        assert code in mail.outbox[0].body


class FirstOrderBonusTest(TestCase):

    def setUp(self):
        self.service = make_service()
        self.referrer, self.referee, self.referral = create_referred_customer()

    def deliver(self, order):
        Order.objects.filter(pk=order.pk).update(status=Order.STATUS_DELIVERED, delivered_at=timezone.now())
        order.refresh_from_db()
        return order

    def test_first_delivered_order_credits_both_sides(self):
        order = self.deliver(OrderFactory(customer=self.referee))

        result = self.service.credit_first_order_bonuses(order)

        assert result.credited
        assert not result.errors
        self.referral.refresh_from_db()
        assert self.referral.status == Referral.STATUS_COMPLETED
        assert self.referral.first_order_id == order.pk
        assert self.referral.referrer_bonus_credited
        assert self.referral.referee_bonus_credited
        entries = WalletTransaction.objects.filter(category='referral_bonus')
        assert entries.count() == 2
        assert entries.get(customer=self.referrer).description == f"Referral Bonus (Order {order.order_number})"
        assert entries.get(customer=self.referee).amount == Decimal('25.00')

    def test_repeat_call_does_not_double_credit(self):
        order = self.deliver(OrderFactory(customer=self.referee))

        self.service.credit_first_order_bonuses(order)
        second = self.service.credit_first_order_bonuses(order)

        assert not second.credited
        assert WalletTransaction.objects.filter(category='referral_bonus').count() == 2
        self.referrer.refresh_from_db()
        # 50 referral bonus + 25 first-referral milestone
        assert self.referrer.wallet_balance == Decimal('75.00')

    def test_second_delivered_order_pays_nothing(self):
        self.deliver(OrderFactory(customer=self.referee))
        later = self.deliver(OrderFactory(customer=self.referee))

        result = self.service.credit_first_order_bonuses(later)

        assert result.referral is None
        assert not WalletTransaction.objects.filter(category='referral_bonus').exists()

    def test_orders_delivered_together_complete_referral_once(self):
        first = OrderFactory(customer=self.referee)
        second = OrderFactory(customer=self.referee)
        delivered_at = timezone.now()
        Order.objects.filter(pk__in=[first.pk, second.pk]).update(
            status=Order.STATUS_DELIVERED, delivered_at=delivered_at
        )
        first.refresh_from_db()
        second.refresh_from_db()

        later = self.service.credit_first_order_bonuses(second)
        earlier = self.service.credit_first_order_bonuses(first)

        assert later.referral is None and not later.errors
        assert earlier.credited and not earlier.errors
        self.referral.refresh_from_db()
        assert self.referral.status == Referral.STATUS_COMPLETED
        assert self.referral.first_order_id == first.pk
        assert WalletTransaction.objects.filter(category='referral_bonus').count() == 2

    def test_earliest_delivery_wins_over_lower_id(self):
        older = OrderFactory(customer=self.referee)
        newer = self.deliver(OrderFactory(customer=self.referee))
        Order.objects.filter(pk=older.pk).update(
            status=Order.STATUS_DELIVERED, delivered_at=newer.delivered_at + timedelta(minutes=5)
        )
        older.refresh_from_db()

        assert ReferralService.is_first_delivered_order(newer)
        assert not ReferralService.is_first_delivered_order(older)

    def test_flag_claimed_after_read_is_not_paid_again(self):
        order = self.deliver(OrderFactory(customer=self.referee))
        self.service.credit_first_order_bonuses(order)
        stale = Referral.objects.select_related('referrer', 'referee').get(pk=self.referral.pk)
        stale.referee_bonus_credited = False

        assert self.service._credit_side(stale, 'referee', order) is None
        assert WalletTransaction.objects.filter(customer=self.referee, category='referral_bonus').count() == 1

    def test_undelivered_order_rejected(self):
        order = OrderFactory(customer=self.referee)

        with pytest.raises(OrderNotDelivered):
            self.service.credit_first_order_bonuses(order)

    def test_customer_without_referral(self):
        order = self.deliver(OrderFactory())

        result = self.service.credit_first_order_bonuses(order)

        assert result.referral is None
        assert not result.credited

    def test_failed_side_can_be_retried(self):
        class BrokenWallet(WalletService):
            def credit(self, customer, amount, category, **kwargs):
                if customer.pk == referee_pk:
                    raise RuntimeError("ledger unavailable")
                return super().credit(customer, amount, category, **kwargs)

        referee_pk = self.referee.pk
        order = self.deliver(OrderFactory(customer=self.referee))
        broken = ReferralService(
            wallet=BrokenWallet(notifier=NullNotificationSender()),
            notifier=NullNotificationSender(),
            email_sender=None,
        )

        result = broken.credit_first_order_bonuses(order)

        assert [step for step, _ in result.errors] == ['referral_referee_credit']
        self.referral.refresh_from_db()
        assert self.referral.referrer_bonus_credited
        assert not self.referral.referee_bonus_credited

        retry = self.service.credit_first_order_bonuses(order)

        assert retry.referee_entry is not None
        assert retry.referrer_entry is None
        assert WalletTransaction.objects.filter(category='referral_bonus').count() == 2

    def test_stats(self):
        order = self.deliver(OrderFactory(customer=self.referee))
        self.service.credit_first_order_bonuses(order)
        create_referred_customer(self.referrer)

        stats = self.service.stats(self.referrer)

        assert stats['total_referrals'] == 2
        assert stats['completed_referrals'] == 1
        assert stats['total_earnings'] == Decimal('50.00')
        assert stats['referral_link'].endswith(f"?ref={self.referrer.referral_code}")
