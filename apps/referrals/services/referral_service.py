"""
Referral codes, referral creation and first-order bonus crediting.
"""
import logging
import secrets
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from apps.common.config import get_rewards_config
from apps.common.emails import DEFAULT_EMAIL_SENDER, resolve_email_sender
from apps.common.exceptions import (
    AlreadyReferred, InvalidCode, OrderNotDelivered, SelfReferral, ValidationError
)
from apps.common.notifications import DatabaseNotificationSender
from apps.common.utils import to_money
from ..models import Referral
from .milestone_service import MilestoneService

logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 10


@dataclass
class ReferralCreditResult:
    referral: Optional[Referral] = None
    referrer_entry: object = None
    referee_entry: object = None
    milestones: list = field(default_factory=list)
    errors: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def credited(self):
        return self.referrer_entry is not None or self.referee_entry is not None

    @property
    def settled(self):
        """Nothing owed for this order: no referral bound to it, or both sides paid"""
        if self.errors:
            return False
        if self.referral is None:
            return True
        return self.referral.referrer_bonus_credited and self.referral.referee_bonus_credited


class ReferralService:
    """Service for the referral program"""

    def __init__(self, wallet=None, notifier=None, email_sender=DEFAULT_EMAIL_SENDER,
                 milestones=None, config=None):
        from apps.wallet.services import WalletService

        self.notifier = notifier if notifier is not None else DatabaseNotificationSender()
        self.wallet = wallet if wallet is not None else WalletService(notifier=self.notifier)
        self.email_sender = resolve_email_sender(email_sender)
        self.config = config or get_rewards_config()
        self.milestones = milestones if milestones is not None else MilestoneService(
            wallet=self.wallet,
            notifier=self.notifier,
            email_sender=self.email_sender,
            config=self.config,
        )

    @staticmethod
    def normalize(code):
        return (code or '').strip().upper()

    @staticmethod
    def get_or_create_referral_code(customer):
        """
        Customer's referral code: 4 random hex characters plus the last 4
        digits of the id, e.g. 'A3F90042'. Falls back to 'REF' + padded id.
        """
        if customer.referral_code:
            return customer.referral_code

        User = get_user_model()
        suffix = str(customer.pk)[-4:].zfill(4)
        candidates = [secrets.token_hex(2).upper() + suffix for _ in range(CODE_ATTEMPTS)]
        candidates.append(f"REF{customer.pk:06d}")

        for code in candidates:
            if User.objects.filter(referral_code=code).exists():
                continue
            try:
                with transaction.atomic():
                    updated = User.objects.filter(pk=customer.pk, referral_code__isnull=True).update(
                        referral_code=code
                    )
            except IntegrityError:
                continue
            if not updated:
                # Assigned concurrently
                customer.refresh_from_db(fields=['referral_code'])
                return customer.referral_code
            customer.referral_code = code
            logger.info(f"Referral code {code} assigned to customer {customer.pk}")
            return code

        raise ValidationError("Could not generate a unique referral code", customer_id=customer.pk)

    def validate_code(self, code):
        """Return the referrer owning the code"""
        code = self.normalize(code)
        if not code:
            raise InvalidCode("Referral code is required")
        referrer = get_user_model().objects.filter(referral_code=code).first()
        if referrer is None:
            raise InvalidCode("Invalid referral code", code=code)
        return referrer

    def create_referral(self, referee, code):
        """Link a newly registered customer to the owner of the code"""
        referrer = self.validate_code(code)
        if referrer.pk == referee.pk:
            raise SelfReferral()
        if Referral.objects.filter(referee_id=referee.pk).exists():
            raise AlreadyReferred()

        User = get_user_model()
        try:
            with transaction.atomic():
                referral = Referral.objects.create(
                    referrer=referrer,
                    referee=referee,
                    referral_code=self.normalize(code),
                    referrer_bonus_amount=self.config.referrer_bonus,
                    referee_bonus_amount=self.config.referee_bonus,
                )
                User.objects.filter(pk=referee.pk).update(referred_by=referrer)
        except IntegrityError:
            raise AlreadyReferred()

        referee.referred_by = referrer
        logger.info(f"Referral created: referrer {referrer.pk} referred referee {referee.pk} with code {referral.referral_code}")
        return referral

    def referral_link(self, customer):
        code = self.get_or_create_referral_code(customer)
        base_url = getattr(settings, 'STOREFRONT_URL', '').rstrip('/')
        return f"{base_url}/signup?ref={code}"

    def send_invite(self, customer, to_email):
        """Email the customer's referral code to a friend"""
        if not to_email:
            raise ValidationError("Email address is required")
        if self.email_sender is None:
            raise ValidationError("Referral emails are disabled")
        code = self.get_or_create_referral_code(customer)
        self.email_sender.send_referral_email(
            to_email, customer.display_name or 'Friend', code, self.referral_link(customer)
        )
        logger.info(f"Referral invite sent by customer {customer.pk}")
        return code

    @staticmethod
    def is_first_delivered_order(order):
        """
        True when order is the customer's earliest delivered order, by
        delivered_at then id, so concurrent deliveries agree on one order.
        """
        from apps.orders.models import Order
        first_id = Order.objects.filter(
            customer_id=order.customer_id,
            status=order.STATUS_DELIVERED,
        ).order_by(F('delivered_at').asc(nulls_last=True), 'pk').values_list('pk', flat=True).first()
        return first_id == order.pk

    def _credit_side(self, referral, side, order):
        """Claim one side's _credited flag and pay it in the same transaction"""
        flag = f'{side}_bonus_credited'
        if side == 'referrer':
            customer, amount = referral.referrer, referral.referrer_bonus_amount
            description = f"Referral Bonus (Order {order.order_number})"
        else:
            customer, amount = referral.referee, referral.referee_bonus_amount
            description = f"Referral Signup Bonus (Order {order.order_number})"

        with transaction.atomic():
            claimed = Referral.objects.filter(pk=referral.pk, **{flag: False}).update(
                **{flag: True, f'{flag}_at': timezone.now()}
            )
            if not claimed or amount <= 0:
                return None
            entry = self.wallet.credit(customer, amount, 'referral_bonus', order=order, description=description)

        logger.info(f"Referral {side} bonus ₹{amount} credited to customer {customer.pk} (order {order.order_number})")
        return entry

    def credit_first_order_bonuses(self, order):
        """
        Complete the customer's pending referral on their first delivered
        order and pay both sides. Each side is claimed independently, so a
        repeat call pays nothing twice and a failed side can be retried.
        """
        if order.status != order.STATUS_DELIVERED:
            raise OrderNotDelivered(order_id=order.pk, status=order.status)

        result = ReferralCreditResult()
        referral = Referral.objects.select_related('referrer', 'referee').filter(
            referee_id=order.customer_id
        ).first()
        if referral is None:
            return result

        # Once completed, the referral stays bound to its first order
        if referral.first_order_id is None:
            if not self.is_first_delivered_order(order):
                return result
            Referral.objects.filter(pk=referral.pk, status=Referral.STATUS_PENDING).update(
                status=Referral.STATUS_COMPLETED,
                first_order=order,
                completed_at=timezone.now(),
            )
            referral.refresh_from_db()
        if referral.first_order_id != order.pk:
            return result
        result.referral = referral

        for side in ('referrer', 'referee'):
            try:
                entry = self._credit_side(referral, side, order)
            except Exception as exc:
                logger.exception(f"Referral {side} bonus failed for order {order.order_number}")
                result.errors.append((f'referral_{side}_credit', exc))
                continue
            setattr(result, f'{side}_entry', entry)

        referral.refresh_from_db()
        if referral.referrer_bonus_credited:
            try:
                result.milestones = self.milestones.check_and_award(referral.referrer)
            except Exception as exc:
                logger.exception(f"Milestone check failed for referrer {referral.referrer_id}")
                result.errors.append(('milestone_check', exc))

        return result

    def stats(self, customer):
        code = self.get_or_create_referral_code(customer)
        given = Referral.objects.filter(referrer_id=customer.pk)
        totals = given.aggregate(
            total=Count('id'),
            completed=Count('id', filter=Q(status=Referral.STATUS_COMPLETED)),
            earnings=Sum('referrer_bonus_amount', filter=Q(referrer_bonus_credited=True)),
            pending=Sum(
                'referrer_bonus_amount',
                filter=Q(status=Referral.STATUS_COMPLETED, referrer_bonus_credited=False)
            ),
        )
        return {
            'referral_code': code,
            'referral_link': self.referral_link(customer),
            'total_referrals': totals['total'],
            'completed_referrals': totals['completed'],
            'total_earnings': to_money(totals['earnings']),
            'pending_earnings': to_money(totals['pending']),
            'recent_referrals': list(given.select_related('referee')[:10]),
        }
