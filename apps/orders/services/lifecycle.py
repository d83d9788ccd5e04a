"""
Order status transitions and the reward side effects they trigger.

The status write is the only part that can fail a transition. Everything
after it (scratch card crediting, referral and milestone bonuses, card
expiry and wallet refund on cancellation) is best-effort: each step runs
in its own savepoint, failures are logged, returned in a SideEffectReport
and stored as RewardFailure rows so replay_side_effects() can retry them.
Every step is idempotent, so replaying a step that already succeeded
credits nothing.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from apps.common.emails import DEFAULT_EMAIL_SENDER
from apps.common.exceptions import InvalidState, NotFound, SideEffectFailure, ValidationError
from apps.common.notifications import DatabaseNotificationSender
from ..models import Order, RewardFailure

logger = logging.getLogger(__name__)

REFERRAL_STEPS = ('referral_credit', 'referral_referrer_credit', 'referral_referee_credit', 'milestone_check')


@dataclass
class SideEffectReport:
    order_id: int
    status: str
    succeeded: List[str] = field(default_factory=list)
    failures: List[SideEffectFailure] = field(default_factory=list)

    @property
    def ok(self):
        return not self.failures

    def as_dict(self):
        return {
            'order_id': self.order_id,
            'status': self.status,
            'succeeded': list(self.succeeded),
            'failures': [failure.as_dict() for failure in self.failures],
        }


@dataclass
class TransitionOutcome:
    order: Order
    previous_status: str
    changed: bool
    report: SideEffectReport


def record_side_effect_failure(order, step, error) -> SideEffectFailure:
    """Log a failed step and keep it for replay"""
    failure = SideEffectFailure(step, error, order_id=order.pk)
    logger.error(f"Side effect {step} failed for order {order.order_number}: {error}")
    try:
        RewardFailure.objects.create(order=order, step=step, error=repr(error)[:2000])
    except Exception:
        logger.exception(f"Could not record {step} failure for order {order.order_number}")
    return failure


def resolve_side_effect_failures(order, steps):
    return RewardFailure.objects.filter(
        order=order, step__in=steps, resolved_at__isnull=True
    ).update(resolved_at=timezone.now())


class OrderLifecycleCoordinator:
    """Applies status transitions and runs their reward side effects"""

    def __init__(self, wallet=None, scratch_cards=None, referrals=None, notifier=None,
                 email_sender=DEFAULT_EMAIL_SENDER):
        from apps.wallet.services import WalletService
        from apps.rewards.services import ScratchCardService
        from apps.referrals.services import ReferralService

        self.notifier = notifier if notifier is not None else DatabaseNotificationSender()
        self.wallet = wallet if wallet is not None else WalletService(notifier=self.notifier)
        self.scratch_cards = scratch_cards if scratch_cards is not None else ScratchCardService(
            wallet=self.wallet, notifier=self.notifier
        )
        self.referrals = referrals if referrals is not None else ReferralService(
            wallet=self.wallet, notifier=self.notifier, email_sender=email_sender
        )

    def transition_order_status(self, order_id, new_status) -> TransitionOutcome:
        """
        Move an order to new_status.

        The row is locked while the transition is validated and the write
        is conditional on the status that was read. Repeating the current
        status changes nothing and runs no side effects.
        """
        valid_statuses = {value for value, _ in Order.STATUS_CHOICES}
        if new_status not in valid_statuses:
            raise ValidationError("Invalid order status", status=new_status)

        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_id).first()
            if order is None:
                raise NotFound("Order not found", order_id=order_id)

            previous_status = order.status
            changed = previous_status != new_status
            if changed:
                if not Order.can_transition(previous_status, new_status):
                    raise InvalidState(
                        f"Cannot change order status from {previous_status} to {new_status}",
                        order_id=order.pk,
                        status=previous_status,
                    )
                now = timezone.now()
                fields = {'status': new_status, 'updated_at': now}
                if new_status == Order.STATUS_DELIVERED:
                    fields['delivered_at'] = now
                elif new_status == Order.STATUS_CANCELLED:
                    fields['cancelled_at'] = now
                updated = Order.objects.filter(pk=order.pk, status=previous_status).update(**fields)
                if not updated:
                    raise InvalidState("Order status changed concurrently", order_id=order.pk)

        order.refresh_from_db()
        if changed:
            logger.info(f"Order {order.order_number} status {previous_status} -> {new_status}")
            report = self._run_side_effects(order)
        else:
            logger.info(f"Order {order.order_number} already {new_status}; nothing to do")
            report = SideEffectReport(order_id=order.pk, status=order.status)

        return TransitionOutcome(order=order, previous_status=previous_status, changed=changed, report=report)

    def refund_wallet(self, order):
        """Return a cancelled order's wallet redemption once"""
        if order.wallet_amount_used <= 0:
            return None
        with transaction.atomic():
            claimed = Order.objects.filter(pk=order.pk, wallet_refunded=False).update(wallet_refunded=True)
            if not claimed:
                return None
            entry = self.wallet.credit(
                order.customer,
                order.wallet_amount_used,
                'order_refund',
                order=order,
                description=f"Wallet Refund (Order {order.order_number})",
            )
        order.wallet_refunded = True
        return entry

    def _ensure_scratch_card(self, order):
        return self.scratch_cards.create_for_order(order)

    def _credit_referrals(self, order):
        return self.referrals.credit_first_order_bonuses(order)

    def _steps_for(self, order, include_card_creation=False):
        steps = []
        if include_card_creation and order.status != Order.STATUS_CANCELLED:
            steps.append(('scratch_card_create', self._ensure_scratch_card))
        if order.status == Order.STATUS_DELIVERED:
            steps.append(('scratch_card_credit', self.scratch_cards.auto_credit_for_order))
            steps.append(('referral_credit', self._credit_referrals))
        elif order.status == Order.STATUS_CANCELLED:
            steps.append(('scratch_card_expire', self.scratch_cards.expire_for_order))
            steps.append(('wallet_refund', self.refund_wallet))
        return steps

    def _run_side_effects(self, order, include_card_creation=False) -> SideEffectReport:
        report = SideEffectReport(order_id=order.pk, status=order.status)

        for step, action in self._steps_for(order, include_card_creation):
            try:
                with transaction.atomic():
                    result = action(order)
            except Exception as exc:
                logger.exception(f"Side effect {step} raised for order {order.order_number}")
                report.failures.append(record_side_effect_failure(order, step, exc))
                continue

            if step == 'referral_credit':
                # Referral crediting isolates its own sub-steps and reports their errors
                for sub_step, exc in result.errors:
                    report.failures.append(record_side_effect_failure(order, sub_step, exc))
                if result.errors:
                    continue
                if not result.settled:
                    error = InvalidState("Referral bonuses still unpaid", order_id=order.pk)
                    report.failures.append(record_side_effect_failure(order, step, error))
                    continue

            report.succeeded.append(step)
            resolve_side_effect_failures(order, REFERRAL_STEPS if step == 'referral_credit' else (step,))

        return report

    def replay_side_effects(self, order_id) -> SideEffectReport:
        """
        Re-run the side effects for an order's current status, including
        scratch card creation. Succeeded steps resolve their recorded failures.
        """
        order = Order.objects.select_related('customer').filter(pk=order_id).first()
        if order is None:
            raise NotFound("Order not found", order_id=order_id)
        logger.info(f"Replaying side effects for order {order.order_number} ({order.status})")
        return self._run_side_effects(order, include_card_creation=True)

    @staticmethod
    def open_failures(order_id: Optional[int] = None):
        queryset = RewardFailure.objects.filter(resolved_at__isnull=True).select_related('order')
        if order_id is not None:
            queryset = queryset.filter(order_id=order_id)
        return queryset
