"""
Milestone bonuses for referrers.
"""
import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Sum

from apps.common.config import get_rewards_config
from apps.common.emails import DEFAULT_EMAIL_SENDER, resolve_email_sender
from apps.common.notifications import DatabaseNotificationSender
from apps.common.utils import to_money
from ..models import MilestoneAward, Referral

logger = logging.getLogger(__name__)


class MilestoneService:
    """Awards each reached milestone level exactly once per customer"""

    def __init__(self, wallet=None, notifier=None, email_sender=DEFAULT_EMAIL_SENDER, config=None):
        from apps.wallet.services import WalletService

        self.notifier = notifier if notifier is not None else DatabaseNotificationSender()
        self.wallet = wallet if wallet is not None else WalletService(notifier=self.notifier)
        self.email_sender = resolve_email_sender(email_sender)
        self.config = config or get_rewards_config()

    @staticmethod
    def completed_referrals(customer):
        return Referral.objects.filter(referrer_id=customer.pk, status=Referral.STATUS_COMPLETED).count()

    def check_and_award(self, customer):
        """
        Credit every reached, not yet awarded level.

        The MilestoneAward row and the ledger entry are written in one
        transaction; the unique (customer, level) constraint rejects a
        concurrent second award. Returns the newly awarded levels.
        """
        completed = self.completed_referrals(customer)
        awarded_levels = set(
            MilestoneAward.objects.filter(customer_id=customer.pk).values_list('level', flat=True)
        )

        new_milestones = []
        for milestone in self.config.milestone_levels:
            if completed < milestone.referrals:
                break
            if milestone.level in awarded_levels:
                continue

            try:
                with transaction.atomic():
                    award = MilestoneAward.objects.create(
                        customer_id=customer.pk,
                        level=milestone.level,
                        name=milestone.name,
                        referrals_required=milestone.referrals,
                        bonus=milestone.bonus,
                    )
                    award.transaction = self.wallet.credit(
                        customer, milestone.bonus, 'milestone',
                        description=milestone.label, notify=False,
                    )
                    award.save(update_fields=['transaction'])
            except IntegrityError:
                logger.info(f"Milestone {milestone.name} already awarded to customer {customer.pk}")
                continue

            logger.info(f"Milestone awarded: {milestone.name} - ₹{milestone.bonus} to customer {customer.pk}")
            new_milestones.append(milestone)
            self._announce(customer, milestone)

        return new_milestones

    def _announce(self, customer, milestone):
        try:
            with transaction.atomic():
                self.notifier.milestone_achieved(customer, milestone)
        except Exception:
            logger.exception(f"Milestone notification failed for customer {customer.pk}")

        if self.email_sender is None:
            return
        try:
            self.email_sender.send_milestone_email(
                customer.email,
                customer.display_name,
                milestone,
                self.total_bonuses(customer),
            )
        except Exception:
            logger.exception(f"Milestone email failed for customer {customer.pk}")

    @staticmethod
    def total_bonuses(customer):
        total = MilestoneAward.objects.filter(customer_id=customer.pk).aggregate(total=Sum('bonus'))['total']
        return to_money(total)

    def progress(self, customer):
        completed = self.completed_referrals(customer)
        milestones = []
        for milestone in self.config.milestone_levels:
            achieved = completed >= milestone.referrals
            milestones.append({
                'level': milestone.level,
                'name': milestone.name,
                'description': milestone.description,
                'referrals': milestone.referrals,
                'bonus': milestone.bonus,
                'is_achieved': achieved,
                'progress': min(round(completed * 100 / milestone.referrals), 100),
            })

        next_milestone = next((m for m in milestones if not m['is_achieved']), None)
        achieved = [m for m in milestones if m['is_achieved']]
        return {
            'completed_referrals': completed,
            'milestones': milestones,
            'next_milestone': next_milestone,
            'achieved_milestones': achieved,
            'total_milestone_bonuses': self.total_bonuses(customer),
            'total_possible_bonuses': sum((m.bonus for m in self.config.milestone_levels), Decimal('0')),
        }
