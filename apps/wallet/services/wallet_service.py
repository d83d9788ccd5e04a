"""
Wallet ledger service.

Every balance change appends a WalletTransaction and moves the cached
User.wallet_balance with a single conditional UPDATE, both inside one
transaction, so the cached balance always equals the ledger sum.
"""
import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, F, Q, Sum

from apps.common.config import get_rewards_config
from apps.common.exceptions import AlreadyCredited, InsufficientFunds, NotFound, ValidationError
from apps.common.notifications import DatabaseNotificationSender
from apps.common.utils import to_money
from ..models import WalletTransaction

logger = logging.getLogger(__name__)

VALID_CATEGORIES = {key for key, _ in WalletTransaction.CATEGORY_CHOICES}


class WalletService:
    """Service for wallet credits, debits and balance queries"""

    def __init__(self, notifier=None):
        self.notifier = notifier if notifier is not None else DatabaseNotificationSender()

    @staticmethod
    def _validate(amount, category):
        try:
            amount = to_money(amount)
        except ArithmeticError:
            raise ValidationError("Amount must be a number", amount=str(amount))
        if amount <= 0:
            raise ValidationError("Amount must be positive", amount=str(amount))
        if category not in VALID_CATEGORIES:
            raise ValidationError("Unknown wallet category", category=category)
        return amount

    @staticmethod
    def _current_balance(customer_id):
        User = get_user_model()
        return User.objects.values_list('wallet_balance', flat=True).get(pk=customer_id)

    def credit(self, customer, amount, category, order=None, description='', notify=True):
        """Add money to the wallet; returns the ledger entry"""
        amount = self._validate(amount, category)
        User = get_user_model()

        with transaction.atomic():
            updated = User.objects.filter(pk=customer.pk).update(
                wallet_balance=F('wallet_balance') + amount
            )
            if not updated:
                raise NotFound("Customer not found", customer_id=customer.pk)
            balance_after = self._current_balance(customer.pk)
            entry = WalletTransaction.objects.create(
                customer_id=customer.pk,
                direction='credit',
                amount=amount,
                category=category,
                order=order,
                description=description,
                balance_after=balance_after,
            )

        customer.wallet_balance = balance_after
        logger.info(
            f"Wallet credit ₹{amount} ({category}) for customer {customer.pk}, balance ₹{balance_after}"
        )
        if notify:
            self._notify(customer, category, amount, description, order)
        return entry

    def debit(self, customer, amount, category, order=None, description='', notify=True):
        """
        Take money from the wallet.

        The UPDATE only matches while the balance covers the amount, so two
        concurrent debits can never drive the balance negative.
        """
        amount = self._validate(amount, category)
        User = get_user_model()

        with transaction.atomic():
            updated = User.objects.filter(pk=customer.pk, wallet_balance__gte=amount).update(
                wallet_balance=F('wallet_balance') - amount
            )
            if not updated:
                available = User.objects.filter(pk=customer.pk).values_list('wallet_balance', flat=True).first()
                if available is None:
                    raise NotFound("Customer not found", customer_id=customer.pk)
                raise InsufficientFunds(
                    f"Insufficient wallet balance. Available: ₹{available}",
                    available=str(available),
                    requested=str(amount),
                )
            balance_after = self._current_balance(customer.pk)
            entry = WalletTransaction.objects.create(
                customer_id=customer.pk,
                direction='debit',
                amount=amount,
                category=category,
                order=order,
                description=description,
                balance_after=balance_after,
            )

        customer.wallet_balance = balance_after
        logger.info(
            f"Wallet debit ₹{amount} ({category}) for customer {customer.pk}, balance ₹{balance_after}"
        )
        if notify:
            self._notify(customer, category, amount, description, order)
        return entry

    def _notify(self, customer, category, amount, description, order):
        # Savepoint keeps a failed notification from poisoning an outer transaction
        try:
            with transaction.atomic():
                self.notifier.wallet_event(customer, category, amount, description, order=order)
        except Exception:
            logger.exception(f"Wallet notification failed for customer {customer.pk} ({category})")

    @staticmethod
    def ledger_balance(customer):
        """Balance derived from the ledger: credits minus debits"""
        totals = WalletTransaction.objects.filter(customer_id=customer.pk).aggregate(
            credits=Sum('amount', filter=Q(direction='credit')),
            debits=Sum('amount', filter=Q(direction='debit')),
        )
        return to_money((totals['credits'] or Decimal('0')) - (totals['debits'] or Decimal('0')))

    @staticmethod
    def reconcile_balance(customer):
        """Rewrite the cached balance from the ledger if they disagree"""
        User = get_user_model()
        with transaction.atomic():
            cached = User.objects.select_for_update().values_list(
                'wallet_balance', flat=True
            ).get(pk=customer.pk)
            ledger = WalletService.ledger_balance(customer)
            adjusted = to_money(cached) != ledger
            if adjusted:
                User.objects.filter(pk=customer.pk).update(wallet_balance=ledger)
                logger.warning(
                    f"Wallet balance drift for customer {customer.pk}: cached ₹{cached}, ledger ₹{ledger}"
                )
        customer.wallet_balance = ledger
        return {
            'customer_id': customer.pk,
            'cached_balance': to_money(cached),
            'ledger_balance': ledger,
            'adjusted': adjusted,
        }

    def credit_welcome_bonus(self, customer):
        """One-time welcome bonus, claimed through the welcome_bonus_credited flag"""
        amount = get_rewards_config().welcome_bonus
        User = get_user_model()

        with transaction.atomic():
            claimed = User.objects.filter(pk=customer.pk, welcome_bonus_credited=False).update(
                welcome_bonus_credited=True
            )
            if not claimed:
                raise AlreadyCredited("Welcome bonus already credited")
            entry = self.credit(
                customer, amount, 'welcome_bonus',
                description='Welcome Bonus', notify=False,
            )

        customer.welcome_bonus_credited = True
        self._notify(customer, 'welcome_bonus', amount, entry.description, None)
        return entry

    @staticmethod
    def transactions_for(customer, category=None, direction=None):
        queryset = WalletTransaction.objects.filter(customer_id=customer.pk).select_related('order')
        if category:
            queryset = queryset.filter(category=category)
        if direction:
            queryset = queryset.filter(direction=direction)
        return queryset

    @staticmethod
    def summary(customer):
        """Balance plus lifetime totals and per-category breakdown"""
        entries = WalletTransaction.objects.filter(customer_id=customer.pk)
        totals = entries.aggregate(
            earned=Sum('amount', filter=Q(direction='credit')),
            spent=Sum('amount', filter=Q(direction='debit')),
        )
        by_category = {
            row['category']: {'count': row['count'], 'total': to_money(row['total'])}
            for row in entries.values('category').annotate(count=Count('id'), total=Sum('amount'))
        }
        return {
            'balance': to_money(WalletService._current_balance(customer.pk)),
            'total_earned': to_money(totals['earned']),
            'total_spent': to_money(totals['spent']),
            'by_category': by_category,
            'welcome_bonus_credited': customer.welcome_bonus_credited,
            'recent_transactions': list(entries.select_related('order')[:10]),
        }
