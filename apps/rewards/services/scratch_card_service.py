"""
Scratch card engine.

A card is created per order with a random 4-7% cashback, revealed by the
customer at any time and credited to the wallet only once the order is
delivered. Each state change is a conditional UPDATE on the current status,
so concurrent callers cannot both move the same card.
"""
import logging
import random
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.common.config import get_rewards_config
from apps.common.exceptions import AlreadyCredited, InvalidState, NotFound, OrderNotDelivered
from apps.common.notifications import DatabaseNotificationSender
from apps.common.utils import round_half_up, to_money
from ..models import ScratchCard

logger = logging.getLogger(__name__)


class ScratchCardService:
    """Service for the scratch card lifecycle"""

    def __init__(self, wallet=None, notifier=None, rng=None, config=None):
        from apps.wallet.services import WalletService

        self.notifier = notifier if notifier is not None else DatabaseNotificationSender()
        self.wallet = wallet if wallet is not None else WalletService(notifier=self.notifier)
        self.rng = rng or random.Random()
        self.config = config or get_rewards_config()

    def compute_amount(self, order_total) -> int:
        """round(total × U(min_rate, max_rate)), never below ₹1"""
        rate = Decimal(str(self.rng.uniform(
            float(self.config.scratch_card_min_rate),
            float(self.config.scratch_card_max_rate),
        )))
        return max(1, round_half_up(to_money(order_total) * rate))

    def create_for_order(self, order):
        """Create the order's card; an existing card is returned unchanged"""
        existing = ScratchCard.objects.filter(order_id=order.pk).first()
        if existing:
            return existing

        amount = self.compute_amount(order.total_amount)
        try:
            with transaction.atomic():
                card = ScratchCard.objects.create(
                    customer_id=order.customer_id,
                    order=order,
                    amount=amount,
                )
        except IntegrityError:
            # Lost a race with another creator
            return ScratchCard.objects.get(order_id=order.pk)

        logger.info(f"Scratch card ₹{amount} created for order {order.order_number}")
        return card

    @staticmethod
    def _get_card(card_id, customer=None):
        queryset = ScratchCard.objects.select_related('order', 'customer')
        if customer is not None:
            queryset = queryset.filter(customer_id=customer.pk)
        card = queryset.filter(pk=card_id).first()
        if card is None:
            raise NotFound("Scratch card not found", card_id=card_id)
        return card

    def reveal(self, card_id, customer=None):
        """pending -> revealed; does not touch the wallet"""
        card = self._get_card(card_id, customer)
        updated = ScratchCard.objects.filter(pk=card.pk, status=ScratchCard.STATUS_PENDING).update(
            status=ScratchCard.STATUS_REVEALED,
            revealed_at=timezone.now(),
        )
        card.refresh_from_db()
        if not updated:
            raise InvalidState(
                f"Scratch card is already {card.status}",
                card_id=card.pk,
                status=card.status,
            )

        logger.info(f"Scratch card {card.pk} revealed (₹{card.amount}) for order {card.order.order_number}")
        try:
            with transaction.atomic():
                self.notifier.scratch_card_revealed(card.customer, card)
        except Exception:
            logger.exception(f"Scratch card notification failed for card {card.pk}")
        return card

    def _credit_claimed(self, card, order):
        return self.wallet.credit(
            card.customer,
            Decimal(card.amount),
            'order_cashback',
            order=order,
            description=f"Cashback (Order {order.order_number})",
        )

    def credit(self, card_id):
        """revealed -> credited, only for a delivered order"""
        card = self._get_card(card_id)
        order = card.order

        if card.status == ScratchCard.STATUS_CREDITED:
            raise AlreadyCredited("Scratch card already credited", card_id=card.pk)
        if order.status != order.STATUS_DELIVERED:
            raise OrderNotDelivered(
                "Order must be delivered before cashback can be credited",
                order_id=order.pk,
                status=order.status,
            )
        if card.status != ScratchCard.STATUS_REVEALED:
            raise InvalidState(
                f"Scratch card is {card.status}; reveal it first",
                card_id=card.pk,
                status=card.status,
            )

        with transaction.atomic():
            claimed = ScratchCard.objects.filter(pk=card.pk, status=ScratchCard.STATUS_REVEALED).update(
                status=ScratchCard.STATUS_CREDITED,
                credited_at=timezone.now(),
            )
            if not claimed:
                card.refresh_from_db()
                if card.status == ScratchCard.STATUS_CREDITED:
                    raise AlreadyCredited("Scratch card already credited", card_id=card.pk)
                raise InvalidState(f"Scratch card is {card.status}", card_id=card.pk, status=card.status)
            entry = self._credit_claimed(card, order)

        card.refresh_from_db()
        logger.info(f"Scratch card {card.pk} credited ₹{card.amount} for order {order.order_number}")
        return card, entry

    def auto_credit_for_order(self, order):
        """
        Reveal and credit the order's card in one pass.

        Returns the ledger entry, or None when there was nothing to credit
        (no card, already credited, or expired). Safe to repeat.
        """
        if order.status != order.STATUS_DELIVERED:
            raise OrderNotDelivered(order_id=order.pk, status=order.status)

        card = ScratchCard.objects.select_related('customer').filter(order_id=order.pk).first()
        if card is None or card.status in (ScratchCard.STATUS_CREDITED, ScratchCard.STATUS_EXPIRED):
            return None

        now = timezone.now()
        with transaction.atomic():
            ScratchCard.objects.filter(pk=card.pk, status=ScratchCard.STATUS_PENDING).update(
                status=ScratchCard.STATUS_REVEALED,
                revealed_at=now,
            )
            claimed = ScratchCard.objects.filter(pk=card.pk, status=ScratchCard.STATUS_REVEALED).update(
                status=ScratchCard.STATUS_CREDITED,
                credited_at=now,
            )
            if not claimed:
                return None
            entry = self._credit_claimed(card, order)

        logger.info(f"Scratch card {card.pk} auto-credited ₹{card.amount} for order {order.order_number}")
        return entry

    @staticmethod
    def expire_for_order(order):
        """Expire a cancelled order's card unless it was already credited"""
        expired = ScratchCard.objects.filter(
            order_id=order.pk,
            status__in=[ScratchCard.STATUS_PENDING, ScratchCard.STATUS_REVEALED],
        ).update(status=ScratchCard.STATUS_EXPIRED, expired_at=timezone.now())
        if expired:
            logger.info(f"Scratch card expired for cancelled order {order.order_number}")
        return expired

    @staticmethod
    def list_for_customer(customer, status=None):
        queryset = ScratchCard.objects.filter(customer_id=customer.pk).select_related('order')
        if status:
            queryset = queryset.filter(status=status)
        return queryset
