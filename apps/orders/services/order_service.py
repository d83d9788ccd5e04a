"""
Order placement and queries.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import IntegrityError, transaction

from apps.common.exceptions import NotFound, ValidationError
from apps.common.notifications import DatabaseNotificationSender
from apps.common.utils import to_money
from ..models import Order, OrderItem
from .lifecycle import record_side_effect_failure
from .pricing import CartLine, PricingResult

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = 'CRM-'
ORDER_NUMBER_START = 2427000001
ORDER_NUMBER_ATTEMPTS = 5


class OrderService:
    """Service class for core order business logic"""

    def __init__(self, wallet=None, scratch_cards=None, notifier=None):
        from apps.wallet.services import WalletService
        from apps.rewards.services import ScratchCardService

        self.notifier = notifier if notifier is not None else DatabaseNotificationSender()
        self.wallet = wallet if wallet is not None else WalletService(notifier=self.notifier)
        self.scratch_cards = scratch_cards if scratch_cards is not None else ScratchCardService(
            wallet=self.wallet, notifier=self.notifier
        )

    @staticmethod
    def generate_order_number() -> str:
        """Next sequential number, CRM-2427000001 onwards"""
        last = Order.objects.filter(order_number__startswith=ORDER_NUMBER_PREFIX).order_by(
            '-order_number'
        ).values_list('order_number', flat=True).first()

        next_number = ORDER_NUMBER_START
        if last:
            try:
                next_number = max(ORDER_NUMBER_START, int(last[len(ORDER_NUMBER_PREFIX):]) + 1)
            except ValueError:
                pass
        return f"{ORDER_NUMBER_PREFIX}{next_number:010d}"

    @staticmethod
    def _check_pricing(pricing: PricingResult, items: List[CartLine]):
        if not items:
            raise ValidationError("Order must contain at least one item")
        subtotal = to_money(sum((line.line_total for line in items), Decimal('0')))
        if subtotal != pricing.subtotal:
            raise ValidationError(
                "Items do not match the priced subtotal",
                items_subtotal=str(subtotal),
                priced_subtotal=str(pricing.subtotal),
            )

    def _create_order(self, customer, pricing, items, promo_code, delivery):
        for attempt in range(ORDER_NUMBER_ATTEMPTS):
            try:
                with transaction.atomic():
                    order = Order.objects.create(
                        order_number=self.generate_order_number(),
                        customer=customer,
                        subtotal=pricing.subtotal,
                        promo_code=promo_code or '',
                        promo_discount=pricing.promo_discount,
                        delivery_charge=pricing.delivery_charge,
                        wallet_amount_used=pricing.wallet_used,
                        total_amount=pricing.total,
                        subtotal_after_promo=pricing.subtotal_after_promo,
                        subtotal_after_wallet=pricing.subtotal_after_wallet,
                        final_delivery_charge=pricing.delivery_charge,
                        **delivery,
                    )
                break
            except IntegrityError:
                # Another order took the number
                logger.warning(f"Order number collision, retrying ({attempt + 1}/{ORDER_NUMBER_ATTEMPTS})")
        else:
            raise ValidationError("Could not allocate an order number")

        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product_id=line.product_id,
                product_name=line.name,
                unit_price=to_money(line.unit_price),
                quantity=line.quantity,
                addons=[
                    {'name': addon.name, 'unit_price': str(to_money(addon.unit_price)), 'quantity': addon.quantity}
                    for addon in line.addons
                ],
                line_total=line.line_total,
            )
            for line in items
        ])
        return order

    def place_order(self, customer, pricing: PricingResult, items: List[CartLine],
                    promo_code: Optional[str] = None, delivery: Optional[Dict] = None) -> Order:
        """
        Persist a priced order.

        Order, items, wallet redemption and promo usage are written in one
        transaction; if the wallet debit or promo redemption fails nothing
        is created. The scratch card is created afterwards as a best-effort
        step.
        """
        from apps.promotions.models import PromoCode
        from apps.promotions.services import PromoCodeService

        self._check_pricing(pricing, items)
        promo_code = PromoCodeService.normalize(promo_code or pricing.promo_code)
        if pricing.promo_discount > 0 and not promo_code:
            raise ValidationError("Promo discount requires a promo code")

        with transaction.atomic():
            order = self._create_order(customer, pricing, items, promo_code, delivery or {})

            if pricing.wallet_used > 0:
                self.wallet.debit(
                    customer,
                    pricing.wallet_used,
                    'order_redemption',
                    order=order,
                    description=f"Wallet used for Order {order.order_number}",
                )

            if promo_code:
                promo = PromoCode.objects.filter(code=promo_code).first()
                if promo is None:
                    raise NotFound("Invalid promo code", code=promo_code)
                PromoCodeService.redeem(promo)

        logger.info(
            f"Order {order.order_number} placed by customer {customer.pk}: total ₹{order.total_amount}, "
            f"wallet ₹{order.wallet_amount_used}, promo {promo_code or '-'}"
        )

        try:
            with transaction.atomic():
                self.scratch_cards.create_for_order(order)
        except Exception as exc:
            logger.exception(f"Scratch card creation failed for order {order.order_number}")
            record_side_effect_failure(order, 'scratch_card_create', exc)

        return order

    @staticmethod
    def get_customer_orders(customer, status=None):
        queryset = Order.objects.filter(customer=customer).prefetch_related('items')
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @staticmethod
    def get_customer_order(customer, order_id):
        order = Order.objects.filter(customer=customer, pk=order_id).prefetch_related('items').first()
        if order is None:
            raise NotFound("Order not found", order_id=order_id)
        return order
