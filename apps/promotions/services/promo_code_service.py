"""
Promo code validation and usage accounting.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from apps.common.exceptions import NotFound, ValidationError
from apps.common.utils import to_money
from ..models import PromoCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoQuote:
    promo: PromoCode
    order_amount: Decimal
    discount_amount: Decimal

    @property
    def final_amount(self):
        return max(Decimal('0.00'), self.order_amount - self.discount_amount)


class PromoCodeService:
    """Service for validating and redeeming promo codes"""

    @staticmethod
    def normalize(code):
        return (code or '').strip().upper()

    @staticmethod
    def calculate_discount(promo, order_amount):
        """Discount for a subtotal; percentage discounts honour max_discount_amount"""
        order_amount = to_money(order_amount)
        if promo.discount_type == 'percentage':
            discount = order_amount * promo.discount_value / Decimal('100')
            if promo.max_discount_amount and discount > promo.max_discount_amount:
                discount = promo.max_discount_amount
        else:
            discount = promo.discount_value
        return to_money(min(discount, order_amount))

    @staticmethod
    def validate(code, order_amount, now=None):
        """
        Check a code against a product subtotal (delivery excluded).

        Returns a PromoQuote; raises NotFound for unknown codes and
        ValidationError for codes that exist but cannot be used.
        """
        code = PromoCodeService.normalize(code)
        if not code:
            raise ValidationError("Promo code is required")

        promo = PromoCode.objects.exclude(status__in=['deleted', 'inactive']).filter(code=code).first()
        if promo is None:
            raise NotFound("Invalid promo code", code=code)

        if promo.status == 'expired':
            raise ValidationError("Promo code has expired", code=code)

        now = now or timezone.now()
        if not promo.is_within_window(now):
            if now > promo.valid_until:
                PromoCode.objects.filter(pk=promo.pk, status='active').update(status='expired')
                logger.info(f"Promo code {code} marked expired")
            raise ValidationError("Promo code has expired or is not yet active", code=code)

        if promo.is_exhausted:
            raise ValidationError("Promo code usage limit reached", code=code)

        order_amount = to_money(order_amount)
        if order_amount < promo.min_order_amount:
            shortfall = to_money(promo.min_order_amount - order_amount)
            raise ValidationError(
                f"Minimum order amount of ₹{promo.min_order_amount} required for this promo code. "
                f"Add ₹{shortfall} more to your cart to use this code.",
                code=code,
                shortfall=str(shortfall),
            )

        return PromoQuote(
            promo=promo,
            order_amount=order_amount,
            discount_amount=PromoCodeService.calculate_discount(promo, order_amount),
        )

    @staticmethod
    def redeem(promo):
        """Count one use; the UPDATE refuses to go past usage_limit"""
        with transaction.atomic():
            updated = PromoCode.objects.filter(pk=promo.pk, status='active').filter(
                Q(usage_limit__isnull=True) | Q(used_count__lt=F('usage_limit'))
            ).update(used_count=F('used_count') + 1)
            if not updated:
                raise ValidationError("Promo code usage limit reached", code=promo.code)
        promo.refresh_from_db(fields=['used_count'])
        logger.info(f"Promo code {promo.code} used ({promo.used_count}/{promo.usage_limit or '∞'})")
        return promo
