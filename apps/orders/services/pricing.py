"""
Order pricing.

calculate_pricing() is pure: it takes cart lines and the already-resolved
promo discount and wallet balance, and returns every intermediate amount
that gets persisted on the order. price_order() resolves those inputs from
the database and configuration.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_DOWN
from typing import Iterable, Optional, Tuple

from apps.common.config import get_rewards_config
from apps.common.exceptions import ValidationError
from apps.common.utils import to_money

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class CartAddon:
    """Add-on or combo line attached to a cart line (candles, toppers, flowers...)"""
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def total(self) -> Decimal:
        return to_money(self.unit_price) * self.quantity


@dataclass(frozen=True)
class CartLine:
    product_id: Optional[int]
    name: str
    unit_price: Decimal
    quantity: int
    addons: Tuple[CartAddon, ...] = field(default_factory=tuple)

    @property
    def line_total(self) -> Decimal:
        """Base price × quantity plus each add-on's own price × quantity"""
        total = to_money(self.unit_price) * self.quantity
        for addon in self.addons:
            total += addon.total
        return to_money(total)


@dataclass(frozen=True)
class PricingResult:
    subtotal: Decimal
    promo_discount: Decimal
    delivery_charge: Decimal
    wallet_used: Decimal
    total: Decimal
    subtotal_after_promo: Decimal
    subtotal_after_wallet: Decimal
    total_before_wallet: Decimal
    max_wallet_usage: Decimal
    promo_code: Optional[str] = None
    wallet_requested: Decimal = ZERO

    @property
    def wallet_capped(self) -> bool:
        return self.wallet_used < self.wallet_requested

    def as_dict(self):
        return {
            'subtotal': self.subtotal,
            'promo_code': self.promo_code,
            'promo_discount': self.promo_discount,
            'delivery_charge': self.delivery_charge,
            'wallet_requested': self.wallet_requested,
            'wallet_used': self.wallet_used,
            'max_wallet_usage': self.max_wallet_usage,
            'subtotal_after_promo': self.subtotal_after_promo,
            'subtotal_after_wallet': self.subtotal_after_wallet,
            'total_before_wallet': self.total_before_wallet,
            'total': self.total,
        }


def _validate_lines(lines):
    lines = list(lines)
    if not lines:
        raise ValidationError("Order must contain at least one item")
    for line in lines:
        if line.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0", item=line.name)
        if to_money(line.unit_price) < 0:
            raise ValidationError("Price cannot be negative", item=line.name)
        for addon in line.addons:
            if addon.quantity <= 0 or to_money(addon.unit_price) < 0:
                raise ValidationError("Invalid add-on line", item=line.name, addon=addon.name)
    return lines


def calculate_pricing(
    lines: Iterable[CartLine],
    promo_discount=ZERO,
    wallet_requested=ZERO,
    wallet_balance=ZERO,
    free_delivery_threshold=Decimal('500'),
    delivery_charge=Decimal('50'),
    redemption_rate=Decimal('0.10'),
    accept_wallet_cap: bool = False,
    promo_code: Optional[str] = None,
) -> PricingResult:
    """
    Price a cart.

    Delivery is free once the product subtotal reaches the threshold. Wallet
    redemption is limited to min(requested, balance, rate × total before
    wallet); asking for more raises ValidationError unless accept_wallet_cap
    is set, in which case the cap is used instead.
    """
    lines = _validate_lines(lines)
    promo_discount = to_money(promo_discount)
    wallet_requested = to_money(wallet_requested)
    wallet_balance = max(ZERO, to_money(wallet_balance))

    if promo_discount < 0:
        raise ValidationError("Promo discount cannot be negative")
    if wallet_requested < 0:
        raise ValidationError("Wallet amount cannot be negative")

    subtotal = to_money(sum((line.line_total for line in lines), ZERO))
    promo_discount = min(promo_discount, subtotal)
    subtotal_after_promo = subtotal - promo_discount

    final_delivery_charge = ZERO if subtotal >= to_money(free_delivery_threshold) else to_money(delivery_charge)
    total_before_wallet = subtotal_after_promo + final_delivery_charge

    # Rounded down so the cap never exceeds the rate
    rate_cap = (total_before_wallet * Decimal(str(redemption_rate))).quantize(Decimal('0.01'), rounding=ROUND_DOWN)
    max_wallet_usage = min(wallet_balance, rate_cap)
    if wallet_requested > max_wallet_usage and not accept_wallet_cap:
        raise ValidationError(
            f"Wallet usage exceeds limit. Maximum allowed: ₹{max_wallet_usage} "
            f"({Decimal(str(redemption_rate)) * 100:.0f}% of order total, limited by wallet balance)",
            requested=str(wallet_requested),
            max_wallet_usage=str(max_wallet_usage),
        )
    wallet_used = min(wallet_requested, max_wallet_usage)

    subtotal_after_wallet = max(ZERO, subtotal_after_promo - wallet_used)
    total = max(ZERO, subtotal - promo_discount - wallet_used + final_delivery_charge)

    return PricingResult(
        subtotal=subtotal,
        promo_discount=promo_discount,
        delivery_charge=final_delivery_charge,
        wallet_used=wallet_used,
        total=to_money(total),
        subtotal_after_promo=subtotal_after_promo,
        subtotal_after_wallet=subtotal_after_wallet,
        total_before_wallet=total_before_wallet,
        max_wallet_usage=max_wallet_usage,
        promo_code=promo_code,
        wallet_requested=wallet_requested,
    )


def price_order(lines, promo_code=None, wallet_requested=ZERO, customer=None,
                accept_wallet_cap=False, config=None) -> PricingResult:
    """Resolve promo code and wallet balance, then price the cart"""
    from apps.promotions.services import PromoCodeService

    config = config or get_rewards_config()
    lines = _validate_lines(lines)

    promo_discount = ZERO
    normalized_code = None
    if promo_code:
        subtotal = sum((line.line_total for line in lines), ZERO)
        quote = PromoCodeService.validate(promo_code, subtotal)
        promo_discount = quote.discount_amount
        normalized_code = quote.promo.code

    wallet_balance = ZERO
    if to_money(wallet_requested) > 0:
        if customer is None:
            raise ValidationError("Wallet redemption requires a customer")
        customer.refresh_from_db(fields=['wallet_balance'])
        wallet_balance = customer.wallet_balance

    return calculate_pricing(
        lines,
        promo_discount=promo_discount,
        wallet_requested=wallet_requested,
        wallet_balance=wallet_balance,
        free_delivery_threshold=config.free_delivery_threshold,
        delivery_charge=config.delivery_charge,
        redemption_rate=config.wallet_redemption_rate,
        accept_wallet_cap=accept_wallet_cap,
        promo_code=normalized_code,
    )
