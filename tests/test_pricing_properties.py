"""
Property-based tests for order pricing
"""
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from apps.common.exceptions import ValidationError
from apps.orders.services import CartAddon, CartLine, calculate_pricing
from tests.factories import cart_lines

money = st.decimals(min_value=Decimal('1'), max_value=Decimal('5000'), places=2)


class TestPricingScenarios:

    def test_free_delivery_at_threshold(self):
        pricing = calculate_pricing(cart_lines('500'), free_delivery_threshold=Decimal('500'))

        assert pricing.delivery_charge == Decimal('0.00')
        assert pricing.total == Decimal('500.00')

    def test_delivery_charged_below_threshold_with_promo(self):
        pricing = calculate_pricing(
            cart_lines('300'),
            promo_discount=Decimal('20'),
            delivery_charge=Decimal('50'),
        )

        assert pricing.delivery_charge == Decimal('50.00')
        assert pricing.subtotal_after_promo == Decimal('280.00')
        assert pricing.total == Decimal('330.00')

    def test_wallet_request_over_cap_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_pricing(
                cart_lines('300'),
                wallet_requested=Decimal('100'),
                wallet_balance=Decimal('40'),
                free_delivery_threshold=Decimal('300'),
            )

        assert exc_info.value.details['max_wallet_usage'] == '30.00'

    def test_wallet_request_capped_when_accepted(self):
        pricing = calculate_pricing(
            cart_lines('300'),
            wallet_requested=Decimal('100'),
            wallet_balance=Decimal('40'),
            free_delivery_threshold=Decimal('300'),
            accept_wallet_cap=True,
        )

        assert pricing.wallet_used == Decimal('30.00')
        assert pricing.wallet_capped
        assert pricing.total == Decimal('270.00')

    def test_wallet_cap_limited_by_balance(self):
        pricing = calculate_pricing(
            cart_lines('1000'),
            wallet_requested=Decimal('25'),
            wallet_balance=Decimal('25'),
        )

        assert pricing.max_wallet_usage == Decimal('25.00')
        assert pricing.wallet_used == Decimal('25.00')
        assert not pricing.wallet_capped

    def test_addons_priced_per_line(self):
        line = CartLine(
            product_id=1,
            name='Chocolate Truffle',
            unit_price=Decimal('450'),
            quantity=2,
            addons=(CartAddon('Candles', Decimal('20'), 3), CartAddon('Greeting card', Decimal('49'))),
        )

        assert line.line_total == Decimal('1009.00')
        assert calculate_pricing([line]).subtotal == Decimal('1009.00')

    def test_promo_discount_never_exceeds_subtotal(self):
        pricing = calculate_pricing(cart_lines('100'), promo_discount=Decimal('150'))

        assert pricing.promo_discount == Decimal('100.00')
        assert pricing.total == Decimal('50.00')

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError):
            calculate_pricing([])

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            calculate_pricing(cart_lines('100', quantity=0))


class TestPricingProperties:

    @given(
        prices=st.lists(money, min_size=1, max_size=5),
        promo=st.decimals(min_value=Decimal('0'), max_value=Decimal('1000'), places=2),
        balance=st.decimals(min_value=Decimal('0'), max_value=Decimal('1000'), places=2),
        requested=st.decimals(min_value=Decimal('0'), max_value=Decimal('1000'), places=2),
    )
    @settings(max_examples=200, deadline=None)
    def test_total_breakdown_property(self, prices, promo, balance, requested):
        """
        For any cart the total equals subtotal - promo - wallet + delivery,
        is never negative, and wallet use stays within min(balance, 10%).
        """
        pricing = calculate_pricing(
            cart_lines(*prices),
            promo_discount=promo,
            wallet_requested=requested,
            wallet_balance=balance,
            accept_wallet_cap=True,
        )

        expected = pricing.subtotal - pricing.promo_discount - pricing.wallet_used + pricing.delivery_charge
        assert pricing.total == max(Decimal('0.00'), expected)
        assert pricing.total >= 0
        assert pricing.wallet_used <= balance
        assert pricing.wallet_used <= pricing.total_before_wallet * Decimal('0.10')
        assert pricing.wallet_used <= requested

    @given(prices=st.lists(money, min_size=1, max_size=5))
    @settings(max_examples=100, deadline=None)
    def test_delivery_charge_property(self, prices):
        """Delivery is free exactly when the product subtotal reaches the threshold"""
        pricing = calculate_pricing(cart_lines(*prices))

        if pricing.subtotal >= Decimal('500'):
            assert pricing.delivery_charge == Decimal('0.00')
        else:
            assert pricing.delivery_charge == Decimal('50.00')
