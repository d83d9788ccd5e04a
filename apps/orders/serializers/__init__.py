"""
Order serializers module.

All serializers are exported from this module to maintain backward compatibility.
"""
from .order_serializers import (
    CartLineInputSerializer, PriceOrderSerializer, PlaceOrderSerializer,
    PricingResultSerializer, OrderItemSerializer, OrderSerializer,
    OrderListSerializer, OrderStatusSerializer
)

__all__ = [
    'CartLineInputSerializer',
    'PriceOrderSerializer',
    'PlaceOrderSerializer',
    'PricingResultSerializer',
    'OrderItemSerializer',
    'OrderSerializer',
    'OrderListSerializer',
    'OrderStatusSerializer',
]
