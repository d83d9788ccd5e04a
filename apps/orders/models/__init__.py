"""
Order models module.

All models are exported from this module to maintain backward compatibility.
"""
from .order import Order
from .order_item import OrderItem
from .reward_failure import RewardFailure

__all__ = [
    'Order',
    'OrderItem',
    'RewardFailure',
]
