"""
Order services module.

All services are exported from this module to maintain backward compatibility.
"""
from .pricing import CartAddon, CartLine, PricingResult, calculate_pricing, price_order
from .lifecycle import OrderLifecycleCoordinator, SideEffectReport, TransitionOutcome
from .order_service import OrderService

__all__ = [
    'CartAddon',
    'CartLine',
    'PricingResult',
    'calculate_pricing',
    'price_order',
    'OrderLifecycleCoordinator',
    'SideEffectReport',
    'TransitionOutcome',
    'OrderService',
]
