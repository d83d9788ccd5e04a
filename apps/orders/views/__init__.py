"""
Order views module.

All views are exported from this module to maintain backward compatibility.
"""
from .order_views import PriceOrderView, OrderListCreateView, OrderDetailView, CancelOrderView
from .admin_order_views import AdminOrderStatusView, AdminReplayRewardsView

__all__ = [
    'PriceOrderView',
    'OrderListCreateView',
    'OrderDetailView',
    'CancelOrderView',
    'AdminOrderStatusView',
    'AdminReplayRewardsView',
]
