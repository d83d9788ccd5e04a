"""
Common models module.

All models are exported from this module to maintain backward compatibility.
"""
from .notification import CustomerNotification

__all__ = [
    'CustomerNotification',
]
