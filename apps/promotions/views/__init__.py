"""
Promotion views module.

All views are exported from this module to maintain backward compatibility.
"""
from .promo_views import validate_promo_code

__all__ = [
    'validate_promo_code',
]
