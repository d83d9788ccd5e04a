"""
Promotion models module.

All models are exported from this module to maintain backward compatibility.
"""
from .promo_code import PromoCode

__all__ = [
    'PromoCode',
]
