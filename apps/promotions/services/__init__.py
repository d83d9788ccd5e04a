"""
Promotion services module.

All services are exported from this module to maintain backward compatibility.
"""
from .promo_code_service import PromoCodeService, PromoQuote

__all__ = [
    'PromoCodeService',
    'PromoQuote',
]
