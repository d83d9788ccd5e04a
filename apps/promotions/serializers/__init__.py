"""
Promotion serializers module.

All serializers are exported from this module to maintain backward compatibility.
"""
from .promo_serializers import PromoCodeSerializer, PromoValidateSerializer

__all__ = [
    'PromoCodeSerializer',
    'PromoValidateSerializer',
]
