"""
Promo code serializers.
"""
from rest_framework import serializers
from ..models import PromoCode


class PromoCodeSerializer(serializers.ModelSerializer):
    """Public view of a promo code"""

    class Meta:
        model = PromoCode
        fields = [
            'code', 'description', 'discount_type', 'discount_value',
            'min_order_amount', 'max_discount_amount', 'valid_until'
        ]
        read_only_fields = fields


class PromoValidateSerializer(serializers.Serializer):
    """
    Input for promo validation.
    Used for: POST /api/promo-codes/validate/
    """
    code = serializers.CharField(max_length=50)
    order_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
