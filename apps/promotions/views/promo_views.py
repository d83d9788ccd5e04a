"""
Promo code views.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from apps.common.utils import success_response, error_response
from ..services import PromoCodeService
from ..serializers import PromoValidateSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def validate_promo_code(request):
    """Validate a promo code against a product subtotal"""
    serializer = PromoValidateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', serializer.errors)

    quote = PromoCodeService.validate(
        serializer.validated_data['code'],
        serializer.validated_data['order_amount'],
    )
    promo = quote.promo
    return success_response({
        'promo_code': promo.code,
        'description': promo.description,
        'discount_type': promo.discount_type,
        'discount_value': str(promo.discount_value),
        'discount_amount': str(quote.discount_amount),
        'original_amount': str(quote.order_amount),
        'final_amount': str(quote.final_amount),
    }, 'Promo code applied')
