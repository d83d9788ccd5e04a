"""
Scratch card views.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from apps.common.utils import success_response, paginated_response
from ..services import ScratchCardService
from ..serializers import ScratchCardSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_scratch_cards(request):
    """Get the customer's scratch cards, optionally filtered by status"""
    cards = ScratchCardService.list_for_customer(request.user, status=request.GET.get('status'))
    return paginated_response(cards, ScratchCardSerializer, request)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reveal_scratch_card(request, card_id):
    """Reveal one of the customer's cards; cashback is credited after delivery"""
    card = ScratchCardService().reveal(card_id, customer=request.user)
    return success_response({
        'id': card.id,
        'amount': card.amount,
        'status': card.status,
        'order_status': card.order.status,
    }, 'Scratch card revealed')
