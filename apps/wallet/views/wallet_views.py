"""
Wallet query views.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from apps.common.utils import success_response, paginated_response
from ..services import WalletService
from ..serializers import WalletTransactionSerializer, WalletSummarySerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_wallet_balance(request):
    """Get the customer's cached wallet balance"""
    request.user.refresh_from_db(fields=['wallet_balance', 'welcome_bonus_credited'])
    return success_response({
        'balance': str(request.user.wallet_balance),
        'welcome_bonus_credited': request.user.welcome_bonus_credited,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_wallet_summary(request):
    """Balance with lifetime totals and recent activity"""
    summary = WalletService.summary(request.user)
    return success_response(WalletSummarySerializer(summary).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_wallet_transactions(request):
    """Get the customer's wallet ledger, newest first"""
    transactions = WalletService.transactions_for(
        request.user,
        category=request.GET.get('category'),
        direction=request.GET.get('direction'),
    )
    return paginated_response(transactions, WalletTransactionSerializer, request)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def credit_welcome_bonus(request):
    """Credit the one-time welcome bonus"""
    entry = WalletService().credit_welcome_bonus(request.user)
    return success_response({
        'amount': str(entry.amount),
        'balance': str(entry.balance_after),
    }, 'Welcome bonus credited')
