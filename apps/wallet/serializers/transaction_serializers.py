"""
Wallet serializers for transactions and the balance summary.
"""
from rest_framework import serializers
from ..models import WalletTransaction


class WalletTransactionSerializer(serializers.ModelSerializer):
    """
    Serializer for wallet transaction list view.
    Used for: GET /api/wallet/transactions/
    """
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    order_number = serializers.CharField(source='order.order_number', read_only=True, default=None)

    class Meta:
        model = WalletTransaction
        fields = [
            'id', 'direction', 'amount', 'category', 'category_display',
            'order_number', 'description', 'balance_after', 'created_at'
        ]
        read_only_fields = fields


class CategoryTotalSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=10, decimal_places=2)


class WalletSummarySerializer(serializers.Serializer):
    """Serializer for WalletService.summary()"""
    balance = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_earned = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_spent = serializers.DecimalField(max_digits=10, decimal_places=2)
    by_category = serializers.DictField(child=CategoryTotalSerializer())
    welcome_bonus_credited = serializers.BooleanField()
    recent_transactions = WalletTransactionSerializer(many=True)
