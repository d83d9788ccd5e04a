"""
Scratch card serializers.
"""
from rest_framework import serializers
from ..models import ScratchCard


class ScratchCardSerializer(serializers.ModelSerializer):
    """
    Serializer for scratch card list view.
    Used for: GET /api/scratch-cards/
    The amount stays hidden until the card is revealed.
    """
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    order_status = serializers.CharField(source='order.status', read_only=True)
    amount = serializers.SerializerMethodField()

    class Meta:
        model = ScratchCard
        fields = [
            'id', 'order_number', 'order_status', 'amount', 'status',
            'created_at', 'revealed_at', 'credited_at', 'expired_at'
        ]
        read_only_fields = fields

    def get_amount(self, obj):
        if obj.status == ScratchCard.STATUS_PENDING:
            return None
        return obj.amount
