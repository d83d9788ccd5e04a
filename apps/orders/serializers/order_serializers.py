"""
Order serializers for pricing input, placement and order display.
"""
from rest_framework import serializers
from ..models import Order, OrderItem
from ..services.pricing import CartAddon, CartLine


class CartAddonInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1, default=1)


class CartLineInputSerializer(serializers.Serializer):
    """A cart line as sent by the storefront"""
    product_id = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(max_length=200)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    addons = CartAddonInputSerializer(many=True, required=False, default=list)

    @staticmethod
    def to_cart_line(data):
        return CartLine(
            product_id=data.get('product_id'),
            name=data['name'],
            unit_price=data['unit_price'],
            quantity=data['quantity'],
            addons=tuple(CartAddon(**addon) for addon in data.get('addons', [])),
        )


class PriceOrderSerializer(serializers.Serializer):
    """
    Serializer for pricing a cart.
    Used for: POST /api/orders/price/
    """
    items = CartLineInputSerializer(many=True, allow_empty=False)
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    wallet_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    accept_wallet_cap = serializers.BooleanField(required=False, default=False)

    def cart_lines(self):
        return [CartLineInputSerializer.to_cart_line(item) for item in self.validated_data['items']]


class PlaceOrderSerializer(PriceOrderSerializer):
    """
    Serializer for placing an order; the cart is re-priced on the server.
    Used for: POST /api/orders/
    """
    delivery_address = serializers.JSONField(required=False, default=dict)
    delivery_date = serializers.DateField(required=False, allow_null=True)
    delivery_time = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHODS, required=False, default='cod')

    def delivery_fields(self):
        return {
            key: self.validated_data[key]
            for key in ('delivery_address', 'delivery_date', 'delivery_time', 'special_instructions', 'payment_method')
            if key in self.validated_data
        }


class PricingResultSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)
    promo_code = serializers.CharField(allow_null=True)
    promo_discount = serializers.DecimalField(max_digits=10, decimal_places=2)
    delivery_charge = serializers.DecimalField(max_digits=10, decimal_places=2)
    wallet_requested = serializers.DecimalField(max_digits=10, decimal_places=2)
    wallet_used = serializers.DecimalField(max_digits=10, decimal_places=2)
    max_wallet_usage = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal_after_promo = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal_after_wallet = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_before_wallet = serializers.DecimalField(max_digits=10, decimal_places=2)
    total = serializers.DecimalField(max_digits=10, decimal_places=2)


class OrderItemSerializer(serializers.ModelSerializer):
    """Serializer for order items"""

    class Meta:
        model = OrderItem
        fields = ['product_id', 'product_name', 'unit_price', 'quantity', 'addons', 'line_total']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order detail including the persisted pricing breakdown"""
    items = OrderItemSerializer(many=True, read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    scratch_card = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'status', 'status_display',
            'subtotal', 'promo_code', 'promo_discount', 'delivery_charge',
            'wallet_amount_used', 'total_amount', 'subtotal_after_promo',
            'subtotal_after_wallet', 'final_delivery_charge',
            'delivery_address', 'delivery_date', 'delivery_time',
            'special_instructions', 'payment_method', 'items', 'scratch_card',
            'created_at', 'updated_at', 'delivered_at', 'cancelled_at'
        ]
        read_only_fields = fields

    def get_scratch_card(self, obj):
        card = getattr(obj, 'scratch_card', None)
        if card is None:
            return None
        return {
            'id': card.id,
            'status': card.status,
            'amount': None if card.status == 'pending' else card.amount,
        }


class OrderListSerializer(serializers.ModelSerializer):
    """Minimal fields for order lists"""

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'status', 'total_amount', 'created_at']
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    """
    Input for status transitions.
    Used for: POST /api/orders/{id}/status/
    """
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
