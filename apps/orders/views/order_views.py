"""
Customer order views: pricing, placement and order history.
"""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from apps.common.utils import success_response, error_response, paginated_response
from ..models import Order
from ..serializers import (
    PriceOrderSerializer, PlaceOrderSerializer, PricingResultSerializer,
    OrderSerializer, OrderListSerializer
)
from ..services import OrderLifecycleCoordinator, OrderService, price_order


class PriceOrderView(APIView):
    """Price a cart without creating anything"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = PriceOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Validation error', serializer.errors)

        pricing = price_order(
            serializer.cart_lines(),
            promo_code=serializer.validated_data.get('promo_code') or None,
            wallet_requested=serializer.validated_data['wallet_amount'],
            customer=request.user,
            accept_wallet_cap=serializer.validated_data['accept_wallet_cap'],
        )
        return success_response(PricingResultSerializer(pricing).data)


class OrderListCreateView(APIView):
    """List the customer's orders or place a new one"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        orders = OrderService.get_customer_orders(request.user, status=request.GET.get('status'))
        return paginated_response(orders, OrderListSerializer, request)

    def post(self, request):
        serializer = PlaceOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Validation error', serializer.errors)

        lines = serializer.cart_lines()
        pricing = price_order(
            lines,
            promo_code=serializer.validated_data.get('promo_code') or None,
            wallet_requested=serializer.validated_data['wallet_amount'],
            customer=request.user,
            accept_wallet_cap=serializer.validated_data['accept_wallet_cap'],
        )
        order = OrderService().place_order(
            request.user, pricing, lines, delivery=serializer.delivery_fields()
        )
        order = Order.objects.select_related('scratch_card').prefetch_related('items').get(pk=order.pk)
        return success_response(
            OrderSerializer(order).data,
            'Order placed successfully',
            status_code=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        order = OrderService.get_customer_order(request.user, order_id)
        return success_response(OrderSerializer(order).data)


class CancelOrderView(APIView):
    """Customers may cancel their own order until it is confirmed"""
    permission_classes = [IsAuthenticated]

    def post(self, request, order_id):
        order = OrderService.get_customer_order(request.user, order_id)
        if order.status != Order.STATUS_PENDING:
            return error_response(
                'Only pending orders can be cancelled',
                status_code=status.HTTP_409_CONFLICT,
            )
        outcome = OrderLifecycleCoordinator().transition_order_status(order.pk, Order.STATUS_CANCELLED)
        return success_response(OrderSerializer(outcome.order).data, 'Order cancelled')
