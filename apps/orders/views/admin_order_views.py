"""
Staff order management views.
"""
from rest_framework.views import APIView
from rest_framework.permissions import IsAdminUser

from apps.common.utils import success_response, error_response
from ..serializers import OrderSerializer, OrderStatusSerializer
from ..services import OrderLifecycleCoordinator


class AdminOrderStatusView(APIView):
    """Move an order along its lifecycle; reward side effects are reported, never fatal"""
    permission_classes = [IsAdminUser]

    def post(self, request, order_id):
        serializer = OrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Validation error', serializer.errors)

        outcome = OrderLifecycleCoordinator().transition_order_status(
            order_id, serializer.validated_data['status']
        )
        return success_response({
            'order': OrderSerializer(outcome.order).data,
            'previous_status': outcome.previous_status,
            'changed': outcome.changed,
            'side_effects': outcome.report.as_dict(),
        }, 'Order status updated' if outcome.changed else 'Order status unchanged')


class AdminReplayRewardsView(APIView):
    """Retry failed reward side effects for one order"""
    permission_classes = [IsAdminUser]

    def post(self, request, order_id):
        report = OrderLifecycleCoordinator().replay_side_effects(order_id)
        return success_response(report.as_dict(), 'Side effects replayed')
