"""
Customer profile views.

The profile carries a small rewards snapshot so the app header can show
the wallet balance and referrer tier without extra requests.
"""
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.common.utils import error_response, success_response, to_money
from ..serializers import UserDetailSerializer, UserUpdateSerializer


def rewards_snapshot(customer):
    from apps.referrals.services import MilestoneService, ReferralService
    from apps.referrals.tiers import tier_for

    completed = MilestoneService.completed_referrals(customer)
    return {
        'wallet_balance': str(to_money(customer.wallet_balance)),
        'referral_code': ReferralService.get_or_create_referral_code(customer),
        'completed_referrals': completed,
        'tier': tier_for(completed).tier,
    }


class UserProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def _profile(self, request):
        request.user.refresh_from_db()
        data = UserDetailSerializer(request.user, context={'request': request}).data
        data['rewards'] = rewards_snapshot(request.user)
        return data

    def get(self, request):
        return success_response(self._profile(request), 'Profile retrieved')

    def patch(self, request):
        serializer = UserUpdateSerializer(
            request.user, data=request.data, partial=True, context={'request': request}
        )
        if not serializer.is_valid():
            return error_response('Profile update failed', serializer.errors)
        serializer.save()
        return success_response(self._profile(request), 'Profile updated')
