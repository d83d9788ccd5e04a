"""
Referral program views.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.common.utils import success_response, error_response
from ..models import MilestoneAward
from ..services import MilestoneService, ReferralService
from ..serializers import (
    ReferralCodeSerializer, ReferralInviteSerializer,
    ReferralStatsSerializer, MilestoneAwardSerializer
)
from ..tiers import tier_progress


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_referral_info(request):
    """Referral code, link and earnings for the current customer"""
    stats = ReferralService().stats(request.user)
    return success_response(ReferralStatsSerializer(stats).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def validate_referral_code(request):
    """Check a code before signup; returns the referrer's display name"""
    serializer = ReferralCodeSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', serializer.errors)

    referrer = ReferralService().validate_code(serializer.validated_data['referral_code'])
    return success_response({'referrer_name': referrer.display_name}, 'Valid referral code')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def apply_referral_code(request):
    """Link the current customer to a referrer after signup"""
    serializer = ReferralCodeSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', serializer.errors)

    referral = ReferralService().create_referral(request.user, serializer.validated_data['referral_code'])
    return success_response({
        'referral_id': referral.id,
        'referrer_name': referral.referrer.display_name,
        'referee_bonus_amount': str(referral.referee_bonus_amount),
        'status': referral.status,
    }, 'Referral created successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_referral_invite(request):
    """Email the current customer's referral code to a friend"""
    serializer = ReferralInviteSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', serializer.errors)

    ReferralService().send_invite(request.user, serializer.validated_data['email'])
    return success_response(None, 'Referral email sent successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_milestone_progress(request):
    """Milestone table with the customer's progress"""
    progress = MilestoneService().progress(request.user)
    awards = MilestoneAward.objects.filter(customer=request.user)
    progress['awards'] = MilestoneAwardSerializer(awards, many=True).data
    for key in ('total_milestone_bonuses', 'total_possible_bonuses'):
        progress[key] = str(progress[key])
    return success_response(progress)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_tier_progress(request):
    """Display-only referrer tier"""
    completed = MilestoneService.completed_referrals(request.user)
    return success_response(tier_progress(completed))
