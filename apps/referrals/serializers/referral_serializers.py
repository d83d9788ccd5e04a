"""
Referral serializers for codes, stats and milestone progress.
"""
from rest_framework import serializers
from ..models import Referral, MilestoneAward


class ReferralCodeSerializer(serializers.Serializer):
    """
    Input for code validation and applying a code.
    Used for: POST /api/referrals/validate/, POST /api/referrals/apply/
    """
    referral_code = serializers.CharField(max_length=20)


class ReferralInviteSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ReferralListSerializer(serializers.ModelSerializer):
    """A referral as seen by the referrer"""
    referee_name = serializers.CharField(source='referee.display_name', read_only=True)

    class Meta:
        model = Referral
        fields = [
            'id', 'status', 'referee_name', 'referrer_bonus_amount',
            'referrer_bonus_credited', 'created_at', 'completed_at'
        ]
        read_only_fields = fields


class ReferralStatsSerializer(serializers.Serializer):
    """Serializer for ReferralService.stats()"""
    referral_code = serializers.CharField()
    referral_link = serializers.CharField()
    total_referrals = serializers.IntegerField()
    completed_referrals = serializers.IntegerField()
    total_earnings = serializers.DecimalField(max_digits=10, decimal_places=2)
    pending_earnings = serializers.DecimalField(max_digits=10, decimal_places=2)
    recent_referrals = ReferralListSerializer(many=True)


class MilestoneAwardSerializer(serializers.ModelSerializer):

    class Meta:
        model = MilestoneAward
        fields = ['level', 'name', 'referrals_required', 'bonus', 'awarded_at']
        read_only_fields = fields
