"""
Referral serializers module.

All serializers are exported from this module to maintain backward compatibility.
"""
from .referral_serializers import (
    ReferralCodeSerializer, ReferralInviteSerializer, ReferralListSerializer,
    ReferralStatsSerializer, MilestoneAwardSerializer
)

__all__ = [
    'ReferralCodeSerializer',
    'ReferralInviteSerializer',
    'ReferralListSerializer',
    'ReferralStatsSerializer',
    'MilestoneAwardSerializer',
]
