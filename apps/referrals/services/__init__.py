"""
Referral services module.

All services are exported from this module to maintain backward compatibility.
"""
from .milestone_service import MilestoneService
from .referral_service import ReferralService, ReferralCreditResult

__all__ = [
    'MilestoneService',
    'ReferralService',
    'ReferralCreditResult',
]
