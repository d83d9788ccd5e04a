"""
Referral models module.

All models are exported from this module to maintain backward compatibility.
"""
from .referral import Referral
from .milestone_award import MilestoneAward

__all__ = [
    'Referral',
    'MilestoneAward',
]
