"""
Referral views module.

All views are exported from this module to maintain backward compatibility.
"""
from .referral_views import (
    get_referral_info, validate_referral_code, apply_referral_code,
    send_referral_invite, get_milestone_progress, get_tier_progress
)

__all__ = [
    'get_referral_info',
    'validate_referral_code',
    'apply_referral_code',
    'send_referral_invite',
    'get_milestone_progress',
    'get_tier_progress',
]
