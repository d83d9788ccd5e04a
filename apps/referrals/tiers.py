"""
Referrer tiers.

Pure lookups over the configured tier table. The bonus multiplier is
reported for display only; no credited amount is multiplied by it.
"""
from apps.common.config import get_rewards_config


def tier_for(completed_referrals, levels=None):
    """Highest tier whose minimum is <= the completed referral count"""
    levels = levels or get_rewards_config().tier_levels
    current = levels[0]
    for level in levels:
        if completed_referrals >= level.min_referrals:
            current = level
    return current


def next_tier(completed_referrals, levels=None):
    levels = levels or get_rewards_config().tier_levels
    for level in levels:
        if level.min_referrals > completed_referrals:
            return level
    return None


def _tier_dict(level):
    if level is None:
        return None
    return {
        'tier': level.tier,
        'name': level.name,
        'min_referrals': level.min_referrals,
        'max_referrals': level.max_referrals,
        'bonus_multiplier': level.bonus_multiplier,
        'benefits': list(level.benefits),
    }


def tier_progress(completed_referrals, levels=None):
    """Current tier, next tier and percentage progress between them"""
    levels = levels or get_rewards_config().tier_levels
    current = tier_for(completed_referrals, levels)
    upcoming = next_tier(completed_referrals, levels)

    progress = 0
    referrals_needed = 0
    if upcoming:
        span = upcoming.min_referrals - current.min_referrals
        done = completed_referrals - current.min_referrals
        progress = min(round(done * 100 / span), 100) if span > 0 else 0
        referrals_needed = upcoming.min_referrals - completed_referrals

    return {
        'current_tier': _tier_dict(current),
        'next_tier': _tier_dict(upcoming),
        'completed_referrals': completed_referrals,
        'progress_to_next_tier': progress,
        'referrals_needed': referrals_needed,
        'bonus_multiplier': current.bonus_multiplier,
        'all_tiers': [_tier_dict(level) for level in levels],
    }
