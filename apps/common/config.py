"""
Reward and pricing configuration.

Values come from the BAKERY_REWARDS setting and are frozen at first use, so
the milestone and tier tables cannot be mutated at runtime.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import Optional, Tuple

from django.conf import settings


@dataclass(frozen=True)
class MilestoneLevel:
    level: int
    referrals: int
    bonus: Decimal
    name: str
    description: str

    @property
    def label(self) -> str:
        """Ledger description that marks this milestone as paid"""
        return f"Milestone: {self.name}"


@dataclass(frozen=True)
class TierLevel:
    tier: str
    name: str
    min_referrals: int
    max_referrals: Optional[int]
    bonus_multiplier: Decimal
    benefits: Tuple[str, ...] = ()


DEFAULT_MILESTONE_LEVELS = (
    MilestoneLevel(1, 1, Decimal('25'), 'First Referral', 'You got your first referral!'),
    MilestoneLevel(2, 5, Decimal('100'), 'Referral Starter', '5 successful referrals!'),
    MilestoneLevel(3, 10, Decimal('250'), 'Referral Expert', '10 successful referrals!'),
    MilestoneLevel(4, 25, Decimal('750'), 'Referral Champion', '25 successful referrals!'),
    MilestoneLevel(5, 50, Decimal('2000'), 'Referral Master', '50 successful referrals!'),
    MilestoneLevel(6, 100, Decimal('5000'), 'Referral Legend', '100 successful referrals!'),
)

DEFAULT_TIER_LEVELS = (
    TierLevel('Bronze', 'Bronze Referrer', 0, 4, Decimal('1.00'),
              ('Basic referral rewards', 'Standard support')),
    TierLevel('Silver', 'Silver Ambassador', 5, 9, Decimal('1.05'),
              ('Enhanced referral rewards', 'Priority support', '5% bonus on milestones')),
    TierLevel('Gold', 'Gold Champion', 10, 24, Decimal('1.10'),
              ('Premium referral rewards', 'VIP support', '10% bonus on milestones', 'Exclusive offers')),
    TierLevel('Platinum', 'Platinum Elite', 25, 49, Decimal('1.15'),
              ('Elite referral rewards', '24/7 VIP support', '15% bonus on milestones')),
    TierLevel('Diamond', 'Diamond Master', 50, None, Decimal('1.20'),
              ('Ultimate referral rewards', 'Dedicated account manager', '20% bonus on milestones')),
)


@dataclass(frozen=True)
class RewardsConfig:
    free_delivery_threshold: Decimal = Decimal('500')
    delivery_charge: Decimal = Decimal('50')
    wallet_redemption_rate: Decimal = Decimal('0.10')
    scratch_card_min_rate: Decimal = Decimal('0.04')
    scratch_card_max_rate: Decimal = Decimal('0.07')
    referrer_bonus: Decimal = Decimal('50')
    referee_bonus: Decimal = Decimal('25')
    welcome_bonus: Decimal = Decimal('50')
    milestone_levels: Tuple[MilestoneLevel, ...] = field(default=DEFAULT_MILESTONE_LEVELS)
    tier_levels: Tuple[TierLevel, ...] = field(default=DEFAULT_TIER_LEVELS)

    def __post_init__(self):
        thresholds = [m.referrals for m in self.milestone_levels]
        if thresholds != sorted(thresholds):
            raise ValueError("Milestone levels must be in ascending order of referrals")
        minimums = [t.min_referrals for t in self.tier_levels]
        if minimums != sorted(minimums) or (minimums and minimums[0] != 0):
            raise ValueError("Tier levels must be ascending and start at 0 referrals")


_SETTING_KEYS = {
    'FREE_DELIVERY_THRESHOLD': 'free_delivery_threshold',
    'DELIVERY_CHARGE': 'delivery_charge',
    'WALLET_REDEMPTION_RATE': 'wallet_redemption_rate',
    'SCRATCH_CARD_MIN_RATE': 'scratch_card_min_rate',
    'SCRATCH_CARD_MAX_RATE': 'scratch_card_max_rate',
    'REFERRER_BONUS': 'referrer_bonus',
    'REFEREE_BONUS': 'referee_bonus',
    'WELCOME_BONUS': 'welcome_bonus',
}


def build_rewards_config(overrides=None) -> RewardsConfig:
    """Build a config from a BAKERY_REWARDS-style dict"""
    kwargs = {}
    for key, value in (overrides or {}).items():
        if key in _SETTING_KEYS:
            kwargs[_SETTING_KEYS[key]] = Decimal(str(value))
        elif key == 'MILESTONE_LEVELS':
            kwargs['milestone_levels'] = tuple(value)
        elif key == 'TIER_LEVELS':
            kwargs['tier_levels'] = tuple(value)
    return RewardsConfig(**kwargs)


@lru_cache(maxsize=1)
def get_rewards_config() -> RewardsConfig:
    return build_rewards_config(getattr(settings, 'BAKERY_REWARDS', {}))
