"""
Wallet views module.

All views are exported from this module to maintain backward compatibility.
"""
from .wallet_views import (
    get_wallet_balance, get_wallet_summary, get_wallet_transactions,
    credit_welcome_bonus
)

__all__ = [
    'get_wallet_balance',
    'get_wallet_summary',
    'get_wallet_transactions',
    'credit_welcome_bonus',
]
