"""
Wallet models module.

All models are exported from this module to maintain backward compatibility.
"""
from .transaction import WalletTransaction

__all__ = [
    'WalletTransaction',
]
