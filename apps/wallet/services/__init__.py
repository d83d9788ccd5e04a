"""
Wallet services module.

All services are exported from this module to maintain backward compatibility.
"""
from .wallet_service import WalletService

__all__ = [
    'WalletService',
]
