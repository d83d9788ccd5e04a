"""
Wallet serializers module.

All serializers are exported from this module to maintain backward compatibility.
"""
from .transaction_serializers import (
    WalletTransactionSerializer, WalletSummarySerializer
)

__all__ = [
    'WalletTransactionSerializer',
    'WalletSummarySerializer',
]
