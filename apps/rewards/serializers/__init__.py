"""
Reward serializers module.

All serializers are exported from this module to maintain backward compatibility.
"""
from .scratch_card_serializers import ScratchCardSerializer

__all__ = [
    'ScratchCardSerializer',
]
