"""
Reward models module.

All models are exported from this module to maintain backward compatibility.
"""
from .scratch_card import ScratchCard

__all__ = [
    'ScratchCard',
]
