"""
Reward services module.

All services are exported from this module to maintain backward compatibility.
"""
from .scratch_card_service import ScratchCardService

__all__ = [
    'ScratchCardService',
]
