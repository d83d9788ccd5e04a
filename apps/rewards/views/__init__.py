"""
Reward views module.

All views are exported from this module to maintain backward compatibility.
"""
from .scratch_card_views import list_scratch_cards, reveal_scratch_card

__all__ = [
    'list_scratch_cards',
    'reveal_scratch_card',
]
