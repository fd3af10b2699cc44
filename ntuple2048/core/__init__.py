"""
Board mechanics and the action encoding shared by every agent.

It includes the rank-based ``Board`` (slide, merge, placement and legality) and the ``Action`` value
agents return from ``take_action``.
"""

from .action import Action, ActionKind
from .board import DIRECTIONS, ILLEGAL, Board, legal_actions_mask, merge_line, slide_left

__all__ = [
    'Action',
    'ActionKind',
    'Board',
    'DIRECTIONS',
    'ILLEGAL',
    'legal_actions_mask',
    'merge_line',
    'slide_left',
]
