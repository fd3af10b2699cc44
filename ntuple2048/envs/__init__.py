"""
Game driver and block statistics.
"""

from .episode import Episode
from .statistics import BlockSummary, Statistics

__all__ = ['BlockSummary', 'Episode', 'Statistics']
