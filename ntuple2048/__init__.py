"""
N-tuple network agent for the 2048 puzzle.

This package provides the rank-based board, the n-tuple features and weight tables, the learning and
baseline agents, and an episode driver with block statistics.
"""

from .agents import NTupleAgent
from .core import Action, Board
from .envs import Episode, Statistics

__all__ = ['Action', 'Board', 'Episode', 'NTupleAgent', 'Statistics']
