"""
Agents playing the slider and placer roles.
"""

from .base import Agent, AgentConfig, RandomAgent, parse_options
from .baseline import GreedySlider, RandomPlacer, RandomSlider, RestrictedGreedySlider
from .ntuple import DEFAULT_FEATURES, NTupleAgent, Step

__all__ = [
    'Agent',
    'AgentConfig',
    'DEFAULT_FEATURES',
    'GreedySlider',
    'NTupleAgent',
    'RandomAgent',
    'RandomPlacer',
    'RandomSlider',
    'RestrictedGreedySlider',
    'Step',
    'parse_options',
]
