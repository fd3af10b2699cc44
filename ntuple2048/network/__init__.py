"""
Building blocks of the n-tuple network: features, symmetry orbits and weight tables.
"""

from .feature import HINT, REFLECTION, ROTATION, Feature, IsoFeature
from .weights import WeightFileError, WeightTable, init_weights, load_weights, parse_init_spec, save_weights

__all__ = [
    'Feature',
    'HINT',
    'IsoFeature',
    'REFLECTION',
    'ROTATION',
    'WeightFileError',
    'WeightTable',
    'init_weights',
    'load_weights',
    'parse_init_spec',
    'save_weights',
]
