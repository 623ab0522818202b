"""
Core engine components for Arbor.
"""

from .errors import ConfigError, GestureUnavailableError
from .landmarks import HandLandmarkIndex, LandmarkFrame, NUM_LANDMARKS

__all__ = [
    'ConfigError',
    'GestureUnavailableError',
    'HandLandmarkIndex',
    'LandmarkFrame',
    'NUM_LANDMARKS',
]
