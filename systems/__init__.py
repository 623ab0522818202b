"""
Morph state, gesture mapping and animation systems for Arbor.
"""

from .morph import MorphState, MorphController
from .gesture_classifier import Gesture, GestureClassifier, extension_ratio
from .rotation_mapper import RotationMapper, RootRotation, map_rotation
from .distribution import cone_position, random_sphere_position
from .animator import MorphAnimator, MotionProfile, Population, Transforms
from .control import ControlSignals, GestureControl

__all__ = [
    # State
    'MorphState', 'MorphController',
    # Gestures
    'Gesture', 'GestureClassifier', 'extension_ratio',
    'RotationMapper', 'RootRotation', 'map_rotation',
    'ControlSignals', 'GestureControl',
    # Animation
    'cone_position', 'random_sphere_position',
    'MorphAnimator', 'MotionProfile', 'Population', 'Transforms',
]
