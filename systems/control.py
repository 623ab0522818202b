"""
Gesture Control
===============
Glue between the inference loop and the rest of the scene.

Every landmark frame (or "no hand") goes through the classifier and the
rotation mapper. Transitions are forwarded to the MorphController, the
rotation signal is kept for render ticks to read.
"""

from dataclasses import dataclass
from typing import Optional

from core.landmarks import LandmarkFrame
from systems.gesture_classifier import Gesture, GestureClassifier
from systems.morph import MorphController, MorphState
from systems.rotation_mapper import RotationMapper


@dataclass(frozen=True)
class ControlSignals:
    """What one inference frame produced."""
    transition: Optional[MorphState] = None
    rotation: float = 0.0
    gesture: Gesture = Gesture.NONE
    hand_present: bool = False


class GestureControl:
    """Feeds landmark frames into the classifier, mapper and controller."""

    def __init__(self, controller: MorphController,
                 classifier: Optional[GestureClassifier] = None,
                 mapper: Optional[RotationMapper] = None):
        self.controller = controller
        self.classifier = classifier or GestureClassifier()
        self.mapper = mapper or RotationMapper()

        self.rotation = 0.0
        self.last_signals = ControlSignals()

    @classmethod
    def from_settings(cls, controller: MorphController, gesture) -> 'GestureControl':
        """Build from GestureSettings."""
        return cls(
            controller,
            GestureClassifier(gesture.debounce_window, gesture.fist_ratio, gesture.open_ratio),
            RotationMapper(gesture.rotation_dead_zone, gesture.rotation_gain),
        )

    def process(self, frame: Optional[LandmarkFrame], now: float) -> ControlSignals:
        """
        Handle one inference result.

        `frame` is None when no hand is visible; rotation then drops to
        zero at once. Transitions go through the controller so gestures and
        the UI toggle share one writer.
        """
        if frame is None:
            return self.hand_lost()

        transition = self.classifier.classify(frame, self.controller.current(), now)
        if transition is not None:
            self.controller.request_transition(transition, now=now, source="gesture")

        self.rotation = self.mapper.map(frame)
        self.last_signals = ControlSignals(
            transition=transition,
            rotation=self.rotation,
            gesture=self.classifier.last_gesture,
            hand_present=True,
        )
        return self.last_signals

    def hand_lost(self) -> ControlSignals:
        self.rotation = 0.0
        self.last_signals = ControlSignals()
        return self.last_signals
