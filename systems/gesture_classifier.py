"""
Gesture Classifier
==================
Open palm vs. closed fist from one frame of hand landmarks.

The classifier measures how far the fingertips reach from the wrist,
normalized by palm size (wrist to middle knuckle). The ratio does not
change when the hand moves closer to or further from the camera.

- ratio < fist_ratio  -> FIST  -> request ASSEMBLED
- ratio > open_ratio  -> OPEN  -> request SCATTERED
- in between          -> NONE  (dead zone, no transition)

Accepted transitions are debounced so per-frame noise cannot make the
scene flicker between states.
"""

from enum import Enum
from typing import Any, Optional

import numpy as np

from core.landmarks import FINGERTIPS, HandLandmarkIndex, planar_points
from systems.morph import MorphState


DEFAULT_DEBOUNCE_WINDOW = 1.0   # seconds between accepted transitions
DEFAULT_FIST_RATIO = 0.9
DEFAULT_OPEN_RATIO = 1.3


class Gesture(Enum):
    """Frame-local hand shape."""
    OPEN = "OPEN"
    FIST = "FIST"
    NONE = "NONE"


GESTURE_TARGETS = {
    Gesture.FIST: MorphState.ASSEMBLED,
    Gesture.OPEN: MorphState.SCATTERED,
}


def extension_ratio(frame: Any) -> Optional[float]:
    """
    Mean fingertip-to-wrist distance divided by palm size.

    Distances are measured in the image plane. Returns None for malformed
    frames or a zero-size palm.
    """
    pts = planar_points(frame)
    if pts is None:
        return None

    wrist = pts[HandLandmarkIndex.WRIST]
    palm_scale = np.linalg.norm(wrist - pts[HandLandmarkIndex.MIDDLE_FINGER_MCP])
    if palm_scale <= 1e-9:
        return None

    tips = pts[list(FINGERTIPS)]
    avg_tip_distance = np.linalg.norm(tips - wrist, axis=1).mean()
    return float(avg_tip_distance / palm_scale)


def classify_hand(frame: Any, fist_ratio: float = DEFAULT_FIST_RATIO,
                  open_ratio: float = DEFAULT_OPEN_RATIO) -> Gesture:
    """Classify a single frame. Malformed frames are NONE."""
    ratio = extension_ratio(frame)
    if ratio is None:
        return Gesture.NONE
    if ratio < fist_ratio:
        return Gesture.FIST
    if ratio > open_ratio:
        return Gesture.OPEN
    return Gesture.NONE


class GestureClassifier:
    """
    Debounced gesture -> MorphState transition requests.

    The only state kept between frames is the time of the last accepted
    transition (plus the last verdict, for display).
    """

    def __init__(self, debounce_window: float = DEFAULT_DEBOUNCE_WINDOW,
                 fist_ratio: float = DEFAULT_FIST_RATIO,
                 open_ratio: float = DEFAULT_OPEN_RATIO):
        self.debounce_window = debounce_window
        self.fist_ratio = fist_ratio
        self.open_ratio = open_ratio

        self.last_accepted: Optional[float] = None
        self.last_gesture = Gesture.NONE

    def classify(self, frame: Any, current_state: MorphState,
                 now: float) -> Optional[MorphState]:
        """
        Return the state to transition to, or None.

        `now` is in seconds. Nothing is emitted inside the debounce window,
        in the dead zone, for malformed frames, or when the requested state
        is already active.
        """
        gesture = classify_hand(frame, self.fist_ratio, self.open_ratio)
        self.last_gesture = gesture

        # Debounce blocks the transition only; the verdict stays current
        if self.last_accepted is not None and now - self.last_accepted < self.debounce_window:
            return None

        target = GESTURE_TARGETS.get(gesture)
        if target is None or target is current_state:
            return None

        self.last_accepted = now
        return target

    def reset(self):
        self.last_accepted = None
        self.last_gesture = Gesture.NONE
