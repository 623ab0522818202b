"""
Hand Landmarks
==============
Immutable snapshot of one detected hand.

MediaPipe hands produce 21 normalized keypoints per frame. x and y are in
[0, 1] relative to the image, z is relative depth (wrist = 0).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

import numpy as np


NUM_LANDMARKS = 21


class HandLandmarkIndex(IntEnum):
    """MediaPipe hand landmark indices."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGERTIPS = (
    HandLandmarkIndex.INDEX_FINGER_TIP,
    HandLandmarkIndex.MIDDLE_FINGER_TIP,
    HandLandmarkIndex.RING_FINGER_TIP,
    HandLandmarkIndex.PINKY_TIP,
)

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17)
]


@dataclass(frozen=True)
class LandmarkFrame:
    """
    One frame of hand landmarks.

    The point array is read-only; consumers get a view, never a copy they
    could mutate for everyone else.
    """
    points: np.ndarray
    timestamp: float = 0.0
    handedness: Optional[str] = None

    def __post_init__(self):
        points = np.array(self.points, dtype=np.float64)
        points.setflags(write=False)
        object.__setattr__(self, 'points', points)

    @classmethod
    def from_landmarks(cls, landmarks: Any, timestamp: float = 0.0,
                       handedness: Optional[str] = None) -> 'LandmarkFrame':
        """
        Build a frame from MediaPipe landmark objects or an array-like.

        Objects exposing .x/.y/.z (NormalizedLandmark) are unpacked;
        anything else is handed to numpy as-is.
        """
        if len(landmarks) and hasattr(landmarks[0], 'x'):
            points = [(lm.x, lm.y, getattr(lm, 'z', 0.0)) for lm in landmarks]
        else:
            points = landmarks
        return cls(points=points, timestamp=timestamp, handedness=handedness)

    @property
    def is_complete(self) -> bool:
        """True when all 21 keypoints are present with finite x/y."""
        pts = self.points
        if pts.ndim != 2 or pts.shape[0] < NUM_LANDMARKS or pts.shape[1] < 2:
            return False
        return bool(np.all(np.isfinite(pts[:NUM_LANDMARKS, :2])))

    def point(self, index: int) -> np.ndarray:
        return self.points[int(index)]

    @property
    def wrist(self) -> np.ndarray:
        return self.points[HandLandmarkIndex.WRIST]

    def __len__(self) -> int:
        return self.points.shape[0] if self.points.ndim else 0


def planar_points(frame: Any) -> Optional[np.ndarray]:
    """
    x/y of the 21 keypoints as a (21, 2) array, or None.

    Accepts a LandmarkFrame or anything LandmarkFrame.from_landmarks takes.
    Missing, short, or non-finite input yields None instead of raising.
    """
    if frame is None:
        return None
    if not isinstance(frame, LandmarkFrame):
        try:
            frame = LandmarkFrame.from_landmarks(frame)
        except (TypeError, ValueError, IndexError, KeyError, AttributeError):
            return None
    if not frame.is_complete:
        return None
    return frame.points[:NUM_LANDMARKS, :2]
