"""
Rotation Mapper
===============
Wrist position -> scene rotation velocity.

The frame center is neutral. Moving the hand left or right of center
(beyond a dead zone) spins the scene; losing the hand stops the hand
contribution immediately. No smoothing happens here.
"""

from typing import Any

from core.landmarks import LandmarkFrame, planar_points
from systems.morph import MorphState


DEFAULT_DEAD_ZONE = 0.1
DEFAULT_GAIN = 3.0

# Automatic spin of the scene root, radians per second
BASE_SPEED = {
    MorphState.ASSEMBLED: 0.1,
    MorphState.SCATTERED: 0.05,
}


def map_rotation(frame: Any, dead_zone: float = DEFAULT_DEAD_ZONE,
                 gain: float = DEFAULT_GAIN) -> float:
    """
    Rotation velocity for one frame.

    0.0 when there is no hand (or the frame is malformed) and when the
    wrist sits within `dead_zone` of the center. Otherwise
    (0.5 - wrist.x) * gain.
    """
    pts = planar_points(frame)
    if pts is None:
        return 0.0

    diff = 0.5 - float(pts[0, 0])
    if abs(diff) <= dead_zone:
        return 0.0
    return diff * gain


class RotationMapper:
    """map_rotation with its configuration bound."""

    def __init__(self, dead_zone: float = DEFAULT_DEAD_ZONE, gain: float = DEFAULT_GAIN):
        self.dead_zone = dead_zone
        self.gain = gain

    def map(self, frame: LandmarkFrame) -> float:
        return map_rotation(frame, self.dead_zone, self.gain)


class RootRotation:
    """
    Integrates the yaw of the scene root.

    Automatic spin is faster once assembled; the hand velocity is added on
    top of it.
    """

    def __init__(self, base_speed=None):
        self.base_speed = dict(BASE_SPEED if base_speed is None else base_speed)
        self.yaw = 0.0

    def update(self, delta: float, state: MorphState, velocity: float = 0.0) -> float:
        if delta > 0:
            self.yaw += delta * (self.base_speed[state] + velocity)
        return self.yaw
