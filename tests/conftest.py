"""Shared fixtures: synthetic hands and small scene settings."""

import numpy as np
import pytest

from core.landmarks import FINGERTIPS, HandLandmarkIndex
from ui.settings import AppSettings

PALM = 0.1


def make_hand(extension: float = 1.0, wrist_x: float = 0.5, wrist_y: float = 0.8) -> np.ndarray:
    """
    (21, 3) landmarks whose fingertip-to-wrist distance is `extension`
    palm lengths. Palm is wrist -> middle knuckle, straight up.
    """
    landmarks = np.zeros((21, 3), dtype=np.float32)
    landmarks[:, 0] = wrist_x
    landmarks[:, 1] = wrist_y
    landmarks[HandLandmarkIndex.MIDDLE_FINGER_MCP] = [wrist_x, wrist_y - PALM, 0.0]

    spread = np.linspace(-0.6, 0.6, len(FINGERTIPS))
    for tip, angle in zip(FINGERTIPS, spread):
        landmarks[tip] = [
            wrist_x + np.sin(angle) * extension * PALM,
            wrist_y - np.cos(angle) * extension * PALM,
            0.0,
        ]
    return landmarks


@pytest.fixture
def fist():
    return make_hand(0.6)


@pytest.fixture
def open_palm():
    return make_hand(1.8)


@pytest.fixture
def small_settings():
    settings = AppSettings()
    settings.scene.particle_count = 400
    settings.scene.box_count = 12
    settings.scene.bauble_count = 16
    settings.scene.seed = 5
    settings.graphics.resolution = (320, 240)
    return settings
