"""
Settings Module
================
Session configuration for Arbor.

Features:
- Scene sizes and population counts
- Per-population morph rates
- Gesture thresholds, debounce and rotation mapping
- Window and display options

Settings are read once at startup and stay fixed for the session.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Tuple

from core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "settings.json"


# =====================================================
# SETTINGS DATA
# =====================================================

@dataclass
class SceneSettings:
    """Population sizes and tree geometry."""
    particle_count: int = 12000
    box_count: int = 200
    bauble_count: int = 300
    tree_height: float = 12.0
    tree_radius: float = 4.5
    scatter_radius: float = 25.0
    cone_jitter: float = 0.2
    seed: Optional[int] = None        # None = new layout every run


@dataclass
class MorphSettings:
    """Approach rates (per second). Heavier populations move slower."""
    foliage_rate: float = 2.0
    box_rate: float = 0.6
    bauble_rate: float = 0.8
    star_rate: float = 1.0


@dataclass
class GestureSettings:
    """Camera, hand model and gesture mapping."""
    enabled: bool = True
    camera_index: int = 0
    camera_width: int = 320
    camera_height: int = 240
    inference_fps: float = 30.0           # Inference runs slower than rendering

    debounce_window: float = 1.0          # Seconds between accepted transitions
    fist_ratio: float = 0.9               # Extension ratio below this = fist
    open_ratio: float = 1.3               # Extension ratio above this = open palm
    rotation_dead_zone: float = 0.1
    rotation_gain: float = 3.0

    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    model_path: str = "hand_landmarker.task"
    model_url: str = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"


@dataclass
class GraphicsSettings:
    """Settings for display."""
    resolution: Tuple[int, int] = (1280, 720)
    fullscreen: bool = False
    show_pip: bool = True                 # Picture-in-picture camera view
    pip_size: Tuple[int, int] = (180, 135)
    max_fps: int = 60                     # 0 for uncapped


def _positive(group: str, obj, *names):
    for name in names:
        value = getattr(obj, name)
        if value is None or value <= 0:
            raise ConfigError(f"{group}.{name}", f"must be positive, got {value}")


@dataclass
class AppSettings:
    """Complete session settings."""
    scene: SceneSettings = field(default_factory=SceneSettings)
    morph: MorphSettings = field(default_factory=MorphSettings)
    gesture: GestureSettings = field(default_factory=GestureSettings)
    graphics: GraphicsSettings = field(default_factory=GraphicsSettings)

    def validate(self) -> 'AppSettings':
        """Raise ConfigError for the first out-of-range value. Returns self."""
        _positive('scene', self.scene, 'particle_count', 'box_count', 'bauble_count',
                  'tree_height', 'tree_radius', 'scatter_radius')
        if self.scene.cone_jitter < 0:
            raise ConfigError('scene.cone_jitter', f"must not be negative, got {self.scene.cone_jitter}")

        _positive('morph', self.morph, 'foliage_rate', 'box_rate', 'bauble_rate', 'star_rate')

        g = self.gesture
        _positive('gesture', g, 'camera_width', 'camera_height', 'inference_fps',
                  'debounce_window', 'fist_ratio', 'open_ratio', 'rotation_gain')
        if g.fist_ratio >= g.open_ratio:
            raise ConfigError('gesture.fist_ratio',
                              f"must be below open_ratio ({g.fist_ratio} >= {g.open_ratio})")
        if not 0 <= g.rotation_dead_zone < 0.5:
            raise ConfigError('gesture.rotation_dead_zone',
                              f"must be in [0, 0.5), got {g.rotation_dead_zone}")
        for name in ('min_detection_confidence', 'min_tracking_confidence'):
            value = getattr(g, name)
            if not 0 <= value <= 1:
                raise ConfigError(f"gesture.{name}", f"must be in [0, 1], got {value}")

        width, height = self.graphics.resolution
        if width <= 0 or height <= 0:
            raise ConfigError('graphics.resolution', f"must be positive, got {self.graphics.resolution}")
        if self.graphics.max_fps < 0:
            raise ConfigError('graphics.max_fps', f"must not be negative, got {self.graphics.max_fps}")
        return self

    def save(self, path: str = DEFAULT_SETTINGS_PATH):
        """Save settings to file."""
        data = {
            'scene': asdict(self.scene),
            'morph': asdict(self.morph),
            'gesture': asdict(self.gesture),
            'graphics': {
                **asdict(self.graphics),
                'resolution': list(self.graphics.resolution),
                'pip_size': list(self.graphics.pip_size)
            }
        }
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, path: str = DEFAULT_SETTINGS_PATH) -> 'AppSettings':
        """
        Load settings from file.

        A missing, unreadable or wrongly shaped file gives defaults. Unknown
        keys are ignored. Values are not validated here; call validate().
        """
        if not os.path.exists(path):
            return cls()

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Error loading settings from %s: %s", path, e)
            return cls()

        groups = ('scene', 'morph', 'gesture', 'graphics')
        if not isinstance(data, dict) or not all(isinstance(data.get(g, {}), dict) for g in groups):
            logger.warning("Error loading settings from %s: expected an object of setting groups", path)
            return cls()

        settings = cls()

        for group in groups:
            target = getattr(settings, group)
            known = {f.name for f in fields(target)}
            for key, value in data.get(group, {}).items():
                if key not in known:
                    continue
                if key in ('resolution', 'pip_size'):
                    if not isinstance(value, (list, tuple)):
                        continue
                    value = tuple(value)
                setattr(target, key, value)

        return settings
