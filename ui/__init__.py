"""
UI components and settings for Arbor.
"""

from .settings import (
    AppSettings, SceneSettings, MorphSettings, GestureSettings, GraphicsSettings
)
from .overlay import HUD, DebugUI, ToggleButton

__all__ = [
    'AppSettings', 'SceneSettings', 'MorphSettings', 'GestureSettings', 'GraphicsSettings',
    'HUD', 'DebugUI', 'ToggleButton',
]
