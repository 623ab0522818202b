"""
Scenes for Arbor.
"""

from .tree_scene import TreeScene, TreeRenderer

__all__ = [
    'TreeScene',
    'TreeRenderer',
]
