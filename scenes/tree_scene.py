"""
Tree Scene
==========
Render-tick side of Arbor.

Features:
- One MorphAnimator per population, all reading the same MorphState
- Scene root yaw from automatic spin plus the hand rotation signal
- Software perspective renderer drawing into an OpenCV frame:
  additive glowing foliage, depth-sorted ornaments, spinning top star
"""

import math
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from systems.animator import MorphAnimator, Population, Transforms
from systems.morph import MorphState
from systems.populations import Palette, build_populations, default_profiles
from systems.rotation_mapper import RootRotation


# Longest tick the animators see; a stalled window should not teleport
MAX_DELTA = 0.25

BOX_HALF_SIZE = 0.4
BAUBLE_RADIUS = 0.5
STAR_OUTER_RADIUS = 0.8
STAR_INNER_RADIUS = 0.35

_CUBE_CORNERS = np.array([
    [x, y, z, 1.0]
    for x in (-BOX_HALF_SIZE, BOX_HALF_SIZE)
    for y in (-BOX_HALF_SIZE, BOX_HALF_SIZE)
    for z in (-BOX_HALF_SIZE, BOX_HALF_SIZE)
]).T  # (4, 8)


def rotate_y(points: np.ndarray, yaw: float) -> np.ndarray:
    """Rotate (..., 3) points about the y axis."""
    c, s = math.cos(yaw), math.sin(yaw)
    out = points.copy()
    out[..., 0] = points[..., 0] * c + points[..., 2] * s
    out[..., 2] = -points[..., 0] * s + points[..., 2] * c
    return out


# =====================
# CAMERA
# =====================
class PerspectiveCamera:
    """Fixed camera on the +z axis looking at the origin."""

    def __init__(self, width: int, height: int, distance: float = 20.0,
                 fov: float = 50.0, near: float = 0.1):
        self.width = width
        self.height = height
        self.distance = distance
        self.near = near
        self.focal = (height / 2.0) / math.tan(math.radians(fov) / 2.0)

    def project(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Project (..., 3) world points.

        Returns pixel coordinates (..., 2), view depth (...,) and a mask of
        points in front of the near plane.
        """
        depth = self.distance - points[..., 2]
        visible = depth > self.near
        safe = np.where(visible, depth, 1.0)

        px = self.width / 2.0 + points[..., 0] * self.focal / safe
        py = self.height / 2.0 - points[..., 1] * self.focal / safe
        return np.stack([px, py], axis=-1), depth, visible

    def pixel_size(self, world_size, depth):
        return world_size * self.focal / np.maximum(depth, self.near)


# =====================
# RENDERER
# =====================
class TreeRenderer:
    """Draws populations' transforms into a BGR frame."""

    BG_COLOR = Palette.BG_DARK
    WHITE_LEVEL = int(0.8 * 255)

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.camera = PerspectiveCamera(width, height)

        # Pre-bake static background (dim stars) as a single image
        self._static_bg = np.zeros((height, width, 3), dtype=np.uint8)
        self._init_static_background()

    def _init_static_background(self):
        bg = self._static_bg
        bg[:] = self.BG_COLOR

        rng = np.random.default_rng(42)
        count = (self.width * self.height) // 4000
        xs = rng.integers(0, self.width, count)
        ys = rng.integers(0, self.height, count)
        levels = rng.integers(25, 70, count).astype(np.uint8)
        bg[ys, xs] = levels[:, None]

    def render(self, frame: np.ndarray, populations: List[Population],
               transforms: Dict[str, Transforms], yaw: float, elapsed: float):
        np.copyto(frame, self._static_bg)

        by_kind = {pop.kind: pop for pop in populations}

        if 'foliage' in transforms:
            self._draw_foliage(frame, by_kind['foliage'], transforms['foliage'], yaw)

        items = []
        for kind in ('box', 'bauble', 'star'):
            if kind in transforms:
                items.extend(self._ornament_items(kind, by_kind[kind], transforms[kind], yaw))

        # Painter's algorithm: far first
        items.sort(key=lambda item: -item[0])
        for _, draw, args in items:
            draw(frame, *args, elapsed)

    # ----- foliage -----
    def _draw_foliage(self, frame: np.ndarray, pop: Population, tf: Transforms, yaw: float):
        pts = rotate_y(tf.positions, yaw)
        xy, depth, visible = self.camera.project(pts)
        xs = np.rint(xy[:, 0]).astype(np.int64)
        ys = np.rint(xy[:, 1]).astype(np.int64)
        inside = visible & (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)

        # Closer and larger points are brighter
        weight = tf.scales[inside] * np.clip(20.0 / depth[inside], 0.3, 3.0) * tf.brightness
        colors = pop.colors[inside].astype(np.float32) * weight[:, None].astype(np.float32)

        layer = np.zeros((self.height, self.width, 3), dtype=np.float32)
        np.add.at(layer, (ys[inside], xs[inside]), colors)

        glow = cv2.GaussianBlur(layer, (0, 0), 2.0)
        out = frame.astype(np.float32) + layer + glow * 3.0
        np.copyto(frame, np.clip(out, 0, 255).astype(np.uint8))

    # ----- ornaments -----
    def _ornament_items(self, kind: str, pop: Population, tf: Transforms, yaw: float):
        centers = rotate_y(tf.positions, yaw)
        xy, depth, visible = self.camera.project(centers)
        items = []

        if kind == 'box':
            corners = np.einsum('nij,jk->nik', tf.matrices(), _CUBE_CORNERS)[:, :3, :]
            corners = rotate_y(np.swapaxes(corners, 1, 2), yaw)  # (N, 8, 3)
            corner_xy, _, corner_vis = self.camera.project(corners)
            for i in np.flatnonzero(visible & corner_vis.all(axis=1)):
                items.append((depth[i], self._draw_box, (corner_xy[i], pop.colors[i])))

        elif kind == 'bauble':
            radii = self.camera.pixel_size(BAUBLE_RADIUS * tf.scales, depth)
            for i in np.flatnonzero(visible):
                items.append((depth[i], self._draw_bauble, (xy[i], radii[i], pop.colors[i])))

        else:
            radii = self.camera.pixel_size(STAR_OUTER_RADIUS * tf.scales, depth)
            for i in np.flatnonzero(visible):
                items.append((depth[i], self._draw_star,
                              (xy[i], radii[i], tf.rotations[i, 1] + yaw, pop.colors[i])))

        return items

    def _draw_box(self, frame, corner_xy, color, elapsed):
        hull = cv2.convexHull(np.rint(corner_xy).astype(np.int32))
        base = tuple(int(c) for c in color)
        cv2.fillConvexPoly(frame, hull, tuple(int(c * 0.8) for c in base), lineType=cv2.LINE_AA)
        cv2.polylines(frame, [hull], True, tuple(min(255, int(c * 1.2) + 20) for c in base), 1,
                      lineType=cv2.LINE_AA)

    def _draw_bauble(self, frame, center, radius, color, elapsed):
        r = max(1, int(round(radius)))
        c = tuple(int(v) for v in np.rint(center))

        b, g, rd = (int(v) for v in color)
        if min(b, g, rd) > self.WHITE_LEVEL:
            twinkle = 0.8   # white pearls glow steadily
        else:
            seed = rd / 255.0 * 10.0 + g / 255.0 * 5.0 + b / 255.0 * 2.0
            wave = math.sin(elapsed * 3.0 + seed) * 0.5 + 0.5
            twinkle = wave ** 4 * 1.5 + 0.5

        shade = tuple(min(255, int(v * (0.6 + 0.3 * twinkle))) for v in (b, g, rd))
        cv2.circle(frame, c, r, shade, -1, lineType=cv2.LINE_AA)
        highlight = (c[0] - r // 3, c[1] - r // 3)
        cv2.circle(frame, highlight, max(1, r // 4), (245, 245, 245), -1, lineType=cv2.LINE_AA)

    def _draw_star(self, frame, center, radius, spin, color, elapsed):
        # Spin about the vertical axis squeezes the outline horizontally
        squeeze = max(0.15, abs(math.cos(spin)))
        pts = []
        for i in range(10):
            r = radius if i % 2 == 0 else radius * STAR_INNER_RADIUS / STAR_OUTER_RADIUS
            angle = i / 10.0 * 2.0 * math.pi - math.pi / 2.0
            pts.append((center[0] + r * math.cos(angle) * squeeze, center[1] + r * math.sin(angle)))

        poly = np.rint(np.array(pts)).astype(np.int32)
        cx, cy = int(round(center[0])), int(round(center[1]))
        cv2.circle(frame, (cx, cy), max(2, int(radius * 1.6)), (20, 60, 80), -1, lineType=cv2.LINE_AA)
        cv2.fillPoly(frame, [poly], tuple(int(v) for v in color), lineType=cv2.LINE_AA)
        cv2.polylines(frame, [poly], True, (200, 255, 255), 1, lineType=cv2.LINE_AA)


# =====================
# SCENE
# =====================
class TreeScene:
    """
    Populations, their animators and the scene root rotation.

    update() is the render tick: it never blocks on inference and only
    reads the MorphState and the latest rotation signal.
    """

    def __init__(self, settings, width: int = 1280, height: int = 720,
                 rng: Optional[np.random.Generator] = None):
        self.populations = build_populations(settings.scene, rng)
        profiles = default_profiles(settings.morph)
        self.animators = {
            pop.kind: MorphAnimator(pop, profiles[pop.kind])
            for pop in self.populations
        }
        self.root = RootRotation()
        self.renderer = TreeRenderer(width, height)

        self.elapsed = 0.0
        self.transforms: Dict[str, Transforms] = {}

    def update(self, delta: float, state: MorphState,
               rotation_velocity: float = 0.0) -> Dict[str, Transforms]:
        delta = min(max(delta, 0.0), MAX_DELTA)
        self.elapsed += delta
        self.root.update(delta, state, rotation_velocity)

        self.transforms = {
            kind: animator.step(delta, state, self.elapsed)
            for kind, animator in self.animators.items()
        }
        return self.transforms

    def blend_factors(self) -> Dict[str, float]:
        return {kind: animator.blend for kind, animator in self.animators.items()}

    def render(self, frame: np.ndarray):
        if not self.transforms:
            self.update(0.0, MorphState.SCATTERED)
        self.renderer.render(frame, self.populations, self.transforms,
                             self.root.yaw, self.elapsed)
