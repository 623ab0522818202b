"""
Morph Animator
==============
Per-population blend between the scattered and assembled arrangements.

Each animator owns one blend factor and eases it toward the target implied
by the shared MorphState at its own rate, so populations drift apart in
time and the transition reads as layered rather than mechanical.

Per tick:
1. blend approaches 0 (SCATTERED) or 1 (ASSEMBLED) exponentially
2. a cubic ease-in-out shapes the blend
3. the scatter endpoint gets a slow galaxy swirl and a vertical bob
4. positions interpolate scatter -> assembled by the eased factor
5. rotation and scale follow the population's MotionProfile
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from core.errors import ConfigError
from systems.morph import MorphState


SNAP_EPSILON = 1e-6


# =====================
# EASING / APPROACH
# =====================
def ease_in_out_cubic(t):
    """Cubic ease-in-out on [0, 1]. Works on floats and numpy arrays."""
    t = np.clip(t, 0.0, 1.0)
    eased = np.where(t < 0.5, 4.0 * t ** 3, 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0)
    return float(eased) if np.ndim(eased) == 0 else eased


def approach(current: float, target: float, delta: float, rate: float) -> float:
    """
    Exponential approach of `current` toward `target`.

    The step fraction is delta * rate, capped at 1 so a long frame lands on
    the target instead of overshooting it.
    """
    if delta <= 0 or rate <= 0:
        return current

    step = min(1.0, delta * rate)
    value = current + (target - current) * step

    if abs(target - value) < SNAP_EPSILON:
        return float(target)
    return float(min(1.0, max(0.0, value)))


def lerp(a, b, t):
    return a + (b - a) * t


def swirl(points: np.ndarray, elapsed: float, orbit_speed: float, twist: float) -> np.ndarray:
    """
    Rotate the (x, z) projection of points around the y axis.

    The angle grows with time and with planar distance from the axis, so
    outer points lead inner ones and the cloud winds into a spiral.
    """
    x = points[:, 0]
    z = points[:, 2]
    dist = np.hypot(x, z)
    angle = np.arctan2(z, x) + elapsed * orbit_speed + dist * twist

    out = points.copy()
    out[:, 0] = np.cos(angle) * dist
    out[:, 2] = np.sin(angle) * dist
    return out


# =====================
# POPULATION DATA
# =====================
@dataclass(frozen=True)
class Population:
    """
    Fixed per-entity data for one animated population.

    All arrays share the same leading length and are read-only after
    construction; only the derived transforms change per tick.
    """
    kind: str
    scatter: np.ndarray            # (N, 3)
    assembled: np.ndarray          # (N, 3)
    seeds: np.ndarray              # (N,) in [0, 1)
    scales: np.ndarray             # (N,)
    rotations: np.ndarray          # (N, 3) static Euler offsets
    colors: np.ndarray             # (N, 3) BGR uint8

    def __post_init__(self):
        count = len(self.scatter)
        if count == 0:
            raise ConfigError(self.kind, "population must contain at least one entity")

        for name in ('scatter', 'assembled', 'seeds', 'scales', 'rotations', 'colors'):
            arr = np.array(getattr(self, name))
            if len(arr) != count:
                raise ConfigError(self.kind, f"{name} has {len(arr)} rows, expected {count}")
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @property
    def count(self) -> int:
        return len(self.scatter)

    def __len__(self) -> int:
        return self.count


@dataclass(frozen=True)
class MotionProfile:
    """
    How one population moves. Pure configuration, no per-kind branches.

    Overlay parameters shape the scattered side; spin, scale and
    brightness ranges are (scattered, assembled) pairs interpolated by the
    eased factor.
    """
    rate: float = 1.0

    # scatter overlay
    orbit_speed: float = 0.1
    swirl_twist: float = 0.1
    bob_amplitude: float = 1.0
    bob_speed: float = 0.5
    bob_index_phase: float = 1.0
    bob_x_phase: float = 0.0
    overlay_cutoff: Optional[float] = 0.9

    # assembled-side sway and scattered sparkle shake
    wind_amplitude: float = 0.0
    sparkle_amplitude: float = 0.0
    sparkle_cutoff: float = 0.9

    # rotation
    idle_spin: float = 0.0
    scatter_spin: Tuple[float, float] = (0.0, 0.0)
    yaw_speed: float = 0.0

    # whole-entity hover (top star)
    hover_amplitude: float = 0.0
    hover_speed: float = 0.0

    scale_range: Tuple[float, float] = (1.0, 1.0)
    brightness_range: Tuple[float, float] = (1.0, 1.0)

    def __post_init__(self):
        if self.rate <= 0:
            raise ConfigError('rate', f"approach rate must be positive, got {self.rate}")


@dataclass
class Transforms:
    """Per-tick output for one population."""
    positions: np.ndarray   # (N, 3)
    rotations: np.ndarray   # (N, 3) Euler XYZ
    scales: np.ndarray      # (N,)
    eased: float
    brightness: float

    def matrices(self) -> np.ndarray:
        """Compose (N, 4, 4) TRS matrices, rotation order X then Y then Z."""
        return compose_matrices(self.positions, self.rotations, self.scales)


def compose_matrices(positions: np.ndarray, rotations: np.ndarray,
                     scales: np.ndarray) -> np.ndarray:
    count = len(positions)
    cx, cy, cz = np.cos(rotations).T
    sx, sy, sz = np.sin(rotations).T

    # R = Rx * Ry * Rz (intrinsic XYZ)
    rot = np.empty((count, 3, 3))
    rot[:, 0, 0] = cy * cz
    rot[:, 0, 1] = -cy * sz
    rot[:, 0, 2] = sy
    rot[:, 1, 0] = cx * sz + sx * sy * cz
    rot[:, 1, 1] = cx * cz - sx * sy * sz
    rot[:, 1, 2] = -sx * cy
    rot[:, 2, 0] = sx * sz - cx * sy * cz
    rot[:, 2, 1] = sx * cz + cx * sy * sz
    rot[:, 2, 2] = cx * cy

    out = np.zeros((count, 4, 4))
    out[:, :3, :3] = rot * np.asarray(scales)[:, None, None]
    out[:, :3, 3] = positions
    out[:, 3, 3] = 1.0
    return out


# =====================
# ANIMATOR
# =====================
class MorphAnimator:
    """One blend factor plus the motion rules of one population."""

    def __init__(self, population: Population, profile: MotionProfile):
        self.population = population
        self.profile = profile
        self.blend = 0.0
        self._index = np.arange(population.count, dtype=np.float64)

    @property
    def eased(self) -> float:
        return ease_in_out_cubic(self.blend)

    def advance(self, delta: float, state: MorphState) -> float:
        """Move the blend factor one tick toward the state's target."""
        target = 1.0 if state is MorphState.ASSEMBLED else 0.0
        self.blend = approach(self.blend, target, delta, self.profile.rate)
        return self.blend

    def scatter_overlay(self, elapsed: float) -> np.ndarray:
        """Scatter positions with swirl and bob applied."""
        p = self.profile
        pts = swirl(self.population.scatter, elapsed, p.orbit_speed, p.swirl_twist)
        phase = elapsed * p.bob_speed + self._index * p.bob_index_phase + pts[:, 0] * p.bob_x_phase
        pts[:, 1] += np.sin(phase) * p.bob_amplitude
        return pts

    def positions(self, eased: float, elapsed: float) -> np.ndarray:
        p = self.profile
        pop = self.population

        if p.overlay_cutoff is None or eased < p.overlay_cutoff:
            scatter = self.scatter_overlay(elapsed)
        else:
            scatter = pop.scatter

        assembled = pop.assembled
        if p.wind_amplitude:
            assembled = assembled.copy()
            sway = np.sin(elapsed + assembled[:, 1] * 0.5) * p.wind_amplitude
            assembled[:, 0] += sway
            assembled[:, 2] += sway * 0.5

        pos = lerp(scatter, assembled, eased)

        if p.sparkle_amplitude and eased < p.sparkle_cutoff:
            shake = pop.seeds * 10.0
            pos[:, 0] += np.sin(elapsed * 5.0 + shake) * p.sparkle_amplitude
            pos[:, 1] += np.cos(elapsed * 3.0 + shake) * p.sparkle_amplitude

        if p.hover_amplitude:
            pos[:, 1] += np.sin(elapsed * p.hover_speed) * p.hover_amplitude

        return pos

    def rotations(self, eased: float, elapsed: float) -> np.ndarray:
        p = self.profile
        rot = np.array(self.population.rotations, dtype=np.float64)
        loose = (1.0 - eased) * elapsed
        idle = elapsed * p.idle_spin
        rot[:, 0] += loose * p.scatter_spin[0] + idle
        rot[:, 1] += loose * p.scatter_spin[1] + idle
        if p.yaw_speed:
            rot[:, 1] = elapsed * p.yaw_speed
        return rot

    def step(self, delta: float, state: MorphState, elapsed: float) -> Transforms:
        """
        Advance one render tick and compute every entity's transform.

        Args:
            delta: Seconds since the previous tick
            state: Current authoritative MorphState (read only)
            elapsed: Seconds since the scene started, drives ambient motion
        """
        self.advance(delta, state)
        eased = self.eased
        p = self.profile

        scale_mult = lerp(p.scale_range[0], p.scale_range[1], eased)

        return Transforms(
            positions=self.positions(eased, elapsed),
            rotations=self.rotations(eased, elapsed),
            scales=np.asarray(self.population.scales, dtype=np.float64) * scale_mult,
            eased=eased,
            brightness=lerp(p.brightness_range[0], p.brightness_range[1], eased),
        )
