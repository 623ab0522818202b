"""
Spatial Distribution
====================
Target positions for animated entities.

Every entity gets two positions at population setup:
- a scatter position, uniform inside a ball
- an assembled position, on the surface of a cone (the tree)

Scalar and vectorized forms are provided; populations use the vectorized
ones so tens of thousands of entities stay cheap.
"""

import math
from typing import Optional, Tuple

import numpy as np

from core.errors import ConfigError


GOLDEN_ANGLE = 2.39996  # radians, ~137.5 degrees
DEFAULT_JITTER = 0.2

Vec3 = Tuple[float, float, float]


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _check_cone(total: int, height: float, base_radius: float, jitter: float):
    if total <= 0:
        raise ConfigError('total', f"entity count must be positive, got {total}")
    if height <= 0:
        raise ConfigError('height', f"cone height must be positive, got {height}")
    if base_radius <= 0:
        raise ConfigError('base_radius', f"cone radius must be positive, got {base_radius}")
    if jitter < 0:
        raise ConfigError('jitter', f"jitter must not be negative, got {jitter}")


def cone_position(index: int, total: int, height: float, base_radius: float,
                  jitter: float = DEFAULT_JITTER,
                  rng: Optional[np.random.Generator] = None) -> Vec3:
    """
    Place entity `index` of `total` on a cone surface.

    Height is linear in index/total and centered on 0, so the cone spans
    [-height/2, height/2]. The radius shrinks linearly to 0 at the apex.
    Successive entities are spaced by the golden angle, which avoids
    banding for any total. x and z get uniform jitter in
    [-jitter/2, jitter/2]; y is exact.
    """
    _check_cone(total, height, base_radius, jitter)
    if not 0 <= index < total:
        raise ConfigError('index', f"index {index} outside [0, {total})")

    y_norm = index / total
    y = (y_norm - 0.5) * height
    radius = base_radius * (1.0 - y_norm)
    angle = index * GOLDEN_ANGLE

    x = radius * math.cos(angle)
    z = radius * math.sin(angle)

    if jitter > 0:
        dx, dz = _rng(rng).uniform(-0.5, 0.5, size=2) * jitter
        x += dx
        z += dz

    return float(x), float(y), float(z)


def cone_positions(total: int, height: float, base_radius: float,
                   jitter: float = DEFAULT_JITTER,
                   rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Vectorized cone_position for indices 0..total-1. Returns (total, 3)."""
    _check_cone(total, height, base_radius, jitter)

    index = np.arange(total, dtype=np.float64)
    y_norm = index / total
    radius = base_radius * (1.0 - y_norm)
    angle = index * GOLDEN_ANGLE

    out = np.empty((total, 3), dtype=np.float64)
    out[:, 0] = radius * np.cos(angle)
    out[:, 1] = (y_norm - 0.5) * height
    out[:, 2] = radius * np.sin(angle)

    if jitter > 0:
        noise = _rng(rng).uniform(-0.5, 0.5, size=(total, 2)) * jitter
        out[:, 0] += noise[:, 0]
        out[:, 2] += noise[:, 1]

    return out


def random_sphere_position(radius: float,
                           rng: Optional[np.random.Generator] = None) -> Vec3:
    """Uniform sample inside a ball of the given radius."""
    return tuple(float(c) for c in random_sphere_positions(1, radius, rng)[0])


def random_sphere_positions(count: int, radius: float,
                            rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Volume-uniform samples inside a ball. Returns (count, 3).

    Direction uses proper solid-angle sampling (polar angle acos(2v - 1),
    uniform azimuth) and the radius a cube-root transform, so density does
    not pile up near the center.
    """
    if count <= 0:
        raise ConfigError('count', f"sample count must be positive, got {count}")
    if radius <= 0:
        raise ConfigError('radius', f"scatter radius must be positive, got {radius}")

    rng = _rng(rng)
    u, v, w = rng.random((3, count))

    theta = 2.0 * np.pi * u
    phi = np.arccos(2.0 * v - 1.0)
    r = np.cbrt(w) * radius

    sin_phi = np.sin(phi)
    return np.stack([
        r * sin_phi * np.cos(theta),
        r * sin_phi * np.sin(theta),
        r * np.cos(phi),
    ], axis=-1)
