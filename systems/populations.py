"""
Populations
===========
The animated populations of the tree and their motion profiles.

- Foliage: thousands of glowing points on the cone
- Boxes: gift-box ornaments, heavy and slow
- Baubles: spherical ornaments sitting slightly outside the foliage
- Star: a single star at the apex
"""

from typing import Dict, List, Optional

import numpy as np

from core.errors import ConfigError
from systems.animator import MotionProfile, Population
from systems.distribution import cone_positions, random_sphere_positions


def hex_to_bgr(value: str) -> tuple:
    """'#RRGGBB' -> (b, g, r) for OpenCV."""
    value = value.lstrip('#')
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return b, g, r


# =====================
# PALETTE
# =====================
class Palette:
    """Scene colors, BGR."""
    EMERALD_DEEP = hex_to_bgr('#002816')
    EMERALD_LIGHT = hex_to_bgr('#006B3C')
    GOLD_METALLIC = hex_to_bgr('#FFD700')
    GOLD_ROSE = hex_to_bgr('#E0BFB8')
    WHITE_WARM = hex_to_bgr('#FFFDD0')
    BG_DARK = hex_to_bgr('#020202')

    RED_VELVET = hex_to_bgr('#8A0303')
    RED_BRIGHT = hex_to_bgr('#D42424')
    WHITE_SNOW = hex_to_bgr('#F5F5F5')
    BLACK_OBSIDIAN = hex_to_bgr('#1A1A1A')
    GREEN_CHRISTMAS = hex_to_bgr('#0B4F28')


BOX_COLORS = [
    Palette.RED_VELVET,
    Palette.RED_BRIGHT,
    Palette.GREEN_CHRISTMAS,
    Palette.WHITE_SNOW,
    Palette.BLACK_OBSIDIAN,
    Palette.GOLD_METALLIC,
]

# Gold listed twice: it is the dominant bauble color
BAUBLE_COLORS = [
    Palette.GOLD_METALLIC,
    Palette.GOLD_METALLIC,
    Palette.RED_BRIGHT,
    Palette.RED_VELVET,
    Palette.WHITE_SNOW,
]

GOLD_TIP_THRESHOLD = 0.85
RED_BOX_SCALE = 1.5
BAUBLE_RADIUS_OFFSET = 1.15
ORNAMENT_SCATTER_SHRINK = 0.8
STAR_APEX_OFFSET = 0.8


# =====================
# BUILDERS
# =====================
def build_foliage(count: int, height: float, radius: float, scatter_radius: float,
                  jitter: float, rng: np.random.Generator) -> Population:
    """Point cloud on the cone, emerald with gold tips."""
    seeds = rng.random(count)
    sizes = rng.random(count) * 0.8 + 0.5

    deep = np.array(Palette.EMERALD_DEEP, dtype=np.float64)
    light = np.array(Palette.EMERALD_LIGHT, dtype=np.float64)
    gold = np.array(Palette.GOLD_METALLIC, dtype=np.float64)

    colors = deep + (light - deep) * seeds[:, None]
    tips = seeds > GOLD_TIP_THRESHOLD
    colors[tips] = colors[tips] + (gold - colors[tips]) * 0.9

    return Population(
        kind='foliage',
        scatter=random_sphere_positions(count, scatter_radius, rng),
        assembled=cone_positions(count, height, radius, jitter, rng),
        seeds=seeds,
        scales=sizes,
        rotations=np.zeros((count, 3)),
        colors=np.clip(np.rint(colors), 0, 255).astype(np.uint8),
    )


def build_ornaments(kind: str, count: int, height: float, radius: float,
                    scatter_radius: float, jitter: float,
                    rng: np.random.Generator) -> Population:
    """
    Box or bauble ornaments.

    Half of the boxes are red and drawn 1.5x larger; the rest pick from
    the festive palette. Baubles are gold, red or white.
    """
    if kind not in ('box', 'bauble'):
        raise ConfigError('kind', f"unknown ornament kind {kind!r}")

    radius_offset = 1.0 if kind == 'box' else BAUBLE_RADIUS_OFFSET
    assembled = cone_positions(count, height, radius * radius_offset, jitter, rng)
    scatter = random_sphere_positions(count, scatter_radius * ORNAMENT_SCATTER_SHRINK, rng)

    scales = rng.random(count) * 0.3 + 0.2
    colors = np.empty((count, 3), dtype=np.uint8)

    if kind == 'box':
        red = rng.random(count) > 0.5
        red_pick = np.where(rng.random(count) > 0.5, 0, 1)
        any_pick = rng.integers(0, len(BOX_COLORS), count)
        palette = np.array(BOX_COLORS, dtype=np.uint8)
        colors[:] = np.where(red[:, None], palette[red_pick], palette[any_pick])
        scales[red] *= RED_BOX_SCALE
    else:
        palette = np.array(BAUBLE_COLORS, dtype=np.uint8)
        colors[:] = palette[rng.integers(0, len(BAUBLE_COLORS), count)]

    rotations = np.zeros((count, 3))
    rotations[:, :2] = rng.random((count, 2)) * np.pi

    return Population(
        kind=kind,
        scatter=scatter,
        assembled=assembled,
        seeds=rng.random(count),
        scales=scales,
        rotations=rotations,
        colors=colors,
    )


def build_top_star(height: float, scatter_radius: float,
                   rng: np.random.Generator) -> Population:
    return Population(
        kind='star',
        scatter=random_sphere_positions(1, scatter_radius, rng),
        assembled=np.array([[0.0, height / 2.0 + STAR_APEX_OFFSET, 0.0]]),
        seeds=rng.random(1),
        scales=np.ones(1),
        rotations=np.zeros((1, 3)),
        colors=np.array([Palette.GOLD_METALLIC], dtype=np.uint8),
    )


def build_populations(scene, rng: Optional[np.random.Generator] = None) -> List[Population]:
    """
    Build every population for a SceneSettings, in draw order.

    A scene seed makes the layout reproducible; an explicit rng wins over it.
    """
    if rng is None:
        rng = np.random.default_rng(scene.seed)

    common = dict(height=scene.tree_height, radius=scene.tree_radius,
                  scatter_radius=scene.scatter_radius, jitter=scene.cone_jitter, rng=rng)

    return [
        build_foliage(scene.particle_count, **common),
        build_ornaments('box', scene.box_count, **common),
        build_ornaments('bauble', scene.bauble_count, **common),
        build_top_star(scene.tree_height, scene.scatter_radius, rng),
    ]


# =====================
# PROFILES
# =====================
def default_profiles(morph) -> Dict[str, MotionProfile]:
    """Motion profiles keyed by population kind, rates from MorphSettings."""
    ornament = dict(
        orbit_speed=0.1,
        swirl_twist=0.1,
        bob_amplitude=1.0,
        bob_speed=0.5,
        bob_index_phase=1.0,
        overlay_cutoff=0.9,
        idle_spin=0.2,
        scatter_spin=(0.3, 0.1),
    )

    return {
        'foliage': MotionProfile(
            rate=morph.foliage_rate,
            orbit_speed=0.1,
            swirl_twist=0.05,
            bob_amplitude=2.0,
            bob_speed=0.5,
            bob_index_phase=0.0,
            bob_x_phase=0.2,
            overlay_cutoff=None,
            wind_amplitude=0.05,
            sparkle_amplitude=0.05,
            brightness_range=(0.5, 0.95),
        ),
        'box': MotionProfile(rate=morph.box_rate, **ornament),
        'bauble': MotionProfile(rate=morph.bauble_rate, **ornament),
        'star': MotionProfile(
            rate=morph.star_rate,
            overlay_cutoff=0.0,
            bob_amplitude=0.0,
            yaw_speed=0.8,
            hover_amplitude=0.005,
            hover_speed=1.5,
            scale_range=(0.5, 1.2),
        ),
    }
