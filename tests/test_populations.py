"""Tests for population builders and motion profiles."""

import numpy as np
import pytest

from core.errors import ConfigError
from systems.populations import (
    BAUBLE_COLORS, BOX_COLORS, Palette, build_ornaments, build_populations,
    default_profiles, hex_to_bgr,
)
from ui.settings import MorphSettings, SceneSettings


def _scene(**overrides):
    scene = SceneSettings(particle_count=300, box_count=20, bauble_count=25, seed=11)
    for key, value in overrides.items():
        setattr(scene, key, value)
    return scene


class TestBuildPopulations:
    def test_kinds_in_draw_order(self):
        kinds = [pop.kind for pop in build_populations(_scene())]
        assert kinds == ['foliage', 'box', 'bauble', 'star']

    def test_counts(self):
        foliage, box, bauble, star = build_populations(_scene())
        assert len(foliage) == 300
        assert len(box) == 20
        assert len(bauble) == 25
        assert len(star) == 1

    def test_star_above_apex(self):
        star = build_populations(_scene(tree_height=10.0))[-1]
        assert star.assembled[0, 1] == pytest.approx(5.8)

    def test_seed_is_reproducible(self):
        a = build_populations(_scene())
        b = build_populations(_scene())
        for pa, pb in zip(a, b):
            assert np.array_equal(pa.scatter, pb.scatter)
            assert np.array_equal(pa.colors, pb.colors)

    def test_scatter_within_radius(self):
        foliage, box, _, _ = build_populations(_scene(scatter_radius=20.0))
        assert np.all(np.linalg.norm(foliage.scatter, axis=1) <= 20.0)
        # Ornaments scatter a bit tighter than foliage
        assert np.all(np.linalg.norm(box.scatter, axis=1) <= 16.0)

    def test_ornament_colors_from_palette(self):
        _, box, bauble, _ = build_populations(_scene())
        assert {tuple(int(v) for v in c) for c in box.colors} <= set(BOX_COLORS)
        assert {tuple(int(v) for v in c) for c in bauble.colors} <= set(BAUBLE_COLORS)

    def test_invalid_count(self):
        with pytest.raises(ConfigError):
            build_populations(_scene(particle_count=0))

    def test_unknown_ornament_kind(self):
        with pytest.raises(ConfigError):
            build_ornaments('candle', 5, 12.0, 4.5, 25.0, 0.2, np.random.default_rng(0))


class TestProfiles:
    def test_rates_from_settings(self):
        profiles = default_profiles(MorphSettings(foliage_rate=3.0, box_rate=0.4))
        assert profiles['foliage'].rate == 3.0
        assert profiles['box'].rate == 0.4
        assert profiles['bauble'].rate == 0.8
        assert profiles['star'].rate == 1.0

    def test_heavier_populations_are_slower(self):
        profiles = default_profiles(MorphSettings())
        assert profiles['box'].rate < profiles['bauble'].rate < profiles['foliage'].rate


class TestPalette:
    def test_hex_to_bgr(self):
        assert hex_to_bgr('#FFD700') == (0, 215, 255)
        assert Palette.BG_DARK == (2, 2, 2)
