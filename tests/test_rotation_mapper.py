"""Tests for wrist position -> rotation velocity."""

import numpy as np
import pytest

from systems.morph import MorphState
from systems.rotation_mapper import RootRotation, RotationMapper, map_rotation
from tests.conftest import make_hand


class _OnlyX:
    """Landmark-like object missing y and z."""
    x = 0.5


class TestMapRotation:
    def test_centered_wrist(self):
        assert map_rotation(make_hand(wrist_x=0.5)) == 0.0

    def test_inside_dead_zone(self):
        assert map_rotation(make_hand(wrist_x=0.45)) == 0.0
        assert map_rotation(make_hand(wrist_x=0.58)) == 0.0

    def test_left_edge(self):
        assert map_rotation(make_hand(wrist_x=0.0)) == pytest.approx(1.5)

    def test_right_edge(self):
        assert map_rotation(make_hand(wrist_x=1.0)) == pytest.approx(-1.5)

    def test_no_hand(self):
        assert map_rotation(None) == 0.0

    def test_malformed(self):
        assert map_rotation(np.zeros((4, 2))) == 0.0
        assert map_rotation("not a hand") == 0.0
        assert map_rotation({"wrist": (0.1, 0.2)}) == 0.0
        assert map_rotation([_OnlyX()] * 21) == 0.0

    def test_mapper_uses_configuration(self):
        mapper = RotationMapper(dead_zone=0.3, gain=2.0)
        assert mapper.map(make_hand(wrist_x=0.25)) == 0.0
        assert mapper.map(make_hand(wrist_x=0.1)) == pytest.approx(0.8)


class TestRootRotation:
    def test_base_spin_depends_on_state(self):
        assembled = RootRotation()
        scattered = RootRotation()
        assembled.update(1.0, MorphState.ASSEMBLED)
        scattered.update(1.0, MorphState.SCATTERED)
        assert assembled.yaw == pytest.approx(0.1)
        assert scattered.yaw == pytest.approx(0.05)

    def test_velocity_adds_to_base(self):
        root = RootRotation()
        root.update(0.5, MorphState.ASSEMBLED, velocity=1.5)
        assert root.yaw == pytest.approx(0.5 * 1.6)

    def test_non_positive_delta(self):
        root = RootRotation()
        root.update(0.0, MorphState.ASSEMBLED, velocity=3.0)
        root.update(-1.0, MorphState.ASSEMBLED)
        assert root.yaw == 0.0
