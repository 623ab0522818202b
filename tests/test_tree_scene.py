"""Tests for TreeScene update and rendering."""

import numpy as np
import pytest

from scenes.tree_scene import PerspectiveCamera, TreeScene, rotate_y
from systems.morph import MorphState


class TestPerspectiveCamera:
    def test_origin_projects_to_center(self):
        camera = PerspectiveCamera(320, 240)
        xy, depth, visible = camera.project(np.zeros((1, 3)))
        assert np.allclose(xy[0], [160, 120])
        assert depth[0] == pytest.approx(20.0)
        assert visible[0]

    def test_points_behind_camera_hidden(self):
        camera = PerspectiveCamera(320, 240)
        _, _, visible = camera.project(np.array([[0.0, 0.0, 25.0]]))
        assert not visible[0]

    def test_up_is_up(self):
        camera = PerspectiveCamera(320, 240)
        xy, _, _ = camera.project(np.array([[0.0, 1.0, 0.0]]))
        assert xy[0, 1] < 120


class TestRotateY:
    def test_quarter_turn(self):
        out = rotate_y(np.array([[1.0, 2.0, 0.0]]), np.pi / 2)
        assert np.allclose(out, [[0.0, 2.0, -1.0]])


class TestTreeScene:
    def test_update_converges_every_population(self, small_settings):
        scene = TreeScene(small_settings, 320, 240, rng=np.random.default_rng(0))
        for _ in range(200):
            scene.update(0.25, MorphState.ASSEMBLED)
        assert all(blend == 1.0 for blend in scene.blend_factors().values())

    def test_long_stall_is_clamped(self, small_settings):
        scene = TreeScene(small_settings, 320, 240, rng=np.random.default_rng(0))
        scene.update(30.0, MorphState.ASSEMBLED)
        assert scene.elapsed == pytest.approx(0.25)
        assert scene.blend_factors()['box'] < 1.0

    def test_rotation_velocity_spins_root(self, small_settings):
        idle = TreeScene(small_settings, 320, 240, rng=np.random.default_rng(0))
        spun = TreeScene(small_settings, 320, 240, rng=np.random.default_rng(0))
        for _ in range(10):
            idle.update(0.1, MorphState.ASSEMBLED, 0.0)
            spun.update(0.1, MorphState.ASSEMBLED, 1.5)
        assert idle.root.yaw == pytest.approx(0.1)
        assert spun.root.yaw == pytest.approx(1.6)

    def test_transforms_per_population(self, small_settings):
        scene = TreeScene(small_settings, 320, 240)
        transforms = scene.update(0.016, MorphState.SCATTERED)
        assert set(transforms) == {'foliage', 'box', 'bauble', 'star'}
        assert transforms['foliage'].positions.shape == (400, 3)
        assert transforms['box'].matrices().shape == (12, 4, 4)

    @pytest.mark.parametrize("state", [MorphState.SCATTERED, MorphState.ASSEMBLED])
    def test_render_draws_something(self, small_settings, state):
        scene = TreeScene(small_settings, 320, 240, rng=np.random.default_rng(1))
        for _ in range(60):
            scene.update(0.1, state)

        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        scene.render(frame)

        background = scene.renderer._static_bg
        assert np.count_nonzero(np.any(frame != background, axis=2)) > 50

    def test_render_before_update(self, small_settings):
        scene = TreeScene(small_settings, 320, 240)
        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        scene.render(frame)
        assert frame.any()
