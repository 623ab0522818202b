"""Tests for ArborApp input handling and the HUD (no window, no camera)."""

import numpy as np
import pygame
import pytest

from arbor import ArborApp
from core.display import InputEvents
from systems.control import ControlSignals
from systems.gesture_classifier import Gesture
from systems.morph import MorphState
from ui.overlay import BUTTON_LABELS, HUD


def _events(keys=(), clicked=False, pos=(0, 0), quit=False):
    return InputEvents(quit=quit, keys=list(keys), pointer=pos, clicked=clicked)


@pytest.fixture
def app(small_settings):
    return ArborApp(small_settings, gesture=False, rng=np.random.default_rng(0))


class TestArborAppInput:
    @pytest.mark.parametrize("key", [pygame.K_SPACE, pygame.K_RETURN])
    def test_toggle_keys(self, app, key):
        app.handle_input(_events([key]), 1.0)
        assert app.controller.current() is MorphState.ASSEMBLED
        app.handle_input(_events([key]), 2.0)
        assert app.controller.current() is MorphState.SCATTERED

    @pytest.mark.parametrize("key", [pygame.K_q, pygame.K_ESCAPE])
    def test_quit_keys(self, app, key):
        app.handle_input(_events([key]), 0.0)
        assert not app.running

    def test_window_close(self, app):
        app.handle_input(_events(quit=True), 0.0)
        assert not app.running

    def test_button_click_toggles(self, app):
        button = app.hud.button
        inside = (button.x + button.w // 2, button.y + button.h // 2)

        app.handle_input(_events(clicked=True, pos=(0, 0)), 0.0)
        assert app.controller.current() is MorphState.SCATTERED

        app.handle_input(_events(clicked=True, pos=inside), 0.0)
        assert app.controller.current() is MorphState.ASSEMBLED

    def test_debug_toggle_and_event_log(self, app):
        app.handle_input(_events([pygame.K_d]), 0.0)
        assert app.hud.debug.enabled

        app.handle_input(_events([pygame.K_SPACE]), 0.0)
        assert app.hud.debug.events[-1][1] == "ASSEMBLED (keyboard)"

    def test_gesture_disabled_by_flag(self, app):
        assert not app.gesture_enabled
        assert not app.gesture_available

    def test_draw_without_session(self, app):
        app.hud.debug.toggle()
        app.scene.update(0.1, app.controller.current())
        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        app.draw(frame)
        assert frame.any()


class TestHUD:
    def test_button_label_follows_state(self):
        assert BUTTON_LABELS[MorphState.SCATTERED] == "Assemble Tree"
        assert BUTTON_LABELS[MorphState.ASSEMBLED] == "Scatter Elements"

    def test_hit_button(self):
        hud = HUD(320, 240)
        b = hud.button
        assert hud.hit_button((b.x + 1, b.y + 1))
        assert not hud.hit_button((0, 0))

    def test_status_line(self):
        text, _ = HUD.status_line(ControlSignals(), gesture_available=False)
        assert text == "gesture control unavailable"

        text, _ = HUD.status_line(ControlSignals(), gesture_available=True)
        assert "hand" in text

        signals = ControlSignals(gesture=Gesture.FIST, hand_present=True)
        text, _ = HUD.status_line(signals, gesture_available=True)
        assert text == "gesture: FIST"

    def test_debug_log_is_bounded(self):
        hud = HUD(320, 240)
        for i in range(20):
            hud.debug.log(f"event {i}", float(i))
        assert len(hud.debug.events) == 8
        assert hud.debug.events[-1][1] == "event 19"
