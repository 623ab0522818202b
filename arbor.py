"""
Arbor
=====
Gesture-controlled particle tree.

A few thousand glowing particles and ornaments drift in a cloud until a
closed fist pulls them into a cone-shaped tree; an open palm scatters
them again. Moving the hand left or right of center spins the scene.

Run:
    python arbor.py
    python arbor.py --no-gesture --seed 7
"""

import logging
import time
from contextlib import ExitStack
from typing import Optional

import argh
import numpy as np

from core.display import DEBUG_KEY, QUIT_KEYS, TOGGLE_KEYS, InputEvents, Window
from core.errors import GestureUnavailableError
from core.gesture_engine import HandLandmarkSession
from scenes.tree_scene import TreeScene
from systems.control import ControlSignals, GestureControl
from systems.morph import MorphController, MorphState
from ui.overlay import HUD, gesture_color
from ui.settings import DEFAULT_SETTINGS_PATH, AppSettings

logger = logging.getLogger(__name__)


# =====================
# APP
# =====================
class ArborApp:
    """
    Main loop: input, inference, animation, drawing.

    Inference is polled from the render loop at `inference_fps`. Render
    ticks in between reuse the last rotation signal and never wait on the
    camera.
    """

    def __init__(self, settings: AppSettings, gesture: bool = True,
                 rng: Optional[np.random.Generator] = None):
        self.settings = settings
        self.width, self.height = settings.graphics.resolution

        self.controller = MorphController()
        self.control = GestureControl.from_settings(self.controller, settings.gesture)
        self.scene = TreeScene(settings, self.width, self.height, rng)
        self.hud = HUD(self.width, self.height)

        self.gesture_enabled = gesture and settings.gesture.enabled
        self.gesture_available = False
        self.session: Optional[HandLandmarkSession] = None
        self.running = True
        self._clock = 0.0

        self.controller.on_change(self._on_state_change)

    def _on_state_change(self, state: MorphState, source: str):
        self.hud.debug.log(f"{state.value} ({source})", self._clock)

    # ----- gesture session -----
    def open_session(self) -> Optional[HandLandmarkSession]:
        """Open camera + model. Returns None (and logs once) if unavailable."""
        try:
            session = HandLandmarkSession(self.settings.gesture)
        except GestureUnavailableError as e:
            logger.warning("Gesture control unavailable: %s", e)
            return None

        session.on('hand_found', lambda sample: self.hud.debug.log("HAND FOUND", sample.timestamp))
        session.on('hand_lost', lambda sample: self.hud.debug.log("HAND LOST", sample.timestamp))
        return session

    def poll_gesture(self, now: float) -> ControlSignals:
        sample = self.session.read(now)
        if sample.image is None:
            # No new camera frame; keep the previous signals
            return self.control.last_signals
        return self.control.process(sample.landmarks, now)

    # ----- input -----
    def handle_input(self, events: InputEvents, now: float):
        if events.quit:
            self.running = False
            return

        for key in events.keys:
            if key in QUIT_KEYS:
                self.running = False
            elif key in TOGGLE_KEYS:
                self.controller.toggle(now, source="keyboard")
            elif key == DEBUG_KEY:
                self.hud.debug.toggle()

        if events.clicked and self.hud.hit_button(events.pointer):
            self.controller.toggle(now, source="button")

    # ----- frame -----
    def draw(self, frame: np.ndarray, mouse_pos=(-1, -1), fps: float = 0.0):
        signals = self.control.last_signals
        self.scene.render(frame)

        if self.session is not None and self.settings.graphics.show_pip:
            pip_w, pip_h = self.settings.graphics.pip_size
            self.session.render_pip(frame, gesture_color(signals.gesture), pip_w, pip_h)

        self.hud.render(frame, self.controller.current(), signals,
                        self.gesture_available, mouse_pos)
        self.hud.debug.render(frame, self._clock, signals, self.scene.blend_factors(),
                              self.scene.root.yaw, fps)

    def run(self):
        g = self.settings.graphics
        inference_interval = 1.0 / self.settings.gesture.inference_fps

        with ExitStack() as stack:
            window = Window((self.width, self.height), "Arbor", g.fullscreen, g.max_fps)
            stack.callback(window.close)

            if self.gesture_enabled:
                self.session = self.open_session()
                if self.session is not None:
                    stack.enter_context(self.session)
                    self.gesture_available = True

            frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
            last = time.monotonic()
            next_inference = last

            while self.running and window.is_open:
                now = time.monotonic()
                self._clock = now
                events = window.poll()
                self.handle_input(events, now)
                if not self.running:
                    break

                if self.session is not None and now >= next_inference:
                    self.poll_gesture(now)
                    next_inference = now + inference_interval

                self.scene.update(now - last, self.controller.current(), self.control.rotation)
                last = now

                self.draw(frame, events.pointer, window.fps)
                window.present(frame)

            self.session = None


# =====================
# CLI
# =====================
@argh.arg("--seed", type=int)
def main(settings: str = DEFAULT_SETTINGS_PATH,
         no_gesture: bool = False,
         seed: int = None,
         fullscreen: bool = False,
         verbose: bool = False):
    """
    Run Arbor.

    Args:
        settings: JSON settings file (missing file = defaults)
        no_gesture: Run without camera; keyboard and mouse only
        seed: Seed for the particle layout
        fullscreen: Start fullscreen (F11 toggles)
        verbose: Debug-level logging
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app_settings = AppSettings.load(settings)
    if seed is not None:
        app_settings.scene.seed = seed
    if fullscreen:
        app_settings.graphics.fullscreen = True
    app_settings.validate()

    print("=" * 50)
    print("ARBOR")
    print("=" * 50)
    print("Controls:")
    print("  • Fist: Assemble the tree")
    print("  • Open palm: Scatter the elements")
    print("  • Move hand left/right: Rotate")
    print("  • Space / Enter / button: Toggle")
    print("  • F11: Fullscreen   D: Debug   Q / Esc: Quit")
    print("=" * 50)

    ArborApp(app_settings, gesture=not no_gesture).run()


def cli():
    argh.dispatch_command(main)


if __name__ == "__main__":
    cli()
