"""
HUD Overlay
===========
Text and controls drawn on top of the tree.

Features:
- Title and gesture hints
- Toggle button (click, Space or Enter)
- Gesture status line, including "gesture control unavailable"
- Debug panel (D) with per-population blend factors and recent events
"""

from collections import deque
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from systems.control import ControlSignals
from systems.gesture_classifier import Gesture
from systems.morph import MorphState


FONT = cv2.FONT_HERSHEY_SIMPLEX

GESTURE_COLORS = {
    Gesture.OPEN: (80, 200, 255),
    Gesture.FIST: (80, 230, 120),
    Gesture.NONE: (170, 170, 170),
}

BUTTON_LABELS = {
    MorphState.SCATTERED: "Assemble Tree",
    MorphState.ASSEMBLED: "Scatter Elements",
}


def gesture_color(gesture: Gesture) -> Tuple[int, int, int]:
    return GESTURE_COLORS.get(gesture, GESTURE_COLORS[Gesture.NONE])


def _centered_text(frame, text, cy, scale, color, thickness=1):
    w = frame.shape[1]
    (tw, th), _ = cv2.getTextSize(text, FONT, scale, thickness)
    cv2.putText(frame, text, ((w - tw) // 2, cy + th // 2), FONT, scale, color, thickness, cv2.LINE_AA)


# =====================
# BUTTON
# =====================
class ToggleButton:
    """Click-to-toggle button whose label follows the morph state."""

    def __init__(self, x: int, y: int, w: int, h: int,
                 color=(40, 50, 45), hover_color=(60, 90, 70)):
        self.x, self.y, self.w, self.h = x, y, w, h
        self.color = color
        self.hover_color = hover_color

    def contains(self, px: int, py: int) -> bool:
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h

    def draw(self, frame: np.ndarray, state: MorphState, mouse_pos=(-1, -1)):
        fill = self.hover_color if self.contains(*mouse_pos) else self.color
        cv2.rectangle(frame, (self.x, self.y), (self.x + self.w, self.y + self.h), fill, -1)
        cv2.rectangle(frame, (self.x, self.y), (self.x + self.w, self.y + self.h), (110, 190, 215), 1)

        text = BUTTON_LABELS[state]
        (tw, th), _ = cv2.getTextSize(text, FONT, 0.6, 1)
        cv2.putText(frame, text, (self.x + (self.w - tw) // 2, self.y + (self.h + th) // 2),
                    FONT, 0.6, (235, 235, 235), 1, cv2.LINE_AA)


# =====================
# DEBUG UI
# =====================
class DebugUI:
    """Debug overlay - toggle with D key."""

    def __init__(self, history: int = 8):
        self.enabled = False
        self.events = deque(maxlen=history)   # (timestamp, message)

    def toggle(self):
        self.enabled = not self.enabled

    def log(self, msg: str, t: float):
        self.events.append((t, msg))

    def render(self, frame: np.ndarray, t: float, signals: ControlSignals,
               blends: Dict[str, float], yaw: float, fps: float):
        if not self.enabled:
            return

        overlay = frame.copy()
        cv2.rectangle(overlay, (10, 10), (270, 320), (20, 20, 20), -1)
        cv2.addWeighted(overlay, 0.8, frame, 0.2, 0, frame)

        y = 30
        cv2.putText(frame, "DEBUG [D]", (20, y), FONT, 0.5, (0, 255, 255), 1)
        y += 25

        cv2.putText(frame, f"FPS: {fps:.0f}", (20, y), FONT, 0.45, (180, 180, 180), 1)
        y += 22

        hand = "detected" if signals.hand_present else "lost"
        cv2.putText(frame, f"Hand: {hand}  {signals.gesture.value}", (20, y), FONT, 0.45,
                    gesture_color(signals.gesture), 1)
        y += 22
        cv2.putText(frame, f"Rotation: {signals.rotation:+.2f}", (20, y), FONT, 0.4, (180, 180, 180), 1)
        y += 20
        cv2.putText(frame, f"Yaw: {yaw:+.2f}", (20, y), FONT, 0.4, (180, 180, 180), 1)
        y += 22

        for kind, blend in blends.items():
            cv2.putText(frame, f"{kind}: {blend:.3f}", (20, y), FONT, 0.4, (180, 180, 180), 1)
            y += 18
        y += 10

        cv2.putText(frame, "Events:", (20, y), FONT, 0.45, (200, 200, 200), 1)
        y += 20

        # Newest first, fading over three seconds
        for stamp, message in list(reversed(self.events))[:5]:
            fade = max(0.3, 1.0 - (t - stamp) / 3.0)
            cv2.putText(frame, "  " + message, (20, y), FONT, 0.35,
                        (int(150 * fade), int(255 * fade), int(150 * fade)), 1)
            y += 16


# =====================
# HUD
# =====================
class HUD:
    """Everything drawn over the scene each frame."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.button = ToggleButton(width // 2 - 100, height - 80, 200, 44)
        self.debug = DebugUI()

    def hit_button(self, pos) -> bool:
        return self.button.contains(*pos)

    def render(self, frame: np.ndarray, state: MorphState, signals: ControlSignals,
               gesture_available: bool, mouse_pos=(-1, -1)):
        _centered_text(frame, "Merry Christmas", 50, 1.2, (120, 215, 255), 2)
        _centered_text(frame, "Fist: assemble   Open palm: scatter   Hand left/right: rotate",
                       85, 0.45, (170, 170, 170))

        self.button.draw(frame, state, mouse_pos)

        status, color = self.status_line(signals, gesture_available)
        _centered_text(frame, status, self.height - 105, 0.45, color)

    @staticmethod
    def status_line(signals: Optional[ControlSignals], gesture_available: bool):
        if not gesture_available:
            return "gesture control unavailable", (90, 90, 200)
        if signals is None or not signals.hand_present:
            return "show your hand to the camera", GESTURE_COLORS[Gesture.NONE]
        return f"gesture: {signals.gesture.value}", gesture_color(signals.gesture)
