"""
Window Module
=============
Pygame window that presents OpenCV-rendered frames.

The scene draws into a BGR numpy frame at a fixed render size. The window
letterboxes that frame into whatever size it currently has, and reports
pointer positions back in render pixels.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
import pygame


# Key bindings, grouped by what they do
TOGGLE_KEYS = (pygame.K_SPACE, pygame.K_RETURN)
QUIT_KEYS = (pygame.K_ESCAPE, pygame.K_q)
DEBUG_KEY = pygame.K_d
FULLSCREEN_KEY = pygame.K_F11


@dataclass
class InputEvents:
    """Everything the app needs from one event pump."""
    quit: bool = False
    keys: List[int] = field(default_factory=list)
    pointer: Tuple[int, int] = (-1, -1)    # render pixels, (-1, -1) off-frame
    clicked: bool = False


class Window:
    """
    Letterboxed presentation window.

    Features:
    - Windowed (resizable) or fullscreen; F11 switches
    - Frame aspect ratio kept, bars filled black
    - Optional frame-rate cap
    """

    def __init__(self, size: Tuple[int, int] = (1280, 720), title: str = "Arbor",
                 fullscreen: bool = False, max_fps: int = 60):
        pygame.init()
        pygame.display.set_caption(title)

        self.render_size = tuple(size)
        self.max_fps = max_fps  # 0 = uncapped
        self.is_open = True

        desktop = pygame.display.Info()
        self._desktop_size = (desktop.current_w, desktop.current_h)
        self._clock = pygame.time.Clock()
        self._open(fullscreen)

    def _open(self, fullscreen: bool):
        if fullscreen:
            self.surface = pygame.display.set_mode(self._desktop_size, pygame.FULLSCREEN)
        else:
            self.surface = pygame.display.set_mode(self.render_size, pygame.RESIZABLE)
        self.fullscreen = fullscreen
        self._fit(self.surface.get_size())

    def _fit(self, window_size: Tuple[int, int]):
        """Recompute the letterbox viewport for a window size."""
        rw, rh = self.render_size
        ww, wh = max(window_size[0], 1), max(window_size[1], 1)
        self._scale = min(ww / rw, wh / rh)
        vw, vh = int(rw * self._scale), int(rh * self._scale)
        self._viewport = pygame.Rect((ww - vw) // 2, (wh - vh) // 2, vw, vh)

    def to_render_coords(self, pos: Tuple[int, int]) -> Tuple[int, int]:
        vp = self._viewport
        if not vp.collidepoint(pos):
            return (-1, -1)
        return (int((pos[0] - vp.x) / self._scale), int((pos[1] - vp.y) / self._scale))

    def poll(self) -> InputEvents:
        """Drain pygame's queue. F11 and resizes are handled here."""
        events = InputEvents()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                events.quit = True
            elif event.type == pygame.KEYDOWN:
                if event.key == FULLSCREEN_KEY:
                    self._open(not self.fullscreen)
                else:
                    events.keys.append(event.key)
            elif event.type == pygame.VIDEORESIZE:
                self._fit((event.w, event.h))
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                events.clicked = True

        events.pointer = self.to_render_coords(pygame.mouse.get_pos())
        if events.quit:
            self.is_open = False
        return events

    def present(self, frame: np.ndarray):
        """Show a BGR frame and wait out the rest of the frame budget."""
        # HxWxBGR -> WxHxRGB
        image = pygame.surfarray.make_surface(np.ascontiguousarray(frame[:, :, ::-1].swapaxes(0, 1)))
        if self._viewport.size != image.get_size():
            image = pygame.transform.smoothscale(image, self._viewport.size)

        self.surface.fill((0, 0, 0))
        self.surface.blit(image, self._viewport.topleft)
        pygame.display.flip()
        self._clock.tick(self.max_fps)

    @property
    def fps(self) -> float:
        return self._clock.get_fps()

    def close(self):
        self.is_open = False
        pygame.quit()
