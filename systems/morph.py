"""
Morph State
===========
The single authority over which arrangement the scene is heading to.

Gestures and the UI toggle both go through MorphController, so there is
exactly one writer. Animators only read current().
"""

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class MorphState(Enum):
    """Target arrangement of every population."""
    SCATTERED = "SCATTERED"
    ASSEMBLED = "ASSEMBLED"

    @property
    def other(self) -> 'MorphState':
        return MorphState.ASSEMBLED if self is MorphState.SCATTERED else MorphState.SCATTERED


StateListener = Callable[[MorphState, str], None]


class MorphController:
    """
    Holds the authoritative MorphState.

    State is replaced as a whole value, never patched in place, so readers
    on other loops always see a consistent enum.
    """

    def __init__(self, initial: MorphState = MorphState.SCATTERED):
        self._state = initial
        self._requested_at = 0.0
        self._listeners: List[StateListener] = []

    def current(self) -> MorphState:
        return self._state

    @property
    def requested_at(self) -> float:
        """Timestamp of the last accepted change (0.0 before any)."""
        return self._requested_at

    def on_change(self, callback: StateListener):
        """
        Register a callback for state changes.

        Called as callback(new_state, source) after every accepted change.
        """
        self._listeners.append(callback)

    def request_transition(self, target: MorphState, now: Optional[float] = None,
                           source: str = "api") -> bool:
        """
        Move to `target`. Returns True if the state changed.

        Requesting the state that is already active is a no-op.
        """
        if target is self._state:
            return False

        stamp = time.monotonic() if now is None else float(now)
        # requested_at only moves forward, even if callers pass stale clocks
        self._requested_at = max(stamp, self._requested_at)
        previous = self._state
        self._state = target

        logger.info("Morph %s -> %s (%s)", previous.value, target.value, source)
        for callback in self._listeners:
            callback(target, source)
        return True

    def toggle(self, now: Optional[float] = None, source: str = "toggle") -> MorphState:
        """Flip between SCATTERED and ASSEMBLED. Returns the new state."""
        self.request_transition(self._state.other, now=now, source=source)
        return self._state
