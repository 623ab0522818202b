"""
Errors
======
Exception types shared across Arbor.
"""


class ConfigError(ValueError):
    """Raised when a setting or population parameter is out of range."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class GestureUnavailableError(RuntimeError):
    """
    Gesture control cannot run for this session.

    Raised once when the camera or the hand landmark model cannot be
    opened. The morph animation keeps working from the explicit toggle.
    """
