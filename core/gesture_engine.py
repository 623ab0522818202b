"""
Arbor Hand Landmark Session
===========================
Camera capture and MediaPipe hand landmark inference.

Usage:
    from core.gesture_engine import HandLandmarkSession

    with HandLandmarkSession(settings.gesture) as session:
        sample = session.read()
        if sample.landmarks is not None:
            # 21 normalized keypoints of one hand
            ...

The session is a scoped resource: the camera and the model are released
on every exit path, and no callback fires after close().
"""

import logging
import os
import time
import urllib.request
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import cv2
import numpy as np

from core.errors import GestureUnavailableError
from core.landmarks import HAND_CONNECTIONS, LandmarkFrame

logger = logging.getLogger(__name__)


# =====================
# SAMPLE
# =====================
@dataclass(frozen=True)
class LandmarkSample:
    """Result of one capture + inference step."""
    landmarks: Optional[LandmarkFrame] = None
    image: Optional[np.ndarray] = None    # BGR camera frame, unmirrored
    timestamp: float = 0.0

    @property
    def hand_detected(self) -> bool:
        return self.landmarks is not None


# =====================
# INTERNAL COMPONENTS
# =====================
class _HandDetector:
    """MediaPipe HandLandmarker in VIDEO mode, one hand."""

    def __init__(self, settings):
        try:
            import mediapipe as mp
            from mediapipe.tasks import python
            from mediapipe.tasks.python import vision
        except ImportError as e:
            raise GestureUnavailableError(f"mediapipe is not available: {e}") from e

        self._mp = mp
        model_path = settings.model_path

        if not os.path.exists(model_path):
            logger.info("Downloading hand landmarker model to %s", model_path)
            try:
                urllib.request.urlretrieve(settings.model_url, model_path)
            except OSError as e:
                raise GestureUnavailableError(f"cannot download hand model: {e}") from e

        try:
            self.detector = vision.HandLandmarker.create_from_options(
                vision.HandLandmarkerOptions(
                    base_options=python.BaseOptions(model_asset_path=model_path),
                    running_mode=vision.RunningMode.VIDEO,
                    num_hands=1,
                    min_hand_detection_confidence=settings.min_detection_confidence,
                    min_tracking_confidence=settings.min_tracking_confidence
                )
            )
        except (RuntimeError, ValueError) as e:
            raise GestureUnavailableError(f"cannot load hand model {model_path}: {e}") from e

    def detect(self, frame: np.ndarray, timestamp_ms: int, timestamp: float) -> Optional[LandmarkFrame]:
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=rgb_frame)
        results = self.detector.detect_for_video(mp_image, timestamp_ms)

        if not results.hand_landmarks:
            return None

        label = None
        if results.handedness:
            label = results.handedness[0][0].category_name
        return LandmarkFrame.from_landmarks(results.hand_landmarks[0], timestamp, label)

    def close(self):
        self.detector.close()


# =====================
# SESSION
# =====================
class HandLandmarkSession:
    """
    Owns the camera and the hand model for one session.

    Opening fails with GestureUnavailableError if either cannot be
    acquired; anything acquired so far is released first.

    `capture` and `detector` can be injected (anything with the
    cv2.VideoCapture read/isOpened/release methods, and anything with
    detect/close) so the session runs without hardware.
    """

    EVENTS = ('frame', 'hand_found', 'hand_lost')

    def __init__(self, settings, capture=None, detector=None):
        self.settings = settings
        self._closed = False
        self._hand_present = False
        self._last_timestamp_ms = -1
        self.last_sample = LandmarkSample()
        self._callbacks: Dict[str, List[Callable]] = {event: [] for event in self.EVENTS}

        if capture is None:
            capture = cv2.VideoCapture(settings.camera_index)
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, settings.camera_width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.camera_height)
        self.cap = capture

        if not self.cap.isOpened():
            self.cap.release()
            raise GestureUnavailableError(f"Cannot open camera {settings.camera_index}")

        try:
            self._detector = detector if detector is not None else _HandDetector(settings)
        except GestureUnavailableError:
            self.cap.release()
            raise

        logger.info("Hand landmark session opened (camera %s)", settings.camera_index)

    @property
    def closed(self) -> bool:
        return self._closed

    def on(self, event: str, callback: Callable):
        """
        Register a callback for an event.

        Events:
            - 'frame': every read(), called with the LandmarkSample
            - 'hand_found': a hand appears after being absent
            - 'hand_lost': the hand disappears
        """
        if event not in self._callbacks:
            raise ValueError(f"Unknown event '{event}'")
        self._callbacks[event].append(callback)

    def _emit(self, event: str, sample: LandmarkSample):
        for callback in self._callbacks.get(event, []):
            callback(sample)

    def _next_timestamp_ms(self, now: float) -> int:
        # VIDEO mode requires strictly increasing timestamps
        stamp = max(int(now * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = stamp
        return stamp

    def read(self, now: Optional[float] = None) -> LandmarkSample:
        """
        Capture one camera frame and run hand detection on it.

        Returns an empty sample when closed or when the camera has no new
        frame.
        """
        if self._closed:
            return LandmarkSample()

        now = time.monotonic() if now is None else now
        ret, frame = self.cap.read()
        if not ret:
            return LandmarkSample(timestamp=now)

        landmarks = self._detector.detect(frame, self._next_timestamp_ms(now), now)
        sample = LandmarkSample(landmarks=landmarks, image=frame, timestamp=now)
        self.last_sample = sample

        was_present = self._hand_present
        self._hand_present = sample.hand_detected

        self._emit('frame', sample)
        if not was_present and self._hand_present:
            self._emit('hand_found', sample)
        elif was_present and not self._hand_present:
            self._emit('hand_lost', sample)

        return sample

    def render_pip(self, game_frame: np.ndarray, color=(200, 200, 200),
                   pip_width: int = 180, pip_height: int = 135,
                   position: str = 'bottom-right', padding: int = 10) -> np.ndarray:
        """
        Render the last camera frame as a mirrored picture-in-picture.

        The hand skeleton is drawn in `color` (the HUD passes the current
        gesture color). Modifies game_frame in place and returns it.
        """
        sample = self.last_sample
        if sample.image is None:
            return game_frame

        pip_frame = sample.image.copy()
        if sample.landmarks is not None:
            draw_skeleton(pip_frame, sample.landmarks, color)

        # Mirror after drawing so the preview reads like a mirror
        pip_resized = cv2.resize(cv2.flip(pip_frame, 1), (pip_width, pip_height))

        h, w = game_frame.shape[:2]
        if position == 'bottom-right':
            x = w - pip_width - padding
            y = h - pip_height - padding
        elif position == 'bottom-left':
            x = padding
            y = h - pip_height - padding
        elif position == 'top-right':
            x = w - pip_width - padding
            y = padding
        else:  # top-left
            x = padding
            y = padding

        cv2.rectangle(game_frame, (x - 2, y - 2),
                      (x + pip_width + 2, y + pip_height + 2),
                      (80, 80, 80), 2)
        game_frame[y:y + pip_height, x:x + pip_width] = pip_resized

        return game_frame

    def close(self):
        """Release the model and the camera. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        for callbacks in self._callbacks.values():
            callbacks.clear()

        try:
            self._detector.close()
        finally:
            self.cap.release()
        logger.info("Hand landmark session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# =====================
# UTILITY FUNCTIONS
# =====================
def draw_skeleton(frame: np.ndarray, landmarks: LandmarkFrame, color=(0, 255, 0)):
    """Draw hand skeleton on frame."""
    h, w = frame.shape[:2]
    pts = landmarks.points

    for start, end in HAND_CONNECTIONS:
        x1, y1 = int(pts[start, 0] * w), int(pts[start, 1] * h)
        x2, y2 = int(pts[end, 0] * w), int(pts[end, 1] * h)
        cv2.line(frame, (x1, y1), (x2, y2), color, 2)

    for x, y in pts[:, :2]:
        cv2.circle(frame, (int(x * w), int(y * h)), 3, color, -1)
