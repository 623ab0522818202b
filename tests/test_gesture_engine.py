"""Tests for HandLandmarkSession with a mock camera and detector."""

import numpy as np
import pytest

from core.errors import GestureUnavailableError
from core.gesture_engine import HandLandmarkSession, LandmarkSample
from core.landmarks import LandmarkFrame
from tests.conftest import make_hand
from ui.settings import GestureSettings


class MockCapture:
    def __init__(self, opened=True, frames=None):
        self.opened = opened
        self.frames = list(frames) if frames is not None else None
        self.release_count = 0

    def isOpened(self):
        return self.opened

    def read(self):
        if self.frames is None:
            return True, np.zeros((240, 320, 3), dtype=np.uint8)
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.release_count += 1


class MockDetector:
    def __init__(self, hands=None):
        self.hands = list(hands or [])
        self.timestamps = []
        self.closed = False

    def detect(self, frame, timestamp_ms, timestamp):
        self.timestamps.append(timestamp_ms)
        hand = self.hands.pop(0) if self.hands else None
        if hand is None:
            return None
        return LandmarkFrame(hand, timestamp)

    def close(self):
        self.closed = True


def _session(capture=None, detector=None):
    return HandLandmarkSession(GestureSettings(), capture=capture or MockCapture(),
                               detector=detector or MockDetector())


class TestSessionOpen:
    def test_camera_not_opened(self):
        capture = MockCapture(opened=False)
        with pytest.raises(GestureUnavailableError):
            HandLandmarkSession(GestureSettings(), capture=capture, detector=MockDetector())
        assert capture.release_count == 1

    def test_unknown_event(self):
        session = _session()
        with pytest.raises(ValueError):
            session.on('wave', lambda sample: None)


class TestSessionRead:
    def test_frame_and_hand_events(self):
        hand = make_hand(1.0)
        session = _session(detector=MockDetector([None, hand, hand, None]))
        events = []
        for name in HandLandmarkSession.EVENTS:
            session.on(name, lambda sample, name=name: events.append(name))

        for t in range(4):
            session.read(now=float(t))

        assert events == [
            'frame',
            'frame', 'hand_found',
            'frame',
            'frame', 'hand_lost',
        ]

    def test_sample_contents(self):
        session = _session(detector=MockDetector([make_hand(1.0)]))
        sample = session.read(now=3.0)

        assert sample.hand_detected
        assert sample.timestamp == 3.0
        assert sample.image.shape == (240, 320, 3)
        assert session.last_sample is sample

    def test_no_camera_frame(self):
        session = _session(capture=MockCapture(frames=[]))
        calls = []
        session.on('frame', calls.append)

        sample = session.read(now=1.0)

        assert sample.image is None
        assert not sample.hand_detected
        assert calls == []

    def test_timestamps_strictly_increase(self):
        detector = MockDetector()
        session = _session(detector=detector)
        for now in (1.0, 1.0, 0.5, 2.0):
            session.read(now=now)
        assert all(b > a for a, b in zip(detector.timestamps, detector.timestamps[1:]))


class TestSessionClose:
    def test_release_exactly_once(self):
        capture = MockCapture()
        detector = MockDetector()
        session = _session(capture, detector)

        session.close()
        session.close()

        assert capture.release_count == 1
        assert detector.closed
        assert session.closed

    def test_no_callbacks_after_close(self):
        session = _session(detector=MockDetector([make_hand(1.0)]))
        calls = []
        session.on('frame', calls.append)
        session.on('hand_found', calls.append)

        session.close()
        sample = session.read(now=1.0)

        assert calls == []
        assert sample == LandmarkSample()

    def test_context_manager(self):
        capture = MockCapture()
        with _session(capture) as session:
            session.read(now=0.0)
        assert capture.release_count == 1

    def test_context_manager_releases_on_error(self):
        capture = MockCapture()
        with pytest.raises(RuntimeError):
            with _session(capture):
                raise RuntimeError("boom")
        assert capture.release_count == 1


class TestPip:
    def test_pip_drawn_into_corner(self):
        white = np.full((240, 320, 3), 255, dtype=np.uint8)
        session = _session(capture=MockCapture(frames=[white]),
                           detector=MockDetector([make_hand(1.0)]))
        session.read(now=0.0)

        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        session.render_pip(frame, pip_width=160, pip_height=120)

        assert frame[480 - 10 - 60, 640 - 10 - 80].any()
        assert not frame[0:100, 0:100].any()

    def test_pip_without_image(self):
        session = _session()
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        session.render_pip(frame)
        assert not frame.any()
