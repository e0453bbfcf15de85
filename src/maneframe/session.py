"""Camera-side capture loop driving the alignment tracker.

CaptureSession owns the polling loop: it throttles frames to the
analysis rate, runs the face detector, feeds the first detection to the
AlignmentTracker, and grabs the photo when the tracker triggers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Callable, Optional

import cv2
import numpy as np

from maneframe.alignment import AlignmentTracker
from maneframe.backends.base import FaceDetectionBackend
from maneframe.types import AlignmentState, Frame

logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_FPS = 10.0

# Decoder timestamps jitter; keep boundary frames when sampling down.
_PTS_TOLERANCE_NS = 1_000_000  # 1 ms


class CaptureSession:
    """Guided auto-capture over a stream of frames.

    Args:
        detector: Initialized face detection backend.
        tracker: Alignment tracker (a default one is created if None).
        analysis_fps: Max analyzed frames per second (0 = every frame).
        mirror: Flip captured photos horizontally, matching a selfie preview.

    Example:
        >>> session = CaptureSession(detector)
        >>> photo = session.run(frames)
        >>> if photo is None:
        ...     print("stream ended before capture")
    """

    def __init__(
        self,
        detector: FaceDetectionBackend,
        tracker: Optional[AlignmentTracker] = None,
        analysis_fps: float = DEFAULT_ANALYSIS_FPS,
        mirror: bool = True,
    ):
        self._detector = detector
        self.tracker = tracker or AlignmentTracker()
        self._mirror = mirror
        self._frame_interval_ns = int(1e9 / analysis_fps) if analysis_fps > 0 else 0
        self._next_frame_time_ns = 0
        self._last_t_src_ns: Optional[int] = None
        self._photo: Optional[np.ndarray] = None
        self._analyzed = 0

    @property
    def captured(self) -> bool:
        return self._photo is not None

    @property
    def analyzed_frames(self) -> int:
        return self._analyzed

    def feed(self, frame: Frame) -> Optional[AlignmentState]:
        """Analyze one frame if it is due.

        Returns:
            The tracker state, or None when the frame was skipped (throttled,
            repeated timestamp, or a photo is already waiting for review).
        """
        if self._photo is not None:
            return None

        t_ns = frame.t_src_ns
        if self._last_t_src_ns is not None and t_ns <= self._last_t_src_ns:
            return None

        if self._frame_interval_ns > 0:
            if t_ns + _PTS_TOLERANCE_NS < self._next_frame_time_ns:
                return None
            self._next_frame_time_ns = t_ns + self._frame_interval_ns
        self._last_t_src_ns = t_ns

        faces = self._detector.detect(frame.data, frame.t_ms)
        box = faces[0].bbox if faces else None
        self._analyzed += 1

        state = self.tracker.observe(box, frame.width, frame.height, frame.t_ms)
        if state.triggered:
            self._photo = self._grab(frame)
            logger.info("Photo captured from frame %d", frame.frame_id)
        return state

    def capture_now(self, frame: Frame) -> np.ndarray:
        """Manual shutter: capture ``frame`` regardless of alignment."""
        self._photo = self._grab(frame)
        logger.info("Manual capture from frame %d", frame.frame_id)
        return self._photo

    def retake(self) -> None:
        """Discard the captured photo and restart alignment from scratch."""
        self._photo = None
        self._next_frame_time_ns = 0
        self._last_t_src_ns = None
        self.tracker.reset()

    def confirm(self) -> Optional[np.ndarray]:
        """Return the captured photo, or None if nothing was captured."""
        return self._photo

    def run(
        self,
        frames: Iterable[Frame],
        on_state: Optional[Callable[[AlignmentState], None]] = None,
    ) -> Optional[np.ndarray]:
        """Feed frames until a photo is captured or the stream ends."""
        for frame in frames:
            state = self.feed(frame)
            if state is not None and on_state is not None:
                on_state(state)
            if self.captured:
                return self._photo
        return None

    def _grab(self, frame: Frame) -> np.ndarray:
        if self._mirror:
            return cv2.flip(frame.data, 1)
        return frame.data.copy()


__all__ = ["CaptureSession", "DEFAULT_ANALYSIS_FPS"]
