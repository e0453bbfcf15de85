"""Shared fixtures for maneframe tests.

All images and segmentations are synthetic, no ML models needed.
"""

import numpy as np
import pytest

from maneframe.backends.base import DetectedFace
from maneframe.types import BoundingBox


class MockFaceDetector:
    """Detector returning a scripted sequence of boxes (None = no face)."""

    def __init__(self, boxes=None, default=None):
        self._boxes = list(boxes or [])
        self._default = default
        self.calls = []
        self.initialized = False

    def initialize(self, device="cpu"):
        self.initialized = True

    def detect(self, image, t_ms=None):
        self.calls.append(t_ms)
        box = self._boxes.pop(0) if self._boxes else self._default
        if box is None:
            return []
        return [DetectedFace(bbox=box, confidence=0.9)]

    def cleanup(self):
        self.initialized = False


@pytest.fixture
def centered_box():
    """Aligned face box for a 1280x720 frame (width ratio 0.3)."""
    return BoundingBox(origin_x=448, origin_y=180, width=384, height=360)


@pytest.fixture
def corner_box():
    """Face box in the top-left corner of a 1280x720 frame."""
    return BoundingBox(origin_x=0, origin_y=0, width=384, height=360)


@pytest.fixture
def portrait_photo():
    """Deterministic 720x1280 BGR photo with a gradient and a bright oval."""
    h, w = 720, 1280
    yy, xx = np.mgrid[0:h, 0:w]
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:, :, 0] = (xx * 255 // (w - 1)).astype(np.uint8)
    img[:, :, 1] = (yy * 255 // (h - 1)).astype(np.uint8)
    oval = ((xx - w / 2) / 200.0) ** 2 + ((yy - h / 2) / 260.0) ** 2 <= 1.0
    img[oval] = (200, 180, 160)
    return img


@pytest.fixture
def make_segmentation():
    """Factory for category masks with a rectangular person region."""
    def _make(size=1024, top=100, bottom=900, left=300, right=700, label=1):
        seg = np.zeros((size, size), dtype=np.uint8)
        seg[top:bottom + 1, left:right + 1] = label
        return seg
    return _make


@pytest.fixture
def mock_detector():
    return MockFaceDetector
