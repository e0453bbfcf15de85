"""Detection and segmentation backends.

MediaPipe implementations are imported lazily so the core works without
the ``mediapipe`` extra installed.
"""

from maneframe.backends.base import DetectedFace, FaceDetectionBackend, SegmentationBackend

__all__ = [
    "DetectedFace",
    "FaceDetectionBackend",
    "SegmentationBackend",
]
