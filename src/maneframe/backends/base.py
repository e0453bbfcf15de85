"""Backend protocols for the detection and segmentation collaborators."""

from dataclasses import dataclass
from typing import List, Optional, Protocol

import numpy as np

from maneframe.types import BoundingBox


@dataclass
class DetectedFace:
    """Result from a face detection backend.

    Attributes:
        bbox: Face box in pixels of the analyzed image.
        confidence: Detection confidence [0, 1].
    """

    bbox: BoundingBox
    confidence: float = 0.0


class FaceDetectionBackend(Protocol):
    """Protocol for face detection backends.

    Implementations should be swappable without changing session logic.
    """

    def initialize(self, device: str = "cpu") -> None:
        """Initialize the backend and load models."""
        ...

    def detect(self, image: np.ndarray, t_ms: Optional[float] = None) -> List[DetectedFace]:
        """Detect faces in a BGR image.

        Args:
            image: BGR image (H, W, 3) uint8.
            t_ms: Monotonic frame timestamp for video-mode detectors.

        Returns:
            Detected faces, best first.
        """
        ...

    def cleanup(self) -> None:
        """Release resources and unload models."""
        ...


class SegmentationBackend(Protocol):
    """Protocol for person/background segmentation backends."""

    def initialize(self, device: str = "cpu") -> None:
        """Initialize the backend and load models."""
        ...

    def segment(self, image: np.ndarray) -> Optional[np.ndarray]:
        """Segment a BGR image.

        Returns:
            (H, W) uint8 category mask (1 = person, 0 = background) at the
            input resolution, or None when the model produced nothing.
        """
        ...

    def cleanup(self) -> None:
        """Release resources and unload models."""
        ...


__all__ = ["DetectedFace", "FaceDetectionBackend", "SegmentationBackend"]
