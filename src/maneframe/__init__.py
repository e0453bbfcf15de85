"""maneframe - Guided selfie capture and hair edit-mask synthesis.

Quick Start:
    >>> from maneframe import AlignmentTracker, BoundingBox
    >>> tracker = AlignmentTracker()
    >>> state = tracker.observe(BoundingBox(390, 210, 500, 300), 1280, 720, now_ms)
    >>> state.phase, state.countdown_value

Edit mask:
    >>> from maneframe import EditMaskSynthesizer
    >>> mask = EditMaskSynthesizer().synthesize(photo, 1024, category_mask)
    >>> mask.mode
    'segmentation'
"""

from maneframe.alignment import AlignmentTracker
from maneframe.config import AlignmentConfig, MaskConfig
from maneframe.errors import (
    BackendNotInitializedError,
    ManeframeError,
    ModelDownloadError,
    PhotoDecodeError,
)
from maneframe.mask import EditMaskSynthesizer, submit_synthesis, synthesize
from maneframe.session import CaptureSession
from maneframe.types import (
    AlignmentState,
    BoundingBox,
    CapturePhase,
    CaptureTrigger,
    EditMask,
    Frame,
    PersonBounds,
)

__version__ = "0.1.0"

__all__ = [
    # Alignment
    "AlignmentTracker",
    "AlignmentConfig",
    "AlignmentState",
    "CapturePhase",
    "CaptureTrigger",
    "BoundingBox",
    # Mask
    "EditMaskSynthesizer",
    "MaskConfig",
    "EditMask",
    "PersonBounds",
    "synthesize",
    "submit_synthesis",
    # Capture loop
    "CaptureSession",
    "Frame",
    # Errors
    "ManeframeError",
    "PhotoDecodeError",
    "BackendNotInitializedError",
    "ModelDownloadError",
]
