"""Shared data types for capture and mask synthesis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


@dataclass
class Frame:
    """A decoded camera frame.

    Attributes:
        data: BGR image (H, W, 3) uint8.
        frame_id: Sequential frame identifier.
        t_src_ns: Monotonic capture timestamp in nanoseconds.
    """

    data: np.ndarray
    frame_id: int = 0
    t_src_ns: int = 0

    @classmethod
    def from_array(cls, data: np.ndarray, frame_id: int = 0, t_src_ns: int = 0) -> "Frame":
        return cls(data=data, frame_id=frame_id, t_src_ns=t_src_ns)

    @property
    def width(self) -> int:
        return int(self.data.shape[1]) if self.data.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.data.shape[0]) if self.data.ndim >= 2 else 0

    @property
    def t_ms(self) -> float:
        return self.t_src_ns / 1e6


@dataclass(frozen=True)
class BoundingBox:
    """Face bounding box in pixels of the frame it was measured against."""

    origin_x: float
    origin_y: float
    width: float
    height: float

    @classmethod
    def from_xywh(cls, bbox: tuple[float, float, float, float]) -> "BoundingBox":
        x, y, w, h = bbox
        return cls(float(x), float(y), float(w), float(h))

    @property
    def center(self) -> tuple[float, float]:
        return (self.origin_x + self.width / 2, self.origin_y + self.height / 2)

    def as_xywh(self) -> tuple[float, float, float, float]:
        return (self.origin_x, self.origin_y, self.width, self.height)


class CapturePhase(Enum):
    """Auto-capture state machine phases."""

    SEARCHING = "searching"   # no face, or face misaligned
    ALIGNING = "aligning"     # aligned, counting toward confirmation
    COUNTDOWN = "countdown"   # confirmed, visible countdown running
    TRIGGERED = "triggered"   # capture fired on this frame


@dataclass(frozen=True)
class AlignmentState:
    """Per-frame output of AlignmentTracker.observe().

    Attributes:
        aligned: Whether the face in this frame passed the alignment test.
        consecutive_aligned_frames: Aligned analyzed frames in the current episode.
        countdown_value: Number shown to the user while the countdown runs
            (3, 2, 1), None otherwise.
        countdown_tick: Countdown number only on the frame it changed to,
            None on every other frame. Consumers that announce each step
            once (a beep, a spoken number) should read this field rather
            than countdown_value, which stays set for the whole step.
        phase: State machine phase after this frame.
    """

    aligned: bool = False
    consecutive_aligned_frames: int = 0
    countdown_value: Optional[int] = None
    countdown_tick: Optional[int] = None
    phase: CapturePhase = CapturePhase.SEARCHING

    @property
    def triggered(self) -> bool:
        return self.phase is CapturePhase.TRIGGERED


@dataclass(frozen=True)
class CaptureTrigger:
    """One-shot capture event, emitted once per alignment episode."""

    t_ms: float
    capture_index: int


@dataclass(frozen=True)
class PersonBounds:
    """Inclusive pixel extent of person-labelled pixels in a category mask."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def height(self) -> int:
        return self.max_y - self.min_y


@dataclass
class EditMask:
    """Alpha mask for a generative inpainting call.

    Attributes:
        alpha: (S, S) uint8. 0 = editor may repaint, 255 = must preserve.
        canvas: (S, S, 3) BGR cover-fit photo the mask was built against.
        mode: "segmentation" or "fallback".
        person_bounds: Person extent when the segmentation path was used.
    """

    alpha: np.ndarray
    canvas: np.ndarray
    mode: str
    person_bounds: Optional[PersonBounds] = None

    @property
    def size(self) -> int:
        return int(self.alpha.shape[0])


__all__ = [
    "Frame",
    "BoundingBox",
    "CapturePhase",
    "AlignmentState",
    "CaptureTrigger",
    "PersonBounds",
    "EditMask",
]
