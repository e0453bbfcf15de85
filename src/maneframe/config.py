"""Threshold configuration for alignment tracking and mask synthesis."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AlignmentConfig:
    """Alignment test and auto-capture timing.

    Timing is counted in analyzed frames, not seconds. At the intended
    10 Hz analysis rate the defaults give 3 s of confirmation followed by
    a 3-2-1 countdown of one second per step.
    """

    # Center offset tolerance as a fraction of frame width/height
    center_tolerance: float = 0.15
    # Face width / frame width must lie strictly inside (min, max)
    size_ratio_min: float = 0.2
    size_ratio_max: float = 0.8

    confirm_frames: int = 30          # aligned frames before countdown starts
    countdown_from: int = 3
    countdown_step_frames: int = 10   # frames per countdown step

    @property
    def trigger_frames(self) -> int:
        """Consecutive aligned frames at which capture fires."""
        return self.confirm_frames + self.countdown_from * self.countdown_step_frames

    def __post_init__(self):
        if self.confirm_frames < 1 or self.countdown_step_frames < 1:
            raise ValueError("confirm_frames and countdown_step_frames must be >= 1")
        if self.countdown_from < 1:
            raise ValueError("countdown_from must be >= 1")
        if not 0.0 <= self.size_ratio_min < self.size_ratio_max:
            raise ValueError("size_ratio_min must be below size_ratio_max")


@dataclass(frozen=True)
class MaskConfig:
    """Edit-mask heuristics.

    The hair fraction and fallback breakpoints assume a front-facing,
    roughly centered portrait.
    """

    canvas_size: int = 1024
    person_label: int = 1

    # Top fraction of the person's vertical extent treated as hair
    hair_fraction: float = 0.45
    # Alpha ramp height in pixels ending at the hair boundary
    feather_px: float = 50.0

    # Fallback vertical gradient, fractions of canvas height
    fallback_edit_end: float = 0.40
    fallback_keep_start: float = 0.70

    def __post_init__(self):
        if self.canvas_size < 1:
            raise ValueError("canvas_size must be >= 1")
        if not 0.0 < self.hair_fraction <= 1.0:
            raise ValueError("hair_fraction must be in (0, 1]")
        if self.feather_px < 0:
            raise ValueError("feather_px must be >= 0")
        if not 0.0 <= self.fallback_edit_end <= self.fallback_keep_start <= 1.0:
            raise ValueError("fallback breakpoints must satisfy 0 <= edit_end <= keep_start <= 1")


__all__ = ["AlignmentConfig", "MaskConfig"]
