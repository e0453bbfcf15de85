"""Frame alignment tracking and auto-capture debounce.

AlignmentTracker turns a per-frame face bounding box into a capture
decision. It counts consecutive aligned *analyzed* frames (the caller
throttles the analysis rate) and walks an explicit state machine:

    SEARCHING -> ALIGNING -> COUNTDOWN(3) -> COUNTDOWN(2) -> COUNTDOWN(1)
              -> TRIGGERED -> SEARCHING

Any misaligned frame drops straight back to SEARCHING.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from maneframe.config import AlignmentConfig
from maneframe.geometry import is_aligned
from maneframe.types import AlignmentState, BoundingBox, CapturePhase, CaptureTrigger

logger = logging.getLogger(__name__)

TriggerListener = Callable[[CaptureTrigger], None]


class AlignmentTracker:
    """Debounces face alignment into a single capture trigger.

    Not thread-safe: observe() must be called from a single producer.

    Args:
        config: Alignment tolerances and frame-count thresholds.
        on_capture: Optional listener called once per CaptureTrigger.

    Example:
        >>> tracker = AlignmentTracker(on_capture=lambda t: camera.shoot())
        >>> state = tracker.observe(box, 1280, 720, now_ms)
        >>> if state.countdown_value:
        ...     show_countdown(state.countdown_value)
    """

    def __init__(
        self,
        config: Optional[AlignmentConfig] = None,
        on_capture: Optional[TriggerListener] = None,
    ):
        self.config = config or AlignmentConfig()
        self._listeners: List[TriggerListener] = []
        if on_capture is not None:
            self._listeners.append(on_capture)
        self._state = AlignmentState()
        self._capture_count = 0

    @property
    def state(self) -> AlignmentState:
        return self._state

    @property
    def capture_count(self) -> int:
        """Number of triggers emitted since construction."""
        return self._capture_count

    def add_listener(self, listener: TriggerListener) -> None:
        self._listeners.append(listener)

    def observe(
        self,
        box: Optional[BoundingBox],
        frame_width: int,
        frame_height: int,
        now_ms: float,
    ) -> AlignmentState:
        """Feed one analyzed frame.

        Args:
            box: First detected face box in frame pixels, or None.
            frame_width: Frame width in pixels.
            frame_height: Frame height in pixels.
            now_ms: Monotonic timestamp of the frame.

        Returns:
            The new state. When the frame dimensions are not positive the
            call is ignored and the previous state is returned.
        """
        if frame_width <= 0 or frame_height <= 0:
            logger.debug("Ignoring frame with size %sx%s", frame_width, frame_height)
            return self._state

        aligned = box is not None and is_aligned(box, frame_width, frame_height, self.config)
        prev = self._state
        self._state = self._transition(prev, aligned)

        if self._state.phase is not prev.phase:
            logger.debug(
                "alignment %s -> %s (frames=%d, countdown=%s)",
                prev.phase.value, self._state.phase.value,
                self._state.consecutive_aligned_frames, self._state.countdown_value,
            )

        if self._state.triggered:
            self._capture_count += 1
            trigger = CaptureTrigger(t_ms=now_ms, capture_index=self._capture_count)
            logger.info("Capture triggered (#%d at %.0f ms)", trigger.capture_index, now_ms)
            for listener in self._listeners:
                listener(trigger)

        return self._state

    def reset(self) -> None:
        """Clear all counters, e.g. when the user retakes the photo."""
        self._state = AlignmentState()

    def _transition(self, prev: AlignmentState, aligned: bool) -> AlignmentState:
        if not aligned:
            return AlignmentState()

        cfg = self.config
        count = prev.consecutive_aligned_frames + 1

        if count >= cfg.trigger_frames:
            # Re-arm: the next aligned frame starts a fresh episode
            return AlignmentState(
                aligned=True,
                consecutive_aligned_frames=0,
                phase=CapturePhase.TRIGGERED,
            )

        if count < cfg.confirm_frames:
            return AlignmentState(
                aligned=True,
                consecutive_aligned_frames=count,
                phase=CapturePhase.ALIGNING,
            )

        since_confirm = count - cfg.confirm_frames
        value = cfg.countdown_from - since_confirm // cfg.countdown_step_frames
        tick = value if since_confirm % cfg.countdown_step_frames == 0 else None
        return AlignmentState(
            aligned=True,
            consecutive_aligned_frames=count,
            countdown_value=value,
            countdown_tick=tick,
            phase=CapturePhase.COUNTDOWN,
        )


__all__ = ["AlignmentTracker", "TriggerListener"]
