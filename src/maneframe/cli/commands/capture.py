"""Capture command: guided auto-capture from a camera or video file."""

import logging
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Optional

import cv2

from maneframe.backends.mediapipe_tasks import MediaPipeFaceBackend
from maneframe.session import CaptureSession
from maneframe.types import AlignmentState, CapturePhase, Frame

logger = logging.getLogger(__name__)


def run_capture(args) -> int:
    """Run the alignment loop until a photo is captured, then save it."""
    source = int(args.camera) if str(args.camera).isdigit() else args.camera
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        logger.error("Cannot open camera/video: %s", args.camera)
        return 2

    detector = MediaPipeFaceBackend(min_detection_confidence=args.min_confidence)
    try:
        detector.initialize(args.device)
        session = CaptureSession(
            detector,
            analysis_fps=args.fps,
            mirror=not args.no_mirror,
        )
        reporter = _StateReporter()
        live = isinstance(source, int)
        photo = session.run(read_frames(cap, live=live, max_frames=args.max_frames), on_state=reporter)
    finally:
        detector.cleanup()
        cap.release()

    if photo is None:
        logger.warning("Stream ended without a capture (%d frames analyzed)", session.analyzed_frames)
        return 1

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output), photo):
        logger.error("Failed to write %s", output)
        return 1
    logger.info("Saved photo to %s", output)
    return 0


def read_frames(cap, live: bool = True, max_frames: Optional[int] = None) -> Iterator[Frame]:
    """Yield Frames from a cv2.VideoCapture.

    Live sources are stamped with the monotonic clock; files use their
    decoder position so throttling follows media time.
    """
    frame_id = 0
    while max_frames is None or frame_id < max_frames:
        ok, image = cap.read()
        if not ok:
            return
        if live:
            t_ns = time.monotonic_ns()
        else:
            t_ns = int(cap.get(cv2.CAP_PROP_POS_MSEC) * 1_000_000)
        yield Frame.from_array(image, frame_id=frame_id, t_src_ns=t_ns)
        frame_id += 1


class _StateReporter:
    """Logs phase changes and countdown ticks."""

    def __init__(self):
        self._phase: Optional[CapturePhase] = None

    def __call__(self, state: AlignmentState) -> None:
        if state.countdown_tick is not None:
            logger.info("Hold still... %d", state.countdown_tick)
        if state.phase is self._phase:
            return
        self._phase = state.phase
        if state.phase is CapturePhase.SEARCHING:
            logger.info("Align your face in the frame")
        elif state.phase is CapturePhase.ALIGNING:
            logger.info("Face aligned")
