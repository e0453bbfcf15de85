"""Mask command: build the hair edit mask for a photo file."""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from maneframe.codec import decode_photo, encode_png, mask_to_rgba
from maneframe.config import MaskConfig
from maneframe.errors import PhotoDecodeError
from maneframe.mask import EditMaskSynthesizer, normalize_canvas
from maneframe.types import EditMask

logger = logging.getLogger(__name__)

# BGR tint for the editable region in previews
_PREVIEW_COLOR = np.array([80, 80, 255], dtype=np.float32)


def run_mask(args) -> int:
    """Synthesize and write the edit mask (and optionally the canvas image)."""
    photo_path = Path(args.path)
    if not photo_path.is_file():
        logger.error("Photo not found: %s", photo_path)
        return 2

    config = MaskConfig(canvas_size=args.canvas_size)
    synthesizer = EditMaskSynthesizer(config)

    try:
        image = decode_photo(photo_path.read_bytes())
    except PhotoDecodeError as e:
        logger.error("%s: %s", photo_path, e)
        return 1

    segmentation = None
    if args.segment:
        segmentation = _segment(normalize_canvas(image, config.canvas_size), args.device)

    mask = synthesizer.synthesize(image, config.canvas_size, segmentation)
    logger.info("Built %dx%d mask using %s path", mask.size, mask.size, mask.mode)

    _write(Path(args.output), encode_png(mask_to_rgba(mask.alpha)))
    if args.image_out:
        _write(Path(args.image_out), encode_png(mask.canvas))
    if args.preview:
        _write(Path(args.preview), encode_png(render_preview(mask)))
    return 0


def render_preview(mask: EditMask, strength: float = 0.6) -> np.ndarray:
    """Tint the editable region of the canvas for a quick visual check."""
    weight = (255.0 - mask.alpha.astype(np.float32)) / 255.0 * strength
    canvas = mask.canvas.astype(np.float32)
    blended = canvas * (1.0 - weight[:, :, np.newaxis]) + _PREVIEW_COLOR * weight[:, :, np.newaxis]
    return np.clip(blended, 0, 255).astype(np.uint8)


def _segment(canvas: np.ndarray, device: str) -> Optional[np.ndarray]:
    """Run MediaPipe segmentation; any failure degrades to the fallback mask."""
    from maneframe.backends.mediapipe_tasks import MediaPipeSegmenterBackend

    backend = MediaPipeSegmenterBackend()
    try:
        backend.initialize(device)
        return backend.segment(canvas)
    except Exception as e:
        logger.warning("Segmentation unavailable, using fallback mask: %s", e)
        return None
    finally:
        backend.cleanup()


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Wrote %s", path)
