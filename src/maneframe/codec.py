"""Photo decoding and PNG export for the generative editing call.

Photos arrive either as BGR arrays (from the capture session) or as
encoded bytes / ``data:image/...;base64,`` URLs (from the app layer).
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING, Optional, Union

import cv2
import numpy as np

from maneframe.errors import PhotoDecodeError

if TYPE_CHECKING:
    from maneframe.mask.synthesizer import EditMaskSynthesizer

PhotoInput = Union[np.ndarray, bytes, bytearray, str]


def decode_photo(data: PhotoInput) -> np.ndarray:
    """Decode a photo into a BGR (H, W, 3) uint8 array.

    Args:
        data: BGR/gray/BGRA ndarray, encoded image bytes, or a base64
            string (optionally a ``data:`` URL).

    Returns:
        A new BGR uint8 array. Input arrays are copied, never aliased.

    Raises:
        PhotoDecodeError: If the input cannot be decoded or is empty.
    """
    if isinstance(data, np.ndarray):
        return _normalize_array(data)

    if isinstance(data, str):
        payload = data.split(",", 1)[1] if data.startswith("data:") else data
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise PhotoDecodeError(f"Invalid base64 photo data: {e}") from e

    if not isinstance(data, (bytes, bytearray)) or len(data) == 0:
        raise PhotoDecodeError("Photo data is empty")

    buf = np.frombuffer(bytes(data), np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if img is None:
        raise PhotoDecodeError("Failed to decode photo image data")
    return img


def _normalize_array(image: np.ndarray) -> np.ndarray:
    if image.size == 0 or image.ndim not in (2, 3):
        raise PhotoDecodeError(f"Unsupported photo array shape {image.shape}")

    if image.dtype != np.uint8:
        scaled = image.astype(np.float64)
        if np.issubdtype(image.dtype, np.floating) and scaled.max() <= 1.0:
            scaled *= 255.0
        image = np.clip(np.nan_to_num(scaled), 0, 255).astype(np.uint8)

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

    channels = image.shape[2]
    if channels == 3:
        return image.copy()
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    raise PhotoDecodeError(f"Unsupported channel count {channels}")


def encode_png(image: np.ndarray) -> bytes:
    """Encode a BGR, BGRA or grayscale array as PNG bytes."""
    ok, buf = cv2.imencode(".png", image)
    if not ok:
        raise ValueError("Failed to encode PNG")
    return buf.tobytes()


def mask_to_rgba(alpha: np.ndarray) -> np.ndarray:
    """Build the inpainting mask image: black pixels carrying ``alpha``.

    Transparent (alpha 0) pixels are the ones the editor may repaint.

    Returns:
        (H, W, 4) uint8 BGRA.
    """
    h, w = alpha.shape[:2]
    rgba = np.zeros((h, w, 4), dtype=np.uint8)
    rgba[:, :, 3] = alpha
    return rgba


def prepare_edit_inputs(
    photo: PhotoInput,
    canvas_size: int = 1024,
    segmentation: Optional[np.ndarray] = None,
    synthesizer: Optional["EditMaskSynthesizer"] = None,
) -> tuple[bytes, bytes]:
    """Produce the square image and mask PNGs for an inpainting request.

    Returns:
        (image_png, mask_png).
    """
    from maneframe.mask.synthesizer import EditMaskSynthesizer

    synthesizer = synthesizer or EditMaskSynthesizer()
    mask = synthesizer.synthesize(photo, canvas_size, segmentation)
    return encode_png(mask.canvas), encode_png(mask_to_rgba(mask.alpha))


__all__ = [
    "PhotoInput",
    "decode_photo",
    "encode_png",
    "mask_to_rgba",
    "prepare_edit_inputs",
]
