"""Geometry and gradient helpers shared by the tracker and mask synthesizer."""

from __future__ import annotations

import math

import numpy as np

from maneframe.config import AlignmentConfig
from maneframe.types import BoundingBox


def is_aligned(
    box: BoundingBox,
    frame_width: float,
    frame_height: float,
    config: AlignmentConfig,
) -> bool:
    """Return True if the box is centered and sized within tolerance.

    Center test: ``|cx - W/2| < tol*W`` and ``|cy - H/2| < tol*H``.
    Size test: ``min < box.width / W < max`` (open interval).
    """
    if frame_width <= 0 or frame_height <= 0:
        return False

    cx, cy = box.center
    centered_x = abs(cx - frame_width / 2) < config.center_tolerance * frame_width
    centered_y = abs(cy - frame_height / 2) < config.center_tolerance * frame_height

    ratio = box.width / frame_width
    good_size = config.size_ratio_min < ratio < config.size_ratio_max

    return centered_x and centered_y and good_size


def cover_fit_rect(src_w: int, src_h: int, size: int) -> tuple[int, int, int, int]:
    """Compute the scaled size and crop offset for a "cover" fit.

    The source is scaled so that it fills a ``size``-square, then the
    overflow is cropped symmetrically.

    Returns:
        (scaled_w, scaled_h, crop_x, crop_y). ``scaled_w`` and ``scaled_h``
        are both >= size.
    """
    scale = max(size / src_w, size / src_h)
    scaled_w = max(size, int(math.ceil(src_w * scale - 1e-6)))
    scaled_h = max(size, int(math.ceil(src_h * scale - 1e-6)))
    crop_x = (scaled_w - size) // 2
    crop_y = (scaled_h - size) // 2
    return scaled_w, scaled_h, crop_x, crop_y


def linear_ramp(positions: np.ndarray, start: float, end: float) -> np.ndarray:
    """Map positions to alpha: 0 at or before ``start``, 255 at or after ``end``.

    Linear in between. ``start == end`` degenerates to a hard step at
    ``start``.

    Returns:
        float64 array of the same shape as ``positions`` in [0, 255].
    """
    positions = np.asarray(positions, dtype=np.float64)
    span = end - start
    if span <= 0:
        return np.where(positions < start, 0.0, 255.0)
    return np.clip((positions - start) / span, 0.0, 1.0) * 255.0


__all__ = ["is_aligned", "cover_fit_rect", "linear_ramp"]
