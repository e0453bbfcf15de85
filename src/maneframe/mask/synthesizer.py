"""Edit mask synthesis for hair inpainting.

EditMaskSynthesizer builds an alpha mask marking where a generative
editor may repaint (alpha 0) and what it must preserve (alpha 255).

Two tiers:

1. Segmentation: the top ``hair_fraction`` of the person's vertical
   extent is editable, with a ``feather_px`` linear ramp ending at the
   hair boundary so the composite has no hard seam. Background and the
   rest of the person are preserved.
2. Fallback (no segmentation, or no person pixels): a fixed vertical
   gradient over the whole canvas, editable at the top and preserved
   at the bottom.

The synthesizer is stateless; one instance may serve concurrent calls.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from typing import Optional

import cv2
import numpy as np

from maneframe.codec import PhotoInput, decode_photo
from maneframe.config import MaskConfig
from maneframe.geometry import cover_fit_rect, linear_ramp
from maneframe.types import EditMask, PersonBounds

logger = logging.getLogger(__name__)

MODE_SEGMENTATION = "segmentation"
MODE_FALLBACK = "fallback"


def normalize_canvas(image: np.ndarray, size: int) -> np.ndarray:
    """Cover-fit a BGR image into a ``size`` x ``size`` square.

    Scales so the image fills the square, then center-crops the overflow.
    """
    src_h, src_w = image.shape[:2]
    scaled_w, _, _, _ = cover_fit_rect(src_w, src_h, size)
    interp = cv2.INTER_AREA if scaled_w < src_w else cv2.INTER_LINEAR
    return _cover_fit(image, size, interp)


def fit_segmentation(labels: np.ndarray, size: int) -> np.ndarray:
    """Map a label image at photo resolution onto the ``size`` canvas.

    Uses the same cover-fit scale and crop as :func:`normalize_canvas`, so
    label pixels stay registered with the photo pixels they describe.
    Nearest-neighbour keeps labels discrete.
    """
    return _cover_fit(labels, size, cv2.INTER_NEAREST)


def _cover_fit(image: np.ndarray, size: int, interpolation: int) -> np.ndarray:
    src_h, src_w = image.shape[:2]
    scaled_w, scaled_h, crop_x, crop_y = cover_fit_rect(src_w, src_h, size)

    if (scaled_w, scaled_h) != (src_w, src_h):
        image = cv2.resize(image, (scaled_w, scaled_h), interpolation=interpolation)

    return np.ascontiguousarray(image[crop_y:crop_y + size, crop_x:crop_x + size])


def find_person_bounds(person: np.ndarray) -> Optional[PersonBounds]:
    """Return the inclusive extent of True pixels, or None if there are none."""
    rows = np.flatnonzero(person.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(person.any(axis=0))
    return PersonBounds(
        min_x=int(cols[0]),
        min_y=int(rows[0]),
        max_x=int(cols[-1]),
        max_y=int(rows[-1]),
    )


class EditMaskSynthesizer:
    """Builds hair edit masks from a photo and optional segmentation.

    Args:
        config: Heuristic constants (hair fraction, feather width,
            fallback breakpoints, default canvas size).

    Example:
        >>> synth = EditMaskSynthesizer()
        >>> mask = synth.synthesize(photo_bgr, 1024, category_mask)
        >>> mask.alpha.shape
        (1024, 1024)
    """

    def __init__(self, config: Optional[MaskConfig] = None):
        self.config = config or MaskConfig()

    def synthesize(
        self,
        photo: PhotoInput,
        canvas_size: Optional[int] = None,
        segmentation: Optional[np.ndarray] = None,
    ) -> EditMask:
        """Build the edit mask for one photo.

        Args:
            photo: BGR array, encoded image bytes, or base64/data URL.
            canvas_size: Square output side. Defaults to config.canvas_size.
            segmentation: Optional (H, W) category labels, either square
                (canvas space) or at the photo's aspect ratio (photo
                space). ``config.person_label`` marks the subject.

        Returns:
            EditMask with a (canvas_size, canvas_size) uint8 alpha.

        Raises:
            PhotoDecodeError: If the photo cannot be decoded. No mask is
                produced in that case.
            ValueError: If canvas_size is not positive.
        """
        size = self.config.canvas_size if canvas_size is None else int(canvas_size)
        if size < 1:
            raise ValueError(f"canvas_size must be >= 1, got {canvas_size}")

        image = decode_photo(photo)
        canvas = normalize_canvas(image, size)

        person = self._person_mask(segmentation, size, image.shape)
        bounds = find_person_bounds(person) if person is not None else None

        if bounds is None:
            if segmentation is None:
                logger.info("No segmentation provided, using fallback gradient mask")
            else:
                logger.info("Segmentation has no person pixels, using fallback gradient mask")
            return EditMask(
                alpha=self.fallback_alpha(size),
                canvas=canvas,
                mode=MODE_FALLBACK,
            )

        logger.debug("Person bounds %s on %dpx canvas", bounds, size)
        return EditMask(
            alpha=self.segmentation_alpha(person, bounds),
            canvas=canvas,
            mode=MODE_SEGMENTATION,
            person_bounds=bounds,
        )

    def segmentation_alpha(self, person: np.ndarray, bounds: PersonBounds) -> np.ndarray:
        """Alpha for the segmentation path.

        Person rows above ``hair_bottom - feather_px`` are 0, the feather
        band ramps to 255 at ``hair_bottom``, everything else is 255.
        """
        cfg = self.config
        hair_bottom = bounds.min_y + cfg.hair_fraction * bounds.height
        rows = np.arange(person.shape[0], dtype=np.float64)
        row_alpha = linear_ramp(rows, hair_bottom - cfg.feather_px, hair_bottom)

        alpha = np.where(person, row_alpha[:, np.newaxis], 255.0)
        return np.rint(alpha).astype(np.uint8)

    def fallback_alpha(self, size: int) -> np.ndarray:
        """Position-only vertical gradient over a ``size`` square."""
        cfg = self.config
        # Sample at pixel centers
        positions = (np.arange(size, dtype=np.float64) + 0.5) / size
        row_alpha = np.rint(
            linear_ramp(positions, cfg.fallback_edit_end, cfg.fallback_keep_start)
        ).astype(np.uint8)
        return np.ascontiguousarray(np.broadcast_to(row_alpha[:, np.newaxis], (size, size)))

    def _person_mask(
        self,
        segmentation: Optional[np.ndarray],
        size: int,
        photo_shape: tuple[int, ...],
    ) -> Optional[np.ndarray]:
        """Person pixels on the canvas grid, or None if unusable.

        Accepts labels in canvas space (any square resolution) or in photo
        space (the photo's aspect ratio). Both are cover-fit onto the
        canvas like the photo itself.
        """
        if segmentation is None:
            return None

        labels = np.asarray(segmentation)
        if labels.ndim == 3 and labels.shape[2] == 1:
            labels = labels[:, :, 0]
        if labels.ndim != 2 or labels.size == 0:
            logger.warning("Ignoring segmentation with shape %s", labels.shape)
            return None

        person = (labels == self.config.person_label).astype(np.uint8)
        if person.shape == (size, size):
            return person.astype(bool)

        seg_h, seg_w = person.shape
        photo_h, photo_w = photo_shape[:2]
        square = seg_h == seg_w
        photo_aspect = abs(seg_w * photo_h - seg_h * photo_w) <= 0.01 * seg_h * photo_w
        if not (square or photo_aspect):
            logger.warning(
                "Segmentation shape %s matches neither the %dx%d canvas nor the "
                "%dx%d photo, ignoring it",
                person.shape, size, size, photo_w, photo_h,
            )
            return None

        logger.debug(
            "Fitting %s segmentation onto %dx%d canvas (%s space)",
            person.shape, size, size, "canvas" if square else "photo",
        )
        return fit_segmentation(person, size).astype(bool)


def synthesize(
    photo: PhotoInput,
    canvas_size: int = 1024,
    segmentation: Optional[np.ndarray] = None,
    config: Optional[MaskConfig] = None,
) -> EditMask:
    """Functional form of EditMaskSynthesizer.synthesize()."""
    return EditMaskSynthesizer(config).synthesize(photo, canvas_size, segmentation)


def submit_synthesis(
    executor: Executor,
    synthesizer: EditMaskSynthesizer,
    photo: PhotoInput,
    canvas_size: Optional[int] = None,
    segmentation: Optional[np.ndarray] = None,
) -> "Future[EditMask]":
    """Run synthesize() on a worker so UI-attached callers don't block.

    A caller that navigates away simply ignores the returned future.
    """
    return executor.submit(synthesizer.synthesize, photo, canvas_size, segmentation)


__all__ = [
    "EditMaskSynthesizer",
    "MODE_SEGMENTATION",
    "MODE_FALLBACK",
    "normalize_canvas",
    "find_person_bounds",
    "fit_segmentation",
    "synthesize",
    "submit_synthesis",
]
