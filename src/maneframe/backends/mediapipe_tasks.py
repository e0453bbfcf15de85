"""MediaPipe Tasks backends for face detection and person segmentation.

Models are fetched on first use into ``~/.cache/maneframe/models``, or
into ``$MANEFRAME_MODELS_DIR`` when set.
"""

from __future__ import annotations

import logging
import os
import urllib.request
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from maneframe.backends.base import DetectedFace
from maneframe.errors import BackendNotInitializedError, ModelDownloadError
from maneframe.types import BoundingBox

logger = logging.getLogger(__name__)

FACE_DETECTOR_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_detector/"
    "blaze_face_short_range/float16/1/blaze_face_short_range.tflite"
)
SELFIE_SEGMENTER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/image_segmenter/"
    "selfie_segmenter/float16/latest/selfie_segmenter.tflite"
)


def _get_model_path(filename: str, url: str) -> Path:
    """Get path to a MediaPipe model, downloading if necessary."""
    override = os.environ.get("MANEFRAME_MODELS_DIR")
    if override:
        cache_dir = Path(override).resolve()
    else:
        cache_dir = Path.home() / ".cache" / "maneframe" / "models"
    cache_dir.mkdir(parents=True, exist_ok=True)

    model_path = cache_dir / filename
    if not model_path.exists():
        logger.info("Downloading %s to %s...", filename, model_path)
        try:
            urllib.request.urlretrieve(url, model_path)
            logger.info("Download complete.")
        except Exception as e:
            model_path.unlink(missing_ok=True)
            raise ModelDownloadError(
                f"Failed to download {filename}: {e}\n"
                f"You can manually download from: {url}\n"
                f"And save to: {model_path}"
            ) from e

    return model_path


def _import_tasks():
    try:
        import mediapipe as mp
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision
    except ImportError as e:
        raise ImportError(
            "MediaPipe is required for this backend. "
            "Install it with: pip install 'maneframe[mediapipe]'"
        ) from e
    return mp, python, vision


def _to_mp_image(mp, image: np.ndarray):
    # MediaPipe expects RGB
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)


class MediaPipeFaceBackend:
    """BlazeFace short-range face detector via MediaPipe Tasks.

    In video mode detections use the frame timestamp, which MediaPipe
    requires to be strictly increasing; the backend bumps repeated or
    missing timestamps by 1 ms.

    Args:
        min_detection_confidence: Minimum score for a detection (default: 0.5).
        video_mode: Use RunningMode.VIDEO instead of IMAGE (default: True).
    """

    def __init__(self, min_detection_confidence: float = 0.5, video_mode: bool = True):
        self._min_confidence = min_detection_confidence
        self._video_mode = video_mode
        self._detector: Optional[object] = None
        self._mp = None
        self._last_ts_ms = -1
        self._initialized = False

    def initialize(self, device: str = "cpu") -> None:
        if self._initialized:
            return

        mp, python, vision = _import_tasks()
        model_path = _get_model_path("blaze_face_short_range.tflite", FACE_DETECTOR_MODEL_URL)

        delegate = (
            python.BaseOptions.Delegate.GPU if device.startswith("gpu")
            else python.BaseOptions.Delegate.CPU
        )
        base_options = python.BaseOptions(model_asset_path=str(model_path), delegate=delegate)
        options = vision.FaceDetectorOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO if self._video_mode else vision.RunningMode.IMAGE,
            min_detection_confidence=self._min_confidence,
        )
        self._detector = vision.FaceDetector.create_from_options(options)
        self._mp = mp
        self._last_ts_ms = -1
        self._initialized = True
        logger.info("MediaPipe face detector initialized (%s mode)",
                    "video" if self._video_mode else "image")

    def detect(self, image: np.ndarray, t_ms: Optional[float] = None) -> List[DetectedFace]:
        if not self._initialized or self._detector is None:
            raise BackendNotInitializedError("Backend not initialized. Call initialize() first.")

        mp_image = _to_mp_image(self._mp, image)
        if self._video_mode:
            ts = int(t_ms) if t_ms is not None else self._last_ts_ms + 1
            ts = max(ts, self._last_ts_ms + 1)
            self._last_ts_ms = ts
            result = self._detector.detect_for_video(mp_image, ts)
        else:
            result = self._detector.detect(mp_image)

        faces = []
        for det in result.detections or []:
            bb = det.bounding_box
            score = det.categories[0].score if det.categories else 0.0
            faces.append(DetectedFace(
                bbox=BoundingBox(
                    float(bb.origin_x), float(bb.origin_y),
                    float(bb.width), float(bb.height),
                ),
                confidence=float(score or 0.0),
            ))
        return faces

    def cleanup(self) -> None:
        if self._detector is not None:
            self._detector.close()
            self._detector = None
        self._initialized = False
        logger.info("MediaPipe face detector cleaned up")


class MediaPipeSegmenterBackend:
    """Selfie person segmentation via MediaPipe Tasks ImageSegmenter.

    The person confidence mask is thresholded into a {0, 1} category mask.

    Args:
        threshold: Person confidence above which a pixel is labelled 1.
    """

    def __init__(self, threshold: float = 0.5):
        self._threshold = threshold
        self._segmenter: Optional[object] = None
        self._mp = None
        self._initialized = False

    def initialize(self, device: str = "cpu") -> None:
        if self._initialized:
            return

        mp, python, vision = _import_tasks()
        model_path = _get_model_path("selfie_segmenter.tflite", SELFIE_SEGMENTER_MODEL_URL)

        options = vision.ImageSegmenterOptions(
            base_options=python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.IMAGE,
            output_category_mask=False,
            output_confidence_masks=True,
        )
        self._segmenter = vision.ImageSegmenter.create_from_options(options)
        self._mp = mp
        self._initialized = True
        logger.info("MediaPipe selfie segmenter initialized")

    def segment(self, image: np.ndarray) -> Optional[np.ndarray]:
        if not self._initialized or self._segmenter is None:
            raise BackendNotInitializedError("Backend not initialized. Call initialize() first.")

        result = self._segmenter.segment(_to_mp_image(self._mp, image))
        if not result.confidence_masks:
            logger.warning("Segmenter returned no confidence masks")
            return None

        confidence = np.asarray(result.confidence_masks[0].numpy_view(), dtype=np.float32)
        if confidence.ndim == 3:
            confidence = confidence[:, :, 0]
        return (confidence > self._threshold).astype(np.uint8)

    def cleanup(self) -> None:
        if self._segmenter is not None:
            self._segmenter.close()
            self._segmenter = None
        self._initialized = False
        logger.info("MediaPipe selfie segmenter cleaned up")


__all__ = [
    "MediaPipeFaceBackend",
    "MediaPipeSegmenterBackend",
    "FACE_DETECTOR_MODEL_URL",
    "SELFIE_SEGMENTER_MODEL_URL",
]
