"""Exception types for maneframe."""


class ManeframeError(Exception):
    """Base class for all maneframe errors."""


class PhotoDecodeError(ManeframeError, ValueError):
    """Photo bytes or array could not be turned into an image."""


class BackendNotInitializedError(ManeframeError, RuntimeError):
    """A detection/segmentation backend was used before initialize()."""


class ModelDownloadError(ManeframeError, RuntimeError):
    """A model asset could not be fetched into the models directory."""


__all__ = [
    "ManeframeError",
    "PhotoDecodeError",
    "BackendNotInitializedError",
    "ModelDownloadError",
]
