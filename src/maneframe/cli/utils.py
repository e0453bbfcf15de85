"""CLI utility functions."""

import logging
import os

# Loggers that flood INFO with model/runtime chatter
_NOISY_LOGGERS = ("absl", "urllib3", "PIL")


def suppress_thirdparty_noise():
    """Quiet MediaPipe/TFLite/OpenCV native logging for cleaner CLI output."""
    os.environ.setdefault("GLOG_minloglevel", "2")
    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")
    os.environ.setdefault("OPENCV_LOG_LEVEL", "ERROR")


def configure_logging(verbose: bool = False) -> None:
    """Set up root logging for CLI runs."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        return

    suppress_thirdparty_noise()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
