"""CLI command handlers."""

from maneframe.cli.commands.mask import run_mask
from maneframe.cli.commands.capture import run_capture

__all__ = [
    "run_mask",
    "run_capture",
]
