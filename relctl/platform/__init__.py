"""Platform layer: subprocess and filesystem helpers."""

from .files import atomic_write_text
from .process import ProcessError, run, run_streaming

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "run",
    "run_streaming",
]
