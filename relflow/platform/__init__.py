"""Platform layer: processes and files."""

from .files import atomic_write_text, backup_copy
from .process import ProcessError, run, run_streaming

__all__ = [
    # files
    "atomic_write_text",
    "backup_copy",
    # process
    "ProcessError",
    "run",
    "run_streaming",
]
