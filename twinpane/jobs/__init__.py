"""Background file jobs."""

from .copy_move import CopyMode, CopyMoveJob, CopyMoveQueue, ProgressBuffer

__all__ = ["CopyMode", "CopyMoveJob", "CopyMoveQueue", "ProgressBuffer"]
