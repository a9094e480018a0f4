"""Exceptions raised by Voxshelf."""

from __future__ import annotations

from pathlib import Path


class VoxshelfError(Exception):
    """Base class for all Voxshelf errors."""


class ConfigError(VoxshelfError):
    """Raised when configuration values are missing or invalid."""


class TrackListError(VoxshelfError):
    """Raised when a work directory cannot be listed."""

    def __init__(self, work_dir: Path, cause: BaseException):
        self.work_dir = Path(work_dir)
        self.cause = cause
        super().__init__(f"Failed to get tracklist from disk: {self.work_dir}: {cause}")
