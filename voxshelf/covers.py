"""Cover image files for works.

Covers live in the configured cover folder as `{rjcode}_img_{variant}.jpg`,
where `rjcode` is the zero-padded work code from `format_rj_code`.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .config import get_config
from .logging_config import get_logger

logger = get_logger(__name__)

COVER_VARIANTS = ("main", "sam", "240x240", "360x360")


def format_rj_code(work_id: Union[int, str]) -> str:
    """Zero-pad a work id: 6 digits below 1,000,000, 8 digits from there on."""
    work_id = int(work_id)
    if work_id >= 1000000:
        return f"{work_id:08d}"
    return f"{work_id:06d}"


def cover_filename(rjcode: str, variant: str) -> str:
    if variant not in COVER_VARIANTS:
        raise ValueError(f"Unknown cover variant: {variant}")
    return f"{rjcode}_img_{variant}.jpg"


def cover_path(rjcode: str, variant: str, cover_dir: Optional[Path] = None) -> Path:
    """Path of a cover file; `cover_dir` defaults to the configured cover folder."""
    if cover_dir is None:
        cover_dir = get_config().cover_folder_dir
    return Path(cover_dir) / cover_filename(rjcode, variant)


def save_cover_image(
    stream: BinaryIO, rjcode: str, variant: str, cover_dir: Optional[Path] = None
) -> Path:
    """Write image bytes from `stream` to the cover file for `rjcode`/`variant`."""
    path = cover_path(rjcode, variant, cover_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        shutil.copyfileobj(stream, handle)
    logger.debug(f"Saved cover {path.name}")
    return path


def delete_cover_images(rjcode: str, cover_dir: Optional[Path] = None) -> None:
    """Delete every cover variant of a work.

    Raises FileNotFoundError for the first missing variant; variants before
    it are already gone.
    """
    for variant in COVER_VARIANTS:
        cover_path(rjcode, variant, cover_dir).unlink()
