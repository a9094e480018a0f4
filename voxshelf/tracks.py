"""Track listing for a single work.

Lists every supported file under a work directory, orders them naturally by
(subtitle, title, ext), numbers them `{work_id}/{ordinal}` and attaches
ffprobe durations to media files.
"""

from __future__ import annotations

import asyncio
import math
import os
from pathlib import Path
from typing import NamedTuple, Optional

from .errors import TrackListError
from .gate import ConcurrencyGate
from .logging_config import get_logger
from .media import extension_of, is_media, is_supported
from .models import Track
from .natural import natural_key, optional_natural_key
from .probe import DurationProbe

logger = get_logger(__name__)


class _TrackFile(NamedTuple):
    title: str
    subtitle: Optional[str]
    ext: str
    full_path: Path


def _raise(exc: OSError) -> None:
    raise exc


def list_files(work_dir: Path) -> list[Path]:
    """Return every file under `work_dir`, following symlinks.

    Raises OSError if any directory cannot be listed (including `work_dir`
    itself). Symlinked directories are entered once.
    """
    files: list[Path] = []
    seen: set[tuple[int, int]] = set()
    for dirpath, dirnames, filenames in os.walk(work_dir, onerror=_raise, followlinks=True):
        st = os.stat(dirpath)
        seen.add((st.st_dev, st.st_ino))

        kept = []
        for name in dirnames:
            sub = os.stat(os.path.join(dirpath, name))
            if (sub.st_dev, sub.st_ino) not in seen:
                kept.append(name)
        dirnames[:] = kept

        files.extend(Path(dirpath) / name for name in filenames)
    return files


def _to_track_file(path: Path, work_dir: Path) -> _TrackFile:
    rel_dir = os.path.relpath(path.parent, work_dir)
    return _TrackFile(
        title=path.name,
        subtitle=None if rel_dir == "." else rel_dir,
        ext=extension_of(path.name),
        full_path=path,
    )


def _sort_key(item: _TrackFile):
    return optional_natural_key(item.subtitle), natural_key(item.title), natural_key(item.ext)


async def list_tracks(work_id: str, work_dir: Path, probe: DurationProbe) -> list[Track]:
    """Return the ordered track list of a work.

    :param work_id: Work identifier (RJ code digits), used for hashes.
    :param work_dir: Absolute work directory.
    :param probe: Duration probe; media files are probed concurrently through its gate.
    :raises TrackListError: if the directory tree cannot be listed.
    """
    work_dir = Path(work_dir)
    try:
        paths = await asyncio.to_thread(list_files, work_dir)
    except OSError as exc:
        raise TrackListError(work_dir, exc) from exc

    files = sorted(
        (_to_track_file(p, work_dir) for p in paths if is_supported(p.name)),
        key=_sort_key,
    )

    media_indexes = [i for i, f in enumerate(files) if is_media(f.ext)]
    durations = await asyncio.gather(
        *(probe.duration(files[i].full_path) for i in media_indexes)
    )
    duration_by_index = dict(zip(media_indexes, durations))

    tracks = [
        Track(
            title=f.title,
            subtitle=f.subtitle,
            ext=f.ext,
            hash=f"{work_id}/{index}",
            duration=duration_by_index.get(index),
        )
        for index, f in enumerate(files)
    ]
    logger.debug(f"{work_dir.name}: {len(tracks)} tracks ({len(media_indexes)} media)")
    return tracks


def _title_key(track: Track) -> str:
    if track.ext and track.title.lower().endswith(track.ext):
        return track.title[: -len(track.ext)]
    return track.title


def total_duration(tracks: list[Track]) -> float:
    """Sum media durations, counting each extension-less title once.

    The first track with a given title wins, so `01.mp3` followed by `01.wav`
    counts only the mp3. Unknown (NaN) durations count as zero.
    """
    seen: set[str] = set()
    total = 0.0
    for track in tracks:
        key = _title_key(track)
        if key in seen:
            continue
        seen.add(key)

        if not is_media(track.ext):
            continue
        if track.duration is None or math.isnan(track.duration):
            logger.warning(f"Unknown duration for {track.hash} ({track.title}), counting as 0")
            continue
        total += track.duration
    return total


async def work_duration(
    work_id: str,
    work_dir: Path,
    probe: DurationProbe,
    gate: Optional[ConcurrencyGate] = None,
) -> float:
    """Return the total playable duration of a work in seconds.

    When `gate` is given the listing runs inside it. It must not be the
    probe's own gate, or a capacity of 1 would deadlock.
    """
    if gate is not None:
        tracks = await gate.call(list_tracks, work_id, work_dir, probe)
    else:
        tracks = await list_tracks(work_id, work_dir, probe)
    return total_duration(tracks)
