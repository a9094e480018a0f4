"""Work folder discovery.

Walks a root folder level by level looking for directories whose name carries
an RJ code (`RJ123456`). A matching directory is a work: it is reported and
never entered. Other directories are entered until the configured recursion
depth is reached.
"""

from __future__ import annotations

import asyncio
import os
import re
import stat
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, Iterator, Optional

from .config import RootFolder
from .logging_config import LogCallback, get_logger
from .models import WorkFolderRecord
from .natural import natural_sorted

logger = get_logger(__name__)

RJ_CODE = re.compile(r"RJ(\d+)")

# Windows reports this on every drive root, not worth a warning
_BENIGN_DENIED = ("System Volume Information",)


def match_work_code(name: str) -> Optional[str]:
    """Return the digits of the RJ code in a folder name, or None."""
    match = RJ_CODE.search(name)
    return match.group(1) if match else None


def format_add_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def _report_denied(exc: PermissionError, path: str, log: Optional[LogCallback]) -> None:
    denied = exc.filename or path
    if str(denied).endswith(_BENIGN_DENIED):
        return
    logger.info(f" ! Cannot access {denied}")
    if log is not None:
        log({"level": "info", "message": f" ! Cannot access {denied}"})


def walk_work_folders(
    root: RootFolder,
    max_depth: int,
    log: Optional[LogCallback] = None,
    current: Path = Path(),
    depth: int = 0,
) -> Iterator[WorkFolderRecord]:
    """Yield a record for every work folder under `root`.

    Any `PermissionError` below the root is logged and skipped, which covers
    both EPERM and EACCES, not only "operation not permitted".

    :param root: Root folder to walk.
    :param max_depth: Directories at depth `max_depth` or deeper are not entered.
    :param log: Optional callback receiving `{level, message}` entries for
        skipped (permission denied) paths.
    :raises OSError: if `root` itself (or `current`) cannot be listed, or on
        any error other than permission denied further down.
    """
    names = natural_sorted(os.listdir(root.path / current))

    for name in names:
        absolute_path = os.path.abspath(os.path.join(root.path, current, name))
        relative_path = current / name
        try:
            st = os.stat(absolute_path)
            if not stat.S_ISDIR(st.st_mode):
                continue

            work_id = match_work_code(name)
            if work_id is not None:
                yield WorkFolderRecord(
                    absolute_path=Path(absolute_path),
                    relative_path=relative_path,
                    root_folder_name=root.name,
                    add_time=format_add_time(st.st_mtime),
                    id=work_id,
                )
            elif depth + 1 < max_depth:
                yield from walk_work_folders(root, max_depth, log, relative_path, depth + 1)
        except PermissionError as exc:
            _report_denied(exc, absolute_path, log)


async def iter_work_folders(
    root: RootFolder,
    max_depth: int,
    log: Optional[LogCallback] = None,
) -> AsyncIterator[WorkFolderRecord]:
    """Async version of `walk_work_folders`.

    Each step of the walk runs in a worker thread; records are produced one
    at a time as the consumer asks for them.
    """
    walker = walk_work_folders(root, max_depth, log)
    done = object()
    stepping = False
    try:
        while True:
            stepping = True
            record = await asyncio.to_thread(next, walker, done)
            stepping = False
            if record is done:
                return
            yield record
    finally:
        # A cancelled step leaves the walker running in its thread
        if not stepping:
            walker.close()
