"""Library scanning for Voxshelf.

`Scanner` owns the concurrency gates and the duration probe for the lifetime
of the application and exposes the scan operations on top of them:
- discover work folders under the configured roots
- list a work's tracks (with durations)
- total a work's duration
- build a work's folder tree
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator, Callable, Iterable, NamedTuple, Optional, Union

from .config import RootFolder, VoxshelfConfig
from .discovery import iter_work_folders
from .errors import TrackListError
from .gate import ConcurrencyGate
from .logging_config import LogCallback, get_logger
from .models import Track, TreeNode, WorkFolderRecord
from .probe import DurationProbe
from .tracks import list_tracks, total_duration, work_duration
from .tree import build_tree

logger = get_logger(__name__)


class WorkScan(NamedTuple):
    record: WorkFolderRecord
    tracks: list[Track]
    duration: float


class Scanner:
    """Scan operations sharing one probe gate.

    Usable as an async context manager so its lifetime can follow the
    application's startup and shutdown.
    """

    def __init__(self, config: VoxshelfConfig):
        self.config = config
        self.gate = ConcurrencyGate(config.max_parallelism)
        # Whole-work listings get their own gate: a listing waits on probes,
        # so sharing the probe gate could deadlock at capacity 1.
        self.work_gate = ConcurrencyGate(config.max_parallelism)
        self.probe = DurationProbe(
            self.gate,
            ffprobe_path=config.scanner.ffprobe_path,
            timeout=config.scanner.probe_timeout,
        )
        self._closed = False

    async def __aenter__(self) -> "Scanner":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.gate.active or self.work_gate.active:
            logger.debug(
                f"Scanner closed with {self.gate.active} probes and "
                f"{self.work_gate.active} listings in flight"
            )

    async def list_tracks(self, work_id: str, work_dir: Path) -> list[Track]:
        return await list_tracks(work_id, work_dir, self.probe)

    async def work_duration(self, work_id: str, work_dir: Path) -> float:
        return await work_duration(work_id, work_dir, self.probe, gate=self.work_gate)

    def build_tree(
        self,
        tracks: Iterable[Track],
        work_title: str,
        work_dir: Union[str, Path],
        root_folder: RootFolder,
    ) -> list[TreeNode]:
        return build_tree(tracks, work_title, work_dir, root_folder, self.config.media)

    async def work_tree(
        self, record: WorkFolderRecord, work_title: Optional[str] = None
    ) -> list[TreeNode]:
        """List a discovered work and return its folder tree."""
        root = self.config.get_root(record.root_folder_name)
        tracks = await self.list_tracks(record.id, record.absolute_path)
        return self.build_tree(
            tracks,
            work_title or record.absolute_path.name,
            record.relative_path,
            root,
        )

    async def iter_works(
        self,
        roots: Optional[Iterable[RootFolder]] = None,
        log: Optional[LogCallback] = None,
    ) -> AsyncIterator[WorkFolderRecord]:
        """Yield every work folder under `roots` (default: all configured roots)."""
        for root in roots if roots is not None else self.config.roots:
            logger.info(f"[SCAN] {root.name} ({root.path})")
            async for record in iter_work_folders(root, self.config.max_recursion_depth, log):
                yield record

    async def scan_work(self, record: WorkFolderRecord) -> WorkScan:
        tracks = await self.work_gate.call(
            list_tracks, record.id, record.absolute_path, self.probe
        )
        return WorkScan(record, tracks, total_duration(tracks))

    async def scan_library(
        self,
        roots: Optional[Iterable[RootFolder]] = None,
        on_work: Optional[Callable[[WorkScan], None]] = None,
        log: Optional[LogCallback] = None,
    ) -> dict:
        """Discover and list every work under `roots`.

        Works are listed by `max_parallelism` workers fed from a bounded
        queue, so discovery pauses while every worker is busy. A work whose
        directory cannot be listed is logged and counted as failed; it does
        not stop the scan.

        :param on_work: Called with each successfully scanned work.
        :return: Dictionary with scan statistics (works, tracks, failed).
        """
        stats = {"works": 0, "tracks": 0, "failed": 0}

        async def _scan(record: WorkFolderRecord) -> None:
            try:
                result = await self.scan_work(record)
            except TrackListError as exc:
                logger.error(f"✗ RJ{record.id} - {exc}")
                if log is not None:
                    log({"level": "error", "message": str(exc)})
                stats["failed"] += 1
                return

            stats["works"] += 1
            stats["tracks"] += len(result.tracks)
            logger.debug(f"✓ RJ{record.id} ({len(result.tracks)} tracks, {result.duration:.0f}s)")
            if on_work is not None:
                on_work(result)

        # A fixed pool of workers drains a bounded queue; discovery blocks on
        # `put` once every worker is busy and the queue is full.
        capacity = self.work_gate.capacity
        queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)

        async def _worker() -> None:
            while True:
                record = await queue.get()
                if record is None:
                    return
                await _scan(record)

        async def _discover() -> None:
            async for record in self.iter_works(roots, log):
                await queue.put(record)
            for _ in range(capacity):
                await queue.put(None)

        # A worker that dies must not leave discovery blocked on a full queue
        tasks = [asyncio.create_task(_discover())]
        tasks += [asyncio.create_task(_worker()) for _ in range(capacity)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return stats
