"""Duration lookups through ffprobe.

Every lookup goes through the scanner's `ConcurrencyGate`. A lookup that fails
for any reason is logged and reported as NaN so one bad file never aborts the
listing of its siblings.
"""

from __future__ import annotations

import asyncio
import math
from pathlib import Path
from typing import Optional

from .gate import ConcurrencyGate
from .logging_config import get_logger

logger = get_logger(__name__)


class ProbeError(Exception):
    """ffprobe could not report a duration for a file."""


class DurationProbe:
    def __init__(
        self,
        gate: ConcurrencyGate,
        ffprobe_path: str = "ffprobe",
        timeout: Optional[float] = None,
    ):
        self.gate = gate
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout

    def command(self, path: Path) -> list[str]:
        return [
            self.ffprobe_path,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(path),
        ]

    async def duration(self, path: Path) -> float:
        """Return the duration of `path` in seconds, or NaN if unknown."""
        return await self.gate.call(self._probe, Path(path))

    async def _probe(self, path: Path) -> float:
        try:
            return await self._run(path)
        except (OSError, ProbeError) as exc:
            logger.warning(f"get duration failed, file = {path}: {exc}")
        return math.nan

    async def _run(self, path: Path) -> float:
        proc = await asyncio.create_subprocess_exec(
            *self.command(path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ProbeError(f"ffprobe timed out after {self.timeout}s")

        if proc.returncode != 0:
            error_msg = stderr.decode(errors="replace").strip() if stderr else "Unknown error"
            raise ProbeError(f"ffprobe exited with {proc.returncode}: {error_msg}")

        text = stdout.decode(errors="replace").strip()
        try:
            return float(text)
        except ValueError:
            raise ProbeError(f"unparsable ffprobe output: {text!r}") from None
