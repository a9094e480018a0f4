"""Shared fixtures for Voxshelf tests."""

import asyncio
import math
import stat
import sys
from pathlib import Path

import pytest

from voxshelf.config import MediaConfig, RootFolder, ScannerConfig, VoxshelfConfig
from voxshelf.gate import ConcurrencyGate


FAKE_FFPROBE = """#!/bin/sh
# Prints the content of the probed file; fails for names containing "bad".
for last; do :; done
case "$last" in
  *bad*) echo "Invalid data found when processing input" >&2; exit 1 ;;
esac
cat "$last"
"""


class StubProbe:
    """Stand-in for DurationProbe that answers from a {filename: seconds} map."""

    def __init__(self, durations=None, capacity=4, delay=0.0):
        self.gate = ConcurrencyGate(capacity)
        self.durations = durations or {}
        self.delay = delay
        self.calls = []

    async def duration(self, path):
        return await self.gate.call(self._lookup, Path(path))

    async def _lookup(self, path):
        self.calls.append(path.name)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.durations.get(path.name, math.nan)


def make_files(base: Path, *names: str, content: str = "") -> None:
    for name in names:
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def fake_ffprobe(tmp_path):
    if sys.platform == "win32":
        pytest.skip("fake ffprobe is a POSIX shell script")
    script = tmp_path / "bin" / "ffprobe"
    script.parent.mkdir()
    script.write_text(FAKE_FFPROBE, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def library(tmp_path):
    lib = tmp_path / "library"
    lib.mkdir()
    return lib


@pytest.fixture
def make_config(library, fake_ffprobe):
    def _make(**scanner_kwargs) -> VoxshelfConfig:
        scanner_kwargs.setdefault("ffprobe_path", str(fake_ffprobe))
        return VoxshelfConfig(
            roots=[RootFolder(name="Voice", path=library)],
            scanner=ScannerConfig(**scanner_kwargs),
            media=MediaConfig(),
        )

    return _make
