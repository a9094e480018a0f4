"""Config management for Voxshelf.

Reads `config.ini` from the data directory (beside main.py by default).
Set the `DATA_DIR` env var to keep config, covers and logs elsewhere.
"""

from __future__ import annotations

import configparser
import dataclasses
import os
import pathlib
from typing import Optional

from .errors import ConfigError
from .logging_config import get_logger

logger = get_logger(__name__)


PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]

DATA_DIR = pathlib.Path(os.environ.get("DATA_DIR", str(PROJECT_ROOT)))
DEFAULT_CONFIG_PATH = DATA_DIR / "config.ini"


@dataclasses.dataclass(frozen=True)
class RootFolder:
    """A scan root: an alias and the absolute path it points to."""

    name: str
    path: pathlib.Path


@dataclasses.dataclass
class ScannerConfig:
    max_parallelism: int = 16
    max_recursion_depth: int = 2
    ffprobe_path: str = "ffprobe"
    probe_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_parallelism < 1:
            raise ConfigError(
                f"max_parallelism must be at least 1, got {self.max_parallelism}"
            )
        if self.max_recursion_depth < 1:
            raise ConfigError(
                f"max_recursion_depth must be at least 1, got {self.max_recursion_depth}"
            )
        if self.probe_timeout is not None and self.probe_timeout < 0:
            raise ConfigError(f"probe_timeout must not be negative, got {self.probe_timeout}")


@dataclasses.dataclass
class MediaConfig:
    """Where clients fetch media from: our API, or an external (offload) server."""

    offload: bool = False
    offload_stream_path: str = "/media/stream/"
    offload_download_path: str = "/media/download/"


@dataclasses.dataclass
class CoverConfig:
    folder: pathlib.Path = dataclasses.field(default_factory=lambda: DATA_DIR / "covers")


@dataclasses.dataclass
class VoxshelfConfig:
    roots: list[RootFolder]
    scanner: ScannerConfig = dataclasses.field(default_factory=ScannerConfig)
    media: MediaConfig = dataclasses.field(default_factory=MediaConfig)
    covers: CoverConfig = dataclasses.field(default_factory=CoverConfig)

    @property
    def max_parallelism(self) -> int:
        return self.scanner.max_parallelism

    @property
    def max_recursion_depth(self) -> int:
        return self.scanner.max_recursion_depth

    @property
    def cover_folder_dir(self) -> pathlib.Path:
        return self.covers.folder

    def get_root(self, name: str) -> RootFolder:
        for root in self.roots:
            if root.name == name:
                return root
        raise ConfigError(f"Unknown root folder: {name}")


def _parse_bool(value: str, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(parser: configparser.ConfigParser, section: str, key: str, fallback: int) -> int:
    try:
        return parser.getint(section, key, fallback=fallback)
    except ValueError as exc:
        raise ConfigError(f"[{section}] {key}: {exc}") from exc


def load_config(config_path: Optional[pathlib.Path] = None) -> VoxshelfConfig:
    """Load configuration from config.ini.

    Defaults to `config.ini` in the data directory.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    # Root aliases are user-facing names, keep their case
    parser = configparser.ConfigParser()
    parser.optionxform = str
    parser.read(path, encoding="utf-8")

    roots = []
    if parser.has_section("roots"):
        for name, raw_path in parser.items("roots"):
            root_path = pathlib.Path(raw_path).expanduser()
            if not root_path.is_absolute():
                raise ConfigError(f"Root folder '{name}' must be an absolute path: {raw_path}")
            roots.append(RootFolder(name=name, path=root_path))

    timeout = parser.get("scanner", "probe_timeout", fallback="0").strip()
    try:
        probe_timeout = float(timeout) or None
    except ValueError as exc:
        raise ConfigError(f"[scanner] probe_timeout: {exc}") from exc

    scanner = ScannerConfig(
        max_parallelism=_get_int(parser, "scanner", "max_parallelism", 16),
        max_recursion_depth=_get_int(parser, "scanner", "max_recursion_depth", 2),
        ffprobe_path=parser.get("scanner", "ffprobe_path", fallback="ffprobe"),
        probe_timeout=probe_timeout,
    )

    media = MediaConfig(
        offload=_parse_bool(parser.get("media", "offload", fallback="false"), False),
        offload_stream_path=parser.get("media", "offload_stream_path", fallback="/media/stream/"),
        offload_download_path=parser.get(
            "media", "offload_download_path", fallback="/media/download/"
        ),
    )

    cover_folder = parser.get("covers", "folder", fallback="").strip()
    covers = CoverConfig(pathlib.Path(cover_folder).expanduser()) if cover_folder else CoverConfig()

    return VoxshelfConfig(roots=roots, scanner=scanner, media=media, covers=covers)


_cached_config: Optional[VoxshelfConfig] = None


def get_config() -> VoxshelfConfig:
    """Return the cached config singleton. Loads from disk on first call."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reset_config_cache() -> None:
    """Clear the cached config (useful for tests)."""
    global _cached_config
    _cached_config = None


def write_default_config(
    roots: list[RootFolder], config_path: Optional[pathlib.Path] = None
) -> pathlib.Path:
    """Write a starter config.ini with the given roots and default settings."""
    path = config_path or DEFAULT_CONFIG_PATH

    parser = configparser.ConfigParser()
    parser.optionxform = str
    parser["roots"] = {root.name: str(root.path) for root in roots}
    parser["scanner"] = {
        "max_parallelism": "16",
        "max_recursion_depth": "2",
        "ffprobe_path": "ffprobe",
        "probe_timeout": "0",
    }
    parser["media"] = {
        "offload": "false",
        "offload_stream_path": "/media/stream/",
        "offload_download_path": "/media/download/",
    }
    parser["covers"] = {"folder": str(DATA_DIR / "covers")}

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        parser.write(handle)

    logger.debug(f"Wrote config with {len(roots)} roots to {path}")
    return path
