"""Logging configuration for Voxshelf.

Scans log to a rotating `voxshelf.log` in the data directory (everything
from DEBUG up) and to a Rich console on stderr, so stdout stays free for
the JSON printed by the CLI. Discovery and scans report skipped paths and
failed works through a `{level, message}` callback; `make_log_callback`
turns a logger into one.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


LogEntry = Mapping[str, str]
LogCallback = Callable[[LogEntry], None]

LOG_FILE_NAME = "voxshelf.log"
LOG_FILE_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_HANDLER_NAMES = ("voxshelf-file", "voxshelf-console")


def _level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Attach the file and console handlers to the root logger once.

    `log_dir` defaults to `DATA_DIR` from the environment, else the project
    root. Later calls only change the console level, so a command can
    quieten the console after an earlier setup.
    """
    root_logger = logging.getLogger()
    installed = {handler.get_name(): handler for handler in root_logger.handlers}
    if all(name in installed for name in _HANDLER_NAMES):
        installed["voxshelf-console"].setLevel(_level(log_level))
        return

    if log_dir is None:
        log_dir = Path(os.environ.get("DATA_DIR") or Path(__file__).resolve().parents[1])
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_FILE_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file_handler.set_name("voxshelf-file")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = RichHandler(
        console=Console(theme=Theme({"logging.level.info": "bold magenta"}), stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=False,
    )
    console_handler.set_name("voxshelf-console")
    console_handler.setLevel(_level(log_level))

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # asyncio reports slow callbacks at DEBUG while probes are running
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def make_log_callback(logger: logging.Logger) -> LogCallback:
    """Return a callback that forwards `{level, message}` entries to `logger`.

    Unknown levels are logged at INFO.
    """

    def _callback(entry: LogEntry) -> None:
        logger.log(_level(entry.get("level", "info")), entry.get("message", ""))

    return _callback
