"""Tests for logging setup and the log callback adapter."""

import logging

import pytest

from voxshelf.logging_config import LOG_FILE_NAME, make_log_callback, setup_logging


@pytest.fixture
def clean_root_logger():
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in before:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


def test_setup_installs_handlers_once(tmp_path, clean_root_logger):
    setup_logging("INFO", log_dir=tmp_path)
    setup_logging("WARNING", log_dir=tmp_path)

    names = [h.get_name() for h in clean_root_logger.handlers]
    assert names.count("voxshelf-file") == 1
    assert names.count("voxshelf-console") == 1
    console = next(h for h in clean_root_logger.handlers if h.get_name() == "voxshelf-console")
    assert console.level == logging.WARNING

    logging.getLogger("voxshelf.test").debug("kept in file")
    for handler in clean_root_logger.handlers:
        handler.flush()
    assert "kept in file" in (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")


def test_log_callback_maps_levels(caplog):
    logger = logging.getLogger("voxshelf.callback")
    log = make_log_callback(logger)

    with caplog.at_level(logging.DEBUG, logger="voxshelf.callback"):
        log({"level": "error", "message": "cannot list"})
        log({"level": "chatty", "message": "unknown level"})

    assert [(r.levelno, r.message) for r in caplog.records] == [
        (logging.ERROR, "cannot list"),
        (logging.INFO, "unknown level"),
    ]
