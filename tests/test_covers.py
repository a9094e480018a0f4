"""Tests for cover file naming and storage."""

import io

import pytest

from voxshelf.config import CoverConfig
from voxshelf.covers import (
    COVER_VARIANTS,
    cover_filename,
    delete_cover_images,
    format_rj_code,
    save_cover_image,
)


@pytest.mark.parametrize(
    "work_id, expected",
    [(5, "000005"), (123456, "123456"), (999999, "999999"), (1000000, "01000000"), (1234567, "01234567"), ("42", "000042")],
)
def test_format_rj_code(work_id, expected):
    assert format_rj_code(work_id) == expected


def test_cover_filename():
    assert cover_filename("000005", "240x240") == "000005_img_240x240.jpg"


def test_unknown_variant_is_rejected():
    with pytest.raises(ValueError):
        cover_filename("000005", "sam@2x")


def test_save_and_delete_all_variants(tmp_path):
    covers = tmp_path / "covers"
    for variant in COVER_VARIANTS:
        path = save_cover_image(io.BytesIO(b"\xff\xd8jpeg"), "000005", variant, covers)
        assert path.read_bytes() == b"\xff\xd8jpeg"

    assert len(list(covers.glob("000005_img_*.jpg"))) == 4

    delete_cover_images("000005", covers)
    assert list(covers.iterdir()) == []


def test_delete_missing_cover_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        delete_cover_images("000005", tmp_path)


def test_cover_dir_defaults_to_configured_folder(tmp_path, monkeypatch, make_config):
    config = make_config()
    config.covers = CoverConfig(folder=tmp_path / "configured")
    monkeypatch.setattr("voxshelf.covers.get_config", lambda: config)

    path = save_cover_image(io.BytesIO(b"jpeg"), "000007", "main")

    assert path == tmp_path / "configured" / "000007_img_main.jpg"
    assert path.read_bytes() == b"jpeg"
    delete_cover_images("000007")
    assert not path.exists()
