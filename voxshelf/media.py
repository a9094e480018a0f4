"""Supported file extensions and the content kind each one maps to."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

MEDIA_EXTENSIONS = frozenset(
    {".mp3", ".ogg", ".opus", ".wav", ".aac", ".flac", ".webm", ".mp4", ".m4a", ".mka"}
)
# .ass is listed in the file tree but players can't show it as lyrics
SUBTITLE_EXTENSIONS = frozenset({".lrc", ".srt", ".ass", ".vtt"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})
TEXT_EXTENSIONS = frozenset({".txt"}) | SUBTITLE_EXTENSIONS
OTHER_EXTENSIONS = frozenset({".pdf"})

SUPPORTED_EXTENSIONS = MEDIA_EXTENSIONS | TEXT_EXTENSIONS | IMAGE_EXTENSIONS | OTHER_EXTENSIONS

MediaKind = Literal["text", "image", "audio", "other"]


def extension_of(name: str) -> str:
    """Lowercased, dot-prefixed extension of a file name ('' if none)."""
    return Path(name).suffix.lower()


def is_supported(name: str) -> bool:
    return extension_of(name) in SUPPORTED_EXTENSIONS


def is_media(ext: str) -> bool:
    """True for extensions that have a duration worth probing."""
    return ext.lower() in MEDIA_EXTENSIONS


def media_kind(ext: str) -> MediaKind:
    """Classify a supported extension for the file tree.

    Anything that is not text, image or pdf is served as audio.
    """
    ext = ext.lower()
    if ext in TEXT_EXTENSIONS:
        return "text"
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext in OTHER_EXTENSIONS:
        return "other"
    return "audio"
