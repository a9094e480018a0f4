"""Pydantic models for Voxshelf.

Field names are snake_case in Python and camelCase on the wire
(`workTitle`, `mediaStreamUrl`, ...) for the serving layer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump with camelCase keys, leaving out unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class WorkFolderRecord(_WireModel):
    """A work directory found under a root folder."""

    absolute_path: Path
    relative_path: Path
    root_folder_name: str
    add_time: str  # local mtime, "YYYY-MM-DD HH:MM:SS"
    id: str  # digits of the RJ code, as found in the folder name


class Track(_WireModel):
    title: str
    subtitle: Optional[str] = None  # folder relative to the work root, None at the root
    ext: str
    hash: str  # "{work_id}/{ordinal}"
    duration: Optional[float] = None  # seconds, NaN when ffprobe failed; media only


class FolderNode(_WireModel):
    type: Literal["folder"] = "folder"
    title: str
    children: list["TreeNode"] = Field(default_factory=list)


class FileNode(_WireModel):
    type: Literal["text", "image", "audio", "other"]
    hash: str
    title: str
    work_title: str
    media_stream_url: str
    media_download_url: str
    duration: Optional[float] = None


TreeNode = Annotated[Union[FolderNode, FileNode], Field(discriminator="type")]

FolderNode.model_rebuild()
