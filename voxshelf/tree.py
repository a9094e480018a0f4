"""Folder tree view of a work's track list.

Turns the flat, naturally ordered track list into nested folder nodes with one
leaf per file. Leaves carry the URLs a client uses to stream or download the
file: our own `/api/media/...` endpoints, or paths on an offload server when
`MediaConfig.offload` is on.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import Iterable, Optional, Union

from .config import MediaConfig, RootFolder
from .media import extension_of, media_kind
from .models import FileNode, FolderNode, Track, TreeNode

API_STREAM_BASE = "/api/media/stream/"
API_DOWNLOAD_BASE = "/api/media/download/"


def join_url_path(*fragments: str) -> str:
    """Join path fragments with single slashes, keeping a leading slash."""
    parts = []
    for fragment in fragments:
        stripped = fragment.strip("/")
        if stripped:
            parts.append(stripped)
    joined = "/".join(parts)
    if fragments and fragments[0].startswith("/"):
        joined = "/" + joined
    return joined


def _split_subtitle(subtitle: Optional[str]) -> tuple[str, ...]:
    if not subtitle:
        return ()
    return PurePath(subtitle).parts


def _offload_url(base: str, root_folder: RootFolder, work_dir: Union[str, Path], track: Track) -> str:
    url = join_url_path(base, root_folder.name, str(work_dir), track.subtitle or "", track.title)
    if os.sep == "\\":
        url = url.replace("\\", "/")
    return url


def _make_leaf(
    track: Track,
    work_title: str,
    work_dir: Union[str, Path],
    root_folder: RootFolder,
    media: MediaConfig,
) -> FileNode:
    if media.offload:
        stream_url = _offload_url(media.offload_stream_path, root_folder, work_dir, track)
        download_url = _offload_url(media.offload_download_path, root_folder, work_dir, track)
    else:
        stream_url = API_STREAM_BASE + track.hash
        download_url = API_DOWNLOAD_BASE + track.hash

    kind = media_kind(track.ext)
    if kind == "text":
        # Text is always streamed by us so charset detection happens server side
        stream_url = API_STREAM_BASE + track.hash

    return FileNode(
        type=kind,
        hash=track.hash,
        title=track.title,
        work_title=work_title,
        media_stream_url=stream_url,
        media_download_url=download_url,
        duration=track.duration if kind == "audio" else None,
    )


def build_tree(
    tracks: Iterable[Track],
    work_title: str,
    work_dir: Union[str, Path],
    root_folder: RootFolder,
    media: Optional[MediaConfig] = None,
) -> list[TreeNode]:
    """Build the folder tree of a work.

    :param tracks: Tracks in display order (as returned by `list_tracks`).
    :param work_title: Title copied onto every leaf.
    :param work_dir: Work directory relative to the root folder (used for offload URLs).
    :param root_folder: Root folder the work lives in.
    :param media: URL settings; defaults to serving everything from our API.
    :return: Children of the work's top-level folder.
    """
    media = media or MediaConfig()
    tracks = list(tracks)
    tree: list[TreeNode] = []
    folders: dict[tuple[str, ...], FolderNode] = {}

    # Folders first, in the order their first track appears
    for track in tracks:
        segments = _split_subtitle(track.subtitle)
        siblings = tree
        for depth in range(len(segments)):
            key = segments[: depth + 1]
            folder = folders.get(key)
            if folder is None:
                folder = FolderNode(title=segments[depth])
                folders[key] = folder
                siblings.append(folder)
            siblings = folder.children

    for track in tracks:
        segments = _split_subtitle(track.subtitle)
        siblings = folders[segments].children if segments else tree
        siblings.append(_make_leaf(track, work_title, work_dir, root_folder, media))

    return tree


def flatten_tree(nodes: Iterable[TreeNode], _parents: tuple[str, ...] = ()) -> list[Track]:
    """Return the tracks of a tree in display order.

    `build_tree` on the result rebuilds the same tree.
    """
    tracks: list[Track] = []
    for node in nodes:
        if isinstance(node, FolderNode):
            tracks.extend(flatten_tree(node.children, _parents + (node.title,)))
            continue
        tracks.append(
            Track(
                title=node.title,
                subtitle=os.path.join(*_parents) if _parents else None,
                ext=extension_of(node.title),
                hash=node.hash,
                duration=node.duration,
            )
        )
    return tracks
