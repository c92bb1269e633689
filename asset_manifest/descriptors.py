"""
File descriptor extraction.

Flattens one build pass into an ordered list of ``FileDescriptor`` entries,
one per emitted path: chunk files first (in the host's dependency order),
then files emitted on behalf of modules, then any remaining auxiliary assets.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Iterable, Pattern

from asset_manifest.host import Chunk, Compilation

DEFAULT_TRANSFORM_EXTENSIONS = re.compile(r"^(gz|map)$", re.IGNORECASE)

HOT_UPDATE_MARKER = "hot-update"


@dataclass
class FileDescriptor:
    """One emitted output file, as seen by map/filter/sort/reduce."""

    path: str
    name: str
    chunk: Chunk | None = None
    is_initial: bool = False
    is_chunk: bool = False
    is_asset: bool = False
    is_module_asset: bool = False
    key: str | None = None  # set by the pipeline after ``map``
    value: str | None = None


def get_file_type(path: str, transform_extensions: Pattern[str] = DEFAULT_TRANSFORM_EXTENSIONS) -> str:
    """Extension used to build a chunk file's logical name.

    ``main.abc123.js`` -> ``js``; ``main.abc123.js.map`` -> ``js.map``.
    """
    path = path.split("?", 1)[0]
    parts = path.split(".")
    ext = parts.pop()
    if parts and transform_extensions.match(ext):
        ext = parts.pop() + "." + ext
    return ext


def chunk_file_name(chunk: Chunk, path: str, transform_extensions: Pattern[str]) -> str:
    if chunk.name:
        return f"{chunk.name}.{get_file_type(path, transform_extensions)}"
    return path


def module_asset_name(path: str, request: str) -> str:
    """``img/logo.abc.png`` emitted for ``./src/logo.png`` -> ``img/logo.png``."""
    request = request.replace("\\", "/").split("?", 1)[0]
    return posixpath.join(posixpath.dirname(path), posixpath.basename(request))


def _should_skip(path: str, exclude: set[str]) -> bool:
    return HOT_UPDATE_MARKER in path or path in exclude


def extract_descriptors(
    compilation: Compilation,
    transform_extensions: Pattern[str] = DEFAULT_TRANSFORM_EXTENSIONS,
    exclude: Iterable[str] = (),
) -> list[FileDescriptor]:
    """Build the pass's descriptors, unique by path (last write wins)."""
    exclude = set(exclude)
    files: dict[str, FileDescriptor] = {}

    for chunk in compilation.chunks:
        for path in chunk.files:
            if _should_skip(path, exclude):
                continue
            previous = files.get(path)
            files[path] = FileDescriptor(
                path=path,
                name=chunk_file_name(chunk, path, transform_extensions),
                chunk=chunk,
                is_initial=chunk.initial or bool(previous and previous.is_initial),
                is_chunk=True,
            )

    for path, request in compilation.module_assets.items():
        if _should_skip(path, exclude) or path in files:
            continue
        files[path] = FileDescriptor(
            path=path,
            name=module_asset_name(path, request),
            is_asset=True,
            is_module_asset=True,
        )

    for path in compilation.assets:
        if _should_skip(path, exclude) or path in files:
            continue
        files[path] = FileDescriptor(path=path, name=path, is_asset=True)

    return list(files.values())
