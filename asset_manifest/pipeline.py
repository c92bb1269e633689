"""
The map -> filter -> sort -> reduce pipeline.

Stage order is fixed. Keys and values are computed right after ``map`` so
that renaming a descriptor in ``map`` changes its manifest entry, while
``filter``, ``sort`` and ``reduce`` all see the final ``key``/``value``.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Iterable

from asset_manifest.descriptors import FileDescriptor
from asset_manifest.options import ManifestOptions
from asset_manifest.paths import normalize


def default_reduce(manifest: Any, file: FileDescriptor) -> Any:
    manifest[file.key] = file.value
    return manifest


def sort_descriptors(files: list[FileDescriptor], compare: Callable[[Any, Any], int]) -> list[FileDescriptor]:
    """Stable sort with a JS-style comparator.

    ``compare`` is consulted as ``compare(earlier, later)``; a positive result
    moves ``later`` ahead of ``earlier``.
    """
    return sorted(files, key=functools.cmp_to_key(lambda a, b: -compare(b, a)))


def run_pipeline(
    descriptors: Iterable[FileDescriptor],
    options: ManifestOptions,
    seed: Any,
    public_path: str | None = None,
) -> Any:
    """Reduce one pass's descriptors into its manifest contribution.

    ``seed`` is used as the accumulator directly; callers pass a copy.
    ``public_path`` overrides ``options.public_path`` when the option is unset.
    """
    if options.public_path is not None:
        public_path = options.public_path

    files = list(descriptors)
    if options.map is not None:
        files = [options.map(file, index) for index, file in enumerate(files)]

    for file in files:
        file.key, file.value = normalize(file, options.base_path, public_path)

    if options.filter is not None:
        files = [file for file in files if options.filter(file)]

    if options.sort is not None:
        files = sort_descriptors(files, options.sort)

    reducer = options.reduce or default_reduce
    return functools.reduce(reducer, files, seed)
