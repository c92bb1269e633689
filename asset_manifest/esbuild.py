"""
Turn an esbuild metafile (``--metafile=meta.json``) into a build pass.

Entry outputs (JS or CSS) become named, initial chunks (named after the entry
point's stem) that also own their source map and CSS bundle. Code-split outputs
become nameless chunks, initial only when an entry imports them statically.
Every other output is left as a plain asset.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path, PurePosixPath

from asset_manifest.host import Asset, Chunk, Compilation

logger = logging.getLogger(__name__)

STATIC_IMPORT_KINDS = {"import-statement", "require-call"}
JS_EXTENSIONS = (".js", ".mjs", ".cjs")


class MetafileError(ValueError):
    """Raised when a metafile cannot be read or has no ``outputs`` table."""


def _relative_output(output: str, output_root: Path, working_dir: Path) -> str:
    absolute = (working_dir / output).resolve()
    try:
        return absolute.relative_to(output_root).as_posix()
    except ValueError:
        return PurePosixPath(output).as_posix()


def _content_hash(path: Path) -> str | None:
    if not path.is_file():
        return None
    return hashlib.md5(path.read_bytes()).hexdigest()


def read_metafile(meta_path: str | os.PathLike) -> dict:
    meta_path = Path(meta_path)
    try:
        meta = json.loads(meta_path.read_text())
    except FileNotFoundError as exc:
        raise MetafileError(f"No metafile at {meta_path}") from exc
    except ValueError as exc:
        raise MetafileError(f"Invalid JSON in {meta_path}: {exc}") from exc
    if not isinstance(meta, dict) or not isinstance(meta.get("outputs"), dict):
        raise MetafileError(f"{meta_path} has no 'outputs' table")
    return meta


def load_metafile(
    meta_path: str | os.PathLike,
    output_path: str | os.PathLike,
    public_path: str | None = None,
    working_dir: str | os.PathLike | None = None,
) -> Compilation:
    """Build a ``Compilation`` from one esbuild metafile.

    Output keys in the metafile are relative to the directory esbuild ran in
    (``working_dir``, default: the current directory); they are rewritten
    relative to ``output_path``.
    """
    outputs: dict[str, dict] = read_metafile(meta_path)["outputs"]
    output_root = Path(output_path).resolve()
    working_dir = Path(working_dir or os.getcwd())

    def rel(output: str) -> str:
        return _relative_output(output, output_root, working_dir)

    statically_imported: set[str] = set()
    owned: set[str] = set()
    for output, info in outputs.items():
        if not info.get("entryPoint"):
            continue
        for imported in info.get("imports", []):
            if imported.get("kind") in STATIC_IMPORT_KINDS:
                statically_imported.add(imported.get("path", ""))

    chunks: list[Chunk] = []
    for output, info in outputs.items():
        entry_point = info.get("entryPoint")
        if not entry_point and not output.endswith(JS_EXTENSIONS):
            continue
        files = [rel(output)]
        for companion in (output + ".map", info.get("cssBundle")):
            if companion and companion in outputs:
                files.append(rel(companion))
                owned.add(companion)
        chunks.append(Chunk(
            id=len(chunks),
            files=files,
            name=PurePosixPath(entry_point).stem if entry_point else None,
            hash=_content_hash(output_root / files[0]),
            initial=bool(entry_point) or output in statically_imported,
        ))
        owned.add(output)

    # esbuild already wrote its outputs; they only need to be visible to plugins.
    assets = {rel(output): Asset(b"", written=True) for output in outputs}

    logger.debug(
        "metafile %s: %d chunks, %d auxiliary outputs",
        meta_path, len(chunks), len(set(outputs) - owned),
    )
    return Compilation(
        chunks=chunks,
        assets=assets,
        output_path=str(output_root),
        public_path=public_path,
    )
