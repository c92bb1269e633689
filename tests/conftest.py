"""
Test fixtures for the asset manifest plugin.

Provides compilation factories, a ``build`` helper that runs one compiler per
compilation (all sharing one manifest round) and returns the parsed manifest,
and a guard that restores the root logger after tests that reconfigure it.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from asset_manifest.accumulator import ManifestRound  # noqa: E402
from asset_manifest.host import Asset, Chunk, Compilation, Compiler, MultiCompiler  # noqa: E402
from asset_manifest.options import ManifestOptions  # noqa: E402
from asset_manifest.plugin import ManifestPlugin  # noqa: E402


@pytest.fixture
def output_dir(tmp_path):
    """Build output root, like webpack's ``output.path``."""
    path = tmp_path / "webpack-out"
    path.mkdir()
    return path


@pytest.fixture
def make_compilation():
    """Factory: ``make_compilation(chunk, ..., extra_assets=[...], **fields)``.

    Every chunk file and extra asset is added to the compilation's asset set.
    """
    def _make(*chunks: Chunk, extra_assets=(), **kwargs) -> Compilation:
        assets: dict[str, Asset] = {}
        for chunk in chunks:
            for file in chunk.files:
                assets[file] = Asset(f"/* {file} */")
        for name in extra_assets:
            assets[name] = Asset(f"/* {name} */")
        for name in kwargs.get("module_assets", {}):
            assets.setdefault(name, Asset(b"\x00"))
        return Compilation(chunks=list(chunks), assets=assets, **kwargs)
    return _make


@pytest.fixture
def entry():
    """Factory for a named initial chunk: ``entry("one", "one.h1.js")``."""
    counter = iter(range(1000))

    def _entry(name: str | None, *files: str, initial: bool = True, chunk_hash: str = "h1") -> Chunk:
        return Chunk(id=next(counter), name=name, files=list(files), hash=chunk_hash, initial=initial)
    return _entry


@pytest.fixture
def build(output_dir):
    """Run each compilation through its own compiler, sharing one manifest.

    Returns ``(manifest, compilations)``; ``manifest`` is None when no
    manifest file was written.
    """
    def _build(compilations, options: ManifestOptions | None = None, **option_kwargs):
        if isinstance(compilations, Compilation):
            compilations = [compilations]
        options = options or ManifestOptions(**option_kwargs)
        manifest_round = ManifestRound.from_options(options)
        compilers = [
            Compiler(
                name=f"target-{index}",
                output_path=output_dir,
                plugins=[ManifestPlugin(options, manifest_round)],
            )
            for index in range(len(compilations))
        ]
        results = MultiCompiler(compilers).run(compilations)

        manifest_path = output_dir / options.file_name
        manifest = json.loads(manifest_path.read_text()) if manifest_path.exists() else None
        return manifest, results
    return _build


@pytest.fixture
def restore_root_logger():
    """Undo ``init_logging`` side effects on the root logger."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
