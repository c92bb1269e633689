"""
Minimal build-host interface consumed by the manifest plugin.

The bundler itself lives elsewhere; this module only models what a finished
build pass hands over (chunks, emitted assets, errors) and the two lifecycle
points the plugin hooks into:

- ``run``: a pass is starting
- ``emit``: the pass's assets are final and about to be written

``Compiler`` writes the asset set under its output directory once ``emit``
has fired. ``MultiCompiler`` starts every pass before emitting any of them,
the way a multi-target build interleaves its compilations.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)


@dataclass
class Chunk:
    """A group of modules emitted together as one or more files."""

    id: str | int
    files: list[str] = field(default_factory=list)
    name: str | None = None  # None for nameless (e.g. async split) chunks
    hash: str | None = None
    initial: bool = True  # reachable from an entry without an async split


@dataclass
class Asset:
    """One emitted output file held in memory until the host writes it."""

    source: str | bytes
    written: bool = False  # already on disk; the host skips it when emitting

    def buffer(self) -> bytes:
        if isinstance(self.source, bytes):
            return self.source
        return self.source.encode("utf-8")

    def size(self) -> int:
        return len(self.buffer())

    def text(self) -> str:
        if isinstance(self.source, bytes):
            return self.source.decode("utf-8")
        return self.source


@dataclass
class Compilation:
    """The result of one build pass."""

    chunks: list[Chunk] = field(default_factory=list)
    assets: dict[str, Asset] = field(default_factory=dict)
    output_path: str | None = None
    public_path: str | None = None
    hash: str | None = None
    # emitted path -> source request, for files emitted on behalf of a module
    module_assets: dict[str, str] = field(default_factory=dict)
    errors: list[Any] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors)


class Hook:
    """An ordered list of named callbacks."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._taps: list[tuple[str, Callable[..., Any]]] = []

    def tap(self, plugin_name: str, fn: Callable[..., Any] | None = None):
        """Register ``fn`` under ``plugin_name``. Usable as a decorator."""
        def register(callback):
            self._taps.append((plugin_name, callback))
            return callback
        if fn is None:
            return register
        return register(fn)

    def call(self, *args: Any) -> None:
        for plugin_name, callback in self._taps:
            logger.debug("hook %s -> %s", self.name, plugin_name)
            callback(*args)

    def __len__(self) -> int:
        return len(self._taps)


class CompilerHooks:
    def __init__(self) -> None:
        self.run = Hook("run")
        self.emit = Hook("emit")
        self.done = Hook("done")


class Compiler:
    """Drives one build target through the plugin lifecycle."""

    def __init__(
        self,
        name: str = "",
        output_path: str | os.PathLike = ".",
        public_path: str | None = None,
        plugins: Iterable[Any] = (),
    ) -> None:
        self.name = name
        self.output_path = str(output_path)
        self.public_path = public_path
        self.hooks = CompilerHooks()
        for plugin in plugins:
            plugin.apply(self)

    def start(self) -> None:
        self.hooks.run.call(self)

    def finish(self, compilation: Compilation) -> Compilation:
        """Fire ``emit``, write the asset set, then fire ``done``."""
        if compilation.output_path is None:
            compilation.output_path = self.output_path
        if compilation.public_path is None:
            compilation.public_path = self.public_path
        self.hooks.emit.call(compilation)
        self.emit_assets(compilation)
        self.hooks.done.call(compilation)
        return compilation

    def run(self, compilation: Compilation) -> Compilation:
        self.start()
        return self.finish(compilation)

    def emit_assets(self, compilation: Compilation) -> None:
        root = Path(compilation.output_path)
        for asset_name, asset in compilation.assets.items():
            if asset.written:
                continue
            target = root / asset_name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(asset.buffer())
            asset.written = True
        logger.debug(
            "compiler %s wrote %d assets to %s",
            self.name or "<default>", len(compilation.assets), root,
        )


class MultiCompiler:
    """Runs several compilers as one round."""

    def __init__(self, compilers: Iterable[Compiler]) -> None:
        self.compilers = list(compilers)

    def run(self, compilations: Iterable[Compilation]) -> list[Compilation]:
        compilations = list(compilations)
        if len(compilations) != len(self.compilers):
            raise ValueError(
                f"expected {len(self.compilers)} compilations, got {len(compilations)}"
            )
        for compiler in self.compilers:
            compiler.start()
        return [
            compiler.finish(compilation)
            for compiler, compilation in zip(self.compilers, compilations)
        ]
