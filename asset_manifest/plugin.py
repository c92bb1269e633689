"""
Build-host plugin that writes the asset manifest.

One ``ManifestPlugin`` is applied per compiler (build target). Plugins that
should write a single combined manifest share one ``ManifestRound``; the
manifest is serialized when the round's last pending pass emits, and added
to that pass's asset set so other plugins can see it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from asset_manifest.accumulator import ManifestRound
from asset_manifest.descriptors import extract_descriptors
from asset_manifest.host import Asset, Compilation
from asset_manifest.options import ManifestOptions
from asset_manifest.pipeline import run_pipeline

logger = logging.getLogger(__name__)

PLUGIN_NAME = "ManifestPlugin"


class ManifestPlugin:
    def __init__(
        self,
        options: ManifestOptions | None = None,
        manifest_round: ManifestRound | None = None,
        **kwargs: Any,
    ) -> None:
        if options is None:
            options = ManifestOptions(**kwargs)
        elif kwargs:
            options = options.with_overrides(**kwargs)
        self.options = options
        self.round = manifest_round if manifest_round is not None else ManifestRound.from_options(options)

    def apply(self, compiler) -> None:
        pass_id = compiler.name or f"compiler-{id(compiler):x}"
        self.round.register(pass_id)

        @compiler.hooks.run.tap(PLUGIN_NAME)
        def on_run(_compiler) -> None:
            self.round.begin_pass(pass_id)

        @compiler.hooks.emit.tap(PLUGIN_NAME)
        def on_emit(compilation: Compilation) -> None:
            self.emit(pass_id, compilation)

    def output_file(self, compilation: Compilation) -> str:
        """Absolute location of the manifest file for ``compilation``."""
        return os.path.join(os.path.abspath(compilation.output_path or "."), self.options.file_name)

    def asset_name(self, compilation: Compilation) -> str:
        """Manifest name inside the asset set, relative to the output root."""
        if not os.path.isabs(self.options.file_name):
            return self.options.file_name
        relative = os.path.relpath(self.options.file_name, os.path.abspath(compilation.output_path or "."))
        return relative.replace(os.sep, "/")

    def emit(self, pass_id: str, compilation: Compilation) -> str | None:
        """Merge one finished pass; returns the serialized manifest when the round completes."""
        if compilation.has_errors():
            logger.warning(
                "Skipping manifest for pass %s: build reported %d error(s)",
                pass_id, len(compilation.errors),
                extra={"pass_id": pass_id},
            )
            return None

        asset_name = self.asset_name(compilation)
        descriptors = extract_descriptors(
            compilation,
            transform_extensions=self.options.transform_extensions,
            exclude={asset_name},
        )
        contribution = run_pipeline(
            descriptors,
            self.options,
            seed=self.round.initial(),
            public_path=compilation.public_path,
        )
        if not self.round.merge_pass(pass_id, contribution):
            return None

        output = self.round.finish()
        compilation.assets[asset_name] = Asset(output)
        logger.info(
            "Emitted %s (%d descriptors from pass %s)", asset_name, len(descriptors), pass_id,
            extra={"pass_id": pass_id},
        )

        if self.options.write_to_disk:
            target = Path(self.output_file(compilation))
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(output)
        return output
