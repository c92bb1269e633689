#!/usr/bin/env python3
"""Generate static/dist/manifest.json from esbuild metafiles.

Each metafile is one build target; all targets are combined into a single
manifest that maps logical names (e.g. "app.js") to their hashed outputs
(e.g. "app.ABC123.js") for the asset_url() template helper.

Usage:
    python3 scripts/build_manifest.py static/dist
    python3 scripts/build_manifest.py static/dist --meta admin.meta.json --public-path /static/dist/
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from asset_manifest.accumulator import ManifestRound  # noqa: E402
from asset_manifest.esbuild import MetafileError, load_metafile  # noqa: E402
from asset_manifest.host import Compiler, MultiCompiler  # noqa: E402
from asset_manifest.options import ManifestOptions  # noqa: E402
from asset_manifest.plugin import ManifestPlugin  # noqa: E402
from config import get_config  # noqa: E402
from logging_config import init_logging  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("dist_dir", nargs="?", default=None, help="build output directory")
    parser.add_argument(
        "--meta", action="append", default=[],
        help="esbuild metafile, one per target (default: DIST_DIR/meta.json and DIST_DIR/*.meta.json)",
    )
    parser.add_argument("--working-dir", default=None, help="directory esbuild ran in (default: cwd)")
    parser.add_argument("--file-name", default=None, help="manifest file name or absolute path")
    parser.add_argument("--base-path", default=None, help="prefix for manifest keys")
    parser.add_argument("--public-path", default=None, help="prefix for manifest values")
    parser.add_argument("--skip-maps", action="store_true", help="leave source maps out of the manifest")
    parser.add_argument("--env", default=None, help="config environment (development, production, testing)")
    return parser.parse_args(argv)


def find_metafiles(dist_dir: Path, explicit: list[str]) -> list[Path]:
    if explicit:
        return [Path(p) if Path(p).is_absolute() else dist_dir / p for p in explicit]
    candidates = [dist_dir / "meta.json", *sorted(dist_dir.glob("*.meta.json"))]
    return [p for p in candidates if p.exists()]


def build_options(args: argparse.Namespace, cfg) -> ManifestOptions:
    overrides = {}
    if args.file_name:
        overrides["file_name"] = args.file_name
    if args.base_path is not None:
        overrides["base_path"] = args.base_path
    if args.public_path is not None:
        overrides["public_path"] = args.public_path
    if args.skip_maps:
        overrides["filter"] = lambda file: not file.path.endswith(".map")
    return ManifestOptions.from_config(cfg, **overrides)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = get_config(args.env)
    init_logging(cfg.LOG_FORMAT, cfg.LOG_LEVEL)

    dist_dir = Path(args.dist_dir or cfg.ASSET_DIST_DIR)
    metafiles = find_metafiles(dist_dir, args.meta)
    if not metafiles:
        print(f"[manifest] No meta.json found in {dist_dir}")
        return 1

    options = build_options(args, cfg)
    manifest_round = ManifestRound.from_options(options)
    plugin = ManifestPlugin(options, manifest_round)
    compilers = [
        Compiler(name=str(meta), output_path=dist_dir, plugins=[plugin])
        for meta in metafiles
    ]
    try:
        compilations = [
            load_metafile(meta, dist_dir, working_dir=args.working_dir)
            for meta in metafiles
        ]
    except MetafileError as e:
        print(f"[manifest] {e}")
        return 1

    MultiCompiler(compilers).run(compilations)

    manifest = manifest_round.snapshot()
    manifest_path = plugin.output_file(compilations[-1])
    print(f"[manifest] Generated {manifest_path} with {len(manifest)} entries:")
    if isinstance(manifest, dict):
        for src, out in manifest.items():
            print(f"  {src} -> {out if isinstance(out, str) else json.dumps(out)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
