"""
Server-side asset lookup backed by the build manifest.

Usage:
    from asset_helpers import init_asset_helpers
    init_asset_helpers(app)      # called once in create_app()

Templates can then call ``{{ asset_url("app.js") }}``.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from flask import Flask

from asset_manifest.paths import is_full_url

logger = logging.getLogger(__name__)


def load_manifest(path: str | os.PathLike) -> dict[str, Any]:
    """Read a manifest file; a missing or unreadable one yields ``{}``."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}  # No manifest = dev mode, serve unbundled
    except ValueError as e:
        logger.warning("Ignoring invalid asset manifest %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring asset manifest %s: expected an object", path)
        return {}
    return data


def init_asset_helpers(app: Flask) -> None:
    """Register the ``asset_url`` template helper on ``app``."""
    from config import BaseConfig

    dist_dir = app.config.get("ASSET_DIST_DIR", BaseConfig.ASSET_DIST_DIR)
    file_name = app.config.get("MANIFEST_FILE_NAME", BaseConfig.MANIFEST_FILE_NAME)
    dist_url = app.config.get("ASSET_DIST_URL", BaseConfig.ASSET_DIST_URL).rstrip("/")
    fallback_url = app.config.get("ASSET_FALLBACK_URL", BaseConfig.ASSET_FALLBACK_URL).rstrip("/")
    manifest_path = os.path.join(dist_dir, file_name)

    _manifest_cache: dict = {}
    _manifest_mtime: list = [None]

    def _refresh() -> None:
        # Debug builds rewrite the manifest on every rebuild; re-read on change.
        if _manifest_cache and not app.debug:
            return
        try:
            mtime = os.stat(manifest_path).st_mtime_ns
        except FileNotFoundError:
            mtime = None
        if not _manifest_cache or mtime != _manifest_mtime[0]:
            _manifest_cache.clear()
            _manifest_cache.update(load_manifest(manifest_path))
            _manifest_mtime[0] = mtime

    def asset_url(filename: str) -> str:
        """Map source filename to hashed bundle, falling back to source in dev."""
        _refresh()
        hashed = _manifest_cache.get(filename)
        if isinstance(hashed, str) and hashed:
            if is_full_url(hashed) or hashed.startswith("/"):
                return hashed
            return f"{dist_url}/{hashed}"
        return f"{fallback_url}/{filename}"

    @app.context_processor
    def asset_helpers() -> dict[str, Any]:
        return {"asset_url": asset_url}

    app.extensions["asset_url"] = asset_url
