"""Plugin configuration."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Pattern

from asset_manifest.descriptors import DEFAULT_TRANSFORM_EXTENSIONS

DEFAULT_FILE_NAME = "manifest.json"


class ManifestOptionsError(ValueError):
    """Raised when a plugin option has an unusable value."""


def serialize_json(manifest: Any) -> str:
    return json.dumps(manifest, indent=2)


@dataclass(frozen=True)
class ManifestOptions:
    """Immutable settings for one plugin instance.

    ``seed`` is the starting accumulator for every pass (``{}`` when unset);
    ``base_path`` prefixes keys and ``public_path`` prefixes values. Leaving
    ``public_path`` as ``None`` uses the host compilation's public path.

    Stage callables:

    - ``map(descriptor, index) -> descriptor``
    - ``filter(descriptor) -> bool``
    - ``sort(a, b) -> int`` (negative, zero or positive, JS comparator style)
    - ``reduce(manifest, descriptor) -> manifest``

    ``cache`` is the deprecated external accumulator; see
    ``accumulator.ExternalCacheStore``.
    """

    seed: Any = None
    base_path: str = ""
    public_path: str | None = None
    filter: Callable[[Any], bool] | None = None
    map: Callable[[Any, int], Any] | None = None
    sort: Callable[[Any, Any], int] | None = None
    reduce: Callable[[Any, Any], Any] | None = None
    file_name: str = DEFAULT_FILE_NAME
    transform_extensions: Pattern[str] = DEFAULT_TRANSFORM_EXTENSIONS
    serialize: Callable[[Any], str] = serialize_json
    write_to_disk: bool = False
    cache: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for stage in ("filter", "map", "sort", "reduce", "serialize"):
            value = getattr(self, stage)
            if value is not None and not callable(value):
                raise ManifestOptionsError(f"'{stage}' must be callable, got {type(value).__name__}")
        if not isinstance(self.file_name, str) or not self.file_name:
            raise ManifestOptionsError("'file_name' must be a non-empty string")
        if not isinstance(self.base_path, str):
            raise ManifestOptionsError("'base_path' must be a string")
        if self.public_path is not None and not isinstance(self.public_path, str):
            raise ManifestOptionsError("'public_path' must be a string or None")
        if isinstance(self.transform_extensions, str):
            object.__setattr__(
                self, "transform_extensions", re.compile(self.transform_extensions, re.IGNORECASE)
            )

    def with_overrides(self, **overrides: Any) -> "ManifestOptions":
        return replace(self, **overrides)

    @classmethod
    def from_config(cls, cfg: Any, **overrides: Any) -> "ManifestOptions":
        """Build options from a config class (see ``config.py``) or mapping."""
        def setting(key: str, default: Any = None) -> Any:
            if isinstance(cfg, dict):
                return cfg.get(key, default)
            return getattr(cfg, key, default)

        values: dict[str, Any] = {
            "file_name": setting("MANIFEST_FILE_NAME") or DEFAULT_FILE_NAME,
            "base_path": setting("MANIFEST_BASE_PATH") or "",
            "public_path": setting("MANIFEST_PUBLIC_PATH") or None,
            "write_to_disk": bool(setting("MANIFEST_WRITE_TO_DISK", False)),
        }
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ManifestOptionsError(f"unknown option(s): {', '.join(sorted(unknown))}")
        values.update(overrides)
        return cls(**values)
