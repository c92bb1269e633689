"""Key/value prefixing for manifest entries."""

from __future__ import annotations

import posixpath
import re

URL_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


def is_full_url(value: str | None) -> bool:
    """True for ``scheme://...`` strings, which are concatenated, never joined."""
    return bool(value) and URL_SCHEME_RE.match(value) is not None


def to_posix(value: str) -> str:
    return value.replace("\\", "/")


def join_prefix(prefix: str | None, value: str) -> str:
    """Prefix ``value`` the way a URL path would be built.

    Full URLs are concatenated as-is. Anything else is joined with a single
    ``/`` between prefix and value; a leading slash on ``value`` does not
    discard the prefix.
    """
    if not prefix:
        return value
    if is_full_url(prefix):
        return prefix + value
    return posixpath.join(to_posix(prefix), value.lstrip("/"))


def normalize(descriptor, base_path: str | None = "", public_path: str | None = None) -> tuple[str, str]:
    """Return the ``(key, value)`` manifest entry for one file descriptor."""
    name = to_posix(descriptor.name)
    path = to_posix(descriptor.path)
    return join_prefix(base_path, name), join_prefix(public_path, path)
