"""
Cross-pass manifest accumulation.

A ``ManifestRound`` collects the contribution of every build pass that
shares one manifest file and decides when the merged result is serialized.
Where the merged state lives is delegated to a store:

- ``OwnedSeedStore``: contributions kept per pass, folded over a fresh
  copy of the seed each time the round is read
- ``ExternalCacheStore``: deprecated; writes straight into a caller-owned
  mutable object that is never reset

Usage:
    manifest_round = ManifestRound.from_options(options)
    plugins = [ManifestPlugin(options, manifest_round) for _ in targets]
"""

from __future__ import annotations

import copy
import logging
import threading
import warnings
from collections.abc import Hashable, Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Callable, Protocol

from asset_manifest.options import serialize_json

logger = logging.getLogger(__name__)


def merge_value(merged: Any, contribution: Any) -> Any:
    """Shallow-merge mappings; any other shape is replaced by the newer value."""
    if isinstance(merged, MutableMapping) and isinstance(contribution, Mapping):
        merged.update(contribution)
        return merged
    return contribution


# ── Protocol ───────────────────────────────────────────────

class AccumulatorStore(Protocol):
    def initial(self) -> Any: ...
    def merge(self, pass_id: Hashable, contribution: Any) -> None: ...
    def snapshot(self) -> Any: ...
    def has_contribution(self, pass_id: Hashable) -> bool: ...


# ── Owned seed (default) ───────────────────────────────────

class OwnedSeedStore:
    """Keeps the latest contribution of each pass, keyed by pass identity."""

    def __init__(self, seed: Any = None) -> None:
        self._seed = {} if seed is None else seed
        self._contributions: dict[Hashable, Any] = {}

    def initial(self) -> Any:
        return copy.deepcopy(self._seed)

    def merge(self, pass_id: Hashable, contribution: Any) -> None:
        # Re-reported passes replace their entry and become the latest merge.
        self._contributions.pop(pass_id, None)
        self._contributions[pass_id] = contribution

    def snapshot(self) -> Any:
        merged = copy.deepcopy(self._seed)
        for contribution in self._contributions.values():
            merged = merge_value(merged, contribution)
        return merged

    def has_contribution(self, pass_id: Hashable) -> bool:
        return pass_id in self._contributions


# ── External cache (deprecated) ────────────────────────────

class ExternalCacheStore:
    """Accumulates directly into a caller-supplied mapping or list.

    Deprecated: kept only for callers that still pass ``cache=``. The object
    is shared across rounds and never reset, so entries from earlier rounds
    persist.
    """

    def __init__(self, cache: Any) -> None:
        if not isinstance(cache, (MutableMapping, MutableSequence)):
            raise TypeError(
                f"cache must be a mutable mapping or list, got {type(cache).__name__}"
            )
        warnings.warn(
            "The 'cache' option is deprecated; share a ManifestRound between plugins instead.",
            DeprecationWarning,
            stacklevel=3,
        )
        self.cache = cache
        self._reported: set[Hashable] = set()

    def initial(self) -> Any:
        return copy.deepcopy(self.cache)

    def merge(self, pass_id: Hashable, contribution: Any) -> None:
        self._reported.add(pass_id)
        if isinstance(self.cache, MutableMapping) and isinstance(contribution, Mapping):
            self.cache.update(contribution)
        elif (
            isinstance(self.cache, MutableSequence)
            and isinstance(contribution, Sequence)
            and not isinstance(contribution, (str, bytes))
        ):
            self.cache[:] = contribution
        else:
            raise TypeError(
                f"cannot merge {type(contribution).__name__} into a "
                f"{type(self.cache).__name__} cache"
            )

    def snapshot(self) -> Any:
        return self.cache

    def has_contribution(self, pass_id: Hashable) -> bool:
        return pass_id in self._reported


def store_for(seed: Any = None, cache: Any = None) -> AccumulatorStore:
    if cache is not None:
        return ExternalCacheStore(cache)
    return OwnedSeedStore(seed)


# ── Round ──────────────────────────────────────────────────

class ManifestRound:
    """Tracks which passes are in flight and merges their contributions.

    The round completes when no started pass is still pending and every
    registered pass has contributed at least once. Incremental rebuilds only
    restart the passes that changed, so the other passes' last contributions
    are reused.
    """

    def __init__(self, store: AccumulatorStore | None = None, serialize: Callable[[Any], str] | None = None) -> None:
        self.store = store if store is not None else OwnedSeedStore()
        self.serialize = serialize or serialize_json
        self._registered: list[Hashable] = []
        self._pending: set[Hashable] = set()
        self._lock = threading.Lock()
        self.completed_rounds = 0

    @classmethod
    def from_options(cls, options) -> "ManifestRound":
        return cls(store_for(options.seed, options.cache), options.serialize)

    @property
    def registered(self) -> tuple[Hashable, ...]:
        return tuple(self._registered)

    @property
    def pending(self) -> frozenset:
        with self._lock:
            return frozenset(self._pending)

    def register(self, pass_id: Hashable) -> None:
        with self._lock:
            if pass_id in self._registered:
                raise ValueError(f"pass {pass_id!r} is already registered with this round")
            self._registered.append(pass_id)

    def begin_pass(self, pass_id: Hashable) -> None:
        with self._lock:
            self._pending.add(pass_id)

    def initial(self) -> Any:
        """A fresh accumulator for one pass's reduce."""
        with self._lock:
            return self.store.initial()

    def _is_complete(self) -> bool:
        return not self._pending and all(
            self.store.has_contribution(pass_id) for pass_id in self._registered
        )

    def merge_pass(self, pass_id: Hashable, contribution: Any) -> bool:
        """Record ``pass_id``'s contribution.

        Returns True when this merge completes the round; the
        caller is then expected to call ``finish``.
        """
        with self._lock:
            self._pending.discard(pass_id)
            self.store.merge(pass_id, contribution)
            complete = self._is_complete()
            logger.debug(
                "merged pass %r (pending: %d, complete: %s)",
                pass_id, len(self._pending), complete,
            )
            return complete

    def snapshot(self) -> Any:
        with self._lock:
            return self.store.snapshot()

    def finish(self) -> str:
        """Serialize the merged manifest and close the round."""
        with self._lock:
            output = self.serialize(self.store.snapshot())
            self.completed_rounds += 1
            return output
