"""
uncertain.core.cache
====================

Sharing wrappers that make node reuse correct.

A node referenced at several points of one expression must produce a single
value per epoch; otherwise ``x - x`` would silently become the difference of
two independent draws. Both wrappers below keep a single ``(epoch, value)``
slot: sampling at the epoch stored in the slot returns the stored value
without touching the random source, any other epoch draws afresh and
overwrites the slot. Slots also record the query they were filled in (see
`query_scope`), so a value never outlives the query that drew it.

- `Cached`: reference-caching wrapper. The slot belongs to the wrapper object;
  reuse happens by referencing that same object repeatedly.
- `Shared`: shared, type-erased handle. Handles returned by `clone()` (or
  `copy.copy`) point at one shared cell holding the node and its slot, so any
  of them can be passed around independently while still observing a single
  draw per epoch. Use it to give `flat_map` branches one common type.

Both accept ``thread_safe=True`` to guard the slot with a lock when a wrapper
is sampled from several threads.

Examples
--------
>>> import numpy as np
>>> from scipy import stats
>>> from uncertain.core.leaves import Distribution
>>> rng = np.random.default_rng(1)
>>> x = Distribution(stats.norm(0.0, 1.0)).into_cached()
>>> x.sample(rng, 0) == x.sample(rng, 0)
True
>>> (x - x).sample(rng, 1)
0.0
>>> y = Distribution(stats.norm(0.0, 1.0)).into_shared()
>>> z = y.clone()
>>> y.sample(rng, 5) == z.sample(rng, 5)
True
"""

from __future__ import annotations
import itertools
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator, Optional, Tuple

import numpy as np

from uncertain.core.names import Epoch
from uncertain.core.node import Uncertain

_EMPTY = object()

# Token of the query currently sampling in this context; 0 outside any query.
_current_run: ContextVar[int] = ContextVar("uncertain_current_run", default=0)
_run_tokens = itertools.count(1)


@contextmanager
def query_scope() -> Iterator[int]:
    """Run the enclosed sampling under a fresh query token.

    Slots remember the token they were filled under and only answer for the
    same token, so a value cached by one query is never returned to another,
    even for wrappers the query cannot reach through `children()`.
    """
    token = _current_run.set(next(_run_tokens))
    try:
        yield _current_run.get()
    finally:
        _current_run.reset(token)


class CacheSlot:
    """Single ``(epoch, value)`` slot; an empty slot matches no epoch."""

    def __init__(self) -> None:
        self._run: Optional[int] = None
        self._epoch: Optional[Epoch] = None
        self._value: Any = _EMPTY

    def get_or_fill(self, epoch: Epoch, draw: Callable[[], Any]) -> Any:
        """Return the value stored for `epoch` in the current query, drawing and storing it if absent."""
        run = _current_run.get()
        if self._run == run and self._epoch == epoch and self._value is not _EMPTY:
            return self._value
        value = draw()
        self._run, self._epoch, self._value = run, epoch, value
        return value

    def peek(self) -> Optional[Tuple[Epoch, Any]]:
        """Current ``(epoch, value)`` pair, or None when empty."""
        if self._value is _EMPTY:
            return None
        return self._epoch, self._value  # type: ignore[return-value]

    def clear(self) -> None:
        self._run, self._epoch, self._value = None, None, _EMPTY


class LockedCacheSlot(CacheSlot):
    """`CacheSlot` whose check-and-fill runs under a lock."""

    def __init__(self) -> None:
        super().__init__()
        # Reentrant: draw() may sample back into this same slot.
        self._lock = threading.RLock()

    def get_or_fill(self, epoch: Epoch, draw: Callable[[], Any]) -> Any:
        with self._lock:
            return super().get_or_fill(epoch, draw)

    def peek(self) -> Optional[Tuple[Epoch, Any]]:
        with self._lock:
            return super().peek()

    def clear(self) -> None:
        with self._lock:
            super().clear()


def _new_slot(thread_safe: bool) -> CacheSlot:
    return LockedCacheSlot() if thread_safe else CacheSlot()


class Cached(Uncertain):
    """
    Reference-caching wrapper.

    Owns the wrapped node and one cache slot. Reference the same `Cached`
    object wherever the value should be shared within an epoch.
    """

    def __init__(self, uncertain: Uncertain, *, thread_safe: bool = False) -> None:
        self.uncertain = uncertain
        self.slot = _new_slot(thread_safe)

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        return self.slot.get_or_fill(epoch, lambda: self.uncertain.sample(rng, epoch))

    def children(self) -> Tuple[Uncertain, ...]:
        return (self.uncertain,)

    def reset(self) -> None:
        """Forget the cached value."""
        self.slot.clear()

    def __repr__(self) -> str:
        return f"Cached({self.uncertain!r})"


class _SharedCell:
    # State shared by all handles cloned from one `Shared`.
    __slots__ = ("uncertain", "slot")

    def __init__(self, uncertain: Uncertain, slot: CacheSlot) -> None:
        self.uncertain = uncertain
        self.slot = slot


class Shared(Uncertain):
    """
    Shared, type-erased caching handle.

    The wrapped node is hidden behind the plain `Uncertain` interface. Clones
    share the node and the cache slot, so every clone observes the same value
    within an epoch. Wrapping an existing `Shared` reuses its cell; asking
    for ``thread_safe=True`` on a cell without a lock raises `ValueError`.
    """

    def __init__(self, uncertain: Uncertain, *, thread_safe: bool = False) -> None:
        if isinstance(uncertain, Shared):
            if thread_safe and not isinstance(uncertain._cell.slot, LockedCacheSlot):
                raise ValueError(
                    "cannot make an existing Shared cell thread-safe; "
                    "wrap the inner node with thread_safe=True instead"
                )
            self._cell = uncertain._cell
        else:
            self._cell = _SharedCell(uncertain, _new_slot(thread_safe))

    @classmethod
    def _from_cell(cls, cell: _SharedCell) -> "Shared":
        handle = cls.__new__(cls)
        handle._cell = cell
        return handle

    def clone(self) -> "Shared":
        """Return a new handle observing the same node and cache."""
        return Shared._from_cell(self._cell)

    def __copy__(self) -> "Shared":
        return self.clone()

    def shares_cache_with(self, other: "Shared") -> bool:
        return self._cell is other._cell

    def sample(self, rng: np.random.Generator, epoch: Epoch) -> Any:
        cell = self._cell
        return cell.slot.get_or_fill(epoch, lambda: cell.uncertain.sample(rng, epoch))

    def children(self) -> Tuple[Uncertain, ...]:
        return (self._cell.uncertain,)

    def reset(self) -> None:
        """Forget the cached value for every handle sharing this cell."""
        self._cell.slot.clear()

    def __repr__(self) -> str:
        return f"Shared(<{type(self._cell.uncertain).__name__}>)"


def reset_caches(root: Uncertain) -> int:
    """Clear the slot of every sharing wrapper reachable from `root`.

    Returns the number of wrappers reset. Wrappers reachable only through a
    `flat_map` function are left alone; `query_scope` keeps their stale
    values from being returned.
    """
    count = 0
    for node in root.walk():
        if isinstance(node, (Cached, Shared)):
            node.reset()
            count += 1
    return count
