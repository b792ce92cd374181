from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for lazily built default values.

    Defaults are constructed on the first unbound lookup of a key and cached
    for the lifetime of their ``DefaultValues`` registry. ``THREAD`` guarantees
    exactly one default instance per key when several threads race on that
    first lookup.
    """

    THREAD = "thread"
    """Guard default construction with a re-entrant ``threading.RLock``."""

    NONE = "none"
    """Disable locking around cache reads/writes; use for single-threaded hosts."""
