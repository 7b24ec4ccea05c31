"""Per-scope locks so recalculations of the same (group, day) never interleave."""

import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List, Tuple

ScopeKey = Tuple[int, date]


class ScopeLocks:
    """Registry of one lock per (group_id, day) scope.

    Runs for different scopes proceed in parallel; runs for the same scope
    wait for each other. An entry only lives while someone holds or waits
    for it, so the registry does not grow with every day ever processed.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # scope -> [lock, number of holders and waiters]
        self._locks: Dict[ScopeKey, List] = {}

    @contextmanager
    def hold(self, group_id: int, day: date) -> Iterator[None]:
        key = (group_id, day)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def is_held(self, group_id: int, day: date) -> bool:
        with self._guard:
            entry = self._locks.get((group_id, day))
            return entry is not None and entry[0].locked()

    def __len__(self) -> int:
        return len(self._locks)


# Process-wide registry used by expense hooks
scope_locks = ScopeLocks()

__all__ = ["ScopeLocks", "scope_locks"]
