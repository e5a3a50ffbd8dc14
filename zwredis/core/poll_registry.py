"""Registry of values that need active polling."""

from __future__ import annotations

import threading

from zwredis.core.model import ValueID


class PollRegistry:
    """Ordered, duplicate-free set of polled values.

    Pass the dispatcher's lock so registry updates and store writes stay
    atomic relative to other threads; a private lock is used otherwise.
    """

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock or threading.RLock()
        self._values: list[ValueID] = []

    def register(self, value: ValueID) -> bool:
        with self._lock:
            if value in self._values:
                return False
            self._values.append(value)
            return True

    def unregister(self, value: ValueID) -> bool:
        with self._lock:
            try:
                self._values.remove(value)
            except ValueError:
                return False
            return True

    def unregister_node(self, home_id: int, node_id: int) -> int:
        with self._lock:
            kept = [
                v for v in self._values if not (v.home_id == home_id and v.node_id == node_id)
            ]
            removed = len(self._values) - len(kept)
            self._values = kept
            return removed

    def snapshot(self) -> tuple[ValueID, ...]:
        with self._lock:
            return tuple(self._values)

    def __contains__(self, value: object) -> bool:
        with self._lock:
            return value in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
