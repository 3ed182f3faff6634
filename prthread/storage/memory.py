"""Process-lifetime in-memory snapshot store."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from prthread.models import PullRequestSnapshot


@dataclass
class _IdLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class InMemorySnapshotStore:
    """Thread-safe map of pull-request id to its tracked snapshot.

    Single operations are serialized by one store-wide lock. ``locked(pr_id)``
    additionally gives a caller exclusive use of one id across a get/diff/put
    sequence without blocking work on other ids.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[int, PullRequestSnapshot] = {}
        self._id_locks: dict[int, _IdLock] = {}

    def put(self, entry: PullRequestSnapshot) -> None:
        with self._lock:
            self._entries[entry.id] = entry.model_copy(deep=True)

    def remove(self, pr_id: int) -> None:
        with self._lock:
            self._entries.pop(pr_id, None)

    def get(self, pr_id: int) -> PullRequestSnapshot | None:
        with self._lock:
            entry = self._entries.get(pr_id)
            return entry.model_copy(deep=True) if entry is not None else None

    def ids(self) -> list[int]:
        with self._lock:
            return sorted(self._entries)

    def __contains__(self, pr_id: object) -> bool:
        with self._lock:
            return pr_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @contextmanager
    def locked(self, pr_id: int) -> Iterator[None]:
        with self._lock:
            slot = self._id_locks.get(pr_id)
            if slot is None:
                slot = self._id_locks[pr_id] = _IdLock()
            slot.holders += 1

        slot.lock.acquire()
        try:
            yield
        finally:
            slot.lock.release()
            with self._lock:
                slot.holders -= 1
                if slot.holders == 0:
                    self._id_locks.pop(pr_id, None)
