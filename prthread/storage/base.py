"""Snapshot store interfaces for tracked pull requests."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from prthread.models import PullRequestSnapshot


class SnapshotStore(Protocol):
    def put(self, entry: PullRequestSnapshot) -> None: ...

    def remove(self, pr_id: int) -> None: ...

    def get(self, pr_id: int) -> PullRequestSnapshot | None: ...

    def locked(self, pr_id: int) -> AbstractContextManager[None]: ...

    def ids(self) -> list[int]: ...

    def __contains__(self, pr_id: object) -> bool: ...

    def __len__(self) -> int: ...
