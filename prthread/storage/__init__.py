"""Snapshot store interfaces and implementations."""

from .base import SnapshotStore
from .memory import InMemorySnapshotStore

__all__ = ["InMemorySnapshotStore", "SnapshotStore"]
