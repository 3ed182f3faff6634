"""Connector interfaces for the chat thread sink."""

from __future__ import annotations

from typing import Protocol


class ThreadSinkError(RuntimeError):
    def __init__(self, message: str, *, operation: str, channel: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.channel = channel


class ThreadSink(Protocol):
    def send_message(self, channel: str, text: str, thread_id: str | None = None) -> str: ...

    def lookup_user_by_email(self, email: str) -> str | None: ...

    def list_thread_replies(self, channel: str, root_id: str) -> list[str]: ...

    def delete_message(self, channel: str, message_id: str) -> None: ...
