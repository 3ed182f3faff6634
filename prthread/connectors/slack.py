"""Slack thread sink backed by slack_sdk's WebClient."""

from __future__ import annotations

import logging
from typing import Any

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackClientError

from prthread.connectors.base import ThreadSink, ThreadSinkError

logger = logging.getLogger(__name__)

_USER_NOT_FOUND = "users_not_found"


def build_slack_client(token: str, *, timeout_seconds: float = 10.0) -> WebClient:
    # An empty handler list disables slack_sdk's built-in connection retries.
    return WebClient(token=token, timeout=int(max(1, round(timeout_seconds))), retry_handlers=[])


def _slack_error_code(exc: SlackApiError) -> str:
    response = getattr(exc, "response", None)
    if response is None:
        return ""
    try:
        return str(response.get("error") or "")
    except AttributeError:
        return ""


class SlackThreadSink(ThreadSink):
    def __init__(self, client: WebClient) -> None:
        self.client = client

    def send_message(self, channel: str, text: str, thread_id: str | None = None) -> str:
        kwargs: dict[str, Any] = {"channel": channel, "text": text}
        if thread_id:
            kwargs["thread_ts"] = thread_id
        response = self._call("send_message", self.client.chat_postMessage, **kwargs)
        ts = response.get("ts")
        if not ts:
            raise ThreadSinkError("chat.postMessage returned no message ts", operation="send_message", channel=channel)
        return str(ts)

    def lookup_user_by_email(self, email: str) -> str | None:
        if not email:
            return None
        try:
            response = self.client.users_lookupByEmail(email=email)
        except SlackApiError as exc:
            if _slack_error_code(exc) == _USER_NOT_FOUND:
                return None
            raise ThreadSinkError(f"users.lookupByEmail failed: {exc}", operation="lookup_user_by_email") from exc
        except (SlackClientError, OSError) as exc:
            raise ThreadSinkError(f"users.lookupByEmail failed: {exc}", operation="lookup_user_by_email") from exc
        user = response.get("user") or {}
        user_id = user.get("id")
        return str(user_id) if user_id else None

    def list_thread_replies(self, channel: str, root_id: str) -> list[str]:
        replies: list[str] = []
        cursor: str | None = None
        while True:
            kwargs: dict[str, Any] = {"channel": channel, "ts": root_id}
            if cursor:
                kwargs["cursor"] = cursor
            response = self._call("list_thread_replies", self.client.conversations_replies, **kwargs)
            for message in response.get("messages") or []:
                ts = message.get("ts")
                # conversations.replies includes the parent message itself.
                if ts and ts != root_id:
                    replies.append(str(ts))
            metadata = response.get("response_metadata") or {}
            cursor = metadata.get("next_cursor") or None
            if not cursor:
                return replies

    def delete_message(self, channel: str, message_id: str) -> None:
        self._call("delete_message", self.client.chat_delete, channel=channel, ts=message_id)

    def _call(self, operation: str, method: Any, **kwargs: Any) -> Any:
        channel = kwargs.get("channel")
        try:
            return method(**kwargs)
        except (SlackClientError, OSError) as exc:
            logger.debug("Slack %s failed for channel=%s: %s", operation, channel, exc)
            raise ThreadSinkError(f"Slack {operation} failed: {exc}", operation=operation, channel=channel) from exc
