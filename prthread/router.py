"""Route pull-request notifications to snapshot diffs and Slack thread actions."""

from __future__ import annotations

import logging

from prthread.config import PrthreadConfig
from prthread.connectors.base import ThreadSink, ThreadSinkError
from prthread.diffing import compare_snapshots
from prthread.messages import author_mention, created_message, ready_for_review_message
from prthread.models import (
    PullRequestEvent,
    PullRequestResource,
    PullRequestSnapshot,
    RouteOutcome,
    SnapshotChange,
)
from prthread.storage.base import SnapshotStore

logger = logging.getLogger(__name__)


class EventRouter:
    """Apply create/update notifications to the snapshot store and the thread sink.

    Each notification is handled inside ``store.locked(pr_id)`` so reads, diffs and
    writes for one pull request never interleave. Sink failures are logged and
    reported as an outcome; they never leave a partially written snapshot behind.
    """

    def __init__(self, *, config: PrthreadConfig, store: SnapshotStore, sink: ThreadSink) -> None:
        self.config = config
        self.store = store
        self.sink = sink

    @property
    def terminal_status(self) -> str:
        return self.config.events.terminal_status

    def handle_created(self, event: PullRequestEvent) -> RouteOutcome:
        resource = event.resource
        pr_id = resource.pull_request_id

        with self.store.locked(pr_id):
            if pr_id in self.store:
                logger.info("Create notification for PR %s ignored: already tracked", pr_id)
                return RouteOutcome.ALREADY_TRACKED

            project = resource.repository.project.name
            channel = self.config.channel_for_project(project)
            if channel is None:
                logger.info("No channel configured for project %r; PR %s not tracked", project, pr_id)
                return RouteOutcome.UNKNOWN_PROJECT

            entry = event.incoming_snapshot().model_copy(update={"channel": channel})
            if resource.is_draft:
                logger.info("PR %s is a draft; tracking without a Slack message", pr_id)
                self.store.put(entry)
                return RouteOutcome.DRAFT_TRACKED

            text = created_message(resource, self._resolve_mention(resource))
            try:
                message_id = self.sink.send_message(channel, text)
            except ThreadSinkError as exc:
                logger.error("Failed to post root message for PR %s to %s: %s", pr_id, channel, exc)
                return RouteOutcome.SEND_FAILED

            self.store.put(entry.model_copy(update={"root_message_id": message_id, "has_posted_root": True}))
            logger.info("Tracking PR %s in channel %s (root=%s)", pr_id, channel, message_id)
            return RouteOutcome.ROOT_POSTED

    def handle_updated(self, event: PullRequestEvent) -> RouteOutcome:
        pr_id = event.resource.pull_request_id

        with self.store.locked(pr_id):
            entry = self.store.get(pr_id)
            if entry is None:
                logger.info("Update notification for untracked PR %s dropped", pr_id)
                return RouteOutcome.UNTRACKED

            incoming = event.incoming_snapshot()
            change = compare_snapshots(entry, incoming)
            if not change.has_change:
                logger.debug("No visible change for PR %s", pr_id)
                return RouteOutcome.UNCHANGED

            updated = entry.model_copy(
                update={
                    "status": incoming.status,
                    "is_draft": incoming.is_draft,
                    "reviewers": incoming.reviewers,
                }
            )
            if not entry.has_posted_root:
                return self._update_unposted(updated, event.resource, change)
            return self._reply(entry, updated, change)

    def _update_unposted(
        self,
        updated: PullRequestSnapshot,
        resource: PullRequestResource,
        change: SnapshotChange,
    ) -> RouteOutcome:
        if updated.status == self.terminal_status:
            self.store.remove(updated.id)
            logger.info("PR %s reached %s before any message was posted; untracked", updated.id, updated.status)
            return RouteOutcome.THREAD_CLOSED

        if updated.is_draft or updated.status != self.config.events.active_status:
            self.store.put(updated)
            logger.debug(
                "PR %s not ready for review (status=%s draft=%s); %s change recorded silently",
                updated.id,
                updated.status,
                updated.is_draft,
                change.kind.value,
            )
            return RouteOutcome.SILENT_UPDATE

        text = ready_for_review_message(resource, self._resolve_mention(resource))
        try:
            message_id = self.sink.send_message(updated.channel, text)
        except ThreadSinkError as exc:
            logger.error("Failed to post ready-for-review message for PR %s: %s", updated.id, exc)
            return RouteOutcome.SEND_FAILED

        self.store.put(updated.model_copy(update={"root_message_id": message_id, "has_posted_root": True}))
        logger.info("PR %s moved out of draft; root message %s posted", updated.id, message_id)
        return RouteOutcome.DRAFT_PROMOTED

    def _reply(
        self,
        entry: PullRequestSnapshot,
        updated: PullRequestSnapshot,
        change: SnapshotChange,
    ) -> RouteOutcome:
        try:
            self.sink.send_message(entry.channel, change.message, thread_id=entry.root_message_id)
        except ThreadSinkError as exc:
            logger.error("Failed to post %s reply for PR %s: %s", change.kind.value, entry.id, exc)
            return RouteOutcome.SEND_FAILED

        if updated.status == self.terminal_status:
            return self._close_thread(entry)

        self.store.put(updated)
        return RouteOutcome.REPLY_POSTED

    def _close_thread(self, entry: PullRequestSnapshot) -> RouteOutcome:
        root_id = entry.root_message_id or ""
        try:
            replies = self.sink.list_thread_replies(entry.channel, root_id)
        except ThreadSinkError as exc:
            logger.warning("Error retrieving thread replies for PR %s: %s", entry.id, exc)
            return RouteOutcome.CLEANUP_FAILED

        for reply_id in replies:
            try:
                self.sink.delete_message(entry.channel, reply_id)
            except ThreadSinkError as exc:
                logger.warning("Error deleting reply %s for PR %s: %s", reply_id, entry.id, exc)
                return RouteOutcome.CLEANUP_FAILED

        self.store.remove(entry.id)
        logger.info("Removing PR %s from being tracked (%s replies deleted)", entry.id, len(replies))
        return RouteOutcome.THREAD_CLOSED

    def _resolve_mention(self, resource: PullRequestResource) -> str:
        creator = resource.created_by
        try:
            user_id = self.sink.lookup_user_by_email(creator.email)
        except ThreadSinkError as exc:
            logger.warning("Error retrieving Slack user for %s: %s", creator.email, exc)
            user_id = None
        if user_id is None:
            logger.debug("No Slack user for %s; using display name", creator.email)
        return author_mention(user_id, creator.display_name)
