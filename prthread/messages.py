"""Slack message text for root thread messages."""

from __future__ import annotations

from prthread.models import PullRequestResource


def author_mention(user_id: str | None, display_name: str) -> str:
    if user_id:
        return f"<@{user_id}>"
    return display_name or "Someone"


def _pull_request_link(resource: PullRequestResource) -> str:
    return f"<{resource.pull_request_url}|*{resource.title}*>"


def created_message(resource: PullRequestResource, mention: str) -> str:
    return (
        f"{mention} has created a new PR - {_pull_request_link(resource)} "
        f"(#{resource.pull_request_id}) for *{resource.repository.name}*"
    )


def ready_for_review_message(resource: PullRequestResource, mention: str) -> str:
    return (
        f"{mention} has moved their PR from draft, and is ready to be reviewed - "
        f"{_pull_request_link(resource)} (#{resource.pull_request_id}) for *{resource.repository.name}*"
    )
