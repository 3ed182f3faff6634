"""Snapshot comparison for pull-request update notifications."""

from __future__ import annotations

from prthread.models import ChangeKind, PullRequestSnapshot, ReviewerVote, SnapshotChange

VOTE_LABELS: dict[int, str] = {
    10: "approved",
    5: "approved (with suggestions)",
    0: "reset",
    -10: "rejected",
}

NO_CHANGE = SnapshotChange()


def vote_label(vote: int) -> str:
    return VOTE_LABELS.get(vote, "")


def _status_change(previous: PullRequestSnapshot, incoming: PullRequestSnapshot) -> SnapshotChange | None:
    if previous.status == incoming.status:
        return None
    return SnapshotChange(kind=ChangeKind.STATUS, message=f"Status has changed to: *{incoming.status}*")


def _draft_change(previous: PullRequestSnapshot, incoming: PullRequestSnapshot) -> SnapshotChange | None:
    if previous.is_draft == incoming.is_draft:
        return None
    if incoming.is_draft:
        message = "PR has now been marked as a draft"
    else:
        message = "PR has been unmarked as a draft"
    return SnapshotChange(kind=ChangeKind.DRAFT, message=message)


def _added_reviewer(previous: list[ReviewerVote], incoming: list[ReviewerVote]) -> ReviewerVote | None:
    known = {reviewer.unique_name for reviewer in previous}
    for reviewer in incoming:
        if reviewer.unique_name not in known:
            return reviewer
    return None


def _vote_change(previous: list[ReviewerVote], incoming: list[ReviewerVote]) -> SnapshotChange | None:
    # Reviewers are matched by position, not identity. A source that reorders
    # reviewers between notifications will attribute votes to the wrong person.
    for before, after in zip(previous, incoming):
        if before.vote == after.vote:
            continue
        if before.is_required:
            message = f"A required reviewer - *{after.display_name}* has *{vote_label(after.vote)}* your PR"
        else:
            message = (
                f"*{after.display_name}* has changed their review from "
                f"*{vote_label(before.vote)}* to *{vote_label(after.vote)}*"
            )
        return SnapshotChange(kind=ChangeKind.REVIEWER, message=message)
    return None


def compare_snapshots(previous: PullRequestSnapshot, incoming: PullRequestSnapshot) -> SnapshotChange:
    """Classify the single most significant difference between two snapshots.

    Rules are checked in priority order and the first match wins: status, draft
    flag, reviewer membership, then reviewer votes. Lower-priority differences are
    left for the next notification to surface.

    When the reviewer count changes but no newly added reviewer can be found (a
    removal, or an add and a remove in the same update), no change is reported.
    """
    change = _status_change(previous, incoming) or _draft_change(previous, incoming)
    if change is not None:
        return change

    if len(previous.reviewers) != len(incoming.reviewers):
        added = _added_reviewer(previous.reviewers, incoming.reviewers)
        if added is None:
            return NO_CHANGE
        return SnapshotChange(
            kind=ChangeKind.REVIEWER,
            message=f"*{added.display_name}* has *{vote_label(added.vote)}* this PR",
        )

    return _vote_change(previous.reviewers, incoming.reviewers) or NO_CHANGE
