"""Core Pydantic domain models for prthread."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    NONE = "none"
    STATUS = "status"
    DRAFT = "draft"
    REVIEWER = "reviewer"


class RouteOutcome(str, Enum):
    ROOT_POSTED = "root_posted"
    DRAFT_TRACKED = "draft_tracked"
    DRAFT_PROMOTED = "draft_promoted"
    REPLY_POSTED = "reply_posted"
    SILENT_UPDATE = "silent_update"
    THREAD_CLOSED = "thread_closed"
    UNCHANGED = "unchanged"
    ALREADY_TRACKED = "already_tracked"
    UNKNOWN_PROJECT = "unknown_project"
    UNTRACKED = "untracked"
    SEND_FAILED = "send_failed"
    CLEANUP_FAILED = "cleanup_failed"


class ReviewerVote(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    vote: int = 0
    display_name: str = Field(default="", alias="displayName")
    unique_name: str = Field(default="", alias="uniqueName")
    is_required: bool = Field(default=False, alias="isRequired")


class PullRequestSnapshot(BaseModel):
    """Last known state of a tracked pull request plus its Slack thread handle."""

    model_config = ConfigDict(extra="forbid")

    id: int
    status: str = ""
    is_draft: bool = False
    reviewers: list[ReviewerVote] = Field(default_factory=list)
    root_message_id: str | None = None
    channel: str = ""
    has_posted_root: bool = False


class SnapshotChange(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ChangeKind = ChangeKind.NONE
    message: str = ""

    @property
    def has_change(self) -> bool:
        return self.kind is not ChangeKind.NONE


class AzureProject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""


class AzureRepository(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    project: AzureProject = Field(default_factory=AzureProject)
    name: str = ""
    web_url: str = Field(default="", alias="webUrl")


class AzureIdentity(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    display_name: str = Field(default="", alias="displayName")
    # Azure DevOps puts the account email in uniqueName.
    email: str = Field(default="", alias="uniqueName")


class PullRequestResource(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    repository: AzureRepository = Field(default_factory=AzureRepository)
    pull_request_id: int = Field(alias="pullRequestId")
    status: str = ""
    title: str = ""
    created_by: AzureIdentity = Field(default_factory=AzureIdentity, alias="createdBy")
    is_draft: bool = Field(default=False, alias="isDraft")
    reviewers: list[ReviewerVote] = Field(default_factory=list)
    url: str = ""

    @property
    def pull_request_url(self) -> str:
        return f"{self.repository.web_url}/pullrequest/{self.pull_request_id}"


class PullRequestEvent(BaseModel):
    """Azure DevOps service hook envelope for pull-request notifications."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_type: str = Field(alias="eventType")
    resource: PullRequestResource

    def incoming_snapshot(self) -> PullRequestSnapshot:
        return PullRequestSnapshot(
            id=self.resource.pull_request_id,
            status=self.resource.status,
            is_draft=self.resource.is_draft,
            reviewers=list(self.resource.reviewers),
        )
