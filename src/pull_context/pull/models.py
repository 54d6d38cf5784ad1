"""Normalized pull request entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

# Hard limits of the GitHub list endpoints; larger pull requests are truncated upstream.
MAX_PULL_REQUEST_FILES = 300
MAX_PULL_REQUEST_COMMITS = 250


class FileStatus(StrEnum):
    UNKNOWN = "unknown"
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"


class ReviewState(StrEnum):
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"
    COMMENTED = "commented"
    DISMISSED = "dismissed"
    PENDING = "pending"


@dataclass(frozen=True, slots=True)
class PullRequestDescriptor:
    """Identity and branch information for a pull request."""

    author: str
    is_cross_repository: bool
    head_sha: str
    head_ref: str
    head_repo_name: str
    head_repo_owner: str
    base_ref: str


@dataclass(frozen=True, slots=True)
class File:
    filename: str
    status: FileStatus
    additions: int
    deletions: int


@dataclass(slots=True)
class Commit:
    """A commit in the pull request.

    `pushed_at` may be filled in after the initial fetch (see the backfill
    steps in `PullRequestContext.commits`); no other field changes.
    """

    sha: str
    parents: list[str] = field(default_factory=list)
    committed_via_web: bool = False
    author: str = ""
    committer: str = ""
    pushed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Comment:
    created_at: datetime
    author: str
    body: str


@dataclass(frozen=True, slots=True)
class Review:
    created_at: datetime
    author: str
    state: ReviewState
    body: str
