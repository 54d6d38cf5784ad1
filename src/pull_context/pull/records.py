"""Mapping of raw REST/GraphQL records into normalized entities.

Everything here is pure: no network access, no logging.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pull_context.pull.models import (
    Comment,
    Commit,
    File,
    FileStatus,
    PullRequestDescriptor,
    Review,
    ReviewState,
)

BOT_TYPENAME = "Bot"
BOT_SUFFIX = "[bot]"

_FILE_STATUSES: dict[str, FileStatus] = {
    "added": FileStatus.ADDED,
    "deleted": FileStatus.DELETED,
    # The REST API reports deletions as "removed".
    "removed": FileStatus.DELETED,
    "modified": FileStatus.MODIFIED,
}

_REVIEW_STATES: dict[str, ReviewState] = {s.value: s for s in ReviewState}


@dataclass(frozen=True, slots=True)
class PageInfo:
    """The `pageInfo` of one page of a cursor-paginated GraphQL connection."""

    end_cursor: str | None
    has_next_page: bool

    @classmethod
    def from_connection(cls, connection: Any) -> PageInfo:
        if not isinstance(connection, Mapping):
            return cls(end_cursor=None, has_next_page=False)
        info = connection.get("pageInfo")
        if not isinstance(info, Mapping):
            return cls(end_cursor=None, has_next_page=False)
        cursor = info.get("endCursor")
        return cls(
            end_cursor=cursor if isinstance(cursor, str) else None,
            has_next_page=bool(info.get("hasNextPage")),
        )

    def update_cursor(self, variables: MutableMapping[str, Any], name: str) -> bool:
        """Advance the cursor variable `name` and return True if more pages exist.

        On the last page the cursor is still moved to the end cursor, so that
        re-sending the query (as joint pagination does for a finished
        connection) returns an empty page rather than the first one again.
        """

        if self.end_cursor is not None:
            variables[name] = self.end_cursor
        return self.has_next_page and self.end_cursor is not None


def connection_nodes(connection: Any) -> list[Mapping[str, Any]]:
    if not isinstance(connection, Mapping):
        return []
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, Mapping)]


def parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    # GitHub returns timestamps like "2025-01-01T00:00:00Z".
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _require_datetime(value: Any, field_name: str) -> datetime:
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError(f"Invalid GraphQL record: missing {field_name}")
    return parsed


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def actor_login(actor: Any) -> str:
    """Return a REST-compatible login for a GraphQL actor.

    GraphQL reports GitHub App identities with their bare login and a `Bot`
    typename; REST (and everything keyed on REST logins) uses `name[bot]`.
    """

    if not isinstance(actor, Mapping):
        return ""
    login = _str(actor.get("login"))
    if actor.get("__typename") == BOT_TYPENAME:
        return login + BOT_SUFFIX
    return login


def git_actor_login(git_actor: Any) -> str:
    # Commits authored with an email not linked to any account have no `user`.
    if not isinstance(git_actor, Mapping):
        return ""
    return actor_login(git_actor.get("user"))


def commit_from_node(node: Mapping[str, Any]) -> Commit:
    oid = node.get("oid")
    if not isinstance(oid, str) or not oid:
        raise ValueError("Invalid GraphQL commit: missing oid")

    parents = [
        p["oid"] for p in connection_nodes(node.get("parents")) if isinstance(p.get("oid"), str)
    ]
    return Commit(
        sha=oid,
        parents=parents,
        committed_via_web=bool(node.get("committedViaWeb")),
        author=git_actor_login(node.get("author")),
        committer=git_actor_login(node.get("committer")),
        pushed_at=parse_datetime(node.get("pushedDate")),
    )


def comment_from_node(node: Mapping[str, Any]) -> Comment:
    return Comment(
        created_at=_require_datetime(node.get("createdAt"), "createdAt"),
        author=actor_login(node.get("author")),
        body=_str(node.get("body")),
    )


def review_from_node(node: Mapping[str, Any]) -> Review:
    state = _REVIEW_STATES.get(_str(node.get("state")).lower())
    if state is None:
        raise ValueError(f"Invalid GraphQL review: unknown state {node.get('state')!r}")
    return Review(
        created_at=_require_datetime(node.get("submittedAt"), "submittedAt"),
        author=actor_login(node.get("author")),
        state=state,
        body=_str(node.get("body")),
    )


def file_from_json(item: Mapping[str, Any]) -> File:
    additions = item.get("additions")
    deletions = item.get("deletions")
    return File(
        filename=_str(item.get("filename")),
        status=_FILE_STATUSES.get(_str(item.get("status")), FileStatus.UNKNOWN),
        additions=additions if isinstance(additions, int) else 0,
        deletions=deletions if isinstance(deletions, int) else 0,
    )


def descriptor_from_node(node: Mapping[str, Any]) -> PullRequestDescriptor:
    """Map a GraphQL `PullRequest` node to a descriptor.

    `headRepository` is null when the fork has been deleted; the head owner
    and name are then empty.
    """

    head_repo = node.get("headRepository")
    if not isinstance(head_repo, Mapping):
        head_repo = {}
    head_owner = head_repo.get("owner")
    if not isinstance(head_owner, Mapping):
        head_owner = {}

    return PullRequestDescriptor(
        author=actor_login(node.get("author")),
        is_cross_repository=bool(node.get("isCrossRepository")),
        head_sha=_str(node.get("headRefOid")),
        head_ref=_str(node.get("headRefName")),
        head_repo_name=_str(head_repo.get("name")),
        head_repo_owner=_str(head_owner.get("login")),
        base_ref=_str(node.get("baseRefName")),
    )
