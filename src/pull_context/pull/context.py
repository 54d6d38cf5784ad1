"""Per-request view of a GitHub pull request.

A `PullRequestContext` is built for one pull request, lazily loads files,
commits, comments and reviews on first access, and caches them for its
lifetime. Instances are not safe to share between threads.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests

from pull_context.github import queries
from pull_context.github.client import GitHubApiError, GitHubClient
from pull_context.github.queries import GraphQLRequest
from pull_context.pull.errors import (
    BackfillIncompleteError,
    HeadCommitMissingError,
    OperationCancelledError,
    PushedDateMissingError,
    QueryFailed,
    TooManyCommitsError,
    TooManyFilesError,
)
from pull_context.pull.locator import Locator
from pull_context.pull.models import (
    MAX_PULL_REQUEST_COMMITS,
    MAX_PULL_REQUEST_FILES,
    Comment,
    Commit,
    File,
    PullRequestDescriptor,
    Review,
)
from pull_context.pull.records import (
    PageInfo,
    comment_from_node,
    commit_from_node,
    connection_nodes,
    file_from_json,
    parse_datetime,
    review_from_node,
)
from pull_context.pull.retry import RetryPolicy

logger = logging.getLogger(__name__)


def _path(data: Any, *keys: str) -> Any:
    node: Any = data
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def backfill_pushed_at(commits: list[Commit], head_sha: str) -> None:
    """Give first-parent ancestors of the head the pushed date of their child.

    A parent on a linear first-parent chain was pushed no later than its
    child, usually in the same push, so the child's date is a close upper
    bound. Commits that already have a date keep it.
    """

    by_sha = {c.sha: c for c in commits}

    root = head_sha
    while True:
        commit = by_sha.get(root)
        if commit is None or not commit.parents:
            break

        first_parent = by_sha.get(commit.parents[0])
        if first_parent is None:
            break

        if first_parent.pushed_at is None:
            first_parent.pushed_at = commit.pushed_at

        # Dropping visited commits guarantees termination on malformed graphs.
        del by_sha[root]
        root = first_parent.sha


class PullRequestContext:
    """Loads and caches the state of a single pull request.

    Use `PullRequestContext.create` to resolve a `Locator` first.
    """

    def __init__(
        self,
        *,
        client: GitHubClient,
        owner: str,
        repo: str,
        number: int,
        pull_request: PullRequestDescriptor,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel: threading.Event | None = None,
    ) -> None:
        self._client = client
        self._owner = owner
        self._repo = repo
        self._number = number
        self._pr = pull_request
        self._retry = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._cancel = cancel

        # Populated at most once, by the first successful accessor call.
        self._files: list[File] | None = None
        self._commits: list[Commit] | None = None
        self._comments: list[Comment] | None = None
        self._reviews: list[Review] | None = None

    @classmethod
    def create(
        cls,
        client: GitHubClient,
        locator: Locator,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel: threading.Event | None = None,
    ) -> PullRequestContext:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError("cancelled before loading pull request details")
        return cls(
            client=client,
            owner=locator.owner,
            repo=locator.repo,
            number=locator.number,
            pull_request=locator.resolve(client),
            retry_policy=retry_policy,
            sleep=sleep,
            cancel=cancel,
        )

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def repository_name(self) -> str:
        return self._repo

    @property
    def number(self) -> int:
        return self._number

    @property
    def author(self) -> str:
        return self._pr.author

    @property
    def head_sha(self) -> str:
        return self._pr.head_sha

    @property
    def pull_request(self) -> PullRequestDescriptor:
        return self._pr

    def branches(self) -> tuple[str, str]:
        """Return `(base, head)` branch names.

        For a pull request from a fork the head is `owner:branch`.
        """

        head = self._pr.head_ref
        if self._pr.is_cross_repository:
            head = f"{self._pr.head_repo_owner}:{head}"
        return self._pr.base_ref, head

    def _check_cancelled(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise OperationCancelledError(
                f"cancelled while loading {self._owner}/{self._repo}#{self._number}"
            )

    def _query(self, request: GraphQLRequest, *, failure: str) -> dict[str, Any]:
        self._check_cancelled()
        try:
            return self._client.graphql(request)
        except (GitHubApiError, requests.RequestException) as e:
            raise QueryFailed(failure) from e

    def changed_files(self) -> list[File]:
        if self._files is None:
            raw: list[dict[str, Any]] = []
            page = 1
            while True:
                self._check_cancelled()
                try:
                    result = self._client.list_pull_request_files(
                        owner=self._owner, repo=self._repo, number=self._number, page=page
                    )
                except (GitHubApiError, requests.RequestException) as e:
                    raise QueryFailed("failed to list pull request files") from e
                raw.extend(result.files)
                if result.next_page is None:
                    break
                page = result.next_page

            self._files = [file_from_json(f) for f in raw]

        if len(self._files) >= MAX_PULL_REQUEST_FILES:
            raise TooManyFilesError(
                kind="files", count=len(self._files), limit=MAX_PULL_REQUEST_FILES
            )
        return self._files

    def commits(self) -> list[Commit]:
        if self._commits is None:
            commits = self._load_commits()
            if len(commits) >= MAX_PULL_REQUEST_COMMITS:
                raise TooManyCommitsError(
                    kind="commits", count=len(commits), limit=MAX_PULL_REQUEST_COMMITS
                )

            backfill_pushed_at(commits, self._pr.head_sha)
            self._commits = commits
        return self._commits

    def comments(self) -> list[Comment]:
        if self._comments is None:
            self._load_discussion()
        assert self._comments is not None
        return self._comments

    def reviews(self) -> list[Review]:
        if self._reviews is None:
            self._load_discussion()
        assert self._reviews is not None
        return self._reviews

    def _load_discussion(self) -> None:
        # Both connections share one query: max(c, r) round trips instead of c + r.
        request = queries.pull_request_discussion(self._owner, self._repo, self._number)

        comments: list[Comment] = []
        reviews: list[Review] = []
        while True:
            complete = 0
            data = self._query(request, failure="failed to load pull request data")
            pr = _path(data, "repository", "pullRequest")

            comment_conn = _path(pr, "comments")
            review_conn = _path(pr, "reviews")
            try:
                comments.extend(comment_from_node(n) for n in connection_nodes(comment_conn))
                reviews.extend(review_from_node(n) for n in connection_nodes(review_conn))
            except ValueError as e:
                raise QueryFailed("unexpected pull request data") from e

            if not PageInfo.from_connection(comment_conn).update_cursor(
                request.variables, "commentCursor"
            ):
                complete += 1

            if not PageInfo.from_connection(review_conn).update_cursor(
                request.variables, "reviewCursor"
            ):
                complete += 1

            if complete == 2:
                break

        self._comments = comments
        self._reviews = reviews

    def _load_commits(self) -> list[Commit]:
        head_sha = self._pr.head_sha

        # GitHub does not always return the latest commit information right
        # after a push; if the head pushed date is missing, try again.
        attempts = 0
        while True:
            raw = self._load_raw_commits()
            try:
                commits = [commit_from_node(n) for n in raw]
            except ValueError as e:
                raise QueryFailed("unexpected commit data") from e

            head = next((c for c in commits if c.sha == head_sha), None)
            if head is None:
                raise HeadCommitMissingError(head_sha)

            # The base repository does not report pushed dates for fork commits.
            if self._pr.is_cross_repository and head.pushed_at is None:
                self._load_pushed_at(commits)

            if head.pushed_at is not None:
                return commits

            attempts += 1
            if self._retry.exhausted(attempts):
                raise PushedDateMissingError(head_sha=head_sha, attempts=attempts)

            delay = self._retry.delay(attempts)
            logger.debug(
                "Head commit is missing pushed date; retrying",
                extra={"head_sha": head_sha, "attempt": attempts, "delay_seconds": delay},
            )
            self._sleep(delay)
            self._check_cancelled()

    def _load_raw_commits(self) -> list[Mapping[str, Any]]:
        request = queries.pull_request_commits(self._owner, self._repo, self._number)

        nodes: list[Mapping[str, Any]] = []
        while True:
            data = self._query(request, failure="failed to load commits")
            conn = _path(data, "repository", "pullRequest", "commits")
            for node in connection_nodes(conn):
                commit = node.get("commit")
                if isinstance(commit, Mapping):
                    nodes.append(commit)
            if not PageInfo.from_connection(conn).update_cursor(request.variables, "cursor"):
                break
        return nodes

    def _load_pushed_at(self, commits: list[Commit]) -> None:
        """Fill missing pushed dates from the head repository's own history."""

        pending = {c.sha: c for c in commits if c.pushed_at is None}
        if not pending:
            return

        logger.info(
            "Loading pushed dates from head repository",
            extra={
                "head_repository": f"{self._pr.head_repo_owner}/{self._pr.head_repo_name}",
                "pending": len(pending),
            },
        )
        request = queries.commit_history(
            self._pr.head_repo_owner, self._pr.head_repo_name, self._pr.head_sha
        )
        while pending:
            data = self._query(request, failure="failed to load commit pushed dates")
            history = _path(data, "repository", "object", "history")
            for node in connection_nodes(history):
                oid = node.get("oid")
                commit = pending.pop(oid, None) if isinstance(oid, str) else None
                if commit is not None:
                    commit.pushed_at = parse_datetime(node.get("pushedDate"))
            if not PageInfo.from_connection(history).update_cursor(request.variables, "cursor"):
                break

        if pending:
            raise BackfillIncompleteError(missing=tuple(sorted(pending)))
