"""Errors raised while loading pull request data."""

from __future__ import annotations


class PullContextError(Exception):
    """Base class for pull request retrieval failures."""


class InvalidLocatorError(PullContextError, ValueError):
    """A locator is missing its owner, repository or number."""


class SizeExceededError(PullContextError):
    """The pull request is at or above a GitHub list ceiling."""

    def __init__(self, *, kind: str, count: int, limit: int) -> None:
        super().__init__(kind, count, limit)
        self.kind = kind
        self.count = count
        self.limit = limit

    def __str__(self) -> str:
        return f"too many {self.kind} in pull request ({self.count}), maximum is {self.limit}"


class TooManyFilesError(SizeExceededError):
    pass


class TooManyCommitsError(SizeExceededError):
    pass


class HeadCommitMissingError(PullContextError):
    """The head commit is not in the commit list; retrying cannot bring it back."""

    def __init__(self, head_sha: str) -> None:
        super().__init__(head_sha)
        self.head_sha = head_sha

    def __str__(self) -> str:
        return f"head commit {self.head_sha:.10} is missing, probably due to a force-push"


class PushedDateMissingError(PullContextError):
    def __init__(self, *, head_sha: str, attempts: int) -> None:
        super().__init__(head_sha, attempts)
        self.head_sha = head_sha
        self.attempts = attempts

    def __str__(self) -> str:
        return (
            f"head commit {self.head_sha:.10} is missing pushed date after "
            f"{self.attempts} attempts"
        )


class BackfillIncompleteError(PullContextError):
    """Commits expected in the head repository history were never returned."""

    def __init__(self, *, missing: tuple[str, ...]) -> None:
        super().__init__(missing)
        self.missing = missing

    def __str__(self) -> str:
        return f"{len(self.missing)} commits were not found while loading pushed dates"


class QueryFailed(PullContextError):
    """A remote call failed; the underlying error is chained as `__cause__`."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation)
        self.operation = operation

    def __str__(self) -> str:
        cause = self.__cause__
        if cause is None:
            return self.operation
        return f"{self.operation}: {cause}"


class OperationCancelledError(PullContextError):
    pass
