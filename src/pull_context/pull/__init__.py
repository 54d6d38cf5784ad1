"""Pull request retrieval: locators, normalized entities and the per-request context."""

from pull_context.pull.context import PullRequestContext, backfill_pushed_at
from pull_context.pull.errors import (
    BackfillIncompleteError,
    HeadCommitMissingError,
    InvalidLocatorError,
    OperationCancelledError,
    PullContextError,
    PushedDateMissingError,
    QueryFailed,
    SizeExceededError,
    TooManyCommitsError,
    TooManyFilesError,
)
from pull_context.pull.locator import Locator, PullRequestPayload
from pull_context.pull.models import (
    MAX_PULL_REQUEST_COMMITS,
    MAX_PULL_REQUEST_FILES,
    Comment,
    Commit,
    File,
    FileStatus,
    PullRequestDescriptor,
    Review,
    ReviewState,
)
from pull_context.pull.retry import RetryPolicy

__all__ = [
    "MAX_PULL_REQUEST_COMMITS",
    "MAX_PULL_REQUEST_FILES",
    "BackfillIncompleteError",
    "Comment",
    "Commit",
    "File",
    "FileStatus",
    "HeadCommitMissingError",
    "InvalidLocatorError",
    "Locator",
    "OperationCancelledError",
    "PullContextError",
    "PullRequestContext",
    "PullRequestDescriptor",
    "PullRequestPayload",
    "PushedDateMissingError",
    "QueryFailed",
    "Review",
    "ReviewState",
    "RetryPolicy",
    "SizeExceededError",
    "TooManyCommitsError",
    "TooManyFilesError",
    "backfill_pushed_at",
]
