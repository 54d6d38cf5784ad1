"""GitHub pull request context.

Loads the files, commits, comments and reviews of one pull request from the
GitHub REST and GraphQL APIs, recovering from GitHub's eventual consistency:
- deterministic pagination across both APIs
- bounded retries while the head commit's pushed date is missing
- pushed date backfill from fork history or the first-parent chain
"""

__version__ = "0.1.0"

from pull_context.config import PullContextSettings
from pull_context.github.client import GitHubClient
from pull_context.pull import Locator, PullRequestContext

__all__ = ["__version__", "GitHubClient", "Locator", "PullContextSettings", "PullRequestContext"]
