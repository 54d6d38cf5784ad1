"""GitHub transport: REST and GraphQL access plus request builders."""

from pull_context.github.client import (
    FilePage,
    GitHubApiError,
    GitHubClient,
    NotFoundError,
    is_not_found,
)
from pull_context.github.queries import GraphQLRequest

__all__ = [
    "FilePage",
    "GitHubApiError",
    "GitHubClient",
    "GraphQLRequest",
    "NotFoundError",
    "is_not_found",
]
