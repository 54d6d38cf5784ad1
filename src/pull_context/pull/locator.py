"""Pull request locators and their resolution to a descriptor."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests
from pydantic import BaseModel, ConfigDict

from pull_context.github import queries
from pull_context.github.client import GitHubApiError, GitHubClient, NotFoundError
from pull_context.pull.errors import InvalidLocatorError, QueryFailed
from pull_context.pull.models import PullRequestDescriptor
from pull_context.pull.records import descriptor_from_node

logger = logging.getLogger(__name__)


class _Account(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str | None = None


class _Repository(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    name: str | None = None
    owner: _Account | None = None


class _Branch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ref: str | None = None
    sha: str | None = None
    repo: _Repository | None = None


class PullRequestPayload(BaseModel):
    """The subset of a REST/webhook `pull_request` object needed to describe it.

    Webhook payloads may carry nulls (for example `head.repo` once a fork is
    deleted); every field is therefore optional.
    """

    model_config = ConfigDict(extra="ignore")

    number: int | None = None
    user: _Account | None = None
    head: _Branch | None = None
    base: _Branch | None = None

    def is_complete(self) -> bool:
        """True if every field needed for a descriptor is present and non-empty.

        This cannot tell a legitimately empty value from one that was never
        populated; both count as incomplete.
        """

        user, head, base = self.user, self.head, self.base
        if user is None or head is None or base is None:
            return False
        if head.repo is None or base.repo is None or head.repo.owner is None:
            return False
        return all(
            [
                user.login,
                base.ref,
                base.repo.id,
                head.sha,
                head.ref,
                head.repo.id,
                head.repo.name,
                head.repo.owner.login,
            ]
        )

    def to_descriptor(self) -> PullRequestDescriptor:
        if not self.is_complete():
            raise ValueError("pull request payload is incomplete")
        # is_complete() guarantees every optional below is populated.
        assert self.user and self.head and self.base
        assert self.head.repo and self.base.repo and self.head.repo.owner
        return PullRequestDescriptor(
            author=self.user.login or "",
            is_cross_repository=self.head.repo.id != self.base.repo.id,
            head_sha=self.head.sha or "",
            head_ref=self.head.ref or "",
            head_repo_name=self.head.repo.name or "",
            head_repo_owner=self.head.repo.owner.login or "",
            base_ref=self.base.ref or "",
        )


@dataclass(frozen=True, slots=True)
class Locator:
    """Identifies a pull request, optionally with a partial or full payload."""

    owner: str
    repo: str
    number: int
    value: PullRequestPayload | None = None

    def __post_init__(self) -> None:
        if not self.owner or not self.repo or self.number <= 0:
            raise InvalidLocatorError(
                "pull request locator requires an owner, a repository and a positive number"
            )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Locator:
        """Build a locator from a webhook `pull_request` object."""

        value = PullRequestPayload.model_validate(payload)
        base_repo = value.base.repo if value.base is not None else None
        owner = ""
        name = ""
        if base_repo is not None:
            name = base_repo.name or ""
            if base_repo.owner is not None:
                owner = base_repo.owner.login or ""
        return cls(owner=owner, repo=name, number=value.number or 0, value=value)

    def is_complete(self) -> bool:
        return self.value is not None and self.value.is_complete()

    def resolve(self, client: GitHubClient) -> PullRequestDescriptor:
        """Return the descriptor, querying GitHub only if the payload is incomplete."""

        if self.value is not None and self.value.is_complete():
            return self.value.to_descriptor()

        logger.debug(
            "Loading pull request details",
            extra={"owner": self.owner, "repo": self.repo, "number": self.number},
        )
        request = queries.pull_request_details(self.owner, self.repo, self.number)
        try:
            data = client.graphql(request)
        except (GitHubApiError, requests.RequestException) as e:
            raise QueryFailed("failed to load pull request details") from e

        repository = data.get("repository")
        node = repository.get("pullRequest") if isinstance(repository, Mapping) else None
        if not isinstance(node, Mapping):
            missing = NotFoundError(
                f"pull request {self.owner}/{self.repo}#{self.number} not found", status=None
            )
            raise QueryFailed("failed to load pull request details") from missing
        return descriptor_from_node(node)
