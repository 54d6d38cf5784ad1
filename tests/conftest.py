"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest

from pull_context.github.client import GitHubClient
from pull_context.pull.context import PullRequestContext
from pull_context.pull.models import PullRequestDescriptor
from pull_context.pull.retry import RetryPolicy
from tests.helpers.graphql import HEAD_SHA


@pytest.fixture
def client() -> Mock:
    return Mock(spec=GitHubClient)


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the context, recorded instead of slept."""
    return []


@pytest.fixture
def descriptor() -> PullRequestDescriptor:
    return PullRequestDescriptor(
        author="alice",
        is_cross_repository=False,
        head_sha=HEAD_SHA,
        head_ref="feature",
        head_repo_name="octo-repo",
        head_repo_owner="octo-org",
        base_ref="main",
    )


@pytest.fixture
def fork_descriptor() -> PullRequestDescriptor:
    return PullRequestDescriptor(
        author="bob",
        is_cross_repository=True,
        head_sha=HEAD_SHA,
        head_ref="patch-1",
        head_repo_name="octo-fork",
        head_repo_owner="bob",
        base_ref="main",
    )


@pytest.fixture
def make_context(client: Mock, sleeps: list[float]) -> Callable[..., PullRequestContext]:
    def _make(pull_request: PullRequestDescriptor, **kwargs: Any) -> PullRequestContext:
        kwargs.setdefault("retry_policy", RetryPolicy())
        kwargs.setdefault("sleep", sleeps.append)
        return PullRequestContext(
            client=client,
            owner="octo-org",
            repo="octo-repo",
            number=7,
            pull_request=pull_request,
            **kwargs,
        )

    return _make
