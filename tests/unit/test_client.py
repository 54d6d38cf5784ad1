"""Unit tests for the GitHub client wrapper (no network).

The PyGithub entry point and the requests session are both injected so the
REST and GraphQL paths can be exercised against canned responses.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest
import requests
from github import GithubException, UnknownObjectException

from pull_context.config import PullContextSettings
from pull_context.github import queries
from pull_context.github.client import (
    GitHubApiError,
    GitHubClient,
    NotFoundError,
    is_not_found,
)


def _client(base_url: str = "https://api.github.com") -> tuple[GitHubClient, Mock, Mock]:
    github_api = Mock()
    session = requests.Session()
    post = Mock()
    session.post = post  # type: ignore[method-assign]
    client = GitHubClient(
        token="test-token", base_url=base_url, github_api=github_api, session=session
    )
    return client, github_api, post


def _response(payload: dict[str, Any], status: int = 200) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


def test_token_is_required() -> None:
    with pytest.raises(ValueError, match="token is required"):
        GitHubClient(token="", github_api=Mock())


def test_session_carries_token_auth() -> None:
    client, _, _ = _client()

    assert client._session.headers["Authorization"] == "token test-token"


@pytest.mark.parametrize(
    ("base_url", "expected"),
    [
        ("https://api.github.com", "https://api.github.com/graphql"),
        ("https://api.github.com/", "https://api.github.com/graphql"),
        ("https://github.example.com/api/v3", "https://github.example.com/api/graphql"),
        ("https://github.example.com/api/v3/", "https://github.example.com/api/graphql"),
        ("https://github.example.com/api", "https://github.example.com/api/graphql"),
    ],
)
def test_graphql_url_is_derived_from_rest_base(base_url: str, expected: str) -> None:
    client, _, _ = _client(base_url)

    assert client._graphql_url() == expected


def test_graphql_returns_data_and_sends_variables() -> None:
    client, _, post = _client()
    post.return_value = _response({"data": {"repository": {"pullRequest": None}}})
    request = queries.pull_request_commits("octo-org", "octo-repo", 7)

    data = client.graphql(request)

    assert data == {"repository": {"pullRequest": None}}
    body = post.call_args.kwargs["json"]
    assert body["variables"] == {
        "owner": "octo-org",
        "name": "octo-repo",
        "number": 7,
        "cursor": None,
    }
    assert "commits(first: 100, after: $cursor)" in body["query"]


def test_graphql_not_found_error_type() -> None:
    client, _, post = _client()
    post.return_value = _response(
        {
            "data": {"repository": None},
            "errors": [
                {"type": "NOT_FOUND", "message": "Could not resolve to a Repository"},
            ],
        }
    )

    with pytest.raises(NotFoundError, match="Could not resolve"):
        client.graphql(queries.pull_request_details("octo-org", "gone", 1))


def test_graphql_other_errors() -> None:
    client, _, post = _client()
    post.return_value = _response({"errors": [{"message": "API rate limit exceeded"}]})

    with pytest.raises(GitHubApiError, match="rate limit") as excinfo:
        client.graphql(queries.pull_request_details("octo-org", "octo-repo", 1))

    assert not is_not_found(excinfo.value)


def test_graphql_http_404_is_not_found() -> None:
    client, _, post = _client("https://github.example.com/api/v3")
    post.return_value = _response({}, status=404)

    with pytest.raises(NotFoundError):
        client.graphql(queries.pull_request_details("octo-org", "octo-repo", 1))


def test_list_files_reads_next_page_from_link_header() -> None:
    client, github_api, _ = _client()
    link = (
        '<https://api.github.com/repositories/1/pulls/7/files?per_page=100&page=2>; rel="next", '
        '<https://api.github.com/repositories/1/pulls/7/files?per_page=100&page=3>; rel="last"'
    )
    github_api.requester.requestJsonAndCheck.return_value = (
        {"link": link},
        [{"filename": "a.py", "status": "added"}, "junk"],
    )

    page = client.list_pull_request_files(owner="octo-org", repo="octo-repo", number=7)

    assert page.files == [{"filename": "a.py", "status": "added"}]
    assert page.next_page == 2
    github_api.requester.requestJsonAndCheck.assert_called_once_with(
        "GET", "/repos/octo-org/octo-repo/pulls/7/files", parameters={"per_page": 100, "page": 1}
    )


def test_list_files_last_page_has_no_next() -> None:
    client, github_api, _ = _client()
    link = '<https://api.github.com/repositories/1/pulls/7/files?per_page=100&page=1>; rel="first"'
    github_api.requester.requestJsonAndCheck.return_value = ({"link": link}, [])

    page = client.list_pull_request_files(owner="octo-org", repo="octo-repo", number=7, page=3)

    assert page.next_page is None


def test_list_files_maps_pygithub_errors() -> None:
    client, github_api, _ = _client()
    github_api.requester.requestJsonAndCheck.side_effect = UnknownObjectException(
        404, {"message": "Not Found"}, {}
    )

    with pytest.raises(NotFoundError) as excinfo:
        client.list_pull_request_files(owner="octo-org", repo="octo-repo", number=7)
    assert excinfo.value.status == 404

    github_api.requester.requestJsonAndCheck.side_effect = GithubException(
        502, {"message": "Bad Gateway"}, {}
    )
    with pytest.raises(GitHubApiError) as excinfo:
        client.list_pull_request_files(owner="octo-org", repo="octo-repo", number=7)
    assert not isinstance(excinfo.value, NotFoundError)


def test_repo_path_strips_slashes() -> None:
    client, _, _ = _client("https://api.github.com/")

    assert client._repo_path(owner="octo-org", repo="octo-repo/", path="") == (
        "/repos/octo-org/octo-repo"
    )
    assert client._repo_path(owner="octo-org", repo="octo-repo", path="/pulls/1/files") == (
        "/repos/octo-org/octo-repo/pulls/1/files"
    )


def test_is_not_found_recognizes_http_404() -> None:
    response = requests.Response()
    response.status_code = 404

    assert is_not_found(requests.HTTPError("404", response=response))
    assert not is_not_found(RuntimeError("boom"))


def test_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    built: dict[str, Any] = {}

    def fake_init(self: GitHubClient, **kwargs: Any) -> None:
        built.update(kwargs)

    monkeypatch.setattr(GitHubClient, "__init__", fake_init)
    settings = PullContextSettings(
        github_token="test-token",
        github_base_url="https://github.example.com/api/v3",
        request_timeout=5,
        _env_file=None,
    )

    GitHubClient.from_settings(settings)

    assert built == {
        "token": "test-token",
        "base_url": "https://github.example.com/api/v3",
        "timeout": 5.0,
    }
