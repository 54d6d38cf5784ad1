"""GitHub API client wrapper for pull request retrieval.

REST list endpoints go through PyGithub's requester so its exception taxonomy
(`UnknownObjectException` for 404s) is preserved. GraphQL goes through a plain
`requests` session against the endpoint derived from the REST base URL.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlparse, urlunparse

import requests
from github import Auth, Github, GithubException, UnknownObjectException

from pull_context.github.queries import PAGE_SIZE, GraphQLRequest

if TYPE_CHECKING:
    from pull_context.config import PullContextSettings

logger = logging.getLogger(__name__)

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


class GitHubApiError(RuntimeError):
    """A REST or GraphQL call failed on the GitHub side."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(GitHubApiError):
    """The requested resource does not exist (or is not visible to the token)."""


def is_not_found(err: BaseException | None) -> bool:
    """Return True if `err`, or any exception it was raised from, is a not-found error."""

    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, NotFoundError | UnknownObjectException):
            return True
        if isinstance(err, requests.HTTPError) and err.response is not None:
            if err.response.status_code == 404:
                return True
        seen.add(id(err))
        err = err.__cause__
    return False


@dataclass(frozen=True, slots=True)
class FilePage:
    """One page of the REST pull request files listing."""

    files: list[dict[str, Any]]
    next_page: int | None


class GitHubClient:
    """Small wrapper exposing the two query protocols pull request retrieval needs."""

    def __init__(
        self,
        *,
        token: str = "",
        auth: Auth.Auth | None = None,
        base_url: str = "https://api.github.com",
        timeout: float = 30,
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if auth is None:
            if not token:
                raise ValueError("GitHub token is required")
            auth = Auth.Token(token)

        self._rest_base_url = base_url.rstrip("/")
        self._timeout = timeout

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"{auth.token_type} {auth.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-pull-context",
            }
        )

        self._github = github_api or Github(
            auth=auth, base_url=self._rest_base_url, timeout=int(timeout)
        )

    @classmethod
    def from_settings(cls, settings: PullContextSettings) -> GitHubClient:
        return cls(
            token=settings.github_token,
            base_url=settings.github_base_url,
            timeout=settings.request_timeout,
        )

    def _repo_path(self, *, owner: str, repo: str, path: str) -> str:
        owner = owner.strip("/")
        repo = repo.strip("/")
        path = path.lstrip("/")
        if not path:
            return f"/repos/{owner}/{repo}"
        return f"/repos/{owner}/{repo}/{path}"

    @staticmethod
    def _next_page(link_header: str | None) -> int | None:
        if not link_header:
            return None
        match = _NEXT_LINK_RE.search(link_header)
        if match is None:
            return None
        values = parse_qs(urlparse(match.group(1)).query).get("page")
        if not values:
            return None
        try:
            return int(values[0])
        except ValueError:
            return None

    def list_pull_request_files(
        self, *, owner: str, repo: str, number: int, page: int = 1
    ) -> FilePage:
        """Fetch one page of a pull request's changed files.

        Raises:
            NotFoundError: the repository or pull request does not exist.
            GitHubApiError: any other API failure.
        """

        if number <= 0:
            raise ValueError("pull request number must be a positive integer")

        path = self._repo_path(owner=owner, repo=repo, path=f"pulls/{number}/files")
        try:
            headers, data = self._github.requester.requestJsonAndCheck(
                "GET", path, parameters={"per_page": PAGE_SIZE, "page": page}
            )
        except UnknownObjectException as e:
            raise NotFoundError(f"Not found: {path}", status=e.status) from e
        except GithubException as e:
            raise GitHubApiError(f"GitHub REST error on {path}: {e}", status=e.status) from e

        files = [f for f in data if isinstance(f, dict)] if isinstance(data, list) else []
        next_page = self._next_page((headers or {}).get("link"))
        logger.debug(
            "Pull request files page fetched",
            extra={"path": path, "page": page, "count": len(files), "next_page": next_page},
        )
        return FilePage(files=files, next_page=next_page)

    def _graphql_url(self) -> str:
        """Derive the GitHub GraphQL endpoint from the configured REST base URL.

        GitHub.com:
            REST: https://api.github.com
            GQL:  https://api.github.com/graphql

        GitHub Enterprise typically exposes REST as:
            https://github.example.com/api/v3
        and GraphQL as:
            https://github.example.com/api/graphql
        """

        parsed = urlparse(self._rest_base_url)
        path = parsed.path.rstrip("/")

        if path.endswith("/api/v3"):
            path = path[: -len("/api/v3")] + "/api/graphql"
        elif path.endswith("/api"):
            path = path[: -len("/api")] + "/api/graphql"
        elif path == "":
            path = "/graphql"
        else:
            path = path + "/graphql"

        return urlunparse(parsed._replace(path=path))

    def graphql(self, request: GraphQLRequest) -> dict[str, Any]:
        """Execute a GraphQL request and return its `data` object.

        Raises:
            NotFoundError: HTTP 404, or a GraphQL error of type NOT_FOUND.
            GitHubApiError: any other GraphQL error.
            requests.RequestException: transport failures.
        """

        url = self._graphql_url()
        logger.debug(
            "GraphQL request",
            extra={"operation": request.operation, "variables": request.variables},
        )
        resp = self._session.post(
            url,
            json={"query": request.query, "variables": request.variables},
            timeout=self._timeout,
        )
        if resp.status_code == 404:
            raise NotFoundError(f"GraphQL endpoint not found: {url}", status=404)
        resp.raise_for_status()

        payload: dict[str, Any] = resp.json()
        errors = payload.get("errors")
        if errors:
            # Keep the message small and actionable; do not dump the full response.
            messages = []
            not_found = False
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict):
                        msg = item.get("message")
                        if isinstance(msg, str):
                            messages.append(msg)
                        if item.get("type") == "NOT_FOUND":
                            not_found = True
            message = "; ".join(messages) if messages else "Unknown GraphQL error"
            if not_found:
                raise NotFoundError(f"GitHub GraphQL error: {message}", status=resp.status_code)
            raise GitHubApiError(f"GitHub GraphQL error: {message}", status=resp.status_code)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise GitHubApiError("GitHub GraphQL response is missing data", status=resp.status_code)
        return data

    def close(self) -> None:
        self._session.close()
        self._github.close()
