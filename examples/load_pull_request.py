#!/usr/bin/env python3
"""Programmatic pull request loading example.

This demonstrates using the package directly:

* load settings from `.env`
* resolve a pull request locator
* print its commits (with pushed dates), files, comments and reviews
"""

from __future__ import annotations

import argparse
from typing import Sequence

from pull_context.config import PullContextSettings
from pull_context.github.client import GitHubClient
from pull_context.logging import configure_logging
from pull_context.pull import Locator, PullContextError, PullRequestContext


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load a pull request (programmatic example).")
    parser.add_argument("--repo", required=True, help='Repository in the form "owner/repo"')
    parser.add_argument("--number", type=int, required=True, help="Pull request number")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    owner, _, name = args.repo.partition("/")

    settings = PullContextSettings()
    configure_logging(settings.log_level)

    client = GitHubClient.from_settings(settings)
    try:
        ctx = PullRequestContext.create(
            client,
            Locator(owner=owner, repo=name, number=args.number),
            retry_policy=settings.retry_policy,
        )
        base, head = ctx.branches()
        print(f"#{ctx.number} by {ctx.author}: {head} -> {base}")

        for commit in ctx.commits():
            pushed = commit.pushed_at.isoformat() if commit.pushed_at else "-"
            print(f"commit {commit.sha:.10} pushed {pushed} by {commit.author or '?'}")
        for file in ctx.changed_files():
            print(f"{file.status:>8} {file.filename} (+{file.additions}/-{file.deletions})")
        print(f"{len(ctx.comments())} comments")
        for review in ctx.reviews():
            print(f"review {review.state} by {review.author}")
    except PullContextError as exc:
        print(f"error: {exc}")
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
