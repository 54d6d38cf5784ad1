"""Configuration for pull request retrieval.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `PULL_CONTEXT_GITHUB_TOKEN`.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pull_context.pull.retry import RetryPolicy


class PullContextSettings(BaseSettings):
    """Settings for the pull request context.

    Environment variables:
    - PULL_CONTEXT_GITHUB_TOKEN
    - GITHUB_BASE_URL                        (optional)
    - LOG_LEVEL                              (optional)
    - PULL_CONTEXT_REQUEST_TIMEOUT           (optional)
    - PULL_CONTEXT_COMMIT_LOAD_MAX_ATTEMPTS  (optional)
    - PULL_CONTEXT_COMMIT_LOAD_BASE_DELAY    (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `PullContextSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="PULL_CONTEXT_GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias="PULL_CONTEXT_REQUEST_TIMEOUT",
        description="Per-request timeout in seconds",
    )

    commit_load_max_attempts: int = Field(
        default=5,
        ge=1,
        validation_alias="PULL_CONTEXT_COMMIT_LOAD_MAX_ATTEMPTS",
        description="Total attempts to load commits while the head pushed date is missing",
    )
    commit_load_base_delay: float = Field(
        default=1.0,
        ge=0,
        validation_alias="PULL_CONTEXT_COMMIT_LOAD_BASE_DELAY",
        description="Delay in seconds after the first failed attempt; doubles on each retry",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> PullContextSettings:
        if not self.github_token.strip():
            raise ValueError("PULL_CONTEXT_GITHUB_TOKEN is required")
        return self

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.commit_load_max_attempts,
            base_delay=self.commit_load_base_delay,
        )
