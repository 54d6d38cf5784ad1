"""Unit tests for structured logging."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from pull_context.logging import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        "pull_context.pull.context", logging.DEBUG, __file__, 1, "retrying", None, None
    )
    record.head_sha = "abc"
    record.pushed_at = datetime(2025, 1, 1, tzinfo=UTC)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "pull_context.pull.context"
    assert payload["message"] == "retrying"
    assert payload["extra"] == {"head_sha": "abc", "pushed_at": "2025-01-01 00:00:00+00:00"}


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_replaces_handlers_and_quiets_transport() -> None:
    stream = io.StringIO()

    configure_logging("debug", stream=stream)
    configure_logging("debug", stream=stream)
    logging.getLogger("pull_context.test").info("hello", extra={"number": 7})

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["extra"] == {"number": 7}
    assert logging.getLogger("urllib3").level == logging.INFO
