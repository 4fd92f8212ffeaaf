"""Tests for structured logging helpers."""

import json
import logging

from article_enhancer.config import LoggingConfig
from article_enhancer.utils.logging import (
    JsonlFormatter,
    log_event,
    redact_text,
    setup_llm_logger,
    setup_logging,
    truncate_text,
)


def test_jsonl_formatter_includes_event_fields():
    record = logging.LogRecord("article_enhancer", logging.INFO, __file__, 1, "Published", None, None)
    record.event = "published"
    record.article_id = 7

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["message"] == "Published"
    assert payload["level"] == "INFO"
    assert payload["event"] == "published"
    assert payload["article_id"] == 7
    assert "pathname" not in payload


def test_file_logging_writes_jsonl(tmp_path):
    cfg = LoggingConfig(console=False, file=True, filename="run.jsonl")
    logger = setup_logging(cfg, tmp_path)

    log_event(logger, "Run start", event="run_start", targets=2)
    for handler in logger.handlers:
        handler.flush()

    line = (tmp_path / "run.jsonl").read_text(encoding="utf-8").strip().splitlines()[-1]
    assert json.loads(line)["targets"] == 2


def test_llm_logger_requires_directory():
    assert setup_llm_logger(LoggingConfig(), None) is None
    assert setup_llm_logger(LoggingConfig(llm_log_enabled=False), None) is None


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing happens", event="noop")


def test_redaction_and_truncation():
    assert redact_text("see https://a.example/x now", "redact_urls_authors") == "see [REDACTED_URL] now"
    assert redact_text("secret", "redact_content") == ""
    assert truncate_text("abcdef", 3) == "abc...(truncated)"
