"""
Run logging.

Two loggers are configured per run:
- "article_enhancer": Rich console output plus an optional run log file
- "article_enhancer.llm_events": JSONL file with one line per model response

Pipeline stages report through ``log_event`` so every line in the JSONL file
carries an ``event`` name and its structured fields.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import re
from typing import Any

from rich.logging import RichHandler

from ..config import LoggingConfig

LOGGER_NAME = "article_enhancer"
LLM_LOGGER_NAME = "article_enhancer.llm_events"

_URL_RE = re.compile(r"https?://\S+")
_TRUNCATION_MARK = "...(truncated)"


def setup_logging(cfg: LoggingConfig, log_dir: Path | None = None) -> logging.Logger:
    """Configure the run logger; the file handler needs both cfg.file and log_dir."""
    level = _parse_level(cfg.level)
    logger = _fresh_logger(LOGGER_NAME, level)

    if cfg.console:
        console = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
        console.setFormatter(logging.Formatter("%(message)s"))
        _attach(logger, console, level)

    if cfg.file and log_dir is not None:
        formatter = JsonlFormatter() if cfg.format == "jsonl" else logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        _attach(logger, _file_handler(log_dir, cfg.filename, formatter), level)

    return logger


def setup_llm_logger(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger | None:
    """Configure the JSONL logger for model responses, or return None when disabled."""
    if not cfg.llm_log_enabled or log_dir is None:
        return None
    level = _parse_level(cfg.level)
    logger = _fresh_logger(LLM_LOGGER_NAME, level)
    _attach(logger, _file_handler(log_dir, cfg.llm_log_file, JsonlFormatter()), level)
    return logger


def log_event(
    logger: logging.Logger | None,
    message: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    if logger is None:
        return
    logger.log(level, message, extra=fields)


def redact_text(text: str, mode: str) -> str:
    """Apply a redaction mode: "none", "redact_content" or "redact_urls_authors"."""
    if mode == "redact_content":
        return ""
    if mode == "redact_urls_authors":
        return _URL_RE.sub("[REDACTED_URL]", text)
    return text


def truncate_text(text: str, max_chars: int = 20000) -> str:
    if len(text) > max_chars:
        return f"{text[:max_chars]}{_TRUNCATION_MARK}"
    return text


class JsonlFormatter(logging.Formatter):
    """One JSON object per record; extra fields are copied to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True, default=str)


# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def _fresh_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    return logger


def _file_handler(directory: Path, filename: str, formatter: logging.Formatter) -> logging.Handler:
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(directory / filename, encoding="utf-8")
    handler.setFormatter(formatter)
    return handler


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    logger.addHandler(handler)


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO
