"""Exception types shared across the enhancement pipeline."""

from __future__ import annotations


class ConfigError(ValueError):
    """Required configuration is missing or invalid."""


class ExtractionError(Exception):
    """A reference page could not be fetched or parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class StoreError(Exception):
    """The Article Store rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class QuotaExhaustedError(Exception):
    """The LLM provider reported a quota or rate-limit error."""

    def __init__(self, model: str | None, cause: BaseException | None = None):
        super().__init__(f"Provider quota exhausted (model={model})")
        self.model = model
        self.cause = cause
