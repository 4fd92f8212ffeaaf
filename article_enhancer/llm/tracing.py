"""
Optional Langfuse tracing.

The run, every target and every model call are wrapped in a span when
tracing is enabled and both Langfuse keys are available. Otherwise every
helper here is a no-op and ``start_span`` yields None, so callers never
branch on whether tracing is on.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import json
import os
from typing import Any, Iterator

from ..config import LangfuseConfig
from ..utils.logging import redact_text, truncate_text


@dataclass
class _TracingState:
    client: Any = None
    cfg: LangfuseConfig | None = None


_state = _TracingState()


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Create the Langfuse client for this process, or disable tracing."""
    _state.cfg = cfg
    _state.client = None
    if not cfg.enabled:
        return

    settings = {
        "public_key": cfg.public_key or os.getenv("LANGFUSE_PUBLIC_KEY"),
        "secret_key": cfg.secret_key or os.getenv("LANGFUSE_SECRET_KEY"),
        "host": cfg.host or os.getenv("LANGFUSE_HOST"),
        "environment": cfg.environment or os.getenv("LANGFUSE_ENVIRONMENT"),
        "release": cfg.release or os.getenv("LANGFUSE_RELEASE"),
    }
    if not settings["public_key"] or not settings["secret_key"]:
        return
    try:
        from langfuse import Langfuse  # type: ignore
    except ImportError:
        # installed through the "tracing" extra
        return
    _state.client = Langfuse(**settings)


def get_tracer():
    return _state.client


@contextmanager
def start_span(
    name: str,
    kind: str,
    input_value: Any | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any | None]:
    client = _state.client
    if client is None:
        yield None
        return

    metadata = {
        key: value if isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in (attributes or {}).items()
        if value is not None
    }
    if kind:
        metadata.setdefault("span.kind", kind)

    try:
        span_cm = client.start_as_current_span(name=name, input=_payload(input_value), metadata=metadata)
        span = span_cm.__enter__()
    except Exception:  # noqa: BLE001
        yield None
        return
    try:
        yield span
    finally:
        try:
            span_cm.__exit__(None, None, None)
        except Exception:  # noqa: BLE001
            pass


def set_span_output(span: Any | None, output_value: Any) -> None:
    payload = _payload(output_value)
    if span is not None and payload is not None:
        _update(span, output=payload)


def record_span_error(span: Any | None, exc: BaseException) -> None:
    if span is not None:
        _update(span, level="ERROR", status_message=str(exc))


def flush() -> None:
    """Send buffered spans; Langfuse ingests asynchronously."""
    client = _state.client
    if client is None:
        return
    try:
        client.flush()
    except Exception:  # noqa: BLE001
        return


def _payload(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=True, default=str)
    cfg = _state.cfg
    if cfg is None:
        return text
    return truncate_text(redact_text(text, cfg.redaction), cfg.max_text_chars)


def _update(span: Any, **fields: Any) -> None:
    try:
        span.update(**fields)
    except Exception:  # noqa: BLE001
        return
