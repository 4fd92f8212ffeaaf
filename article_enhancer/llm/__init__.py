"""LLM invocation, model fallback and observability."""

from .errors import Outcome, classify_error
from .providers.base import ChatProvider
from .providers.catalog import CatalogProvider
from .providers.factory import available_providers, create_provider
from .providers.fixed import FixedModelProvider
from .rewriter import RewriteResult, Rewriter
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "CatalogProvider",
    "ChatProvider",
    "FixedModelProvider",
    "Outcome",
    "RewriteResult",
    "Rewriter",
    "available_providers",
    "classify_error",
    "create_provider",
    "flush",
    "record_span_error",
    "set_span_output",
    "setup_langfuse",
    "start_span",
]
