"""
Article rewriting with model fallback.

The rewriter walks the provider's candidate models in order. Each failed call
is classified: an unavailable model moves on to the next candidate, a quota
error stops work on the article, and anything else propagates to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from ..config import LoggingConfig, RewriteConfig
from ..core.types import Article, Reference
from ..utils.logging import log_event, redact_text, truncate_text
from .errors import Outcome, classify_error
from .prompts import build_messages
from .providers.base import ChatProvider
from .tracing import record_span_error, set_span_output, start_span

logger = logging.getLogger(__name__)


@dataclass
class RewriteResult:
    """Outcome of one rewrite attempt.

    Attributes:
        content: Markdown returned by the model, or None
        model: Model that produced content or raised the final error
        outcome: SUCCESS, RETRYABLE (all candidates unavailable) or QUOTA_EXHAUSTED
        error: Message of the last provider error
    """
    content: str | None
    model: str | None
    outcome: Outcome
    error: str | None = None


class Rewriter:
    """Rewrites an article from its content and references."""

    def __init__(
        self,
        provider: ChatProvider,
        cfg: RewriteConfig,
        log_cfg: LoggingConfig | None = None,
        llm_logger: logging.Logger | None = None,
    ):
        self.provider = provider
        self.cfg = cfg
        self.log_cfg = log_cfg or LoggingConfig()
        self.llm_logger = llm_logger

    @property
    def tag(self) -> str:
        return self.provider.tag

    def rewrite(self, article: Article, references: list[Reference]) -> str | None:
        """Return the rewritten Markdown, or None when no model produced it."""
        return self.attempt(article, references).content

    def attempt(self, article: Article, references: list[Reference]) -> RewriteResult:
        messages = build_messages(article, references, self.cfg)
        candidates = self.provider.candidate_models()
        last_error: str | None = None

        for model in candidates:
            log_event(
                logger,
                f"Calling {self.provider.tag} model: {model}",
                event="llm_call",
                provider=self.provider.tag,
                model=model,
                article_id=article.id,
            )
            with start_span(
                "article_enhancer.rewrite",
                kind="llm",
                input_value=messages[-1]["content"],
                attributes={
                    "llm.model": model,
                    "llm.provider": self.provider.tag,
                    "article.id": article.id,
                    "article.title": article.title,
                },
            ) as span:
                try:
                    text = self.provider.complete(
                        model,
                        messages,
                        max_tokens=self.cfg.max_tokens,
                        temperature=self.cfg.temperature,
                    )
                except Exception as exc:  # noqa: BLE001
                    record_span_error(span, exc)
                    outcome = classify_error(exc)
                    last_error = f"{type(exc).__name__}: {exc}"
                    self._log_llm_response(article, model, outcome.value, last_error, messages)
                    if outcome is Outcome.QUOTA_EXHAUSTED:
                        log_event(
                            logger,
                            f"{self.provider.tag} quota exceeded. Check billing or use a key with available quota.",
                            level=logging.ERROR,
                            event="llm_quota_exhausted",
                            model=model,
                        )
                        return RewriteResult(None, model, outcome, last_error)
                    if outcome is Outcome.RETRYABLE:
                        log_event(
                            logger,
                            f"Model {model} is unavailable. Trying the next option.",
                            level=logging.WARNING,
                            event="llm_model_unavailable",
                            model=model,
                        )
                        continue
                    raise

                set_span_output(span, text)
                self._log_llm_response(article, model, "ok", text or "", messages)
                content = (text or "").strip() or None
                return RewriteResult(content, model, Outcome.SUCCESS)

        log_event(
            logger,
            f"No available {self.provider.tag} model found",
            level=logging.ERROR,
            event="llm_models_exhausted",
            candidates=candidates,
            error=last_error,
        )
        return RewriteResult(None, None, Outcome.RETRYABLE, last_error)

    def _log_llm_response(
        self,
        article: Article,
        model: str,
        status: str,
        content: str,
        messages: list[dict],
    ) -> None:
        if self.llm_logger is None:
            return
        detail = self.log_cfg.llm_log_detail
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_rewrite_response",
            "status": status,
            "provider": self.provider.tag,
            "model": model,
            "article_id": article.id,
            "article_title": article.title,
        }
        if detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(messages[-1]["content"], redaction))
        if detail in ("prompt_response", "response_only"):
            payload["raw_response"] = truncate_text(redact_text(content, redaction))
        log_event(self.llm_logger, "LLM response", **payload)
