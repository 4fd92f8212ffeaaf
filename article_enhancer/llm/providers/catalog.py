"""Provider with a queryable model catalog (Groq)."""

from __future__ import annotations

import logging
from typing import Any

from ...config import DEFAULT_GROQ_MODELS
from ...utils.logging import log_event
from .openai_compatible import OpenAICompatibleProvider

logger = logging.getLogger(__name__)


def rank_models(catalog: list[str], preferred: list[str]) -> list[str]:
    """Order catalog entries by the preference list, then the rest as listed.

    Examples:
        >>> rank_models(["b", "x", "a"], ["a", "b", "c"])
        ['a', 'b', 'x']
    """
    ranked = [model for model in preferred if model in catalog]
    for model in catalog:
        if model not in ranked:
            ranked.append(model)
    return ranked


class CatalogProvider(OpenAICompatibleProvider):
    """Groq-backed provider that picks models from the live catalog."""

    tag = "groq"

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        model_override: str | None = None,
        preferred_models: list[str] | None = None,
        timeout: float = 60.0,
        client: Any | None = None,
    ):
        super().__init__(api_key, base_url=base_url, timeout=timeout, client=client)
        self.model_override = model_override
        self.preferred_models = list(preferred_models or DEFAULT_GROQ_MODELS)

    def candidate_models(self) -> list[str]:
        if self.model_override:
            return [self.model_override]
        try:
            catalog = self.list_models()
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                "Unable to list models, falling back to default ranking",
                level=logging.WARNING,
                event="model_catalog_failed",
                provider=self.tag,
                error=f"{type(exc).__name__}: {exc}",
            )
            return list(self.preferred_models)
        if not catalog:
            return list(self.preferred_models)
        return rank_models(catalog, self.preferred_models)
