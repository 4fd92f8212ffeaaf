"""Provider bound to one configured model (OpenAI)."""

from __future__ import annotations

from typing import Any

from .openai_compatible import OpenAICompatibleProvider


class FixedModelProvider(OpenAICompatibleProvider):
    """OpenAI-backed provider that always uses the configured model."""

    tag = "openai"

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str | None = None,
        timeout: float = 60.0,
        client: Any | None = None,
    ):
        super().__init__(api_key, base_url=base_url, timeout=timeout, client=client)
        self.model = model

    def candidate_models(self) -> list[str]:
        return [self.model]
