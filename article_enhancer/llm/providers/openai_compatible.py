"""Shared plumbing for providers speaking the OpenAI chat-completions API."""

from __future__ import annotations

from typing import Any

from openai import OpenAI

from .base import ChatProvider


class OpenAICompatibleProvider(ChatProvider):
    """Base for providers reached through the openai SDK.

    Automatic SDK retries are disabled; fallback between models is decided
    by the rewriter.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        timeout: float = 60.0,
        client: Any | None = None,
    ):
        if not api_key and client is None:
            raise ValueError(f"Missing API key for provider '{self.tag}'")
        self.client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    def list_models(self) -> list[str]:
        response = self.client.models.list()
        ids = []
        for model in getattr(response, "data", None) or []:
            model_id = getattr(model, "id", None) or (model if isinstance(model, str) else None)
            if model_id:
                ids.append(model_id)
        return ids

    def complete(
        self,
        model: str,
        messages: list[dict[str, Any]],
        max_tokens: int,
        temperature: float,
    ) -> str | None:
        completion = self.client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content
