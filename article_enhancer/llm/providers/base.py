"""Abstract interface for chat-completion backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ChatProvider(ABC):
    """Provider interface over the capability set {list_models, complete}.

    Attributes:
        tag: Short provider label used in logs and generated slugs
    """

    tag: str = "llm"

    @abstractmethod
    def list_models(self) -> list[str]:
        """Return the model identifiers the provider offers."""
        raise NotImplementedError

    @abstractmethod
    def candidate_models(self) -> list[str]:
        """Return the models to try, most preferred first."""
        raise NotImplementedError

    @abstractmethod
    def complete(
        self,
        model: str,
        messages: list[dict[str, Any]],
        max_tokens: int,
        temperature: float,
    ) -> str | None:
        """Run one chat completion and return its text.

        Provider errors are raised unchanged so the caller can classify them.
        """
        raise NotImplementedError
