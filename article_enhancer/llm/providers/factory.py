"""Provider factory selecting the backend from configured credentials."""

from __future__ import annotations

from ...config import (
    ProviderConfig,
    get_api_key,
    get_groq_base_url,
    get_model_override,
    resolve_provider_name,
)
from ...errors import ConfigError
from .base import ChatProvider
from .catalog import CatalogProvider
from .fixed import FixedModelProvider


def _build_groq(cfg: ProviderConfig) -> ChatProvider:
    return CatalogProvider(
        api_key=get_api_key(cfg, "groq"),
        base_url=get_groq_base_url(cfg),
        model_override=get_model_override(cfg, "groq"),
        preferred_models=cfg.preferred_models,
        timeout=cfg.timeout_seconds,
    )


def _build_openai(cfg: ProviderConfig) -> ChatProvider:
    return FixedModelProvider(
        api_key=get_api_key(cfg, "openai"),
        model=get_model_override(cfg, "openai") or cfg.openai_model,
        base_url=cfg.openai_base_url,
        timeout=cfg.timeout_seconds,
    )


_PROVIDER_REGISTRY = {
    "groq": _build_groq,
    "openai": _build_openai,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(cfg: ProviderConfig) -> ChatProvider:
    """Build a provider instance from runtime config."""
    name = resolve_provider_name(cfg)
    if name is None:
        raise ConfigError(
            f"No LLM credential found. Set {cfg.groq_api_key_env} or {cfg.openai_api_key_env}."
        )
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ConfigError(f"Unsupported provider: {name}. Supported: {supported}")
    if not get_api_key(cfg, name):
        raise ConfigError(f"Missing API key for provider '{name}'")
    return builder(cfg)
