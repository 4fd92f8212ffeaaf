"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- StoreConfig: Article Store API settings
- SearchConfig: Web search provider settings
- FetchConfig: HTTP fetching settings for reference pages
- ExtractConfig: Content extraction settings
- ProviderConfig: LLM provider settings
- RewriteConfig: Prompt bounds and completion parameters
- EnhanceConfig: Target selection and pacing
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container

The resulting AppConfig is built once at process start and passed explicitly
into the runner, the providers and the clients.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

from .errors import ConfigError


@dataclass
class StoreConfig:
    """Configuration for the Article Store API.

    Attributes:
        base_url: Store base URL (falls back to API_BASE_URL)
        api_prefix: Path prefix of the article routes
        timeout_seconds: HTTP request timeout
    """

    base_url: str | None = None
    api_prefix: str = "/api"
    timeout_seconds: float = 15.0


@dataclass
class SearchConfig:
    """Configuration for reference discovery.

    Attributes:
        endpoint: Search endpoint accepting {q, num}
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
        num_results: Number of organic results requested per query
        timeout_seconds: HTTP request timeout
    """

    endpoint: str = "https://google.serper.dev/search"
    api_key: str | None = None
    api_key_env: str = "SERPER_API_KEY"
    num_results: int = 10
    timeout_seconds: float = 15.0


@dataclass
class FetchConfig:
    """Configuration for fetching reference pages.

    Attributes:
        timeout_seconds: HTTP request timeout
        concurrency: Number of reference pages fetched at once per target
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 20.0
    concurrency: int = 2
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (compatible; ArticleEnhancer/0.1; "
        "+https://github.com/article-enhancer)"
    )


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        primary: Primary extraction method ("readability", "trafilatura", "selectors", "body")
        fallback: List of fallback methods to try if primary yields nothing
        max_chars: Character budget for extracted text
    """

    primary: str = "readability"
    fallback: list[str] = field(default_factory=lambda: ["selectors", "body"])
    max_chars: int = 6000


DEFAULT_GROQ_MODELS = [
    "llama-3.3-70b-versatile",
    "llama-3.3-70b-specdec",
    "llama-3.1-8b-instant",
    "mixtral-8x7b-32768",
    "gemma2-9b-it",
]


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    Attributes:
        name: "groq" or "openai"; picked from available credentials when empty
        model: Explicit model override (falls back to GROQ_MODEL / OPENAI_MODEL)
        api_key: Optional inline API key (overrides env vars)
        groq_api_key_env: Environment variable name containing the Groq key
        openai_api_key_env: Environment variable name containing the OpenAI key
        groq_base_url: Base URL for the Groq OpenAI-compatible API
        openai_base_url: Optional base URL for the OpenAI API
        openai_model: Model used by the fixed-model provider
        preferred_models: Ranking applied to the Groq model catalog
        timeout_seconds: Request timeout for model calls
    """

    name: str | None = None
    model: str | None = None
    api_key: str | None = None
    groq_api_key_env: str = "GROQ_API_KEY"
    openai_api_key_env: str = "OPENAI_API_KEY"
    groq_base_url: str = "https://api.groq.com/openai/v1"
    openai_base_url: str | None = None
    openai_model: str = "gpt-3.5-turbo"
    preferred_models: list[str] = field(default_factory=lambda: list(DEFAULT_GROQ_MODELS))
    timeout_seconds: float = 60.0


@dataclass
class RewriteConfig:
    """Configuration for the rewrite prompt.

    Attributes:
        max_content_chars: Characters of the original article sent to the model
        max_reference_chars: Characters of each reference sent to the model
        max_tokens: Completion token limit
        temperature: Sampling temperature
        title_prefix: Prefix of generated article titles
    """

    max_content_chars: int = 3000
    max_reference_chars: int = 2000
    max_tokens: int = 1500
    temperature: float = 0.7
    title_prefix: str = "AI Enhanced: "


@dataclass
class EnhanceConfig:
    """Configuration for target selection.

    Attributes:
        mode: "all" for every uncovered original, "latest" for the newest one
        reference_count: Minimum (and requested) number of references
        max_targets: Cap on targets per run (0 = unbounded)
        delay_seconds: Pause between targets
    """

    mode: str = "all"
    reference_count: int = 2
    max_targets: int = 0
    delay_seconds: float = 0.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        directory: Directory for log files
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("summary_only", "response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    directory: str = "logs"
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    store: StoreConfig = field(default_factory=StoreConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    enhance: EnhanceConfig = field(default_factory=EnhanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS = {
    "store": StoreConfig,
    "search": SearchConfig,
    "fetch": FetchConfig,
    "extract": ExtractConfig,
    "provider": ProviderConfig,
    "rewrite": RewriteConfig,
    "enhance": EnhanceConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}

VALID_MODES = ("all", "latest")


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            known = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(known)
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_store_base_url(cfg: StoreConfig) -> str | None:
    """Get the store base URL from inline config or environment variable."""
    value = cfg.base_url or os.getenv("API_BASE_URL")
    return value.strip() if value and value.strip() else None


def get_search_api_key(cfg: SearchConfig) -> str | None:
    """Get the search API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return _getenv(cfg.api_key_env)


def resolve_provider_name(cfg: ProviderConfig) -> str | None:
    """Pick the provider name, preferring Groq when both credentials exist."""
    if cfg.name:
        return cfg.name.lower().strip()
    if _getenv(cfg.groq_api_key_env):
        return "groq"
    if _getenv(cfg.openai_api_key_env):
        return "openai"
    if cfg.api_key:
        return "groq"
    return None


def get_api_key(cfg: ProviderConfig, name: str) -> str | None:
    """Get the provider API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if name == "groq":
        return _getenv(cfg.groq_api_key_env)
    if name == "openai":
        return _getenv(cfg.openai_api_key_env)
    return None


def get_model_override(cfg: ProviderConfig, name: str) -> str | None:
    """Get the explicit model override for the given provider."""
    if cfg.model:
        return cfg.model.strip() or None
    if name == "groq":
        return _getenv("GROQ_MODEL")
    if name == "openai":
        return _getenv("OPENAI_MODEL")
    return None


def get_groq_base_url(cfg: ProviderConfig) -> str:
    return _getenv("GROQ_BASE_URL") or cfg.groq_base_url


def validate_config(cfg: AppConfig) -> None:
    """Raise ConfigError naming every missing or invalid setting."""
    problems = []
    if not get_store_base_url(cfg.store):
        problems.append("store base URL (set store.base_url or API_BASE_URL)")
    if not get_search_api_key(cfg.search):
        problems.append(f"search API key (set search.api_key or {cfg.search.api_key_env})")
    name = resolve_provider_name(cfg.provider)
    if name is None:
        problems.append(
            f"LLM credential (set {cfg.provider.groq_api_key_env} or {cfg.provider.openai_api_key_env})"
        )
    elif not get_api_key(cfg.provider, name):
        problems.append(f"API key for provider '{name}'")
    if cfg.enhance.mode not in VALID_MODES:
        problems.append(f"enhance.mode must be one of {', '.join(VALID_MODES)}")
    if cfg.enhance.reference_count < 1:
        problems.append("enhance.reference_count must be at least 1")
    if cfg.enhance.max_targets < 0:
        problems.append("enhance.max_targets must be 0 (unbounded) or positive")
    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems))


def _getenv(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None
