"""Tests for model candidate resolution, error classification and fallback."""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from article_enhancer.config import RewriteConfig
from article_enhancer.core.slug import MAX_TITLE_CHARS
from article_enhancer.core.types import Article, Reference
from article_enhancer.llm.errors import Outcome, classify_error
from article_enhancer.llm.providers.base import ChatProvider
from article_enhancer.llm.providers.catalog import CatalogProvider, rank_models
from article_enhancer.llm.providers.fixed import FixedModelProvider
from article_enhancer.llm.rewriter import Rewriter


class ProviderError(Exception):
    """Exception shaped like a provider SDK error."""

    def __init__(self, message, status_code=None, code=None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class _ScriptedProvider(ChatProvider):
    """Provider whose models either return text or raise a scripted error."""

    tag = "fake"

    def __init__(self, script: dict):
        self.script = script
        self.calls: list[str] = []
        self.messages = None

    def list_models(self):
        return list(self.script)

    def candidate_models(self):
        return list(self.script)

    def complete(self, model, messages, max_tokens, temperature):
        self.calls.append(model)
        self.messages = messages
        result = self.script[model]
        if isinstance(result, Exception):
            raise result
        return result


def _article() -> Article:
    return Article(id=1, title="Chatbots", content="Original body", source_url="https://a.example/x")


def _references() -> list[Reference]:
    return [
        Reference(title="Ref One", url="https://one.example/a", content="one"),
        Reference(title="Ref Two", url="https://two.example/b", content="two"),
    ]


def _unavailable() -> ProviderError:
    return ProviderError("The model has been decommissioned", status_code=400, code="model_decommissioned")


def test_unavailable_model_falls_back_to_next_candidate():
    provider = _ScriptedProvider(
        {"m1": _unavailable(), "m2": "# Rewritten by m2", "m3": "# Rewritten by m3"}
    )
    rewriter = Rewriter(provider, RewriteConfig())

    result = rewriter.attempt(_article(), _references())

    assert result.content == "# Rewritten by m2"
    assert result.model == "m2"
    assert result.outcome is Outcome.SUCCESS
    assert provider.calls == ["m1", "m2"]


def test_quota_error_stops_without_trying_other_models():
    provider = _ScriptedProvider(
        {"m1": ProviderError("Too many requests", status_code=429), "m2": "never"}
    )
    rewriter = Rewriter(provider, RewriteConfig())

    result = rewriter.attempt(_article(), _references())

    assert result.outcome is Outcome.QUOTA_EXHAUSTED
    assert result.content is None
    assert provider.calls == ["m1"]
    assert rewriter.rewrite(_article(), _references()) is None


def test_unclassified_error_propagates():
    provider = _ScriptedProvider({"m1": ProviderError("boom", status_code=500), "m2": "never"})
    rewriter = Rewriter(provider, RewriteConfig())

    with pytest.raises(ProviderError, match="boom"):
        rewriter.attempt(_article(), _references())
    assert provider.calls == ["m1"]


def test_exhausting_all_candidates_returns_none():
    provider = _ScriptedProvider({"m1": _unavailable(), "m2": _unavailable()})
    rewriter = Rewriter(provider, RewriteConfig())

    result = rewriter.attempt(_article(), _references())

    assert result.content is None
    assert result.outcome is Outcome.RETRYABLE
    assert "decommissioned" in result.error


def test_messages_bound_original_and_reference_content():
    article = Article(id=1, title="Long", content="x" * 5000, source_url="https://a.example/x")
    references = [Reference(title="Ref", url="https://one.example/a", content="y" * 5000)]
    provider = _ScriptedProvider({"m1": "ok"})
    rewriter = Rewriter(provider, RewriteConfig(max_content_chars=3000, max_reference_chars=2000))

    rewriter.rewrite(article, references)

    system, user = provider.messages
    assert system["role"] == "system"
    assert "## References" in system["content"]
    assert user["role"] == "user"
    assert "x" * 3000 in user["content"]
    assert "x" * 3001 not in user["content"]
    assert "y" * 2000 in user["content"]
    assert "y" * 2001 not in user["content"]
    assert "URL: https://one.example/a" in user["content"]
    assert "Title: Long" in user["content"]


def test_classify_error_on_openai_sdk_exceptions():
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    rate_limited = openai.RateLimitError(
        "Rate limit reached", response=httpx.Response(429, request=request), body=None
    )
    decommissioned = openai.BadRequestError(
        "model decommissioned",
        response=httpx.Response(400, request=request),
        body={"code": "model_decommissioned", "message": "The model has been decommissioned"},
    )
    server_error = openai.InternalServerError(
        "server error", response=httpx.Response(500, request=request), body=None
    )

    assert classify_error(rate_limited) is Outcome.QUOTA_EXHAUSTED
    assert classify_error(decommissioned) is Outcome.RETRYABLE
    assert classify_error(server_error) is Outcome.FATAL


def test_classify_error_reads_nested_body_codes():
    exc = ProviderError("Request failed")
    exc.body = {"error": {"code": "insufficient_quota", "message": "You exceeded your quota"}}

    assert classify_error(exc) is Outcome.QUOTA_EXHAUSTED
    assert classify_error(ValueError("unexpected")) is Outcome.FATAL


def _fake_client(model_ids=None, list_error=None):
    created = {}

    def list_models():
        if list_error is not None:
            raise list_error
        return SimpleNamespace(data=[SimpleNamespace(id=model_id) for model_id in model_ids or []])

    def create(**kwargs):
        created.update(kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="# Done"))])

    client = SimpleNamespace(
        models=SimpleNamespace(list=list_models),
        chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
    )
    return client, created


def test_rank_models_orders_by_preference_then_catalog():
    assert rank_models(["b", "x", "a"], ["a", "b", "c"]) == ["a", "b", "x"]


def test_catalog_provider_ranks_live_catalog():
    client, _ = _fake_client(["whisper-large-v3", "gemma2-9b-it", "llama-3.1-8b-instant"])
    provider = CatalogProvider(api_key=None, client=client)

    assert provider.candidate_models() == ["llama-3.1-8b-instant", "gemma2-9b-it", "whisper-large-v3"]


def test_catalog_provider_uses_override_as_sole_candidate():
    client, _ = _fake_client(list_error=AssertionError("catalog must not be queried"))
    provider = CatalogProvider(api_key=None, model_override="custom-model", client=client)

    assert provider.candidate_models() == ["custom-model"]


def test_catalog_provider_falls_back_to_default_ranking():
    client, _ = _fake_client(list_error=RuntimeError("network down"))
    provider = CatalogProvider(api_key=None, preferred_models=["p1", "p2"], client=client)

    assert provider.candidate_models() == ["p1", "p2"]


def test_fixed_provider_sends_completion_request():
    client, created = _fake_client()
    provider = FixedModelProvider(api_key=None, model="gpt-3.5-turbo", client=client)

    text = provider.complete("gpt-3.5-turbo", [{"role": "user", "content": "hi"}], max_tokens=1500, temperature=0.7)

    assert provider.candidate_models() == ["gpt-3.5-turbo"]
    assert text == "# Done"
    assert created["model"] == "gpt-3.5-turbo"
    assert created["max_tokens"] == 1500
    assert created["temperature"] == 0.7


def test_reference_titles_are_bounded_in_prompt():
    article = Article(id=1, title="Bots", content="body", source_url="https://a.example/x")
    references = [Reference(title="T" * 50000, url="https://one.example/a", content="y" * 100)]
    provider = _ScriptedProvider({"m1": "ok"})

    Rewriter(provider, RewriteConfig(max_reference_chars=2000)).rewrite(article, references)

    _, user = provider.messages
    assert "T" * MAX_TITLE_CHARS in user["content"]
    assert "T" * (MAX_TITLE_CHARS + 1) not in user["content"]
