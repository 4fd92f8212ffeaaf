"""Tests for reference discovery filtering and the search client."""

from __future__ import annotations

import json

import httpx
import pytest

from article_enhancer.config import SearchConfig
from article_enhancer.core.slug import MAX_TITLE_CHARS, normalize_host
from article_enhancer.errors import ConfigError
from article_enhancer.search.discovery import (
    BLOCKED_HOSTS,
    ReferenceSearcher,
    filter_candidates,
    is_blocked_host,
)


def _results(*links: str) -> list[dict]:
    return [{"title": f"Result {idx}", "link": link} for idx, link in enumerate(links)]


def test_filter_candidates_applies_every_rule_in_ranked_order():
    results = _results(
        "https://www.youtube.com/watch?v=abc",
        "https://www.a.example/other-post",
        "https://blog.one.com/post",
        "ftp://files.example.net/doc",
        "/relative/path",
        "https://www.two.org/a",
        "https://two.org/b",
        "https://four.io/whitepaper.PDF",
        "https://m.facebook.com/page",
        "https://five.dev/guide",
    )

    candidates = filter_candidates(results, "https://a.example/x", limit=5)

    assert [c.url for c in candidates] == [
        "https://blog.one.com/post",
        "https://www.two.org/a",
        "https://five.dev/guide",
    ]
    assert candidates[0].title == "Result 2"


def test_filter_candidates_stops_at_limit():
    results = _results("https://one.com/a", "https://two.com/b", "https://three.com/c")

    candidates = filter_candidates(results, "https://source.com/x", limit=2)

    assert [c.url for c in candidates] == ["https://one.com/a", "https://two.com/b"]


def test_filter_candidates_invariants_hold_for_mixed_results():
    links = []
    for host in ["a.com", "www.a.com", "b.com", "reddit.com", "c.com", "src.com", "x.com", "d.com"]:
        links.append(f"https://{host}/one")
        links.append(f"https://{host}/two")
    candidates = filter_candidates(_results(*links), "https://www.src.com/article", limit=10)

    hosts = [normalize_host(c.url) for c in candidates]
    assert len(hosts) == len(set(hosts))
    assert "src.com" not in hosts
    assert not any(is_blocked_host(host) for host in hosts)
    assert hosts == ["a.com", "b.com", "c.com", "d.com"]


def test_blocked_hosts_match_subdomains_only():
    assert is_blocked_host("youtube.com")
    assert is_blocked_host("music.youtube.com")
    assert not is_blocked_host("notyoutube.com")
    assert "reddit.com" in BLOCKED_HOSTS


def test_discover_posts_query_and_returns_candidates():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        seen["key"] = request.headers["X-API-KEY"]
        return httpx.Response(
            200,
            json={
                "organic": _results(
                    "https://reddit.com/r/bots",
                    "https://guide.example.org/chatbots",
                    "https://news.example.com/bots",
                )
            },
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    searcher = ReferenceSearcher(SearchConfig(api_key="secret", num_results=7), client=client)

    candidates = searcher.discover("Chatbots in 2025", "https://source.example/x", limit=2)

    assert seen["url"] == "https://google.serper.dev/search"
    assert seen["body"] == {"q": "Chatbots in 2025", "num": 7}
    assert seen["key"] == "secret"
    assert [c.url for c in candidates] == [
        "https://guide.example.org/chatbots",
        "https://news.example.com/bots",
    ]


def test_discover_returns_empty_list_when_search_fails():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    searcher = ReferenceSearcher(SearchConfig(api_key="secret"), client=client)

    assert searcher.discover("Anything", "https://source.example/x", limit=2) == []


def test_searcher_requires_api_key(monkeypatch):
    monkeypatch.delenv("SERPER_API_KEY", raising=False)

    with pytest.raises(ConfigError):
        ReferenceSearcher(SearchConfig())


def test_malformed_links_are_skipped_without_failing_the_search():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "organic": [
                    {"title": "Broken", "link": "http://[broken/page"},
                    {"title": "One", "link": "https://one.example/a"},
                    {"title": "Two", "link": "https://two.example/b"},
                ]
            },
        )

    client = httpx.Client(transport=httpx.MockTransport(handler))
    searcher = ReferenceSearcher(SearchConfig(api_key="secret"), client=client)

    candidates = searcher.discover("T", "https://src.example/x", limit=2)

    assert [c.url for c in candidates] == ["https://one.example/a", "https://two.example/b"]


def test_candidate_titles_are_bounded():
    results = [{"title": "Very long headline " * 1000, "link": "https://one.example/a"}]

    candidates = filter_candidates(results, "https://src.example/x", limit=2)

    assert 0 < len(candidates[0].title) <= MAX_TITLE_CHARS
    assert candidates[0].title.startswith("Very long headline")
