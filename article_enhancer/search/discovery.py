"""
Reference discovery through a web search API.

One query is issued per target using the article title. Organic results are
kept in ranked order when they pass every filter: absolute HTTP(S) link, host
not in the social/media blocklist, host different from the source article,
host not already accepted, and link not pointing at a binary resource.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable
from urllib.parse import urlparse

import httpx

from ..config import SearchConfig, get_search_api_key
from ..core.slug import bound_title, normalize_host
from ..core.types import ReferenceCandidate
from ..errors import ConfigError
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

BLOCKED_HOSTS = frozenset(
    {
        "youtube.com",
        "youtu.be",
        "vimeo.com",
        "tiktok.com",
        "facebook.com",
        "instagram.com",
        "twitter.com",
        "x.com",
        "linkedin.com",
        "pinterest.com",
        "reddit.com",
        "quora.com",
    }
)

BINARY_EXTENSIONS = (
    ".pdf",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".svg",
    ".mp3",
    ".mp4",
    ".mov",
    ".zip",
    ".doc",
    ".docx",
    ".ppt",
    ".pptx",
    ".xls",
    ".xlsx",
)


def is_blocked_host(host: str) -> bool:
    """True when host is a blocklisted domain or one of its subdomains."""
    return any(host == blocked or host.endswith("." + blocked) for blocked in BLOCKED_HOSTS)


def is_binary_link(url: str) -> bool:
    path = urlparse(url).path.lower()
    return path.endswith(BINARY_EXTENSIONS)


def filter_candidates(
    results: Iterable[dict[str, Any]],
    source_url: str,
    limit: int,
) -> list[ReferenceCandidate]:
    """Apply the discovery filters to ranked search results.

    Args:
        results: Organic results, each with "title" and "link"
        source_url: URL of the article being enhanced
        limit: Maximum number of candidates to accept

    Returns:
        At most limit candidates, one per host, in ranked order
    """
    source_host = normalize_host(source_url)
    seen_hosts: set[str] = set()
    accepted: list[ReferenceCandidate] = []
    for item in results:
        if len(accepted) >= limit:
            break
        link = str(item.get("link") or "").strip()
        try:
            scheme = urlparse(link).scheme
        except ValueError:
            continue
        if scheme not in ("http", "https"):
            continue
        host = normalize_host(link)
        if host is None or is_blocked_host(host):
            continue
        if host == source_host or host in seen_hosts:
            continue
        if is_binary_link(link):
            continue
        seen_hosts.add(host)
        title = bound_title(str(item.get("title") or "")) or host
        accepted.append(ReferenceCandidate(title=title, url=link))
    return accepted


class ReferenceSearcher:
    """Search-provider client returning filtered reference candidates."""

    def __init__(self, cfg: SearchConfig, client: httpx.Client | None = None):
        api_key = get_search_api_key(cfg)
        if not api_key:
            raise ConfigError(f"Missing search API key ({cfg.api_key_env})")
        self.cfg = cfg
        self.api_key = api_key
        self._client = client

    def search(self, query: str) -> list[dict[str, Any]]:
        """Return the ranked organic results for query."""
        payload = {"q": query, "num": self.cfg.num_results}
        headers = {"X-API-KEY": self.api_key, "Content-Type": "application/json"}
        if self._client is not None:
            resp = self._client.post(self.cfg.endpoint, json=payload, headers=headers)
        else:
            with httpx.Client(timeout=self.cfg.timeout_seconds) as client:
                resp = client.post(self.cfg.endpoint, json=payload, headers=headers)
        resp.raise_for_status()
        organic = resp.json().get("organic") or []
        return [item for item in organic if isinstance(item, dict)]

    def discover(self, title: str, source_url: str, limit: int) -> list[ReferenceCandidate]:
        """Find up to limit host-diverse reference candidates for an article.

        Fewer than limit candidates is a normal outcome; a failed search call
        yields an empty list.
        """
        try:
            results = self.search(title)
        except (httpx.HTTPError, ValueError) as exc:
            log_event(
                logger,
                "Search failed",
                level=logging.WARNING,
                event="search_failed",
                query=title,
                error=f"{type(exc).__name__}: {exc}",
            )
            return []
        candidates = filter_candidates(results, source_url, limit)
        log_event(
            logger,
            "Search complete",
            event="search_complete",
            query=title,
            results=len(results),
            accepted=len(candidates),
        )
        return candidates
