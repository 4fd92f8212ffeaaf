"""
HTTP fetching of reference pages.

Pages are fetched with httpx's async client so that the references of one
target can be downloaded side by side. Requests carry an explicit timeout
and an identifying User-Agent and are never retried.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..config import FetchConfig


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None


def build_async_client(cfg: FetchConfig, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    headers = {
        "User-Agent": cfg.user_agent,
        "Accept": "text/html,application/xhtml+xml",
    }
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers=headers,
        follow_redirects=True,
        trust_env=cfg.trust_env,
        transport=transport,
    )


async def fetch_url(client: httpx.AsyncClient, url: str) -> FetchResult:
    """Fetch a URL and report HTTP or network failures in the result.

    Args:
        client: Configured async client
        url: The URL to fetch

    Returns:
        FetchResult with text on success or error message on failure
    """
    try:
        resp = await client.get(url)
    except httpx.HTTPError as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")

    if resp.status_code >= 400:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=None,
            error=f"HTTP {resp.status_code}",
        )
    return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
