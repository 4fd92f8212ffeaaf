"""
HTTP client for the Article Store.

Routes live under the store's API prefix:
- GET  /articles?order={latest|asc|desc}&limit=N
- POST /articles
- PUT  /articles/{id}
"""

from __future__ import annotations

from typing import Any

import httpx

from ..config import StoreConfig, get_store_base_url
from ..core.types import Article
from ..errors import ConfigError, StoreError

ORDERS = ("latest", "asc", "desc")


class ArticleStoreClient:
    """Read/write access to the article collection."""

    def __init__(self, cfg: StoreConfig, client: httpx.Client | None = None):
        base_url = get_store_base_url(cfg)
        if not base_url:
            raise ConfigError("API_BASE_URL is not set (store.base_url)")
        self.cfg = cfg
        self.base_url = base_url.rstrip("/") + "/" + cfg.api_prefix.strip("/")
        self._client = client or httpx.Client(timeout=cfg.timeout_seconds)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ArticleStoreClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def list_articles(self, order: str | None = None, limit: int | None = None) -> list[Article]:
        """Return articles in store order, optionally sorted and limited."""
        params: dict[str, Any] = {}
        if order is not None:
            if order not in ORDERS:
                raise ValueError(f"Unsupported order: {order}")
            params["order"] = order
        if limit:
            params["limit"] = limit
        data = self._request("GET", "/articles", params=params or None)
        if isinstance(data, dict):
            data = data.get("data") or []
        return [Article.from_dict(item) for item in data if isinstance(item, dict)]

    def create_article(
        self,
        title: str,
        content: str,
        source_url: str,
        slug: str,
        is_generated: bool = False,
        original_article_id: Any | None = None,
        published_at: str | None = None,
    ) -> Article:
        payload: dict[str, Any] = {
            "title": title,
            "content": content,
            "source_url": source_url,
            "slug": slug,
            "is_generated": is_generated,
        }
        if original_article_id is not None:
            payload["original_article_id"] = original_article_id
        if published_at is not None:
            payload["published_at"] = published_at
        return Article.from_dict(self._request("POST", "/articles", json=payload))

    def update_article(
        self,
        article_id: Any,
        title: str,
        content: str,
        source_url: str,
        is_generated: bool | None = None,
        original_article_id: Any | None = None,
        published_at: str | None = None,
    ) -> Article:
        payload: dict[str, Any] = {
            "title": title,
            "content": content,
            "source_url": source_url,
        }
        if is_generated is not None:
            payload["is_generated"] = is_generated
        if original_article_id is not None:
            payload["original_article_id"] = original_article_id
        if published_at is not None:
            payload["published_at"] = published_at
        return Article.from_dict(self._request("PUT", f"/articles/{article_id}", json=payload))

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self.base_url + path
        try:
            resp = self._client.request(method, url, headers={"Accept": "application/json"}, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {path} failed: {type(exc).__name__}: {exc}") from exc
        if resp.status_code >= 400:
            raise StoreError(
                f"{method} {path} returned HTTP {resp.status_code}: {resp.text[:300]}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(f"{method} {path} returned invalid JSON") from exc
