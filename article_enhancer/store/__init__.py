"""Article Store API client."""

from .client import ArticleStoreClient

__all__ = ["ArticleStoreClient"]
