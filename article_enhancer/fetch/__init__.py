"""
Reference page fetching and extraction.

This package handles HTTP fetching and main-content
extraction for reference pages.
"""

from .extractor import ContentExtractor, extract_from_html, normalize_whitespace
from .fetcher import FetchResult, fetch_url

__all__ = [
    "ContentExtractor",
    "FetchResult",
    "extract_from_html",
    "fetch_url",
    "normalize_whitespace",
]
