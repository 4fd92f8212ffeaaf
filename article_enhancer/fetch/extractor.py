"""
HTML main-content extraction with multiple fallback strategies.

This module provides a chain of extraction methods:
1. readability: Mozilla's readability algorithm (default)
2. selectors: Longest text among well-known content containers
3. body: Full document body text (last resort)

trafilatura is also registered and may be configured into the chain.
Every method returns whitespace-normalized text; the chain result is cut to
the configured character budget.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from bs4 import BeautifulSoup
import httpx
import trafilatura
from readability import Document

from ..config import ExtractConfig, FetchConfig
from ..core.slug import bound_title
from ..core.types import ExtractedPage
from ..errors import ExtractionError
from .fetcher import build_async_client, fetch_url

logger = logging.getLogger(__name__)

# Order matters: on equal length the earlier selector wins.
CANDIDATE_SELECTORS = [
    "article",
    "main",
    "[role=main]",
    "#content",
    "#main-content",
    ".entry-content",
    ".post-content",
    ".article-content",
    ".article-body",
    "[class*=article]",
    "[class*=post]",
    "[class*=content]",
    "[id*=article]",
    "[id*=post]",
    "[id*=content]",
]

NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe"]

_WS_RE = re.compile(r"\s+")

Extracted = tuple[str, str]


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return _WS_RE.sub(" ", text).strip()


def bound_text(text: str, max_chars: int) -> str:
    """Cut text to max_chars, trimming a dangling space at the cut."""
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip()


def extract_from_html(html: str, cfg: ExtractConfig, url: str = "") -> ExtractedPage:
    """Extract the title and main text of an HTML document.

    Tries each extraction method in order until one produces non-empty
    text. A method that raises is treated like one that found nothing.

    Args:
        html: The HTML document
        cfg: Extraction settings (method chain and character budget)
        url: Page URL, used for logging

    Returns:
        ExtractedPage whose content is normalized and bounded; content is
        empty when every method came back empty
    """
    order = [cfg.primary] + [name for name in cfg.fallback if name != cfg.primary]
    title = _document_title(html)
    for method in order:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        try:
            found_title, text = extractor(html)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Extractor %s failed for %s: %s", method, url, exc)
            continue
        text = normalize_whitespace(text or "")
        if text:
            return ExtractedPage(
                url=url,
                title=bound_title(found_title or title),
                content=bound_text(text, cfg.max_chars),
                method=method,
            )
    return ExtractedPage(url=url, title=bound_title(title), content="", method=None)


class ContentExtractor:
    """Fetches pages and extracts their bounded main content."""

    def __init__(
        self,
        fetch_cfg: FetchConfig,
        extract_cfg: ExtractConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.fetch_cfg = fetch_cfg
        self.extract_cfg = extract_cfg
        self._transport = transport

    async def extract(self, url: str) -> ExtractedPage:
        """Fetch url and extract its main content.

        Raises:
            ExtractionError: when the page cannot be fetched or holds no text
        """
        async with build_async_client(self.fetch_cfg, self._transport) as client:
            result = await fetch_url(client, url)
        if result.error or result.text is None:
            raise ExtractionError(url, result.error or "empty response")
        page = extract_from_html(result.text, self.extract_cfg, url=url)
        if not page.content:
            raise ExtractionError(url, "no extractable text")
        return page


def _get_extractor(name: str) -> Callable[[str], Extracted] | None:
    """Get the extractor function for a given method name."""
    if name == "readability":
        return _extract_readability
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "selectors":
        return _extract_selectors
    if name == "body":
        return _extract_body
    return None


def _extract_readability(html: str) -> Extracted:
    """Densest-block extraction using Mozilla's readability algorithm."""
    doc = Document(html)
    content_html = doc.summary(html_partial=True)
    soup = BeautifulSoup(content_html, "html.parser")
    return doc.short_title() or "", soup.get_text(separator=" ")


def _extract_trafilatura(html: str) -> Extracted:
    return "", trafilatura.extract(html) or ""


def _extract_selectors(html: str) -> Extracted:
    """Keep the candidate container whose normalized text is longest."""
    soup = _clean_soup(html)
    best = ""
    for selector in CANDIDATE_SELECTORS:
        for node in soup.select(selector):
            text = normalize_whitespace(node.get_text(separator=" "))
            if len(text) > len(best):
                best = text
    return "", best


def _extract_body(html: str) -> Extracted:
    soup = _clean_soup(html)
    root = soup.body or soup
    return "", root.get_text(separator=" ")


def _clean_soup(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    return soup


def _document_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content"):
        return str(og_title["content"])
    if soup.title and soup.title.string:
        return str(soup.title.string)
    heading = soup.find("h1")
    if heading:
        return heading.get_text(separator=" ")
    return ""
