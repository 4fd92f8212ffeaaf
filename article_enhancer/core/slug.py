"""Slug and host helpers."""

from __future__ import annotations

from datetime import datetime
import re
from urllib.parse import urlparse


def slugify(text: str) -> str:
    """Convert text to URL-safe slug.

    Args:
        text: The text to slugify

    Returns:
        A lowercase, hyphenated slug limited to 80 characters
    """
    slug = text.lower()
    # Replace non-alphanumeric characters with hyphens
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    if not slug:
        slug = "untitled"
    return slug[:80].rstrip("-")


def generated_slug(title: str, provider_tag: str, when: datetime) -> str:
    """Build the slug of a generated article.

    The title slug is followed by the provider tag and a timestamp so that
    separate runs enhancing the same original never collide on slug.

    Examples:
        >>> generated_slug("AI Enhanced: Bots", "groq", datetime(2026, 1, 2, 3, 4, 5))
        'ai-enhanced-bots-groq-20260102030405'
    """
    tag = slugify(provider_tag) if provider_tag else "llm"
    return f"{slugify(title)}-{tag}-{when.strftime('%Y%m%d%H%M%S')}"


def normalize_host(url: str) -> str | None:
    """Return the lowercase host of url without a leading "www.", or None."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    host = host.lower().rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    return host or None


MAX_TITLE_CHARS = 300


def bound_title(text: str, max_chars: int = MAX_TITLE_CHARS) -> str:
    """Collapse whitespace in an externally sourced title and cap its length."""
    title = " ".join(text.split())
    if len(title) <= max_chars:
        return title
    return title[:max_chars].rstrip()
