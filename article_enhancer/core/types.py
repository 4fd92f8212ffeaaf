"""
Core data types for the Article Enhancer.

This module defines the fundamental data structures used throughout the pipeline:
- Article: An article as stored in the Article Store
- ReferenceCandidate: A search result accepted by reference discovery
- ExtractedPage: Title and bounded main text of a fetched page
- Reference: A candidate paired with its extracted content
- TargetOutcome: The per-target result of an enhancement run
- RunReport: Outcomes of a whole run plus its final status
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Article:
    """An article owned by the Article Store.

    Attributes:
        id: Opaque stable identifier assigned by the store
        title: The article headline
        content: Article body; Markdown for generated articles
        slug: Unique slug
        source_url: Origin URL of the original scraped page
        is_generated: False for originals, True for AI-enhanced articles
        original_article_id: Back-reference set only on generated articles
        published_at: ISO 8601 publish timestamp of generated articles
    """
    id: Any
    title: str
    content: str = ""
    slug: str | None = None
    source_url: str = ""
    is_generated: bool = False
    original_article_id: Any | None = None
    published_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Article":
        return cls(
            id=data.get("id"),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            slug=data.get("slug"),
            source_url=str(data.get("source_url") or ""),
            is_generated=bool(data.get("is_generated") or False),
            original_article_id=data.get("original_article_id"),
            published_at=data.get("published_at"),
        )


@dataclass
class ReferenceCandidate:
    """A search result that passed the discovery filters."""
    title: str
    url: str


@dataclass
class ExtractedPage:
    """Main content of a fetched page, whitespace-normalized and bounded."""
    url: str
    title: str
    content: str
    method: str | None = None


@dataclass
class Reference:
    """A third-party article used as inspiration and cited in the output.

    content is empty when the page could not be fetched or extracted.
    """
    title: str
    url: str
    content: str = ""


# Per-target outcome statuses
PUBLISHED = "published"
SKIPPED_ALREADY_ENHANCED = "skipped_already_enhanced"
SKIPPED_INSUFFICIENT_REFERENCES = "skipped_insufficient_references"
SKIPPED_ENHANCEMENT_FAILED = "skipped_enhancement_failed"
PUBLISH_FAILED = "publish_failed"


@dataclass
class TargetOutcome:
    """Result of processing one original article.

    Attributes:
        article_id: Id of the original article
        title: Title of the original article
        status: One of the outcome status constants
        generated_id: Id of the published article, when published
        slug: Slug of the published article, when published
        model: Model that produced the rewrite
        references: URLs cited by the rewrite
        error: Error message for failed targets
    """
    article_id: Any
    title: str
    status: str
    generated_id: Any | None = None
    slug: str | None = None
    model: str | None = None
    references: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class RunReport:
    """Outcomes of one enhancement run.

    Attributes:
        outcomes: Per-target outcomes in processing order
        aborted: True when the run stopped early on a quota error
        error: Message of the error that stopped the run
    """
    outcomes: list[TargetOutcome] = field(default_factory=list)
    aborted: bool = False
    error: str | None = None

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def success(self) -> bool:
        if self.aborted:
            return False
        return self.count(PUBLISH_FAILED) == 0
