"""
Core domain models and helpers.

This package contains data types and helpers that are
independent of any specific pipeline stage.
"""

from .slug import MAX_TITLE_CHARS, bound_title, generated_slug, normalize_host, slugify
from .types import Article, ExtractedPage, Reference, ReferenceCandidate, RunReport, TargetOutcome

__all__ = [
    "MAX_TITLE_CHARS",
    "Article",
    "ExtractedPage",
    "Reference",
    "ReferenceCandidate",
    "RunReport",
    "TargetOutcome",
    "bound_title",
    "generated_slug",
    "normalize_host",
    "slugify",
]
