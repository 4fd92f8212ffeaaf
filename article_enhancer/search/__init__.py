"""Reference discovery via web search."""

from .discovery import BLOCKED_HOSTS, ReferenceSearcher, filter_candidates

__all__ = ["BLOCKED_HOSTS", "ReferenceSearcher", "filter_candidates"]
