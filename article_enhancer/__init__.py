"""
Article Enhancer - AI rewriting of scraped articles with cited references.

This package reads original articles from the Article Store, finds
host-diverse reference articles through web search, extracts their main
content, asks an LLM for a Markdown rewrite that cites them, and publishes
the result back as a generated article linked to its original.

Main entry point is the CLI via `article-enhancer run` command.

Example:
    $ article-enhancer run --mode latest
"""

__all__ = ["__version__", "AppConfig", "load_config", "run_pipeline", "build_components"]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .runner import build_components, run_pipeline
