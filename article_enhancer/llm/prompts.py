"""Prompt loading and rendering helpers for the rewriter."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from ..config import RewriteConfig
from ..core.slug import bound_title
from ..core.types import Article, Reference


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def build_system_prompt() -> str:
    return _load_template("rewrite_system")


def build_references_block(references: list[Reference], cfg: RewriteConfig) -> str:
    chunks = []
    for idx, ref in enumerate(references):
        body = ref.content[: cfg.max_reference_chars] or "(content unavailable)"
        chunks.append(
            f"[Reference {idx + 1}]\n"
            f"Title: {bound_title(ref.title)}\n"
            f"URL: {ref.url}\n"
            f"Content:\n{body}"
        )
    return "\n\n".join(chunks) or "(none)"


def build_user_prompt(article: Article, references: list[Reference], cfg: RewriteConfig) -> str:
    return _render_template(
        "rewrite_user",
        title=article.title,
        content=(article.content or "")[: cfg.max_content_chars],
        references=build_references_block(references, cfg),
    )


def build_messages(
    article: Article,
    references: list[Reference],
    cfg: RewriteConfig,
) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": build_system_prompt()},
        {"role": "user", "content": build_user_prompt(article, references, cfg)},
    ]
