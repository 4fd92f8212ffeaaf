"""
Enhancement orchestration.

This module coordinates one enhancement run:
1. Snapshot the Article Store and collect originals already enhanced
2. Select targets ("all" or "latest")
3. For each target: discover references, extract them concurrently,
   rewrite the article, append a references section when missing,
   and publish the result as a new generated article

Targets are processed one at a time. A target with too few references or
without a usable rewrite is skipped, a failed publish is recorded and the run
moves on. A quota error stops the run early; any unclassified model error
propagates.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import re
import time
from typing import Any, Callable, Iterable

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import AppConfig, EnhanceConfig, validate_config
from .core.slug import bound_title, generated_slug
from .core.types import (
    PUBLISH_FAILED,
    PUBLISHED,
    SKIPPED_ALREADY_ENHANCED,
    SKIPPED_ENHANCEMENT_FAILED,
    SKIPPED_INSUFFICIENT_REFERENCES,
    Article,
    Reference,
    ReferenceCandidate,
    RunReport,
    TargetOutcome,
)
from .errors import QuotaExhaustedError, StoreError
from .fetch.extractor import ContentExtractor
from .llm.errors import Outcome
from .llm.providers.factory import create_provider
from .llm.rewriter import Rewriter
from .llm.tracing import set_span_output, start_span
from .search.discovery import ReferenceSearcher
from .store.client import ArticleStoreClient
from .utils.logging import log_event

_REFERENCES_HEADING_RE = re.compile(r"^\s{0,3}##\s+references\s*:?\s*$", re.IGNORECASE)
_SECTION_END_RE = re.compile(r"^\s{0,3}#{1,2}\s+\S")
_URL_RE = re.compile(r"https?://[^\s)<>\]]+")


@dataclass
class PipelineComponents:
    """Collaborators used by a run; tests substitute fakes."""
    store: Any
    searcher: Any
    extractor: Any
    rewriter: Any


def build_components(cfg: AppConfig, llm_logger: logging.Logger | None = None) -> PipelineComponents:
    """Build the real store, search, extraction and rewrite components.

    Raises:
        ConfigError: when a required credential or base URL is missing
    """
    validate_config(cfg)
    provider = create_provider(cfg.provider)
    return PipelineComponents(
        store=ArticleStoreClient(cfg.store),
        searcher=ReferenceSearcher(cfg.search),
        extractor=ContentExtractor(cfg.fetch, cfg.extract),
        rewriter=Rewriter(provider, cfg.rewrite, cfg.logging, llm_logger),
    )


def enhanced_original_ids(articles: Iterable[Article]) -> set[str]:
    """Ids of originals that already have a generated counterpart."""
    return {
        str(article.original_article_id)
        for article in articles
        if article.is_generated and article.original_article_id is not None
    }


def select_targets(
    articles: list[Article],
    enhanced_ids: set[str],
    cfg: EnhanceConfig,
) -> tuple[list[Article], list[Article]]:
    """Pick the originals to enhance.

    Args:
        articles: Store snapshot in store order (newest first for "latest")
        enhanced_ids: Ids of originals that already have a generated article
        cfg: Selection mode and target cap

    Returns:
        (targets, already_enhanced) where already_enhanced holds the covered
        originals passed over while selecting
    """
    targets: list[Article] = []
    covered: list[Article] = []
    limit = 1 if cfg.mode == "latest" else cfg.max_targets
    for article in articles:
        if article.is_generated:
            continue
        if limit and len(targets) >= limit:
            break
        if str(article.id) in enhanced_ids:
            covered.append(article)
            continue
        targets.append(article)
    return targets, covered


def ensure_references_section(markdown: str, references: list[Reference]) -> str:
    """Make sure the article ends with one references section citing exactly references.

    A model-written section is kept when it is the only one and cites
    exactly the reference URLs; otherwise it is replaced.
    """
    urls = [ref.url for ref in references]
    body_lines: list[str] = []
    sections: list[list[str]] = []
    in_section = False
    for line in markdown.strip().splitlines():
        if _REFERENCES_HEADING_RE.match(line):
            in_section = True
            sections.append([])
            continue
        if in_section and _SECTION_END_RE.match(line):
            in_section = False
        if in_section:
            sections[-1].append(line)
        else:
            body_lines.append(line)

    if len(sections) == 1 and _cited_urls(sections[0]) == set(urls):
        return markdown.strip()

    body = "\n".join(body_lines).rstrip()
    items = "\n".join(f"- [{_link_text(ref)}]({ref.url})" for ref in references)
    return f"{body}\n\n## References\n\n{items}\n"


async def extract_references(
    extractor: Any,
    candidates: list[ReferenceCandidate],
    concurrency: int,
    logger: logging.Logger | None = None,
) -> list[Reference]:
    """Extract all candidates with bounded fan-out.

    A failing candidate degrades to a reference with empty content; it never
    affects its siblings.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _extract_one(candidate: ReferenceCandidate) -> Reference:
        async with semaphore:
            try:
                page = await extractor.extract(candidate.url)
            except Exception as exc:  # noqa: BLE001
                log_event(
                    logger,
                    "Reference extraction failed",
                    level=logging.WARNING,
                    event="extract_failed",
                    url=candidate.url,
                    error=f"{type(exc).__name__}: {exc}",
                )
                return Reference(title=candidate.title, url=candidate.url, content="")
        return Reference(title=page.title or candidate.title, url=candidate.url, content=page.content)

    return list(await asyncio.gather(*(_extract_one(candidate) for candidate in candidates)))


def run_pipeline(
    cfg: AppConfig,
    components: PipelineComponents,
    logger: logging.Logger | None = None,
    show_progress: bool = False,
    console: Console | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], datetime] | None = None,
) -> RunReport:
    """Run one enhancement pass over the Article Store.

    Returns:
        RunReport with one outcome per considered original

    Raises:
        StoreError: when the run-start snapshot cannot be read
        Exception: unclassified model errors propagate unchanged
    """
    logger = logger or logging.getLogger("article_enhancer")
    clock = clock or (lambda: datetime.now(timezone.utc))
    enhance = cfg.enhance
    report = RunReport()

    with start_span(
        "article_enhancer.run",
        kind="chain",
        input_value={"mode": enhance.mode, "max_targets": enhance.max_targets},
    ) as run_span:
        order = "latest" if enhance.mode == "latest" else None
        articles = components.store.list_articles(order=order)
        enhanced_ids = enhanced_original_ids(articles)
        targets, covered = select_targets(articles, enhanced_ids, enhance)
        log_event(
            logger,
            "Run start",
            event="run_start",
            mode=enhance.mode,
            articles=len(articles),
            already_enhanced=len(enhanced_ids),
            targets=len(targets),
        )

        for article in covered:
            report.outcomes.append(
                TargetOutcome(article_id=article.id, title=article.title, status=SKIPPED_ALREADY_ENHANCED)
            )

        progress = None
        task_id = None
        if show_progress and targets:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console or Console(),
            )
            progress.start()
            task_id = progress.add_task("Enhance", total=len(targets))

        try:
            for idx, target in enumerate(targets):
                if idx and enhance.delay_seconds > 0:
                    sleep(enhance.delay_seconds)
                try:
                    outcome = _enhance_target(cfg, components, target, logger, clock)
                except QuotaExhaustedError as exc:
                    report.outcomes.append(
                        TargetOutcome(
                            article_id=target.id,
                            title=target.title,
                            status=SKIPPED_ENHANCEMENT_FAILED,
                            model=exc.model,
                            error=str(exc),
                        )
                    )
                    report.aborted = True
                    report.error = str(exc)
                    log_event(
                        logger,
                        "Run aborted: provider quota exhausted",
                        level=logging.ERROR,
                        event="run_aborted",
                        article_id=target.id,
                    )
                    break
                report.outcomes.append(outcome)
                if progress is not None:
                    progress.advance(task_id, 1)
        finally:
            if progress is not None:
                progress.stop()

        log_event(
            logger,
            "Run complete",
            event="run_complete",
            published=report.count(PUBLISHED),
            failed=report.count(PUBLISH_FAILED),
            aborted=report.aborted,
        )
        set_span_output(
            run_span,
            {"published": report.count(PUBLISHED), "outcomes": len(report.outcomes), "aborted": report.aborted},
        )
    return report


def _enhance_target(
    cfg: AppConfig,
    components: PipelineComponents,
    target: Article,
    logger: logging.Logger,
    clock: Callable[[], datetime],
) -> TargetOutcome:
    required = cfg.enhance.reference_count
    with start_span(
        "article_enhancer.target",
        kind="chain",
        input_value={"article_id": target.id, "title": target.title},
    ) as span:
        log_event(logger, f"Enhancing: {target.title}", event="target_start", article_id=target.id)

        candidates = components.searcher.discover(target.title, target.source_url, required)
        if len(candidates) < required:
            log_event(
                logger,
                f"Skipping '{target.title}': {len(candidates)} of {required} references found",
                level=logging.WARNING,
                event="target_skipped",
                article_id=target.id,
                reason=SKIPPED_INSUFFICIENT_REFERENCES,
            )
            set_span_output(span, SKIPPED_INSUFFICIENT_REFERENCES)
            return TargetOutcome(
                article_id=target.id,
                title=target.title,
                status=SKIPPED_INSUFFICIENT_REFERENCES,
                references=[c.url for c in candidates],
            )

        references = asyncio.run(
            extract_references(components.extractor, candidates, cfg.fetch.concurrency, logger)
        )
        reference_urls = [ref.url for ref in references]

        result = components.rewriter.attempt(target, references)
        if result.outcome is Outcome.QUOTA_EXHAUSTED:
            raise QuotaExhaustedError(result.model)
        if not result.content:
            log_event(
                logger,
                f"Enhancement failed: {target.title}",
                level=logging.WARNING,
                event="target_skipped",
                article_id=target.id,
                reason=SKIPPED_ENHANCEMENT_FAILED,
                error=result.error,
            )
            set_span_output(span, SKIPPED_ENHANCEMENT_FAILED)
            return TargetOutcome(
                article_id=target.id,
                title=target.title,
                status=SKIPPED_ENHANCEMENT_FAILED,
                references=reference_urls,
                error=result.error,
            )

        content = ensure_references_section(result.content, references)
        title = f"{cfg.rewrite.title_prefix}{target.title}"
        now = clock()
        slug = generated_slug(title, components.rewriter.tag, now)

        try:
            created = components.store.create_article(
                title=title,
                content=content,
                source_url=target.source_url,
                slug=slug,
                is_generated=True,
                original_article_id=target.id,
                published_at=now.isoformat(),
            )
        except StoreError as exc:
            log_event(
                logger,
                f"Publish failed: {target.title}",
                level=logging.ERROR,
                event="publish_failed",
                article_id=target.id,
                slug=slug,
                error=str(exc),
            )
            set_span_output(span, PUBLISH_FAILED)
            return TargetOutcome(
                article_id=target.id,
                title=target.title,
                status=PUBLISH_FAILED,
                slug=slug,
                model=result.model,
                references=reference_urls,
                error=str(exc),
            )

        log_event(
            logger,
            f"Published enhanced article for: {target.title}",
            event="published",
            article_id=target.id,
            generated_id=created.id,
            slug=slug,
            model=result.model,
        )
        set_span_output(span, {"status": PUBLISHED, "slug": slug})
        return TargetOutcome(
            article_id=target.id,
            title=target.title,
            status=PUBLISHED,
            generated_id=created.id,
            slug=slug,
            model=result.model,
            references=reference_urls,
        )


def _cited_urls(lines: list[str]) -> set[str]:
    found = set()
    for line in lines:
        for url in _URL_RE.findall(line):
            found.add(url.rstrip(".,;"))
    return found


def _link_text(ref: Reference) -> str:
    return bound_title(ref.title or ref.url).replace("[", "(").replace("]", ")")
