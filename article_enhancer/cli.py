"""
Command-line interface for the Article Enhancer.

Uses Typer to provide a CLI with options for the main configuration
settings. Supports loading .env files for API key configuration.
"""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import VALID_MODES, load_config
from .core.types import (
    PUBLISH_FAILED,
    PUBLISHED,
    SKIPPED_ALREADY_ENHANCED,
    SKIPPED_ENHANCEMENT_FAILED,
    SKIPPED_INSUFFICIENT_REFERENCES,
    RunReport,
)
from .errors import ConfigError, StoreError
from .llm.tracing import flush, setup_langfuse
from .runner import build_components, enhanced_original_ids, run_pipeline
from .store.client import ArticleStoreClient
from .utils.logging import setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False)
console = Console()

_STATUS_STYLES = {
    PUBLISHED: "green",
    PUBLISH_FAILED: "red",
    SKIPPED_ENHANCEMENT_FAILED: "yellow",
    SKIPPED_INSUFFICIENT_REFERENCES: "yellow",
    SKIPPED_ALREADY_ENHANCED: "dim",
}


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    mode: str | None = typer.Option(None, "--mode", help="Target selection: all or latest."),
    max_targets: int | None = typer.Option(
        None, "--max-targets", help="Maximum targets per run (0 = unbounded)."
    ),
    reference_count: int | None = typer.Option(
        None, "--reference-count", help="Minimum number of references per article."
    ),
    delay: float | None = typer.Option(None, "--delay", help="Seconds to wait between targets."),
    model: str | None = typer.Option(None, "--model", help="Explicit model override."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Write JSONL run and LLM logs to this directory."
    ),
    progress: bool = typer.Option(False, "--progress/--no-progress"),
):
    """Enhance original articles and publish the generated versions.

    Args:
        config: Optional path to YAML config file
        mode: Target selection mode (all, latest)
        max_targets: Cap on targets per run
        reference_count: Minimum references per article
        delay: Pause between targets in seconds
        model: Explicit model override
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        progress: Whether to show progress bar
    """
    load_dotenv()
    cfg = load_config(str(config) if config else None)

    if mode:
        if mode not in VALID_MODES:
            raise typer.BadParameter(f"mode must be one of {', '.join(VALID_MODES)}")
        cfg.enhance.mode = mode
    if max_targets is not None:
        cfg.enhance.max_targets = max_targets
    if reference_count is not None:
        cfg.enhance.reference_count = reference_count
    if delay is not None:
        cfg.enhance.delay_seconds = delay
    if model:
        cfg.provider.model = model
    if log_level:
        cfg.logging.level = log_level
    if log_dir is not None:
        cfg.logging.file = True
        cfg.logging.directory = str(log_dir)

    directory = Path(cfg.logging.directory) if cfg.logging.file else None
    logger = setup_logging(cfg.logging, directory)
    llm_logger = setup_llm_logger(cfg.logging, directory)
    setup_langfuse(cfg.langfuse)

    try:
        components = build_components(cfg, llm_logger)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    try:
        report = run_pipeline(cfg, components, logger, show_progress=progress, console=console)
    except Exception as exc:
        logger.exception("Run failed")
        console.print(f"[red]Run failed:[/red] {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        components.store.close()
        flush()

    _render_report(report)
    if not report.success:
        raise typer.Exit(code=1)


@app.command()
def status(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """List original articles and whether each has been enhanced."""
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    try:
        with ArticleStoreClient(cfg.store) as store:
            articles = store.list_articles()
    except (ConfigError, StoreError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    enhanced = enhanced_original_ids(articles)
    table = Table(title="Articles")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Enhanced")
    for article in articles:
        if article.is_generated:
            continue
        done = str(article.id) in enhanced
        table.add_row(str(article.id), article.title, "[green]yes[/green]" if done else "no")
    console.print(table)
    generated = sum(1 for a in articles if a.is_generated)
    console.print(f"{len(articles) - generated} originals, {generated} generated")


def _render_report(report: RunReport) -> None:
    table = Table(title="Enhancement run")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Detail")
    for outcome in report.outcomes:
        style = _STATUS_STYLES.get(outcome.status, "")
        detail = outcome.slug or outcome.error or ""
        table.add_row(
            str(outcome.article_id),
            outcome.title,
            f"[{style}]{outcome.status}[/{style}]" if style else outcome.status,
            detail,
        )
    console.print(table)

    if report.aborted:
        console.print(f"[red]Run aborted:[/red] {report.error}")
    elif report.success:
        console.print(f"[green]Run succeeded[/green]: {report.count(PUBLISHED)} published")
    else:
        console.print(f"[red]Run finished with failures[/red]: {report.count(PUBLISHED)} published")


if __name__ == "__main__":
    app()
