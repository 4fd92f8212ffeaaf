"""Tests for the command-line entry points."""

from __future__ import annotations

import re

import httpx
import pytest
from typer.testing import CliRunner

from article_enhancer import cli
from article_enhancer.core.types import PUBLISHED, SKIPPED_ENHANCEMENT_FAILED, RunReport, TargetOutcome
from article_enhancer.runner import PipelineComponents
from article_enhancer.store.client import ArticleStoreClient

runner = CliRunner()


class _ClosingStore:
    closed = False

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("API_BASE_URL", "SERPER_API_KEY", "GROQ_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)


def _patch_run(monkeypatch, report: RunReport) -> tuple[_ClosingStore, dict]:
    store = _ClosingStore()
    seen: dict = {}

    def fake_build(cfg, llm_logger):
        seen["cfg"] = cfg
        return PipelineComponents(store=store, searcher=None, extractor=None, rewriter=None)

    monkeypatch.setattr(cli, "build_components", fake_build)
    monkeypatch.setattr(cli, "run_pipeline", lambda cfg, components, logger, **kwargs: report)
    return store, seen


def test_run_without_credentials_exits_with_config_error():
    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 2
    assert "Configuration error" in result.output


def test_run_applies_overrides_and_succeeds(monkeypatch):
    report = RunReport(outcomes=[TargetOutcome(article_id=1, title="A", status=PUBLISHED, slug="a-groq-1")])
    store, seen = _patch_run(monkeypatch, report)

    result = runner.invoke(
        cli.app, ["run", "--mode", "latest", "--reference-count", "3", "--model", "m-x", "--delay", "0.5"]
    )

    assert result.exit_code == 0, result.output
    assert "Run succeeded" in result.output
    assert seen["cfg"].enhance.mode == "latest"
    assert seen["cfg"].enhance.reference_count == 3
    assert seen["cfg"].enhance.delay_seconds == 0.5
    assert seen["cfg"].provider.model == "m-x"
    assert store.closed


def test_aborted_run_exits_non_zero(monkeypatch):
    report = RunReport(
        outcomes=[TargetOutcome(article_id=1, title="A", status=SKIPPED_ENHANCEMENT_FAILED)],
        aborted=True,
        error="Provider quota exhausted (model=m1)",
    )
    _patch_run(monkeypatch, report)

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1
    assert "Run aborted" in result.output


def test_run_rejects_unknown_mode():
    result = runner.invoke(cli.app, ["run", "--mode", "oldest"])

    assert result.exit_code != 0


def test_status_lists_originals_with_enhanced_flag(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/articles"
        return httpx.Response(
            200,
            json=[
                {"id": 3, "title": "AI Enhanced: First", "is_generated": True, "original_article_id": 1},
                {"id": 2, "title": "Second", "source_url": "https://a.example/2"},
                {"id": 1, "title": "First", "source_url": "https://a.example/1"},
            ],
        )

    monkeypatch.setenv("API_BASE_URL", "http://store.test")
    monkeypatch.setattr(
        cli,
        "ArticleStoreClient",
        lambda cfg: ArticleStoreClient(cfg, client=httpx.Client(transport=httpx.MockTransport(handler))),
    )

    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 0, result.output
    rows = {}
    for line in result.output.splitlines():
        cells = [cell.strip() for cell in re.split(r"[│|]", line) if cell.strip()]
        if len(cells) == 3 and cells[0].isdigit():
            rows[cells[0]] = cells
    assert rows["1"] == ["1", "First", "yes"]
    assert rows["2"] == ["2", "Second", "no"]
    assert "3" not in rows
    assert "2 originals, 1 generated" in result.output


def test_status_without_store_url_exits_non_zero():
    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 1
    assert "API_BASE_URL" in result.output
