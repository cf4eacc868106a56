"""Tests for the click command-line interface."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner
from clipping.cli import cli
from clipping.intelligence.report import Report, ReportSection


@pytest.fixture
def runner():
    with patch("clipping.cli.setup_file_logging"):
        yield CliRunner()


def test_sections_lists_in_order(runner):
    result = runner.invoke(cli, ["sections"])
    assert result.exit_code == 0
    lines = result.output.rstrip().splitlines()
    assert lines[0].startswith(" 1. [search] pncp")
    assert "artigos" in lines[-1]


def test_match_reports_rules(runner):
    result = runner.invoke(cli, ["match", "Pregão eletrônico: edital impugnado"])
    assert result.exit_code == 0
    assert "Matched: pregao" in result.output


def test_match_requires_text(runner):
    result = runner.invoke(cli, ["match"])
    assert result.exit_code != 0


def test_run_without_sending(runner, tmp_path):
    report = Report(sections=[ReportSection("a", "A", "x", failed=True)])
    aggregator = MagicMock()
    aggregator.run = AsyncMock(return_value=report)
    aggregator.dispatcher.fallback.return_value = tmp_path / "relatorio.html"

    with patch("clipping.cli.get_aggregator", return_value=aggregator):
        result = runner.invoke(cli, ["run", "--no-send"])

    assert result.exit_code == 0
    aggregator.run.assert_awaited_once_with(deliver=False)
    assert "Failed: a" in result.output


def test_run_failure_exits_nonzero(runner):
    aggregator = MagicMock()
    aggregator.run = AsyncMock(return_value=None)

    with patch("clipping.cli.get_aggregator", return_value=aggregator):
        result = runner.invoke(cli, ["run"])

    assert result.exit_code == 1


def test_logging_uses_configured_level_and_format(fresh_config):
    from clipping.cli import configure_logging

    fresh_config._merge_config({"logging": {"level": "warning", "format": "%(levelname)s %(message)s"}})
    with patch("clipping.cli.logging.basicConfig") as basic_config:
        configure_logging(fresh_config)

    kwargs = basic_config.call_args.kwargs
    assert kwargs["level"] == logging.WARNING
    assert kwargs["format"] == "%(levelname)s %(message)s"
