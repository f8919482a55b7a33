"""CLI parser behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from coderules import cli
from coderules.cli import _build_parser
from coderules.pipeline import CodeRulesPipeline
from tests._fixtures.oracles import RecordingOracle


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "serve"])
    assert args.verbose is True
    assert args.command == "serve"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["serve", "--verbose"])
    assert args.verbose is True
    assert args.command == "serve"


def test_cli_http_defaults() -> None:
    args = _build_parser().parse_args(["http"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000
    assert args.config is None


def test_cli_query_arguments() -> None:
    args = _build_parser().parse_args(["query", "add retries", "--docs", "docs", "--config", "cfg"])
    assert args.task == "add retries"
    assert args.docs == "docs"
    assert args.config == Path("cfg")


def test_cli_query_prints_assembled_docs(monkeypatch, capsys, docs_builder) -> None:
    docs_builder.write({"retries.md": "Retry with backoff.\n"})
    monkeypatch.setattr(cli, "load_pipeline", lambda config: CodeRulesPipeline(RecordingOracle()))

    cli.main(["query", "add retries", "--docs", str(docs_builder.path())])

    assert capsys.readouterr().out == "## retries.md\n\nRetry with backoff.\n\n\n\n"


def test_cli_query_exits_non_zero_on_error(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "load_pipeline", lambda config: CodeRulesPipeline(RecordingOracle()))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["query", "t", "--docs", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
