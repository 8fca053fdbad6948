"""Tests for the CLI interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from cogreduce.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(runner: CliRunner, tmp_path: Path) -> Path:
    """A directory with an initialized cogreduce configuration."""
    result = runner.invoke(main, ["init", "--path", str(tmp_path), "--threshold", "3"])
    assert result.exit_code == 0, f"Init failed: {result.output}"
    return tmp_path


class TestCLIInit:
    def test_init_creates_config(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["init", "--path", str(tmp_path)])
        assert result.exit_code == 0
        config = json.loads((tmp_path / ".cogreduce" / "config.json").read_text())
        assert config["search"]["max_complexity"] == 15

    def test_init_threshold(self, project: Path):
        config = json.loads((project / ".cogreduce" / "config.json").read_text())
        assert config["search"]["max_complexity"] == 3

    def test_init_nonexistent_path(self, runner: CliRunner):
        result = runner.invoke(main, ["init", "--path", "/nonexistent/path"])
        assert result.exit_code != 0


class TestCLISearch:
    def test_search_writes_results(self, runner: CliRunner, method_file: Path, tmp_path: Path):
        out = tmp_path / "out"
        result = runner.invoke(
            main,
            ["search", str(method_file), "--threshold", "3", "--output", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "Best Solution" in result.output

        prefix = "process-long_sequence_first"
        assert (out / f"{prefix}.solution.txt").read_text().strip() == "[[42]]"
        assert (out / f"{prefix}.csv").exists()
        assert (out / f"{prefix}.graph.dot").read_text().startswith("digraph process {")
        assert (out / f"{prefix}.containment.dot").exists()

        rows = (out / "long_sequence_first-results.csv").read_text().splitlines()
        assert rows[0].startswith("algorithm;method;initialComplexity")
        assert rows[1].startswith("long_sequence_first;process;6;[[42]];1;1.0;5;1;")

    def test_results_appended(self, runner: CliRunner, method_file: Path, tmp_path: Path):
        args = ["search", str(method_file), "-t", "3", "-o", str(tmp_path / "out")]
        runner.invoke(main, args)
        runner.invoke(main, args)
        rows = (tmp_path / "out" / "long_sequence_first-results.csv").read_text().splitlines()
        assert len(rows) == 3

    def test_search_uses_project_config(
        self, runner: CliRunner, project: Path, method_file: Path
    ):
        runner.invoke(
            main,
            ["config", "set", "search.strategy", "short_sequence_first", "--path", str(project)],
        )
        out = project / "out"
        result = runner.invoke(
            main, ["search", str(method_file), "--path", str(project), "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert (out / "process-short_sequence_first.solution.txt").read_text().strip() == "[[42]]"

    def test_search_show_cache(self, runner: CliRunner, method_file: Path, tmp_path: Path):
        result = runner.invoke(
            main,
            ["search", str(method_file), "--show-cache", "-o", str(tmp_path / "out")],
        )
        assert result.exit_code == 0
        assert "Extraction Cache" in result.output

    def test_search_zero_budget(self, runner: CliRunner, method_file: Path, tmp_path: Path):
        result = runner.invoke(
            main,
            ["search", str(method_file), "-n", "0", "-o", str(tmp_path / "out")],
        )
        assert result.exit_code == 0
        assert "Visited 0 candidates" in result.output

    def test_search_invalid_document(self, runner: CliRunner, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"name": "x"}))
        result = runner.invoke(main, ["search", str(bad), "-o", str(tmp_path / "out")])
        assert result.exit_code != 0
        assert "not a valid method document" in " ".join(result.output.split())


class TestCLICount:
    def test_count(self, runner: CliRunner, method_file: Path):
        result = runner.invoke(main, ["count", str(method_file)])
        assert result.exit_code == 0
        # Only the middle statement and the inner branch can be extracted
        assert "4 candidate solutions over 4 sentence groups" in result.output

    def test_count_groups(self, runner: CliRunner, method_file: Path):
        result = runner.invoke(main, ["count", str(method_file), "--groups"])
        assert result.exit_code == 0
        assert "group 2" in result.output


class TestCLIGraph:
    def test_graph_stdout(self, runner: CliRunner, method_file: Path):
        result = runner.invoke(main, ["graph", str(method_file)])
        assert result.exit_code == 0
        assert result.output.startswith("digraph process {")
        assert "n52_110 -> n42_120" in result.output

    def test_graph_graphml_file(self, runner: CliRunner, method_file: Path, tmp_path: Path):
        out = tmp_path / "graph.graphml"
        result = runner.invoke(
            main, ["graph", str(method_file), "--format", "graphml", "-o", str(out)]
        )
        assert result.exit_code == 0
        assert "<graphml" in out.read_text()


class TestCLIConfig:
    def test_show(self, runner: CliRunner, project: Path):
        result = runner.invoke(main, ["config", "show", "--path", str(project)])
        assert result.exit_code == 0
        assert "max_complexity" in result.output

    def test_set_and_get(self, runner: CliRunner, project: Path):
        result = runner.invoke(
            main, ["config", "set", "search.max_candidates", "500", "--path", str(project)]
        )
        assert result.exit_code == 0
        result = runner.invoke(
            main, ["config", "get", "search.max_candidates", "--path", str(project)]
        )
        assert "search.max_candidates = 500" in result.output

    def test_set_unknown_key(self, runner: CliRunner, project: Path):
        result = runner.invoke(main, ["config", "set", "search.nope", "1", "--path", str(project)])
        assert result.exit_code != 0

    def test_set_invalid_value(self, runner: CliRunner, project: Path):
        result = runner.invoke(
            main, ["config", "set", "search.max_complexity", "lots", "--path", str(project)]
        )
        assert result.exit_code != 0
