"""Command-line interface for cogreduce."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from cogreduce import __version__
from cogreduce.config import (
    ProjectConfig,
    find_project_root,
    get_cogreduce_dir,
    load_config,
    save_config,
    set_config_value,
)
from cogreduce.exceptions import CogReduceError
from cogreduce.search.partition import SearchStrategy
from cogreduce.ui.console import Console

console = Console()

_STRATEGY_CHOICES = [s.value for s in SearchStrategy]


def _get_project_root(path: str | None = None) -> Path:
    """Find the project root or error."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root

    root = find_project_root()
    if root is None:
        console.error(
            "No cogreduce project found. Run 'cogreduce init' first, "
            "or specify a path with --path."
        )
        sys.exit(1)
    return root


def _load_project_config(path: str | None) -> ProjectConfig:
    """Config of the enclosing project, or defaults outside a project."""
    root = Path(path).resolve() if path else find_project_root()
    if root is None:
        return ProjectConfig()
    return load_config(root)


def _open_session(method_file: str, strategy: str, threshold: int, verbose: bool = False):
    from cogreduce.loader import load_method
    from cogreduce.search.engine import ExhaustiveSearch
    from cogreduce.search.observer import LoggingObserver, SearchObserver

    document = load_method(method_file)
    observer = LoggingObserver() if verbose else SearchObserver()
    return ExhaustiveSearch(
        document.to_tree(),
        document.oracle(),
        strategy=strategy,
        max_complexity=threshold,
        observer=observer,
    )


@click.group()
@click.version_option(version=__version__, prog_name="cogreduce")
def main():
    """cogreduce - find extract-method refactorings that tame cognitive complexity."""
    pass


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--threshold", "-t", default=None, type=int, help="Maximum cognitive complexity.")
def init(path: str | None, threshold: int | None):
    """Create a .cogreduce configuration for a project."""
    console.banner()
    root = Path(path or ".").resolve()
    if not root.exists():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)

    config = load_config(root)
    config.name = root.name
    if threshold is not None:
        config.search.max_complexity = threshold
    save_config(root, config)
    console.success(f"Configuration saved in {get_cogreduce_dir(root)}")


@main.command()
@click.argument("method_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--strategy", "-s", type=click.Choice(_STRATEGY_CHOICES), default=None,
              help="Order in which extractions are tried.")
@click.option("--max-candidates", "-n", type=int, default=None,
              help="Maximum number of candidate solutions to evaluate.")
@click.option("--threshold", "-t", type=int, default=None, help="Maximum cognitive complexity.")
@click.option("--output", "-o", default=None, help="Directory for result files.")
@click.option("--show-cache", is_flag=True, help="Print every cached oracle verdict.")
@click.option("--verbose", "-v", is_flag=True, help="Log search progress.")
def search(
    method_file: str,
    path: str | None,
    strategy: str | None,
    max_candidates: int | None,
    threshold: int | None,
    output: str | None,
    show_cache: bool,
    verbose: bool,
):
    """Search the best set of extractions for one method."""
    from cogreduce.graph.builder import ExtractionGraphBuilder
    from cogreduce.graph.export import write_graph
    from cogreduce.graph.models import ExtractionVertex
    from cogreduce.search.solution import RESULTS_HEADER

    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    try:
        config = _load_project_config(path)
        strategy = strategy or config.search.strategy
        threshold = threshold if threshold is not None else config.search.max_complexity
        budget = max_candidates if max_candidates is not None else config.search.max_candidates

        session = _open_session(method_file, strategy, threshold, verbose)
    except (CogReduceError, ValueError) as e:
        console.error(str(e))
        sys.exit(1)

    method = session.method
    console.info(f"Method '{method.name}': cognitive complexity {session.method_complexity}")
    console.info(f"{len(session.groups)} sentence groups")

    console.info("Filling extraction cache...")
    fill_ms = session.fill_cache()
    console.success(f"Cache filled in {fill_ms:.0f}ms ({session.cache.summary()})")
    if show_cache:
        console.show_cache(session.cache)

    solution = session.run(budget)
    console.show_solution(solution, threshold)
    console.info(f"Visited {session.visited} candidates in {session.search_time_ms:.0f}ms")

    out_dir = Path(output or config.output.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = f"{method.name}-{strategy}"

    if config.output.write_cache_csv:
        csv_path = session.cache.write_csv(out_dir / f"{prefix}.csv")
        console.success(f"Cache written to {csv_path}")

    (out_dir / f"{prefix}.solution.txt").write_text(solution.to_line() + "\n")
    results_path = out_dir / f"{strategy}-results.csv"
    new_file = not results_path.exists()
    with results_path.open("a", encoding="utf-8") as f:
        if new_file:
            f.write(RESULTS_HEADER + "\n")
        f.write(solution.results_row(strategy, fill_ms, session.search_time_ms) + "\n")

    if config.output.write_graphs:
        builder = ExtractionGraphBuilder()
        builder.build_from_cache(session.cache, ExtractionVertex.for_method(session.annotations))
        write_graph(builder.graph, out_dir / f"{prefix}.graph.dot", name=method.name)
        write_graph(builder.containment, out_dir / f"{prefix}.containment.dot", name=method.name)
        console.success(f"Graphs written to {out_dir}")


@main.command()
@click.argument("method_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--strategy", "-s", type=click.Choice(_STRATEGY_CHOICES),
              default=SearchStrategy.LONG_SEQUENCE_FIRST.value)
@click.option("--groups", "show_groups", is_flag=True, help="Also show the sentence groups.")
def count(method_file: str, strategy: str, show_groups: bool):
    """Count the candidate solutions of a method."""
    try:
        session = _open_session(method_file, strategy, threshold=0)
    except CogReduceError as e:
        console.error(str(e))
        sys.exit(1)

    if show_groups:
        console.show_groups(session.method.name, session.groups)
    total = session.count()
    console.info(f"{total:,} candidate solutions over {len(session.groups)} sentence groups")
    console.info(session.cache.summary())


@main.command()
@click.argument("method_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(["dot", "graphml"]), default="dot")
@click.option("--containment-only", is_flag=True, help="Omit conflict edges.")
@click.option("--output", "-o", default=None, help="Write to a file instead of stdout.")
def graph(method_file: str, fmt: str, containment_only: bool, output: str | None):
    """Export the containment/conflict graph of feasible extractions."""
    from cogreduce.graph.builder import ExtractionGraphBuilder
    from cogreduce.graph.export import to_dot, to_graphml, write_graph
    from cogreduce.graph.models import ExtractionVertex

    try:
        session = _open_session(method_file, SearchStrategy.LONG_SEQUENCE_FIRST.value, threshold=0)
    except CogReduceError as e:
        console.error(str(e))
        sys.exit(1)

    session.fill_cache()
    builder = ExtractionGraphBuilder()
    builder.build_from_cache(session.cache, ExtractionVertex.for_method(session.annotations))
    target = builder.containment if containment_only else builder.graph

    if output:
        write_graph(target, output, fmt=fmt, name=session.method.name)
        console.success(f"Graph written to {output}")
        console.show_stats(builder.get_stats(), title="Extraction Graph")
    else:
        text = to_dot(target, session.method.name) if fmt == "dot" else to_graphml(target)
        click.echo(text, nl=False)


# =========================================================================
# Config Management
# =========================================================================

@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage cogreduce configuration."""
    root = _get_project_root(path)
    try:
        config = load_config(root)
    except CogReduceError as e:
        console.error(str(e))
        sys.exit(1)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: cogreduce config get <key>")
            sys.exit(1)
        data = config.model_dump()
        for part in key.split("."):
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}")
    elif action == "set":
        if not key or value is None:
            console.error("Usage: cogreduce config set <key> <value>")
            sys.exit(1)
        try:
            # Try to parse as JSON for non-string values
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value

            config = set_config_value(config, key, parsed_value)
            save_config(root, config)
            console.success(f"Set {key} = {parsed_value}")
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)
        except ValidationError as e:
            console.error(f"Invalid value for {key}: {e.errors()[0]['msg']}")
            sys.exit(1)


if __name__ == "__main__":
    main()
