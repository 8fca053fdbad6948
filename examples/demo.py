#!/usr/bin/env python3
"""Demo: Using cogreduce as a Python library.

Loads the sample method shipped next to this file, searches for the best
extractions under a threshold of 3 and prints the resulting graphs.
"""

import logging
from pathlib import Path

from cogreduce.graph import ExtractionGraphBuilder, ExtractionGraphQuery, ExtractionVertex
from cogreduce.graph.export import to_dot
from cogreduce.loader import load_method
from cogreduce.search import ExhaustiveSearch, LoggingObserver, OracleVerdict, SearchStrategy


class NoLoopBreakOracle:
    """Toy oracle: any span is extractable unless it starts on a `break`."""

    def __init__(self, breaks: set[int]):
        self.breaks = breaks

    def evaluate(self, unit, first, last):
        if first.start in self.breaks:
            return OracleVerdict(feasible=False, reason="break outside of a loop")
        return OracleVerdict(
            feasible=True,
            parameter_count=1,
            extracted_line_count=max(1, (last.end - first.start) // 40),
        )


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    document = load_method(Path(__file__).parent / "sample_method.json")
    method = document.to_tree()

    # 1. Search with the verdicts recorded in the document
    session = ExhaustiveSearch(
        method,
        document.oracle(),
        SearchStrategy.LONG_SEQUENCE_FIRST,
        max_complexity=3,
        observer=LoggingObserver(),
    )
    print(f"Method '{method.name}' has complexity {session.method_complexity}")
    print(f"  Sentence groups: {len(session.groups)}")
    print(f"  Candidate solutions: {session.count()}")

    best = session.run(max_candidates=10_000)
    print("\n--- Best solution (recorded verdicts) ---")
    print(best.summary())
    print(session.cache.summary())

    # 2. Same method, with an oracle written in Python
    breaks = {n.start for n in method.nodes if n.label == "break"}
    session = ExhaustiveSearch(method, NoLoopBreakOracle(breaks), max_complexity=3)
    session.fill_cache()
    best = session.run()
    print("\n--- Best solution (rule-based oracle) ---")
    print(best.summary())

    # 3. Containment and conflicts between feasible extractions
    builder = ExtractionGraphBuilder()
    builder.build_from_cache(session.cache, ExtractionVertex.for_method(session.annotations))
    for key, value in builder.get_stats().items():
        print(f"  {key}: {value}")

    query = ExtractionGraphQuery(builder)
    for leaf in query.leaves()[:3]:
        chain = " -> ".join(str(v) for v in query.path_to_root(leaf))
        print(f"  {chain}")

    print("\n--- Containment graph (DOT) ---")
    print(to_dot(builder.containment, method.name))


if __name__ == "__main__":
    main()
