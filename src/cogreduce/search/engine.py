"""Exhaustive enumeration search over extraction candidates.

One `ExhaustiveSearch` is one search session for one method: it owns the
complexity annotations, the sentence groups and the extraction cache, and
none of them may be shared with a session for another method.

Usage:
    from cogreduce.search import ExhaustiveSearch, SearchStrategy

    session = ExhaustiveSearch(method, oracle, SearchStrategy.LONG_SEQUENCE_FIRST)
    best = session.run(max_candidates=10_000)
    print(best.summary())
"""

from __future__ import annotations

import time

from cogreduce.config import DEFAULT_MAX_COMPLEXITY
from cogreduce.search.cache import ExtractionCache
from cogreduce.search.enumerator import CandidateEnumerator
from cogreduce.search.groups import extract_groups
from cogreduce.search.observer import SearchObserver
from cogreduce.search.oracle import ExtractionOracle
from cogreduce.search.partition import SearchStrategy, SequencePartitionIterator
from cogreduce.search.solution import WORST_FITNESS, Solution, SolutionEvaluator
from cogreduce.tree.annotate import Annotations, annotate
from cogreduce.tree.models import MethodTree


class ExhaustiveSearch:
    """Budgeted exhaustive search for the best set of extractions."""

    def __init__(
        self,
        method: MethodTree,
        oracle: ExtractionOracle,
        strategy: SearchStrategy | str = SearchStrategy.LONG_SEQUENCE_FIRST,
        max_complexity: int = DEFAULT_MAX_COMPLEXITY,
        observer: SearchObserver | None = None,
        annotations: Annotations | None = None,
    ) -> None:
        self.method = method
        self.strategy = SearchStrategy(strategy)
        self.max_complexity = max_complexity
        self.observer = observer or SearchObserver()
        self.annotations = annotations or annotate(method)
        self.cache = ExtractionCache(method, oracle, self.observer)
        self.groups = extract_groups(method, self.annotations)
        self.observer.groups_extracted(method.name, self.groups)

        # Stats from the last run
        self.visited = 0
        self.search_time_ms = 0.0
        self.cache_fill_ms = 0.0

    def iterators(self) -> list[SequencePartitionIterator]:
        return [SequencePartitionIterator(g, self.cache, self.strategy) for g in self.groups]

    def enumerator(self) -> CandidateEnumerator:
        return CandidateEnumerator(self.iterators())

    @property
    def method_complexity(self) -> int:
        return self.annotations.method_complexity

    def count(self) -> int:
        """Number of candidates an unbounded run would visit."""
        return self.enumerator().count()

    def fill_cache(self) -> float:
        """Ask the oracle about every span of every group up front.

        Returns the time taken in milliseconds.
        """
        start = time.perf_counter()
        for it in self.iterators():
            n = len(it.group)
            for first in range(1, n + 1):
                for last in range(first, n + 1):
                    it.is_valid(first, last)
        self.cache_fill_ms = (time.perf_counter() - start) * 1000
        return self.cache_fill_ms

    def run(self, max_candidates: int | None = None) -> Solution:
        """Visit at most `max_candidates` candidates and return the best.

        If no candidate is visited (a budget of zero) the result is an empty,
        infeasible solution.
        """
        start = time.perf_counter()
        evaluator = SolutionEvaluator(
            self.method,
            self.cache,
            self.annotations,
            self.max_complexity,
            self.observer,
        )
        self.visited = self.enumerator().for_each(max_candidates, evaluator.consider)
        self.search_time_ms = (time.perf_counter() - start) * 1000

        best = evaluator.best
        if best is None:
            best = Solution(self.method)
            best.fitness = WORST_FITNESS
            best.initial_complexity = best.final_complexity = self.method_complexity
        self.observer.search_finished(evaluator.best, self.visited, self.search_time_ms)
        return best


def search(
    method: MethodTree,
    oracle: ExtractionOracle,
    strategy: SearchStrategy | str = SearchStrategy.LONG_SEQUENCE_FIRST,
    max_candidates: int | None = None,
    max_complexity: int = DEFAULT_MAX_COMPLEXITY,
    observer: SearchObserver | None = None,
) -> Solution:
    """Find the best extraction set for `method` in a fresh session."""
    session = ExhaustiveSearch(method, oracle, strategy, max_complexity, observer)
    return session.run(max_candidates)
