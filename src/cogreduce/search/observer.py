"""Search observers.

The search never logs or counts through globals: every session receives a
`SearchObserver` and reports what happens to it. The base class ignores all
events; `LoggingObserver` forwards them to the standard logging module and
`CountingObserver` keeps tallies for reports and tests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cogreduce.search.cache import ExtractionMetrics
    from cogreduce.search.sequence import ExtractionInterval, SentenceGroup
    from cogreduce.search.solution import Solution


class SearchObserver:
    """Receives search events. Override the ones you care about."""

    def groups_extracted(self, method_name: str, groups: list[SentenceGroup]) -> None:
        pass

    def oracle_called(self, interval: ExtractionInterval, metrics: ExtractionMetrics) -> None:
        pass

    def oracle_failed(self, interval: ExtractionInterval, error: Exception) -> None:
        pass

    def candidate_evaluated(self, index: int, solution: Solution) -> None:
        pass

    def best_improved(self, index: int, solution: Solution) -> None:
        pass

    def search_finished(self, best: Solution | None, visited: int, elapsed_ms: float) -> None:
        pass


class LoggingObserver(SearchObserver):
    """Reports search progress through `logging`."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("cogreduce.search")

    def groups_extracted(self, method_name: str, groups: list[SentenceGroup]) -> None:
        self.logger.info(f"Method '{method_name}': {len(groups)} sentence groups")

    def oracle_called(self, interval: ExtractionInterval, metrics: ExtractionMetrics) -> None:
        if metrics.feasible:
            self.logger.debug(f"Extraction {interval} feasible")
        else:
            self.logger.debug(f"Extraction {interval} infeasible: {metrics.reason}")

    def oracle_failed(self, interval: ExtractionInterval, error: Exception) -> None:
        self.logger.warning(f"Oracle failed on {interval}: {error}")

    def best_improved(self, index: int, solution: Solution) -> None:
        self.logger.info(
            f"Candidate {index}: new best fitness={solution.fitness} "
            f"extractions={len(solution)} reduction={solution.reduced_complexity}"
        )

    def search_finished(self, best: Solution | None, visited: int, elapsed_ms: float) -> None:
        self.logger.info(f"Search finished: {visited} candidates in {elapsed_ms:.1f}ms")


class CountingObserver(SearchObserver):
    """Keeps per-session counters."""

    def __init__(self) -> None:
        self.oracle_calls = 0
        self.oracle_failures = 0
        self.candidates = 0
        self.improvements = 0

    def oracle_called(self, interval: ExtractionInterval, metrics: ExtractionMetrics) -> None:
        self.oracle_calls += 1

    def oracle_failed(self, interval: ExtractionInterval, error: Exception) -> None:
        self.oracle_failures += 1

    def candidate_evaluated(self, index: int, solution: Solution) -> None:
        self.candidates += 1

    def best_improved(self, index: int, solution: Solution) -> None:
        self.improvements += 1
