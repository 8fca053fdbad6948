"""Candidate solutions and their fitness.

Fitness (lower is better) is the number of extractions plus a penalty of
10 per unit of cognitive complexity above the threshold, charged both for
what each extracted method would keep and for what stays in the original
method once every extraction is applied.
"""

from __future__ import annotations

import bisect
import math
from collections.abc import Iterable

from pydantic import BaseModel

from cogreduce.exceptions import ContractError
from cogreduce.search.cache import ExtractionCache, ExtractionMetrics
from cogreduce.search.observer import SearchObserver
from cogreduce.search.sequence import Sequence
from cogreduce.tree.annotate import Annotations
from cogreduce.tree.models import MethodTree, Node
from cogreduce.tree.traversal import walk

PENALTY_PER_EXCESS_UNIT = 10
WORST_FITNESS = math.inf


class ExtractionStats(BaseModel):
    """Aggregated metrics of the extractions in a solution."""

    extractions: int = 0
    min_extracted_loc: int = 0
    max_extracted_loc: int = 0
    mean_extracted_loc: float = 0.0
    total_extracted_loc: int = 0
    min_parameters: int = 0
    max_parameters: int = 0
    mean_parameters: float = 0.0
    total_parameters: int = 0
    min_reduction: int = 0
    max_reduction: int = 0
    mean_reduction: float = 0.0
    total_reduction: int = 0

    @classmethod
    def from_metrics(cls, metrics: list[ExtractionMetrics]) -> ExtractionStats:
        if not metrics:
            return cls()
        loc = [m.extracted_line_count for m in metrics]
        params = [m.parameter_count for m in metrics]
        reduction = [m.reduction_of_complexity for m in metrics]
        n = len(metrics)
        return cls(
            extractions=n,
            min_extracted_loc=min(loc),
            max_extracted_loc=max(loc),
            mean_extracted_loc=sum(loc) / n,
            total_extracted_loc=sum(loc),
            min_parameters=min(params),
            max_parameters=max(params),
            mean_parameters=sum(params) / n,
            total_parameters=sum(params),
            min_reduction=min(reduction),
            max_reduction=max(reduction),
            mean_reduction=sum(reduction) / n,
            total_reduction=sum(reduction),
        )

    def as_row(self) -> list[str]:
        return [
            str(self.min_extracted_loc),
            str(self.max_extracted_loc),
            f"{self.mean_extracted_loc:.2f}",
            str(self.total_extracted_loc),
            str(self.min_parameters),
            str(self.max_parameters),
            f"{self.mean_parameters:.2f}",
            str(self.total_parameters),
            str(self.min_reduction),
            str(self.max_reduction),
            f"{self.mean_reduction:.2f}",
            str(self.total_reduction),
        ]


RESULTS_HEADER = (
    "algorithm;method;initialComplexity;solution;extractions;fitness;"
    "reductionComplexity;finalComplexity;"
    "minExtractedLOC;maxExtractedLOC;meanExtractedLOC;totalExtractedLOC;"
    "minParamsExtractedMethods;maxParamsExtractedMethods;meanParamsExtractedMethods;"
    "totalParamsExtractedMethods;"
    "minReductionOfCC;maxReductionOfCC;meanReductionOfCC;totalReductionOfCC;"
    "runTimeToFillRefactoringCache;executionTime"
)


class Solution:
    """An ordered set of extractions for one method.

    Sequences are kept sorted by the start offset of their first statement.
    Two sequences never share a statement, though one may sit inside the body
    of a statement extracted by another.
    """

    def __init__(self, method: MethodTree, sequences: Iterable[Sequence] = ()) -> None:
        self.method = method
        self.sequences: list[Sequence] = []
        self.feasible = False
        self.fitness: float = 0.0
        self.reduced_complexity = 0
        self.initial_complexity = 0
        self.final_complexity = 0
        self.stats: ExtractionStats | None = None
        for sequence in sequences:
            self.insert_sequence(sequence)

    def insert_sequence(self, sequence: Sequence) -> None:
        """Insert keeping source order; equal starts go after existing ones."""
        if sequence.is_empty:
            raise ContractError("Cannot add an empty sequence to a solution")
        if sequence.method is not self.method:
            raise ContractError(
                f"Sequence of method '{sequence.method.name}' added to a solution "
                f"for '{self.method.name}'"
            )
        bisect.insort_right(self.sequences, sequence, key=lambda s: s.first.start)

    def remove_sequence(self, i: int) -> Sequence:
        return self.sequences.pop(i)

    def contains(self, node: Node) -> bool:
        """Whether `node` is one of the extracted statements."""
        return any(s.contains(node) for s in self.sequences)

    def __len__(self) -> int:
        return len(self.sequences)

    def __iter__(self):
        return iter(self.sequences)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        cache: ExtractionCache,
        annotations: Annotations,
        max_complexity: int,
    ) -> ExtractionMetrics | None:
        """Score the solution.

        Sequences are processed from last to first. The first infeasible one
        makes the whole solution infeasible and stops the evaluation; its
        metrics are returned. Otherwise returns None.
        """
        if cache.method is not self.method or annotations.method is not self.method:
            raise ContractError(f"Cache or annotations do not belong to method '{self.method.name}'")

        extracted = {slot.node.index for s in self.sequences for slot in s.slots}
        self.initial_complexity = annotations.method_complexity
        self.fitness = float(len(self.sequences))
        collected: list[ExtractionMetrics] = []

        for sequence in reversed(self.sequences):
            metrics = cache.metrics_for(sequence)
            if not metrics.feasible:
                self.fitness = WORST_FITNESS
                self.feasible = False
                self.reduced_complexity = 0
                self.final_complexity = self.initial_complexity
                self.stats = None
                return metrics

            residual = sum(
                residual_complexity(slot.node, annotations, extracted) for slot in sequence.slots
            )
            if residual > max_complexity:
                self.fitness += PENALTY_PER_EXCESS_UNIT * (residual - max_complexity)
            collected.append(metrics)

        collected.reverse()
        self.stats = ExtractionStats.from_metrics(collected)

        self.final_complexity = residual_complexity(self.method.root, annotations, extracted)
        self.reduced_complexity = self.initial_complexity - self.final_complexity
        if self.final_complexity > max_complexity:
            self.fitness += PENALTY_PER_EXCESS_UNIT * (self.final_complexity - max_complexity)
        self.feasible = True
        return None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_line(self) -> str:
        """Sequence list as written to solution files, e.g. `[[12 30], [45]]`."""
        return "[" + ", ".join(repr(s) for s in self.sequences) + "]"

    def results_row(self, algorithm: str, cache_fill_ms: float = 0.0, execution_ms: float = 0.0) -> str:
        """One line of the results table (see RESULTS_HEADER)."""
        stats = self.stats or ExtractionStats()
        fields = [
            algorithm,
            self.method.name,
            str(self.initial_complexity),
            self.to_line(),
            str(len(self.sequences)),
            str(self.fitness),
            str(self.reduced_complexity),
            str(self.final_complexity),
            *stats.as_row(),
            f"{cache_fill_ms:.0f}",
            f"{execution_ms:.0f}",
        ]
        return ";".join(fields)

    def summary(self) -> str:
        """Human-readable summary of the solution."""
        lines = [
            f"Solution for method: {self.method.name}",
            f"Feasible: {self.feasible}",
            f"Fitness: {self.fitness}",
            f"Complexity: {self.initial_complexity} -> {self.final_complexity} "
            f"(reduced by {self.reduced_complexity})",
            f"Extractions: {len(self.sequences)}",
        ]
        for s in self.sequences:
            first, last = s.positions
            lines.append(
                f"  {s.interval} statements {first}..{last} "
                f"complexity={s.accumulated_complexity} nesting={s.nesting}"
            )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Solution [methodName={self.method.name}, sequenceList={self.to_line()}, "
            f"isFeasible={self.feasible}, fitness={self.fitness}, "
            f"reducedComplexity={self.reduced_complexity}]"
        )


def residual_complexity(root: Node, annotations: Annotations, extracted: set[int]) -> int:
    """Complexity left in `root`'s subtree once the `extracted` statements are gone.

    Subtrees of extracted statements other than `root` are skipped. Each
    remaining contribution is lowered by `root`'s nesting depth when it
    exceeds it, and counted in full otherwise.
    """
    base = annotations.get(root).depth
    total = 0

    def _enter(node: Node, _parent: Node | None) -> bool:
        nonlocal total
        if node is not root and node.index in extracted:
            return False
        contribution = annotations.get(node).contribution
        if contribution != 0:
            total += contribution - base if contribution > base else contribution
        return True

    walk(root, _enter)
    return total


class SolutionEvaluator:
    """Scores candidates and keeps the best one seen so far.

    Lower fitness wins; on a tie the earlier candidate is kept.
    """

    def __init__(
        self,
        method: MethodTree,
        cache: ExtractionCache,
        annotations: Annotations,
        max_complexity: int,
        observer: SearchObserver | None = None,
    ) -> None:
        self.method = method
        self.cache = cache
        self.annotations = annotations
        self.max_complexity = max_complexity
        self.observer = observer or SearchObserver()
        self.best: Solution | None = None
        self.visited = 0

    def evaluate(self, candidate: Iterable[Sequence]) -> Solution:
        solution = Solution(self.method, candidate)
        solution.evaluate(self.cache, self.annotations, self.max_complexity)
        return solution

    def consider(self, candidate: Iterable[Sequence]) -> Solution:
        solution = self.evaluate(candidate)
        self.visited += 1
        self.observer.candidate_evaluated(self.visited, solution)
        if self.best is None or solution.fitness < self.best.fitness:
            self.best = solution
            self.observer.best_improved(self.visited, solution)
        return solution
