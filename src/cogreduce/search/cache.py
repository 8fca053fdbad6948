"""Memoization of the extraction oracle.

Asking the oracle whether a span can be extracted is by far the most
expensive step of the search, so every verdict is stored by the span's
source interval. A cache lives for exactly one method's search session and
only ever grows.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from cogreduce.exceptions import ContractError, LoaderError
from cogreduce.search.observer import SearchObserver
from cogreduce.search.oracle import ExtractionOracle, OracleVerdict
from cogreduce.search.sequence import ExtractionInterval, Sequence
from cogreduce.tree.models import MethodTree

CSV_COLUMNS = [
    "from",
    "to",
    "feasible",
    "reason",
    "parameters",
    "extracted_loc",
    "reduction_cc",
    "extracted_method_cc",
    "nesting",
    "inherent",
    "nesting_component",
    "nesting_contributors",
]


class ExtractionMetrics(BaseModel):
    """Outcome of evaluating one candidate extraction."""

    model_config = ConfigDict(frozen=True)

    feasible: bool
    reason: str = ""
    parameter_count: int = 0
    extracted_line_count: int = 0
    reduction_of_complexity: int = 0
    complexity_of_new_method: int = 0
    nesting_depth: int = 0
    inherent_component: int = 0
    nesting_component: int = 0
    nesting_contributor_count: int = 0

    @property
    def complexity_when_extracted(self) -> int:
        return self.inherent_component + self.nesting_component


class CacheRow(BaseModel):
    """One exported cache entry."""

    interval: ExtractionInterval
    metrics: ExtractionMetrics

    def to_csv(self) -> list[str]:
        m = self.metrics
        return [
            str(self.interval.from_offset),
            str(self.interval.to_offset),
            "1" if m.feasible else "0",
            m.reason,
            str(m.parameter_count),
            str(m.extracted_line_count),
            str(m.reduction_of_complexity),
            str(m.complexity_of_new_method),
            str(m.nesting_depth),
            str(m.inherent_component),
            str(m.nesting_component),
            str(m.nesting_contributor_count),
        ]


class ExtractionCache:
    """Interval-keyed store of oracle verdicts for one method."""

    def __init__(
        self,
        method: MethodTree,
        oracle: ExtractionOracle,
        observer: SearchObserver | None = None,
    ) -> None:
        self.method = method
        self.oracle = oracle
        self.observer = observer or SearchObserver()
        self._entries: dict[ExtractionInterval, ExtractionMetrics] = {}

    def metrics_for(self, sequence: Sequence) -> ExtractionMetrics:
        """Metrics of extracting `sequence`, asking the oracle on a miss."""
        if sequence.is_empty:
            raise ContractError("Cannot evaluate an empty sequence")
        return self.get_or_evaluate(sequence.interval, sequence)

    def get_or_evaluate(self, interval: ExtractionInterval, sequence: Sequence) -> ExtractionMetrics:
        if sequence.is_empty:
            raise ContractError("Cannot evaluate an empty sequence")
        if sequence.method is not self.method:
            raise ContractError(
                f"Sequence belongs to method '{sequence.method.name}', "
                f"not to '{self.method.name}' this cache was created for"
            )
        interval = ExtractionInterval(*interval)
        if interval != sequence.interval:
            raise ContractError(f"Interval {interval} does not match sequence {sequence.interval}")
        cached = self._entries.get(interval)
        if cached is not None:
            return cached

        try:
            verdict = self.oracle.evaluate(self.method.unit, sequence.first.node, sequence.last.node)
        except (RecursionError, MemoryError):
            raise
        except Exception as e:
            # Oracle failures count as infeasible spans and are never retried
            self.observer.oracle_failed(interval, e)
            verdict = OracleVerdict(feasible=False, reason=f"oracle failure: {e}")

        metrics = ExtractionMetrics(
            feasible=verdict.feasible,
            reason=verdict.reason,
            parameter_count=verdict.parameter_count,
            extracted_line_count=verdict.extracted_line_count,
            complexity_of_new_method=verdict.complexity_of_new_method,
            reduction_of_complexity=sequence.accumulated_complexity,
            nesting_depth=sequence.nesting,
            inherent_component=sequence.accumulated_inherent,
            nesting_component=sequence.accumulated_nesting,
            nesting_contributor_count=sequence.nesting_contributors,
        )
        self._entries[interval] = metrics
        self.observer.oracle_called(interval, metrics)
        return metrics

    def get(self, interval: ExtractionInterval) -> ExtractionMetrics | None:
        return self._entries.get(interval)

    def __contains__(self, interval: object) -> bool:
        return interval in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[tuple[ExtractionInterval, ExtractionMetrics]]:
        return iter(list(self._entries.items()))

    def feasible_items(self) -> Iterator[tuple[ExtractionInterval, ExtractionMetrics]]:
        return ((i, m) for i, m in self.items() if m.feasible)

    def as_dict(self) -> dict[ExtractionInterval, ExtractionMetrics]:
        return dict(self._entries)

    def export(self) -> list[CacheRow]:
        """Read-only snapshot of every entry, ordered by interval."""
        return [
            CacheRow(interval=interval, metrics=metrics)
            for interval, metrics in sorted(self._entries.items())
        ]

    def summary(self) -> str:
        feasible = sum(1 for m in self._entries.values() if m.feasible)
        return (
            f"Elements in the cache = {len(self._entries)} "
            f"(feasible: {feasible}, unfeasible: {len(self._entries) - feasible})"
        )

    def write_csv(self, path: str | Path) -> Path:
        """Dump the cache as CSV, one row per interval."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_COLUMNS)
            for row in self.export():
                writer.writerow(row.to_csv())
        return path


def read_csv(path: str | Path) -> dict[ExtractionInterval, ExtractionMetrics]:
    """Load a cache dump written by `ExtractionCache.write_csv`."""
    path = Path(path)
    result: dict[ExtractionInterval, ExtractionMetrics] = {}
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = set(CSV_COLUMNS[:8]) - set(reader.fieldnames or [])
        if missing:
            raise LoaderError(f"{path}: missing cache columns {sorted(missing)}")
        for line_no, row in enumerate(reader, start=2):
            feasible = (row["feasible"] or "").strip()
            if feasible not in ("0", "1"):
                raise LoaderError(f"{path}:{line_no}: feasible must be 0 or 1, got {feasible!r}")
            try:
                interval = ExtractionInterval(int(row["from"]), int(row["to"]))
                result[interval] = ExtractionMetrics(
                    feasible=feasible == "1",
                    reason=row["reason"],
                    parameter_count=int(row["parameters"]),
                    extracted_line_count=int(row["extracted_loc"]),
                    reduction_of_complexity=int(row["reduction_cc"]),
                    complexity_of_new_method=int(row["extracted_method_cc"]),
                    nesting_depth=int(row.get("nesting") or 0),
                    inherent_component=int(row.get("inherent") or 0),
                    nesting_component=int(row.get("nesting_component") or 0),
                    nesting_contributor_count=int(row.get("nesting_contributors") or 0),
                )
            except (TypeError, ValueError) as e:
                raise LoaderError(f"{path}:{line_no}: malformed cache row: {e}") from e
    return result
