"""Interface to the extraction legality/metrics oracle.

The oracle is an external collaborator: given the source unit and the first
and last statement of a span, it attempts the extraction and reports whether
it is legal along with the metrics of the would-be new method. It must be
deterministic for an unchanged unit and range.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from cogreduce.tree.models import Node

NO_VERDICT_REASON = "no verdict recorded"


class OracleVerdict(BaseModel):
    """What the oracle reports for one span."""

    feasible: bool
    reason: str = ""
    parameter_count: int = 0
    extracted_line_count: int = 0
    complexity_of_new_method: int = 0


@runtime_checkable
class ExtractionOracle(Protocol):
    """Anything that can judge whether a span of statements is extractable."""

    def evaluate(self, unit: object, first: Node, last: Node) -> OracleVerdict:
        ...


class TableOracle:
    """Oracle backed by verdicts recorded ahead of time.

    Verdicts are keyed by `(from_offset, to_offset)`, the start of the first
    statement and the (exclusive) end of the last. Spans without a recorded
    verdict are reported infeasible.
    """

    def __init__(self, verdicts: dict[tuple[int, int], OracleVerdict] | None = None) -> None:
        self.verdicts: dict[tuple[int, int], OracleVerdict] = dict(verdicts or {})
        self.calls = 0

    def record(self, from_offset: int, to_offset: int, verdict: OracleVerdict) -> None:
        self.verdicts[(from_offset, to_offset)] = verdict

    def evaluate(self, unit: object, first: Node, last: Node) -> OracleVerdict:
        self.calls += 1
        verdict = self.verdicts.get((first.start, last.end))
        if verdict is None:
            return OracleVerdict(feasible=False, reason=NO_VERDICT_REASON)
        return verdict
