"""Cognitive complexity annotation pass.

Turns the raw per-node increments supplied by an external analyzer into one
immutable record per node: its own contribution, its nesting depth, and the
totals accumulated over its subtree. Records are keyed by the node's
pre-order index so nothing is ever stored on the nodes themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from cogreduce.tree.models import NESTING_KINDS, MethodTree, Node
from cogreduce.tree.traversal import walk


@dataclass(frozen=True)
class ComplexityRecord:
    """Complexity figures for one node."""

    contribution: int = 0
    inherent: int = 0
    nesting: int = 0
    depth: int = 0
    accumulated: int = 0
    accumulated_inherent: int = 0
    accumulated_nesting: int = 0
    nesting_contributors: int = 0


class Annotations:
    """Read-only lookup of complexity records by node."""

    def __init__(self, method: MethodTree, records: dict[int, ComplexityRecord]) -> None:
        self.method = method
        self._records = records

    def __getitem__(self, node: Node) -> ComplexityRecord:
        return self._records[node.index]

    def get(self, node: Node) -> ComplexityRecord:
        return self._records.get(node.index, ComplexityRecord())

    def __len__(self) -> int:
        return len(self._records)

    @property
    def method_complexity(self) -> int:
        return self._records[self.method.root.index].accumulated


def annotate(method: MethodTree) -> Annotations:
    """Compute complexity records for every node of `method`."""
    depths: dict[int, int] = {}
    totals: dict[int, list[int]] = {}
    records: dict[int, ComplexityRecord] = {}

    def _enter(node: Node, parent: Node | None) -> None:
        if parent is None:
            depths[node.index] = 0
        else:
            depths[node.index] = depths[parent.index] + (1 if parent.kind in NESTING_KINDS else 0)
        # accumulated, inherent, nesting, contributors
        totals[node.index] = [
            node.inherent + node.nesting,
            node.inherent,
            node.nesting,
            1 if node.nesting > 0 else 0,
        ]

    def _leave(node: Node, parent: Node | None) -> None:
        acc = totals[node.index]
        records[node.index] = ComplexityRecord(
            contribution=node.inherent + node.nesting,
            inherent=node.inherent,
            nesting=node.nesting,
            depth=depths[node.index],
            accumulated=acc[0],
            accumulated_inherent=acc[1],
            accumulated_nesting=acc[2],
            nesting_contributors=acc[3],
        )
        if parent is not None:
            parent_acc = totals[parent.index]
            for i, value in enumerate(acc):
                parent_acc[i] += value

    walk(method.root, _enter, _leave)
    return Annotations(method, records)
