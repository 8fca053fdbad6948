"""Statement slots, sentence groups and sequences of sibling statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from cogreduce.exceptions import ContractError
from cogreduce.tree.annotate import ComplexityRecord
from cogreduce.tree.models import MethodTree, Node


class Relation(str, Enum):
    """How two extraction intervals relate to each other."""

    IDENTICAL = "identical"
    DISJOINT = "disjoint"
    CONTAINS = "contains"  # the first interval contains the second
    CONTAINED_BY = "contained_by"
    OVERLAP = "overlap"  # partial overlap: a conflict


class ExtractionInterval(NamedTuple):
    """Source range `[from_offset, to_offset)` of a candidate extraction."""

    from_offset: int
    to_offset: int

    def contains(self, other: ExtractionInterval) -> bool:
        """True if `other` lies inside this interval and is not the same interval."""
        return (
            self.from_offset <= other.from_offset
            and other.to_offset <= self.to_offset
            and self != other
        )

    def overlaps(self, other: ExtractionInterval) -> bool:
        """True if both intervals share at least one offset."""
        return self.from_offset < other.to_offset and other.from_offset < self.to_offset

    def relation(self, other: ExtractionInterval) -> Relation:
        if self == other:
            return Relation.IDENTICAL
        if not self.overlaps(other):
            return Relation.DISJOINT
        if self.contains(other):
            return Relation.CONTAINS
        if other.contains(self):
            return Relation.CONTAINED_BY
        return Relation.OVERLAP

    def __str__(self) -> str:
        return f"[{self.from_offset}, {self.to_offset}]"


@dataclass(frozen=True)
class StatementSlot:
    """One sibling statement of a sentence group."""

    position: int  # 1-based within the group
    start: int
    end: int
    is_empty: bool
    record: ComplexityRecord
    node: Node = field(compare=False, hash=False, repr=False)

    @property
    def complexity(self) -> int:
        return self.record.accumulated


@dataclass
class SentenceGroup:
    """Sibling statements sharing one syntactic parent, in source order."""

    method: MethodTree
    parent: Node
    slots: list[StatementSlot] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.slots)

    def slot(self, position: int) -> StatementSlot:
        return self.slots[position - 1]

    def sequence(self, first: int, last: int) -> Sequence:
        """Sequence of the slots at 1-based positions `first..last` (inclusive)."""
        if not 1 <= first <= last <= len(self.slots):
            raise ContractError(
                f"Invalid span {first}..{last} for a group of {len(self.slots)} statements"
            )
        return Sequence(self, self.slots[first - 1:last])

    @property
    def complexities(self) -> list[int]:
        return [s.complexity for s in self.slots]

    def __repr__(self) -> str:
        return (
            f"SentenceGroup(parent={self.parent.kind.value}@{self.parent.start}, "
            f"size={len(self.slots)})"
        )


class Sequence:
    """A contiguous run of statements from one sentence group.

    Sequences are the unit of extraction: each one would become the body of
    a new method.
    """

    def __init__(self, group: SentenceGroup, slots: list[StatementSlot] | tuple[StatementSlot, ...]):
        self.group = group
        self.slots = tuple(slots)
        for prev, cur in zip(self.slots, self.slots[1:]):
            if cur.position != prev.position + 1:
                raise ContractError("Sequence slots must be contiguous")

    @property
    def method(self) -> MethodTree:
        return self.group.method

    @property
    def is_empty(self) -> bool:
        return not self.slots

    @property
    def first(self) -> StatementSlot:
        if not self.slots:
            raise ContractError("Empty sequence has no first statement")
        return self.slots[0]

    @property
    def last(self) -> StatementSlot:
        if not self.slots:
            raise ContractError("Empty sequence has no last statement")
        return self.slots[-1]

    @property
    def interval(self) -> ExtractionInterval:
        if not self.slots:
            raise ContractError("No extraction interval is defined for an empty sequence")
        return ExtractionInterval(self.slots[0].start, self.slots[-1].end)

    @property
    def nodes(self) -> list[Node]:
        return [s.node for s in self.slots]

    @property
    def positions(self) -> tuple[int, int]:
        return self.first.position, self.last.position

    @property
    def accumulated_complexity(self) -> int:
        return sum(s.record.accumulated for s in self.slots)

    @property
    def accumulated_inherent(self) -> int:
        return sum(s.record.accumulated_inherent for s in self.slots)

    @property
    def accumulated_nesting(self) -> int:
        return sum(s.record.accumulated_nesting for s in self.slots)

    @property
    def nesting_contributors(self) -> int:
        return sum(s.record.nesting_contributors for s in self.slots)

    @property
    def complexity_when_extracted(self) -> int:
        return self.accumulated_inherent + self.accumulated_nesting

    @property
    def nesting(self) -> int:
        """Nesting depth of the first statement, -1 for an empty sequence."""
        if not self.slots:
            return -1
        return self.slots[0].record.depth

    def contains(self, node: Node) -> bool:
        return any(s.node is node for s in self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sequence):
            return NotImplemented
        return self.group is other.group and self.slots == other.slots

    def __hash__(self) -> int:
        return hash((id(self.group), self.slots))

    def __repr__(self) -> str:
        if not self.slots:
            return "[]"
        return "[" + " ".join(str(s.start) for s in self.slots) + "]"
