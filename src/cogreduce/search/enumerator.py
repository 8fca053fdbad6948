"""Cartesian composition of per-group selections into whole-method candidates."""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Callable

from cogreduce.exceptions import ContractError
from cogreduce.search.partition import SequencePartitionIterator
from cogreduce.search.sequence import Sequence

Candidate = list[Sequence]


class CandidateEnumerator:
    """Lazily enumerates one selection from every group, in a fixed order.

    The first group varies slowest. Inner iterators are restarted for every
    element of the outer ones rather than materialized, so only the spans a
    visited candidate actually needs are ever sent to the oracle.
    """

    def __init__(self, iterators: list[SequencePartitionIterator]) -> None:
        self.iterators = list(iterators)

    def _product(self) -> Iterator[list[list[Sequence]]]:
        # One live iterator per group up to the deepest one being advanced
        depth = len(self.iterators)
        if depth == 0:
            yield []
            return
        parts: list[list[Sequence]] = []
        stack = [iter(self.iterators[0])]
        while stack:
            try:
                selection = next(stack[-1])
            except StopIteration:
                stack.pop()
                if parts:
                    parts.pop()
                continue
            parts.append(selection)
            if len(stack) == depth:
                yield list(parts)
                parts.pop()
            else:
                stack.append(iter(self.iterators[len(stack)]))

    def __iter__(self) -> Iterator[Candidate]:
        for parts in self._product():
            yield [sequence for part in parts for sequence in part]

    def for_each(self, budget: int | None, consumer: Callable[[Candidate], None]) -> int:
        """Feed candidates to `consumer`, stopping after `budget` of them.

        Returns the number of candidates visited. `None` means no cap.
        """
        if budget is not None:
            if not isinstance(budget, int) or isinstance(budget, bool):
                raise ContractError(f"Budget must be an integer or None, got {budget!r}")
            if budget <= 0:
                return 0
        visited = 0
        for candidate in self:
            consumer(candidate)
            visited += 1
            if budget is not None and visited >= budget:
                break
        return visited

    def count(self) -> int:
        """Total number of candidates, as the product of group cardinalities."""
        return math.prod(it.cardinality() for it in self.iterators)