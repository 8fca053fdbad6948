"""Enumerate the ways to carve one sentence group into extractions.

For a group of N statements a selection is a list of blocks
`(a1, b1), (a2, b2), ...` with `1 <= a1 <= b1 < a2 <= b2 < ... <= N`.
Statements outside every block stay in place, so blocks need not cover
the group. A block is admissible when neither end is an empty statement and
the extraction cache reports it feasible. Feasibility is not monotonic in
block length, so every block that could appear is checked.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from cogreduce.search.cache import ExtractionCache
from cogreduce.search.sequence import SentenceGroup, Sequence

Span = tuple[int, int]


class SearchStrategy(str, Enum):
    """Order in which blocks are tried at each start position."""

    LONG_SEQUENCE_FIRST = "long_sequence_first"
    SHORT_SEQUENCE_FIRST = "short_sequence_first"


class SequencePartitionIterator:
    """Lazy, re-iterable enumeration of the admissible selections of a group.

    Every call to `iter()` starts a new traversal; feasibility checks go
    through the shared cache so repeated traversals never re-ask the oracle.
    """

    def __init__(
        self,
        group: SentenceGroup,
        cache: ExtractionCache,
        strategy: SearchStrategy = SearchStrategy.LONG_SEQUENCE_FIRST,
    ) -> None:
        self.group = group
        self.cache = cache
        self.strategy = SearchStrategy(strategy)
        self._valid: dict[Span, bool] = {}

    def is_valid(self, first: int, last: int) -> bool:
        """Whether the block `first..last` may be extracted."""
        span = (first, last)
        known = self._valid.get(span)
        if known is not None:
            return known
        if self.group.slot(first).is_empty or self.group.slot(last).is_empty:
            valid = False
        else:
            valid = self.cache.metrics_for(self.group.sequence(first, last)).feasible
        self._valid[span] = valid
        return valid

    def _ends(self, first: int) -> range:
        n = len(self.group)
        if self.strategy == SearchStrategy.LONG_SEQUENCE_FIRST:
            return range(n, first - 1, -1)
        return range(first, n + 1)

    def _selections(self, start: int) -> Iterator[list[Span]]:
        """Selections of positions `start..N`, depth-first over an explicit stack.

        Each frame holds the position being tried as a block start and the
        block ends still to try from it. A frame whose start runs past N
        yields the chosen blocks with the rest left in place, then hands
        control back to the frame that chose its block.
        """
        n = len(self.group)
        chosen: list[Span] = []
        stack: list[tuple[int, Iterator[int]]] = [(start, iter(self._ends(start)))]
        while stack:
            first, ends = stack[-1]
            if first > n:
                # Leave the remaining statements untouched
                yield list(chosen)
                stack.pop()
                if chosen:
                    chosen.pop()
                continue
            for last in ends:
                if self.is_valid(first, last):
                    chosen.append((first, last))
                    stack.append((last + 1, iter(self._ends(last + 1))))
                    break
            else:
                stack[-1] = (first + 1, iter(self._ends(first + 1)))

    def spans(self) -> Iterator[list[Span]]:
        """Selections as lists of 1-based `(first, last)` positions."""
        return self._selections(1)

    def __iter__(self) -> Iterator[list[Sequence]]:
        for selection in self._selections(1):
            yield [self.group.sequence(a, b) for a, b in selection]

    def cardinality(self) -> int:
        """Number of selections, counted without enumerating them.

        `count[s]` is the number of selections of positions `s..N`: either
        no block starts at `s`, or a block `s..b` does and is followed by
        any selection of `b+1..N`.
        """
        n = len(self.group)
        count = [0] * (n + 2)
        count[n + 1] = 1
        for start in range(n, 0, -1):
            count[start] = count[start + 1] + sum(
                count[last + 1] for last in range(start, n + 1) if self.is_valid(start, last)
            )
        return count[1]

    def __repr__(self) -> str:
        return f"SequencePartitionIterator({self.group!r}, strategy={self.strategy.value})"
