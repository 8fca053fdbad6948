"""Vertices of extraction graphs."""

from __future__ import annotations

from dataclasses import dataclass

from cogreduce.search.cache import ExtractionMetrics
from cogreduce.search.sequence import ExtractionInterval
from cogreduce.tree.annotate import Annotations


class ExtractionVertex:
    """A feasible extraction in a graph.

    Identity is the interval alone; the metrics ride along as payload.
    """

    __slots__ = ("interval", "metrics", "is_root")

    def __init__(
        self,
        interval: ExtractionInterval,
        metrics: ExtractionMetrics,
        is_root: bool = False,
    ) -> None:
        self.interval = ExtractionInterval(*interval)
        self.metrics = metrics
        self.is_root = is_root

    @classmethod
    def for_method(cls, annotations: Annotations) -> ExtractionVertex:
        """Synthetic vertex spanning the whole method."""
        method = annotations.method
        record = annotations[method.root]
        metrics = ExtractionMetrics(
            feasible=True,
            reduction_of_complexity=record.accumulated,
            nesting_depth=0,
            inherent_component=record.accumulated_inherent,
            nesting_component=record.accumulated_nesting,
            nesting_contributor_count=record.nesting_contributors,
        )
        return cls(ExtractionInterval(*method.span), metrics, is_root=True)

    @property
    def from_offset(self) -> int:
        return self.interval.from_offset

    @property
    def to_offset(self) -> int:
        return self.interval.to_offset

    @property
    def length(self) -> int:
        return self.interval.to_offset - self.interval.from_offset

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtractionVertex):
            return NotImplemented
        return self.interval == other.interval

    def __hash__(self) -> int:
        return hash(self.interval)

    def __lt__(self, other: ExtractionVertex) -> bool:
        return self.interval < other.interval

    def __str__(self) -> str:
        return str(self.interval)

    def __repr__(self) -> str:
        m = self.metrics
        return (
            f"{self.interval} ({m.reduction_of_complexity}, {m.inherent_component}, "
            f"{m.nesting_component}, {m.nesting_contributor_count}, {m.nesting_depth})"
        )


@dataclass(frozen=True)
class ComponentOverride:
    """Temporary replacement values for a vertex's complexity components.

    None keeps the vertex's own value.
    """

    inherent_component: int | None = None
    nesting_component: int | None = None
    nesting_contributor_count: int | None = None


Overlay = dict[ExtractionVertex, ComponentOverride]


@dataclass(frozen=True)
class Components:
    inherent_component: int
    nesting_component: int
    nesting_contributor_count: int

    @property
    def complexity_when_extracted(self) -> int:
        return self.inherent_component + self.nesting_component


def effective_components(vertex: ExtractionVertex, overlay: Overlay | None = None) -> Components:
    """The vertex's components with any overlay values applied."""
    m = vertex.metrics
    override = (overlay or {}).get(vertex)
    if override is None:
        return Components(m.inherent_component, m.nesting_component, m.nesting_contributor_count)
    return Components(
        inherent_component=(
            override.inherent_component
            if override.inherent_component is not None
            else m.inherent_component
        ),
        nesting_component=(
            override.nesting_component
            if override.nesting_component is not None
            else m.nesting_component
        ),
        nesting_contributor_count=(
            override.nesting_contributor_count
            if override.nesting_contributor_count is not None
            else m.nesting_contributor_count
        ),
    )
