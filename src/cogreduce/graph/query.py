"""Queries over built extraction graphs."""

from __future__ import annotations

import networkx as nx

from cogreduce.graph.builder import ExtractionGraphBuilder
from cogreduce.graph.models import ExtractionVertex, Overlay, effective_components


class ExtractionGraphQuery:
    """Navigate containment and conflicts between feasible extractions."""

    def __init__(self, builder: ExtractionGraphBuilder) -> None:
        self.containment = builder.containment
        self.conflicts = builder.conflicts
        self.root = builder.root

    def container(self, vertex: ExtractionVertex) -> ExtractionVertex | None:
        """The nearest extraction containing `vertex` (the root for top-level ones)."""
        if vertex not in self.containment:
            return None
        return next(iter(self.containment.successors(vertex)), None)

    def contained(self, vertex: ExtractionVertex) -> list[ExtractionVertex]:
        """Extractions whose nearest container is `vertex`, in source order."""
        if vertex not in self.containment:
            return []
        return sorted(self.containment.predecessors(vertex))

    def conflicts_of(self, vertex: ExtractionVertex) -> list[ExtractionVertex]:
        if vertex not in self.conflicts:
            return []
        return sorted(self.conflicts.neighbors(vertex))

    def path_to_root(self, vertex: ExtractionVertex) -> list[ExtractionVertex]:
        """Chain of containers from `vertex` up to the root, both included."""
        path = [vertex]
        current = self.container(vertex)
        while current is not None:
            path.append(current)
            current = self.container(current)
        return path

    def compatible(self, vertices: list[ExtractionVertex]) -> bool:
        """True if no two of `vertices` conflict."""
        chosen = set(vertices)
        for v in chosen:
            if v in self.conflicts and any(n in chosen for n in self.conflicts.neighbors(v)):
                return False
        return True

    def leaves(self) -> list[ExtractionVertex]:
        """Extractions that contain no other extraction."""
        return sorted(
            v for v in self.containment.nodes
            if self.containment.in_degree(v) == 0 and v != self.root
        )

    def complexity_when_extracted(self, vertex: ExtractionVertex, overlay: Overlay | None = None) -> int:
        return effective_components(vertex, overlay).complexity_when_extracted

    def subtree(self, vertex: ExtractionVertex) -> set[ExtractionVertex]:
        """All extractions nested (at any depth) inside `vertex`."""
        if vertex not in self.containment:
            return set()
        return nx.ancestors(self.containment, vertex)
