"""Build containment and conflict graphs from an extraction cache.

Three graphs come out of one build:

- containment: a DAG with an edge from each feasible extraction to the
  smallest extraction containing it (weight 1), rooted at a synthetic
  vertex spanning the whole method;
- conflicts: an undirected graph joining extractions that partially
  overlap, i.e. that can never be applied together;
- combined: the containment DAG plus every conflict as a pair of
  zero-weight edges, one in each direction.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import networkx as nx

from cogreduce.exceptions import GraphError
from cogreduce.graph.models import ExtractionVertex
from cogreduce.search.cache import ExtractionCache, ExtractionMetrics
from cogreduce.search.sequence import ExtractionInterval, Relation

CONTAINMENT_WEIGHT = 1
CONFLICT_WEIGHT = 0


def classify(p: ExtractionInterval, q: ExtractionInterval) -> Relation:
    """Relation of `p` to `q` from their endpoints alone."""
    return ExtractionInterval(*p).relation(ExtractionInterval(*q))


def _vertex_attrs(vertex: ExtractionVertex) -> dict:
    m = vertex.metrics
    return {
        "from_offset": vertex.from_offset,
        "to_offset": vertex.to_offset,
        "is_root": vertex.is_root,
        "reduction": m.reduction_of_complexity,
        "inherent": m.inherent_component,
        "nesting_component": m.nesting_component,
        "nesting_contributors": m.nesting_contributor_count,
        "nesting": m.nesting_depth,
        "parameters": m.parameter_count,
        "extracted_loc": m.extracted_line_count,
        "new_method_cc": m.complexity_of_new_method,
    }


class ExtractionGraphBuilder:
    """Builds the graphs of feasible extractions for one method."""

    def __init__(self) -> None:
        self.graph = nx.DiGraph()
        self.containment = nx.DiGraph()
        self.conflicts = nx.Graph()
        self.root: ExtractionVertex | None = None

    def build_from_cache(self, cache: ExtractionCache, root: ExtractionVertex) -> nx.DiGraph:
        """Build from the cache of a finished search session."""
        return self.build(cache.feasible_items(), root)

    def build(
        self,
        entries: Mapping[ExtractionInterval, ExtractionMetrics]
        | Iterable[tuple[ExtractionInterval, ExtractionMetrics]],
        root: ExtractionVertex,
    ) -> nx.DiGraph:
        """Build all three graphs and return the combined one.

        Args:
            entries: Cached extractions; infeasible ones are ignored.
            root: Vertex spanning the whole method.

        Returns:
            The combined containment + conflict graph.
        """
        items = entries.items() if isinstance(entries, Mapping) else entries
        vertices = sorted(
            ExtractionVertex(interval, metrics) for interval, metrics in items if metrics.feasible
        )

        # Reset state so reusing a builder doesn't accumulate stale data
        work = nx.DiGraph()
        self.conflicts = nx.Graph()
        self.root = root

        for v in vertices:
            work.add_node(v, **_vertex_attrs(v))

        for i, p in enumerate(vertices):
            for q in vertices[i + 1:]:
                relation = p.interval.relation(q.interval)
                if relation == Relation.CONTAINS:
                    work.add_edge(q, p, weight=CONTAINMENT_WEIGHT)
                elif relation == Relation.CONTAINED_BY:
                    work.add_edge(p, q, weight=CONTAINMENT_WEIGHT)
                elif relation == Relation.OVERLAP:
                    self.conflicts.add_edge(p, q)

        if root not in work:
            work.add_node(root, **_vertex_attrs(root))
        for v in vertices:
            if v != root and work.out_degree(v) == 0:
                work.add_edge(v, root, weight=CONTAINMENT_WEIGHT)

        self.containment = self._reduce(work)

        combined = self.containment.copy()
        for u, v in self.conflicts.edges:
            combined.add_edge(u, v, weight=CONFLICT_WEIGHT)
            combined.add_edge(v, u, weight=CONFLICT_WEIGHT)
        self.graph = combined
        return self.graph

    def _reduce(self, work: nx.DiGraph) -> nx.DiGraph:
        """Transitive reduction keeping attributes, one container per vertex."""
        if not nx.is_directed_acyclic_graph(work):
            raise GraphError("Containment graph has a cycle")
        reduced = nx.transitive_reduction(work)
        reduced.add_nodes_from(work.nodes(data=True))
        reduced.add_edges_from((u, v, work.edges[u, v]) for u, v in reduced.edges)

        # Overlapping containers both survive the reduction; keep the smallest
        for v in list(reduced.nodes):
            targets = list(reduced.successors(v))
            if len(targets) > 1:
                nearest = min(targets, key=lambda t: (t.length, t.interval))
                for t in targets:
                    if t is not nearest:
                        reduced.remove_edge(v, t)
        return reduced

    def get_stats(self) -> dict:
        """Get graph statistics."""
        return {
            "vertices": max(self.containment.number_of_nodes() - 1, 0),
            "containment_edges": self.containment.number_of_edges(),
            "conflicts": self.conflicts.number_of_edges(),
            "combined_edges": self.graph.number_of_edges(),
            "max_depth": self._max_depth(),
        }

    def _max_depth(self) -> int:
        if self.root is None or self.root not in self.containment:
            return 0
        lengths = nx.single_target_shortest_path_length(self.containment, self.root)
        return max(dict(lengths).values(), default=0)
