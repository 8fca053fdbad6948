"""Text renderings of extraction graphs (DOT and GraphML)."""

from __future__ import annotations

from pathlib import Path

import networkx as nx

from cogreduce.graph.builder import CONFLICT_WEIGHT
from cogreduce.graph.models import ExtractionVertex


def _node_id(vertex: ExtractionVertex) -> str:
    return f"n{vertex.from_offset}_{vertex.to_offset}"


def _node_label(vertex: ExtractionVertex) -> str:
    m = vertex.metrics
    if vertex.is_root:
        return f"method {vertex.interval}\\ncc={m.reduction_of_complexity}"
    return (
        f"{vertex.interval}\\n"
        f"reduction={m.reduction_of_complexity} "
        f"inherent={m.inherent_component} "
        f"nesting={m.nesting_component}\\n"
        f"contributors={m.nesting_contributor_count} depth={m.nesting_depth} "
        f"params={m.parameter_count} loc={m.extracted_line_count}"
    )


def to_dot(graph: nx.DiGraph, name: str = "extractions") -> str:
    """Render a graph in Graphviz DOT format.

    Vertices are labeled with their interval and metrics, edges with their
    weight; zero-weight (conflict) edges are dashed.
    """
    lines: list[str] = []
    safe_name = "".join(c if c.isalnum() or c == "_" else "_" for c in name) or "g"
    lines.append(f"digraph {safe_name} {{")
    lines.append("  node [shape=box, fontname=\"monospace\"];")

    for vertex in sorted(graph.nodes):
        style = ", style=bold" if vertex.is_root else ""
        lines.append(f"  {_node_id(vertex)} [label=\"{_node_label(vertex)}\"{style}];")

    for u, v, data in sorted(graph.edges(data=True), key=lambda e: (e[0], e[1])):
        weight = data.get("weight", 1)
        style = ", style=dashed, color=red" if weight == CONFLICT_WEIGHT else ""
        lines.append(f"  {_node_id(u)} -> {_node_id(v)} [label=\"{weight}\"{style}];")

    lines.append("}")
    return "\n".join(lines) + "\n"


def to_graphml(graph: nx.DiGraph) -> str:
    """Render a graph as GraphML text."""
    relabeled = nx.relabel_nodes(graph, {v: _node_id(v) for v in graph.nodes}, copy=True)
    return "\n".join(nx.generate_graphml(relabeled)) + "\n"


def write_graph(graph: nx.DiGraph, path: str | Path, fmt: str = "dot", name: str = "extractions") -> Path:
    """Write a graph to `path` in `fmt` ("dot" or "graphml")."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "dot":
        path.write_text(to_dot(graph, name))
    elif fmt == "graphml":
        path.write_text(to_graphml(graph))
    else:
        raise ValueError(f"Unknown graph format: {fmt}")
    return path
