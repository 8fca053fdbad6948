"""Select the sentence groups of a method.

A sentence group is a run of sibling statements that may be extracted
together. Groups come from three places:

- the statements of every block;
- the body of a loop or `if` when it is a single (non-block) statement
  that contributes complexity;
- each case segment of a switch (statements between two case labels).

Groups are returned in pre-order, i.e. in source order of their parents.
"""

from __future__ import annotations

from typing import Callable

from cogreduce.search.sequence import SentenceGroup, StatementSlot
from cogreduce.tree.annotate import Annotations
from cogreduce.tree.models import BRANCH_KINDS, MethodTree, Node, NodeKind
from cogreduce.tree.traversal import walk

Handler = Callable[[Node, "Node | None"], list[list[Node]]]


def _block_statements(node: Node, parent: Node | None) -> list[list[Node]]:
    statements = [child for child in node.children if child.is_statement]
    return [statements] if statements else []


def _switch_segments(node: Node, parent: Node | None) -> list[list[Node]]:
    segments: list[list[Node]] = []
    current: list[Node] = []
    for child in node.children:
        if child.kind == NodeKind.SWITCH_CASE:
            if current:
                segments.append(current)
                current = []
        elif child.is_statement:
            current.append(child)
    if current:
        segments.append(current)
    return segments


_HANDLERS: dict[NodeKind, Handler] = {
    NodeKind.BLOCK: _block_statements,
    NodeKind.SWITCH: _switch_segments,
}


def extract_groups(method: MethodTree, annotations: Annotations) -> list[SentenceGroup]:
    """Collect every sentence group of `method` in source order."""
    groups: list[SentenceGroup] = []

    def _make(parent: Node, statements: list[Node]) -> SentenceGroup:
        slots = [
            StatementSlot(
                position=i,
                start=stmt.start,
                end=stmt.end,
                is_empty=stmt.is_empty_statement,
                record=annotations.get(stmt),
                node=stmt,
            )
            for i, stmt in enumerate(statements, start=1)
        ]
        return SentenceGroup(method=method, parent=parent, slots=slots)

    def _enter(node: Node, parent: Node | None) -> None:
        handler = _HANDLERS.get(node.kind)
        if handler is not None:
            for statements in handler(node, parent):
                groups.append(_make(node, statements))
        elif (
            parent is not None
            and parent.kind in BRANCH_KINDS
            and node.is_statement
            and annotations.get(node).accumulated > 0
        ):
            groups.append(_make(parent, [node]))

    walk(method.root, _enter)
    return groups
