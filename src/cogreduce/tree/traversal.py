"""Generic pre/post-order traversal over method trees."""

from __future__ import annotations

from typing import Callable

from cogreduce.tree.models import Node

# enter(node, parent) -> False to skip the node's children
EnterFn = Callable[[Node, "Node | None"], "bool | None"]
LeaveFn = Callable[[Node, "Node | None"], None]


def walk(
    node: Node,
    enter: EnterFn,
    leave: LeaveFn | None = None,
    parent: Node | None = None,
) -> None:
    """Visit `node` and its descendants in source order.

    `enter` runs before a node's children and may return False to prune
    them; `leave` runs after them (or right after `enter` when pruned).
    Iterative, so deep trees do not hit the recursion limit.
    """
    stack: list[tuple[Node, Node | None, bool]] = [(node, parent, False)]
    while stack:
        current, owner, leaving = stack.pop()
        if leaving:
            if leave is not None:
                leave(current, owner)
            continue
        descend = enter(current, owner)
        stack.append((current, owner, True))
        if descend is False:
            continue
        for child in reversed(current.children):
            stack.append((child, current, False))


def collect(node: Node, predicate: Callable[[Node], bool]) -> list[Node]:
    """All nodes under (and including) `node` matching `predicate`, in pre-order."""
    found: list[Node] = []

    def _enter(n: Node, _parent: Node | None) -> None:
        if predicate(n):
            found.append(n)

    walk(node, _enter)
    return found
