"""Data models for an annotated method tree."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, PrivateAttr


class NodeKind(str, Enum):
    """Kinds of syntax nodes the search distinguishes."""

    METHOD = "method"
    BLOCK = "block"
    IF = "if"
    FOR = "for"
    ENHANCED_FOR = "enhanced_for"
    WHILE = "while"
    DO = "do"
    SWITCH = "switch"
    SWITCH_CASE = "switch_case"
    TRY = "try"
    CATCH = "catch"
    LAMBDA = "lambda"
    EMPTY = "empty"
    STATEMENT = "statement"
    EXPRESSION = "expression"  # conditions, boolean operator chains, ...


# Parents whose single non-block body statement forms its own group
BRANCH_KINDS = frozenset({
    NodeKind.DO,
    NodeKind.ENHANCED_FOR,
    NodeKind.FOR,
    NodeKind.IF,
    NodeKind.WHILE,
})

# Nodes that increase the nesting level of everything below them
NESTING_KINDS = frozenset({
    NodeKind.IF,
    NodeKind.FOR,
    NodeKind.ENHANCED_FOR,
    NodeKind.WHILE,
    NodeKind.DO,
    NodeKind.SWITCH,
    NodeKind.CATCH,
    NodeKind.LAMBDA,
})

NON_STATEMENT_KINDS = frozenset({NodeKind.METHOD, NodeKind.EXPRESSION, NodeKind.LAMBDA})


class Node(BaseModel):
    """A syntax node with its source range and raw complexity increments.

    `inherent` and `nesting` are the increments an external analyzer
    attributed to this node (e.g. `+2 (incl 1 for nesting)` is inherent 1,
    nesting 1). `end` is exclusive.
    """

    kind: NodeKind
    start: int
    end: int
    inherent: int = 0
    nesting: int = 0
    label: str = ""
    children: list[Node] = Field(default_factory=list)
    index: int = -1  # pre-order position, assigned by MethodTree
    _owner: object = PrivateAttr(default=None)

    @property
    def is_statement(self) -> bool:
        return self.kind not in NON_STATEMENT_KINDS

    @property
    def is_empty_statement(self) -> bool:
        return self.kind == NodeKind.EMPTY


class _TreeToken:
    """Marks the tree that numbered a node. Deep copies of a node are unowned."""

    def __deepcopy__(self, memo: dict) -> None:
        return None


class MethodTree:
    """A method's syntax tree with nodes numbered in pre-order.

    The tree is read-only for the lifetime of a search session: node
    indices key the complexity annotations and the oracle is assumed to see
    the same source unit on every call. A node belongs to at most one tree;
    building a second tree over nodes already numbered by another raises
    ValueError. Copy the root (`model_copy(deep=True)`) to reuse a subtree.
    """

    def __init__(self, name: str, root: Node, unit: object = None) -> None:
        if root.kind != NodeKind.METHOD:
            raise ValueError(f"Method tree root must be a method node, got '{root.kind.value}'")
        self.name = name
        self.root = root
        self.unit = unit if unit is not None else name
        self.nodes: list[Node] = []
        self._parents: dict[int, int | None] = {}
        self._token = _TreeToken()
        self._number(root, None)

    def _number(self, node: Node, parent: Node | None) -> None:
        stack: list[tuple[Node, Node | None]] = [(node, parent)]
        while stack:
            current, owner = stack.pop()
            if current._owner is not None and current._owner is not self._token:
                raise ValueError(
                    f"Node {current.kind.value}@{current.start} already belongs to another method tree"
                )
            current._owner = self._token
            current.index = len(self.nodes)
            self.nodes.append(current)
            self._parents[current.index] = owner.index if owner is not None else None
            for child in reversed(current.children):
                stack.append((child, current))

    def parent(self, node: Node) -> Node | None:
        """Get the parent of a node, or None for the root."""
        idx = self._parents.get(node.index)
        return self.nodes[idx] if idx is not None else None

    def ancestors(self, node: Node) -> list[Node]:
        """Ancestors from the direct parent up to the root."""
        result = []
        current = self.parent(node)
        while current is not None:
            result.append(current)
            current = self.parent(current)
        return result

    def owns(self, node: Node) -> bool:
        return 0 <= node.index < len(self.nodes) and self.nodes[node.index] is node

    @property
    def span(self) -> tuple[int, int]:
        return self.root.start, self.root.end

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"MethodTree(name={self.name!r}, nodes={len(self.nodes)})"


Node.model_rebuild()
