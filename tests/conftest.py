"""Shared test fixtures for cogreduce."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Callable

import pytest

from cogreduce.search.oracle import OracleVerdict
from cogreduce.tree.models import MethodTree, Node, NodeKind


def node(kind: NodeKind, start: int, end: int, *children: Node, inherent: int = 0, nesting: int = 0) -> Node:
    return Node(
        kind=kind,
        start=start,
        end=end,
        inherent=inherent,
        nesting=nesting,
        children=list(children),
    )


def stmt(start: int, end: int, inherent: int = 0, nesting: int = 0) -> Node:
    return node(NodeKind.STATEMENT, start, end, inherent=inherent, nesting=nesting)


def block(start: int, end: int, *children: Node) -> Node:
    return node(NodeKind.BLOCK, start, end, *children)


def if_(start: int, end: int, *children: Node, inherent: int = 1, nesting: int = 0) -> Node:
    return node(NodeKind.IF, start, end, *children, inherent=inherent, nesting=nesting)


def method(*body: Node, name: str = "process") -> MethodTree:
    """A method whose body block holds `body`."""
    end = max((s.end for s in body), default=10)
    root = node(NodeKind.METHOD, 0, end + 2, block(1, end + 1, *body))
    return MethodTree(name, root)


class FakeOracle:
    """Oracle answering from a predicate over `(from, to)` intervals."""

    def __init__(
        self,
        feasible: Callable[[tuple[int, int]], bool] | None = None,
        failing: set[tuple[int, int]] | None = None,
        error: type[BaseException] = RuntimeError,
    ) -> None:
        self.feasible = feasible or (lambda interval: True)
        self.failing = failing or set()
        self.error = error
        self.calls: Counter = Counter()

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def evaluate(self, unit: object, first: Node, last: Node) -> OracleVerdict:
        key = (first.start, last.end)
        self.calls[key] += 1
        if key in self.failing:
            raise self.error("extraction crashed")
        if self.feasible(key):
            return OracleVerdict(
                feasible=True,
                parameter_count=1,
                extracted_line_count=max(1, (last.end - first.start) // 10),
                complexity_of_new_method=1,
            )
        return OracleVerdict(feasible=False, reason="rejected")


def only(*intervals: tuple[int, int]) -> FakeOracle:
    """Oracle that accepts exactly the given intervals."""
    allowed = set(intervals)
    return FakeOracle(lambda interval: interval in allowed)


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def nested_method() -> MethodTree:
    """A branch holding three statements whose middle one carries complexity 5.

    The middle statement is an `if` (+2 at nesting 1) wrapping another `if`
    (+3 at nesting 2); the outer branch adds 1, so the method scores 6.
    """
    inner_if = if_(52, 110, block(60, 108, stmt(62, 100)), inherent=1, nesting=2)
    middle = if_(42, 120, block(50, 118, inner_if), inherent=1, nesting=1)
    body = block(20, 180, stmt(22, 40), middle, stmt(122, 170))
    outer = if_(10, 190, body)
    root = node(NodeKind.METHOD, 0, 200, block(1, 199, outer))
    return MethodTree("nested", root)


@pytest.fixture
def two_branch_method() -> MethodTree:
    """Two sibling `if` statements, each wrapping a nested `if` (total 6)."""
    first = if_(10, 50, block(20, 48, if_(22, 46, block(30, 44, stmt(32, 42)), nesting=1)))
    second = if_(60, 100, block(70, 98, if_(72, 96, block(80, 94, stmt(82, 92)), nesting=1)))
    return method(first, second, name="twoBranches")


@pytest.fixture
def flat_method() -> MethodTree:
    """Three plain statements followed by a loop holding two statements."""
    loop = node(
        NodeKind.WHILE, 70, 130,
        block(80, 128, stmt(82, 100, inherent=1, nesting=1), stmt(102, 126)),
        inherent=1,
    )
    return method(stmt(10, 20), stmt(22, 40), stmt(42, 60), loop, name="flat")


SAMPLE_DOCUMENT = {
    "name": "process",
    "unit": "src/Process.java",
    "root": {
        "kind": "method", "start": 0, "end": 200,
        "children": [{
            "kind": "block", "start": 1, "end": 199,
            "children": [{
                "kind": "if", "start": 10, "end": 190, "inherent": 1,
                "children": [{
                    "kind": "block", "start": 20, "end": 180,
                    "children": [
                        {"kind": "statement", "start": 22, "end": 40},
                        {
                            "kind": "if", "start": 42, "end": 120, "inherent": 1, "nesting": 1,
                            "children": [{
                                "kind": "block", "start": 50, "end": 118,
                                "children": [{
                                    "kind": "if", "start": 52, "end": 110,
                                    "inherent": 1, "nesting": 2,
                                    "children": [{
                                        "kind": "block", "start": 60, "end": 108,
                                        "children": [
                                            {"kind": "statement", "start": 62, "end": 100}
                                        ],
                                    }],
                                }],
                            }],
                        },
                        {"kind": "statement", "start": 122, "end": 170},
                    ],
                }],
            }],
        }],
    },
    "verdicts": [
        {"from": 42, "to": 120, "feasible": True, "parameter_count": 2,
         "extracted_line_count": 8, "complexity_of_new_method": 1},
        {"from": 52, "to": 110, "feasible": True, "parameter_count": 1,
         "extracted_line_count": 5, "complexity_of_new_method": 1},
        {"from": 10, "to": 190, "feasible": False, "reason": "ambiguous return value"},
    ],
}


@pytest.fixture
def method_file(tmp_path: Path) -> Path:
    """A method document on disk."""
    path = tmp_path / "process.json"
    path.write_text(json.dumps(SAMPLE_DOCUMENT, indent=2))
    return path
