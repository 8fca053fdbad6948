"""Annotated method trees consumed by the search."""

from cogreduce.tree.annotate import Annotations, ComplexityRecord, annotate
from cogreduce.tree.models import MethodTree, Node, NodeKind
from cogreduce.tree.traversal import collect, walk

__all__ = [
    "Annotations",
    "ComplexityRecord",
    "MethodTree",
    "Node",
    "NodeKind",
    "annotate",
    "collect",
    "walk",
]
