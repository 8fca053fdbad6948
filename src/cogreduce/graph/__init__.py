"""Containment and conflict graphs of feasible extractions."""

from cogreduce.graph.builder import ExtractionGraphBuilder, classify
from cogreduce.graph.models import ComponentOverride, ExtractionVertex, effective_components
from cogreduce.graph.query import ExtractionGraphQuery

__all__ = [
    "ComponentOverride",
    "ExtractionGraphBuilder",
    "ExtractionGraphQuery",
    "ExtractionVertex",
    "classify",
    "effective_components",
]
