"""Combinatorial search for extract-method refactorings."""

from cogreduce.search.cache import ExtractionCache, ExtractionMetrics, read_csv
from cogreduce.search.engine import ExhaustiveSearch, search
from cogreduce.search.enumerator import CandidateEnumerator
from cogreduce.search.groups import extract_groups
from cogreduce.search.observer import CountingObserver, LoggingObserver, SearchObserver
from cogreduce.search.oracle import ExtractionOracle, OracleVerdict, TableOracle
from cogreduce.search.partition import SearchStrategy, SequencePartitionIterator
from cogreduce.search.sequence import ExtractionInterval, Relation, SentenceGroup, Sequence
from cogreduce.search.solution import Solution, SolutionEvaluator

__all__ = [
    "CandidateEnumerator",
    "CountingObserver",
    "ExhaustiveSearch",
    "ExtractionCache",
    "ExtractionInterval",
    "ExtractionMetrics",
    "ExtractionOracle",
    "LoggingObserver",
    "OracleVerdict",
    "Relation",
    "SearchObserver",
    "SearchStrategy",
    "SentenceGroup",
    "Sequence",
    "SequencePartitionIterator",
    "Solution",
    "SolutionEvaluator",
    "TableOracle",
    "extract_groups",
    "read_csv",
    "search",
]
