"""Tests for solutions, fitness and residual complexity."""

from __future__ import annotations

import math

import pytest

from cogreduce.exceptions import ContractError
from cogreduce.search import ExhaustiveSearch, Sequence, Solution, SolutionEvaluator
from cogreduce.search.solution import RESULTS_HEADER, residual_complexity
from cogreduce.tree import MethodTree, annotate
from tests.conftest import FakeOracle, block, if_, method, stmt


def group_of(session: ExhaustiveSearch, size: int):
    return next(g for g in session.groups if len(g) == size)


class TestResidualComplexity:
    def test_whole_method(self, nested_method: MethodTree):
        annotations = annotate(nested_method)
        assert residual_complexity(nested_method.root, annotations, set()) == 6

    def test_contributions_lowered_by_root_depth(self, nested_method: MethodTree):
        annotations = annotate(nested_method)
        middle = nested_method.nodes[5]
        # +2 -> 1 and +3 -> 2 once the subtree starts at depth 1
        assert residual_complexity(middle, annotations, set()) == 3

    def test_extracted_subtrees_skipped(self, nested_method: MethodTree):
        annotations = annotate(nested_method)
        middle, inner = nested_method.nodes[5], nested_method.nodes[7]
        assert residual_complexity(middle, annotations, {inner.index}) == 1
        assert residual_complexity(nested_method.root, annotations, {middle.index}) == 1
        # The root itself is never skipped
        assert residual_complexity(middle, annotations, {middle.index}) == 3

    def test_small_contributions_counted_in_full(self):
        leaf = stmt(32, 50, inherent=1)
        inner = if_(22, 56, block(30, 54, leaf), nesting=1)
        tree = method(if_(10, 60, block(20, 58, inner)))
        annotations = annotate(tree)
        assert annotations[leaf].depth == 2
        # inner: 2 -> 1, leaf: 1 is not above depth 1 so it stays 1
        assert residual_complexity(inner, annotations, set()) == 2
        assert residual_complexity(tree.root, annotations, set()) == 4


class TestSolution:
    def test_insertion_keeps_source_order(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        body, loop = group_of(session, 4), group_of(session, 2)
        solution = Solution(flat_method)
        for sequence in [body.sequence(3, 3), loop.sequence(1, 1), body.sequence(1, 1)]:
            solution.insert_sequence(sequence)
        assert [s.first.start for s in solution] == [10, 42, 82]
        assert solution.contains(body.slot(3).node)
        assert not solution.contains(body.slot(2).node)

    def test_equal_starts_insert_after(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        body = group_of(session, 4)
        solution = Solution(flat_method, [body.sequence(1, 2), body.sequence(1, 1)])
        assert [s.interval for s in solution] == [(10, 40), (10, 20)]

    def test_remove_sequence(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        body = group_of(session, 4)
        solution = Solution(flat_method, [body.sequence(1, 1), body.sequence(3, 4)])
        removed = solution.remove_sequence(0)
        assert removed.interval == (10, 20)
        assert len(solution) == 1

    def test_rejects_empty_sequence(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        with pytest.raises(ContractError):
            Solution(flat_method, [Sequence(group_of(session, 4), [])])

    def test_rejects_foreign_sequence(self, flat_method: MethodTree, nested_method: MethodTree):
        session = ExhaustiveSearch(nested_method, FakeOracle())
        with pytest.raises(ContractError):
            Solution(flat_method, [group_of(session, 3).sequence(1, 1)])

    def test_evaluate_feasible(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        body = group_of(session, 4)
        solution = Solution(flat_method, [body.sequence(1, 1), body.sequence(2, 3)])

        assert solution.evaluate(session.cache, session.annotations, 15) is None
        assert solution.feasible
        assert solution.fitness == 2
        assert solution.initial_complexity == solution.final_complexity == 3
        assert solution.reduced_complexity == 0
        assert solution.stats.extractions == 2
        assert solution.stats.min_extracted_loc == 1
        assert solution.stats.max_extracted_loc == 3
        assert solution.stats.mean_extracted_loc == 2.0
        assert solution.stats.total_parameters == 2

    def test_extracted_method_penalty(self, nested_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(nested_method, oracle, max_complexity=3)
        outer = session.groups[0].sequence(1, 1)
        solution = Solution(nested_method, [outer])
        solution.evaluate(session.cache, session.annotations, 3)
        # One extraction, and the extracted method keeps 6 > 3
        assert solution.fitness == 1 + 10 * 3
        assert solution.final_complexity == 0
        assert solution.reduced_complexity == 6

    def test_infeasible_short_circuits(self, flat_method: MethodTree):
        oracle = FakeOracle(lambda interval: interval != (42, 60))
        session = ExhaustiveSearch(flat_method, oracle)
        body = group_of(session, 4)
        solution = Solution(flat_method, [body.sequence(1, 1), body.sequence(3, 3)])

        metrics = solution.evaluate(session.cache, session.annotations, 15)
        assert metrics is not None and not metrics.feasible
        assert not solution.feasible
        assert math.isinf(solution.fitness)
        # Evaluated right to left: the earlier span was never looked at
        assert (10, 20) not in oracle.calls

    def test_rendering(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        body = group_of(session, 4)
        solution = Solution(flat_method, [body.sequence(1, 1), body.sequence(2, 3)])
        solution.evaluate(session.cache, session.annotations, 15)

        assert solution.to_line() == "[[10], [22 42]]"
        row = solution.results_row("long_sequence_first", 12.0, 34.0).split(";")
        assert len(row) == len(RESULTS_HEADER.split(";"))
        assert row[:3] == ["long_sequence_first", "flat", "3"]
        assert row[-2:] == ["12", "34"]
        assert "Extractions: 2" in solution.summary()
        assert "isFeasible=True" in repr(solution)


class TestSolutionEvaluator:
    def test_keeps_earlier_on_tie(self, flat_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(flat_method, oracle)
        evaluator = SolutionEvaluator(flat_method, session.cache, session.annotations, 15)
        first = evaluator.consider([])
        evaluator.consider([])
        assert evaluator.best is first
        assert evaluator.visited == 2

    def test_lower_fitness_wins(self, nested_method: MethodTree, oracle: FakeOracle):
        session = ExhaustiveSearch(nested_method, oracle, max_complexity=3)
        evaluator = SolutionEvaluator(nested_method, session.cache, session.annotations, 3)
        evaluator.consider([])
        better = evaluator.consider([group_of(session, 3).sequence(2, 2)])
        assert evaluator.best is better
        assert better.fitness == 1
