"""Tests for whole-method candidate enumeration."""

from __future__ import annotations

import pytest

from cogreduce.exceptions import ContractError
from cogreduce.search import ExhaustiveSearch
from cogreduce.tree import MethodTree
from tests.conftest import FakeOracle, method


@pytest.fixture
def session(flat_method: MethodTree, oracle: FakeOracle) -> ExhaustiveSearch:
    return ExhaustiveSearch(flat_method, oracle)


class TestCandidateEnumerator:
    def test_count_matches_iteration(self, session: ExhaustiveSearch):
        enumerator = session.enumerator()
        # 34 selections of the four body statements, 5 of the loop body
        assert enumerator.count() == 170
        assert sum(1 for _ in enumerator) == 170

    def test_first_group_varies_slowest(self, session: ExhaustiveSearch):
        candidates = list(session.enumerator())
        outer = [c[0].interval for c in candidates[:5]]
        assert outer == [(10, 130)] * 5
        assert [s.interval for s in candidates[0]] == [(10, 130), (82, 126)]
        assert candidates[-1] == []

    def test_exact_budget(self, session: ExhaustiveSearch):
        seen = []
        visited = session.enumerator().for_each(7, seen.append)
        assert visited == 7
        assert len(seen) == 7

    def test_budget_larger_than_space(self, session: ExhaustiveSearch):
        seen = []
        assert session.enumerator().for_each(1000, seen.append) == 170
        assert len(seen) == 170

    def test_no_budget(self, session: ExhaustiveSearch):
        assert session.enumerator().for_each(None, lambda c: None) == 170

    @pytest.mark.parametrize("budget", [0, -3])
    def test_non_positive_budget_visits_nothing(self, session: ExhaustiveSearch, budget: int):
        seen = []
        assert session.enumerator().for_each(budget, seen.append) == 0
        assert seen == []

    @pytest.mark.parametrize("budget", ["5", 2.5, True])
    def test_budget_must_be_integer(self, session: ExhaustiveSearch, budget):
        with pytest.raises(ContractError):
            session.enumerator().for_each(budget, lambda c: None)

    def test_lazy_oracle_use(self, flat_method: MethodTree):
        oracle = FakeOracle()
        session = ExhaustiveSearch(flat_method, oracle)
        session.enumerator().for_each(1, lambda c: None)
        # Only the longest span of each group was needed
        assert set(oracle.calls) == {(10, 130), (82, 126)}

    def test_no_groups(self, oracle: FakeOracle):
        session = ExhaustiveSearch(method(name="empty"), oracle)
        assert session.groups == []
        assert session.enumerator().count() == 1
        assert list(session.enumerator()) == [[]]
