"""
Tests for the local search engine, strategies and drivers.

Most cases run on the quadratic -x^2 + 12x - 27 over integers, whose only
local optimum under +-1 moves is x = 6.

Run with: pytest tests/test_local_search.py -v
"""

import pytest

from conftest import Point, quadratic

from local_search import (
    BestImprovingStrategy,
    FirstImprovingStrategy,
    LocalSearchStep,
    LocalSearchStepMultiSolution,
    ObjectiveFunctionComponents,
    SearchComponents,
    SearchState,
    StopConditionCountLimit,
    best_improving,
    first_improving,
    local_search,
    make_strategy,
)
from utils.functors import AndFunctor, NotFunctor, always_true

MOVES = [10, -10, 1, -1]


def get_moves(point):
    return MOVES


def gain(point, move):
    return quadratic(Point(point.x + move)) - quadratic(point)


def commit(point, move):
    point.x += move
    return True


def quadratic_components(**kwargs):
    return SearchComponents(get_moves=get_moves, gain=gain, commit=commit, **kwargs)


class RecordingCommit:
    """Commit that remembers the sequence of visited values."""

    def __init__(self):
        self.path = []

    def __call__(self, point, move):
        point.x += move
        self.path.append(point.x)
        return True


class TestSearchComponents:
    """Tests for the components bundle."""

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            SearchComponents(get_moves=MOVES, gain=gain, commit=commit)

    def test_default_stop_condition_never_fires(self):
        components = quadratic_components()
        assert components.stop_condition(Point(0), 1) is False

    def test_replace_returns_new_bundle(self):
        components = quadratic_components()
        replaced = components.replace(stop_condition=always_true)

        assert replaced.stop_condition is always_true
        assert replaced.gain is components.gain
        assert components.stop_condition is not always_true


class TestSingleSolution:
    """Tests for one-round search on a single solution."""

    def test_first_improving_reaches_optimum(self):
        point = Point(0)
        assert first_improving(point, quadratic_components())
        assert point.x == 6

    def test_best_improving_path(self):
        point = Point(0)
        recorder = RecordingCommit()
        components = SearchComponents(get_moves, gain, recorder)

        assert best_improving(point, components)
        assert recorder.path == [10, 9, 8, 7, 6]

    def test_first_improving_path(self):
        point = Point(0)
        recorder = RecordingCommit()
        components = SearchComponents(get_moves, gain, recorder)

        first_improving(point, components)
        assert recorder.path == [10, 9, 8, 7, 6]

    def test_search_runs_one_round(self):
        point = Point(0)
        step = LocalSearchStep(point, quadratic_components())

        assert step.search() is True
        assert point.x == 10
        assert step.state is SearchState.RUNNING
        assert step.rounds == 1
        assert step.commits == 1

    def test_local_optimum_terminates_without_change(self):
        point = Point(6)
        step = LocalSearchStep(point, quadratic_components(), strategy=BestImprovingStrategy())

        assert step.search() is False
        assert step.terminated
        assert point.x == 6
        assert step.commits == 0

    def test_terminated_state_is_not_latched(self):
        point = Point(6)
        step = LocalSearchStep(point, quadratic_components())
        assert step.search() is False

        point.x = 3
        assert step.search() is True
        assert step.state is SearchState.RUNNING

    def test_terminated_is_idempotent(self):
        point = Point(6)
        step = LocalSearchStep(point, quadratic_components())

        assert step.search() is False
        assert step.search() is False
        assert step.terminated
        assert point.x == 6
        assert step.commits == 0

    def test_first_improving_is_deterministic(self):
        paths = []
        for _ in range(2):
            recorder = RecordingCommit()
            point = Point(-20)
            first_improving(point, SearchComponents(get_moves, gain, recorder))
            paths.append(recorder.path)

        assert paths[0] == paths[1]
        assert paths[0][-1] == 6

    def test_driver_returns_false_at_optimum(self):
        point = Point(6)
        assert local_search(point, quadratic_components()) is False
        assert point.x == 6

    def test_zero_gain_is_not_accepted(self):
        point = Point(0)
        components = SearchComponents(
            get_moves=lambda p: [1, 2, 3],
            gain=lambda p, m: 0,
            commit=commit
        )

        assert first_improving(point, components) is False
        assert best_improving(point, components) is False
        assert point.x == 0

    def test_empty_neighborhood_terminates(self):
        point = Point(0)
        components = SearchComponents(lambda p: [], gain, commit)
        step = LocalSearchStep(point, components)

        assert step.search() is False
        assert step.terminated

    def test_best_improving_tie_goes_to_first_candidate(self):
        point = Point(0)
        components = SearchComponents(
            get_moves=lambda p: [5, 7, 9],
            gain=lambda p, m: 1 if m != 5 else 0,
            commit=commit
        )
        step = LocalSearchStep(point, components, strategy=BestImprovingStrategy())

        assert step.search()
        assert point.x == 7

    def test_no_components_rejected(self):
        with pytest.raises(ValueError):
            LocalSearchStep(Point(0))

    def test_wrong_components_type_rejected(self):
        with pytest.raises(TypeError):
            LocalSearchStep(Point(0), (get_moves, gain, commit))


class TestStopConditions:
    """Tests for stop conditions inside a round."""

    def test_best_improving_stops_on_first_candidate(self):
        point = Point(0)
        step = LocalSearchStep(
            point,
            quadratic_components(stop_condition=always_true),
            strategy=BestImprovingStrategy()
        )

        assert step.search() is False
        assert step.terminated
        assert point.x == 0

    def test_first_improving_stops_after_rejected_candidate(self):
        point = Point(6)
        evaluated = []

        def counting_gain(p, move):
            evaluated.append(move)
            return gain(p, move)

        components = SearchComponents(get_moves, counting_gain, commit, always_true)
        step = LocalSearchStep(point, components)

        assert step.search() is False
        assert evaluated == [10]

    def test_first_improving_commits_before_asking_stop(self):
        point = Point(0)
        step = LocalSearchStep(point, quadratic_components(stop_condition=always_true))

        assert step.search() is True
        assert point.x == 10

    def test_count_limit_across_rounds(self):
        point = Point(0)
        components = quadratic_components(stop_condition=StopConditionCountLimit(4))

        best_improving(point, components)
        assert point.x == 7

    def test_best_improving_asks_stop_once_per_round(self):
        seen = []

        def stop(p, move):
            seen.append(move)
            return False

        point = Point(0)
        best_improving(point, quadratic_components(stop_condition=stop))

        # best move of each committing round, then the last move scanned at the optimum
        assert seen == [10, -1, -1, -1, -1, -1]
        assert point.x == 6

    def test_best_improving_stop_discards_best_move(self):
        point = Point(0)
        step = LocalSearchStep(
            point,
            quadratic_components(stop_condition=lambda p, move: move == 10),
            strategy=BestImprovingStrategy()
        )

        assert step.search() is False
        assert point.x == 0


class TestDrivers:
    """Tests for the on_success / on_fail continuation driver."""

    def test_on_success_count_limit(self):
        point = Point(0)
        logged = []

        def log(p):
            logged.append(p.x)
            return True

        on_success = AndFunctor(log, NotFunctor(StopConditionCountLimit(5)))
        assert local_search(
            point, quadratic_components(),
            strategy=BestImprovingStrategy(), on_success=on_success
        )
        assert point.x == 6
        assert logged == [10, 9, 8, 7, 6]

    def test_on_success_stops_early(self):
        point = Point(0)
        on_success = NotFunctor(StopConditionCountLimit(2))

        local_search(point, quadratic_components(), strategy=BestImprovingStrategy(), on_success=on_success)
        assert point.x == 8

    def test_on_fail_restarts(self):
        point = Point(0)
        restarts = []

        def perturb(p):
            if len(restarts) == 2:
                return False
            restarts.append(p.x)
            p.x = 0
            return True

        recorder = RecordingCommit()
        assert local_search(point, SearchComponents(get_moves, gain, recorder), on_fail=perturb)
        assert restarts == [6, 6]
        assert point.x == 6
        assert recorder.path == [10, 9, 8, 7, 6] * 3

    def test_make_strategy(self):
        assert isinstance(make_strategy('first_improving'), FirstImprovingStrategy)
        assert isinstance(make_strategy('best_improving'), BestImprovingStrategy)
        with pytest.raises(ValueError):
            make_strategy('tabu')


class TestMultiSolution:
    """Tests for searches over multi-element solutions."""

    @staticmethod
    def towards(target):
        return SearchComponents(
            get_moves=lambda solution, point: [1, -1],
            gain=lambda solution, point, move: abs(point.x - target) - abs(point.x + move - target),
            commit=lambda solution, point, move: setattr(point, 'x', point.x + move) or True
        )

    def test_every_element_converges(self):
        points = [Point(0), Point(10), Point(3)]

        assert local_search(points, self.towards(3), multi_solution=True)
        assert [p.x for p in points] == [3, 3, 3]

    def test_best_improving_compares_elements(self):
        points = [Point(2), Point(0)]
        step = LocalSearchStepMultiSolution(points, self.towards(3), strategy=BestImprovingStrategy())

        # both elements gain 1, the first scanned wins
        assert step.search()
        assert [p.x for p in points] == [3, 0]

    def test_first_improving_tries_bundles_in_order(self):
        point = Point(10)
        calls = []

        def up_gain(p, move):
            calls.append('up')
            return gain(p, move)

        def down_gain(p, move):
            calls.append('down')
            return gain(p, move)

        up = SearchComponents(lambda p: [1], up_gain, commit)
        down = SearchComponents(lambda p: [-1], down_gain, commit)

        step = LocalSearchStep(point, up, down)
        assert step.search()
        assert point.x == 9
        assert calls == ['up', 'down']

    def test_best_improving_across_bundles(self):
        point = Point(0)
        recorder = RecordingCommit()
        by_two = SearchComponents(lambda p: [2], gain, recorder)
        by_one = SearchComponents(lambda p: [1], gain, recorder)

        best_improving(point, by_one, by_two)
        assert recorder.path == [2, 4, 6]


class TestObjectiveFunctionComponents:
    """Tests for components described by an objective."""

    def test_objective_drives_search(self):
        components = ObjectiveFunctionComponents(
            get_moves=get_moves,
            objective=quadratic,
            commit=commit
        ).to_search_components()

        point = Point(0)
        assert first_improving(point, components)
        assert point.x == 6

    def test_gain_does_not_touch_solution(self):
        components = ObjectiveFunctionComponents(get_moves, quadratic, commit).to_search_components()
        point = Point(0)

        assert components.gain(point, 10) == 20
        assert point.x == 0
