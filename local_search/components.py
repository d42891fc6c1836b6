"""
Search components: the bundle of callables the local search engine drives.

A bundle holds four collaborators:
- get_moves: neighborhood generator, yields candidate moves
- gain: scores a candidate move, positive means improvement
- commit: applies an accepted move in place, returns whether it changed anything
- stop_condition: asked after a candidate is considered, True terminates the round

Single-solution engines call them without the element argument:
``get_moves(solution)``, ``gain(solution, move)`` and so on. Multi-solution
engines pass the element under consideration:
``get_moves(solution, element)``, ``gain(solution, element, move)``.
"""

import copy
import dataclasses
from dataclasses import dataclass
from typing import Any, Callable

from .stop_conditions import never_stop


def _check_callable(name: str, value: Any) -> None:
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {type(value).__name__}")


@dataclass(frozen=True)
class SearchComponents:
    """
    Immutable bundle of neighborhood, gain, commit and stop condition.

    The compatibility of the four callables with one Solution and Move
    type is not checked; mixing them up surfaces as an error raised
    by the callables themselves.
    """

    get_moves: Callable[..., Any]
    gain: Callable[..., Any]
    commit: Callable[..., Any]
    stop_condition: Callable[..., bool] = never_stop

    def __post_init__(self):
        _check_callable('get_moves', self.get_moves)
        _check_callable('gain', self.gain)
        _check_callable('commit', self.commit)
        _check_callable('stop_condition', self.stop_condition)

    def replace(self, **changes: Any) -> 'SearchComponents':
        """Return a copy with some of the callables swapped (e.g. a wrapped gain)."""
        return dataclasses.replace(self, **changes)


class ObjectiveGain:
    """
    Gain computed from an objective function instead of a delta formula.

    The move is committed on a copy of the solution and the gain is
    ``objective(copy) - objective(solution)``, so the objective is maximized.
    The original solution is never touched.

    Args:
        objective: Function of the solution, larger is better
        commit: Commit callable used to build the neighbor
        copy_solution: How to copy a solution (default: copy.deepcopy)
    """

    def __init__(
        self,
        objective: Callable[[Any], Any],
        commit: Callable[..., Any],
        copy_solution: Callable[[Any], Any] = copy.deepcopy
    ):
        self.objective = objective
        self.commit = commit
        self.copy_solution = copy_solution

    def __call__(self, solution: Any, *args: Any) -> Any:
        neighbor = self.copy_solution(solution)
        self.commit(neighbor, *args)
        return self.objective(neighbor) - self.objective(solution)


@dataclass(frozen=True)
class ObjectiveFunctionComponents:
    """
    Components described by an objective function rather than a gain.

    Use ``to_search_components()`` to get a bundle the engine can run.
    """

    get_moves: Callable[..., Any]
    objective: Callable[[Any], Any]
    commit: Callable[..., Any]
    stop_condition: Callable[..., bool] = never_stop

    def __post_init__(self):
        _check_callable('get_moves', self.get_moves)
        _check_callable('objective', self.objective)
        _check_callable('commit', self.commit)
        _check_callable('stop_condition', self.stop_condition)

    def to_search_components(
        self,
        copy_solution: Callable[[Any], Any] = copy.deepcopy
    ) -> SearchComponents:
        return SearchComponents(
            get_moves=self.get_moves,
            gain=ObjectiveGain(self.objective, self.commit, copy_solution),
            commit=self.commit,
            stop_condition=self.stop_condition
        )
