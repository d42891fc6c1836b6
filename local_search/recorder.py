"""
Best-solution recorder.

Simulated annealing may commit worsening moves, so the current solution is
not necessarily the best one seen. RecordSolutionCommitAdapter wraps a commit
and keeps a copy of the best solution after every commit.
"""

import copy
import operator
from typing import Any, Callable


class FunctorToComparator:
    """
    Build a strict "is better" comparator from an objective function.

    ``FunctorToComparator(f, operator.gt)(a, b)`` is ``f(a) > f(b)``.
    Any strict weak order on the objective values works.
    """

    def __init__(
        self,
        functor: Callable[[Any], Any],
        compare: Callable[[Any, Any], bool] = operator.gt
    ):
        self.functor = functor
        self.compare = compare

    def __call__(self, left: Any, right: Any) -> bool:
        return self.compare(self.functor(left), self.functor(right))


class RecordSolutionCommitAdapter:
    """
    Commit wrapper that records the best solution committed so far.

    Args:
        best: Initial best solution (usually a copy of the starting solution)
        commit: Base commit callable
        is_better: Strict comparator, ``is_better(a, b)`` True when a beats b
        copy_solution: How the recorded solution is copied (default: copy.deepcopy)
    """

    def __init__(
        self,
        best: Any,
        commit: Callable[..., Any],
        is_better: Callable[[Any, Any], bool],
        copy_solution: Callable[[Any], Any] = copy.deepcopy
    ):
        self.best = copy_solution(best)
        self.commit = commit
        self.is_better = is_better
        self.copy_solution = copy_solution
        self.improvements = 0

    def __call__(self, solution: Any, *args: Any) -> Any:
        changed = self.commit(solution, *args)
        if self.is_better(solution, self.best):
            self.best = self.copy_solution(solution)
            self.improvements += 1
        return changed
