"""
Abstract base class for local search problems.

A problem adapter supplies everything the local search core needs: a
solution type whose iteration yields the solution elements, and the
search components (neighborhood, gain, commit) working on it. The
adapter's constructors are the only place where problem invariants are
established; the engine never inspects them.
"""

import copy
import operator
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

import numpy as np

from local_search import (
    FunctorToComparator,
    SearchComponents,
    SearchStrategy,
    local_search,
)
from utils.functors import always_false, always_true


class BaseProblem(ABC):
    """
    Abstract base class for combinatorial optimization problems.

    All problems are minimization problems: ``evaluate`` returns a cost and
    every gain handed to the engine is ``cost_before - cost_after``.
    """

    def __init__(self):
        """Initialize problem with evaluation counter."""
        self.evaluation_count = 0

    @property
    @abstractmethod
    def problem_type(self) -> str:
        """
        Return problem type identifier.

        Returns:
            String identifier like 'TSP', 'NQUEENS', 'UFL', 'KMEDIAN'
        """
        pass

    @property
    @abstractmethod
    def size(self) -> int:
        """
        Return problem size for reference.

        For TSP: number of cities
        For n-queens: board size
        For facility location: number of facilities

        Returns:
            Integer representing problem size
        """
        pass

    @abstractmethod
    def evaluate(self, solution: Any) -> float:
        """
        Evaluate solution cost.

        IMPORTANT: This method MUST increment self.evaluation_count.

        Args:
            solution: Problem-specific solution representation

        Returns:
            Cost value (lower is better)
        """
        pass

    @abstractmethod
    def generate_random_solution(self, rng: Optional[np.random.Generator] = None) -> Any:
        """
        Generate a random feasible solution.

        Args:
            rng: Random generator (default: a fresh unseeded one)

        Returns:
            A mutable solution the problem's search components accept
        """
        pass

    @abstractmethod
    def search_components(self) -> List[SearchComponents]:
        """
        Return the multi-solution search components of this problem.

        The bundles are tried in order by first improving search and
        compared against each other by best improving search.
        """
        pass

    def is_feasible(self, solution: Any) -> bool:
        """
        Check if solution satisfies all constraints.

        Default implementation assumes unconstrained problem.
        """
        return True

    def copy_solution(self, solution: Any) -> Any:
        """Create a deep copy of a solution."""
        if isinstance(solution, (np.ndarray, list)):
            return solution.copy()
        return copy.deepcopy(solution)

    def cost(self, solution: Any) -> float:
        """
        Cost of a solution without counting it as an evaluation.

        Subclasses with a cheap uncounted cost should override this.
        """
        count = self.evaluation_count
        value = self.evaluate(solution)
        self.evaluation_count = count
        return value

    def comparator(self) -> Callable[[Any, Any], bool]:
        """Strict comparator on ``cost``: True when the first solution costs less."""
        return FunctorToComparator(self.cost, operator.lt)

    def improve(
        self,
        solution: Any,
        strategy: Optional[SearchStrategy] = None,
        on_success: Callable[[Any], Any] = always_true,
        on_fail: Callable[[Any], Any] = always_false,
        components: Optional[List[SearchComponents]] = None
    ) -> bool:
        """
        Run local search on ``solution`` in place with this problem's components.

        Returns:
            True if the solution was improved at least once
        """
        bundles = components if components is not None else self.search_components()
        return local_search(
            solution,
            *bundles,
            strategy=strategy,
            on_success=on_success,
            on_fail=on_fail,
            multi_solution=True
        )

    def reset_evaluation_count(self):
        """Reset the evaluation counter to zero."""
        self.evaluation_count = 0

    def get_evaluation_count(self) -> int:
        """Get current evaluation count."""
        return self.evaluation_count
