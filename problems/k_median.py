"""
K-median as facility location with exactly k open facilities.

Opening costs are zero and only the swap neighborhood is searched, so
the number of chosen facilities never changes.
"""

from typing import Iterable, List, Optional

import numpy as np

from local_search import SearchComponents

from .facility_location import (
    FacilityLocationProblem,
    FacilityLocationSolution,
    default_swap_components,
)


class KMedianSolution(FacilityLocationSolution):
    """
    Facility location solution with zero opening costs and a fixed k.

    Args:
        assignment_costs: Cost of serving client c from facility f, shape (C, F)
        chosen: Initial medians; their count is k
    """

    def __init__(self, assignment_costs: np.ndarray, chosen: Iterable[int]):
        assignment_costs = np.asarray(assignment_costs, dtype=np.float64)
        super().__init__(np.zeros(assignment_costs.shape[1]), assignment_costs, chosen)
        self.k = len(self.chosen)

    def add_facility(self, facility: int) -> None:
        raise ValueError("K-median solutions only support swapping facilities")

    def remove_facility(self, facility: int) -> None:
        raise ValueError("K-median solutions only support swapping facilities")


def default_k_median_components(decimals: Optional[int] = 10) -> SearchComponents:
    return default_swap_components(decimals)


class KMedianProblem(FacilityLocationProblem):
    """
    K-median: choose k facilities minimizing the total client distance.

    Args:
        assignment_costs: Cost (distance) from client c to facility f, shape (C, F)
        k: Number of medians, 1 <= k <= F
    """

    def __init__(
        self,
        assignment_costs: np.ndarray,
        k: int,
        seed: Optional[int] = None,
        decimals: Optional[int] = 10,
        name: str = 'kmedian'
    ):
        assignment_costs = np.asarray(assignment_costs, dtype=np.float64)
        super().__init__(
            np.zeros(assignment_costs.shape[1] if assignment_costs.ndim == 2 else 0),
            assignment_costs,
            seed=seed,
            decimals=decimals,
            name=name
        )
        if not 1 <= k <= self.size:
            raise ValueError(f"k must be in [1, {self.size}], got {k}")
        self.k = k

    @property
    def problem_type(self) -> str:
        return 'KMEDIAN'

    def make_solution(self, chosen: Iterable[int]) -> KMedianSolution:
        solution = KMedianSolution(self.assignment_costs, chosen)
        if solution.k != self.k:
            raise ValueError(f"Expected {self.k} medians, got {solution.k}")
        return solution

    def generate_random_solution(
        self,
        rng: Optional[np.random.Generator] = None
    ) -> KMedianSolution:
        rng = rng if rng is not None else self.rng
        return self.make_solution(rng.choice(self.size, size=self.k, replace=False))

    def search_components(self) -> List[SearchComponents]:
        return [default_k_median_components(self.decimals)]
