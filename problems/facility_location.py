"""
Uncapacitated facility location with remove / add / swap local search.

Solution representation: FacilityLocationSolution, a set of chosen
(opened) facilities plus the Voronoi assignment of every client to its
cheapest chosen facility. Iterating the solution yields every facility,
chosen ones first, so one engine round can try all three neighborhoods:

- remove: element is a chosen facility, the only move closes it
- add: element is an unchosen facility, the only move opens it
- swap: element is a chosen facility, moves exchange it with each
  unchosen facility

Cost = sum of opening costs of chosen facilities + sum over clients of the
assignment cost to their facility. Gains are cost reductions.
"""

from typing import Any, Callable, FrozenSet, Iterable, Iterator, List, NamedTuple, Optional

import numpy as np

from local_search import SearchComponents, SearchStrategy, local_search
from utils.functors import always_false, always_true

from .base_problem import BaseProblem


class Remove(NamedTuple):
    facility: int

    def chosen_after(self, chosen: FrozenSet[int]) -> FrozenSet[int]:
        return chosen - {self.facility}

    def apply(self, solution: 'FacilityLocationSolution') -> None:
        solution.remove_facility(self.facility)


class Add(NamedTuple):
    facility: int

    def chosen_after(self, chosen: FrozenSet[int]) -> FrozenSet[int]:
        return chosen | {self.facility}

    def apply(self, solution: 'FacilityLocationSolution') -> None:
        solution.add_facility(self.facility)


class Swap(NamedTuple):
    removed: int
    added: int

    def chosen_after(self, chosen: FrozenSet[int]) -> FrozenSet[int]:
        return (chosen - {self.removed}) | {self.added}

    def apply(self, solution: 'FacilityLocationSolution') -> None:
        solution.swap_facilities(self.removed, self.added)


class FacilityLocationSolution:
    """
    Chosen facilities with a Voronoi assignment of clients.

    Args:
        facility_costs: Opening cost per facility, shape (F,)
        assignment_costs: Cost of serving client c from facility f, shape (C, F)
        chosen: Initially opened facilities (non-empty)
    """

    def __init__(
        self,
        facility_costs: np.ndarray,
        assignment_costs: np.ndarray,
        chosen: Iterable[int]
    ):
        self.facility_costs = np.asarray(facility_costs, dtype=np.float64)
        self.assignment_costs = np.asarray(assignment_costs, dtype=np.float64)
        num_facilities = len(self.facility_costs)

        if self.assignment_costs.ndim != 2 or self.assignment_costs.shape[1] != num_facilities:
            raise ValueError(
                f"assignment_costs must have shape (clients, {num_facilities}), "
                f"got {self.assignment_costs.shape}"
            )

        chosen = frozenset(int(f) for f in chosen)
        if not chosen:
            raise ValueError("At least one facility must be chosen")
        unknown = [f for f in chosen if not 0 <= f < num_facilities]
        if unknown:
            raise ValueError(f"Unknown facilities {sorted(unknown)}")

        self.num_facilities = num_facilities
        self.chosen: FrozenSet[int] = chosen
        self._update_assignment()

    @property
    def unchosen(self) -> FrozenSet[int]:
        return frozenset(range(self.num_facilities)) - self.chosen

    @property
    def num_clients(self) -> int:
        return self.assignment_costs.shape[0]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.chosen) + sorted(self.unchosen))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(chosen={sorted(self.chosen)}, cost={self.cost:.4f})"

    def is_chosen(self, facility: int) -> bool:
        return facility in self.chosen

    def cost_with(self, chosen: FrozenSet[int]) -> float:
        """Total cost if exactly ``chosen`` facilities were open."""
        if not chosen:
            return float('inf')
        columns = sorted(chosen)
        opening = self.facility_costs[columns].sum()
        if self.num_clients == 0:
            return float(opening)
        return float(opening + self.assignment_costs[:, columns].min(axis=1).sum())

    def _update_assignment(self) -> None:
        columns = np.array(sorted(self.chosen))
        if self.num_clients:
            nearest = self.assignment_costs[:, columns].argmin(axis=1)
            self.assignment = columns[nearest]
        else:
            self.assignment = np.zeros(0, dtype=np.int64)
        self.cost = self.cost_with(self.chosen)

    def add_facility(self, facility: int) -> None:
        self.chosen = self.chosen | {facility}
        self._update_assignment()

    def remove_facility(self, facility: int) -> None:
        if self.chosen == {facility}:
            raise ValueError("Cannot close the last chosen facility")
        self.chosen = self.chosen - {facility}
        self._update_assignment()

    def swap_facilities(self, removed: int, added: int) -> None:
        self.chosen = (self.chosen - {removed}) | {added}
        self._update_assignment()

    def clients_of(self, facility: int) -> List[int]:
        """Clients currently assigned to ``facility`` (its Voronoi region)."""
        return [int(c) for c in np.flatnonzero(self.assignment == facility)]

    def copy(self) -> 'FacilityLocationSolution':
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.assignment = self.assignment.copy()
        return clone


def get_moves_remove(solution: FacilityLocationSolution, facility: int) -> List[Remove]:
    if solution.is_chosen(facility) and len(solution.chosen) > 1:
        return [Remove(facility)]
    return []


def get_moves_add(solution: FacilityLocationSolution, facility: int) -> List[Add]:
    if solution.is_chosen(facility):
        return []
    return [Add(facility)]


def get_moves_swap(solution: FacilityLocationSolution, facility: int) -> Iterator[Swap]:
    if not solution.is_chosen(facility):
        return iter(())
    return (Swap(facility, added) for added in sorted(solution.unchosen))


class FacilityLocationGain:
    """
    Cost reduction of a facility move.

    Args:
        decimals: Round gains to this many decimals (None disables rounding)
    """

    def __init__(self, decimals: Optional[int] = 10):
        self.decimals = decimals

    def __call__(self, solution: FacilityLocationSolution, facility: int, move: Any) -> float:
        gain = solution.cost - solution.cost_with(move.chosen_after(solution.chosen))
        if self.decimals is not None:
            gain = round(gain, self.decimals)
        return gain


def facility_location_commit(solution: FacilityLocationSolution, facility: int, move: Any) -> bool:
    before = solution.chosen
    move.apply(solution)
    return solution.chosen != before


def default_remove_components(decimals: Optional[int] = 10) -> SearchComponents:
    return SearchComponents(get_moves_remove, FacilityLocationGain(decimals), facility_location_commit)


def default_add_components(decimals: Optional[int] = 10) -> SearchComponents:
    return SearchComponents(get_moves_add, FacilityLocationGain(decimals), facility_location_commit)


def default_swap_components(decimals: Optional[int] = 10) -> SearchComponents:
    return SearchComponents(get_moves_swap, FacilityLocationGain(decimals), facility_location_commit)


def facility_location_local_search(
    solution: FacilityLocationSolution,
    *components: SearchComponents,
    strategy: Optional[SearchStrategy] = None,
    on_success: Callable[[Any], Any] = always_true,
    on_fail: Callable[[Any], Any] = always_false
) -> bool:
    """
    Local search on a facility location solution.

    Without explicit components the remove, add and swap neighborhoods are
    used, in that order.
    """
    if not components:
        components = (
            default_remove_components(),
            default_add_components(),
            default_swap_components(),
        )
    return local_search(
        solution,
        *components,
        strategy=strategy,
        on_success=on_success,
        on_fail=on_fail,
        multi_solution=True
    )


def facility_location_first_improving(
    solution: FacilityLocationSolution,
    *components: SearchComponents
) -> bool:
    return facility_location_local_search(solution, *components)


class FacilityLocationProblem(BaseProblem):
    """
    Uncapacitated facility location.

    Objective: Minimize opening costs plus client assignment costs
    """

    def __init__(
        self,
        facility_costs: np.ndarray,
        assignment_costs: np.ndarray,
        seed: Optional[int] = None,
        decimals: Optional[int] = 10,
        name: str = 'ufl'
    ):
        super().__init__()
        self.facility_costs = np.asarray(facility_costs, dtype=np.float64)
        self.assignment_costs = np.asarray(assignment_costs, dtype=np.float64)
        if self.facility_costs.ndim != 1 or len(self.facility_costs) == 0:
            raise ValueError("facility_costs must be a non-empty 1-d array")
        if self.assignment_costs.ndim != 2 or \
                self.assignment_costs.shape[1] != len(self.facility_costs):
            raise ValueError(
                f"assignment_costs must have shape (clients, {len(self.facility_costs)}), "
                f"got {self.assignment_costs.shape}"
            )
        self.rng = np.random.default_rng(seed)
        self.decimals = decimals
        self.name = name

    @property
    def problem_type(self) -> str:
        return 'UFL'

    @property
    def size(self) -> int:
        return len(self.facility_costs)

    @property
    def num_clients(self) -> int:
        return self.assignment_costs.shape[0]

    def make_solution(self, chosen: Iterable[int]) -> FacilityLocationSolution:
        return FacilityLocationSolution(self.facility_costs, self.assignment_costs, chosen)

    def evaluate(self, solution: FacilityLocationSolution) -> float:
        self.evaluation_count += 1
        return solution.cost

    def cost(self, solution: FacilityLocationSolution) -> float:
        return solution.cost

    def generate_random_solution(
        self,
        rng: Optional[np.random.Generator] = None
    ) -> FacilityLocationSolution:
        """Open a random non-empty subset of facilities."""
        rng = rng if rng is not None else self.rng
        mask = rng.random(self.size) < 0.5
        if not mask.any():
            mask[rng.integers(self.size)] = True
        return self.make_solution(np.flatnonzero(mask))

    def search_components(self) -> List[SearchComponents]:
        return [
            default_remove_components(self.decimals),
            default_add_components(self.decimals),
            default_swap_components(self.decimals),
        ]

    def copy_solution(self, solution: FacilityLocationSolution) -> FacilityLocationSolution:
        return solution.copy()
