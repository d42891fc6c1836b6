"""
TSP (Traveling Salesman Problem) with 2-opt local search.

Solution representation: Tour, a mutable permutation of city indices.
Iterating a tour yields its positions; position i stands for the edge
(tour[i], tour[i + 1]). A 2-opt move on element i is another position j
whose edge gets exchanged with edge i by reversing tour[i + 1 .. j].
"""

from typing import Any, Iterator, List, Optional, Sequence

import numpy as np
from scipy.sparse.csgraph import minimum_spanning_tree
from scipy.spatial.distance import pdist, squareform

from local_search import SearchComponents

from .base_problem import BaseProblem


class Tour:
    """Mutable tour over city indices; iteration yields positions (edges)."""

    def __init__(self, cities: Sequence[int]):
        self.cities: List[int] = [int(c) for c in cities]

    def __len__(self) -> int:
        return len(self.cities)

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self.cities)))

    def __getitem__(self, position: int) -> int:
        return self.cities[position % len(self.cities)]

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Tour) and self.cities == other.cities

    def __repr__(self) -> str:
        return f"Tour({self.cities})"

    def reverse(self, i: int, j: int) -> None:
        """Reverse the segment of positions i..j (inclusive)."""
        self.cities[i:j + 1] = self.cities[i:j + 1][::-1]

    def copy(self) -> 'Tour':
        return Tour(self.cities)


def two_opt_get_moves(tour: Tour, position: int) -> range:
    """
    Positions j whose edge can be exchanged with the edge at ``position``.

    Adjacent edges are skipped: j starts two positions later, and the
    closing edge (n - 1) is adjacent to edge 0.
    """
    n = len(tour)
    last = n - 1 if position == 0 else n
    return range(position + 2, last)


class TwoOptGain:
    """
    Length reduction of a 2-opt exchange.

    Args:
        distance_matrix: Symmetric (n, n) distance matrix
        decimals: Round gains to this many decimals so float noise never
            counts as an improvement (None disables rounding)
    """

    def __init__(self, distance_matrix: np.ndarray, decimals: Optional[int] = 10):
        self.distance_matrix = distance_matrix
        self.decimals = decimals

    def __call__(self, tour: Tour, i: int, j: int) -> float:
        dist = self.distance_matrix
        a, b = tour[i], tour[i + 1]
        c, d = tour[j], tour[j + 1]
        gain = float(dist[a, b] + dist[c, d] - dist[a, c] - dist[b, d])
        if self.decimals is not None:
            gain = round(gain, self.decimals)
        return gain


def two_opt_commit(tour: Tour, i: int, j: int) -> bool:
    tour.reverse(i + 1, j)
    return True


class TSPProblem(BaseProblem):
    """
    Traveling Salesman Problem implementation.

    Solution representation: Tour over city indices [0, 1, ..., n-1]
    Objective: Minimize total tour length
    """

    def __init__(
        self,
        cities: Optional[np.ndarray] = None,
        num_cities: int = 50,
        distribution: str = 'random',
        seed: Optional[int] = None,
        distance_matrix: Optional[np.ndarray] = None,
        decimals: Optional[int] = 10
    ):
        """
        Initialize TSP problem.

        Args:
            cities: Optional array of city coordinates (n, 2)
            num_cities: Number of cities (used if cities not provided)
            distribution: City distribution type ('random', 'clustered', 'grid')
            seed: Random seed for reproducibility
            distance_matrix: Explicit (n, n) distances, overrides coordinates
            decimals: Rounding of 2-opt gains
        """
        super().__init__()

        self.rng = np.random.default_rng(seed)
        self.name = 'tsp'
        self.optimal: Optional[float] = None
        self.decimals = decimals

        if distance_matrix is not None:
            self.distance_matrix = np.array(distance_matrix, dtype=np.float64)
            if self.distance_matrix.ndim != 2 or \
                    self.distance_matrix.shape[0] != self.distance_matrix.shape[1]:
                raise ValueError(
                    f"distance_matrix must be square, got shape {self.distance_matrix.shape}"
                )
            self.cities = np.array(cities, dtype=np.float64) if cities is not None else None
            self.num_cities = self.distance_matrix.shape[0]
        else:
            if cities is not None:
                self.cities = np.array(cities, dtype=np.float64)
            else:
                if num_cities < 1:
                    raise ValueError(f"num_cities must be positive, got {num_cities}")
                self.cities = self._generate_cities(num_cities, distribution)
            self.num_cities = len(self.cities)
            self.distance_matrix = self._compute_distance_matrix()

        self.distribution = distribution

    def _generate_cities(self, n: int, distribution: str) -> np.ndarray:
        """Generate city coordinates based on distribution type."""
        if distribution == 'clustered':
            n_clusters = max(3, n // 10)
            centers = self.rng.random((n_clusters, 2))
            cities = centers[np.arange(n) % n_clusters] + self.rng.normal(0, 0.05, (n, 2))
            return np.clip(cities, 0, 1)

        elif distribution == 'grid':
            side = int(np.ceil(np.sqrt(n)))
            idx = np.arange(n)
            step = side - 1 if side > 1 else 1
            cities = np.column_stack(((idx % side) / step, (idx // side) / step))
            cities += self.rng.normal(0, 0.02, (n, 2))
            return np.clip(cities, 0, 1)

        elif distribution == 'random':
            return self.rng.random((n, 2))

        raise ValueError(
            f"Unknown distribution '{distribution}', expected 'random', 'clustered' or 'grid'"
        )

    def _compute_distance_matrix(self) -> np.ndarray:
        """Compute pairwise Euclidean distance matrix."""
        if self.num_cities < 2:
            return np.zeros((self.num_cities, self.num_cities))
        return squareform(pdist(self.cities))

    def lower_bound(self) -> float:
        """Minimum spanning tree weight, a lower bound on the optimal tour."""
        return float(minimum_spanning_tree(self.distance_matrix).sum())

    def nearest_neighbor_tour(self, start: int = 0) -> Tour:
        """Generate a tour using nearest neighbor heuristic."""
        n = self.num_cities
        visited = np.zeros(n, dtype=bool)
        tour = [start]
        visited[start] = True

        for _ in range(n - 1):
            distances = np.where(visited, np.inf, self.distance_matrix[tour[-1]])
            best_next = int(np.argmin(distances))
            tour.append(best_next)
            visited[best_next] = True

        return Tour(tour)

    @property
    def problem_type(self) -> str:
        return 'TSP'

    @property
    def size(self) -> int:
        return self.num_cities

    def evaluate(self, solution: Any) -> float:
        """Evaluate tour length."""
        self.evaluation_count += 1
        return self.evaluate_tour(solution)

    def cost(self, solution: Any) -> float:
        return self.evaluate_tour(solution)

    def evaluate_tour(self, tour: Any) -> float:
        """Evaluate tour length without incrementing counter."""
        order = np.asarray(tour.cities if isinstance(tour, Tour) else tour)
        if len(order) < 2:
            return 0.0
        return float(self.distance_matrix[order, np.roll(order, -1)].sum())

    def generate_random_solution(self, rng: Optional[np.random.Generator] = None) -> Tour:
        """Generate a random tour."""
        rng = rng if rng is not None else self.rng
        return Tour(rng.permutation(self.num_cities))

    def search_components(self) -> List[SearchComponents]:
        return [
            SearchComponents(
                get_moves=two_opt_get_moves,
                gain=TwoOptGain(self.distance_matrix, self.decimals),
                commit=two_opt_commit
            )
        ]

    def is_feasible(self, solution: Any) -> bool:
        """Check if solution is a valid permutation."""
        cities = solution.cities if isinstance(solution, Tour) else list(solution)
        if len(cities) != self.num_cities:
            return False
        return set(cities) == set(range(self.num_cities))

    def copy_solution(self, solution: Tour) -> Tour:
        """Copy a tour."""
        return solution.copy()
