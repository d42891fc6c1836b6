"""
N-Queens as a local search problem.

Solution representation: NQueensSolution, one queen per row, queens[row] is
its column. Columns form a permutation so rows and columns never conflict;
the cost is the number of queen pairs sharing a diagonal. Elements are rows,
a move on row i is another row j > i whose column gets swapped with i.
"""

from collections import Counter
from typing import Any, Iterator, List, Optional, Sequence

import numpy as np

from local_search import SearchComponents

from .base_problem import BaseProblem


def _pairs(count: int) -> int:
    return count * (count - 1) // 2


class NQueensSolution:
    """
    Queen positions with diagonal occupancy counters kept in sync.

    Args:
        queens: Column of the queen in each row, a permutation of 0..n-1
    """

    def __init__(self, queens: Sequence[int]):
        self.queens: List[int] = [int(q) for q in queens]
        n = len(self.queens)
        if sorted(self.queens) != list(range(n)):
            raise ValueError(f"queens must be a permutation of 0..{n - 1}, got {self.queens}")

        self.n = n
        self.diagonal_sums = np.zeros(max(2 * n - 1, 0), dtype=np.int64)
        self.diagonal_diffs = np.zeros(max(2 * n - 1, 0), dtype=np.int64)
        for row, column in enumerate(self.queens):
            self.diagonal_sums[row + column] += 1
            self.diagonal_diffs[row - column + n - 1] += 1

    def __len__(self) -> int:
        return self.n

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.n))

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, NQueensSolution) and self.queens == other.queens

    def __repr__(self) -> str:
        return f"NQueensSolution({self.queens})"

    def conflicts(self) -> int:
        """Number of queen pairs attacking each other along a diagonal."""
        return int(
            sum(_pairs(int(c)) for c in self.diagonal_sums)
            + sum(_pairs(int(c)) for c in self.diagonal_diffs)
        )

    def swap_delta(self, i: int, j: int) -> int:
        """Change of ``conflicts()`` if the columns of rows i and j were swapped."""
        ci, cj = self.queens[i], self.queens[j]
        offset = self.n - 1

        sums = Counter()
        sums[i + ci] -= 1
        sums[j + cj] -= 1
        sums[i + cj] += 1
        sums[j + ci] += 1

        diffs = Counter()
        diffs[i - ci + offset] -= 1
        diffs[j - cj + offset] -= 1
        diffs[i - cj + offset] += 1
        diffs[j - ci + offset] += 1

        delta = 0
        for counts, changes in ((self.diagonal_sums, sums), (self.diagonal_diffs, diffs)):
            for diagonal, change in changes.items():
                if change:
                    old = int(counts[diagonal])
                    delta += _pairs(old + change) - _pairs(old)
        return delta

    def swap(self, i: int, j: int) -> None:
        ci, cj = self.queens[i], self.queens[j]
        offset = self.n - 1

        self.diagonal_sums[i + ci] -= 1
        self.diagonal_sums[j + cj] -= 1
        self.diagonal_diffs[i - ci + offset] -= 1
        self.diagonal_diffs[j - cj + offset] -= 1

        self.queens[i], self.queens[j] = cj, ci

        self.diagonal_sums[i + cj] += 1
        self.diagonal_sums[j + ci] += 1
        self.diagonal_diffs[i - cj + offset] += 1
        self.diagonal_diffs[j - ci + offset] += 1

    def copy(self) -> 'NQueensSolution':
        return NQueensSolution(self.queens)


def n_queens_get_moves(solution: NQueensSolution, row: int) -> range:
    return range(row + 1, len(solution))


def n_queens_gain(solution: NQueensSolution, row: int, other: int) -> int:
    return -solution.swap_delta(row, other)


def n_queens_commit(solution: NQueensSolution, row: int, other: int) -> bool:
    solution.swap(row, other)
    return True


class NQueensProblem(BaseProblem):
    """
    N-Queens: place n queens on an n x n board with no two attacking.

    Objective: Minimize the number of attacking pairs (0 is a solution)
    """

    def __init__(self, n: int = 8, seed: Optional[int] = None):
        super().__init__()
        if n < 1:
            raise ValueError(f"n must be positive, got {n}")
        self.n = n
        self.rng = np.random.default_rng(seed)

    @property
    def problem_type(self) -> str:
        return 'NQUEENS'

    @property
    def size(self) -> int:
        return self.n

    def evaluate(self, solution: NQueensSolution) -> float:
        self.evaluation_count += 1
        return float(solution.conflicts())

    def cost(self, solution: NQueensSolution) -> float:
        return float(solution.conflicts())

    def generate_random_solution(
        self,
        rng: Optional[np.random.Generator] = None
    ) -> NQueensSolution:
        rng = rng if rng is not None else self.rng
        return NQueensSolution(rng.permutation(self.n))

    def search_components(self) -> List[SearchComponents]:
        return [
            SearchComponents(
                get_moves=n_queens_get_moves,
                gain=n_queens_gain,
                commit=n_queens_commit
            )
        ]

    def is_feasible(self, solution: NQueensSolution) -> bool:
        return len(solution) == self.n and sorted(solution.queens) == list(range(self.n))

    def copy_solution(self, solution: NQueensSolution) -> NQueensSolution:
        return solution.copy()
