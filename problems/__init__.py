"""
Problems module.

Contains local search problem adapters:
- BaseProblem: Abstract base class for all problems
- TSPProblem: Traveling Salesman Problem with 2-opt moves
- NQueensProblem: N-Queens with queen swap moves
- FacilityLocationProblem: Uncapacitated facility location (remove/add/swap)
- KMedianProblem: K-median (swap)
"""

from .base_problem import BaseProblem
from .facility_location import (
    FacilityLocationProblem,
    FacilityLocationSolution,
    facility_location_first_improving,
    facility_location_local_search,
)
from .k_median import KMedianProblem, KMedianSolution
from .n_queens import NQueensProblem, NQueensSolution
from .tsp import Tour, TSPProblem

__all__ = [
    'BaseProblem',
    'TSPProblem',
    'Tour',
    'NQueensProblem',
    'NQueensSolution',
    'FacilityLocationProblem',
    'FacilityLocationSolution',
    'facility_location_local_search',
    'facility_location_first_improving',
    'KMedianProblem',
    'KMedianSolution',
]
