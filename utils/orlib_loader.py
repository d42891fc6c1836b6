"""
OR-Library instance readers.

- Uncapacitated facility location (capXX / capa-c files):
    F C
    F lines: <capacity> <opening cost>
    for every client: <demand> followed by F allocation costs
  The capacity field may be a number or the literal word 'capacity'; it is
  ignored. Allocation costs are used as given.

- p-median (pmedXX files):
    V E p
    E lines: <u> <v> <cost>   (1-based vertices, undirected)
  When an edge is listed twice the last cost wins. Every vertex is both a
  client and a candidate median; distances are shortest path lengths.
"""

from pathlib import Path
from typing import Iterator, List

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import shortest_path

from problems.facility_location import FacilityLocationProblem
from problems.k_median import KMedianProblem

from .log import get_logger

logger = get_logger(__name__)


def _tokens(filepath: str) -> Iterator[str]:
    with open(filepath, 'r') as f:
        for line in f:
            yield from line.split()


def _next_number(tokens: Iterator[str], filepath: str, what: str) -> float:
    try:
        token = next(tokens)
    except StopIteration:
        raise ValueError(f"Unexpected end of file in {filepath} while reading {what}") from None
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"Expected a number for {what} in {filepath}, got '{token}'") from None


def load_orlib_facility_location(filepath: str) -> FacilityLocationProblem:
    """Read an OR-Library uncapacitated facility location instance."""
    tokens = _tokens(filepath)
    num_facilities = int(_next_number(tokens, filepath, 'facility count'))
    num_clients = int(_next_number(tokens, filepath, 'client count'))
    if num_facilities <= 0:
        raise ValueError(f"Facility count must be positive in {filepath}")

    facility_costs = np.zeros(num_facilities)
    for f in range(num_facilities):
        next(tokens, None)  # capacity
        facility_costs[f] = _next_number(tokens, filepath, f'opening cost of facility {f}')

    assignment_costs = np.zeros((num_clients, num_facilities))
    for c in range(num_clients):
        _next_number(tokens, filepath, f'demand of client {c}')
        for f in range(num_facilities):
            assignment_costs[c, f] = _next_number(
                tokens, filepath, f'allocation cost of client {c} to facility {f}'
            )

    logger.info(
        "Loaded %s (%d facilities, %d clients)", filepath, num_facilities, num_clients
    )
    return FacilityLocationProblem(facility_costs, assignment_costs, name=Path(filepath).stem)


def load_orlib_k_median(filepath: str) -> KMedianProblem:
    """Read an OR-Library p-median instance into a k-median problem."""
    tokens = _tokens(filepath)
    num_vertices = int(_next_number(tokens, filepath, 'vertex count'))
    num_edges = int(_next_number(tokens, filepath, 'edge count'))
    k = int(_next_number(tokens, filepath, 'median count'))

    weights = {}
    for e in range(num_edges):
        u = int(_next_number(tokens, filepath, f'endpoint of edge {e}'))
        v = int(_next_number(tokens, filepath, f'endpoint of edge {e}'))
        cost = _next_number(tokens, filepath, f'cost of edge {e}')
        if not (1 <= u <= num_vertices and 1 <= v <= num_vertices):
            raise ValueError(f"Edge {e} ({u}, {v}) out of range in {filepath}")
        weights[(min(u, v) - 1, max(u, v) - 1)] = cost

    rows: List[int] = [u for u, _ in weights]
    cols: List[int] = [v for _, v in weights]
    graph = csr_matrix(
        (list(weights.values()), (rows, cols)), shape=(num_vertices, num_vertices)
    )
    distances = shortest_path(graph, directed=False)

    logger.info("Loaded %s (%d vertices, k=%d)", filepath, num_vertices, k)
    return KMedianProblem(distances, k, name=Path(filepath).stem)
