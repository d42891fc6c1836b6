"""
TSPLIB file parser and loader.

Parses standard TSPLIB format files (.tsp) to create TSPProblem instances.
Supports EUC_2D coordinates and explicit distance matrices
(FULL_MATRIX, LOWER_DIAG_ROW, UPPER_ROW).

Usage:
    from utils.tsplib_loader import load_tsplib
    problem = load_tsplib("data/tsplib/berlin52.tsp")
"""

import re
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from problems.tsp import TSPProblem

from .log import get_logger

logger = get_logger(__name__)

_SECTION_END = {'EOF', 'EDGE_WEIGHT_SECTION', 'DISPLAY_DATA_SECTION', 'NODE_COORD_SECTION'}


def parse_tsplib_file(filepath: str) -> Dict:
    """
    Parse a TSPLIB format file.

    Returns a dictionary with:
        - name: Instance name
        - dimension: Number of cities
        - edge_weight_type: Type of distance calculation
        - edge_weight_format: Layout of an explicit matrix
        - node_coords: Array of (x, y) coordinates (if available)
        - edge_weight_section: Explicit weights as a flat list (if available)
        - optimal: Optimal length found in the comment (if any)
    """
    result = {
        'name': None,
        'dimension': 0,
        'edge_weight_type': 'EUC_2D',
        'edge_weight_format': 'FULL_MATRIX',
        'node_coords': None,
        'edge_weight_section': None,
        'comment': None,
        'optimal': None
    }

    with open(filepath, 'r') as f:
        lines = f.readlines()

    i = 0
    while i < len(lines):
        line = lines[i].strip()

        if not line:
            i += 1
            continue

        upper = line.upper()

        if upper == 'NODE_COORD_SECTION':
            i += 1
            coords = []
            while i < len(lines) and lines[i].strip().upper() not in _SECTION_END:
                parts = lines[i].split()
                if len(parts) >= 3:
                    # Format: node_id x y
                    coords.append([float(parts[1]), float(parts[2])])
                i += 1
            result['node_coords'] = np.array(coords)
            continue

        if upper == 'EDGE_WEIGHT_SECTION':
            i += 1
            weights: List[float] = []
            while i < len(lines) and lines[i].strip().upper() not in _SECTION_END:
                weights.extend(float(p) for p in lines[i].split())
                i += 1
            result['edge_weight_section'] = weights
            continue

        if upper == 'EOF':
            break

        if ':' in line:
            key, value = line.split(':', 1)
            key = key.strip().upper()
            value = value.strip()

            if key == 'NAME':
                result['name'] = value
            elif key == 'DIMENSION':
                result['dimension'] = int(value)
            elif key == 'EDGE_WEIGHT_TYPE':
                result['edge_weight_type'] = value.upper()
            elif key == 'EDGE_WEIGHT_FORMAT':
                result['edge_weight_format'] = value.upper()
            elif key == 'COMMENT':
                result['comment'] = value
                opt_match = re.search(r'[Oo]ptimal[:\s]+(\d+\.?\d*)', value)
                if opt_match:
                    result['optimal'] = float(opt_match.group(1))

        i += 1

    return result


def explicit_distance_matrix(weights: List[float], n: int, edge_weight_format: str) -> np.ndarray:
    """Build a symmetric (n, n) matrix from a flat TSPLIB weight list."""
    if edge_weight_format == 'FULL_MATRIX':
        if len(weights) < n * n:
            raise ValueError(f"FULL_MATRIX needs {n * n} weights, got {len(weights)}")
        return np.array(weights[:n * n], dtype=np.float64).reshape(n, n)

    if edge_weight_format == 'LOWER_DIAG_ROW':
        rows, cols = np.tril_indices(n)
    elif edge_weight_format == 'UPPER_ROW':
        rows, cols = np.triu_indices(n, k=1)
    elif edge_weight_format == 'UPPER_DIAG_ROW':
        rows, cols = np.triu_indices(n)
    else:
        raise ValueError(f"Unsupported EDGE_WEIGHT_FORMAT '{edge_weight_format}'")

    if len(weights) < len(rows):
        raise ValueError(
            f"{edge_weight_format} needs {len(rows)} weights, got {len(weights)}"
        )

    matrix = np.zeros((n, n))
    matrix[rows, cols] = weights[:len(rows)]
    matrix[cols, rows] = weights[:len(rows)]
    return matrix


def load_tsplib(filepath: str, normalize: bool = False) -> TSPProblem:
    """
    Load a TSPLIB file and create a TSPProblem instance.

    Args:
        filepath: Path to the .tsp file
        normalize: Rescale coordinates to [0, 1] (EUC_2D only)
    """
    data = parse_tsplib_file(filepath)
    name = data['name'] or Path(filepath).stem

    if data['edge_weight_type'] == 'EXPLICIT':
        if data['edge_weight_section'] is None:
            raise ValueError(f"Missing EDGE_WEIGHT_SECTION in {filepath}")
        matrix = explicit_distance_matrix(
            data['edge_weight_section'], data['dimension'], data['edge_weight_format']
        )
        problem = TSPProblem(distance_matrix=matrix)

    elif data['node_coords'] is not None and len(data['node_coords']) > 0:
        coords = data['node_coords']
        if normalize:
            min_coords = coords.min(axis=0)
            range_coords = coords.max(axis=0) - min_coords
            range_coords[range_coords == 0] = 1
            coords = (coords - min_coords) / range_coords
        problem = TSPProblem(cities=coords)

    else:
        raise ValueError(f"Could not parse TSPLIB file: {filepath}")

    problem.name = name
    problem.optimal = data['optimal']
    return problem


def list_available_instances(data_dir: str) -> List[str]:
    """List all available .tsp files in a directory."""
    data_path = Path(data_dir)
    if not data_path.exists():
        return []

    return sorted(str(p) for p in data_path.glob("*.tsp"))


def load_all_instances(data_dir: str, max_cities: Optional[int] = None) -> List[TSPProblem]:
    """Load all TSPLIB instances from a directory, skipping unreadable files."""
    instances = []

    for filepath in list_available_instances(data_dir):
        try:
            problem = load_tsplib(filepath)
        except (OSError, ValueError) as e:
            logger.warning("Could not load %s: %s", filepath, e)
            continue

        if max_cities is None or problem.num_cities <= max_cities:
            instances.append(problem)
            logger.info("Loaded %s (%d cities)", problem.name, problem.num_cities)

    return instances
