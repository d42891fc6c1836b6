"""
Tests for the TSPLIB and OR-Library instance readers.

Run with: pytest tests/test_loaders.py -v
"""

import numpy as np
import pytest

from problems import FacilityLocationProblem, KMedianProblem, Tour
from utils.orlib_loader import load_orlib_facility_location, load_orlib_k_median
from utils.tsplib_loader import (
    explicit_distance_matrix,
    list_available_instances,
    load_all_instances,
    load_tsplib,
    parse_tsplib_file,
)

SQUARE_TSP = """NAME : square4
COMMENT : unit square (Optimal: 4)
TYPE : TSP
DIMENSION : 4
EDGE_WEIGHT_TYPE : EUC_2D
NODE_COORD_SECTION
1 0 0
2 10 0
3 10 10
4 0 10
EOF
"""

LOWER_DIAG_TSP = """NAME: tri3
TYPE: TSP
DIMENSION: 3
EDGE_WEIGHT_TYPE: EXPLICIT
EDGE_WEIGHT_FORMAT: LOWER_DIAG_ROW
EDGE_WEIGHT_SECTION
0
1 0
2 3 0
EOF
"""

UFL_INSTANCE = """2 3
capacity 1.0
capacity 2.0
5
0.0 3.0
5
3.0 0.0
5
1.0 1.0
"""

PMED_INSTANCE = """4 4 2
1 2 1
2 3 1
3 4 1
2 1 5
"""


@pytest.fixture
def tsplib_dir(tmp_path):
    (tmp_path / 'square4.tsp').write_text(SQUARE_TSP)
    (tmp_path / 'tri3.tsp').write_text(LOWER_DIAG_TSP)
    (tmp_path / 'broken.tsp').write_text("NAME: broken\nDIMENSION: 3\nEOF\n")
    return tmp_path


class TestTSPLIB:
    """Tests for TSPLIB parsing."""

    def test_parse_header(self, tsplib_dir):
        data = parse_tsplib_file(str(tsplib_dir / 'square4.tsp'))

        assert data['name'] == 'square4'
        assert data['dimension'] == 4
        assert data['edge_weight_type'] == 'EUC_2D'
        assert data['optimal'] == 4.0
        assert data['node_coords'].shape == (4, 2)

    def test_load_coordinates(self, tsplib_dir):
        problem = load_tsplib(str(tsplib_dir / 'square4.tsp'))

        assert problem.name == 'square4'
        assert problem.size == 4
        assert problem.evaluate(Tour([0, 1, 2, 3])) == pytest.approx(40.0)

    def test_normalize(self, tsplib_dir):
        problem = load_tsplib(str(tsplib_dir / 'square4.tsp'), normalize=True)
        assert problem.cities.max() == 1.0
        assert problem.evaluate(Tour([0, 1, 2, 3])) == pytest.approx(4.0)

    def test_load_explicit(self, tsplib_dir):
        problem = load_tsplib(str(tsplib_dir / 'tri3.tsp'))

        expected = np.array([[0, 1, 2], [1, 0, 3], [2, 3, 0]], dtype=float)
        assert np.array_equal(problem.distance_matrix, expected)

    @pytest.mark.parametrize('fmt,weights', [
        ('FULL_MATRIX', [0, 1, 2, 1, 0, 3, 2, 3, 0]),
        ('LOWER_DIAG_ROW', [0, 1, 0, 2, 3, 0]),
        ('UPPER_ROW', [1, 2, 3]),
        ('UPPER_DIAG_ROW', [0, 1, 2, 0, 3, 0]),
    ])
    def test_explicit_formats(self, fmt, weights):
        matrix = explicit_distance_matrix(weights, 3, fmt)
        assert np.array_equal(matrix, np.array([[0, 1, 2], [1, 0, 3], [2, 3, 0]]))

    def test_explicit_errors(self):
        with pytest.raises(ValueError):
            explicit_distance_matrix([1, 2], 3, 'UPPER_ROW')
        with pytest.raises(ValueError):
            explicit_distance_matrix([1, 2, 3], 3, 'UPPER_COL')

    def test_unparseable_file(self, tsplib_dir):
        with pytest.raises(ValueError):
            load_tsplib(str(tsplib_dir / 'broken.tsp'))

    def test_load_all_skips_broken(self, tsplib_dir):
        assert len(list_available_instances(str(tsplib_dir))) == 3

        instances = load_all_instances(str(tsplib_dir))
        assert sorted(p.name for p in instances) == ['square4', 'tri3']

        small = load_all_instances(str(tsplib_dir), max_cities=3)
        assert [p.name for p in small] == ['tri3']

    def test_missing_directory(self, tmp_path):
        assert list_available_instances(str(tmp_path / 'missing')) == []


class TestORLibrary:
    """Tests for OR-Library facility location and p-median readers."""

    def test_facility_location(self, tmp_path):
        path = tmp_path / 'cap_small.txt'
        path.write_text(UFL_INSTANCE)

        problem = load_orlib_facility_location(str(path))

        assert isinstance(problem, FacilityLocationProblem)
        assert problem.name == 'cap_small'
        assert list(problem.facility_costs) == [1.0, 2.0]
        assert problem.assignment_costs.shape == (3, 2)
        assert list(problem.assignment_costs[2]) == [1.0, 1.0]

    def test_truncated_facility_location(self, tmp_path):
        path = tmp_path / 'truncated.txt'
        path.write_text("2 3\ncapacity 1.0\ncapacity 2.0\n5\n0.0\n")

        with pytest.raises(ValueError):
            load_orlib_facility_location(str(path))

    def test_p_median_shortest_paths(self, tmp_path):
        path = tmp_path / 'pmed_small.txt'
        path.write_text(PMED_INSTANCE)

        problem = load_orlib_k_median(str(path))

        assert isinstance(problem, KMedianProblem)
        assert problem.k == 2
        # the repeated edge 1-2 overrides the first cost
        assert problem.assignment_costs[0, 1] == 5.0
        assert problem.assignment_costs[0, 3] == 7.0
        assert np.array_equal(problem.assignment_costs, problem.assignment_costs.T)

    def test_p_median_edge_out_of_range(self, tmp_path):
        path = tmp_path / 'pmed_bad.txt'
        path.write_text("3 1 1\n1 4 2\n")

        with pytest.raises(ValueError):
            load_orlib_k_median(str(path))
