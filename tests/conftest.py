"""Shared fixtures for the local search tests."""

import os
import sys
from dataclasses import dataclass

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@dataclass
class Point:
    """Mutable holder for a single integer solution."""
    x: int


def quadratic(point: Point) -> int:
    """-x^2 + 12x - 27, maximized at x = 6."""
    return -point.x * point.x + 12 * point.x - 27


@pytest.fixture
def rng():
    return np.random.default_rng(42)
