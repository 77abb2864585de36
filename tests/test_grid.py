"""
test_grid.py: Unit tests for the flow grid metrics
"""

import pytest
import numpy as np
from pyoned.core.config import FlowConfig
from pyoned.core.grid import FlowGrid


@pytest.fixture
def basic_grid():
    """Create a basic nonuniform grid for testing"""
    return FlowGrid(np.array([0.0, 0.1, 0.3, 0.6, 1.0]))


def test_grid_from_config():
    """Grid built from configuration is uniform"""
    grid = FlowGrid.from_config(FlowConfig(n_points=11, z_min=0.0, z_max=0.01))
    assert grid.nPoints == 11
    assert grid.jj == 10
    np.testing.assert_allclose(grid.hh, 0.001)
    assert grid.width == pytest.approx(0.01)


def test_grid_metrics(basic_grid):
    """Test computation of grid metrics"""
    grid = basic_grid
    assert len(grid.hh) == grid.jj
    np.testing.assert_allclose(grid.hh, np.diff(grid.x))
    np.testing.assert_allclose(grid.dlj[1:-1], [0.15, 0.25, 0.35])


def test_upwind_derivative(basic_grid):
    """One-sided differences follow the sign of the velocity"""
    grid = basic_grid
    v = np.array([0.0, 1.0, 3.0, 6.0, 10.0])
    assert grid.upwind_derivative(v, 2, 1.0) == pytest.approx(2.0 / 0.2)
    assert grid.upwind_derivative(v, 2, -1.0) == pytest.approx(3.0 / 0.3)
    assert grid.upwind_derivative(v, 2, 0.0) == pytest.approx(3.0 / 0.3)

    # Works row-wise on (points, components) arrays
    V = np.column_stack([v, 2 * v])
    np.testing.assert_allclose(grid.upwind_derivative(V, 2, 1.0), [10.0, 20.0])


def test_invalid_points():
    """Too few or unordered points are rejected"""
    with pytest.raises(ValueError):
        FlowGrid(np.array([0.0, 1.0]))
    with pytest.raises(ValueError):
        FlowGrid(np.array([0.0, 0.5, 0.5, 1.0]))
