"""
PyTest configuration and fixtures
"""
import pytest
import numpy as np
import cantera as ct

from pyoned.core.config import FlowConfig


class FakeSurfaceKinetics:
    """Surface kinetics evaluator with prescribed rates"""
    def __init__(self, coverages, rates=None, names=None, phase_index=1):
        self._coverages = np.array(coverages, dtype=float)
        self.n_surface_species = len(self._coverages)
        self.surface_phase_index = phase_index
        self.surface_species_names = names or [f"S{k}(s)" for k in range(self.n_surface_species)]
        # Callable (coverages, T) -> rates, or None for zero rates
        self.rates = rates
        self.calls = 0
        self.gas_state = None

    def coverages(self):
        return self._coverages.copy()

    def net_surface_production_rates(self, coverages, T, gas_state=None):
        self.calls += 1
        self.gas_state = gas_state
        if self.rates is None:
            return np.zeros(self.n_surface_species)
        return np.asarray(self.rates(np.asarray(coverages), T), dtype=float)


@pytest.fixture
def fake_kinetics():
    """Return a factory for fake surface kinetics evaluators."""
    return FakeSurfaceKinetics


@pytest.fixture
def simple_grid():
    """Return a simple uniform grid for testing."""
    return np.linspace(0, 0.02, 20)


@pytest.fixture
def gri30():
    """Return a GRI-Mech 3.0 Cantera Solution for testing."""
    return ct.Solution('gri30.yaml')


@pytest.fixture
def h2o2():
    """Return a small hydrogen/oxygen Cantera Solution for testing."""
    return ct.Solution('h2o2.yaml')


@pytest.fixture
def small_flow_config():
    """Flow configuration with few points, for Jacobian tests."""
    return FlowConfig(n_points=5, z_min=0.0, z_max=0.01)
