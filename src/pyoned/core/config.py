"""
Configuration dataclasses for PyOneD domains and solvers.
"""
from dataclasses import dataclass

import cantera as ct


@dataclass
class Tolerances:
    """Tolerances applied when compositions and coverages are set"""
    composition_tol: float = 1e-6  # Allowed |sum(Y) - 1| for mass fractions
    coverage_tol: float = 1e-6  # Allowed |sum(theta) - 1| for coverages


@dataclass
class FlowConfig:
    """Configuration for a stagnation flow domain"""
    pressure: float = ct.one_atm  # [Pa]
    n_points: int = 20
    z_min: float = 0.0  # [m]
    z_max: float = 0.02  # [m]


@dataclass
class JacobianConfig:
    """Finite-difference perturbation settings"""
    rtol: float = 1e-7  # Relative perturbation
    atol: float = 1e-10  # Absolute perturbation
