import numpy as np
from typing import Optional

from .config import FlowConfig


class FlowGrid:
    """
    Fixed one-dimensional grid for a flow domain, with the spacing metrics
    used by the finite-difference residuals.
    """
    def __init__(self, x: Optional[np.ndarray] = None):
        # Grid points
        self.x = None
        self.nPoints = 0
        self.jj = 0  # nPoints - 1

        # Grid metrics
        self.hh = None  # Spacing x[j+1] - x[j]
        self.dlj = None  # Control volume width 0.5*(x[j+1] - x[j-1])

        if x is not None:
            self.setPoints(x)

    @classmethod
    def from_config(cls, config: FlowConfig) -> "FlowGrid":
        return cls(np.linspace(config.z_min, config.z_max, config.n_points))

    def setPoints(self, x: np.ndarray):
        """Replace the grid points and recompute metrics"""
        x = np.asarray(x, dtype=float)
        if x.ndim != 1 or len(x) < 3:
            raise ValueError("A flow grid needs at least 3 points")
        if np.any(np.diff(x) <= 0):
            raise ValueError("Grid points must be strictly increasing")
        self.x = x.copy()
        self.setSize(len(x))
        self.updateValues()

    def setSize(self, new_nPoints: int):
        """Set grid size"""
        self.nPoints = new_nPoints
        self.jj = new_nPoints - 1

    def updateValues(self):
        """Update grid metrics"""
        self.hh = np.diff(self.x)
        self.dlj = np.zeros(self.jj + 1)
        for j in range(1, self.jj):
            self.dlj[j] = 0.5 * (self.x[j+1] - self.x[j-1])

    def upwind_derivative(self, v: np.ndarray, j: int, velocity: float) -> float:
        """One-sided first derivative taken from the upstream side"""
        if velocity > 0.0:
            return (v[j] - v[j-1]) / self.hh[j-1]
        return (v[j+1] - v[j]) / self.hh[j]

    @property
    def width(self) -> float:
        return float(self.x[-1] - self.x[0])
