"""
Axisymmetric stagnation flow domain.

Steady, constant-pressure reacting gas column with unknowns per point

    u       axial velocity [m/s]
    V       radial velocity divided by radius [1/s]
    T       temperature [K]
    lambda  radial pressure curvature [Pa/m^2]
    Y_k     species mass fractions

Interior rows discretize continuity, radial momentum, energy and species
with centered diffusion and upwinded convection. Edge rows depend on the
type of the adjoining boundary domain and on the edge terms it exposes.
"""
import logging
from typing import Any, Dict, List, Optional

import numpy as np
import cantera as ct

from ..core.config import FlowConfig
from ..core.domain import BOUNDARY_TYPES, Domain1D, DomainType
from ..core.errors import ConfigurationError
from ..core.grid import FlowGrid
from ..kinetics.surface import GasState

logger = logging.getLogger(__name__)

# Component offsets within a grid point
c_offset_U = 0
c_offset_V = 1
c_offset_T = 2
c_offset_L = 3
c_offset_Y = 4

_WALLS = (DomainType.SURFACE, DomainType.REACTING_SURFACE)
_FLUX_SOURCES = (DomainType.INLET, DomainType.SURFACE, DomainType.REACTING_SURFACE)
_OUTFLOWS = (DomainType.OUTLET, DomainType.OUTLET_RESERVOIR)


class StagnationFlow(Domain1D):
    """
    Multi-point flow domain. Properties come from a ``cantera.Solution``
    evaluated point by point at the flow's pressure.
    """
    domain_type = DomainType.FLOW

    def __init__(self, gas: ct.Solution, grid: Optional[FlowGrid] = None,
                 config: Optional[FlowConfig] = None, name: Optional[str] = None):
        self.flow_config = config or FlowConfig()
        self.gas = gas
        self.grid = grid or FlowGrid.from_config(self.flow_config)
        self.pressure = self.flow_config.pressure
        self.n_species = gas.n_species
        super().__init__(c_offset_Y + self.n_species, self.grid.nPoints, name)
        self._allocate()

    def _allocate(self):
        N, K = self.grid.nPoints, self.n_species
        # Point properties
        self._rho = np.zeros(N)
        self._cp = np.zeros(N)
        self._lam = np.zeros(N)  # Thermal conductivity
        self._mu = np.zeros(N)
        self._D = np.zeros((N, K))  # Mixture-averaged diffusion coefficients
        self._wdot = np.zeros((N, K))
        self._hk = np.zeros((N, K))  # Partial molar enthalpies
        # Half-point fluxes, index j is between points j and j+1
        self._flux = np.zeros((N - 1, K))
        self._q = np.zeros(N - 1)
        self._tau = np.zeros(N - 1)

    # Species information read by boundary domains
    @property
    def species_names(self) -> List[str]:
        return list(self.gas.species_names)

    def species_index(self, name: str) -> int:
        names = self.species_names
        if name not in names:
            raise ConfigurationError(f"Flow '{self.id}': unknown species '{name}'")
        return names.index(name)

    @property
    def molecular_weights(self) -> np.ndarray:
        return np.asarray(self.gas.molecular_weights)

    def component_names(self) -> List[str]:
        return ["u", "V", "T", "lambda"] + self.species_names

    def set_grid(self, z: np.ndarray) -> None:
        """Replace the grid; the chain recomputes its layout on next access"""
        self.grid.setPoints(z)
        self.resize(self._nv, self.grid.nPoints)
        self._allocate()

    def adopt_shape(self, node: Dict[str, Any]) -> None:
        z = node.get("attributes", {}).get("grid")
        if z is not None and len(z) != self._np:
            logger.debug(f"Flow '{self.id}': regridding to {len(z)} points on restore")
            self.set_grid(np.asarray(z))

    def mass_fractions(self, x: np.ndarray, j: int) -> np.ndarray:
        """Mass fractions at local point j of the local slice x"""
        return x.reshape(self._np, self._nv)[j, c_offset_Y:]

    def init(self, chain) -> None:
        for side, neighbor in (("left", self.left_neighbor(chain)),
                               ("right", self.right_neighbor(chain))):
            if neighbor is None or neighbor.domain_type not in BOUNDARY_TYPES:
                kind = "nothing" if neighbor is None else neighbor.domain_type.value
                raise ConfigurationError(
                    f"Flow '{self.id}' needs a boundary domain on its {side}, found {kind}")
        self._initialized = True

    def initial_solution(self, chain, x: np.ndarray) -> None:
        left = self.left_neighbor(chain)
        right = self.right_neighbor(chain)
        z = self.grid.x
        frac = (z - z[0]) / self.grid.width
        X = x.reshape(self._np, self._nv)

        X[:, c_offset_T] = left.temperature + (right.temperature - left.temperature) * frac

        Y_left = self._boundary_composition(left)
        Y_right = self._boundary_composition(right)
        if Y_left is None and Y_right is None:
            Y_left = Y_right = np.array(self.gas.Y)
        elif Y_left is None:
            Y_left = Y_right
        elif Y_right is None:
            Y_right = Y_left
        X[:, c_offset_Y:] = Y_left[np.newaxis, :] + np.outer(frac, Y_right - Y_left)

        m_left = self._boundary_mass_flux(left, +1)
        m_right = self._boundary_mass_flux(right, -1)
        if m_left is None and m_right is None:
            m_left = m_right = 0.0
        elif m_left is None:
            m_left = m_right
        elif m_right is None:
            m_right = m_left
        m = m_left + (m_right - m_left) * frac
        for j in range(self._np):
            self.gas.TPY = X[j, c_offset_T], self.pressure, X[j, c_offset_Y:]
            X[j, c_offset_U] = m[j] / self.gas.density

        X[:, c_offset_V] = 0.0
        X[:, c_offset_L] = 0.0

    @staticmethod
    def _boundary_composition(boundary) -> Optional[np.ndarray]:
        composition = getattr(boundary, "composition", None)
        if composition is None or not composition.resolved:
            return None
        return composition.Y

    @staticmethod
    def _boundary_mass_flux(boundary, direction: int) -> Optional[float]:
        if boundary.domain_type == DomainType.INLET:
            return direction * boundary.mdot
        if boundary.domain_type in _OUTFLOWS:
            return None
        return 0.0

    def _update_properties(self, X: np.ndarray, j0: int, j1: int):
        """Evaluate properties at points j0..j1 inclusive"""
        gas = self.gas
        for j in range(j0, j1 + 1):
            try:
                gas.set_unnormalized_mass_fractions(X[j, c_offset_Y:])
                gas.TP = X[j, c_offset_T], self.pressure
                self._rho[j] = gas.density
                self._cp[j] = gas.cp_mass
                self._lam[j] = gas.thermal_conductivity
                self._mu[j] = gas.viscosity
                self._D[j] = gas.mix_diff_coeffs_mass
                self._wdot[j] = gas.net_production_rates
                self._hk[j] = gas.partial_molar_enthalpies
            except ct.CanteraError as e:
                raise RuntimeError(
                    f"Error updating properties at z={self.grid.x[j]}, "
                    f"T={X[j, c_offset_T]}: {str(e)}") from e

    def _update_fluxes(self, X: np.ndarray, j0: int, j1: int):
        """Evaluate diffusive fluxes at half points j0..j1 inclusive"""
        hh = self.grid.hh
        T = X[:, c_offset_T]
        V = X[:, c_offset_V]
        Y = X[:, c_offset_Y:]
        for j in range(j0, j1 + 1):
            rho_h = 0.5 * (self._rho[j] + self._rho[j+1])
            D_h = 0.5 * (self._D[j] + self._D[j+1])
            jk = -rho_h * D_h * (Y[j+1] - Y[j]) / hh[j]
            # Correction flux so that the diffusive fluxes sum to zero
            jk -= 0.5 * (Y[j] + Y[j+1]) * jk.sum()
            self._flux[j] = jk
            self._q[j] = -0.5 * (self._lam[j] + self._lam[j+1]) * (T[j+1] - T[j]) / hh[j]
            self._tau[j] = 0.5 * (self._mu[j] + self._mu[j+1]) * (V[j+1] - V[j]) / hh[j]

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        if self.outside_window(chain, jg):
            return
        entry = chain.layout[self.index]
        N, nv = self._np, self._nv
        X = x[entry.offset:entry.stop].reshape(N, nv)
        R = r[entry.offset:entry.stop].reshape(N, nv)
        D = diag[entry.offset:entry.stop].reshape(N, nv)

        if jg < 0:
            jmin, jmax = 0, N - 1
        else:
            jl = jg - entry.first_point
            jmin, jmax = max(jl - 1, 0), min(jl + 1, N - 1)
        Xp = self.previous_solution().reshape(N, nv) if rdt != 0.0 else None

        self._update_properties(X, max(jmin - 1, 0), min(jmax + 1, N - 1))
        self._update_fluxes(X, max(jmin - 1, 0), min(jmax, N - 2))

        grid = self.grid
        W = self.molecular_weights
        rho = self._rho
        u = X[:, c_offset_U]
        V = X[:, c_offset_V]
        T = X[:, c_offset_T]
        lam = X[:, c_offset_L]
        Y = X[:, c_offset_Y:]

        for j in range(jmin, jmax + 1):
            # Continuity on the interval (j, j+1); the last row is an edge condition
            if j < N - 1:
                R[j, c_offset_U] = (-(rho[j+1]*u[j+1] - rho[j]*u[j]) / grid.hh[j]
                                    - (rho[j+1]*V[j+1] + rho[j]*V[j]))
            # Lambda is constant; the first row is an edge condition
            if j > 0:
                R[j, c_offset_L] = lam[j] - lam[j-1]
            D[j, c_offset_U] = 0
            D[j, c_offset_L] = 0

            if j == 0:
                self._eval_edge(chain, x, X, R, D, 0, 1, self.left_neighbor(chain))
                continue
            if j == N - 1:
                self._eval_edge(chain, x, X, R, D, N - 1, N - 2, self.right_neighbor(chain))
                continue

            dl = grid.dlj[j]
            mj = rho[j] * u[j]

            # Radial momentum
            dVdz = grid.upwind_derivative(V, j, u[j])
            R[j, c_offset_V] = ((self._tau[j] - self._tau[j-1]) / dl - lam[j]
                                - rho[j] * V[j]**2 - mj * dVdz) / rho[j]

            # Energy
            dTdz = grid.upwind_derivative(T, j, u[j])
            R[j, c_offset_T] = -(self._cp[j] * mj * dTdz
                                 + (self._q[j] - self._q[j-1]) / dl
                                 + np.dot(self._hk[j], self._wdot[j])) / (rho[j] * self._cp[j])

            # Species
            dYdz = grid.upwind_derivative(Y, j, u[j])
            R[j, c_offset_Y:] = (W * self._wdot[j] - mj * dYdz
                                 - (self._flux[j] - self._flux[j-1]) / dl) / rho[j]

            if Xp is not None:
                R[j, c_offset_V:c_offset_L] -= rdt * (X[j, c_offset_V:c_offset_L]
                                                      - Xp[j, c_offset_V:c_offset_L])
                R[j, c_offset_Y:] -= rdt * (X[j, c_offset_Y:] - Xp[j, c_offset_Y:])
            D[j, c_offset_V] = 1
            D[j, c_offset_T] = 1
            D[j, c_offset_Y:] = 1

    def _eval_edge(self, chain, x, X, R, D, j, jn, boundary):
        """
        Edge rows at local point j, with jn its interior neighbor. The edge
        mass condition goes in the lambda row on the left and in the
        continuity row on the right.
        """
        t = boundary.domain_type
        bx = chain.layout.local(x, boundary.index)
        left = j < jn
        # Direction of +x leaving the flow through this edge
        sign = -1.0 if left else 1.0
        mass_row = c_offset_L if left else c_offset_U

        u = X[:, c_offset_U]
        mj = self._rho[j] * u[j]

        if t == DomainType.INLET:
            R[j, mass_row] = mj - boundary.edge_mass_flux(bx)
        elif t in _OUTFLOWS:
            R[j, mass_row] = X[j, c_offset_L]
        else:
            R[j, mass_row] = mj

        if t == DomainType.INLET:
            R[j, c_offset_V] = X[j, c_offset_V] - boundary.spread_rate
        elif t in _WALLS:
            R[j, c_offset_V] = X[j, c_offset_V]
        else:
            R[j, c_offset_V] = X[j, c_offset_V] - X[jn, c_offset_V]

        if t == DomainType.INLET and boundary.spread_rate != 0.0:
            # The inlet's own temperature row ties it to this point
            R[j, c_offset_T] = X[j, c_offset_T] - X[jn, c_offset_T]
        elif t == DomainType.INLET or t in _WALLS:
            R[j, c_offset_T] = X[j, c_offset_T] - boundary.edge_temperature(bx)
        else:
            R[j, c_offset_T] = X[j, c_offset_T] - X[jn, c_offset_T]

        Y = X[:, c_offset_Y:]
        if t in _FLUX_SOURCES:
            half = j if left else jn
            flow_flux = mj * Y[j] + self._flux[half]
            F = boundary.species_flux(bx, GasState(X[j, c_offset_T], self.pressure, Y[j]))
            if F is None:
                F = 0.0
            # Flux arriving from the boundary balances flux carried into the flow
            R[j, c_offset_Y:] = sign * (flow_flux - F)
        elif t == DomainType.OUTLET_RESERVOIR and sign * u[j] < 0.0:
            R[j, c_offset_Y:] = Y[j] - boundary.mass_fractions
        else:
            R[j, c_offset_Y:] = Y[j] - Y[jn]

        D[j, :] = 0

    def attributes(self) -> Dict[str, Any]:
        return {"pressure": self.pressure, "grid": self.grid.x.tolist()}

    def show_solution(self, x: np.ndarray) -> None:
        X = x.reshape(self._np, self._nv)
        logger.info(f"-------------------  Flow '{self.id}' -------------------")
        logger.info(f"    {'z (m)':>12s} {'u (m/s)':>12s} {'V (1/s)':>12s} {'T (K)':>12s}")
        for j in range(self._np):
            logger.info(f"    {self.grid.x[j]:12.4g} {X[j, c_offset_U]:12.4g} "
                        f"{X[j, c_offset_V]:12.4g} {X[j, c_offset_T]:12.4g}")
