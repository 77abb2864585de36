"""
Non-reacting and reacting surface boundaries.
"""
import logging
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.config import Tolerances
from ..core.domain import DomainType
from ..core.errors import ConfigurationError, StateNotReadyError
from ..flow.stagnation import c_offset_T, c_offset_Y
from ..kinetics.surface import GasState
from .base import Boundary1D

logger = logging.getLogger(__name__)


class Surface1D(Boundary1D):
    """
    A non-reacting surface with specified temperature. The flow reads the
    type tag and applies no-slip, impermeable, zero species flux conditions.
    """
    domain_type = DomainType.SURFACE
    requires_flow = False

    def __init__(self, name: Optional[str] = None, tolerances: Optional[Tolerances] = None):
        super().__init__(1, name, tolerances)

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        if self.outside_window(chain, jg):
            return
        loc = chain.layout[self.index].offset
        r[loc] = x[loc] - self._temperature
        diag[loc] = 0


class ReactingSurface1D(Boundary1D):
    """
    A reacting surface whose unknowns are the temperature and the coverages
    of the surface species, ``nv = 1 + n_surface_species``.

    With coverage equations enabled, each coverage row is the net production
    rate returned by the surface kinetics evaluator, a differential row that
    picks up the pseudo-time term. With them disabled, coverages are held at
    the snapshot taken by the last finalize(). Coverages are never
    renormalized here. Rates are evaluated against the attached flow's edge
    state read from the same trial vector, never from shared gas state.
    """
    domain_type = DomainType.REACTING_SURFACE
    requires_flow = False

    def __init__(self, name: Optional[str] = None, tolerances: Optional[Tolerances] = None):
        super().__init__(1, name, tolerances)
        self._kinetics = None
        self._surface_index: Optional[int] = None
        self._n_surf = 0
        self._coverages: Optional[np.ndarray] = None
        self._fixed_cov: Optional[np.ndarray] = None
        self._enabled = False
        self._gas_weights: Optional[np.ndarray] = None

    @property
    def kinetics(self):
        return self._kinetics

    @property
    def surface_phase_index(self) -> Optional[int]:
        return self._surface_index

    @property
    def n_surface_species(self) -> int:
        return self._n_surf

    def set_kinetics(self, kinetics) -> None:
        """Attach a surface kinetics evaluator and enable the coverage equations"""
        n_surf = int(kinetics.n_surface_species)
        if self._coverages is not None and len(self._coverages) != n_surf:
            raise ConfigurationError(
                f"Surface '{self.id}': evaluator has {n_surf} surface species, "
                f"stored coverages have {len(self._coverages)}")
        if self._coverages is None:
            self._coverages = self._check_coverages(kinetics.coverages(), n_surf)
        self._kinetics = kinetics
        self._surface_index = int(kinetics.surface_phase_index)
        self._n_surf = n_surf
        self._fixed_cov = self._coverages.copy()
        self._enabled = True
        self.resize(1 + n_surf, 1)
        logger.debug(f"Surface '{self.id}': {n_surf} surface species, "
                     f"phase index {self._surface_index}")

    def enable_coverage_equations(self, docov: bool = True) -> None:
        self._enabled = bool(docov)

    @property
    def coverage_equations_enabled(self) -> bool:
        return self._enabled

    def set_coverages(self, coverages) -> None:
        n_surf = self._n_surf if self._kinetics is not None else None
        cov = self._check_coverages(coverages, n_surf)
        self._coverages = cov
        self._fixed_cov = cov.copy()

    def _check_coverages(self, coverages, n_surf: Optional[int]) -> np.ndarray:
        cov = np.array(coverages, dtype=float)
        if cov.ndim != 1:
            raise ConfigurationError(f"Surface '{self.id}': coverages must be one-dimensional")
        if n_surf is not None and len(cov) != n_surf:
            raise ConfigurationError(
                f"Surface '{self.id}': expected {n_surf} coverages, got {len(cov)}")
        if np.any(cov < 0.0):
            raise ConfigurationError(f"Surface '{self.id}': coverages must be non-negative")
        if abs(cov.sum() - 1.0) > self.tolerances.coverage_tol:
            raise ConfigurationError(
                f"Surface '{self.id}': coverages sum to {cov.sum():.8g}, not 1")
        return cov

    @property
    def coverages(self) -> np.ndarray:
        if self._coverages is None:
            raise StateNotReadyError(f"Surface '{self.id}': no coverages set")
        return self._coverages.copy()

    @property
    def fixed_coverages(self) -> np.ndarray:
        if self._fixed_cov is None:
            raise StateNotReadyError(f"Surface '{self.id}': no coverage snapshot")
        return self._fixed_cov.copy()

    def component_names(self) -> List[str]:
        if self._kinetics is None:
            return ["temperature"]
        return ["temperature"] + list(self._kinetics.surface_species_names)

    def init(self, chain) -> None:
        super().init(chain)
        self._gas_weights = None
        if self._flow_index is not None:
            flow = self.attached_flow(chain)
            if (self._kinetics is not None
                    and hasattr(self._kinetics, "gas_production_rates")):
                gas_names = list(getattr(self._kinetics, "gas_species_names", []))
                if gas_names != flow.species_names:
                    raise ConfigurationError(
                        f"Surface '{self.id}': kinetics gas species do not match "
                        f"the species of flow '{flow.id}'")
            self._gas_weights = np.asarray(flow.molecular_weights)

    def gas_state(self, chain, x: np.ndarray) -> Optional[GasState]:
        """State of the attached flow's edge point in the global vector x"""
        if self._flow_index is None:
            return None
        flow = chain.domains[self._flow_index]
        start = self.flow_edge_start(chain)
        edge = x[start:start + flow.n_components]
        return GasState(edge[c_offset_T], flow.pressure, edge[c_offset_Y:])

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        if self.outside_window(chain, jg):
            return
        loc = chain.layout[self.index].offset

        r[loc] = x[loc] - self._temperature
        diag[loc] = 0
        if self._n_surf == 0:
            return

        cov = x[loc + 1:loc + 1 + self._n_surf]
        rows = slice(loc + 1, loc + 1 + self._n_surf)
        if self._enabled:
            r[rows] = self._kinetics.net_surface_production_rates(
                cov, x[loc], self.gas_state(chain, x))
            if rdt != 0.0:
                prev = self.previous_solution()[1:]
                r[rows] -= rdt * (cov - prev)
            diag[rows] = 1
        else:
            r[rows] = cov - self._fixed_cov
            diag[rows] = 0

    def species_flux(self, x: np.ndarray,
                     gas_state: Optional[GasState] = None) -> Optional[np.ndarray]:
        if (self._kinetics is None or self._gas_weights is None
                or not hasattr(self._kinetics, "gas_production_rates")):
            return None
        sdot = self._kinetics.gas_production_rates(x[1:1 + self._n_surf], x[0], gas_state)
        return self.direction * self._gas_weights * sdot

    def initial_solution(self, chain, x: np.ndarray) -> None:
        x[0] = self._temperature
        if self._n_surf:
            x[1:] = self._coverages

    def finalize(self, x: np.ndarray) -> None:
        if self._n_surf:
            self._fixed_cov = np.array(x[1:1 + self._n_surf], dtype=float)
            self._coverages = self._fixed_cov.copy()

    def restore(self, node: Dict[str, Any], x: np.ndarray) -> List[str]:
        missing = super().restore(node, x)
        if self._n_surf and any(name in missing for name in self.component_names()[1:]):
            logger.warning(f"Surface '{self.id}': incomplete saved coverages, using uniform coverage")
            x[1:] = 1.0 / self._n_surf
        return missing

    def attributes(self) -> Dict[str, Any]:
        attrs = super().attributes()
        attrs["coverage_equations"] = self._enabled
        attrs["surface_phase_index"] = self._surface_index
        return attrs

    def show_solution(self, x: np.ndarray) -> None:
        logger.info(f"-------------------  Surface '{self.id}' -------------------")
        logger.info(f"    Temperature: {x[0]:10.4g} K")
        if self._n_surf:
            logger.info("    Coverages:")
            for name, theta in zip(self.component_names()[1:], x[1:]):
                logger.info(f"    {name:>20s} {theta:10.4g}")
