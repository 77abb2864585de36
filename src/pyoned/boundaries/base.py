"""
Common state and flow attachment for zero- and one-point boundary domains.
"""
import logging
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.config import Tolerances
from ..core.domain import Domain1D, DomainType
from ..core.errors import ConfigurationError, StateNotReadyError

logger = logging.getLogger(__name__)

LEFT_INLET = 1  # Boundary left of its flow, injecting in +x
RIGHT_INLET = -1  # Boundary right of its flow, injecting in -x


class Boundary1D(Domain1D):
    """
    A one-point domain enforcing edge conditions for an adjoining flow.

    The attached flow is found at init() by looking at which neighbor is
    flow-typed; only its chain index is stored.
    """
    requires_flow = True

    def __init__(self, n_components: int = 1, name: Optional[str] = None,
                 tolerances: Optional[Tolerances] = None):
        super().__init__(n_components, 1, name)
        self.tolerances = tolerances or Tolerances()
        self._temperature = 300.0  # [K]
        self._mdot = 0.0  # [kg/m^2/s]
        self._flow_index: Optional[int] = None
        self._flow_on_left = False

    def set_temperature(self, T: float) -> None:
        if not T > 0.0:
            raise ConfigurationError(f"Boundary '{self.id}': temperature must be positive, got {T}")
        self._temperature = float(T)

    @property
    def temperature(self) -> float:
        return self._temperature

    def set_mdot(self, mdot: float) -> None:
        self._mdot = float(mdot)

    @property
    def mdot(self) -> float:
        return self._mdot

    @property
    def flow_index(self) -> Optional[int]:
        return self._flow_index

    @property
    def flow_on_left(self) -> bool:
        return self._flow_on_left

    @property
    def direction(self) -> int:
        """+1 when the flow lies to the right of this boundary, -1 otherwise"""
        if self._flow_index is None:
            raise StateNotReadyError(f"Boundary '{self.id}' has no attached flow")
        return RIGHT_INLET if self._flow_on_left else LEFT_INLET

    def init(self, chain) -> None:
        left = self.left_neighbor(chain)
        right = self.right_neighbor(chain)
        left_flow = left is not None and left.domain_type == DomainType.FLOW
        right_flow = right is not None and right.domain_type == DomainType.FLOW

        if left_flow and right_flow:
            raise ConfigurationError(
                f"Boundary '{self.id}' is between two flow domains")
        if right_flow:
            self._flow_index = self.index + 1
            self._flow_on_left = False
        elif left_flow:
            self._flow_index = self.index - 1
            self._flow_on_left = True
        else:
            self._flow_index = None
            if self.requires_flow:
                raise ConfigurationError(
                    f"Boundary '{self.id}' ({self.domain_type.value}) has no adjacent flow domain")
            logger.warning(f"Boundary '{self.id}' has no adjacent flow domain")
        self._initialized = True

    def attached_flow(self, chain):
        if self._flow_index is None:
            raise StateNotReadyError(f"Boundary '{self.id}' has no attached flow")
        return chain.domains[self._flow_index]

    def flow_edge_start(self, chain) -> int:
        """Global index of the first variable of the flow's point nearest this boundary"""
        if self._flow_index is None:
            raise StateNotReadyError(f"Boundary '{self.id}' has no attached flow")
        if self._flow_on_left:
            return chain.layout.last_point_start(self._flow_index)
        return chain.layout.first_point_start(self._flow_index)

    def flow_edge_value(self, chain, x: np.ndarray, component: str) -> float:
        flow = chain.domains[self._flow_index]
        return x[self.flow_edge_start(chain) + flow.component_index(component)]

    # Edge terms read by the attached flow. Defaults describe an impermeable wall.
    def edge_mass_flux(self, x: np.ndarray) -> float:
        """Axial mass flux (+x positive) imposed at the interface"""
        return 0.0

    def species_flux(self, x: np.ndarray, gas_state=None) -> Optional[np.ndarray]:
        """
        Species mass fluxes (+x positive) imposed at the interface, if any.
        gas_state is the flow's edge state taken from the same trial vector.
        """
        return None

    def edge_temperature(self, x: np.ndarray) -> float:
        return x[0]

    def initial_solution(self, chain, x: np.ndarray) -> None:
        x[0] = self._temperature

    def component_names(self) -> List[str]:
        return ["temperature"]

    def attributes(self) -> Dict[str, Any]:
        return {"temperature": self._temperature, "mdot": self._mdot}

    def _eval_edge_temperature(self, chain, x, r, diag, jg) -> None:
        """Zero-gradient temperature row against the flow's nearest point"""
        if self.outside_window(chain, jg):
            return
        loc = chain.layout[self.index].offset
        r[loc] = x[loc] - self.flow_edge_value(chain, x, "T")
        diag[loc] = 0

    def show_solution(self, x: np.ndarray) -> None:
        logger.info(f"-------------------  {self.domain_type.value} '{self.id}' -------------------")
        logger.info(f"    Temperature: {x[0]:10.4g} K")
