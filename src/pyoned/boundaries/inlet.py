"""
Inlet boundary: specified mass flux, temperature and composition.
"""
import logging
from typing import Any, Dict, List, Optional, Union

import numpy as np

from ..core.config import Tolerances
from ..core.domain import DomainType
from .base import Boundary1D
from .composition import BoundaryComposition, CompositionInput

logger = logging.getLogger(__name__)


class Inlet1D(Boundary1D):
    """
    An inlet with two unknowns, the mass flux and the temperature.

    Both rows are algebraic. The inlet does not carry species unknowns; the
    attached flow reads the resolved mass fractions, scaled by the trial mass
    flux, through species_flux(). Whether mass enters in +x or -x depends on
    which side of the flow the inlet sits.

    With a nonzero spread rate the temperature is not imposed: the inlet
    temperature follows the flow's edge point and the flow holds zero
    gradient between that point and its interior neighbor.
    """
    domain_type = DomainType.INLET

    def __init__(self, name: Optional[str] = None, tolerances: Optional[Tolerances] = None):
        super().__init__(2, name, tolerances)
        self._spread_rate = 0.0  # [1/s]
        self.composition = BoundaryComposition(f"Inlet '{name}'", self.tolerances.composition_tol)

    def component_names(self) -> List[str]:
        return ["mdot", "temperature"]

    def set_spread_rate(self, V0: float) -> None:
        self._spread_rate = float(V0)

    @property
    def spread_rate(self) -> float:
        return self._spread_rate

    def set_mole_fractions(self, X: CompositionInput) -> None:
        self.composition.set("mole", X)

    def set_mass_fractions(self, Y: CompositionInput) -> None:
        self.composition.set("mass", Y)

    def mass_fraction(self, k: Union[int, str]) -> float:
        return self.composition.mass_fraction(k)

    @property
    def mass_fractions(self) -> np.ndarray:
        self.composition.mass_fraction(0)  # raises if unresolved
        return self.composition.Y.copy()

    def init(self, chain) -> None:
        super().init(chain)
        flow = self.attached_flow(chain)
        self.composition.owner = f"Inlet '{self.id}'"
        self.composition.attach(flow.species_names, flow.molecular_weights)
        logger.debug(f"Inlet '{self.id}': direction {self.direction:+d}, flow '{flow.id}'")

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        if self.outside_window(chain, jg):
            return
        loc = chain.layout[self.index].offset

        r[loc] = x[loc] - self._mdot
        if self._spread_rate != 0.0:
            r[loc + 1] = x[loc + 1] - self.flow_edge_value(chain, x, "T")
        else:
            r[loc + 1] = x[loc + 1] - self._temperature

        # Both are algebraic constraints
        diag[loc] = 0
        diag[loc + 1] = 0

    def edge_mass_flux(self, x: np.ndarray) -> float:
        return self.direction * x[0]

    def species_flux(self, x: np.ndarray, gas_state=None) -> np.ndarray:
        return self.edge_mass_flux(x) * self.mass_fractions

    def edge_temperature(self, x: np.ndarray) -> float:
        return x[1]

    def initial_solution(self, chain, x: np.ndarray) -> None:
        x[0] = self._mdot
        x[1] = self._temperature

    def finalize(self, x: np.ndarray) -> None:
        if self.composition.species_names is not None and self.composition.spec is not None:
            self.composition.attach(self.composition.species_names,
                                    self.composition.molecular_weights)

    def attributes(self) -> Dict[str, Any]:
        attrs = super().attributes()
        attrs["spread_rate"] = self._spread_rate
        attrs["mass_fractions"] = self.composition.as_dict()
        return attrs

    def show_solution(self, x: np.ndarray) -> None:
        logger.info(f"-------------------  Inlet '{self.id}' -------------------")
        logger.info(f"    Mass Flux:   {self._mdot:10.4g} kg/m^2/s    {x[0]:10.4g}")
        logger.info(f"    Temperature: {self._temperature:10.4g} K    {x[1]:10.4g}")
        if self.composition.resolved:
            logger.info("    Mass Fractions:")
            for name, y in self.composition.as_dict().items():
                logger.info(f"        {name:>16s}  {y:10.4g}")
