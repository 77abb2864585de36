"""
Outflow boundaries.
"""
import logging
from typing import Any, Dict, Optional, Union

import numpy as np

from ..core.config import Tolerances
from ..core.domain import DomainType
from .base import Boundary1D
from .composition import BoundaryComposition, CompositionInput

logger = logging.getLogger(__name__)


class Outlet1D(Boundary1D):
    """
    A simple outlet. Its one unknown, the temperature, follows the flow's
    nearest point (zero gradient); species leave at the flow's local
    composition.
    """
    domain_type = DomainType.OUTLET

    def __init__(self, name: Optional[str] = None, tolerances: Optional[Tolerances] = None):
        super().__init__(1, name, tolerances)

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        self._eval_edge_temperature(chain, x, r, diag, jg)

    def finalize(self, x: np.ndarray) -> None:
        self._temperature = float(x[0])


class OutletReservoir1D(Boundary1D):
    """
    An outlet facing a reservoir of fixed composition.

    Temperature is treated as for Outlet1D. Where the flow locally enters the
    domain from the reservoir, the flow holds its edge mass fractions to the
    reservoir composition.
    """
    domain_type = DomainType.OUTLET_RESERVOIR

    def __init__(self, name: Optional[str] = None, tolerances: Optional[Tolerances] = None):
        super().__init__(1, name, tolerances)
        self.composition = BoundaryComposition(
            f"Reservoir '{name}'", self.tolerances.composition_tol)

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
        self.composition.owner = f"Reservoir '{self.id}'"
        self.composition.attach(flow.species_names, flow.molecular_weights)

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        self._eval_edge_temperature(chain, x, r, diag, jg)

    def finalize(self, x: np.ndarray) -> None:
        self._temperature = float(x[0])

    def attributes(self) -> Dict[str, Any]:
        attrs = super().attributes()
        attrs["mass_fractions"] = self.composition.as_dict()
        return attrs
