"""
Symmetry plane boundary.
"""
from typing import Optional

import numpy as np

from ..core.config import Tolerances
from ..core.domain import DomainType
from .base import Boundary1D


class Symmetry1D(Boundary1D):
    """
    A symmetry plane. The axial velocity is zero and every other flow
    variable has zero axial gradient; the flow applies those from the type
    tag. The plane's own temperature follows the flow's nearest point.
    """
    domain_type = DomainType.SYMMETRY

    def __init__(self, name: Optional[str] = None, tolerances: Optional[Tolerances] = None):
        super().__init__(1, name, tolerances)

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        self._eval_edge_temperature(chain, x, r, diag, jg)

    def finalize(self, x: np.ndarray) -> None:
        self._temperature = float(x[0])
