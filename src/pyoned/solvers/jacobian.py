"""
Finite-difference banded Jacobian of a domain chain's residual.
"""
import logging
from typing import Optional

import numpy as np
from scipy.linalg import solve_banded

from ..core.config import JacobianConfig
from .chain import DomainChain

logger = logging.getLogger(__name__)


class BandedJacobian:
    """
    Jacobian stored in the (l, u) diagonal-ordered form used by
    ``scipy.linalg.solve_banded``, with ``l = u = bandwidth``.

    Each column is built from one restricted evaluation at the perturbed
    column's grid point. Only rows at that point and its two neighbors are
    kept, since no residual row reaches further.
    """
    def __init__(self, chain: DomainChain, config: Optional[JacobianConfig] = None):
        self.chain = chain
        self.config = config or JacobianConfig()
        self.bandwidth = 0
        self.data: Optional[np.ndarray] = None
        self.transient_mask: Optional[np.ndarray] = None
        self.n_evaluations = 0

    def update(self, x: np.ndarray, rdt: float = 0.0) -> None:
        """Rebuild the Jacobian at x"""
        layout = self.chain.layout
        n = layout.size
        bw = layout.bandwidth()
        self.bandwidth = bw
        self.data = np.zeros((2*bw + 1, n))

        r0, diag = self.chain.eval(x, rdt)
        self.transient_mask = diag.copy()
        self.n_evaluations += 1

        points = layout.index_points
        xp = np.array(x, dtype=float, copy=True)
        for col in range(n):
            dx = self.config.rtol * abs(xp[col]) + self.config.atol
            saved = xp[col]
            xp[col] = saved + dx
            p = points[col]
            r1, _ = self.chain.eval(xp, rdt, jg=p, r=r0.copy())
            self.n_evaluations += 1
            xp[col] = saved

            rows = np.nonzero(np.abs(points - p) <= 1)[0]
            self.data[bw + rows - col, col] = (r1[rows] - r0[rows]) / dx

        logger.debug(f"Jacobian updated: {n} columns, bandwidth {bw}")

    def _require(self):
        if self.data is None:
            raise RuntimeError("Jacobian must be updated before use")

    def solve(self, b: np.ndarray) -> np.ndarray:
        """Solve J dx = b"""
        self._require()
        return solve_banded((self.bandwidth, self.bandwidth), self.data, b)

    def to_dense(self) -> np.ndarray:
        self._require()
        bw = self.bandwidth
        n = self.data.shape[1]
        J = np.zeros((n, n))
        for i in range(n):
            for j in range(max(0, i - bw), min(n, i + bw + 1)):
                J[i, j] = self.data[bw + i - j, j]
        return J


def newton_step(chain: DomainChain, jacobian: BandedJacobian, x: np.ndarray,
                rdt: float = 0.0) -> np.ndarray:
    """
    One undamped Newton iteration on the residual at x.

    With rdt > 0 this is an implicit Euler step of the pseudo-transient
    problem; the previous solution must have been stored with
    ``chain.init_time_integration``.
    """
    jacobian.update(x, rdt)
    r = chain.residual(x, rdt)
    return x - jacobian.solve(r)
