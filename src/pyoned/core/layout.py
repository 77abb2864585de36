"""
Global index table mapping each domain of a chain onto the shared solution vector.

A domain's local variable ``k`` at grid point ``j`` lives at
``offset + j*nv + k``. Offsets increase left to right and the ranges
``[offset, offset + nv*np)`` tile the global vector with no gaps.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutEntry:
    """Placement of one domain in the global vector"""
    index: int  # Position of the domain in the chain
    offset: int  # First global index owned by the domain
    n_components: int  # Variables per grid point (nv)
    n_points: int  # Grid points (np)
    first_point: int  # Global point number of the domain's first point

    @property
    def size(self) -> int:
        return self.n_components * self.n_points

    @property
    def stop(self) -> int:
        return self.offset + self.size

    @property
    def last_point(self) -> int:
        return self.first_point + self.n_points - 1

    def loc(self, j: int, k: int = 0) -> int:
        """Global index of component k at local point j"""
        return self.offset + j * self.n_components + k


class DomainLayout:
    """
    Explicit offset table for a chain of domains.

    Built from the (nv, np) shape of every domain, in chain order. The table
    is immutable; the chain builds a new one whenever its topology changes.
    """
    def __init__(self, shapes: Iterable[Tuple[int, int]]):
        self.entries: List[LayoutEntry] = []
        offset = 0
        point = 0
        for i, (nv, npts) in enumerate(shapes):
            if nv < 0 or npts < 0:
                raise ValueError(f"Invalid domain shape nv={nv}, np={npts} at index {i}")
            self.entries.append(LayoutEntry(i, offset, nv, npts, point))
            offset += nv * npts
            point += npts
        self.size = offset
        self.n_points = point

        # Per-point start index and width, used for bandwidth and point lookup
        self._point_start = np.zeros(self.n_points, dtype=int)
        self._point_nv = np.zeros(self.n_points, dtype=int)
        for e in self.entries:
            for j in range(e.n_points):
                self._point_start[e.first_point + j] = e.loc(j)
                self._point_nv[e.first_point + j] = e.n_components

        self._index_point = np.zeros(self.size, dtype=int)
        for p in range(self.n_points):
            start = self._point_start[p]
            self._index_point[start:start + self._point_nv[p]] = p

        logger.debug(f"Layout: {len(self.entries)} domains, {self.n_points} points, "
                     f"{self.size} unknowns")

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, i: int) -> LayoutEntry:
        return self.entries[i]

    def __iter__(self):
        return iter(self.entries)

    @property
    def shapes(self) -> Tuple[Tuple[int, int], ...]:
        return tuple((e.n_components, e.n_points) for e in self.entries)

    def local(self, v: np.ndarray, i: int) -> np.ndarray:
        """View of the slice of global array v owned by domain i"""
        e = self.entries[i]
        return v[e.offset:e.stop]

    def last_point_start(self, i: int) -> int:
        """
        Start of the last point of domain i.

        For the left neighbor of domain ``m`` this equals
        ``offset_m - nv_i``.
        """
        e = self.entries[i]
        if e.n_points == 0:
            raise ValueError(f"Domain {i} has no grid points")
        return e.loc(e.n_points - 1)

    def first_point_start(self, i: int) -> int:
        """
        Start of the first point of domain i.

        For the right neighbor of domain ``m`` this equals
        ``offset_m + nv_m*np_m``.
        """
        e = self.entries[i]
        if e.n_points == 0:
            raise ValueError(f"Domain {i} has no grid points")
        return e.offset

    def point_of(self, index: int) -> int:
        """Global point number owning global index"""
        return int(self._index_point[index])

    @property
    def index_points(self) -> np.ndarray:
        return self._index_point

    def bandwidth(self) -> int:
        """
        Half-bandwidth of a Jacobian whose rows couple only adjacent points.
        """
        if self.n_points == 0:
            return 0
        bw = int(self._point_nv.max()) - 1
        for p in range(self.n_points - 1):
            bw = max(bw, int(self._point_nv[p] + self._point_nv[p + 1]) - 1)
        return bw

    def check_partition(self) -> bool:
        """True if the entries tile [0, size) exactly, in order."""
        expected = 0
        for e in self.entries:
            if e.offset != expected:
                return False
            expected = e.stop
        return expected == self.size

    @classmethod
    def from_domains(cls, domains: Sequence) -> "DomainLayout":
        return cls((d.n_components, d.n_points) for d in domains)
