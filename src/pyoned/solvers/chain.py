"""
Ordered chain of domains sharing one global solution vector.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from ..core.domain import Capability, Domain1D, require_capability
from ..core.errors import ConfigurationError, StateNotReadyError
from ..core.layout import DomainLayout

logger = logging.getLogger(__name__)

DomainKey = Union[int, str]


class DomainChain:
    """
    Owns the domains in left-to-right order and the layout that places them
    in the global vector.

    Domains refer to each other by position in ``domains``; the layout is
    rebuilt whenever any domain's (nv, np) shape changes.
    """
    def __init__(self, domains: Optional[List[Domain1D]] = None):
        self._domains: List[Domain1D] = []
        self._layout: Optional[DomainLayout] = None
        self._initialized = False
        for domain in domains or []:
            self.add(domain)

    def add(self, domain: Domain1D) -> int:
        """Append a domain at the right end of the chain and return its index"""
        if any(d is domain for d in self._domains):
            raise ConfigurationError(f"Domain '{domain.id}' is already in the chain")
        index = len(self._domains)
        if domain.id is None:
            domain.id = f"{domain.domain_type.value}_{index}"
        if any(d.id == domain.id for d in self._domains):
            raise ConfigurationError(f"Duplicate domain id '{domain.id}'")
        domain.index = index
        self._domains.append(domain)
        self._initialized = False
        return index

    @property
    def domains(self) -> List[Domain1D]:
        return self._domains

    def __len__(self) -> int:
        return len(self._domains)

    def domain(self, key: DomainKey) -> Domain1D:
        """Look up a domain by index or id"""
        if isinstance(key, str):
            for d in self._domains:
                if d.id == key:
                    return d
            raise KeyError(f"No domain with id '{key}'")
        return self._domains[key]

    @property
    def layout(self) -> DomainLayout:
        shapes = tuple((d.n_components, d.n_points) for d in self._domains)
        if self._layout is None or self._layout.shapes != shapes:
            self._layout = DomainLayout(shapes)
        return self._layout

    @property
    def size(self) -> int:
        return self.layout.size

    def init(self) -> None:
        """Resolve neighbors and compositions in every domain"""
        for d in self._domains:
            d.init(self)
            logger.debug(f"Initialized '{d.id}' ({d.domain_type.value}) at index {d.index}")
        self._initialized = True

    def _check_ready(self, x: np.ndarray) -> None:
        if not self._initialized:
            raise StateNotReadyError("Domain chain used before init()")
        if len(x) != self.size:
            raise ConfigurationError(
                f"Solution vector has length {len(x)}, chain expects {self.size}")

    def initial_solution(self) -> np.ndarray:
        if not self._initialized:
            raise StateNotReadyError("Domain chain used before init()")
        x = np.zeros(self.size)
        layout = self.layout
        for d in self._domains:
            d.initial_solution(self, layout.local(x, d.index))
        return x

    def eval(self, x: np.ndarray, rdt: float = 0.0, jg: int = -1,
             r: Optional[np.ndarray] = None,
             diag: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the residual of every domain at trial vector x.

        With jg >= 0 only domains within two points of global point jg write
        their rows; the rest of r and diag is left untouched.
        """
        self._check_ready(x)
        if r is None:
            r = np.zeros(self.size)
        if diag is None:
            diag = np.zeros(self.size, dtype=int)
        for d in self._domains:
            d.eval(self, x, r, diag, rdt, jg)
        return r, diag

    def residual(self, x: np.ndarray, rdt: float = 0.0) -> np.ndarray:
        return self.eval(x, rdt)[0]

    def finalize(self, x: np.ndarray) -> None:
        self._check_ready(x)
        layout = self.layout
        for d in self._domains:
            d.finalize(layout.local(x, d.index))
        logger.debug("Finalized solution")

    def init_time_integration(self, dt: float, x: np.ndarray) -> float:
        """Store x as the previous solution in every domain and return 1/dt"""
        self._check_ready(x)
        if not dt > 0.0:
            raise ConfigurationError(f"Time step must be positive, got {dt}")
        layout = self.layout
        for d in self._domains:
            d.init_time_integration(layout.local(x, d.index))
        return 1.0 / dt

    def save(self, x: np.ndarray) -> Dict[str, Any]:
        self._check_ready(x)
        layout = self.layout
        return {"domains": [d.save(layout.local(x, d.index)) for d in self._domains]}

    def restore(self, document: Dict[str, Any]) -> np.ndarray:
        """
        Rebuild a solution vector from a saved document.

        Nodes are matched to domains by id, falling back to position.
        Values absent from the document keep the domain's initial estimate.
        """
        nodes = document.get("domains", [])
        by_id = {node.get("id"): node for node in nodes}
        matched = []
        for d in self._domains:
            node = by_id.get(d.id)
            if node is None and d.index < len(nodes):
                node = nodes[d.index]
            if node is not None and node.get("type") != d.domain_type.value:
                raise ConfigurationError(
                    f"Saved node '{node.get('id')}' of type '{node.get('type')}' "
                    f"cannot be restored into '{d.id}' ({d.domain_type.value})")
            if node is not None:
                d.adopt_shape(node)
            else:
                logger.warning(f"Restore: no saved node for '{d.id}', using defaults")
            matched.append(node)

        self.init()
        x = self.initial_solution()
        layout = self.layout
        for d, node in zip(self._domains, matched):
            if node is not None:
                d.restore(node, layout.local(x, d.index))
        return x

    def show_solution(self, x: np.ndarray) -> None:
        self._check_ready(x)
        layout = self.layout
        for d in self._domains:
            d.show_solution(layout.local(x, d.index))

    # Capability-checked configuration
    def set_temperature(self, key: DomainKey, T: float) -> None:
        d = self.domain(key)
        require_capability(d, Capability.TEMPERATURE)
        d.set_temperature(T)

    def set_mdot(self, key: DomainKey, mdot: float) -> None:
        d = self.domain(key)
        require_capability(d, Capability.MASS_FLOW)
        d.set_mdot(mdot)

    def set_mole_fractions(self, key: DomainKey, X) -> None:
        d = self.domain(key)
        require_capability(d, Capability.COMPOSITION)
        d.set_mole_fractions(X)

    def set_mass_fractions(self, key: DomainKey, Y) -> None:
        d = self.domain(key)
        require_capability(d, Capability.COMPOSITION)
        d.set_mass_fractions(Y)

    def set_spread_rate(self, key: DomainKey, V0: float) -> None:
        d = self.domain(key)
        require_capability(d, Capability.SPREAD_RATE)
        d.set_spread_rate(V0)

    def set_kinetics(self, key: DomainKey, kinetics) -> None:
        d = self.domain(key)
        require_capability(d, Capability.SURFACE_KINETICS)
        d.set_kinetics(kinetics)

    def set_coverages(self, key: DomainKey, coverages) -> None:
        d = self.domain(key)
        require_capability(d, Capability.COVERAGES)
        d.set_coverages(coverages)

    def enable_coverage_equations(self, key: DomainKey, docov: bool = True) -> None:
        d = self.domain(key)
        require_capability(d, Capability.COVERAGES)
        d.enable_coverage_equations(docov)
