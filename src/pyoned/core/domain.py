"""
Domain base class, domain type tags and the capability table.

Every member of a chain is a Domain1D tagged with a DomainType. Which
configuration operations a type supports is looked up in CAPABILITIES rather
than discovered through overridden methods.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from .base import DomainComponent
from .errors import StateNotReadyError, UnsupportedCapabilityError

logger = logging.getLogger(__name__)


class DomainType(Enum):
    """Type tag of a chain member"""
    INLET = "inlet"
    OUTLET = "outlet"
    OUTLET_RESERVOIR = "outlet_reservoir"
    SYMMETRY = "symmetry"
    SURFACE = "surface"
    REACTING_SURFACE = "reacting_surface"
    FLOW = "flow"
    TERMINATOR = "terminator"


class Capability(Enum):
    """Configuration operations a domain type may support"""
    TEMPERATURE = "temperature"
    MASS_FLOW = "mass_flow"
    COMPOSITION = "composition"
    SPREAD_RATE = "spread_rate"
    SURFACE_KINETICS = "surface_kinetics"
    COVERAGES = "coverages"


CAPABILITIES = {
    DomainType.INLET: frozenset({Capability.TEMPERATURE, Capability.MASS_FLOW,
                                 Capability.COMPOSITION, Capability.SPREAD_RATE}),
    DomainType.OUTLET: frozenset({Capability.TEMPERATURE}),
    DomainType.OUTLET_RESERVOIR: frozenset({Capability.TEMPERATURE, Capability.COMPOSITION}),
    DomainType.SYMMETRY: frozenset({Capability.TEMPERATURE}),
    DomainType.SURFACE: frozenset({Capability.TEMPERATURE}),
    DomainType.REACTING_SURFACE: frozenset({Capability.TEMPERATURE,
                                            Capability.SURFACE_KINETICS,
                                            Capability.COVERAGES}),
    DomainType.FLOW: frozenset(),
    DomainType.TERMINATOR: frozenset(),
}

BOUNDARY_TYPES = frozenset({
    DomainType.INLET, DomainType.OUTLET, DomainType.OUTLET_RESERVOIR,
    DomainType.SYMMETRY, DomainType.SURFACE, DomainType.REACTING_SURFACE,
})


def require_capability(domain: "Domain1D", capability: Capability) -> None:
    """Raise UnsupportedCapabilityError unless domain supports capability."""
    if not domain.has_capability(capability):
        raise UnsupportedCapabilityError(domain.domain_type, capability)


class Domain1D(DomainComponent):
    """
    A contiguous block of unknowns in the global solution vector.

    The domain does not know its offset or its neighbors; both are read from
    the chain passed to init() and eval().
    """
    domain_type: DomainType = DomainType.TERMINATOR

    def __init__(self, n_components: int, n_points: int, name: Optional[str] = None):
        super().__init__()
        self._nv = n_components
        self._np = n_points
        self.id = name
        self.index: Optional[int] = None  # Set by the chain
        self._x_prev: Optional[np.ndarray] = None

    @property
    def n_components(self) -> int:
        return self._nv

    @property
    def n_points(self) -> int:
        return self._np

    @property
    def size(self) -> int:
        return self._nv * self._np

    def resize(self, n_components: int, n_points: int) -> None:
        """Change the shape of the domain. The owning chain relayouts lazily."""
        self._nv = n_components
        self._np = n_points
        self._x_prev = None

    def component_names(self) -> List[str]:
        return [f"component_{k}" for k in range(self._nv)]

    def component_index(self, name: str) -> int:
        names = self.component_names()
        if name not in names:
            raise KeyError(f"Domain '{self.id}' has no component '{name}'")
        return names.index(name)

    def has_capability(self, capability: Capability) -> bool:
        return capability in CAPABILITIES[self.domain_type]

    # Neighbor access goes through the chain's domain list
    def left_neighbor(self, chain) -> Optional["Domain1D"]:
        if self.index is None or self.index == 0:
            return None
        return chain.domains[self.index - 1]

    def right_neighbor(self, chain) -> Optional["Domain1D"]:
        if self.index is None or self.index + 1 >= len(chain.domains):
            return None
        return chain.domains[self.index + 1]

    def outside_window(self, chain, jg: int) -> bool:
        """True when a perturbation at global point jg cannot affect this domain."""
        if jg < 0:
            return False
        entry = chain.layout[self.index]
        if entry.n_points == 0:
            return True
        return jg + 2 < entry.first_point or jg - 2 > entry.last_point

    def init(self, chain) -> None:
        self._initialized = True

    def initial_solution(self, chain, x: np.ndarray) -> None:
        """Fill the local slice x with a starting estimate"""
        x[:] = 0.0

    def finalize(self, x: np.ndarray) -> None:
        """Accept the local slice x of a converged or checkpointed solution"""
        pass

    def init_time_integration(self, x: np.ndarray) -> None:
        """Store the local slice of the last accepted solution"""
        self._x_prev = np.array(x, dtype=float, copy=True)

    def previous_solution(self) -> np.ndarray:
        if self._x_prev is None or len(self._x_prev) != self.size:
            raise StateNotReadyError(
                f"Domain '{self.id}': pseudo-time term requested before init_time_integration()")
        return self._x_prev

    def attributes(self) -> Dict[str, Any]:
        """Non-solution state recorded alongside saved values"""
        return {}

    def save(self, x: np.ndarray) -> Dict[str, Any]:
        """Hierarchical record of the local slice x"""
        values = np.asarray(x, dtype=float).reshape(self._np, self._nv) if self.size else \
            np.zeros((self._np, self._nv))
        return {
            "id": self.id,
            "type": self.domain_type.value,
            "points": self._np,
            "components": self.component_names(),
            "values": {name: values[:, k].tolist()
                       for k, name in enumerate(self.component_names())},
            "attributes": self.attributes(),
        }

    def adopt_shape(self, node: Dict[str, Any]) -> None:
        """Resize to match a saved record, when the variant allows it"""
        pass

    def restore(self, node: Dict[str, Any], x: np.ndarray) -> List[str]:
        """
        Overwrite the default values in local slice x with saved values.

        Values are matched by component name. Returns the names that were
        missing or had the wrong number of points; those keep their defaults.
        """
        values = node.get("values", {})
        view = x.reshape(self._np, self._nv) if self.size else None
        missing = []
        for k, name in enumerate(self.component_names()):
            saved = values.get(name)
            if saved is None or len(saved) != self._np:
                missing.append(name)
                continue
            if view is not None:
                view[:, k] = saved
        if missing and self.size:
            logger.warning(f"Restore '{self.id}': no saved values for {missing}, using defaults")
        return missing

    def show_solution(self, x: np.ndarray) -> None:
        logger.info(f"Domain '{self.id}' ({self.domain_type.value}): {self._np} points")


class Terminator(Domain1D):
    """A chain end that owns no unknowns."""
    domain_type = DomainType.TERMINATOR

    def __init__(self, name: Optional[str] = None):
        super().__init__(1, 0, name)

    def component_names(self) -> List[str]:
        return ["dummy"]

    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        pass

    def show_solution(self, x: np.ndarray) -> None:
        pass
