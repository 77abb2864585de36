"""
PyOneD: residual assembly and boundary coupling for multi-domain 1-D reacting flows
"""
from importlib.metadata import version

__version__ = version("pyoned")

from .core.errors import (
    ErrorKind,
    OneDimError,
    ConfigurationError,
    UnsupportedCapabilityError,
    StateNotReadyError
)
from .core.config import Tolerances, FlowConfig, JacobianConfig
from .core.domain import Capability, DomainType, Domain1D, Terminator
from .core.layout import DomainLayout, LayoutEntry
from .core.grid import FlowGrid
from .boundaries.base import Boundary1D, LEFT_INLET, RIGHT_INLET
from .boundaries.inlet import Inlet1D
from .boundaries.outlet import Outlet1D, OutletReservoir1D
from .boundaries.symmetry import Symmetry1D
from .boundaries.surface import Surface1D, ReactingSurface1D
from .flow.stagnation import StagnationFlow
from .kinetics.surface import CanteraSurfaceKinetics, GasState
from .solvers.chain import DomainChain
from .solvers.jacobian import BandedJacobian, newton_step
