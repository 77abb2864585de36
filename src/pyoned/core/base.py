"""
Base classes and interfaces for PyOneD components.
"""
from abc import ABC, abstractmethod


class DomainComponent(ABC):
    """
    Base class for all PyOneD chain members providing common functionality
    and enforcing interface requirements.
    """
    def __init__(self):
        # Set by init(); derived classes decide what initialization means
        self._initialized = False

    @abstractmethod
    def init(self, chain) -> None:
        """Resolve neighbors and derived state once the chain is assembled."""
        self._initialized = True

    @abstractmethod
    def eval(self, chain, x, r, diag, rdt: float = 0.0, jg: int = -1) -> None:
        """Write this component's residual rows for trial vector x."""
        pass

    def is_initialized(self) -> bool:
        """Check if component has been initialized."""
        return self._initialized
