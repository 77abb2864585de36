"""
Error types raised by PyOneD domains and the domain chain.
"""
from enum import Enum


class ErrorKind(Enum):
    """Category of a PyOneD error"""
    CONFIGURATION = "configuration"
    UNSUPPORTED = "unsupported"
    NOT_READY = "not_ready"


class OneDimError(Exception):
    """Base class for all PyOneD errors."""
    kind: ErrorKind = ErrorKind.CONFIGURATION


class ConfigurationError(OneDimError, ValueError):
    """Invalid setup: bad composition, mismatched sizes, bad topology."""
    kind = ErrorKind.CONFIGURATION


class UnsupportedCapabilityError(OneDimError, NotImplementedError):
    """Operation requested on a domain type that does not support it."""
    kind = ErrorKind.UNSUPPORTED

    def __init__(self, domain_type, capability):
        self.domain_type = domain_type
        self.capability = capability
        super().__init__(
            f"Domain type '{domain_type.value}' does not support '{capability.value}'")


class StateNotReadyError(OneDimError, RuntimeError):
    """A derived quantity was requested before init()/finalize() populated it."""
    kind = ErrorKind.NOT_READY
