"""
Tests for domain base components, type tags and capabilities
"""
import pytest
import numpy as np

from pyoned.core.base import DomainComponent
from pyoned.core.domain import (
    CAPABILITIES, Capability, Domain1D, DomainType, Terminator, require_capability
)
from pyoned.core.errors import (
    ConfigurationError, ErrorKind, StateNotReadyError, UnsupportedCapabilityError
)
from pyoned.boundaries.inlet import Inlet1D
from pyoned.boundaries.outlet import Outlet1D


def test_domain_component_requires_implementation():
    """Test that DomainComponent cannot be instantiated without implementation."""
    with pytest.raises(TypeError):
        DomainComponent()


def test_domain_component_lifecycle():
    """Test component initialization state."""
    class TestComponent(DomainComponent):
        def init(self, chain):
            super().init(chain)

        def eval(self, chain, x, r, diag, rdt=0.0, jg=-1):
            pass

    component = TestComponent()
    assert not component.is_initialized()
    component.init(None)
    assert component.is_initialized()


def test_every_type_has_capabilities():
    """The capability table covers every domain type."""
    assert set(CAPABILITIES) == set(DomainType)
    assert Capability.MASS_FLOW in CAPABILITIES[DomainType.INLET]
    assert Capability.MASS_FLOW not in CAPABILITIES[DomainType.OUTLET]
    assert not CAPABILITIES[DomainType.TERMINATOR]


def test_require_capability():
    """Unsupported operations raise a typed error."""
    outlet = Outlet1D()
    require_capability(outlet, Capability.TEMPERATURE)
    with pytest.raises(UnsupportedCapabilityError) as err:
        require_capability(outlet, Capability.MASS_FLOW)
    assert err.value.kind == ErrorKind.UNSUPPORTED
    assert "outlet" in str(err.value)
    assert isinstance(err.value, NotImplementedError)


def test_error_kinds():
    """Error classes carry their kind and standard base classes."""
    assert ConfigurationError("x").kind == ErrorKind.CONFIGURATION
    assert isinstance(ConfigurationError("x"), ValueError)
    assert StateNotReadyError("x").kind == ErrorKind.NOT_READY
    assert isinstance(StateNotReadyError("x"), RuntimeError)


def test_terminator():
    """A terminator owns no unknowns."""
    term = Terminator()
    assert term.n_components == 1
    assert term.n_points == 0
    assert term.size == 0
    assert term.component_names() == ["dummy"]


def test_previous_solution_requires_time_integration():
    """The pseudo-time state must be stored before it is read."""
    inlet = Inlet1D()
    with pytest.raises(StateNotReadyError):
        inlet.previous_solution()
    inlet.init_time_integration(np.array([1.0, 300.0]))
    np.testing.assert_allclose(inlet.previous_solution(), [1.0, 300.0])
    inlet.resize(2, 1)
    with pytest.raises(StateNotReadyError):
        inlet.previous_solution()


def test_component_index():
    """Components are found by name."""
    inlet = Inlet1D()
    assert inlet.component_index("temperature") == 1
    with pytest.raises(KeyError):
        inlet.component_index("pressure")


def test_save_record():
    """Saved records carry id, type, shape and named values."""
    inlet = Inlet1D("fuel")
    inlet.set_mdot(0.2)
    node = inlet.save(np.array([0.2, 310.0]))
    assert node["id"] == "fuel"
    assert node["type"] == "inlet"
    assert node["points"] == 1
    assert node["values"] == {"mdot": [0.2], "temperature": [310.0]}
    assert node["attributes"]["mdot"] == 0.2


def test_default_initial_solution():
    """The base initial estimate is zero."""
    class Plain(Domain1D):
        domain_type = DomainType.TERMINATOR

        def eval(self, chain, x, r, diag, rdt=0.0, jg=-1):
            pass

    d = Plain(2, 3)
    x = np.ones(6)
    d.initial_solution(None, x)
    np.testing.assert_allclose(x, 0.0)
