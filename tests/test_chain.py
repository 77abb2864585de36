"""
Tests for the domain chain
"""
import json

import pytest
import numpy as np

from pyoned.boundaries.inlet import Inlet1D
from pyoned.boundaries.outlet import Outlet1D
from pyoned.boundaries.surface import ReactingSurface1D
from pyoned.core.config import FlowConfig
from pyoned.core.domain import Terminator
from pyoned.core.errors import (
    ConfigurationError, StateNotReadyError, UnsupportedCapabilityError
)
from pyoned.flow.stagnation import StagnationFlow
from pyoned.solvers.chain import DomainChain


def counterflow(gas, n_points=6, names=("fuel", "flow", "oxidizer")):
    fuel = Inlet1D(names[0])
    flow = StagnationFlow(gas, config=FlowConfig(n_points=n_points), name=names[1])
    oxidizer = Inlet1D(names[2])
    chain = DomainChain([Terminator("left"), fuel, flow, oxidizer, Terminator("right")])
    chain.set_mdot(names[0], 0.3)
    chain.set_mole_fractions(names[0], "H2:1, AR:1")
    chain.set_mdot(names[2], 0.4)
    chain.set_temperature(names[2], 500.0)
    chain.set_mole_fractions(names[2], "O2:1, AR:4")
    return chain


def test_methane_inlet_scenario(gri30):
    """Inlet(mdot=0.5, T=300, X=CH4:1) | Flow(20) | Outlet at its initial estimate."""
    chain = DomainChain([Inlet1D(), StagnationFlow(gri30, config=FlowConfig(n_points=20)),
                         Outlet1D()])
    chain.set_mdot(0, 0.5)
    chain.set_temperature(0, 300.0)
    chain.set_mole_fractions(0, "CH4:1")
    chain.init()
    x = chain.initial_solution()
    assert chain.size == 2 + 20 * (4 + gri30.n_species) + 1

    r, _ = chain.eval(x)
    np.testing.assert_array_equal(r[:2], [0.0, 0.0])
    assert np.all(np.isfinite(r))

    for eps in (1e-4, 1e-2, -1.0):
        xp = x.copy()
        xp[0] += eps
        r, _ = chain.eval(xp)
        assert r[0] == pytest.approx(eps, rel=1e-9)
        assert r[1] == 0.0


def test_default_ids():
    """Domains without a name get type-and-position ids."""
    chain = DomainChain([Inlet1D(), Outlet1D()])
    assert [d.id for d in chain.domains] == ["inlet_0", "outlet_1"]
    assert [d.index for d in chain.domains] == [0, 1]
    assert chain.domain("outlet_1") is chain.domains[1]
    with pytest.raises(KeyError):
        chain.domain("missing")


def test_add_errors():
    """Domains may be added once and ids are unique."""
    inlet = Inlet1D("a")
    chain = DomainChain([inlet])
    with pytest.raises(ConfigurationError):
        chain.add(inlet)
    with pytest.raises(ConfigurationError):
        chain.add(Outlet1D("a"))
    assert chain.add(Outlet1D("b")) == 1


def test_not_ready(h2o2):
    """Evaluation requires init() and a vector of the right size."""
    chain = counterflow(h2o2)
    with pytest.raises(StateNotReadyError):
        chain.eval(np.zeros(chain.size))
    with pytest.raises(StateNotReadyError):
        chain.initial_solution()
    chain.init()
    with pytest.raises(ConfigurationError):
        chain.eval(np.zeros(chain.size + 1))
    with pytest.raises(ConfigurationError):
        chain.init_time_integration(0.0, chain.initial_solution())


def test_capability_checked_setters(h2o2):
    """Unsupported configuration raises a typed error."""
    chain = DomainChain([Inlet1D("in"), StagnationFlow(h2o2, name="flow"), Outlet1D("out")])
    with pytest.raises(UnsupportedCapabilityError):
        chain.set_mdot("out", 1.0)
    with pytest.raises(UnsupportedCapabilityError):
        chain.set_mole_fractions("out", "O2:1")
    with pytest.raises(UnsupportedCapabilityError):
        chain.set_spread_rate("flow", 1.0)
    with pytest.raises(UnsupportedCapabilityError):
        chain.set_kinetics("in", object())
    with pytest.raises(UnsupportedCapabilityError):
        chain.enable_coverage_equations("in", False)
    chain.set_temperature("out", 700.0)
    assert chain.domain("out").temperature == 700.0
    chain.set_spread_rate("in", 5.0)
    assert chain.domain("in").spread_rate == 5.0


def test_layout_follows_resize(fake_kinetics, h2o2):
    """Attaching kinetics after assembly relayouts the chain."""
    surf = ReactingSurface1D("surf")
    chain = DomainChain([Inlet1D("in"), StagnationFlow(h2o2, config=FlowConfig(n_points=4)),
                         surf])
    size = chain.size
    chain.set_kinetics("surf", fake_kinetics([0.5, 0.5]))
    assert chain.size == size + 2
    assert chain.layout.check_partition()
    chain.enable_coverage_equations("surf", False)
    assert not surf.coverage_equations_enabled


def test_terminators(h2o2):
    """Terminators add no unknowns and no residual rows."""
    chain = counterflow(h2o2)
    chain.init()
    assert chain.layout[0].size == 0
    assert chain.layout[4].size == 0
    x = chain.initial_solution()
    r, _ = chain.eval(x)
    assert len(r) == chain.size
    assert np.all(np.isfinite(r))


def test_counterflow_directions(h2o2):
    """Opposed inlets inject in opposite directions."""
    chain = counterflow(h2o2)
    chain.init()
    fuel, oxidizer = chain.domain("fuel"), chain.domain("oxidizer")
    assert fuel.direction == 1
    assert oxidizer.direction == -1
    x = chain.initial_solution()
    assert fuel.edge_mass_flux(chain.layout.local(x, fuel.index)) == pytest.approx(0.3)
    assert oxidizer.edge_mass_flux(chain.layout.local(x, oxidizer.index)) == pytest.approx(-0.4)


def test_save_restore_round_trip(h2o2):
    """A saved document restores the same vector into a fresh chain."""
    chain = counterflow(h2o2)
    chain.init()
    x = chain.initial_solution()
    x += 1e-3 * np.arange(chain.size)
    document = json.loads(json.dumps(chain.save(x)))
    assert [node["id"] for node in document["domains"]] == [
        "left", "fuel", "flow", "oxidizer", "right"]

    fresh = counterflow(h2o2)
    restored = fresh.restore(document)
    np.testing.assert_allclose(restored, x)


def test_restore_regrids_flow(h2o2):
    """A saved flow with a different point count resizes the target flow."""
    chain = counterflow(h2o2, n_points=6)
    chain.init()
    x = chain.initial_solution()
    document = chain.save(x)

    fresh = counterflow(h2o2, n_points=10)
    restored = fresh.restore(document)
    assert fresh.domain("flow").n_points == 6
    assert fresh.size == chain.size
    np.testing.assert_allclose(restored, x)


def test_restore_missing_values(h2o2, caplog):
    """Missing values keep the variant's defaults."""
    chain = counterflow(h2o2)
    chain.init()
    x = chain.initial_solution()
    fuel_loc = chain.layout[1].offset
    x[fuel_loc] = 0.25
    document = chain.save(x)
    del document["domains"][1]["values"]["mdot"]

    fresh = counterflow(h2o2)
    with caplog.at_level("WARNING"):
        restored = fresh.restore(document)
    assert restored[fuel_loc] == 0.3
    assert "mdot" in caplog.text


def test_restore_by_position_and_type_check(h2o2):
    """Nodes match by position when ids differ and must agree on type."""
    chain = counterflow(h2o2)
    chain.init()
    x = chain.initial_solution()
    document = chain.save(x)

    renamed = counterflow(h2o2, names=("a", "b", "c"))
    np.testing.assert_allclose(renamed.restore(document), x)

    document["domains"][1]["type"] = "outlet"
    with pytest.raises(ConfigurationError):
        counterflow(h2o2).restore(document)


def test_finalize_and_show(h2o2, caplog):
    """Finalize and show_solution visit every domain."""
    chain = DomainChain([Inlet1D("in"), StagnationFlow(h2o2, config=FlowConfig(n_points=4),
                                                       name="flow"), Outlet1D("out")])
    chain.set_mole_fractions("in", "H2:1")
    chain.init()
    x = chain.initial_solution()
    x[-1] = 345.0
    chain.finalize(x)
    assert chain.domain("out").temperature == 345.0
    with caplog.at_level("INFO"):
        chain.show_solution(x)
    assert "Flow 'flow'" in caplog.text
    assert "Inlet 'in'" in caplog.text
