"""
Tests for composition parsing and resolution
"""
import pytest
import numpy as np

from pyoned.boundaries.composition import (
    BoundaryComposition, CompositionSpec, mole_to_mass, parse_composition
)
from pyoned.core.errors import ConfigurationError, StateNotReadyError

NAMES = ["H2", "O2", "AR"]
WEIGHTS = np.array([2.016, 31.998, 39.95])


def test_parse_composition():
    """Strings parse into name/value maps."""
    assert parse_composition("H2:1, O2:0.5") == {"H2": 1.0, "O2": 0.5}
    assert parse_composition("H2:1 AR:2") == {"H2": 1.0, "AR": 2.0}


@pytest.mark.parametrize("text", ["", "H2", "H2:x", ":1", "H2:1, H2:2"])
def test_parse_composition_errors(text):
    """Malformed strings are configuration errors."""
    with pytest.raises(ConfigurationError):
        parse_composition(text)


def test_mole_to_mass():
    """Mole fractions convert with molecular weights."""
    Y = mole_to_mass(np.array([1.0, 1.0, 0.0]), WEIGHTS)
    np.testing.assert_allclose(Y, [2.016 / 34.014, 31.998 / 34.014, 0.0])


@pytest.mark.parametrize("values", [[-0.1, 1.1, 0.0], [0.0, 0.0, 0.0], [np.nan, 1.0, 0.0]])
def test_invalid_values(values):
    """Negative, all-zero and non-finite fractions are rejected."""
    with pytest.raises(ConfigurationError):
        CompositionSpec.create("mole", values, 1e-6)


def test_mass_fraction_sum_checked():
    """Mass fractions must already sum to one within tolerance."""
    with pytest.raises(ConfigurationError):
        CompositionSpec.create("mass", [0.5, 0.4, 0.0], 1e-6)
    spec = CompositionSpec.create("mass", [0.5, 0.5 + 1e-8, 0.0], 1e-6)
    Y = spec.resolve(NAMES, WEIGHTS)
    assert Y.sum() == pytest.approx(1.0, abs=1e-14)


def test_resolve_errors():
    """Unknown species and length mismatches fail at resolution."""
    spec = CompositionSpec.create("mole", "CH4:1", 1e-6)
    with pytest.raises(ConfigurationError):
        spec.resolve(NAMES, WEIGHTS)
    spec = CompositionSpec.create("mole", [1.0, 0.0], 1e-6)
    with pytest.raises(ConfigurationError):
        spec.resolve(NAMES, WEIGHTS)


def test_boundary_composition_lifecycle():
    """Specifications resolve once species are attached."""
    comp = BoundaryComposition("test", 1e-6)
    comp.set("mole", "H2:2, O2:1")
    assert not comp.resolved
    with pytest.raises(StateNotReadyError):
        comp.mass_fraction("H2")

    comp.attach(NAMES, WEIGHTS)
    assert comp.resolved
    expected = mole_to_mass(np.array([2.0, 1.0, 0.0]), WEIGHTS)
    assert comp.mass_fraction("H2") == pytest.approx(expected[0])
    assert comp.mass_fraction(1) == pytest.approx(expected[1])
    assert set(comp.as_dict()) == {"H2", "O2"}

    # After attachment, bad names fail at the setter and keep the old state
    with pytest.raises(ConfigurationError):
        comp.set("mole", "CH4:1")
    assert comp.mass_fraction("H2") == pytest.approx(expected[0])
    with pytest.raises(ConfigurationError):
        comp.mass_fraction("CH4")


def test_unset_composition_defaults_to_first_species():
    """Attaching with nothing set gives pure first species."""
    comp = BoundaryComposition("test", 1e-6)
    comp.attach(NAMES, WEIGHTS)
    np.testing.assert_allclose(comp.Y, [1.0, 0.0, 0.0])
