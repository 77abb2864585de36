"""
Parsing and resolution of boundary compositions.

A composition may be given as a string (``"CH4:1, O2:2"``), a mapping from
species name to value, or an array ordered like the flow's species. Strings
and mappings are checked when they are set; names and array lengths are
checked when the composition is resolved against a flow's species list.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Union

import numpy as np

from ..core.errors import ConfigurationError, StateNotReadyError

logger = logging.getLogger(__name__)

CompositionInput = Union[str, Mapping[str, float], Sequence[float], np.ndarray]


def parse_composition(text: str) -> Dict[str, float]:
    """
    Parse ``"A:1, B:2"`` into ``{"A": 1.0, "B": 2.0}``.

    Entries may be separated by commas or whitespace. Repeated names are
    an error.
    """
    result: Dict[str, float] = {}
    tokens = [t for t in text.replace(",", " ").split() if t]
    if not tokens:
        raise ConfigurationError(f"Empty composition string: '{text}'")
    for token in tokens:
        name, sep, value = token.rpartition(":")
        if not sep or not name:
            raise ConfigurationError(f"Malformed composition entry '{token}' in '{text}'")
        try:
            number = float(value)
        except ValueError:
            raise ConfigurationError(
                f"Malformed value '{value}' for species '{name}' in '{text}'") from None
        if name in result:
            raise ConfigurationError(f"Species '{name}' repeated in '{text}'")
        result[name] = number
    return result


@dataclass(frozen=True)
class CompositionSpec:
    """A validated but unresolved composition"""
    basis: str  # "mole" or "mass"
    values: Union[Dict[str, float], np.ndarray]

    @classmethod
    def create(cls, basis: str, composition: CompositionInput,
               tol: float) -> "CompositionSpec":
        if basis not in ("mole", "mass"):
            raise ValueError(f"Unknown composition basis: {basis}")
        if isinstance(composition, str):
            values = parse_composition(composition)
        elif isinstance(composition, Mapping):
            values = {str(k): float(v) for k, v in composition.items()}
        else:
            values = np.asarray(composition, dtype=float)
            if values.ndim != 1:
                raise ConfigurationError("Composition array must be one-dimensional")

        raw = np.fromiter(values.values(), dtype=float) if isinstance(values, dict) else values
        if not np.all(np.isfinite(raw)):
            raise ConfigurationError("Composition contains non-finite values")
        if np.any(raw < 0.0):
            raise ConfigurationError(f"Negative {basis} fraction in composition")
        total = raw.sum()
        if total <= 0.0:
            raise ConfigurationError(f"All {basis} fractions are zero")
        if basis == "mass" and abs(total - 1.0) > tol:
            raise ConfigurationError(
                f"Mass fractions sum to {total:.8g}, not 1 within {tol:g}")
        return cls(basis, values)

    def resolve(self, species_names: Sequence[str],
                molecular_weights: np.ndarray) -> np.ndarray:
        """Return normalized mass fractions ordered like species_names"""
        n_species = len(species_names)
        if isinstance(self.values, dict):
            unknown = [name for name in self.values if name not in species_names]
            if unknown:
                raise ConfigurationError(f"Unknown species in composition: {unknown}")
            fractions = np.zeros(n_species)
            for name, value in self.values.items():
                fractions[species_names.index(name)] = value
        else:
            if len(self.values) != n_species:
                raise ConfigurationError(
                    f"Composition has {len(self.values)} entries, flow has {n_species} species")
            fractions = self.values.copy()

        if self.basis == "mole":
            return mole_to_mass(fractions, molecular_weights)
        return fractions / fractions.sum()


def mole_to_mass(X: np.ndarray, molecular_weights: np.ndarray) -> np.ndarray:
    """Convert (possibly unnormalized) mole fractions to mass fractions"""
    XW = np.asarray(X, dtype=float) * np.asarray(molecular_weights, dtype=float)
    return XW / XW.sum()


class BoundaryComposition:
    """
    Composition state carried by boundaries that supply species to a flow.

    Holds the most recent specification and, once the flow's species are
    known, the resolved mass fraction array.
    """
    def __init__(self, owner: str, tol: float):
        self.owner = owner
        self.tol = tol
        self.spec = None
        self.species_names = None
        self.molecular_weights = None
        self.Y = None

    def set(self, basis: str, composition: CompositionInput) -> None:
        spec = CompositionSpec.create(basis, composition, self.tol)
        if self.species_names is not None:
            self.Y = spec.resolve(self.species_names, self.molecular_weights)
            logger.debug(f"{self.owner}: resolved {basis} composition")
        self.spec = spec

    def attach(self, species_names: Sequence[str], molecular_weights: np.ndarray) -> None:
        """Bind to a flow's species set and resolve the stored specification"""
        self.species_names = list(species_names)
        self.molecular_weights = np.asarray(molecular_weights, dtype=float)
        if self.spec is not None:
            self.Y = self.spec.resolve(self.species_names, self.molecular_weights)
            logger.debug(f"{self.owner}: resolved {self.spec.basis} composition")
        else:
            # Nothing specified: pure first species
            self.Y = np.zeros(len(self.species_names))
            self.Y[0] = 1.0
            logger.warning(f"{self.owner}: no composition set, using pure "
                           f"{self.species_names[0]}")

    @property
    def resolved(self) -> bool:
        return self.Y is not None

    def mass_fraction(self, k: Union[int, str]) -> float:
        if self.Y is None:
            raise StateNotReadyError(
                f"{self.owner}: mass fractions are not resolved before init()")
        if isinstance(k, str):
            if k not in self.species_names:
                raise ConfigurationError(f"{self.owner}: unknown species '{k}'")
            k = self.species_names.index(k)
        return float(self.Y[k])

    def as_dict(self, threshold: float = 0.0) -> Dict[str, float]:
        if self.Y is None:
            return {}
        return {name: float(y) for name, y in zip(self.species_names, self.Y)
                if y > threshold}
