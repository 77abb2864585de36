"""
Surface kinetics evaluator backed by a Cantera interface.

Any object exposing the same attributes and methods can be attached to a
ReactingSurface1D:

    n_surface_species, surface_phase_index, surface_species_names,
    coverages(), net_surface_production_rates(coverages, T, gas_state)

and optionally gas_species_names plus
gas_production_rates(coverages, T, gas_state).

gas_state is the state of the gas at the wall, read from the trial vector,
or None when the surface has no attached flow.
"""
import logging
from typing import List, NamedTuple, Optional

import numpy as np
import cantera as ct

logger = logging.getLogger(__name__)


class GasState(NamedTuple):
    """Temperature, pressure and mass fractions of the gas at a wall"""
    T: float
    P: float
    Y: np.ndarray


class CanteraSurfaceKinetics:
    """
    Adapter around a ``cantera.Interface`` holding the surface phase and its
    kinetics. Coverages are passed through unnormalized so the residual sees
    exactly the trial values. The gas and interface states are set from the
    arguments on every call.
    """
    def __init__(self, interface: ct.Interface, gas: Optional[ct.Solution] = None):
        self.interface = interface
        if gas is None and interface.adjacent:
            gas = next(iter(interface.adjacent.values()))
        self.gas = gas

        self._surf_start = interface.kinetics_species_index(interface.species_name(0))
        starts = [self._surf_start]
        self._gas_start = None
        if gas is not None:
            self._gas_start = interface.kinetics_species_index(gas.species_name(0))
            starts.append(self._gas_start)
        # Phases are stored contiguously, so start order is phase order
        self.surface_phase_index = sorted(starts).index(self._surf_start)

    @property
    def n_surface_species(self) -> int:
        return self.interface.n_species

    @property
    def surface_species_names(self) -> List[str]:
        return list(self.interface.species_names)

    @property
    def gas_species_names(self) -> List[str]:
        if self.gas is None:
            return []
        return list(self.gas.species_names)

    def coverages(self) -> np.ndarray:
        return np.array(self.interface.coverages)

    def _rates(self, coverages: np.ndarray, T: float,
               gas_state: Optional[GasState]) -> np.ndarray:
        P = self.interface.P
        if gas_state is not None:
            P = gas_state.P
            if self.gas is not None:
                self.gas.set_unnormalized_mass_fractions(np.asarray(gas_state.Y, dtype=float))
                self.gas.TP = gas_state.T, P
        self.interface.TP = T, P
        self.interface.set_unnormalized_coverages(np.asarray(coverages, dtype=float))
        return self.interface.net_production_rates

    def net_surface_production_rates(self, coverages: np.ndarray, T: float,
                                     gas_state: Optional[GasState] = None) -> np.ndarray:
        """Net production rates of the surface species [kmol/m^2/s]"""
        rates = self._rates(coverages, T, gas_state)
        return rates[self._surf_start:self._surf_start + self.n_surface_species]

    def gas_production_rates(self, coverages: np.ndarray, T: float,
                             gas_state: Optional[GasState] = None) -> np.ndarray:
        """Net production rates of the adjacent gas species [kmol/m^2/s]"""
        if self.gas is None:
            raise ValueError("Surface kinetics has no adjacent gas phase")
        rates = self._rates(coverages, T, gas_state)
        return rates[self._gas_start:self._gas_start + self.gas.n_species]
