"""Emergent chemistry engine: atoms, force field, bonding and orbital sampling."""

from emchem.atom import Atom, Bond, BondType
from emchem.elements import ElementData, ElementTable, default_element_table
from emchem.interaction import (
    DeterministicThermalBreak,
    InteractionEngine,
    ReactionEvent,
    StochasticThermalBreak,
)
from emchem.molecule import Molecule, MoleculeTracker
from emchem.quantum import QuantumSampler
from emchem.simulation import Simulation, SimulationSettings

__all__ = [
    "Atom",
    "Bond",
    "BondType",
    "DeterministicThermalBreak",
    "ElementData",
    "ElementTable",
    "InteractionEngine",
    "Molecule",
    "MoleculeTracker",
    "QuantumSampler",
    "ReactionEvent",
    "Simulation",
    "SimulationSettings",
    "StochasticThermalBreak",
    "default_element_table",
]

__version__ = "0.1.0"
