"""
Velocity-Verlet driver for the emergent chemistry engine.

One ``advance_frame`` call runs ``settings.substeps`` integration steps. Each
step is half-kick, drift (with reflective walls), force evaluation and a
second half-kick, followed by a Berendsen thermostat. Every
``bond_update_interval`` steps the bonding protocol runs, and the molecule
list is rebuilt whenever a bond formed or broke.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from emchem.atom import Atom, BondType
from emchem.constants import (
    AMU_ANGSTROM2_PER_FS2_IN_EV,
    KB_EV_PER_K,
    MAX_TEMPERATURE_K,
    MIN_TEMPERATURE_K,
)
from emchem.elements import ElementTable, default_element_table
from emchem.interaction import InteractionEngine, ReactionEvent
from emchem.molecule import Molecule, MoleculeTracker
from emchem.vector import Vector, clamp, vector_dot, vector_scale

logger = logging.getLogger(__name__)

MAX_SUBSTEPS = 50
WALL_RESTITUTION = 0.5
THERMOSTAT_LAMBDA_LIMITS = (0.9, 1.1)
TEMPERATURE_FLOOR_K = 1.0


@dataclass
class SimulationSettings:
    timestep_fs: float = 1.0
    substeps: int = MAX_SUBSTEPS
    world_half_extent: float = 50.0  # Å
    target_temperature_k: float = 300.0
    thermostat_tau_fs: Optional[float] = 100.0
    bond_update_interval: int = 10
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.substeps = int(clamp(self.substeps, 1, MAX_SUBSTEPS))
        self.bond_update_interval = max(1, int(self.bond_update_interval))


@dataclass
class AtomState:
    index: int
    symbol: str
    position: Vector
    velocity: Vector
    charge: int
    effective_valence: int


@dataclass
class BondState:
    atom_i: int
    atom_j: int
    bond_type: BondType
    order: int
    dissociation_energy: float


@dataclass
class SimulationSnapshot:
    step_index: int
    time_fs: float
    temperature_k: float
    atom_states: List[AtomState]
    bonds: List[BondState] = field(default_factory=list)
    formulas: List[str] = field(default_factory=list)


class Simulation:
    """
    Owns the atom list and drives the interaction engine and molecule tracker.

    Atoms are only ever appended (``spawn_atom``) or all removed at once
    (``clear``), so bond partner indices stay valid between those calls.
    """

    def __init__(
        self,
        elements: Optional[ElementTable] = None,
        settings: Optional[SimulationSettings] = None,
        engine: Optional[InteractionEngine] = None,
    ):
        self.elements = elements or default_element_table()
        self.settings = settings or SimulationSettings()
        self.engine = engine or InteractionEngine()
        self.set_temperature(self.settings.target_temperature_k)
        self.tracker = MoleculeTracker()
        self.random = random.Random(self.settings.seed)
        self._atoms: List[Atom] = []
        self.sim_time: float = 0.0
        self.step_count: int = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def atoms(self) -> List[Atom]:
        return self._atoms

    @property
    def molecules(self) -> List[Molecule]:
        return self.tracker.molecules

    @property
    def reaction_log(self) -> List[ReactionEvent]:
        return self.engine.reaction_log

    @property
    def temperature(self) -> float:
        return self.engine.temperature

    def bond_count(self) -> int:
        return sum(len(atom.bonds) for atom in self._atoms) // 2

    def total_kinetic_energy(self) -> float:
        return sum(
            0.5 * atom.mass * vector_dot(atom.velocity, atom.velocity) * AMU_ANGSTROM2_PER_FS2_IN_EV
            for atom in self._atoms
        )

    def current_temperature(self) -> float:
        """Instantaneous temperature from equipartition, T = (2/3) <KE> / kB."""
        massive = sum(1 for atom in self._atoms if atom.mass > 0.0)
        if not massive:
            return 0.0
        average = self.total_kinetic_energy() / massive
        return (2.0 / 3.0) * average / KB_EV_PER_K

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def spawn_atom(self, atomic_number: int, position: Vector) -> int:
        """Append an atom with a thermal velocity and refresh bonds. Returns its index."""
        element = self.elements.get(atomic_number)
        atom = Atom.from_element(element, (float(position[0]), float(position[1]), float(position[2])))
        atom.velocity = self._thermal_velocity(atom.mass)
        self._atoms.append(atom)
        index = len(self._atoms) - 1
        logger.info("Spawned %s (Z=%d) at index %d", atom.symbol, atomic_number, index)

        self.engine.sim_time = self.sim_time
        self.engine.update_bonds(self._atoms)
        self.engine.compute_forces(self._atoms)
        self.tracker.update(self._atoms)
        return index

    def clear(self) -> None:
        self._atoms = []
        self.engine.reset()
        self.sim_time = 0.0
        self.step_count = 0
        self.tracker.update(self._atoms)
        logger.info("Simulation cleared")

    def set_temperature(self, temperature_k: float) -> float:
        value = clamp(temperature_k, MIN_TEMPERATURE_K, MAX_TEMPERATURE_K)
        self.settings.target_temperature_k = value
        self.engine.temperature = value
        return value

    def adjust_temperature(self, delta_k: float = 100.0) -> float:
        return self.set_temperature(self.engine.temperature + delta_k)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def advance_frame(self) -> None:
        self.integrate(self.settings.substeps)

    def integrate(self, steps: int = 1) -> None:
        for _ in range(steps):
            self.step()

    def step(self) -> None:
        if not self._atoms:
            return
        dt = self.settings.timestep_fs

        self._half_kick(dt)
        for atom in self._atoms:
            atom.position = (
                atom.position[0] + atom.velocity[0] * dt,
                atom.position[1] + atom.velocity[1] * dt,
                atom.position[2] + atom.velocity[2] * dt,
            )
            self.apply_boundary(atom)

        self.engine.sim_time = self.sim_time
        self.engine.compute_forces(self._atoms)
        self._half_kick(dt)
        self._apply_thermostat(dt)

        if self.step_count % self.settings.bond_update_interval == 0:
            before = (self.engine.bonds_formed, self.engine.bonds_broken)
            self.engine.update_bonds(self._atoms)
            after = (self.engine.bonds_formed, self.engine.bonds_broken)
            if before != after or self.step_count == 0:
                self.tracker.update(self._atoms)

        self.sim_time += dt
        self.step_count += 1

    def _half_kick(self, dt: float) -> None:
        scale = 0.5 * dt / AMU_ANGSTROM2_PER_FS2_IN_EV
        for atom in self._atoms:
            if atom.mass <= 0.0:
                continue
            factor = scale / atom.mass
            atom.velocity = (
                atom.velocity[0] + atom.force[0] * factor,
                atom.velocity[1] + atom.force[1] * factor,
                atom.velocity[2] + atom.force[2] * factor,
            )

    def apply_boundary(self, atom: Atom) -> None:
        """Reflect off the box walls, losing half the normal velocity."""
        limit = self.settings.world_half_extent
        position = list(atom.position)
        velocity = list(atom.velocity)
        for axis in range(3):
            if position[axis] > limit:
                position[axis] = limit
                velocity[axis] *= -WALL_RESTITUTION
            elif position[axis] < -limit:
                position[axis] = -limit
                velocity[axis] *= -WALL_RESTITUTION
        atom.position = (position[0], position[1], position[2])
        atom.velocity = (velocity[0], velocity[1], velocity[2])

    def _apply_thermostat(self, dt: float) -> None:
        tau = self.settings.thermostat_tau_fs
        target = self.engine.temperature
        if tau is None or tau <= 0 or not self._atoms or target < TEMPERATURE_FLOOR_K:
            return
        current = max(self.current_temperature(), TEMPERATURE_FLOOR_K)
        scale_factor = max(0.0, 1.0 + (dt / tau) * (target / current - 1.0))
        lo, hi = THERMOSTAT_LAMBDA_LIMITS
        scale = clamp(math.sqrt(scale_factor), lo, hi)
        logger.debug("Thermostat T=%.1f K target=%.1f K lambda=%.4f", current, target, scale)
        for atom in self._atoms:
            atom.velocity = vector_scale(atom.velocity, scale)

    def _thermal_velocity(self, mass: float) -> Vector:
        """Maxwell-Boltzmann draw: each component ~ N(0, sqrt(kT/m))."""
        if mass <= 0.0:
            return (0.0, 0.0, 0.0)
        sigma = math.sqrt(KB_EV_PER_K * self.engine.temperature / (mass * AMU_ANGSTROM2_PER_FS2_IN_EV))
        return (
            self.random.gauss(0.0, sigma),
            self.random.gauss(0.0, sigma),
            self.random.gauss(0.0, sigma),
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> SimulationSnapshot:
        atom_states = [
            AtomState(
                index=index,
                symbol=atom.symbol,
                position=atom.position,
                velocity=atom.velocity,
                charge=atom.charge,
                effective_valence=atom.effective_valence,
            )
            for index, atom in enumerate(self._atoms)
        ]
        bonds = [
            BondState(index, bond.partner, bond.bond_type, bond.order, bond.dissociation_energy)
            for index, atom in enumerate(self._atoms)
            for bond in atom.bonds
            if bond.partner > index
        ]
        return SimulationSnapshot(
            step_index=self.step_count,
            time_fs=self.sim_time,
            temperature_k=self.current_temperature(),
            atom_states=atom_states,
            bonds=bonds,
            formulas=[molecule.formula for molecule in self.tracker.molecules],
        )
