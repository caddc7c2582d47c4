"""
Force field and bonding decisions.

Nothing here consults a reaction table. Bonded pairs feel a Morse potential
whose depth, width and rest length are fixed when the bond forms. Unbonded
pairs feel Lennard-Jones repulsion/dispersion. Every pair carrying charge
feels Coulomb. Bonded neighbours are steered toward VSEPR angles.

Bond formation compares electronegativities: large differences try an
electron transfer (a Born-Haber energy balance), small ones try sharing
electron pairs (an overlap-weighted bond energy). Rejected attempts are
silent: if the energy does not work out, the bond simply does not form.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple

from emchem.atom import Atom, Bond, BondType, link_atoms, transfer_electron, unlink_atoms
from emchem.constants import (
    AMU_ANGSTROM2_PER_FS2_IN_EV,
    COULOMB_K_EV_ANGSTROM,
    KB_EV_PER_K,
    PM_TO_ANGSTROM,
)
from emchem.vector import (
    clamp,
    vector_add,
    vector_dot,
    vector_length,
    vector_scale,
    vector_sub,
)

logger = logging.getLogger(__name__)

MIN_PAIR_SEPARATION = 0.01  # Å; closer pairs are skipped entirely
MAX_BOND_ORDER = 3
MORSE_BREAK_FRACTION = 0.9
STRETCH_BREAK_FACTOR = 2.5
IONIZATION_SHARE_SCALE = 0.25
MORSE_WIDTH_LIMITS = (0.5, 3.0)

IDEAL_ANGLES_DEGREES = {2: 180.0, 3: 120.0, 4: 109.47}
CROWDED_ANGLE_DEGREES = 90.0

BOND_SYMBOLS = {1: "-", 2: "=", 3: "≡"}


def ideal_bond_angle(steric_number: int) -> float:
    """Ideal VSEPR angle in degrees; five or more domains fall back to 90."""
    if steric_number >= 5:
        return CROWDED_ANGLE_DEGREES
    return IDEAL_ANGLES_DEGREES.get(steric_number, IDEAL_ANGLES_DEGREES[2])


def switching_factor(r: float, switch_distance: float, cutoff: float) -> float:
    """Cubic taper: 1 inside ``switch_distance``, 0 at and beyond ``cutoff``."""
    if r <= switch_distance:
        return 1.0
    if r >= cutoff:
        return 0.0
    x = (r - switch_distance) / (cutoff - switch_distance)
    return 1.0 - 3.0 * x * x + 2.0 * x * x * x


def morse_energy(bond: Bond, r: float) -> float:
    decay = math.exp(-bond.morse_width * (r - bond.equilibrium_distance))
    return bond.dissociation_energy * (1.0 - decay) ** 2


def morse_force_magnitude(bond: Bond, r: float) -> float:
    """dV/dr of the Morse potential; positive when stretched (restoring pull)."""
    decay = math.exp(-bond.morse_width * (r - bond.equilibrium_distance))
    return 2.0 * bond.dissociation_energy * bond.morse_width * (1.0 - decay) * decay


def morse_width(dissociation_energy: float, stiffness: float) -> float:
    lo, hi = MORSE_WIDTH_LIMITS
    if dissociation_energy <= 0.0:
        return hi
    return clamp(math.sqrt(stiffness / (2.0 * dissociation_energy)), lo, hi)


def lennard_jones(r: float, sigma: float, epsilon: float, min_distance: float) -> Tuple[float, float]:
    """Return (radial force, potential); positive force is repulsive."""
    r = max(r, min_distance)
    sr6 = (sigma / r) ** 6
    sr12 = sr6 * sr6
    force = 24.0 * epsilon * (2.0 * sr12 - sr6) / r
    potential = 4.0 * epsilon * (sr12 - sr6)
    return force, potential


def coulomb(r: float, charge_a: float, charge_b: float, k: float, min_distance: float) -> Tuple[float, float]:
    """Return (radial force, potential); like charges give a positive (repulsive) force."""
    if charge_a == 0 and charge_b == 0:
        return 0.0, 0.0
    r = max(r, min_distance)
    qq = charge_a * charge_b
    return k * qq / (r * r), k * qq / r


def boltzmann_factor(dissociation_energy: float, temperature: float) -> float:
    return math.exp(-dissociation_energy / (3.0 * KB_EV_PER_K * temperature))


class BreakPolicy(Protocol):
    def should_break(self, dissociation_energy: float, temperature: float) -> bool:
        ...


@dataclass
class DeterministicThermalBreak:
    """Break whenever the Boltzmann factor exceeds a fixed threshold."""

    threshold: float = 0.5

    def should_break(self, dissociation_energy: float, temperature: float) -> bool:
        if temperature <= 0.0:
            return False
        if dissociation_energy <= 0.0:
            return True
        return boltzmann_factor(dissociation_energy, temperature) > self.threshold


@dataclass
class StochasticThermalBreak:
    """Break with probability equal to the Boltzmann factor on every evaluation."""

    rng: random.Random = field(default_factory=random.Random)

    def should_break(self, dissociation_energy: float, temperature: float) -> bool:
        if temperature <= 0.0:
            return False
        if dissociation_energy <= 0.0:
            return True
        return self.rng.random() < boltzmann_factor(dissociation_energy, temperature)


@dataclass(frozen=True)
class ReactionEvent:
    time: float  # fs
    description: str


class InteractionEngine:
    """
    Computes forces on a list of atoms and mutates their bond graph.

    The engine owns no atoms; it works on whatever sequence the caller passes
    and addresses atoms by their index in that sequence.
    """

    def __init__(
        self,
        *,
        coulomb_k: float = COULOMB_K_EV_ANGSTROM,
        lj_epsilon: float = 0.01,
        bonding_range: float = 3.5,
        ionic_threshold: float = 1.7,
        temperature: float = 300.0,
        cutoff: float = 10.0,
        switch_distance: float = 8.0,
        min_distance: float = 0.5,
        vsepr_k: float = 2.0,
        bond_stiffness: float = 20.0,
        overlap_width: float = 0.5,
        covalent_stability_factor: float = 10.0,
        ionic_stability_factor: float = 2.0,
        break_policy: Optional[BreakPolicy] = None,
    ):
        if switch_distance >= cutoff:
            raise ValueError("switch_distance must be smaller than cutoff.")
        self.coulomb_k = coulomb_k
        self.lj_epsilon = lj_epsilon
        self.bonding_range = bonding_range
        self.ionic_threshold = ionic_threshold
        self.temperature = temperature
        self.cutoff = cutoff
        self.switch_distance = switch_distance
        self.min_distance = min_distance
        self.vsepr_k = vsepr_k
        self.bond_stiffness = bond_stiffness
        self.overlap_width = overlap_width
        self.covalent_stability_factor = covalent_stability_factor
        self.ionic_stability_factor = ionic_stability_factor
        self.break_policy: BreakPolicy = break_policy or DeterministicThermalBreak()

        self.total_kinetic = 0.0
        self.total_potential = 0.0
        self.total_bond_energy = 0.0
        self.bonds_formed = 0
        self.bonds_broken = 0
        self.sim_time = 0.0
        self.reaction_log: List[ReactionEvent] = []

    @property
    def thermal_energy(self) -> float:
        return KB_EV_PER_K * self.temperature

    def reset(self) -> None:
        self.total_kinetic = 0.0
        self.total_potential = 0.0
        self.total_bond_energy = 0.0
        self.bonds_formed = 0
        self.bonds_broken = 0
        self.sim_time = 0.0
        self.reaction_log = []

    # ------------------------------------------------------------------
    # Forces
    # ------------------------------------------------------------------

    def compute_forces(self, atoms: Sequence[Atom]) -> None:
        for atom in atoms:
            atom.force = (0.0, 0.0, 0.0)
        self.total_potential = 0.0

        count = len(atoms)
        for i in range(count):
            atom_a = atoms[i]
            if atom_a.is_inert:
                continue
            for j in range(i + 1, count):
                atom_b = atoms[j]
                if atom_b.is_inert:
                    continue
                delta = vector_sub(atom_a.position, atom_b.position)
                r = vector_length(delta)
                if r < MIN_PAIR_SEPARATION:
                    continue
                bond = atom_a.bond_to(j)
                if bond is None and r > self.cutoff:
                    continue

                magnitude = 0.0
                if bond is not None:
                    magnitude -= morse_force_magnitude(bond, r)
                    self.total_potential += morse_energy(bond, r)

                nonbonded_force = 0.0
                nonbonded_potential = 0.0
                if bond is None:
                    sigma = 0.5 * (atom_a.element.vdw_radius + atom_b.element.vdw_radius) * PM_TO_ANGSTROM
                    lj_force, lj_pot = lennard_jones(r, sigma, self.lj_epsilon, self.min_distance)
                    nonbonded_force += lj_force
                    nonbonded_potential += lj_pot
                coul_force, coul_pot = coulomb(
                    r, atom_a.charge, atom_b.charge, self.coulomb_k, self.min_distance
                )
                nonbonded_force += coul_force
                nonbonded_potential += coul_pot

                taper = switching_factor(r, self.switch_distance, self.cutoff)
                magnitude += taper * nonbonded_force
                self.total_potential += taper * nonbonded_potential

                force = vector_scale(delta, magnitude / r)
                atom_a.force = vector_add(atom_a.force, force)
                atom_b.force = vector_sub(atom_b.force, force)

        self._apply_vsepr_forces(atoms)
        self._update_energy_totals(atoms)

    def _apply_vsepr_forces(self, atoms: Sequence[Atom]) -> None:
        count = len(atoms)
        for index, center in enumerate(atoms):
            neighbors = [
                bond.partner for bond in center.bonds if 0 <= bond.partner < count and bond.partner != index
            ]
            if len(neighbors) < 2:
                continue
            steric_number = len(center.bonds) + center.lone_pairs
            theta0 = math.radians(ideal_bond_angle(steric_number))
            for idx in range(len(neighbors)):
                for jdx in range(idx + 1, len(neighbors)):
                    self._apply_angle_force(atoms[neighbors[idx]], center, atoms[neighbors[jdx]], theta0)

    def _apply_angle_force(self, atom_i: Atom, atom_j: Atom, atom_k: Atom, theta0: float) -> None:
        """Harmonic restoring force on the i-j-k angle, j being the central atom."""
        vec_ji = vector_sub(atom_i.position, atom_j.position)
        vec_jk = vector_sub(atom_k.position, atom_j.position)
        r_ji = vector_length(vec_ji)
        r_jk = vector_length(vec_jk)
        if r_ji < MIN_PAIR_SEPARATION or r_jk < MIN_PAIR_SEPARATION:
            return
        u = vector_scale(vec_ji, 1.0 / r_ji)
        v = vector_scale(vec_jk, 1.0 / r_jk)
        cos_theta = clamp(vector_dot(u, v), -1.0, 1.0)
        theta = math.acos(cos_theta)
        deviation = theta - theta0
        if deviation == 0.0:
            return
        sin_theta = max(1e-4, math.sqrt(1.0 - cos_theta * cos_theta))
        prefactor = self.vsepr_k * deviation / sin_theta

        # (u cos - v) / sin points away from v, i.e. toward a wider angle.
        term_i = vector_sub(vector_scale(u, cos_theta), v)
        term_k = vector_sub(vector_scale(v, cos_theta), u)
        force_i = vector_scale(term_i, prefactor / r_ji)
        force_k = vector_scale(term_k, prefactor / r_jk)
        force_j = vector_scale(vector_add(force_i, force_k), -1.0)

        atom_i.force = vector_sub(atom_i.force, force_i)
        atom_k.force = vector_sub(atom_k.force, force_k)
        atom_j.force = vector_sub(atom_j.force, force_j)

        self.total_potential += 0.5 * self.vsepr_k * deviation * deviation

    def _update_energy_totals(self, atoms: Sequence[Atom]) -> None:
        kinetic = 0.0
        bond_energy = 0.0
        for index, atom in enumerate(atoms):
            atom.kinetic_energy = 0.5 * atom.mass * vector_dot(atom.velocity, atom.velocity) * AMU_ANGSTROM2_PER_FS2_IN_EV
            kinetic += atom.kinetic_energy
            bond_energy += sum(bond.dissociation_energy for bond in atom.bonds if bond.partner > index)
        self.total_kinetic = kinetic
        self.total_bond_energy = bond_energy

    # ------------------------------------------------------------------
    # Bonding
    # ------------------------------------------------------------------

    def update_bonds(self, atoms: Sequence[Atom]) -> None:
        self._break_bonds(atoms)
        self._form_bonds(atoms)
        for atom in atoms:
            atom.update_effective_valence()

    def should_break(self, bond: Bond, r: float) -> bool:
        if morse_energy(bond, r) > MORSE_BREAK_FRACTION * bond.dissociation_energy:
            return True
        if self.break_policy.should_break(bond.dissociation_energy, self.temperature):
            return True
        return r > STRETCH_BREAK_FACTOR * bond.equilibrium_distance

    def _break_bonds(self, atoms: Sequence[Atom]) -> None:
        count = len(atoms)
        for i in range(count):
            for bond in list(atoms[i].bonds):
                j = bond.partner
                if j < 0 or j >= count or j == i:
                    unlink_atoms(atoms, i, j)
                    logger.debug("Dropped stale bond %d -> %d", i, j)
                    continue
                if j < i and atoms[j].is_bonded_to(i):
                    continue  # already evaluated from the lower index
                r = vector_length(vector_sub(atoms[i].position, atoms[j].position))
                if self.should_break(bond, r):
                    self._break_bond(atoms, i, j, bond)

    def _break_bond(self, atoms: Sequence[Atom], i: int, j: int, bond: Bond) -> None:
        unlink_atoms(atoms, i, j)
        atom_a, atom_b = atoms[i], atoms[j]
        if bond.bond_type == BondType.IONIC:
            if atom_a.charge > 0 and atom_b.charge < 0:
                transfer_electron(atom_b, atom_a)
            elif atom_b.charge > 0 and atom_a.charge < 0:
                transfer_electron(atom_a, atom_b)
        self.bonds_broken += 1
        self._log(f"{atom_a.symbol}-{atom_b.symbol} {bond.bond_type.value} bond broke")

    def _form_bonds(self, atoms: Sequence[Atom]) -> None:
        count = len(atoms)
        for i in range(count):
            for j in range(i + 1, count):
                atom_a, atom_b = atoms[i], atoms[j]
                r = vector_length(vector_sub(atom_a.position, atom_b.position))
                if r > self.bonding_range:
                    continue
                if atom_a.is_bonded_to(j):
                    continue
                if atom_a.element.is_noble_gas or atom_b.element.is_noble_gas:
                    continue
                chi_a = atom_a.element.electronegativity
                chi_b = atom_b.element.electronegativity
                if chi_a < 0.01 or chi_b < 0.01:
                    continue
                if abs(chi_a - chi_b) > self.ionic_threshold:
                    self.try_ionic_bond(atoms, i, j, r)
                else:
                    self.try_covalent_bond(atoms, i, j, r)

    def try_ionic_bond(self, atoms: Sequence[Atom], i: int, j: int, r: float) -> bool:
        if atoms[i].element.electronegativity < atoms[j].element.electronegativity:
            donor_index, acceptor_index = i, j
        else:
            donor_index, acceptor_index = j, i
        donor, acceptor = atoms[donor_index], atoms[acceptor_index]
        if not donor.wants_to_lose_electron() or not acceptor.wants_electron():
            return False

        # Born-Haber balance: pay the ionization energy, recover the affinity
        # and the electrostatic energy of the ion pair.
        stabilization = self.coulomb_k / max(r, self.min_distance)
        delta_e = donor.element.ionization_energy - acceptor.element.electron_affinity - stabilization
        if delta_e > 0.0:
            return False
        if abs(delta_e) <= self.ionic_stability_factor * self.thermal_energy:
            return False

        transfer_electron(donor, acceptor)
        strength = abs(delta_e)
        equilibrium = (donor.element.covalent_radius + acceptor.element.covalent_radius) * PM_TO_ANGSTROM
        link_atoms(
            atoms,
            donor_index,
            acceptor_index,
            BondType.IONIC,
            1,
            strength,
            equilibrium,
            morse_width(strength, self.bond_stiffness),
        )
        self.bonds_formed += 1
        self._log(
            f"{donor.symbol}+ {acceptor.symbol}- ionic bond formed (ΔE={delta_e:.2f} eV)"
        )
        return True

    def covalent_bond_energy(self, atom_a: Atom, atom_b: Atom, order: int) -> float:
        """Intrinsic bond energy before any overlap weighting."""
        affinity = math.sqrt(max(0.0, atom_a.element.electron_affinity) * max(0.0, atom_b.element.electron_affinity))
        ionization = math.sqrt(max(0.0, atom_a.element.ionization_energy) * max(0.0, atom_b.element.ionization_energy))
        return order * (affinity + IONIZATION_SHARE_SCALE * ionization)

    def try_covalent_bond(self, atoms: Sequence[Atom], i: int, j: int, r: float) -> bool:
        atom_a, atom_b = atoms[i], atoms[j]
        order = min(atom_a.available_valence_electrons(), atom_b.available_valence_electrons(), MAX_BOND_ORDER)
        if order <= 0:
            return False

        equilibrium = (atom_a.element.covalent_radius + atom_b.element.covalent_radius) * PM_TO_ANGSTROM
        intrinsic = self.covalent_bond_energy(atom_a, atom_b, order)
        overlap = math.exp(-(((r - equilibrium) / self.overlap_width) ** 2))
        if intrinsic * overlap < self.covalent_stability_factor * self.thermal_energy:
            return False

        link_atoms(
            atoms,
            i,
            j,
            BondType.COVALENT,
            order,
            intrinsic,
            equilibrium,
            morse_width(intrinsic, self.bond_stiffness),
        )
        self.bonds_formed += 1
        symbol = BOND_SYMBOLS.get(order, "-")
        self._log(f"{atom_a.symbol}{symbol}{atom_b.symbol} covalent bond formed (order {order})")
        return True

    def _log(self, description: str) -> None:
        self.reaction_log.append(ReactionEvent(time=self.sim_time, description=description))
        logger.debug("%.1f fs: %s", self.sim_time, description)
