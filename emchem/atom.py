"""
Atom, bond and bond-graph mutation helpers.

Bonds are stored on both endpoints so that neighbours can be walked from
either side. Never append to ``Atom.bonds`` directly: ``link_atoms`` and
``unlink_atoms`` update both sides in one call, which is what keeps the
graph symmetric.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from emchem.constants import PM_TO_ANGSTROM
from emchem.electrons import Electron, fill_electron_shells
from emchem.elements import EMPTY_ELEMENT, ElementData
from emchem.vector import Vector, vector_zero

MIN_VISUAL_RADIUS = 0.5
IONIZATION_DONOR_LIMIT_EV = 8.0
AFFINITY_ACCEPTOR_LIMIT_EV = 0.3


class BondType(str, Enum):
    IONIC = "ionic"
    COVALENT = "covalent"
    METALLIC = "metallic"
    HYDROGEN = "hydrogen"
    VAN_DER_WAALS = "van_der_waals"


@dataclass
class Bond:
    partner: int
    bond_type: BondType = BondType.COVALENT
    order: int = 1
    dissociation_energy: float = 0.0  # eV
    equilibrium_distance: float = 1.0  # Å
    morse_width: float = 1.0  # 1/Å


@dataclass
class Atom:
    atomic_number: int
    element: ElementData = EMPTY_ELEMENT
    position: Vector = field(default_factory=vector_zero)
    velocity: Vector = field(default_factory=vector_zero)
    force: Vector = field(default_factory=vector_zero)
    mass: float = 0.0
    kinetic_energy: float = 0.0
    electrons: List[Electron] = field(default_factory=list)
    bonds: List[Bond] = field(default_factory=list)
    effective_valence: int = 0

    @classmethod
    def from_element(cls, element: ElementData, position: Vector = (0.0, 0.0, 0.0)) -> "Atom":
        atom = cls(
            atomic_number=element.atomic_number,
            element=element,
            position=position,
            mass=element.atomic_mass,
            electrons=fill_electron_shells(element.atomic_number),
        )
        atom.update_effective_valence()
        return atom

    @property
    def symbol(self) -> str:
        return self.element.symbol

    @property
    def is_inert(self) -> bool:
        return self.element.atomic_number == 0

    @property
    def charge(self) -> int:
        # Only electron transfer changes this.
        return self.element.atomic_number - len(self.electrons)

    @property
    def valence_count(self) -> int:
        return max(0, self.element.valence_electrons - self.charge)

    @property
    def bonding_capacity(self) -> int:
        """Unpaired valence electrons of the current (possibly ionised) state."""
        v = self.valence_count
        if self.element.period == 1:
            return max(0, min(v, 2 - v))
        if v <= 4:
            return v
        return max(0, 8 - v)

    @property
    def total_bond_order(self) -> int:
        return sum(bond.order for bond in self.bonds)

    @property
    def lone_pairs(self) -> int:
        return max(0, (self.valence_count - self.total_bond_order) // 2)

    @property
    def visual_radius(self) -> float:
        return max(MIN_VISUAL_RADIUS, self.element.atomic_radius * PM_TO_ANGSTROM)

    def available_valence_electrons(self) -> int:
        return max(0, self.bonding_capacity - self.total_bond_order)

    def update_effective_valence(self) -> None:
        self.effective_valence = self.available_valence_electrons()

    def wants_electron(self) -> bool:
        if self.is_inert:
            return False
        return self.element.electron_affinity > AFFINITY_ACCEPTOR_LIMIT_EV and self.valence_count < 8

    def wants_to_lose_electron(self) -> bool:
        if self.is_inert or not self.electrons:
            return False
        return (
            self.element.ionization_energy < IONIZATION_DONOR_LIMIT_EV
            and 1 <= self.valence_count <= 2
        )

    def remove_outer_electron(self) -> Electron:
        if not self.electrons:
            raise ValueError(f"{self.symbol} has no electrons left to remove.")
        electron = self.electrons.pop()
        self.update_effective_valence()
        return electron

    def add_electron(self, electron: Electron) -> None:
        self.electrons.append(electron)
        self.update_effective_valence()

    def bond_to(self, partner: int) -> Optional[Bond]:
        for bond in self.bonds:
            if bond.partner == partner:
                return bond
        return None

    def is_bonded_to(self, partner: int) -> bool:
        return self.bond_to(partner) is not None

    def attach_bond(self, bond: Bond) -> None:
        self.bonds.append(bond)
        self.update_effective_valence()

    def detach_bond(self, partner: int) -> Optional[Bond]:
        removed = self.bond_to(partner)
        if removed is not None:
            self.bonds = [bond for bond in self.bonds if bond.partner != partner]
            self.update_effective_valence()
        return removed


def transfer_electron(donor: Atom, acceptor: Atom) -> None:
    """Move the donor's outermost electron object onto the acceptor."""
    acceptor.add_electron(donor.remove_outer_electron())


def link_atoms(
    atoms: Sequence[Atom],
    i: int,
    j: int,
    bond_type: BondType,
    order: int,
    dissociation_energy: float,
    equilibrium_distance: float,
    morse_width: float,
) -> None:
    """Create the reciprocal pair of bond entries between atoms i and j."""
    if i == j:
        raise ValueError("An atom cannot bond to itself.")
    for a, b in ((i, j), (j, i)):
        atoms[a].attach_bond(
            Bond(
                partner=b,
                bond_type=bond_type,
                order=order,
                dissociation_energy=dissociation_energy,
                equilibrium_distance=equilibrium_distance,
                morse_width=morse_width,
            )
        )


def unlink_atoms(atoms: Sequence[Atom], i: int, j: int) -> Optional[Bond]:
    """
    Remove the bond between i and j from both endpoints.

    Returns the entry that was stored on atom i, or None if there was none.
    A partner index outside ``atoms`` only has its dangling entry on i removed.
    """
    removed = atoms[i].detach_bond(j)
    if 0 <= j < len(atoms):
        atoms[j].detach_bond(i)
    return removed
