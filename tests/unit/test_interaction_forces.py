"""Tests for the pair potentials and force accumulation."""

from __future__ import annotations

import math

import pytest

from emchem.atom import Atom, Bond, transfer_electron
from emchem.interaction import (
    InteractionEngine,
    coulomb,
    ideal_bond_angle,
    lennard_jones,
    morse_energy,
    morse_force_magnitude,
    morse_width,
    switching_factor,
)
from emchem.vector import vector_sum


def make_atoms(element_table, layout):
    return [Atom.from_element(element_table.by_symbol(symbol), position) for symbol, position in layout]


WATER_AND_SALT = [
    ("O", (0.0, 0.0, 0.0)),
    ("H", (0.96, 0.0, 0.0)),
    ("H", (-0.24, 0.93, 0.0)),
    ("Na", (5.0, -5.0, 0.0)),
    ("Cl", (7.5, -5.0, 0.0)),
    ("C", (-3.0, 2.0, 1.0)),
]


def test_switching_factor_endpoints() -> None:
    assert switching_factor(5.0, 8.0, 10.0) == 1.0
    assert switching_factor(8.0, 8.0, 10.0) == 1.0
    assert switching_factor(9.0, 8.0, 10.0) == pytest.approx(0.5)
    assert switching_factor(10.0, 8.0, 10.0) == 0.0
    assert switching_factor(12.0, 8.0, 10.0) == 0.0


def test_lennard_jones_minimum_has_no_force() -> None:
    sigma = 3.0
    force, potential = lennard_jones(2 ** (1 / 6) * sigma, sigma, 0.01, 0.5)
    assert force == pytest.approx(0.0, abs=1e-12)
    assert potential == pytest.approx(-0.01)
    assert lennard_jones(2.5, sigma, 0.01, 0.5)[0] > 0.0
    assert lennard_jones(4.0, sigma, 0.01, 0.5)[0] < 0.0


def test_lennard_jones_floors_distance() -> None:
    assert lennard_jones(0.1, 3.0, 0.01, 0.5) == lennard_jones(0.5, 3.0, 0.01, 0.5)


def test_coulomb_signs() -> None:
    like, _ = coulomb(2.0, 1, 1, 14.3996, 0.5)
    unlike, energy = coulomb(2.0, 1, -1, 14.3996, 0.5)
    assert like == pytest.approx(3.5999)
    assert unlike == pytest.approx(-3.5999)
    assert energy == pytest.approx(-7.1998)
    assert coulomb(2.0, 0, 0, 14.3996, 0.5) == (0.0, 0.0)


def test_morse_profile() -> None:
    bond = Bond(partner=1, dissociation_energy=2.0, equilibrium_distance=1.0, morse_width=2.0)
    assert morse_energy(bond, 1.0) == pytest.approx(0.0)
    assert morse_force_magnitude(bond, 1.0) == pytest.approx(0.0)
    assert morse_force_magnitude(bond, 1.2) > 0.0
    assert morse_force_magnitude(bond, 0.8) < 0.0
    assert morse_energy(bond, 100.0) == pytest.approx(2.0)


def test_morse_width_is_clamped() -> None:
    assert morse_width(10.0, 20.0) == pytest.approx(1.0)
    assert morse_width(0.5, 20.0) == pytest.approx(3.0)
    assert morse_width(1000.0, 20.0) == pytest.approx(0.5)
    assert morse_width(0.0, 20.0) == pytest.approx(3.0)


def test_ideal_angles() -> None:
    assert ideal_bond_angle(2) == pytest.approx(180.0)
    assert ideal_bond_angle(3) == pytest.approx(120.0)
    assert ideal_bond_angle(4) == pytest.approx(109.47)
    assert ideal_bond_angle(6) == pytest.approx(90.0)


def test_engine_rejects_inverted_switch() -> None:
    with pytest.raises(ValueError):
        InteractionEngine(switch_distance=10.0, cutoff=8.0)


def test_forces_obey_newtons_third_law(element_table) -> None:
    atoms = make_atoms(element_table, WATER_AND_SALT)
    engine = InteractionEngine()
    engine.update_bonds(atoms)
    assert any(atom.bonds for atom in atoms)

    engine.compute_forces(atoms)

    total = vector_sum(atom.force for atom in atoms)
    assert total == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)
    assert any(abs(component) > 1e-6 for atom in atoms for component in atom.force)


def test_close_unbonded_pair_repels(element_table) -> None:
    atoms = make_atoms(element_table, [("He", (0.0, 0.0, 0.0)), ("He", (1.2, 0.0, 0.0))])
    InteractionEngine().compute_forces(atoms)
    assert atoms[0].force[0] < 0.0
    assert atoms[1].force[0] == pytest.approx(-atoms[0].force[0])


def test_pairs_beyond_cutoff_feel_nothing(element_table) -> None:
    atoms = make_atoms(element_table, [("Na", (0.0, 0.0, 0.0)), ("Cl", (12.0, 0.0, 0.0))])
    transfer_electron(atoms[0], atoms[1])
    engine = InteractionEngine()
    engine.compute_forces(atoms)
    assert atoms[0].force == (0.0, 0.0, 0.0)
    assert engine.total_potential == 0.0


def test_ion_pair_attracts(element_table) -> None:
    atoms = make_atoms(element_table, [("Na", (0.0, 0.0, 0.0)), ("Cl", (6.0, 0.0, 0.0))])
    transfer_electron(atoms[0], atoms[1])
    InteractionEngine().compute_forces(atoms)
    assert atoms[0].force[0] > 0.0
    assert atoms[1].force[0] < 0.0


def test_inert_atoms_are_skipped(element_table) -> None:
    atoms = make_atoms(element_table, [("He", (0.0, 0.0, 0.0))])
    atoms.append(Atom(atomic_number=500, position=(0.5, 0.0, 0.0)))
    InteractionEngine().compute_forces(atoms)
    assert atoms[0].force == (0.0, 0.0, 0.0)
    assert atoms[1].force == (0.0, 0.0, 0.0)


def test_vsepr_opens_a_squeezed_angle(element_table) -> None:
    # H-O-H at 60 degrees; the ideal for two bonds plus two lone pairs is tetrahedral.
    half = math.radians(30.0)
    layout = [
        ("O", (0.0, 0.0, 0.0)),
        ("H", (0.97 * math.cos(half), 0.97 * math.sin(half), 0.0)),
        ("H", (0.97 * math.cos(half), -0.97 * math.sin(half), 0.0)),
    ]
    atoms = make_atoms(element_table, layout)
    engine = InteractionEngine()
    engine.update_bonds(atoms)
    assert len(atoms[0].bonds) == 2
    # Isolate the angular term by removing the bond stretch contribution.
    for atom in atoms:
        for bond in atom.bonds:
            bond.dissociation_energy = 0.0
    engine.lj_epsilon = 0.0

    engine.compute_forces(atoms)

    assert atoms[1].force[1] > 0.0
    assert atoms[2].force[1] < 0.0
    assert vector_sum(atom.force for atom in atoms) == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)
