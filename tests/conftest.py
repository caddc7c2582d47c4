"""
Shared pytest fixtures for the emchem test suite.

``element_table`` is the packaged dataset; ``synthetic_table`` holds
hand-built records whose numbers are chosen to make energy balances easy
to reason about in tests.
"""

from __future__ import annotations

import pathlib
import sys

import pytest

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from emchem.elements import ElementData, ElementTable, default_element_table  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> pathlib.Path:
    """Return repository root directory."""
    return REPO_ROOT


@pytest.fixture(scope="session")
def element_table() -> ElementTable:
    return default_element_table()


@pytest.fixture(scope="session")
def synthetic_table() -> ElementTable:
    donor = ElementData(
        atomic_number=11,
        symbol="Dn",
        name="Donorium",
        atomic_mass=20.0,
        electronegativity=0.9,
        ionization_energy=5.0,
        electron_affinity=0.5,
        covalent_radius=100.0,
        valence_electrons=1,
        period=3,
        group=1,
        category="alkali_metal",
    )
    acceptor = ElementData(
        atomic_number=17,
        symbol="Ac",
        name="Acceptorium",
        atomic_mass=35.0,
        electronegativity=3.2,
        ionization_energy=13.0,
        electron_affinity=3.0,
        covalent_radius=100.0,
        valence_electrons=7,
        period=3,
        group=17,
        category="halogen",
    )
    spectator = ElementData(
        atomic_number=30,
        symbol="Sp",
        name="Spectatorium",
        atomic_mass=10.0,
        electronegativity=0.0,
        valence_electrons=2,
        period=4,
        category="transition_metal",
    )
    return ElementTable([donor, acceptor, spectator])
