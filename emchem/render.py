"""
Render-consumption adapters.

These turn simulation state into flat instance lists (spheres, cylinders,
point sprites) that any drawing backend can upload as-is. Nothing in here
mutates the simulation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from emchem.atom import Atom, BondType
from emchem.constants import BOHR_TO_ANGSTROM
from emchem.electrons import outermost_shell
from emchem.quantum import (
    RGBA,
    QuantumSampler,
    electron_effective_charge,
    heatmap_color,
    probability_density,
)
from emchem.simulation import Simulation
from emchem.vector import Vector, vector_add, vector_length, vector_scale

BOND_THICKNESS_PER_ORDER = 0.1
DEFAULT_CLOUD_SAMPLES = 200

BOND_COLORS: Dict[BondType, RGBA] = {
    BondType.IONIC: (1.0, 0.8, 0.2, 1.0),
    BondType.COVALENT: (0.5, 0.8, 1.0, 1.0),
    BondType.METALLIC: (0.7, 0.7, 0.7, 1.0),
    BondType.HYDROGEN: (0.6, 1.0, 0.6, 1.0),
    BondType.VAN_DER_WAALS: (0.4, 0.4, 0.4, 1.0),
}


@dataclass(frozen=True)
class AtomInstance:
    position: Vector
    radius: float
    color: RGBA


@dataclass(frozen=True)
class BondInstance:
    start: Vector
    end: Vector
    thickness: float
    color: RGBA


@dataclass(frozen=True)
class CloudPoint:
    position: Vector
    color: RGBA
    weight: float  # density relative to the densest sample, 0..1


@dataclass
class RenderOptions:
    show_bonds: bool = True
    show_cloud: bool = False
    cloud_samples_per_electron: int = DEFAULT_CLOUD_SAMPLES


@dataclass
class RenderFrame:
    atoms: List[AtomInstance] = field(default_factory=list)
    bonds: List[BondInstance] = field(default_factory=list)
    cloud: List[CloudPoint] = field(default_factory=list)


def atom_instances(atoms: Sequence[Atom]) -> List[AtomInstance]:
    return [
        AtomInstance(
            position=atom.position,
            radius=atom.visual_radius,
            color=(atom.element.color[0], atom.element.color[1], atom.element.color[2], 1.0),
        )
        for atom in atoms
    ]


def bond_instances(atoms: Sequence[Atom]) -> List[BondInstance]:
    """One cylinder per undirected bond, emitted from the lower index."""
    instances: List[BondInstance] = []
    count = len(atoms)
    for index, atom in enumerate(atoms):
        for bond in atom.bonds:
            if not index < bond.partner < count:
                continue
            instances.append(
                BondInstance(
                    start=atom.position,
                    end=atoms[bond.partner].position,
                    thickness=BOND_THICKNESS_PER_ORDER * bond.order,
                    color=BOND_COLORS.get(bond.bond_type, BOND_COLORS[BondType.METALLIC]),
                )
            )
    return instances


def orbital_cloud(
    atom: Atom,
    sampler: QuantumSampler,
    samples_per_electron: int = DEFAULT_CLOUD_SAMPLES,
) -> List[CloudPoint]:
    """
    Point cloud for the atom's outermost shell.

    Each valence electron contributes ``samples_per_electron`` draws from its
    own hydrogen-like orbital, screened by Slater's rules. Densities are
    normalised against the densest point of the whole cloud before colouring.
    """
    if not atom.electrons or samples_per_electron <= 0:
        return []
    shell = outermost_shell(atom.electrons)
    raw: List[Tuple[Vector, float]] = []
    for electron in atom.electrons:
        if electron.n != shell:
            continue
        z_eff = electron_effective_charge(atom.atomic_number, electron, atom.electrons)
        for _ in range(samples_per_electron):
            local = sampler.sample_position(electron.n, electron.l, electron.m, z_eff)
            r = vector_length(local)
            theta = _polar_angle(local, r)
            density = probability_density(electron.n, electron.l, electron.m, z_eff, r, theta)
            position = vector_add(atom.position, vector_scale(local, BOHR_TO_ANGSTROM))
            raw.append((position, density))

    peak = max((density for _, density in raw), default=0.0)
    points: List[CloudPoint] = []
    for position, density in raw:
        weight = density / peak if peak > 0.0 else 0.0
        points.append(CloudPoint(position=position, color=heatmap_color(weight), weight=weight))
    return points


def _polar_angle(local: Vector, r: float) -> float:
    # Inverse of spherical_to_cartesian: y carries r cos(theta).
    if r <= 0.0:
        return 0.0
    return math.acos(max(-1.0, min(1.0, local[1] / r)))


def build_frame(
    simulation: Simulation,
    options: Optional[RenderOptions] = None,
    sampler: Optional[QuantumSampler] = None,
) -> RenderFrame:
    """Collect everything a renderer needs for one frame, honouring the visibility flags."""
    options = options or RenderOptions()
    atoms = simulation.atoms
    frame = RenderFrame(atoms=atom_instances(atoms))
    if options.show_bonds:
        frame.bonds = bond_instances(atoms)
    if options.show_cloud:
        sampler = sampler or QuantumSampler(simulation.settings.seed)
        for atom in atoms:
            frame.cloud.extend(orbital_cloud(atom, sampler, options.cloud_samples_per_electron))
    return frame
