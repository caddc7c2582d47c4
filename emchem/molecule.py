"""Connected-component view of the bond graph."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from emchem.atom import Atom
from emchem.vector import Vector, vector_add, vector_scale, vector_zero


@dataclass(frozen=True)
class Molecule:
    id: int
    atom_indices: Tuple[int, ...]
    total_mass: float
    center_of_mass: Vector
    total_bond_energy: float
    formula: str

    @property
    def size(self) -> int:
        return len(self.atom_indices)


def hill_formula(symbols: Iterable[str]) -> str:
    """Carbon first, hydrogen second, everything else alphabetical."""
    counts = Counter(symbols)
    parts: List[str] = []

    def append(symbol: str, count: int) -> None:
        parts.append(symbol if count == 1 else f"{symbol}{count}")

    for leading in ("C", "H"):
        if leading in counts:
            append(leading, counts.pop(leading))
    for symbol in sorted(counts):
        append(symbol, counts[symbol])
    return "".join(parts)


class MoleculeTracker:
    """
    Rebuilds the molecule list from scratch on every ``update``.
    Nothing is patched incrementally, so the view cannot drift from the graph.
    """

    def __init__(self) -> None:
        self._molecules: List[Molecule] = []

    @property
    def molecules(self) -> List[Molecule]:
        return list(self._molecules)

    def count(self) -> int:
        return len(self._molecules)

    def __len__(self) -> int:
        return len(self._molecules)

    def update(self, atoms: Sequence[Atom]) -> List[Molecule]:
        count = len(atoms)
        visited = [False] * count
        molecules: List[Molecule] = []

        for start in range(count):
            if visited[start]:
                continue
            component: List[int] = []
            queue = deque([start])
            visited[start] = True
            while queue:
                current = queue.popleft()
                component.append(current)
                for bond in atoms[current].bonds:
                    other = bond.partner
                    if 0 <= other < count and not visited[other]:
                        visited[other] = True
                        queue.append(other)
            molecules.append(self._describe(len(molecules), component, atoms))

        self._molecules = molecules
        return self.molecules

    def formula_counts(self) -> Counter:
        """How many multi-atom molecules share each formula."""
        return Counter(m.formula for m in self._molecules if m.size > 1)

    @staticmethod
    def _describe(molecule_id: int, indices: List[int], atoms: Sequence[Atom]) -> Molecule:
        total_mass = 0.0
        weighted = vector_zero()
        geometric = vector_zero()
        bond_energy = 0.0
        for idx in indices:
            atom = atoms[idx]
            total_mass += atom.mass
            weighted = vector_add(weighted, vector_scale(atom.position, atom.mass))
            geometric = vector_add(geometric, atom.position)
            # Each undirected bond is stored twice; count it from the lower index.
            bond_energy += sum(
                bond.dissociation_energy for bond in atom.bonds if idx < bond.partner < len(atoms)
            )
        if total_mass > 0.0:
            center = vector_scale(weighted, 1.0 / total_mass)
        else:
            center = vector_scale(geometric, 1.0 / len(indices))
        formula = hill_formula(atoms[idx].symbol for idx in indices)
        return Molecule(
            id=molecule_id,
            atom_indices=tuple(indices),
            total_mass=total_mass,
            center_of_mass=center,
            total_bond_energy=bond_energy,
            formula=formula,
        )
