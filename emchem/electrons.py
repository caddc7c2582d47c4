"""Electron quantum numbers and Aufbau shell filling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

# (n, l) subshells sorted by n + l, then n.
AUFBAU_ORDER: Tuple[Tuple[int, int], ...] = (
    (1, 0), (2, 0), (2, 1), (3, 0), (3, 1), (4, 0), (3, 2), (4, 1), (5, 0), (4, 2),
    (5, 1), (6, 0), (4, 3), (5, 2), (6, 1), (7, 0), (5, 3), (6, 2), (7, 1), (6, 3),
)

SUBSHELL_LETTERS = "spdf"


@dataclass(frozen=True)
class Electron:
    n: int = 1
    l: int = 0
    m: int = 0
    s: int = 1  # +1 / -1 for spin up / down

    @property
    def subshell(self) -> str:
        return f"{self.n}{SUBSHELL_LETTERS[self.l]}"


def subshell_capacity(l: int) -> int:
    return 2 * (2 * l + 1)


def fill_electron_shells(atomic_number: int) -> List[Electron]:
    """
    Build the ground-state electron list for a neutral atom.

    Each subshell cycles m from -l to +l and places spin up then spin down
    on every m before advancing, so the last element is the outermost
    electron in filling order.
    """
    electrons: List[Electron] = []
    remaining = max(0, atomic_number)
    for n, l in AUFBAU_ORDER:
        if remaining <= 0:
            break
        to_fill = min(remaining, subshell_capacity(l))
        for m in range(-l, l + 1):
            for spin in (1, -1):
                if to_fill <= 0:
                    break
                electrons.append(Electron(n=n, l=l, m=m, s=spin))
                to_fill -= 1
                remaining -= 1
    return electrons


def outermost_shell(electrons: Sequence[Electron]) -> int:
    return max((e.n for e in electrons), default=0)


def count_valence_electrons(electrons: Sequence[Electron]) -> int:
    max_n = outermost_shell(electrons)
    return sum(1 for e in electrons if e.n == max_n) if electrons else 0


def configuration_string(electrons: Sequence[Electron]) -> str:
    """Compact notation such as ``1s2 2s2 2p4``, in filling order."""
    counts: List[Tuple[str, int]] = []
    for electron in electrons:
        label = electron.subshell
        if counts and counts[-1][0] == label:
            counts[-1] = (label, counts[-1][1] + 1)
        else:
            counts.append((label, 1))
    return " ".join(f"{label}{count}" for label, count in counts)
