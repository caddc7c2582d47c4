"""Element property registry used by every physics module."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]

DEFAULT_ELEMENTS_PATH = Path(__file__).resolve().parent / "data" / "elements.json"


@dataclass(frozen=True)
class ElementData:
    atomic_number: int = 0
    symbol: str = "?"
    name: str = "Unknown"
    atomic_mass: float = 0.0
    electronegativity: float = 0.0
    ionization_energy: float = 0.0  # eV
    electron_affinity: float = 0.0  # eV
    atomic_radius: float = 100.0  # pm
    covalent_radius: float = 100.0  # pm
    vdw_radius: float = 150.0  # pm
    valence_electrons: int = 0
    period: int = 0
    group: int = 0
    category: str = "unknown"
    electron_config: Tuple[int, ...] = field(default_factory=tuple)
    oxidation_states: Tuple[int, ...] = field(default_factory=tuple)
    color: Color = (1.0, 1.0, 1.0)

    @property
    def is_noble_gas(self) -> bool:
        return self.category == "noble_gas"


EMPTY_ELEMENT = ElementData()


class ElementTable:
    """
    Read-only mapping from atomic number to ElementData.
    Unknown atomic numbers resolve to ``EMPTY_ELEMENT`` instead of raising.
    """

    def __init__(self, elements: Iterable[ElementData] = ()):
        self._by_number: Dict[int, ElementData] = {}
        for element in elements:
            self._by_number[element.atomic_number] = element
        self._by_symbol = {element.symbol: element for element in self._by_number.values()}

    def get(self, atomic_number: int) -> ElementData:
        return self._by_number.get(atomic_number, EMPTY_ELEMENT)

    def has(self, atomic_number: int) -> bool:
        return atomic_number in self._by_number

    def by_symbol(self, symbol: str) -> Optional[ElementData]:
        return self._by_symbol.get(symbol)

    def __len__(self) -> int:
        return len(self._by_number)

    def __iter__(self) -> Iterator[ElementData]:
        return iter(sorted(self._by_number.values(), key=lambda e: e.atomic_number))


def _value(entry: Dict[str, Any], key: str, default: Any) -> Any:
    value = entry.get(key)
    return default if value is None else value


def element_from_record(entry: Dict[str, Any]) -> ElementData:
    """Build an ElementData from one JSON record, tolerating null fields."""
    color = entry.get("color_rgb")
    if color is not None:
        rgb: Color = (float(color[0]) / 255.0, float(color[1]) / 255.0, float(color[2]) / 255.0)
    else:
        rgb = (1.0, 1.0, 1.0)
    return ElementData(
        atomic_number=int(_value(entry, "atomic_number", 0)),
        symbol=str(_value(entry, "symbol", "?")),
        name=str(_value(entry, "name", "Unknown")),
        atomic_mass=float(_value(entry, "atomic_mass", 1.0)),
        electronegativity=float(_value(entry, "electronegativity", 0.0)),
        ionization_energy=float(_value(entry, "ionization_energy_eV", 0.0)),
        electron_affinity=float(_value(entry, "electron_affinity_eV", 0.0)),
        atomic_radius=float(_value(entry, "atomic_radius_pm", 100.0)),
        covalent_radius=float(_value(entry, "covalent_radius_pm", 100.0)),
        vdw_radius=float(_value(entry, "vdw_radius_pm", 150.0)),
        valence_electrons=int(_value(entry, "valence_electrons", 0)),
        period=int(_value(entry, "period", 0)),
        group=int(_value(entry, "group", 0)),
        category=str(_value(entry, "category", "unknown")),
        electron_config=tuple(int(v) for v in _value(entry, "electron_config", [])),
        oxidation_states=tuple(int(v) for v in _value(entry, "oxidation_states", [])),
        color=rgb,
    )


def load_element_table(path: Path) -> ElementTable:
    """Load an element database keyed by symbol (or a plain list of records)."""
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, dict):
        records = list(data.values())
    elif isinstance(data, list):
        records = data
    else:
        raise ValueError(f"Element file {path} must contain a mapping or a list of records.")
    table = ElementTable(element_from_record(entry) for entry in records)
    logger.info("Loaded %d elements from %s", len(table), path)
    return table


@lru_cache(maxsize=1)
def default_element_table() -> ElementTable:
    """Packaged element table, loaded once per process."""
    return load_element_table(DEFAULT_ELEMENTS_PATH)
