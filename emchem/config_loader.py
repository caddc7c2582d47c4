"""
Utilities for loading emchem scenarios from YAML configuration files.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from emchem.elements import ElementTable, default_element_table, load_element_table
from emchem.interaction import (
    BreakPolicy,
    DeterministicThermalBreak,
    InteractionEngine,
    StochasticThermalBreak,
)
from emchem.simulation import Simulation, SimulationSettings

ENGINE_FIELDS = (
    "coulomb_k",
    "lj_epsilon",
    "bonding_range",
    "ionic_threshold",
    "cutoff",
    "switch_distance",
    "min_distance",
    "vsepr_k",
    "bond_stiffness",
    "overlap_width",
    "covalent_stability_factor",
    "ionic_stability_factor",
)


@dataclass
class SimulationBundle:
    """Container returned by configuration loader."""

    simulation: Simulation
    metadata: Dict[str, Any]


def load_simulation_from_yaml(
    path: Path,
    *,
    elements: Optional[ElementTable] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SimulationBundle:
    """
    Load a Simulation, with its atoms spawned, plus associated metadata from a YAML config.

    ``overrides`` replaces keys of the ``simulation`` section before any atom is
    spawned, so a seed or temperature given here also governs spawn velocities.
    """
    path = Path(path)
    data = _load_yaml(path)
    simulation_config = dict(data.get("simulation") or {})
    simulation_config.update({key: value for key, value in (overrides or {}).items() if value is not None})
    if elements is None:
        elements = _resolve_elements(path, data.get("elements_path"))
    settings = _build_settings(simulation_config)
    engine = _build_engine(data.get("interactions") or {}, settings.seed)

    simulation = Simulation(elements=elements, settings=settings, engine=engine)
    _spawn_atoms(simulation, (data.get("system") or {}).get("atoms") or [])
    return SimulationBundle(simulation=simulation, metadata=data.get("metadata") or {})


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle)
    if not isinstance(content, dict):
        raise ValueError(f"YAML file {path} must contain a mapping at the root.")
    return content


def _resolve_elements(path: Path, elements_path: Optional[str]) -> ElementTable:
    if not elements_path:
        return default_element_table()
    candidate = Path(elements_path)
    if not candidate.is_absolute():
        candidate = path.parent / candidate
    return load_element_table(candidate)


def _build_settings(config: Dict[str, Any]) -> SimulationSettings:
    seed = config.get("seed")
    tau = config.get("thermostat_tau_fs", 100.0)
    return SimulationSettings(
        timestep_fs=float(config.get("timestep_fs", 1.0)),
        substeps=int(config.get("substeps", 50)),
        world_half_extent=float(config.get("world_half_extent_angstrom", 50.0)),
        target_temperature_k=float(config.get("target_temperature_k", 300.0)),
        thermostat_tau_fs=None if tau is None else float(tau),
        bond_update_interval=int(config.get("bond_update_interval", 10)),
        seed=None if seed is None else int(seed),
    )


def _build_engine(config: Dict[str, Any], seed: Optional[int]) -> InteractionEngine:
    kwargs = {name: float(config[name]) for name in ENGINE_FIELDS if config.get(name) is not None}
    return InteractionEngine(break_policy=_build_break_policy(config, seed), **kwargs)


def _build_break_policy(config: Dict[str, Any], seed: Optional[int]) -> BreakPolicy:
    mode = str(config.get("thermal_break", "deterministic")).lower()
    if mode == "deterministic":
        return DeterministicThermalBreak(threshold=float(config.get("break_threshold", 0.5)))
    if mode == "stochastic":
        return StochasticThermalBreak(rng=random.Random(seed))
    raise ValueError(f"thermal_break must be 'deterministic' or 'stochastic', got {mode!r}.")


def _spawn_atoms(simulation: Simulation, atom_list: List[Dict[str, Any]]) -> None:
    for atom in atom_list:
        position = atom.get("position_angstrom")
        if position is None:
            raise ValueError("Each atom requires position_angstrom.")
        simulation.spawn_atom(_atomic_number(simulation.elements, atom), _tuple3(position))


def _atomic_number(elements: ElementTable, atom: Dict[str, Any]) -> int:
    if atom.get("atomic_number") is not None:
        return int(atom["atomic_number"])
    symbol = atom.get("element")
    if symbol is None:
        raise ValueError("Each atom requires element or atomic_number.")
    element = elements.by_symbol(str(symbol))
    if element is None:
        raise ValueError(f"Unknown element symbol {symbol!r}.")
    return element.atomic_number


def _tuple3(value: Any) -> Tuple[float, float, float]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValueError("Vector field must be iterable with 3 numbers.")
    values = list(value)
    if len(values) != 3:
        raise ValueError("Vector field must contain exactly 3 entries.")
    return float(values[0]), float(values[1]), float(values[2])
