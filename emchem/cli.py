"""
Headless scenario runner.

Loads a YAML scenario, advances it frame by frame and reports reactions as
they happen, then prints the molecules present at the end of the run.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
from typing import List, Optional, Sequence

from emchem.config_loader import load_simulation_from_yaml
from emchem.simulation import Simulation

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run an emergent chemistry scenario without a window.")
    parser.add_argument(
        "scenario",
        type=pathlib.Path,
        help="Path to a scenario YAML file (see config/presets).",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=20,
        help="Number of frames to run; each frame is `substeps` integration steps.",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=None,
        help="Thermostat target in kelvin, clamped to 10-10000 K.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for spawn velocities and stochastic bond breaking.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def parse_args(parser: argparse.ArgumentParser, argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    args = parser.parse_args(argv)
    if args.frames < 0:
        parser.error("--frames must be non-negative.")
    if not args.scenario.exists():
        parser.error(f"scenario file {args.scenario} does not exist.")
    return args


def molecule_summary(simulation: Simulation) -> List[str]:
    """Human-readable lines, most common multi-atom formula first."""
    lines = [f"{count} x {formula}" for formula, count in simulation.tracker.formula_counts().most_common()]
    free_atoms = sum(1 for molecule in simulation.molecules if molecule.size == 1)
    if free_atoms:
        lines.append(f"{free_atoms} free atom(s)")
    return lines


def run(simulation: Simulation, frames: int) -> int:
    """Advance ``frames`` frames, logging reactions as they appear. Returns the event count."""
    reported = len(simulation.reaction_log)
    for frame in range(frames):
        simulation.advance_frame()
        events = simulation.reaction_log
        for event in events[reported:]:
            logger.info("[Reaction] %.1f fs: %s", event.time, event.description)
        reported = len(events)
        logger.debug(
            "Frame %d: t=%.1f fs, T=%.1f K, %d bonds",
            frame + 1,
            simulation.sim_time,
            simulation.current_temperature(),
            simulation.bond_count(),
        )
    return reported


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parse_args(parser, argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    overrides = {"seed": args.seed, "target_temperature_k": args.temperature}
    try:
        bundle = load_simulation_from_yaml(args.scenario, overrides=overrides)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))
    simulation = bundle.simulation

    name = bundle.metadata.get("name", args.scenario.stem)
    logger.info("Running %s: %d atoms for %d frames", name, len(simulation.atoms), args.frames)
    events = run(simulation, args.frames)
    logger.info(
        "Finished at %.1f fs with %d reaction events, %d molecules",
        simulation.sim_time,
        events,
        len(simulation.molecules),
    )

    print(f"Molecules after {simulation.sim_time:.1f} fs:")  # noqa: T201 (informational)
    for line in molecule_summary(simulation):
        print(f"  {line}")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
