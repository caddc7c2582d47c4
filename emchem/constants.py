"""
Physical constants for the emergent chemistry engine.

Unit conventions:
    - Positions: Ångström (Å)
    - Velocities: Å / femtosecond (fs)
    - Time step: femtoseconds
    - Mass: atomic mass units (amu)
    - Charges: elementary charge (e)
    - Energies: electron-volts (eV)
    - Force outputs: eV/Å

Forces in eV/Å divided by a mass in amu give eV/(Å·amu); one amu·Å²/fs²
equals ``AMU_ANGSTROM2_PER_FS2_IN_EV`` eV, which is the only conversion the
integrator needs.
"""

from __future__ import annotations

KB_EV_PER_K = 8.617_333_262e-5
COULOMB_K_EV_ANGSTROM = 14.3996  # eV Å e^-2
AMU_ANGSTROM2_PER_FS2_IN_EV = 103.642_7
PM_TO_ANGSTROM = 0.01
BOHR_TO_ANGSTROM = 0.529_177

MIN_TEMPERATURE_K = 10.0
MAX_TEMPERATURE_K = 10_000.0
