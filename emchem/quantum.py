"""
Hydrogen-like orbital sampling for electron-cloud visualization.

Multi-electron atoms are approximated by a single electron moving in the
screened charge given by Slater's rules. The numbers are only used to place
and colour cloud points; nothing here feeds back into the dynamics.
Distances are in Bohr radii of the bare nucleus (a0 = 1), so an orbital's
length scale is 1 / Z_eff.
"""

from __future__ import annotations

import math
import random
from functools import lru_cache
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
import scipy.special as sp

from emchem.electrons import Electron
from emchem.vector import Vector, clamp

RADIAL_SAMPLES = 4096
POLAR_SAMPLES = 2048
RADIAL_EXTENT = 10.0  # multiples of n^2 * a0

RGBA = Tuple[float, float, float, float]

FIRE_STOPS: Tuple[RGBA, ...] = (
    (0.0, 0.0, 0.0, 1.0),  # black
    (0.5, 0.0, 0.99, 1.0),  # purple
    (0.8, 0.0, 0.0, 1.0),  # red
    (1.0, 0.5, 0.0, 1.0),  # orange
    (1.0, 1.0, 0.0, 1.0),  # yellow
    (1.0, 1.0, 1.0, 1.0),  # white
)


# ----------------------------------------------------------------------
# Slater's rules
# ----------------------------------------------------------------------


def slater_group(n: int, l: int) -> int:
    """(1s)(2s2p)(3s3p)(3d)(4s4p)(4d)(4f)...: s and p share, d and f stand alone."""
    if l >= 2:
        return n * 10 + l
    return n * 10


def slater_shielding(target_n: int, target_l: int, electrons: Iterable[Tuple[int, int]]) -> float:
    """
    Total screening felt by one electron in the (target_n, target_l) orbital.

    ``electrons`` holds (n, l) for every electron of the atom. The target
    electron is assumed to be one of the same-group entries and does not
    screen itself.
    """
    target_group = slater_group(target_n, target_l)
    same_group_constant = 0.30 if target_n == 1 else 0.35
    inner_sp_group = (target_n - 1) * 10

    same_group = 0
    sigma = 0.0
    for n, l in electrons:
        group = slater_group(n, l)
        if group == target_group:
            same_group += 1
        elif group < target_group:
            if target_l >= 2:
                sigma += 1.00
            elif inner_sp_group <= group < target_group:
                sigma += 0.85
            else:
                sigma += 1.00
        # Higher groups do not screen.
    sigma += same_group_constant * max(0, same_group - 1)
    return sigma


def effective_nuclear_charge(atomic_number: int, target_n: int, target_l: int, electrons: Iterable[Tuple[int, int]]) -> float:
    return max(atomic_number - slater_shielding(target_n, target_l, electrons), 1.0)


def electron_effective_charge(atomic_number: int, electron: Electron, electrons: Sequence[Electron]) -> float:
    return effective_nuclear_charge(atomic_number, electron.n, electron.l, [(e.n, e.l) for e in electrons])


# ----------------------------------------------------------------------
# Wavefunctions
# ----------------------------------------------------------------------


def radial_wavefunction(n: int, l: int, z_eff: float, r):
    """R_nl(r) for a hydrogen-like atom of charge z_eff; ``r`` may be a scalar or an array."""
    a0 = 1.0 / z_eff
    rho = 2.0 * np.asarray(r, dtype=float) / (n * a0)
    laguerre = sp.assoc_laguerre(rho, n - l - 1, 2 * l + 1)
    norm = (2.0 / (n * a0)) ** 3 * math.gamma(n - l) / (2.0 * n * math.gamma(n + l + 1))
    return np.sqrt(norm) * np.exp(-rho / 2.0) * rho**l * laguerre


def angular_factor(l: int, m: int, theta):
    """P_l^|m|(cos theta); the sign convention drops out once squared."""
    return sp.lpmv(abs(m), l, np.cos(theta))


def probability_density(n: int, l: int, m: int, z_eff: float, r: float, theta: float, phi: float = 0.0) -> float:
    """|R|^2 |P_l^m(cos theta)|^2; the azimuthal factor has unit modulus."""
    radial = radial_wavefunction(n, l, z_eff, r)
    angular = angular_factor(l, m, theta)
    return float(radial * radial * angular * angular)


def spherical_to_cartesian(r: float, theta: float, phi: float) -> Vector:
    # y is the polar axis, matching the renderer's up vector.
    return (
        r * math.sin(theta) * math.cos(phi),
        r * math.cos(theta),
        r * math.sin(theta) * math.sin(phi),
    )


def heatmap_color(value: float) -> RGBA:
    """Fire ramp black -> purple -> red -> orange -> yellow -> white."""
    value = clamp(value, 0.0, 1.0)
    scaled = value * (len(FIRE_STOPS) - 1)
    i = int(scaled)
    j = min(i + 1, len(FIRE_STOPS) - 1)
    t = scaled - i
    lo, hi = FIRE_STOPS[i], FIRE_STOPS[j]
    return (
        lo[0] + t * (hi[0] - lo[0]),
        lo[1] + t * (hi[1] - lo[1]),
        lo[2] + t * (hi[2] - lo[2]),
        lo[3] + t * (hi[3] - lo[3]),
    )


# ----------------------------------------------------------------------
# CDF sampling
# ----------------------------------------------------------------------


def _normalize(weights: np.ndarray) -> np.ndarray:
    cdf = np.cumsum(weights)
    total = cdf[-1]
    if total <= 0.0:
        return np.linspace(0.0, 1.0, len(cdf))
    return cdf / total


@lru_cache(maxsize=256)
def radial_cdf(n: int, l: int, z_eff: float, samples: int = RADIAL_SAMPLES) -> Tuple[float, np.ndarray]:
    """Return (r_max, cdf) for the radial density r^2 R(r)^2 on a uniform grid."""
    r_max = RADIAL_EXTENT * n * n / z_eff
    r = np.linspace(0.0, r_max, samples)
    radial = radial_wavefunction(n, l, z_eff, r)
    return r_max, _normalize(r * r * radial * radial)


@lru_cache(maxsize=256)
def polar_cdf(l: int, m: int, samples: int = POLAR_SAMPLES) -> np.ndarray:
    theta = np.linspace(0.0, math.pi, samples)
    plm = angular_factor(l, m, theta)
    return _normalize(np.maximum(0.0, np.sin(theta) * plm * plm))


def _invert(cdf: np.ndarray, u: float) -> int:
    return min(int(np.searchsorted(cdf, u)), len(cdf) - 1)


class QuantumSampler:
    """Draws positions from |psi_nlm|^2 for a screened hydrogen-like electron."""

    def __init__(self, seed: Optional[int] = None):
        self.random = random.Random(seed)

    def sample_r(self, n: int, l: int, z_eff: float) -> float:
        r_max, cdf = radial_cdf(n, l, round(z_eff, 4))
        return _invert(cdf, self.random.random()) * r_max / (len(cdf) - 1)

    def sample_theta(self, l: int, m: int) -> float:
        cdf = polar_cdf(l, abs(m))
        return _invert(cdf, self.random.random()) * math.pi / (len(cdf) - 1)

    def sample_phi(self) -> float:
        return 2.0 * math.pi * self.random.random()

    def sample_position(self, n: int, l: int, m: int, z_eff: float) -> Vector:
        if not 0 <= l < n or abs(m) > l:
            raise ValueError(f"Invalid quantum numbers n={n}, l={l}, m={m}.")
        r = self.sample_r(n, l, z_eff)
        theta = self.sample_theta(l, m)
        phi = self.sample_phi()
        return spherical_to_cartesian(r, theta, phi)
