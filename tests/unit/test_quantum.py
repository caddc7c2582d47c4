"""Tests for Slater screening, hydrogen-like orbitals and CDF sampling."""

from __future__ import annotations

import math

import numpy as np
import pytest

from emchem.electrons import fill_electron_shells
from emchem.quantum import (
    QuantumSampler,
    angular_factor,
    effective_nuclear_charge,
    electron_effective_charge,
    heatmap_color,
    probability_density,
    radial_cdf,
    radial_wavefunction,
    slater_shielding,
)


def nl_pairs(z: int):
    return [(e.n, e.l) for e in fill_electron_shells(z)]


def test_oxygen_two_p_effective_charge() -> None:
    assert slater_shielding(2, 1, nl_pairs(8)) == pytest.approx(3.45)
    assert effective_nuclear_charge(8, 2, 1, nl_pairs(8)) == pytest.approx(4.55)


def test_helium_one_s_effective_charge() -> None:
    assert effective_nuclear_charge(2, 1, 0, nl_pairs(2)) == pytest.approx(1.70)


def test_hydrogen_is_unscreened() -> None:
    assert effective_nuclear_charge(1, 1, 0, nl_pairs(1)) == pytest.approx(1.0)


def test_d_electrons_are_fully_screened_by_inner_groups() -> None:
    # Fe 3d: 18 inner electrons screen 1.00 each, five 3d partners 0.35 each.
    assert slater_shielding(3, 2, nl_pairs(26)) == pytest.approx(18 * 1.00 + 5 * 0.35 + 0.0)


def test_effective_charge_rises_across_period_two() -> None:
    charges = [effective_nuclear_charge(z, 2, 1, nl_pairs(z)) for z in range(5, 11)]
    assert all(b > a for a, b in zip(charges, charges[1:]))


def test_effective_charge_has_floor() -> None:
    assert effective_nuclear_charge(1, 3, 0, [(1, 0)] * 10) == pytest.approx(1.0)


def test_electron_effective_charge_uses_own_orbital() -> None:
    electrons = fill_electron_shells(8)
    assert electron_effective_charge(8, electrons[-1], electrons) == pytest.approx(4.55)
    assert electron_effective_charge(8, electrons[0], electrons) == pytest.approx(7.70)


@pytest.mark.parametrize(
    "z, target, inner",
    [
        (15, (3, 1), [(1, 0), (1, 0), (2, 0), (2, 0), (2, 1), (2, 1), (2, 1)]),
        (26, (3, 2), [(1, 0), (2, 0), (2, 1), (3, 0), (3, 1), (3, 1)]),
    ],
)
def test_inner_electrons_only_add_screening(z: int, target, inner) -> None:
    n, l = target
    electrons = [target]
    shielding = [slater_shielding(n, l, electrons)]
    charges = [effective_nuclear_charge(z, n, l, electrons)]
    for pair in inner:
        electrons = [pair] + electrons
        shielding.append(slater_shielding(n, l, electrons))
        charges.append(effective_nuclear_charge(z, n, l, electrons))
    assert all(b > a for a, b in zip(shielding, shielding[1:]))
    assert all(b <= a for a, b in zip(charges, charges[1:]))


def test_hydrogen_like_radial_values() -> None:
    # R_20 = (2 - r) e^{-r/2} / (2 sqrt 2), R_21 = r e^{-r/2} / (2 sqrt 6)
    assert radial_wavefunction(2, 0, 1.0, 1.0) == pytest.approx(math.exp(-0.5) / (2.0 * math.sqrt(2.0)))
    assert radial_wavefunction(2, 0, 1.0, 2.0) == pytest.approx(0.0, abs=1e-12)
    assert radial_wavefunction(2, 1, 1.0, 1.0) == pytest.approx(math.exp(-0.5) / (2.0 * math.sqrt(6.0)))


def test_angular_factor_values() -> None:
    assert angular_factor(1, 0, 0.0) == pytest.approx(1.0)
    assert abs(angular_factor(1, 1, math.acos(0.6))) == pytest.approx(0.8)
    assert abs(angular_factor(1, -1, math.acos(0.6))) == pytest.approx(0.8)
    assert angular_factor(2, 0, math.acos(0.5)) == pytest.approx(-0.125)


def test_p_plus_one_density_follows_sin_squared() -> None:
    equator = probability_density(2, 1, 1, 1.0, 2.0, math.pi / 2)
    tilted = probability_density(2, 1, 1, 1.0, 2.0, math.pi / 6)
    assert equator / tilted == pytest.approx(4.0)


@pytest.mark.parametrize("n, l", [(1, 0), (2, 0), (2, 1), (3, 2)])
def test_radial_functions_are_normalised(n: int, l: int) -> None:
    dr = 0.005
    r = np.arange(1, 20000) * dr
    total = float(np.sum(r * r * radial_wavefunction(n, l, 1.0, r) ** 2) * dr)
    assert total == pytest.approx(1.0, rel=1e-3)


def test_radial_wavefunction_scales_with_charge() -> None:
    assert radial_wavefunction(1, 0, 2.0, 0.0) == pytest.approx(2.0 * 2.0 ** 1.5)


def test_p_orbital_has_nodal_plane() -> None:
    assert probability_density(2, 1, 0, 1.0, 2.0, math.pi / 2) == pytest.approx(0.0, abs=1e-15)
    assert probability_density(2, 1, 0, 1.0, 2.0, 0.0) > 0.0


def test_radial_cdf_is_monotonic() -> None:
    r_max, cdf = radial_cdf(2, 1, 1.0)
    assert r_max == pytest.approx(40.0)
    assert cdf[0] == 0.0
    assert cdf[-1] == pytest.approx(1.0)
    assert all(b >= a for a, b in zip(cdf, cdf[1:]))


def test_heatmap_stops() -> None:
    assert heatmap_color(0.0) == (0.0, 0.0, 0.0, 1.0)
    assert heatmap_color(-3.0) == (0.0, 0.0, 0.0, 1.0)
    assert heatmap_color(1.0) == pytest.approx((1.0, 1.0, 1.0, 1.0))
    assert heatmap_color(7.0) == pytest.approx((1.0, 1.0, 1.0, 1.0))
    assert heatmap_color(0.2) == pytest.approx((0.5, 0.0, 0.99, 1.0))
    assert heatmap_color(0.1) == pytest.approx((0.25, 0.0, 0.495, 1.0))


def test_sampler_is_reproducible() -> None:
    first = [QuantumSampler(seed=11).sample_position(2, 1, 1, 3.0) for _ in range(3)]
    sampler_a = QuantumSampler(seed=11)
    sampler_b = QuantumSampler(seed=11)
    assert [sampler_a.sample_position(2, 1, 0, 4.55) for _ in range(5)] == [
        sampler_b.sample_position(2, 1, 0, 4.55) for _ in range(5)
    ]
    assert first[0] == first[1] == first[2]


def test_one_s_mean_radius() -> None:
    sampler = QuantumSampler(seed=5)
    radii = [sampler.sample_r(1, 0, 1.0) for _ in range(4000)]
    assert sum(radii) / len(radii) == pytest.approx(1.5, rel=0.05)

    heavier = [sampler.sample_r(1, 0, 4.0) for _ in range(4000)]
    assert sum(heavier) / len(heavier) == pytest.approx(1.5 / 4.0, rel=0.05)


def test_sampled_angles_stay_in_range() -> None:
    sampler = QuantumSampler(seed=2)
    for _ in range(200):
        assert 0.0 <= sampler.sample_theta(2, 1) <= math.pi
        assert 0.0 <= sampler.sample_phi() < 2.0 * math.pi


@pytest.mark.parametrize("n, l, m", [(1, 1, 0), (2, 1, 2), (0, 0, 0), (3, -1, 0)])
def test_invalid_quantum_numbers(n: int, l: int, m: int) -> None:
    with pytest.raises(ValueError):
        QuantumSampler(seed=0).sample_position(n, l, m, 1.0)
