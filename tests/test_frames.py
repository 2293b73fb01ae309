"""Tests for the ancillax.frames and ancillax.orbit_dynamics modules.

Tests cover:
- ECI <-> ECEF rotation properties and state round trips
- Orbital frame construction and degenerate inputs
- Point-mass and J2 gravity
"""

import jax
import jax.numpy as jnp
import pytest

from ancillax.attitude_representations import Rz
from ancillax.calibration import EarthConstants
from ancillax.constants import GM_EARTH, J2_EARTH, OMEGA_EARTH, R_EARTH
from ancillax.frames import (
    rotation_ecef_to_eci,
    rotation_eci_to_ecef,
    rotation_eci_to_orbit,
    state_ecef_to_eci,
    state_eci_to_ecef,
)
from ancillax.orbit_dynamics import accel_gravity, accel_j2, accel_point_mass
from ancillax.time import gmst

_T = 7.6e8  # seconds since J2000, early 2024


def _inclined_eci_state(sma=R_EARTH + 705e3, inc_deg=98.2):
    """Create a circular inclined orbit state in ECI."""
    v_circ = float(jnp.sqrt(GM_EARTH / sma))
    inc = jnp.deg2rad(inc_deg)
    return jnp.array([sma, 0.0, 0.0, 0.0, v_circ * jnp.cos(inc), v_circ * jnp.sin(inc)])


# ──────────────────────────────────────────────
# ECI <-> ECEF
# ──────────────────────────────────────────────


class TestEciEcef:
    def test_rotation_is_gmst_about_z(self):
        assert jnp.allclose(rotation_eci_to_ecef(_T), Rz(gmst(_T)), atol=1e-15)

    def test_rotation_orthonormal(self):
        R = rotation_eci_to_ecef(_T)
        assert jnp.allclose(R @ R.T, jnp.eye(3), atol=1e-12)

    def test_inverse_is_transpose(self):
        assert jnp.allclose(rotation_ecef_to_eci(_T), rotation_eci_to_ecef(_T).T)

    def test_state_roundtrip(self):
        x = _inclined_eci_state()
        back = state_ecef_to_eci(_T, state_eci_to_ecef(_T, x))
        assert jnp.allclose(back[:3], x[:3], atol=1e-6)
        assert jnp.allclose(back[3:], x[3:], atol=1e-9)

    def test_earth_fixed_point_moves_in_eci(self):
        """A point at rest on the equator moves at omega * R in ECI."""
        x_ecef = jnp.array([R_EARTH, 0.0, 0.0, 0.0, 0.0, 0.0])
        x_eci = state_ecef_to_eci(_T, x_ecef)
        speed = float(jnp.linalg.norm(x_eci[3:]))
        assert speed == pytest.approx(OMEGA_EARTH * R_EARTH, rel=1e-12)

    def test_vmap_over_times(self):
        times = _T + jnp.arange(5.0)
        states = jnp.tile(_inclined_eci_state(), (5, 1))
        out = jax.vmap(state_eci_to_ecef)(times, states)
        assert out.shape == (5, 6)
        radii = jnp.linalg.norm(out[:, :3], axis=1)
        assert jnp.allclose(radii, R_EARTH + 705e3)


# ──────────────────────────────────────────────
# Orbital frame
# ──────────────────────────────────────────────


class TestOrbitalFrame:
    def test_equatorial_axes(self):
        """x along velocity, y along -orbit normal, z to nadir."""
        M = rotation_eci_to_orbit(jnp.array([7.0e6, 0.0, 0.0]), jnp.array([0.0, 7.5e3, 0.0]))
        expected = jnp.array([
            [0.0, 1.0, 0.0],
            [0.0, 0.0, -1.0],
            [-1.0, 0.0, 0.0],
        ])
        assert jnp.allclose(M, expected, atol=1e-15)

    def test_proper_rotation(self):
        x = _inclined_eci_state()
        M = rotation_eci_to_orbit(x[:3], x[3:] + jnp.array([10.0, -3.0, 1.0]))
        assert jnp.allclose(M @ M.T, jnp.eye(3), atol=1e-12)
        assert float(jnp.linalg.det(M)) == pytest.approx(1.0, abs=1e-12)

    def test_nadir_maps_to_z(self):
        x = _inclined_eci_state()
        M = rotation_eci_to_orbit(x[:3], x[3:])
        nadir = -x[:3] / jnp.linalg.norm(x[:3])
        assert jnp.allclose(M @ nadir, jnp.array([0.0, 0.0, 1.0]), atol=1e-12)

    def test_zero_position_is_not_finite(self):
        M = rotation_eci_to_orbit(jnp.zeros(3), jnp.array([0.0, 7.5e3, 0.0]))
        assert not bool(jnp.all(jnp.isfinite(M)))

    def test_parallel_velocity_is_not_finite(self):
        M = rotation_eci_to_orbit(jnp.array([7.0e6, 0.0, 0.0]), jnp.array([10.0, 0.0, 0.0]))
        assert not bool(jnp.all(jnp.isfinite(M)))


# ──────────────────────────────────────────────
# Gravity
# ──────────────────────────────────────────────


class TestGravity:
    def test_point_mass_magnitude(self):
        r = jnp.array([R_EARTH + 705e3, 0.0, 0.0])
        a = accel_point_mass(r, GM_EARTH)
        assert float(jnp.linalg.norm(a)) == pytest.approx(GM_EARTH / (R_EARTH + 705e3) ** 2)
        assert float(a[0]) < 0.0

    def test_j2_strengthens_equatorial_pull(self):
        r = jnp.array([R_EARTH + 705e3, 0.0, 0.0])
        a = accel_j2(r, GM_EARTH, R_EARTH, J2_EARTH)
        expected = -1.5 * J2_EARTH * GM_EARTH * R_EARTH**2 / (R_EARTH + 705e3) ** 4
        assert float(a[0]) == pytest.approx(expected)
        assert jnp.allclose(a[1:], 0.0)

    def test_j2_polar(self):
        r = jnp.array([0.0, 0.0, R_EARTH + 705e3])
        a = accel_j2(r, GM_EARTH, R_EARTH, J2_EARTH)
        expected = 3.0 * J2_EARTH * GM_EARTH * R_EARTH**2 / (R_EARTH + 705e3) ** 4
        assert float(a[2]) == pytest.approx(expected)

    def test_total_is_sum(self):
        r = _inclined_eci_state()[:3] + jnp.array([0.0, 1.0e5, 2.0e5])
        total = accel_gravity(r, EarthConstants())
        parts = accel_point_mass(r, GM_EARTH) + accel_j2(r, GM_EARTH, R_EARTH, J2_EARTH)
        assert jnp.allclose(total, parts)

    def test_accepts_state_vector(self):
        x = _inclined_eci_state()
        assert jnp.allclose(accel_gravity(x), accel_gravity(x[:3]))

    def test_invalid_earth_constants(self):
        with pytest.raises(ValueError, match="gravity_constant must be positive"):
            EarthConstants(gravity_constant=0.0)
