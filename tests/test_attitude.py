"""Tests for the ancillax.attitude module.

Tests cover:
- Quaternion to roll/pitch/yaw for celestial and Earth-viewing references
- Invalid sample filling and the mean attitude reference
- Gyro increment to rate conversion
- Orbital motion removal on a circular equatorial orbit
- Attitude computation without gyro data and its coverage checks
- Final attitude record assembly
"""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from ancillax.attitude import (
    SpacecraftAttitude,
    compute_spacecraft_attitude,
    convert_imu_to_attitude,
    correct_imu_orbital_motion,
    eci_to_orbit_at_times,
    increments_to_rates,
    quaternion_to_attitude,
    replace_invalid_attitude,
)
from ancillax.attitude_representations import (
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
    rpy_to_matrix,
)
from ancillax.constants import GM_EARTH
from ancillax.ephemeris import EphemerisSeries
from ancillax.errors import CoverageError, InsufficientDataError
from ancillax.frames import rotation_ecef_to_eci, state_eci_to_ecef
from ancillax.telemetry import AcquisitionType, ImuWindow, QuaternionWindow
from ancillax.time import j2000_seconds_to_year_doy_sod

_SMA = 6378137.0 + 705.0e3
_MEAN_MOTION = float(jnp.sqrt(GM_EARTH / _SMA**3))
_T0 = 760_000_000.0


def _equatorial_series(n=60, t0=_T0):
    """Ephemeris series of a circular equatorial orbit sampled at 1 Hz."""
    sfe = jnp.arange(float(n))
    u = _MEAN_MOTION * sfe
    r = _SMA * jnp.stack([jnp.cos(u), jnp.sin(u), jnp.zeros(n)], axis=1)
    v = _SMA * _MEAN_MOTION * jnp.stack([-jnp.sin(u), jnp.cos(u), jnp.zeros(n)], axis=1)
    x_ecef = jax.vmap(state_eci_to_ecef)(t0 + sfe, jnp.concatenate([r, v], axis=1))
    return EphemerisSeries(
        utc_epoch_time=j2000_seconds_to_year_doy_sod(t0),
        seconds_from_epoch=sfe,
        eci_position=r,
        eci_velocity=v,
        ecef_position=x_ecef[:, :3],
        ecef_velocity=x_ecef[:, 3:],
    )


def _imu_times(n=200, start=_T0 + 5.0):
    return start + 0.02 * np.arange(n)


def _identity_quaternions(n):
    q = np.zeros((n, 4))
    q[:, 0] = 1.0
    return q


def _windows(imu_time, q_time, imu_valid=False):
    n = imu_time.shape[0]
    m = q_time.shape[0]
    imu = ImuWindow(
        time=imu_time,
        data=np.zeros((n, 3)),
        valid=np.full(n, imu_valid),
        count=n,
        invalid_count=0 if imu_valid else n,
        epoch=j2000_seconds_to_year_doy_sod(imu_time[0]),
        ephemeris_start=_T0,
        ephemeris_stop=_T0 + 59.0,
        imu_valid=imu_valid,
    )
    quaternions = QuaternionWindow(
        time=q_time,
        quaternion=_identity_quaternions(m),
        valid=np.ones(m, dtype=bool),
        count=m,
        invalid_count=0,
        interpolate=False,
    )
    return imu, quaternions


# ──────────────────────────────────────────────
# Quaternion attitude
# ──────────────────────────────────────────────


class TestQuaternionToAttitude:
    _ANGLES = jnp.array([0.01, -0.02, 0.03])

    def test_celestial(self):
        q = rotation_matrix_to_quaternion(rpy_to_matrix(self._ANGLES))
        out = quaternion_to_attitude(q[None], jnp.array([_T0]), _equatorial_series(), AcquisitionType.STELLAR)
        assert jnp.allclose(out[0], self._ANGLES, atol=1e-12)

    def test_earth_relative_to_orbit(self):
        series = _equatorial_series()
        times = jnp.array([_T0 + 10.0, _T0 + 20.5])
        eci2orb = eci_to_orbit_at_times(series, times)
        q = jax.vmap(rotation_matrix_to_quaternion)(rpy_to_matrix(self._ANGLES) @ eci2orb)

        out = quaternion_to_attitude(q, times, series, AcquisitionType.EARTH)
        assert out.shape == (2, 3)
        assert jnp.allclose(out, self._ANGLES, atol=1e-10)


class TestReplaceInvalid:
    def test_fill_rules(self):
        values = np.array([1.0, 99.0, 3.0, 99.0, 99.0, 6.0, 99.0])
        attitude = np.stack([values, 2.0 * values, -values], axis=1)
        valid = np.array([True, False, True, False, False, True, False])

        filled, mean = replace_invalid_attitude(attitude, valid)

        np.testing.assert_allclose(filled[:, 0], [1.0, 2.0, 3.0, 3.0, 4.5, 6.0, 0.0])
        np.testing.assert_allclose(filled[:, 1], 2.0 * filled[:, 0])
        np.testing.assert_allclose(mean, [10.0 / 3.0, 20.0 / 3.0, -10.0 / 3.0])

    def test_invalid_first_sample_zeroed(self):
        attitude = np.array([[5.0, 5.0, 5.0], [1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
        filled, _ = replace_invalid_attitude(attitude, np.array([False, True, True]))
        np.testing.assert_allclose(filled[0], 0.0)

    def test_input_not_modified(self):
        attitude = np.array([[1.0, 1.0, 1.0], [9.0, 9.0, 9.0], [3.0, 3.0, 3.0]])
        replace_invalid_attitude(attitude, np.array([True, False, True]))
        assert attitude[1, 0] == 9.0

    def test_all_invalid_raises(self):
        with pytest.raises(InsufficientDataError, match="No valid attitude"):
            replace_invalid_attitude(np.zeros((3, 3)), np.zeros(3, dtype=bool))


def test_increments_to_rates():
    time = np.array([0.0, 0.02, 0.04, 0.08])
    increments = np.ones((4, 3)) * 0.02
    rates = increments_to_rates(time, increments)
    np.testing.assert_allclose(rates[:, 0], [1.0, 1.0, 1.0, 0.5])


# ──────────────────────────────────────────────
# Orbital motion
# ──────────────────────────────────────────────


class TestOrbitalMotion:
    def test_zero_gyro_sees_negative_mean_motion_in_pitch(self):
        imu_time = _imu_times(100)
        rates = correct_imu_orbital_motion(
            AcquisitionType.EARTH, _equatorial_series(), jnp.zeros(3), imu_time, jnp.zeros((100, 3))
        )
        assert rates.shape == (100, 3)
        assert jnp.allclose(rates[:, 1], -_MEAN_MOTION, rtol=1e-5)
        assert jnp.allclose(rates[:, 0], 0.0, atol=1e-12)
        assert jnp.allclose(rates[:, 2], 0.0, atol=1e-12)

    def test_first_sample_repeats_second(self):
        imu_time = _imu_times(10)
        rates = correct_imu_orbital_motion(
            AcquisitionType.EARTH, _equatorial_series(), jnp.zeros(3), imu_time, jnp.zeros((10, 3))
        )
        assert jnp.allclose(rates[0], rates[1])

    def test_gyro_rate_is_negated(self):
        imu_time = _imu_times(10)
        gyro = jnp.tile(jnp.array([1.0e-3, 0.0, -2.0e-3]), (10, 1))
        rates = correct_imu_orbital_motion(
            AcquisitionType.EARTH, _equatorial_series(), jnp.zeros(3), imu_time, gyro
        )
        assert jnp.allclose(rates[:, 0], -1.0e-3, atol=1e-12)
        assert jnp.allclose(rates[:, 2], 2.0e-3, atol=1e-12)

    def test_celestial_only_negates(self):
        gyro = jnp.ones((5, 3))
        rates = correct_imu_orbital_motion(
            AcquisitionType.LUNAR, _equatorial_series(), jnp.zeros(3), _imu_times(5), gyro
        )
        assert jnp.allclose(rates, -1.0)


# ──────────────────────────────────────────────
# Attitude computation
# ──────────────────────────────────────────────


class TestComputeSpacecraftAttitude:
    def test_quaternion_only_celestial(self):
        imu_time = _imu_times(100)
        imu, quaternions = _windows(imu_time, imu_time[1:].copy())

        att = compute_spacecraft_attitude(
            AcquisitionType.STELLAR, _equatorial_series(), imu, quaternions
        )
        assert not att.smoothed
        assert att.angles.shape == (99, 3)
        assert jnp.allclose(att.angles, 0.0, atol=1e-12)
        assert float(att.time[0]) == 0.0
        assert att.imu_start == pytest.approx(imu_time[1])
        assert jnp.allclose(att.imu_epoch, j2000_seconds_to_year_doy_sod(imu_time[1]))

    def test_quaternions_outside_ephemeris_raise(self):
        imu_time = _imu_times(100)
        imu, quaternions = _windows(imu_time, imu_time + 100.0)
        with pytest.raises(CoverageError, match="does not cover quaternions"):
            compute_spacecraft_attitude(
                AcquisitionType.STELLAR, _equatorial_series(), imu, quaternions
            )

    def test_interval_not_covered_raises(self):
        imu_time = _imu_times(100)
        imu, quaternions = _windows(imu_time, imu_time.copy())
        interval = (
            j2000_seconds_to_year_doy_sod(_T0 + 1.0),
            j2000_seconds_to_year_doy_sod(_T0 + 6.0),
        )
        with pytest.raises(CoverageError, match="occurs after the interval start"):
            compute_spacecraft_attitude(
                AcquisitionType.EARTH, _equatorial_series(), imu, quaternions, interval
            )

    def test_interval_ignored_for_other(self):
        imu_time = _imu_times(100)
        imu, quaternions = _windows(imu_time, imu_time.copy())
        interval = (
            j2000_seconds_to_year_doy_sod(_T0 + 1.0),
            j2000_seconds_to_year_doy_sod(_T0 + 6.0),
        )
        att = compute_spacecraft_attitude(
            AcquisitionType.OTHER, _equatorial_series(), imu, quaternions, interval
        )
        assert att.angles.shape == (100, 3)


# ──────────────────────────────────────────────
# Record assembly
# ──────────────────────────────────────────────


def _spacecraft_attitude(angles, start=_T0 + 5.0):
    n = angles.shape[0]
    return SpacecraftAttitude(
        time=jnp.arange(n) * 0.02,
        angles=angles,
        imu_start=start,
        imu_epoch=j2000_seconds_to_year_doy_sod(start),
        attitude_reference=jnp.zeros(3),
        smoothed=True,
    )


class TestConvertImuToAttitude:
    def test_rates_from_roll_ramp(self):
        n = 50
        roll = 1.0e-3 * jnp.arange(n) * 0.02
        angles = jnp.stack([roll, jnp.zeros(n), jnp.zeros(n)], axis=1)
        series = convert_imu_to_attitude(
            _spacecraft_attitude(angles), _equatorial_series(), AcquisitionType.LUNAR
        )

        assert series.number_of_samples == n
        assert jnp.allclose(series.seconds_from_epoch, jnp.arange(n) * 0.02)
        assert jnp.allclose(series.roll, roll)
        assert jnp.allclose(series.roll_rate, 1.0e-3, rtol=1e-6)
        assert jnp.allclose(series.pitch_rate, 0.0, atol=1e-12)
        assert float(series.roll_rate[-1]) == pytest.approx(float(series.roll_rate[-2]))

    def test_celestial_quaternions(self):
        n = 10
        start = _T0 + 5.0
        series = convert_imu_to_attitude(
            _spacecraft_attitude(jnp.zeros((n, 3)), start), _equatorial_series(), AcquisitionType.STELLAR
        )
        assert jnp.allclose(series.eci_quaternion, jnp.array([1.0, 0.0, 0.0, 0.0]), atol=1e-12)

        R = quaternion_to_rotation_matrix(series.ecef_quaternion[3])
        assert jnp.allclose(R, rotation_ecef_to_eci(start + 0.06), atol=1e-9)

    def test_earth_quaternions_follow_orbit_frame(self):
        n = 10
        start = _T0 + 5.0
        series = convert_imu_to_attitude(
            _spacecraft_attitude(jnp.zeros((n, 3)), start), _equatorial_series(), AcquisitionType.EARTH
        )
        times = start + jnp.arange(n) * 0.02
        expected = eci_to_orbit_at_times(_equatorial_series(), times)
        R = jax.vmap(quaternion_to_rotation_matrix)(series.eci_quaternion)
        assert jnp.allclose(R, expected, atol=1e-9)
        assert jnp.allclose(series.utc_epoch_time, j2000_seconds_to_year_doy_sod(start))
