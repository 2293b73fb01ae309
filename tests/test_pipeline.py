"""End-to-end tests for ancillax.preprocess.

Tests cover:
- Quaternion-only processing of a nadir-pointing spacecraft
- Gyro and quaternion fusion when the gyros see only the orbital rate
- Bridging a missing quaternion record
- Interval coverage failures
"""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from ancillax import (
    AcquisitionType,
    CalibrationParameters,
    L0RAttitude,
    L0REphemeris,
    L0RImu,
    preprocess,
)
from ancillax.attitude import correct_imu_orbital_motion
from ancillax.attitude_representations import rotation_matrix_to_quaternion
from ancillax.constants import GM_EARTH, RAD2AS
from ancillax.ephemeris import preprocess_ephemeris
from ancillax.errors import CoverageError
from ancillax.frames import rotation_eci_to_orbit, state_eci_to_ecef
from ancillax.time import j2000_seconds_to_year_doy_sod

_SMA = 6378137.0 + 705.0e3
_INC = jnp.deg2rad(98.2)
_T0 = 760_000_000.0
_RECORDS = 20
_SAMPLES = 50
_TELEMETRY_START = _T0 + 10.0


def _circular_orbit(times):
    times = jnp.asarray(times)
    n = jnp.sqrt(GM_EARTH / _SMA**3)
    u = n * (times - _T0)
    y_axis = jnp.array([0.0, jnp.cos(_INC), jnp.sin(_INC)])
    x_axis = jnp.array([1.0, 0.0, 0.0])
    r = _SMA * (jnp.cos(u)[:, None] * x_axis + jnp.sin(u)[:, None] * y_axis)
    v = _SMA * n * (-jnp.sin(u)[:, None] * x_axis + jnp.cos(u)[:, None] * y_axis)
    return r, v


def _l0r_ephemeris(n=60):
    times = _T0 + jnp.arange(float(n))
    r, v = _circular_orbit(times)
    x_ecef = jax.vmap(state_eci_to_ecef)(times, jnp.concatenate([r, v], axis=1))
    return L0REphemeris(
        time=np.asarray(times),
        ecef_position=np.asarray(x_ecef[:, :3]),
        ecef_velocity=np.asarray(x_ecef[:, 3:]),
        warning_flag=np.zeros(n, dtype=bool),
    )


def _l0r_attitude():
    """Quaternions holding the orbital frame, i.e. zero roll, pitch and yaw."""
    times = _TELEMETRY_START + 0.02 * np.arange(_RECORDS * _SAMPLES)
    r, v = _circular_orbit(times)
    eci2orb = jax.vmap(rotation_eci_to_orbit)(r, v)
    q = jax.vmap(rotation_matrix_to_quaternion)(eci2orb)
    return L0RAttitude(time=times, quaternion=np.asarray(q))


def _imu_times():
    record_time = _TELEMETRY_START + np.arange(float(_RECORDS))
    counts = np.tile(np.arange(_SAMPLES) * 20, (_RECORDS, 1))
    return record_time, counts, (record_time[:, None] + counts * 1.0e-3).reshape(-1)


def _l0r_imu(calibration, interval):
    """Gyro increments that exactly cancel the orbital rotation correction."""
    series, _ = preprocess_ephemeris(
        _l0r_ephemeris(), calibration, AcquisitionType.EARTH, interval
    )
    record_time, counts, t_imu = _imu_times()
    rates = correct_imu_orbital_motion(
        AcquisitionType.EARTH, series, jnp.zeros(3), t_imu, jnp.zeros((t_imu.shape[0], 3))
    )
    gyro = np.asarray(rates) * 0.02 * RAD2AS
    return L0RImu(
        time=record_time,
        sample_counts=counts,
        gyro=gyro.reshape(_RECORDS, _SAMPLES, 3),
        warning_flag=np.zeros(_RECORDS, dtype=bool),
    )


def _interval(start, stop):
    return (
        tuple(float(x) for x in j2000_seconds_to_year_doy_sod(start)),
        tuple(float(x) for x in j2000_seconds_to_year_doy_sod(stop)),
    )


@pytest.fixture
def _INTERVAL():
    # Built per test so the autouse float64 fixture is already in effect.
    return _interval(_T0 + 15.0, _T0 + 25.0)


# ──────────────────────────────────────────────
# Nominal processing
# ──────────────────────────────────────────────


class TestPreprocess:
    def test_quaternions_only(self, _INTERVAL):
        result = preprocess(
            _l0r_attitude(), _l0r_ephemeris(), None, *_INTERVAL,
            AcquisitionType.EARTH, CalibrationParameters.landsat8(),
        )
        att = result.attitude
        assert result.invalid_ephemeris_count == 0
        assert att.number_of_samples == _RECORDS * _SAMPLES - 1
        assert jnp.allclose(att.roll, 0.0, atol=1e-4)
        assert jnp.allclose(att.pitch, 0.0, atol=1e-4)
        assert jnp.allclose(att.yaw, 0.0, atol=1e-4)

    def test_with_gyros(self, _INTERVAL):
        calibration = CalibrationParameters.landsat8()
        result = preprocess(
            _l0r_attitude(), _l0r_ephemeris(), _l0r_imu(calibration, _INTERVAL), *_INTERVAL,
            AcquisitionType.EARTH, calibration,
        )
        att = result.attitude
        assert result.invalid_attitude_count == 0
        assert result.invalid_ephemeris_count == 0
        assert att.number_of_samples == _RECORDS * _SAMPLES
        assert jnp.allclose(att.roll, 0.0, atol=1e-4)
        assert jnp.allclose(att.pitch, 0.0, atol=1e-4)
        assert jnp.allclose(att.yaw, 0.0, atol=1e-4)
        assert jnp.allclose(att.utc_epoch_time, j2000_seconds_to_year_doy_sod(_TELEMETRY_START))

    def test_ephemeris_series(self, _INTERVAL):
        result = preprocess(
            _l0r_attitude(), _l0r_ephemeris(), None, *_INTERVAL,
            AcquisitionType.EARTH, CalibrationParameters.landsat8(),
        )
        eph = result.ephemeris
        assert float(eph.seconds_from_epoch[0]) == pytest.approx(0.0, abs=1e-3)
        radius = jnp.linalg.norm(eph.eci_position, axis=1)
        assert jnp.allclose(radius, _SMA, rtol=1e-6)

    def test_missing_quaternion_record_bridged(self, _INTERVAL):
        calibration = CalibrationParameters.landsat8()
        att = _l0r_attitude()
        keep = np.ones(att.time.shape[0], dtype=bool)
        keep[5 * _SAMPLES : 6 * _SAMPLES] = False
        gapped = L0RAttitude(time=att.time[keep], quaternion=att.quaternion[keep])

        result = preprocess(
            gapped, _l0r_ephemeris(), _l0r_imu(calibration, _INTERVAL), *_INTERVAL,
            AcquisitionType.EARTH, calibration,
        )
        series = result.attitude
        assert series.number_of_samples == _RECORDS * _SAMPLES
        assert result.invalid_attitude_count == _SAMPLES
        assert jnp.all(jnp.isfinite(series.roll))
        assert jnp.all(jnp.isfinite(series.eci_quaternion))
        assert jnp.allclose(series.pitch, 0.0, atol=1e-3)


# ──────────────────────────────────────────────
# Failures
# ──────────────────────────────────────────────


class TestPreprocessFailures:
    def test_telemetry_starts_after_interval(self):
        interval = _interval(_T0 + 5.0, _T0 + 25.0)
        with pytest.raises(CoverageError, match="occurs after the interval start"):
            preprocess(
                _l0r_attitude(), _l0r_ephemeris(), None, *interval,
                AcquisitionType.EARTH, CalibrationParameters.landsat8(),
            )

    def test_ephemeris_misses_interval(self):
        interval = _interval(_T0 + 15.0, _T0 + 90.0)
        with pytest.raises(CoverageError, match="does not cover the interval"):
            preprocess(
                _l0r_attitude(), _l0r_ephemeris(), None, *interval,
                AcquisitionType.EARTH, CalibrationParameters.landsat8(),
            )
