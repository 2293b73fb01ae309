"""Spacecraft attitude from quaternion and gyro telemetry.

Quaternions give the absolute attitude at the quaternion rate; gyros give
the attitude change at the gyro rate.  :func:`compute_spacecraft_attitude`
expresses both as roll, pitch and yaw relative to the acquisition's
reference frame and fuses them with the attitude smoother.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from ancillax.attitude._types import SpacecraftAttitude
from ancillax.attitude.orbital_motion import correct_imu_orbital_motion
from ancillax.attitude.reference import eci_to_orbit_at_times
from ancillax.attitude_representations import (
    matrix_to_rpy,
    quaternion_conjugate,
    quaternion_to_rotation_matrix,
    unwrap_angles,
)
from ancillax.calibration import ImuSmootherConfig
from ancillax.config import get_dtype
from ancillax.ephemeris import EphemerisSeries
from ancillax.errors import CoverageError, InsufficientDataError
from ancillax.estimation import kalman_smooth_imu
from ancillax.telemetry import AcquisitionType, ImuWindow, QuaternionWindow
from ancillax.telemetry.windowing import ephemeris_time_span
from ancillax.time import j2000_seconds_to_year_doy_sod, year_doy_sod_to_j2000_seconds

logger = logging.getLogger(__name__)


def quaternion_to_attitude(
    quaternion: ArrayLike,
    time: ArrayLike,
    ephemeris: EphemerisSeries,
    acquisition_type: AcquisitionType,
) -> Array:
    """Convert inertial-to-ACS quaternions to roll, pitch and yaw.

    Celestial acquisitions read the angles off the body-to-ECI matrix.
    Earth-viewing ones read them off the body-to-orbit matrix, built from
    the ephemeris interpolated at each sample time.

    Args:
        quaternion: Scalar-first quaternions, shape ``(n, 4)``.
        time: Sample times [s since J2000], shape ``(n,)``.
        ephemeris: Ephemeris series.
        acquisition_type: Acquisition type.

    Returns:
        jax.Array: Roll, pitch, yaw [rad], shape ``(n, 3)``.

    Raises:
        NumericalError: If the orbital frame is degenerate.
    """
    quaternion = jnp.atleast_2d(jnp.asarray(quaternion, dtype=get_dtype()))
    body_to_eci = jax.vmap(quaternion_to_rotation_matrix)(quaternion_conjugate(quaternion))

    if acquisition_type.is_celestial:
        return jax.vmap(matrix_to_rpy)(body_to_eci)

    body_to_orbit = eci_to_orbit_at_times(ephemeris, time) @ body_to_eci
    return jax.vmap(matrix_to_rpy)(body_to_orbit)


def replace_invalid_attitude(attitude: ArrayLike, valid: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Fill invalid samples and average the valid ones.

    Walking forward, an invalid sample becomes zero at either end of the
    series, the mean of its neighbours when the next sample is valid, and
    a copy of the (already filled) previous sample otherwise.

    Args:
        attitude: Roll, pitch, yaw [rad], shape ``(n, 3)``.
        valid: Validity flags, shape ``(n,)``.

    Returns:
        tuple: Filled attitude ``(n, 3)`` and the mean over the valid
            samples ``(3,)``.

    Raises:
        InsufficientDataError: If no sample is valid.
    """
    attitude = np.array(attitude, dtype=np.float64)
    valid = np.asarray(valid, dtype=bool)
    n = attitude.shape[0]

    if not valid.any():
        raise InsufficientDataError("No valid attitude points")

    for i in np.flatnonzero(~valid):
        if i == 0 or i == n - 1:
            attitude[i] = 0.0
        elif valid[i + 1]:
            attitude[i] = (attitude[i - 1] + attitude[i + 1]) / 2.0
        else:
            attitude[i] = attitude[i - 1]

    return attitude, attitude[valid].mean(axis=0)


def increments_to_rates(time: np.ndarray, increments: np.ndarray) -> np.ndarray:
    """Divide angular increments by the preceding sample spacing.

    The first sample uses the spacing to the second.
    """
    dt = np.diff(time)
    dt = np.concatenate([dt[:1], dt])
    return increments / dt[:, None]


def _check_coverage(
    imu: ImuWindow,
    quaternions: QuaternionWindow,
    ephemeris: EphemerisSeries,
    acquisition_type: AcquisitionType,
    interval: tuple[Sequence[float], Sequence[float]] | None,
) -> None:
    eph_start, eph_stop = ephemeris_time_span(ephemeris)
    if imu.time[0] < eph_start or imu.time[-1] > eph_stop:
        raise CoverageError(
            "Ephemeris [%.3f, %.3f] does not cover IMU [%.3f, %.3f]"
            % (eph_start, eph_stop, imu.time[0], imu.time[-1])
        )
    if quaternions.time[0] < eph_start or quaternions.time[-1] > eph_stop:
        raise CoverageError(
            "Ephemeris [%.3f, %.3f] does not cover quaternions [%.3f, %.3f]"
            % (eph_start, eph_stop, quaternions.time[0], quaternions.time[-1])
        )

    if interval is None or not acquisition_type.requires_coverage:
        return

    start = float(year_doy_sod_to_j2000_seconds(interval[0]))
    stop = float(year_doy_sod_to_j2000_seconds(interval[1]))
    for name, t in (("IMU", imu.time), ("Quaternion", quaternions.time)):
        if t[0] > start:
            raise CoverageError(
                "%s start time %.3f occurs after the interval start %.3f" % (name, t[0], start)
            )
        if t[-1] < stop:
            raise CoverageError(
                "%s end time %.3f occurs before the interval end %.3f" % (name, t[-1], stop)
            )


def compute_spacecraft_attitude(
    acquisition_type: AcquisitionType,
    ephemeris: EphemerisSeries,
    imu: ImuWindow,
    quaternions: QuaternionWindow,
    interval: tuple[Sequence[float], Sequence[float]] | None = None,
    config: ImuSmootherConfig | None = None,
) -> SpacecraftAttitude:
    """Derive the attitude history on the gyro time grid.

    Steps:

    1. Check that the ephemeris covers both streams and, for acquisitions
       that require it, that both streams cover *interval*.
    2. Convert quaternions to roll, pitch, yaw and unwrap them.
    3. Fill invalid samples and take the mean as the attitude reference.
    4. Turn gyro increments into rates, suppress them for celestial
       acquisitions, and remove the orbital rotation.
    5. Without gyro data, use the quaternion attitude directly.
    6. Shift times to start at the first gyro sample and, when gyro data
       exists or a missing quaternion record must be bridged, run
       :func:`~ancillax.estimation.kalman_smooth_imu`.

    Args:
        acquisition_type: Acquisition type.
        ephemeris: Ephemeris series.
        imu: Gyro window.
        quaternions: Quaternion window.
        interval: Imaging interval as ``((year, doy, sod), (year, doy, sod))``.
        config: Attitude smoother noise model.

    Returns:
        SpacecraftAttitude: Angles on the gyro grid.

    Raises:
        CoverageError: If a coverage check fails.
        InsufficientDataError: If no quaternion is valid.
        NumericalError: If a frame or the smoother degenerates.
    """
    _check_coverage(imu, quaternions, ephemeris, acquisition_type, interval)

    q_time = np.asarray(quaternions.time, dtype=np.float64)
    attitude = quaternion_to_attitude(
        quaternions.quaternion, q_time, ephemeris, acquisition_type
    )
    attitude = unwrap_angles(attitude)
    attitude, reference = replace_invalid_attitude(attitude, quaternions.valid)
    logger.info("Mean attitude reference (rad): %s", reference)

    imu_time = np.asarray(imu.time, dtype=np.float64)
    imu_valid = np.asarray(imu.valid, dtype=bool).copy()
    imu_data = increments_to_rates(imu_time, np.asarray(imu.data, dtype=np.float64))

    if acquisition_type.is_celestial:
        imu_valid[:] = False

    imu_data = np.asarray(
        correct_imu_orbital_motion(acquisition_type, ephemeris, reference, imu_time, imu_data)
    )

    imu_epoch = imu.epoch
    if not imu.imu_valid:
        count = min(imu_time.shape[0], q_time.shape[0])
        imu_time = q_time[:count].copy()
        imu_data = attitude[:count].copy()
        imu_valid = imu_valid[:count]
        imu_epoch = j2000_seconds_to_year_doy_sod(imu_time[0])

    imu_start = float(imu_time[0])
    imu_time = imu_time - imu_start
    q_time = q_time - imu_start

    smoothed = imu.imu_valid or quaternions.interpolate
    if smoothed:
        imu_time, angles, _, _ = kalman_smooth_imu(
            q_time, attitude, quaternions.valid, imu_time, imu_data, imu_valid, config
        )
    else:
        angles = jnp.asarray(imu_data, dtype=get_dtype())

    return SpacecraftAttitude(
        time=jnp.asarray(imu_time, dtype=get_dtype()),
        angles=angles,
        imu_start=imu_start,
        imu_epoch=imu_epoch,
        attitude_reference=jnp.asarray(reference, dtype=get_dtype()),
        smoothed=smoothed,
    )
