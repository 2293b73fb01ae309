"""Removal of orbital rotation from gyro rates.

Gyros measure the body rotation relative to inertial space.  For an
Earth-viewing spacecraft holding a fixed attitude in the rotating orbital
frame they therefore see the orbital rate, roughly one revolution per
orbit about the pitch axis.  Subtracting the rotation of the
reference-attitude frame between consecutive gyro samples leaves only the
attitude perturbation.
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.attitude.reference import eci_to_orbit_at_times
from ancillax.attitude_representations import matrix_to_rpy, rpy_to_matrix
from ancillax.config import get_dtype
from ancillax.ephemeris import EphemerisSeries
from ancillax.telemetry import AcquisitionType

logger = logging.getLogger(__name__)


def correct_imu_orbital_motion(
    acquisition_type: AcquisitionType,
    ephemeris: EphemerisSeries,
    attitude_reference: ArrayLike,
    imu_time: ArrayLike,
    imu_rate: ArrayLike,
) -> Array:
    """Convert gyro rates to body-to-orbit attitude perturbation rates.

    For celestial acquisitions the rates are only negated.  Otherwise, with
    ``M_i = rpy_to_matrix(attitude_reference) @ eci_to_orbit(t_i)``, the
    incremental rotation ``M_{i-1} @ M_i^T`` is read as roll, pitch and yaw
    and divided by ``t_i - t_{i-1}``.  That rate is subtracted from the
    negated gyro rate.  The first sample uses the increment of the second.

    Args:
        acquisition_type: Acquisition type.
        ephemeris: Ephemeris series.
        attitude_reference: Mean roll, pitch, yaw [rad], shape ``(3,)``.
        imu_time: Gyro sample times [s since J2000], shape ``(n,)``, ``n >= 2``.
        imu_rate: Gyro rates [rad/s], shape ``(n, 3)``.

    Returns:
        jax.Array: Corrected rates [rad/s], shape ``(n, 3)``.
    """
    dtype = get_dtype()
    imu_rate = jnp.asarray(imu_rate, dtype=dtype)

    if acquisition_type.is_celestial:
        return -imu_rate

    imu_time = jnp.asarray(imu_time, dtype=dtype)
    orb2acs = rpy_to_matrix(attitude_reference)
    eci2acs = orb2acs @ eci_to_orbit_at_times(ephemeris, imu_time)

    increment = jnp.einsum("nij,nkj->nik", eci2acs[:-1], eci2acs[1:])
    delta = jax.vmap(matrix_to_rpy)(increment) / jnp.diff(imu_time)[:, None]
    delta = jnp.concatenate([delta[:1], delta])

    logger.debug("Mean orbital rate removed from IMU: %s", delta.mean(axis=0))
    return -imu_rate - delta
