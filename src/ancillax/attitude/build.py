"""Assembly of the final attitude series."""

from __future__ import annotations

import jax
import jax.numpy as jnp

from ancillax.attitude._types import AttitudeSeries, SpacecraftAttitude
from ancillax.attitude.reference import eci_to_orbit_at_times
from ancillax.attitude_representations import (
    matrix_to_rpy,
    rotation_matrix_to_quaternion,
    rpy_to_matrix,
)
from ancillax.config import get_dtype
from ancillax.constants import IMU_SAMPLE_PERIOD
from ancillax.ephemeris import EphemerisSeries
from ancillax.frames import rotation_ecef_to_eci
from ancillax.telemetry import AcquisitionType


def convert_imu_to_attitude(
    attitude: SpacecraftAttitude,
    ephemeris: EphemerisSeries,
    acquisition_type: AcquisitionType,
) -> AttitudeSeries:
    """Build attitude records with rates and frame quaternions.

    Sample ``k`` sits at ``k * IMU_SAMPLE_PERIOD`` from the gyro epoch.
    Rates come from the rotation between consecutive attitude matrices
    divided by the sample period; the last sample repeats the previous
    rate.  The ECI quaternion rotates ECI to ACS through the orbital frame
    (Earth-viewing) or directly (celestial); the ECEF quaternion adds the
    Earth rotation at the sample time.

    Args:
        attitude: Attitude angles on the gyro grid.
        ephemeris: Ephemeris series.
        acquisition_type: Acquisition type.

    Returns:
        AttitudeSeries: Final attitude records.
    """
    dtype = get_dtype()
    angles = jnp.asarray(attitude.angles, dtype=dtype)
    n = angles.shape[0]

    seconds_from_epoch = jnp.arange(n, dtype=dtype) * IMU_SAMPLE_PERIOD
    j2000_time = attitude.imu_start + jnp.asarray(attitude.time, dtype=dtype)

    ref_to_acs = jax.vmap(rpy_to_matrix)(angles)
    if n > 1:
        step = jnp.einsum("nij,nkj->nik", ref_to_acs[:-1], ref_to_acs[1:])
        rates = jax.vmap(matrix_to_rpy)(step) / IMU_SAMPLE_PERIOD
        rates = jnp.concatenate([rates, rates[-1:]])
    else:
        rates = jnp.zeros((n, 3), dtype=dtype)

    if acquisition_type.is_celestial:
        eci_to_acs = ref_to_acs
    else:
        eci_to_acs = ref_to_acs @ eci_to_orbit_at_times(ephemeris, j2000_time)
    ecef_to_acs = eci_to_acs @ jax.vmap(rotation_ecef_to_eci)(j2000_time)

    return AttitudeSeries(
        utc_epoch_time=attitude.imu_epoch,
        seconds_from_epoch=seconds_from_epoch,
        roll=angles[:, 0],
        pitch=angles[:, 1],
        yaw=angles[:, 2],
        roll_rate=rates[:, 0],
        pitch_rate=rates[:, 1],
        yaw_rate=rates[:, 2],
        eci_quaternion=jax.vmap(rotation_matrix_to_quaternion)(eci_to_acs),
        ecef_quaternion=jax.vmap(rotation_matrix_to_quaternion)(ecef_to_acs),
    )
