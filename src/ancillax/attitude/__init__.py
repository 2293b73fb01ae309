"""Spacecraft attitude computation and assembly.

- **Types**: :class:`SpacecraftAttitude`, :class:`AttitudeSeries`
- **Attitude**: quaternion to roll/pitch/yaw, bad-sample filling,
  gyro/quaternion fusion
- **Orbital motion**: removal of orbit-frame rotation from gyro rates
- **Processing**: :func:`preprocess_attitude`
"""

from ancillax.attitude._types import AttitudeSeries, SpacecraftAttitude
from ancillax.attitude.build import convert_imu_to_attitude
from ancillax.attitude.orbital_motion import correct_imu_orbital_motion
from ancillax.attitude.preprocess import preprocess_attitude
from ancillax.attitude.reference import eci_to_orbit_at_times
from ancillax.attitude.spacecraft_attitude import (
    compute_spacecraft_attitude,
    increments_to_rates,
    quaternion_to_attitude,
    replace_invalid_attitude,
)

__all__ = [
    "SpacecraftAttitude",
    "AttitudeSeries",
    "eci_to_orbit_at_times",
    "quaternion_to_attitude",
    "replace_invalid_attitude",
    "increments_to_rates",
    "correct_imu_orbital_motion",
    "compute_spacecraft_attitude",
    "convert_imu_to_attitude",
    "preprocess_attitude",
]
