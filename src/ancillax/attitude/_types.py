"""Attitude types.

Both types are :class:`~typing.NamedTuple` instances, which JAX treats as
pytrees automatically.
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class SpacecraftAttitude(NamedTuple):
    """Attitude angles on the gyro time grid, before record assembly.

    Attributes:
        time: Sample times relative to ``imu_start`` [s], shape ``(n,)``.
        angles: Roll, pitch, yaw [rad], shape ``(n, 3)``.
        imu_start: J2000 time of the first sample [s].
        imu_epoch: ``[year, doy, sod]`` of the first sample.
        attitude_reference: Mean quaternion-derived roll, pitch, yaw over
            the valid samples [rad], shape ``(3,)``.
        smoothed: Whether the angles come from the attitude smoother.
    """

    time: Array
    angles: Array
    imu_start: float
    imu_epoch: Array
    attitude_reference: Array
    smoothed: bool


class AttitudeSeries(NamedTuple):
    """Final attitude series.

    Attributes:
        utc_epoch_time: Epoch ``[year, doy, sod]`` of the first sample.
        seconds_from_epoch: Sample times relative to the epoch [s], shape
            ``(N,)``, spaced by the IMU sample period.
        roll: Roll angle [rad], shape ``(N,)``.
        pitch: Pitch angle [rad], shape ``(N,)``.
        yaw: Yaw angle [rad], shape ``(N,)``.
        roll_rate: Roll rate [rad/s], shape ``(N,)``.
        pitch_rate: Pitch rate [rad/s], shape ``(N,)``.
        yaw_rate: Yaw rate [rad/s], shape ``(N,)``.
        eci_quaternion: ECI-to-ACS quaternion, scalar-first, shape ``(N, 4)``.
        ecef_quaternion: ECEF-to-ACS quaternion, scalar-first, shape ``(N, 4)``.
    """

    utc_epoch_time: Array
    seconds_from_epoch: Array
    roll: Array
    pitch: Array
    yaw: Array
    roll_rate: Array
    pitch_rate: Array
    yaw_rate: Array
    eci_quaternion: Array
    ecef_quaternion: Array

    @property
    def number_of_samples(self) -> int:
        """Number of samples in the series."""
        return self.seconds_from_epoch.shape[0]
