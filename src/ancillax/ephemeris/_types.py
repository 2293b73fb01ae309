"""Ephemeris series types.

Both types are :class:`~typing.NamedTuple` instances, which JAX treats as
pytrees automatically.
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class SmoothedEphemeris(NamedTuple):
    """Kalman-smoothed inertial ephemeris on a uniform time grid.

    Attributes:
        time: Sample times [s since J2000], shape ``(N,)``.
        position: ECI position [m], shape ``(N, 3)``.
        velocity: ECI velocity [m/s], shape ``(N, 3)``.
        invalid_count: Raw records rejected as outliers.
    """

    time: Array
    position: Array
    velocity: Array
    invalid_count: int


class EphemerisSeries(NamedTuple):
    """Ephemeris in both inertial and Earth-fixed frames.

    Attributes:
        utc_epoch_time: Epoch ``[year, doy, sod]`` of the first sample.
        seconds_from_epoch: Sample times relative to the epoch [s], shape
            ``(N,)``. Strictly increasing, starting at zero.
        eci_position: ECI position [m], shape ``(N, 3)``.
        eci_velocity: ECI velocity [m/s], shape ``(N, 3)``.
        ecef_position: ECEF position [m], shape ``(N, 3)``.
        ecef_velocity: ECEF velocity [m/s], shape ``(N, 3)``.
    """

    utc_epoch_time: Array
    seconds_from_epoch: Array
    eci_position: Array
    eci_velocity: Array
    ecef_position: Array
    ecef_velocity: Array

    @property
    def number_of_samples(self) -> int:
        """Number of samples in the series."""
        return self.seconds_from_epoch.shape[0]
