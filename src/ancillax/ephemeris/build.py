"""Assembly of the final ephemeris series."""

from __future__ import annotations

import jax
import jax.numpy as jnp

from ancillax.ephemeris._types import EphemerisSeries, SmoothedEphemeris
from ancillax.frames import state_eci_to_ecef
from ancillax.time import j2000_seconds_to_year_doy_sod, year_doy_sod_to_j2000_seconds


def build_ephemeris(smoothed: SmoothedEphemeris) -> EphemerisSeries:
    """Attach an epoch and Earth-fixed states to a smoothed ECI series.

    The epoch is the first sample time.  Earth-fixed states use the same
    Earth rotation model the raw records were converted with.

    Args:
        smoothed: Smoothed inertial ephemeris.

    Returns:
        EphemerisSeries: Series with ``seconds_from_epoch`` starting at zero.
    """
    epoch = j2000_seconds_to_year_doy_sod(smoothed.time[0])
    seconds_from_epoch = smoothed.time - year_doy_sod_to_j2000_seconds(epoch)

    x_eci = jnp.concatenate([smoothed.position, smoothed.velocity], axis=1)
    x_ecef = jax.vmap(state_eci_to_ecef)(smoothed.time, x_eci)

    return EphemerisSeries(
        utc_epoch_time=epoch,
        seconds_from_epoch=seconds_from_epoch,
        eci_position=smoothed.position,
        eci_velocity=smoothed.velocity,
        ecef_position=x_ecef[:, :3],
        ecef_velocity=x_ecef[:, 3:],
    )
