"""Reference-frame matrices shared by the attitude computations.

The attitude reference is the orbital frame for Earth-viewing acquisitions
and the inertial frame for celestial ones.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.config import get_dtype
from ancillax.ephemeris import EphemerisSeries, get_state_at_time
from ancillax.errors import NumericalError
from ancillax.frames import rotation_eci_to_orbit
from ancillax.time import year_doy_sod_to_j2000_seconds


def eci_to_orbit_at_times(ephemeris: EphemerisSeries, j2000_seconds: ArrayLike) -> Array:
    """ECI-to-orbital rotation at each time, from interpolated ephemeris.

    Args:
        ephemeris: Ephemeris series.
        j2000_seconds: Times [s since J2000], shape ``(n,)``.

    Returns:
        jax.Array: Rotation matrices, shape ``(n, 3, 3)``.

    Raises:
        NumericalError: If the position or angular momentum has zero length
            at any time.
    """
    t = jnp.atleast_1d(jnp.asarray(j2000_seconds, dtype=get_dtype()))
    epoch = year_doy_sod_to_j2000_seconds(ephemeris.utc_epoch_time)
    r, v = get_state_at_time(ephemeris, t - epoch, frame="eci")

    eci2orb = jax.vmap(rotation_eci_to_orbit)(r, v)
    if not bool(jnp.all(jnp.isfinite(eci2orb))):
        raise NumericalError(
            "Degenerate orbital frame: zero-length position or angular momentum"
        )
    return eci2orb
