"""Physical-consistency screening of raw ephemeris records.

Each record is rotated from ECEF to ECI and accepted only if its orbit
radius and specific angular momentum lie within tolerance of the nominal
orbit.  Both bounds are inclusive.
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array

from ancillax.calibration import CalibrationParameters
from ancillax.config import get_dtype
from ancillax.errors import InsufficientDataError
from ancillax.frames import state_ecef_to_eci
from ancillax.telemetry import L0REphemeris

logger = logging.getLogger(__name__)


def find_valid_ephemeris_bounds(l0r: L0REphemeris) -> tuple[int, int]:
    """Return the indices of the first and last records without a warning flag.

    Raises:
        InsufficientDataError: If every record is flagged.
    """
    good = np.flatnonzero(~np.asarray(l0r.warning_flag, dtype=bool))
    if good.size == 0:
        raise InsufficientDataError("All ephemeris records carry the warning flag")
    return int(good[0]), int(good[-1])


def reject_ephemeris_outliers(
    l0r: L0REphemeris,
    first: int,
    last: int,
    calibration: CalibrationParameters,
) -> tuple[Array, Array, Array, int]:
    """Convert records ``first..last`` to ECI and drop inconsistent ones.

    The warning flag only bounds the span; inside it a record is rejected
    when ``| |r x v| - h0 | > angular_momentum_tolerance`` or when
    ``| |r| - r0 | > orbit_radius_tolerance``.

    Args:
        l0r: Raw ephemeris records.
        first: Index of the first record to consider.
        last: Index of the last record to consider (inclusive).
        calibration: Nominal orbit and tolerances.

    Returns:
        tuple: ``(time, eci_position, eci_velocity, invalid_count)`` for the
            accepted records.

    Raises:
        InsufficientDataError: If no record is accepted.
    """
    dtype = get_dtype()
    span = slice(first, last + 1)
    time = jnp.asarray(np.asarray(l0r.time)[span], dtype=dtype)
    x_ecef = jnp.concatenate(
        [
            jnp.asarray(np.asarray(l0r.ecef_position)[span], dtype=dtype),
            jnp.asarray(np.asarray(l0r.ecef_velocity)[span], dtype=dtype),
        ],
        axis=1,
    )
    flagged = np.asarray(l0r.warning_flag, dtype=bool)[span]

    x_eci = jax.vmap(state_ecef_to_eci)(time, x_ecef)
    r = x_eci[:, :3]
    v = x_eci[:, 3:]

    radius = jnp.linalg.norm(r, axis=1)
    momentum = jnp.linalg.norm(jnp.cross(r, v), axis=1)

    orbit = calibration.orbit
    qa = calibration.qa
    radius_ok = jnp.abs(radius - orbit.nominal_orbit_radius * 1000.0) <= qa.orbit_radius_tolerance
    momentum_ok = (
        jnp.abs(momentum - orbit.nominal_angular_momentum) <= qa.angular_momentum_tolerance
    )
    accept = np.asarray(radius_ok & momentum_ok)

    for i in np.flatnonzero(~accept):
        logger.debug(
            "Rejected ephemeris record at %.3f: |r| = %.1f m, |h| = %.6e m^2/s, flagged = %s",
            float(time[i]), float(radius[i]), float(momentum[i]), bool(flagged[i]),
        )

    invalid_count = int((~accept).sum())
    if not accept.any():
        raise InsufficientDataError(
            "No valid ephemeris points remain after outlier rejection "
            f"({invalid_count} rejected)"
        )

    logger.info(
        "Accepted %d ephemeris records, rejected %d", int(accept.sum()), invalid_count
    )
    keep = np.flatnonzero(accept)
    return time[keep], r[keep], v[keep], invalid_count
