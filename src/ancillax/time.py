"""Time-system conversions used at every telemetry boundary.

Ancillary telemetry carries two time representations that must never be
mixed without an explicit conversion:

- seconds since the J2000 epoch (2000-01-01 12:00:00), used for all
  arithmetic on sample times, and
- ``(year, day-of-year, second-of-day)`` triples, used for series epochs and
  the imaging interval bounds.

Both use the same (UTC-like) time scale; no leap second offset is applied
between them.  All functions are written with ``jnp`` operations and accept
scalars or arrays.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from .config import get_dtype
from .constants import JD_MJD_OFFSET, SECONDS_PER_DAY

# MJD of 2000-01-01 00:00:00, the day that contains the J2000 epoch
_MJD_2000_JAN_1 = 51544

# Seconds between 2000-01-01 00:00:00 and the J2000 epoch at noon
_J2000_NOON_OFFSET = 43200.0


def caldate_to_mjd(
    year: ArrayLike,
    month: ArrayLike,
    day: ArrayLike,
    hour: ArrayLike = 0,
    minute: ArrayLike = 0,
    second: ArrayLike = 0.0,
) -> jax.Array:
    """Convert a calendar date to Modified Julian Date. Algorithm is only valid from year 1583 onward.

    Args:
        year (ArrayLike): Year of the calendar date.
        month (ArrayLike): Month of the calendar date.
        day (ArrayLike): Day of the calendar date.
        hour (ArrayLike): Hour of the calendar date. Default: ``0``
        minute (ArrayLike): Minute of the calendar date. Default: ``0``
        second (ArrayLike): Second of the calendar date. Default: ``0.0``

    Returns:
        Modified Julian Date.

    References:

        1. Montenbruck, O., & Gill, E. (2012). *Satellite Orbits: Models, Methods and Applications*. Springer Science & Business Media.
    """

    is_jan_or_feb = month <= 2
    year = jnp.where(is_jan_or_feb, year - 1, year)
    month = jnp.where(is_jan_or_feb, month + 12, month)

    B = jnp.floor(year / 400) - jnp.floor(year / 100) + jnp.floor(year / 4)

    mjd = 365 * year - 679004 + B + jnp.floor(30.6001 * (month + 1)) + day

    frac_day = (hour + (minute + second / 60.0) / 60.0) / 24.0

    return get_dtype()(jnp.floor(mjd).astype(jnp.int32)) + frac_day


def mjd_to_year(mjd: ArrayLike) -> jax.Array:
    """Return the Gregorian calendar year containing an integer MJD.

    Uses the Montenbruck & Gill calendar algorithm restricted to the year
    component.

    Args:
        mjd (ArrayLike): Modified Julian Date (integer day count).

    Returns:
        jax.Array: Calendar year (int32).
    """
    jd_shifted = jnp.asarray(mjd) + JD_MJD_OFFSET + 0.5
    z = jnp.floor(jd_shifted).astype(jnp.int32)

    alpha = (100 * z - 186721625) // 3652425
    a = z + 1 + alpha - alpha // 4
    b = a + 1524
    c = (100 * b - 12210) // 36525
    d = (36525 * c) // 100
    e = ((b - d) * 10000) // 306001

    month = jnp.where(e < 14, e - 1, e - 13)
    return jnp.where(month > 2, c - 4716, c - 4715)


def year_doy_sod_to_j2000_seconds(yds: ArrayLike) -> jax.Array:
    """Convert a ``(year, day-of-year, second-of-day)`` triple to J2000 seconds.

    Args:
        yds (ArrayLike): Sequence ``[year, doy, sod]``. Day-of-year is
            1-based.

    Returns:
        jax.Array: Seconds since 2000-01-01 12:00:00.

    Examples:
        ```python
        from ancillax.time import year_doy_sod_to_j2000_seconds
        year_doy_sod_to_j2000_seconds([2000, 1, 43200.0])  # 0.0
        ```
    """
    yds = jnp.asarray(yds, dtype=get_dtype())
    year, doy, sod = yds[0], yds[1], yds[2]

    mjd_jan_1 = caldate_to_mjd(year, 1, 1)
    days = mjd_jan_1 + doy - 1.0 - _MJD_2000_JAN_1

    return days * SECONDS_PER_DAY + sod - _J2000_NOON_OFFSET


def j2000_seconds_to_year_doy_sod(seconds: ArrayLike) -> jax.Array:
    """Convert J2000 seconds to a ``(year, day-of-year, second-of-day)`` triple.

    Args:
        seconds (ArrayLike): Seconds since 2000-01-01 12:00:00.

    Returns:
        jax.Array: ``[year, doy, sod]`` as floats.
    """
    seconds = jnp.asarray(seconds, dtype=get_dtype())

    since_midnight = seconds + _J2000_NOON_OFFSET
    day_number = jnp.floor(since_midnight / SECONDS_PER_DAY)
    sod = since_midnight - day_number * SECONDS_PER_DAY

    mjd = day_number.astype(jnp.int32) + _MJD_2000_JAN_1
    year = mjd_to_year(mjd)
    doy = mjd - caldate_to_mjd(year, 1, 1).astype(jnp.int32) + 1

    return jnp.array([year, doy, sod], dtype=get_dtype())


def add_seconds_to_year_doy_sod(seconds: ArrayLike, yds: ArrayLike) -> jax.Array:
    """Offset a ``(year, day-of-year, second-of-day)`` triple by *seconds*.

    Day and year rollovers are handled by passing through J2000 seconds.

    Args:
        seconds (ArrayLike): Offset to apply [s]. May be negative.
        yds (ArrayLike): Sequence ``[year, doy, sod]``.

    Returns:
        jax.Array: Offset ``[year, doy, sod]``.
    """
    return j2000_seconds_to_year_doy_sod(year_doy_sod_to_j2000_seconds(yds) + seconds)


def time_difference(yds_a: ArrayLike, yds_b: ArrayLike) -> jax.Array:
    """Return ``a - b`` in seconds for two ``(year, doy, sod)`` triples."""
    return year_doy_sod_to_j2000_seconds(yds_a) - year_doy_sod_to_j2000_seconds(yds_b)


def gmst(seconds: ArrayLike) -> jax.Array:
    """Compute Greenwich Mean Sidereal Time using the IAU 1982 model.

    Evaluated directly from J2000 seconds in the configured dtype, assuming
    UTC approximates UT1.

    Args:
        seconds (ArrayLike): Seconds since the J2000 epoch.

    Returns:
        jax.Array: GMST in radians, normalized to ``[0, 2*pi)``.

    References:

        1. D. Vallado, *Fundamentals of Astrodynamics and Applications
           (4th Ed.)*, 2010.
    """
    seconds = jnp.asarray(seconds, dtype=get_dtype())
    t_ut1 = seconds / SECONDS_PER_DAY / 36525.0

    # GMST in seconds of time (polynomial in Julian centuries from J2000)
    gmst_sec = (
        67310.54841
        + (876600.0 * 3600.0 + 8640184.812866) * t_ut1
        + 0.093104 * t_ut1 * t_ut1
        - 6.2e-6 * t_ut1 * t_ut1 * t_ut1
    )

    # 1 second of time = 1/240 degree
    return jnp.mod(gmst_sec / 240.0 * jnp.pi / 180.0, 2.0 * jnp.pi)
