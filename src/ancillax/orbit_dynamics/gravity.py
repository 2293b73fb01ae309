"""Earth gravity acceleration for ephemeris propagation.

Point-mass central gravity plus the dominant J2 zonal term, evaluated in
the inertial frame.  This is the force model used both to extend sparse
ephemeris data and for the sub-stepped state prediction of the ephemeris
smoother, where a few metres of model error per second are absorbed by the
process noise.

All inputs and outputs use SI base units (metres, metres/second squared).

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 56-68.
    2. D. Vallado, *Fundamentals of Astrodynamics and Applications*,
       4th ed., 2013, Sec. 8.7.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.calibration import EarthConstants
from ancillax.config import get_dtype


def accel_point_mass(r_object: ArrayLike, gm: float) -> Array:
    """Acceleration due to a point-mass central body at the origin.

    Computes ``-gm * r / |r|^3``.

    Args:
        r_object: Position of the object [m].  Shape ``(3,)`` or ``(6,)``
            (only first 3 elements used).
        gm: Gravitational parameter of the central body [m^3/s^2].

    Returns:
        Acceleration vector [m/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ancillax.constants import R_EARTH, GM_EARTH
        from ancillax.orbit_dynamics import accel_point_mass
        r = jnp.array([R_EARTH, 0.0, 0.0])
        a = accel_point_mass(r, GM_EARTH)
        ```
    """
    r = jnp.asarray(r_object, dtype=get_dtype())[:3]
    r_norm = jnp.linalg.norm(r)
    return -gm * r / r_norm**3


def accel_j2(r_object: ArrayLike, gm: float, radius: float, j2: float) -> Array:
    """Acceleration due to the J2 zonal harmonic.

    .. math::

        \\mathbf{a} = -\\frac{3}{2} J_2 \\frac{\\mu R^2}{r^5}
        \\begin{bmatrix}
            x (1 - 5 z^2/r^2) \\\\
            y (1 - 5 z^2/r^2) \\\\
            z (3 - 5 z^2/r^2)
        \\end{bmatrix}

    Args:
        r_object: Position of the object [m].  Shape ``(3,)`` or ``(6,)``.
        gm: Gravitational parameter [m^3/s^2].
        radius: Reference radius of the field [m].
        j2: Unnormalized J2 coefficient.

    Returns:
        Acceleration vector [m/s^2], shape ``(3,)``.
    """
    r = jnp.asarray(r_object, dtype=get_dtype())[:3]
    r_norm = jnp.linalg.norm(r)
    z2 = (r[2] / r_norm) ** 2

    factor = -1.5 * j2 * gm * radius**2 / r_norm**5
    return factor * jnp.array([
        r[0] * (1.0 - 5.0 * z2),
        r[1] * (1.0 - 5.0 * z2),
        r[2] * (3.0 - 5.0 * z2),
    ])


def accel_gravity(r_object: ArrayLike, earth: EarthConstants | None = None) -> Array:
    """Acceleration due to Earth's gravity (point mass + J2).

    Args:
        r_object: Position of the object in ECI [m].  Shape ``(3,)`` or
            ``(6,)`` (only first 3 elements used).
        earth: Earth constants.  Defaults to :class:`EarthConstants`.

    Returns:
        Acceleration vector [m/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ancillax.constants import R_EARTH
        from ancillax.orbit_dynamics import accel_gravity
        a = accel_gravity(jnp.array([R_EARTH, 0.0, 0.0]))
        ```
    """
    if earth is None:
        earth = EarthConstants()
    return accel_point_mass(r_object, earth.gravity_constant) + accel_j2(
        r_object, earth.gravity_constant, earth.semi_major_axis, earth.j2
    )
