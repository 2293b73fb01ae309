"""ECI to ECEF frame transformations using Earth rotation.

Provides rotation matrices and state-vector transformations between the
Earth-Centered Inertial (ECI) frame and the Earth-Centered Earth-Fixed
(ECEF) frame, evaluated at a time given in seconds since J2000.

This module implements a simplified transformation model using only the
Earth rotation component, a single :math:`R_z(\\theta_{\\text{GMST}})`
rotation.  Precession-nutation and polar motion are not modelled; the
telemetry consistency checks and the round trip performed when building
an ephemeris series only need the two directions to be exact inverses.

All inputs and outputs use SI base units (metres, metres/second).

References:
    1. D. Vallado, *Fundamentals of Astrodynamics and Applications*,
       4th ed., Microcosm Press, 2013, Sec. 3.7.
    2. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, Springer, 2012, Sec. 5.2.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.attitude_representations import Rz
from ancillax.config import get_dtype
from ancillax.constants import OMEGA_EARTH
from ancillax.time import gmst


def rotation_eci_to_ecef(seconds: ArrayLike) -> Array:
    """Compute the 3x3 rotation matrix from the ECI frame to the ECEF frame.

    Args:
        seconds: Time in seconds since J2000.

    Returns:
        jax.Array: 3x3 rotation matrix (ECI -> ECEF).

    Example:
        >>> from ancillax.frames import rotation_eci_to_ecef
        >>> R = rotation_eci_to_ecef(7.0e8)
        >>> R.shape
        (3, 3)
    """
    return Rz(gmst(seconds))


def rotation_ecef_to_eci(seconds: ArrayLike) -> Array:
    """Compute the 3x3 rotation matrix from the ECEF frame to the ECI frame.

    This is the transpose of :func:`rotation_eci_to_ecef`.

    Args:
        seconds: Time in seconds since J2000.

    Returns:
        jax.Array: 3x3 rotation matrix (ECEF -> ECI).
    """
    return rotation_eci_to_ecef(seconds).T


def state_eci_to_ecef(seconds: ArrayLike, x_eci: ArrayLike) -> Array:
    """Transform a 6-element state vector from ECI to ECEF.

    .. math::

        \\mathbf{r}_{\\text{ECEF}} &= R \\, \\mathbf{r}_{\\text{ECI}} \\\\
        \\mathbf{v}_{\\text{ECEF}} &= R \\, \\mathbf{v}_{\\text{ECI}}
            - \\boldsymbol{\\omega} \\times \\mathbf{r}_{\\text{ECEF}}

    Args:
        seconds: Time in seconds since J2000.
        x_eci: 6-element ECI state ``[x, y, z, vx, vy, vz]``. Units: m, m/s.

    Returns:
        jax.Array: 6-element ECEF state. Units: m, m/s.
    """
    x_eci = jnp.asarray(x_eci, dtype=get_dtype())

    R = rotation_eci_to_ecef(seconds)
    omega = jnp.array([0.0, 0.0, OMEGA_EARTH], dtype=get_dtype())

    r_ecef = R @ x_eci[:3]
    v_ecef = R @ x_eci[3:6] - jnp.cross(omega, r_ecef)

    return jnp.concatenate([r_ecef, v_ecef])


def state_ecef_to_eci(seconds: ArrayLike, x_ecef: ArrayLike) -> Array:
    """Transform a 6-element state vector from ECEF to ECI.

    Applies the inverse of :func:`state_eci_to_ecef`:

    .. math::

        \\mathbf{r}_{\\text{ECI}} &= R^T \\, \\mathbf{r}_{\\text{ECEF}} \\\\
        \\mathbf{v}_{\\text{ECI}} &= R^T \\left(
            \\mathbf{v}_{\\text{ECEF}}
            + \\boldsymbol{\\omega} \\times \\mathbf{r}_{\\text{ECEF}}
        \\right)

    Args:
        seconds: Time in seconds since J2000.
        x_ecef: 6-element ECEF state ``[x, y, z, vx, vy, vz]``. Units: m, m/s.

    Returns:
        jax.Array: 6-element ECI state. Units: m, m/s.

    Example:
        >>> import jax.numpy as jnp
        >>> from ancillax.frames import state_ecef_to_eci
        >>> from ancillax.constants import R_EARTH
        >>> x_ecef = jnp.array([R_EARTH, 0.0, 0.0, 0.0, 0.0, 0.0])
        >>> state_ecef_to_eci(0.0, x_ecef).shape
        (6,)
    """
    x_ecef = jnp.asarray(x_ecef, dtype=get_dtype())

    R = rotation_eci_to_ecef(seconds)
    omega = jnp.array([0.0, 0.0, OMEGA_EARTH], dtype=get_dtype())

    r_ecef = x_ecef[:3]
    v_ecef = x_ecef[3:6]

    r_eci = R.T @ r_ecef
    v_eci = R.T @ (v_ecef + jnp.cross(omega, r_ecef))

    return jnp.concatenate([r_eci, v_eci])
