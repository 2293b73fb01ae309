"""Spacecraft orbital reference frame.

The orbital frame is the reference for Earth-viewing roll, pitch and yaw:

- **z**: nadir, ``-r_hat``.
- **y**: negative orbit normal, ``-(r x v)_hat``.
- **x**: completes the right-handed triad, ``((r x v) x r)_hat``, which is
  close to the velocity direction for a near-circular orbit.

The function returns NaN components when the position or angular momentum
vector has zero length; callers check the result and raise
:class:`~ancillax.errors.NumericalError`.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.config import get_dtype


def rotation_eci_to_orbit(r_eci: ArrayLike, v_eci: ArrayLike) -> Array:
    """Compute the 3x3 rotation matrix from the ECI frame to the orbital frame.

    The rows of the returned matrix are the orbital unit vectors expressed
    in ECI coordinates.

    Args:
        r_eci: Spacecraft ECI position [m], shape ``(3,)``.
        v_eci: Spacecraft ECI velocity [m/s], shape ``(3,)``.

    Returns:
        jax.Array: 3x3 rotation matrix (ECI -> orbital).

    Example:
        >>> import jax.numpy as jnp
        >>> from ancillax.frames import rotation_eci_to_orbit
        >>> M = rotation_eci_to_orbit(jnp.array([7.0e6, 0.0, 0.0]),
        ...                           jnp.array([0.0, 7.5e3, 0.0]))
        >>> M.shape
        (3, 3)
    """
    r = jnp.asarray(r_eci, dtype=get_dtype())
    v = jnp.asarray(v_eci, dtype=get_dtype())

    h = jnp.cross(r, v)
    x = jnp.cross(h, r)

    z_hat = -r / jnp.linalg.norm(r)
    y_hat = -h / jnp.linalg.norm(h)
    x_hat = x / jnp.linalg.norm(x)

    return jnp.stack([x_hat, y_hat, z_hat])
