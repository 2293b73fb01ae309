"""Elementary rotations and the roll/pitch/yaw convention.

Roll, pitch and yaw describe the attitude of the spacecraft attitude control
system (ACS) axes relative to a reference frame (the orbital frame for
Earth-viewing acquisitions, the inertial frame for celestial ones).

Two matrices are involved and they are transposes of each other:

- :func:`rpy_to_matrix` builds the reference-to-ACS matrix.
- :func:`matrix_to_rpy` reads the angles back from the ACS-to-reference
  (body-to-reference) matrix, so
  ``matrix_to_rpy(rpy_to_matrix(a).T) == a``.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.config import get_dtype


def Rz(angle: float) -> jnp.ndarray:
    """Rotation matrix, for a rotation about the z-axis.

    Args:
        angle (float): Counter-clockwise angle of rotation as viewed
            looking back along the postive direction of the rotation axis [rad].

    Returns:
        jnp.ndarray: Rotation matrix.

    References:

        1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and Applications*, 2012, p.27.
    """
    c = jnp.cos(angle)
    s = jnp.sin(angle)

    return jnp.array([[ +c,   +s,  0.0],
                      [ -s,   +c,  0.0],
                      [0.0,  0.0,  1.0]])


def rpy_to_matrix(rpy: ArrayLike) -> Array:
    """Reference-to-ACS rotation matrix for roll, pitch and yaw angles.

    Args:
        rpy: ``[roll, pitch, yaw]`` [rad].

    Returns:
        jax.Array: 3x3 matrix taking reference-frame vectors to ACS.
    """
    rpy = jnp.asarray(rpy, dtype=get_dtype())
    cr, sr = jnp.cos(rpy[0]), jnp.sin(rpy[0])
    cp, sp = jnp.cos(rpy[1]), jnp.sin(rpy[1])
    cy, sy = jnp.cos(rpy[2]), jnp.sin(rpy[2])

    return jnp.array([
        [cp * cy,                     -sy * cp,                     sp],
        [cy * sr * sp + cr * sy,       cy * cr - sy * sr * sp,      -sr * cp],
        [sr * sy - sp * cr * cy,       sp * sy * cr + cy * sr,       cp * cr],
    ])


def matrix_to_rpy(M: ArrayLike) -> Array:
    """Extract roll, pitch and yaw from a body-to-reference matrix.

    Args:
        M: 3x3 ACS-to-reference matrix.

    Returns:
        jax.Array: ``[roll, pitch, yaw]`` [rad]. Pitch is in
            ``[-pi/2, pi/2]``; roll and yaw in ``(-pi, pi]``.
    """
    M = jnp.asarray(M, dtype=get_dtype())
    return jnp.array([
        -jnp.arctan2(M[2, 1], M[2, 2]),
        jnp.arcsin(jnp.clip(M[2, 0], -1.0, 1.0)),
        -jnp.arctan2(M[1, 0], M[0, 0]),
    ])


def unwrap_angles(angles: ArrayLike) -> Array:
    """Remove +/-2pi discontinuities between consecutive samples.

    Each sample is compared with the already-corrected previous sample and
    shifted by ``2*pi`` whenever the step exceeds ``pi``.  Operates along
    axis 0, independently for every column of a 2-D input.

    Args:
        angles: Angle sequence [rad], shape ``(n,)`` or ``(n, k)``.

    Returns:
        jax.Array: Continuous angle sequence of the same shape.
    """
    angles = jnp.asarray(angles, dtype=get_dtype())
    return jnp.unwrap(angles, discont=jnp.pi, axis=0)
