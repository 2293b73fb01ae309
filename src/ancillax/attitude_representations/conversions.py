"""Quaternion helpers for attitude telemetry.

Convention:
    Quaternion layout is scalar-first: ``[w, x, y, z]`` (shape ``(4,)``).
    Rotation matrix layout is row-major: shape ``(3, 3)``.
    A quaternion ``q`` describing the frame rotation from frame A to frame
    B maps to the matrix that takes A-frame vector components to B-frame
    components.  Telemetry quaternions are inertial-to-ACS.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike


# ---------------------------------------------------------------------------
# Quaternion <-> Rotation Matrix
# ---------------------------------------------------------------------------

def quaternion_to_rotation_matrix(q: jax.Array) -> jax.Array:
    """Convert a unit quaternion to a 3x3 rotation matrix.

    Uses the bilinear product form (Diebel eq. 125).

    Args:
        q (jax.Array): Quaternion array of shape ``(4,)`` in scalar-first order ``[w, x, y, z]``.

    Returns:
        jnp.ndarray: Rotation matrix of shape ``(3, 3)``.
    """
    qs, q1, q2, q3 = q[0], q[1], q[2], q[3]

    return jnp.array([
        [qs*qs + q1*q1 - q2*q2 - q3*q3,  2.0*q1*q2 + 2.0*qs*q3,          2.0*q1*q3 - 2.0*qs*q2],
        [2.0*q1*q2 - 2.0*qs*q3,           qs*qs - q1*q1 + q2*q2 - q3*q3,  2.0*q2*q3 + 2.0*qs*q1],
        [2.0*q1*q3 + 2.0*qs*q2,           2.0*q2*q3 - 2.0*qs*q1,          qs*qs - q1*q1 - q2*q2 + q3*q3],
    ])


def rotation_matrix_to_quaternion(R: jax.Array) -> jax.Array:
    """Convert a 3x3 rotation matrix to a unit quaternion.

    Uses Shepperd's method with ``jax.lax.switch`` on ``argmax`` for
    numerical stability.  The sign is chosen so that the scalar part is
    non-negative, which keeps consecutive attitude quaternions on the same
    hemisphere as the spacecraft-reported ones.

    Args:
        R (jax.Array): Rotation matrix of shape ``(3, 3)``.

    Returns:
        jnp.ndarray: Quaternion array of shape ``(4,)`` in scalar-first order ``[w, x, y, z]``.
    """
    # Diebel eqs. 131-134: the four candidate traces
    qvec = jnp.array([
        1.0 + R[0, 0] + R[1, 1] + R[2, 2],
        1.0 + R[0, 0] - R[1, 1] - R[2, 2],
        1.0 - R[0, 0] + R[1, 1] - R[2, 2],
        1.0 - R[0, 0] - R[1, 1] + R[2, 2],
    ])

    ind_max = jnp.argmax(qvec)
    q_max = qvec[ind_max]

    def _case0(_):
        sq = jnp.sqrt(q_max)
        return 0.5 * jnp.array([
            sq,
            (R[1, 2] - R[2, 1]) / sq,
            (R[2, 0] - R[0, 2]) / sq,
            (R[0, 1] - R[1, 0]) / sq,
        ])

    def _case1(_):
        sq = jnp.sqrt(q_max)
        return 0.5 * jnp.array([
            (R[1, 2] - R[2, 1]) / sq,
            sq,
            (R[0, 1] + R[1, 0]) / sq,
            (R[2, 0] + R[0, 2]) / sq,
        ])

    def _case2(_):
        sq = jnp.sqrt(q_max)
        return 0.5 * jnp.array([
            (R[2, 0] - R[0, 2]) / sq,
            (R[0, 1] + R[1, 0]) / sq,
            sq,
            (R[1, 2] + R[2, 1]) / sq,
        ])

    def _case3(_):
        sq = jnp.sqrt(q_max)
        return 0.5 * jnp.array([
            (R[0, 1] - R[1, 0]) / sq,
            (R[2, 0] + R[0, 2]) / sq,
            (R[1, 2] + R[2, 1]) / sq,
            sq,
        ])

    q = jax.lax.switch(ind_max, [_case0, _case1, _case2, _case3], None)
    return jnp.where(q[0] < 0.0, -q, q)


# ---------------------------------------------------------------------------
# Quaternion algebra
# ---------------------------------------------------------------------------

def quaternion_conjugate(q: ArrayLike) -> jax.Array:
    """Return the conjugate ``[w, -x, -y, -z]``, the inverse frame rotation."""
    q = jnp.asarray(q)
    return q * jnp.array([1.0, -1.0, -1.0, -1.0], dtype=q.dtype)


def quaternion_magnitude(q: ArrayLike) -> jax.Array:
    """Euclidean norm of one quaternion ``(4,)`` or of each row of ``(n, 4)``."""
    return jnp.linalg.norm(jnp.asarray(q), axis=-1)
