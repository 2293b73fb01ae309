"""Tests for the ancillax.attitude_representations module.

Tests cover:
- Quaternion <-> rotation matrix conversion and the sign convention
- Quaternion conjugate and magnitude
- Roll/pitch/yaw matrix construction and extraction
- Angle unwrapping
"""

import jax
import jax.numpy as jnp
import pytest

from ancillax.attitude_representations import (
    Rz,
    matrix_to_rpy,
    quaternion_conjugate,
    quaternion_magnitude,
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
    rpy_to_matrix,
    unwrap_angles,
)

_TOL = 1e-12


def _rx(angle):
    c, s = jnp.cos(angle), jnp.sin(angle)
    return jnp.array([[1.0, 0.0, 0.0], [0.0, c, s], [0.0, -s, c]])


# ──────────────────────────────────────────────
# Quaternions
# ──────────────────────────────────────────────


class TestQuaternionConversions:
    def test_identity(self):
        q = jnp.array([1.0, 0.0, 0.0, 0.0])
        assert jnp.allclose(quaternion_to_rotation_matrix(q), jnp.eye(3), atol=_TOL)

    def test_z_rotation(self):
        """A rotation about z by theta gives [cos(theta/2), 0, 0, sin(theta/2)]."""
        theta = 0.7
        q = rotation_matrix_to_quaternion(Rz(theta))
        expected = jnp.array([jnp.cos(theta / 2), 0.0, 0.0, jnp.sin(theta / 2)])
        assert jnp.allclose(q, expected, atol=_TOL)

    def test_roundtrip(self):
        R = Rz(0.3) @ _rx(-1.2) @ Rz(2.5)
        q = rotation_matrix_to_quaternion(R)
        assert jnp.allclose(quaternion_to_rotation_matrix(q), R, atol=_TOL)
        assert float(quaternion_magnitude(q)) == pytest.approx(1.0, abs=_TOL)

    def test_half_turn_uses_off_diagonal_branch(self):
        q = rotation_matrix_to_quaternion(_rx(jnp.pi))
        assert jnp.allclose(jnp.abs(q), jnp.array([0.0, 1.0, 0.0, 0.0]), atol=1e-8)

    def test_scalar_part_non_negative(self):
        R = Rz(3.0) @ _rx(2.0)
        q = rotation_matrix_to_quaternion(R)
        assert float(q[0]) >= 0.0

    def test_conjugate_is_inverse(self):
        q = rotation_matrix_to_quaternion(Rz(0.4) @ _rx(0.2))
        R = quaternion_to_rotation_matrix(q)
        R_conj = quaternion_to_rotation_matrix(quaternion_conjugate(q))
        assert jnp.allclose(R_conj, R.T, atol=_TOL)

    def test_magnitude_batched(self):
        q = jnp.array([[1.0, 0.0, 0.0, 0.0], [0.0, 3.0, 4.0, 0.0]])
        assert jnp.allclose(quaternion_magnitude(q), jnp.array([1.0, 5.0]))

    def test_vmap(self):
        thetas = jnp.linspace(-1.0, 1.0, 5)
        R = jax.vmap(Rz)(thetas)
        q = jax.vmap(rotation_matrix_to_quaternion)(R)
        assert q.shape == (5, 4)
        assert jnp.allclose(q[:, 3], jnp.sin(thetas / 2), atol=_TOL)


# ──────────────────────────────────────────────
# Roll / pitch / yaw
# ──────────────────────────────────────────────


class TestRollPitchYaw:
    def test_zero_angles(self):
        assert jnp.allclose(rpy_to_matrix(jnp.zeros(3)), jnp.eye(3), atol=_TOL)

    def test_orthonormal(self):
        M = rpy_to_matrix(jnp.array([0.1, -0.2, 0.3]))
        assert jnp.allclose(M @ M.T, jnp.eye(3), atol=_TOL)
        assert float(jnp.linalg.det(M)) == pytest.approx(1.0, abs=_TOL)

    def test_pure_roll(self):
        """Pure roll is the reference-to-body rotation about x by -roll."""
        roll = 0.25
        M = rpy_to_matrix(jnp.array([roll, 0.0, 0.0]))
        assert jnp.allclose(M, _rx(-roll), atol=_TOL)

    def test_pure_yaw(self):
        yaw = -0.6
        M = rpy_to_matrix(jnp.array([0.0, 0.0, yaw]))
        assert jnp.allclose(M, Rz(-yaw), atol=_TOL)

    @pytest.mark.parametrize(
        "angles",
        [
            [0.1, -0.2, 0.3],
            [-1.0, 0.5, 2.0],
            [3.0, -1.2, -3.0],
        ],
    )
    def test_extract_from_transpose(self, angles):
        angles = jnp.array(angles)
        assert jnp.allclose(matrix_to_rpy(rpy_to_matrix(angles).T), angles, atol=1e-10)


class TestUnwrap:
    def test_wraps_across_pi(self):
        angles = jnp.array([3.1, -3.1, -3.0])
        out = unwrap_angles(angles)
        two_pi = 2.0 * jnp.pi
        assert jnp.allclose(out, jnp.array([3.1, two_pi - 3.1, two_pi - 3.0]))

    def test_continuous_unchanged(self):
        angles = jnp.linspace(-1.0, 1.0, 11)
        assert jnp.allclose(unwrap_angles(angles), angles)

    def test_columns_independent(self):
        angles = jnp.array([[3.1, 0.0], [-3.1, 0.1]])
        out = unwrap_angles(angles)
        assert float(out[1, 0]) == pytest.approx(2.0 * jnp.pi - 3.1)
        assert float(out[1, 1]) == pytest.approx(0.1)
