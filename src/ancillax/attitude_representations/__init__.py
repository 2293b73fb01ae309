"""Attitude representation kernels used by the attitude processing chain.

Provides scalar-first quaternion conversions, the roll/pitch/yaw matrix
convention, angle unwrapping and the elementary rotation :func:`Rz`.
"""

from .conversions import (
    quaternion_conjugate,
    quaternion_magnitude,
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
)
from .rotation_matrices import (
    Rz,
    matrix_to_rpy,
    rpy_to_matrix,
    unwrap_angles,
)

__all__ = [
    # Elementary rotations
    "Rz",
    # Roll / pitch / yaw
    "rpy_to_matrix",
    "matrix_to_rpy",
    "unwrap_angles",
    # Quaternions
    "quaternion_to_rotation_matrix",
    "rotation_matrix_to_quaternion",
    "quaternion_conjugate",
    "quaternion_magnitude",
]
