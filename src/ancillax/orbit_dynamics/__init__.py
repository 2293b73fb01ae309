"""Orbit dynamics force models.

- **Gravity**: point-mass plus J2 Earth gravity in the inertial frame
"""

from .gravity import accel_gravity, accel_j2, accel_point_mass

__all__ = [
    "accel_point_mass",
    "accel_j2",
    "accel_gravity",
]
