"""Reference frame transformations.

Provides the Earth-rotation ECI/ECEF transformation evaluated at J2000
seconds and the spacecraft orbital frame used as the Earth-viewing
attitude reference.
"""

from ancillax.frames.eci_ecef import (
    rotation_ecef_to_eci,
    rotation_eci_to_ecef,
    state_ecef_to_eci,
    state_eci_to_ecef,
)
from ancillax.frames.orbital import rotation_eci_to_orbit

__all__ = [
    "rotation_eci_to_ecef",
    "rotation_ecef_to_eci",
    "state_eci_to_ecef",
    "state_ecef_to_eci",
    "rotation_eci_to_orbit",
]
