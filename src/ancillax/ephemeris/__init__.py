"""Ephemeris screening, regularization, smoothing and lookup.

- **Types**: :class:`SmoothedEphemeris`, :class:`EphemerisSeries`
- **Screening**: warning-flag bounds and physical-consistency outliers
- **Regularization**: synthetic propagation, timestamp correction,
  uniform Lagrange resampling
- **Processing**: :func:`smooth_ephemeris`, :func:`preprocess_ephemeris`
- **Lookup**: :func:`get_state_at_time`
"""

from ancillax.ephemeris._types import EphemerisSeries, SmoothedEphemeris
from ancillax.ephemeris.build import build_ephemeris
from ancillax.ephemeris.lookup import get_state_at_time
from ancillax.ephemeris.outliers import find_valid_ephemeris_bounds, reject_ephemeris_outliers
from ancillax.ephemeris.resample import (
    GRID_SNAP_FRACTION,
    correct_ephemeris_time,
    propagate_ephemeris,
    resample_ephemeris,
)
from ancillax.ephemeris.smooth import preprocess_ephemeris, smooth_ephemeris

__all__ = [
    "EphemerisSeries",
    "SmoothedEphemeris",
    "find_valid_ephemeris_bounds",
    "reject_ephemeris_outliers",
    "GRID_SNAP_FRACTION",
    "propagate_ephemeris",
    "correct_ephemeris_time",
    "resample_ephemeris",
    "smooth_ephemeris",
    "preprocess_ephemeris",
    "build_ephemeris",
    "get_state_at_time",
]
