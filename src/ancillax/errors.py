"""Exception types raised by the ancillary processing chain.

Every processing stage either returns its complete output or raises; no
stage returns partial results.  The exceptions subclass the builtin
``ValueError`` / ``RuntimeError`` so callers that only care about the
broad category can catch those.

- :class:`InsufficientDataError`: not enough valid telemetry to proceed.
- :class:`CoverageError`: telemetry does not span the required time range.
- :class:`NumericalError`: a matrix recursion or frame construction
  produced non-finite or degenerate values.
"""

from __future__ import annotations


class AncillaryError(Exception):
    """Base class for all ancillary processing failures."""


class InsufficientDataError(AncillaryError, ValueError):
    """Raised when too few valid samples remain to continue processing."""


class CoverageError(AncillaryError, ValueError):
    """Raised when one telemetry stream does not cover a required time span."""


class NumericalError(AncillaryError, RuntimeError):
    """Raised when a numerical computation cannot be trusted."""
