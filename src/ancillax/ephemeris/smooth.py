"""Ephemeris processing: raw records to a smoothed inertial series."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from ancillax.calibration import CalibrationParameters
from ancillax.config import ensure_float64
from ancillax.constants import LAGRANGE_POINTS
from ancillax.ephemeris._types import EphemerisSeries, SmoothedEphemeris
from ancillax.ephemeris.build import build_ephemeris
from ancillax.ephemeris.outliers import find_valid_ephemeris_bounds, reject_ephemeris_outliers
from ancillax.ephemeris.resample import (
    correct_ephemeris_time,
    propagate_ephemeris,
    resample_ephemeris,
)
from ancillax.errors import CoverageError, InsufficientDataError
from ancillax.estimation import kalman_smooth_ephemeris
from ancillax.telemetry import AcquisitionType, L0REphemeris
from ancillax.time import year_doy_sod_to_j2000_seconds

logger = logging.getLogger(__name__)


def _check_coverage(
    time: np.ndarray,
    first: int,
    last: int,
    interval: tuple[Sequence[float], Sequence[float]],
    acquisition_type: AcquisitionType,
) -> None:
    start = float(year_doy_sod_to_j2000_seconds(interval[0]))
    stop = float(year_doy_sod_to_j2000_seconds(interval[1]))
    if time[first] <= start and time[last] >= stop:
        return

    message = "Ephemeris [%.3f, %.3f] does not cover the interval [%.3f, %.3f]" % (
        time[first], time[last], start, stop,
    )
    if acquisition_type.requires_coverage:
        raise CoverageError(message)
    logger.warning(message)


def smooth_ephemeris(
    l0r: L0REphemeris,
    calibration: CalibrationParameters,
    acquisition_type: AcquisitionType = AcquisitionType.EARTH,
    interval: tuple[Sequence[float], Sequence[float]] | None = None,
) -> SmoothedEphemeris:
    """Screen, regularize and Kalman-smooth raw ephemeris records.

    Steps:

    1. Locate the first and last records without the warning flag and check
       there are enough of them, and that they span *interval* when one is
       given.  Failures are errors for Earth, lunar and stellar acquisitions
       and warnings otherwise.
    2. Reject physically inconsistent records.
    3. Propagate synthetic points if too few remain.
    4. Correct timestamps.
    5. Resample onto the nominal grid.
    6. Smooth with :func:`~ancillax.estimation.kalman_smooth_ephemeris`.

    Args:
        l0r: Raw ephemeris records.
        calibration: Calibration parameters.
        acquisition_type: Acquisition type.
        interval: Imaging interval as ``((year, doy, sod), (year, doy, sod))``,
            or ``None`` to skip the coverage check.

    Returns:
        SmoothedEphemeris: Smoothed ECI series and the rejected record count.

    Raises:
        InsufficientDataError: If no usable record remains, or too few for an
            acquisition that requires coverage.
        CoverageError: If the records do not span *interval* for an
            acquisition that requires coverage.
        NumericalError: If the smoother fails.
    """
    ensure_float64()

    time = np.asarray(l0r.time, dtype=np.float64)
    logger.info("Processing %d raw ephemeris records", time.shape[0])

    first, last = find_valid_ephemeris_bounds(l0r)
    n_span = last - first + 1
    if n_span < LAGRANGE_POINTS:
        message = "Only %d valid ephemeris records; at least %d needed" % (
            n_span, LAGRANGE_POINTS,
        )
        if acquisition_type.requires_coverage:
            raise InsufficientDataError(message)
        logger.warning(message)

    if interval is not None:
        _check_coverage(time, first, last, interval, acquisition_type)

    t, r, v, invalid_count = reject_ephemeris_outliers(l0r, first, last, calibration)

    period = calibration.ephemeris_smoother.sampling_period
    t, r, v = propagate_ephemeris(t, r, v, LAGRANGE_POINTS, calibration.earth, period)
    t, r, v, _ = correct_ephemeris_time(t, r, v, period)
    if t.shape[0] < LAGRANGE_POINTS:
        t, r, v = propagate_ephemeris(t, r, v, LAGRANGE_POINTS, calibration.earth, period)
    t, r, v = resample_ephemeris(t, r, v, period)

    result = kalman_smooth_ephemeris(
        t, r, v, calibration.earth, calibration.ephemeris_smoother
    )
    return SmoothedEphemeris(
        time=t,
        position=result.x[:, :3],
        velocity=result.x[:, 3:],
        invalid_count=invalid_count,
    )


def preprocess_ephemeris(
    l0r: L0REphemeris,
    calibration: CalibrationParameters,
    acquisition_type: AcquisitionType = AcquisitionType.EARTH,
    interval: tuple[Sequence[float], Sequence[float]] | None = None,
) -> tuple[EphemerisSeries, int]:
    """Produce the final ephemeris series from raw records.

    Returns:
        tuple: ``(series, invalid_count)``.
    """
    smoothed = smooth_ephemeris(l0r, calibration, acquisition_type, interval)
    return build_ephemeris(smoothed), smoothed.invalid_count
