"""Alignment of gyro and quaternion samples onto a common time window.

The gyro samples are first trimmed to the ephemeris time span (both ends
inclusive).  The quaternions are then trimmed to the gyro window: the window
starts at the first quaternion after the first gyro sample that is followed
by a nominally spaced sample, and ends one quaternion per
``QUATERNION_SAMPLE_PERIOD / IMU_SAMPLE_PERIOD`` gyro samples later, backed
off until it is again nominally spaced and inside the gyro span.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ancillax.constants import (
    IMU_SAMPLE_PERIOD,
    QUATERNION_SAMPLE_PERIOD,
    QUATERNION_TIME_TOLERANCE,
)
from ancillax.errors import CoverageError, InsufficientDataError
from ancillax.telemetry._types import ImuBuffer, ImuWindow, QuaternionBuffer, QuaternionWindow
from ancillax.time import j2000_seconds_to_year_doy_sod, year_doy_sod_to_j2000_seconds

if TYPE_CHECKING:
    from ancillax.ephemeris import EphemerisSeries

logger = logging.getLogger(__name__)


def ephemeris_time_span(ephemeris: EphemerisSeries) -> tuple[float, float]:
    """Return the first and last ephemeris sample times in J2000 seconds."""
    start = float(year_doy_sod_to_j2000_seconds(ephemeris.utc_epoch_time))
    stop = start + float(ephemeris.seconds_from_epoch[-1])
    return start, stop


def extract_valid_imu_window(ephemeris: EphemerisSeries, imu: ImuBuffer) -> ImuWindow:
    """Trim gyro samples to the span covered by the ephemeris.

    Samples exactly at the ephemeris start or stop time are kept.

    Args:
        ephemeris: Smoothed ephemeris series.
        imu: Gyro samples in time order.

    Returns:
        ImuWindow: The retained samples with their invalid count and the
            ``(year, doy, sod)`` epoch of the first one.

    Raises:
        CoverageError: If there are no gyro samples, or fewer than two lie inside the
            ephemeris span.
    """
    eph_start, eph_stop = ephemeris_time_span(ephemeris)
    time = np.asarray(imu.time, dtype=np.float64)[: imu.count]
    if time.shape[0] == 0:
        raise CoverageError(
            "No IMU samples to window against ephemeris span [%.3f, %.3f]" % (eph_start, eph_stop)
        )

    start = int(np.searchsorted(time, eph_start, side="left"))
    stop = int(np.searchsorted(time, eph_stop, side="right")) - 1

    if start >= time.shape[0] or start >= stop:
        raise CoverageError(
            "No IMU window inside ephemeris span [%.3f, %.3f]; IMU covers [%.3f, %.3f]"
            % (eph_start, eph_stop, time[0], time[-1])
        )

    keep = slice(start, stop + 1)
    valid = np.asarray(imu.valid, dtype=bool)[keep].copy()
    count = stop - start + 1
    invalid_count = int(count - valid.sum())

    logger.info(
        "IMU window: %d samples (%d invalid) from %.3f to %.3f",
        count, invalid_count, time[start], time[stop],
    )
    return ImuWindow(
        time=time[keep].copy(),
        data=np.asarray(imu.data, dtype=np.float64)[keep].copy(),
        valid=valid,
        count=count,
        invalid_count=invalid_count,
        epoch=j2000_seconds_to_year_doy_sod(time[start]),
        ephemeris_start=eph_start,
        ephemeris_stop=eph_stop,
        imu_valid=imu.imu_valid,
    )


def _nominal_spacing(time: np.ndarray, index: int) -> bool:
    return abs(time[index] - time[index - 1] - QUATERNION_SAMPLE_PERIOD) < QUATERNION_TIME_TOLERANCE


def extract_valid_quaternion_window(
    imu_time: np.ndarray,
    quaternions: QuaternionBuffer,
) -> QuaternionWindow:
    """Trim repaired quaternions to the gyro window.

    Args:
        imu_time: Gyro window sample times [s].
        quaternions: Repaired quaternion buffer.

    Returns:
        QuaternionWindow: The retained samples and their invalid count.

    Raises:
        CoverageError: If the quaternions start more than one sample period
            after the first gyro sample.
        InsufficientDataError: If there are no quaternions, or no nominally
            spaced quaternion follows the first gyro sample.
    """
    imu_time = np.asarray(imu_time, dtype=np.float64)
    qtime = np.asarray(quaternions.time, dtype=np.float64)[: quaternions.count]
    n = qtime.shape[0]
    if n == 0:
        raise InsufficientDataError("No quaternion samples to window")

    start = 0
    while start < n - 1 and not (imu_time[0] < qtime[start] and _nominal_spacing(qtime, start + 1)):
        start += 1

    if start == 0 and abs(qtime[0] - imu_time[0]) > QUATERNION_SAMPLE_PERIOD:
        raise CoverageError(
            "Quaternion data starting at %.3f does not reach IMU start %.3f"
            % (qtime[0], imu_time[0])
        )
    if start >= n - 1:
        raise InsufficientDataError(
            "No nominally spaced quaternion found after IMU start %.3f" % imu_time[0]
        )

    ratio = max(1, round(QUATERNION_SAMPLE_PERIOD / IMU_SAMPLE_PERIOD))
    end = min(start + imu_time.shape[0] // ratio, n - 1)
    while end > start and (qtime[end] > imu_time[-1] or not _nominal_spacing(qtime, end)):
        end -= 1

    count = end - start + 1
    if count < 1:
        raise InsufficientDataError("Quaternion window is empty")

    keep = slice(start, end + 1)
    valid = np.asarray(quaternions.valid, dtype=bool)[keep].copy()
    invalid_count = int(count - valid.sum())

    logger.info(
        "Quaternion window: %d samples (%d invalid) from %.3f to %.3f",
        count, invalid_count, qtime[start], qtime[end],
    )
    return QuaternionWindow(
        time=qtime[keep].copy(),
        quaternion=np.asarray(quaternions.quaternion, dtype=np.float64)[keep].copy(),
        valid=valid,
        count=count,
        invalid_count=invalid_count,
        interpolate=quaternions.interpolate,
    )
