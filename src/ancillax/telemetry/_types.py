"""Raw telemetry records and the working buffers derived from them.

- :class:`AcquisitionType`: What the instrument is looking at.
- :class:`L0REphemeris`, :class:`L0RAttitude`, :class:`L0RImu`: Raw Level-0
  reformatted telemetry as handed over by ingest.
- :class:`QuaternionBuffer`: Quaternions after anomaly repair.
- :class:`ImuBuffer`: Gyro samples in the ACS frame.
- :class:`ImuWindow`, :class:`QuaternionWindow`: Buffers trimmed to the
  common time window.

All times are seconds since J2000 unless a field says otherwise.
"""

from __future__ import annotations

import enum
from typing import NamedTuple

import numpy as np
from jax import Array


class AcquisitionType(enum.Enum):
    """Image acquisition type.

    Resolved in Python before any array computation, so it can select code
    paths freely.

    Attributes:
        EARTH: Earth-viewing acquisition; attitude is relative to the
            orbital frame.
        LUNAR: Lunar calibration; attitude is relative to the inertial frame.
        STELLAR: Stellar calibration; attitude is relative to the inertial
            frame.
        OTHER: Any other collection; coverage gaps are tolerated.
    """

    EARTH = "earth"
    LUNAR = "lunar"
    STELLAR = "stellar"
    OTHER = "other"

    @property
    def is_celestial(self) -> bool:
        """Whether attitude is referenced to the inertial frame."""
        return self in (AcquisitionType.LUNAR, AcquisitionType.STELLAR)

    @property
    def requires_coverage(self) -> bool:
        """Whether telemetry must span the whole imaging interval."""
        return self is not AcquisitionType.OTHER


class L0REphemeris(NamedTuple):
    """Raw ephemeris records.

    Attributes:
        time: Record times [s], shape ``(N,)``.
        ecef_position: Earth-fixed position [m], shape ``(N, 3)``.
        ecef_velocity: Earth-fixed velocity [m/s], shape ``(N, 3)``.
        warning_flag: Records flagged bad by the spacecraft, shape ``(N,)``.
    """

    time: np.ndarray
    ecef_position: np.ndarray
    ecef_velocity: np.ndarray
    warning_flag: np.ndarray


class L0RAttitude(NamedTuple):
    """Raw attitude quaternion samples.

    Attributes:
        time: Sample times [s], shape ``(N,)``.
        quaternion: Inertial-to-ACS quaternions, scalar-first, shape ``(N, 4)``.
    """

    time: np.ndarray
    quaternion: np.ndarray


class L0RImu(NamedTuple):
    """Raw gyro records, each holding one record of samples.

    Attributes:
        time: Record start times [s], shape ``(M,)``.
        sample_counts: Clock-count offset of each sample from the record
            start, shape ``(M, 50)``.
        gyro: Angular increments [arcsec] in the gyro frame, shape
            ``(M, 50, 3)``.
        warning_flag: Records flagged bad by the spacecraft, shape ``(M,)``.
    """

    time: np.ndarray
    sample_counts: np.ndarray
    gyro: np.ndarray
    warning_flag: np.ndarray


class QuaternionBuffer(NamedTuple):
    """Quaternion samples after anomaly repair.

    Attributes:
        time: Sample times [s], shape ``(count,)``.
        quaternion: Quaternions, zero where a sample was blanked, shape
            ``(count, 4)``.
        valid: Validity flags, shape ``(count,)``.
        count: Number of samples, including any inserted for a missing
            record.
        interpolate: Whether a missing record was inserted, so the gap must
            be bridged by the attitude smoother.
    """

    time: np.ndarray
    quaternion: np.ndarray
    valid: np.ndarray
    count: int
    interpolate: bool


class ImuBuffer(NamedTuple):
    """Gyro samples in the ACS frame.

    Attributes:
        time: Sample times [s], shape ``(n,)``.
        data: Angular increments [rad] in the ACS frame, shape ``(n, 3)``.
        valid: Validity flags, shape ``(n,)``.
        count: Number of samples.
        imu_valid: ``False`` when no gyro telemetry was available and the
            buffer only mirrors the quaternion times.
    """

    time: np.ndarray
    data: np.ndarray
    valid: np.ndarray
    count: int
    imu_valid: bool


class ImuWindow(NamedTuple):
    """Gyro samples inside the ephemeris time span.

    Attributes:
        time: Sample times [s], shape ``(count,)``.
        data: Angular increments [rad], shape ``(count, 3)``.
        valid: Validity flags, shape ``(count,)``.
        count: Number of retained samples.
        invalid_count: Number of retained samples flagged invalid.
        epoch: ``(year, doy, sod)`` of the first retained sample.
        ephemeris_start: Ephemeris start time [s].
        ephemeris_stop: Ephemeris stop time [s].
        imu_valid: Carried over from :class:`ImuBuffer`.
    """

    time: np.ndarray
    data: np.ndarray
    valid: np.ndarray
    count: int
    invalid_count: int
    epoch: Array
    ephemeris_start: float
    ephemeris_stop: float
    imu_valid: bool


class QuaternionWindow(NamedTuple):
    """Quaternion samples aligned to the gyro window.

    Attributes:
        time: Sample times [s], shape ``(count,)``.
        quaternion: Quaternions, shape ``(count, 4)``.
        valid: Validity flags, shape ``(count,)``.
        count: Number of retained samples.
        invalid_count: Number of retained samples flagged invalid.
        interpolate: Carried over from :class:`QuaternionBuffer`.
    """

    time: np.ndarray
    quaternion: np.ndarray
    valid: np.ndarray
    count: int
    invalid_count: int
    interpolate: bool
