"""Attitude processing: raw quaternion and gyro telemetry to an attitude series."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ancillax.attitude._types import AttitudeSeries
from ancillax.attitude.build import convert_imu_to_attitude
from ancillax.attitude.spacecraft_attitude import compute_spacecraft_attitude
from ancillax.calibration import CalibrationParameters
from ancillax.config import ensure_float64
from ancillax.constants import BAD_ATTITUDE_PERCENT_THRESHOLD
from ancillax.ephemeris import EphemerisSeries
from ancillax.telemetry import (
    AcquisitionType,
    L0RAttitude,
    L0RImu,
    convert_imu_to_acs,
    extract_valid_imu_window,
    extract_valid_quaternion_window,
    identify_quaternion_outliers,
)

logger = logging.getLogger(__name__)


def preprocess_attitude(
    l0r_attitude: L0RAttitude,
    l0r_imu: L0RImu | None,
    calibration: CalibrationParameters,
    ephemeris: EphemerisSeries,
    acquisition_type: AcquisitionType = AcquisitionType.EARTH,
    interval: tuple[Sequence[float], Sequence[float]] | None = None,
) -> tuple[AttitudeSeries, int]:
    """Produce the final attitude series.

    Runs quaternion anomaly repair, gyro conversion to the ACS frame, gyro
    and quaternion windowing, attitude computation with smoothing, and
    record assembly.

    Args:
        l0r_attitude: Raw quaternion samples.
        l0r_imu: Raw gyro records, or ``None`` when there are none.
        calibration: Calibration parameters.
        ephemeris: Final ephemeris series; its span bounds the output.
        acquisition_type: Acquisition type.
        interval: Imaging interval as ``((year, doy, sod), (year, doy, sod))``,
            or ``None`` to skip the interval coverage check.

    Returns:
        tuple: ``(series, invalid_count)`` where ``invalid_count`` is the
            number of invalid gyro plus invalid quaternion samples inside
            the processing window.

    Raises:
        CoverageError: If the telemetry does not cover the ephemeris span
            or the interval.
        InsufficientDataError: If no usable quaternion remains.
        NumericalError: If a frame or the smoother degenerates.
    """
    ensure_float64()

    quaternions = identify_quaternion_outliers(l0r_attitude, calibration.qa)
    imu_buffer = convert_imu_to_acs(l0r_imu, quaternions, calibration.imu)
    original_count = imu_buffer.count

    imu = extract_valid_imu_window(ephemeris, imu_buffer)
    quat_window = extract_valid_quaternion_window(imu.time, quaternions)

    attitude = compute_spacecraft_attitude(
        acquisition_type, ephemeris, imu, quat_window, interval, calibration.imu_smoother
    )
    series = convert_imu_to_attitude(attitude, ephemeris, acquisition_type)

    invalid_count = imu.invalid_count + quat_window.invalid_count
    percent_bad = 100.0 * invalid_count / original_count
    if percent_bad > BAD_ATTITUDE_PERCENT_THRESHOLD:
        logger.warning(
            "%.2f%% of attitude points are invalid (%d of %d)",
            percent_bad, invalid_count, original_count,
        )

    logger.info("Attitude series has %d samples", series.number_of_samples)
    return series, invalid_count
