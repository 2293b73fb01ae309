"""Top-level ancillary preprocessing.

Runs the ephemeris path, then the attitude path bounded by the resulting
ephemeris.  Any stage failure propagates as an
:class:`~ancillax.errors.AncillaryError` and no partial result is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

from ancillax.attitude import AttitudeSeries, preprocess_attitude
from ancillax.calibration import CalibrationParameters
from ancillax.config import ensure_float64
from ancillax.ephemeris import EphemerisSeries, preprocess_ephemeris
from ancillax.telemetry import AcquisitionType, L0RAttitude, L0REphemeris, L0RImu

logger = logging.getLogger(__name__)


class PreprocessResult(NamedTuple):
    """Output of :func:`preprocess`.

    Attributes:
        attitude: Final attitude series.
        ephemeris: Final ephemeris series.
        invalid_ephemeris_count: Raw ephemeris records rejected.
        invalid_attitude_count: Invalid gyro plus invalid quaternion samples.
    """

    attitude: AttitudeSeries
    ephemeris: EphemerisSeries
    invalid_ephemeris_count: int
    invalid_attitude_count: int


def preprocess(
    l0r_attitude: L0RAttitude,
    l0r_ephemeris: L0REphemeris,
    l0r_imu: L0RImu | None,
    interval_start: Sequence[float],
    interval_stop: Sequence[float],
    acquisition_type: AcquisitionType,
    calibration: CalibrationParameters,
) -> PreprocessResult:
    """Turn one interval's raw ancillary telemetry into ephemeris and attitude.

    Args:
        l0r_attitude: Raw quaternion samples.
        l0r_ephemeris: Raw ephemeris records.
        l0r_imu: Raw gyro records, or ``None``.
        interval_start: Imaging interval start ``(year, doy, sod)``.
        interval_stop: Imaging interval stop ``(year, doy, sod)``.
        acquisition_type: Acquisition type.
        calibration: Calibration parameters.

    Returns:
        PreprocessResult: Both series and the invalid-sample counts.

    Examples:
        ```python
        from ancillax import AcquisitionType, CalibrationParameters, preprocess
        result = preprocess(
            l0r_attitude, l0r_ephemeris, l0r_imu,
            (2024, 100, 3600.0), (2024, 100, 3624.0),
            AcquisitionType.EARTH, CalibrationParameters.landsat8(),
        )
        result.ephemeris.number_of_samples, result.invalid_attitude_count
        ```
    """
    ensure_float64()
    interval = (interval_start, interval_stop)

    ephemeris, invalid_ephemeris = preprocess_ephemeris(
        l0r_ephemeris, calibration, acquisition_type, interval
    )
    attitude, invalid_attitude = preprocess_attitude(
        l0r_attitude, l0r_imu, calibration, ephemeris, acquisition_type, interval
    )

    logger.info(
        "Preprocessing complete: %d ephemeris samples (%d invalid), "
        "%d attitude samples (%d invalid)",
        ephemeris.number_of_samples, invalid_ephemeris,
        attitude.number_of_samples, invalid_attitude,
    )
    return PreprocessResult(
        attitude=attitude,
        ephemeris=ephemeris,
        invalid_ephemeris_count=invalid_ephemeris,
        invalid_attitude_count=invalid_attitude,
    )
