"""Gyro record unpacking and alignment to the ACS frame."""

from __future__ import annotations

import logging

import numpy as np

from ancillax.calibration import ImuParameters
from ancillax.constants import AS2RAD
from ancillax.telemetry._types import ImuBuffer, L0RImu, QuaternionBuffer

logger = logging.getLogger(__name__)


def convert_imu_to_acs(
    l0r: L0RImu | None,
    quaternions: QuaternionBuffer,
    imu: ImuParameters | None = None,
) -> ImuBuffer:
    """Flatten gyro records into time-tagged ACS-frame samples.

    Each sample time is the record time plus its clock-count offset scaled by
    ``imu.clock_scale``.  Angular increments are converted from arcseconds to
    radians and rotated into the ACS frame.  Every sample of a record carrying
    the warning flag is invalid.

    When there is no gyro telemetry, the buffer mirrors the quaternion times
    with zero data, every sample invalid and ``imu_valid`` false, so the
    attitude path can fall back to quaternions alone.

    Args:
        l0r: Raw gyro records, or ``None``.
        quaternions: Repaired quaternion buffer.
        imu: Gyro timing and alignment. Defaults to :class:`ImuParameters`.

    Returns:
        ImuBuffer: Samples in time order.
    """
    if imu is None:
        imu = ImuParameters()

    if l0r is None or np.asarray(l0r.time).shape[0] == 0:
        logger.warning("No IMU data; attitude will be derived from quaternions only")
        count = quaternions.count
        return ImuBuffer(
            time=np.array(quaternions.time, dtype=np.float64),
            data=np.zeros((count, 3), dtype=np.float64),
            valid=np.zeros(count, dtype=bool),
            count=count,
            imu_valid=False,
        )

    record_time = np.asarray(l0r.time, dtype=np.float64)
    counts = np.asarray(l0r.sample_counts, dtype=np.float64)
    gyro = np.asarray(l0r.gyro, dtype=np.float64)
    flags = np.asarray(l0r.warning_flag, dtype=bool)

    samples_per_record = counts.shape[1]
    time = (record_time[:, None] + counts * imu.clock_scale).reshape(-1)
    gyro_to_acs = np.asarray(imu.gyro_to_acs, dtype=np.float64)
    data = (gyro.reshape(-1, 3) * AS2RAD) @ gyro_to_acs.T
    valid = np.repeat(~flags, samples_per_record)

    logger.info(
        "Converted %d IMU records (%d samples, %d flagged records)",
        record_time.shape[0], time.shape[0], int(flags.sum()),
    )
    return ImuBuffer(time=time, data=data, valid=valid, count=time.shape[0], imu_valid=True)
