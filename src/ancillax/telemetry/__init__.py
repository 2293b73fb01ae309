"""Raw telemetry types, validation and windowing.

- **Types**: L0R records, repaired buffers, acquisition type
- **Quaternion anomalies**: missing record, duplicate tail and head repair
- **IMU**: gyro record unpacking into the ACS frame
- **Windowing**: trimming gyro and quaternion samples to a common span
"""

from ancillax.telemetry._types import (
    AcquisitionType,
    ImuBuffer,
    ImuWindow,
    L0RAttitude,
    L0REphemeris,
    L0RImu,
    QuaternionBuffer,
    QuaternionWindow,
)
from ancillax.telemetry.imu import convert_imu_to_acs
from ancillax.telemetry.quaternion_outliers import (
    DUPLICATE_HEAD_SAMPLES,
    DUPLICATE_TAIL_SAMPLES,
    identify_quaternion_outliers,
)
from ancillax.telemetry.windowing import (
    ephemeris_time_span,
    extract_valid_imu_window,
    extract_valid_quaternion_window,
)

__all__ = [
    "AcquisitionType",
    "L0REphemeris",
    "L0RAttitude",
    "L0RImu",
    "QuaternionBuffer",
    "ImuBuffer",
    "ImuWindow",
    "QuaternionWindow",
    "identify_quaternion_outliers",
    "DUPLICATE_TAIL_SAMPLES",
    "DUPLICATE_HEAD_SAMPLES",
    "convert_imu_to_acs",
    "ephemeris_time_span",
    "extract_valid_imu_window",
    "extract_valid_quaternion_window",
]
