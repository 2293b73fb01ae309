"""
ancillax reconstructs validated spacecraft ephemeris and attitude from raw ancillary telemetry, implemented in JAX.
"""

from .constants import (
    AS2RAD,
    RAD2AS,
    R_EARTH,
    GM_EARTH,
    J2_EARTH,
    OMEGA_EARTH,
    IMU_SAMPLE_PERIOD,
    QUATERNION_SAMPLE_PERIOD,
    SAMPLES_PER_RECORD,
    EPHEMERIS_SAMPLE_PERIOD,
    LAGRANGE_POINTS,
)

from .config import set_dtype, get_dtype

from .errors import (
    AncillaryError,
    InsufficientDataError,
    CoverageError,
    NumericalError,
)

from .calibration import (
    EarthConstants,
    OrbitParameters,
    AncillaryQAThresholds,
    ImuParameters,
    EphemerisSmootherConfig,
    ImuSmootherConfig,
    CalibrationParameters,
)

from .telemetry import (
    AcquisitionType,
    L0REphemeris,
    L0RAttitude,
    L0RImu,
    identify_quaternion_outliers,
)

from .ephemeris import (
    EphemerisSeries,
    smooth_ephemeris,
    preprocess_ephemeris,
    get_state_at_time,
)

from .estimation import (
    kalman_smooth_ephemeris,
    kalman_smooth_imu,
)

from .attitude import (
    AttitudeSeries,
    compute_spacecraft_attitude,
    preprocess_attitude,
)

from .pipeline import PreprocessResult, preprocess

__all__ = [
    # Constants
    "AS2RAD",
    "RAD2AS",
    "R_EARTH",
    "GM_EARTH",
    "J2_EARTH",
    "OMEGA_EARTH",
    "IMU_SAMPLE_PERIOD",
    "QUATERNION_SAMPLE_PERIOD",
    "SAMPLES_PER_RECORD",
    "EPHEMERIS_SAMPLE_PERIOD",
    "LAGRANGE_POINTS",
    # Config
    "set_dtype",
    "get_dtype",
    # Errors
    "AncillaryError",
    "InsufficientDataError",
    "CoverageError",
    "NumericalError",
    # Calibration
    "EarthConstants",
    "OrbitParameters",
    "AncillaryQAThresholds",
    "ImuParameters",
    "EphemerisSmootherConfig",
    "ImuSmootherConfig",
    "CalibrationParameters",
    # Telemetry
    "AcquisitionType",
    "L0REphemeris",
    "L0RAttitude",
    "L0RImu",
    "identify_quaternion_outliers",
    # Ephemeris
    "EphemerisSeries",
    "smooth_ephemeris",
    "preprocess_ephemeris",
    "get_state_at_time",
    # Estimation
    "kalman_smooth_ephemeris",
    "kalman_smooth_imu",
    # Attitude
    "AttitudeSeries",
    "compute_spacecraft_attitude",
    "preprocess_attitude",
    # Pipeline
    "PreprocessResult",
    "preprocess",
]
