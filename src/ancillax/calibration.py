"""Calibration parameter dataclasses for ancillary processing.

Collects the tolerances, nominal orbit values, physical constants and
filter tuning consumed by the processing chain into immutable
configuration objects.  :class:`CalibrationParameters` aggregates the
individual groups and is the single object threaded through the pipeline.

All values are SI unless a field says otherwise (the nominal orbit radius
is kept in kilometres and the attitude filter sigmas in arcseconds, the
units they are usually quoted in).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import jax.numpy as jnp
from jax import Array

from ancillax.config import get_dtype
from ancillax.constants import (
    EPHEMERIS_SAMPLE_PERIOD,
    GM_EARTH,
    J2_EARTH,
    R_EARTH,
)


@dataclass(frozen=True)
class EarthConstants:
    """Earth model used by the ephemeris gravity propagation.

    Args:
        semi_major_axis: Reference radius of the gravity field [m].
        gravity_constant: Earth gravitational parameter [m^3/s^2].
        j2: Second zonal harmonic [dimensionless].
    """

    semi_major_axis: float = R_EARTH
    gravity_constant: float = GM_EARTH
    j2: float = J2_EARTH

    def __post_init__(self) -> None:
        if self.semi_major_axis <= 0.0:
            raise ValueError(
                f"semi_major_axis must be positive, got {self.semi_major_axis}"
            )
        if self.gravity_constant <= 0.0:
            raise ValueError(
                f"gravity_constant must be positive, got {self.gravity_constant}"
            )


@dataclass(frozen=True)
class OrbitParameters:
    """Nominal orbit used for ephemeris physical-consistency checks.

    Args:
        nominal_angular_momentum: Specific orbital angular momentum
            magnitude ``|r x v|`` [m^2/s].
        nominal_orbit_radius: Nominal orbit radius [km].
    """

    nominal_angular_momentum: float
    nominal_orbit_radius: float

    def __post_init__(self) -> None:
        if self.nominal_angular_momentum <= 0.0:
            raise ValueError(
                f"nominal_angular_momentum must be positive, "
                f"got {self.nominal_angular_momentum}"
            )
        if self.nominal_orbit_radius <= 0.0:
            raise ValueError(
                f"nominal_orbit_radius must be positive, "
                f"got {self.nominal_orbit_radius}"
            )

    @staticmethod
    def circular(semi_major_axis: float, gm: float = GM_EARTH) -> OrbitParameters:
        """Nominal values for a circular orbit.

        Args:
            semi_major_axis: Orbit radius [m].
            gm: Gravitational parameter [m^3/s^2].

        Returns:
            OrbitParameters: ``h = sqrt(gm * a)`` and the radius in km.

        Examples:
            ```python
            from ancillax.calibration import OrbitParameters
            orbit = OrbitParameters.circular(7078137.0)
            orbit.nominal_orbit_radius
            ```
        """
        return OrbitParameters(
            nominal_angular_momentum=math.sqrt(gm * semi_major_axis),
            nominal_orbit_radius=semi_major_axis / 1000.0,
        )


@dataclass(frozen=True)
class AncillaryQAThresholds:
    """Quality-assessment thresholds applied to raw telemetry.

    Args:
        quaternion_normalization_outlier_threshold: A quaternion is valid
            only when ``| |q| - 1 |`` is strictly below this value.
        orbit_radius_tolerance: Allowed deviation from the nominal orbit
            radius [m] (inclusive).
        angular_momentum_tolerance: Allowed deviation from the nominal
            angular momentum [m^2/s] (inclusive).
    """

    quaternion_normalization_outlier_threshold: float = 1.0e-3
    orbit_radius_tolerance: float = 50.0e3
    angular_momentum_tolerance: float = 1.0e8

    def __post_init__(self) -> None:
        if self.quaternion_normalization_outlier_threshold <= 0.0:
            raise ValueError(
                "quaternion_normalization_outlier_threshold must be positive, "
                f"got {self.quaternion_normalization_outlier_threshold}"
            )
        if self.orbit_radius_tolerance < 0.0:
            raise ValueError(
                f"orbit_radius_tolerance must be non-negative, "
                f"got {self.orbit_radius_tolerance}"
            )
        if self.angular_momentum_tolerance < 0.0:
            raise ValueError(
                f"angular_momentum_tolerance must be non-negative, "
                f"got {self.angular_momentum_tolerance}"
            )


@dataclass(frozen=True)
class ImuParameters:
    """Gyro timing and alignment.

    Args:
        clock_scale: Duration of one IMU clock count [s].
        gyro_to_acs: 3x3 rotation from the gyro frame to the attitude
            control system (ACS) frame.
    """

    clock_scale: float = 1.0e-3
    gyro_to_acs: Array = field(default_factory=lambda: jnp.eye(3, dtype=get_dtype()))

    def __post_init__(self) -> None:
        if self.clock_scale <= 0.0:
            raise ValueError(f"clock_scale must be positive, got {self.clock_scale}")
        if jnp.shape(self.gyro_to_acs) != (3, 3):
            raise ValueError(
                f"gyro_to_acs must have shape (3, 3), got {jnp.shape(self.gyro_to_acs)}"
            )


@dataclass(frozen=True)
class EphemerisSmootherConfig:
    """Noise model of the 6-state ephemeris Kalman smoother.

    Args:
        process_position_sigma: Position process noise sigma.
        process_velocity_sigma: Velocity process noise sigma.
        observation_position_sigma: Position measurement sigma [m].
        observation_velocity_sigma: Velocity measurement sigma [m/s].
        initial_position_sigma: Initial position uncertainty [m].
        initial_velocity_sigma: Initial velocity uncertainty [m/s].
        num_steps: Number of gravity sub-steps per prediction interval.
        sampling_period: Step used after the final sample [s].
    """

    process_position_sigma: float = 5.0
    process_velocity_sigma: float = 0.5
    observation_position_sigma: float = 1.0
    observation_velocity_sigma: float = 0.02
    initial_position_sigma: float = 25.0
    initial_velocity_sigma: float = 8.0
    num_steps: int = 10
    sampling_period: float = EPHEMERIS_SAMPLE_PERIOD

    def __post_init__(self) -> None:
        if self.num_steps < 1:
            raise ValueError(f"num_steps must be >= 1, got {self.num_steps}")
        if self.sampling_period <= 0.0:
            raise ValueError(
                f"sampling_period must be positive, got {self.sampling_period}"
            )


@dataclass(frozen=True)
class ImuSmootherConfig:
    """Noise model of the per-axis attitude/gyro Kalman smoother.

    Args:
        process_attitude_rate_sigma: Attitude-rate white noise [rad/s^2].
        process_drift_sigma: Gyro drift-rate white noise [rad/s^2].
        observation_attitude_sigma: Quaternion-derived angle sigma [arcsec].
        observation_gyro_sigma: Gyro rate sigma [arcsec/s].
        initial_attitude_sigma: Initial angle uncertainty [arcsec].
        initial_attitude_rate_sigma: Initial rate uncertainty [arcsec/s].
        initial_drift_sigma: Initial drift uncertainty [arcsec/s].
        invalid_noise_scale: Multiplier applied to the observation sigma of
            samples flagged invalid.
    """

    process_attitude_rate_sigma: float = 1.0e-2
    process_drift_sigma: float = 1.0e-5
    observation_attitude_sigma: float = 5.0
    observation_gyro_sigma: float = 2.5
    initial_attitude_sigma: float = 7.5
    initial_attitude_rate_sigma: float = 31.0
    initial_drift_sigma: float = 5.0
    invalid_noise_scale: float = 100.0

    def __post_init__(self) -> None:
        if self.invalid_noise_scale < 1.0:
            raise ValueError(
                f"invalid_noise_scale must be >= 1, got {self.invalid_noise_scale}"
            )


@dataclass(frozen=True)
class CalibrationParameters:
    """All calibration inputs of the ancillary processing chain.

    Args:
        orbit: Nominal orbit values.
        earth: Earth gravity constants.
        qa: Telemetry quality thresholds.
        imu: Gyro timing and alignment.
        ephemeris_smoother: Ephemeris filter tuning.
        imu_smoother: Attitude filter tuning.

    Examples:
        ```python
        from ancillax.calibration import CalibrationParameters
        cal = CalibrationParameters.landsat8()
        cal.orbit.nominal_orbit_radius
        ```
    """

    orbit: OrbitParameters
    earth: EarthConstants = field(default_factory=EarthConstants)
    qa: AncillaryQAThresholds = field(default_factory=AncillaryQAThresholds)
    imu: ImuParameters = field(default_factory=ImuParameters)
    ephemeris_smoother: EphemerisSmootherConfig = field(
        default_factory=EphemerisSmootherConfig
    )
    imu_smoother: ImuSmootherConfig = field(default_factory=ImuSmootherConfig)

    @staticmethod
    def for_orbit(semi_major_axis: float) -> CalibrationParameters:
        """Preset: default thresholds around a circular orbit.

        Args:
            semi_major_axis: Nominal orbit radius [m].

        Returns:
            CalibrationParameters: Configuration with nominal angular
                momentum and radius derived from *semi_major_axis*.
        """
        return CalibrationParameters(orbit=OrbitParameters.circular(semi_major_axis))

    @staticmethod
    def landsat8() -> CalibrationParameters:
        """Preset: 705 km sun-synchronous imaging orbit.

        Returns:
            CalibrationParameters: Nominal values for a 705 km altitude
                circular orbit above the WGS-84 equatorial radius.
        """
        return CalibrationParameters.for_orbit(6378137.0 + 705.0e3)
