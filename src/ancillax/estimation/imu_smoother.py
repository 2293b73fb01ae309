"""Per-axis Kalman smoother fusing quaternion attitude with gyro rates.

Each attitude axis (roll, pitch, yaw) is estimated independently with the
3-state model ``[angle, rate, drift]``:

.. math::

    F = \\begin{bmatrix} 1 & \\Delta t & 0 \\\\ 0 & 1 & 0 \\\\ 0 & 0 & 1 \\end{bmatrix}

At IMU samples that coincide with a quaternion sample, the measurement is
the quaternion-derived angle together with the gyro rate, where the gyro
reads the true rate plus the drift:

.. math::

    H = \\begin{bmatrix} 1 & 0 & 0 \\\\ 0 & 1 & -1 \\end{bmatrix}

At all other samples only the gyro row is observed.  Samples flagged
invalid stay in the filter with their observation sigma inflated by
:attr:`~ancillax.calibration.ImuSmootherConfig.invalid_noise_scale`.

Before filtering, both streams are synchronized onto uniform grids
starting at zero: the quaternion angles directly, the gyro rates by
integrating them to angle, resampling, and differencing back to rate.
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.calibration import ImuSmootherConfig
from ancillax.config import get_dtype
from ancillax.constants import AS2RAD, IMU_SAMPLE_PERIOD, QUATERNION_SAMPLE_PERIOD
from ancillax.errors import CoverageError
from ancillax.estimation._types import FilterState, SmootherResult
from ancillax.estimation.kalman import check_finite, kf_predict, kf_update, rts_smooth
from ancillax.interpolation import lagrange_resample, window_all_valid

logger = logging.getLogger(__name__)


def imu_transition_matrix(dt: float) -> Array:
    """Angle/rate/drift transition matrix for a step of *dt* seconds."""
    return jnp.array([
        [1.0, dt, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ], dtype=get_dtype())


def imu_process_noise(dt: float, config: ImuSmootherConfig) -> Array:
    """Process noise for a step of *dt* seconds.

    Rate white noise drives the angle/rate block; drift-rate white noise
    drives the drift state.
    """
    sr2 = config.process_attitude_rate_sigma**2
    sd2 = config.process_drift_sigma**2
    return jnp.array([
        [dt**4 * sr2 / 4.0, dt**3 * sr2 / 2.0, 0.0],
        [dt**3 * sr2 / 2.0, dt**2 * sr2, 0.0],
        [0.0, 0.0, dt**2 * sd2],
    ], dtype=get_dtype())


def integrate_rates(time: ArrayLike, rate: ArrayLike, first_step: float = IMU_SAMPLE_PERIOD) -> Array:
    """Accumulate rate samples into angle.

    The first sample contributes ``rate[0] * first_step``; every later one
    ``rate[i] * (time[i] - time[i-1])``.

    Args:
        time: Sample times [s], shape ``(n,)``.
        rate: Rates, shape ``(n,)`` or ``(n, k)``.
        first_step: Step assigned to the first sample [s].

    Returns:
        jax.Array: Cumulative angles, same shape as *rate*.
    """
    dtype = get_dtype()
    time = jnp.asarray(time, dtype=dtype)
    rate = jnp.asarray(rate, dtype=dtype)
    steps = jnp.concatenate([jnp.array([first_step], dtype=dtype), jnp.diff(time)])
    if rate.ndim == 2:
        steps = steps[:, None]
    return jnp.cumsum(rate * steps, axis=0)


def _smooth_axis(
    z: Array,
    H: Array,
    R: Array,
    x0: Array,
    P0: Array,
    F: Array,
    Q: Array,
) -> SmootherResult:
    def _forward(carry, inputs):
        z_k, H_k, R_k = inputs
        filtered = kf_update(carry, z_k, H_k, R_k).state
        predicted = kf_predict(filtered, F, Q)
        return predicted, (filtered.x, filtered.P, predicted.x, predicted.P)

    n = z.shape[0]
    _, (x_filt, P_filt, x_pred, P_pred) = jax.lax.scan(
        _forward, FilterState(x=x0, P=P0), (z, H, R)
    )
    F_hist = jnp.broadcast_to(F, (n, 3, 3))
    return rts_smooth(x_filt, P_filt, x_pred, P_pred, F_hist)


def kalman_smooth_imu(
    quaternion_time: ArrayLike,
    attitude: ArrayLike,
    quaternion_valid: ArrayLike,
    imu_time: ArrayLike,
    imu_rate: ArrayLike,
    imu_valid: ArrayLike,
    config: ImuSmootherConfig | None = None,
) -> tuple[Array, Array, Array, Array]:
    """Fuse quaternion-derived attitude angles with gyro rates.

    Both time arrays must be relative to the same origin (the first IMU
    sample time).

    Args:
        quaternion_time: Quaternion sample times [s], shape ``(nq,)``.
        attitude: Quaternion-derived roll, pitch, yaw [rad], shape ``(nq, 3)``.
        quaternion_valid: Quaternion validity flags, shape ``(nq,)``.
        imu_time: IMU sample times [s], shape ``(ni,)``.
        imu_rate: Orbital-motion-corrected gyro rates [rad/s], shape ``(ni, 3)``.
        imu_valid: IMU validity flags, shape ``(ni,)``.
        config: Noise model. Defaults to :class:`ImuSmootherConfig`.

    Returns:
        tuple: ``(time, angles, quaternion_valid, imu_valid)`` where ``time``
            is the uniform grid ``i * IMU_SAMPLE_PERIOD`` of shape ``(ni,)``,
            ``angles`` the smoothed roll, pitch, yaw of shape ``(ni, 3)``,
            and the validity flags are those of the resampled streams.

    Raises:
        CoverageError: If the quaternion and IMU time ranges do not overlap.
        InsufficientDataError: If either stream is too short to interpolate.
        NumericalError: If the recursion produces non-finite values.
    """
    if config is None:
        config = ImuSmootherConfig()

    dtype = get_dtype()
    quaternion_time = jnp.asarray(quaternion_time, dtype=dtype)
    attitude = jnp.asarray(attitude, dtype=dtype)
    imu_time = jnp.asarray(imu_time, dtype=dtype)
    imu_rate = jnp.asarray(imu_rate, dtype=dtype)

    if quaternion_time[-1] < imu_time[0] or imu_time[-1] < quaternion_time[0]:
        raise CoverageError(
            "Quaternion samples [%.3f, %.3f] do not overlap IMU samples [%.3f, %.3f]"
            % (
                float(quaternion_time[0]), float(quaternion_time[-1]),
                float(imu_time[0]), float(imu_time[-1]),
            )
        )

    n_quat = quaternion_time.shape[0]
    n_imu = imu_time.shape[0]
    ratio = max(1, round(QUATERNION_SAMPLE_PERIOD / IMU_SAMPLE_PERIOD))

    # Synchronize both streams onto uniform grids starting at zero
    quat_grid = jnp.arange(n_quat, dtype=dtype) * QUATERNION_SAMPLE_PERIOD
    quat_angle, quat_starts = lagrange_resample(quaternion_time, attitude, quat_grid)
    quat_ok = window_all_valid(quaternion_valid, quat_starts)

    imu_grid = jnp.arange(n_imu, dtype=dtype) * IMU_SAMPLE_PERIOD
    imu_angle = integrate_rates(imu_time, imu_rate)
    imu_angle, imu_starts = lagrange_resample(imu_time, imu_angle, imu_grid)
    imu_ok = window_all_valid(imu_valid, imu_starts)
    rate = jnp.concatenate(
        [imu_angle[:1] / IMU_SAMPLE_PERIOD, jnp.diff(imu_angle, axis=0) / IMU_SAMPLE_PERIOD]
    )

    # Measurement schedule: angle row only where a quaternion sample lands
    idx = jnp.arange(n_imu)
    has_quat = (idx % ratio == 0) & (idx // ratio < n_quat)
    quat_idx = jnp.clip(idx // ratio, 0, n_quat - 1)

    scale = config.invalid_noise_scale
    sigma_att = config.observation_attitude_sigma * AS2RAD
    sigma_gyro = config.observation_gyro_sigma * AS2RAD
    var_att = jnp.where(quat_ok[quat_idx], sigma_att, sigma_att * scale) ** 2
    var_gyro = jnp.where(imu_ok, sigma_gyro, sigma_gyro * scale) ** 2

    H_full = jnp.array([[1.0, 0.0, 0.0], [0.0, 1.0, -1.0]], dtype=dtype)
    H_rate = jnp.array([[0.0, 0.0, 0.0], [0.0, 1.0, -1.0]], dtype=dtype)
    H = jnp.where(has_quat[:, None, None], H_full, H_rate)

    # Unobserved angle rows keep unit variance so S stays invertible
    R = jax.vmap(jnp.diag)(
        jnp.stack([jnp.where(has_quat, var_att, 1.0), var_gyro], axis=1)
    )

    F = imu_transition_matrix(IMU_SAMPLE_PERIOD)
    Q = imu_process_noise(IMU_SAMPLE_PERIOD, config)
    P0 = jnp.diag(jnp.array([
        (config.initial_attitude_sigma * AS2RAD) ** 2,
        (config.initial_attitude_rate_sigma * AS2RAD) ** 2,
        (config.initial_drift_sigma * AS2RAD) ** 2,
    ], dtype=dtype))

    def _axis(angle_q, rate_i):
        z = jnp.stack([jnp.where(has_quat, angle_q[quat_idx], 0.0), rate_i], axis=1)
        x0 = jnp.array([angle_q[0], rate_i[0], 0.0], dtype=dtype)
        return _smooth_axis(z, H, R, x0, P0, F, Q)

    result = jax.vmap(_axis, in_axes=(1, 1))(quat_angle, rate)
    check_finite(result, "IMU smoother")

    logger.info(
        "Smoothed %d IMU samples against %d quaternion samples", n_imu, n_quat
    )
    return imu_grid, result.x[:, :, 0].T, quat_ok, imu_ok
