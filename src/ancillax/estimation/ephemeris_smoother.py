"""Fixed-interval Kalman smoother for spacecraft position and velocity.

The state is the inertial 6-vector ``[x, y, z, vx, vy, vz]`` and every
regularized ephemeris sample is a direct measurement of it (``H = I``).

Forward pass, for each sample ``k``:

1. Update the predicted state with the measured position and velocity.
2. Predict the covariance through the constant-velocity transition

   .. math::

       F(\\Delta t) = \\begin{bmatrix} I & \\Delta t\\, I \\\\ 0 & I \\end{bmatrix}

   plus a white-acceleration process noise.
3. Predict the state by sub-stepping the interval, re-evaluating Earth
   gravity at the position at the start of every sub-step.

The step after the final sample uses the nominal sampling period.  The
backward pass is the RTS recursion of
:func:`~ancillax.estimation.kalman.rts_smooth`.
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.calibration import EarthConstants, EphemerisSmootherConfig
from ancillax.config import get_dtype
from ancillax.estimation._types import FilterState, SmootherResult
from ancillax.estimation.kalman import check_finite, kf_update, rts_smooth
from ancillax.orbit_dynamics import accel_gravity

logger = logging.getLogger(__name__)


def ephemeris_transition_matrix(dt: ArrayLike) -> Array:
    """Constant-velocity transition matrix for a step of *dt* seconds."""
    dtype = get_dtype()
    eye3 = jnp.eye(3, dtype=dtype)
    zero3 = jnp.zeros((3, 3), dtype=dtype)
    return jnp.block([[eye3, dt * eye3], [zero3, eye3]])


def ephemeris_process_noise(dt: ArrayLike, config: EphemerisSmootherConfig) -> Array:
    """Process noise covariance for a step of *dt* seconds.

    Per axis, with position sigma :math:`\\sigma_p` and velocity sigma
    :math:`\\sigma_v`:

    .. math::

        Q_{pp} = \\Delta t^2 \\sigma_p^2 + \\tfrac{1}{4} \\Delta t^4 \\sigma_v^2,
        \\quad
        Q_{pv} = \\tfrac{1}{2} \\Delta t^3 \\sigma_v^2,
        \\quad
        Q_{vv} = \\Delta t^2 \\sigma_v^2

    Args:
        dt: Step length [s].
        config: Smoother noise model.

    Returns:
        jax.Array: 6x6 process noise covariance.
    """
    eye3 = jnp.eye(3, dtype=get_dtype())
    sp2 = config.process_position_sigma**2
    sv2 = config.process_velocity_sigma**2

    q_pp = dt**2 * sp2 + dt**4 * sv2 / 4.0
    q_pv = dt**3 * sv2 / 2.0
    q_vv = dt**2 * sv2

    return jnp.block([[q_pp * eye3, q_pv * eye3], [q_pv * eye3, q_vv * eye3]])


def propagate_state(
    x: ArrayLike,
    dt: ArrayLike,
    earth: EarthConstants,
    num_steps: int,
) -> Array:
    """Propagate a 6-element inertial state over *dt* in equal Euler sub-steps.

    Each sub-step advances the position with the current velocity and the
    velocity with the gravity acceleration evaluated at the sub-step's
    starting position.

    Args:
        x: State ``[x, y, z, vx, vy, vz]`` [m, m/s].
        dt: Interval length [s].
        earth: Gravity model constants.
        num_steps: Number of sub-steps.

    Returns:
        jax.Array: Propagated 6-element state.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    h = dt / num_steps

    def _substep(_, state):
        accel = accel_gravity(state[:3], earth)
        return jnp.concatenate([state[:3] + state[3:] * h, state[3:] + accel * h])

    return jax.lax.fori_loop(0, num_steps, _substep, x)


def kalman_smooth_ephemeris(
    time: ArrayLike,
    position: ArrayLike,
    velocity: ArrayLike,
    earth: EarthConstants | None = None,
    config: EphemerisSmootherConfig | None = None,
) -> SmootherResult:
    """Smooth a uniformly resampled inertial ephemeris.

    Args:
        time: Sample times [s], shape ``(N,)``. Strictly increasing.
        position: Measured ECI positions [m], shape ``(N, 3)``.
        velocity: Measured ECI velocities [m/s], shape ``(N, 3)``.
        earth: Gravity model constants. Defaults to :class:`EarthConstants`.
        config: Noise model. Defaults to :class:`EphemerisSmootherConfig`.

    Returns:
        SmootherResult: Smoothed states ``(N, 6)`` (position then velocity)
            and covariances ``(N, 6, 6)``, in forward time order.

    Raises:
        NumericalError: If the recursion produces non-finite values.

    Examples:
        ```python
        from ancillax.estimation import kalman_smooth_ephemeris
        result = kalman_smooth_ephemeris(t, r_eci, v_eci)
        r_smooth, v_smooth = result.x[:, :3], result.x[:, 3:]
        ```
    """
    if earth is None:
        earth = EarthConstants()
    if config is None:
        config = EphemerisSmootherConfig()

    dtype = get_dtype()
    time = jnp.asarray(time, dtype=dtype)
    z = jnp.concatenate(
        [jnp.asarray(position, dtype=dtype), jnp.asarray(velocity, dtype=dtype)], axis=1
    )

    dt = jnp.append(jnp.diff(time), jnp.asarray(config.sampling_period, dtype=dtype))

    H = jnp.eye(6, dtype=dtype)
    R = jnp.diag(jnp.array(
        [config.observation_position_sigma**2] * 3
        + [config.observation_velocity_sigma**2] * 3,
        dtype=dtype,
    ))
    P0 = jnp.diag(jnp.array(
        [config.initial_position_sigma**2] * 3
        + [config.initial_velocity_sigma**2] * 3,
        dtype=dtype,
    ))

    def _forward(carry, inputs):
        z_k, dt_k = inputs
        filtered = kf_update(carry, z_k, H, R).state

        F = ephemeris_transition_matrix(dt_k)
        Q = ephemeris_process_noise(dt_k, config)
        predicted = FilterState(
            x=propagate_state(filtered.x, dt_k, earth, config.num_steps),
            P=F @ filtered.P @ F.T + Q,
        )
        return predicted, (filtered.x, filtered.P, predicted.x, predicted.P, F)

    init = FilterState(x=z[0], P=P0)
    _, (x_filt, P_filt, x_pred, P_pred, F_hist) = jax.lax.scan(_forward, init, (z, dt))

    result = rts_smooth(x_filt, P_filt, x_pred, P_pred, F_hist)
    check_finite(result, "Ephemeris smoother")

    logger.info("Smoothed %d ephemeris points", time.shape[0])
    return result
