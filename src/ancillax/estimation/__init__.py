"""Fixed-interval Kalman smoothing of ephemeris and attitude telemetry.

Available components:

- :class:`FilterState` -- Filter state (estimate and covariance)
- :class:`FilterResult` -- Update result with diagnostics
- :class:`SmootherResult` -- Smoothed state and covariance history
- :func:`kf_predict` -- Linear state propagation
- :func:`kf_update` -- Linear measurement update (Joseph form)
- :func:`rts_smooth` -- Rauch-Tung-Striebel backward pass
- :func:`kalman_smooth_ephemeris` -- 6-state position/velocity smoother
- :func:`kalman_smooth_imu` -- Per-axis angle/rate/drift smoother

The recursions are expressed with ``jax.lax.scan``; every smoother call
owns its history arrays.
"""

from ancillax.estimation._types import FilterResult, FilterState, SmootherResult
from ancillax.estimation.ephemeris_smoother import (
    ephemeris_process_noise,
    ephemeris_transition_matrix,
    kalman_smooth_ephemeris,
    propagate_state,
)
from ancillax.estimation.imu_smoother import (
    imu_process_noise,
    imu_transition_matrix,
    integrate_rates,
    kalman_smooth_imu,
)
from ancillax.estimation.kalman import check_finite, kf_predict, kf_update, rts_smooth

__all__ = [
    "FilterState",
    "FilterResult",
    "SmootherResult",
    "kf_predict",
    "kf_update",
    "rts_smooth",
    "check_finite",
    "ephemeris_transition_matrix",
    "ephemeris_process_noise",
    "propagate_state",
    "kalman_smooth_ephemeris",
    "imu_transition_matrix",
    "imu_process_noise",
    "integrate_rates",
    "kalman_smooth_imu",
]
