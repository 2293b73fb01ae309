"""Linear Kalman filter and Rauch-Tung-Striebel smoother kernels.

Building blocks shared by the ephemeris and attitude smoothers.  The
measurement update uses the Joseph form for guaranteed symmetry and
positive semi-definiteness of the updated covariance.

The forward filter is run by the callers with ``jax.lax.scan``, which
collects the per-step filtered and predicted histories consumed by
:func:`rts_smooth`.  History arrays follow one convention:

- ``x_filt[k]``, ``P_filt[k]``: state after the update at sample ``k``.
- ``x_pred[k]``, ``P_pred[k]``: prediction for sample ``k + 1`` made from
  ``x_filt[k]``.
- ``F[k]``: transition matrix used for that prediction.

References:
    1. H. E. Rauch, F. Tung and C. T. Striebel, "Maximum likelihood
       estimates of linear dynamic systems", *AIAA Journal* 3(8), 1965.
    2. R. G. Brown and P. Y. C. Hwang, *Introduction to Random Signals and
       Applied Kalman Filtering*, 4th ed., 2012, Ch. 6.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.config import get_dtype
from ancillax.errors import NumericalError
from ancillax.estimation._types import FilterResult, FilterState, SmootherResult


def kf_predict(filter_state: FilterState, F: ArrayLike, Q: ArrayLike) -> FilterState:
    """Propagate the filter state through a linear transition.

    Args:
        filter_state: Current filter state ``(x, P)``.
        F: State transition matrix of shape ``(n, n)``.
        Q: Process noise covariance matrix of shape ``(n, n)``.

    Returns:
        FilterState: Predicted state ``F x`` and covariance ``F P F^T + Q``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ancillax.estimation import FilterState, kf_predict

        fs = FilterState(x=jnp.array([0.0, 1.0]), P=jnp.eye(2))
        F = jnp.array([[1.0, 0.1], [0.0, 1.0]])
        fs_pred = kf_predict(fs, F, jnp.eye(2) * 1e-6)
        ```
    """
    dtype = get_dtype()
    x = jnp.asarray(filter_state.x, dtype=dtype)
    P = jnp.asarray(filter_state.P, dtype=dtype)
    F = jnp.asarray(F, dtype=dtype)
    Q = jnp.asarray(Q, dtype=dtype)

    return FilterState(x=F @ x, P=F @ P @ F.T + Q)


def kf_update(
    filter_state: FilterState,
    z: ArrayLike,
    H: ArrayLike,
    R: ArrayLike,
) -> FilterResult:
    """Incorporate a linear measurement ``z = H x + v`` into the filter state.

    A row of ``H`` that is entirely zero, paired with a non-zero variance in
    ``R`` and no correlation to the other rows, contributes nothing to the
    gain.  The attitude smoother uses this to switch between its one- and
    two-component measurements without changing array shapes.

    Args:
        filter_state: Predicted filter state ``(x_pred, P_pred)``.
        z: Measurement vector of shape ``(m,)``.
        H: Observation matrix of shape ``(m, n)``.
        R: Measurement noise covariance matrix of shape ``(m, m)``.

    Returns:
        FilterResult: Updated state, innovation, innovation covariance,
            and Kalman gain.
    """
    dtype = get_dtype()
    x = jnp.asarray(filter_state.x, dtype=dtype)
    P = jnp.asarray(filter_state.P, dtype=dtype)
    z = jnp.asarray(z, dtype=dtype)
    H = jnp.asarray(H, dtype=dtype)
    R = jnp.asarray(R, dtype=dtype)

    n = x.shape[0]

    innovation = z - H @ x
    S = H @ P @ H.T + R

    # K^T = S^{-1} (H P) since P is symmetric
    K = jnp.linalg.solve(S, H @ P).T

    x_upd = x + K @ innovation

    # Joseph form covariance update: P = (I-KH) P (I-KH)^T + K R K^T
    IKH = jnp.eye(n, dtype=dtype) - K @ H
    P_upd = IKH @ P @ IKH.T + K @ R @ K.T

    return FilterResult(
        state=FilterState(x=x_upd, P=P_upd),
        innovation=innovation,
        innovation_covariance=S,
        kalman_gain=K,
    )


def rts_smooth(
    x_filt: ArrayLike,
    P_filt: ArrayLike,
    x_pred: ArrayLike,
    P_pred: ArrayLike,
    F: ArrayLike,
) -> SmootherResult:
    """Run the Rauch-Tung-Striebel backward pass over a forward history.

    Starting from the final prediction, for ``k = N-1, ..., 0``:

    .. math::

        A_k &= P_k F_k^T (P^-_{k+1})^{-1} \\\\
        \\hat{x}_k &= x_k + A_k (\\hat{x}_{k+1} - x^-_{k+1}) \\\\
        \\hat{P}_k &= P_k + A_k (\\hat{P}_{k+1} - P^-_{k+1}) A_k^T

    Because the recursion is seeded with the final prediction, the last
    smoothed state equals the last filtered state.

    Args:
        x_filt: Filtered states, shape ``(N, n)``.
        P_filt: Filtered covariances, shape ``(N, n, n)``.
        x_pred: One-step predictions, shape ``(N, n)``.
        P_pred: Predicted covariances, shape ``(N, n, n)``.
        F: Transition matrices, shape ``(N, n, n)``.

    Returns:
        SmootherResult: Smoothed states and covariances in forward order.
    """
    dtype = get_dtype()
    x_filt = jnp.asarray(x_filt, dtype=dtype)
    P_filt = jnp.asarray(P_filt, dtype=dtype)
    x_pred = jnp.asarray(x_pred, dtype=dtype)
    P_pred = jnp.asarray(P_pred, dtype=dtype)
    F = jnp.asarray(F, dtype=dtype)

    def _step(carry, inputs):
        x_next, P_next = carry
        x_k, P_k, xp_k, Pp_k, F_k = inputs

        # A = P F^T Pp^{-1}, computed as (Pp^{-1} F P)^T with Pp, P symmetric
        A = jnp.linalg.solve(Pp_k, F_k @ P_k).T
        x_s = x_k + A @ (x_next - xp_k)
        P_s = P_k + A @ (P_next - Pp_k) @ A.T
        return (x_s, P_s), (x_s, P_s)

    init = (x_pred[-1], P_pred[-1])
    _, (x_s, P_s) = jax.lax.scan(
        _step, init, (x_filt, P_filt, x_pred, P_pred, F), reverse=True
    )
    return SmootherResult(x=x_s, P=P_s)


def check_finite(result: SmootherResult, label: str) -> SmootherResult:
    """Raise :class:`NumericalError` unless every smoothed value is finite.

    Args:
        result: Smoother output to check.
        label: Name of the smoother, used in the error message.

    Returns:
        SmootherResult: *result*, unchanged.

    Raises:
        NumericalError: If any state or covariance entry is NaN or infinite,
            which happens when an innovation or prediction covariance is
            singular.
    """
    if not (bool(jnp.all(jnp.isfinite(result.x))) and bool(jnp.all(jnp.isfinite(result.P)))):
        raise NumericalError(
            f"{label} produced non-finite values; a covariance matrix was singular"
        )
    return result
