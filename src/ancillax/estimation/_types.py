"""Type definitions for the fixed-interval smoothers.

Provides the core data types shared by the ephemeris and attitude
smoothers:

- :class:`FilterState`: Current filter state containing the state estimate
  and covariance matrix.
- :class:`FilterResult`: Output of a filter update step, containing the
  updated state plus diagnostic information for filter tuning.
- :class:`SmootherResult`: Output of a Rauch-Tung-Striebel backward pass.

All types are :class:`~typing.NamedTuple` instances, which JAX treats as
pytrees automatically. This means they work seamlessly with ``jax.jit``,
``jax.vmap``, and ``jax.lax`` control flow primitives.
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class FilterState(NamedTuple):
    """State of a Kalman filter.

    Holds the current state estimate and error covariance matrix. Returned
    by ``kf_predict`` and available as the ``state`` field of
    :class:`FilterResult`.

    Attributes:
        x: State estimate vector of shape ``(n,)``.
        P: Error covariance matrix of shape ``(n, n)``. Must be symmetric
            positive semi-definite.
    """

    x: Array
    P: Array


class FilterResult(NamedTuple):
    """Result of a filter measurement update step.

    Attributes:
        state: Updated :class:`FilterState` after incorporating the
            measurement.
        innovation: Measurement residual ``z - H x`` of shape ``(m,)``.
        innovation_covariance: Innovation covariance ``S`` of shape
            ``(m, m)``.
        kalman_gain: Kalman gain matrix ``K`` of shape ``(n, m)``.
    """

    state: FilterState
    innovation: Array
    innovation_covariance: Array
    kalman_gain: Array


class SmootherResult(NamedTuple):
    """Smoothed state history in forward time order.

    Attributes:
        x: Smoothed states, shape ``(N, n)``.
        P: Smoothed covariances, shape ``(N, n, n)``.
    """

    x: Array
    P: Array
