"""Fixed-order Lagrange interpolation on irregularly sampled series.

Every resampling step in the processing chain (ephemeris regularization,
quaternion-angle and gyro-angle synchronization, ephemeris lookups for
attitude) uses the same scheme:

1. Bracket the query time: find the first node strictly after it
   (``jnp.searchsorted``).
2. Re-center: step back half the support width from that node and clamp
   the window so it lies entirely inside the node array.
3. Evaluate the Lagrange polynomial through the windowed nodes.

The window start indices are returned alongside the values so callers can
propagate per-node validity flags to the interpolated samples.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.config import get_dtype
from ancillax.constants import LAGRANGE_POINTS
from ancillax.errors import InsufficientDataError


def lagrange_interpolate(t_nodes: ArrayLike, y_nodes: ArrayLike, t: ArrayLike) -> Array:
    """Evaluate the Lagrange polynomial through ``(t_nodes, y_nodes)`` at *t*.

    .. math::

        y(t) = \\sum_i y_i \\prod_{j \\ne i} \\frac{t - t_j}{t_i - t_j}

    Args:
        t_nodes: Node times, shape ``(n,)``. Must be distinct.
        y_nodes: Node values, shape ``(n,)`` or ``(n, k)``.
        t: Scalar evaluation time.

    Returns:
        jax.Array: Interpolated value, shape ``()`` or ``(k,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from ancillax.interpolation import lagrange_interpolate
        tn = jnp.array([0.0, 1.0, 2.0])
        lagrange_interpolate(tn, tn**2, 1.5)  # 2.25
        ```
    """
    _float = get_dtype()
    t_nodes = jnp.asarray(t_nodes, dtype=_float)
    y_nodes = jnp.asarray(y_nodes, dtype=_float)
    t = jnp.asarray(t, dtype=_float)

    n = t_nodes.shape[0]
    diag = jnp.eye(n, dtype=bool)

    numer = jnp.where(diag, 1.0, (t - t_nodes)[None, :])
    denom = jnp.where(diag, 1.0, t_nodes[:, None] - t_nodes[None, :])
    weights = jnp.prod(numer, axis=1) / jnp.prod(denom, axis=1)

    return jnp.tensordot(weights, y_nodes, axes=1)


def lagrange_window_starts(
    times: ArrayLike,
    t: ArrayLike,
    n_points: int = LAGRANGE_POINTS,
) -> Array:
    """Return the first node index of the interpolation window for each *t*.

    Args:
        times: Increasing node times, shape ``(n,)``.
        t: Query times, shape ``(m,)``.
        n_points: Support width.

    Returns:
        jax.Array: Window start indices (int32), shape ``(m,)``, each in
            ``[0, n - n_points]``.
    """
    times = jnp.asarray(times, dtype=get_dtype())
    t = jnp.atleast_1d(jnp.asarray(t, dtype=get_dtype()))
    n = times.shape[0]

    after = jnp.searchsorted(times, t, side="right")
    return jnp.clip(after - n_points // 2, 0, n - n_points).astype(jnp.int32)


def lagrange_resample(
    times: ArrayLike,
    values: ArrayLike,
    t: ArrayLike,
    n_points: int = LAGRANGE_POINTS,
) -> tuple[Array, Array]:
    """Interpolate a sampled series onto new times.

    Args:
        times: Increasing node times, shape ``(n,)``.
        values: Node values, shape ``(n,)`` or ``(n, k)``.
        t: Output times, shape ``(m,)``.
        n_points: Support width.

    Returns:
        tuple[jax.Array, jax.Array]: Interpolated values of shape ``(m,)`` or
            ``(m, k)``, and the window start index used for each output.

    Raises:
        InsufficientDataError: If fewer than *n_points* nodes are given.
    """
    _float = get_dtype()
    times = jnp.asarray(times, dtype=_float)
    values = jnp.asarray(values, dtype=_float)
    t = jnp.atleast_1d(jnp.asarray(t, dtype=_float))

    if times.shape[0] < n_points:
        raise InsufficientDataError(
            f"Lagrange interpolation needs {n_points} nodes, got {times.shape[0]}"
        )

    starts = lagrange_window_starts(times, t, n_points)
    window = starts[:, None] + jnp.arange(n_points)

    resampled = jax.vmap(lagrange_interpolate)(times[window], values[window], t)
    return resampled, starts


def window_all_valid(valid: ArrayLike, starts: ArrayLike, n_points: int = LAGRANGE_POINTS) -> Array:
    """Return, per window, whether every supporting node is flagged valid."""
    valid = jnp.asarray(valid, dtype=bool)
    window = jnp.asarray(starts)[:, None] + jnp.arange(n_points)
    return jnp.all(valid[window], axis=1)
