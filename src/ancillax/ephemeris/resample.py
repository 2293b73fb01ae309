"""Regularization of accepted ephemeris records onto a uniform time grid.

Three steps run in order:

1. :func:`propagate_ephemeris` extends a series that is too short to
   interpolate.
2. :func:`correct_ephemeris_time` removes out-of-order timestamps and snaps
   jittered ones onto the nominal grid.
3. :func:`resample_ephemeris` Lagrange-interpolates onto
   ``t0 + k * period``.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from ancillax.calibration import EarthConstants
from ancillax.config import get_dtype
from ancillax.constants import EPHEMERIS_SAMPLE_PERIOD, LAGRANGE_POINTS
from ancillax.interpolation import lagrange_resample
from ancillax.orbit_dynamics import accel_gravity

logger = logging.getLogger(__name__)

GRID_SNAP_FRACTION = 0.01
"""Timestamps within this fraction of a period of the grid are snapped onto it."""


def propagate_ephemeris(
    time: ArrayLike,
    position: ArrayLike,
    velocity: ArrayLike,
    n_required: int = LAGRANGE_POINTS,
    earth: EarthConstants | None = None,
    period: float = EPHEMERIS_SAMPLE_PERIOD,
) -> tuple[Array, Array, Array]:
    """Append synthetic points until the series has *n_required* samples.

    Each new point advances the last one by *period* with a single Euler
    step: ``r += v * dt`` and ``v += a(r_prev) * dt``.

    Args:
        time: Sample times [s], shape ``(n,)``, ``n >= 1``.
        position: ECI positions [m], shape ``(n, 3)``.
        velocity: ECI velocities [m/s], shape ``(n, 3)``.
        n_required: Target number of samples.
        earth: Gravity constants. Defaults to :class:`EarthConstants`.
        period: Step between synthetic points [s].

    Returns:
        tuple: Extended ``(time, position, velocity)``.
    """
    if earth is None:
        earth = EarthConstants()

    dtype = get_dtype()
    time = jnp.asarray(time, dtype=dtype)
    position = jnp.asarray(position, dtype=dtype)
    velocity = jnp.asarray(velocity, dtype=dtype)

    n_added = max(0, n_required - time.shape[0])
    if n_added == 0:
        return time, position, velocity

    logger.warning(
        "Only %d ephemeris points; propagating %d synthetic points",
        time.shape[0], n_added,
    )
    t, r, v = [time], [position], [velocity]
    t_k, r_k, v_k = time[-1], position[-1], velocity[-1]
    for _ in range(n_added):
        accel = accel_gravity(r_k, earth)
        t_k, r_k, v_k = t_k + period, r_k + v_k * period, v_k + accel * period
        t.append(t_k[None])
        r.append(r_k[None])
        v.append(v_k[None])

    return jnp.concatenate(t), jnp.concatenate(r), jnp.concatenate(v)


def correct_ephemeris_time(
    time: ArrayLike,
    position: ArrayLike,
    velocity: ArrayLike,
    period: float = EPHEMERIS_SAMPLE_PERIOD,
) -> tuple[Array, Array, Array, int]:
    """Clean up record timestamps before resampling.

    Timestamps within ``GRID_SNAP_FRACTION * period`` of the grid
    ``t0 + k * period`` are moved onto it.  Afterwards any record whose time
    does not strictly exceed the last kept record's time is dropped.

    Args:
        time: Sample times [s], shape ``(n,)``.
        position: Positions, shape ``(n, 3)``.
        velocity: Velocities, shape ``(n, 3)``.
        period: Nominal sampling period [s].

    Returns:
        tuple: ``(time, position, velocity, corrected_count)`` where
            ``corrected_count`` is the number of records snapped or dropped.
    """
    t = np.array(time, dtype=np.float64)
    t0 = t[0]

    k = np.round((t - t0) / period)
    grid = t0 + k * period
    offset = np.abs(t - grid)
    snap = (offset > 0.0) & (offset <= GRID_SNAP_FRACTION * period)
    t[snap] = grid[snap]

    keep = np.zeros(t.shape[0], dtype=bool)
    last_kept = -np.inf
    for i, t_i in enumerate(t):
        if t_i > last_kept:
            keep[i] = True
            last_kept = t_i

    corrected = int(snap.sum() + (~keep).sum())
    if corrected > 0:
        logger.warning(
            "Corrected %d ephemeris timestamps (%d snapped, %d out of order)",
            corrected, int(snap.sum()), int((~keep).sum()),
        )

    idx = np.flatnonzero(keep)
    dtype = get_dtype()
    return (
        jnp.asarray(t[idx], dtype=dtype),
        jnp.asarray(position, dtype=dtype)[idx],
        jnp.asarray(velocity, dtype=dtype)[idx],
        corrected,
    )


def resample_ephemeris(
    time: ArrayLike,
    position: ArrayLike,
    velocity: ArrayLike,
    period: float = EPHEMERIS_SAMPLE_PERIOD,
    n_points: int = LAGRANGE_POINTS,
) -> tuple[Array, Array, Array]:
    """Interpolate an irregular series onto ``t0 + k * period``.

    The grid covers ``[t0, t_last]`` and holds at least *n_points* samples.

    Args:
        time: Strictly increasing sample times [s], shape ``(n,)``,
            ``n >= n_points``.
        position: Positions, shape ``(n, 3)``.
        velocity: Velocities, shape ``(n, 3)``.
        period: Output sampling period [s].
        n_points: Lagrange support width.

    Returns:
        tuple: Uniformly sampled ``(time, position, velocity)``.
    """
    dtype = get_dtype()
    time = jnp.asarray(time, dtype=dtype)

    span = float(time[-1] - time[0])
    n_out = max(int(np.floor(span / period + 1.0e-9)) + 1, n_points)
    grid = time[0] + jnp.arange(n_out, dtype=dtype) * period

    state = jnp.concatenate(
        [jnp.asarray(position, dtype=dtype), jnp.asarray(velocity, dtype=dtype)], axis=1
    )
    resampled, _ = lagrange_resample(time, state, grid, n_points)

    logger.info("Resampled %d ephemeris records onto %d grid points", time.shape[0], n_out)
    return grid, resampled[:, :3], resampled[:, 3:]
