"""Spacecraft state lookup on an ephemeris series."""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ancillax.config import get_dtype
from ancillax.constants import LAGRANGE_POINTS
from ancillax.ephemeris._types import EphemerisSeries
from ancillax.interpolation import lagrange_resample


def get_state_at_time(
    series: EphemerisSeries,
    seconds_from_epoch: ArrayLike,
    frame: str = "eci",
) -> tuple[Array, Array]:
    """Interpolate position and velocity at times relative to the series epoch.

    Args:
        series: Ephemeris series.
        seconds_from_epoch: Query time(s) [s], scalar or shape ``(m,)``.
        frame: ``"eci"`` or ``"ecef"``.

    Returns:
        tuple[jax.Array, jax.Array]: Position [m] and velocity [m/s], of
            shape ``(3,)`` for a scalar query or ``(m, 3)`` otherwise.

    Raises:
        ValueError: If *frame* is not recognized.

    Examples:
        ```python
        from ancillax.ephemeris import get_state_at_time
        r, v = get_state_at_time(series, 12.5)
        ```
    """
    if frame == "eci":
        position, velocity = series.eci_position, series.eci_velocity
    elif frame == "ecef":
        position, velocity = series.ecef_position, series.ecef_velocity
    else:
        raise ValueError(f"Unknown frame {frame!r}; expected 'eci' or 'ecef'")

    t = jnp.asarray(seconds_from_epoch, dtype=get_dtype())
    state = jnp.concatenate([position, velocity], axis=1)
    values, _ = lagrange_resample(series.seconds_from_epoch, state, t, LAGRANGE_POINTS)

    if t.ndim == 0:
        values = values[0]
    return values[..., :3], values[..., 3:]
