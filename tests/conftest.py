import jax.numpy as jnp
import pytest

from ancillax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Telemetry times are J2000 second counts of order 1e8, which float32
    cannot resolve to a sample period.  test_config.py has its own autouse
    fixture that exercises the other dtypes.
    """
    set_dtype(jnp.float64)
