"""Tests for the ancillax.config module."""

import jax
import jax.numpy as jnp
import pytest

from ancillax.config import ensure_float64, get_dtype, set_dtype


@pytest.fixture(autouse=True)
def reset_dtype():
    """Reset dtype to float32 before each test and back to float64 after."""
    set_dtype(jnp.float32)
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_set_float64(self):
        set_dtype(jnp.float64)
        assert get_dtype() == jnp.float64

    def test_set_float32(self):
        set_dtype(jnp.float64)
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_roundtrip(self):
        for dtype in (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")

    def test_float64_enables_x64(self):
        set_dtype(jnp.float64)
        assert jax.config.jax_enable_x64 is True


class TestEnsureFloat64:
    def test_switches_from_float32(self):
        assert get_dtype() == jnp.float32
        ensure_float64()
        assert get_dtype() == jnp.float64

    def test_idempotent(self):
        ensure_float64()
        ensure_float64()
        assert get_dtype() == jnp.float64
