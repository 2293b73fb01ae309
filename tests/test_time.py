"""Tests for the ancillax.time module.

Tests cover:
- Calendar date to MJD
- (year, doy, sod) <-> J2000 seconds, including year rollovers
- Offsets and differences between (year, doy, sod) triples
- GMST at the J2000 epoch
"""

import jax.numpy as jnp
import pytest

from ancillax.constants import SECONDS_PER_DAY
from ancillax.time import (
    add_seconds_to_year_doy_sod,
    caldate_to_mjd,
    gmst,
    j2000_seconds_to_year_doy_sod,
    mjd_to_year,
    time_difference,
    year_doy_sod_to_j2000_seconds,
)


def test_caldate_to_mjd():
    assert caldate_to_mjd(2000, 1, 1, 12, 0, 0) == pytest.approx(51544.5, abs=1e-9)


def test_caldate_to_mjd_leap_day():
    assert caldate_to_mjd(2024, 3, 1) - caldate_to_mjd(2024, 2, 28) == pytest.approx(2.0)


def test_mjd_to_year():
    assert int(mjd_to_year(51544)) == 2000
    assert int(mjd_to_year(int(caldate_to_mjd(2023, 12, 31)))) == 2023
    assert int(mjd_to_year(int(caldate_to_mjd(2024, 1, 1)))) == 2024


# ──────────────────────────────────────────────
# (year, doy, sod) <-> J2000 seconds
# ──────────────────────────────────────────────


class TestYearDoySod:
    def test_j2000_epoch_is_zero(self):
        """2000 doy 1 at noon is the J2000 epoch."""
        assert float(year_doy_sod_to_j2000_seconds([2000, 1, 43200.0])) == pytest.approx(0.0)

    def test_next_day(self):
        assert float(year_doy_sod_to_j2000_seconds([2000, 2, 0.0])) == pytest.approx(43200.0)

    def test_leap_year_length(self):
        """2000 is a leap year, so 2001 doy 1 starts 366 days later."""
        seconds = float(year_doy_sod_to_j2000_seconds([2001, 1, 0.0]))
        assert seconds == pytest.approx(366 * SECONDS_PER_DAY - 43200.0)

    def test_inverse_at_epoch(self):
        yds = j2000_seconds_to_year_doy_sod(0.0)
        assert float(yds[0]) == 2000
        assert float(yds[1]) == 1
        assert float(yds[2]) == pytest.approx(43200.0)

    @pytest.mark.parametrize(
        "yds",
        [
            (2014, 1, 0.0),
            (2016, 60, 12345.678),
            (2019, 365, 86399.5),
            (2024, 366, 1.25),
        ],
    )
    def test_roundtrip(self, yds):
        back = j2000_seconds_to_year_doy_sod(year_doy_sod_to_j2000_seconds(yds))
        assert float(back[0]) == yds[0]
        assert float(back[1]) == yds[1]
        assert float(back[2]) == pytest.approx(yds[2], abs=1e-6)


class TestOffsets:
    def test_add_rolls_over_year(self):
        yds = add_seconds_to_year_doy_sod(86400.0, [2023, 365, 100.0])
        assert float(yds[0]) == 2024
        assert float(yds[1]) == 1
        assert float(yds[2]) == pytest.approx(100.0, abs=1e-6)

    def test_add_negative(self):
        yds = add_seconds_to_year_doy_sod(-200.0, [2024, 100, 100.0])
        assert float(yds[0]) == 2024
        assert float(yds[1]) == 99
        assert float(yds[2]) == pytest.approx(86300.0, abs=1e-6)

    def test_time_difference(self):
        diff = time_difference([2024, 100, 10.0], [2024, 99, 5.0])
        assert float(diff) == pytest.approx(86405.0)

    def test_time_difference_antisymmetric(self):
        a, b = [2020, 1, 0.0], [2019, 365, 3600.0]
        assert float(time_difference(a, b)) == pytest.approx(-float(time_difference(b, a)))


def test_gmst_at_j2000():
    """GMST at the J2000 epoch is 280.46061837 degrees."""
    assert float(gmst(0.0)) == pytest.approx(jnp.deg2rad(280.46061837), abs=1e-8)


def test_gmst_advances_by_sidereal_rate():
    """Over one hour GMST advances by about 15.041 degrees."""
    delta = float(gmst(3600.0) - gmst(0.0))
    assert jnp.rad2deg(delta) == pytest.approx(15.0410686, abs=1e-5)
