"""Tests for Earth orientation parameter interpolation."""

from __future__ import annotations

import math
import warnings

import numpy as np
import pytest

from astrokernel.core.dates import AbsoluteDate
from astrokernel.core.eop import NULL_POLE, EOPHistory
from astrokernel.core.errors import DataUnavailable, StaleEOPWarning

ARCSEC = math.pi / (180.0 * 3600.0)


@pytest.fixture
def history(scales) -> EOPHistory:
    return scales.eop_history


def test_sample_value(history, utc) -> None:
    date = AbsoluteDate.from_calendar(2004, 1, 4, 0, 0, 0.0, scale=utc)
    assert history.get_ut1_minus_utc(date) == pytest.approx(-0.3906070, abs=1.0e-15)


def test_linear_interpolation(history, utc) -> None:
    date = AbsoluteDate.from_calendar(2004, 1, 4, 6, 0, 0.0, scale=utc)
    expected = -0.3906070 + 0.25 * (-0.3911430 + 0.3906070)
    assert history.get_ut1_minus_utc(date) == pytest.approx(expected, abs=1.0e-12)
    pole = history.get_pole_correction(date)
    assert pole.x_p == pytest.approx((-0.083380 + 0.25 * (-0.085090 + 0.083380)) * ARCSEC, abs=1.0e-15)
    assert pole.y_p == pytest.approx((0.282180 + 0.25 * (0.283470 - 0.282180)) * ARCSEC, abs=1.0e-15)


def test_leap_second_jump_compensated(history, utc) -> None:
    """UT1-UTC stays on its branch on each side of the 2006 reset."""
    reset = AbsoluteDate.from_calendar(2006, 1, 1, 0, 0, 0.0, scale=utc)
    for dt in np.arange(-200.0, 200.0, 3.0):
        dut1 = history.get_ut1_minus_utc(reset.shifted_by(dt))
        expected = -0.6612 if dt < 0 else 0.3388
        assert abs(dut1 - expected) < 3.0e-5


def test_sample_on_leap_reset_reads_pre_leap_branch(history, utc) -> None:
    """The 2006-01-01 sample falls on the reset instant and belongs to the day before."""
    reset = AbsoluteDate.from_calendar(2006, 1, 1, 0, 0, 0.0, scale=utc)
    assert history.get_ut1_minus_utc(reset) == pytest.approx(-0.6612, abs=1.0e-12)
    assert history.get_ut1_minus_utc(reset.shifted_by(-1.0e-6)) == pytest.approx(-0.6612, abs=1.0e-9)
    assert history.get_ut1_minus_utc(reset.shifted_by(1.0e-6)) == pytest.approx(0.3388, abs=1.0e-9)


def test_stale_data_returns_zero(history) -> None:
    end = history.get_end_date()
    for dt in np.arange(-1000.0, 1000.0, 3.0):
        date = end.shifted_by(dt)
        if dt < 0:
            assert history.get_ut1_minus_utc(date) == pytest.approx(0.29234, abs=1.0e-5)
            assert history.get_pole_correction(date) != NULL_POLE
        else:
            with pytest.warns(StaleEOPWarning):
                assert history.get_ut1_minus_utc(date) == 0.0
            with pytest.warns(StaleEOPWarning):
                assert history.get_pole_correction(date) == NULL_POLE


def test_last_sample_is_already_stale(history) -> None:
    with pytest.warns(StaleEOPWarning):
        assert history.get_ut1_minus_utc(history.get_end_date()) == 0.0


def test_before_first_sample_holds_first_value(history) -> None:
    early = history.get_start_date().shifted_by(-10 * 86400.0)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert history.get_ut1_minus_utc(early) == -0.3888230
        assert history.get_pole_correction(early).x_p == pytest.approx(-0.076870 * ARCSEC, abs=1.0e-18)


def test_span(history, utc) -> None:
    assert len(history) == 14
    assert history.first.mjd == 53005.0
    assert history.last.mjd == 53799.0
    assert history.get_start_date() == AbsoluteDate.from_calendar(2004, 1, 1, 0, 0, 0.0, scale=utc)
    assert history.get_end_date() == AbsoluteDate.from_calendar(2006, 3, 5, 0, 0, 0.0, scale=utc)


def test_custom_jump_threshold(eop_rows, utc) -> None:
    """A threshold above the jump leaves the leap in the interpolation."""
    history = EOPHistory.from_source(eop_rows, utc, jump_threshold=1.5)
    reset = AbsoluteDate.from_calendar(2006, 1, 1, 0, 0, 0.0, scale=utc)
    midday = reset.shifted_by(-43200.0)
    assert history.get_ut1_minus_utc(midday) == pytest.approx(-0.1612, abs=1.0e-4)


@pytest.mark.parametrize(
    "rows",
    [
        [],
        [(53005.0, -0.38, 0.0)],
        [(53005.0, "n/a", 0.0, 0.0)],
        [(53005.0, float("nan"), 0.0, 0.0)],
        [(53006.0, -0.38, 0.0, 0.0), (53005.0, -0.38, 0.0, 0.0)],
        [(53005.0, -0.38, 0.0, 0.0), (53005.0, -0.38, 0.0, 0.0)],
    ],
)
def test_malformed_history_rejected(utc, rows) -> None:
    with pytest.raises(DataUnavailable):
        EOPHistory.from_source(rows, utc)
