# tests/conftest.py
from __future__ import annotations

from datetime import date
from typing import List

import pytest

from astrokernel.core.sources import leap_rows_from_tai_utc
from astrokernel.core.timescales import TimeScales

# TAI - UTC after each leap, IERS Bulletin C
HISTORICAL_TAI_UTC = [
    (date(1972, 1, 1), 10.0),
    (date(1972, 7, 1), 11.0),
    (date(1973, 1, 1), 12.0),
    (date(1974, 1, 1), 13.0),
    (date(1975, 1, 1), 14.0),
    (date(1976, 1, 1), 15.0),
    (date(1977, 1, 1), 16.0),
    (date(1978, 1, 1), 17.0),
    (date(1979, 1, 1), 18.0),
    (date(1980, 1, 1), 19.0),
    (date(1981, 7, 1), 20.0),
    (date(1982, 7, 1), 21.0),
    (date(1983, 7, 1), 22.0),
    (date(1985, 7, 1), 23.0),
    (date(1988, 1, 1), 24.0),
    (date(1990, 1, 1), 25.0),
    (date(1991, 1, 1), 26.0),
    (date(1992, 7, 1), 27.0),
    (date(1993, 7, 1), 28.0),
    (date(1994, 7, 1), 29.0),
    (date(1996, 1, 1), 30.0),
    (date(1997, 7, 1), 31.0),
    (date(1999, 1, 1), 32.0),
    (date(2006, 1, 1), 33.0),
    (date(2009, 1, 1), 34.0),
    (date(2012, 7, 1), 35.0),
    (date(2015, 7, 1), 36.0),
    (date(2017, 1, 1), 37.0),
]

# IERS-like daily samples: (mjd, UT1-UTC [s], x [arcsec], y [arcsec])
EOP_ROWS = [
    # 2004-01-01 .. 2004-01-06
    (53005.0, -0.3888230, -0.076870, 0.278820),
    (53006.0, -0.3895340, -0.079250, 0.279770),
    (53007.0, -0.3901020, -0.081480, 0.280900),
    (53008.0, -0.3906070, -0.083380, 0.282180),
    (53009.0, -0.3911430, -0.085090, 0.283470),
    (53010.0, -0.3917190, -0.086710, 0.284860),
    # 2004-04-06 .. 2004-04-07, held at the AAS 06-134 epoch values
    (53101.0, -0.4399619, -0.140682, 0.333309),
    (53102.0, -0.4399619, -0.140682, 0.333309),
    # 2005-12-30 .. 2006-01-02, leap second on 2006-01-01
    (53734.0, -0.6607000, 0.048470, 0.378690),
    (53735.0, -0.6612000, 0.046810, 0.379240),
    (53736.0, 0.3388000, 0.045130, 0.379870),
    (53737.0, 0.3384000, 0.043560, 0.380620),
    # 2006-03-04 .. 2006-03-05, end of the history
    (53798.0, 0.2923500, 0.029740, 0.418210),
    (53799.0, 0.2923400, 0.030080, 0.418960),
]


@pytest.fixture(scope="session")
def leap_rows() -> List:
    return leap_rows_from_tai_utc(HISTORICAL_TAI_UTC)


@pytest.fixture(scope="session")
def eop_rows() -> List:
    return list(EOP_ROWS)


@pytest.fixture
def scales(leap_rows, eop_rows) -> TimeScales:
    return TimeScales(lambda: leap_rows, lambda: eop_rows)


@pytest.fixture
def tai(scales):
    return scales.tai


@pytest.fixture
def tt(scales):
    return scales.tt


@pytest.fixture
def utc(scales):
    return scales.utc


@pytest.fixture
def ut1(scales):
    return scales.ut1
