"""Tests for the leap second and EOP loaders."""

from __future__ import annotations

import json
from datetime import date

import pytest

from astrokernel.core.errors import DataUnavailable
from astrokernel.core.leapseconds import LeapSecondTable
from astrokernel.core.sources import (
    erfa_leap_seconds,
    leap_rows_from_tai_utc,
    load_eop_json,
    load_leap_seconds_json,
    mjd_to_date,
)


def test_mjd_to_date() -> None:
    assert mjd_to_date(51544) == date(2000, 1, 1)
    assert mjd_to_date(53736.75) == date(2006, 1, 1)


def test_steps_from_tai_utc() -> None:
    rows = leap_rows_from_tai_utc([(date(1972, 1, 1), 10.0), (date(1972, 7, 1), 11.0)])
    assert rows == [(date(1972, 1, 1), -10.0), (date(1972, 7, 1), -1.0)]


def test_erfa_table() -> None:
    rows = erfa_leap_seconds()
    assert rows[0] == (date(1972, 1, 1), -10.0)
    table = LeapSecondTable.from_source(rows)
    assert table.last_leap.offset_after <= -37.0


def test_leap_json_sorted_by_mjd(tmp_path) -> None:
    path = tmp_path / "leaps.json"
    path.write_text(json.dumps([
        {"mjd": 53736, "delta_at": 33},
        {"mjd": 41317, "delta_at": 10},
    ]), encoding="utf-8")
    assert load_leap_seconds_json(str(path)) == [
        (date(1972, 1, 1), -10.0),
        (date(2006, 1, 1), -23.0),
    ]


def test_eop_json_defaults_pole_to_zero(tmp_path) -> None:
    path = tmp_path / "eop.json"
    path.write_text(json.dumps([
        {"mjd": 53008, "ut1_utc": -0.390607, "x_arcsec": -0.08338, "y_arcsec": 0.28218},
        {"mjd": 53009, "ut1_utc": -0.391143},
    ]), encoding="utf-8")
    assert load_eop_json(str(path)) == [
        (53008.0, -0.390607, -0.08338, 0.28218),
        (53009.0, -0.391143, 0.0, 0.0),
    ]


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"mjd": 53008}),
        json.dumps([{"mjd": 53008}]),
        json.dumps([["53008", "-0.39"]]),
    ],
)
def test_malformed_eop_file(tmp_path, content) -> None:
    path = tmp_path / "eop.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(DataUnavailable) as excinfo:
        load_eop_json(str(path))
    assert excinfo.value.context["path"] == str(path)


def test_missing_leap_file(tmp_path) -> None:
    with pytest.raises(DataUnavailable):
        load_leap_seconds_json(str(tmp_path / "absent.json"))


def test_malformed_leap_row(tmp_path) -> None:
    path = tmp_path / "leaps.json"
    path.write_text(json.dumps([{"mjd": 41317}]), encoding="utf-8")
    with pytest.raises(DataUnavailable):
        load_leap_seconds_json(str(path))
