# astrokernel/core/sources.py
# -----------------------------------------------------------------------------
# Leap Second and EOP Sources
#
# Loader collaborators producing already-parsed rows for the kernel:
#   • erfa_leap_seconds()        pyERFA bundled leap second table
#   • load_leap_seconds_json()   operations table [{"mjd", "delta_at"}, ...]
#   • load_eop_json()            EOP table [{"mjd", "ut1_utc",
#                                            "x_arcsec", "y_arcsec"}, ...]
#
# Leap rows are (utc_date, step) with step = change of UTC - TAI, so a
# TAI - UTC table going 32 -> 33 yields a step of -1.0.
# -----------------------------------------------------------------------------

from __future__ import annotations

import json
import logging
from datetime import date as _date
from typing import Any, Dict, Iterable, List, Tuple

import erfa  # pyERFA - SOFA/ERFA gold standard

from astrokernel.core.eop import EOPRow
from astrokernel.core.errors import DataUnavailable
from astrokernel.core.leapseconds import LeapRow

__all__ = [
    "erfa_leap_seconds",
    "load_leap_seconds_json",
    "load_eop_json",
    "leap_rows_from_tai_utc",
    "mjd_to_date",
]

log = logging.getLogger(__name__)

_MJD_ORIGIN = _date(1858, 11, 17).toordinal()

# Integer-second UTC starts on 1972-01-01; earlier ERFA rows are drift segments
_FIRST_INTEGER_LEAP_YEAR = 1972


def mjd_to_date(mjd: float) -> _date:
    return _date.fromordinal(_MJD_ORIGIN + int(mjd))


def leap_rows_from_tai_utc(rows: Iterable[Tuple[_date, float]]) -> List[LeapRow]:
    """Cumulative (date, TAI - UTC) pairs to (date, step) leap rows."""
    steps = []
    previous = 0.0
    for when, tai_utc in rows:
        tai_utc = float(tai_utc)
        steps.append((when, -(tai_utc - previous)))
        previous = tai_utc
    return steps


def erfa_leap_seconds() -> List[LeapRow]:
    """Leap seconds shipped with pyERFA (auto-updated by astropy if present)."""
    try:
        table = erfa.leap_seconds.get()
    except Exception as e:
        raise DataUnavailable(f"ERFA leap second table unavailable: {e}", source="erfa") from e

    cumulative = [
        (_date(int(row["year"]), int(row["month"]), 1), float(row["tai_utc"]))
        for row in table
        if int(row["year"]) >= _FIRST_INTEGER_LEAP_YEAR
    ]
    if not cumulative:
        raise DataUnavailable("ERFA leap second table has no entries after 1972", source="erfa")
    log.debug(f"ERFA leap table: {len(cumulative)} entries, TAI-UTC={cumulative[-1][1]}")
    return leap_rows_from_tai_utc(cumulative)


def _load_json_rows(path: str, what: str) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DataUnavailable(f"Failed to load {what} table {path}: {e}", path=path) from e
    if not isinstance(data, list):
        raise DataUnavailable(f"{what} table {path} must be a JSON list", path=path)
    return data


def load_leap_seconds_json(path: str) -> List[LeapRow]:
    """Operations leap table, rows ``{"mjd": 53736, "delta_at": 33.0}``."""
    data = _load_json_rows(path, "leap second")
    try:
        cumulative = sorted(
            (float(row["mjd"]), float(row["delta_at"])) for row in data
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DataUnavailable(f"Malformed leap second row in {path}: {e}", path=path) from e
    log.info(f"Leap second override table {path}: {len(cumulative)} rows")
    return leap_rows_from_tai_utc((mjd_to_date(mjd), delta_at) for mjd, delta_at in cumulative)


def load_eop_json(path: str) -> List[EOPRow]:
    """EOP table, rows ``{"mjd": 53008, "ut1_utc": -0.39, "x_arcsec": .., "y_arcsec": ..}``."""
    data = _load_json_rows(path, "EOP")
    try:
        rows = [
            (float(row["mjd"]),
             float(row["ut1_utc"]),
             float(row.get("x_arcsec", 0.0)),
             float(row.get("y_arcsec", 0.0)))
            for row in data
        ]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DataUnavailable(f"Malformed EOP row in {path}: {e}", path=path) from e
    log.info(f"EOP table {path}: {len(rows)} rows")
    return rows
