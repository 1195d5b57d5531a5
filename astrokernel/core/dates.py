# astrokernel/core/dates.py
# -----------------------------------------------------------------------------
# Absolute Dates (scale-independent instants)
#
# Representation:
#   • Reference epoch 2000-01-01T12:00:00 TAI
#   • Whole seconds as a Python int (exact, unbounded)
#   • Fraction of second as a float in [0, 1)
#
# Precision Guarantees:
#   • shifted_by / duration_from never subtract two large floats: the whole
#     seconds are handled exactly and only the fractions round, so the error
#     of a difference is at most 2**-52 * (|duration| + 2) seconds
#   • Calendar labels round-trip through any time scale within 1e-9 s, except
#     for the second of labels repeated by a UTC clock reset (see UTCScale)
#     and for UT1 labels within |UT1 - UTC| of the last EOP sample, which
#     read back as the later of their two instants (see UT1Scale)
#
# Calendar labels of a scale are counted in seconds from the label
# 2000-01-01T12:00:00 of that same scale ("scale seconds").
# -----------------------------------------------------------------------------

from __future__ import annotations

import calendar
import math
from datetime import date as _date
from functools import total_ordering
from typing import TYPE_CHECKING, NamedTuple, Tuple, Union

from astrokernel.core.errors import InvalidCalendarField

if TYPE_CHECKING:
    from astrokernel.core.timescales import TimeScale

__all__ = [
    "AbsoluteDate",
    "DateTimeComponents",
    "TwoPartJD",
    "label_seconds",
    "SECONDS_PER_DAY",
    "JD_J2000",
    "MJD_J2000",
    "TT_MINUS_TAI",
    "J2000_EPOCH",
    "REFERENCE_EPOCH",
]

SECONDS_PER_DAY = 86400
JD_J2000 = 2451545.0          # 2000-01-01T12:00:00
MJD_J2000 = 51544.5
TT_MINUS_TAI = 32.184         # IAU 1991, exact by definition

_J2000_ORDINAL = _date(2000, 1, 1).toordinal()
_HALF_DAY = SECONDS_PER_DAY // 2
_LAST_SECOND = math.nextafter(60.0, 0.0)

# ───────────────────────────── Calendar Structures ─────────────────────────────

class TwoPartJD(NamedTuple):
    """Two-part Julian Date for maximum precision arithmetic."""
    jd1: float  # Integer part + 0.5
    jd2: float  # Fractional part

    @property
    def jd(self) -> float:
        """Collapsed single Julian Date (with minor precision loss)."""
        return math.fsum((self.jd1, self.jd2))

    @property
    def mjd(self) -> float:
        return (self.jd1 - 2400000.5) + self.jd2


class DateTimeComponents(NamedTuple):
    """Calendar rendering of a date in one time scale."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: float

    def isoformat(self) -> str:
        whole = int(self.second)
        millis = int((self.second - whole) * 1000)
        return (f"{self.year:04d}-{self.month:02d}-{self.day:02d}T"
                f"{self.hour:02d}:{self.minute:02d}:{whole:02d}.{millis:03d}")


def _validate_calendar(year: int, month: int, day: int,
                       hour: int, minute: int, second: float) -> None:
    if not (1 <= year <= 9999):
        raise InvalidCalendarField(f"Invalid year: {year} (must be 1-9999)",
                                   field="year", value=year)
    if not (1 <= month <= 12):
        raise InvalidCalendarField(f"Invalid month: {month} (must be 1-12)",
                                   field="month", value=month)
    days_in_month = calendar.monthrange(year, month)[1]
    if not (1 <= day <= days_in_month):
        raise InvalidCalendarField(
            f"Invalid day: {year}-{month:02d}-{day} (month has {days_in_month} days)",
            field="day", value=day)
    if not (0 <= hour <= 23):
        raise InvalidCalendarField(f"Invalid hour: {hour} (must be 0-23)",
                                   field="hour", value=hour)
    if not (0 <= minute <= 59):
        raise InvalidCalendarField(f"Invalid minute: {minute} (must be 0-59)",
                                   field="minute", value=minute)
    # Leaps are clock resets, there is no 60th second
    if not math.isfinite(second) or not (0.0 <= second < 60.0):
        raise InvalidCalendarField(f"Invalid second: {second} (must be in [0, 60))",
                                   field="second", value=second)


def label_seconds(year: int, month: int, day: int,
                  hour: int = 0, minute: int = 0, second: float = 0.0) -> Tuple[int, float]:
    """Calendar label to (whole, fraction) scale seconds since the J2000 label."""
    _validate_calendar(year, month, day, hour, minute, second)
    days = _date(year, month, day).toordinal() - _J2000_ORDINAL
    whole_second = math.floor(second)
    whole = (days * SECONDS_PER_DAY - _HALF_DAY
             + hour * 3600 + minute * 60 + int(whole_second))
    return whole, second - whole_second


def _split(seconds: float) -> Tuple[int, float]:
    whole = math.floor(seconds)
    return int(whole), seconds - whole

# ───────────────────────────── Absolute Date ─────────────────────────────

@total_ordering
class AbsoluteDate:
    """An instant in physical time, independent of any time scale.

    Only the calendar *rendering* depends on a time scale; two dates built
    through different scales compare and subtract purely physically.
    """

    __slots__ = ("_epoch", "_offset")

    def __init__(self, epoch: int = 0, offset: float = 0.0):
        if not math.isfinite(offset):
            raise ValueError(f"Non-finite date offset: {offset}")
        whole, frac = _split(offset)
        epoch = int(epoch) + whole
        # offset - floor(offset) may round up to exactly 1.0 for tiny negatives
        if frac >= 1.0:
            epoch += 1
            frac -= 1.0
        self._epoch = epoch
        self._offset = frac

    # Construction

    @classmethod
    def from_calendar(cls, year: int, month: int, day: int,
                      hour: int = 0, minute: int = 0, second: float = 0.0,
                      *, scale: "TimeScale") -> "AbsoluteDate":
        """Build a date from calendar fields read in ``scale``.

        Raises:
            InvalidCalendarField: component out of range
        """
        whole, frac = label_seconds(year, month, day, hour, minute, second)
        offset = scale.offset_to_reference(whole + frac)
        off_whole, off_frac = _split(offset)
        return cls(whole + off_whole, frac + off_frac)

    @classmethod
    def from_julian_date(cls, jd: Union[TwoPartJD, Tuple[float, float]],
                         scale: "TimeScale") -> "AbsoluteDate":
        jd1, jd2 = jd
        w1, f1 = _split((jd1 - JD_J2000) * SECONDS_PER_DAY)
        w2, f2 = _split(jd2 * SECONDS_PER_DAY)
        whole, frac = w1 + w2, f1 + f2
        off_whole, off_frac = _split(scale.offset_to_reference(whole + frac))
        return cls(whole + off_whole, frac + off_frac)

    @classmethod
    def from_mjd(cls, mjd: float, scale: "TimeScale") -> "AbsoluteDate":
        day = math.floor(mjd)
        return cls.from_julian_date(TwoPartJD(day + 2400000.5, mjd - day), scale)

    # Arithmetic

    def shifted_by(self, seconds: float) -> "AbsoluteDate":
        whole, frac = _split(float(seconds))
        return AbsoluteDate(self._epoch + whole, self._offset + frac)

    def duration_from(self, other: "AbsoluteDate") -> float:
        """Signed elapsed seconds from ``other`` to this date.

        Whole seconds subtract exactly; the result is off by at most
        2**-52 * (|duration| + 2) seconds.
        """
        return (self._epoch - other._epoch) + (self._offset - other._offset)

    def __add__(self, seconds: float) -> "AbsoluteDate":
        if isinstance(seconds, AbsoluteDate):
            return NotImplemented
        return self.shifted_by(seconds)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, AbsoluteDate):
            return self.duration_from(other)
        return self.shifted_by(-other)

    # Rendering

    def _label(self, offset: float) -> Tuple[int, float]:
        off_whole, off_frac = _split(offset)
        epoch = self._epoch + off_whole
        frac = self._offset + off_frac
        if frac >= 1.0:
            epoch += 1
            frac -= 1.0
        return epoch, frac

    def _render(self, offset: float) -> DateTimeComponents:
        epoch, frac = self._label(offset)
        days, seconds_of_day = divmod(epoch + _HALF_DAY, SECONDS_PER_DAY)
        day = _date.fromordinal(_J2000_ORDINAL + days)
        hour, rest = divmod(seconds_of_day, 3600)
        minute, whole_second = divmod(rest, 60)
        second = whole_second + frac
        if second >= 60.0:
            second = _LAST_SECOND
        return DateTimeComponents(day.year, day.month, day.day, hour, minute, second)

    def components(self, scale: "TimeScale") -> DateTimeComponents:
        """Calendar fields of this date read in ``scale``."""
        return self._render(scale.offset_from_reference(self))

    def to_julian_date(self, scale: "TimeScale") -> TwoPartJD:
        epoch, frac = self._label(scale.offset_from_reference(self))
        days, seconds = divmod(epoch, SECONDS_PER_DAY)
        return TwoPartJD(JD_J2000 + days, (seconds + frac) / SECONDS_PER_DAY)

    def isoformat(self, scale: "TimeScale") -> str:
        return f"{self.components(scale).isoformat()} {scale.name}"

    # Identity

    def _key(self) -> Tuple[int, float]:
        return self._epoch, self._offset

    def __eq__(self, other) -> bool:
        if not isinstance(other, AbsoluteDate):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "AbsoluteDate") -> bool:
        if not isinstance(other, AbsoluteDate):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"AbsoluteDate(epoch={self._epoch}, offset={self._offset!r})"

    def __str__(self) -> str:
        return f"{self._render(0.0).isoformat()} TAI"


REFERENCE_EPOCH = AbsoluteDate()

# 2000-01-01T12:00:00 TT
J2000_EPOCH = REFERENCE_EPOCH.shifted_by(-TT_MINUS_TAI)
