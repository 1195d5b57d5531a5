# astrokernel/core/leapseconds.py
# -----------------------------------------------------------------------------
# Leap Second Table
#
# Clock-reset model:
#   A leap is one instantaneous reset of the UTC clock. Physical time flows
#   continuously through the boundary; only the mapping to UTC labels jumps.
#   When one second was inserted at the end of 2005, UTC ran continuously
#   from 23:59:59 to 00:00:00 and *then* was reset back to 23:59:59, so the
#   last second of 2005 was labelled twice. There is no 23:59:60 label.
#
# Offsets are UTC - TAI (add to TAI seconds to get UTC labels), so an
# inserted second has step -1.0 and the table after 2017 reads -37.0.
#
# The table is built once from an already-parsed source and never mutated.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from bisect import bisect_left
from dataclasses import dataclass
from datetime import date as _date
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from astrokernel.core.dates import REFERENCE_EPOCH, AbsoluteDate, label_seconds
from astrokernel.core.errors import DataUnavailable, InvalidCalendarField

__all__ = [
    "Leap",
    "LeapSecondTable",
    "LeapRow",
]

log = logging.getLogger(__name__)

LeapRow = Tuple[Union[_date, Tuple[int, int, int]], float]


@dataclass(frozen=True)
class Leap:
    """One UTC clock reset."""
    utc_seconds: float    # UTC label of the reset, scale seconds since J2000
    step: float           # change of UTC - TAI at the reset [s]
    offset_after: float   # cumulative UTC - TAI after the reset [s]

    @property
    def offset_before(self) -> float:
        return self.offset_after - self.step

    @property
    def tai_seconds(self) -> float:
        """TAI seconds since the reference epoch at which the reset happens."""
        return self.utc_seconds - self.offset_before


def _row_label(when) -> float:
    if isinstance(when, tuple):
        whole, frac = label_seconds(*when)
    else:
        whole, frac = label_seconds(
            when.year, when.month, when.day,
            getattr(when, "hour", 0), getattr(when, "minute", 0),
            getattr(when, "second", 0) + getattr(when, "microsecond", 0) * 1e-6,
        )
    return whole + frac


class LeapSecondTable:
    """Immutable, strictly ordered sequence of leaps."""

    def __init__(self, leaps: Iterable[Leap]):
        self._leaps: Tuple[Leap, ...] = tuple(leaps)
        if not self._leaps:
            raise DataUnavailable("Empty leap second table")

        for previous, current in zip(self._leaps, self._leaps[1:]):
            if current.utc_seconds <= previous.utc_seconds:
                raise DataUnavailable(
                    "Leap second instants are not strictly increasing",
                    utc_seconds=current.utc_seconds,
                )
            if current.step * previous.step <= 0.0:
                raise DataUnavailable(
                    "Cumulative leap offset is not monotonic",
                    utc_seconds=current.utc_seconds,
                    step=current.step,
                )

        self._utc_keys: List[float] = [leap.utc_seconds for leap in self._leaps]
        self._tai_keys: List[float] = [leap.tai_seconds for leap in self._leaps]

    @classmethod
    def from_source(cls, rows: Iterable[LeapRow]) -> "LeapSecondTable":
        """Build the table from ``(utc_date, step)`` rows in chronological order."""
        leaps = []
        offset = 0.0
        for when, step in rows:
            step = float(step)
            if step == 0.0:
                raise DataUnavailable("Leap step of zero seconds", date=str(when))
            try:
                utc = _row_label(when)
            except InvalidCalendarField as e:
                raise DataUnavailable(f"Invalid leap date {when!r}: {e}", date=str(when)) from e
            offset += step
            leaps.append(Leap(utc_seconds=utc, step=step, offset_after=offset))
        table = cls(leaps)
        log.info(f"Loaded {len(table)} leap seconds, last offset {table.last_leap.offset_after:+.1f}s")
        return table

    # Lookups

    def offset_at(self, date: AbsoluteDate) -> float:
        """UTC - TAI at a physical date.

        The reset instant itself still carries the pre-leap offset; any
        instant strictly after it carries the post-leap one. Returns 0.0
        before the first recorded leap.
        """
        index = bisect_left(self._tai_keys, date.duration_from(REFERENCE_EPOCH)) - 1
        return self._leaps[index].offset_after if index >= 0 else 0.0

    def offset_at_utc(self, utc_seconds: float) -> float:
        """UTC - TAI for a UTC label, labels repeated by a reset map to the pre-reset one."""
        index = bisect_left(self._utc_keys, utc_seconds) - 1
        return self._leaps[index].offset_after if index >= 0 else 0.0

    def leap_before(self, date: AbsoluteDate) -> Optional[Leap]:
        index = bisect_left(self._tai_keys, date.duration_from(REFERENCE_EPOCH)) - 1
        return self._leaps[index] if index >= 0 else None

    # Container protocol

    @property
    def first_leap(self) -> Leap:
        return self._leaps[0]

    @property
    def last_leap(self) -> Leap:
        return self._leaps[-1]

    def __len__(self) -> int:
        return len(self._leaps)

    def __iter__(self) -> Iterator[Leap]:
        return iter(self._leaps)

    def __getitem__(self, index: int) -> Leap:
        return self._leaps[index]
