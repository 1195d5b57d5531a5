# astrokernel/core/eop.py
# -----------------------------------------------------------------------------
# Earth Orientation Parameters History
#
# Samples (one per day in IERS series) of UT1-UTC and polar motion, loaded
# once from an already-parsed source and never mutated.
#
# Lookup policy:
#   • inside the covered span: linear interpolation, a date on a sample
#     closing the interval that ends there
#   • before the first sample: first sample held constant
#   • at or after the last sample: 0.0 (UT1 is treated as UTC and the pole
#     as the CIO once data is stale), with a StaleEOPWarning
#
# UT1-UTC jumps by about one second across a leap. Two consecutive samples
# further apart than the jump threshold bracket a leap: the later one is
# brought back to the earlier branch before interpolating.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import math
import warnings as py_warnings
from bisect import bisect_left
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, NamedTuple, Tuple

from astrokernel.core.config import DEFAULT_EOP_JUMP_THRESHOLD
from astrokernel.core.dates import REFERENCE_EPOCH, AbsoluteDate
from astrokernel.core.errors import DataUnavailable, StaleEOPWarning

if TYPE_CHECKING:
    from astrokernel.core.timescales import TimeScale

__all__ = [
    "EOPEntry",
    "EOPHistory",
    "EOPRow",
    "PoleCorrection",
    "NULL_POLE",
]

log = logging.getLogger(__name__)

# (mjd, ut1_minus_utc [s], x_pole [arcsec], y_pole [arcsec])
EOPRow = Tuple[float, float, float, float]

_ARCSEC_TO_RAD = math.pi / (180.0 * 3600.0)


class PoleCorrection(NamedTuple):
    """Polar motion coordinates [rad]."""
    x_p: float
    y_p: float


NULL_POLE = PoleCorrection(0.0, 0.0)


@dataclass(frozen=True)
class EOPEntry:
    mjd: float
    date: AbsoluteDate
    ut1_minus_utc: float   # [s]
    x_pole: float          # [rad]
    y_pole: float          # [rad]


class EOPHistory:
    """Time-ordered Earth orientation samples with interpolation."""

    def __init__(self, entries: Iterable[EOPEntry],
                 jump_threshold: float = DEFAULT_EOP_JUMP_THRESHOLD):
        self._entries: Tuple[EOPEntry, ...] = tuple(entries)
        if not self._entries:
            raise DataUnavailable("Empty EOP history")
        for previous, current in zip(self._entries, self._entries[1:]):
            if current.date <= previous.date:
                raise DataUnavailable(
                    "EOP dates are not strictly increasing",
                    mjd=current.mjd,
                    previous_mjd=previous.mjd,
                )
        self._keys: List[float] = [e.date.duration_from(REFERENCE_EPOCH) for e in self._entries]
        self.jump_threshold = jump_threshold

    @classmethod
    def from_source(cls, rows: Iterable[EOPRow], utc: "TimeScale",
                    jump_threshold: float = DEFAULT_EOP_JUMP_THRESHOLD) -> "EOPHistory":
        """Build the history from ``(mjd, ut1_utc, x_arcsec, y_arcsec)`` rows.

        Sample dates are 0h UTC of their MJD, hence the UTC scale.
        """
        entries = []
        for row in rows:
            try:
                mjd, dut1, x_arcsec, y_arcsec = (float(v) for v in row)
            except (TypeError, ValueError) as e:
                raise DataUnavailable(f"Malformed EOP row {row!r}: {e}", row=row) from e
            if not all(math.isfinite(v) for v in (mjd, dut1, x_arcsec, y_arcsec)):
                raise DataUnavailable(f"Non-finite EOP row {row!r}", mjd=mjd)
            entries.append(EOPEntry(
                mjd=mjd,
                date=AbsoluteDate.from_mjd(mjd, utc),
                ut1_minus_utc=dut1,
                x_pole=x_arcsec * _ARCSEC_TO_RAD,
                y_pole=y_arcsec * _ARCSEC_TO_RAD,
            ))
        history = cls(entries, jump_threshold)
        log.info(f"Loaded {len(history)} EOP samples, MJD {history.first.mjd:.0f}-{history.last.mjd:.0f}")
        return history

    # Span

    @property
    def first(self) -> EOPEntry:
        return self._entries[0]

    @property
    def last(self) -> EOPEntry:
        return self._entries[-1]

    def get_start_date(self) -> AbsoluteDate:
        return self._entries[0].date

    def get_end_date(self) -> AbsoluteDate:
        return self._entries[-1].date

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[EOPEntry]:
        return iter(self._entries)

    # Interpolation

    def _bracket(self, date: AbsoluteDate) -> Optional[Tuple[EOPEntry, EOPEntry, float]]:
        """Bracketing samples and fraction, None once data is stale.

        Before the first sample both ends are the first sample. A date equal
        to a sample closes the interval ending there (fraction 1), so a
        sample taken on a leap reset still reads the pre-leap branch, like
        UTC does at that instant.
        """
        seconds = date.duration_from(REFERENCE_EPOCH)
        if seconds >= self._keys[-1]:
            py_warnings.warn(
                f"No EOP data at {date} (history ends {self.last.date}), using zero corrections",
                StaleEOPWarning,
                stacklevel=3,
            )
            return None
        index = bisect_left(self._keys, seconds)
        if index == 0:
            return self._entries[0], self._entries[0], 0.0
        previous, following = self._entries[index - 1], self._entries[index]
        fraction = date.duration_from(previous.date) / following.date.duration_from(previous.date)
        return previous, following, fraction

    def get_ut1_minus_utc(self, date: AbsoluteDate) -> float:
        """UT1 - UTC [s] at ``date``."""
        bracket = self._bracket(date)
        if bracket is None:
            return 0.0
        previous, following, fraction = bracket
        dut1_p = previous.ut1_minus_utc
        dut1_n = following.ut1_minus_utc
        jump = dut1_n - dut1_p
        if abs(jump) > self.jump_threshold:
            # leap second between the samples
            dut1_n -= round(jump)
        return dut1_p + fraction * (dut1_n - dut1_p)

    def get_pole_correction(self, date: AbsoluteDate) -> PoleCorrection:
        bracket = self._bracket(date)
        if bracket is None:
            return NULL_POLE
        previous, following, fraction = bracket
        return PoleCorrection(
            previous.x_pole + fraction * (following.x_pole - previous.x_pole),
            previous.y_pole + fraction * (following.y_pole - previous.y_pole),
        )
