# astrokernel/core/timescales.py
# -----------------------------------------------------------------------------
# Time Scales (TAI, TT, UTC, UT1)
#
# Every scale maps physical dates to calendar labels through an offset from
# the reference scale TAI:
#   label_seconds = tai_seconds + offset_from_reference(date)
#   tai_seconds   = label_seconds + offset_to_reference(label_seconds)
#
# Initialization:
#   A TimeScales handle owns one instance of each scale kind. Each is built
#   lazily on first use from injected leap/EOP sources. A loading failure is
#   recorded once as DataUnavailable and re-raised on every later access to
#   that scale (never retried, never replaced by a guessed offset).
#
# Not thread safe: share a handle across threads only after load_all().
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from enum import Enum
from functools import lru_cache, partial
from typing import Callable, Dict, Iterable, Optional

from astrokernel.core import sources
from astrokernel.core.config import DEFAULT_EOP_JUMP_THRESHOLD, KernelConfig
from astrokernel.core.dates import REFERENCE_EPOCH, TT_MINUS_TAI, AbsoluteDate
from astrokernel.core.eop import EOPHistory, EOPRow
from astrokernel.core.errors import DataUnavailable
from astrokernel.core.leapseconds import LeapRow, LeapSecondTable

__all__ = [
    "ScaleKind",
    "TimeScale",
    "TAIScale",
    "TTScale",
    "UTCScale",
    "UT1Scale",
    "TimeScales",
    "build_time_scales",
    "default_time_scales",
]

log = logging.getLogger(__name__)

LeapSource = Callable[[], Iterable[LeapRow]]
EOPSource = Callable[[], Iterable[EOPRow]]

# UT1 label inversion converges to float precision in two passes
_UT1_ITERATIONS = 3

# ───────────────────────────── Scale Kinds ─────────────────────────────

class ScaleKind(Enum):
    """Closed set of supported time scales."""
    TAI = "TAI"
    TT = "TT"
    UTC = "UTC"
    UT1 = "UT1"

# ───────────────────────────── Scales ─────────────────────────────

class TimeScale(ABC):
    """Mapping between physical dates and the labels of one scale."""

    kind: ScaleKind

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    def offset_from_reference(self, date: AbsoluteDate) -> float:
        """Offset to *add* to TAI seconds to get this scale's label."""

    @abstractmethod
    def offset_to_reference(self, scale_seconds: float) -> float:
        """Offset to *add* to a label of this scale to get TAI seconds."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __str__(self) -> str:
        return self.name


class TAIScale(TimeScale):
    """International Atomic Time, the reference scale."""

    kind = ScaleKind.TAI

    def offset_from_reference(self, date: AbsoluteDate) -> float:
        return 0.0

    def offset_to_reference(self, scale_seconds: float) -> float:
        return 0.0


class TTScale(TimeScale):
    """Terrestrial Time, TAI + 32.184 s."""

    kind = ScaleKind.TT

    def offset_from_reference(self, date: AbsoluteDate) -> float:
        return TT_MINUS_TAI

    def offset_to_reference(self, scale_seconds: float) -> float:
        return -TT_MINUS_TAI


class UTCScale(TimeScale):
    """Coordinated Universal Time with leaps as clock resets.

    The reset instant itself still reads the pre-leap offset; any instant
    strictly after it reads the post-leap one. The labels of the second
    before a reset are used twice; reading one back gives its first
    (pre-reset) occurrence.
    """

    kind = ScaleKind.UTC

    def __init__(self, leaps: LeapSecondTable):
        self._leaps = leaps

    @property
    def leaps(self) -> LeapSecondTable:
        return self._leaps

    def offset_from_reference(self, date: AbsoluteDate) -> float:
        return self._leaps.offset_at(date)

    def offset_to_reference(self, scale_seconds: float) -> float:
        return -self._leaps.offset_at_utc(scale_seconds)

    def get_start_date(self) -> AbsoluteDate:
        """Date of the first known UTC step."""
        first = self._leaps.first_leap
        return REFERENCE_EPOCH.shifted_by(first.tai_seconds)


class UT1Scale(TimeScale):
    """Universal Time UT1 = UTC + (UT1 - UTC) from the EOP history.

    UT1 - UTC drops to zero at the last EOP sample, so UT1 labels within
    |UT1 - UTC| of that date belong to two instants. Reading such a label
    returns the later one, like a repeated UTC second returns the earlier.
    """

    kind = ScaleKind.UT1

    def __init__(self, utc: UTCScale, eop: EOPHistory):
        self._utc = utc
        self._eop = eop

    @property
    def eop_history(self) -> EOPHistory:
        return self._eop

    def offset_from_reference(self, date: AbsoluteDate) -> float:
        return self._utc.offset_from_reference(date) + self._eop.get_ut1_minus_utc(date)

    def offset_to_reference(self, scale_seconds: float) -> float:
        # Read the label as UTC first, then refine with UT1-UTC at that date
        offset = self._utc.offset_to_reference(scale_seconds)
        for _ in range(_UT1_ITERATIONS):
            guess = REFERENCE_EPOCH.shifted_by(scale_seconds + offset)
            offset = -self.offset_from_reference(guess)
        return offset

# ───────────────────────────── Scale Handle ─────────────────────────────

class TimeScales:
    """Lazily built, load-once set of time scales.

    Pass the handle explicitly to whatever needs scales; there is no hidden
    global lookup.
    """

    def __init__(self, leap_source: Optional[LeapSource],
                 eop_source: Optional[EOPSource] = None,
                 *, eop_jump_threshold: float = DEFAULT_EOP_JUMP_THRESHOLD):
        self._leap_source = leap_source
        self._eop_source = eop_source
        self._eop_jump_threshold = eop_jump_threshold
        self._ready: Dict[object, object] = {
            ScaleKind.TAI: TAIScale(),
            ScaleKind.TT: TTScale(),
        }
        self._failures: Dict[object, DataUnavailable] = {}

    def _lazy(self, key: object, builder: Callable[[], object]):
        if key in self._ready:
            return self._ready[key]
        if key in self._failures:
            raise self._failures[key]

        log.debug(f"Initializing {getattr(key, 'value', key)}")
        try:
            value = builder()
        except DataUnavailable as e:
            self._failures[key] = e
            raise
        except Exception as e:
            failure = DataUnavailable(
                f"Cannot initialize {getattr(key, 'value', key)}: {e}",
                scale=getattr(key, "value", key),
            )
            self._failures[key] = failure
            raise failure from e

        self._ready[key] = value
        return value

    def _build_utc(self) -> UTCScale:
        if self._leap_source is None:
            raise DataUnavailable("No leap second source configured", scale="UTC")
        return UTCScale(LeapSecondTable.from_source(self._leap_source()))

    def _build_eop(self) -> EOPHistory:
        if self._eop_source is None:
            raise DataUnavailable("No EOP source configured", scale="UT1")
        return EOPHistory.from_source(self._eop_source(), self.utc, self._eop_jump_threshold)

    def _build_ut1(self) -> UT1Scale:
        return UT1Scale(self.utc, self.eop_history)

    # Accessors

    def get(self, kind: ScaleKind) -> TimeScale:
        if kind is ScaleKind.UTC:
            return self.utc
        if kind is ScaleKind.UT1:
            return self.ut1
        return self._ready[kind]

    @property
    def tai(self) -> TAIScale:
        return self._ready[ScaleKind.TAI]

    @property
    def tt(self) -> TTScale:
        return self._ready[ScaleKind.TT]

    @property
    def utc(self) -> UTCScale:
        return self._lazy(ScaleKind.UTC, self._build_utc)

    @property
    def ut1(self) -> UT1Scale:
        return self._lazy(ScaleKind.UT1, self._build_ut1)

    @property
    def eop_history(self) -> EOPHistory:
        return self._lazy("EOP", self._build_eop)

    @property
    def has_eop(self) -> bool:
        return self._eop_source is not None

    def load_all(self) -> "TimeScales":
        """Force initialization of every configured scale."""
        self.utc
        if self.has_eop:
            self.ut1
        return self


def build_time_scales(config: Optional[KernelConfig] = None) -> TimeScales:
    """Build a time scale handle from a configuration.

    With ``config.eager_load`` every configured table is loaded before
    returning, so a ready handle or a DataUnavailable comes out of here.
    """
    config = config or KernelConfig.from_env()
    if config.leap_seconds_path:
        leap_source = partial(sources.load_leap_seconds_json, config.leap_seconds_path)
    else:
        leap_source = sources.erfa_leap_seconds
    eop_source = partial(sources.load_eop_json, config.eop_path) if config.eop_path else None

    scales = TimeScales(leap_source, eop_source, eop_jump_threshold=config.eop_jump_threshold)
    if config.eager_load:
        scales.load_all()
    return scales


@lru_cache(maxsize=1)
def default_time_scales() -> TimeScales:
    """Process-wide handle from the environment, loaded lazily."""
    return build_time_scales(replace(KernelConfig.from_env(), eager_load=False))
