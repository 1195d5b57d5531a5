# astrokernel/core/synchronizer.py
# -----------------------------------------------------------------------------
# Frame Synchronizer
#
# A named group of frames sharing one controlling date, e.g. a satellite body
# frame and its sensor frames all following the same propagation epoch.
# Changing the group date refreshes every member's cached transform to its
# parent, in registration order.
#
# Update policy (all-or-nothing):
#   1. compute every member transform at the new date
#   2. only if all succeed, commit the date and every member cache
# A failing member leaves the date and all caches untouched.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import List, Tuple

from astrokernel.core.dates import J2000_EPOCH, AbsoluteDate
from astrokernel.core.errors import ConfigurationError
from astrokernel.core.frames import Frame
from astrokernel.core.transform import Transform

__all__ = [
    "FrameSynchronizer",
]

log = logging.getLogger(__name__)


class FrameSynchronizer:
    """Date-sharing group of frames."""

    def __init__(self, date: AbsoluteDate = J2000_EPOCH, name: str = "synchronizer"):
        self.name = name
        self._date = date
        self._frames: List[Frame] = []

    def add_frame(self, frame: Frame) -> None:
        """Register ``frame``; it is *not* synchronized until the next set_date."""
        if frame in self._frames:
            raise ConfigurationError(f"Frame {frame.name!r} already in synchronizer {self.name!r}",
                                     frame=frame.name, synchronizer=self.name)
        frame.tree._bind(frame.index, self)
        self._frames.append(frame)

    def set_date(self, date: AbsoluteDate) -> None:
        """Move the whole group to ``date``."""
        updates: List[Tuple[Frame, Transform]] = [
            (frame, frame.tree._compute(frame.index, date)) for frame in self._frames
        ]
        self._date = date
        for frame, transform in updates:
            frame.tree._commit(frame.index, date, transform)
        log.debug(f"Synchronizer {self.name} moved {len(updates)} frames to {date}")

    def get_date(self) -> AbsoluteDate:
        return self._date

    @property
    def frames(self) -> Tuple[Frame, ...]:
        return tuple(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        return f"FrameSynchronizer({self.name!r}, date={self._date}, frames={[f.name for f in self._frames]})"
