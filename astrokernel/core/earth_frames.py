# astrokernel/core/earth_frames.py
# -----------------------------------------------------------------------------
# Earth Frames (IERS Conventions 2010, CIO based)
#
# Tree:
#   GCRF (root, pseudo-inertial)
#    ├── EME2000  frame bias, constant                      erfa.bp06
#    └── CIRF     precession-nutation IAU 2006/2000A        erfa.c2i06a (TT)
#         └── TIRF  Earth rotation angle + rotation rate    erfa.era00  (UT1)
#              └── ITRF  polar motion from EOP              erfa.pom00, sp00
#
# Each provider returns the transform from its frame to the parent, i.e. the
# transpose of the ERFA celestial-to-terrestrial matrices:
#   [CIRS] = RC2I [GCRS],  [TIRS] = R3(ERA) [CIRS],  [ITRS] = RPOM [TIRS]
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import erfa  # pyERFA - SOFA/ERFA gold standard
import numpy as np

from astrokernel.core.dates import JD_J2000, AbsoluteDate
from astrokernel.core.eop import NULL_POLE
from astrokernel.core.frames import Frame, FixedTransformProvider, FrameTree, TransformProvider
from astrokernel.core.timescales import TimeScale, TimeScales
from astrokernel.core.transform import Transform

__all__ = [
    "EARTH_ROTATION_RATE",
    "CIRFProvider",
    "TIRFProvider",
    "ITRFProvider",
    "EarthFrames",
    "build_earth_frames",
    "frame_bias_transform",
]

log = logging.getLogger(__name__)

# d(ERA)/dt in rad/s (IERS Conventions 2010, eq. 5.15)
EARTH_ROTATION_RATE = 2.0 * math.pi * 1.00273781191135448 / 86400.0

_Z_AXIS = np.array([0.0, 0.0, 1.0])


def frame_bias_transform() -> Transform:
    """EME2000 -> GCRF, the IAU 2006 frame bias."""
    rb, _, _ = erfa.bp06(JD_J2000, 0.0)
    return Transform.from_rotation(None, np.asarray(rb).T)


class CIRFProvider(TransformProvider):
    """CIRF -> GCRF from the CIO-based precession-nutation matrix."""

    def __init__(self, tt: TimeScale):
        self._tt = tt

    def get_transform(self, date: AbsoluteDate) -> Transform:
        jd = date.to_julian_date(self._tt)
        rc2i = erfa.c2i06a(jd.jd1, jd.jd2)
        return Transform.from_rotation(date, np.asarray(rc2i).T)


class TIRFProvider(TransformProvider):
    """TIRF -> CIRF, rotation by the Earth rotation angle about the CIP."""

    def __init__(self, ut1: TimeScale):
        self._ut1 = ut1

    def get_transform(self, date: AbsoluteDate) -> Transform:
        jd = date.to_julian_date(self._ut1)
        era = erfa.era00(jd.jd1, jd.jd2)
        r3 = erfa.rz(era, np.eye(3))
        return Transform.from_rotation(date, np.asarray(r3).T, EARTH_ROTATION_RATE * _Z_AXIS)


class ITRFProvider(TransformProvider):
    """ITRF -> TIRF from polar motion; null pole without EOP."""

    def __init__(self, tt: TimeScale, scales: Optional[TimeScales] = None):
        self._tt = tt
        self._eop = scales.eop_history if scales is not None else None

    def get_transform(self, date: AbsoluteDate) -> Transform:
        pole = self._eop.get_pole_correction(date) if self._eop is not None else NULL_POLE
        jd = date.to_julian_date(self._tt)
        sp = erfa.sp00(jd.jd1, jd.jd2)
        rpom = erfa.pom00(pole.x_p, pole.y_p, sp)
        return Transform.from_rotation(date, np.asarray(rpom).T)


@dataclass(frozen=True)
class EarthFrames:
    tree: FrameTree
    gcrf: Frame
    eme2000: Frame
    cirf: Frame
    tirf: Frame
    itrf: Frame


def build_earth_frames(scales: TimeScales, ignore_eop: bool = False) -> EarthFrames:
    """Build the GCRF-rooted Earth frame tree.

    With ``ignore_eop`` the Earth rotation angle is evaluated in UTC and the
    pole is the CIP; otherwise UT1 and the EOP history are loaded here, so
    missing data raises DataUnavailable now rather than at first lookup.
    """
    tree = FrameTree("GCRF")
    gcrf = tree.root
    eme2000 = tree.add_frame("EME2000", gcrf, FixedTransformProvider(frame_bias_transform()),
                             pseudo_inertial=True)
    cirf = tree.add_frame("CIRF", gcrf, CIRFProvider(scales.tt), pseudo_inertial=True)

    if ignore_eop:
        log.warning("Building Earth frames without EOP: UT1 taken as UTC, null polar motion")
        tirf = tree.add_frame("TIRF", cirf, TIRFProvider(scales.utc))
        itrf = tree.add_frame("ITRF", tirf, ITRFProvider(scales.tt))
    else:
        tirf = tree.add_frame("TIRF", cirf, TIRFProvider(scales.ut1))
        itrf = tree.add_frame("ITRF", tirf, ITRFProvider(scales.tt, scales))

    return EarthFrames(tree, gcrf, eme2000, cirf, tirf, itrf)
