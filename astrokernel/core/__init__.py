"""
Core time and reference-frame modules.

Dates, time scales, leap second and EOP tables, transforms, the frame tree
and frame synchronizers.
"""

from .dates import AbsoluteDate, DateTimeComponents, TwoPartJD, J2000_EPOCH, REFERENCE_EPOCH
from .errors import (
    KernelError,
    DataUnavailable,
    InvalidCalendarField,
    UnrelatedFrames,
    ConfigurationError,
    StaleEOPWarning,
)
from .config import KernelConfig
from .leapseconds import Leap, LeapSecondTable
from .eop import EOPEntry, EOPHistory, PoleCorrection
from .timescales import (
    ScaleKind,
    TimeScale,
    TimeScales,
    build_time_scales,
    default_time_scales,
)
from .transform import PVCoordinates, Transform
from .frames import Frame, FrameTree, TransformProvider, FixedTransformProvider
from .synchronizer import FrameSynchronizer
from .earth_frames import EarthFrames, build_earth_frames

__all__ = [
    "AbsoluteDate",
    "DateTimeComponents",
    "TwoPartJD",
    "J2000_EPOCH",
    "REFERENCE_EPOCH",
    "KernelError",
    "DataUnavailable",
    "InvalidCalendarField",
    "UnrelatedFrames",
    "ConfigurationError",
    "StaleEOPWarning",
    "KernelConfig",
    "Leap",
    "LeapSecondTable",
    "EOPEntry",
    "EOPHistory",
    "PoleCorrection",
    "ScaleKind",
    "TimeScale",
    "TimeScales",
    "build_time_scales",
    "default_time_scales",
    "PVCoordinates",
    "Transform",
    "Frame",
    "FrameTree",
    "TransformProvider",
    "FixedTransformProvider",
    "FrameSynchronizer",
    "EarthFrames",
    "build_earth_frames",
]
