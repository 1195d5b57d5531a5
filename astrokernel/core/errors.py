# astrokernel/core/errors.py
# -----------------------------------------------------------------------------
# Kernel Exception Hierarchy
#
# Error kinds:
#   • DataUnavailable       - leap/EOP source missing, malformed or unusable
#   • InvalidCalendarField  - out-of-range calendar components
#   • UnrelatedFrames       - transform requested across two frame trees
#   • ConfigurationError    - frame graph or configuration is invalid
#
# Every error carries a context dict (offending date, frame name, field...)
# so that callers can diagnose without parsing the message.
# -----------------------------------------------------------------------------

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

__all__ = [
    "ErrorClass",
    "KernelError",
    "DataUnavailable",
    "InvalidCalendarField",
    "UnrelatedFrames",
    "ConfigurationError",
    "StaleEOPWarning",
]


class ErrorClass(Enum):
    DATA_UNAVAILABLE = "data_unavailable"
    INVALID_CALENDAR_FIELD = "invalid_calendar_field"
    UNRELATED_FRAMES = "unrelated_frames"
    CONFIGURATION = "configuration"


class KernelError(Exception):
    """Base exception for time and frame computations."""
    def __init__(self, message: str, error_class: ErrorClass, **context: Any):
        super().__init__(message)
        self.error_class = error_class
        self.context: Dict[str, Any] = context


class DataUnavailable(KernelError):
    """Leap-second or EOP data is missing, malformed or cannot serve a date."""
    def __init__(self, message: str, **context: Any):
        super().__init__(message, ErrorClass.DATA_UNAVAILABLE, **context)


class InvalidCalendarField(KernelError, ValueError):
    """Calendar component out of range for the requested scale."""
    def __init__(self, message: str, **context: Any):
        super().__init__(message, ErrorClass.INVALID_CALENDAR_FIELD, **context)


class UnrelatedFrames(KernelError):
    """Two frames do not share a root."""
    def __init__(self, message: str, **context: Any):
        super().__init__(message, ErrorClass.UNRELATED_FRAMES, **context)


class ConfigurationError(KernelError):
    """Invalid frame graph construction or kernel configuration."""
    def __init__(self, message: str, **context: Any):
        super().__init__(message, ErrorClass.CONFIGURATION, **context)


class StaleEOPWarning(UserWarning):
    """Earth orientation data no longer covers the requested date."""
