"""
Astrodynamics Time & Reference-Frame Kernel

Scale-independent absolute dates, TAI/TT/UTC/UT1 time scales with leap
second and Earth orientation handling, and a reference frame tree producing
rigid transforms between any two frames at any date.
"""

__version__ = "1.0.0"
__author__ = "astrokernel developers"

# Version information
VERSION_INFO = {
    "major": 1,
    "minor": 0,
    "patch": 0,
    "status": "stable"
}
