"""
Tracker Configuration and Constants

This module contains the physical constants, time constants and runtime
settings used throughout the package.

Constants:
    WGS-84 ellipsoid parameters used by the geodetic transforms. The values are
    those of the closed-form inversion in Zhu (1994); they are not rederived
    from the flattening so the inversion and the forward transform agree to
    the last digit.

Fallback TLE Data:
    Hardcoded ISS TLE data for demonstrations and testing when live data is
    unavailable. The engine propagates relative to the element epoch, so
    results far from that epoch degrade like any stale TLE.

Runtime settings:
    TrackerConfig reads environment overrides once at import time.

References:
    J. Zhu, "Conversion of Earth-centered Earth-fixed coordinates to geodetic
    coordinates," IEEE Transactions on Aerospace and Electronic Systems,
    vol. 30, pp. 957-961, 1994.
"""

import os
from typing import Dict, Any, Optional

# WGS-84 ellipsoid (meters)
WGS84_A_M: float = 6378137.0  # Semi-major axis
WGS84_B_M: float = 6356752.3142  # Semi-minor axis
WGS84_A_SQ: float = 40680631590769.0  # a², exact
WGS84_B_SQ: float = 40408299984087.0  # b², as used by the inversion
WGS84_E_SQ: float = 0.00669437999014  # First eccentricity squared
WGS84_E_PRIME_SQ: float = 0.00673949674228  # Second eccentricity squared

# Time
J2000_JD: float = 2451545.0  # Julian date of the J2000 epoch
DAYS_PER_JULIAN_YEAR: float = 365.25
MINUTES_PER_DAY: float = 1440.0

# Propagation bookkeeping
MAX_ERROR_HISTORY: int = 100  # Per-object propagation error records kept

# Fallback ISS TLE for demonstrations and testing
FALLBACK_ISS_TLE: Dict[str, Any] = {
    'name': 'ISS (ZARYA)',
    'norad_id': 25544,
    'designator': '98067A',
    'line1': '1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995',
    'line2': '2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598',
    'epoch': '2023-09-16T13:49:09Z',
}


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return int(value)


class TrackerConfig:
    """Runtime settings, overridable through the environment."""

    MAX_WORKERS: Optional[int] = _env_int('ORBIT_TRACKER_MAX_WORKERS', None)
    LOG_LEVEL: str = os.getenv('ORBIT_TRACKER_LOG_LEVEL', 'INFO')
    LOG_FILE: Optional[str] = os.getenv('ORBIT_TRACKER_LOG_FILE') or None


config = TrackerConfig()
