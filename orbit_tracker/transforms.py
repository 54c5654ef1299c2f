"""
Frame Transforms

Pure conversions between the inertial frame, geodetic coordinates and the
topocentric East-North-Up frame of a ground observer.

Every transform takes the Greenwich mean sidereal angle (radians) as an
input; none of them reads a clock. Degenerate input (a zero-length range
vector, a point on the polar axis) produces NaN components rather than an
exception, and callers are expected to avoid it.
"""

import math

import numpy as np

from orbit_tracker.config import WGS84_A_M, WGS84_E_SQ
from orbit_tracker.geodesy import geodetic_from_polar
from orbit_tracker.state import Cartesian, Geodetic, Horizontal

TWO_PI = 2.0 * math.pi


def wrap_longitude(lon_rad: float) -> float:
    """Wrap any finite angle to (-π, π]."""
    lon_rad = math.remainder(lon_rad, TWO_PI)
    if lon_rad <= -math.pi:
        lon_rad += TWO_PI
    return lon_rad


def inertial_to_geodetic(position: Cartesian, gmst: float) -> Geodetic:
    """
    Convert an inertial position to geodetic coordinates.

    Args:
        position: Inertial position (km)
        gmst: Greenwich mean sidereal angle (rad)

    Returns:
        Geodetic position with longitude in (-180, 180]
    """
    theta = math.atan2(position.y, position.x)
    if theta < 0.0:
        theta += TWO_PI
    lon_deg = math.degrees(wrap_longitude(theta - gmst))

    r_km = math.hypot(position.x, position.y)
    lat_deg, alt_km = geodetic_from_polar(r_km, position.z)
    return Geodetic(lat_deg, lon_deg, alt_km)


def geodetic_to_inertial(geo: Geodetic, gmst: float) -> Cartesian:
    """
    Convert geodetic coordinates to an inertial position (km).

    Uses the prime-vertical radius of curvature of the WGS-84 ellipsoid.
    """
    phi = math.radians(geo.lat_deg)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)
    # Prime-vertical radius of curvature (m)
    n = WGS84_A_M / math.sqrt(1.0 - WGS84_E_SQ * sin_phi ** 2)
    alt_m = geo.alt_km * 1000.0
    theta = gmst + math.radians(geo.lon_deg)

    return Cartesian(
        (n + alt_m) * cos_phi * math.cos(theta) * 0.001,
        (n + alt_m) * cos_phi * math.sin(theta) * 0.001,
        (n * (1.0 - WGS84_E_SQ) + alt_m) * sin_phi * 0.001,
    )


def topocentric_rotation(lat_deg: float, lon_deg: float, gmst: float) -> np.ndarray:
    """
    Rotation matrix from the inertial frame to the local ENU frame.

    Rows are the East, North and Up unit vectors of an observer at the given
    latitude and longitude, expressed in inertial coordinates at the sidereal
    angle gmst.
    """
    theta = gmst + math.radians(lon_deg)
    s_lat = math.sin(math.radians(lat_deg))
    c_lat = math.cos(math.radians(lat_deg))
    s_lon = math.sin(theta)
    c_lon = math.cos(theta)

    return np.array([
        [-s_lon, c_lon, 0.0],
        [-s_lat * c_lon, -s_lat * s_lon, c_lat],
        [c_lat * c_lon, c_lat * s_lon, s_lat],
    ])


def inertial_to_topocentric_enu(
    vector: Cartesian, observer_lat_deg: float, observer_lon_deg: float, gmst: float
) -> Cartesian:
    """
    Rotate an inertial vector into an observer's East-North-Up frame.

    Args:
        vector: Inertial vector, already differenced from the observer's
            inertial position when it is a position
        observer_lat_deg: Observer geodetic latitude (degrees)
        observer_lon_deg: Observer longitude (degrees)
        gmst: Greenwich mean sidereal angle (rad)

    Returns:
        ENU vector (x = east, y = north, z = up)
    """
    rotation = topocentric_rotation(observer_lat_deg, observer_lon_deg, gmst)
    return Cartesian.from_array(rotation @ vector.as_array())


def enu_to_aer(enu: Cartesian) -> Horizontal:
    """
    Convert an ENU vector to azimuth, elevation and range.

    Azimuth is measured clockwise from north, atan2(east, north), and
    normalised to [0, 360).
    """
    with np.errstate(invalid="ignore", divide="ignore"):
        range_km = np.sqrt(np.float64(enu.x) ** 2 + enu.y ** 2 + enu.z ** 2)
        elevation_deg = np.degrees(np.arcsin(enu.z / range_km))

    azimuth_deg = math.degrees(math.atan2(enu.x, enu.y)) % 360.0
    if azimuth_deg >= 360.0:
        azimuth_deg -= 360.0

    return Horizontal(azimuth_deg, float(elevation_deg), float(range_km))
