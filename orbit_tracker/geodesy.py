"""
Geodetic Inversion

Closed-form (non-iterative) conversion of a point given in the meridian plane,
equatorial distance r and polar coordinate z, to geodetic latitude and
altitude above the WGS-84 ellipsoid.

References:
    J. Zhu, "Conversion of Earth-centered Earth-fixed coordinates to geodetic
    coordinates," IEEE Transactions on Aerospace and Electronic Systems,
    vol. 30, pp. 957-961, 1994.
"""

from typing import Tuple

import numpy as np

from orbit_tracker.config import (
    WGS84_A_M,
    WGS84_A_SQ,
    WGS84_B_SQ,
    WGS84_E_SQ,
    WGS84_E_PRIME_SQ,
)


def geodetic_from_polar(r_km: float, z_km: float) -> Tuple[float, float]:
    """
    Convert meridian-plane coordinates to geodetic latitude and altitude.

    Args:
        r_km: Distance from the polar axis, sqrt(x² + y²) (km)
        z_km: Distance from the equatorial plane (km)

    Returns:
        (lat_deg, alt_km)

    Notes:
        The altitude factor z₀/z is evaluated as b²/(a·vv), which is the same
        quantity for z != 0 and stays finite on the equatorial plane, where
        the result is latitude 0 and altitude r - a.
        On the polar axis (r == 0) the result is not finite.
    """
    with np.errstate(invalid="ignore", divide="ignore"):
        r = np.float64(r_km) * 1000.0
        r_sq = r * r
        z = np.float64(z_km) * 1000.0
        z_sq = z * z

        ee_sq = WGS84_A_SQ - WGS84_B_SQ
        ff = 54.0 * WGS84_B_SQ * z_sq
        gg = r_sq + (1.0 - WGS84_E_SQ) * z_sq - WGS84_E_SQ * ee_sq
        cc = (WGS84_E_SQ ** 2) * ff * r_sq / gg ** 3
        ss = np.cbrt(1.0 + cc + np.sqrt(cc * cc + 2.0 * cc))
        pp = ff / (3.0 * (ss + 1.0 / ss + 1.0) ** 2 * gg * gg)
        qq = np.sqrt(1.0 + 2.0 * WGS84_E_SQ ** 2 * pp)
        r_o = -(pp * WGS84_E_SQ * r) / (1.0 + qq) + np.sqrt(
            0.5 * WGS84_A_SQ * (1.0 + 1.0 / qq)
            - pp * (1.0 - WGS84_E_SQ) * z_sq / (qq * (1.0 + qq))
            - 0.5 * pp * r_sq
        )
        uu = np.sqrt((r - WGS84_E_SQ * r_o) ** 2 + z_sq)
        vv = np.sqrt((r - WGS84_E_SQ * r_o) ** 2 + (1.0 - WGS84_E_SQ) * z_sq)
        z_o = WGS84_B_SQ * z / (WGS84_A_M * vv)

        lat_deg = np.degrees(np.arctan2(z + WGS84_E_PRIME_SQ * z_o, r))
        alt_km = uu * (1.0 - WGS84_B_SQ / (WGS84_A_M * vv)) * 0.001

    return float(lat_deg), float(alt_km)
