"""
Coordinate Records

Three distinct record types for the three coordinate systems the tracker
moves between, plus the inertial state view of one tracked object.

- Cartesian: inertial (ECI/TEME) or topocentric ENU vector, km or km/s
- Geodetic: latitude/longitude (degrees) and altitude above the ellipsoid (km)
- Horizontal: azimuth/elevation (degrees) and slant range (km)

The records are deliberately not interchangeable: a transform takes one kind
and returns another.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Cartesian:
    """Cartesian vector (km or km/s)."""

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, values) -> "Cartesian":
        x, y, z = values
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class Geodetic:
    """Geodetic position: lat in [-90, 90], lon in (-180, 180], alt in km."""

    lat_deg: float
    lon_deg: float
    alt_km: float

    def as_array(self) -> np.ndarray:
        return np.array([self.lat_deg, self.lon_deg, self.alt_km], dtype=np.float64)

    @classmethod
    def from_array(cls, values) -> "Geodetic":
        lat, lon, alt = values
        return cls(float(lat), float(lon), float(alt))


@dataclass(frozen=True)
class Horizontal:
    """Topocentric pointing: azimuth in [0, 360), elevation in [-90, 90], range >= 0."""

    azimuth_deg: float
    elevation_deg: float
    range_km: float

    def as_array(self) -> np.ndarray:
        return np.array(
            [self.azimuth_deg, self.elevation_deg, self.range_km], dtype=np.float64
        )


@dataclass(frozen=True)
class InertialState:
    """
    Propagated inertial state of one object.

    Attributes:
        position: Inertial position (km)
        velocity: Inertial velocity (km/s)
        timestamp: Unix time (UTC seconds) of the propagation that produced it;
            0.0 if the object has never propagated successfully
    """

    position: Cartesian
    velocity: Cartesian
    timestamp: float
