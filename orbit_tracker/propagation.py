"""
SGP4 Propagation Oracle

Adapts the proven sgp4 library to the three calls the tracker needs:

- try_build(elements): initialise propagation constants, or None
- Constants.propagate(minutes_since_epoch): inertial (TEME) position/velocity
- sidereal_time(epoch_years): Greenwich mean sidereal angle

Element sets are built from data already in memory, either TLE line pairs or
OMM field dictionaries (CelesTrak / Space-Track JSON and CSV records), using
the sgp4 library's own parsers.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional, Tuple

from sgp4 import omm
from sgp4.api import Satrec, jday
from sgp4.conveniences import sat_epoch_datetime
from sgp4.propagation import gstime

from orbit_tracker.config import DAYS_PER_JULIAN_YEAR, J2000_JD, MINUTES_PER_DAY
from orbit_tracker.state import Cartesian

logger = logging.getLogger(__name__)


# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}

# Not an sgp4 code: the library reported success but returned NaN/inf
NON_FINITE_ERROR = -1


class PropagationError(RuntimeError):
    """SGP4 failed to propagate an object to the requested time."""

    def __init__(self, code: int, message: Optional[str] = None):
        self.code = code
        self.message = message or SGP4_ERROR_CODES.get(code, f"Unknown error code {code}")
        super().__init__(f"SGP4 error {code}: {self.message}")


class Prediction(NamedTuple):
    """Inertial (TEME) state returned by the oracle."""

    position: Cartesian  # km
    velocity: Cartesian  # km/s


@dataclass(frozen=True)
class ElementSet:
    """
    Orbital element set of one trackable object.

    Attributes:
        catalog_id: NORAD catalog number
        name: Object name, if known
        designator: International designator (e.g. "98067A"), if known
        epoch: Element epoch (aware UTC datetime)
        satrec: Initialised sgp4 record
    """

    catalog_id: int
    name: Optional[str]
    designator: Optional[str]
    epoch: datetime
    satrec: Satrec = field(compare=False, repr=False)

    @classmethod
    def from_satrec(
        cls, satrec: Satrec, name: Optional[str] = None, designator: Optional[str] = None
    ) -> "ElementSet":
        return cls(
            catalog_id=int(satrec.satnum),
            name=name or None,
            designator=designator or None,
            epoch=sat_epoch_datetime(satrec).astimezone(timezone.utc),
            satrec=satrec,
        )

    @classmethod
    def from_tle(cls, line1: str, line2: str, name: Optional[str] = None) -> "ElementSet":
        """
        Build an element set from TLE lines.

        Raises:
            ValueError: If the lines cannot be parsed
        """
        try:
            satrec = Satrec.twoline2rv(line1, line2)
        except Exception as e:
            raise ValueError(f"Failed to load TLE: {e}")

        designator = line1[9:17].strip() if len(line1) >= 17 else None
        return cls.from_satrec(satrec, name=name, designator=designator)

    @classmethod
    def from_omm(cls, fields: Dict[str, Any]) -> "ElementSet":
        """
        Build an element set from an OMM record (CelesTrak GP JSON/CSV keys).

        Raises:
            ValueError: If a required field is missing or malformed
        """
        satrec = Satrec()
        try:
            omm.initialize(satrec, fields)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Failed to load OMM record: {e}")

        return cls.from_satrec(
            satrec,
            name=fields.get("OBJECT_NAME"),
            designator=fields.get("OBJECT_ID"),
        )


class Constants:
    """Propagation constants of one element set."""

    def __init__(self, satrec: Satrec):
        self.satrec = satrec

    def propagate(self, minutes_since_epoch: float) -> Prediction:
        """
        Propagate to a time offset from the element epoch.

        Args:
            minutes_since_epoch: Elapsed time since epoch (minutes, may be negative)

        Returns:
            Prediction with TEME position (km) and velocity (km/s)

        Raises:
            PropagationError: On any SGP4 error or non-finite output
        """
        sat = self.satrec
        error, position, velocity = sat.sgp4(
            sat.jdsatepoch, sat.jdsatepochF + minutes_since_epoch / MINUTES_PER_DAY
        )
        if error != 0:
            raise PropagationError(error)
        if not all(math.isfinite(v) for v in (*position, *velocity)):
            raise PropagationError(NON_FINITE_ERROR, "Non-finite propagation output")

        return Prediction(Cartesian(*position), Cartesian(*velocity))


def try_build(elements: ElementSet) -> Optional[Constants]:
    """Return propagation constants, or None if SGP4 rejects the elements."""
    satrec = elements.satrec
    if satrec.error != 0:
        logger.debug(
            f"Rejecting {elements.catalog_id}: "
            f"{SGP4_ERROR_CODES.get(satrec.error, f'Unknown error code {satrec.error}')}"
        )
        return None
    if not satrec.no_kozai > 0.0:
        logger.debug(f"Rejecting {elements.catalog_id}: non-positive mean motion")
        return None
    return Constants(satrec)


def datetime_to_jd(dt: datetime) -> Tuple[float, float]:
    """Convert a datetime (naive values are taken as UTC) to Julian date and fraction."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    second = dt.second + dt.microsecond / 1e6
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, second)


def epoch_years(dt: datetime) -> float:
    """Julian years elapsed since J2000 at the given instant."""
    jd, fr = datetime_to_jd(dt)
    return ((jd - J2000_JD) + fr) / DAYS_PER_JULIAN_YEAR


def minutes_since_epoch(elements: ElementSet, dt: datetime) -> float:
    """Minutes from the element epoch to the given instant."""
    jd, fr = datetime_to_jd(dt)
    sat = elements.satrec
    return ((jd - sat.jdsatepoch) + (fr - sat.jdsatepochF)) * MINUTES_PER_DAY


def sidereal_time(epoch_years_since_j2000: float) -> float:
    """
    Greenwich mean sidereal angle (IAU-82) in [0, 2π).

    Args:
        epoch_years_since_j2000: Julian years since J2000

    Returns:
        Sidereal angle (rad)
    """
    return gstime(J2000_JD + epoch_years_since_j2000 * DAYS_PER_JULIAN_YEAR)
