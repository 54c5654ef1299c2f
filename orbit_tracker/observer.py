"""
Observer Visibility Tracker

Keeps, for one ground observer, the objects currently above the local horizon
together with their topocentric coordinates.

The visible map is a cache over a full rescan of the Constellation: every
recompute() visits every object, inserts or refreshes those with a positive
ENU "up" component and evicts the rest. It can always be rebuilt from the
Constellation state alone.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from orbit_tracker.constellation import Constellation
from orbit_tracker.propagation import epoch_years, sidereal_time
from orbit_tracker.state import Cartesian, Geodetic, Horizontal
from orbit_tracker.transforms import (
    enu_to_aer,
    geodetic_to_inertial,
    topocentric_rotation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibleObject:
    """
    An object above an observer's horizon.

    Attributes:
        handle: Index of the object in the Constellation
        position_aer: Azimuth/elevation/range from the observer
        velocity_enu: Object's inertial velocity in the observer's ENU frame (km/s)
        timestamp: Unix time of the object state this entry was derived from
    """

    handle: int
    position_aer: Horizontal
    velocity_enu: Cartesian
    timestamp: float


class Observer:
    """Ground observer with its cache of visible objects."""

    def __init__(self, position: Geodetic, capacity_hint: int = 0):
        """
        Initialize an observer.

        Args:
            position: Geodetic position of the observer
            capacity_hint: Expected upper bound on visible objects (the
                Constellation size when created by the Engine)
        """
        self.position = position
        self.capacity_hint = capacity_hint
        self.last_update: Optional[float] = None
        self.visible: Dict[int, VisibleObject] = {}

    @classmethod
    def from_coords(
        cls, lat_deg: float, lon_deg: float, alt_km: float, capacity_hint: int = 0
    ) -> "Observer":
        return cls(Geodetic(lat_deg, lon_deg, alt_km), capacity_hint)

    def update_position(self, lat_deg: float, lon_deg: float, alt_km: float) -> None:
        """
        Move the observer. The visible map is left as is until the next recompute().
        """
        self.position = Geodetic(lat_deg, lon_deg, alt_km)

    def upsert(self, entry: VisibleObject) -> None:
        self.visible[entry.handle] = entry

    def evict(self, handle: int) -> None:
        """Remove a handle from the visible map; absent handles are ignored."""
        self.visible.pop(handle, None)

    def recompute(self, constellation: Constellation, now: Optional[datetime] = None) -> None:
        """
        Rescan the Constellation and refresh the visible map.

        An object is visible when the "up" component of its ENU displacement
        from the observer is strictly positive; an object exactly on the
        horizon is not visible.

        Args:
            constellation: Current propagated state
            now: Instant used to place the observer in the inertial frame
                (default: current UTC time)
        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        gmst = sidereal_time(epoch_years(now))
        observer_eci = geodetic_to_inertial(self.position, gmst)
        rotation = topocentric_rotation(self.position.lat_deg, self.position.lon_deg, gmst)

        positions_enu = (constellation.positions_eci - observer_eci.as_array()) @ rotation.T
        velocities_enu = constellation.velocities_eci @ rotation.T

        for handle in range(len(constellation)):
            position_enu = positions_enu[handle]
            if position_enu[2] > 0.0:
                self.upsert(VisibleObject(
                    handle=handle,
                    position_aer=enu_to_aer(Cartesian.from_array(position_enu)),
                    velocity_enu=Cartesian.from_array(velocities_enu[handle]),
                    timestamp=float(constellation.timestamps[handle]),
                ))
            else:
                self.evict(handle)

        self.last_update = now.timestamp()
        logger.debug(
            f"Observer at ({self.position.lat_deg:.4f}, {self.position.lon_deg:.4f}) "
            f"sees {len(self.visible)}/{len(constellation)} objects"
        )
