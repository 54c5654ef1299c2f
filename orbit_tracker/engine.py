"""
Tracking Engine

Wires the Constellation and the Observers into a propagate -> transform ->
visibility-update cycle.

The engine has no timers. Callers drive it each tick:

    engine = Engine.from_elements(element_sets, [(33.9207, -118.3278, 0.0)])
    engine.propagate()
    engine.update_observers()
    for handle, entry in engine.visible(0).items():
        ...

update_observers() without a prior propagate() is legal and re-derives
visibility from the stored Constellation state.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from orbit_tracker.config import config
from orbit_tracker.constellation import Constellation
from orbit_tracker.propagation import ElementSet
from orbit_tracker.observer import Observer, VisibleObject

logger = logging.getLogger(__name__)

ObserverPosition = Tuple[float, float, float]


class Engine:
    """
    Owns one Constellation and a resizable list of Observers.

    Observers and tracked objects have independent lifetimes: changing the
    observer list never touches Constellation data, and propagating never
    removes observers.
    """

    def __init__(
        self,
        constellation: Constellation,
        observer_positions: Iterable[ObserverPosition] = (),
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the engine.

        Args:
            constellation: Propagated-state store
            observer_positions: (lat_deg, lon_deg, alt_km) of each observer
            max_workers: Thread count for observer updates; None or 1 runs
                them sequentially (default: ORBIT_TRACKER_MAX_WORKERS)
        """
        self.constellation = constellation
        self.observers: List[Observer] = [
            Observer.from_coords(lat, lon, alt, len(constellation))
            for lat, lon, alt in observer_positions
        ]
        self.max_workers = max_workers if max_workers is not None else config.MAX_WORKERS
        self.last_propagated: Optional[datetime] = None

    @classmethod
    def from_elements(
        cls,
        elements: Iterable[ElementSet],
        observer_positions: Iterable[ObserverPosition] = (),
        max_workers: Optional[int] = None,
    ) -> "Engine":
        """Build an engine from raw element sets, dropping those SGP4 rejects."""
        return cls(Constellation.from_elements(elements), observer_positions, max_workers)

    def propagate(self, now: Optional[datetime] = None) -> None:
        """
        Advance the Constellation to `now`.

        Args:
            now: Target time (default: current UTC time)
        """
        if now is None:
            now = datetime.now(timezone.utc)
        self.constellation.propagate_tick(now)
        self.last_propagated = now

    def update_observers(self, now: Optional[datetime] = None) -> None:
        """
        Recompute the visible map of every observer.

        Args:
            now: Instant used to place observers in the inertial frame
                (default: time of the last propagate(), else current UTC time)
        """
        if now is None:
            now = self.last_propagated or datetime.now(timezone.utc)

        if self.max_workers and self.max_workers > 1 and len(self.observers) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(observer.recompute, self.constellation, now)
                    for observer in self.observers
                ]
                for future in futures:
                    future.result()
        else:
            for observer in self.observers:
                observer.recompute(self.constellation, now)

    def update(self, now: Optional[datetime] = None) -> None:
        """Propagate and update every observer at the same instant."""
        if now is None:
            now = datetime.now(timezone.utc)
        self.propagate(now)
        self.update_observers(now)

    def update_observer_positions(self, positions: Sequence[ObserverPosition]) -> None:
        """
        Set the observer list to `positions`, matched by index.

        Existing observers keep their visible maps and only move. New indices
        get fresh observers with empty maps; trailing observers beyond
        len(positions) are dropped.
        """
        current = len(self.observers)
        for observer, (lat, lon, alt) in zip(self.observers, positions):
            observer.update_position(lat, lon, alt)

        if len(positions) < current:
            del self.observers[len(positions):]
            logger.debug(f"Dropped {current - len(positions)} observers")
        else:
            for lat, lon, alt in positions[current:]:
                self.observers.append(
                    Observer.from_coords(lat, lon, alt, len(self.constellation))
                )

    def add_observer(self, lat_deg: float, lon_deg: float, alt_km: float) -> int:
        """Append an observer and return its index."""
        self.observers.append(
            Observer.from_coords(lat_deg, lon_deg, alt_km, len(self.constellation))
        )
        return len(self.observers) - 1

    def observer(self, index: int) -> Observer:
        if not 0 <= index < len(self.observers):
            raise IndexError(f"No observer at index {index}")
        return self.observers[index]

    def visible(self, observer_index: int) -> Mapping[int, VisibleObject]:
        """Read-only view of an observer's visible objects, keyed by handle."""
        return MappingProxyType(self.observer(observer_index).visible)

    def geodetic_positions(self) -> np.ndarray:
        """(n, 3) lat (deg), lon (deg), alt (km) of every tracked object."""
        return self.constellation.positions_geodetic.copy()

    def timestamps(self) -> np.ndarray:
        return self.constellation.timestamps.copy()

    def element_set(self, handle: int) -> ElementSet:
        if not 0 <= handle < len(self.constellation):
            raise IndexError(f"No object with handle {handle}")
        return self.constellation.elements[handle]

    def catalog_id(self, handle: int) -> int:
        return self.element_set(handle).catalog_id

    def catalog_ids(self) -> List[int]:
        return self.constellation.catalog_ids()
