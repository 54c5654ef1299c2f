"""
Propagated-State Store

Holds the latest propagated and transformed state of every tracked object in
parallel numpy arrays. The index of an object in these arrays is its handle
for the lifetime of the Constellation.

Slots start zeroed. A propagation failure leaves the previous tick's values in
place; the next propagate_tick() call is the retry.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

import numpy as np

from orbit_tracker.config import MAX_ERROR_HISTORY
from orbit_tracker.propagation import (
    Constants,
    ElementSet,
    PropagationError,
    epoch_years,
    minutes_since_epoch,
    sidereal_time,
    try_build,
)
from orbit_tracker.state import Cartesian, Geodetic, InertialState
from orbit_tracker.transforms import inertial_to_geodetic

logger = logging.getLogger(__name__)


class Constellation:
    """
    Struct-of-arrays store of per-object state.

    Attributes:
        elements: Element set of each retained object
        constants: Propagation constants of each retained object
        positions_eci: (n, 3) inertial positions (km)
        velocities_eci: (n, 3) inertial velocities (km/s)
        positions_geodetic: (n, 3) lat (deg), lon (deg), alt (km)
        timestamps: (n,) Unix time of each object's last successful propagation
    """

    def __init__(self, elements: List[ElementSet], constants: List[Constants]):
        if len(elements) != len(constants):
            raise ValueError("elements and constants must have the same length")

        n = len(elements)
        self.elements = list(elements)
        self.constants = list(constants)
        self.positions_eci = np.zeros((n, 3))
        self.velocities_eci = np.zeros((n, 3))
        self.positions_geodetic = np.zeros((n, 3))
        self.timestamps = np.zeros(n)
        self._error_history: Dict[int, List[dict]] = {}

    @classmethod
    def from_elements(
        cls,
        elements: Iterable[ElementSet],
        builder: Callable[[ElementSet], Optional[Constants]] = try_build,
    ) -> "Constellation":
        """
        Build a Constellation, dropping element sets the oracle rejects.

        Args:
            elements: Element sets to track
            builder: Returns propagation constants for an element set, or None

        Returns:
            Constellation sized to the surviving element sets
        """
        kept_elements = []
        kept_constants = []
        dropped = 0
        for element_set in elements:
            constants = builder(element_set)
            if constants is None:
                dropped += 1
                logger.debug(f"Dropped element set {element_set.catalog_id}")
                continue
            kept_elements.append(element_set)
            kept_constants.append(constants)

        logger.info(
            f"Constellation built with {len(kept_elements)} objects ({dropped} dropped)"
        )
        return cls(kept_elements, kept_constants)

    def __len__(self) -> int:
        return len(self.elements)

    def propagate_tick(self, now: Optional[datetime] = None) -> None:
        """
        Propagate every object to `now` and refresh its stored state.

        Args:
            now: Target time (default: current UTC time)
        """
        if now is None:
            now = datetime.now(timezone.utc)

        gmst = sidereal_time(epoch_years(now))
        timestamp = _unix_seconds(now)
        failures = 0

        for i, (element_set, constants) in enumerate(zip(self.elements, self.constants)):
            try:
                prediction = constants.propagate(minutes_since_epoch(element_set, now))
            except PropagationError as e:
                failures += 1
                self._log_error(i, e, now)
                logger.warning(
                    f"Propagation failed for {element_set.catalog_id}, keeping previous state: {e}"
                )
                continue

            geodetic = inertial_to_geodetic(prediction.position, gmst)
            self.positions_eci[i] = prediction.position.as_array()
            self.velocities_eci[i] = prediction.velocity.as_array()
            self.positions_geodetic[i] = geodetic.as_array()
            self.timestamps[i] = timestamp

        logger.debug(
            f"Propagated {len(self) - failures}/{len(self)} objects to {now.isoformat()}"
        )

    def inertial_state(self, handle: int) -> InertialState:
        """Inertial state of one object."""
        return InertialState(
            position=Cartesian.from_array(self.positions_eci[handle]),
            velocity=Cartesian.from_array(self.velocities_eci[handle]),
            timestamp=float(self.timestamps[handle]),
        )

    def geodetic(self, handle: int) -> Geodetic:
        """Geodetic position of one object."""
        return Geodetic.from_array(self.positions_geodetic[handle])

    def catalog_ids(self) -> List[int]:
        return [element_set.catalog_id for element_set in self.elements]

    def error_history(self, handle: int) -> List[dict]:
        """
        Get propagation error history for an object.

        Args:
            handle: Object handle

        Returns:
            List of error records, oldest first
        """
        return list(self._error_history.get(handle, []))

    def _log_error(self, handle: int, error: PropagationError, timestamp: datetime) -> None:
        """Record a propagation error for tracking and diagnostics."""
        history = self._error_history.setdefault(handle, [])
        history.append({
            "error_code": error.code,
            "error_message": error.message,
            "timestamp": timestamp.isoformat(),
        })

        if len(history) > MAX_ERROR_HISTORY:
            del history[:-MAX_ERROR_HISTORY]


def _unix_seconds(dt: datetime) -> float:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()
