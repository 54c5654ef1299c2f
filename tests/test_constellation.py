"""
Unit Tests for the Propagated-State Store

Run with:
    python -m pytest tests/test_constellation.py -v
"""

import unittest
from datetime import datetime, timedelta, timezone

import numpy as np

from orbit_tracker.config import FALLBACK_ISS_TLE, MAX_ERROR_HISTORY
from orbit_tracker.constellation import Constellation
from orbit_tracker.propagation import ElementSet, PropagationError, try_build


class FlakyConstants:
    """Wraps real constants and fails on demand."""

    def __init__(self, constants):
        self.constants = constants
        self.fail = False
        self.calls = 0

    def propagate(self, minutes_since_epoch):
        self.calls += 1
        if self.fail:
            raise PropagationError(5)
        return self.constants.propagate(minutes_since_epoch)


def iss_elements():
    return ElementSet.from_tle(
        FALLBACK_ISS_TLE['line1'], FALLBACK_ISS_TLE['line2'], FALLBACK_ISS_TLE['name']
    )


class TestConstruction(unittest.TestCase):
    """Test Constellation construction and filtering."""

    def test_rejected_elements_are_dropped(self):
        """Test element sets without constants never occupy a slot."""
        elements = [iss_elements(), iss_elements(), iss_elements()]
        rejected = {id(elements[1])}

        constellation = Constellation.from_elements(
            elements,
            builder=lambda e: None if id(e) in rejected else try_build(e),
        )

        self.assertEqual(len(constellation), 2)
        self.assertEqual(len(constellation.positions_eci), 2)
        self.assertEqual(len(constellation.velocities_eci), 2)
        self.assertEqual(len(constellation.positions_geodetic), 2)
        self.assertEqual(len(constellation.timestamps), 2)
        self.assertIs(constellation.elements[1], elements[2])

    def test_slots_start_zeroed(self):
        """Test state is zero before the first propagation."""
        constellation = Constellation.from_elements([iss_elements()])

        self.assertTrue(np.all(constellation.positions_eci == 0.0))
        self.assertEqual(constellation.inertial_state(0).timestamp, 0.0)

    def test_empty_constellation(self):
        """Test an empty input builds and propagates without error."""
        constellation = Constellation.from_elements([])
        constellation.propagate_tick(datetime(2023, 9, 16, 14, tzinfo=timezone.utc))

        self.assertEqual(len(constellation), 0)
        self.assertEqual(constellation.positions_eci.shape, (0, 3))

    def test_mismatched_lengths(self):
        """Test elements and constants must line up."""
        with self.assertRaises(ValueError):
            Constellation([iss_elements()], [])


class TestPropagateTick(unittest.TestCase):
    """Test per-tick propagation and failure handling."""

    def setUp(self):
        """Set up test fixtures."""
        self.elements = iss_elements()
        self.flaky = FlakyConstants(try_build(self.elements))
        self.constellation = Constellation([self.elements], [self.flaky])
        self.now = self.elements.epoch + timedelta(hours=1)

    def test_successful_tick_updates_all_arrays(self):
        """Test a successful tick writes inertial, geodetic and timestamp state."""
        self.constellation.propagate_tick(self.now)

        state = self.constellation.inertial_state(0)
        geo = self.constellation.geodetic(0)
        self.assertGreater(np.linalg.norm(state.position.as_array()), 6700.0)
        self.assertAlmostEqual(
            np.linalg.norm(state.velocity.as_array()), 7.66, delta=0.1
        )
        self.assertEqual(state.timestamp, self.now.timestamp())
        self.assertLessEqual(abs(geo.lat_deg), 52.0)
        self.assertGreater(geo.lon_deg, -180.0)
        self.assertLessEqual(geo.lon_deg, 180.0)
        self.assertGreater(geo.alt_km, 350.0)
        self.assertLess(geo.alt_km, 480.0)

    def test_failed_tick_retains_previous_state(self):
        """Test a failed propagation leaves the previous tick's state exactly."""
        self.constellation.propagate_tick(self.now)
        positions = self.constellation.positions_eci.copy()
        velocities = self.constellation.velocities_eci.copy()
        geodetic = self.constellation.positions_geodetic.copy()
        timestamps = self.constellation.timestamps.copy()

        self.flaky.fail = True
        self.constellation.propagate_tick(self.now + timedelta(minutes=5))

        np.testing.assert_array_equal(self.constellation.positions_eci, positions)
        np.testing.assert_array_equal(self.constellation.velocities_eci, velocities)
        np.testing.assert_array_equal(self.constellation.positions_geodetic, geodetic)
        np.testing.assert_array_equal(self.constellation.timestamps, timestamps)

    def test_failure_is_retried_next_tick(self):
        """Test the next tick propagates again after a failure."""
        self.flaky.fail = True
        self.constellation.propagate_tick(self.now)
        self.flaky.fail = False
        self.constellation.propagate_tick(self.now)

        self.assertEqual(self.flaky.calls, 2)
        self.assertEqual(self.constellation.timestamps[0], self.now.timestamp())

    def test_failure_is_object_local(self):
        """Test one failing object does not affect another."""
        healthy = try_build(self.elements)
        constellation = Constellation([self.elements, self.elements], [self.flaky, healthy])
        self.flaky.fail = True

        constellation.propagate_tick(self.now)

        self.assertEqual(constellation.timestamps[0], 0.0)
        self.assertEqual(constellation.timestamps[1], self.now.timestamp())

    def test_error_history(self):
        """Test failures are recorded and the history is capped."""
        self.flaky.fail = True
        for minute in range(MAX_ERROR_HISTORY + 5):
            self.constellation.propagate_tick(self.now + timedelta(minutes=minute))

        history = self.constellation.error_history(0)
        self.assertEqual(len(history), MAX_ERROR_HISTORY)
        self.assertEqual(history[-1]["error_code"], 5)
        self.assertIn("decayed", history[-1]["error_message"])
        self.assertEqual(self.constellation.error_history(1), [])

    def test_catalog_ids(self):
        """Test handle order maps to catalog ids."""
        self.assertEqual(self.constellation.catalog_ids(), [25544])


if __name__ == "__main__":
    unittest.main()
