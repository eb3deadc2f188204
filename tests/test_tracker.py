"""
Tests for tracking press counters across broadcasts
"""
import threading

import pytest

from WePowerBt import DeviceReading, DeviceStateTracker


def reading(deviceId: int = 1, presses: int = 0, temperature: float = 21.0) -> DeviceReading:
    return DeviceReading(deviceId, presses, (0.0, 0.0, 1.0), temperature, 101.3)


class TestInitialState:
    """State before any reading"""

    def test_roster_devices_are_zeroed(self) -> None:
        tracker = DeviceStateTracker()
        snapshots = tracker.snapshots()

        assert [s.id for s in snapshots] == [1, 2, 3]
        for s in snapshots:
            assert s.lifetimePresses == 0
            assert s.beaconReceiveCount == 0
            assert s.totalFrames == 0
            assert s.freshPress is False
            assert s.known is True

    def test_custom_roster(self) -> None:
        tracker = DeviceStateTracker([7, 5, 7])

        assert tracker.roster == (7, 5)
        assert tracker.isKnown(5)
        assert not tracker.isKnown(1)

    def test_unseen_device(self) -> None:
        tracker = DeviceStateTracker()
        with pytest.raises(KeyError):
            tracker.snapshot(42)


class TestUpdate:
    """Fresh press detection"""

    def test_first_press(self) -> None:
        tracker = DeviceStateTracker()
        snapshot = tracker.update(reading(1, 10))

        assert snapshot.id == 1
        assert snapshot.lifetimePresses == 10
        assert snapshot.freshPress is True
        assert snapshot.beaconReceiveCount == 1
        assert snapshot.totalFrames == 1

    def test_sensor_values_are_copied(self) -> None:
        tracker = DeviceStateTracker()
        snapshot = tracker.update(reading(2, 1, temperature=50.0))

        assert snapshot.accel == (0.0, 0.0, 1.0)
        assert snapshot.temperature == 50.0
        assert snapshot.pressure == 101.3
        assert tracker.snapshot(2).temperature == 50.0

    def test_strictly_increasing_presses(self) -> None:
        tracker = DeviceStateTracker()

        for presses in [1, 2, 5, 100, 101]:
            snapshot = tracker.update(reading(1, presses))
            assert snapshot.freshPress is True
            assert snapshot.beaconReceiveCount == 1

        assert snapshot.totalFrames == 5

    def test_duplicate_is_not_a_press(self) -> None:
        tracker = DeviceStateTracker()
        first = tracker.update(reading(1, 10))
        second = tracker.update(reading(1, 10))

        assert first.freshPress is True
        assert second.freshPress is False
        assert second.lifetimePresses == 10

    def test_duplicates_count_repetitions(self) -> None:
        tracker = DeviceStateTracker()
        tracker.update(reading(1, 10))

        counts = [tracker.update(reading(1, 10)).beaconReceiveCount for _ in range(3)]
        assert counts == [2, 3, 4]

        # A new press starts counting from one again
        snapshot = tracker.update(reading(1, 11))
        assert snapshot.freshPress is True
        assert snapshot.beaconReceiveCount == 1
        assert snapshot.totalFrames == 5

    def test_zero_presses_is_not_fresh(self) -> None:
        tracker = DeviceStateTracker()
        snapshot = tracker.update(reading(1, 0))

        assert snapshot.freshPress is False
        assert snapshot.beaconReceiveCount == 1

    def test_lower_counter_is_not_a_press(self) -> None:
        tracker = DeviceStateTracker()
        tracker.update(reading(1, 10))
        snapshot = tracker.update(reading(1, 3))

        assert snapshot.freshPress is False
        assert snapshot.lifetimePresses == 3

        # The lower value is the new reference
        assert tracker.update(reading(1, 4)).freshPress is True

    def test_devices_are_independent(self) -> None:
        tracker = DeviceStateTracker()
        tracker.update(reading(1, 10))
        tracker.update(reading(1, 10))
        snapshot = tracker.update(reading(2, 10))

        assert snapshot.freshPress is True
        assert snapshot.beaconReceiveCount == 1
        assert tracker.snapshot(1).beaconReceiveCount == 2
        assert tracker.snapshot(3).totalFrames == 0

    def test_unknown_device_is_tracked(self) -> None:
        tracker = DeviceStateTracker()
        snapshot = tracker.update(reading(9, 4))

        assert snapshot.known is False
        assert snapshot.freshPress is True
        assert [s.id for s in tracker.snapshots()] == [1, 2, 3, 9]


class TestReset:
    """Reset of all tracked state"""

    def test_reset_restores_initial_state(self) -> None:
        tracker = DeviceStateTracker()
        initial = tracker.snapshots()

        tracker.update(reading(1, 10))
        tracker.update(reading(2, 3))
        tracker.update(reading(9, 1))
        tracker.reset()

        assert tracker.snapshots() == initial

    def test_update_after_reset_matches_fresh_tracker(self) -> None:
        tracker = DeviceStateTracker()
        tracker.update(reading(1, 10))
        tracker.update(reading(1, 10))
        tracker.reset()

        assert tracker.update(reading(1, 10)) == DeviceStateTracker().update(reading(1, 10))

    def test_press_after_reset_is_fresh(self) -> None:
        tracker = DeviceStateTracker()
        tracker.update(reading(1, 10))
        tracker.reset()

        assert tracker.update(reading(1, 10)).freshPress is True

    def test_reset_while_updating(self) -> None:
        tracker = DeviceStateTracker()
        stop = threading.Event()
        errors = []

        def updater(deviceId: int) -> None:
            presses = 0
            try:
                while not stop.is_set():
                    presses += 1
                    tracker.update(reading(deviceId, presses))
                    tracker.snapshots()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=updater, args=(id,)) for id in [1, 2, 3, 9]]
        for t in threads:
            t.start()
        try:
            for _ in range(500):
                tracker.reset()
        finally:
            stop.set()
            for t in threads:
                t.join()

        assert errors == []

        tracker.reset()
        snapshots = tracker.snapshots()
        assert [s.id for s in snapshots] == [1, 2, 3]
        assert all(s.lifetimePresses == 0 and s.totalFrames == 0 for s in snapshots)
