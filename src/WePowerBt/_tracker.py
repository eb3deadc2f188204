import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from ._constants import DEFAULT_ROSTER
from ._payload import DeviceReading

_LOGGER = logging.getLogger(__name__)


@dataclass()
class DeviceTrackerState:
    lastLifetimePresses: int = 0
    beaconReceiveCount: int = 0
    totalFrames: int = 0
    freshPressDetected: bool = False

    # Sensor values of the last accepted reading.
    accel: tuple[float, float, float] = (0.0, 0.0, 0.0)
    temperature: float = 0.0
    pressure: float = 0.0


@dataclass(frozen=True, repr=True)
class DeviceSnapshot:
    """Current state of one press counter, ready to be displayed.

    :ivar beaconReceiveCount: Frames received for the current press, starts at 1 with each new press.
    :ivar totalFrames: All frames accepted for this device since the last reset.
    :ivar freshPress: Whether the reading that produced this snapshot was a new press.
    :ivar known: Whether the device is part of the roster.
    """

    id: int
    lifetimePresses: int
    beaconReceiveCount: int
    totalFrames: int
    freshPress: bool
    accel: tuple[float, float, float]
    temperature: float
    pressure: float
    known: bool
    capturedAt: datetime = field(default_factory=datetime.now, compare=False)


class DeviceStateTracker:
    """Tracks press counters across repeated broadcasts.

    Devices outside the roster are tracked as well but marked as unknown
    and dropped on reset.
    """

    def __init__(self, roster: Iterable[int] = DEFAULT_ROSTER) -> None:
        self._roster = tuple(dict.fromkeys(roster))
        self._states: dict[int, DeviceTrackerState] = {}
        self._lock = threading.Lock()
        self.reset()

    @property
    def roster(self) -> tuple[int, ...]:
        return self._roster

    def isKnown(self, deviceId: int) -> bool:
        return deviceId in self._roster

    def reset(self) -> None:
        """Forget everything and start over with zeroed roster devices."""
        states = {id: DeviceTrackerState() for id in self._roster}
        with self._lock:
            self._states = states
        _LOGGER.info(f"Tracker reset for devices {list(self._roster)}.")

    def update(self, reading: DeviceReading) -> DeviceSnapshot:
        """Apply a decoded reading and return the resulting snapshot of the device."""
        with self._lock:
            state = self._states.get(reading.id)
            if state is None:
                _LOGGER.debug(f"Tracking unknown device {reading.id}.")
                state = DeviceTrackerState()
                self._states[reading.id] = state

            state.totalFrames += 1
            if reading.lifetimePresses > state.lastLifetimePresses:
                _LOGGER.info(
                    f"New press on device {reading.id}: "
                    f"{state.lastLifetimePresses} -> {reading.lifetimePresses}"
                )
                state.freshPressDetected = True
                state.beaconReceiveCount = 1
            else:
                if reading.lifetimePresses < state.lastLifetimePresses:
                    _LOGGER.warning(
                        f"Press counter of device {reading.id} went backwards: "
                        f"{state.lastLifetimePresses} -> {reading.lifetimePresses}"
                    )
                state.freshPressDetected = False
                state.beaconReceiveCount += 1

            state.lastLifetimePresses = reading.lifetimePresses
            state.accel = reading.accel
            state.temperature = reading.temperature
            state.pressure = reading.pressure

            return self._buildSnapshot(reading.id, state)

    def snapshot(self, deviceId: int) -> DeviceSnapshot:
        """Get the current snapshot of a device.

        :raises KeyError: The device was never seen and isn't part of the roster.
        """
        with self._lock:
            return self._buildSnapshot(deviceId, self._states[deviceId])

    def snapshots(self) -> list[DeviceSnapshot]:
        with self._lock:
            return [self._buildSnapshot(id, s) for id, s in self._states.items()]

    def _buildSnapshot(self, deviceId: int, state: DeviceTrackerState) -> DeviceSnapshot:
        return DeviceSnapshot(
            deviceId,
            state.lastLifetimePresses,
            state.beaconReceiveCount,
            state.totalFrames,
            state.freshPressDetected,
            state.accel,
            state.temperature,
            state.pressure,
            self.isKnown(deviceId),
        )
