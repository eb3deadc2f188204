import logging
from binascii import b2a_hex as b2a
from collections.abc import Callable, Iterable

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakDBusError, BleakError

from ._constants import DEFAULT_KEY, DEFAULT_ROSTER, PRESS_SERVICE_UUID
from ._encryption import Decryptor
from ._payload import decodePayload, pressFrames
from ._tracker import DeviceSnapshot, DeviceStateTracker
from .errors import BluetoothError, DecodeError


class WePower:
    """Class to scan for WePower press counters and track their state.

    This is the central point of interaction and should be preferred to dealing with
    ``decodePayload`` or ``DeviceStateTracker`` directly.
    """

    def __init__(
        self,
        roster: Iterable[int] = DEFAULT_ROSTER,
        key: bytes = DEFAULT_KEY,
        reportUnknown: bool = False,
    ) -> None:
        self._tracker = DeviceStateTracker(roster)
        self._decryptor = Decryptor(key)
        self._reportUnknown = reportUnknown

        self._snapshotCallbacks: list[Callable[[DeviceSnapshot], None]] = []
        self._decodeErrorCallbacks: list[Callable[[bytes, DecodeError], None]] = []

        self._scanner: BleakScanner | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def tracker(self) -> DeviceStateTracker:
        return self._tracker

    @property
    def scanning(self) -> bool:
        """Check whether the scanner is currently running."""
        return self._scanner is not None

    @property
    def snapshots(self) -> list[DeviceSnapshot]:
        """Get the current state of all roster devices."""
        return [s for s in self._tracker.snapshots() if s.known or self._reportUnknown]

    def handleFrame(self, frame: bytes) -> DeviceSnapshot | None:
        """Decode a raw frame and apply it to the tracked state.

        Frames that fail to decode are dropped.

        :param frame: The 22 byte manufacturer data frame, including the company id.
        :return: The updated snapshot of the device or `None` if the frame was dropped.
        """
        try:
            reading = decodePayload(frame, self._decryptor)
        except DecodeError as e:
            self._logger.debug(f"Dropping frame {b2a(frame)}: {e}")
            for h in self._decodeErrorCallbacks:
                try:
                    h(bytes(frame), e)
                except Exception:
                    self._logger.error(
                        f"Exception occurred in decodeErrorHandler {h}.",
                        exc_info=True,
                    )
            return None

        snapshot = self._tracker.update(reading)
        if not snapshot.known and not self._reportUnknown:
            self._logger.debug(f"Not reporting device {snapshot.id}, not in roster.")
            return snapshot

        for h in self._snapshotCallbacks:
            try:
                h(snapshot)
            except Exception:
                self._logger.error(
                    f"Exception occurred in snapshotHandler {h}.",
                    exc_info=True,
                )
        return snapshot

    def _detectionCallback(
        self, device: BLEDevice, advertisement: AdvertisementData
    ) -> None:
        name = advertisement.local_name or device.name
        if not name:
            return

        for frame in pressFrames(advertisement.manufacturer_data):
            self._logger.debug(f"{name} ({device.address}): {b2a(frame)}")
            self.handleFrame(frame)

    async def start(self) -> None:
        """Start scanning for press counters.

        :raises BluetoothError: An error occurred in the bluetooth stack.
        """
        if self._scanner is not None:
            self._logger.debug("Already scanning.")
            return

        scanner = BleakScanner(
            detection_callback=self._detectionCallback,
            service_uuids=[PRESS_SERVICE_UUID],
        )
        try:
            await scanner.start()
        except BleakDBusError as e:
            raise BluetoothError(e.dbus_error, e.dbus_error_details) from e
        except BleakError as e:
            raise BluetoothError from e

        self._scanner = scanner
        self._logger.info("Started scanning.")

    async def stop(self) -> None:
        """Stop scanning."""
        if self._scanner is None:
            return

        scanner, self._scanner = self._scanner, None
        try:
            await scanner.stop()
        except BleakError:
            self._logger.error("Failed to stop scanner.", exc_info=True)
        self._logger.info("Stopped scanning.")

    async def restart(self) -> None:
        """Forget all tracked state and restart discovery."""
        await self.stop()
        self._tracker.reset()
        await self.start()

    def registerSnapshotHandler(self, handler: Callable[[DeviceSnapshot], None]) -> None:
        """Register a new handler for device snapshots.

        The handler is called for every accepted frame of a roster device
        (or of any device if ``reportUnknown`` is set).

        :param handler: The method to call.
        """
        self._snapshotCallbacks.append(handler)
        self._logger.debug(f"Registered snapshot handler {handler}")

    def unregisterSnapshotHandler(
        self, handler: Callable[[DeviceSnapshot], None]
    ) -> None:
        """Unregister an existing snapshot handler.

        :param handler: The handler to unregister.
        :raises ValueError: If the handler isn't registered.
        """
        self._snapshotCallbacks.remove(handler)
        self._logger.debug(f"Removed snapshot handler {handler}")

    def registerDecodeErrorHandler(
        self, handler: Callable[[bytes, DecodeError], None]
    ) -> None:
        """Register a handler that is called with every dropped frame and the reason."""
        self._decodeErrorCallbacks.append(handler)
        self._logger.debug(f"Registered decode error handler {handler}")

    def unregisterDecodeErrorHandler(
        self, handler: Callable[[bytes, DecodeError], None]
    ) -> None:
        self._decodeErrorCallbacks.remove(handler)
        self._logger.debug(f"Removed decode error handler {handler}")
