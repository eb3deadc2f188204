import logging
import platform

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.exc import BleakDBusError, BleakError

from ._constants import PRESS_SERVICE_UUID
from ._payload import pressFrames
from .errors import BluetoothError

_LOGGER = logging.getLogger(__name__)


async def discover(timeout: float = 5.0) -> list[BLEDevice]:
    """Discover all WePower press counters in range.

    :param timeout: Seconds to scan for.
    :return: A list of all discovered press counters.
    :raises BluetoothError: Bluetooth isn't turned on or in a failed state.
    """

    try:
        if platform.system() == "Darwin":
            _LOGGER.debug(
                "MacOS operation system detected, using undocumented IOBluetooth API to fetch MAC Address."
            )
            devices_and_advertisements = await BleakScanner.discover(
                timeout=timeout, return_adv=True, cb={"use_bdaddr": True}
            )
        else:
            devices_and_advertisements = await BleakScanner.discover(
                timeout=timeout, return_adv=True
            )
    except BleakDBusError as e:
        raise BluetoothError(e.dbus_error, e.dbus_error_details) from e
    except BleakError as e:
        raise BluetoothError from e

    # Only keep devices that advertise the press service and carry a full press counter frame
    discovered = []
    for _, (d, advertisement) in devices_and_advertisements.items():
        if PRESS_SERVICE_UUID not in advertisement.service_uuids:
            continue
        if not pressFrames(advertisement.manufacturer_data):
            _LOGGER.debug(f"Ignoring {d.address}, no press counter frame.")
            continue
        _LOGGER.debug(f"Discovered press counter at {d.address}")
        discovered.append(d)

    return discovered
