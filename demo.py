import asyncio
import logging
import sys
from importlib.metadata import version

from WePowerBt import DeviceSnapshot, WePower, discover

formatter = logging.Formatter(
    fmt="%(asctime)s %(name)-8s %(levelname)-8s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
stream = logging.StreamHandler()
stream.setFormatter(formatter)
logging.getLogger().addHandler(stream)
_LOGGER = logging.getLogger(__name__)


def printSnapshot(snapshot: DeviceSnapshot) -> None:
    x, y, z = snapshot.accel
    print(f"Device {snapshot.id}")
    print(f"  Lifetime Presses: {snapshot.lifetimePresses}")
    print(f"  Beacon Reps: {snapshot.beaconReceiveCount}")
    print(f"  Time: {snapshot.capturedAt:%Y-%m-%d %H:%M:%S}")
    print(f"  X: {x}  Y: {y}  Z: {z}")
    print(f"  Temperature: {snapshot.temperature:05.2f}°C")
    print(f"  Pressure: {snapshot.pressure:05.2f}kPa")


async def main() -> None:
    logLevel = logging.INFO
    if "-d" in sys.argv:
        logLevel = logging.DEBUG
        logging.getLogger("bleak").setLevel(logging.DEBUG)

    _LOGGER.setLevel(logLevel)
    logging.getLogger("WePowerBt").setLevel(logLevel)

    _LOGGER.debug(f"Bleak version: {version('bleak')}")

    print("Searching...")
    for d in await discover():
        print(f"Found {d.name or 'Unknown'}\t{d.address}")

    wepower = WePower()
    wepower.registerSnapshotHandler(printSnapshot)
    try:
        await wepower.start()
        await asyncio.sleep(60)

        # Same as the restart button of the app
        print("Restarting...")
        await wepower.restart()
        await asyncio.sleep(60)
    finally:
        await wepower.stop()


if __name__ == "__main__":
    loop = asyncio.new_event_loop()
    loop.run_until_complete(main())
