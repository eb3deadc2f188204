"""Top-level module for WePowerBt."""

# Import everything that should be public
# ruff: noqa: F401

from ._discover import discover
from ._encryption import Decryptor
from ._payload import DeviceReading, decodePayload, encodePayload, pressFrames
from ._tracker import DeviceSnapshot, DeviceStateTracker, DeviceTrackerState
from ._wepower import WePower
