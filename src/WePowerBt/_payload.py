import logging
import struct
from binascii import b2a_hex as b2a
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from ._constants import (
    ACCEL_SCALE,
    BLOCK_END,
    BLOCK_START,
    CLEAR_DEVICE_ID,
    FRAME_LENGTH,
    PRESSES_START,
    PRESSURE_SCALE,
    RFU,
    STATUS_FLAG,
    TEMP_SCALE,
)
from ._encryption import Decryptor
from .errors import DeviceIdMismatchError, InvalidLengthError

_LOGGER = logging.getLogger(__name__)

# presses, accel x/y/z, temperature, pressure, device id
_BLOCK_FORMAT: Final = "<IhhhhhH"
_CLEAR_ID_FORMAT: Final = "<H"

_defaultDecryptor: Decryptor | None = None


def _getDefaultDecryptor() -> Decryptor:
    global _defaultDecryptor
    if _defaultDecryptor is None:
        _defaultDecryptor = Decryptor()
    return _defaultDecryptor


@dataclass(frozen=True, repr=True)
class DeviceReading:
    """One decoded sensor reading of a press counter.

    :ivar id: The device id, checked against the encrypted copy.
    :ivar lifetimePresses: Presses counted by the device since it was manufactured.
    :ivar accel: Acceleration vector in g.
    :ivar temperature: Temperature in °C.
    :ivar pressure: Pressure in kPa.
    :ivar encrypted: Whether the sensor block was sent encrypted.
    """

    id: int
    lifetimePresses: int
    accel: tuple[float, float, float]
    temperature: float
    pressure: float
    encrypted: bool = False


def decodePayload(frame: bytes, decryptor: Decryptor | None = None) -> DeviceReading:
    """Decode a raw advertisement frame of a press counter.

    :param frame: The 22 byte manufacturer data frame, including the company id.
    :param decryptor: The decryptor for encrypted frames. Defaults to the protocol key.
    :return: The decoded reading.
    :raises InvalidLengthError: The frame isn't exactly 22 bytes long.
    :raises DecryptionFailureError: The sensor block couldn't be decrypted.
    :raises DeviceIdMismatchError: The cleartext and encrypted device ids differ.
    """
    if len(frame) != FRAME_LENGTH:
        raise InvalidLengthError(FRAME_LENGTH, len(frame))

    frame = bytes(frame)
    status = frame[STATUS_FLAG]
    (clearId,) = struct.unpack_from(_CLEAR_ID_FORMAT, frame, CLEAR_DEVICE_ID)
    _LOGGER.debug(
        f"Cleartext portion: status={status}, device id={clearId}, rfu={frame[RFU]}"
    )

    block = frame[BLOCK_START:BLOCK_END]
    encrypted = status == 0
    if encrypted:
        _LOGGER.debug("Encrypted payload detected, decrypting...")
        if decryptor is None:
            decryptor = _getDefaultDecryptor()
        block = decryptor.decrypt(block)

    (
        presses,
        accelX,
        accelY,
        accelZ,
        temperature,
        pressure,
        blockId,
    ) = struct.unpack_from(_BLOCK_FORMAT, block, PRESSES_START)
    _LOGGER.debug(
        f"Ciphertext portion: presses={presses}, accel=({accelX}, {accelY}, {accelZ}), "
        f"temperature={temperature}, pressure={pressure}, device id={blockId}"
    )

    if blockId != clearId:
        _LOGGER.debug(f"Device id mismatch in frame {b2a(frame)}")
        raise DeviceIdMismatchError(clearId, blockId)

    return DeviceReading(
        blockId,
        presses,
        (accelX / ACCEL_SCALE, accelY / ACCEL_SCALE, accelZ / ACCEL_SCALE),
        temperature / TEMP_SCALE,
        pressure / PRESSURE_SCALE,
        encrypted,
    )


def encodePayload(
    deviceId: int,
    lifetimePresses: int,
    accel: tuple[float, float, float] = (0.0, 0.0, 0.0),
    temperature: float = 0.0,
    pressure: float = 0.0,
    encryptor: Decryptor | None = None,
    companyId: int = 0,
    blockId: int | None = None,
) -> bytes:
    """Build a raw frame the way a press counter sends it.

    The block is encrypted and the status flag cleared if an ``encryptor`` is given.
    ``blockId`` overrides the device id inside the block, e.g. to produce corrupted frames.
    """
    block = struct.pack(
        _BLOCK_FORMAT,
        lifetimePresses,
        *[round(a * ACCEL_SCALE) for a in accel],
        round(temperature * TEMP_SCALE),
        round(pressure * PRESSURE_SCALE),
        deviceId if blockId is None else blockId,
    )

    status = 1
    if encryptor is not None:
        block = encryptor.encrypt(block)
        status = 0

    return (
        struct.pack("<H", companyId)
        + block
        + struct.pack(_CLEAR_ID_FORMAT, deviceId)
        + bytes([status, 0])
    )


def pressFrames(manufacturerData: Mapping[int, bytes]) -> list[bytes]:
    """Rebuild the raw frames of a press counter from bleak manufacturer data.

    Bleak strips the company id from the manufacturer data but it is part of the frame.
    Only entries that add up to a full frame are returned.
    """
    frames = []
    for companyId, data in manufacturerData.items():
        frame = companyId.to_bytes(2, "little") + bytes(data)
        if len(frame) == FRAME_LENGTH:
            frames.append(frame)
        else:
            _LOGGER.debug(f"Ignoring {len(frame)} byte frame {b2a(frame)}")
    return frames
