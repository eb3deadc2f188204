from typing import Final

PRESS_SERVICE_UUID: Final = "00005750-0000-1000-8000-00805f9b34fb"

# Single protocol key shared by all press counters.
DEFAULT_KEY: Final = bytes(range(16))

DEFAULT_ROSTER: Final = (1, 2, 3)

FRAME_LENGTH: Final = 22
BLOCK_LENGTH: Final = 16

# Offsets in the raw frame. The first two bytes are the company id.
BLOCK_START: Final = 2
BLOCK_END: Final = BLOCK_START + BLOCK_LENGTH
CLEAR_DEVICE_ID: Final = 18
STATUS_FLAG: Final = 20
RFU: Final = 21

# Offsets in the (decrypted) sensor block.
PRESSES_START: Final = 0
ACCEL_X_START: Final = PRESSES_START + 4
ACCEL_Y_START: Final = ACCEL_X_START + 2
ACCEL_Z_START: Final = ACCEL_Y_START + 2
TEMP_START: Final = ACCEL_Z_START + 2
PRESSURE_START: Final = TEMP_START + 2
ENC_DEVICE_ID: Final = PRESSURE_START + 2

ACCEL_SCALE: Final = 1000
TEMP_SCALE: Final = 100
PRESSURE_SCALE: Final = 100
