import pytest

from WePowerBt import Decryptor


@pytest.fixture
def decryptor() -> Decryptor:
    return Decryptor()


@pytest.fixture
def scenarioFrame() -> bytes:
    """Cleartext frame of device 2 with 10 presses, 50 °C and 1 kPa."""
    block = bytes(
        [10, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0x88, 0x13, 0x64, 0x00, 0x02, 0x00]
    )
    return b"\x00\x00" + block + b"\x02\x00" + b"\x01\x00"
