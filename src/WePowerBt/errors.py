"""Error types for WePowerBt."""


class WePowerBtError(RuntimeError):
    """Base class for all WePowerBt errors."""

    pass


class DecodeError(WePowerBtError):
    """Base class for errors that cause a single frame to be dropped."""

    pass


class InvalidLengthError(DecodeError):
    """Exception that is raised when a frame doesn't have the expected length."""

    def __init__(self, expected: int, got: int) -> None:
        """Create a new `InvalidLengthError`."""
        self.expected = expected
        self.length = got

        super().__init__(f"Expected frame of {expected} bytes. Got {got} bytes.")


class DecryptionFailureError(DecodeError):
    """Exception that is raised when the sensor block can't be decrypted."""

    pass


class DeviceIdMismatchError(DecodeError):
    """Exception that is raised when the cleartext and the encrypted device id differ."""

    def __init__(self, clearId: int, blockId: int) -> None:
        """Create a new `DeviceIdMismatchError`."""
        self.clearId = clearId
        self.blockId = blockId

        super().__init__(
            f"Device id mismatch. Cleartext id {clearId}, block id {blockId}."
        )


class BluetoothError(WePowerBtError):
    """Exception that is raised when a bluetooth-related error happens."""

    pass
