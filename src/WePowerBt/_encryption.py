import logging
from binascii import b2a_hex as b2a

from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers.algorithms import AES
from cryptography.hazmat.primitives.ciphers.modes import ECB

from ._constants import BLOCK_LENGTH, DEFAULT_KEY
from .errors import DecryptionFailureError


class Decryptor:
    """AES-128 in ECB mode without padding, as used by the press counters."""

    def __init__(self, key: bytes = DEFAULT_KEY) -> None:
        if len(key) != BLOCK_LENGTH:
            raise ValueError("Key must be 16 bytes long.")

        self._blockCipher = Cipher(AES(bytes(key)), mode=ECB())
        self._logger = logging.getLogger(__name__)

    def decrypt(self, block: bytes) -> bytes:
        self._logger.debug(f"Encrypted ({len(block)}): {b2a(block)}")
        try:
            context = self._blockCipher.decryptor()
            plaintext = context.update(bytes(block)) + context.finalize()
        except ValueError as e:
            raise DecryptionFailureError(
                f"Failed to decrypt block of {len(block)} bytes."
            ) from e
        self._logger.debug(f"Decrypted ({len(plaintext)}): {b2a(plaintext)}")
        return plaintext

    def encrypt(self, block: bytes) -> bytes:
        if len(block) % BLOCK_LENGTH != 0:
            raise ValueError("Block must be a multiple of 16 bytes long.")

        context = self._blockCipher.encryptor()
        return context.update(bytes(block)) + context.finalize()
