"""Password-based sealing of export payloads.

Security Model:
- AES-256-CBC with PKCS7 padding
- Key derived from the password with PBKDF2-HMAC-SHA256
- Fresh 16-byte salt and 16-byte IV on every call, so sealing the same text
  twice yields different envelopes
- No authentication tag: a wrong password and a corrupted payload both
  surface as ``DecryptionError``

Envelope format (single line of text)::

    ENC:<base64 salt>:<base64 iv>:<base64 ciphertext>

The prefix also selects the key-derivation cost, so a later prefix can raise
the iteration count while old envelopes stay readable.
"""

import base64
import binascii
import os

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from db_cli.exceptions import DecryptionError, FormatError

SEALED_PREFIX = "ENC:"

# Envelope prefix -> PBKDF2 iteration count
KDF_ITERATIONS = {
    SEALED_PREFIX: 100_000,
}

SALT_LENGTH = 16
IV_LENGTH = 16
KEY_LENGTH = 32


def _derive_key(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def is_sealed(content: str) -> bool:
    """Check whether text carries a known sealed-envelope prefix."""
    return any(content.startswith(prefix) for prefix in KDF_ITERATIONS)


def seal(plaintext: str, password: str) -> str:
    """Encrypt text with a password.

    Args:
        plaintext: Text to protect (may be empty)
        password: Password the key is derived from

    Returns:
        Self-describing envelope string starting with ``ENC:``
    """
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    key = _derive_key(password, salt, KDF_ITERATIONS[SEALED_PREFIX])

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return f"{SEALED_PREFIX}{_b64(salt)}:{_b64(iv)}:{_b64(ciphertext)}"


def _split(envelope: str) -> tuple[int, bytes, bytes, bytes]:
    prefix = next((p for p in KDF_ITERATIONS if envelope.startswith(p)), None)
    if prefix is None:
        raise FormatError("Invalid encrypted format")

    parts = envelope[len(prefix) :].strip().split(":")
    if len(parts) != 3:
        raise FormatError("Invalid encrypted format")

    try:
        salt, iv, ciphertext = (base64.b64decode(part, validate=True) for part in parts)
    except (binascii.Error, ValueError) as e:
        raise FormatError("Invalid encrypted format") from e

    if len(salt) != SALT_LENGTH or len(iv) != IV_LENGTH:
        raise FormatError("Invalid encrypted format")

    return KDF_ITERATIONS[prefix], salt, iv, ciphertext


def unseal(envelope: str, password: str) -> str:
    """Decrypt an envelope produced by ``seal``.

    Args:
        envelope: Sealed text
        password: Password used when sealing

    Returns:
        The original plaintext

    Raises:
        FormatError: If the envelope is not recognized or is malformed
        DecryptionError: If the password is wrong or the payload is corrupted
    """
    iterations, salt, iv, ciphertext = _split(envelope)
    key = _derive_key(password, salt, iterations)

    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()

        return data.decode("utf-8")
    except ValueError as e:
        # UnicodeDecodeError is a ValueError too
        raise DecryptionError(
            "Decryption failed",
            suggestion="Check the password; the file may also be corrupted",
        ) from e
