"""
Encpass Crypto Core: key/IV generation, AES-256-CBC, and the secret file format.

Secret file format (no separator, no trailing newline):
    [IV as 32 lowercase hex chars][base64(AES-256-CBC(PKCS#7(plaintext + "\\n")))]

The trailing newline on the plaintext matches what ``echo "$SECRET" |
openssl enc -aes-256-cbc -a`` produces, so files written by the shell
version of encpass decrypt here and the other way round.

Security Note:
    Never log key, IV, plaintext or ciphertext values.
"""
import base64
import binascii
import logging
import secrets

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exceptions import CorruptKeyError, DecryptionError, EnvironmentUnavailableError

logger = logging.getLogger("encpass.crypto")

KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16  # AES block size
IV_HEX_LENGTH = IV_LENGTH * 2
BLOCK_BITS = algorithms.AES.block_size

_LINE_END = b"\n"


# ---------------------------------------------------------------------------
# Randomness
# ---------------------------------------------------------------------------

def random_bytes(length: int) -> bytes:
    """Return ``length`` bytes from the OS CSPRNG.

    Raises:
        EnvironmentUnavailableError: If no secure randomness source exists.
    """
    try:
        return secrets.token_bytes(length)
    except NotImplementedError as err:
        raise EnvironmentUnavailableError(
            "no secure randomness source is available on this system"
        ) from err


def generate_key_hex() -> str:
    """Generate a random 256-bit key, hex-encoded (64 chars)."""
    return random_bytes(KEY_LENGTH).hex()


def generate_iv() -> bytes:
    """Generate a random 16-byte IV."""
    return random_bytes(IV_LENGTH)


def parse_key_hex(text: str) -> bytes:
    """Decode a hex key as stored in ``private.key``.

    Raises:
        CorruptKeyError: If text is not exactly 64 hex characters.
    """
    text = text.strip()
    if len(text) != KEY_LENGTH * 2:
        raise CorruptKeyError(
            f"private key must be {KEY_LENGTH * 2} hex characters, got {len(text)}"
        )
    try:
        key = bytes.fromhex(text)
    except ValueError as err:
        raise CorruptKeyError("private key is not valid hex") from err
    if len(key) != KEY_LENGTH:
        raise CorruptKeyError("private key is not valid hex")
    return key


# ---------------------------------------------------------------------------
# AES-256-CBC
# ---------------------------------------------------------------------------

def encrypt(key: bytes, iv: bytes, plaintext: str) -> bytes:
    """Encrypt a secret string with AES-256-CBC and PKCS#7 padding.

    Args:
        key: Raw 32-byte key.
        iv: Raw 16-byte IV.
        plaintext: Secret value; encoded as UTF-8 and newline-terminated.

    Returns:
        Raw ciphertext bytes.
    """
    padder = padding.PKCS7(BLOCK_BITS).padder()
    padded = padder.update(plaintext.encode("utf-8") + _LINE_END) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> str:
    """Decrypt AES-256-CBC ciphertext produced by :func:`encrypt`.

    CBC is not authenticated: a wrong key usually fails the padding check,
    but can occasionally yield garbage that also fails UTF-8 decoding.

    Raises:
        DecryptionError: On a bad length, bad padding or non-UTF-8 output.
    """
    if not ciphertext or len(ciphertext) % IV_LENGTH:
        raise DecryptionError(
            f"ciphertext length {len(ciphertext)} is not a positive multiple of {IV_LENGTH}"
        )
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
    try:
        data = unpadder.update(padded) + unpadder.finalize()
    except ValueError as err:
        raise DecryptionError("bad decrypt (wrong key or corrupt secret)") from err
    if data.endswith(_LINE_END):
        data = data[:-len(_LINE_END)]
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecryptionError("decrypted secret is not valid UTF-8 (wrong key?)") from err


# ---------------------------------------------------------------------------
# File format
# ---------------------------------------------------------------------------

def encode_secret_file(iv: bytes, ciphertext: bytes) -> str:
    """Serialize IV and ciphertext to the on-disk text form."""
    return iv.hex() + base64.b64encode(ciphertext).decode("ascii")


def decode_secret_file(text: str) -> tuple[bytes, bytes]:
    """Split file contents at offset 32 into (iv, ciphertext).

    Whitespace inside the base64 part is ignored, since openssl wraps its
    output at 64 columns.

    Raises:
        DecryptionError: If the IV or base64 part is malformed.
    """
    text = text.strip()
    iv_hex, payload = text[:IV_HEX_LENGTH], text[IV_HEX_LENGTH:]
    if len(iv_hex) != IV_HEX_LENGTH:
        raise DecryptionError("secret file is too short to hold an IV")
    try:
        iv = bytes.fromhex(iv_hex)
    except ValueError as err:
        raise DecryptionError("secret file IV is not valid hex") from err
    if len(iv) != IV_LENGTH:
        raise DecryptionError("secret file IV is not valid hex")
    payload = "".join(payload.split())
    if not payload:
        raise DecryptionError("secret file holds no ciphertext")
    try:
        ciphertext = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as err:
        raise DecryptionError("secret file ciphertext is not valid base64") from err
    return iv, ciphertext
