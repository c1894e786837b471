"""
Encpass: encrypted per-script secrets on local disk.

Each label (by default the invoking script's name) gets one AES-256 key in
``~/.encpass/keys/<label>/private.key``; its secrets are stored under
``~/.encpass/secrets/<label>/<name>.enc``.

Security Note (Threat Model):
    Protection relies on filesystem permissions: anyone able to read the
    key file can decrypt the label's secrets. Decrypted values exist in
    process memory while in use.
"""
from .conf import EncpassConfig
from .exceptions import (
    CorruptKeyError,
    DecryptionError,
    EncpassError,
    EnvironmentUnavailableError,
    InvalidNameError,
    LayoutError,
    SecretMismatchError,
)
from .session import Encpass, get_secret, set_secret
from .version import __version__

__all__ = [
    "Encpass",
    "EncpassConfig",
    "get_secret",
    "set_secret",
    "EncpassError",
    "EnvironmentUnavailableError",
    "LayoutError",
    "InvalidNameError",
    "CorruptKeyError",
    "DecryptionError",
    "SecretMismatchError",
    "__version__",
]
