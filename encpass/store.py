"""
SecretStore: AES-256-CBC encrypted secrets under ``<root>/secrets/<label>``.

Provides:
- ``get(label, name)``: decrypt a secret, prompting for it first if absent
- ``set(label, name, value)``: encrypt and atomically (re)write a secret
- ``exists(label, name)``: check for a secret file

Security Note:
    Never log plaintext or ciphertext values. Only log labels, names and
    paths.
"""
import os
import logging
import tempfile
from pathlib import Path
from typing import Optional

from .crypto import (
    decode_secret_file,
    decrypt,
    encode_secret_file,
    encrypt,
    generate_iv,
)
from .exceptions import LayoutError, SecretMismatchError
from .keys import KeyStore
from .layout import Layout, fsync_dir
from .locks import label_lock
from .prompt import Prompter, prompt_secret

logger = logging.getLogger("encpass.store")


class SecretStore:
    """Encrypted named secrets, one key per label.

    Every operation first ensures the label's key exists, so a secret is
    never encrypted or decrypted without it.
    """

    def __init__(
        self,
        layout: Layout,
        keys: KeyStore,
        prompt: Prompter = prompt_secret,
        confirm_attempts: int = 1,
    ):
        self._layout = layout
        self._keys = keys
        self._prompt = prompt
        self._confirm_attempts = confirm_attempts

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def exists(self, label: str, name: str) -> bool:
        return self._layout.secret_file(label, name).is_file()

    def get(self, label: str, name: str) -> str:
        """Decrypt and return a secret, creating it interactively if absent.

        Raises:
            DecryptionError: If the file is corrupt or the key does not match.
            SecretMismatchError: If interactive creation was needed and failed.
        """
        self._keys.ensure_key(label)
        secret_file = self._layout.secret_file(label, name)
        if not secret_file.is_file():
            logger.debug("No secret %s/%s yet, prompting", label, name)
            self.set(label, name)
        try:
            text = secret_file.read_text(encoding="ascii", errors="replace")
        except OSError as err:
            raise LayoutError(f"cannot read {secret_file}: {err.strerror or err}") from err
        iv, ciphertext = decode_secret_file(text)
        value = decrypt(self._keys.load_key(label), iv, ciphertext)
        logger.debug("Decrypted secret %s/%s", label, name)
        return value

    def set(self, label: str, name: str, value: Optional[str] = None) -> Path:
        """Encrypt ``value`` (or a prompted entry) and write it atomically.

        Args:
            label: Namespace whose key encrypts the secret.
            name: Secret name.
            value: Plaintext; when None the user is prompted and must
                confirm the entry.

        Returns:
            Path of the written ``.enc`` file.

        Raises:
            SecretMismatchError: If every confirmation round mismatched. No
                file is created or replaced in that case.
        """
        self._keys.ensure_key(label)
        secret_file = self._layout.secret_file(label, name)
        if value is None:
            value = self._read_confirmed(name)
        key = self._keys.load_key(label)
        iv = generate_iv()
        payload = encode_secret_file(iv, encrypt(key, iv, value))

        secret_dir = self._layout.ensure_dir(self._layout.secret_dir(label))
        with label_lock(self._layout.key_dir(label)):
            self._write_atomic(secret_dir, secret_file, payload)
        logger.info("Stored secret %s/%s", label, name)
        return secret_file

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_confirmed(self, name: str) -> str:
        """Prompt up to ``confirm_attempts`` times for a matching pair."""
        attempt = 0
        while True:
            attempt += 1
            entry, confirmation = self._prompt(name)
            if entry == confirmation:
                return entry
            err = SecretMismatchError(name, attempt, self._confirm_attempts)
            if not err.retryable:
                raise err
            logger.warning("%s; please try again", err)

    @staticmethod
    def _write_atomic(secret_dir: Path, secret_file: Path, payload: str) -> None:
        # mkstemp creates the file 0600
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{secret_file.name}.", suffix=".tmp", dir=secret_dir,
            )
        except OSError as err:
            raise LayoutError(f"cannot write in {secret_dir}: {err.strerror or err}") from err
        try:
            with os.fdopen(fd, "w", encoding="ascii") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, secret_file)
            fsync_dir(secret_dir)
        except OSError as err:
            Path(tmp_name).unlink(missing_ok=True)
            raise LayoutError(f"cannot write {secret_file}: {err.strerror or err}") from err
