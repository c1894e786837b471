"""
Key Store: one 256-bit AES key per label.

Keys are written once with mode 0400, linked into place atomically, and
never rewritten. Never log key material; only labels and paths.
"""
import os
import logging
import tempfile
from pathlib import Path

from .crypto import generate_key_hex, parse_key_hex
from .exceptions import LayoutError
from .layout import Layout, fsync_dir
from .locks import label_lock

logger = logging.getLogger("encpass.keys")

KEY_MODE = 0o400


class KeyStore:
    """Generates and loads per-label private keys under ``<root>/keys``."""

    def __init__(self, layout: Layout):
        self._layout = layout

    def exists(self, label: str) -> bool:
        return self._layout.key_file(label).is_file()

    def ensure_key(self, label: str) -> Path:
        """Create the label's key if it does not exist yet.

        Args:
            label: Namespace owning the key.

        Returns:
            Path of ``keys/<label>/private.key``.

        Raises:
            LayoutError: If the key directory or file cannot be written.
            EnvironmentUnavailableError: If no secure randomness is available.
        """
        key_file = self._layout.key_file(label)
        if key_file.is_file():
            return key_file
        key_dir = self._layout.ensure_dir(self._layout.key_dir(label))
        with label_lock(key_dir):
            if key_file.exists():
                return key_file
            created = self._write_new_key(key_file)
        if created:
            logger.info("Generated private key for label=%s", label)
        return key_file

    def _write_new_key(self, key_file: Path) -> bool:
        """Write a fresh key to a temp file, then hard-link it into place.

        ``os.link`` fails if ``key_file`` exists, so a reader only ever
        sees a complete key and a concurrent writer's key is never replaced.
        """
        key_hex = generate_key_hex()
        key_dir = key_file.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".private.key.", suffix=".tmp", dir=key_dir)
        except OSError as err:
            raise LayoutError(f"cannot write in {key_dir}: {err.strerror or err}") from err
        try:
            with os.fdopen(fd, "w", encoding="ascii") as fh:
                fh.write(key_hex)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_name, KEY_MODE)
            try:
                os.link(tmp_name, key_file)
            except FileExistsError:
                # another process won the race; its key stands
                logger.debug("Key %s appeared concurrently, keeping it", key_file)
                return False
            fsync_dir(key_dir)
        except OSError as err:
            raise LayoutError(f"cannot create {key_file}: {err.strerror or err}") from err
        finally:
            Path(tmp_name).unlink(missing_ok=True)
        return True

    def load_key(self, label: str) -> bytes:
        """Return the label's raw 32-byte key.

        Raises:
            LayoutError: If the key file cannot be read.
            CorruptKeyError: If the file does not hold a 64-char hex key.
        """
        key_file = self._layout.key_file(label)
        try:
            text = key_file.read_text(encoding="ascii", errors="replace")
        except OSError as err:
            raise LayoutError(f"cannot read {key_file}: {err.strerror or err}") from err
        return parse_key_hex(text)
