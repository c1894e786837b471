"""
Filesystem layout for encpass.

    <root>/                     0700
        keys/<label>/private.key
        secrets/<label>/<name>.enc

All directories are created owner-only regardless of the process umask.
"""
import os
import stat
import logging
from dataclasses import dataclass
from pathlib import Path

from .exceptions import InvalidNameError, LayoutError

logger = logging.getLogger("encpass.layout")

DIR_MODE = 0o700
KEY_FILENAME = "private.key"
SECRET_SUFFIX = ".enc"


def validate_component(value: str, kind: str) -> str:
    """Ensure ``value`` can be used as a single path component.

    Raises:
        InvalidNameError: If value is empty, '.', '..', or contains a
            path separator or NUL.
    """
    if not isinstance(value, str) or not value:
        raise InvalidNameError(f"{kind} cannot be empty")
    if value in (".", ".."):
        raise InvalidNameError(f"{kind} cannot be {value!r}")
    if "/" in value or "\x00" in value or (os.altsep and os.altsep in value):
        raise InvalidNameError(f"{kind} cannot contain a path separator: {value!r}")
    return value


def make_private_dir(path: Path) -> bool:
    """Create a single 0700 directory if missing.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        LayoutError: If creation fails or a non-directory occupies the path.
    """
    try:
        path.mkdir(mode=DIR_MODE)
    except FileExistsError:
        if not path.is_dir():
            raise LayoutError(f"{path} exists and is not a directory") from None
        return False
    except OSError as err:
        raise LayoutError(f"cannot create directory {path}: {err.strerror or err}") from err
    # mkdir's mode is filtered through the umask
    try:
        os.chmod(path, DIR_MODE)
    except OSError as err:
        raise LayoutError(f"cannot restrict permissions of {path}: {err.strerror or err}") from err
    logger.debug("Created directory %s", path)
    return True


@dataclass(frozen=True)
class Layout:
    """Resolved on-disk tree for one root directory."""

    root: Path

    @property
    def keys_dir(self) -> Path:
        return self.root / "keys"

    @property
    def secrets_dir(self) -> Path:
        return self.root / "secrets"

    def key_dir(self, label: str) -> Path:
        return self.keys_dir / validate_component(label, "label")

    def key_file(self, label: str) -> Path:
        return self.key_dir(label) / KEY_FILENAME

    def secret_dir(self, label: str) -> Path:
        return self.secrets_dir / validate_component(label, "label")

    def secret_file(self, label: str, name: str) -> Path:
        validate_component(name, "secret name")
        return self.secret_dir(label) / f"{name}{SECRET_SUFFIX}"

    def ensure_dir(self, path: Path) -> Path:
        """Create ``path`` (one level) with owner-only permissions."""
        make_private_dir(path)
        return path


def ensure_layout(root: Path) -> Layout:
    """Idempotently create ``root``, ``root/keys`` and ``root/secrets``.

    Missing parents of ``root`` itself are not created.

    Args:
        root: Absolute path of the encpass home directory.

    Returns:
        The Layout rooted at ``root``.

    Raises:
        LayoutError: If a directory cannot be created.
    """
    layout = Layout(Path(root))
    created = make_private_dir(layout.root)
    make_private_dir(layout.keys_dir)
    make_private_dir(layout.secrets_dir)
    if created:
        logger.info("Initialized encpass home at %s", layout.root)
    return layout


def is_owner_only(path: Path) -> bool:
    """True if no group or other permission bit is set on ``path``."""
    mode = stat.S_IMODE(os.stat(path).st_mode)
    return mode & (stat.S_IRWXG | stat.S_IRWXO) == 0


def fsync_dir(path: Path) -> None:
    """Flush a directory entry change (create, rename, link) to disk."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
