"""Advisory per-label lock serialising key and secret creation."""
import os
import logging
from contextlib import contextmanager
from collections.abc import Iterator
from pathlib import Path

try:
    import fcntl
except ImportError:  # pragma: no cover - non-POSIX
    fcntl = None

from .exceptions import LayoutError

logger = logging.getLogger("encpass.locks")

LOCK_FILENAME = ".lock"


@contextmanager
def label_lock(key_dir: Path) -> Iterator[None]:
    """Hold an exclusive flock on ``<key_dir>/.lock`` for the block.

    Blocks until the lock is available. Without fcntl this only yields.
    """
    if fcntl is None:
        yield
        return
    lock_path = Path(key_dir) / LOCK_FILENAME
    try:
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as err:
        raise LayoutError(f"cannot open lock {lock_path}: {err.strerror or err}") from err
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        logger.debug("Acquired %s", lock_path)
        yield
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
