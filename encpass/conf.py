"""
Encpass Configuration: validated settings loaded from the environment.

Reads:
    ENCPASS_HOME_DIR = <path>        root of the keys/ and secrets/ tree
    ENCPASS_CONFIRM_ATTEMPTS = <int> prompt rounds before a mismatch is fatal
    ENCPASS_LABEL = <label>          default label (read by encpass.session)

Security Note:
    Configuration never carries key material; keys live only on disk.
"""
import os
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("encpass.conf")

DEFAULT_HOME_DIR = "~/.encpass"
DEFAULT_SECRET_NAME = "password"


def get_home_dir() -> str:
    """Read the root directory from ENCPASS_HOME_DIR, falling back to ~/.encpass."""
    return os.environ.get("ENCPASS_HOME_DIR") or DEFAULT_HOME_DIR


def get_confirm_attempts() -> str:
    """Read ENCPASS_CONFIRM_ATTEMPTS as a raw string, "1" when unset.

    Parsing and range checks are left to EncpassConfig.
    """
    raw = os.environ.get("ENCPASS_CONFIRM_ATTEMPTS", "").strip()
    return raw or "1"


class EncpassConfig(BaseModel):
    """Validated encpass configuration."""

    home_dir: Path = Field(default=Path(DEFAULT_HOME_DIR), validate_default=True)
    confirm_attempts: int = Field(default=1, ge=1, le=10)

    @field_validator("home_dir", mode="after")
    @classmethod
    def expand_home_dir(cls, v: Path) -> Path:
        """Expand ``~`` and make the root absolute."""
        return v.expanduser().absolute()

    @classmethod
    def from_env(cls, **overrides) -> "EncpassConfig":
        """Read ENCPASS_* variables, letting non-None keyword overrides win.

        The CLI passes its options as overrides, so ``--home`` beats
        ENCPASS_HOME_DIR while an unset option falls back to it.

        Returns:
            Populated EncpassConfig instance.
        """
        values = {
            "home_dir": get_home_dir(),
            "confirm_attempts": get_confirm_attempts(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        logger.debug(
            "Loaded configuration: home_dir=%s confirm_attempts=%d",
            config.home_dir, config.confirm_attempts,
        )
        return config
