"""
Encpass: a session context tying configuration, layout, keys and secrets.

The context runs its setup checks once and keeps the result, so repeated
calls in one process do not re-validate the directory tree.
"""
import os
import sys
import logging
from pathlib import Path
from typing import Optional

from .conf import DEFAULT_SECRET_NAME, EncpassConfig
from .keys import KeyStore
from .layout import Layout, ensure_layout, is_owner_only
from .prompt import Prompter, prompt_secret
from .store import SecretStore

logger = logging.getLogger("encpass")


def default_label() -> str:
    """Label used when none is given.

    ENCPASS_LABEL if set, otherwise the invoking program's basename. Shell
    scripts calling the ``encpass`` console script should pass a label or
    set ENCPASS_LABEL, since the program name there is always ``encpass``.
    """
    env_label = os.environ.get("ENCPASS_LABEL")
    if env_label:
        return env_label
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "python"


def resolve_names(
    label: Optional[str] = None, name: Optional[str] = None
) -> tuple[str, str]:
    """Resolve ``(label, name)`` the way scripts call encpass.

    - both given: used as is
    - a single value: it is the secret name under the default label
    - nothing: the default label and the secret ``password``
    """
    if label is not None and name is not None:
        return label, name
    if label is not None or name is not None:
        return default_label(), label if label is not None else name
    return default_label(), DEFAULT_SECRET_NAME


class Encpass:
    """Secret storage for one process session.

    Example::

        vault = Encpass()
        password = vault.get_secret("myapp", "db_password")
    """

    def __init__(
        self,
        config: Optional[EncpassConfig] = None,
        prompt: Prompter = prompt_secret,
    ):
        self.config = config or EncpassConfig.from_env()
        self._prompt = prompt
        self._layout: Optional[Layout] = None
        self._keys: Optional[KeyStore] = None
        self._secrets: Optional[SecretStore] = None

    def __repr__(self) -> str:
        return f'<Encpass [home:{self.config.home_dir}, ready:{self.ready}]>'

    @property
    def ready(self) -> bool:
        return self._layout is not None

    def setup(self) -> Layout:
        """Ensure the home tree exists. Runs once per context.

        Raises:
            LayoutError: If the tree cannot be created.
        """
        if self._layout is None:
            layout = ensure_layout(self.config.home_dir)
            if not is_owner_only(layout.root):
                logger.warning(
                    "%s is accessible by group or others; expected mode 0700",
                    layout.root,
                )
            self._keys = KeyStore(layout)
            self._secrets = SecretStore(
                layout,
                self._keys,
                prompt=self._prompt,
                confirm_attempts=self.config.confirm_attempts,
            )
            self._layout = layout
        return self._layout

    @property
    def layout(self) -> Layout:
        return self.setup()

    @property
    def keys(self) -> KeyStore:
        self.setup()
        return self._keys

    @property
    def secrets(self) -> SecretStore:
        self.setup()
        return self._secrets

    def ensure_key(self, label: Optional[str] = None) -> Path:
        """Create the label's key if missing and return its path."""
        return self.keys.ensure_key(label if label is not None else default_label())

    def get_secret(
        self, label: Optional[str] = None, name: Optional[str] = None
    ) -> str:
        """Return a decrypted secret, prompting for it once if it is absent."""
        label, name = resolve_names(label, name)
        return self.secrets.get(label, name)

    def set_secret(
        self,
        label: Optional[str] = None,
        name: Optional[str] = None,
        value: Optional[str] = None,
    ) -> Path:
        """Overwrite a secret; prompts for it when ``value`` is None."""
        label, name = resolve_names(label, name)
        return self.secrets.set(label, name, value)

    def has_secret(
        self, label: Optional[str] = None, name: Optional[str] = None
    ) -> bool:
        label, name = resolve_names(label, name)
        return self.secrets.exists(label, name)


def get_secret(label: Optional[str] = None, name: Optional[str] = None) -> str:
    """Shortcut for ``Encpass().get_secret(label, name)`` configured from env."""
    return Encpass().get_secret(label, name)


def set_secret(
    label: Optional[str] = None,
    name: Optional[str] = None,
    value: Optional[str] = None,
) -> Path:
    """Shortcut for ``Encpass().set_secret(label, name, value)`` configured from env."""
    return Encpass().set_secret(label, name, value)
