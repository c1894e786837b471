"""Exception hierarchy for encpass.

The library raises; only the command line front-end turns these into an
exit status.
"""


class EncpassError(Exception):
    """Base class for every encpass failure."""


class EnvironmentUnavailableError(EncpassError):
    """A required capability (secure randomness) is not available."""


class LayoutError(EncpassError, OSError):
    """The root, key or secret tree could not be created or written."""


class InvalidNameError(EncpassError, ValueError):
    """A label or secret name cannot be used as a path component."""


class CorruptKeyError(EncpassError):
    """A private key file does not hold 64 hex characters."""


class DecryptionError(EncpassError):
    """A secret file could not be decrypted with its label's key."""


class SecretMismatchError(EncpassError):
    """The entered secret and its confirmation differ.

    ``retryable`` is True when the caller may prompt again without
    exceeding the configured number of confirmation attempts.
    """

    def __init__(self, name: str, attempt: int, attempts: int):
        self.name = name
        self.attempt = attempt
        self.attempts = attempts
        super().__init__(
            f"secrets do not match for {name!r} "
            f"(attempt {attempt} of {attempts})"
        )

    @property
    def retryable(self) -> bool:
        return self.attempt < self.attempts
