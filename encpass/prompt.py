"""Interactive entry of a secret and its confirmation.

Prompts go to stderr so ``$(encpass get)`` captures only the secret.
Echo is suppressed through click's hidden input, which restores the
terminal on every exit path, interrupts included.
"""
from typing import Callable

import click

Prompter = Callable[[str], tuple[str, str]]


def read_hidden(text: str) -> str:
    """Read one line without echo; an empty line is a valid value."""
    return click.prompt(
        text,
        default="",
        show_default=False,
        hide_input=True,
        prompt_suffix=":\n",
        err=True,
    )


def prompt_secret(name: str) -> tuple[str, str]:
    """Ask for ``name`` twice and return ``(entry, confirmation)``.

    Raises:
        click.Abort: On Ctrl-C or end of input.
    """
    entry = read_hidden(f"Enter {name}")
    confirmation = read_hidden(f"Confirm {name}")
    return entry, confirmation
