"""Command line front-end: ``encpass get`` and ``encpass set``."""
import logging
from functools import wraps
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from .conf import EncpassConfig
from .exceptions import EncpassError
from .session import Encpass
from .version import __version__


def fatal_errors(func):
    """Turn library errors into ``Error: ...`` on stderr and exit status 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except EncpassError as err:
            raise click.ClickException(str(err)) from err
    return wrapper


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--home",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Root directory for keys and secrets (default: $ENCPASS_HOME_DIR or ~/.encpass).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages to stderr.")
@click.version_option(__version__, prog_name="encpass")
@click.pass_context
def cli(ctx: click.Context, home: Optional[Path], verbose: bool) -> None:
    """Store secrets encrypted under a per-label key and print them back."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = EncpassConfig.from_env(home_dir=home)
    except ValidationError as err:
        raise click.ClickException(f"invalid configuration: {err}") from err
    ctx.obj = Encpass(config)


@cli.command("get")
@click.argument("label", required=False)
@click.argument("name", required=False)
@click.pass_obj
@fatal_errors
def cmd_get(vault: Encpass, label: Optional[str], name: Optional[str]) -> None:
    """Print a secret, prompting for it first if it does not exist.

    With a single argument it is taken as the secret NAME under the
    default label. Without LABEL the label is $ENCPASS_LABEL, or "encpass"
    when that is unset, which every calling script would then share; pass
    a LABEL per script.
    """
    click.echo(vault.get_secret(label, name))


@cli.command("set")
@click.argument("label", required=False)
@click.argument("name", required=False)
@click.pass_obj
@fatal_errors
def cmd_set(vault: Encpass, label: Optional[str], name: Optional[str]) -> None:
    """Prompt for a secret and overwrite the stored value.

    LABEL defaults as for ``get``.
    """
    path = vault.set_secret(label, name)
    click.echo(f"Stored {path}", err=True)


def main() -> None:
    cli(prog_name="encpass")


if __name__ == "__main__":
    main()
