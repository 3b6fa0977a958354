"""CLI entry point for pi-lineedit. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys
import termios

import click

from pi.lineedit.engine import LineEditor
from pi.lineedit.errors import Cancelled, CursorPositionError
from pi.lineedit.terminal import ProcessTerminal


@click.command()
@click.option("--prompt", default="> ", show_default=True, help="Text shown before the input")
@click.option(
    "--mask",
    default=None,
    envvar="PI_LINEEDIT_MASK",
    help="Character displayed instead of each typed character",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Log to stderr at this level",
)
def main(prompt, mask, log_level):
    """Read one line from the terminal and print it."""
    if log_level:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            stream=sys.stderr,
        )
    if mask is not None and len(mask) != 1:
        raise click.BadParameter("must be a single character", param_hint="--mask")

    try:
        with ProcessTerminal() as terminal:
            terminal.write(prompt)
            line = LineEditor(terminal).read_line(mask=mask)
    except Cancelled:
        sys.exit(130)
    except EOFError:
        sys.exit(1)
    except CursorPositionError as e:
        raise click.ClickException(str(e))
    except termios.error:
        raise click.ClickException("stdin is not a terminal")
    except OSError as e:
        raise click.ClickException(f"Error reading input: {e}")

    click.echo(line)


if __name__ == "__main__":
    main()
