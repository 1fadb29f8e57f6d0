#!/usr/bin/env python3
"""
PCUI Command Line.

Entry point for the interactive Personium shell.

Usage:
    pcui --help
    pcui --version
    pcui --verbose
    pcui --log-save
    pcui --no-log-save --debug
"""

import sys

import click
import structlog

from pcui.core.config import get_app_config, validate_project_root
from pcui.core.logging import get_logger, setup_logging


def _show_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print `pcui <version>` and exit."""
    if not value or ctx.resilient_parsing:
        return
    validate_project_root()
    click.echo(f"pcui {get_app_config().application.version}")
    ctx.exit(0)


@click.command()
@click.option(
    "--version",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_version,
    help="Show version and exit.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--log-save/--no-log-save",
    default=None,
    help="Save the operation log without asking at startup.",
)
def main(verbose: bool, debug: bool, log_save: bool | None) -> None:
    """
    PCUI - interactive shell for manipulating personium Cells and Boxes.

    Log in to a Cell, then browse Boxes and control entities, and
    upload or download Box files.

    \b
    Examples:
        pcui
        pcui --log-save
        pcui --no-log-save --debug
    """
    validate_project_root()

    if debug:
        setup_logging(level="DEBUG", format_type="console", enable_console=True)
    elif verbose:
        setup_logging(level="INFO", format_type="console", enable_console=True)
    else:
        setup_logging()

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)
    logger.debug("CLI invoked", log_save=log_save)

    from pcui.shell.repl import run_shell

    sys.exit(run_shell(log_save=log_save))


if __name__ == "__main__":
    main()
