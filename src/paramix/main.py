"""CLI entry point for paramix.

This module defines the Click-based command-line interface for paramix.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from paramix import __version__
from paramix.cli.commands import extract, resolve, validate
from paramix.cli.context import CLIContext, ExitCode
from paramix.cli.output import format_error
from paramix.config import load_config
from paramix.exceptions import ConfigError
from paramix.logging import configure_logging

_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="paramix")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./paramix.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """paramix - parameter templating and extraction for API tests."""
    ctx.ensure_object(dict)

    # PARAMIX_* variables may come from ./.env; real environment wins
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    config_path = Path(config_file) if config_file else None
    if config_path is not None and not config_path.exists():
        click.echo(format_error(f"Config file not found: {config_path}"), err=True)
        ctx.exit(ExitCode.FAILURE)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        # Logging is not configured yet
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details), err=True)
        ctx.exit(ExitCode.FAILURE)

    ctx.obj["cli_ctx"] = CLIContext(
        config=config,
        config_path=config_path,
        verbosity=verbose,
        quiet=quiet,
    )

    # Priority: quiet > verbose > config
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config.verbosity, logging.WARNING)

    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(resolve)
cli.add_command(validate)
cli.add_command(extract)

if __name__ == "__main__":
    cli()
