from __future__ import annotations

import contextlib
from collections.abc import Generator

import click

from paramix.cli.context import ExitCode
from paramix.cli.output import format_exception
from paramix.config import ParamixConfig
from paramix.defaults import validate_defaults
from paramix.exceptions import ParamixError
from paramix.logging import get_logger
from paramix.store import ParameterStore

__all__ = [
    "cli_error_handler",
    "parse_assignments",
    "compute_parameters",
]


@contextlib.contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Context manager for common CLI error handling.

    - KeyboardInterrupt: Exit with code 130
    - ParamixError: Format error with message (and problems, if any)
    - Generic exceptions: Log and format error

    Example:
        >>> with cli_error_handler():
        >>>     click.echo(resolve_template(text, store))
    """
    logger = get_logger(__name__)

    try:
        yield
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except ParamixError as e:
        click.echo(format_exception(e), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except Exception as e:
        logger.exception("unexpected_command_error")
        click.echo(f"Error: {e!s}", err=True)
        raise SystemExit(ExitCode.FAILURE) from e


def parse_assignments(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    """Click callback turning repeated ``NAME=VALUE`` options into a dict."""
    assignments: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", ctx, param)
        assignments[name] = value
    return assignments


def compute_parameters(
    config: ParamixConfig, overrides: dict[str, str]
) -> ParameterStore:
    """Compute configured defaults, with ``overrides`` taking precedence.

    Overridden defaults are not evaluated; the other defaults may reference
    the overriding values.

    Raises:
        ReservedParameterError: If an override names a reserved parameter.
        ConfigValidationError: If a default cannot be computed.
    """
    seed = config.new_store()
    for name, value in overrides.items():
        seed.set(name, value)
    defaults = {
        name: text for name, text in config.parameters.items() if name not in overrides
    }
    return validate_defaults(defaults, seed)
