"""CLI context and exit codes for paramix."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

import click

from paramix.config import ParamixConfig

__all__ = [
    "ExitCode",
    "CLIContext",
    "get_cli_context",
]


class ExitCode(IntEnum):
    """Standard exit codes for the paramix CLI.

    - 0 for success
    - 1 for failure (evaluation error, invalid configuration)
    - 2 for usage errors (Click's own convention)
    - 130 for keyboard interrupt (128 + SIGINT=2)
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Type-safe CLI context containing global options and configuration.

    Attributes:
        config: Loaded paramix configuration.
        config_path: Path to config file (if specified via --config).
        verbosity: Verbosity level (0=default, 1=INFO, 2+=DEBUG).
        quiet: Suppress non-essential output.
    """

    config: ParamixConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Fetch the CLIContext stored by the root command."""
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    return cli_ctx
