"""CLI utilities for paramix.

This module provides CLI-specific utilities including context management
and output formatting.
"""

from __future__ import annotations

from paramix.cli.context import CLIContext, ExitCode
from paramix.cli.output import OutputFormat

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
]
