"""Output formatting utilities for the paramix CLI."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from paramix.exceptions import ConfigValidationError, ParamixError

__all__ = [
    "OutputFormat",
    "format_error",
    "format_exception",
    "format_success",
    "format_json",
    "format_table",
]


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands.

    Values:
        TEXT: Plain text output (default).
        JSON: Machine-readable JSON output.
    """

    TEXT = "text"
    JSON = "json"


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Args:
        message: Primary error message.
        details: Optional list of detail lines to include.
        suggestion: Optional suggestion for resolving the error.

    Returns:
        Formatted error string with details and suggestion if provided.

    Example:
        >>> print(format_error(
        ...     "Default parameters could not be computed",
        ...     details=["base_url: Parameter 'host' has no value"],
        ... ))
        Error: Default parameters could not be computed
          base_url: Parameter 'host' has no value
    """
    lines = [f"Error: {message}"]

    if details:
        for detail in details:
            lines.append(f"  {detail}")

    if suggestion:
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_exception(error: ParamixError, suggestion: str | None = None) -> str:
    """Format a paramix exception for the terminal.

    Default-parameter problems are listed one per line.
    """
    if isinstance(error, ConfigValidationError):
        headline = error.message.split("\n", 1)[0]
        details = [f"{p.expression}: {p.message}" for p in error.problems]
        return format_error(headline, details=details, suggestion=suggestion)
    return format_error(error.message, suggestion=suggestion)


def format_success(message: str) -> str:
    """Format a success message.

    Example:
        >>> format_success("3 default parameter(s) computed")
        'Success: 3 default parameter(s) computed'
    """
    return f"Success: {message}"


def format_json(data: Any) -> str:
    """Format data as indented JSON.

    Raises:
        TypeError: If data is not JSON-serializable.
    """
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_table(headers: list[str], rows: list[list[str]]) -> str:
    """Format data as a simple text table with pipe separators.

    Args:
        headers: Column headers.
        rows: Data rows, each row should have same length as headers.

    Returns:
        Formatted table string with columns separated by pipes.

    Example:
        >>> print(format_table(["Name", "Value"], [["host", "example.com"]]))
        Name | Value
        host | example.com
    """
    if not headers:
        return ""

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(col_widths):
                col_widths[i] = max(col_widths[i], len(cell))

    lines = [" | ".join(h.ljust(col_widths[i]) for i, h in enumerate(headers)).rstrip()]
    for row in rows:
        lines.append(
            " | ".join(
                cell.ljust(col_widths[i]) if i < len(col_widths) else cell
                for i, cell in enumerate(row)
            ).rstrip()
        )

    return "\n".join(lines)
