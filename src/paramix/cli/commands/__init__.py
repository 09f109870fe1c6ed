"""paramix CLI commands."""

from __future__ import annotations

from paramix.cli.commands.extract import extract
from paramix.cli.commands.resolve import resolve
from paramix.cli.commands.validate import validate

__all__ = ["extract", "resolve", "validate"]
