"""paramix exception hierarchy.

All exceptions can be imported from this package:
    from paramix.exceptions import ConfigError, ExtractionQueryError
"""

from __future__ import annotations

# Base exception
from paramix.exceptions.base import ParamixError

# Configuration exceptions
from paramix.exceptions.config import ConfigError, ConfigValidationError

# Extraction exceptions
from paramix.exceptions.extraction import ExtractionError, ExtractionQueryError

# Parameter store exceptions
from paramix.exceptions.store import ReservedParameterError

__all__ = [
    "ParamixError",
    "ConfigError",
    "ConfigValidationError",
    "ExtractionError",
    "ExtractionQueryError",
    "ReservedParameterError",
]
