from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from paramix.exceptions.base import ParamixError

if TYPE_CHECKING:
    from paramix.expressions.errors import ExpressionErrorInfo


class ConfigError(ParamixError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when configuration cannot be loaded, parsed, or validated. This
    includes YAML parsing failures, Pydantic validation errors, and invalid
    environment variable values.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional field name that caused the error (e.g., "run.random_seed").
        value: Optional value that failed validation (for debugging).
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)


class ConfigValidationError(ConfigError):
    """Default parameters could not be computed.

    Raised while a configuration is validated, never while a test runs. All
    problems found in one validation pass are reported together.

    Attributes:
        problems: One entry per failing default parameter.
    """

    def __init__(
        self,
        message: str,
        problems: Iterable[ExpressionErrorInfo] = (),
    ) -> None:
        self.problems = tuple(problems)
        details = "".join(f"\n  {p.expression}: {p.message}" for p in self.problems)
        super().__init__(f"{message}{details}", field="parameters")
