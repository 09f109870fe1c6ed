"""Expression-specific error types.

Syntax errors are absorbed by the template resolver (the span is emitted
verbatim). Evaluation errors propagate and fail the owning test step.
"""

from __future__ import annotations

from dataclasses import dataclass

from paramix.exceptions import ParamixError

__all__ = [
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionEvaluationError",
    "MissingParameterError",
    "ArityError",
    "InvalidArgumentError",
    "NotANumberError",
    "DivisionByZeroError",
    "ExpressionErrorInfo",
]


class ExpressionError(ParamixError):
    """Base exception for all expression-related errors.

    Attributes:
        message: Human-readable error message.
        expression: The expression that caused the error (if known).
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
    ) -> None:
        self.expression = expression
        super().__init__(message)

    def to_info(self) -> ExpressionErrorInfo:
        """Summarize this error for reporting."""
        return ExpressionErrorInfo(
            expression=self.expression or "",
            message=self.message,
            position=getattr(self, "position", 0),
        )


class ExpressionSyntaxError(ExpressionError):
    """Exception raised when the text of a ${...} span cannot be parsed.

    Attributes:
        message: Human-readable error message.
        expression: The expression that failed to parse.
        position: Character position where the error occurred.
    """

    def __init__(
        self,
        message: str,
        expression: str,
        position: int = 0,
    ) -> None:
        self.position = position
        if position > 0 and expression:
            error_line = f"{expression}\n{' ' * position}^"
            full_message = f"{message} at position {position}:\n{error_line}"
        else:
            full_message = f"{message}: {expression}"
        super().__init__(full_message, expression=expression)


class ExpressionEvaluationError(ExpressionError):
    """Exception raised when a parsed expression fails to evaluate.

    Any subclass of this error fails the test step that owns the template.
    """

    def __init__(self, message: str, expression: str | None = None) -> None:
        if expression:
            message = f"{message} in expression: {expression}"
        super().__init__(message, expression=expression)

    def attach(self, expression: str) -> ExpressionEvaluationError:
        """Record the failing expression if the raiser did not know it.

        Library functions raise without knowing which span called them; the
        evaluator attaches the span text on the way out.
        """
        if self.expression is None:
            self.expression = expression
            self.message = f"{self.message} in expression: {expression}"
            self.args = (self.message,)
        return self


class MissingParameterError(ExpressionEvaluationError):
    """An operand or function argument refers to a parameter with no value.

    Attributes:
        parameter: Name of the unset parameter.
    """

    def __init__(self, parameter: str, expression: str | None = None) -> None:
        self.parameter = parameter
        super().__init__(f"Parameter '{parameter}' has no value", expression)


class ArityError(ExpressionEvaluationError):
    """A function was called with the wrong number of arguments.

    Attributes:
        function: Function name.
        given: Number of arguments supplied.
        minimum: Least number of arguments accepted.
        maximum: Most arguments accepted, None when variadic.
    """

    def __init__(
        self,
        function: str,
        given: int,
        minimum: int,
        maximum: int | None,
        expression: str | None = None,
    ) -> None:
        self.function = function
        self.given = given
        self.minimum = minimum
        self.maximum = maximum
        if maximum is None:
            expected = f"at least {minimum}"
        elif minimum == maximum:
            expected = str(minimum)
        else:
            expected = f"{minimum} to {maximum}"
        super().__init__(
            f"{function} expects {expected} argument(s), got {given}", expression
        )


class InvalidArgumentError(ExpressionEvaluationError):
    """An argument or operand value is not acceptable to its operation."""


class NotANumberError(InvalidArgumentError):
    """A numeric operation received a value that is not a finite number.

    Attributes:
        value: The offending value.
    """

    def __init__(self, value: str, expression: str | None = None) -> None:
        self.value = value
        super().__init__(f"'{value}' is not a number", expression)


class DivisionByZeroError(InvalidArgumentError):
    """Division by zero."""

    def __init__(self, expression: str | None = None) -> None:
        super().__init__("Division by zero", expression)


@dataclass(frozen=True, slots=True)
class ExpressionErrorInfo:
    """Expression parsing or evaluation error information.

    Immutable summary used when several errors are reported together, such
    as by default-parameter validation.

    Attributes:
        expression: The expression (or parameter name) that failed.
        message: Human-readable error message.
        position: Character position in expression (0 if not applicable).
    """

    expression: str
    message: str
    position: int = 0
