from __future__ import annotations


class ParamixError(Exception):
    """Base exception class for all paramix errors.

    This is the root of the paramix exception hierarchy. Catching it at a
    runner or CLI boundary catches every engine failure while letting system
    exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            text = resolve_template(template, store)
        except ParamixError as e:
            step.fail(e.message)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the ParamixError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
