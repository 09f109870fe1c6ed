from __future__ import annotations

from paramix.exceptions.base import ParamixError


class ReservedParameterError(ParamixError):
    """A built-in parameter or library function name was assigned to.

    Attributes:
        name: The reserved name that was written.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Parameter name '{name}' is reserved and cannot be assigned")
