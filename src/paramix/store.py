"""Run-scoped parameter storage.

A ParameterStore maps parameter names to string values (or None for "no
value") for exactly one test run. Built-in parameters such as ``__status``
are not stored: they are computed on every read from the run identity and
the last response bound to the store, so each run sees only its own.

Example:
    ```python
    store = ParameterStore(run=RunInfo(launched_by="ci"))
    store.set("user_id", "123")
    store.get("user_id")        # "123"
    store.get("__launchedBy")   # "ci"
    store.get("missing")        # None
    ```
"""

from __future__ import annotations

import random
import uuid
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from paramix.constants import (
    BUILTIN_PARAMETERS,
    DEFAULT_LAUNCHED_BY,
    LAUNCHED_BY,
    RESPONSE_TIME,
    STATUS,
    STATUS_TEXT,
    TEST_RUN_ID,
    TEST_START_TIME,
)
from paramix.exceptions import ReservedParameterError
from paramix.expressions.functions import FUNCTIONS, FunctionContext
from paramix.expressions.values import format_number

if TYPE_CHECKING:
    from paramix.extraction.response import ResponseData

__all__ = ["RunInfo", "ParameterStore", "is_reserved"]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RunInfo:
    """Identity of one test run.

    Attributes:
        test_run_id: Unique run identifier.
        test_start_time: When the run started (aware datetime).
        launched_by: Who or what launched the run.
    """

    test_run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    test_start_time: datetime = field(default_factory=_utc_now)
    launched_by: str = DEFAULT_LAUNCHED_BY


def is_reserved(name: str) -> bool:
    """Whether ``name`` is a built-in parameter or a library function."""
    return name in BUILTIN_PARAMETERS or name in FUNCTIONS


class ParameterStore:
    """Parameter values for one test run.

    User values are looked up first; built-in names fall through to a
    computed read-only overlay. Writes to built-in or function names are
    rejected.

    Attributes:
        run: Identity of the owning run.
        response: Response last bound by an extraction step, if any.
        context: Run-local random source and clock for library functions.
    """

    def __init__(
        self,
        run: RunInfo | None = None,
        values: Mapping[str, str | None] | None = None,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            run: Run identity. A fresh RunInfo when omitted.
            values: Initial values, e.g. computed default parameters.
            rng: Random source; a new unshared instance when omitted.
            clock: Clock for time functions; UTC wall clock when omitted.

        Raises:
            ReservedParameterError: If ``values`` names a reserved parameter.
        """
        self.run = run or RunInfo()
        self.response: ResponseData | None = None
        self.context = FunctionContext(
            rng=rng or random.Random(),
            clock=clock or _utc_now,
        )
        self._values: dict[str, str | None] = {}
        for name, value in (values or {}).items():
            self.set(name, value)

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None if it has no value."""
        if name in self._values:
            return self._values[name]
        if name in BUILTIN_PARAMETERS:
            return self._builtin(name)
        return None

    def set(self, name: str, value: str | None) -> None:
        """Assign a value; the last write wins.

        Raises:
            ReservedParameterError: If ``name`` is a built-in parameter or
                a library function.
        """
        if is_reserved(name):
            raise ReservedParameterError(name)
        self._values[name] = value

    def bind_response(self, response: ResponseData) -> None:
        """Make ``response`` the source of the response built-ins."""
        self.response = response

    def fork(
        self,
        run: RunInfo | None = None,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> ParameterStore:
        """Copy user values into a new store for another run.

        Seed values such as computed defaults are copied, never shared, so
        runs stay isolated. The new store gets its own random source unless
        one is passed in.
        """
        return ParameterStore(run=run, values=self._values, rng=rng, clock=clock)

    def snapshot(self) -> dict[str, str | None]:
        """Plain copy of the user values."""
        return dict(self._values)

    def names(self) -> list[str]:
        """Names of user parameters (built-ins excluded)."""
        return list(self._values)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"ParameterStore(run={self.run.test_run_id!r}, values={self._values!r})"

    def _builtin(self, name: str) -> str | None:
        if name == TEST_RUN_ID:
            return self.run.test_run_id
        if name == TEST_START_TIME:
            return str(int(self.run.test_start_time.timestamp() * 1000))
        if name == LAUNCHED_BY:
            return self.run.launched_by

        response = self.response
        if response is None:
            return None
        if name == STATUS:
            return None if response.status is None else str(response.status)
        if name == STATUS_TEXT:
            return response.status_text
        if name == RESPONSE_TIME:
            if response.response_time is None:
                return None
            return format_number(float(response.response_time))
        return None
