"""paramix constants.

Single source of truth for reserved names and defaults shared by the
parser, the parameter store and the function library.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Built-in Parameters
# =============================================================================

STATUS: Final = "__status"
STATUS_TEXT: Final = "__statusText"
RESPONSE_TIME: Final = "__responseTime"
TEST_RUN_ID: Final = "__testRunId"
TEST_START_TIME: Final = "__testStartTime"
LAUNCHED_BY: Final = "__launchedBy"

#: Read-only parameters computed per access from the run and last response
BUILTIN_PARAMETERS: Final[frozenset[str]] = frozenset(
    {STATUS, STATUS_TEXT, RESPONSE_TIME, TEST_RUN_ID, TEST_START_TIME, LAUNCHED_BY}
)

# =============================================================================
# Expression Syntax
# =============================================================================

SPAN_OPEN: Final = "${"
SPAN_CLOSE: Final = "}"

TRUE: Final = "true"
FALSE: Final = "false"

#: Selection keyword choosing uniformly among candidates
RANDOM_SELECTION: Final = "random"

# =============================================================================
# Function Library Defaults
# =============================================================================

DEFAULT_RANDOM_LENGTH: Final = 10
DEFAULT_RANDOM_NUMBER_MAX: Final = 2**31 - 1

DEFAULT_LAUNCHED_BY: Final = "paramix"
