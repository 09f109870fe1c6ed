"""paramix - parameter templating and extraction for API tests.

Templates embed ``${...}`` expressions that read run-scoped parameters,
call library functions and combine values with operators. Responses are
queried (JSONPath, CSS selectors, regular expressions, headers, EDN) to
extract new parameters for later steps.
"""

from __future__ import annotations

from paramix.defaults import validate_defaults
from paramix.engine import evaluate_condition, resolve_template
from paramix.exceptions import (
    ConfigError,
    ConfigValidationError,
    ExtractionError,
    ExtractionQueryError,
    ParamixError,
    ReservedParameterError,
)
from paramix.expressions import (
    ExpressionError,
    ExpressionEvaluationError,
    ExpressionEvaluator,
    ExpressionSyntaxError,
    MissingParameterError,
    is_true,
)
from paramix.extraction import (
    ExtractionQuery,
    QueryType,
    ResponseData,
    run_extraction,
    run_extractions,
)
from paramix.store import ParameterStore, RunInfo

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Engine
    "resolve_template",
    "evaluate_condition",
    "run_extraction",
    "run_extractions",
    "validate_defaults",
    "ExpressionEvaluator",
    "is_true",
    # Models
    "ParameterStore",
    "RunInfo",
    "ExtractionQuery",
    "QueryType",
    "ResponseData",
    # Exceptions
    "ParamixError",
    "ConfigError",
    "ConfigValidationError",
    "ExtractionError",
    "ExtractionQueryError",
    "ReservedParameterError",
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionEvaluationError",
    "MissingParameterError",
]
