"""Expression parsing and evaluation for ``${...}`` templates.

Expressions turn recorded requests into dynamic ones: values captured from
earlier responses are injected into later requests, optionally transformed
by operators and library functions.

Expression Syntax
-----------------
- Parameter reference: ${user_id}
- Quoted literal: ${'abc'} (no whitespace, commas or quotes inside)
- Operator chain: ${count + '1'}, ${a = b}, ${x * y + z} (grouped right
  to left, exactly one space around each operator)
- Function call: ${__if_then_else(is_admin,'yes','no')}
- Zero-argument function: ${__random_uuid} or ${__random_uuid()}

Nothing nests: operands and arguments are literals or references only.
Text that breaks these rules is left in place verbatim.

Module Structure
----------------
- parser.py: Span scanning and AST parsing (grammar in grammar.lark)
- evaluator.py: Evaluation against a ParameterStore and template resolution
- functions.py: The function library and operator rules
- values.py: True Semantics and numeric coercion of string values
- queries.py: JSONPath, selector, regex and EDN query engines
- errors.py: Expression-specific error types
"""

from __future__ import annotations

from paramix.expressions.errors import (
    ArityError,
    DivisionByZeroError,
    ExpressionError,
    ExpressionErrorInfo,
    ExpressionEvaluationError,
    ExpressionSyntaxError,
    InvalidArgumentError,
    MissingParameterError,
    NotANumberError,
)
from paramix.expressions.evaluator import ExpressionEvaluator
from paramix.expressions.functions import (
    BINARY_OPERATIONS,
    FUNCTIONS,
    FunctionContext,
    FunctionLibrary,
    FunctionSpec,
)
from paramix.expressions.parser import (
    OPERATORS,
    FunctionCall,
    Literal,
    OperatorChain,
    ParamRef,
    Span,
    extract_references,
    find_spans,
    parse_expression,
)
from paramix.expressions.values import is_true

__all__: list[str] = [
    # Error types
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionEvaluationError",
    "ExpressionErrorInfo",
    "MissingParameterError",
    "ArityError",
    "InvalidArgumentError",
    "NotANumberError",
    "DivisionByZeroError",
    # Parser
    "Literal",
    "ParamRef",
    "OperatorChain",
    "FunctionCall",
    "Span",
    "OPERATORS",
    "parse_expression",
    "find_spans",
    "extract_references",
    # Library
    "FUNCTIONS",
    "BINARY_OPERATIONS",
    "FunctionContext",
    "FunctionLibrary",
    "FunctionSpec",
    # Evaluation
    "ExpressionEvaluator",
    "is_true",
]
