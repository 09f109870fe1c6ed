"""Expression evaluator.

This module provides the ExpressionEvaluator class for evaluating parsed
expressions against a ParameterStore, and for resolving every ``${...}``
span of a host string.

Expression evaluation:
- Literal: ${'abc'} -> "abc"
- Parameter reference: ${name} -> store.get("name"), possibly None
- Operator chain: ${a - b - c} -> a - (b - c), grouped right to left
- Function call: ${__upper(name)} -> FUNCTIONS["__upper"](name)
- Template resolution: "id=${id}" -> "id=123"; unparseable spans and bare
  references to unset parameters are left verbatim
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from paramix.expressions.errors import (
    ExpressionEvaluationError,
    ExpressionSyntaxError,
    MissingParameterError,
)
from paramix.expressions.functions import BINARY_OPERATIONS, FUNCTIONS, FunctionSpec
from paramix.expressions.parser import (
    Atom,
    FunctionCall,
    Literal,
    Node,
    OperatorChain,
    ParamRef,
    find_spans,
    parse_expression,
)
from paramix.expressions.values import is_true
from paramix.logging import get_logger

if TYPE_CHECKING:
    from paramix.store import ParameterStore

__all__ = ["ExpressionEvaluator"]

logger = get_logger(__name__)


class ExpressionEvaluator:
    """Evaluates parsed expressions against a parameter store.

    The evaluator never writes to the store. It is cheap to create, so one
    can be built per template or per step.

    Attributes:
        store: Parameter store read during evaluation.
        functions: Function library used for calls.

    Example:
        ```python
        store = ParameterStore(values={"x": "1", "y": "2"})
        evaluator = ExpressionEvaluator(store)

        evaluator.evaluate(parse_expression("x + y"))       # "3"
        evaluator.evaluate_string("sum=${x + y}, ${oops}")  # "sum=3, ${oops}"
        ```
    """

    def __init__(
        self,
        store: ParameterStore,
        functions: Mapping[str, FunctionSpec] = FUNCTIONS,
    ) -> None:
        self.store = store
        self.functions = functions

    def evaluate(self, node: Node) -> str | None:
        """Evaluate one AST node.

        Args:
            node: Parsed expression.

        Returns:
            The resulting string. None only for a bare parameter reference
            to a parameter with no value.

        Raises:
            MissingParameterError: An operand or argument has no value.
            ArityError: A function received the wrong number of arguments.
            InvalidArgumentError: A value is unacceptable to its operation.
        """
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, ParamRef):
            return self._lookup(node.name)
        if isinstance(node, OperatorChain):
            return self._evaluate_chain(node)
        if isinstance(node, FunctionCall):
            return self._evaluate_call(node)
        raise TypeError(f"Unknown expression node: {node!r}")

    def _lookup(self, name: str) -> str | None:
        value = self.store.get(name)
        if value is None:
            spec = self.functions.get(name)
            if spec is not None and spec.accepts_no_args:
                return spec(self.store.context, ())
        return value

    def _require(self, atom: Atom, raw: str) -> str:
        if isinstance(atom, Literal):
            return atom.value
        value = self._lookup(atom.name)
        if value is None:
            raise MissingParameterError(atom.name, raw)
        return value

    def _evaluate_chain(self, chain: OperatorChain) -> str:
        # All operands must be present before any operator runs
        values = [self._require(operand, chain.raw) for operand in chain.operands]
        result = values[-1]
        for value, operator in zip(
            reversed(values[:-1]), reversed(chain.operators), strict=True
        ):
            try:
                result = BINARY_OPERATIONS[operator](value, result)
            except ExpressionEvaluationError as e:
                e.attach(chain.raw)
                raise
        return result

    def _evaluate_call(self, call: FunctionCall) -> str:
        spec = self.functions[call.name]
        args = tuple(self._require(arg, call.raw) for arg in call.args)
        try:
            return spec(self.store.context, args)
        except ExpressionEvaluationError as e:
            e.attach(call.raw)
            raise

    def evaluate_string(self, text: str) -> str:
        """Resolve every ``${...}`` span in ``text``.

        Spans that do not parse are kept verbatim, as are bare references to
        parameters with no value. Substituted values are not rescanned.

        Args:
            text: Host string (URL, body, header, query text, ...).

        Returns:
            ``text`` with each evaluable span replaced by its value.

        Raises:
            ExpressionEvaluationError: If any span fails to evaluate; the
                owning step should be failed.

        Example:
            With ``name`` set to "Bob", ``"Hi ${name}${x+y}"`` resolves to
            ``"Hi Bob${x+y}"``.
        """
        if not text:
            return text

        parts: list[str] = []
        cursor = 0
        for span in find_spans(text):
            parts.append(text[cursor : span.start])
            parts.append(self._resolve_span(span.inner, span.text))
            cursor = span.end
        if cursor == 0:
            return text
        parts.append(text[cursor:])
        return "".join(parts)

    def _resolve_span(self, inner: str, verbatim: str) -> str:
        try:
            node = parse_expression(inner, self.functions)
        except ExpressionSyntaxError as e:
            logger.debug("span_passthrough", span=verbatim, reason=e.message)
            return verbatim
        value = self.evaluate(node)
        if value is None:
            logger.debug("span_unset_parameter", span=verbatim)
            return verbatim
        return value

    def evaluate_condition(self, text: str) -> bool:
        """Judge an assertion or skip condition with True Semantics.

        A condition made of exactly one span is judged on that span's value,
        so ``${flag}`` with ``flag`` unset is false. Anything else is judged
        on the resolved text.

        Raises:
            ExpressionEvaluationError: If a span fails to evaluate.
        """
        spans = list(find_spans(text))
        if len(spans) == 1 and spans[0].start == 0 and spans[0].end == len(text):
            try:
                node = parse_expression(spans[0].inner, self.functions)
            except ExpressionSyntaxError:
                return is_true(text)
            return is_true(self.evaluate(node))
        return is_true(self.evaluate_string(text))
