"""Expression parser models and functions.

This module locates ``${...}`` spans in host strings and parses the text
inside one span into an immutable AST.

Expression syntax:
- ${name} - Parameter reference
- ${'text'} - Quoted literal (no whitespace, commas or quotes inside)
- ${a + b - 'c'} - Operator chain, grouped right to left
- ${__upper(name)} - Function call, arguments are atoms only
- ${__now} - Function with no arguments, parentheses optional

The grammar is flat. Operator chains and call arguments accept
only literals and parameter references, so ``${__abs(__neg(x))}`` and
``${(x * y) + z}`` are syntax errors. Whitespace is legal only as exactly
one space on each side of an operator.

Implementation:
Parsing uses a lark LALR parser built from grammar.lark. Any lark error is
reported as an ExpressionSyntaxError, which the template resolver turns
into verbatim pass-through of the span.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from pathlib import Path

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError, UnexpectedInput, VisitError

from paramix.constants import SPAN_CLOSE, SPAN_OPEN
from paramix.expressions.errors import ExpressionSyntaxError
from paramix.expressions.functions import BINARY_OPERATIONS, FUNCTIONS

__all__ = [
    "Literal",
    "ParamRef",
    "OperatorChain",
    "FunctionCall",
    "Atom",
    "Node",
    "Span",
    "OPERATORS",
    "parse_expression",
    "find_spans",
    "extract_references",
]

#: Operator symbols accepted between atoms
OPERATORS: frozenset[str] = frozenset(BINARY_OPERATIONS)


@dataclass(frozen=True, slots=True)
class Literal:
    """Quoted text, stored without its quotes."""

    value: str


@dataclass(frozen=True, slots=True)
class ParamRef:
    """Reference to a parameter by name."""

    name: str


Atom = Literal | ParamRef


@dataclass(frozen=True, slots=True)
class OperatorChain:
    """Two or more atoms joined by operators.

    Attributes:
        raw: Text of the expression (without the ${} wrapper).
        operands: The atoms, left to right.
        operators: Operator symbols; always one fewer than operands.

    Examples:
        >>> parse_expression("x * y + z")  # doctest: +ELLIPSIS
        OperatorChain(raw='x * y + z', operands=(...), operators=('*', '+'))
    """

    raw: str
    operands: tuple[Atom, ...]
    operators: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FunctionCall:
    """Call of a library function.

    Attributes:
        raw: Text of the expression (without the ${} wrapper).
        name: Function name, e.g. "__if_then_else".
        args: Argument atoms in call order.
    """

    raw: str
    name: str
    args: tuple[Atom, ...] = ()


Node = Literal | ParamRef | OperatorChain | FunctionCall


@dataclass(frozen=True, slots=True)
class Span:
    """One ``${...}`` occurrence in a host string.

    Attributes:
        start: Index of the ``$``.
        end: Index just past the closing ``}``.
        inner: Text between the braces.
    """

    start: int
    end: int
    inner: str

    @property
    def text(self) -> str:
        return SPAN_OPEN + self.inner + SPAN_CLOSE


_GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

_parser = Lark(
    _GRAMMAR_PATH.read_text(),
    parser="lalr",
    start="start",
    maybe_placeholders=True,
)

# Braces do not nest: the first "}" after "${" closes the span
_SPAN_PATTERN = re.compile(
    re.escape(SPAN_OPEN) + f"([^{re.escape(SPAN_CLOSE)}]*)" + re.escape(SPAN_CLOSE)
)


class _ExpressionTransformer(Transformer[Token, object]):
    """Transform a parse tree into AST nodes."""

    def __init__(self, raw: str, functions: Collection[str]) -> None:
        super().__init__()
        self._raw = raw
        self._functions = functions

    def start(self, items: list[Node]) -> Node:
        node = items[0]
        # A lone identifier naming a function is a call without parentheses
        if isinstance(node, ParamRef) and node.name in self._functions:
            return FunctionCall(raw=self._raw, name=node.name)
        return node

    def chain(self, items: list[object]) -> Node:
        if len(items) == 1:
            return items[0]  # type: ignore[return-value]
        operands = tuple(items[0::2])
        operators = tuple(str(token).strip() for token in items[1::2])
        return OperatorChain(
            raw=self._raw,
            operands=operands,  # type: ignore[arg-type]
            operators=operators,
        )

    def call(self, items: list[object]) -> FunctionCall:
        name = str(items[0])
        if name not in self._functions:
            raise ExpressionSyntaxError(
                f"Unknown function '{name}'", expression=self._raw, position=0
            )
        args = items[1] if len(items) > 1 and items[1] is not None else ()
        return FunctionCall(raw=self._raw, name=name, args=tuple(args))  # type: ignore[arg-type]

    def arguments(self, items: list[Atom]) -> tuple[Atom, ...]:
        return tuple(items)

    def literal(self, items: list[Token]) -> Literal:
        return Literal(str(items[0])[1:-1])

    def param_ref(self, items: list[Token]) -> ParamRef:
        return ParamRef(str(items[0]))


def parse_expression(
    expression: str,
    functions: Collection[str] | None = None,
) -> Node:
    """Parse the text inside one ``${...}`` span.

    Args:
        expression: Span contents, without the ``${`` and ``}`` wrapper.
        functions: Names of callable functions. Defaults to the built-in
            function library.

    Returns:
        A Literal, ParamRef, OperatorChain or FunctionCall node.

    Raises:
        ExpressionSyntaxError: For any violation of the grammar, including
            stray whitespace, nesting, grouping parentheses and calls to
            unknown functions.

    Examples:
        >>> parse_expression("name")
        ParamRef(name='name')
        >>> parse_expression("'abc'")
        Literal(value='abc')
        >>> parse_expression("__upper(name)")  # doctest: +ELLIPSIS
        FunctionCall(raw='__upper(name)', name='__upper', args=(ParamRef(...),))
    """
    if not expression:
        raise ExpressionSyntaxError("Empty expression", expression=expression)

    known = FUNCTIONS if functions is None else functions
    try:
        tree = _parser.parse(expression)
        return _ExpressionTransformer(expression, known).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ExpressionSyntaxError):
            raise e.orig_exc from e
        raise ExpressionSyntaxError(
            f"Invalid expression: {e.orig_exc}", expression=expression
        ) from e
    except UnexpectedInput as e:
        pos = e.column - 1 if isinstance(e.column, int) and e.column > 0 else 0
        raise ExpressionSyntaxError(
            "Unexpected input in expression", expression=expression, position=pos
        ) from e
    except LarkError as e:
        raise ExpressionSyntaxError(str(e) or "Invalid expression", expression) from e


def find_spans(text: str) -> Iterator[Span]:
    """Yield the outermost, non-overlapping ``${...}`` spans of ``text``.

    Examples:
        >>> [s.inner for s in find_spans("a ${x} b ${y + z}")]
        ['x', 'y + z']
    """
    if not text:
        return
    for match in _SPAN_PATTERN.finditer(text):
        yield Span(start=match.start(), end=match.end(), inner=match.group(1))


def _node_references(node: Node) -> Iterator[str]:
    if isinstance(node, ParamRef):
        yield node.name
    elif isinstance(node, OperatorChain):
        for operand in node.operands:
            yield from _node_references(operand)
    elif isinstance(node, FunctionCall):
        for arg in node.args:
            yield from _node_references(arg)


def extract_references(
    text: str,
    functions: Collection[str] | None = None,
) -> list[str]:
    """List the parameter names referenced by the parseable spans of ``text``.

    Spans with syntax errors are skipped, since they are never evaluated.
    Names are returned once each, in order of first appearance.

    Examples:
        >>> extract_references("${a} ${b + a} ${bad one} ${__add(c,'1')}")
        ['a', 'b', 'c']
    """
    names: dict[str, None] = {}
    for span in find_spans(text):
        try:
            node = parse_expression(span.inner, functions)
        except ExpressionSyntaxError:
            continue
        for name in _node_references(node):
            names.setdefault(name, None)
    return list(names)
