"""The built-in function and operator library.

Every function is a pure rule over string arguments, registered with its
arity and the defaults of its optional arguments. Functions that need
randomness or the current time receive them through a FunctionContext
owned by the calling run, so concurrent runs never share RNG state.

Registry layout:
- FUNCTIONS: name -> FunctionSpec, looked up by the parser and evaluator
- BINARY_OPERATIONS: operator symbol -> two-argument rule
"""

from __future__ import annotations

import json
import random
import re
import string
import uuid
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from math import prod
from typing import Any
from urllib.parse import quote, unquote

from paramix.constants import (
    DEFAULT_RANDOM_LENGTH,
    DEFAULT_RANDOM_NUMBER_MAX,
    RANDOM_SELECTION,
)
from paramix.exceptions import ExtractionQueryError
from paramix.expressions.errors import (
    ArityError,
    DivisionByZeroError,
    InvalidArgumentError,
)
from paramix.expressions.values import (
    format_bool,
    format_number,
    is_true,
    render_json_value,
    to_index,
    to_number,
)
from paramix.expressions.queries import (
    parse_json,
    parse_markup,
    query_json,
    search_regex,
    select_markup,
)

__all__ = [
    "FunctionContext",
    "FunctionSpec",
    "FunctionLibrary",
    "FUNCTIONS",
    "BINARY_OPERATIONS",
]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class FunctionContext:
    """Run-local resources available to library functions.

    Attributes:
        rng: Random source owned by one run.
        clock: Returns the current time as an aware datetime.
    """

    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], datetime] = _utc_now


FunctionImpl = Callable[..., str]


@dataclass(frozen=True, slots=True)
class FunctionSpec:
    """A registered library function.

    Attributes:
        name: Name used in expressions, e.g. "__random_chars".
        impl: Implementation, called as ``impl(context, *args)``.
        min_args: Required argument count.
        max_args: Maximum argument count, None when variadic.
        defaults: Values for the optional arguments, in position order.
    """

    name: str
    impl: FunctionImpl
    min_args: int
    max_args: int | None
    defaults: tuple[str, ...] = ()

    @property
    def accepts_no_args(self) -> bool:
        return self.min_args == 0

    def bind(self, args: tuple[str, ...]) -> tuple[str, ...]:
        """Check arity and fill in defaults for omitted optional arguments.

        Raises:
            ArityError: If too few or too many arguments were given.
        """
        given = len(args)
        if given < self.min_args or (self.max_args is not None and given > self.max_args):
            raise ArityError(self.name, given, self.min_args, self.max_args)
        supplied = given - self.min_args
        if supplied < len(self.defaults):
            args = args + self.defaults[supplied:]
        return args

    def __call__(self, context: FunctionContext, args: tuple[str, ...]) -> str:
        return self.impl(context, *self.bind(args))


class FunctionLibrary(Mapping[str, FunctionSpec]):
    """Registry of library functions keyed by name."""

    def __init__(self) -> None:
        self._specs: dict[str, FunctionSpec] = {}

    def register(
        self,
        name: str,
        min_args: int = 0,
        *,
        optional: int = 0,
        variadic: bool = False,
        defaults: tuple[str, ...] = (),
    ) -> Callable[[FunctionImpl], FunctionImpl]:
        """Register a function.

        Args:
            name: Name used in expressions.
            min_args: Required argument count.
            optional: Number of optional trailing arguments.
            variadic: Accept any number of arguments beyond ``min_args``.
            defaults: Defaults for the last ``len(defaults)`` optional
                arguments. Optional arguments without a default are simply
                not passed.
        """
        if name in self._specs:
            raise ValueError(f"Function '{name}' is already registered")

        def decorator(impl: FunctionImpl) -> FunctionImpl:
            self._specs[name] = FunctionSpec(
                name=name,
                impl=impl,
                min_args=min_args,
                max_args=None if variadic else min_args + optional,
                defaults=defaults,
            )
            return impl

        return decorator

    def __getitem__(self, name: str) -> FunctionSpec:
        return self._specs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)


FUNCTIONS = FunctionLibrary()
register = FUNCTIONS.register


# =============================================================================
# Helpers
# =============================================================================


def _json_array(value: str) -> list[Any]:
    try:
        items = json.loads(value)
    except (json.JSONDecodeError, ValueError) as e:
        raise InvalidArgumentError(f"'{value}' is not a JSON array") from e
    if not isinstance(items, list):
        raise InvalidArgumentError(f"'{value}' is not a JSON array")
    return items


def _pick(context: FunctionContext, items: list[Any], index: str) -> str:
    if index == RANDOM_SELECTION:
        if not items:
            raise InvalidArgumentError("Cannot pick a random element of an empty list")
        return render_json_value(context.rng.choice(items))
    position = to_index(index)
    if not 0 <= position < len(items):
        raise InvalidArgumentError(
            f"Index {position} is out of range for {len(items)} element(s)"
        )
    return render_json_value(items[position])


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidArgumentError(f"Invalid regular expression '{pattern}': {e}") from e


def _first(values: list[str]) -> str:
    return values[0] if values else ""


def _random_string(context: FunctionContext, length: str, alphabet: str) -> str:
    count = to_index(length)
    if count < 0:
        raise InvalidArgumentError(f"Length must not be negative, got {count}")
    return "".join(context.rng.choice(alphabet) for _ in range(count))


def _iso(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Numeric
# =============================================================================


def _plus(a: str, b: str) -> str:
    return format_number(to_number(a) + to_number(b))


def _minus(a: str, b: str) -> str:
    return format_number(to_number(a) - to_number(b))


def _times(a: str, b: str) -> str:
    return format_number(to_number(a) * to_number(b))


def _divided(a: str, b: str) -> str:
    divisor = to_number(b)
    if divisor == 0:
        raise DivisionByZeroError()
    return format_number(to_number(a) / divisor)


@register("__abs", 1)
def _abs(context: FunctionContext, x: str) -> str:
    return format_number(abs(to_number(x)))


@register("__add", 1, variadic=True)
def _add(context: FunctionContext, *xs: str) -> str:
    return format_number(sum(to_number(x) for x in xs))


@register("__sub", 2)
def _sub(context: FunctionContext, a: str, b: str) -> str:
    return _minus(a, b)


@register("__neg", 1)
def _neg(context: FunctionContext, x: str) -> str:
    return format_number(-to_number(x))


@register("__mult", 1, variadic=True)
def _mult(context: FunctionContext, *xs: str) -> str:
    return format_number(prod(to_number(x) for x in xs))


@register("__div", 2)
def _div(context: FunctionContext, a: str, b: str) -> str:
    return _divided(a, b)


# =============================================================================
# Conditional
# =============================================================================


def _equals(a: str, b: str) -> str:
    return format_bool(a == b)


def _not_equals(a: str, b: str) -> str:
    return format_bool(a != b)


def _both(a: str, b: str) -> str:
    return format_bool(is_true(a) and is_true(b))


def _either(a: str, b: str) -> str:
    return format_bool(is_true(a) or is_true(b))


def _less(a: str, b: str) -> str:
    return format_bool(to_number(a) < to_number(b))


def _less_equal(a: str, b: str) -> str:
    return format_bool(to_number(a) <= to_number(b))


def _greater(a: str, b: str) -> str:
    return format_bool(to_number(a) > to_number(b))


def _greater_equal(a: str, b: str) -> str:
    return format_bool(to_number(a) >= to_number(b))


@register("__true")
def _true(context: FunctionContext) -> str:
    return format_bool(True)


@register("__false")
def _false(context: FunctionContext) -> str:
    return format_bool(False)


@register("__and", 1, variadic=True)
def _and(context: FunctionContext, *xs: str) -> str:
    return format_bool(all(is_true(x) for x in xs))


@register("__or", 1, variadic=True)
def _or(context: FunctionContext, *xs: str) -> str:
    return format_bool(any(is_true(x) for x in xs))


@register("__not", 1)
def _not(context: FunctionContext, x: str) -> str:
    return format_bool(not is_true(x))


@register("__eq", 2)
def _eq(context: FunctionContext, a: str, b: str) -> str:
    return _equals(a, b)


@register("__neq", 2)
def _neq(context: FunctionContext, a: str, b: str) -> str:
    return _not_equals(a, b)


@register("__eqi", 2)
def _eqi(context: FunctionContext, a: str, b: str) -> str:
    return _equals(a.lower(), b.lower())


@register("__neqi", 2)
def _neqi(context: FunctionContext, a: str, b: str) -> str:
    return _not_equals(a.lower(), b.lower())


@register("__lt", 2)
def _lt(context: FunctionContext, a: str, b: str) -> str:
    return _less(a, b)


@register("__lte", 2)
def _lte(context: FunctionContext, a: str, b: str) -> str:
    return _less_equal(a, b)


@register("__gt", 2)
def _gt(context: FunctionContext, a: str, b: str) -> str:
    return _greater(a, b)


@register("__gte", 2)
def _gte(context: FunctionContext, a: str, b: str) -> str:
    return _greater_equal(a, b)


@register("__matches", 2)
def _matches(context: FunctionContext, target: str, regex: str) -> str:
    return format_bool(_compile(regex).search(target) is not None)


@register("__contains", 2)
def _contains(context: FunctionContext, target: str, search: str) -> str:
    return format_bool(search in target)


@register("__containsi", 2)
def _containsi(context: FunctionContext, target: str, search: str) -> str:
    return format_bool(search.lower() in target.lower())


@register("__if_then_else", 3)
def _if_then_else(context: FunctionContext, condition: str, then: str, otherwise: str) -> str:
    return then if is_true(condition) else otherwise


def _switch(target: str, rest: tuple[str, ...], fold: Callable[[str], str]) -> str:
    paired = len(rest) - len(rest) % 2
    for i in range(0, paired, 2):
        if fold(rest[i]) == fold(target):
            return rest[i + 1]
    return rest[-1] if len(rest) % 2 else ""


@register("__switch", 3, variadic=True)
def _switch_case(context: FunctionContext, target: str, *rest: str) -> str:
    return _switch(target, rest, str)


@register("__switchi", 3, variadic=True)
def _switchi(context: FunctionContext, target: str, *rest: str) -> str:
    return _switch(target, rest, str.lower)


@register("__pick", 1, optional=1, defaults=("0",))
def _pick_at(context: FunctionContext, array: str, index: str) -> str:
    return _pick(context, _json_array(array), index)


@register("__pick_random", 1)
def _pick_random(context: FunctionContext, array: str) -> str:
    return _pick(context, _json_array(array), RANDOM_SELECTION)


@register("__split_pick", 2, optional=1, defaults=("0",))
def _split_pick(context: FunctionContext, target: str, separator: str, index: str) -> str:
    parts = target.split(separator) if separator else list(target)
    return _pick(context, parts, index)


# =============================================================================
# Textual
# =============================================================================


@register("__usd", 1)
def _usd(context: FunctionContext, amount: str) -> str:
    value = to_number(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


@register("__length", 1)
def _length(context: FunctionContext, x: str) -> str:
    return str(len(x))


@register("__array_length", 1)
def _array_length(context: FunctionContext, array: str) -> str:
    return str(len(_json_array(array)))


@register("__escape_regexp", 1)
def _escape_regexp(context: FunctionContext, x: str) -> str:
    return re.sub(r"[.*+?^${}()|\[\]\\]", r"\\\g<0>", x)


@register("__encode_url", 1)
def _encode_url(context: FunctionContext, x: str) -> str:
    return quote(x, safe="-_.!~*'()")


@register("__decode_url", 1)
def _decode_url(context: FunctionContext, x: str) -> str:
    return unquote(x)


@register("__escape_quotes", 1)
def _escape_quotes(context: FunctionContext, x: str) -> str:
    return x.replace("\\", "\\\\").replace('"', '\\"')


@register("__lower", 1)
def _lower(context: FunctionContext, x: str) -> str:
    return x.lower()


@register("__upper", 1)
def _upper(context: FunctionContext, x: str) -> str:
    return x.upper()


@register("__slice", 2, optional=1)
def _slice(context: FunctionContext, x: str, start: str, end: str | None = None) -> str:
    stop = None if end is None else to_index(end)
    return x[to_index(start):stop]


# =============================================================================
# Extraction
# =============================================================================


@register("__regexp", 2, optional=1, defaults=("1",))
def _regexp(context: FunctionContext, target: str, regex: str, group: str) -> str:
    try:
        return _first(search_regex(target, regex, to_index(group)))
    except ExtractionQueryError as e:
        raise InvalidArgumentError(e.message) from e


@register("__jsonpath", 2)
def _jsonpath(context: FunctionContext, document: str, path: str) -> str:
    try:
        return _first(query_json(parse_json(document), path))
    except ExtractionQueryError as e:
        raise InvalidArgumentError(e.message) from e


@register("__jquery", 2, optional=1)
def _jquery(
    context: FunctionContext, markup: str, selector: str, attribute: str | None = None
) -> str:
    try:
        return _first(select_markup(parse_markup(markup), selector, attribute))
    except ExtractionQueryError as e:
        raise InvalidArgumentError(e.message) from e


# =============================================================================
# Randomization
# =============================================================================

_ALPHABETS = {
    "__random_chars": string.ascii_letters + string.digits,
    "__random_digits": string.digits,
    "__random_letters": string.ascii_letters,
    "__random_uppers": string.ascii_uppercase,
    "__random_lowers": string.ascii_lowercase,
    "__random_hex": "0123456789abcdef",
}


def _random_string_function(alphabet: str) -> FunctionImpl:
    def generate(context: FunctionContext, length: str) -> str:
        return _random_string(context, length, alphabet)

    return generate


for _name, _alphabet in _ALPHABETS.items():
    register(_name, optional=1, defaults=(str(DEFAULT_RANDOM_LENGTH),))(
        _random_string_function(_alphabet)
    )


@register("__random_uuid")
def _random_uuid(context: FunctionContext) -> str:
    return str(uuid.UUID(int=context.rng.getrandbits(128), version=4))


@register("__random_boolean")
def _random_boolean(context: FunctionContext) -> str:
    return format_bool(context.rng.random() < 0.5)


@register("__random_number", optional=2)
def _random_number(context: FunctionContext, *bounds: str) -> str:
    if not bounds:
        low, high = 0, DEFAULT_RANDOM_NUMBER_MAX
    elif len(bounds) == 1:
        low, high = 0, to_index(bounds[0])
    else:
        low, high = to_index(bounds[0]), to_index(bounds[1])
    if low > high:
        raise InvalidArgumentError(f"Empty range [{low}, {high}]")
    return str(context.rng.randint(low, high))


@register("__random_from", 1, variadic=True)
def _random_from(context: FunctionContext, *choices: str) -> str:
    return context.rng.choice(choices)


# =============================================================================
# Time
# =============================================================================


@register("__now")
def _now(context: FunctionContext) -> str:
    return str(int(context.clock().timestamp() * 1000))


@register("__now_iso")
def _now_iso(context: FunctionContext) -> str:
    return _iso(context.clock())


@register("__date_iso", 1)
def _date_iso(context: FunctionContext, value: str) -> str:
    try:
        moment = datetime.fromtimestamp(to_number(value) / 1000, UTC)
    except InvalidArgumentError:
        try:
            moment = datetime.fromisoformat(value)
        except ValueError as e:
            raise InvalidArgumentError(f"'{value}' is not a date") from e
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidArgumentError(f"'{value}' is out of the supported date range") from e
    return _iso(moment)


# =============================================================================
# Operators
# =============================================================================

#: Binary rules behind the operator symbols; all share one precedence level
BINARY_OPERATIONS: Mapping[str, Callable[[str, str], str]] = {
    "=": _equals,
    "==": _equals,
    "===": _equals,
    "!=": _not_equals,
    "!==": _not_equals,
    "|": _either,
    "||": _either,
    "&": _both,
    "&&": _both,
    "+": _plus,
    "-": _minus,
    "*": _times,
    "/": _divided,
    "<": _less,
    "<=": _less_equal,
    ">": _greater,
    ">=": _greater_equal,
}
