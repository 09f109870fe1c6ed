"""Query engines shared by extraction backends and extraction functions.

Each engine takes already-parsed (or raw) response content and a query,
and returns the ordered list of candidate values as parameter strings. An
empty list means "no match"; a malformed query raises
ExtractionQueryError.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence, Set
from functools import lru_cache
from typing import Any

import edn_format
from bs4 import BeautifulSoup, Tag
from jsonpath_ng import JSONPath
from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as parse_jsonpath
from soupsieve import SelectorSyntaxError

from paramix.exceptions import ExtractionQueryError
from paramix.expressions.values import render_json_value

__all__ = [
    "parse_json",
    "parse_markup",
    "parse_edn",
    "query_json",
    "select_markup",
    "search_regex",
]

# Distinguishes an unparseable body from a document that is null
_UNPARSED = object()


@lru_cache(maxsize=256)
def _compile_jsonpath(query: str) -> JSONPath:
    try:
        return parse_jsonpath(query)
    except (JSONPathError, ValueError) as e:
        raise ExtractionQueryError(str(e), "jsonpath", query) from e


@lru_cache(maxsize=256)
def _compile_regex(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ExtractionQueryError(str(e), "regexp", pattern) from e


def parse_json(text: str) -> Any:
    """Parse JSON text.

    Returns:
        The decoded document, or a private sentinel when the text is not
        JSON, which ``query_json`` treats as "no match".
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return _UNPARSED


def parse_markup(text: str) -> BeautifulSoup:
    """Parse HTML or XML markup into a searchable document."""
    # Keep "class" and friends as plain strings rather than lists
    return BeautifulSoup(text, "html.parser", multi_valued_attributes=None)


def _edn_to_plain(value: Any) -> Any:
    """Convert EDN data into JSON-shaped data.

    Keywords become ``:name`` strings, so ``{:post {:id 1}}`` is addressed
    as ``$[':post'][':id']``.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, edn_format.Keyword):
        return f":{value.name}"
    if isinstance(value, edn_format.Symbol):
        return value.name
    if isinstance(value, Mapping):
        return {str(_edn_to_plain(k)): _edn_to_plain(v) for k, v in value.items()}
    # Lists, vectors and sets all become arrays
    if isinstance(value, (Sequence, Set)):
        return [_edn_to_plain(item) for item in value]
    return str(value)


def parse_edn(text: str) -> Any:
    """Parse EDN text into JSON-shaped data.

    Returns:
        The converted document, or the same sentinel ``parse_json`` uses
        when the text is not EDN or carries a tag other than ``#inst`` and
        ``#uuid``.
    """
    try:
        return _edn_to_plain(edn_format.loads(text))
    except (edn_format.EDNDecodeError, ValueError):
        return _UNPARSED
    except NotImplementedError:
        # edn_format raises this for tags without a registered reader
        return _UNPARSED


def query_json(document: Any, query: str) -> list[str]:
    """Run a JSONPath query.

    The leading ``$.`` is optional: ``post.id`` and ``$.post.id`` are the
    same query.

    Args:
        document: Decoded JSON document (or the ``parse_json`` / ``parse_edn``
            sentinel).
        query: JSONPath query text.

    Returns:
        One rendered value per match, in document order.
    """
    path = _compile_jsonpath(query)
    if document is _UNPARSED:
        return []
    return [render_json_value(match.value) for match in path.find(document)]


def select_markup(
    document: BeautifulSoup,
    selector: str,
    attribute: str | None = None,
) -> list[str]:
    """Select elements with a CSS selector.

    Args:
        document: Parsed markup.
        selector: CSS selector.
        attribute: Attribute to read; the element text when omitted.

    Returns:
        One value per matched element. Elements lacking ``attribute`` are
        skipped.
    """
    try:
        elements = document.select(selector)
    except SelectorSyntaxError as e:
        raise ExtractionQueryError(str(e), "jquery", selector) from e

    values: list[str] = []
    for element in elements:
        if not isinstance(element, Tag):
            continue
        if attribute is None:
            values.append(element.get_text())
            continue
        found = element.get(attribute)
        if found is not None:
            values.append(str(found))
    return values


def search_regex(text: str, pattern: str, group: int = 1) -> list[str]:
    """Find every match of ``pattern`` in ``text``.

    Args:
        text: Text to search.
        pattern: Regular expression.
        group: Capture group to return. Patterns without capture groups
            yield the whole match.

    Returns:
        The selected group of each match, in order. Matches where the group
        did not participate are skipped.
    """
    compiled = _compile_regex(pattern)
    if compiled.groups == 0:
        group = 0
    elif not 0 <= group <= compiled.groups:
        raise ExtractionQueryError(
            f"pattern has no group {group}", "regexp", pattern
        )
    values: list[str] = []
    for match in compiled.finditer(text):
        value = match.group(group)
        if value is not None:
            values.append(value)
    return values
