"""Extraction backends.

Each backend turns a response and a resolved query into the ordered list
of candidate values. Backends never decide between candidates or apply
defaults; the extraction step does that uniformly for all of them.

New query types are added by extending QueryType and BACKENDS.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from paramix.extraction.models import QueryType
from paramix.extraction.response import ResponseData
from paramix.expressions.queries import query_json, search_regex, select_markup

__all__ = ["ResolvedQuery", "Backend", "BACKENDS", "candidates"]


@dataclass(frozen=True, slots=True)
class ResolvedQuery:
    """Query text after ``${...}`` resolution.

    Attributes:
        type: Backend to run.
        query: Resolved query text.
        attribute: Resolved attribute name (jquery only).
    """

    type: QueryType
    query: str
    attribute: str | None = None


Backend = Callable[[ResponseData, ResolvedQuery], list[str]]


def _jsonpath(response: ResponseData, query: ResolvedQuery) -> list[str]:
    return query_json(response.json, query.query)


def _jquery(response: ResponseData, query: ResolvedQuery) -> list[str]:
    return select_markup(response.document, query.query, query.attribute)


def _regexp(response: ResponseData, query: ResolvedQuery) -> list[str]:
    return search_regex(response.body, query.query)


def _header(response: ResponseData, query: ResolvedQuery) -> list[str]:
    # httpx.Headers compares names case-insensitively
    return response.headers.get_list(query.query)


def _assignment(response: ResponseData, query: ResolvedQuery) -> list[str]:
    return [query.query]


def _edn(response: ResponseData, query: ResolvedQuery) -> list[str]:
    return query_json(response.edn, query.query)


BACKENDS: Mapping[QueryType, Backend] = {
    QueryType.JSONPATH: _jsonpath,
    QueryType.JQUERY: _jquery,
    QueryType.REGEXP: _regexp,
    QueryType.HEADER: _header,
    QueryType.ASSIGNMENT: _assignment,
    QueryType.EDN: _edn,
}


def candidates(response: ResponseData, query: ResolvedQuery) -> list[str]:
    """Run the backend for ``query.type``.

    Raises:
        ExtractionQueryError: If the query is malformed.
    """
    return BACKENDS[query.type](response, query)
