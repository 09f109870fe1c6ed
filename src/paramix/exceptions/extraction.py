from __future__ import annotations

from paramix.exceptions.base import ParamixError


class ExtractionError(ParamixError):
    """Base exception for extraction failures.

    A query that simply finds nothing is not an error; these exceptions are
    reserved for queries that cannot be run at all.
    """


class ExtractionQueryError(ExtractionError):
    """Exception raised when an extraction query is malformed.

    Attributes:
        query_type: Backend the query was written for (e.g. "regexp").
        query: The query text after parameter resolution.
    """

    def __init__(self, message: str, query_type: str, query: str) -> None:
        self.query_type = query_type
        self.query = query
        super().__init__(f"Invalid {query_type} query {query!r}: {message}")
