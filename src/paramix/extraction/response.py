"""Response data handed to extraction backends.

The HTTP client is not part of paramix. Whatever client executes the
request wraps its result in a ResponseData; ``from_httpx`` covers httpx.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

import httpx
from bs4 import BeautifulSoup

from paramix.expressions.queries import parse_edn, parse_json, parse_markup

__all__ = ["ResponseData"]


def _headers(
    value: httpx.Headers | Mapping[str, str] | Iterable[tuple[str, str]] | None,
) -> httpx.Headers:
    return value if isinstance(value, httpx.Headers) else httpx.Headers(value or {})


@dataclass
class ResponseData:
    """A response as seen by the extraction backends.

    Parsed views of the body (JSON, markup, EDN) are computed on first use
    and cached.

    Attributes:
        body: Body decoded as text.
        headers: Case-insensitive response headers.
        status: HTTP status code.
        status_text: Reason phrase, e.g. "OK".
        response_time: Elapsed time in milliseconds.
    """

    body: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    status: int | None = None
    status_text: str | None = None
    response_time: float | None = None

    def __post_init__(self) -> None:
        self.headers = _headers(self.headers)

    @cached_property
    def json(self) -> Any:
        return parse_json(self.body)

    @cached_property
    def document(self) -> BeautifulSoup:
        return parse_markup(self.body)

    @cached_property
    def edn(self) -> Any:
        return parse_edn(self.body)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> ResponseData:
        """Adapt a completed httpx response."""
        try:
            elapsed = response.elapsed.total_seconds() * 1000
        except RuntimeError:
            # elapsed is only set once the response has been closed
            elapsed = None
        return cls(
            body=response.text,
            headers=response.headers,
            status=response.status_code,
            status_text=response.reason_phrase,
            response_time=elapsed,
        )
