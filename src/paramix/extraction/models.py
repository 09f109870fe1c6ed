"""Extraction query records.

An ExtractionQuery is what the scenario runner hands over after each
response: which backend to use, the query text, and where to store the
result. Records are immutable once validated.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from paramix.constants import RANDOM_SELECTION

__all__ = ["QueryType", "Selection", "ExtractionQuery"]


class QueryType(str, Enum):
    """Extraction backends."""

    JSONPATH = "jsonpath"
    JQUERY = "jquery"
    REGEXP = "regexp"
    HEADER = "header"
    ASSIGNMENT = "assignment"
    EDN = "edn"


Selection = int | Literal["random"]


class ExtractionQuery(BaseModel):
    """One extraction to run against a response.

    Attributes:
        parameter: Name of the parameter the result is written to.
        type: Backend that interprets ``query``.
        query: Query text; may contain ``${...}`` spans, resolved first.
        attribute: Attribute to read from selected elements (jquery only).
        selection: Which candidate to keep when several match: a zero-based
            index or "random". The first candidate when omitted.
        default: Value used when nothing matches. Empty string when omitted.

    Example:
        ```yaml
        extractions:
          - parameter: post_id
            type: jsonpath
            query: post.id
          - parameter: csrf
            type: jquery
            query: input[name=csrf]
            attribute: value
            default: none
        ```
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    parameter: str = Field(min_length=1)
    type: QueryType
    query: str
    attribute: str | None = None
    selection: Selection | None = None
    default: str | None = None

    @field_validator("selection")
    @classmethod
    def check_selection(cls, v: Selection | None) -> Selection | None:
        if isinstance(v, int) and v < 0:
            raise ValueError("selection index must not be negative")
        return v

    @model_validator(mode="after")
    def check_attribute_backend(self) -> Self:
        if self.attribute is not None and self.type is not QueryType.JQUERY:
            raise ValueError("attribute is only supported by jquery queries")
        return self

    @property
    def is_random(self) -> bool:
        return self.selection == RANDOM_SELECTION
