"""Extraction of parameter values from responses.

Module Structure
----------------
- models.py: ExtractionQuery records and the QueryType enum
- response.py: ResponseData, the response bundle the backends read
- backends.py: One query function per QueryType, dispatched by table
- runner.py: The extraction step that selects, defaults and writes back
"""

from __future__ import annotations

from paramix.extraction.backends import BACKENDS, ResolvedQuery, candidates
from paramix.extraction.models import ExtractionQuery, QueryType
from paramix.extraction.response import ResponseData
from paramix.extraction.runner import extract, run_extraction, run_extractions

__all__ = [
    "BACKENDS",
    "ExtractionQuery",
    "QueryType",
    "ResolvedQuery",
    "ResponseData",
    "candidates",
    "extract",
    "run_extraction",
    "run_extractions",
]
