"""The extraction step: query a response and write the result.

This is the only place parameter values are written during a run. Query
text may reference parameters extracted earlier, so ``${...}`` spans in
the query, attribute and default are resolved before the backend runs.
"""

from __future__ import annotations

from collections.abc import Iterable

from paramix.expressions.evaluator import ExpressionEvaluator
from paramix.extraction.backends import ResolvedQuery, candidates
from paramix.extraction.models import ExtractionQuery
from paramix.extraction.response import ResponseData
from paramix.logging import get_logger
from paramix.store import ParameterStore

__all__ = ["extract", "run_extraction", "run_extractions"]

logger = get_logger(__name__)


def _resolve(evaluator: ExpressionEvaluator, text: str | None) -> str | None:
    return None if text is None else evaluator.evaluate_string(text)


def extract(
    query: ExtractionQuery,
    response: ResponseData,
    store: ParameterStore,
) -> str:
    """Compute the value ``query`` extracts from ``response``.

    Args:
        query: Extraction query record.
        response: Response to query.
        store: Parameters available to ``${...}`` spans in the query.

    Returns:
        The selected candidate; ``query.default`` (or "") when nothing
        matches or the selection index is out of range.

    Raises:
        ExpressionEvaluationError: If a span in the query fails to evaluate.
        ExtractionQueryError: If the resolved query is malformed.
    """
    evaluator = ExpressionEvaluator(store)
    resolved = ResolvedQuery(
        type=query.type,
        query=evaluator.evaluate_string(query.query),
        attribute=_resolve(evaluator, query.attribute),
    )
    found = candidates(response, resolved)

    value: str | None = None
    if query.is_random:
        if found:
            value = store.context.rng.choice(found)
    else:
        index = query.selection or 0
        if index < len(found):
            value = found[index]

    if value is None:
        value = _resolve(evaluator, query.default) or ""
        logger.debug(
            "extraction_no_match",
            parameter=query.parameter,
            type=query.type.value,
            query=resolved.query,
            candidates=len(found),
        )
    return value


def run_extraction(
    query: ExtractionQuery,
    response: ResponseData,
    store: ParameterStore,
) -> None:
    """Extract a value from ``response`` and write it to ``store``.

    The response also becomes the source of the response built-ins
    (``__status`` and friends).

    Raises:
        ReservedParameterError: If ``query.parameter`` is a reserved name.
        ExpressionEvaluationError: If a span in the query fails to evaluate.
        ExtractionQueryError: If the resolved query is malformed.
    """
    store.bind_response(response)
    value = extract(query, response, store)
    store.set(query.parameter, value)
    logger.debug("parameter_extracted", parameter=query.parameter, type=query.type.value)


def run_extractions(
    queries: Iterable[ExtractionQuery],
    response: ResponseData,
    store: ParameterStore,
) -> None:
    """Run a step's extractions in order.

    Later queries see the parameters written by earlier ones.
    """
    for query in queries:
        run_extraction(query, response, store)
