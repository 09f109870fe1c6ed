"""Entry points used by a scenario runner.

The runner owns the HTTP client and the scenario model. For each step it
resolves request templates, judges assertions and skip conditions, and
hands the response plus the step's extraction queries back to paramix.

Example:
    ```python
    store = validate_defaults(config.parameters).fork()

    url = resolve_template("${base_url}/posts/${post_id}", store)
    response = ResponseData.from_httpx(client.get(url))
    run_extractions(step.extractions, response, store)

    if not evaluate_condition("${__status == '200'}", store):
        step.fail()
    ```
"""

from __future__ import annotations

from paramix.defaults import validate_defaults
from paramix.expressions.evaluator import ExpressionEvaluator
from paramix.extraction.runner import run_extraction, run_extractions
from paramix.store import ParameterStore

__all__ = [
    "resolve_template",
    "evaluate_condition",
    "run_extraction",
    "run_extractions",
    "validate_defaults",
]


def resolve_template(text: str, store: ParameterStore) -> str:
    """Substitute every ``${...}`` span of ``text`` using ``store``.

    Raises:
        ExpressionEvaluationError: If a span fails to evaluate.
    """
    return ExpressionEvaluator(store).evaluate_string(text)


def evaluate_condition(text: str, store: ParameterStore) -> bool:
    """Judge an assertion or skip condition with True Semantics.

    Raises:
        ExpressionEvaluationError: If a span fails to evaluate.
    """
    return ExpressionEvaluator(store).evaluate_condition(text)
