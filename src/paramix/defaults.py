"""Default parameter computation.

Default parameters are expression-valued seeds (``base_url:
"https://${host}"``) that let one scenario run against several
environments. They are computed once, when a configuration is validated,
never while a test runs. Failures invalidate the configuration.

A default may reference other defaults. Defaults are evaluated in
dependency order; cyclic references (including a default referring to
itself) are configuration errors.
"""

from __future__ import annotations

from collections.abc import Mapping

from paramix.exceptions import ConfigValidationError
from paramix.expressions.errors import ExpressionErrorInfo, ExpressionEvaluationError
from paramix.expressions.evaluator import ExpressionEvaluator
from paramix.expressions.parser import extract_references
from paramix.logging import get_logger
from paramix.store import ParameterStore, is_reserved

__all__ = ["dependency_order", "validate_defaults"]

logger = get_logger(__name__)


def _dependencies(defaults: Mapping[str, str]) -> dict[str, list[str]]:
    return {
        name: [ref for ref in extract_references(text) if ref in defaults]
        for name, text in defaults.items()
    }


def dependency_order(defaults: Mapping[str, str]) -> list[str]:
    """Order default names so every default follows the defaults it uses.

    Ties keep declaration order.

    Raises:
        ConfigValidationError: If the defaults reference each other in a
            cycle. Every default on or behind a cycle is reported.
    """
    pending = _dependencies(defaults)
    order: list[str] = []
    placed: set[str] = set()

    while pending:
        ready = [
            name for name, deps in pending.items() if all(d in placed for d in deps)
        ]
        if not ready:
            raise ConfigValidationError(
                "Default parameters reference each other in a cycle",
                problems=[
                    ExpressionErrorInfo(
                        expression=name,
                        message="depends on " + ", ".join(sorted(set(deps) - placed)),
                    )
                    for name, deps in pending.items()
                ],
            )
        for name in ready:
            order.append(name)
            placed.add(name)
            del pending[name]
    return order


def validate_defaults(
    defaults: Mapping[str, str],
    seed: ParameterStore | None = None,
) -> ParameterStore:
    """Compute default parameters.

    Args:
        defaults: Parameter name -> expression text.
        seed: Store providing values the defaults may reference (for
            example parameters injected by CI). Its values are not modified;
            its run identity, random source and clock are reused.

    Returns:
        A new store holding the seed values plus every computed default.
        Runs should ``fork()`` it rather than share it.

    Raises:
        ConfigValidationError: If a default uses a reserved name, the
            defaults form a cycle, or any default fails to evaluate. All
            evaluation failures are reported together.
    """
    reserved = [name for name in defaults if is_reserved(name)]
    if reserved:
        raise ConfigValidationError(
            "Default parameters may not use reserved names",
            problems=[
                ExpressionErrorInfo(expression=name, message="reserved name")
                for name in reserved
            ],
        )

    store = (
        seed.fork(run=seed.run, rng=seed.context.rng, clock=seed.context.clock)
        if seed is not None
        else ParameterStore()
    )
    evaluator = ExpressionEvaluator(store)
    problems: list[ExpressionErrorInfo] = []

    for name in dependency_order(defaults):
        try:
            store.set(name, evaluator.evaluate_string(defaults[name]))
        except ExpressionEvaluationError as e:
            logger.warning("default_parameter_failed", parameter=name, error=e.message)
            problems.append(ExpressionErrorInfo(expression=name, message=e.message))

    if problems:
        raise ConfigValidationError(
            "Default parameters could not be computed", problems=problems
        )

    logger.debug("defaults_resolved", count=len(defaults))
    return store
