from __future__ import annotations

import click

from paramix.cli.common import cli_error_handler, compute_parameters, parse_assignments
from paramix.cli.context import get_cli_context
from paramix.constants import FALSE, TRUE
from paramix.engine import evaluate_condition, resolve_template
from paramix.logging import get_logger, run_context


@click.command()
@click.argument("template")
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    callback=parse_assignments,
    metavar="NAME=VALUE",
    help="Set a parameter (repeatable). Overrides configured defaults.",
)
@click.option(
    "--condition",
    is_flag=True,
    default=False,
    help="Judge TEMPLATE as a condition and print true or false.",
)
@click.pass_context
def resolve(
    ctx: click.Context,
    template: str,
    params: dict[str, str],
    condition: bool,
) -> None:
    """Resolve the ${...} spans of TEMPLATE.

    Configured default parameters are computed first, so TEMPLATE may
    reference them.

    Examples:
        paramix resolve 'Hello ${name}' -p name=World
        paramix resolve '${__add(a,b)}' -p a=1 -p b=2
        paramix resolve --condition '${__status == '"'"'200'"'"'}'
    """
    logger = get_logger(__name__)
    cli_ctx = get_cli_context(ctx)

    with cli_error_handler():
        store = compute_parameters(cli_ctx.config, params)
        with run_context(test_run_id=store.run.test_run_id):
            if condition:
                result = evaluate_condition(template, store)
                click.echo(TRUE if result else FALSE)
            else:
                click.echo(resolve_template(template, store))
            logger.debug("template_resolved", condition=condition)
