from __future__ import annotations

import click

from paramix.cli.common import cli_error_handler, compute_parameters, parse_assignments
from paramix.cli.context import get_cli_context
from paramix.cli.output import OutputFormat, format_json, format_success, format_table


@click.command()
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    callback=parse_assignments,
    metavar="NAME=VALUE",
    help="Provide a parameter the defaults may reference (repeatable).",
)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format.",
)
@click.option(
    "--show/--no-show",
    default=False,
    help="Print the computed parameter values.",
)
@click.pass_context
def validate(
    ctx: click.Context,
    params: dict[str, str],
    fmt: str,
    show: bool,
) -> None:
    """Validate the configured default parameters.

    Every default is computed in dependency order. Any failure is reported
    and the command exits with status 1.

    Examples:
        paramix validate
        paramix -c staging.yaml validate --show
        paramix validate --format json
    """
    cli_ctx = get_cli_context(ctx)

    with cli_error_handler():
        store = compute_parameters(cli_ctx.config, params)

    values = {name: store.get(name) or "" for name in store.names()}
    if fmt == OutputFormat.JSON.value:
        click.echo(format_json(values))
        return

    if show and values:
        click.echo(format_table(["Name", "Value"], [[k, v] for k, v in values.items()]))
    count = len(cli_ctx.config.parameters)
    click.echo(format_success(f"{count} default parameter(s) computed"))
