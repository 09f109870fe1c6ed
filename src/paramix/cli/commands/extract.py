from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError

from paramix.cli.common import cli_error_handler, compute_parameters, parse_assignments
from paramix.cli.context import ExitCode, get_cli_context
from paramix.cli.output import format_error, format_json
from paramix.engine import run_extractions
from paramix.exceptions import ExtractionError
from paramix.extraction import ExtractionQuery, QueryType, ResponseData
from paramix.logging import run_context


def _parse_headers(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> list[tuple[str, str]]:
    headers: list[tuple[str, str]] = []
    for item in values:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME: VALUE, got {item!r}", ctx, param)
        headers.append((name.strip(), value.strip()))
    return headers


def _read_body(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(
            f"Response file {path} is not valid UTF-8: {e.reason}"
        ) from e


@click.command()
@click.argument(
    "response_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    callback=_parse_headers,
    metavar="NAME: VALUE",
    help="Response header (repeatable).",
)
@click.option("--status", type=int, default=200, show_default=True, help="Status code.")
@click.option(
    "-t",
    "--type",
    "query_type",
    type=click.Choice([t.value for t in QueryType]),
    default=None,
    help="Run a single ad-hoc query of this type instead of the configured ones.",
)
@click.option("--query", default=None, help="Query text for --type.")
@click.option("--attribute", default=None, help="Attribute to read (jquery only).")
@click.option(
    "-p",
    "--param",
    "params",
    multiple=True,
    callback=parse_assignments,
    metavar="NAME=VALUE",
    help="Provide a parameter the queries and defaults may reference (repeatable).",
)
@click.pass_context
def extract(
    ctx: click.Context,
    response_file: Path,
    headers: list[tuple[str, str]],
    status: int,
    query_type: str | None,
    query: str | None,
    attribute: str | None,
    params: dict[str, str],
) -> None:
    """Run extraction queries against a saved response body.

    Without --type, the extractions listed in the configuration run in
    order. The extracted parameters are printed as JSON.

    Examples:
        paramix extract response.json --type jsonpath --query post.id
        paramix extract page.html -t jquery --query 'a.next' --attribute href
        paramix -c scenario.yaml extract response.json -H 'Location: /x'
        paramix extract response.json -t jsonpath --query '$.${kind}.id' -p kind=post
    """
    cli_ctx = get_cli_context(ctx)

    if query_type is not None:
        if query is None:
            click.echo(format_error("--query is required with --type"), err=True)
            raise SystemExit(ExitCode.USAGE)
        try:
            queries = [
                ExtractionQuery(
                    parameter="value",
                    type=QueryType(query_type),
                    query=query,
                    attribute=attribute,
                )
            ]
        except ValidationError as e:
            click.echo(format_error(str(e.errors()[0]["msg"])), err=True)
            raise SystemExit(ExitCode.USAGE) from e
    else:
        queries = list(cli_ctx.config.extractions)
        if not queries:
            click.echo(
                format_error(
                    "No extractions configured",
                    suggestion="Add an 'extractions' list to paramix.yaml or use --type",
                ),
                err=True,
            )
            raise SystemExit(ExitCode.FAILURE)

    with cli_error_handler():
        response = ResponseData(
            body=_read_body(response_file),
            headers=headers,
            status=status,
        )
        store = compute_parameters(cli_ctx.config, params)
        with run_context(test_run_id=store.run.test_run_id):
            run_extractions(queries, response, store)

    click.echo(format_json({q.parameter: store.get(q.parameter) for q in queries}))
