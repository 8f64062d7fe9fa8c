"""
Typer application wiring for the Jupiter relay CLI.

The CLI exposes the packaged operation catalogs for inspection and runs
batches against any family. Results are printed as JSON, one entry per input
record, so the output can be piped into other tooling.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer

from ..adapters import BatchAbortedError
from ..adapters.api.parameters import BASE_URL_KEY, OPERATION_KEY
from ..core import FAMILIES, CatalogLoadError, ExecutionContext, ExecutionOptions, OperationCatalog, load_catalog
from ..core.context import DEFAULT_TIMEOUT
from .adapters import resolve_adapter

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Declarative relay for the Jupiter token-swap REST API.\n\n"
        "Command groups:\n"
        "- catalog: inspect the operations and parameters of each API family.\n"
        "- run: execute a batch of records against one family."
    ),
)
catalog_app = typer.Typer(help="Inspect the packaged operation catalogs (swap, price, token, trigger, recurring, ultra).")
app.add_typer(catalog_app, name="catalog")


def _load_family(family: str) -> OperationCatalog:
    try:
        return load_catalog(family)
    except CatalogLoadError as exc:
        raise typer.BadParameter(str(exc), param_hint="FAMILY") from exc


def _parse_parameters(values: Optional[List[str]], catalog: OperationCatalog) -> Dict[str, str]:
    parameters: Dict[str, str] = {}
    if not values:
        return parameters
    for entry in values:
        if "=" not in entry:
            raise typer.BadParameter(f"Parameter '{entry}' must use key=value format.", param_hint="--param")
        key, value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Parameter '{entry}' is missing a key.", param_hint="--param")
        if key not in (OPERATION_KEY, BASE_URL_KEY) and catalog.parameter(key) is None:
            raise typer.BadParameter(f"'{key}' is not a parameter of the {catalog.family} catalog.", param_hint="--param")
        parameters[key] = value
    return parameters


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Print request plans without sending them."),
    continue_on_fail: bool = typer.Option(False, "--continue-on-fail", help="Record failures as error entries instead of aborting the batch."),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", min=0.1, help="HTTP timeout in seconds."),
    tag: Optional[List[str]] = typer.Option(None, "--tag", help="Observability tag attached to log lines. Can be repeated."),
) -> None:
    """
    Configure global execution context.

    The callback stores the resolved execution context in Typer's state so child
    commands can retrieve it via :class:`typer.Context`.
    """

    options = ExecutionOptions(
        dry_run=dry_run,
        continue_on_fail=continue_on_fail,
        timeout=timeout,
        observability_tags=tuple(tag or ()),
    )
    state = ctx.ensure_object(dict)
    state["context"] = ExecutionContext.build_default(options=options)


def _require_context(ctx: typer.Context) -> ExecutionContext:
    state = ctx.ensure_object(dict)
    context = state.get("context")
    if not isinstance(context, ExecutionContext):
        raise typer.Exit(code=2)
    return context


@catalog_app.command("list")
def catalog_list() -> None:
    """List the API families with their base URLs and operation counts."""

    header = f"{'Family':<10} {'Ops':<4} {'Base URL':<40} Description"
    typer.echo(header)
    typer.echo("-" * len(header))
    for family in FAMILIES:
        catalog = load_catalog(family)
        typer.echo(f"{catalog.family:<10} {len(catalog.operations):<4} {catalog.base_url:<40} {catalog.description}")


@catalog_app.command("describe")
def catalog_describe(
    family: str = typer.Argument(..., help="Catalog family, e.g. 'swap'."),
    output_json: bool = typer.Option(False, "--json", help="Emit the catalog in JSON format."),
) -> None:
    """Show the operations and parameters of one family."""

    catalog = _load_family(family)
    if output_json:
        typer.echo(catalog.to_json())
        return

    typer.echo(f"Family: {catalog.family}")
    typer.echo(f"Base URL: {catalog.base_url}")
    typer.echo(f"Default operation: {catalog.default_operation}")
    for operation in catalog:
        typer.echo("")
        typer.echo(f"{operation.name} ({operation.method.value} {operation.path})")
        if operation.description:
            typer.echo(f"  {operation.description}")
        for spec in catalog.parameters_for(operation.name):
            flags = []
            if spec.required:
                flags.append("required")
            if spec.is_list:
                flags.append("list")
            if spec.default not in (None, ""):
                flags.append(f"default={spec.default}")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            typer.echo(f"  - {spec.name}: {spec.type.value}{suffix}")


@app.command("run")
def run(
    ctx: typer.Context,
    family: str = typer.Argument(..., help="Catalog family, e.g. 'swap'."),
    operation: Optional[str] = typer.Option(None, "--operation", "-o", help="Operation name. Defaults to the catalog's default operation."),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="Parameter in the form key=value. Can be repeated."),
    records: int = typer.Option(1, "--records", "-n", min=1, help="Number of input records to process."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the family base URL."),
) -> None:
    """
    Run a batch of records against one family and print the results as JSON.
    """

    context = _require_context(ctx)
    catalog = _load_family(family)
    parameters: Dict[str, Any] = dict(_parse_parameters(param, catalog))
    if operation:
        parameters[OPERATION_KEY] = operation
    if base_url:
        parameters[BASE_URL_KEY] = base_url

    adapter = resolve_adapter(catalog.family, context)
    try:
        results = adapter.run(
            [{} for _ in range(records)],
            parameters,
            continue_on_fail=context.options.continue_on_fail,
        )
    except BatchAbortedError as exc:
        typer.echo(f"Error: {exc.error} (record {exc.record_index})", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps([record.as_dict() for record in results], ensure_ascii=False, indent=2))


if __name__ == "__main__":  # pragma: no cover
    app()
