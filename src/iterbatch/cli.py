from __future__ import annotations

import json
import logging
import pathlib
from typing import Any, Mapping, NoReturn, Optional

import anyio
import typer
import yaml

from iterbatch.batch.executor import USAGE, BatchExecutor
from iterbatch.context import ExecutionContext
from iterbatch.core.types import ProviderArgsConfig
from iterbatch.errors import IterbatchError, UsageError
from iterbatch.factory import build_runner, build_service
from iterbatch.observability.logger import BatchRunLogger
from iterbatch.service import IterableService
from iterbatch.settings import get_settings
from iterbatch.storage.file_store import DefinitionFileStore

app = typer.Typer(no_args_is_help=True)
iterable_app = typer.Typer(help="Manage named iterables")

DEFINE_USAGE = "Usage: iterable define <name> --type <type> [options]"


def _fail(message: str, code: int = 1) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code)


def _load_service() -> tuple[IterableService, DefinitionFileStore]:
    try:
        return build_service(get_settings())
    except IterbatchError as exc:
        _fail(str(exc))


class TyperReporter:
    """Reporter printing progress to stdout and errors to stderr."""

    def info(self, message: str) -> None:
        typer.echo(message)

    def error(self, message: str) -> None:
        typer.echo(message, err=True)


def _coerce_bool(option: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise UsageError(f"Option --{option} expects a boolean, got '{raw}'")


def parse_provider_args(args: list[str], config: ProviderArgsConfig) -> dict[str, Any]:
    """Build a provider spec from ``--option value`` flags.

    String options take the next argument (or ``--option=value``), boolean
    options are flags. Options declared ``multiple`` collect into a list.
    """
    spec: dict[str, Any] = {}
    index = 0
    while index < len(args):
        token = args[index]
        index += 1
        if not token.startswith("--"):
            raise UsageError(f"Unexpected argument '{token}'. {DEFINE_USAGE}")

        key, has_inline, inline_value = token[2:].partition("=")
        option = config.options.get(key)
        if option is None:
            known = ", ".join(f"--{name}" for name in sorted(config.options)) or "<none>"
            raise UsageError(f"Unknown option --{key} (accepted: {known})")

        value: Any
        if option.type == "boolean":
            value = _coerce_bool(key, inline_value) if has_inline else True
        elif has_inline:
            value = inline_value
        else:
            if index >= len(args):
                raise UsageError(f"Option --{key} requires a value")
            value = args[index]
            index += 1

        if option.multiple:
            spec.setdefault(key, []).append(value)
        else:
            spec[key] = value
    return spec


@iterable_app.command(
    "define",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def iterable_define(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the iterable (referenced as @name)"),
    type_name: Optional[str] = typer.Option(None, "--type", "-t", help="Provider type"),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Optional description"
    ),
) -> None:
    """Create or replace a named iterable. Extra --options build the provider spec."""
    if name.startswith("-") or not type_name:
        _fail(DEFINE_USAGE)

    service, file_store = _load_service()
    provider = service.get_provider(type_name)
    if provider is None:
        _fail(f"Unknown iterable type: {type_name}")

    try:
        spec = parse_provider_args(list(ctx.args), provider.args_config())
        service.define(name, type_name, spec, description)
    except IterbatchError as exc:
        _fail(str(exc))

    file_store.save(service.store)
    typer.echo(f"Defined iterable: @{name} ({type_name})")


@iterable_app.command("list")
def iterable_list(
    json_output: bool = typer.Option(False, "--json", help="Output machine readable JSON"),
) -> None:
    """Show all defined iterables."""
    service, _ = _load_service()
    iterables = service.list()

    if json_output:
        payload = [record.model_dump(mode="json") for record in iterables]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not iterables:
        typer.echo("No iterables defined")
        return

    typer.echo("Available iterables:")
    for record in iterables:
        line = f"- @{record.name} = {record.type}"
        if record.description:
            line = f"{line}: {record.description}"
        typer.echo(line)


@iterable_app.command("show")
def iterable_show(
    name: str = typer.Argument(..., help="Iterable name"),
) -> None:
    """Display a single iterable definition."""
    service, _ = _load_service()
    record = service.get(name.lstrip("@"))
    if record is None:
        _fail(f"Iterable not found: @{name.lstrip('@')}")

    typer.echo(f"Iterable: @{record.name}")
    typer.echo(f"Type: {record.type}")
    if record.description:
        typer.echo(f"Description: {record.description}")
    typer.echo(f"Spec: {json.dumps(record.spec, indent=2, ensure_ascii=False)}")
    typer.echo(f"Created: {record.created_at.isoformat()}")
    typer.echo(f"Updated: {record.updated_at.isoformat()}")


@iterable_app.command("delete")
def iterable_delete(
    name: str = typer.Argument(..., help="Iterable name"),
) -> None:
    """Remove a defined iterable permanently."""
    service, file_store = _load_service()
    normalized = name.lstrip("@")
    if not service.delete(normalized):
        _fail(f"Iterable not found: @{normalized}")

    file_store.save(service.store)
    typer.echo(f"Deleted iterable: @{normalized}")


def _definitions_from_yaml(data: Any) -> list[Mapping[str, Any]]:
    entries = data.get("iterables") if isinstance(data, Mapping) else data
    if isinstance(entries, Mapping):
        definitions: list[Mapping[str, Any]] = []
        for key, value in entries.items():
            if value is not None and not isinstance(value, Mapping):
                raise UsageError(f"Definition for @{key} must be a mapping")
            definitions.append({"name": key, **(value or {})})
        return definitions
    if isinstance(entries, list) and all(isinstance(entry, Mapping) for entry in entries):
        return entries
    raise UsageError("Definitions file must contain an 'iterables' mapping or list")


@iterable_app.command("load")
def iterable_load(
    path: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False),
) -> None:
    """Define iterables from a YAML file."""
    service, file_store = _load_service()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        _fail(f"Failed to parse {path}: {exc}")

    try:
        definitions = _definitions_from_yaml(data)
        for entry in definitions:
            name = entry.get("name")
            type_name = entry.get("type")
            if not isinstance(name, str) or not isinstance(type_name, str):
                raise UsageError("Each definition needs a string 'name' and 'type'")
            spec = entry.get("spec") or {}
            if not isinstance(spec, Mapping):
                raise UsageError(f"Spec for @{name} must be a mapping")
            service.define(name, type_name, spec, entry.get("description"))
    except IterbatchError as exc:
        _fail(str(exc))

    file_store.save(service.store)
    typer.echo(f"Loaded {len(definitions)} iterable(s) from {path}")


@iterable_app.command("providers")
def iterable_providers() -> None:
    """List registered provider types and their options."""
    service, _ = _load_service()
    types = service.provider_types()
    if not types:
        typer.echo("No providers registered. Set ITERBATCH_PROVIDERS or install a provider plugin.")
        return

    for type_name in types:
        provider = service.get_provider(type_name)
        if provider is None:
            continue
        typer.echo(f"{type_name}: {provider.description}")
        for option_name, option in sorted(provider.args_config().options.items()):
            suffix = " (multiple)" if option.multiple else ""
            typer.echo(f"  --{option_name} <{option.type}>{suffix}")


@iterable_app.command("status")
def iterable_status() -> None:
    """Summarize stored iterables."""
    service, file_store = _load_service()
    for line in service.store.show():
        typer.echo(line)
    typer.echo(f"Store: {file_store.path}")


@app.command("foreach")
def foreach(
    request: list[str] = typer.Argument(..., help="@<iterable> <template>"),
    command: Optional[str] = typer.Option(
        None, "--command", "-c", help="Shell command run per item (overrides ITERBATCH_ACTION_COMMAND)"
    ),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Identifier for the run ledger"),
    ledger: bool = typer.Option(True, "--ledger/--no-ledger", help="Write a run ledger"),
) -> None:
    """Run a template once per item in a named iterable.

    Use {variable} or {nested.path:default} in the template to interpolate
    item values, e.g.:

        iterbatch foreach @ts-files "Add comments to {file}"
    """
    settings = get_settings()
    remainder = " ".join(request)

    service, _ = _load_service()
    observer = None
    if ledger and settings.RUN_LEDGER:
        observer = BatchRunLogger(run_id=run_id, base_dir=settings.runs_dir)

    executor = BatchExecutor(
        service,
        build_runner(settings, command),
        reporter=TyperReporter(),
        observer=observer,
    )
    context = ExecutionContext()

    try:
        report = anyio.run(lambda: executor.run(remainder, context))
    except UsageError:
        _fail(USAGE)
    except IterbatchError as exc:
        _fail(str(exc))

    if report.failures:
        raise typer.Exit(2)


@app.callback()
def main() -> None:
    """Define named iterables and run templated actions over their items."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s - %(message)s")


app.add_typer(iterable_app, name="iterable")


if __name__ == "__main__":
    app()
