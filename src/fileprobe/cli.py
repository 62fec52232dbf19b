"""Command line interface for fileprobe."""

from __future__ import annotations

import copy
import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from fileprobe.config import ConfigError, ConfigManager, FileprobeConfig, resolve_with_precedence
from fileprobe.config.resolver import assign_nested
from fileprobe.engine import InspectionEngine, Outcome
from fileprobe.inspection import FileRecord
from fileprobe.logsetup import configure_logging
from fileprobe.operations import BulkResult

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, target: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


def _config_manager(ctx: click.Context) -> ConfigManager:
    return ConfigManager(config_path=ctx.obj.get("config_path"))


def _engine(ctx: click.Context) -> InspectionEngine:
    """Return the engine for this invocation, loading configuration once."""
    engine = ctx.obj.get("engine")
    if engine is not None:
        return engine
    try:
        config = _config_manager(ctx).load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(config.logging, verbose=ctx.obj.get("verbose", False))
    engine = InspectionEngine(config)
    ctx.obj["engine"] = engine
    return engine


def _unwrap(outcome: Outcome[Any], *, json_output: bool) -> Any:
    if outcome.error is not None:
        _handle_cli_error(
            outcome.message,
            code=outcome.error.kind,
            json_output=json_output,
            details={"path": outcome.error.path} if outcome.error.path else None,
            original=outcome.error,
        )
    return outcome.value


def _records_table(records: list[FileRecord]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Signature")
    for record in records:
        name = f"{record.name}/" if record.is_directory else record.name
        kind = "Directory" if record.is_directory else record.file_type.display_name
        table.add_row(name, kind, str(record.size), record.signature)
    return table


def _emit_bulk(result: BulkResult, *, json_output: bool) -> None:
    if json_output:
        payload = result.model_dump(mode="json")
        payload["succeeded"] = result.succeeded
        console.print_json(data=payload)
        return
    for item in result.failed:
        console.print(f"[red]{item.source}: {item.error}[/red]")
    console.print(
        f"[green]{result.operation}: {result.succeeded} of {len(result.items)} succeeded.[/green]"
    )


json_option = click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="fileprobe")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of ~/.fileprobe/config.yaml.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """fileprobe classifies files, inspects Mach-O headers, and hashes app bundles."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@json_option
@click.pass_context
def classify(ctx: click.Context, path: Path, json_output: bool) -> None:
    """Print the detected file type of PATH."""
    file_type = _unwrap(_engine(ctx).classify(path), json_output=json_output)
    if json_output:
        console.print_json(data={"path": str(path), "type": file_type.value})
        return
    console.print(f"{path}: {file_type.display_name}")


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@json_option
@click.pass_context
def inspect(ctx: click.Context, path: Path, json_output: bool) -> None:
    """Show the inventory record for PATH."""
    record = _unwrap(_engine(ctx).inspect(path), json_output=json_output)
    if json_output:
        console.print_json(data=record.model_dump(mode="json"))
        return
    console.print(_records_table([record]))


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "-r",
    "--recursive/--no-recursive",
    default=None,
    help="Descend into subdirectories (defaults to configuration).",
)
@click.option("--max-depth", type=click.IntRange(min=0), help="Limit recursion depth.")
@json_option
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: Path,
    recursive: bool | None,
    max_depth: int | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List the entries of directory PATH with their detected types."""
    engine = _engine(ctx)
    records = _unwrap(
        engine.scan(path, recursive=recursive, max_depth=max_depth), json_output=json_output
    )
    if json_output:
        console.print_json(data=[record.model_dump(mode="json") for record in records])
        return

    quiet = quiet or engine.config.cli.quiet_default
    summary_only = summary_mode or engine.config.cli.summary_default
    if records:
        _emit_message(
            _records_table(records), mode="detail", quiet=quiet, summary_only=summary_only
        )
    directories = sum(1 for record in records if record.is_directory)
    _emit_message(
        _format_summary_line(
            "Scan", path, {"files": len(records) - directories, "directories": directories}
        ),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@json_option
@click.pass_context
def digest(ctx: click.Context, paths: tuple[Path, ...], json_output: bool) -> None:
    """Print MD5, SHA-1, and SHA-256 digests for each of PATHS."""
    outcomes = _engine(ctx).digest_many(list(paths))
    if json_output:
        payload = []
        for path, outcome in zip(paths, outcomes):
            entry: dict[str, Any] = {"path": str(path), **outcome.value.model_dump(mode="json")}
            if not outcome.ok:
                entry["error"] = outcome.message
            payload.append(entry)
        console.print_json(data=payload)
    else:
        for path, outcome in zip(paths, outcomes):
            if not outcome.ok:
                console.print(f"[red]{outcome.message}[/red]")
                continue
            console.print(f"[bold]{path}[/bold]")
            console.print(f"  md5     {outcome.value.md5}")
            console.print(f"  sha1    {outcome.value.sha1}")
            console.print(f"  sha256  {outcome.value.sha256}")
    if any(not outcome.ok for outcome in outcomes):
        raise SystemExit(1)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@json_option
@click.pass_context
def binary(ctx: click.Context, path: Path, json_output: bool) -> None:
    """Describe the Mach-O or universal header of PATH."""
    descriptor = _unwrap(_engine(ctx).analyze_binary(path), json_output=json_output)
    if json_output:
        console.print_json(data=descriptor.model_dump(mode="json"))
        return
    kind = "universal" if descriptor.is_fat else ("64-bit" if descriptor.is_64bit else "32-bit")
    console.print(
        f"{path}: Mach-O {kind}, {descriptor.byte_order}-endian, "
        f"architectures={descriptor.architecture_count} ({descriptor.architectures})"
    )


@cli.command()
@click.argument("first", type=click.Path(path_type=Path))
@click.argument("second", type=click.Path(path_type=Path))
@json_option
@click.pass_context
def compare(ctx: click.Context, first: Path, second: Path, json_output: bool) -> None:
    """Compare FIRST and SECOND byte for byte."""
    result = _unwrap(_engine(ctx).compare(first, second), json_output=json_output)
    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
        return
    if result.identical:
        console.print("[green]Files are identical.[/green]")
    elif not result.size_equal:
        console.print(f"[yellow]Sizes differ by {result.difference} bytes.[/yellow]")
    else:
        console.print(f"[yellow]{result.difference} bytes differ.[/yellow]")


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.argument("expected")
@click.pass_context
def verify(ctx: click.Context, path: Path, expected: str) -> None:
    """Check that the SHA-256 of PATH equals EXPECTED."""
    matches = _unwrap(_engine(ctx).check_integrity(path, expected), json_output=False)
    if not matches:
        raise click.ClickException(f"Integrity check failed for {path}")
    console.print(f"[green]{path}: OK[/green]")


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@json_option
@click.pass_context
def bundle(ctx: click.Context, path: Path, json_output: bool) -> None:
    """Show application bundle metadata for the archive at PATH."""
    metadata = _unwrap(_engine(ctx).analyze_bundle(path), json_output=json_output)
    if json_output:
        console.print_json(data=metadata.model_dump(mode="json"))
        return
    table = Table(show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in metadata.model_dump().items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


@cli.group()
def archive() -> None:
    """Create, extract, and validate ZIP archives."""


@archive.command("create")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("sources", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--compression",
    type=click.Choice(["stored", "deflated", "bzip2", "lzma"]),
    default="deflated",
    show_default=True,
)
@click.pass_context
def archive_create(
    ctx: click.Context, output: Path, sources: tuple[Path, ...], compression: str
) -> None:
    """Write SOURCES into a new archive at OUTPUT."""
    created = _unwrap(
        _engine(ctx).create_archive(list(sources), output, compression=compression),
        json_output=False,
    )
    console.print(f"[green]Created {created}.[/green]")


@archive.command("extract")
@click.argument("path", type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def archive_extract(ctx: click.Context, path: Path, destination: Path) -> None:
    """Extract the archive at PATH into DESTINATION."""
    target = _unwrap(_engine(ctx).extract_archive(path, destination), json_output=False)
    console.print(f"[green]Extracted into {target}.[/green]")


@archive.command("validate")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def archive_validate(ctx: click.Context, path: Path) -> None:
    """Check that PATH is a readable archive with intact members."""
    _unwrap(_engine(ctx).validate_archive(path), json_output=False)
    console.print(f"[green]{path}: valid archive.[/green]")


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@json_option
@click.pass_context
def rm(ctx: click.Context, paths: tuple[Path, ...], json_output: bool) -> None:
    """Delete PATHS, continuing past individual failures."""
    result = _unwrap(_engine(ctx).bulk_delete(paths), json_output=json_output)
    _emit_bulk(result, json_output=json_output)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(file_okay=False, path_type=Path))
@json_option
@click.pass_context
def cp(ctx: click.Context, paths: tuple[Path, ...], destination: Path, json_output: bool) -> None:
    """Copy PATHS into directory DESTINATION."""
    result = _unwrap(_engine(ctx).bulk_copy(paths, destination), json_output=json_output)
    _emit_bulk(result, json_output=json_output)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(file_okay=False, path_type=Path))
@json_option
@click.pass_context
def mv(ctx: click.Context, paths: tuple[Path, ...], destination: Path, json_output: bool) -> None:
    """Move PATHS into directory DESTINATION."""
    result = _unwrap(_engine(ctx).bulk_move(paths, destination), json_output=json_output)
    _emit_bulk(result, json_output=json_output)


@cli.group()
def config() -> None:
    """Manage fileprobe configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = _config_manager(ctx)
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = _config_manager(ctx)
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'digest.chunk_size'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        previous = copy.deepcopy(file_data)
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=FileprobeConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if file_data == previous:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    manager.save(file_data)
    diff = list(
        difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
@click.pass_context
def config_edit(ctx: click.Context) -> None:
    """Open the configuration file in an interactive editor session."""
    manager = _config_manager(ctx)
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=FileprobeConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
